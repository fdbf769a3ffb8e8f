"""Asynchronous Vault client -- the primary vaultli facade.

:class:`AsyncVaultClient` wraps :class:`httpx.AsyncClient`.  Every
operation is a coroutine: callers ``await`` it for the normalized response
body, or gather several to run them concurrently.  Nothing is retried;
each failure is raised once to the caller:

- :class:`~vaultli.exceptions.ValidationError` before any network work,
- :class:`~vaultli.exceptions.TransportError` for network failures,
- :class:`~vaultli.exceptions.OperationError` for error statuses.

See Also:
    :class:`~vaultli.client.sync_client.VaultClient` for the blocking
    equivalent.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

import httpx

from vaultli.client.base import BaseVaultClient, transport_error_message
from vaultli.client.response import handle_vault_response, to_vault_response
from vaultli.exceptions import TransportError
from vaultli.generator.functions import prepare_operation
from vaultli.models import OperationDescriptor, RequestOptions, VaultRequest

Options = Optional[Union[RequestOptions, dict[str, Any]]]


class AsyncVaultClient(BaseVaultClient):
    """Asynchronous client for the Vault HTTP API.

    Besides the generic verbs below, one coroutine method is installed per
    command table entry (``status``, ``add_policy``, ``approle_login`` ...).
    Use as an async context manager, or call :meth:`aclose` when done; the
    underlying HTTP client is created on first use.

    Example::

        async with AsyncVaultClient(token="s.xxxx") as vault:
            await vault.write("secret/app", {"password": "hunter2"})
            secret = await vault.read("secret/app")
            policy = await vault.get_policy(name="default")
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._client: Optional[httpx.AsyncClient] = None
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> AsyncVaultClient:
        self._get_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Generic verbs
    # ------------------------------------------------------------------ #

    async def request(
        self,
        path: str,
        method: str,
        payload: Optional[Mapping[str, Any]] = None,
        request_options: Options = None,
    ) -> Any:
        """Send a request for an arbitrary API path.

        Args:
            path: Path below the API version, starting with ``/``; may hold
                ``{{field}}`` placeholders filled from *payload*.
            method: HTTP method, including Vault's ``LIST``.
            payload: JSON body fields and template values.
            request_options: Per-call overrides (headers, timeout).

        Returns:
            The parsed response body.
        """
        request = self._generic_request(method, path, payload, request_options)
        return await self._execute(request)

    async def read(self, path: str, request_options: Options = None) -> Any:
        """Read the secret or configuration at *path* (``GET``)."""
        request = self._verb_request("GET", path, None, request_options)
        return await self._execute(request)

    async def write(
        self,
        path: str,
        data: Optional[Mapping[str, Any]] = None,
        request_options: Options = None,
    ) -> Any:
        """Write *data* to *path* (``PUT``)."""
        request = self._verb_request("PUT", path, data, request_options)
        return await self._execute(request)

    async def list(self, path: str, request_options: Options = None) -> Any:
        """List the keys below *path* (``LIST``)."""
        request = self._verb_request("LIST", path, None, request_options)
        return await self._execute(request)

    async def delete(self, path: str, request_options: Options = None) -> Any:
        """Delete the secret or configuration at *path* (``DELETE``)."""
        request = self._verb_request("DELETE", path, None, request_options)
        return await self._execute(request)

    async def help(self, path: str, request_options: Options = None) -> Any:
        """Fetch Vault's built-in help for *path* (``GET ?help=1``)."""
        request = self._verb_request("GET", path, None, request_options, suffix="?help=1")
        return await self._execute(request)

    async def call(
        self,
        name: str,
        args: Optional[Mapping[str, Any]] = None,
        /,
        *,
        request_options: Options = None,
        **fields: Any,
    ) -> Any:
        """Run the command table operation *name*.

        Raises:
            CommandTableError: If no such operation is installed.
        """
        function = self._lookup(name)
        return await function(args, request_options=request_options, **fields)

    # ------------------------------------------------------------------ #
    # Pipeline
    # ------------------------------------------------------------------ #

    async def _run_operation(
        self,
        descriptor: OperationDescriptor,
        payload: dict[str, Any],
        request_options: Options,
    ) -> Any:
        options = self._merge_options(request_options)
        request = prepare_operation(descriptor, payload, self._validator, options)
        return await self._execute(request)

    async def _execute(self, request: VaultRequest) -> Any:
        kwargs = self._http_kwargs(request)
        client = self._get_client()
        try:
            response = await client.request(**kwargs)
        except httpx.TransportError as exc:
            raise TransportError(transport_error_message(exc)) from exc
        return handle_vault_response(to_vault_response(response))

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs())
        return self._client
