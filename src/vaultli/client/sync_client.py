"""Synchronous Vault client -- mirrors :class:`~vaultli.client.async_client.AsyncVaultClient`.

:class:`VaultClient` wraps :class:`httpx.Client` and offers the same
verbs and generated operations, returning the normalized body directly
instead of a coroutine.  It backs the ``vaultli`` command line.
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


class VaultClient(BaseVaultClient):
    """Blocking client for the Vault HTTP API.

    Example::

        with VaultClient(endpoint="https://vault:8200", token="s.xxxx") as vault:
            vault.write("secret/app", {"password": "hunter2"})
            print(vault.read("secret/app")["data"])
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._client: Optional[httpx.Client] = None
        super().__init__(*args, **kwargs)

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> VaultClient:
        self._get_client()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Generic verbs
    # ------------------------------------------------------------------ #

    def request(
        self,
        path: str,
        method: str,
        payload: Optional[Mapping[str, Any]] = None,
        request_options: Options = None,
    ) -> Any:
        """Send a request for an arbitrary API path.

        See :meth:`AsyncVaultClient.request <vaultli.client.async_client.AsyncVaultClient.request>`.
        """
        request = self._generic_request(method, path, payload, request_options)
        return self._execute(request)

    def read(self, path: str, request_options: Options = None) -> Any:
        """Read the secret or configuration at *path* (``GET``)."""
        return self._execute(self._verb_request("GET", path, None, request_options))

    def write(
        self,
        path: str,
        data: Optional[Mapping[str, Any]] = None,
        request_options: Options = None,
    ) -> Any:
        """Write *data* to *path* (``PUT``)."""
        return self._execute(self._verb_request("PUT", path, data, request_options))

    def list(self, path: str, request_options: Options = None) -> Any:
        """List the keys below *path* (``LIST``)."""
        return self._execute(self._verb_request("LIST", path, None, request_options))

    def delete(self, path: str, request_options: Options = None) -> Any:
        """Delete the secret or configuration at *path* (``DELETE``)."""
        return self._execute(self._verb_request("DELETE", path, None, request_options))

    def help(self, path: str, request_options: Options = None) -> Any:
        """Fetch Vault's built-in help for *path* (``GET ?help=1``)."""
        request = self._verb_request("GET", path, None, request_options, suffix="?help=1")
        return self._execute(request)

    def call(
        self,
        name: str,
        args: Optional[Mapping[str, Any]] = None,
        /,
        *,
        request_options: Options = None,
        **fields: Any,
    ) -> Any:
        """Run the command table operation *name*."""
        function = self._lookup(name)
        return function(args, request_options=request_options, **fields)

    # ------------------------------------------------------------------ #
    # Pipeline
    # ------------------------------------------------------------------ #

    def _run_operation(
        self,
        descriptor: OperationDescriptor,
        payload: dict[str, Any],
        request_options: Options,
    ) -> Any:
        options = self._merge_options(request_options)
        request = prepare_operation(descriptor, payload, self._validator, options)
        return self._execute(request)

    def _execute(self, request: VaultRequest) -> Any:
        kwargs = self._http_kwargs(request)
        client = self._get_client()
        try:
            response = client.request(**kwargs)
        except httpx.TransportError as exc:
            raise TransportError(transport_error_message(exc)) from exc
        return handle_vault_response(to_vault_response(response))

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(**self._client_kwargs())
        return self._client
