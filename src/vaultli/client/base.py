"""State and request assembly shared by the async and sync clients.

:class:`BaseVaultClient` owns everything that does not depend on how the
HTTP call is awaited: the client configuration, the injected validator,
templater and transport, the command table, and the translation of a
:class:`~vaultli.models.VaultRequest` into :mod:`httpx` request arguments.

Subclasses provide the I/O: :class:`~vaultli.client.AsyncVaultClient` and
:class:`~vaultli.client.VaultClient`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from vaultli.config import resolve_client_config
from vaultli.exceptions import CommandTableError, ConfigError
from vaultli.generator.functions import register_functions
from vaultli.models import (
    TOKEN_HEADER,
    ClientConfig,
    OperationDescriptor,
    RequestOptions,
    VaultRequest,
)
from vaultli.table.loader import TableSource, load_command_table
from vaultli.templating import JinjaTemplater, Templater, build_uri
from vaultli.validation import REQUEST_SCHEMA, JsonSchemaValidator, Validator

logger = logging.getLogger(__name__)

_BODY_METHODS = frozenset({"PUT", "POST", "DELETE"})


class BaseVaultClient:
    """Configuration, dependencies and request assembly for a Vault client.

    Args:
        config: A fully resolved configuration. When omitted, one is
            resolved from the keyword arguments and the environment.
        endpoint: Vault address (default ``$VAULT_ADDR`` or
            ``http://127.0.0.1:8200``).
        token: Client token (default ``$VAULT_TOKEN``).
        api_version: API version segment (default ``v1``).
        verify_ssl: Verify TLS certificates (default on unless
            ``$VAULT_SKIP_VERIFY`` is truthy).
        request_options: Defaults merged into every call.
        validator: Payload validator (default :class:`JsonSchemaValidator`).
        templater: Path template engine (default :class:`JinjaTemplater`).
        transport: :mod:`httpx` transport for the underlying HTTP client,
            e.g. :class:`httpx.MockTransport` in tests.
        commands: Command table source, see
            :func:`~vaultli.table.load_command_table`.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        endpoint: Optional[str] = None,
        token: Optional[str] = None,
        api_version: Optional[str] = None,
        verify_ssl: Optional[bool] = None,
        request_options: RequestOptions | dict[str, Any] | None = None,
        validator: Optional[Validator] = None,
        templater: Optional[Templater] = None,
        transport: Any = None,
        commands: TableSource = None,
    ) -> None:
        if config is None:
            config = resolve_client_config(
                endpoint=endpoint,
                token=token,
                api_version=api_version,
                verify_ssl=verify_ssl,
                request_options=request_options,
            )
        else:
            config = config.model_copy(deep=True)
            if endpoint is not None:
                config.endpoint = endpoint.rstrip("/")
            if token is not None:
                config.token = token
            if api_version is not None:
                config.api_version = api_version
            if verify_ssl is not None:
                config.verify_ssl = verify_ssl
            if request_options is not None:
                config.request_options = _coerce_options(request_options)

        self.config = config
        self._validator = validator or JsonSchemaValidator()
        self._templater = templater or JinjaTemplater()
        self._transport = transport
        self._table = load_command_table(commands)
        self._functions = register_functions(self, self._table)

    # ------------------------------------------------------------------ #
    # Shared configuration, read at call time
    # ------------------------------------------------------------------ #

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @endpoint.setter
    def endpoint(self, value: str) -> None:
        self.config.endpoint = value

    @property
    def api_version(self) -> str:
        return self.config.api_version

    @api_version.setter
    def api_version(self, value: str) -> None:
        self.config.api_version = value

    @property
    def token(self) -> Optional[str]:
        return self.config.token

    @token.setter
    def token(self, value: Optional[str]) -> None:
        self.config.token = value

    @property
    def operations(self) -> dict[str, OperationDescriptor]:
        """The command table entries installed on this client, by name."""
        return dict(self._table)

    # ------------------------------------------------------------------ #
    # Helpers for subclasses
    # ------------------------------------------------------------------ #

    def _lookup(self, name: str) -> Callable[..., Any]:
        try:
            return self._functions[name]
        except KeyError:
            raise CommandTableError(f"Unknown operation: {name}") from None

    def _merge_options(
        self, request_options: RequestOptions | dict[str, Any] | None
    ) -> RequestOptions:
        if request_options is None:
            return self.config.request_options.merge(None)
        return self.config.request_options.merge(_coerce_options(request_options))

    def _generic_request(
        self,
        method: str,
        path: str,
        data: Optional[Mapping[str, Any]] = None,
        request_options: RequestOptions | dict[str, Any] | None = None,
        *,
        prefix: str = "",
        suffix: str = "",
        template: bool = True,
    ) -> VaultRequest:
        """Build and check the request for :meth:`request` and the generic verbs.

        *path* is validated as given, then wrapped as ``prefix + path + suffix``.
        With ``template=False`` the path is sent literally.

        Raises:
            ValidationError: If *path* or *method* is missing or not a string.
        """
        self._validator.validate({"path": path, "method": method}, REQUEST_SCHEMA)
        options = self._merge_options(request_options)
        return VaultRequest(
            path=f"{prefix}{path}{suffix}",
            method=method.upper(),
            payload=dict(data or {}),
            headers=dict(options.headers or {}),
            timeout=options.timeout,
            template=template,
        )

    def _verb_request(
        self,
        method: str,
        path: str,
        data: Optional[Mapping[str, Any]] = None,
        request_options: RequestOptions | dict[str, Any] | None = None,
        suffix: str = "",
    ) -> VaultRequest:
        """Request for a generic verb: ``"/" + path`` sent literally."""
        return self._generic_request(
            method, path, data, request_options, prefix="/", suffix=suffix, template=False
        )

    def _inject_token(self, headers: dict[str, str]) -> dict[str, str]:
        """Attach the token header unless absent or already set by the caller."""
        token = self.token
        if not token:
            return headers
        if any(key.lower() == TOKEN_HEADER.lower() for key in headers):
            return headers
        return {**headers, TOKEN_HEADER: token}

    def _http_kwargs(self, request: VaultRequest) -> dict[str, Any]:
        """Translate *request* into keyword arguments for ``httpx`` ``request()``."""
        if request.template:
            uri = build_uri(
                self.endpoint,
                self.api_version,
                request.path,
                request.payload,
                self._templater,
            )
        else:
            uri = f"{self.endpoint}/{self.api_version}{request.path}"
        headers = {"Accept": "application/json"}
        headers.update(self._inject_token(request.headers))

        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": uri,
            "headers": headers,
        }
        if request.method in _BODY_METHODS and request.payload:
            kwargs["json"] = request.payload
        if request.timeout is not None:
            kwargs["timeout"] = request.timeout

        logger.debug("%s %s", request.method, uri)
        return kwargs

    def _client_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"verify": self.config.verify_ssl}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return kwargs


def _coerce_options(options: RequestOptions | dict[str, Any]) -> RequestOptions:
    if isinstance(options, RequestOptions):
        return options
    try:
        return RequestOptions.model_validate(options)
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid request options: {exc}") from exc


def transport_error_message(exc: httpx.TransportError) -> str:
    """Describe a network failure by exception type and message."""
    return f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
