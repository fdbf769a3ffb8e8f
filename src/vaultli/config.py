"""Client configuration with environment precedence resolution.

:func:`resolve_client_config` merges, from highest to lowest precedence:

1. Explicit keyword arguments (constructor arguments or CLI flags).
2. Environment variables: ``VAULT_ADDR``, ``VAULT_TOKEN`` and
   ``VAULT_SKIP_VERIFY``.
3. Built-in defaults (``http://127.0.0.1:8200``, API version ``v1``).
"""

from __future__ import annotations

import os
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from vaultli.exceptions import ConfigError
from vaultli.models import (
    DEFAULT_API_VERSION,
    DEFAULT_ENDPOINT,
    ClientConfig,
    RequestOptions,
)

ENV_ADDR = "VAULT_ADDR"
ENV_TOKEN = "VAULT_TOKEN"
ENV_SKIP_VERIFY = "VAULT_SKIP_VERIFY"

_FALSY_VALUES = {"", "0", "false", "no", "off"}


def skip_verify_from_env() -> bool:
    """Return True when ``VAULT_SKIP_VERIFY`` is set to a truthy value."""
    value = os.environ.get(ENV_SKIP_VERIFY)
    if value is None:
        return False
    return value.strip().lower() not in _FALSY_VALUES


def resolve_client_config(
    endpoint: Optional[str] = None,
    token: Optional[str] = None,
    api_version: Optional[str] = None,
    verify_ssl: Optional[bool] = None,
    request_options: RequestOptions | dict[str, Any] | None = None,
) -> ClientConfig:
    """Resolve the effective client configuration.

    Args:
        endpoint: Vault address. Falls back to ``$VAULT_ADDR``, then
            ``http://127.0.0.1:8200``.
        token: Client token. Falls back to ``$VAULT_TOKEN``.
        api_version: API version path segment (default ``v1``).
        verify_ssl: Verify TLS certificates. Defaults to ``True`` unless
            ``$VAULT_SKIP_VERIFY`` is truthy.
        request_options: Defaults merged into every request.

    Returns:
        The resolved :class:`~vaultli.models.ClientConfig`.

    Raises:
        ConfigError: If ``request_options`` is malformed.
    """
    resolved_endpoint = endpoint or os.environ.get(ENV_ADDR) or DEFAULT_ENDPOINT
    resolved_token = token or os.environ.get(ENV_TOKEN) or None

    if verify_ssl is None:
        verify_ssl = not skip_verify_from_env()

    try:
        options = (
            request_options
            if isinstance(request_options, RequestOptions)
            else RequestOptions.model_validate(request_options or {})
        )
    except PydanticValidationError as exc:
        raise ConfigError(f"Invalid request options: {exc}") from exc

    return ClientConfig(
        endpoint=resolved_endpoint.rstrip("/"),
        api_version=api_version or DEFAULT_API_VERSION,
        token=resolved_token,
        verify_ssl=verify_ssl,
        request_options=options,
    )
