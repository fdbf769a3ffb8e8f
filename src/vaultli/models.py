"""Canonical Pydantic models shared across all vaultli modules.

The models fall into two groups:

**Command table models** -- the static description of the Vault API:
    :class:`HTTPMethod`, :class:`OperationSchema` and
    :class:`OperationDescriptor`.

**Per-call models** -- built for every request and discarded afterwards:
    :class:`RequestOptions`, :class:`VaultRequest`, :class:`VaultResponse`,
    plus the long-lived :class:`ClientConfig` owned by a client instance.

All models use Pydantic v2.  Descriptors are frozen; requests are mutable
so that the query extension step can rewrite the path in place.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ENDPOINT = "http://127.0.0.1:8200"
DEFAULT_API_VERSION = "v1"
TOKEN_HEADER = "X-Vault-Token"


# --- Command table ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods used by the Vault API.

    ``LIST`` is a Vault-specific verb, sent on the wire as-is.
    """

    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    LIST = "LIST"
    DELETE = "DELETE"


class OperationSchema(BaseModel):
    """JSON-Schemas attached to an operation.

    ``req`` validates the whole payload; the properties of ``query`` name
    the payload fields that are sent in the query string.
    """

    model_config = ConfigDict(frozen=True)

    req: Optional[dict[str, Any]] = None
    query: Optional[dict[str, Any]] = None


class OperationDescriptor(BaseModel):
    """One entry of the command table.

    Example::

        OperationDescriptor(
            name="read_policy",
            method="GET",
            path="/sys/policy/{{name}}",
        )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    method: HTTPMethod
    path: str = Field(description="Path template with {{var}} placeholders")
    schema_: Optional[OperationSchema] = Field(default=None, alias="schema")
    description: Optional[str] = None


# --- Per-call models ---


class RequestOptions(BaseModel):
    """Per-call request overrides.

    Client-wide defaults are merged with per-call options shallowly: a
    per-call ``headers`` mapping replaces the default one entirely.
    """

    headers: Optional[dict[str, str]] = None
    timeout: Optional[float] = None

    def merge(self, other: Optional[RequestOptions]) -> RequestOptions:
        """Return a copy of these options overridden by the fields set on *other*."""
        if other is None:
            return self.model_copy()
        return self.model_copy(update=other.model_dump(exclude_unset=True))


class VaultRequest(BaseModel):
    """A request ready for the executor.

    When ``template`` is false the path is sent as given, without
    placeholder rendering.
    """

    path: str
    method: str
    payload: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: Optional[float] = None
    template: bool = True


class VaultResponse(BaseModel):
    """A raw response as handed to the response normalizer."""

    status_code: int
    body: Any = None
    request_path: str = ""


class ClientConfig(BaseModel):
    """Shared configuration owned by one client instance.

    Built by :func:`~vaultli.config.resolve_client_config` from explicit
    values, the environment and the defaults.
    """

    endpoint: str = DEFAULT_ENDPOINT
    api_version: str = DEFAULT_API_VERSION
    token: Optional[str] = None
    verify_ssl: bool = True
    request_options: RequestOptions = Field(default_factory=RequestOptions)
