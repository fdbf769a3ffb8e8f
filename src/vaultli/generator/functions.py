"""Bind command table entries to client methods.

This is the core of vaultli.  Each
:class:`~vaultli.models.OperationDescriptor` becomes a method on the client
that chains:

1. **Validation** -- the payload is checked against ``schema.req`` and then
   ``schema.query``; the first failure aborts before any network work.
   Operations without a schema skip this step entirely.
2. **Query extension** -- payload fields named by the query schema are
   appended to the path as a query string.
3. **Execution and normalization** -- delegated to the client's
   ``_execute`` method, which renders the URI, sends the request and
   normalizes the response.

The generated methods mirror the client flavour: on
:class:`~vaultli.client.AsyncVaultClient` they are coroutine functions,
on :class:`~vaultli.client.VaultClient` plain functions.
"""

from __future__ import annotations

import inspect
import json
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional
from urllib.parse import quote

from vaultli.models import OperationDescriptor, RequestOptions, VaultRequest
from vaultli.validation import Validator

if TYPE_CHECKING:
    from vaultli.client.base import BaseVaultClient

# Characters encodeURIComponent leaves untouched besides alphanumerics.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def encode_query_value(value: Any) -> str:
    """Percent-encode a payload value for the query string.

    Booleans render as ``true``/``false`` and ``None`` as ``null``, the
    way Vault's query parser expects; containers render as compact JSON.
    """
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif value is None:
        text = "null"
    elif isinstance(value, (dict, list, tuple)):
        text = json.dumps(value, separators=(",", ":"))
    else:
        text = str(value)
    return quote(text, safe=_URI_COMPONENT_SAFE)


def extend_query(descriptor: OperationDescriptor, request: VaultRequest) -> VaultRequest:
    """Append the query-schema fields present in the payload to the path.

    Fields are emitted in the schema's declared property order.  A request
    whose operation declares no query schema is returned unchanged.

    Example::

        descriptor.schema_.query == {"properties": {"list": {}}}
        extend_query(descriptor, VaultRequest(path="/x", method="GET", payload={"list": True}))
        # path -> "/x?list=true"
    """
    schema = descriptor.schema_.query if descriptor.schema_ else None
    if not schema:
        return request

    params = [
        f"{key}={encode_query_value(request.payload[key])}"
        for key in schema.get("properties", {})
        if key in request.payload
    ]
    if params:
        separator = "&" if "?" in request.path else "?"
        request.path = f"{request.path}{separator}{'&'.join(params)}"
    return request


def prepare_operation(
    descriptor: OperationDescriptor,
    payload: Mapping[str, Any],
    validator: Validator,
    options: Optional[RequestOptions] = None,
) -> VaultRequest:
    """Build the validated, query-extended request for one operation call.

    Raises:
        ValidationError: If the payload violates the request or query schema.
    """
    options = options or RequestOptions()
    request = VaultRequest(
        path=descriptor.path,
        method=descriptor.method.value,
        payload=dict(payload),
        headers=dict(options.headers or {}),
        timeout=options.timeout,
    )

    if descriptor.schema_ is None:
        return request

    validator.validate(request.payload, descriptor.schema_.req)
    validator.validate(request.payload, descriptor.schema_.query)
    return extend_query(descriptor, request)


def generate_function(
    client: BaseVaultClient,
    name: str,
    descriptor: OperationDescriptor,
) -> Callable[..., Any]:
    """Create the bound method for one command table entry.

    The returned callable accepts an optional arguments mapping, keyword
    fields merged over it, and per-call ``request_options``::

        client.add_policy({"name": "ops"}, rules="path \\"*\\" {}")
        client.add_policy(name="ops", rules="...", request_options={"timeout": 5})
    """

    def _payload(args: Optional[Mapping[str, Any]], fields: dict[str, Any]) -> dict[str, Any]:
        payload = dict(args or {})
        payload.update(fields)
        return payload

    if inspect.iscoroutinefunction(client._run_operation):

        async def operation(
            args: Optional[Mapping[str, Any]] = None,
            /,
            *,
            request_options: RequestOptions | dict[str, Any] | None = None,
            **fields: Any,
        ) -> Any:
            return await client._run_operation(
                descriptor, _payload(args, fields), request_options
            )

    else:

        def operation(  # type: ignore[misc]
            args: Optional[Mapping[str, Any]] = None,
            /,
            *,
            request_options: RequestOptions | dict[str, Any] | None = None,
            **fields: Any,
        ) -> Any:
            return client._run_operation(descriptor, _payload(args, fields), request_options)

    operation.__name__ = name
    operation.__qualname__ = f"{type(client).__name__}.{name}"
    summary = descriptor.description or name.replace("_", " ").capitalize()
    operation.__doc__ = f"{summary}\n\n{descriptor.method.value} {descriptor.path}"
    return operation


def register_functions(
    client: BaseVaultClient,
    table: Mapping[str, OperationDescriptor],
) -> dict[str, Callable[..., Any]]:
    """Install one generated method per table entry on *client*.

    Returns:
        The mapping of operation name to installed callable.
    """
    functions: dict[str, Callable[..., Any]] = {}
    for name, descriptor in table.items():
        function = generate_function(client, name, descriptor)
        setattr(client, name, function)
        functions[name] = function
    return functions
