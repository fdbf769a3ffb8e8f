"""Response normalization -- maps raw Vault responses to a body or an error.

After an HTTP call completes, :func:`to_vault_response` converts the
:class:`httpx.Response` into a :class:`~vaultli.models.VaultResponse` and
:func:`handle_vault_response` decides whether the call succeeded:

* ``200`` and ``204`` resolve with the parsed body.
* Paths under ``sys/health`` resolve with the body for *any* status, since
  the health endpoint reports sealed, standby or uninitialised nodes
  through non-200 codes that callers interpret themselves.
* Everything else raises :class:`~vaultli.exceptions.OperationError`
  carrying the first entry of Vault's ``errors`` envelope.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx

from vaultli.exceptions import OperationError
from vaultli.models import VaultResponse

logger = logging.getLogger(__name__)

SUCCESS_CODES = frozenset({200, 204})
HEALTH_PATH_PATTERN = re.compile(r"sys/health")


def handle_vault_response(response: Optional[VaultResponse]) -> Any:
    """Return the body of a successful response or raise for a failed one.

    Args:
        response: The raw response, or ``None`` if none was received.

    Returns:
        The parsed response body (``None`` for empty bodies).

    Raises:
        OperationError: If no response was passed, or the status code
            signals failure on a non-health path.
    """
    if response is None:
        raise OperationError("No response passed")

    logger.debug("%s %s", response.status_code, response.request_path)

    if response.status_code in SUCCESS_CODES:
        return response.body

    if HEALTH_PATH_PATTERN.search(response.request_path):
        return response.body

    raise OperationError(
        _error_message(response),
        status_code=response.status_code,
        body=response.body,
        request_path=response.request_path,
    )


def _error_message(response: VaultResponse) -> str:
    body = response.body
    if isinstance(body, dict):
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            return str(errors[0])
    return f"Status {response.status_code}"


def to_vault_response(response: httpx.Response) -> VaultResponse:
    """Convert an :class:`httpx.Response` into a :class:`VaultResponse`.

    ``request_path`` is the path plus query string actually sent.
    """
    return VaultResponse(
        status_code=response.status_code,
        body=extract_response_data(response),
        request_path=response.request.url.raw_path.decode("ascii"),
    )


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first.  If that fails (e.g. a proxy
    answered with HTML), returns the raw text.  Returns ``None`` for
    responses with no content.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        return response.text
