"""Exception hierarchy for vaultli.

All exceptions inherit from :class:`VaultliError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`vaultli.exit_codes`.
Library callers catch the specific subclasses; the command line entry point
in :func:`vaultli.app.main` catches ``VaultliError`` and exits with the
appropriate code.

Subclass hierarchy::

    VaultliError (exit 1)
    +-- ValidationError     (exit 2)
    +-- OperationError      (exit 5)
    +-- TransportError      (exit 6)
    +-- CommandTableError   (exit 7)
    +-- ConfigError         (exit 1)
"""

from __future__ import annotations

from typing import Any, Optional

from vaultli.exit_codes import (
    EXIT_COMMAND_TABLE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_OPERATION_FAILURE,
)


class VaultliError(Exception):
    """Base exception for all vaultli errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(VaultliError):
    """Raised when a payload fails its declared JSON-Schema.

    The request never reaches the network.  ``data_path`` is the JSON
    pointer of the first violation (``""`` for the document root).
    """

    exit_code = EXIT_INVALID_USAGE

    def __init__(self, message: str, data_path: str = "", schema_path: str = ""):
        super().__init__(message)
        self.data_path = data_path
        self.schema_path = schema_path

    def __str__(self) -> str:
        if self.data_path:
            return f"{self.data_path}: {self.message}"
        return self.message


class OperationError(VaultliError):
    """Raised when Vault answers a completed call with an error status.

    The message is the first entry of the response's ``errors`` envelope
    when present, else ``"Status <code>"``.
    """

    exit_code = EXIT_OPERATION_FAILURE

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        request_path: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.request_path = request_path


class TransportError(VaultliError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class CommandTableError(VaultliError):
    """Raised when a command table cannot be loaded or holds an invalid entry."""

    exit_code = EXIT_COMMAND_TABLE_ERROR


class ConfigError(VaultliError):
    """Raised for configuration problems (bad endpoint, malformed options)."""

    exit_code = EXIT_GENERIC_FAILURE
