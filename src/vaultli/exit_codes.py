"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~vaultli.exceptions.VaultliError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ vaultli read secret/missing
    $ echo $?
    5   # EXIT_OPERATION_FAILURE -- Vault answered with an error status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""A payload or invocation failed schema validation."""

EXIT_OPERATION_FAILURE = 5
"""Vault completed the call but answered with an error status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_COMMAND_TABLE_ERROR = 7
"""The command table could not be loaded or contains invalid entries."""
