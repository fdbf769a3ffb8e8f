"""Command table loading.

Exports :func:`load_command_table`, which reads the packaged
``commands.yaml`` (or a caller-supplied table) into
:class:`~vaultli.models.OperationDescriptor` entries keyed by name.
"""

from vaultli.table.loader import RESERVED_NAMES, check_operation_name, load_command_table

__all__ = ["RESERVED_NAMES", "check_operation_name", "load_command_table"]
