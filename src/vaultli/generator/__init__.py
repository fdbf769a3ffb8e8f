"""Operation generation from the command table.

Exports :func:`register_functions`, which installs one client method per
command table entry, together with the building blocks it chains.
"""

from vaultli.generator.functions import (
    encode_query_value,
    extend_query,
    generate_function,
    prepare_operation,
    register_functions,
)

__all__ = [
    "encode_query_value",
    "extend_query",
    "generate_function",
    "prepare_operation",
    "register_functions",
]
