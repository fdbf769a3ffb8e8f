"""Load and check command tables.

A command table maps operation names to
:class:`~vaultli.models.OperationDescriptor` entries.  Tables are plain
configuration data: the packaged default lives next to this module as
``commands.yaml``; callers may supply their own as a mapping or as a path
to a YAML or JSON file.

Every name must be a valid, non-keyword Python identifier that does not
shadow a client attribute, because each entry becomes a bound method on
the client.
"""

from __future__ import annotations

import keyword
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, Union

import yaml
from pydantic import ValidationError as PydanticValidationError

from vaultli.exceptions import CommandTableError
from vaultli.models import OperationDescriptor
from vaultli.templating import check_template

DEFAULT_TABLE = "commands.yaml"

RESERVED_NAMES = frozenset(
    {
        "read",
        "write",
        "list",
        "delete",
        "help",
        "request",
        "call",
        "operations",
        "endpoint",
        "api_version",
        "token",
        "config",
        "close",
        "aclose",
    }
)
"""Client attribute names a command table entry may not use."""

TableSource = Union[str, Path, Mapping[str, Any], None]


def load_command_table(source: TableSource = None) -> dict[str, OperationDescriptor]:
    """Load a command table from a mapping, a file, or the packaged default.

    Args:
        source: ``None`` for the packaged table, a path to a YAML/JSON
            file, or a mapping of name to descriptor (either
            :class:`~vaultli.models.OperationDescriptor` instances or
            plain dicts with ``method``, ``path`` and optional ``schema``).

    Returns:
        An insertion-ordered dict of name to descriptor.

    Raises:
        CommandTableError: If the source cannot be read or an entry is invalid.
    """
    if source is None:
        raw = _load_default()
    elif isinstance(source, (str, Path)):
        raw = _load_from_file(Path(source))
    else:
        raw = source

    if not isinstance(raw, Mapping):
        raise CommandTableError("Command table must be a mapping of operation names")

    table: dict[str, OperationDescriptor] = {}
    for name, entry in raw.items():
        check_operation_name(name)
        table[name] = _to_descriptor(name, entry)
    return table


def check_operation_name(name: Any) -> None:
    """Reject names that cannot become client methods.

    Raises:
        CommandTableError: If *name* is not an identifier, is a keyword,
            is private, or is reserved.
    """
    if not isinstance(name, str) or not name.isidentifier():
        raise CommandTableError(f"Operation name {name!r} is not a valid identifier")
    if keyword.iskeyword(name):
        raise CommandTableError(f"Operation name {name!r} is a Python keyword")
    if name.startswith("_"):
        raise CommandTableError(f"Operation name {name!r} must not start with '_'")
    if name in RESERVED_NAMES:
        raise CommandTableError(f"Operation name {name!r} collides with a client method")


def _to_descriptor(name: str, entry: Any) -> OperationDescriptor:
    descriptor = _build_descriptor(name, entry)
    problem = check_template(descriptor.path)
    if problem:
        raise CommandTableError(f"Invalid path template for {name!r}: {problem}")
    return descriptor


def _build_descriptor(name: str, entry: Any) -> OperationDescriptor:
    if isinstance(entry, OperationDescriptor):
        if entry.name != name:
            return entry.model_copy(update={"name": name})
        return entry
    if not isinstance(entry, Mapping):
        raise CommandTableError(f"Operation {name!r} must be a mapping, got {type(entry).__name__}")
    try:
        return OperationDescriptor.model_validate({**entry, "name": name})
    except PydanticValidationError as exc:
        raise CommandTableError(f"Invalid operation {name!r}: {exc}") from exc


def _load_default() -> Any:
    text = resources.files("vaultli.table").joinpath(DEFAULT_TABLE).read_text(encoding="utf-8")
    return _parse_content(text, hint=DEFAULT_TABLE)


def _load_from_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CommandTableError(f"Cannot read command table {path}: {exc}") from exc
    return _parse_content(text, hint=str(path))


def _parse_content(content: str, hint: str) -> Any:
    """Parse YAML (a superset of JSON) into Python data."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise CommandTableError(f"Failed to parse command table {hint}: {exc}") from exc
    if data is None:
        raise CommandTableError(f"Command table {hint} is empty")
    return data
