"""Payload validation against the JSON-Schemas of the command table.

:class:`Validator` is the injectable interface; :class:`JsonSchemaValidator`
is the default implementation built on :mod:`jsonschema` (Draft 4, the
dialect the command table is written in).  Validation is pure: it never
touches the network and never mutates the payload.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import jsonschema
from jsonschema import Draft4Validator, FormatChecker

from vaultli.exceptions import CommandTableError, ValidationError

logger = logging.getLogger(__name__)

REQUEST_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "path": {"type": "string", "minLength": 1},
        "method": {"type": "string", "minLength": 1},
    },
    "required": ["path", "method"],
}
"""Schema every low-level :meth:`request` invocation is checked against."""


class Validator(ABC):
    """Checks a payload against an optional schema."""

    @abstractmethod
    def validate(self, payload: Any, schema: Optional[dict[str, Any]] = None) -> None:
        """Validate *payload* against *schema*.

        Args:
            payload: The candidate request payload.
            schema: A JSON-Schema, or ``None`` to skip validation.

        Raises:
            ValidationError: On the first violation found.
        """


class JsonSchemaValidator(Validator):
    """Default :class:`Validator` backed by :class:`jsonschema.Draft4Validator`.

    Example::

        validator = JsonSchemaValidator()
        validator.validate({"rules": 1}, {"properties": {"rules": {"type": "string"}}})
        # ValidationError: /rules: 1 is not of type 'string'
    """

    def __init__(self, format_checker: Optional[FormatChecker] = None) -> None:
        self._format_checker = format_checker or FormatChecker()

    def validate(self, payload: Any, schema: Optional[dict[str, Any]] = None) -> None:
        if schema is None:
            return

        try:
            Draft4Validator.check_schema(schema)
            validator = Draft4Validator(schema, format_checker=self._format_checker)
            error = next(iter(validator.iter_errors(payload)), None)
        except jsonschema.SchemaError as exc:
            raise CommandTableError(f"Invalid schema: {exc.message}") from exc

        if error is None:
            return

        data_path = _to_pointer(error.absolute_path)
        logger.debug("validation failed at %r: %s", data_path, error.message)
        raise ValidationError(
            error.message,
            data_path=data_path,
            schema_path=_to_pointer(error.absolute_schema_path),
        )


def _to_pointer(parts: Any) -> str:
    """Render a jsonschema path deque as a JSON pointer (``/a/0/b``)."""
    return "".join(f"/{part}" for part in parts)
