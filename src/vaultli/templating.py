"""URI building from command table path templates.

Path templates carry ``{{field}}`` placeholders filled from the request
payload.  Path parameters may themselves contain slashes (nested secret
paths such as ``team/app/db``); they must come out of the templater as
literal slashes, so the entity-encoded form ``&#x2F;`` that HTML-escaping
engines produce is decoded after rendering.

The default engine is a sandboxed Jinja2 environment with autoescaping
disabled.  A placeholder without a matching field, or whose field is
``None``, renders as an empty string.  Jinja filters are available in
templates, e.g. ``/auth/{{ mount_point | default('approle') }}/login``;
attribute access to internals (``__class__`` and friends) is refused.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Mapping, Optional

from jinja2 import Template, TemplateError, Undefined
from jinja2.sandbox import SandboxedEnvironment

from vaultli.exceptions import ValidationError

_ENCODED_SLASH = "&#x2F;"

DEFAULT_CACHE_SIZE = 256


class Templater(ABC):
    """Renders a template string against a context mapping."""

    @abstractmethod
    def render(self, template: str, context: Mapping[str, Any]) -> str:
        """Return *template* with its placeholders substituted from *context*."""


def _blank_none(value: Any) -> Any:
    return "" if value is None else value


def make_environment() -> SandboxedEnvironment:
    """Build the sandbox used by :class:`JinjaTemplater`."""
    return SandboxedEnvironment(
        autoescape=False,
        undefined=Undefined,
        finalize=_blank_none,
    )


class JinjaTemplater(Templater):
    """Default :class:`Templater` backed by a private sandboxed Jinja2 environment.

    Compiled templates are kept in a bounded LRU cache of *cache_size*
    entries.

    Raises:
        ValidationError: From :meth:`render`, when the template does not
            parse or touches an unsafe attribute.
    """

    def __init__(
        self,
        environment: Optional[SandboxedEnvironment] = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self._env = environment or make_environment()
        self._compile = lru_cache(maxsize=cache_size)(self._env.from_string)

    def render(self, template: str, context: Mapping[str, Any]) -> str:
        try:
            compiled: Template = self._compile(template)
            return compiled.render(dict(context))
        except TemplateError as exc:
            raise ValidationError(f"Invalid path template {template!r}: {exc}") from exc

    def cache_info(self) -> Any:
        """Hit/miss statistics of the compiled-template cache."""
        return self._compile.cache_info()


def check_template(template: str) -> Optional[str]:
    """Return the syntax error of *template*, or ``None`` if it parses."""
    try:
        make_environment().parse(template)
    except TemplateError as exc:
        return str(exc)
    return None


def build_uri(
    endpoint: str,
    api_version: str,
    path_template: str,
    payload: Optional[Mapping[str, Any]] = None,
    templater: Optional[Templater] = None,
) -> str:
    """Build the full request URI for a path template.

    The URI is ``endpoint + "/" + api_version + path``, where only
    *path_template* is rendered against *payload*.  No percent-encoding is
    applied; query strings are appended beforehand by the query extension
    step.

    Args:
        endpoint: Vault address, e.g. ``https://vault:8200``.
        api_version: API version segment, e.g. ``v1``.
        path_template: Path starting with ``/``, possibly with placeholders.
        payload: Values for the placeholders.
        templater: Engine to render with (default :class:`JinjaTemplater`).

    Returns:
        The rendered URI.

    Example::

        >>> build_uri("http://127.0.0.1:8200", "v1", "/secret/{{name}}", {"name": "a/b/c"})
        'http://127.0.0.1:8200/v1/secret/a/b/c'
    """
    engine = templater or JinjaTemplater()
    path = engine.render(path_template, payload or {}).replace(_ENCODED_SLASH, "/")
    return f"{endpoint}/{api_version}{path}"
