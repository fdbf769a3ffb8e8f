"""Shared test fixtures for vaultli.

Provides an isolated environment (no ``VAULT_*`` variables leak in from
the developer's shell), a small command table, and a recording
:class:`httpx.MockTransport` that captures every request the clients send.
"""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from vaultli.output import reset_output


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear Vault environment variables and reset the global output after each test."""
    for var in ["VAULT_ADDR", "VAULT_TOKEN", "VAULT_SKIP_VERIFY"]:
        monkeypatch.delenv(var, raising=False)
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Command table
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_table() -> dict[str, Any]:
    """A small raw command table covering every descriptor shape."""
    return {
        "read_secret": {
            "method": "GET",
            "path": "/secret/{{name}}",
        },
        "add_policy": {
            "method": "PUT",
            "path": "/sys/policy/{{name}}",
            "schema": {
                "req": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "rules": {"type": "string"},
                    },
                    "required": ["name", "rules"],
                },
            },
        },
        "health": {
            "method": "GET",
            "path": "/sys/health",
            "schema": {
                "query": {
                    "type": "object",
                    "properties": {
                        "standbyok": {"type": "boolean"},
                        "activecode": {"type": "integer"},
                    },
                },
            },
        },
        "list_keys": {
            "method": "GET",
            "path": "/secret/{{name}}",
            "schema": {"query": {"properties": {"list": {}}}},
        },
        "approle_login": {
            "method": "POST",
            "path": "/auth/{{ mount_point | default('approle') }}/login",
            "schema": {
                "req": {
                    "type": "object",
                    "properties": {"role_id": {"type": "string"}},
                    "required": ["role_id"],
                },
            },
        },
    }


# ---------------------------------------------------------------------------
# Recording transport
# ---------------------------------------------------------------------------


class Recorder:
    """Collects requests sent through :attr:`transport` and answers them.

    By default every request is answered with ``200 {}``; tests replace
    :attr:`responder` to shape the response.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = (
            lambda request: httpx.Response(200, json={})
        )
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def respond(self, status_code: int, body: Any = None) -> None:
        """Answer every following request with *status_code* and JSON *body*."""
        if body is None:
            self.responder = lambda request: httpx.Response(status_code)
        else:
            self.responder = lambda request: httpx.Response(status_code, json=body)

    @property
    def last(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
