"""Tests for the synchronous Vault client."""

from __future__ import annotations

import inspect
import json
from typing import Any

import httpx
import pytest

from vaultli.client import VaultClient
from vaultli.exceptions import (
    CommandTableError,
    ConfigError,
    OperationError,
    TransportError,
    ValidationError,
)
from vaultli.models import ClientConfig
from vaultli.templating import JinjaTemplater


def _client(recorder, **kwargs: Any) -> VaultClient:
    kwargs.setdefault("endpoint", "http://vault:8200")
    return VaultClient(transport=recorder.transport, **kwargs)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_defaults(self) -> None:
        client = VaultClient()
        assert client.endpoint == "http://127.0.0.1:8200"
        assert client.api_version == "v1"
        assert client.token is None
        assert client._client_kwargs() == {"verify": True}

    def test_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("VAULT_ADDR", "https://vault.example.com:8200/")
        monkeypatch.setenv("VAULT_TOKEN", "s.env")
        monkeypatch.setenv("VAULT_SKIP_VERIFY", "1")

        client = VaultClient()

        assert client.endpoint == "https://vault.example.com:8200"
        assert client.token == "s.env"
        assert client._client_kwargs()["verify"] is False

    def test_config_with_overrides_is_copied(self) -> None:
        config = ClientConfig(endpoint="http://a:8200", token="s.a")
        client = VaultClient(config, token="s.b")

        assert client.endpoint == "http://a:8200"
        assert client.token == "s.b"
        assert config.token == "s.a"

    def test_bad_request_options(self) -> None:
        with pytest.raises(ConfigError):
            VaultClient(request_options={"timeout": "soon"})

    def test_table_collision_is_rejected(self) -> None:
        with pytest.raises(CommandTableError):
            VaultClient(commands={"read": {"method": "GET", "path": "/x"}})

    def test_generated_operations_are_plain_functions(self, recorder) -> None:
        client = _client(recorder)
        assert callable(client.status)
        assert not inspect.iscoroutinefunction(client.status)
        assert client.status.__name__ == "status"


# ---------------------------------------------------------------------------
# Context manager
# ---------------------------------------------------------------------------


class TestContextManager:
    def test_enter_creates_client(self, recorder) -> None:
        with _client(recorder) as vault:
            assert isinstance(vault._client, httpx.Client)

    def test_exit_closes_client(self, recorder) -> None:
        client = _client(recorder)
        with client:
            pass
        assert client._client is None

    def test_client_reused_across_calls(self, recorder) -> None:
        with _client(recorder) as vault:
            first = vault._get_client()
            vault.read("secret/a")
            assert vault._get_client() is first


# ---------------------------------------------------------------------------
# Verbs and operations
# ---------------------------------------------------------------------------


class TestRequests:
    def test_read(self, recorder) -> None:
        recorder.respond(200, {"data": {"a": 1}})
        with _client(recorder, token="s.abc") as vault:
            assert vault.read("secret/app") == {"data": {"a": 1}}

        request = recorder.last
        assert request.method == "GET"
        assert str(request.url) == "http://vault:8200/v1/secret/app"
        assert request.headers["X-Vault-Token"] == "s.abc"
        assert request.headers["Accept"] == "application/json"

    def test_write_without_data_sends_no_body(self, recorder) -> None:
        with _client(recorder) as vault:
            vault.write("sys/rotate")
        assert recorder.last.method == "PUT"
        assert recorder.last.content == b""

    def test_write_with_data(self, recorder) -> None:
        with _client(recorder) as vault:
            vault.write("secret/app", {"ttl": 3600})
        assert json.loads(recorder.last.content) == {"ttl": 3600}

    def test_list(self, recorder) -> None:
        with _client(recorder) as vault:
            vault.list("secret/")
        assert recorder.last.method == "LIST"
        assert recorder.last.url.path == "/v1/secret/"

    def test_help(self, recorder) -> None:
        recorder.respond(200, {"help": "## DESCRIPTION"})
        with _client(recorder) as vault:
            assert vault.help("sys/mounts") == {"help": "## DESCRIPTION"}
        assert recorder.last.url.raw_path == b"/v1/sys/mounts?help=1"

    def test_delete_returns_none_on_204(self, recorder) -> None:
        recorder.respond(204)
        with _client(recorder) as vault:
            assert vault.delete("secret/app") is None

    def test_operation(self, recorder, sample_table) -> None:
        with _client(recorder, commands=sample_table) as vault:
            vault.list_keys(name="app", list=True)
        assert recorder.last.url.raw_path == b"/v1/secret/app?list=true"
        assert recorder.last.method == "GET"

    def test_operation_validation(self, recorder, sample_table) -> None:
        with _client(recorder, commands=sample_table) as vault:
            with pytest.raises(ValidationError) as exc_info:
                vault.add_policy(name="ops", rules=5)
        assert exc_info.value.data_path == "/rules"
        assert recorder.requests == []

    def test_call(self, recorder, sample_table) -> None:
        with _client(recorder, commands=sample_table) as vault:
            vault.call("add_policy", name="ops", rules="r")
        assert recorder.last.url.path == "/v1/sys/policy/ops"

    def test_call_with_name_field(self, recorder, sample_table) -> None:
        with _client(recorder, commands=sample_table) as vault:
            vault.call("read_secret", name="x")
        assert recorder.last.url.path == "/v1/secret/x"

    def test_request_method_required(self, recorder) -> None:
        with _client(recorder) as vault:
            with pytest.raises(ValidationError):
                vault.request("/sys/mounts", "")
        assert recorder.requests == []

    def test_per_call_timeout(self, recorder) -> None:
        seen: dict[str, Any] = {}

        def responder(request: httpx.Request) -> httpx.Response:
            seen.update(request.extensions["timeout"])
            return httpx.Response(200, json={})

        recorder.responder = responder
        with _client(recorder) as vault:
            vault.status(request_options={"timeout": 1.5})
        assert seen["connect"] == 1.5


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    def test_error_envelope(self, recorder) -> None:
        recorder.respond(400, {"errors": ["missing client token"]})
        with _client(recorder) as vault:
            with pytest.raises(OperationError, match="missing client token") as exc_info:
                vault.read("secret/app")
        assert exc_info.value.status_code == 400

    def test_status_fallback(self, recorder) -> None:
        recorder.respond(500)
        with _client(recorder) as vault:
            with pytest.raises(OperationError, match="Status 500"):
                vault.read("secret/app")

    def test_health_is_never_an_error(self, recorder) -> None:
        recorder.respond(472, {"replication_dr_mode": "secondary"})
        with _client(recorder) as vault:
            assert vault.health(standbyok=True) == {"replication_dr_mode": "secondary"}

    def test_timeout_is_a_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with VaultClient(transport=httpx.MockTransport(handler)) as vault:
            with pytest.raises(TransportError) as exc_info:
                vault.read("secret/app")
        assert exc_info.value.exit_code == 6
        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)


# ---------------------------------------------------------------------------
# Paths and bodies
# ---------------------------------------------------------------------------


class TestGenericPaths:
    def test_template_syntax_in_path_is_sent_literally(self, recorder) -> None:
        with _client(recorder) as vault:
            vault.read("secret/{{ 7 * 7 }}")
        assert recorder.last.url.path == "/v1/secret/{{ 7 * 7 }}"

    def test_internal_attribute_lookup_is_not_evaluated(self, recorder) -> None:
        path = "secret/{{ ''.__class__.__mro__[1].__subclasses__() | length }}"
        with _client(recorder) as vault:
            vault.write(path, {"a": 1})
        assert recorder.last.url.path == f"/v1/{path}"

    def test_unterminated_comment_in_path(self, recorder) -> None:
        with _client(recorder) as vault:
            vault.list("secret/a{#b")
        assert len(recorder.requests) == 1
        assert recorder.last.url.path.startswith("/v1/secret/a")

    def test_request_template_is_sandboxed(self, recorder) -> None:
        path = "/secret/{{ ''.__class__.__mro__[1].__subclasses__() | length }}"
        with _client(recorder) as vault:
            with pytest.raises(ValidationError):
                vault.request(path, "GET")
        assert recorder.requests == []

    def test_request_template_syntax_error(self, recorder) -> None:
        with _client(recorder) as vault:
            with pytest.raises(ValidationError, match="Invalid path template"):
                vault.request("/secret/a{#b", "GET")
        assert recorder.requests == []

    def test_none_field_renders_empty(self, recorder, sample_table) -> None:
        with _client(recorder, commands=sample_table) as vault:
            vault.read_secret(name=None)
        assert recorder.last.url.path == "/v1/secret/"

    def test_template_cache_stays_bounded(self, recorder) -> None:
        templater = JinjaTemplater(cache_size=16)
        with _client(recorder, templater=templater) as vault:
            for i in range(40):
                vault.read(f"secret/item-{i}")
                vault.health(standbycode=200 + i)
        assert templater.cache_info().currsize <= 16


class TestRequestBody:
    def test_generated_delete_sends_body(self, recorder) -> None:
        recorder.respond(204)
        with _client(recorder) as vault:
            vault.call("remove_policy", name="ops")
        assert recorder.last.method == "DELETE"
        assert recorder.last.url.path == "/v1/sys/policy/ops"
        assert json.loads(recorder.last.content) == {"name": "ops"}

    def test_generic_delete_has_no_body(self, recorder) -> None:
        recorder.respond(204)
        with _client(recorder) as vault:
            vault.delete("secret/app")
        assert recorder.last.content == b""

    def test_get_operation_never_sends_body(self, recorder, sample_table) -> None:
        with _client(recorder, commands=sample_table) as vault:
            vault.read_secret(name="x")
        assert recorder.last.content == b""
