"""Tests for response normalization."""

from __future__ import annotations

import httpx
import pytest

from vaultli.client.response import (
    extract_response_data,
    handle_vault_response,
    to_vault_response,
)
from vaultli.exceptions import OperationError
from vaultli.models import VaultResponse


def _response(status_code: int, body=None, path: str = "/v1/secret/x") -> VaultResponse:
    return VaultResponse(status_code=status_code, body=body, request_path=path)


# ---------------------------------------------------------------------------
# handle_vault_response
# ---------------------------------------------------------------------------


class TestHandleVaultResponse:
    def test_none_is_rejected(self) -> None:
        with pytest.raises(OperationError, match="No response passed"):
            handle_vault_response(None)

    def test_200_returns_body(self) -> None:
        assert handle_vault_response(_response(200, {"data": {"a": 1}})) == {"data": {"a": 1}}

    def test_204_returns_empty_body(self) -> None:
        assert handle_vault_response(_response(204)) is None

    def test_error_envelope_message(self) -> None:
        with pytest.raises(OperationError) as exc_info:
            handle_vault_response(_response(404, {"errors": ["not found", "second"]}))

        err = exc_info.value
        assert err.message == "not found"
        assert err.status_code == 404
        assert err.body == {"errors": ["not found", "second"]}
        assert err.request_path == "/v1/secret/x"
        assert err.exit_code == 5

    def test_empty_errors_falls_back_to_status(self) -> None:
        with pytest.raises(OperationError, match="Status 400"):
            handle_vault_response(_response(400, {"errors": []}))

    def test_no_body_falls_back_to_status(self) -> None:
        with pytest.raises(OperationError, match="Status 500"):
            handle_vault_response(_response(500))

    def test_non_dict_body_falls_back_to_status(self) -> None:
        with pytest.raises(OperationError, match="Status 502"):
            handle_vault_response(_response(502, "<html>bad gateway</html>"))

    def test_other_2xx_is_an_error(self) -> None:
        with pytest.raises(OperationError, match="Status 202"):
            handle_vault_response(_response(202, {}))

    @pytest.mark.parametrize("status", [429, 472, 473, 501, 503])
    def test_health_resolves_any_status(self, status: int) -> None:
        body = {"sealed": True, "standby": False}
        assert handle_vault_response(_response(status, body, "/v1/sys/health")) == body

    def test_health_with_query_string(self) -> None:
        body = {"standby": True}
        resp = _response(429, body, "/v1/sys/health?standbyok=true")
        assert handle_vault_response(resp) == body


# ---------------------------------------------------------------------------
# Conversion from httpx
# ---------------------------------------------------------------------------


class TestToVaultResponse:
    def test_request_path_includes_query(self) -> None:
        request = httpx.Request("GET", "http://vault:8200/v1/sys/health?standbyok=true")
        resp = httpx.Response(200, json={"initialized": True}, request=request)

        converted = to_vault_response(resp)

        assert converted.status_code == 200
        assert converted.body == {"initialized": True}
        assert converted.request_path == "/v1/sys/health?standbyok=true"


class TestExtractResponseData:
    def test_json(self) -> None:
        assert extract_response_data(httpx.Response(200, json=[1, 2])) == [1, 2]

    def test_empty(self) -> None:
        assert extract_response_data(httpx.Response(204)) is None

    def test_text_fallback(self) -> None:
        assert extract_response_data(httpx.Response(502, text="bad gateway")) == "bad gateway"
