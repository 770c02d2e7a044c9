"""Tests for TelegramClient, parameter encoding and APIException."""

import json
from unittest.mock import patch, MagicMock

import pytest
import requests

from sdk.client import TelegramClient, encode_params
from sdk.exceptions import APIException
from sdk.models import ApiResponse, ChatPermissions


def _response(body, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.json.return_value = body
    return resp


# ── APIException ─────────────────────────────────────────────────────────────


class TestAPIException:
    """Validate the base exception class."""

    def test_attributes(self) -> None:
        exc = APIException(403, {"description": "Forbidden"})
        assert exc.status_code == 403
        assert exc.response_body == {"description": "Forbidden"}
        assert "403" in str(exc)
        assert "Forbidden" in str(exc)

    def test_default_body(self) -> None:
        exc = APIException(500)
        assert exc.response_body == {}
        assert "Unknown error" in str(exc)


# ── Construction ─────────────────────────────────────────────────────────────


class TestClientInit:
    """Validate client initialisation and URL composition."""

    def test_base_url(self) -> None:
        c = TelegramClient("123:abc")
        assert c.base_url == "https://api.telegram.org/bot123:abc"

    def test_api_url_strip(self) -> None:
        c = TelegramClient("123:abc", api_url="http://localhost:8081/")
        assert c.base_url == "http://localhost:8081/bot123:abc"

    def test_file_url(self) -> None:
        c = TelegramClient("123:abc")
        assert c.file_url("photos/file_1.jpg") == "https://api.telegram.org/file/bot123:abc/photos/file_1.jpg"

    def test_default_timeout(self) -> None:
        assert TelegramClient("123:abc")._timeout == 10


# ── Parameter encoding ───────────────────────────────────────────────────────


class TestEncodeParams:
    def test_drops_none(self) -> None:
        assert encode_params({"a": 1, "b": None}) == {"a": 1}

    def test_booleans_lowercase(self) -> None:
        assert encode_params({"flag": True, "other": False}) == {"flag": "true", "other": "false"}

    def test_lists_and_dicts_json_encoded(self) -> None:
        encoded = encode_params({"allowed_updates": ["message"], "permissions": {"can_send_messages": True}})
        assert encoded["allowed_updates"] == '["message"]'
        assert json.loads(encoded["permissions"]) == {"can_send_messages": True}

    def test_models_json_encoded_without_nulls(self) -> None:
        encoded = encode_params({"permissions": ChatPermissions(can_send_polls=False)})
        assert json.loads(encoded["permissions"]) == {"can_send_polls": False}

    def test_empty(self) -> None:
        assert encode_params(None) == {}


# ── _get helper ──────────────────────────────────────────────────────────────


class TestGetHelper:
    """Validate the internal _get method."""

    @patch("sdk.client.requests.get")
    def test_success(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": True, "result": {}})

        c = TelegramClient("123:abc")
        assert c._get("getMe") == {"ok": True, "result": {}}
        assert mock_get.call_args.args[0] == "https://api.telegram.org/bot123:abc/getMe"

    @patch("sdk.client.requests.get")
    def test_api_error_raises(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": False, "description": "Unauthorized"}, status=401)

        c = TelegramClient("123:abc")
        with pytest.raises(APIException) as exc_info:
            c._get("getMe")
        assert exc_info.value.status_code == 401

    @patch("sdk.client.requests.get")
    def test_json_decode_failure(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response(None)
        mock_get.return_value.json.side_effect = ValueError("No JSON")

        c = TelegramClient("123:abc")
        assert c._get("getMe") == {}

    @patch("sdk.client.requests.get")
    def test_network_error_propagates(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = requests.ConnectionError("offline")

        c = TelegramClient("123:abc")
        with pytest.raises(requests.ConnectionError):
            c._get("getMe")


# ── call() never raises for remote failures ──────────────────────────────────


class TestCall:
    @patch("sdk.client.requests.get")
    def test_ok_response(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": True, "result": [1, 2]})

        response = TelegramClient("123:abc").call("getUpdates")
        assert isinstance(response, ApiResponse)
        assert response.ok is True
        assert response.result == [1, 2]

    @patch("sdk.client.requests.get")
    def test_http_error_becomes_failed_response(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": False, "error_code": 400, "description": "Bad Request: chat not found"}, status=400)

        response = TelegramClient("123:abc").call("getChat", {"chat_id": 1})
        assert response.ok is False
        assert response.error_code == 400
        assert response.description == "Bad Request: chat not found"

    @patch("sdk.client.requests.get")
    def test_transport_error_becomes_failed_response(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = requests.Timeout("timed out")

        response = TelegramClient("123:abc").call("getMe")
        assert response.ok is False
        assert "timed out" in response.description

    @patch("sdk.client.requests.get")
    def test_non_envelope_body(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response(["not", "an", "envelope"])

        response = TelegramClient("123:abc").call("getMe")
        assert response.ok is False


# ── Endpoint methods ─────────────────────────────────────────────────────────


class TestEndpointMethods:
    """Spot-check selected endpoint wrapper methods."""

    @patch("sdk.client.requests.get")
    def test_send_message(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": True, "result": {"message_id": 1}})

        result = TelegramClient("123:abc").send_message(chat_id=42, text="hello & bye")
        assert result.ok is True
        params = mock_get.call_args.kwargs["params"]
        assert params == {"chat_id": 42, "text": "hello & bye"}

    @patch("sdk.client.requests.get")
    def test_get_updates_params(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": True, "result": []})

        TelegramClient("123:abc").get_updates(offset=8, limit=100, timeout=30, allowed_updates=["message"])
        params = mock_get.call_args.kwargs["params"]
        assert params == {"offset": 8, "limit": 100, "timeout": 30, "allowed_updates": '["message"]'}
        # HTTP timeout must outlast the server-side long poll.
        assert mock_get.call_args.kwargs["timeout"] == 40

    @patch("sdk.client.requests.get")
    def test_get_updates_without_offset(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": True, "result": []})

        TelegramClient("123:abc").get_updates()
        assert "offset" not in mock_get.call_args.kwargs["params"]

    @patch("sdk.client.requests.get")
    def test_create_invite_link_omits_unset(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"ok": True, "result": {"invite_link": "https://t.me/+x"}})

        TelegramClient("123:abc").create_chat_invite_link(-100, creates_join_request=True)
        assert mock_get.call_args.kwargs["params"] == {"chat_id": -100, "creates_join_request": "true"}
