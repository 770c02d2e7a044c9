"""Shared fixtures: a fake Telegram endpoint and a bot backed by ``tmp_path``."""

import os
import sys
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

# Ensure the project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from bot.wrapper import Bot

VALID_TOKEN = "12345678:ABCDEFGHIJKLMNOPQRSTUVWXYZ012345678"
BOT_USER = {"id": 12345678, "is_bot": True, "first_name": "Wrapper", "username": "wrapper_bot"}


class FakeTelegram:
    """Stand-in for ``requests.get`` that answers by Bot API method name.

    A list registered for a method is served one element per call; the last
    element repeats once the list is exhausted.
    """

    def __init__(self) -> None:
        self._responses: dict[str, list[tuple[dict, int]]] = {}
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.set("getMe", {"ok": True, "result": BOT_USER})

    def set(self, method: str, *bodies: dict, status: int = 200) -> None:
        self._responses[method] = [(body, status) for body in bodies]

    def ok(self, method: str, result: Any) -> None:
        self.set(method, {"ok": True, "result": result})

    def fail(self, method: str, description: str = "Bad Request", status: int = 400) -> None:
        self.set(method, {"ok": False, "error_code": status, "description": description}, status=status)

    def params_for(self, method: str) -> list[dict[str, Any]]:
        return [params for name, params in self.calls if name == method]

    def methods(self) -> list[str]:
        return [name for name, _ in self.calls]

    def __call__(self, url: str, params: dict | None = None, timeout: float | None = None) -> MagicMock:
        method = url.rsplit("/", 1)[-1]
        self.calls.append((method, dict(params or {})))

        queue = self._responses.get(method)
        if queue:
            body, status = queue.pop(0) if len(queue) > 1 else queue[0]
        else:
            body, status = {"ok": False, "error_code": 404, "description": "Not Found"}, 404

        response = MagicMock()
        response.ok = 200 <= status < 300
        response.status_code = status
        response.json.return_value = body
        return response


@pytest.fixture(autouse=True)
def _release_bot():
    """Never leak an active bot into the next test."""
    yield
    Bot._instance = None


@pytest.fixture()
def telegram():
    fake = FakeTelegram()
    with patch("sdk.client.requests.get", side_effect=fake):
        yield fake


@pytest.fixture()
def bot(telegram, tmp_path):
    instance = Bot(VALID_TOKEN, db_location=str(tmp_path / "db"))
    yield instance
    instance.close()


# ── Message builders ─────────────────────────────────────────────────────────


def make_message(
    message_id: int = 1,
    chat: dict | None = None,
    sender: dict | None = None,
    date: int = 1_700_000_000,
    **content: Any,
) -> dict:
    """Build a raw message dict; *content* supplies e.g. ``text="hi"``."""
    sender = sender if sender is not None else {"id": 42, "is_bot": False, "first_name": "Ada", "username": "ada"}
    chat = chat if chat is not None else {"id": sender["id"], "type": "private", "first_name": sender["first_name"]}
    message = {"message_id": message_id, "date": date, "chat": chat, "from": sender}
    message.update(content)
    return message


def make_update(update_id: int, **kwargs: Any) -> dict:
    return {"update_id": update_id, "message": make_message(**kwargs)}
