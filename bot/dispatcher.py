"""Update dispatcher.

Routes each incoming Telegram update to the callback registered in a
:class:`~bot.registry.CallbackRegistry`.  Before a callback runs, the chat,
the sender and the message are written to the local projection so handlers
can query them through :class:`~bot.user.User` and :class:`~bot.chat.Chat`.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pydantic import ValidationError

from core.logger import WrapperLogger
from sdk.models import Update
from bot.payloads import Payload, build_payload
from bot.projection import ProjectionWriter
from bot.registry import CallbackRegistry

logger = WrapperLogger.get_logger()

# Content fields tested in this order; the first one present wins.
MESSAGE_TYPES: tuple[str, ...] = ("text", "photo", "video", "audio", "voice", "document", "sticker")
UNKNOWN = "unknown"


def classify_message(message: dict[str, Any]) -> str:
    """Return the content type of a raw message dict, or ``"unknown"``."""
    for message_type in MESSAGE_TYPES:
        if message.get(message_type) is not None:
            return message_type
    return UNKNOWN


class Dispatcher:
    """Persist and dispatch updates in arrival order."""

    def __init__(self, callbacks: CallbackRegistry, projection: ProjectionWriter) -> None:
        self._callbacks = callbacks
        self._projection = projection

    def process_update(self, update: dict[str, Any]) -> Optional[Payload]:
        """Project and dispatch a single update.

        Returns the payload handed to the callback, or ``None`` when the
        update carried no message or no callback matched.
        """
        update_id = update.get("update_id")
        raw = update.get("message")
        if not raw:
            logger.debug("Update has no message, skipping", extra={"update_id": update_id})
            return None

        try:
            message = Update.model_validate(update).message
        except ValidationError as exc:
            logger.warning("Failed to parse message", extra={"update_id": update_id, "error": str(exc)})
            return None

        self._projection.store_chat(raw["chat"])
        if raw.get("from"):
            self._projection.store_user(raw["from"])
        message_type = classify_message(raw)
        self._projection.store_message(raw, message_type)

        handler = self._callbacks.resolve(message_type)
        if handler is None:
            logger.debug("No callback registered", extra={"update_id": update_id, "type": message_type})
            return None

        payload = build_payload(message_type, message, raw)
        logger.debug("Dispatching message", extra={"update_id": update_id, "type": message_type, "chat_id": payload.chat_id})
        try:
            handler(payload)
        except Exception:
            logger.exception("Callback raised", extra={"update_id": update_id, "type": message_type})
            raise
        return payload

    def process_updates(self, updates: Iterable[dict[str, Any]]) -> int:
        """Process *updates* in order and return how many reached a callback.

        Every update in the batch is projected and dispatched even when one
        of them fails; the first exception is re-raised after the batch.
        """
        dispatched = 0
        first_error: Optional[Exception] = None
        for update in updates:
            try:
                if self.process_update(update) is not None:
                    dispatched += 1
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error
        return dispatched
