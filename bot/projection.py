"""Projection writer — local copies of users, chats and messages seen in updates."""

from __future__ import annotations

import json
from typing import Any, Optional

from core.logger import WrapperLogger
from core.store import DocumentStore, Storage

logger = WrapperLogger.get_logger()

USER_FIELDS: tuple[str, ...] = ("username", "first_name", "last_name")
CHAT_FIELDS: tuple[str, ...] = ("type", "title", "username", "chat_obj")


def _diff(stored: dict[str, Any], incoming: dict[str, Any], fields: tuple[str, ...]) -> dict[str, Any]:
    return {field: incoming.get(field) for field in fields if stored.get(field) != incoming.get(field)}


class ProjectionWriter:
    """Upsert users and chats, append messages."""

    def __init__(self, storage: Storage) -> None:
        self._storage = storage

    def store_user(self, sender: dict[str, Any]) -> dict[str, Any]:
        """Insert *sender* on first sighting, otherwise update only the fields that changed.

        Returns the changed fields (all fields for a new user, ``{}`` when
        nothing changed).
        """
        users = self._storage.users
        incoming = {
            "id": sender["id"],
            "username": sender.get("username"),
            "first_name": sender.get("first_name"),
            "last_name": sender.get("last_name"),
        }
        stored = users.find_one_by({"id": sender["id"]})
        if stored is None:
            users.insert(incoming)
            logger.info("Stored new user", extra={"user_id": sender["id"]})
            return incoming

        changed = _diff(stored, incoming, USER_FIELDS)
        if changed:
            users.update_by_id(stored["_id"], changed)
            logger.info("Updated user", extra={"user_id": sender["id"], "fields": sorted(changed)})
        return changed

    def store_chat(self, chat: dict[str, Any]) -> dict[str, Any]:
        """Upsert *chat* keyed by its Telegram id, with the raw object serialized.

        The incoming object is merged over the stored ``chat_obj``, so keys the
        update does not carry (e.g. a description set through
        :meth:`bot.chat.Chat.set_description`) are kept.
        """
        chats = self._storage.chats
        stored = chats.find_by_id(chat["id"])
        chat_obj = {**json.loads(stored["chat_obj"]), **chat} if stored is not None else chat
        incoming = {
            "_id": chat["id"],
            "type": chat.get("type"),
            "title": chat.get("title"),
            "username": chat.get("username"),
            "chat_obj": json.dumps(chat_obj, ensure_ascii=False, sort_keys=True),
        }
        if stored is None:
            chats.update_or_insert(incoming)
            logger.info("Stored new chat", extra={"chat_id": chat["id"], "chat_type": incoming["type"]})
            return incoming

        changed = _diff(stored, incoming, CHAT_FIELDS)
        if changed:
            chats.update_by_id(chat["id"], changed)
            logger.info("Updated chat", extra={"chat_id": chat["id"], "fields": sorted(changed)})
        return changed

    def store_message(self, message: dict[str, Any], message_type: str) -> dict[str, Any]:
        """Append the projection of *message* together with its verbatim JSON."""
        sender: Optional[dict[str, Any]] = message.get("from")
        record = {
            "message_id": message["message_id"],
            "from": sender["id"] if sender else None,
            "chat": message["chat"]["id"],
            "date": message["date"],
            "type": message_type,
            "text": message.get("text"),
            "object": json.dumps(message, ensure_ascii=False),
        }
        stored = self._storage.messages.insert(record)
        logger.debug("Stored message", extra={"chat_id": record["chat"], "message_id": record["message_id"], "type": message_type})
        return stored


def read_latest_messages(messages: DocumentStore, criteria: dict[str, Any], limit: int) -> list[dict[str, Any]]:
    """Return the newest *limit* message records matching *criteria*, oldest first.

    The verbatim message in each record's ``object`` field is decoded back
    into a dict.
    """
    newest_first = messages.find_by(criteria, order_by=("date", "desc"), limit=limit)
    records = []
    for record in reversed(newest_first):
        record["object"] = json.loads(record["object"])
        records.append(record)
    return records
