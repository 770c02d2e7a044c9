"""Callback registry — criteria → handler table owned by each :class:`~bot.wrapper.Bot`.

Design:
- ``MessageHandler`` is a :class:`Protocol` describing the callback shape:
  a plain callable receiving one :class:`~bot.payloads.Payload`.
- ``CallbackEntry`` records the criteria a handler was registered for.
- ``CallbackRegistry`` validates registrations against the closed set of
  ``CRITERIA`` and resolves the handler for a message type through the
  fallback chain ``message_<type>`` → ``message`` → ``default``.

The single-callback mode is a ``default`` registration: calling
``set(handler)`` without criteria registers the handler for every message.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Callable, Optional, Protocol, runtime_checkable

from core.logger import WrapperLogger
from sdk.exceptions import InvalidArgument
from bot.payloads import Payload

logger = WrapperLogger.get_logger()

DEFAULT = "default"
MESSAGE = "message"

# Closed set of criteria keys, in registration-help order.
CRITERIA: tuple[str, ...] = (
    DEFAULT,
    MESSAGE,
    "message_text",
    "message_photo",
    "message_video",
    "message_audio",
    "message_voice",
    "message_document",
    "message_sticker",
)


@runtime_checkable
class MessageHandler(Protocol):
    """Callback invoked with the normalized payload of one message."""
    def __call__(self, payload: Payload) -> Any: ...  # noqa: E704


@dataclasses.dataclass(frozen=True, slots=True)
class CallbackEntry:
    criteria: str
    handler: MessageHandler


class CallbackRegistry:
    """Per-bot table of message callbacks keyed by criteria.

    Usage::

        callbacks = CallbackRegistry()
        callbacks.set(on_text, "message_text")
        handler = callbacks.resolve("text")
    """

    def __init__(self) -> None:
        self._entries: dict[str, CallbackEntry] = {}

    def set(self, handler: Callable[..., Any], criteria: Optional[str] = None) -> None:
        """Register *handler* for *criteria* (``default`` when omitted).

        Raises:
            InvalidArgument: If *handler* is not callable or *criteria* is unknown.
        """
        if not callable(handler):
            raise InvalidArgument("Callback needs to be callable.")
        key = DEFAULT if criteria is None else criteria
        if key not in CRITERIA:
            raise InvalidArgument(f"Invalid criteria '{criteria}'. Valid criteria: {', '.join(CRITERIA)}")
        self._entries[key] = CallbackEntry(criteria=key, handler=handler)
        logger.debug("Callback registered", extra={"criteria": key})

    def unset(self, criteria: Optional[str] = None) -> Any:
        """Remove and return the handler for *criteria*.

        Without *criteria* every handler is removed and the former table is
        returned as a ``{criteria: handler}`` dict.  Returns ``None`` when no
        handler was registered for the given criteria.
        """
        if criteria is None:
            removed = {key: entry.handler for key, entry in self._entries.items()}
            self._entries.clear()
            logger.debug("All callbacks removed", extra={"count": len(removed)})
            return removed
        entry = self._entries.pop(criteria, None)
        return entry.handler if entry is not None else None

    def get(self, criteria: str) -> Optional[MessageHandler]:
        entry = self._entries.get(criteria)
        return entry.handler if entry is not None else None

    def resolve(self, message_type: str) -> Optional[MessageHandler]:
        """Return the most specific handler for *message_type*, or ``None``."""
        for key in (f"{MESSAGE}_{message_type}", MESSAGE, DEFAULT):
            entry = self._entries.get(key)
            if entry is not None:
                return entry.handler
        return None

    def __len__(self) -> int:
        return len(self._entries)
