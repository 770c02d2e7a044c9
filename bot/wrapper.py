"""Bot — the context object tying the API client, local stores and callbacks together.

Usage::

    from bot import Bot

    bot = Bot("12345678:ABCDEFGHIJKLMNOPQRSTUVWXYZ012345678")
    bot.set_callback(lambda payload: bot.send_message(payload.chat_id, "Hi"))
    while True:
        bot.check_for_messages(timeout=30)

Only one bot may be active per process; :meth:`Bot.close` (or leaving a
``with Bot(...)`` block) releases the slot.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Optional, Sequence, Union

from config import API_URL, DB_LOCATION, REQUEST_TIMEOUT
from core.logger import WrapperLogger
from core.store import Storage
from sdk.client import TelegramClient
from sdk.exceptions import AlreadyInitialized, InvalidArgument, InvalidToken, NotInitialized
from sdk.models import ApiResponse, File, User as TelegramUser
from bot.dispatcher import Dispatcher
from bot.poller import DEFAULT_ALLOWED_UPDATES, UpdatePoller
from bot.projection import ProjectionWriter
from bot.registry import CallbackRegistry

logger = WrapperLogger.get_logger()

TOKEN_PATTERN = re.compile(r"^[0-9]{8,10}:[A-Za-z0-9_-]{35}$")
METHOD_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


def is_valid_token(token: str) -> bool:
    """Return True if *token* has the ``<8-10 digits>:<35 chars>`` shape."""
    return isinstance(token, str) and TOKEN_PATTERN.fullmatch(token) is not None


class Bot:
    """A polling Telegram bot with a local projection of users, chats and messages."""

    _instance: Optional["Bot"] = None

    def __init__(
        self,
        token: str,
        db_location: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> None:
        """Validate *token*, check it against the API and open the stores.

        Raises:
            AlreadyInitialized: If another bot is still active in this process.
            InvalidArgument: If *token* is not shaped like a bot token.
            InvalidToken: If ``getMe`` fails for *token*.
        """
        if Bot._instance is not None:
            raise AlreadyInitialized("Bot instance already exists.")
        if not is_valid_token(token):
            raise InvalidArgument("Telegram bot token is in wrong format.")

        self._token = token
        self._client = TelegramClient(token, api_url or API_URL, timeout or REQUEST_TIMEOUT)

        response = self._client.get_me()
        if not response.ok:
            logger.error("Token validation failed", extra={"api_endpoint": "getMe", "description": response.description})
            raise InvalidToken(f"Telegram bot token is invalid: {response.description}")
        self._me = TelegramUser.model_validate(response.result)

        self._storage = Storage(db_location or DB_LOCATION)
        self._callbacks = CallbackRegistry()
        self._poller = UpdatePoller(self._client, self._storage.common)
        self._dispatcher = Dispatcher(self._callbacks, ProjectionWriter(self._storage))

        Bot._instance = self
        logger.info("Bot initialised", extra={"bot_id": self._me.id, "bot_username": self._me.username})

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def current(cls) -> "Bot":
        """Return the active bot.

        Raises:
            NotInitialized: If no bot has been constructed (or it was closed).
        """
        if cls._instance is None:
            raise NotInitialized("Database is not set up. Have you initialised the Bot class?")
        return cls._instance

    def close(self) -> None:
        """Release the process-wide slot so another bot can be constructed."""
        if Bot._instance is self:
            Bot._instance = None
            logger.info("Bot closed", extra={"bot_id": self._me.id})

    def __enter__(self) -> "Bot":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def token(self) -> str:
        return self._token

    @property
    def me(self) -> TelegramUser:
        """The bot's own user, as returned by ``getMe``."""
        return self._me

    @property
    def client(self) -> TelegramClient:
        return self._client

    @property
    def storage(self) -> Storage:
        return self._storage

    @property
    def callbacks(self) -> CallbackRegistry:
        return self._callbacks

    def file_url(self, file_path: str) -> str:
        return self._client.file_url(file_path)

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def set_callback(self, callback: Callable[..., Any], criteria: Optional[str] = None) -> None:
        """Register *callback* for *criteria*; without criteria it handles every message."""
        self._callbacks.set(callback, criteria)

    def unset_callback(self, criteria: Optional[str] = None) -> Any:
        """Remove and return the callback for *criteria*, or all callbacks if omitted."""
        return self._callbacks.unset(criteria)

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    def request(self, method: str, params: Optional[Dict[str, Any]] = None) -> ApiResponse:
        """Call any Bot API *method* and return the full :class:`ApiResponse`.

        Raises:
            InvalidArgument: If *method* contains characters other than letters, digits and ``_``.
        """
        if not isinstance(method, str) or METHOD_PATTERN.fullmatch(method) is None:
            raise InvalidArgument("Method is in wrong format.")
        return self._client.call(method, params)

    def send_custom_request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Call any Bot API *method*; return its ``result`` or ``None`` on failure."""
        response = self.request(method, params)
        return response.result if response.ok else None

    def send_message(self, chat_id: Union[int, str], text: str) -> bool:
        """Send *text* to *chat_id*; True when Telegram accepted it."""
        response = self._client.send_message(chat_id, text)
        if response.ok:
            logger.info("Message sent", extra={"chat_id": chat_id, "api_endpoint": "sendMessage"})
        return response.ok

    def get_file(self, file_id: str) -> Optional[str]:
        """Resolve *file_id* to a download URL, or ``None`` if it cannot be resolved.

        Note: the URL embeds the bot token; do not share it with end users.
        """
        response = self._client.get_file(file_id)
        if not response.ok:
            return None
        file = File.model_validate(response.result)
        if not file.file_path:
            logger.warning("getFile returned no file_path", extra={"api_endpoint": "getFile", "file_id": file_id})
            return None
        return self.file_url(file.file_path)

    def has_access_to_chat(self, chat_id: Union[int, str]) -> bool:
        """Return True if the bot is currently a member of *chat_id*."""
        response = self._client.get_chat_member(chat_id, self._me.id)
        if not response.ok:
            return False
        return response.result.get("status") not in ("left", "kicked")

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def get_updates(
        self,
        offset: Optional[int] = None,
        limit: int = 100,
        timeout: int = 0,
        allowed_updates: Sequence[str] = DEFAULT_ALLOWED_UPDATES,
    ) -> list[dict[str, Any]]:
        """Fetch the next batch of raw updates and advance the stored offset."""
        return self._poller.get_updates(offset, limit, timeout, allowed_updates)

    def check_for_messages(self, timeout: int = 0) -> int:
        """Run one poll-dispatch cycle; return the number of callbacks invoked.

        Blocks for the HTTP round trip plus up to *timeout* seconds of
        server-side long polling.
        """
        updates = self.get_updates(timeout=timeout)
        return self._dispatcher.process_updates(updates)


def resolve_bot(bot: Optional[Bot], collection: str) -> Bot:
    """Return *bot*, or the active bot, after checking *collection* is open.

    Raises:
        NotInitialized: If no bot is available or the collection is missing.
    """
    bot = bot or Bot.current()
    if collection not in bot.storage:
        raise NotInitialized(f"The '{collection}' store is not set up.")
    return bot
