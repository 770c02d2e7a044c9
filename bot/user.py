"""Read view over a locally stored Telegram user."""

from __future__ import annotations

from typing import Any, Optional, Union

from core.logger import WrapperLogger
from sdk.exceptions import NotFound
from sdk.models import UserProfilePhotos
from bot.projection import read_latest_messages
from bot.wrapper import Bot, resolve_bot

logger = WrapperLogger.get_logger()


class User:
    """A user the bot has seen, looked up by numeric id or username.

    Raises:
        NotInitialized: If no bot is given and none is active.
        NotFound: If the user is not in the local store.
    """

    def __init__(self, identifier: Union[int, str], bot: Optional[Bot] = None) -> None:
        self._bot = resolve_bot(bot, "users")
        users = self._bot.storage.users
        if isinstance(identifier, str):
            record = users.find_one_by({"username": identifier})
        else:
            record = users.find_one_by({"id": identifier})
        if record is None:
            raise NotFound(f"User '{identifier}' does not exist in database.")

        self._user_id: int = record["id"]
        self._username: Optional[str] = record.get("username")
        self._first_name: Optional[str] = record.get("first_name")
        self._last_name: Optional[str] = record.get("last_name")

    @property
    def user_id(self) -> int:
        return self._user_id

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def first_name(self) -> Optional[str]:
        return self._first_name

    @property
    def last_name(self) -> Optional[str]:
        return self._last_name

    def __repr__(self) -> str:
        return f"User(user_id={self._user_id!r}, username={self._username!r})"

    def get_profile_picture(self, size: int = 320) -> str:
        """Return a download URL for the user's current profile picture.

        Picks the variant whose width equals *size*, otherwise the largest
        one.  Returns ``""`` when the user has no profile picture or the
        lookup fails.

        Note: the URL embeds the bot token; do not share it with end users.
        """
        response = self._bot.client.get_user_profile_photos(self._user_id, limit=1)
        if not response.ok:
            return ""
        photos = UserProfilePhotos.model_validate(response.result).photos
        if not photos:
            return ""

        variants = photos[0]
        chosen = next((photo for photo in variants if photo.width == size), variants[-1])
        return self._bot.get_file(chosen.file_id) or ""

    def get_latest_messages(self, limit: int = 100) -> list[dict[str, Any]]:
        """Return up to *limit* stored messages of the private chat with this user, oldest first."""
        return read_latest_messages(self._bot.storage.messages, {"chat": self._user_id}, limit)

    @staticmethod
    def fetch(user_id: int, bot: Optional[Bot] = None) -> Optional[dict[str, Any]]:
        """Look *user_id* up live via ``getChat`` without touching the store."""
        bot = bot or Bot.current()
        result = bot.send_custom_request("getChat", {"chat_id": user_id})
        if result is None:
            return None
        return {
            "id": result["id"],
            "username": result.get("username"),
            "first_name": result.get("first_name"),
            "last_name": result.get("last_name"),
        }
