"""Read view over a locally stored chat, plus chat-management calls.

Every method that talks to Telegram is an independent round trip; failures
come back as ``False`` / ``None`` / ``""`` and are logged by the client.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union

from core.logger import WrapperLogger
from sdk.exceptions import InvalidArgument, NotFound
from sdk.models import Chat as TelegramChat, ChatInviteLink, ChatMember, ChatPermissions
from bot.enums import ChatMemberType, ChatPhotoSize, ChatType
from bot.projection import read_latest_messages
from bot.user import User
from bot.wrapper import Bot, resolve_bot

logger = WrapperLogger.get_logger()

MAX_TITLE_LENGTH = 128
MAX_DESCRIPTION_LENGTH = 255

_ADMIN_PERMISSIONS: tuple[str, ...] = (
    "can_manage_chat",
    "can_delete_messages",
    "can_manage_video_chats",
    "can_restrict_members",
    "can_promote_members",
    "can_change_info",
    "can_invite_users",
    "can_post_messages",
    "can_edit_messages",
    "can_pin_messages",
    "can_manage_topics",
)
_RESTRICTED_PERMISSIONS: tuple[str, ...] = (
    "can_change_info",
    "can_invite_users",
    "can_pin_messages",
    "can_manage_topics",
    "can_send_messages",
    "can_send_media_messages",
    "can_send_polls",
    "can_send_other_messages",
    "can_add_web_page_previews",
)


class Chat:
    """A chat the bot has seen, looked up by numeric id or public username.

    For private chats :attr:`user` is the :class:`~bot.user.User` on the
    other side.

    Raises:
        NotInitialized: If no bot is given and none is active.
        NotFound: If the chat is not in the local store.
    """

    def __init__(self, identifier: Union[int, str], bot: Optional[Bot] = None) -> None:
        self._bot = resolve_bot(bot, "chats")
        chats = self._bot.storage.chats
        if isinstance(identifier, str):
            record = chats.find_one_by({"username": identifier})
        else:
            record = chats.find_by_id(identifier)
        if record is None:
            raise NotFound(f"Chat '{identifier}' does not exist in database.")

        self._chat_id: int = record["_id"]
        self._type = ChatType(record["type"])
        self._title: Optional[str] = record.get("title")
        self._username: Optional[str] = record.get("username")
        self._chat_obj: Dict[str, Any] = json.loads(record["chat_obj"])
        self._user: Optional[User] = User(self._chat_id, bot=self._bot) if self._type is ChatType.PRIVATE else None

    @property
    def chat_id(self) -> int:
        return self._chat_id

    @property
    def type(self) -> ChatType:
        return self._type

    @property
    def title(self) -> Optional[str]:
        return self._title

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def user(self) -> Optional[User]:
        return self._user

    def __repr__(self) -> str:
        return f"Chat(chat_id={self._chat_id!r}, type={self._type.value!r}, title={self._title!r})"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_chat(self) -> Optional[TelegramChat]:
        response = self._bot.client.get_chat(self._chat_id)
        if not response.ok:
            return None
        return TelegramChat.model_validate(response.result)

    def _require_group(self, action: str) -> None:
        if self._type is ChatType.PRIVATE:
            raise InvalidArgument(f"Cannot {action} for private chat.")

    def _save(self, fields: Dict[str, Any]) -> None:
        self._bot.storage.chats.update_by_id(
            self._chat_id,
            {**fields, "chat_obj": json.dumps(self._chat_obj, ensure_ascii=False, sort_keys=True)},
        )

    def _member_to_dict(self, member: ChatMember) -> Dict[str, Any]:
        """Flatten a ChatMember into a dict with the fields relevant to its status."""
        user: Optional[User] = None
        if not member.user.is_bot:
            try:
                user = User(member.user.id, bot=self._bot)
            except NotFound:
                logger.debug("Chat member not stored locally", extra={"chat_id": self._chat_id, "user_id": member.user.id})

        member_type = ChatMemberType(member.status)
        result: Dict[str, Any] = {
            "user": user,
            "user_id": member.user.id,
            "member_type": member_type,
            "is_bot": member.user.is_bot,
        }

        if member_type in (ChatMemberType.OWNER, ChatMemberType.ADMINISTRATOR):
            result["is_anonymous"] = member.is_anonymous
            result["custom_title"] = member.custom_title
        if member_type is ChatMemberType.ADMINISTRATOR:
            result["can_be_edited"] = member.can_be_edited
            result["permissions"] = {name: getattr(member, name) for name in _ADMIN_PERMISSIONS}
        elif member_type is ChatMemberType.RESTRICTED:
            result["is_member"] = member.is_member
            result["permissions"] = {name: getattr(member, name) for name in _RESTRICTED_PERMISSIONS}
            result["until_date"] = member.until_date
        elif member_type is ChatMemberType.BANNED:
            result["until_date"] = member.until_date
        return result

    # ------------------------------------------------------------------
    # Local queries
    # ------------------------------------------------------------------

    def get_latest_messages(self, limit: int = 100) -> list[Dict[str, Any]]:
        """Return up to *limit* stored messages of this chat, oldest first."""
        return read_latest_messages(self._bot.storage.messages, {"chat": self._chat_id}, limit)

    # ------------------------------------------------------------------
    # Remote calls
    # ------------------------------------------------------------------

    def get_profile_picture(self, size: Union[ChatPhotoSize, int] = ChatPhotoSize.BIG) -> str:
        """Return a download URL for the chat photo, or ``""`` if there is none.

        *size* is a :class:`ChatPhotoSize` or its pixel value (640 or 160).
        Private chats resolve through the user's profile photos at that width.

        Note: the URL embeds the bot token; do not share it with end users.

        Raises:
            InvalidArgument: If *size* is neither 640 nor 160.
        """
        try:
            size = ChatPhotoSize(size)
        except ValueError:
            raise InvalidArgument(f"Invalid chat photo size {size!r}; use 640 (big) or 160 (small).")

        if self._type is ChatType.PRIVATE:
            return self._user.get_profile_picture(int(size))

        chat = self._get_chat()
        if chat is None or chat.photo is None:
            return ""
        file_id = chat.photo.big_file_id if size == ChatPhotoSize.BIG else chat.photo.small_file_id
        return self._bot.get_file(file_id) or ""

    def pin_message(self, message_id: int, disable_notification: bool = False) -> bool:
        return self._bot.client.pin_chat_message(self._chat_id, message_id, disable_notification).ok

    def set_title(self, title: str) -> bool:
        """Rename the chat (1-128 characters) and update the local record.

        Raises:
            InvalidArgument: For private chats or an over-long title.
        """
        self._require_group("set title")
        if len(title) > MAX_TITLE_LENGTH:
            raise InvalidArgument(f"Chat title cannot be longer than {MAX_TITLE_LENGTH} characters.")

        if not self._bot.client.set_chat_title(self._chat_id, title).ok:
            return False
        self._title = title
        self._chat_obj["title"] = title
        self._save({"title": title})
        return True

    def set_description(self, description: str) -> bool:
        """Change the chat description (0-255 characters) and update the local record.

        Raises:
            InvalidArgument: For private chats or an over-long description.
        """
        self._require_group("set description")
        if len(description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidArgument(f"Chat description cannot be longer than {MAX_DESCRIPTION_LENGTH} characters.")

        if not self._bot.client.set_chat_description(self._chat_id, description).ok:
            return False
        self._chat_obj["description"] = description
        self._save({})
        return True

    def get_administrators(self) -> list[Dict[str, Any]]:
        response = self._bot.client.get_chat_administrators(self._chat_id)
        if not response.ok:
            return []
        return [self._member_to_dict(ChatMember.model_validate(item)) for item in response.result]

    def get_chat_member(self, user_id: int) -> Optional[Dict[str, Any]]:
        response = self._bot.client.get_chat_member(self._chat_id, user_id)
        if not response.ok:
            return None
        return self._member_to_dict(ChatMember.model_validate(response.result))

    def get_permissions(self) -> Optional[ChatPermissions]:
        chat = self._get_chat()
        return chat.permissions if chat is not None else None

    def set_permissions(self, permissions: Union[ChatPermissions, Dict[str, Any]]) -> bool:
        return self._bot.client.set_chat_permissions(self._chat_id, permissions).ok

    def get_members_count(self) -> Optional[int]:
        response = self._bot.client.get_chat_member_count(self._chat_id)
        return response.result if response.ok else None

    def get_invite_link(self) -> str:
        """Return the primary invite link, or ``""`` if the chat has none."""
        chat = self._get_chat()
        if chat is None or chat.invite_link is None:
            return ""
        return chat.invite_link

    def create_invite_link(self, expire_date: int = 0, member_limit: int = 0, approval_needed: bool = False) -> Optional[str]:
        """Create an additional invite link.

        Args:
            expire_date: Unix time the link expires; 0 never expires.
            member_limit: Maximum members joining via the link (1-99999); 0 is unlimited.
            approval_needed: Joins need admin approval; *member_limit* is then ignored.

        Raises:
            InvalidArgument: For private chats.
        """
        self._require_group("create invite link")
        response = self._bot.client.create_chat_invite_link(
            self._chat_id,
            expire_date=expire_date or None,
            member_limit=None if approval_needed else (member_limit or None),
            creates_join_request=True if approval_needed else None,
        )
        if not response.ok:
            return None
        return ChatInviteLink.model_validate(response.result).invite_link

    def revoke_invite_link(self, invite_link: str) -> bool:
        response = self._bot.client.revoke_chat_invite_link(self._chat_id, invite_link)
        if not response.ok:
            return False
        return bool(ChatInviteLink.model_validate(response.result).is_revoked)

    def accept_join_request(self, user_id: int) -> bool:
        return self._bot.client.approve_chat_join_request(self._chat_id, user_id).ok

    def decline_join_request(self, user_id: int) -> bool:
        return self._bot.client.decline_chat_join_request(self._chat_id, user_id).ok
