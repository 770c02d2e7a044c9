"""Pydantic data models for the subset of the Telegram Bot API the wrapper uses.

Every class corresponds to an object documented at
https://core.telegram.org/bots/api.  Unknown fields sent by newer API versions
are ignored, so the models stay valid as Telegram adds fields.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field


class ApiResponse(BaseModel):
    """The JSON envelope every Bot API method returns.

    A transport failure or undecodable body is represented as
    ``ok=False`` with ``description`` set, so callers always get a value back.
    """

    ok: bool = False
    result: Any = None
    description: Optional[str] = None
    error_code: Optional[int] = None

    model_config = {"populate_by_name": True}

    @classmethod
    def failure(cls, description: str, error_code: Optional[int] = None) -> "ApiResponse":
        return cls(ok=False, description=description, error_code=error_code)


class Update(BaseModel):
    """This object represents an incoming update."""

    update_id: int
    message: Optional["Message"] = None

    model_config = {"populate_by_name": True}


class User(BaseModel):
    """This object represents a Telegram user or bot."""

    id: int
    is_bot: bool = False
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None

    model_config = {"populate_by_name": True}


class Chat(BaseModel):
    """This object represents a chat.

    ``getChat`` returns the same shape with the optional full-info fields set.
    """

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    photo: Optional["ChatPhoto"] = None
    description: Optional[str] = None
    invite_link: Optional[str] = None
    permissions: Optional["ChatPermissions"] = None

    model_config = {"populate_by_name": True}


class Message(BaseModel):
    """This object represents a message."""

    message_id: int
    date: int
    chat: "Chat"
    from_field: Optional["User"] = Field(None, alias="from")
    text: Optional[str] = None
    caption: Optional[str] = None
    photo: Optional[List["PhotoSize"]] = None
    video: Optional["Video"] = None
    audio: Optional["Audio"] = None
    voice: Optional["Voice"] = None
    document: Optional["Document"] = None
    sticker: Optional["Sticker"] = None

    model_config = {"populate_by_name": True}


class PhotoSize(BaseModel):
    """One size of a photo or a file / sticker thumbnail."""

    file_id: str
    file_unique_id: Optional[str] = None
    width: int
    height: int
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Video(BaseModel):
    """This object represents a video file."""

    file_id: str
    file_unique_id: Optional[str] = None
    width: int
    height: int
    duration: int
    thumbnail: Optional["PhotoSize"] = None
    thumb: Optional["PhotoSize"] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Audio(BaseModel):
    """This object represents an audio file to be treated as music by the Telegram clients."""

    file_id: str
    file_unique_id: Optional[str] = None
    duration: int
    performer: Optional[str] = None
    title: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    thumbnail: Optional["PhotoSize"] = None
    thumb: Optional["PhotoSize"] = None

    model_config = {"populate_by_name": True}


class Voice(BaseModel):
    """This object represents a voice note."""

    file_id: str
    file_unique_id: Optional[str] = None
    duration: int
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Document(BaseModel):
    """This object represents a general file (as opposed to photos, voice messages and audio files)."""

    file_id: str
    file_unique_id: Optional[str] = None
    thumbnail: Optional["PhotoSize"] = None
    thumb: Optional["PhotoSize"] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class Sticker(BaseModel):
    """This object represents a sticker."""

    file_id: str
    file_unique_id: Optional[str] = None
    width: int
    height: int
    is_animated: Optional[bool] = None
    is_video: Optional[bool] = None
    thumbnail: Optional["PhotoSize"] = None
    thumb: Optional["PhotoSize"] = None
    emoji: Optional[str] = None
    set_name: Optional[str] = None
    file_size: Optional[int] = None

    model_config = {"populate_by_name": True}


class UserProfilePhotos(BaseModel):
    """This object represent a user's profile pictures."""

    total_count: int
    photos: List[List["PhotoSize"]]

    model_config = {"populate_by_name": True}


class File(BaseModel):
    """A file ready to be downloaded via ``https://api.telegram.org/file/bot<token>/<file_path>``."""

    file_id: str
    file_unique_id: Optional[str] = None
    file_size: Optional[int] = None
    file_path: Optional[str] = None

    model_config = {"populate_by_name": True}


class ChatPhoto(BaseModel):
    """This object represents a chat photo."""

    small_file_id: str
    small_file_unique_id: Optional[str] = None
    big_file_id: str
    big_file_unique_id: Optional[str] = None

    model_config = {"populate_by_name": True}


class ChatPermissions(BaseModel):
    """Describes actions that a non-administrator user is allowed to take in a chat."""

    can_send_messages: Optional[bool] = None
    can_send_media_messages: Optional[bool] = None
    can_send_polls: Optional[bool] = None
    can_send_other_messages: Optional[bool] = None
    can_add_web_page_previews: Optional[bool] = None
    can_change_info: Optional[bool] = None
    can_invite_users: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    can_manage_topics: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ChatMember(BaseModel):
    """This object contains information about one member of a chat."""

    user: "User"
    status: str
    custom_title: Optional[str] = None
    is_anonymous: Optional[bool] = None
    is_member: Optional[bool] = None
    until_date: Optional[int] = None
    can_be_edited: Optional[bool] = None
    can_manage_chat: Optional[bool] = None
    can_delete_messages: Optional[bool] = None
    can_manage_video_chats: Optional[bool] = None
    can_restrict_members: Optional[bool] = None
    can_promote_members: Optional[bool] = None
    can_change_info: Optional[bool] = None
    can_invite_users: Optional[bool] = None
    can_post_messages: Optional[bool] = None
    can_edit_messages: Optional[bool] = None
    can_pin_messages: Optional[bool] = None
    can_manage_topics: Optional[bool] = None
    can_send_messages: Optional[bool] = None
    can_send_media_messages: Optional[bool] = None
    can_send_polls: Optional[bool] = None
    can_send_other_messages: Optional[bool] = None
    can_add_web_page_previews: Optional[bool] = None

    model_config = {"populate_by_name": True}


class ChatInviteLink(BaseModel):
    """Represents an invite link for a chat."""

    invite_link: str
    creator: Optional["User"] = None
    creates_join_request: Optional[bool] = None
    is_primary: Optional[bool] = None
    is_revoked: Optional[bool] = None
    expire_date: Optional[int] = None
    member_limit: Optional[int] = None

    model_config = {"populate_by_name": True}
