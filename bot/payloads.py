"""Normalized callback payloads — one model per message content kind.

Every payload carries the common fields ``from`` (sender id), ``chat``
(chat id) and ``message`` (the raw message dict exactly as received), plus a
``kind`` discriminator and the kind-specific data.  ``to_dict()`` returns the
wire-style mapping, e.g. for a photo::

    {"photo_sizes": {"small": ..., "medium": ..., "large": ...},
     "from": 42, "chat": 42, "message": {...}}
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from sdk.models import Message, PhotoSize


class BasePayload(BaseModel):
    from_id: Optional[int] = Field(None, alias="from")
    chat_id: int = Field(alias="chat")
    message: dict[str, Any]

    model_config = {"populate_by_name": True}

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude={"kind"})


class TextPayload(BasePayload):
    kind: Literal["text"] = "text"
    text: str


class PhotoSizes(BaseModel):
    small: Optional[str] = None
    medium: Optional[str] = None
    large: Optional[str] = None


class PhotoPayload(BasePayload):
    kind: Literal["photo"] = "photo"
    photo_sizes: PhotoSizes


class VideoInfo(BaseModel):
    file_id: str
    width: int
    height: int
    duration: int
    file_size: Optional[int] = None
    filename: Optional[str] = None
    thumb: Optional[str] = None


class VideoPayload(BasePayload):
    kind: Literal["video"] = "video"
    video: VideoInfo


class AudioInfo(BaseModel):
    file_id: str
    duration: int
    performer: Optional[str] = None
    title: Optional[str] = None
    filename: Optional[str] = None
    thumb: Optional[str] = None


class AudioPayload(BasePayload):
    kind: Literal["audio"] = "audio"
    audio: AudioInfo


class VoiceInfo(BaseModel):
    file_id: str
    duration: int
    file_size: Optional[int] = None


class VoicePayload(BasePayload):
    kind: Literal["voice"] = "voice"
    voice: VoiceInfo


class DocumentInfo(BaseModel):
    file_id: str
    filename: Optional[str] = None
    file_size: Optional[int] = None
    thumb: Optional[str] = None


class DocumentPayload(BasePayload):
    kind: Literal["document"] = "document"
    document: DocumentInfo


class StickerInfo(BaseModel):
    file_id: str
    width: int
    height: int
    file_size: Optional[int] = None
    thumb: Optional[str] = None
    emoji: Optional[str] = None
    set_name: Optional[str] = None
    is_animated: Optional[bool] = None
    is_video: Optional[bool] = None


class StickerPayload(BasePayload):
    kind: Literal["sticker"] = "sticker"
    sticker: StickerInfo


class UnknownPayload(BasePayload):
    """Content the wrapper does not classify; only the common fields are set."""

    kind: Literal["unknown"] = "unknown"


Payload = Annotated[
    Union[
        TextPayload,
        PhotoPayload,
        VideoPayload,
        AudioPayload,
        VoicePayload,
        DocumentPayload,
        StickerPayload,
        UnknownPayload,
    ],
    Field(discriminator="kind"),
]


_PAYLOAD_ADAPTER: TypeAdapter[Payload] = TypeAdapter(Payload)


def _thumb_id(media: Any) -> Optional[str]:
    # Bot API 6.6 renamed ``thumb`` to ``thumbnail``; accept either.
    thumb = getattr(media, "thumbnail", None) or getattr(media, "thumb", None)
    return thumb.file_id if thumb is not None else None


def _size_at(sizes: list[PhotoSize], index: int) -> Optional[str]:
    return sizes[index].file_id if len(sizes) > index else None


def _content(message_type: str, message: Message) -> dict[str, Any]:
    """Kind-specific payload fields of *message*."""
    if message_type == "text":
        return {"text": message.text}

    if message_type == "photo":
        sizes = message.photo or []
        return {"photo_sizes": {"small": _size_at(sizes, 0), "medium": _size_at(sizes, 1), "large": _size_at(sizes, 2)}}

    if message_type == "video":
        video = message.video
        return {
            "video": {
                "file_id": video.file_id,
                "width": video.width,
                "height": video.height,
                "duration": video.duration,
                "file_size": video.file_size,
                "filename": video.file_name,
                "thumb": _thumb_id(video),
            }
        }

    if message_type == "audio":
        audio = message.audio
        return {
            "audio": {
                "file_id": audio.file_id,
                "duration": audio.duration,
                "performer": audio.performer,
                "title": audio.title,
                "filename": audio.file_name,
                "thumb": _thumb_id(audio),
            }
        }

    if message_type == "voice":
        voice = message.voice
        return {"voice": {"file_id": voice.file_id, "duration": voice.duration, "file_size": voice.file_size}}

    if message_type == "document":
        document = message.document
        return {
            "document": {
                "file_id": document.file_id,
                "filename": document.file_name,
                "file_size": document.file_size,
                "thumb": _thumb_id(document),
            }
        }

    if message_type == "sticker":
        sticker = message.sticker
        return {
            "sticker": {
                "file_id": sticker.file_id,
                "width": sticker.width,
                "height": sticker.height,
                "file_size": sticker.file_size,
                "thumb": _thumb_id(sticker),
                "emoji": sticker.emoji,
                "set_name": sticker.set_name,
                "is_animated": sticker.is_animated,
                "is_video": sticker.is_video,
            }
        }

    return {}


def build_payload(message_type: str, message: Message, raw: dict[str, Any]) -> Payload:
    """Build the payload for *message* already classified as *message_type*."""
    data: dict[str, Any] = {
        "kind": message_type,
        "from": message.from_field.id if message.from_field else None,
        "chat": message.chat.id,
        "message": raw,
        **_content(message_type, message),
    }
    return _PAYLOAD_ADAPTER.validate_python(data)
