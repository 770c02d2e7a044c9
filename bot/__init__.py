"""Telegram bot layer — polling, dispatch, local projection and entity accessors.

This package may import from ``core/``, ``sdk/`` and ``config`` only.
"""

from bot.chat import Chat
from bot.dispatcher import Dispatcher, classify_message
from bot.enums import ChatMemberType, ChatPhotoSize, ChatType
from bot.payloads import (
    AudioPayload,
    BasePayload,
    DocumentPayload,
    Payload,
    PhotoPayload,
    StickerPayload,
    TextPayload,
    UnknownPayload,
    VideoPayload,
    VoicePayload,
)
from bot.poller import UpdatePoller
from bot.projection import ProjectionWriter
from bot.registry import CRITERIA, CallbackRegistry
from bot.user import User
from bot.wrapper import Bot, is_valid_token

__all__ = [
    # Orchestrator
    "Bot",
    "is_valid_token",
    # Entity accessors
    "User",
    "Chat",
    "ChatType",
    "ChatMemberType",
    "ChatPhotoSize",
    # Pipeline
    "UpdatePoller",
    "ProjectionWriter",
    "Dispatcher",
    "classify_message",
    "CallbackRegistry",
    "CRITERIA",
    # Payloads
    "Payload",
    "BasePayload",
    "TextPayload",
    "PhotoPayload",
    "VideoPayload",
    "AudioPayload",
    "VoicePayload",
    "DocumentPayload",
    "StickerPayload",
    "UnknownPayload",
]
