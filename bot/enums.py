"""Closed enumerations used by the entity accessors."""

from enum import Enum, IntEnum


class ChatType(str, Enum):
    PRIVATE = "private"
    GROUP = "group"
    SUPERGROUP = "supergroup"
    CHANNEL = "channel"


class ChatMemberType(str, Enum):
    """Chat member kinds, valued by the ``status`` string Telegram sends."""

    OWNER = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    RESTRICTED = "restricted"
    LEFT = "left"
    BANNED = "kicked"


class ChatPhotoSize(IntEnum):
    """Chat photo variants, valued by their edge length in pixels."""

    SMALL = 160
    BIG = 640
