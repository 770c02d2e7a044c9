"""Telegram Bot API SDK — Pydantic models, HTTP client, and exceptions.

Usage::

    from sdk import TelegramClient, APIException
    from sdk.models import ApiResponse, Message, Update
"""

from sdk.client import TelegramClient
from sdk.exceptions import (
    AlreadyInitialized,
    APIException,
    InvalidArgument,
    InvalidToken,
    NotFound,
    NotInitialized,
    WrapperError,
)

__all__ = [
    "TelegramClient",
    "APIException",
    "WrapperError",
    "InvalidArgument",
    "AlreadyInitialized",
    "InvalidToken",
    "NotInitialized",
    "NotFound",
]
