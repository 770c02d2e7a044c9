"""TelegramClient -- service layer for the Telegram Bot API methods the wrapper uses.

Every call is a blocking HTTP GET of the form
``<api_url>/bot<token>/<method>?<urlencoded params>``.  HTTP calls use the
``requests`` library per project standards.

Two levels are exposed:

* :meth:`TelegramClient._get` returns the decoded JSON body and raises
  :class:`~sdk.exceptions.APIException` for non-2xx responses.
* :meth:`TelegramClient.call` (and every endpoint wrapper) never raises for
  remote failures; it returns an :class:`~sdk.models.ApiResponse` whose
  ``ok`` flag the caller checks.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel

from core.logger import WrapperLogger
from sdk.exceptions import APIException
from sdk.models import ApiResponse

logger = WrapperLogger.get_logger()

DEFAULT_API_URL = "https://api.telegram.org"


def encode_params(params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Flatten *params* into values ``requests`` can put in a query string.

    ``None`` values are dropped, booleans become ``"true"`` / ``"false"`` and
    structured values (lists, dicts, models) are JSON-encoded as the Bot API
    expects.
    """
    encoded: Dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, BaseModel):
            encoded[key] = value.model_dump_json(exclude_none=True)
        elif isinstance(value, (dict, list, tuple)):
            encoded[key] = json.dumps(value)
        else:
            encoded[key] = value
    return encoded


class TelegramClient:
    """Client-side service layer for the Telegram Bot API."""

    _DEFAULT_TIMEOUT: int = 10

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL, timeout: int = _DEFAULT_TIMEOUT) -> None:
        """Create a new client for *token*.

        Args:
            token: Raw bot token, also used for file-download URLs.
            api_url: API host, e.g. ``https://api.telegram.org``.
            timeout: Default request timeout in seconds.
        """
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._base_url = f"{self._api_url}/bot{token}"
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def file_url(self, file_path: str) -> str:
        """Return the download URL for a ``File.file_path``."""
        return f"{self._api_url}/file/bot{self._token}/{file_path}"

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _get(self, method: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Send a GET request and return the parsed JSON body.

        Raises:
            APIException: If the response status code is not 2xx.
            requests.RequestException: On transport-level failures.
        """
        url = f"{self._base_url}/{method.lstrip('/')}"
        response = requests.get(url, params=encode_params(params), timeout=timeout or self._timeout)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not response.ok:
            raise APIException(response.status_code, body)
        return body

    def call(self, method: str, params: Optional[Dict[str, Any]] = None, timeout: Optional[float] = None) -> ApiResponse:
        """Invoke *method* and wrap the outcome in an :class:`ApiResponse`.

        Remote errors, HTTP errors and transport errors all come back as
        ``ApiResponse(ok=False, ...)`` and are logged at WARNING.
        """
        try:
            body = self._get(method, params, timeout=timeout)
        except APIException as exc:
            logger.warning(
                "Telegram API error",
                extra={"api_endpoint": method, "status_code": exc.status_code, "description": exc.response_body.get("description")},
            )
            return ApiResponse.failure(
                exc.response_body.get("description", str(exc)),
                exc.response_body.get("error_code", exc.status_code),
            )
        except requests.RequestException as exc:
            logger.warning("Telegram request error", extra={"api_endpoint": method, "error": str(exc)})
            return ApiResponse.failure(str(exc))

        if not isinstance(body, dict) or "ok" not in body:
            logger.warning("Telegram response is not a Bot API envelope", extra={"api_endpoint": method})
            return ApiResponse.failure("Malformed response body")

        response = ApiResponse.model_validate(body)
        if not response.ok:
            logger.warning(
                "Telegram returned ok=false",
                extra={"api_endpoint": method, "error_code": response.error_code, "description": response.description},
            )
        return response

    # ------------------------------------------------------------------
    #  Endpoints
    # ------------------------------------------------------------------

    def get_me(self) -> ApiResponse:
        """A simple method for testing your bot's auth token. Returns basic information about the bot."""
        return self.call("getMe")

    def get_updates(self, offset: Optional[int] = None, limit: Optional[int] = 100, timeout: Optional[int] = 0, allowed_updates: Optional[List[str]] = None) -> ApiResponse:
        """Receive incoming updates using long polling.

        The HTTP timeout is stretched past the long-poll *timeout* so the
        server can hold the request open.
        """
        payload: Dict[str, Any] = {}
        if offset is not None:
            payload["offset"] = offset
        if limit is not None:
            payload["limit"] = limit
        if timeout is not None:
            payload["timeout"] = timeout
        if allowed_updates is not None:
            payload["allowed_updates"] = list(allowed_updates)
        return self.call("getUpdates", payload, timeout=self._timeout + (timeout or 0))

    def send_message(self, chat_id: Union[int, str], text: str, parse_mode: Optional[str] = None, disable_notification: Optional[bool] = None) -> ApiResponse:
        """Send a text message. On success, the sent Message is returned."""
        payload: Dict[str, Any] = {}
        payload["chat_id"] = chat_id
        payload["text"] = text
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if disable_notification is not None:
            payload["disable_notification"] = disable_notification
        return self.call("sendMessage", payload)

    def get_file(self, file_id: str) -> ApiResponse:
        """Get basic info about a file and prepare it for downloading."""
        return self.call("getFile", {"file_id": file_id})

    def get_chat(self, chat_id: Union[int, str]) -> ApiResponse:
        """Get up to date information about the chat."""
        return self.call("getChat", {"chat_id": chat_id})

    def get_user_profile_photos(self, user_id: int, offset: Optional[int] = None, limit: Optional[int] = None) -> ApiResponse:
        """Get a list of profile pictures for a user."""
        payload: Dict[str, Any] = {"user_id": user_id}
        if offset is not None:
            payload["offset"] = offset
        if limit is not None:
            payload["limit"] = limit
        return self.call("getUserProfilePhotos", payload)

    def get_chat_member(self, chat_id: Union[int, str], user_id: int) -> ApiResponse:
        return self.call("getChatMember", {"chat_id": chat_id, "user_id": user_id})

    def get_chat_administrators(self, chat_id: Union[int, str]) -> ApiResponse:
        return self.call("getChatAdministrators", {"chat_id": chat_id})

    def get_chat_member_count(self, chat_id: Union[int, str]) -> ApiResponse:
        return self.call("getChatMemberCount", {"chat_id": chat_id})

    def set_chat_permissions(self, chat_id: Union[int, str], permissions: Union[Dict[str, Any], BaseModel]) -> ApiResponse:
        return self.call("setChatPermissions", {"chat_id": chat_id, "permissions": permissions})

    def set_chat_title(self, chat_id: Union[int, str], title: str) -> ApiResponse:
        return self.call("setChatTitle", {"chat_id": chat_id, "title": title})

    def set_chat_description(self, chat_id: Union[int, str], description: str) -> ApiResponse:
        return self.call("setChatDescription", {"chat_id": chat_id, "description": description})

    def pin_chat_message(self, chat_id: Union[int, str], message_id: int, disable_notification: Optional[bool] = None) -> ApiResponse:
        payload: Dict[str, Any] = {"chat_id": chat_id, "message_id": message_id}
        if disable_notification is not None:
            payload["disable_notification"] = disable_notification
        return self.call("pinChatMessage", payload)

    def create_chat_invite_link(self, chat_id: Union[int, str], expire_date: Optional[int] = None, member_limit: Optional[int] = None, creates_join_request: Optional[bool] = None) -> ApiResponse:
        """Create an additional invite link for a chat.

        *member_limit* and *creates_join_request* are mutually exclusive on
        the server side.
        """
        payload: Dict[str, Any] = {"chat_id": chat_id}
        if expire_date is not None:
            payload["expire_date"] = expire_date
        if member_limit is not None:
            payload["member_limit"] = member_limit
        if creates_join_request is not None:
            payload["creates_join_request"] = creates_join_request
        return self.call("createChatInviteLink", payload)

    def revoke_chat_invite_link(self, chat_id: Union[int, str], invite_link: str) -> ApiResponse:
        return self.call("revokeChatInviteLink", {"chat_id": chat_id, "invite_link": invite_link})

    def approve_chat_join_request(self, chat_id: Union[int, str], user_id: int) -> ApiResponse:
        return self.call("approveChatJoinRequest", {"chat_id": chat_id, "user_id": user_id})

    def decline_chat_join_request(self, chat_id: Union[int, str], user_id: int) -> ApiResponse:
        return self.call("declineChatJoinRequest", {"chat_id": chat_id, "user_id": user_id})
