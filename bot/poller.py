"""Update poller — ``getUpdates`` with a persisted offset marker.

The marker is a single document in the ``common`` store under the fixed
``_id`` :data:`OFFSET_MARKER_ID`, holding the highest ``update_id`` already
consumed.  It is upserted, never appended, so at most one marker exists.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from core.logger import WrapperLogger
from core.store import DocumentStore
from sdk.client import TelegramClient

logger = WrapperLogger.get_logger()

OFFSET_MARKER_ID = 2
DEFAULT_ALLOWED_UPDATES: tuple[str, ...] = ("message",)


class UpdatePoller:
    """Fetch new updates and advance the stored offset."""

    def __init__(self, client: TelegramClient, common: DocumentStore) -> None:
        self._client = client
        self._common = common

    def last_update_id(self) -> Optional[int]:
        """Return the highest consumed ``update_id``, or ``None`` before the first batch."""
        marker = self._common.find_by_id(OFFSET_MARKER_ID)
        if marker is None:
            return None
        return marker.get("last_update_id")

    def get_updates(
        self,
        offset: Optional[int] = None,
        limit: int = 100,
        timeout: int = 0,
        allowed_updates: Sequence[str] = DEFAULT_ALLOWED_UPDATES,
    ) -> list[dict[str, Any]]:
        """Return the next batch of raw update dicts.

        Without an explicit *offset* the request starts right after the stored
        marker; with no marker the server's whole buffer is requested.
        A failed call returns an empty list and leaves the marker untouched.
        """
        if offset is None:
            last = self.last_update_id()
            if last is not None:
                offset = last + 1

        response = self._client.get_updates(
            offset=offset, limit=limit, timeout=timeout, allowed_updates=list(allowed_updates)
        )
        if not response.ok:
            logger.warning(
                "getUpdates failed, no updates this cycle",
                extra={"api_endpoint": "getUpdates", "offset": offset, "description": response.description},
            )
            return []

        updates = response.result or []
        if updates:
            last_update_id = updates[-1]["update_id"]
            self._common.update_or_insert({"_id": OFFSET_MARKER_ID, "last_update_id": last_update_id})
            logger.debug("Received updates", extra={"count": len(updates), "last_update_id": last_update_id})
        return updates
