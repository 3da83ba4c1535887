# src/storage/recommendation_store.py

"""In-memory holder for the latest externally pushed recommendations."""

import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("storefront.recommendations")


class RecommendationStore:
    """Keeps only the most recent batch; each push replaces the last."""

    def __init__(self) -> None:
        self._items: tuple[dict[str, Any], ...] = ()

    def replace(
        self,
        items: list[dict[str, Any]],
        session_id: str | None = None,
    ) -> int:
        """Store ``items`` stamped with receipt time and session id."""
        received_at = datetime.now(timezone.utc).isoformat()
        self._items = tuple(
            {**item, "receivedAt": received_at, "sessionId": session_id}
            for item in items
        )
        logger.info(
            "Stored %d recommendations (session=%s)",
            len(self._items),
            session_id,
        )
        return len(self._items)

    def items(self) -> list[dict[str, Any]]:
        """A copy of the stored batch."""
        return [dict(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)
