"""In-memory like relation standing in for the social backend."""

from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime

import structlog

from src.interactions.keywords import extract_keywords
from src.interactions.models import LikeRecord


logger = structlog.get_logger()


class LikeLedger:
    """Likes keyed by (item ID, user ID)."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        """Initialize the ledger.

        Args:
            clock: Source of the current time.
        """
        self._clock = clock or (lambda: datetime.now(UTC))
        self._likes: dict[tuple[str, str], LikeRecord] = {}
        self._log = logger.bind(component="interactions", subcomponent="likes")

    def toggle_like(
        self,
        item_id: str,
        user_id: str,
        *,
        source: str | None = None,
        category: str | None = None,
        text: str | None = None,
    ) -> bool | None:
        """Like or unlike an item.

        Args:
            item_id: Item to toggle.
            user_id: Acting user.
            source: Item source stored for recommendations.
            category: Item category stored for recommendations.
            text: Title and summary used to derive keywords.

        Returns:
            True when liked, False when unliked, None for missing identifiers.
        """
        if not item_id or not user_id:
            self._log.warning("like_missing_identifier", item_id=item_id, user_id=user_id)
            return None

        key = (item_id, user_id)
        if key in self._likes:
            del self._likes[key]
            self._log.debug("like_removed", item_id=item_id)
            return False

        self._likes[key] = LikeRecord(
            item_id=item_id,
            user_id=user_id,
            source=source,
            category=category,
            keywords=tuple(extract_keywords(text)),
            created_at=self._clock(),
        )
        self._log.debug("like_added", item_id=item_id)
        return True

    def likes_for_user(self, user_id: str) -> list[LikeRecord]:
        """Return the likes of one user in insertion order."""
        return [like for (_, uid), like in self._likes.items() if uid == user_id]

    def liked_by(self, item_id: str) -> list[str]:
        """Return the users who liked an item."""
        return [uid for (iid, uid) in self._likes if iid == item_id]

    def like_counts(self) -> dict[str, int]:
        """Return aggregate like counts per item."""
        return dict(Counter(item_id for item_id, _ in self._likes))
