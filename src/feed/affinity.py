"""Affinity profile builders.

Both profiles are rebuilt from scratch on every load. The engagement
profile weighs clicks plus meaningful reads; the like profile weighs likes
reported by the social backend. Stale entries and entries beyond the
tracking cap are discarded before aggregation.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TypeVar

import structlog

from src.feed.models import AffinityProfile, AffinityProfiles
from src.interactions.constants import MAX_TRACKED, RETENTION_DAYS
from src.interactions.models import InteractionLog, InteractionRecord, LikeRecord


logger = structlog.get_logger()

T = TypeVar("T")

RawLog = InteractionLog | Mapping[str, object] | str | bytes | None


@dataclass(frozen=True)
class _Contribution:
    item_id: str
    source: str | None
    category: str | None
    keywords: tuple[str, ...]
    weight: float


def _coerce_log(log: RawLog) -> InteractionLog:
    """Turn a raw log payload into an InteractionLog.

    Raises:
        ValueError: If the payload fails to parse or validate.
        TypeError: If the payload has an unsupported type.
    """
    if log is None:
        return InteractionLog()
    if isinstance(log, InteractionLog):
        return log
    if isinstance(log, str | bytes | bytearray):
        return InteractionLog.model_validate_json(log)
    if isinstance(log, Mapping):
        return InteractionLog.model_validate(log)
    msg = f"Unsupported interaction log type: {type(log).__name__}"
    raise TypeError(msg)


def _most_recent(
    entries: Sequence[T],
    touched_at: Callable[[T], datetime | None],
    cutoff: datetime,
    limit: int,
    keep_undated: bool,
) -> list[T]:
    """Drop entries older than ``cutoff`` and keep the ``limit`` newest."""
    fresh = [
        entry
        for entry in entries
        if (ts := touched_at(entry)) is not None and ts > cutoff
    ]
    fresh.sort(key=lambda e: touched_at(e) or cutoff, reverse=True)
    kept = fresh[:limit]
    if keep_undated:
        room = max(limit - len(kept), 0)
        kept.extend([e for e in entries if touched_at(e) is None][:room])
    return kept


def _aggregate(contributions: Iterable[_Contribution]) -> AffinityProfile:
    sources: dict[str, float] = {}
    categories: dict[str, float] = {}
    keywords: dict[str, float] = {}
    acted: set[str] = set()
    total = 0.0

    for c in contributions:
        acted.add(c.item_id)
        total += c.weight
        if c.source:
            sources[c.source] = sources.get(c.source, 0.0) + c.weight
        if c.category:
            categories[c.category] = categories.get(c.category, 0.0) + c.weight
        for kw in c.keywords:
            keywords[kw] = keywords.get(kw, 0.0) + c.weight

    return AffinityProfile(
        sources=sources,
        categories=categories,
        keywords=keywords,
        acted_ids=frozenset(acted),
        total_weight=total,
    )


class ProfileBuilder:
    """Builds like and engagement profiles from an interaction log."""

    def __init__(
        self,
        retention_days: int = RETENTION_DAYS,
        max_tracked: int = MAX_TRACKED,
        now: datetime | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            retention_days: Entries older than this are ignored.
            max_tracked: Maximum number of most recent entries considered.
            now: Reference time for retention.
        """
        self._retention = timedelta(days=retention_days)
        self._max_tracked = max_tracked
        self._now = now or datetime.now(UTC)
        self._log = logger.bind(component="feed", subcomponent="affinity")

    def build(self, log: RawLog) -> AffinityProfiles:
        """Build both profiles.

        Malformed input yields empty profiles rather than an error.

        Args:
            log: Interaction log payload.

        Returns:
            AffinityProfiles with like and engagement profiles.
        """
        try:
            parsed = _coerce_log(log)
        except (ValueError, TypeError) as e:
            self._log.warning("interaction_log_malformed", error=str(e))
            return AffinityProfiles()

        profiles = AffinityProfiles(
            like=self.build_like_profile(parsed.likes),
            engagement=self.build_engagement_profile(parsed.records),
        )
        self._log.debug(
            "profiles_built",
            records_in=len(parsed.records),
            likes_in=len(parsed.likes),
            engagement_weight=profiles.engagement.total_weight,
            like_weight=profiles.like.total_weight,
        )
        return profiles

    def build_engagement_profile(
        self, records: Sequence[InteractionRecord]
    ) -> AffinityProfile:
        """Aggregate clicks plus meaningful reads per source/category/keyword."""
        recent = _most_recent(
            records,
            lambda r: r.last_touch,
            self._now - self._retention,
            self._max_tracked,
            keep_undated=False,
        )
        return _aggregate(
            _Contribution(r.item_id, r.source, r.category, r.keywords, r.engagement_weight)
            for r in recent
            if r.engagement_weight > 0
        )

    def build_like_profile(self, likes: Sequence[LikeRecord]) -> AffinityProfile:
        """Aggregate like weight per source/category/keyword."""
        recent = _most_recent(
            likes,
            lambda like: like.created_at,
            self._now - self._retention,
            self._max_tracked,
            keep_undated=True,
        )
        return _aggregate(
            _Contribution(like.item_id, like.source, like.category, like.keywords, like.weight)
            for like in recent
        )


def build_profiles(
    log: RawLog,
    now: datetime | None = None,
    retention_days: int = RETENTION_DAYS,
    max_tracked: int = MAX_TRACKED,
) -> AffinityProfiles:
    """Pure function API for profile building.

    Args:
        log: Interaction log payload.
        now: Reference time for retention.
        retention_days: Entries older than this are ignored.
        max_tracked: Maximum number of most recent entries considered.

    Returns:
        AffinityProfiles with like and engagement profiles.
    """
    builder = ProfileBuilder(
        retention_days=retention_days, max_tracked=max_tracked, now=now
    )
    return builder.build(log)
