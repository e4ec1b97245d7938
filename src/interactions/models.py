"""Interaction log models shared with the persistence collaborators."""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated

from pydantic import Field, field_validator

from src.data_model import LenientBaseModel, parse_timestamp


class InteractionRecord(LenientBaseModel):
    """Per-item interaction counters kept by the persistence collaborator.

    Attributes:
        item_id: Item identifier.
        source: Publisher of the item, when known.
        category: Category of the item, when known.
        keywords: Keywords describing the item.
        views: Times rendered in the feed.
        rapid_scrolls: Times scrolled past quickly.
        clicks: Times opened.
        dwell_seconds: Cumulative dwell time.
        reads: Dwell observations above the meaningful-read threshold.
        first_touch: First interaction time.
        last_touch: Most recent interaction time.
    """

    item_id: Annotated[str, Field(min_length=1)]
    source: str | None = None
    category: str | None = None
    keywords: tuple[str, ...] = ()
    views: Annotated[int, Field(ge=0)] = 0
    rapid_scrolls: Annotated[int, Field(ge=0)] = 0
    clicks: Annotated[int, Field(ge=0)] = 0
    dwell_seconds: Annotated[float, Field(ge=0.0)] = 0.0
    reads: Annotated[int, Field(ge=0)] = 0
    first_touch: datetime | None = None
    last_touch: datetime | None = None

    @field_validator("first_touch", "last_touch", mode="before")
    @classmethod
    def parse_touch_times(cls, value: object) -> datetime | None:
        """Map missing or invalid timestamps to None."""
        return parse_timestamp(value)

    @field_validator("keywords", mode="before")
    @classmethod
    def drop_non_string_keywords(cls, value: object) -> object:
        """Keep only string keywords from loosely-typed payloads."""
        if isinstance(value, list | tuple):
            return tuple(kw for kw in value if isinstance(kw, str) and kw)
        return value

    @property
    def engagement_weight(self) -> int:
        """Clicks plus meaningful reads."""
        return self.clicks + self.reads


class LikeRecord(LenientBaseModel):
    """A like stored by the social backend, with item metadata.

    Attributes:
        item_id: Liked item.
        user_id: User who liked it.
        source: Publisher of the item.
        category: Category of the item.
        keywords: Keywords of the item at like time.
        created_at: Like time.
        weight: Contribution to the like profile.
    """

    item_id: Annotated[str, Field(min_length=1)]
    user_id: str = ""
    source: str | None = None
    category: str | None = None
    keywords: tuple[str, ...] = ()
    created_at: datetime | None = None
    weight: Annotated[float, Field(ge=0.0)] = 1.0

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, value: object) -> datetime | None:
        """Map missing or invalid timestamps to None."""
        return parse_timestamp(value)

    @field_validator("keywords", mode="before")
    @classmethod
    def drop_non_string_keywords(cls, value: object) -> object:
        """Keep only string keywords from loosely-typed payloads."""
        if isinstance(value, list | tuple):
            return tuple(kw for kw in value if isinstance(kw, str) and kw)
        return value


class InteractionLog(LenientBaseModel):
    """Snapshot of the interaction log consumed by profile building."""

    records: list[InteractionRecord] = Field(default_factory=list)
    likes: list[LikeRecord] = Field(default_factory=list)


@dataclass(frozen=True)
class ItemCounters:
    """Interaction counters for one item as seen by the scorer.

    Attributes:
        views: Times the item was rendered in the feed.
        rapid_scrolls: Times the item was scrolled past quickly.
        clicked: Whether the item was opened.
    """

    views: int = 0
    rapid_scrolls: int = 0
    clicked: bool = False

    @classmethod
    def from_record(cls, record: InteractionRecord | None) -> "ItemCounters":
        """Derive counters from a stored record."""
        if record is None:
            return cls()
        return cls(
            views=record.views,
            rapid_scrolls=record.rapid_scrolls,
            clicked=record.clicks > 0,
        )
