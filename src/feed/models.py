"""Data models for the feed ranking engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import AliasChoices, Field, field_validator

from src.data_model import LenientBaseModel, StrictBaseModel, parse_timestamp
from src.feed.text import title_case


class NewsItem(LenientBaseModel):
    """A short news item as delivered by the live-update transport.

    Items are immutable once ingested and are replaced wholesale on each
    snapshot.

    Attributes:
        id: Stable item identifier.
        title: Headline.
        summary: Short summary text.
        source: Publisher name.
        category: Editorial category, if known.
        published_at: Publish time; None when missing or unparseable.
        link: Canonical URL.
        image_url: Optional image URL.
        regions: Optional region tags.
        keywords: Optional precomputed keywords.
    """

    id: Annotated[str, Field(min_length=1)]
    title: str = ""
    summary: str = ""
    source: str = ""
    category: str | None = None
    published_at: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("published_at", "pubDate", "pub_date"),
    )
    link: str | None = None
    image_url: str | None = Field(
        default=None, validation_alias=AliasChoices("image_url", "image")
    )
    regions: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()

    @field_validator("published_at", mode="before")
    @classmethod
    def parse_published_at(cls, value: object) -> datetime | None:
        """Map missing or invalid timestamps to None instead of failing."""
        return parse_timestamp(value)

    @field_validator("category", mode="before")
    @classmethod
    def blank_category_to_none(cls, value: object) -> object:
        """Treat empty categories as absent."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def match_text(self) -> str:
        """Lowercased title and summary used for substring matching."""
        return f"{self.title} {self.summary}".lower()

    def age_hours(self, now: datetime) -> float | None:
        """Age in hours relative to ``now``; future timestamps count as zero."""
        if self.published_at is None:
            return None
        return max((now - self.published_at).total_seconds() / 3600.0, 0.0)


class PhraseKind(str, Enum):
    """Kind of trending entry."""

    PHRASE = "phrase"
    WORD = "word"


@dataclass(frozen=True)
class TrendingPhrase:
    """A trending bigram or standalone word.

    Attributes:
        text: Lowercased phrase or word.
        count: Occurrence count in the current pool.
        kind: Whether this is a bigram or a standalone word.
    """

    text: str
    count: int
    kind: PhraseKind

    @property
    def words(self) -> list[str]:
        """Words making up the entry."""
        return self.text.split(" ")

    @property
    def display_text(self) -> str:
        """Title-cased text for display."""
        return title_case(self.text)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        return {
            "text": self.text,
            "display_text": self.display_text,
            "count": self.count,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class AffinityProfile:
    """Aggregated interaction weight per source, category and keyword.

    Attributes:
        sources: Source name to weighted count.
        categories: Category to weighted count.
        keywords: Keyword to weighted count.
        acted_ids: Item IDs already acted upon.
        total_weight: Sum of entry weights.
    """

    sources: dict[str, float] = field(default_factory=dict)
    categories: dict[str, float] = field(default_factory=dict)
    keywords: dict[str, float] = field(default_factory=dict)
    acted_ids: frozenset[str] = frozenset()
    total_weight: float = 0.0

    @classmethod
    def empty(cls) -> "AffinityProfile":
        """Profile with no history."""
        return cls()

    @property
    def is_empty(self) -> bool:
        """Whether the profile carries no signal."""
        return not self.acted_ids and self.total_weight == 0.0

    def source_count(self, source: str) -> float:
        """Weighted count for a source."""
        return self.sources.get(source, 0.0)

    def category_count(self, category: str | None) -> float:
        """Weighted count for a category."""
        if category is None:
            return 0.0
        return self.categories.get(category, 0.0)

    def matched_keywords(self, keywords: list[str] | tuple[str, ...]) -> int:
        """Number of distinct given keywords present in the profile."""
        return sum(1 for kw in set(keywords) if self.keywords.get(kw, 0.0) > 0)

    def has_acted(self, item_id: str) -> bool:
        """Whether the item was already acted upon."""
        return item_id in self.acted_ids


@dataclass(frozen=True)
class AffinityProfiles:
    """The like-based and engagement-based profiles."""

    like: AffinityProfile = field(default_factory=AffinityProfile.empty)
    engagement: AffinityProfile = field(default_factory=AffinityProfile.empty)


@dataclass(frozen=True)
class ScoreComponents:
    """Breakdown of an item's score.

    Attributes:
        freshness: Freshness signal before weighting.
        trending: Trending match signal before weighting.
        like_affinity: Like-profile match before weighting.
        engagement_affinity: Engagement-profile match before weighting.
        weighted_sum: Weighted signal sum.
        seen_penalty: Penalty for prior views.
        clicked_penalty: Penalty for an already-opened item.
        session_penalty: Penalty for an item rendered earlier this session.
        jitter: Tie-breaking jitter draw.
        total: Final score.
    """

    freshness: float
    trending: float
    like_affinity: float
    engagement_affinity: float
    weighted_sum: float
    seen_penalty: float = 0.0
    clicked_penalty: float = 0.0
    session_penalty: float = 0.0
    jitter: float = 0.0
    total: float = 0.0

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "freshness": self.freshness,
            "trending": self.trending,
            "like_affinity": self.like_affinity,
            "engagement_affinity": self.engagement_affinity,
            "weighted_sum": self.weighted_sum,
            "seen_penalty": self.seen_penalty,
            "clicked_penalty": self.clicked_penalty,
            "session_penalty": self.session_penalty,
            "jitter": self.jitter,
            "total": self.total,
        }


@dataclass
class ScoredItem:
    """An item paired with its cached score.

    Attributes:
        item: The scored item.
        score: Score for the current epoch.
        fresh: Whether the item belongs to the fresh pool.
        revealed: Whether the item was just revealed from pending-new.
    """

    item: NewsItem
    score: float
    fresh: bool = False
    revealed: bool = False

    @property
    def item_id(self) -> str:
        """Identifier of the wrapped item."""
        return self.item.id


class RankedEntry(StrictBaseModel):
    """One position of the ordered output.

    Attributes:
        item_id: Item identifier.
        score: Cached score, attached for debugging and tests.
        position: Zero-based position in the ordering.
    """

    item_id: str
    score: float
    position: Annotated[int, Field(ge=0)]


class RenderPass(StrictBaseModel):
    """Output handed to the UI boundary for one render.

    Attributes:
        entries: Ordered visible entries.
        pending_count: New items withheld until reveal.
        total_available: Size of the ranked pool before pagination.
        display_count: Current pagination cursor.
        epoch: Score cache epoch used for this pass.
        scroll_to_top: Whether the UI should scroll to the top.
        revealed_ids: IDs revealed by the action that triggered this pass.
    """

    entries: list[RankedEntry] = Field(default_factory=list)
    pending_count: Annotated[int, Field(ge=0)] = 0
    total_available: Annotated[int, Field(ge=0)] = 0
    display_count: Annotated[int, Field(ge=0)] = 0
    epoch: Annotated[int, Field(ge=0)] = 0
    scroll_to_top: bool = False
    revealed_ids: list[str] = Field(default_factory=list)

    @property
    def item_ids(self) -> list[str]:
        """Ordered item identifiers."""
        return [entry.item_id for entry in self.entries]
