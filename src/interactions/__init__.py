"""Interaction tracking and like collaborators for the feed engine."""

from src.interactions.keywords import extract_keywords
from src.interactions.likes import LikeLedger
from src.interactions.models import (
    InteractionLog,
    InteractionRecord,
    ItemCounters,
    LikeRecord,
)
from src.interactions.protocols import InteractionSource, LikeSource
from src.interactions.tracker import InteractionTracker


__all__ = [
    "InteractionLog",
    "InteractionRecord",
    "InteractionSource",
    "InteractionTracker",
    "ItemCounters",
    "LikeLedger",
    "LikeRecord",
    "LikeSource",
    "extract_keywords",
]
