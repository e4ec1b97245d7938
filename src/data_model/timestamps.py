"""Lenient timestamp parsing for collaborator payloads."""

import math
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

from dateutil import parser as date_parser


_PARTIAL_DEFAULT = datetime(1, 1, 1)  # noqa: DTZ001


def _ensure_aware(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def parse_timestamp(value: object) -> datetime | None:
    """Parse a timestamp leniently.

    Accepts aware or naive datetimes (naive is taken as UTC), ISO-8601
    strings, RFC 2822 strings as found in RSS ``pubDate``, other common
    human-readable formats that carry a year, and epoch seconds.

    Args:
        value: Raw timestamp value.

    Returns:
        Timezone-aware datetime, or None when missing or unparseable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _ensure_aware(value)
    if isinstance(value, int | float):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return _ensure_aware(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return _ensure_aware(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError):
        pass
    try:
        parsed = date_parser.parse(text, default=_PARTIAL_DEFAULT)
    except (ValueError, TypeError, OverflowError):
        return None
    # Bare weekdays, day numbers and times carry no year
    if parsed.year == _PARTIAL_DEFAULT.year:
        return None
    return _ensure_aware(parsed)
