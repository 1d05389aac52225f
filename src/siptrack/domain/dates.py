"""Normalisation of loosely formatted timestamps to aware UTC datetimes."""

from __future__ import annotations

from datetime import UTC, date, datetime, time
from typing import Final, Protocol

EPOCH: Final[datetime] = datetime(1970, 1, 1, tzinfo=UTC)

_FALLBACK_FORMATS: Final[tuple[str, ...]] = (
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a, %d %b %Y %H:%M:%S %Z",
)


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_datetime(value: object) -> datetime | None:
    """Return ``value`` as an aware UTC datetime, or ``None`` when it cannot be read.

    Accepts datetimes, dates (as produced by YAML front matter), epoch seconds and
    ISO-8601 style strings. Naive values are taken to be UTC. Never raises.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    if isinstance(value, int | float):
        try:
            return datetime.fromtimestamp(value, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        return _parse_text(value)
    return None


def _parse_text(value: str) -> datetime | None:
    text = value.strip()
    if not text:
        return None
    normalized = text[:-1] + "+00:00" if text.endswith(("Z", "z")) else text
    try:
        return _as_utc(datetime.fromisoformat(normalized))
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))  # noqa: DTZ007
        except ValueError:
            continue
    return None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def latest(*values: datetime | None) -> datetime | None:
    present = [value for value in values if value is not None]
    return max(present) if present else None


def earliest(*values: datetime | None) -> datetime | None:
    present = [value for value in values if value is not None]
    return min(present) if present else None


__all__ = ["EPOCH", "Clock", "earliest", "latest", "normalize_datetime", "utcnow"]
