from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

# Order and change log times are stored as naive UTC (DATETIME columns on
# SQLite carry no offset) and serialized with a trailing "Z".


def utcnow() -> datetime:
    return to_naive_utc(datetime.now(timezone.utc))


def to_naive_utc(dt: datetime) -> datetime:
    """Convert an aware datetime to UTC and drop tzinfo; naive input is taken as UTC."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an order/log timestamp.

    Accepts "2020-01-31 23:59:59" (the sample data format), "2020-01-31T23:59:59Z"
    and explicit offsets. Blank input returns None; malformed input raises
    ValueError.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return to_naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Render a stored timestamp as "YYYY-MM-DDTHH:MM:SSZ" (seconds precision)."""
    if dt is None:
        return None
    return to_naive_utc(dt).replace(microsecond=0).isoformat() + "Z"
