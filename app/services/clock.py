"""
Wall-clock normalisation into the fixed local zone.

The service runs on a single hard-coded UTC offset (``LOCAL_UTC_OFFSET``);
there is no daylight saving and no tz database lookup.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from app.core.config import settings
from app.core.exceptions import InvalidFormat

MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"([0-9]{1,2}):([0-9]{2})")


def parse_utc_offset(offset: str) -> timezone:
    """Turn ``+05:30`` / ``-03:00`` into a fixed :class:`timezone`."""
    sign = 1 if offset[0] == "+" else -1
    hours, minutes = offset[1:].split(":")
    return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))


LOCAL_TZ = parse_utc_offset(settings.LOCAL_UTC_OFFSET)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalise a potentially-naive timestamp to UTC-aware.

    SQLite hands timezone-aware columns back naive; everything stored is UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def to_local(instant: datetime) -> datetime:
    return ensure_utc(instant).astimezone(LOCAL_TZ)


def to_local_minutes(instant: datetime) -> int:
    """Minutes since local midnight, in ``[0, 1440)``."""
    local = to_local(instant)
    return local.hour * 60 + local.minute


def local_date(instant: datetime) -> str:
    """Civil date of *instant* in the local zone, ``YYYY-MM-DD``."""
    return to_local(instant).strftime("%Y-%m-%d")


def month_label(instant: datetime) -> str:
    """``YYYY-MM`` of *instant* in the local zone."""
    return to_local(instant).strftime("%Y-%m")


def format_minutes(minutes: int) -> str:
    """Inverse of :func:`parse_shift_boundary`; wraps past midnight."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_shift_boundary(text: str) -> int:
    """Parse ``HH:MM`` (hour may be one digit) into minutes since midnight."""
    match = _HHMM_RE.fullmatch(text or "")
    if not match:
        raise InvalidFormat(f"Invalid shift time {text!r}: expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidFormat(f"Invalid shift time {text!r}: out of range")
    return hours * 60 + minutes
