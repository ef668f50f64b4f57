"""Timezone handling shared by the feed, the store and the database layer.

Every helper takes an optional ``tz``; without one the ``APP_TIMEZONE``
setting is used. Database columns hold naive values in that timezone.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from notification_hub.config import get_settings

# "UTC+1", "GMT-03:30", "UTC+0530"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)

Clock = Callable[[], datetime]


def resolve_timezone(name: str | None) -> tzinfo:
    """Map an IANA zone name or a fixed ``UTC±HH:MM`` offset to a ``tzinfo``.

    Blank or unknown names resolve to UTC.
    """

    name = (name or "").strip()
    if not name:
        return timezone.utc

    match = _OFFSET_PATTERN.match(name)
    if match is not None:
        offset = timedelta(hours=int(match["hours"]), minutes=int(match["minutes"] or 0))
        return timezone(-offset if match["sign"] == "-" else offset)

    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    return resolve_timezone(get_settings().app_timezone)


def make_clock(tz: tzinfo) -> Clock:
    """Return a clock reading the current time in ``tz``."""

    def clock() -> datetime:
        return datetime.now(tz)

    return clock


def now_in_app_timezone() -> datetime:
    return datetime.now(get_app_timezone())


def now_in_app_naive_datetime() -> datetime:
    """Current time as stored in ``DateTime`` columns."""

    return now_in_app_timezone().replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None, tz: tzinfo | None = None) -> datetime | None:
    """Express ``value`` in ``tz``; naive values are assumed to already be in it."""

    if value is None:
        return None
    tz = tz or get_app_timezone()
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def ensure_app_naive_datetime(value: datetime | None) -> datetime | None:
    localized = ensure_app_timezone(value)
    return localized.replace(tzinfo=None) if localized is not None else None


def parse_timestamp(value: datetime | str | None, tz: tzinfo | None = None) -> datetime | None:
    """Return an aware datetime for a change-feed timestamp.

    Accepts ISO 8601 strings, including a trailing ``Z``. Unparseable values
    yield ``None``.
    """

    if isinstance(value, datetime):
        return ensure_app_timezone(value, tz)

    text = str(value or "").strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return ensure_app_timezone(parsed, tz)
