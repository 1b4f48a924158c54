"""ISO week helpers.

Weeks run Monday (0) through Sunday (6) regardless of locale.

``get_week_id`` follows the ISO rule (the week belongs to the year that owns its
Thursday). ``get_week_start``/``get_week_end`` only look at the date's own
Monday-to-Sunday week. Near a year boundary the two can disagree about which
year a date belongs to; callers rely on both as they are.
"""
import math
import re
from datetime import date, datetime, time, timedelta

from ..exceptions import InvalidWeekIdError

WEEK_ID_RE = re.compile(r"^(\d{4})-W(\d{2})$")
DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _as_date(d: date | datetime | None) -> date:
    if d is None:
        return date.today()
    if isinstance(d, datetime):
        return d.date()
    return d


def get_week_id(d: date | datetime | None = None) -> str:
    """Return the ISO week id for ``d`` (default: today), e.g. "2026-W07"."""
    day = _as_date(d)
    thursday = day + timedelta(days=3 - day.weekday())
    year_start = date(thursday.year, 1, 1)
    week = math.ceil(((thursday - year_start).days + 1) / 7)
    return f"{thursday.year}-W{week:02d}"


def get_week_start(d: date | datetime | None = None) -> datetime:
    """Monday 00:00 of the week containing ``d``."""
    day = _as_date(d)
    return datetime.combine(day - timedelta(days=day.weekday()), time.min)


def get_week_end(d: date | datetime | None = None) -> datetime:
    """Sunday 23:59:59.999 of the week containing ``d``."""
    start = get_week_start(d) + timedelta(days=6)
    return start.replace(hour=23, minute=59, second=59, microsecond=999000)


def day_of_week(d: date | datetime) -> int:
    return d.weekday()


def parse_week_id(week_id: str) -> tuple[int, int]:
    match = WEEK_ID_RE.match(week_id.strip())
    if not match:
        raise InvalidWeekIdError(f"Invalid week id {week_id!r}, expected YYYY-Www")
    year, week = int(match.group(1)), int(match.group(2))
    if not 1 <= week <= 53:
        raise InvalidWeekIdError(f"Invalid week number in {week_id!r}")
    return year, week


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}m"
    if minutes % 60 == 0:
        return f"{minutes // 60}h"
    # tenths of an hour, ties rounded up (75m is 1.3h)
    tenths = math.floor(minutes / 6 + 0.5)
    return f"{tenths / 10:.1f}h"
