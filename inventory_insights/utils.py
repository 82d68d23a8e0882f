import math
import re
from datetime import date, datetime, timezone
from typing import Any, Optional

import pandas as pd

MS_PER_DAY = 24 * 60 * 60 * 1000
OLDEST = datetime.min.replace(tzinfo=timezone.utc)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
# pandas resolves these relative to the wall clock; stored dates are never relative
_RELATIVE_DATE_WORDS = frozenset({"now", "today"})


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> datetime:
    """Reference instants default to now; naive datetimes are taken to be UTC."""
    if moment is None:
        return utc_now()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def to_quantity(value: Any) -> int:
    """
    Coerces a stored quantity the way the intake forms always have:
    - ints pass through, floats are truncated toward zero
    - strings contribute their leading integer ("3 boxes" -> 3, "5.7" -> 5)
    - anything else (None, "", NaN, objects) counts as 0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        return int(match.group(1)) if match else 0
    return 0


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parses an ISO-8601 (or otherwise pandas-parseable) timestamp into an aware UTC
    datetime. Date-only strings land on UTC midnight. Returns None when the value
    is missing or cannot be parsed.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        if not value.strip() or value.strip().lower() in _RELATIVE_DATE_WORDS:
            return None
    elif not isinstance(value, (datetime, date, pd.Timestamp)):
        return None

    try:
        parsed = pd.to_datetime(value, utc=True, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None

    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def days_ceil(start: datetime, end: datetime) -> int:
    """Whole days from start to end, rounded up (negative when end precedes start)."""
    millis = (end - start).total_seconds() * 1000
    return math.ceil(millis / MS_PER_DAY)
