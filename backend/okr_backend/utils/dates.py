"""
Date, week and paging helpers shared by services and analytics.
Weeks start on Monday 00:00 local time and are keyed by that Monday's ISO date.
"""

import math
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from okr_backend.core.exceptions import ValidationError

T = TypeVar("T")


def now_local() -> datetime:
    """Naive local wall-clock time; all stored timestamps are compared against it."""
    return datetime.now()


def week_start_monday(value: Union[date, datetime]) -> datetime:
    """Return Monday 00:00 of the week containing value."""
    if isinstance(value, datetime):
        day = value.date()
    else:
        day = value
    monday = day - timedelta(days=day.weekday())
    return datetime(monday.year, monday.month, monday.day)


def week_key(value: Union[date, datetime]) -> str:
    """ISO date of the Monday that starts value's week, e.g. '2025-03-03'."""
    return week_start_monday(value).date().isoformat()


def week_keys(this_week_start: datetime, weeks: int) -> List[str]:
    """Week keys for the last `weeks` weeks, oldest first, ending with the current week."""
    return [
        (this_week_start - timedelta(days=7 * offset)).date().isoformat()
        for offset in range(weeks - 1, -1, -1)
    ]


def parse_date_only(value: Union[None, str, date, datetime]) -> Optional[date]:
    """
    Coerce a stored or submitted value into a calendar date.

    Accepts date objects, datetimes and 'YYYY-MM-DD...' strings; returns None for
    empty or unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def chunk(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Split items into lists of at most `size` elements."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])


def unique(items: Iterable[T]) -> List[T]:
    """De-duplicate while keeping first-seen order."""
    seen = set()
    result = []
    for item in items:
        if item is None or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def clamp_page(
    limit: Optional[int],
    offset: Optional[int],
    default_limit: int,
    max_limit: int,
) -> Tuple[int, int]:
    """Clamp paging parameters; a missing or zero limit falls back to the default."""
    effective = limit or default_limit
    effective = min(max(effective, 1), max_limit)
    return effective, max(offset or 0, 0)


def parse_year(raw: Union[None, str, int, float]) -> int:
    """
    Parse the required `year` query parameter.

    Raises:
        ValidationError: If the value is missing, zero, non-numeric or not finite
    """
    message = 'Query param "year" is required (number)'
    if raw is None or raw == "":
        raise ValidationError(message)
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if not math.isfinite(value) or value == 0 or not value.is_integer():
        raise ValidationError(message)
    return int(value)


def parse_optional_year(raw: Union[None, str, int, float]) -> Optional[int]:
    """Like parse_year but absent values mean 'no filter'."""
    if raw is None or raw == "":
        return None
    return parse_year(raw)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return int(math.floor(value + 0.5))


def round_to(value: float, digits: int) -> float:
    """Round half up to a fixed number of decimals."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
