"""Date utilities for calendar and leave planning calculations.

Calendar dates are plain ``datetime.date`` values. Anything carrying a time
of day is normalized to its calendar date before it enters the canonical
models, so every comparison here is day-granular.
"""

import re
from datetime import date, datetime, timedelta
from typing import List, Optional, Union

DateLike = Union[date, datetime]

# Date-time shape accepted when fromisoformat rejects the fraction or offset width
_ISO_DATETIME = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d+))?)?"
    r"(?:([+-])(\d{2}):?(\d{2}))?$"
)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def normalize_date(value: DateLike) -> date:
    """Return the calendar date of ``value`` with the time of day dropped.

    A new value is always returned; the input is never modified.
    """
    if isinstance(value, datetime):
        return value.date()
    return date(value.year, value.month, value.day)


def is_weekend(value: DateLike) -> bool:
    """True for Saturday and Sunday, using the date's own weekday."""
    return value.weekday() >= 5


def is_same_date(a: DateLike, b: DateLike) -> bool:
    """True iff year, month and day match (time of day ignored)."""
    return (a.year, a.month, a.day) == (b.year, b.month, b.day)


def is_date_in_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    """Inclusive range check. ``start > end`` is the caller's problem."""
    day = normalize_date(value)
    return normalize_date(start) <= day <= normalize_date(end)


def get_dates_in_range(start: DateLike, end: DateLike) -> List[date]:
    """Every calendar day from ``start`` to ``end``, inclusive and ascending.

    Returns an empty list when ``start > end``.
    """
    current = normalize_date(start)
    last = normalize_date(end)
    if current > last:
        return []
    return [current + timedelta(days=offset) for offset in range((last - current).days + 1)]


def parse_webflow_date(text: Optional[str]) -> Optional[date]:
    """Parse an ISO-8601 date or date-time string from the Webflow API.

    The calendar date is taken as written: a trailing ``Z`` or UTC offset is
    discarded rather than converted, so ``2025-01-01T00:00:00.000Z`` is
    always 1 January regardless of the server's timezone.

    Returns None for empty, non-string or malformed input instead of raising.

    Examples:
        >>> parse_webflow_date("2025-01-26T00:00:00.000Z")
        datetime.date(2025, 1, 26)
        >>> parse_webflow_date("not a date") is None
        True
    """
    if not text or not isinstance(text, str):
        return None

    s = text.strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"

    try:
        return normalize_date(datetime.fromisoformat(s))
    except ValueError:
        pass

    # Older interpreters reject fractions that are not 3 or 6 digits long and
    # offsets without a colon; rebuild those into the canonical form.
    match = _ISO_DATETIME.match(s)
    if not match:
        return None
    day, hour, minute, second, fraction, sign, off_hour, off_minute = match.groups()
    canonical = f"{day}T{hour}:{minute}:{second or '00'}.{(fraction or '0')[:6].ljust(6, '0')}"
    if sign:
        canonical += f"{sign}{off_hour}:{off_minute}"
    try:
        return normalize_date(datetime.fromisoformat(canonical))
    except ValueError:
        return None


def format_date(value: DateLike, locale: str = "en-US") -> str:
    """Format a date in long form for display.

    - ``en-US`` → ``January 1, 2025``
    - other English locales (``en-AU``, ``en-GB``, ...) → ``1 January 2025``
    - anything else → ISO ``2025-01-01``
    """
    day = normalize_date(value)
    tag = (locale or "").replace("_", "-").lower()
    month = MONTH_NAMES[day.month - 1]

    if tag in ("en-us", "en"):
        return f"{month} {day.day}, {day.year}"
    if tag.startswith("en-"):
        return f"{day.day} {month} {day.year}"
    return day.isoformat()
