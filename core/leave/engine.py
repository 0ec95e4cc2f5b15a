"""Leave metrics engine.

Pure functions over canonical holidays. Given a selected date range and an
optional state, computes how many days off a leave request yields and how
many leave and school days it costs.

State filtering (applied identically everywhere):
- No selected state: nothing is filtered
- Public holiday: kept if its state_ids contain the selected state, or if
  it has no state_ids at all (universal holiday)
- School holiday: kept only if its state_id equals the selected state;
  a school holiday without a state never survives a selection

Metrics:
- total_days_off: union of selected days, in-range public holidays and
  school holiday days clipped to the range
- leave_days_used: selected days that are neither weekend nor public holiday
  (school holidays do not reduce this)
- school_days_absent: leave days that also fall outside every school holiday
"""

from datetime import date
from typing import Iterable, List, Optional, Sequence, Set

from core.dates import DateLike, get_dates_in_range, is_weekend, normalize_date
from core.models.canonical import DayStatus, LeaveMetrics, PublicHoliday, SchoolHoliday


# =============================================================================
# State Filtering
# =============================================================================

def filter_public_holidays(
    holidays: Iterable[PublicHoliday],
    selected_state_id: Optional[str] = None,
) -> List[PublicHoliday]:
    """Public holidays that apply to the selected state."""
    if not selected_state_id:
        return list(holidays)
    return [
        h for h in holidays
        if not h.state_ids or selected_state_id in h.state_ids
    ]


def filter_school_holidays(
    holidays: Iterable[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> List[SchoolHoliday]:
    """School holidays that apply to the selected state."""
    if not selected_state_id:
        return list(holidays)
    return [h for h in holidays if h.state_id == selected_state_id]


# =============================================================================
# Day Sets
# =============================================================================

def _public_holiday_dates(holidays: Iterable[PublicHoliday]) -> Set[date]:
    return {h.date for h in holidays}


def _school_holiday_dates(
    holidays: Iterable[SchoolHoliday],
    start: date,
    end: date,
) -> Set[date]:
    """Days of every school holiday clipped to [start, end]."""
    days: Set[date] = set()
    for h in holidays:
        first = max(h.start_date, start)
        last = min(h.end_date, end)
        days.update(get_dates_in_range(first, last))
    return days


# =============================================================================
# Metrics
# =============================================================================

def calculate_total_days_off(
    start: Optional[DateLike],
    end: Optional[DateLike],
    public_holidays: Sequence[PublicHoliday],
    school_holidays: Sequence[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> int:
    """Number of distinct days off in the range, holidays included."""
    if start is None or end is None:
        return 0
    first, last = normalize_date(start), normalize_date(end)
    days = set(get_dates_in_range(first, last))

    for d in _public_holiday_dates(filter_public_holidays(public_holidays, selected_state_id)):
        if first <= d <= last:
            days.add(d)

    days |= _school_holiday_dates(
        filter_school_holidays(school_holidays, selected_state_id), first, last
    )
    return len(days)


def _leave_days(
    start: DateLike,
    end: DateLike,
    public_holidays: Sequence[PublicHoliday],
    selected_state_id: Optional[str],
) -> List[date]:
    holiday_dates = _public_holiday_dates(filter_public_holidays(public_holidays, selected_state_id))
    return [
        d for d in get_dates_in_range(start, end)
        if not is_weekend(d) and d not in holiday_dates
    ]


def calculate_leave_days_used(
    start: Optional[DateLike],
    end: Optional[DateLike],
    public_holidays: Sequence[PublicHoliday],
    selected_state_id: Optional[str] = None,
) -> int:
    """Working days in the range that need a leave day."""
    if start is None or end is None:
        return 0
    return len(_leave_days(start, end, public_holidays, selected_state_id))


def calculate_school_days_absent(
    start: Optional[DateLike],
    end: Optional[DateLike],
    public_holidays: Sequence[PublicHoliday],
    school_holidays: Sequence[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> int:
    """Leave days that fall on a school day (outside every school holiday)."""
    if start is None or end is None:
        return 0
    first, last = normalize_date(start), normalize_date(end)
    school_dates = _school_holiday_dates(
        filter_school_holidays(school_holidays, selected_state_id), first, last
    )
    return sum(
        1 for d in _leave_days(first, last, public_holidays, selected_state_id)
        if d not in school_dates
    )


def calculate_all_metrics(
    start: Optional[DateLike],
    end: Optional[DateLike],
    public_holidays: Sequence[PublicHoliday],
    school_holidays: Sequence[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> LeaveMetrics:
    """Compute all three leave metrics for a selection.

    An incomplete selection (either bound missing) yields zeros. An
    inverted range yields zeros as well since it contains no days.

    Args:
        start: First selected day
        end: Last selected day
        public_holidays: Canonical public holidays
        school_holidays: Canonical school holidays
        selected_state_id: State to filter holidays by, or None for all

    Returns:
        LeaveMetrics
    """
    if start is None or end is None:
        return LeaveMetrics()

    return LeaveMetrics(
        total_days_off=calculate_total_days_off(
            start, end, public_holidays, school_holidays, selected_state_id
        ),
        leave_days_used=calculate_leave_days_used(
            start, end, public_holidays, selected_state_id
        ),
        school_days_absent=calculate_school_days_absent(
            start, end, public_holidays, school_holidays, selected_state_id
        ),
    )


# =============================================================================
# Day Predicates (calendar highlighting)
# =============================================================================

def is_public_holiday(
    value: DateLike,
    public_holidays: Sequence[PublicHoliday],
    selected_state_id: Optional[str] = None,
) -> bool:
    day = normalize_date(value)
    return any(h.date == day for h in filter_public_holidays(public_holidays, selected_state_id))


def is_date_in_school_holiday(
    value: DateLike,
    school_holidays: Sequence[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> bool:
    day = normalize_date(value)
    return any(
        h.start_date <= day <= h.end_date
        for h in filter_school_holidays(school_holidays, selected_state_id)
    )


def is_holiday(
    value: DateLike,
    public_holidays: Sequence[PublicHoliday],
    school_holidays: Sequence[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> bool:
    """True if the day is a public holiday or inside a school holiday."""
    return (
        is_public_holiday(value, public_holidays, selected_state_id)
        or is_date_in_school_holiday(value, school_holidays, selected_state_id)
    )


def get_day_statuses(
    start: DateLike,
    end: DateLike,
    public_holidays: Sequence[PublicHoliday],
    school_holidays: Sequence[SchoolHoliday],
    selected_state_id: Optional[str] = None,
) -> List[DayStatus]:
    """Highlight flags and holiday names for every day in [start, end]."""
    public = filter_public_holidays(public_holidays, selected_state_id)
    school = filter_school_holidays(school_holidays, selected_state_id)

    statuses = []
    for day in get_dates_in_range(start, end):
        public_names = tuple(h.name for h in public if h.date == day)
        school_names = tuple(h.name for h in school if h.start_date <= day <= h.end_date)
        statuses.append(DayStatus(
            date=day,
            is_weekend=is_weekend(day),
            is_public_holiday=bool(public_names),
            is_school_holiday=bool(school_names),
            public_holiday_names=public_names,
            school_holiday_names=school_names,
        ))
    return statuses
