"""Leave metrics engine - days off, leave days used, school days absent."""

from core.leave.engine import (
    filter_public_holidays,
    filter_school_holidays,
    calculate_total_days_off,
    calculate_leave_days_used,
    calculate_school_days_absent,
    calculate_all_metrics,
    is_public_holiday,
    is_date_in_school_holiday,
    is_holiday,
    get_day_statuses,
)

__all__ = [
    "filter_public_holidays",
    "filter_school_holidays",
    "calculate_total_days_off",
    "calculate_leave_days_used",
    "calculate_school_days_absent",
    "calculate_all_metrics",
    "is_public_holiday",
    "is_date_in_school_holiday",
    "is_holiday",
    "get_day_statuses",
]
