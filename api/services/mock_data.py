"""
Mock Data Service for the Calendar API.

Provides realistic calendar data for development and UI work without a
Webflow site. Enabled with CALENDAR_USE_MOCK_DATA=true.
"""

from datetime import date
from typing import List, Optional

from core.models.canonical import CalendarData, PublicHoliday, SchoolHoliday, StateEntity
from workflows.calendar_sync import select_default_state


# =============================================================================
# MOCK STATES
# =============================================================================

MOCK_STATES: List[StateEntity] = [
    StateEntity(id="state1", name="New South Wales", slug="nsw", abbreviation="NSW"),
    StateEntity(id="state2", name="Victoria", slug="vic", abbreviation="VIC"),
]


# =============================================================================
# MOCK PUBLIC HOLIDAYS
# =============================================================================

MOCK_PUBLIC_HOLIDAYS: List[PublicHoliday] = [
    PublicHoliday(id="ph1", date=date(2025, 1, 1), name="New Year's Day", state_ids=("state1", "state2")),
    PublicHoliday(id="ph2", date=date(2025, 1, 26), name="Australia Day", state_ids=("state1",)),
    PublicHoliday(id="ph3", date=date(2025, 3, 17), name="St. Patrick's Day", state_ids=("state2",)),
    PublicHoliday(id="ph4", date=date(2025, 4, 25), name="ANZAC Day", state_ids=("state1", "state2")),
    PublicHoliday(id="ph5", date=date(2025, 12, 25), name="Christmas Day", state_ids=("state1", "state2")),
    PublicHoliday(id="ph6", date=date(2025, 12, 26), name="Boxing Day", state_ids=("state1", "state2")),
]


# =============================================================================
# MOCK SCHOOL HOLIDAYS
# =============================================================================

def _school(id: str, start: date, end: date, name: str, state_id: str) -> SchoolHoliday:
    return SchoolHoliday(id=id, start_date=start, end_date=end, name=name, state_id=state_id)


MOCK_SCHOOL_HOLIDAYS: List[SchoolHoliday] = [
    _school("sh1", date(2025, 1, 15), date(2025, 1, 31), "Summer Holidays", "state1"),
    _school("sh2", date(2025, 1, 20), date(2025, 2, 5), "Summer Holidays", "state2"),
    _school("sh3", date(2025, 4, 10), date(2025, 4, 27), "Easter Holidays", "state1"),
    _school("sh4", date(2025, 4, 12), date(2025, 4, 28), "Easter Holidays", "state2"),
    _school("sh5", date(2025, 7, 5), date(2025, 7, 20), "Winter Holidays", "state1"),
    _school("sh6", date(2025, 7, 10), date(2025, 7, 25), "Winter Holidays", "state2"),
    _school("sh7", date(2025, 9, 20), date(2025, 10, 6), "Spring Holidays", "state1"),
    _school("sh8", date(2025, 9, 25), date(2025, 10, 10), "Spring Holidays", "state2"),
    _school("sh9", date(2025, 12, 15), date(2026, 1, 31), "Summer Holidays", "state1"),
    _school("sh10", date(2025, 12, 20), date(2026, 2, 5), "Summer Holidays", "state2"),
]


def get_mock_calendar(default_state: Optional[str] = None) -> CalendarData:
    """Mock calendar data; state filtering is always enabled."""
    return CalendarData(
        public_holidays=list(MOCK_PUBLIC_HOLIDAYS),
        school_holidays=list(MOCK_SCHOOL_HOLIDAYS),
        states=list(MOCK_STATES),
        enable_state_filter=True,
        default_state_id=select_default_state(MOCK_STATES, default_state, True),
    )
