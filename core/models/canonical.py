"""Core canonical data models - schema-independent holiday/state entities.

These models represent CMS records after normalization, in a shape that is
independent of how any particular Webflow site names or types its fields.
Schema-specific field lookups are handled in /core/discovery/ and
/core/processing/.

All canonical entities are frozen: they are built once per fetch cycle and
never mutated afterwards.
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_validators import BeforeValidator
from typing_extensions import Annotated

from core.dates import normalize_date, parse_webflow_date


# =============================================================================
# Value Parsers (handle dates arriving as ISO strings or datetimes)
# =============================================================================

def _parse_date(value):
    """Parse a calendar date from a date, datetime or ISO-8601 string."""
    if value is None:
        return None
    if isinstance(value, (dt.date, dt.datetime)):
        return normalize_date(value)
    if isinstance(value, str):
        parsed = parse_webflow_date(value)
        if parsed is None:
            raise ValueError(f"Cannot parse date: {value}")
        return parsed
    return value


def _parse_state_ids(value):
    """Accept any iterable of ids (lists from JSON) and freeze it."""
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


DateValue = Annotated[dt.date, BeforeValidator(_parse_date)]
StateIds = Annotated[Tuple[str, ...], BeforeValidator(_parse_state_ids)]


# =============================================================================
# Base Model
# =============================================================================

class CanonicalBase(BaseModel):
    """Base model for all canonical data structures."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# =============================================================================
# Holidays and States
# =============================================================================

class PublicHoliday(CanonicalBase):
    """A single-day public holiday.

    An empty ``state_ids`` means the holiday is not tied to any state and
    applies everywhere.
    """
    id: str
    date: DateValue
    name: str
    state_ids: StateIds = Field(default=(), alias="stateIds")


class SchoolHoliday(CanonicalBase):
    """A school holiday period, inclusive of both ends, for at most one state."""
    id: str
    start_date: DateValue = Field(..., alias="startDate")
    end_date: DateValue = Field(..., alias="endDate")
    name: str
    state_id: Optional[str] = Field(default=None, alias="stateId")


class StateEntity(CanonicalBase):
    """A state/region that holidays can be filtered by."""
    id: str
    name: str
    slug: str = ""
    abbreviation: str = ""


# =============================================================================
# Engine Outputs
# =============================================================================

class LeaveMetrics(CanonicalBase):
    """Leave-planning metrics for a selected date range."""
    total_days_off: int = Field(default=0, alias="totalDaysOff")
    leave_days_used: int = Field(default=0, alias="leaveDaysUsed")
    school_days_absent: int = Field(default=0, alias="schoolDaysAbsent")


class DayStatus(CanonicalBase):
    """Highlight flags for one calendar day."""
    date: DateValue
    is_weekend: bool = Field(default=False, alias="isWeekend")
    is_public_holiday: bool = Field(default=False, alias="isPublicHoliday")
    is_school_holiday: bool = Field(default=False, alias="isSchoolHoliday")
    public_holiday_names: Tuple[str, ...] = Field(default=(), alias="publicHolidayNames")
    school_holiday_names: Tuple[str, ...] = Field(default=(), alias="schoolHolidayNames")

    @property
    def is_holiday(self) -> bool:
        return self.is_public_holiday or self.is_school_holiday


class CalendarData(CanonicalBase):
    """Everything one fetch cycle hands to the UI."""
    public_holidays: List[PublicHoliday] = Field(default_factory=list, alias="publicHolidays")
    school_holidays: List[SchoolHoliday] = Field(default_factory=list, alias="schoolHolidays")
    states: List[StateEntity] = Field(default_factory=list)
    enable_state_filter: bool = Field(default=False, alias="enableStateFilter")
    default_state_id: Optional[str] = Field(default=None, alias="defaultStateId")
