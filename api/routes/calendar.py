"""Calendar endpoints.

Serves normalized holiday data for a Webflow site and computes leave
metrics and day highlighting for a selected date range.
"""

from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from api.services.mock_data import get_mock_calendar
from connectors.webflow.client import WebflowApiClient, WebflowApiError, WebflowConfigurationError
from core.config import Settings, get_settings
from core.errors import PublicHolidaysCollectionNotFoundError
from core.leave import calculate_all_metrics, get_day_statuses
from core.models.canonical import (
    CalendarData,
    DateValue,
    DayStatus,
    LeaveMetrics,
    PublicHoliday,
    SchoolHoliday,
)
from core.observability.logging import get_logger
from workflows.calendar_sync import sync_calendar


router = APIRouter()
logger = get_logger(__name__)


class RangeRequest(BaseModel):
    """A selected date range plus the holidays to evaluate it against."""
    model_config = ConfigDict(populate_by_name=True)

    start_date: Optional[DateValue] = Field(default=None, alias="startDate")
    end_date: Optional[DateValue] = Field(default=None, alias="endDate")
    public_holidays: List[PublicHoliday] = Field(default_factory=list, alias="publicHolidays")
    school_holidays: List[SchoolHoliday] = Field(default_factory=list, alias="schoolHolidays")
    selected_state_id: Optional[str] = Field(default=None, alias="selectedStateId")


ClientFactory = Callable[[str], WebflowApiClient]


def get_client_factory(settings: Settings = Depends(get_settings)) -> ClientFactory:
    """Build Webflow clients for a site from the current settings."""
    def factory(site_id: str) -> WebflowApiClient:
        return WebflowApiClient.from_settings(settings, site_id=site_id)
    return factory


@router.get("", response_model=CalendarData)
async def get_calendar(
    site_id: Optional[str] = Query(default=None, alias="siteId"),
    default_state: Optional[str] = Query(default=None, alias="defaultState"),
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
) -> CalendarData:
    """Load and normalize the holiday calendar of a site."""
    if settings.use_mock_data:
        return get_mock_calendar(default_state)

    site_id = site_id or settings.webflow_site_id
    if not site_id:
        raise HTTPException(status_code=400, detail="siteId is required")

    try:
        async with client_factory(site_id) as client:
            return await sync_calendar(client, site_id, default_state=default_state)
    except PublicHolidaysCollectionNotFoundError as e:
        raise HTTPException(status_code=424, detail=str(e))
    except WebflowConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))
    except WebflowApiError as e:
        logger.error(
            f"Webflow API error: {e}",
            extra_fields={"site_id": site_id, "status_code": e.status_code},
        )
        raise HTTPException(status_code=502, detail=f"Webflow API error: {e}")


@router.post("/metrics", response_model=LeaveMetrics)
async def get_leave_metrics(request: RangeRequest) -> LeaveMetrics:
    """Days off, leave days used and school days absent for a selection."""
    return calculate_all_metrics(
        request.start_date,
        request.end_date,
        request.public_holidays,
        request.school_holidays,
        request.selected_state_id,
    )


@router.post("/days", response_model=List[DayStatus])
async def get_days(request: RangeRequest) -> List[DayStatus]:
    """Highlight flags for every day of the selection."""
    if request.start_date is None or request.end_date is None:
        raise HTTPException(status_code=400, detail="startDate and endDate are required")

    return get_day_statuses(
        request.start_date,
        request.end_date,
        request.public_holidays,
        request.school_holidays,
        request.selected_state_id,
    )
