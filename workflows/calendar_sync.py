"""Calendar Sync Workflow for one fetch cycle.

Main workflow that takes a connected Webflow client and coordinates
classification, field discovery, item fetching and normalization.

Steps:
1. List collections and classify them by display name
2. Require a Public Holidays collection (the only mandatory one)
3. Fetch schemas and discover fields (state references resolved against
   the detected States collection)
4. Decide whether state filtering is available
5. Fetch all items of the three collections concurrently
6. Normalize items and pick the default state
"""

import asyncio
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from core.discovery import (
    detect_collections,
    discover_public_holiday_fields,
    discover_school_holiday_fields,
    discover_state_fields,
    should_enable_state_filtering,
)
from core.errors import PublicHolidaysCollectionNotFoundError
from core.models.canonical import CalendarData, StateEntity
from core.observability.logging import (
    get_logger,
    log_stage_complete,
    log_stage_error,
    log_stage_start,
    with_correlation,
)
from core.observability.metrics import (
    record_processing_time,
    record_sync_completed,
    record_sync_failed,
    record_sync_started,
)
from core.processing import process_public_holidays, process_school_holidays, process_states
from core.workflow.base import SyncResult, SyncStatus

logger = get_logger(__name__)


@dataclass
class CalendarSyncInput:
    """Input for Calendar Sync Workflow.

    Attributes:
        site_id: Webflow site ID
        default_state: State id or name to preselect (optional)
    """
    site_id: str
    default_state: Optional[str] = None


def select_default_state(
    states: Sequence[StateEntity],
    default_state: Optional[str],
    enable_state_filter: bool,
) -> Optional[str]:
    """Pick the initially selected state.

    - ``default_state`` matching a state id or name selects that state
    - an unmatched ``default_state`` falls back to the first state
    - without ``default_state``, the first state is selected only when
      state filtering is enabled
    """
    if not states:
        return None
    if default_state:
        for state in states:
            if state.id == default_state or state.name == default_state:
                return state.id
        return states[0].id
    if enable_state_filter:
        return states[0].id
    return None


async def _no_items() -> List[Dict[str, Any]]:
    return []


class CalendarSyncWorkflow:
    """Workflow for loading holiday calendar data from a Webflow site.

    The client must expose ``list_collections``, ``get_collection`` and
    ``fetch_all_collection_items`` (see connectors/webflow/client.py).

    Usage:
        async with WebflowApiClient(site_id, api_token=token) as client:
            result = await CalendarSyncWorkflow(client).run(CalendarSyncInput(site_id))
            calendar = result.calendar
    """

    def __init__(self, client):
        self.client = client

    async def run(self, input: CalendarSyncInput) -> SyncResult:
        """Execute one fetch cycle.

        Args:
            input: CalendarSyncInput with site details

        Returns:
            SyncResult with the normalized CalendarData

        Raises:
            PublicHolidaysCollectionNotFoundError: No Public Holidays collection
            WebflowApiError: Upstream API failures (propagated unchanged)
        """
        result = SyncResult(
            sync_id=str(uuid.uuid4()),
            site_id=input.site_id,
            status=SyncStatus.STARTED,
            started_at=datetime.now(timezone.utc),
        )
        start_time = time.perf_counter()
        record_sync_started(input.site_id)

        with with_correlation(site_id=input.site_id, sync_id=result.sync_id):
            log_stage_start("calendar_sync", default_state=input.default_state)
            try:
                await self._execute(input, result)
            except Exception as e:
                result.status = SyncStatus.FAILED
                result.error_message = str(e)
                result.completed_at = datetime.now(timezone.utc)
                record_sync_failed(input.site_id)
                log_stage_error("calendar_sync", str(e), error_type=type(e).__name__)
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            result.status = SyncStatus.COMPLETED
            result.completed_at = datetime.now(timezone.utc)
            record_sync_completed(input.site_id, duration_ms)
            log_stage_complete(
                "calendar_sync",
                duration_ms=round(duration_ms, 2),
                public_holidays=len(result.calendar.public_holidays),
                school_holidays=len(result.calendar.school_holidays),
                states=len(result.calendar.states),
            )
        return result

    async def _execute(self, input: CalendarSyncInput, result: SyncResult) -> None:
        # Step 1: Classify collections
        result.status = SyncStatus.CLASSIFYING
        with with_correlation(stage="classify"):
            collections = await self.client.list_collections()
            detected = detect_collections(collections)

        # Step 2: Public Holidays is mandatory
        if detected.public_holidays is None:
            raise PublicHolidaysCollectionNotFoundError(site_id=input.site_id)

        result.public_holidays_collection_id = detected.public_holidays.id
        result.school_holidays_collection_id = detected.school_holidays.id if detected.school_holidays else None
        result.states_collection_id = detected.states_collection_id

        # Step 3: Fetch schemas and discover fields
        result.status = SyncStatus.DISCOVERING
        discover_start = time.perf_counter()
        states_collection_id = detected.states_collection_id

        with with_correlation(stage="discover"):
            schema = await self.client.get_collection(detected.public_holidays.id)
            public_fields = discover_public_holiday_fields(schema, states_collection_id)

            school_fields = None
            if detected.school_holidays:
                schema = await self.client.get_collection(detected.school_holidays.id)
                school_fields = discover_school_holiday_fields(schema, states_collection_id)

            state_fields = None
            if detected.states:
                schema = await self.client.get_collection(detected.states.id)
                state_fields = discover_state_fields(schema)

            # Step 4: State filtering availability
            enable_state_filter = should_enable_state_filtering(detected, public_fields, school_fields)

        record_processing_time("discover", (time.perf_counter() - discover_start) * 1000)
        result.public_holiday_fields = public_fields.to_dict()
        result.school_holiday_fields = school_fields.to_dict() if school_fields else {}
        result.state_fields = state_fields.to_dict() if state_fields else {}

        if public_fields.date_field is None:
            logger.warning(
                "No date field found in Public Holidays collection; all items will be dropped",
                extra_fields={"collection_id": detected.public_holidays.id},
            )

        # Step 5: Fetch all items concurrently
        result.status = SyncStatus.FETCHING
        fetch_start = time.perf_counter()
        with with_correlation(stage="fetch"):
            public_items, school_items, state_items = await asyncio.gather(
                self.client.fetch_all_collection_items(detected.public_holidays.id),
                self.client.fetch_all_collection_items(detected.school_holidays.id)
                if detected.school_holidays else _no_items(),
                self.client.fetch_all_collection_items(detected.states.id)
                if detected.states else _no_items(),
            )
        record_processing_time("fetch", (time.perf_counter() - fetch_start) * 1000)

        result.public_holiday_items = len(public_items)
        result.school_holiday_items = len(school_items)
        result.state_items = len(state_items)

        # Step 6: Normalize
        result.status = SyncStatus.NORMALIZING
        normalize_start = time.perf_counter()
        with with_correlation(stage="normalize"):
            public_holidays = process_public_holidays(public_items, public_fields)
            school_holidays = (
                process_school_holidays(school_items, school_fields) if school_fields else []
            )
            states = process_states(state_items, state_fields) if state_fields else []
        record_processing_time("normalize", (time.perf_counter() - normalize_start) * 1000)

        result.calendar = CalendarData(
            public_holidays=public_holidays,
            school_holidays=school_holidays,
            states=states,
            enable_state_filter=enable_state_filter,
            default_state_id=select_default_state(states, input.default_state, enable_state_filter),
        )


async def sync_calendar(client, site_id: str, default_state: Optional[str] = None) -> CalendarData:
    """Run one fetch cycle and return only the calendar data."""
    result = await CalendarSyncWorkflow(client).run(
        CalendarSyncInput(site_id=site_id, default_state=default_state)
    )
    return result.calendar
