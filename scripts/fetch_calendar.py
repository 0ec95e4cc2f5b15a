"""Fetch a site's holiday calendar from Webflow and print it.

This script runs one calendar sync against the Webflow API, prints the
normalized holidays, and optionally the leave metrics for a date range.
"""

import asyncio
import json
import sys
from datetime import date
from pathlib import Path
from typing import Optional

# Add repo root to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from connectors.webflow import WebflowApiClient
from core.config import get_settings
from core.dates import format_date
from core.errors import PublicHolidaysCollectionNotFoundError
from core.leave import calculate_all_metrics
from core.models.canonical import CalendarData
from core.observability.logging import configure_logging_from_settings, get_logger
from core.workflow.base import SyncResult
from workflows.calendar_sync import CalendarSyncInput, CalendarSyncWorkflow


logger = get_logger(__name__)


async def fetch_calendar(site_id: str, default_state: Optional[str] = None) -> SyncResult:
    """Run a calendar sync and return the sync result.

    Args:
        site_id: Webflow site ID
        default_state: State id or name to preselect

    Returns:
        SyncResult
    """
    settings = get_settings()
    logger.info(f"Fetching calendar for site {site_id}...")

    async with WebflowApiClient.from_settings(settings, site_id=site_id) as client:
        workflow = CalendarSyncWorkflow(client)
        return await workflow.run(CalendarSyncInput(site_id=site_id, default_state=default_state))


def print_calendar(calendar: CalendarData, locale: str) -> None:
    """Print holidays and states in human-readable form."""
    states = {s.id: s for s in calendar.states}

    def state_label(state_ids) -> str:
        if not state_ids:
            return "all states"
        return ", ".join(states[i].abbreviation or states[i].name if i in states else i for i in state_ids)

    print("\n=== PUBLIC HOLIDAYS ===")
    for h in calendar.public_holidays:
        print(f"  {format_date(h.date, locale)}: {h.name} ({state_label(h.state_ids)})")

    print("\n=== SCHOOL HOLIDAYS ===")
    for h in calendar.school_holidays:
        scope = state_label([h.state_id] if h.state_id else [])
        print(f"  {format_date(h.start_date, locale)} - {format_date(h.end_date, locale)}: {h.name} ({scope})")

    print("\n=== STATES ===")
    for s in calendar.states:
        marker = " *" if s.id == calendar.default_state_id else ""
        print(f"  {s.name} [{s.abbreviation or s.slug}]{marker}")

    print(f"\nState filter enabled: {calendar.enable_state_filter}")


def main():
    """Entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Fetch holiday calendar from Webflow")
    parser.add_argument(
        "--site-id",
        type=str,
        default=None,
        help="Webflow site ID (default: WEBFLOW_SITE_ID)"
    )
    parser.add_argument(
        "--state",
        type=str,
        default=None,
        help="State id or name to select"
    )
    parser.add_argument("--start", type=date.fromisoformat, default=None, help="Range start (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, default=None, help="Range end (YYYY-MM-DD)")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging_from_settings(settings)

    site_id = args.site_id or settings.webflow_site_id
    if not site_id:
        print("Error: --site-id or WEBFLOW_SITE_ID is required", file=sys.stderr)
        return 2

    try:
        result = asyncio.run(fetch_calendar(site_id, default_state=args.state))
    except PublicHolidaysCollectionNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    calendar = result.calendar
    metrics = None
    if args.start and args.end:
        metrics = calculate_all_metrics(
            args.start,
            args.end,
            calendar.public_holidays,
            calendar.school_holidays,
            calendar.default_state_id,
        )

    if args.json:
        output = {
            "sync": result.to_dict(),
            "calendar": calendar.model_dump(mode="json", by_alias=True),
        }
        if metrics:
            output["metrics"] = metrics.model_dump(by_alias=True)
        print(json.dumps(output, indent=2))
        return 0

    print_calendar(calendar, settings.default_locale)
    if metrics:
        print("\n=== LEAVE METRICS ===")
        print(f"  {format_date(args.start, settings.default_locale)} - {format_date(args.end, settings.default_locale)}")
        print(f"  Total days off:     {metrics.total_days_off}")
        print(f"  Leave days used:    {metrics.leave_days_used}")
        print(f"  School days absent: {metrics.school_days_absent}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
