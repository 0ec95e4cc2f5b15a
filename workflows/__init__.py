"""Workflow definitions module."""

from workflows.calendar_sync import (
    CalendarSyncWorkflow,
    CalendarSyncInput,
    select_default_state,
    sync_calendar,
)

__all__ = ["CalendarSyncWorkflow", "CalendarSyncInput", "select_default_state", "sync_calendar"]
