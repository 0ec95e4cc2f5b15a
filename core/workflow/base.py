"""Base sync types and utilities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from core.models.canonical import CalendarData


class SyncStatus(str, Enum):
    """Calendar sync status values."""
    STARTED = "STARTED"
    CLASSIFYING = "CLASSIFYING"
    DISCOVERING = "DISCOVERING"
    FETCHING = "FETCHING"
    NORMALIZING = "NORMALIZING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


@dataclass
class SyncResult:
    """Standard sync result structure."""
    sync_id: str
    site_id: str
    status: SyncStatus
    started_at: datetime
    completed_at: Optional[datetime] = None

    # Classification results (collection ids)
    public_holidays_collection_id: Optional[str] = None
    school_holidays_collection_id: Optional[str] = None
    states_collection_id: Optional[str] = None

    # Discovery results (role -> field slug)
    public_holiday_fields: Dict[str, Optional[str]] = field(default_factory=dict)
    school_holiday_fields: Dict[str, Optional[str]] = field(default_factory=dict)
    state_fields: Dict[str, Optional[str]] = field(default_factory=dict)

    # Fetch results (raw item counts)
    public_holiday_items: int = 0
    school_holiday_items: int = 0
    state_items: int = 0

    # Normalized output
    calendar: Optional[CalendarData] = None

    # Error information
    error_message: Optional[str] = None

    @property
    def duration_ms(self) -> Optional[float]:
        if not self.completed_at:
            return None
        return (self.completed_at - self.started_at).total_seconds() * 1000

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        calendar = self.calendar
        return {
            "sync_id": self.sync_id,
            "site_id": self.site_id,
            "status": self.status.value,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "collections": {
                "public_holidays": self.public_holidays_collection_id,
                "school_holidays": self.school_holidays_collection_id,
                "states": self.states_collection_id,
            },
            "fields": {
                "public_holidays": self.public_holiday_fields,
                "school_holidays": self.school_holiday_fields,
                "states": self.state_fields,
            },
            "items": {
                "public_holidays": self.public_holiday_items,
                "school_holidays": self.school_holiday_items,
                "states": self.state_items,
            },
            "records": {
                "public_holidays": len(calendar.public_holidays) if calendar else 0,
                "school_holidays": len(calendar.school_holidays) if calendar else 0,
                "states": len(calendar.states) if calendar else 0,
            },
            "enable_state_filter": calendar.enable_state_filter if calendar else False,
            "default_state_id": calendar.default_state_id if calendar else None,
            "error": {"message": self.error_message} if self.error_message else None,
        }
