"""Core workflow module - calendar sync status and result types.

The sync workflow itself lives in the top-level workflows/ folder.
"""

from core.workflow.base import (
    SyncStatus,
    SyncResult,
)

__all__ = [
    "SyncStatus",
    "SyncResult",
]
