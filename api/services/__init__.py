"""API Services Package."""

from api.services.mock_data import (
    MOCK_STATES,
    MOCK_PUBLIC_HOLIDAYS,
    MOCK_SCHOOL_HOLIDAYS,
    get_mock_calendar,
)

__all__ = [
    "MOCK_STATES",
    "MOCK_PUBLIC_HOLIDAYS",
    "MOCK_SCHOOL_HOLIDAYS",
    "get_mock_calendar",
]
