"""Domain errors raised by the calendar pipeline.

Data-quality problems (missing fields, unparseable dates, inverted periods)
never raise: they degrade to ``None`` roles or dropped records. Only the
conditions that make a fetch cycle meaningless are surfaced as exceptions.
"""

from typing import Optional


class CalendarError(Exception):
    """Base exception for calendar pipeline errors."""
    pass


class PublicHolidaysCollectionNotFoundError(CalendarError):
    """No collection could be classified as Public Holidays."""

    def __init__(self, site_id: Optional[str] = None):
        message = (
            'Public holidays collection not found. Please ensure a collection '
            'named "Public Holidays" exists.'
        )
        super().__init__(message)
        self.site_id = site_id
