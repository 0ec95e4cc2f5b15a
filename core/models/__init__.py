"""Core data models - raw CMS payloads and canonical calendar types.

The raw models mirror the Webflow API; the canonical models are
intentionally independent of any site's collection schema.
"""

from core.models.canonical import (
    # Base
    CanonicalBase,
    DateValue,

    # Entities
    PublicHoliday,
    SchoolHoliday,
    StateEntity,

    # Outputs
    LeaveMetrics,
    DayStatus,
    CalendarData,
)

from core.models.cms import (
    FieldType,
    REFERENCE_TYPES,
    RawCollection,
    RawField,
    FieldValidations,
    CollectionSchema,
    RawItem,
)

__all__ = [
    # Canonical
    "CanonicalBase",
    "DateValue",
    "PublicHoliday",
    "SchoolHoliday",
    "StateEntity",
    "LeaveMetrics",
    "DayStatus",
    "CalendarData",
    # Raw CMS
    "FieldType",
    "REFERENCE_TYPES",
    "RawCollection",
    "RawField",
    "FieldValidations",
    "CollectionSchema",
    "RawItem",
]
