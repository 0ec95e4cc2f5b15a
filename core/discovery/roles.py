"""Semantic roles shared by the classifier and the field discovery engine."""

from enum import Enum


class CollectionRole(str, Enum):
    """What a CMS collection holds."""
    PUBLIC_HOLIDAYS = "publicHolidays"
    SCHOOL_HOLIDAYS = "schoolHolidays"
    STATES = "states"


class FieldRole(str, Enum):
    """What a schema field means within its collection."""
    DATE = "date"                  # Public holiday date
    START_DATE = "start_date"      # School holiday period start
    END_DATE = "end_date"          # School holiday period end
    NAME = "name"                  # Display name (all kinds)
    STATE = "state"                # Reference to the States collection
    SLUG = "slug"                  # State slug
