"""Schema discovery - collection classification and field role inference.

Works on arbitrary, site-specific Webflow collection schemas with no fixed
configuration: collections are recognised by display name, fields by type
first and slug pattern second.
"""

from core.discovery.roles import CollectionRole, FieldRole
from core.discovery.fields import (
    DiscoveryContext,
    TypeMatch,
    SlugPatternMatch,
    StateReferenceMatch,
    ROLE_STRATEGIES,
    PublicHolidayFields,
    SchoolHolidayFields,
    StateFields,
    discover_fields,
    discover_public_holiday_fields,
    discover_school_holiday_fields,
    discover_state_fields,
)
from core.discovery.classifier import (
    ClassifiedCollections,
    detect_collection_type,
    detect_collections,
    should_enable_state_filtering,
)

__all__ = [
    # Roles
    "CollectionRole",
    "FieldRole",
    # Field discovery
    "DiscoveryContext",
    "TypeMatch",
    "SlugPatternMatch",
    "StateReferenceMatch",
    "ROLE_STRATEGIES",
    "PublicHolidayFields",
    "SchoolHolidayFields",
    "StateFields",
    "discover_fields",
    "discover_public_holiday_fields",
    "discover_school_holiday_fields",
    "discover_state_fields",
    # Classification
    "ClassifiedCollections",
    "detect_collection_type",
    "detect_collections",
    "should_enable_state_filtering",
]
