"""Collection classifier.

Assigns each CMS collection to at most one known role by matching its
display name, case-insensitively, against a small keyword list per role.

Rules:
- Roles are checked in fixed order (public holidays, school holidays,
  states); the first satisfied check wins.
- Several collections matching the same role: the last one in input order
  wins.
- A collection matching no keyword gets no role.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from core.discovery.fields import PublicHolidayFields, SchoolHolidayFields
from core.discovery.roles import CollectionRole
from core.models.cms import RawCollection
from core.observability.logging import get_logger

logger = get_logger(__name__)


# Keywords matched case-insensitively in the display name (order matters - first role wins)
COLLECTION_KEYWORDS: Tuple[Tuple[CollectionRole, Tuple[str, ...]], ...] = (
    (CollectionRole.PUBLIC_HOLIDAYS, ("public holiday", "public holidays")),
    (CollectionRole.SCHOOL_HOLIDAYS, ("school holiday", "school holidays")),
    (CollectionRole.STATES, ("state", "states")),
)


@dataclass(frozen=True)
class ClassifiedCollections:
    """At most one collection per role."""
    public_holidays: Optional[RawCollection] = None
    school_holidays: Optional[RawCollection] = None
    states: Optional[RawCollection] = None

    def get(self, role: CollectionRole) -> Optional[RawCollection]:
        return {
            CollectionRole.PUBLIC_HOLIDAYS: self.public_holidays,
            CollectionRole.SCHOOL_HOLIDAYS: self.school_holidays,
            CollectionRole.STATES: self.states,
        }[role]

    @property
    def states_collection_id(self) -> Optional[str]:
        return self.states.id if self.states else None


CollectionLike = Union[RawCollection, Mapping[str, Any]]


def _coerce_collection(collection: CollectionLike) -> RawCollection:
    if isinstance(collection, RawCollection):
        return collection
    return RawCollection.model_validate(collection)


def normalize_collection_name(name: Optional[str]) -> str:
    """Lowercase and trim a collection name for matching."""
    return (name or "").lower().strip()


def matches_pattern(name: Optional[str], patterns: Iterable[str]) -> bool:
    """True if any pattern is a substring of the normalized name."""
    normalized = normalize_collection_name(name)
    return any(p.lower() in normalized for p in patterns)


def detect_collection_type(collection: CollectionLike) -> Optional[CollectionRole]:
    """Classify one collection by its display name.

    Falls back to ``name`` for raw dicts without a ``displayName``.
    """
    if isinstance(collection, Mapping):
        name = collection.get("displayName") or collection.get("name") or ""
    else:
        name = collection.display_name

    for role, keywords in COLLECTION_KEYWORDS:
        if matches_pattern(name, keywords):
            return role
    return None


def detect_collections(collections: Iterable[CollectionLike]) -> ClassifiedCollections:
    """Partition a site's collections into the known roles (last write wins)."""
    found = {}
    for raw in collections:
        role = detect_collection_type(raw)
        if role is None:
            continue
        collection = _coerce_collection(raw)
        if role in found:
            logger.debug(
                f"Collection {collection.id} replaces {found[role].id} as {role.value}",
            )
        found[role] = collection

    result = ClassifiedCollections(
        public_holidays=found.get(CollectionRole.PUBLIC_HOLIDAYS),
        school_holidays=found.get(CollectionRole.SCHOOL_HOLIDAYS),
        states=found.get(CollectionRole.STATES),
    )
    logger.info(
        "Collections classified",
        extra_fields={
            role.value: (result.get(role).id if result.get(role) else None)
            for role in CollectionRole
        },
    )
    return result


def should_enable_state_filtering(
    classified: ClassifiedCollections,
    public_fields: Optional[PublicHolidayFields],
    school_fields: Optional[SchoolHolidayFields],
) -> bool:
    """True iff a States collection exists and some holiday kind references it."""
    if classified.states is None:
        return False

    has_public_ref = public_fields is not None and public_fields.state_field is not None
    has_school_ref = school_fields is not None and school_fields.state_field is not None
    return has_public_ref or has_school_ref
