"""Field discovery engine.

Infers which schema field plays each semantic role in a collection, with no
per-site configuration. Every role has an ordered chain of strategies; the
first strategy that yields a field wins, and a role whose chain yields
nothing resolves to None (a missing capability, not an error).

Strategies:
- TypeMatch: first field, in schema order, whose type equals a CMS type
- SlugPatternMatch: first field whose slug contains any of the patterns
  (case-insensitive substring)
- StateReferenceMatch: Reference/MultiReference field whose validations
  point at the States collection; never guessed by name

Adding a role or a collection kind means adding a row to ROLE_STRATEGIES.

Usage:
    fields = discover_public_holiday_fields(schema, states_collection_id="col-states")
    if fields.date_field is None:
        ...  # every item will be dropped by the normalizer
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from core.discovery.roles import CollectionRole, FieldRole
from core.models.cms import CollectionSchema, FieldType, RawField, REFERENCE_TYPES
from core.observability.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiscoveryContext:
    """Inputs shared by all strategies for one collection."""
    states_collection_id: Optional[str] = None


# =============================================================================
# Strategies
# =============================================================================

@dataclass(frozen=True)
class TypeMatch:
    """Match the first field of an exact CMS type."""
    field_type: str

    def find(self, fields: Sequence[RawField], context: DiscoveryContext) -> Optional[RawField]:
        for f in fields:
            if f.type == self.field_type:
                return f
        return None


@dataclass(frozen=True)
class SlugPatternMatch:
    """Match the first field whose slug contains any pattern.

    The test is one substring check per field against all patterns, so field
    order decides ties, not pattern order.
    """
    patterns: Tuple[str, ...]

    def find(self, fields: Sequence[RawField], context: DiscoveryContext) -> Optional[RawField]:
        lowered = [p.lower() for p in self.patterns]
        for f in fields:
            slug = (f.slug or "").lower()
            if any(p in slug for p in lowered):
                return f
        return None


@dataclass(frozen=True)
class StateReferenceMatch:
    """Match a reference field that targets the States collection."""

    def find(self, fields: Sequence[RawField], context: DiscoveryContext) -> Optional[RawField]:
        if not context.states_collection_id:
            return None
        for f in fields:
            if f.type not in REFERENCE_TYPES:
                continue
            if f.referenced_collection_id == context.states_collection_id:
                return f
        return None


Strategy = Union[TypeMatch, SlugPatternMatch, StateReferenceMatch]


# =============================================================================
# Declarative Role Table
# =============================================================================

_NAME_CHAIN: Tuple[Strategy, ...] = (
    SlugPatternMatch(("name",)),
    TypeMatch(FieldType.PLAIN_TEXT.value),
)

ROLE_STRATEGIES: Dict[CollectionRole, Dict[FieldRole, Tuple[Strategy, ...]]] = {
    CollectionRole.PUBLIC_HOLIDAYS: {
        FieldRole.DATE: (
            TypeMatch(FieldType.DATE_TIME.value),
            SlugPatternMatch(("date",)),
        ),
        FieldRole.NAME: _NAME_CHAIN,
        FieldRole.STATE: (StateReferenceMatch(),),
    },
    CollectionRole.SCHOOL_HOLIDAYS: {
        FieldRole.START_DATE: (
            SlugPatternMatch(("start-date", "startdate", "start")),
            TypeMatch(FieldType.DATE_TIME.value),
        ),
        FieldRole.END_DATE: (
            SlugPatternMatch(("end-date", "enddate", "end")),
            TypeMatch(FieldType.DATE_TIME.value),
        ),
        FieldRole.NAME: _NAME_CHAIN,
        FieldRole.STATE: (StateReferenceMatch(),),
    },
    CollectionRole.STATES: {
        FieldRole.NAME: _NAME_CHAIN,
        FieldRole.SLUG: (SlugPatternMatch(("slug",)),),
    },
}


# =============================================================================
# Field Maps
# =============================================================================

@dataclass(frozen=True)
class PublicHolidayFields:
    """Discovered fields of a Public Holidays collection."""
    date_field: Optional[RawField] = None
    name_field: Optional[RawField] = None
    state_field: Optional[RawField] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return _slugs(date=self.date_field, name=self.name_field, state=self.state_field)


@dataclass(frozen=True)
class SchoolHolidayFields:
    """Discovered fields of a School Holidays collection."""
    start_date_field: Optional[RawField] = None
    end_date_field: Optional[RawField] = None
    name_field: Optional[RawField] = None
    state_field: Optional[RawField] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return _slugs(
            start_date=self.start_date_field,
            end_date=self.end_date_field,
            name=self.name_field,
            state=self.state_field,
        )


@dataclass(frozen=True)
class StateFields:
    """Discovered fields of a States collection."""
    name_field: Optional[RawField] = None
    slug_field: Optional[RawField] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return _slugs(name=self.name_field, slug=self.slug_field)


def _slugs(**fields: Optional[RawField]) -> Dict[str, Optional[str]]:
    return {role: (f.slug if f else None) for role, f in fields.items()}


# =============================================================================
# Discovery
# =============================================================================

SchemaLike = Union[CollectionSchema, Mapping[str, Any], Iterable[Any], None]


def coerce_fields(schema: SchemaLike) -> List[RawField]:
    """Get the ordered field list from a schema object, dict or field list."""
    if schema is None:
        return []
    if isinstance(schema, CollectionSchema):
        return list(schema.fields)
    if isinstance(schema, Mapping):
        return list(CollectionSchema.model_validate(schema).fields)
    return [f if isinstance(f, RawField) else RawField.model_validate(f) for f in schema]


def resolve_role(
    fields: Sequence[RawField],
    strategies: Sequence[Strategy],
    context: DiscoveryContext,
) -> Optional[RawField]:
    """Run a strategy chain and return the first field found."""
    for strategy in strategies:
        found = strategy.find(fields, context)
        if found is not None:
            return found
    return None


def discover_fields(
    collection_role: CollectionRole,
    schema: SchemaLike,
    states_collection_id: Optional[str] = None,
) -> Dict[FieldRole, Optional[RawField]]:
    """Resolve every role defined for a collection kind.

    Args:
        collection_role: Which kind of collection the schema belongs to
        schema: Collection schema (model, raw dict or list of fields)
        states_collection_id: ID of the detected States collection, if any

    Returns:
        Mapping of each role to its field, or None when unresolved
    """
    fields = coerce_fields(schema)
    context = DiscoveryContext(states_collection_id=states_collection_id)

    resolved: Dict[FieldRole, Optional[RawField]] = {}
    for role, strategies in ROLE_STRATEGIES[collection_role].items():
        resolved[role] = resolve_role(fields, strategies, context)

    logger.debug(
        f"Discovered fields for {collection_role.value}",
        extra_fields={
            "field_count": len(fields),
            "roles": {role.value: (f.slug if f else None) for role, f in resolved.items()},
        },
    )
    return resolved


def discover_public_holiday_fields(
    schema: SchemaLike,
    states_collection_id: Optional[str] = None,
) -> PublicHolidayFields:
    """Discover date, name and state-reference fields of a Public Holidays schema."""
    roles = discover_fields(CollectionRole.PUBLIC_HOLIDAYS, schema, states_collection_id)
    return PublicHolidayFields(
        date_field=roles[FieldRole.DATE],
        name_field=roles[FieldRole.NAME],
        state_field=roles[FieldRole.STATE],
    )


def discover_school_holiday_fields(
    schema: SchemaLike,
    states_collection_id: Optional[str] = None,
) -> SchoolHolidayFields:
    """Discover start/end date, name and state-reference fields of a School Holidays schema.

    When the slugs do not tell start and end apart, both can fall back to the
    same DateTime field. That is accepted as-is and logged.
    """
    roles = discover_fields(CollectionRole.SCHOOL_HOLIDAYS, schema, states_collection_id)
    result = SchoolHolidayFields(
        start_date_field=roles[FieldRole.START_DATE],
        end_date_field=roles[FieldRole.END_DATE],
        name_field=roles[FieldRole.NAME],
        state_field=roles[FieldRole.STATE],
    )

    start, end = result.start_date_field, result.end_date_field
    if start is not None and end is not None and start.slug == end.slug:
        logger.warning(
            "School holiday start and end dates resolved to the same field; "
            "periods will be single days",
            extra_fields={"slug": start.slug},
        )
    return result


def discover_state_fields(schema: SchemaLike) -> StateFields:
    """Discover name and slug fields of a States schema.

    The abbreviation is not a discovered role; the normalizer reads it from
    the fixed ``abbreviation`` key of each item.
    """
    roles = discover_fields(CollectionRole.STATES, schema)
    return StateFields(
        name_field=roles[FieldRole.NAME],
        slug_field=roles[FieldRole.SLUG],
    )
