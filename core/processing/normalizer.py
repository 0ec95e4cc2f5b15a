"""Record normalizer for Webflow CMS items.

Converts raw collection items into canonical holiday and state entities
using the field map produced by discovery. Data-quality problems never
raise; the affected record is dropped and the drop is logged and counted.

Rules:
1. Only published items (not archived, not draft) are considered
2. Public holidays need a parseable date
3. School holidays need parseable start and end dates with start <= end
   (inverted periods are dropped, never clamped or swapped)
4. Missing names fall back to placeholders
5. States are returned sorted by name
"""

import unicodedata
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from core.dates import parse_webflow_date
from core.discovery.fields import PublicHolidayFields, SchoolHolidayFields, StateFields
from core.models.canonical import PublicHoliday, SchoolHoliday, StateEntity
from core.models.cms import RawField, RawItem
from core.observability.logging import get_logger
from core.observability.metrics import record_drop_reason, record_records

logger = get_logger(__name__)


UNTITLED_HOLIDAY = "Untitled Holiday"
UNTITLED_STATE = "Untitled State"

# States carry their abbreviation under this fixed key; it is never discovered
ABBREVIATION_KEY = "abbreviation"

ItemLike = Union[RawItem, Mapping[str, Any]]


# =============================================================================
# Shared Helpers
# =============================================================================

def is_published(item: ItemLike) -> bool:
    """True for items that are neither archived nor drafts."""
    if isinstance(item, RawItem):
        return not item.is_archived and not item.is_draft
    return not item.get("isArchived") and not item.get("isDraft")


def filter_published_items(items: Optional[Iterable[ItemLike]], kind: str = "items") -> List[RawItem]:
    """Keep published items and coerce them to RawItem.

    Items that do not even parse as CMS items are dropped like any other
    bad record.
    """
    if not items:
        return []

    published: List[RawItem] = []
    for item in items:
        if not is_published(item):
            _drop(kind, _item_id(item), "unpublished")
            continue
        if isinstance(item, RawItem):
            published.append(item)
            continue
        try:
            published.append(RawItem.model_validate(item))
        except ValidationError as e:
            _drop(kind, _item_id(item), "malformed_item", error=str(e.errors()[0].get("msg", "")))
    return published


def extract_reference_ids(value: Any) -> List[str]:
    """Normalize a reference field value into a list of ids.

    Accepts the three shapes Webflow uses for references:
    - a list of reference objects or id strings (MultiReference)
    - a single reference object with an ``id``
    - a bare id string

    Examples:
        >>> extract_reference_ids([{"id": "s1"}, "s2", None])
        ['s1', 's2']
        >>> extract_reference_ids({"id": "s1"})
        ['s1']
        >>> extract_reference_ids("s1")
        ['s1']
    """
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Mapping):
        ref_id = value.get("id")
        return [str(ref_id)] if ref_id else []
    if isinstance(value, (list, tuple)):
        ids = []
        for ref in value:
            if isinstance(ref, Mapping):
                ref = ref.get("id")
            if ref:
                ids.append(str(ref))
        return ids
    return []


def state_sort_key(state: StateEntity) -> Tuple[str, str]:
    """Case- and accent-insensitive ordering key for state names."""
    decomposed = unicodedata.normalize("NFKD", state.name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return (stripped.casefold(), state.name)


def _item_id(item: Any) -> Optional[str]:
    if isinstance(item, RawItem):
        return item.id
    if isinstance(item, Mapping):
        return item.get("id")
    return None


def _drop(kind: str, item_id: Optional[str], reason: str, **details) -> None:
    logger.debug(
        f"Dropped {kind} item {item_id}: {reason}",
        extra_fields={"item_id": item_id, "reason": reason, **details},
    )
    record_drop_reason(kind, reason)


def _field_value(item: RawItem, field: Optional[RawField]) -> Any:
    if field is None:
        return None
    return item.field_data.get(field.slug)


def _text_value(item: RawItem, field: Optional[RawField], default: str) -> str:
    return _as_text(_field_value(item, field), default)


def _as_text(value: Any, default: str) -> str:
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


# =============================================================================
# Public Holidays
# =============================================================================

def process_public_holidays(
    items: Optional[Iterable[ItemLike]],
    fields: PublicHolidayFields,
) -> List[PublicHoliday]:
    """Normalize Public Holidays items.

    Args:
        items: Raw items from the collection (already paginated)
        fields: Discovered field map

    Returns:
        Public holidays in input order; undated items are dropped
    """
    kind = "public_holidays"
    published = filter_published_items(items, kind)
    holidays: List[PublicHoliday] = []

    for item in published:
        holiday_date = parse_webflow_date(_field_value(item, fields.date_field))
        if holiday_date is None:
            _drop(kind, item.id, "missing_or_invalid_date")
            continue

        holidays.append(PublicHoliday(
            id=item.id,
            date=holiday_date,
            name=_text_value(item, fields.name_field, UNTITLED_HOLIDAY),
            state_ids=tuple(extract_reference_ids(_field_value(item, fields.state_field))),
        ))

    record_records(kind, kept=len(holidays), dropped=len(published) - len(holidays))
    return holidays


# =============================================================================
# School Holidays
# =============================================================================

def process_school_holidays(
    items: Optional[Iterable[ItemLike]],
    fields: SchoolHolidayFields,
) -> List[SchoolHoliday]:
    """Normalize School Holidays items.

    A school holiday belongs to at most one state: for multi-reference
    values only the first id is kept.
    """
    kind = "school_holidays"
    published = filter_published_items(items, kind)
    holidays: List[SchoolHoliday] = []

    for item in published:
        start_date = parse_webflow_date(_field_value(item, fields.start_date_field))
        if start_date is None:
            _drop(kind, item.id, "missing_or_invalid_start_date")
            continue

        end_date = parse_webflow_date(_field_value(item, fields.end_date_field))
        if end_date is None:
            _drop(kind, item.id, "missing_or_invalid_end_date")
            continue

        if end_date < start_date:
            _drop(kind, item.id, "end_before_start",
                  start_date=start_date.isoformat(), end_date=end_date.isoformat())
            continue

        state_ids = extract_reference_ids(_field_value(item, fields.state_field))

        holidays.append(SchoolHoliday(
            id=item.id,
            start_date=start_date,
            end_date=end_date,
            name=_text_value(item, fields.name_field, UNTITLED_HOLIDAY),
            state_id=state_ids[0] if state_ids else None,
        ))

    record_records(kind, kept=len(holidays), dropped=len(published) - len(holidays))
    return holidays


# =============================================================================
# States
# =============================================================================

def process_states(
    items: Optional[Iterable[ItemLike]],
    fields: StateFields,
) -> List[StateEntity]:
    """Normalize States items, sorted by name."""
    kind = "states"
    published = filter_published_items(items, kind)

    states = [
        StateEntity(
            id=item.id,
            name=_text_value(item, fields.name_field, UNTITLED_STATE),
            slug=_text_value(item, fields.slug_field, ""),
            abbreviation=_as_text(item.field_data.get(ABBREVIATION_KEY), ""),
        )
        for item in published
    ]

    record_records(kind, kept=len(states))
    return sorted(states, key=state_sort_key)
