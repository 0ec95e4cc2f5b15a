"""Record normalization - raw CMS items to canonical entities."""

from core.processing.normalizer import (
    UNTITLED_HOLIDAY,
    UNTITLED_STATE,
    is_published,
    filter_published_items,
    extract_reference_ids,
    state_sort_key,
    process_public_holidays,
    process_school_holidays,
    process_states,
)

__all__ = [
    "UNTITLED_HOLIDAY",
    "UNTITLED_STATE",
    "is_published",
    "filter_published_items",
    "extract_reference_ids",
    "state_sort_key",
    "process_public_holidays",
    "process_school_holidays",
    "process_states",
]
