"""
Record Normalizer Tests

Validates that raw CMS items become canonical entities:
1. Unpublished (archived/draft) items are skipped for every kind
2. Bad dates and inverted periods drop the record, never raise
3. Reference values in any of Webflow's shapes become id lists
4. Placeholders fill missing names; states come back sorted
"""

from datetime import date

import pytest

from core.discovery import (
    discover_public_holiday_fields,
    discover_school_holiday_fields,
    discover_state_fields,
)
from core.models.cms import RawItem
from core.observability.metrics import get_metrics
from core.processing import (
    UNTITLED_HOLIDAY,
    UNTITLED_STATE,
    extract_reference_ids,
    filter_published_items,
    is_published,
    process_public_holidays,
    process_school_holidays,
    process_states,
)


STATES_ID = "col-states"

PUBLIC_FIELDS = discover_public_holiday_fields({
    "id": "col-ph",
    "fields": [
        {"slug": "name", "type": "PlainText"},
        {"slug": "slug", "type": "PlainText"},
        {"slug": "holiday-date", "type": "DateTime"},
        {"slug": "states", "type": "MultiReference", "validations": {"collectionId": STATES_ID}},
    ],
}, states_collection_id=STATES_ID)

SCHOOL_FIELDS = discover_school_holiday_fields({
    "id": "col-sh",
    "fields": [
        {"slug": "name", "type": "PlainText"},
        {"slug": "start-date", "type": "DateTime"},
        {"slug": "end-date", "type": "DateTime"},
        {"slug": "state", "type": "Reference", "validations": {"collectionId": STATES_ID}},
    ],
}, states_collection_id=STATES_ID)

STATE_FIELDS = discover_state_fields({
    "id": STATES_ID,
    "fields": [
        {"slug": "name", "type": "PlainText"},
        {"slug": "slug", "type": "PlainText"},
        {"slug": "abbreviation", "type": "PlainText"},
    ],
})


def item(id, archived=False, draft=False, **field_data):
    return {
        "id": id,
        "isArchived": archived,
        "isDraft": draft,
        "fieldData": {k.replace("_", "-"): v for k, v in field_data.items()},
    }


def school_item(id, start, end, **extra):
    return item(id, start_date=start, end_date=end, **extra)


# =============================================================================
# Shared Helpers
# =============================================================================

class TestPublishedFilter:
    """Archived and draft items are never normalized."""

    def test_is_published(self):
        assert is_published(item("a"))
        assert not is_published(item("a", archived=True))
        assert not is_published(item("a", draft=True))
        assert not is_published(RawItem(id="a", is_draft=True))

    def test_filter_coerces_to_raw_items(self):
        published = filter_published_items([item("a"), item("b", draft=True)])
        assert [i.id for i in published] == ["a"]
        assert isinstance(published[0], RawItem)

    def test_none_and_empty(self):
        assert filter_published_items(None) == []
        assert filter_published_items([]) == []

    def test_malformed_items_are_dropped(self):
        published = filter_published_items([{"fieldData": {}}, item("ok")])
        assert [i.id for i in published] == ["ok"]


class TestExtractReferenceIds:
    """Webflow reference value shapes."""

    @pytest.mark.parametrize("value,expected", [
        (["s1", "s2"], ["s1", "s2"]),
        ([{"id": "s1"}, {"id": "s2"}], ["s1", "s2"]),
        ([{"id": "s1"}, "s2", None, "", {"name": "no id"}], ["s1", "s2"]),
        ({"id": "s1"}, ["s1"]),
        ({"name": "no id"}, []),
        ("s1", ["s1"]),
        ("", []),
        (None, []),
        ([], []),
        (42, []),
    ])
    def test_shapes(self, value, expected):
        assert extract_reference_ids(value) == expected


# =============================================================================
# Public Holidays
# =============================================================================

class TestProcessPublicHolidays:
    """Public holiday normalization."""

    def test_basic_item(self):
        holidays = process_public_holidays([
            item("ph1", name="New Year's Day", holiday_date="2025-01-01T00:00:00.000Z",
                 states=["state1", "state2"]),
        ], PUBLIC_FIELDS)

        assert len(holidays) == 1
        h = holidays[0]
        assert h.id == "ph1"
        assert h.date == date(2025, 1, 1)
        assert h.name == "New Year's Day"
        assert h.state_ids == ("state1", "state2")

    def test_unpublished_skipped(self):
        holidays = process_public_holidays([
            item("ph1", holiday_date="2025-01-01", archived=True),
            item("ph2", holiday_date="2025-01-26", draft=True),
            item("ph3", holiday_date="2025-04-25"),
        ], PUBLIC_FIELDS)
        assert [h.id for h in holidays] == ["ph3"]

    def test_missing_or_bad_date_dropped(self):
        holidays = process_public_holidays([
            item("ph1", name="No date"),
            item("ph2", name="Bad date", holiday_date="someday"),
            item("ph3", name="Good", holiday_date="2025-12-25"),
        ], PUBLIC_FIELDS)
        assert [h.id for h in holidays] == ["ph3"]

    def test_placeholder_name_and_no_states(self):
        holidays = process_public_holidays([
            item("ph1", holiday_date="2025-12-26"),
        ], PUBLIC_FIELDS)
        assert holidays[0].name == UNTITLED_HOLIDAY
        assert holidays[0].state_ids == ()

    def test_single_reference_object(self):
        holidays = process_public_holidays([
            item("ph1", holiday_date="2025-01-26", states={"id": "state1"}),
        ], PUBLIC_FIELDS)
        assert holidays[0].state_ids == ("state1",)

    def test_no_date_field_drops_everything(self):
        fields = discover_public_holiday_fields({"fields": [{"slug": "name", "type": "PlainText"}]})
        assert process_public_holidays([item("ph1", name="x")], fields) == []

    def test_input_order_preserved(self):
        holidays = process_public_holidays([
            item("b", holiday_date="2025-12-25"),
            item("a", holiday_date="2025-01-01"),
        ], PUBLIC_FIELDS)
        assert [h.id for h in holidays] == ["b", "a"]


# =============================================================================
# School Holidays
# =============================================================================

class TestProcessSchoolHolidays:
    """School holiday normalization."""

    def test_basic_item(self):
        holidays = process_school_holidays([
            school_item("sh1", "2025-01-15T00:00:00.000Z", "2025-01-31T00:00:00.000Z",
                        name="Summer Holidays", state="state1"),
        ], SCHOOL_FIELDS)

        h = holidays[0]
        assert h.start_date == date(2025, 1, 15)
        assert h.end_date == date(2025, 1, 31)
        assert h.name == "Summer Holidays"
        assert h.state_id == "state1"

    def test_inverted_period_dropped(self):
        corrected = [
            school_item("sh1", "2025-01-15", "2025-01-31"),
            school_item("sh2", "2025-04-10", "2025-04-27"),
        ]
        inverted = [
            school_item("sh1", "2025-01-15", "2025-01-31"),
            school_item("sh2", "2025-04-27", "2025-04-10"),
        ]
        kept_corrected = process_school_holidays(corrected, SCHOOL_FIELDS)
        kept_inverted = process_school_holidays(inverted, SCHOOL_FIELDS)

        assert len(kept_corrected) - len(kept_inverted) == 1
        assert [h.id for h in kept_inverted] == ["sh1"]

    def test_single_day_period_kept(self):
        holidays = process_school_holidays([
            school_item("sh1", "2025-07-05", "2025-07-05"),
        ], SCHOOL_FIELDS)
        assert len(holidays) == 1

    def test_missing_dates_dropped(self):
        holidays = process_school_holidays([
            item("sh1", start_date="2025-01-15"),
            item("sh2", end_date="2025-01-31"),
            school_item("sh3", "bad", "2025-01-31"),
        ], SCHOOL_FIELDS)
        assert holidays == []

    def test_first_state_id_only(self):
        holidays = process_school_holidays([
            school_item("sh1", "2025-01-15", "2025-01-31", state=["state2", "state1"]),
            school_item("sh2", "2025-01-15", "2025-01-31"),
        ], SCHOOL_FIELDS)
        assert holidays[0].state_id == "state2"
        assert holidays[1].state_id is None
        assert holidays[1].name == UNTITLED_HOLIDAY

    def test_drop_reason_recorded(self):
        def inverted_count():
            reasons = get_metrics().get_summary()["records"]["drop_reasons"]
            return reasons.get("school_holidays", {}).get("end_before_start", 0)

        before = inverted_count()
        process_school_holidays([school_item("sh1", "2025-02-01", "2025-01-01")], SCHOOL_FIELDS)
        assert inverted_count() == before + 1


# =============================================================================
# States
# =============================================================================

class TestProcessStates:
    """State normalization and ordering."""

    def test_sorted_case_insensitively(self):
        states = process_states([
            item("s3", name="victoria"),
            item("s1", name="New South Wales"),
            item("s2", name="Australian Capital Territory"),
        ], STATE_FIELDS)
        assert [s.name for s in states] == [
            "Australian Capital Territory",
            "New South Wales",
            "victoria",
        ]

    def test_accented_names_sort_with_base_letter(self):
        states = process_states([
            item("s1", name="Zurich"),
            item("s2", name="Île-de-France"),
            item("s3", name="Hesse"),
        ], STATE_FIELDS)
        assert [s.id for s in states] == ["s3", "s2", "s1"]

    def test_fields_and_placeholders(self):
        states = process_states([
            item("s1", name="Victoria", slug="vic", abbreviation="VIC"),
            item("s2"),
        ], STATE_FIELDS)
        by_id = {s.id: s for s in states}

        assert by_id["s1"].slug == "vic"
        assert by_id["s1"].abbreviation == "VIC"
        assert by_id["s2"].name == UNTITLED_STATE
        assert by_id["s2"].slug == ""
        assert by_id["s2"].abbreviation == ""

    def test_abbreviation_read_from_fixed_key(self):
        # The schema does not list the field; the item value is still used
        fields = discover_state_fields({"fields": [{"slug": "name", "type": "PlainText"}]})
        states = process_states([
            item("s1", name="Queensland", abbreviation="QLD"),
            item("s2", name="Tasmania", state_abbreviation="TAS"),
        ], fields)
        assert [s.abbreviation for s in states] == ["QLD", ""]

    def test_unpublished_states_skipped(self):
        states = process_states([
            item("s1", name="Victoria", archived=True),
            item("s2", name="Queensland"),
        ], STATE_FIELDS)
        assert [s.id for s in states] == ["s2"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
