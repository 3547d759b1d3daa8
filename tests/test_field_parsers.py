"""
tests/test_field_parsers.py

Pytest unit tests for the lenient cell parsers.

Every parser must resolve malformed input to its documented default instead
of raising.
"""

from __future__ import annotations

import uuid
from datetime import date

import pytest

from app.domain.quantity import QuantityType, VesselCategory
from app.mappers.field_parsers import (
    coerce_session_id,
    combine_location,
    determine_who_with,
    parse_boolean,
    parse_quantity_text,
    parse_thc_percentage,
    parse_when,
)

TODAY = date(2024, 3, 9)


# ---------------------------------------------------------------------------
# parse_when
# ---------------------------------------------------------------------------


class TestParseWhen:
    def test_morning(self) -> None:
        parsed = parse_when("10/17/22 11:39 AM", today=TODAY)
        assert (parsed.date, parsed.time) == ("2022-10-17", "11:39")
        assert parsed.is_fallback is False

    def test_afternoon_adds_twelve(self) -> None:
        assert parse_when("1/5/23 3:07 PM", today=TODAY).time == "15:07"

    def test_midnight_and_noon(self) -> None:
        assert parse_when("1/5/23 12:15 AM", today=TODAY).time == "00:15"
        assert parse_when("1/5/23 12:15 PM", today=TODAY).time == "12:15"

    def test_dot_separated_date(self) -> None:
        assert parse_when("10.17.22 9:00 PM", today=TODAY).date == "2022-10-17"

    def test_two_digit_year_pivot(self) -> None:
        assert parse_when("1/1/49 1:00 AM", today=TODAY).date == "2049-01-01"
        assert parse_when("1/1/50 1:00 AM", today=TODAY).date == "1950-01-01"

    def test_four_digit_year(self) -> None:
        assert parse_when("2/29/2024 8:30 PM", today=TODAY).date == "2024-02-29"

    def test_missing_meridiem_keeps_hour(self) -> None:
        assert parse_when("1/5/23 17:45", today=TODAY).time == "17:45"

    @pytest.mark.parametrize(
        "raw",
        ["", None, "13/40/99 1:00 AM", "garbage", "2/30/23 1:00 PM", "13/1/22", "a/b/c 1:00 PM"],
    )
    def test_invalid_falls_back_to_today_noon(self, raw: str | None) -> None:
        parsed = parse_when(raw, today=TODAY)
        assert (parsed.date, parsed.time) == ("2024-03-09", "12:00")
        assert parsed.is_fallback is True

    def test_garbled_time_keeps_date(self) -> None:
        parsed = parse_when("10/17/22 late", today=TODAY)
        assert (parsed.date, parsed.time) == ("2022-10-17", "12:00")

    def test_date_without_time_keeps_date(self) -> None:
        parsed = parse_when("10/17/22", today=TODAY)
        assert (parsed.date, parsed.time) == ("2022-10-17", "12:00")
        assert parsed.is_fallback is False

    def test_date_only_with_padding(self) -> None:
        assert parse_when("  2/29/2024  ", today=TODAY).date == "2024-02-29"


# ---------------------------------------------------------------------------
# parse_boolean
# ---------------------------------------------------------------------------


class TestParseBoolean:
    @pytest.mark.parametrize("raw", ["Y", "yes", "TRUE", "1", " y "])
    def test_truthy(self, raw: str) -> None:
        assert parse_boolean(raw) is True

    @pytest.mark.parametrize("raw", ["N", "no", "", None, "maybe", "0"])
    def test_everything_else_is_false(self, raw: str | None) -> None:
        assert parse_boolean(raw) is False


# ---------------------------------------------------------------------------
# parse_quantity_text
# ---------------------------------------------------------------------------


class TestParseQuantityText:
    def test_size_word(self) -> None:
        value = parse_quantity_text("Medium", VesselCategory.BONG)
        assert (value.amount, value.unit, value.type) == (2, "bowl size", QuantityType.SIZE_CATEGORY)

    def test_hits_become_puffs(self) -> None:
        value = parse_quantity_text("hits_4", VesselCategory.PEN)
        assert (value.amount, value.unit) == (4, "puffs")

    def test_milligrams(self) -> None:
        value = parse_quantity_text("10mg", "Raspberry Gummie")
        assert (value.amount, value.unit, value.type) == (10.0, "mg THC", QuantityType.MILLIGRAMS)

    def test_dabs(self) -> None:
        assert parse_quantity_text("dab_tiny", VesselCategory.DAB_RIG).amount == 0.5
        assert parse_quantity_text("dab_2", VesselCategory.DAB_RIG).amount == 2

    def test_numeric_edible_is_milligrams(self) -> None:
        value = parse_quantity_text("5", VesselCategory.EDIBLE)
        assert (value.amount, value.unit, value.type) == (5.0, "mg THC", QuantityType.MILLIGRAMS)

    def test_numeric_joint_and_blunt_are_joint_portions(self) -> None:
        assert parse_quantity_text("0.5", VesselCategory.JOINT).unit == "joint portion"
        assert parse_quantity_text("0.5", "White Owl Wrap").unit == "joint portion"

    def test_numeric_bowl_vessel_is_generic_units(self) -> None:
        value = parse_quantity_text("2", VesselCategory.PIPE)
        assert (value.amount, value.unit, value.type) == (2, "units", QuantityType.DECIMAL)

    @pytest.mark.parametrize("raw", ["", None, "some"])
    def test_unparseable_is_one_unit(self, raw: str | None) -> None:
        value = parse_quantity_text(raw, VesselCategory.BONG)
        assert (value.amount, value.unit, value.type) == (1, "units", QuantityType.DECIMAL)


# ---------------------------------------------------------------------------
# parse_thc_percentage
# ---------------------------------------------------------------------------


class TestParseThcPercentage:
    def test_percentage_passes_through(self) -> None:
        assert parse_thc_percentage("22.5%") == 22.5

    def test_fraction_is_scaled(self) -> None:
        assert parse_thc_percentage("0.18") == 18.0

    def test_values_above_hundred_are_clamped(self) -> None:
        assert parse_thc_percentage("250") == 100.0

    @pytest.mark.parametrize("raw", ["", None, "n/a"])
    def test_missing_is_none(self, raw: str | None) -> None:
        assert parse_thc_percentage(raw) is None


# ---------------------------------------------------------------------------
# Location, companions, ids
# ---------------------------------------------------------------------------


class TestCombineLocation:
    def test_prefers_location_column(self) -> None:
        assert combine_location("Home", "Denver", "CO") == "Home"

    def test_builds_from_city_and_state(self) -> None:
        assert combine_location("", "Denver", "CO") == "Denver, CO"
        assert combine_location(" ", "", "CO") == "CO"

    def test_unknown_when_empty(self) -> None:
        assert combine_location(None, None, None) == "Unknown"


class TestDetermineWhoWith:
    def test_alone_wins(self) -> None:
        assert determine_who_with("Y", "Sam;") == "Alone"

    def test_people_trailing_semicolon_removed(self) -> None:
        assert determine_who_with("N", "Sam; Alex;") == "Sam; Alex"

    def test_unknown_when_empty(self) -> None:
        assert determine_who_with("", "") == "Unknown"


class TestCoerceSessionId:
    def test_valid_uuid_is_kept(self) -> None:
        raw = "3F2504E0-4F89-41D3-9A0C-0305E82C3301"
        assert coerce_session_id(raw) == raw.lower()

    @pytest.mark.parametrize("raw", ["", None, "42", "not-a-uuid"])
    def test_invalid_gets_fresh_uuid(self, raw: str | None) -> None:
        generated = coerce_session_id(raw)
        assert str(uuid.UUID(generated)) == generated

    def test_generated_ids_are_unique(self) -> None:
        assert coerce_session_id("") != coerce_session_id("")
