"""
tests/test_quantity.py

Pytest unit tests for the tagged quantity model.
"""

from __future__ import annotations

import pytest

from app.domain.quantity import (
    SIZE_LABELS,
    VESSEL_CATEGORIES,
    InvalidSizeLabelError,
    QuantityType,
    QuantityValue,
    VesselCategory,
    format_quantity,
    make_quantity,
    migrate_legacy_quantity,
    quantity_config_for,
)


# ---------------------------------------------------------------------------
# Config lookup
# ---------------------------------------------------------------------------


class TestQuantityConfig:
    def test_every_category_has_a_config(self) -> None:
        for category in VESSEL_CATEGORIES:
            assert quantity_config_for(category).unit

    def test_unknown_category_falls_back_to_other(self) -> None:
        assert quantity_config_for("Hookah") == quantity_config_for(VesselCategory.OTHER)
        assert quantity_config_for(None).unit == "units"

    def test_bowl_vessels_use_size_labels(self) -> None:
        config = quantity_config_for(VesselCategory.BONG)
        assert config.type == QuantityType.SIZE_CATEGORY
        assert config.options == SIZE_LABELS


# ---------------------------------------------------------------------------
# make_quantity
# ---------------------------------------------------------------------------


class TestMakeQuantity:
    def test_size_label_becomes_ordinal(self) -> None:
        value = make_quantity(VesselCategory.BONG, "medium")
        assert value == QuantityValue(amount=2, unit="bowl size", type=QuantityType.SIZE_CATEGORY)

    def test_size_label_is_case_insensitive(self) -> None:
        assert make_quantity(VesselCategory.PIPE, " Large ").amount == 3

    def test_unknown_size_label_raises(self) -> None:
        with pytest.raises(InvalidSizeLabelError) as excinfo:
            make_quantity(VesselCategory.BONG, "huge")
        assert excinfo.value.label == "huge"
        assert isinstance(excinfo.value, ValueError)

    def test_numeric_size_input_raises(self) -> None:
        with pytest.raises(InvalidSizeLabelError):
            make_quantity(VesselCategory.PIPE, 2)

    def test_edible_milligrams(self) -> None:
        value = make_quantity(VesselCategory.EDIBLE, "10")
        assert value.amount == 10.0
        assert value.unit == "mg THC"
        assert value.type == QuantityType.MILLIGRAMS

    def test_non_numeric_falls_back_to_placeholder(self) -> None:
        assert make_quantity(VesselCategory.JOINT, "a bit").amount == 0.25
        assert make_quantity(VesselCategory.PEN, "").amount == 5

    def test_nan_falls_back_to_placeholder(self) -> None:
        assert make_quantity(VesselCategory.DAB_RIG, "nan").amount == 1
        assert make_quantity(VesselCategory.DAB_RIG, float("inf")).amount == 1

    @pytest.mark.parametrize("category", VESSEL_CATEGORIES)
    def test_unit_always_matches_category_config(self, category: str) -> None:
        raw = "small" if quantity_config_for(category).type == QuantityType.SIZE_CATEGORY else 1.5
        assert make_quantity(category, raw).unit == quantity_config_for(category).unit


# ---------------------------------------------------------------------------
# Formatting and serialization
# ---------------------------------------------------------------------------


class TestFormatQuantity:
    def test_size_category(self) -> None:
        assert format_quantity(make_quantity(VesselCategory.BONG, "tiny")) == "tiny bowl size"

    def test_integral_float_drops_decimal(self) -> None:
        assert format_quantity(make_quantity(VesselCategory.EDIBLE, "10")) == "10 mg THC"

    def test_fractional_amount(self) -> None:
        assert format_quantity(make_quantity(VesselCategory.JOINT, 0.5)) == "0.5 joint portion"

    def test_out_of_range_ordinal_is_unknown(self) -> None:
        value = QuantityValue(amount=7, unit="bowl size", type=QuantityType.SIZE_CATEGORY)
        assert format_quantity(value) == "unknown bowl size"


class TestSerialization:
    def test_json_shape(self) -> None:
        value = make_quantity(VesselCategory.BONG, "small")
        assert value.to_json() == '{"amount":1,"unit":"bowl size","type":"size_category"}'

    def test_from_json_restores_value(self) -> None:
        value = make_quantity(VesselCategory.TINCTURE, 7.5)
        assert QuantityValue.from_json(value.to_json()) == value

    def test_from_dict_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            QuantityValue.from_dict({"amount": 1, "unit": "units", "type": "grams"})

    def test_from_json_rejects_non_object(self) -> None:
        with pytest.raises(ValueError):
            QuantityValue.from_json("[1, 2]")


class TestLegacyMigration:
    def test_decimal_category_keeps_amount(self) -> None:
        assert migrate_legacy_quantity(VesselCategory.JOINT, 0.3).amount == 0.3

    def test_size_category_clamps_onto_scale(self) -> None:
        assert migrate_legacy_quantity(VesselCategory.BONG, 9).amount == 3
        assert migrate_legacy_quantity(VesselCategory.BONG, -2).amount == 0

    def test_missing_amount_uses_placeholder(self) -> None:
        assert migrate_legacy_quantity(VesselCategory.EDIBLE, None).amount == 10
