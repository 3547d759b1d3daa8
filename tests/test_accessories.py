from __future__ import annotations

import unittest

from app.domain.accessories import (
    FILTER_TIPS_ACCESSORY,
    NONE_ACCESSORY,
    OTHER_ACCESSORY,
    accessory_config_for,
    is_accessory_allowed,
    normalize_accessory,
)
from app.domain.quantity import VesselCategory


class TestNormalizeAccessory(unittest.TestCase):
    def test_blank_and_na_become_none(self) -> None:
        for raw in ("", "   ", "N/A", "na", "Accessory Used", None):
            self.assertEqual(normalize_accessory(raw).accessory, NONE_ACCESSORY)

    def test_filter_part_numbers_collapse(self) -> None:
        self.assertEqual(normalize_accessory("filter_glass").accessory, FILTER_TIPS_ACCESSORY)

    def test_bowl_and_battery_collapse_to_other(self) -> None:
        self.assertEqual(normalize_accessory("bowl_14mm").accessory, OTHER_ACCESSORY)
        self.assertEqual(normalize_accessory("battery_510").accessory, OTHER_ACCESSORY)
        self.assertEqual(normalize_accessory("Unknown").accessory, OTHER_ACCESSORY)

    def test_consumables_become_none(self) -> None:
        self.assertEqual(normalize_accessory("Gummie").accessory, NONE_ACCESSORY)
        self.assertEqual(normalize_accessory("dropper").accessory, NONE_ACCESSORY)

    def test_food_notes_move_to_comments(self) -> None:
        mapping = normalize_accessory("Carnitas Tacos")
        self.assertEqual(mapping.accessory, NONE_ACCESSORY)
        self.assertEqual(mapping.moved_to_comments, "Carnitas Tacos")

    def test_other_values_are_kept_trimmed(self) -> None:
        mapping = normalize_accessory("  Grinder ")
        self.assertEqual(mapping.accessory, "Grinder")
        self.assertIsNone(mapping.moved_to_comments)


class TestAccessoryConfig(unittest.TestCase):
    def test_unknown_category_uses_other(self) -> None:
        self.assertEqual(accessory_config_for("Hookah"), accessory_config_for(VesselCategory.OTHER))

    def test_edibles_reject_custom_accessories(self) -> None:
        self.assertTrue(is_accessory_allowed(VesselCategory.EDIBLE, "N/A"))
        self.assertFalse(is_accessory_allowed(VesselCategory.EDIBLE, "Grinder"))

    def test_prefixed_accessory_allowed_for_matching_vessel(self) -> None:
        self.assertTrue(is_accessory_allowed(VesselCategory.DAB_RIG, "banger_quartz"))
        self.assertTrue(is_accessory_allowed(VesselCategory.PIPE, "screen_brass"))


if __name__ == "__main__":
    unittest.main()
