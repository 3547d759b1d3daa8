"""
app/domain/accessories.py

Accessory configuration per vessel category and accessory clean-up rules
for historical exports.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.quantity import VesselCategory

NONE_ACCESSORY = "None"
OTHER_ACCESSORY = "Other"
FILTER_TIPS_ACCESSORY = "Filter Tips"

_NA_VALUES = {"", "n/a", "na", "none", "accessory used"}

_CONSUMABLE_ACCESSORIES = {"gummie", "mint", "drink", "dropper", "pulled taffy"}

# Free text that landed in the accessory column but belongs in comments.
_MISPLACED_ACCESSORY_TEXT: tuple[str, ...] = (
    "sausage pasta",
    "pasta with meatballs",
    "green chili chicken nachos",
    "green chili bacon cheeseburger",
    "heb crossoint",
    "carnitas tacos",
    "cake pop",
    "coil into wax",
    "american light blue tobacco",
)


@dataclass(frozen=True)
class AccessoryConfig:
    """
    Which accessory names a vessel category accepts.
    """

    prefixes: tuple[str, ...]
    allows_na: bool = True
    allows_custom: bool = True


VESSEL_ACCESSORY_CONFIG: dict[str, AccessoryConfig] = {
    VesselCategory.BONG: AccessoryConfig(prefixes=("bowl_",)),
    VesselCategory.PIPE: AccessoryConfig(prefixes=("bowl_", "screen_")),
    VesselCategory.JOINT: AccessoryConfig(prefixes=("filter_",)),
    VesselCategory.PRE_ROLL: AccessoryConfig(prefixes=("filter_",)),
    VesselCategory.BLUNT: AccessoryConfig(prefixes=("filter_",)),
    VesselCategory.PEN: AccessoryConfig(prefixes=("battery_",)),
    VesselCategory.DAB_RIG: AccessoryConfig(prefixes=("nail_", "banger_", "carb_cap")),
    VesselCategory.EDIBLE: AccessoryConfig(prefixes=(), allows_na=True, allows_custom=False),
    VesselCategory.TINCTURE: AccessoryConfig(prefixes=(), allows_na=True, allows_custom=False),
    VesselCategory.OTHER: AccessoryConfig(prefixes=()),
}


@dataclass(frozen=True)
class AccessoryMapping:
    """
    Result of cleaning one raw accessory cell.
    """

    accessory: str
    moved_to_comments: str | None = None


def accessory_config_for(category: str | None) -> AccessoryConfig:
    if category is None:
        return VESSEL_ACCESSORY_CONFIG[VesselCategory.OTHER]
    return VESSEL_ACCESSORY_CONFIG.get(category, VESSEL_ACCESSORY_CONFIG[VesselCategory.OTHER])


def is_na_accessory(accessory: str | None) -> bool:
    return (accessory or "").strip().lower() in _NA_VALUES


def normalize_accessory(raw: str | None) -> AccessoryMapping:
    """
    Clean an accessory cell from the historical spreadsheet.

    Recognised part numbers collapse to a generic name, edible packaging
    collapses to None, and food notes typed into the wrong column are handed
    back so the caller can append them to comments.
    """

    original = (raw or "").strip()
    lowered = original.lower()

    if any(text in lowered for text in _MISPLACED_ACCESSORY_TEXT):
        return AccessoryMapping(accessory=NONE_ACCESSORY, moved_to_comments=original)
    if lowered in _NA_VALUES or lowered in _CONSUMABLE_ACCESSORIES:
        return AccessoryMapping(accessory=NONE_ACCESSORY)
    if lowered.startswith("filter_"):
        return AccessoryMapping(accessory=FILTER_TIPS_ACCESSORY)
    if lowered.startswith(("bowl_", "battery_")) or lowered == "unknown":
        return AccessoryMapping(accessory=OTHER_ACCESSORY)
    return AccessoryMapping(accessory=original)


def is_accessory_allowed(category: str | None, accessory: str | None) -> bool:
    """
    Return True when ``accessory`` is acceptable for the vessel category.
    """

    config = accessory_config_for(category)
    if is_na_accessory(accessory):
        return config.allows_na

    lowered = (accessory or "").strip().lower()
    if config.prefixes and lowered.startswith(config.prefixes):
        return True
    return config.allows_custom
