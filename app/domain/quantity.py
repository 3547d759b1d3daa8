"""
app/domain/quantity.py

Quantity model for consumption sessions.

How much was consumed is stored as a tagged value whose interpretation
depends on the vessel category the session used:

    decimal        amount is a plain number of ``unit`` (joint portion, puffs)
    milligrams     amount is milligrams of THC
    size_category  amount is the ordinal of a bowl size in SIZE_LABELS

The unit is always derived from the vessel category and never chosen by the
caller, so a stored quantity can be re-derived from (category, amount).
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass
from typing import Any, Mapping


class QuantityType:
    DECIMAL = "decimal"
    MILLIGRAMS = "milligrams"
    SIZE_CATEGORY = "size_category"


QUANTITY_TYPES: tuple[str, ...] = (
    QuantityType.DECIMAL,
    QuantityType.MILLIGRAMS,
    QuantityType.SIZE_CATEGORY,
)

SIZE_LABELS: tuple[str, ...] = ("tiny", "small", "medium", "large")


class VesselCategory:
    BONG = "Bong"
    JOINT = "Joint"
    PIPE = "Pipe"
    PEN = "Pen"
    EDIBLE = "Edible"
    TINCTURE = "Tincture"
    PRE_ROLL = "Pre-roll"
    BLUNT = "Blunt"
    DAB_RIG = "Dab Rig"
    OTHER = "Other"


VESSEL_CATEGORIES: tuple[str, ...] = (
    VesselCategory.BONG,
    VesselCategory.JOINT,
    VesselCategory.PIPE,
    VesselCategory.PEN,
    VesselCategory.EDIBLE,
    VesselCategory.TINCTURE,
    VesselCategory.PRE_ROLL,
    VesselCategory.BLUNT,
    VesselCategory.DAB_RIG,
    VesselCategory.OTHER,
)


class InvalidSizeLabelError(ValueError):
    """
    Raised when a size-category vessel receives something other than a size label.
    """

    def __init__(self, category: str, label: Any) -> None:
        allowed = ", ".join(SIZE_LABELS)
        super().__init__(
            f"{category!r} quantities must be one of: {allowed}. Got {label!r}."
        )
        self.category = category
        self.label = label


@dataclass(frozen=True)
class QuantityConfig:
    """
    Static input configuration for one vessel category.
    """

    type: str
    unit: str
    placeholder: float | None = None
    step: float | None = None
    options: tuple[str, ...] | None = None


VESSEL_QUANTITY_CONFIG: dict[str, QuantityConfig] = {
    VesselCategory.BONG: QuantityConfig(QuantityType.SIZE_CATEGORY, "bowl size", options=SIZE_LABELS),
    VesselCategory.JOINT: QuantityConfig(QuantityType.DECIMAL, "joint portion", placeholder=0.25, step=0.01),
    VesselCategory.PIPE: QuantityConfig(QuantityType.SIZE_CATEGORY, "bowl size", options=SIZE_LABELS),
    VesselCategory.PEN: QuantityConfig(QuantityType.DECIMAL, "puffs", placeholder=5, step=1),
    VesselCategory.EDIBLE: QuantityConfig(QuantityType.MILLIGRAMS, "mg THC", placeholder=10, step=1),
    VesselCategory.TINCTURE: QuantityConfig(QuantityType.MILLIGRAMS, "mg THC", placeholder=5, step=1),
    VesselCategory.PRE_ROLL: QuantityConfig(QuantityType.DECIMAL, "joint portion", placeholder=0.5, step=0.1),
    VesselCategory.BLUNT: QuantityConfig(QuantityType.DECIMAL, "blunt portion", placeholder=0.25, step=0.01),
    VesselCategory.DAB_RIG: QuantityConfig(QuantityType.DECIMAL, "dabs", placeholder=1, step=0.5),
    VesselCategory.OTHER: QuantityConfig(QuantityType.DECIMAL, "units", placeholder=1, step=0.1),
}


@dataclass(frozen=True)
class QuantityValue:
    """
    Immutable amount + unit + type triple.
    """

    amount: float
    unit: str
    type: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        """
        Serialize for the ``quantity`` text column.
        """

        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> QuantityValue:
        quantity_type = str(payload.get("type") or QuantityType.DECIMAL)
        if quantity_type not in QUANTITY_TYPES:
            raise ValueError(f"Unknown quantity type {quantity_type!r}.")
        amount = payload.get("amount", 0)
        if quantity_type == QuantityType.SIZE_CATEGORY:
            amount = int(amount)
        return cls(amount=amount, unit=str(payload.get("unit") or ""), type=quantity_type)

    @classmethod
    def from_json(cls, raw: str) -> QuantityValue:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("Stored quantity must be a JSON object.")
        return cls.from_dict(payload)


def quantity_config_for(category: str | None) -> QuantityConfig:
    """
    Return the quantity config for a vessel category, falling back to Other.
    """

    if category is None:
        return VESSEL_QUANTITY_CONFIG[VesselCategory.OTHER]
    return VESSEL_QUANTITY_CONFIG.get(category, VESSEL_QUANTITY_CONFIG[VesselCategory.OTHER])


def size_label_index(label: str) -> int | None:
    normalized = label.strip().lower()
    if normalized in SIZE_LABELS:
        return SIZE_LABELS.index(normalized)
    return None


def make_quantity(category: str | None, raw_amount: float | int | str) -> QuantityValue:
    """
    Build a QuantityValue for a vessel category.

    Size-category vessels take a size label and store its ordinal; an
    unrecognised label raises InvalidSizeLabelError rather than storing an
    out-of-range ordinal. Other vessels take a number; non-numeric input falls
    back to the category placeholder.
    """

    config = quantity_config_for(category)

    if config.type == QuantityType.SIZE_CATEGORY:
        index = size_label_index(raw_amount) if isinstance(raw_amount, str) else None
        if index is None:
            raise InvalidSizeLabelError(category or VesselCategory.OTHER, raw_amount)
        return QuantityValue(amount=index, unit=config.unit, type=config.type)

    return QuantityValue(
        amount=_coerce_amount(raw_amount, config),
        unit=config.unit,
        type=config.type,
    )


def migrate_legacy_quantity(category: str | None, legacy_amount: float | int | None) -> QuantityValue:
    """
    Wrap a bare legacy numeric quantity in the tagged model.

    Legacy rows predate bowl sizes, so size-category vessels clamp the number
    onto the size scale instead of failing.
    """

    config = quantity_config_for(category)
    if config.type == QuantityType.SIZE_CATEGORY:
        amount = _coerce_amount(legacy_amount, config)
        index = min(max(int(round(amount)), 0), len(SIZE_LABELS) - 1)
        return make_quantity(category, SIZE_LABELS[index])
    return make_quantity(category, legacy_amount if legacy_amount is not None else "")


def format_quantity(value: QuantityValue) -> str:
    """
    Render a quantity for display, e.g. ``"medium bowl size"`` or ``"10 mg THC"``.
    """

    if value.type == QuantityType.SIZE_CATEGORY:
        index = int(value.amount)
        label = SIZE_LABELS[index] if 0 <= index < len(SIZE_LABELS) else "unknown"
        return f"{label} {value.unit}"
    return f"{_format_number(value.amount)} {value.unit}"


def _coerce_amount(raw_amount: Any, config: QuantityConfig) -> float:
    default = config.placeholder if config.placeholder is not None else 1
    if isinstance(raw_amount, bool):
        return default
    if isinstance(raw_amount, (int, float)):
        return raw_amount if math.isfinite(raw_amount) else default
    try:
        amount = float(str(raw_amount).strip())
    except (TypeError, ValueError):
        return default
    return amount if math.isfinite(amount) else default


def _format_number(amount: float) -> str:
    if isinstance(amount, float) and amount.is_integer():
        return str(int(amount))
    return str(amount)
