"""
app/mappers/field_parsers.py

Lenient cell parsers for historical session exports.

Every parser here accepts whatever the spreadsheet holds and resolves to a
documented default instead of raising. Messy cells are expected in this data
and are not reported as row errors.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from datetime import date

from app.domain.quantity import (
    SIZE_LABELS,
    VESSEL_CATEGORIES,
    QuantityType,
    QuantityValue,
    VesselCategory,
    make_quantity,
    quantity_config_for,
)
from app.mappers.vessel_classifier import classify_vessel

TRUTHY_VALUES = frozenset({"y", "yes", "true", "1"})

FALLBACK_TIME = "12:00"

_UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?|\.\d+")
_TIME_PATTERN = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{1,2}))?(?::\d{1,2})?\s*(?P<meridiem>[ap])?\.?\s*m?\.?$",
    re.IGNORECASE,
)
_MILLIGRAM_PATTERN = re.compile(r"^(?P<amount>\d+(?:\.\d+)?|\.\d+)\s*mg$")

_BOWL_UNIT = quantity_config_for(VesselCategory.BONG).unit
_PUFF_UNIT = quantity_config_for(VesselCategory.PEN).unit
_DAB_UNIT = quantity_config_for(VesselCategory.DAB_RIG).unit
_MG_UNIT = quantity_config_for(VesselCategory.EDIBLE).unit
_JOINT_UNIT = quantity_config_for(VesselCategory.JOINT).unit
_FALLBACK_UNIT = quantity_config_for(VesselCategory.OTHER).unit


@dataclass(frozen=True)
class ParsedWhen:
    """
    ISO date (yyyy-mm-dd) and 24h time (HH:MM) for one session.
    """

    date: str
    time: str
    is_fallback: bool = False


def parse_boolean(value: str | None) -> bool:
    """
    Coerce Y/yes/true/1 (any case) to True; everything else is False.
    """

    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES


def parse_when(value: str | None, *, today: date | None = None) -> ParsedWhen:
    """
    Parse ``"M/D/YY h:mm AM/PM"`` into ISO date and 24h time.

    A ``.`` between date components is accepted. Two-digit years below 50
    belong to the 2000s, the rest to the 1900s. Anything that does not yield a
    real calendar date resolves to today's date at 12:00. A valid date with
    no time part keeps the date at 12:00.
    """

    fallback = ParsedWhen(
        date=(today or date.today()).isoformat(),
        time=FALLBACK_TIME,
        is_fallback=True,
    )

    parts = (value or "").strip().split()
    if not parts:
        return fallback

    components = parts[0].replace(".", "/").split("/")
    if len(components) != 3:
        return fallback
    try:
        month, day, year = (int(component) for component in components)
    except ValueError:
        return fallback

    if year < 100:
        year = 1900 + year if year >= 50 else 2000 + year
    if not 1 <= month <= 12 or not 1 <= day <= 31:
        return fallback
    try:
        parsed_date = date(year, month, day)
    except ValueError:
        return fallback

    return ParsedWhen(date=parsed_date.isoformat(), time=_parse_clock(" ".join(parts[1:])))


def _parse_clock(raw: str) -> str:
    match = _TIME_PATTERN.match(raw.strip())
    if match is None:
        return FALLBACK_TIME

    hour = int(match.group("hour"))
    minute = int(match.group("minute") or 0)
    meridiem = (match.group("meridiem") or "").lower()

    if meridiem == "p" and hour != 12:
        hour += 12
    elif meridiem == "a" and hour == 12:
        hour = 0

    if hour > 23 or minute > 59:
        return FALLBACK_TIME
    return f"{hour:02d}:{minute:02d}"


def parse_thc_percentage(value: str | None) -> float | None:
    """
    Extract a THC percentage.

    Values above 1 are already percentages; values at or below 1 are read as
    fractions and scaled by 100 (so ``"0.18"`` becomes 18). The result is
    clamped to 100. Blank or unparseable input yields None.
    """

    match = _NUMBER_PATTERN.search(value or "")
    if match is None:
        return None

    number = float(match.group(0))
    percentage = number if number > 1 else number * 100
    return round(min(percentage, 100.0), 4)


def vessel_category_for(vessel: str | None) -> str:
    """
    Accept either a category name or a free-text vessel and return the category.
    """

    stripped = (vessel or "").strip()
    if stripped in VESSEL_CATEGORIES:
        return stripped
    return classify_vessel(stripped)


def parse_quantity_text(value: str | None, vessel: str | None) -> QuantityValue:
    """
    Convert a free-text quantity cell into a QuantityValue.

    Recognised shapes, in order: a bowl size word, ``hits_<N>`` puffs,
    ``<N>mg``, ``dab_<N>`` / ``dab_tiny``, and finally the first number in
    the cell interpreted in the vessel's own unit. Blank or unparseable cells
    become one generic unit.
    """

    text = (value or "").strip().lower()
    if not text:
        return _default_quantity()

    if text in SIZE_LABELS:
        return QuantityValue(amount=SIZE_LABELS.index(text), unit=_BOWL_UNIT, type=QuantityType.SIZE_CATEGORY)

    if text.startswith("hits_"):
        hits = _first_number(text[len("hits_"):])
        return QuantityValue(amount=hits if hits is not None else 1, unit=_PUFF_UNIT, type=QuantityType.DECIMAL)

    milligrams = _MILLIGRAM_PATTERN.match(text)
    if milligrams is not None:
        return QuantityValue(
            amount=float(milligrams.group("amount")),
            unit=_MG_UNIT,
            type=QuantityType.MILLIGRAMS,
        )

    if text.startswith("dab_"):
        suffix = text[len("dab_"):]
        if suffix == "tiny":
            return QuantityValue(amount=0.5, unit=_DAB_UNIT, type=QuantityType.DECIMAL)
        dabs = _first_number(suffix)
        return QuantityValue(amount=dabs if dabs is not None else 1, unit=_DAB_UNIT, type=QuantityType.DECIMAL)

    amount = _first_number(text)
    if amount is None:
        return _default_quantity()

    category = vessel_category_for(vessel)
    if category == VesselCategory.BLUNT:
        return QuantityValue(amount=amount, unit=_JOINT_UNIT, type=QuantityType.DECIMAL)
    if quantity_config_for(category).type == QuantityType.SIZE_CATEGORY:
        # A bare number cannot be placed on the bowl size scale.
        return QuantityValue(amount=amount, unit=_FALLBACK_UNIT, type=QuantityType.DECIMAL)
    return make_quantity(category, amount)


def _first_number(text: str) -> float | None:
    match = _NUMBER_PATTERN.search(text)
    if match is None:
        return None
    number = float(match.group(0))
    return int(number) if number.is_integer() else number


def _default_quantity() -> QuantityValue:
    return QuantityValue(amount=1, unit=_FALLBACK_UNIT, type=QuantityType.DECIMAL)


def combine_location(location: str | None, city: str | None, state: str | None) -> str:
    """
    Build the display location, preferring the bare location column.
    """

    location = (location or "").strip()
    city = (city or "").strip()
    state = (state or "").strip()

    if location:
        return location
    if city and state:
        return f"{city}, {state}"
    return city or state or "Unknown"


def determine_who_with(alone: str | None, people: str | None) -> str:
    if parse_boolean(alone):
        return "Alone"

    cleaned = (people or "").strip().rstrip(";").strip()
    return cleaned or "Unknown"


def is_valid_uuid(value: str | None) -> bool:
    return bool(value) and _UUID_PATTERN.match(value.strip()) is not None


def coerce_session_id(value: str | None) -> str:
    """
    Keep a well-formed UUID from the source row, otherwise mint a new one.
    """

    if value is not None and is_valid_uuid(value):
        return value.strip().lower()
    return str(uuid.uuid4())


def optional_text(value: str | None) -> str | None:
    stripped = (value or "").strip()
    return stripped or None
