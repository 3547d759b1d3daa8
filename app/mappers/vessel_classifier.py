"""
app/mappers/vessel_classifier.py

Maps free-text vessel names from the tracking spreadsheet onto the fixed
vessel category taxonomy.

Rules are evaluated top to bottom and the first match wins. The order is part
of the contract: "bong paper" is a Bong because the Bong rule is checked
before the Joint rule, and reordering VESSEL_RULES changes classification.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.domain.quantity import VesselCategory

_VESSEL_TYPO_FIXES: dict[str, str] = {
    "V4 Enging Bong": "V4 Engine Bong",
    "Rasberry Gummie": "Raspberry Gummie",
}


@dataclass(frozen=True)
class VesselRule:
    """
    One classification rule: any matching substring, prefix, or exact name.
    """

    category: str
    contains: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()
    exact: tuple[str, ...] = ()

    def matches(self, lowered: str) -> bool:
        return (
            any(token in lowered for token in self.contains)
            or lowered.startswith(self.prefixes)
            or lowered in self.exact
        )


VESSEL_RULES: tuple[VesselRule, ...] = (
    VesselRule(
        VesselCategory.BONG,
        contains=("bong", "bubbler", "simba", "zenco"),
        exact=("lotus",),
    ),
    VesselRule(
        VesselCategory.PIPE,
        contains=("pipe", "one-hitter", "one hitter"),
    ),
    VesselRule(
        VesselCategory.PEN,
        contains=("stizzy", "terp pen", "'s pen"),
        prefixes=("pen_",),
    ),
    VesselRule(
        VesselCategory.EDIBLE,
        contains=("gummie", "cake pop"),
        prefixes=("edible:",),
    ),
    VesselRule(
        VesselCategory.TINCTURE,
        prefixes=("tincture:",),
    ),
    VesselRule(
        VesselCategory.PRE_ROLL,
        contains=("pre-roll",),
    ),
    VesselRule(
        VesselCategory.BLUNT,
        contains=("wrap", "cigarillo", "white owl"),
        prefixes=("spliff",),
    ),
    VesselRule(
        VesselCategory.DAB_RIG,
        contains=("dab rig",),
    ),
    VesselRule(
        VesselCategory.JOINT,
        contains=(
            "paper",
            "cone",
            "vibes",
            "ocb",
            "raw:",
            "bob marley",
            "zig-zag",
            "zzz",
            "blazy susan",
            "king palm",
            "element:",
            "mike tyson",
            "jlg",
            "winooski",
            "purlife",
            "luxe:",
            "rose petal",
        ),
        exact=("cig joint",),
    ),
)


def fix_vessel_typos(vessel: str) -> str:
    """
    Correct known misspellings in historical vessel names.
    """

    stripped = vessel.strip()
    return _VESSEL_TYPO_FIXES.get(stripped, stripped)


def classify_vessel(vessel: str | None) -> str:
    """
    Return the vessel category for a free-text vessel name.

    Total over all strings: blank or unmatched input is Other.
    """

    lowered = (vessel or "").strip().lower()
    if not lowered:
        return VesselCategory.OTHER

    for rule in VESSEL_RULES:
        if rule.matches(lowered):
            return rule.category
    return VesselCategory.OTHER
