"""
app/validators/header_validator.py

Header checks and column resolution for session tracking exports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence


class SessionColumn:
    INSTANCE = "Instance (Blake Tracking)"
    WHEN = "When"
    LOCATION = "Location"
    CITY = "City"
    STATE = "State"
    ALONE = "Alone?"
    PEOPLE = "People"
    VESSEL = "Vessel"
    ACCESSORY = "Accessory Used"
    YOUR_VESSEL = "Your Vessel"
    YOUR_SUBSTANCE = "Your Substance"
    STRAIN = "Strain"
    TYPE = "Type"
    THC = "THC %"
    LEGAL = "Legal Product_Purchased?"
    STATE_PURCHASED = "State Purchased?"
    TOBACCO = "Tobacco"
    KIEF = "Kief"
    CONCENTRATE = "Concentrate"
    # Spelled this way in the export.
    LAVENDER = "Lavendar"
    QUANTITY = "Quantity"
    COMMENTS = "Comments"


SESSION_COLUMNS: tuple[str, ...] = (
    SessionColumn.INSTANCE,
    SessionColumn.WHEN,
    SessionColumn.LOCATION,
    SessionColumn.CITY,
    SessionColumn.STATE,
    SessionColumn.ALONE,
    SessionColumn.PEOPLE,
    SessionColumn.VESSEL,
    SessionColumn.ACCESSORY,
    SessionColumn.YOUR_VESSEL,
    SessionColumn.YOUR_SUBSTANCE,
    SessionColumn.STRAIN,
    SessionColumn.TYPE,
    SessionColumn.THC,
    SessionColumn.LEGAL,
    SessionColumn.STATE_PURCHASED,
    SessionColumn.TOBACCO,
    SessionColumn.KIEF,
    SessionColumn.CONCENTRATE,
    SessionColumn.LAVENDER,
    SessionColumn.QUANTITY,
    SessionColumn.COMMENTS,
)

REQUIRED_SESSION_COLUMNS: tuple[str, ...] = (
    SessionColumn.INSTANCE,
    SessionColumn.WHEN,
    SessionColumn.LOCATION,
    SessionColumn.VESSEL,
    SessionColumn.STRAIN,
    SessionColumn.QUANTITY,
)


def normalize_header(header: str) -> str:
    """
    Normalize a column name for case and whitespace insensitive matching.
    """

    return "".join(ch for ch in header.strip().lower() if ch.isalnum())


class MissingRequiredColumnsError(ValueError):
    """
    Raised when an export lacks one or more required session columns.
    """

    def __init__(self, missing: Sequence[str], headers: Sequence[str]) -> None:
        missing_csv = ", ".join(missing)
        headers_csv = ", ".join(headers) if headers else "<none>"
        super().__init__(f"Missing required columns: {missing_csv}. File headers: {headers_csv}")
        self.missing = tuple(missing)
        self.headers = tuple(headers)


@dataclass(frozen=True)
class SessionColumnMapping:
    """
    Known column name -> header as spelled in the file.
    """

    column_to_source: dict[str, str]
    source_headers: tuple[str, ...]

    @property
    def missing_required(self) -> list[str]:
        return [column for column in REQUIRED_SESSION_COLUMNS if column not in self.column_to_source]

    def canonical_row(self, row: Mapping[str, str]) -> dict[str, str]:
        """
        Re-key one raw row by known column names; absent columns read as "".
        """

        return {
            column: (row.get(self.column_to_source[column]) or "") if column in self.column_to_source else ""
            for column in SESSION_COLUMNS
        }


class SessionHeaderValidator:
    """
    Resolves file headers against the known session export columns.
    """

    def __init__(self, columns: Sequence[str] = SESSION_COLUMNS) -> None:
        self._lookup = {normalize_header(column): column for column in columns}

    def resolve(self, headers: Sequence[str]) -> SessionColumnMapping:
        column_to_source: dict[str, str] = {}
        for header in headers:
            column = self._lookup.get(normalize_header(header))
            if column is not None and column not in column_to_source:
                column_to_source[column] = header
        return SessionColumnMapping(column_to_source=column_to_source, source_headers=tuple(headers))

    def require(self, headers: Sequence[str]) -> SessionColumnMapping:
        """
        Resolve headers and raise MissingRequiredColumnsError if any required column is absent.
        """

        mapping = self.resolve(headers)
        missing = mapping.missing_required
        if missing:
            raise MissingRequiredColumnsError(missing=missing, headers=headers)
        return mapping
