from __future__ import annotations

import unittest

from app.validators.header_validator import (
    MissingRequiredColumnsError,
    SessionColumn,
    SessionHeaderValidator,
)

FULL_HEADERS = (
    "Instance (Blake Tracking)",
    "When",
    "Location",
    "Vessel",
    "Strain",
    "Quantity",
)


class TestSessionHeaderValidator(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = SessionHeaderValidator()

    def test_matches_case_and_whitespace_insensitively(self) -> None:
        mapping = self.validator.resolve((" instance (blake tracking) ", "WHEN", "location", "vessel", "strain", "Quantity "))
        self.assertEqual(mapping.missing_required, [])
        self.assertEqual(mapping.column_to_source[SessionColumn.WHEN], "WHEN")

    def test_require_reports_every_missing_column(self) -> None:
        with self.assertRaises(MissingRequiredColumnsError) as ctx:
            self.validator.require(("When", "Vessel"))

        self.assertEqual(
            set(ctx.exception.missing),
            {SessionColumn.INSTANCE, SessionColumn.LOCATION, SessionColumn.STRAIN, SessionColumn.QUANTITY},
        )

    def test_canonical_row_fills_absent_columns(self) -> None:
        mapping = self.validator.require(FULL_HEADERS)
        row = mapping.canonical_row({"When": "1/2/23 3:04 PM", "Vessel": "Bong"})

        self.assertEqual(row[SessionColumn.WHEN], "1/2/23 3:04 PM")
        self.assertEqual(row[SessionColumn.KIEF], "")
        self.assertEqual(row[SessionColumn.STRAIN], "")


if __name__ == "__main__":
    unittest.main()
