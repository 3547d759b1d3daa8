"""
app/parsing/delimited.py

Delimiter-aware line splitting for historical tracking exports.

The exports come either as TSV (copied straight out of the spreadsheet) or as
CSV. The delimiter is chosen once per file from the header line; rows are
then split with a small quote-aware scanner so that a stray unterminated quote
in a comment swallows the rest of that line instead of the rest of the file.
"""

from __future__ import annotations

from dataclasses import dataclass, field

TAB = "\t"
COMMA = ","
_QUOTE = '"'
_BOM = "\ufeff"


class DelimitedParseError(ValueError):
    """
    Raised when input text has no usable header line.
    """


@dataclass(frozen=True)
class ParsedTable:
    """
    Header-indexed rows from one delimited file.
    """

    delimiter: str
    headers: tuple[str, ...]
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def delimiter_name(self) -> str:
        return "TAB" if self.delimiter == TAB else self.delimiter


def detect_delimiter(header_line: str) -> str:
    """
    Pick tab or comma by plurality over the header line; ties go to tab.
    """

    tab_count = header_line.count(TAB)
    comma_count = header_line.count(COMMA)
    if comma_count > tab_count:
        return COMMA
    return TAB


def split_line(line: str, delimiter: str) -> list[str]:
    """
    Split one line into trimmed fields, honouring double-quoted segments.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == _QUOTE:
            in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append("".join(current).strip())
    return fields


def parse_delimited_text(text: str) -> ParsedTable:
    """
    Parse whole-file content into header-indexed rows.

    Blank lines are skipped. Short rows are padded with empty strings; surplus
    cells are folded back into the last column, which in these exports is
    always the free-text Comments field.
    """

    if text.startswith(_BOM):
        text = text[len(_BOM):]

    lines = [line.rstrip("\r") for line in text.split("\n")]
    non_blank = [line for line in lines if line.strip()]
    if not non_blank:
        raise DelimitedParseError("Input has no header line.")

    header_line = non_blank[0]
    delimiter = detect_delimiter(header_line)
    headers = tuple(split_line(header_line, delimiter))
    if not any(headers):
        raise DelimitedParseError("Header line contains no column names.")

    rows: list[dict[str, str]] = []
    for line in non_blank[1:]:
        values = split_line(line, delimiter)
        if len(values) > len(headers):
            tail = delimiter.join(values[len(headers) - 1:])
            values = values[: len(headers) - 1] + [tail.strip()]
        elif len(values) < len(headers):
            values = values + [""] * (len(headers) - len(values))
        rows.append(dict(zip(headers, values)))

    return ParsedTable(delimiter=delimiter, headers=headers, rows=rows)
