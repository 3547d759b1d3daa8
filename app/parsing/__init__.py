"""
app/parsing package marker.
"""

from app.parsing.delimited import DelimitedParseError, ParsedTable, detect_delimiter, parse_delimited_text, split_line

__all__ = [
    "DelimitedParseError",
    "ParsedTable",
    "detect_delimiter",
    "parse_delimited_text",
    "split_line",
]
