"""
File parsers module.
"""

from parsers.csv_parser import (
    parse_csv,
    parse_csv_preview,
    detect_delimiter,
    CsvParseResult,
    SourceRow,
)

__all__ = [
    "parse_csv",
    "parse_csv_preview",
    "detect_delimiter",
    "CsvParseResult",
    "SourceRow",
]
