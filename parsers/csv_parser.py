"""
CSV parser for lead imports.

Reads a user-uploaded delimited file into header names and row dicts.
Every value stays a string; typing happens later in the lead transformer.

Two passes are made over the same bytes: a short preview for the mapping
step, then a full read when the user confirms the import.
"""

import csv
from dataclasses import dataclass, field
from io import BytesIO, StringIO
from pathlib import Path
from typing import Optional, Union
import structlog

import pandas as pd

from exceptions import CsvParseError

logger = structlog.get_logger(__name__)

CANDIDATE_DELIMITERS = ",;\t|"
SNIFF_SAMPLE_CHARS = 8192

SourceRow = dict[str, str]


@dataclass
class CsvParseResult:
    """Headers in file order plus parsed rows."""
    headers: list[str] = field(default_factory=list)
    rows: list[SourceRow] = field(default_factory=list)
    delimiter: str = ","

    @property
    def row_count(self) -> int:
        return len(self.rows)


def _read_text(file: Union[str, Path, bytes, BytesIO]) -> str:
    """Decode the upload as UTF-8, dropping a leading BOM."""
    try:
        if isinstance(file, (str, Path)):
            raw = Path(file).read_bytes()
        elif isinstance(file, bytes):
            raw = file
        else:
            raw = file.read()
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.error("csv_decode_failed", error=str(e))
        raise CsvParseError(
            message="File is not valid UTF-8 text",
            details={"original_error": str(e)}
        )
    except OSError as e:
        logger.error("csv_read_failed", error=str(e))
        raise CsvParseError(
            message="Failed to read CSV file",
            details={"original_error": str(e)}
        )


def detect_delimiter(text: str) -> str:
    """
    Guess the delimiter from the first lines of the file.

    Falls back to comma when the sample is ambiguous (e.g. a single column).
    """
    sample = text[:SNIFF_SAMPLE_CHARS]
    try:
        return csv.Sniffer().sniff(sample, delimiters=CANDIDATE_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _parse(text: str, nrows: Optional[int]) -> CsvParseResult:
    if not text.strip():
        raise CsvParseError(message="CSV file is empty")

    delimiter = detect_delimiter(text)

    try:
        df = pd.read_csv(
            StringIO(text),
            sep=delimiter,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
            nrows=nrows,
        )
    except pd.errors.EmptyDataError as e:
        raise CsvParseError(
            message="CSV file has no header row",
            details={"original_error": str(e)}
        )
    except pd.errors.ParserError as e:
        logger.error("csv_parse_failed", error=str(e), delimiter=delimiter)
        raise CsvParseError(
            message="Failed to parse CSV file",
            details={"original_error": str(e), "delimiter": delimiter}
        )

    # Short rows come back as NaN even with keep_default_na=False
    df = df.fillna("")

    headers = [str(col) for col in df.columns]
    rows = [
        {header: str(value) for header, value in zip(headers, record)}
        for record in df.itertuples(index=False, name=None)
    ]

    return CsvParseResult(headers=headers, rows=rows, delimiter=delimiter)


def parse_csv_preview(
    file: Union[str, Path, bytes, BytesIO],
    rows: int = 5,
) -> CsvParseResult:
    """
    Parse the header and the first few rows of a CSV file.

    Args:
        file: File path, raw bytes or file-like object
        rows: Number of data rows to return

    Returns:
        CsvParseResult with all headers and at most `rows` rows

    Raises:
        CsvParseError: If the file cannot be decoded or parsed
    """
    logger.debug("parsing_csv_preview", rows=rows)
    result = _parse(_read_text(file), nrows=rows)
    logger.info(
        "csv_preview_parsed",
        headers=len(result.headers),
        rows=result.row_count,
        delimiter=result.delimiter
    )
    return result


def parse_csv(file: Union[str, Path, bytes, BytesIO]) -> CsvParseResult:
    """
    Parse every row of a CSV file.

    Raises:
        CsvParseError: If the file cannot be decoded or parsed
    """
    logger.debug("parsing_csv")
    result = _parse(_read_text(file), nrows=None)
    logger.info(
        "csv_parsed",
        headers=len(result.headers),
        rows=result.row_count
    )
    return result
