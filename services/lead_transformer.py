"""
Turns parsed CSV rows into lead records ready for insertion.

Pure functions: the same row, mapping and timestamp always produce the same
record.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from models.lead_import import DEFAULT_IMPORT_STATUS, NUMERIC_FIELDS
from utils.text_utils import parse_loose_number

NormalizedRecord = dict[str, Any]


def import_timestamp() -> str:
    """ISO-8601 UTC timestamp stamped on imported rows."""
    return datetime.now(timezone.utc).isoformat()


def transform_row(
    row: dict[str, str],
    mapping: dict[str, str],
    created_at: str,
    numeric_fields: frozenset[str] = NUMERIC_FIELDS,
) -> NormalizedRecord:
    """
    Build one lead record from one CSV row.

    Args:
        row: CSV header -> raw cell value
        mapping: Lead field -> CSV header (unmapped fields absent)
        created_at: Timestamp written to created_at
        numeric_fields: Fields coerced with parse_loose_number()

    Returns:
        Record with status, created_at and every mapped field. Numeric
        fields that hold no digits become None; text is copied as-is.
    """
    record: NormalizedRecord = {
        "status": DEFAULT_IMPORT_STATUS,
        "created_at": created_at,
    }

    for field, column in mapping.items():
        value: Optional[Any] = row.get(column)
        if field in numeric_fields:
            value = parse_loose_number(value)
        record[field] = value

    return record


def transform_batch(
    rows: Sequence[dict[str, str]],
    mapping: dict[str, str],
    created_at: Optional[str] = None,
) -> list[NormalizedRecord]:
    """Transform a batch of rows with one shared timestamp."""
    stamp = created_at or import_timestamp()
    return [transform_row(row, mapping, stamp) for row in rows]
