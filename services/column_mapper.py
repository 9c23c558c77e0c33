"""
Column mapping for CSV lead imports.

Suggests which CSV column feeds which lead field, and validates the mapping
the user finally confirms.

Suggestions come from an ordered rule table. Each header is checked against
the rules once, top to bottom; the first rule with a keyword contained in the
header (case- and accent-insensitive) claims it. The table is plain data so
callers can pass their own.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence
import structlog

from models.lead_import import FieldSpec, LEAD_IMPORT_FIELDS
from exceptions import (
    MissingRequiredFieldsError,
    UnknownColumnError,
    UnknownFieldError,
)
from utils.text_utils import fold_text

logger = structlog.get_logger(__name__)

ColumnMapping = dict[str, str]


@dataclass(frozen=True)
class MappingRule:
    """Header keywords (already folded) that point at one lead field."""
    keywords: tuple[str, ...]
    field: str

    def matches(self, header: str) -> bool:
        folded = fold_text(header)
        return any(keyword in folded for keyword in self.keywords)


# Priority order matters: "Service Type" hits the type rule before service.
DEFAULT_MAPPING_RULES: tuple[MappingRule, ...] = (
    MappingRule(("nome", "name"), "name"),
    MappingRule(("email",), "email"),
    MappingRule(("tele", "phone"), "phone"),
    MappingRule(("zip", "cep"), "zip_code"),
    MappingRule(("type", "tipo"), "type"),
    MappingRule(("bed", "quarto"), "bedrooms"),
    MappingRule(("bath", "banheiro"), "bathrooms"),
    MappingRule(("sqft", "area"), "sqft"),
    MappingRule(("pessoa", "people"), "people_count"),
    MappingRule(("service", "servico"), "service"),
    MappingRule(("estim", "price", "preco"), "estimated_price"),
    MappingRule(("cidade", "city"), "city"),
)


def match_header(
    header: str,
    rules: Sequence[MappingRule] = DEFAULT_MAPPING_RULES,
) -> Optional[str]:
    """Return the field of the first rule matching header, or None."""
    for rule in rules:
        if rule.matches(header):
            return rule.field
    return None


def suggest_mapping(
    headers: Iterable[str],
    rules: Sequence[MappingRule] = DEFAULT_MAPPING_RULES,
) -> ColumnMapping:
    """
    Guess a field -> column mapping from CSV headers.

    Args:
        headers: CSV headers in file order
        rules: Ordered rule table

    Returns:
        Mapping of lead field key to CSV header. Headers that match no rule
        are left out; when two headers match the same field the first one
        in file order keeps it.
    """
    mapping: ColumnMapping = {}
    unmatched = []

    for header in headers:
        field = match_header(header, rules)
        if field is None:
            unmatched.append(header)
            continue
        if field in mapping:
            logger.debug(
                "mapping_field_already_claimed",
                field=field,
                kept=mapping[field],
                skipped=header
            )
            continue
        mapping[field] = header

    logger.info(
        "mapping_suggested",
        mapped=len(mapping),
        unmatched=len(unmatched)
    )

    return mapping


def clean_mapping(raw: dict[str, Optional[str]]) -> ColumnMapping:
    """Drop ignored entries (None or blank column)."""
    return {
        field: column
        for field, column in raw.items()
        if column is not None and column.strip() != ""
    }


def validate_mapping(
    mapping: ColumnMapping,
    headers: Sequence[str],
    fields: Sequence[FieldSpec] = LEAD_IMPORT_FIELDS,
    enforce_required: bool = True,
) -> None:
    """
    Check a confirmed mapping before any row is written.

    Raises:
        UnknownFieldError: Mapping names a field that isn't offered
        UnknownColumnError: Mapping names a column the file doesn't have
        MissingRequiredFieldsError: A required field is unmapped
    """
    valid_keys = [f.key for f in fields]

    for field, column in mapping.items():
        if field not in valid_keys:
            raise UnknownFieldError(field, valid_keys)
        if column not in headers:
            raise UnknownColumnError(field, column, list(headers))

    if enforce_required:
        missing = [f.key for f in fields if f.required and f.key not in mapping]
        if missing:
            logger.warning("mapping_missing_required_fields", fields=missing)
            raise MissingRequiredFieldsError(missing)
