"""
Text utilities for handling Portuguese/English text with accents.

Used to compare CSV headers against mapping keywords.
"""

import re
import unicodedata
from typing import Optional


def fold_text(value: Optional[str]) -> str:
    """
    Fold text for case- and accent-insensitive comparison.

    - "Serviço" -> "servico"
    - "  PREÇO Estimado " -> "preco estimado"
    - None -> ""

    Args:
        value: Original text (may have accents, mixed case)

    Returns:
        Lowercase ASCII string with surrounding whitespace removed
    """
    if not value:
        return ""

    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', value.strip())

    # Remove accent marks (combining characters in Unicode category 'Mn')
    ascii_text = ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )

    return ascii_text.lower()


_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_loose_number(value: Optional[object]) -> Optional[float]:
    """
    Pull a number out of a messy spreadsheet cell.

    Everything except digits and '.' is dropped, then the leading decimal
    number is read. Signs are dropped along with everything else.

    - "$1,250.50" -> 1250.5
    - "3 bedrooms" -> 3.0
    - "1.2.3" -> 1.2
    - "N/A", "-", "" -> None

    Returns:
        Parsed float, or None when no digits remain
    """
    if value is None:
        return None

    cleaned = _NON_NUMERIC.sub("", str(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None

    return float(match.group())
