# src/datarules/validator/fields.py
"""
Cell-level helpers shared by the schema and cross-entity checks.

Rows come from spreadsheet parsers, so the same logical value can arrive as
a number, a numeric string, or a padded string. Everything here normalizes
those spellings without raising, except `parse_phases`, whose failure is a
reportable data problem in its own right.
"""

from __future__ import annotations

import json
import math
import re

from datarules.errors import PhaseFormatError
from datarules.schemas.models import CellValue

_RANGE_RE = re.compile(r"^(\d+)\s*-\s*(\d+)$")
_NUMBER_RE = re.compile(r"^\d+$")


def cell_text(value: CellValue) -> str:
    """Render a cell as trimmed text; integral floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_blank(value: CellValue) -> bool:
    return cell_text(value) == ""


def coerce_number(value: CellValue) -> float | None:
    """Parse numbers and numeric strings; None when the cell is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def split_list(value: CellValue) -> list[str]:
    """Comma-separated cell -> trimmed, non-empty elements."""
    return [part.strip() for part in cell_text(value).split(",") if part.strip()]


def has_empty_elements(value: CellValue) -> bool:
    """True for doubled, leading or trailing separators (e.g. 'a,,b', ',a', 'a, ')."""
    text = cell_text(value)
    if not text:
        return False
    return any(not part.strip() for part in text.split(","))


def looks_like_json(value: CellValue) -> bool:
    text = cell_text(value)
    return text.startswith("{") or text.startswith("[")


def parse_phases(value: CellValue) -> list[int]:
    """
    @brief
    Normalize a phase cell into an ordered list of distinct phase numbers.

    @details
    Accepted encodings:
      - JSON array of integers: "[1,2,3]"
      - hyphen range (inclusive): "1-3"
      - single number: "2" or 2

    @raises
        PhaseFormatError
            Raised for any other spelling, including inverted ranges and
            arrays holding non-integers.
    """
    text = cell_text(value)

    # (1) JSON array
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise PhaseFormatError(
                f"Invalid phase array {text!r}: {e.msg}", source="fields.parse_phases"
            ) from e
        if not isinstance(parsed, list) or not all(
            isinstance(p, int) and not isinstance(p, bool) for p in parsed
        ):
            raise PhaseFormatError(
                f"Phase array must contain integers only: {text!r}", source="fields.parse_phases"
            )
        return list(dict.fromkeys(parsed))

    # (2) Hyphen range
    match = _RANGE_RE.match(text)
    if match:
        start, end = int(match.group(1)), int(match.group(2))
        if start > end:
            raise PhaseFormatError(
                f"Phase range is inverted: {text!r}", source="fields.parse_phases"
            )
        return list(range(start, end + 1))

    # (3) Single number
    if _NUMBER_RE.match(text):
        return [int(text)]

    raise PhaseFormatError(f"Unrecognized phase format: {text!r}", source="fields.parse_phases")
