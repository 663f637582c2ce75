# tests/validator/test_fields.py
from __future__ import annotations

import pytest

from datarules.errors import PhaseFormatError
from datarules.validator.fields import (
    cell_text,
    coerce_number,
    has_empty_elements,
    is_blank,
    looks_like_json,
    parse_phases,
    split_list,
)


@pytest.mark.parametrize(
    "value,expected",
    [(None, ""), ("  T1 ", "T1"), (3.0, "3"), (2.5, "2.5"), (7, "7")],
)
def test_cell_text_normalizes_spellings(value, expected) -> None:
    """Cells render as trimmed text; integral floats drop the fractional part."""
    assert cell_text(value) == expected


def test_is_blank_treats_whitespace_as_missing() -> None:
    assert is_blank(None)
    assert is_blank("   ")
    assert not is_blank(0)


@pytest.mark.parametrize(
    "value,expected",
    [(3, 3.0), ("4", 4.0), (" 2.5 ", 2.5), ("abc", None), (None, None), (True, None)],
)
def test_coerce_number(value, expected) -> None:
    """
    @brief
    Numeric strings coerce, text and booleans do not.
    """
    assert coerce_number(value) == expected


def test_coerce_number_rejects_nan_and_inf() -> None:
    assert coerce_number(float("nan")) is None
    assert coerce_number("inf") is None


def test_split_list_drops_empty_elements() -> None:
    assert split_list("python, sql,,  ml ") == ["python", "sql", "ml"]
    assert split_list(None) == []


@pytest.mark.parametrize("value", ["a,,b", ",a", "a, ", "a,b,"])
def test_has_empty_elements_detects_bad_separators(value) -> None:
    assert has_empty_elements(value)


@pytest.mark.parametrize("value", ["a,b", "a", "", None])
def test_has_empty_elements_accepts_clean_lists(value) -> None:
    assert not has_empty_elements(value)


def test_looks_like_json() -> None:
    assert looks_like_json(' {"a": 1}')
    assert looks_like_json("[1,2]")
    assert not looks_like_json("plain text")


# -----------------------------
# parse_phases
# -----------------------------
@pytest.mark.parametrize(
    "value,expected",
    [
        ("[1,2,3]", [1, 2, 3]),
        ("[2,2,1]", [2, 1]),
        ("1-3", [1, 2, 3]),
        ("2 - 4", [2, 3, 4]),
        ("2", [2]),
        (5, [5]),
        (2.0, [2]),
    ],
)
def test_parse_phases_accepts_supported_encodings(value, expected) -> None:
    """
    @brief
    Verify the three accepted phase encodings.

    @details
    JSON arrays keep first-seen order without duplicates, ranges are
    inclusive, and a single number yields a one-element list.
    """
    # --- Act ---
    phases = parse_phases(value)

    # --- Assert ---
    assert phases == expected


@pytest.mark.parametrize("value", ["3-1", "[1,", '["a"]', "[true]", "phase one", "", "1,2"])
def test_parse_phases_rejects_malformed_values(value) -> None:
    """Inverted ranges, broken arrays and free text raise PhaseFormatError."""
    with pytest.raises(PhaseFormatError):
        parse_phases(value)
