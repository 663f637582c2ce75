# src/datarules/validator/schema_checks.py
"""
Per-entity schema checks.

Every function here is pure: it reads the rows it is given, returns a fresh
list of ValidationIssue objects, and never raises for malformed cell values.
"""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Sequence

from datarules.schemas.entities import INTEGER, schema_for
from datarules.schemas.models import EntityType, Row, Severity, ValidationIssue, issue
from datarules.validator.fields import (
    cell_text,
    coerce_number,
    has_empty_elements,
    is_blank,
    looks_like_json,
)

ATTRIBUTES_JSON = "AttributesJSON"
AVAILABLE_SLOTS = "AvailableSlots"


def validate_required_fields(
    row: Row, entity_type: EntityType | str, index: int
) -> list[ValidationIssue]:
    """
    @brief
    Apply the entity schema to a single row.

    @details
    Each required field must be present and non-blank; integer fields must
    also coerce to a number (numeric strings are accepted) and reach the
    field minimum when the schema sets one (MaxLoadPerPhase, MaxConcurrent).
    One error is produced per violated field, carrying the schema's message
    text. Other numeric bounds belong to validate_out_of_range_values.

    @params
        row : Row
            Mapping of column name to cell value.
        entity_type : EntityType | str
            Selects the schema.
        index : int
            Row position, copied into every issue.

    @returns
        List of error-severity issues (possibly empty).
    """
    issues: list[ValidationIssue] = []
    for spec in schema_for(entity_type).fields:
        if not spec.required:
            continue

        value = row.get(spec.name)

        # (1) Presence
        if is_blank(value):
            issues.append(issue(index, spec.name, spec.message, Severity.ERROR))
            continue

        if spec.kind != INTEGER:
            continue

        # (2) Type coercion for integer fields
        number = coerce_number(value)
        if number is None:
            issues.append(issue(index, spec.name, spec.message, Severity.ERROR))
            continue

        # (3) Schema floor
        if spec.minimum is not None and number < spec.minimum:
            issues.append(issue(index, spec.name, spec.message, Severity.ERROR))

    return issues


def validate_duplicate_ids(
    rows: Sequence[Row], entity_type: EntityType | str
) -> list[ValidationIssue]:
    """
    @brief
    Flag every row whose identifier occurs more than once.

    @details
    All occurrences are flagged, not just the later ones. Blank identifiers
    are left to the required-fields check.
    """
    id_field = schema_for(entity_type).id_field
    ids = [cell_text(row.get(id_field)) for row in rows]
    counts = Counter(i for i in ids if i)

    return [
        issue(index, id_field, f"Duplicate ID: {value}", Severity.ERROR)
        for index, value in enumerate(ids)
        if value and counts[value] > 1
    ]


def validate_malformed_lists(
    rows: Sequence[Row], entity_type: EntityType | str
) -> list[ValidationIssue]:
    """
    @brief
    Structural checks on list-like and JSON-like cells.

    @details
    - clients: AttributesJSON that looks like JSON must parse (error)
    - workers: AvailableSlots starting with '[' must be a JSON array (error)
    - list fields (RequestedTaskIDs, Skills, RequiredSkills): empty elements
      from doubled, leading or trailing commas (warning)
    """
    entity_type = EntityType(entity_type)
    list_fields = schema_for(entity_type).list_fields
    issues: list[ValidationIssue] = []

    for index, row in enumerate(rows):
        # (1) AttributesJSON parse-ability
        if entity_type is EntityType.CLIENTS:
            attrs = row.get(ATTRIBUTES_JSON)
            if looks_like_json(attrs) and not _parses(cell_text(attrs)):
                issues.append(
                    issue(index, ATTRIBUTES_JSON, "Invalid JSON format", Severity.ERROR)
                )

        # (2) AvailableSlots array shape
        if entity_type is EntityType.WORKERS:
            slots = cell_text(row.get(AVAILABLE_SLOTS))
            if slots.startswith("[") and not isinstance(_loads_or_none(slots), list):
                issues.append(
                    issue(
                        index,
                        AVAILABLE_SLOTS,
                        "Invalid array format. Expected JSON array like [1,2,3]",
                        Severity.ERROR,
                    )
                )

        # (3) Separator hygiene
        for name in list_fields:
            if has_empty_elements(row.get(name)):
                issues.append(
                    issue(index, name, "Malformed comma-separated list", Severity.WARNING)
                )

    return issues


def validate_out_of_range_values(
    rows: Sequence[Row], entity_type: EntityType | str
) -> list[ValidationIssue]:
    """
    @brief
    Numeric bounds per field.

    @details
    Blank and non-numeric cells are skipped: absence and type are reported
    by validate_required_fields.
    """
    ranges = schema_for(entity_type).ranges
    issues: list[ValidationIssue] = []

    for index, row in enumerate(rows):
        for spec in ranges:
            number = coerce_number(row.get(spec.name))
            if number is None:
                continue
            too_low = number < spec.minimum
            too_high = spec.maximum is not None and number > spec.maximum
            if too_low or too_high:
                issues.append(issue(index, spec.name, spec.message, spec.severity))

    return issues


def validate_broken_json(
    rows: Sequence[Row], entity_type: EntityType | str
) -> list[ValidationIssue]:
    """
    @brief
    Finer-grained AttributesJSON check (clients only).

    @details
    Distinguishes a value that looks like JSON but fails to parse (error)
    from plain text where JSON was expected (warning).
    """
    if EntityType(entity_type) is not EntityType.CLIENTS:
        return []

    issues: list[ValidationIssue] = []
    for index, row in enumerate(rows):
        text = cell_text(row.get(ATTRIBUTES_JSON))
        if not text:
            continue

        if looks_like_json(text):
            if not _parses(text):
                issues.append(
                    issue(index, ATTRIBUTES_JSON, "Invalid JSON syntax", Severity.ERROR)
                )
        else:
            issues.append(
                issue(
                    index,
                    ATTRIBUTES_JSON,
                    'AttributesJSON should contain valid JSON format (e.g., {"key": "value"}). '
                    "Plain text found instead.",
                    Severity.WARNING,
                )
            )

    return issues


def _loads_or_none(text: str) -> object | None:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except json.JSONDecodeError:
        return False
    return True
