# tests/rules/test_conflicts.py
from __future__ import annotations

from datarules.rules.conflicts import validate_rule_conflicts
from datarules.schemas.rules import parse_rule


def co_run(rule_id: str, name: str, task_ids: list[str], together: bool):
    return parse_rule(
        {
            "id": rule_id,
            "type": "co-run",
            "name": name,
            "config": {"taskIds": task_ids, "mustRunTogether": together},
        }
    )


def load_limit(rule_id: str, name: str, group: str, limit: int = 3):
    return parse_rule(
        {
            "id": rule_id,
            "type": "load-limit",
            "name": name,
            "config": {"workerGroup": group, "maxSlotsPerPhase": limit},
        }
    )


def test_empty_rule_set_is_valid() -> None:
    result = validate_rule_conflicts([])
    assert result.is_valid
    assert result.errors == result.warnings == []


def test_co_run_conflict_is_symmetric() -> None:
    """
    @brief
    Opposite co-run polarity on a shared task yields exactly one error.

    @details
    R1={A,B} together and R2={B,C} apart conflict on B. Reversing the
    collection order must not change the number of findings.
    """
    # --- Arrange ---
    r1 = co_run("1", "R1", ["A", "B"], True)
    r2 = co_run("2", "R2", ["B", "C"], False)

    # --- Act ---
    forward = validate_rule_conflicts([r1, r2])
    backward = validate_rule_conflicts([r2, r1])

    # --- Assert ---
    assert forward.errors == ['Conflicting co-run rules for tasks: B (rules "R1" and "R2")']
    assert len(backward.errors) == 1
    assert "tasks: B " in backward.errors[0]
    assert not forward.is_valid and not backward.is_valid


def test_same_polarity_overlap_is_not_a_conflict() -> None:
    rules = [co_run("1", "R1", ["A", "B"], True), co_run("2", "R2", ["B", "C"], True)]
    assert validate_rule_conflicts(rules).errors == []


def test_conflict_lists_every_shared_task() -> None:
    rules = [co_run("1", "R1", ["A", "B", "C"], True), co_run("2", "R2", ["C", "A"], False)]
    assert validate_rule_conflicts(rules).errors == [
        'Conflicting co-run rules for tasks: A, C (rules "R1" and "R2")'
    ]


def test_duplicate_names_match_case_insensitively() -> None:
    """
    @brief
    Two rules named "Load Cap" in different casing yield one warning listing both.
    """
    # --- Arrange ---
    rules = [load_limit("1", "Load Cap", "G1"), load_limit("2", " load cap ", "G2")]

    # --- Act ---
    result = validate_rule_conflicts(rules)

    # --- Assert ---
    assert result.is_valid
    assert result.warnings == ['Duplicate rule name: " load cap " (rules 1 and 2)']


def test_blank_names_are_not_duplicates() -> None:
    rules = [load_limit("1", "", "G1"), load_limit("2", "", "G2")]
    assert validate_rule_conflicts(rules).warnings == []


def test_multiple_load_limits_for_one_group() -> None:
    rules = [
        load_limit("1", "Cap A", "Backend", 2),
        load_limit("2", "Cap B", "Backend", 4),
        load_limit("3", "Cap C", "Frontend", 4),
    ]
    result = validate_rule_conflicts(rules)
    assert result.is_valid
    assert result.warnings == ['Multiple load limit rules for worker group "Backend": Cap A, Cap B']


def test_findings_are_aggregated_in_check_order() -> None:
    rules = [
        load_limit("1", "Dup", "G"),
        load_limit("2", "dup", "G"),
        co_run("3", "Together", ["X", "Y"], True),
        co_run("4", "Apart", ["Y", "Z"], False),
    ]
    result = validate_rule_conflicts(rules)
    assert result.warnings == [
        'Duplicate rule name: "dup" (rules 1 and 2)',
        'Multiple load limit rules for worker group "G": Dup, dup',
    ]
    assert result.errors == ['Conflicting co-run rules for tasks: Y (rules "Together" and "Apart")']
