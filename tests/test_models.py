# tests/test_models.py
from __future__ import annotations

import pytest
from pydantic import ValidationError

from datarules.errors import RuleError
from datarules.schemas.entities import ENTITY_SCHEMAS, schema_for
from datarules.schemas.models import (
    Config,
    Dataset,
    EntityCollection,
    EntityType,
    Severity,
    ValidationIssue,
)
from datarules.schemas.rules import (
    CoRunRule,
    PatternMatchRule,
    RuleValidationResult,
    SlotRestrictionRule,
    parse_rule,
)


# -----------------------------
# ValidationIssue
# -----------------------------
def test_validation_issue_serializes_with_wire_keys() -> None:
    """
    @brief
    Issues dump with camelCase keys and string severities.
    """
    # --- Arrange ---
    item = ValidationIssue(
        row_index=2, column="TaskID", error="TaskID is required", severity="error"
    )

    # --- Act ---
    dumped = item.model_dump(mode="json", by_alias=True)

    # --- Assert ---
    assert dumped == {
        "rowIndex": 2,
        "column": "TaskID",
        "error": "TaskID is required",
        "severity": "error",
    }


def test_validation_issue_is_frozen_and_checked() -> None:
    item = ValidationIssue(row_index=0, column="A", error="e", severity=Severity.WARNING)
    with pytest.raises(ValidationError):
        item.row_index = 3
    with pytest.raises(ValidationError):
        ValidationIssue(row_index=-1, column="A", error="e", severity="error")
    with pytest.raises(ValidationError):
        ValidationIssue(row_index=0, column="A", error="e", severity="info")


# -----------------------------
# Dataset containers
# -----------------------------
def test_dataset_completeness_and_lookup() -> None:
    dataset = Dataset()
    assert not dataset.is_complete()

    dataset.clients.rows.append({"ClientID": "C1"})
    dataset.workers.rows.append({"WorkerID": "W1"})
    dataset.tasks.rows.append({"TaskID": "T1"})

    assert dataset.is_complete()
    assert dataset.collection("workers") is dataset.workers
    assert dataset.collection(EntityType.TASKS) is dataset.tasks


def test_set_cell_updates_the_row() -> None:
    collection = EntityCollection(EntityType.TASKS, [{"TaskID": "T1", "Duration": 1}])
    collection.set_cell(0, "Duration", 4)
    assert collection.rows == [{"TaskID": "T1", "Duration": 4}]
    assert len(collection) == 1


def test_config_defaults_and_unknown_keys() -> None:
    cfg = Config()
    assert all(cfg.checks.model_dump().values())
    assert cfg.cross_entity is True
    assert cfg.report.write_report is True
    with pytest.raises(ValidationError):
        Config(checks={"spellcheck": True})


# -----------------------------
# Entity schema table
# -----------------------------
def test_schema_table_covers_every_entity_type() -> None:
    assert set(ENTITY_SCHEMAS) == set(EntityType)
    assert schema_for("clients").id_field == "ClientID"
    assert schema_for(EntityType.WORKERS).id_field == "WorkerID"
    assert [f.name for f in schema_for("tasks").fields][-1] == "MaxConcurrent"


# -----------------------------
# Rule union
# -----------------------------
def test_parse_rule_selects_variant_by_type() -> None:
    """
    @brief
    The `type` tag picks the variant; camelCase and snake_case keys both parse.
    """
    camel = parse_rule(
        {"id": "1", "type": "co-run", "config": {"taskIds": ["A"], "mustRunTogether": True}}
    )
    snake = parse_rule(
        {
            "id": "2",
            "type": "slot-restriction",
            "config": {"worker_group": "G", "min_common_slots": 2},
        }
    )

    assert isinstance(camel, CoRunRule)
    assert isinstance(snake, SlotRestrictionRule)
    assert camel.priority == 50
    assert camel.enabled is True


def test_parse_rule_keeps_bad_values_for_the_validator() -> None:
    rule = parse_rule(
        {
            "id": "1",
            "type": "pattern-match",
            "priority": 500,
            "config": {"field": "X", "pattern": "(", "action": "block"},
        }
    )
    assert isinstance(rule, PatternMatchRule)
    assert rule.priority == 500
    assert rule.config.action == "block"


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "1", "type": "teleport", "config": {}},
        {"id": "1", "type": "co-run"},
        {"id": "1", "type": "co-run", "config": {"mustRunTogether": True, "color": "red"}},
        {"type": "co-run", "config": {"mustRunTogether": True}},
    ],
)
def test_parse_rule_rejects_structural_problems(payload: dict) -> None:
    with pytest.raises(RuleError):
        parse_rule(payload)


def test_rule_validation_result_finalize() -> None:
    result = RuleValidationResult(errors=["boom"])
    assert result.finalize().is_valid is False
    assert RuleValidationResult().finalize().is_valid is True
