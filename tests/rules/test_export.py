# tests/rules/test_export.py
from __future__ import annotations

import json

import pytest

from datarules.errors import RuleError
from datarules.rules.catalog import new_rule
from datarules.rules.export import EXPORT_VERSION, export_rules, import_rules
from datarules.schemas.rules import DEFAULT_PRIORITY_WEIGHTS, PriorityWeight


@pytest.fixture()
def rules() -> list:
    """
    @brief
    Two rules, one disabled, covering nested config and optional fields.
    """
    return [
        new_rule(
            "co-run",
            name="Pair",
            description="Run together",
            config={"task_ids": ["T1", "T2"]},
        ),
        new_rule(
            "phase-window",
            name="Window",
            enabled=False,
            config={
                "task_id": "T1",
                "allowed_phases": [1, 2],
                "time_window": {"start": "2024-01-01", "end": "2024-01-02"},
            },
        ),
    ]


def test_export_document_shape(rules: list) -> None:
    """
    @brief
    Rules are written with wire keys and metadata carries the counts.
    """
    # --- Act ---
    doc = export_rules(rules, data_counts={"clients": 3, "workers": 2, "tasks": 5})

    # --- Assert ---
    json.dumps(doc)
    meta = doc["metadata"]
    assert meta["version"] == EXPORT_VERSION
    assert meta["totalRules"] == 2
    assert meta["enabledRules"] == 1
    assert meta["dataContext"] == {"clientCount": 3, "workerCount": 2, "taskCount": 5}
    assert "exportedAt" in meta

    first = doc["rules"][0]
    assert first["type"] == "co-run"
    assert first["config"] == {"taskIds": ["T1", "T2"], "mustRunTogether": True}
    assert "createdAt" in first
    second = doc["rules"][1]
    assert second["config"]["allowedPhases"] == ["1", "2"]
    assert second["config"]["timeWindow"] == {"start": "2024-01-01", "end": "2024-01-02"}


def test_export_without_data_counts_omits_context(rules: list) -> None:
    assert "dataContext" not in export_rules(rules)["metadata"]


def test_export_then_import_restores_rules(rules: list) -> None:
    text = json.dumps(export_rules(rules))
    restored = import_rules(text)
    assert restored.rules == rules


def test_import_accepts_mapping(rules: list) -> None:
    restored = import_rules(export_rules(rules[:1]))
    assert [r.id for r in restored.rules] == [rules[0].id]


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        "[]",
        '{"metadata": {}}',
        '{"rules": [{"id": "x", "type": "teleport", "config": {}}]}',
        '{"rules": [{"id": "x", "type": "co-run", "config": {"taskIds": []}}]}',
    ],
)
def test_import_rejects_invalid_documents(payload: str) -> None:
    with pytest.raises(RuleError):
        import_rules(payload)


# -----------------------------
# Priority weights
# -----------------------------
def test_export_carries_default_priority_weights(rules: list) -> None:
    doc = export_rules(rules)
    assert [w["id"] for w in doc["priorityWeights"]] == [w.id for w in DEFAULT_PRIORITY_WEIGHTS]
    assert doc["priorityWeights"][0] == {
        "id": "client-priority-level",
        "name": "Client Priority Level",
        "description": "Weight given to client-specified priority levels",
        "weight": 80,
        "category": "client",
        "enabled": True,
    }


def test_priority_weights_survive_export_and_import(rules: list) -> None:
    """
    @brief
    Custom weights, including disabled ones, come back unchanged.
    """
    # --- Arrange ---
    weights = [
        PriorityWeight(id="fairness", name="Fairness", weight=35, category="system"),
        PriorityWeight(
            id="skill-matching",
            name="Skill Matching",
            weight=90.5,
            category="worker",
            enabled=False,
        ),
    ]

    # --- Act ---
    restored = import_rules(json.dumps(export_rules(rules, priority_weights=weights)))

    # --- Assert ---
    assert restored.priority_weights == weights
    assert restored.rules == rules


def test_empty_weight_list_is_kept(rules: list) -> None:
    restored = import_rules(export_rules(rules, priority_weights=[]))
    assert restored.priority_weights == []


def test_document_without_weights_restores_defaults() -> None:
    restored = import_rules('{"rules": []}')
    assert restored.rules == []
    assert tuple(restored.priority_weights) == DEFAULT_PRIORITY_WEIGHTS


@pytest.mark.parametrize(
    "weights",
    [
        [{"id": "w", "name": "W", "weight": 101, "category": "system"}],
        [{"id": "w", "name": "W", "weight": 10, "category": "vendor"}],
        [{"id": "w", "name": "W", "weight": 10, "category": "task", "color": "red"}],
        "heavy",
    ],
)
def test_import_rejects_invalid_weights(weights) -> None:
    with pytest.raises(RuleError):
        import_rules({"rules": [], "priorityWeights": weights})
