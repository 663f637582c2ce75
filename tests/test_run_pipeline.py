# tests/test_run_pipeline.py
import json
import sys
from pathlib import Path

import pytest

from datarules.errors import DataError, RuleError
from datarules.rules.catalog import new_rule
from datarules.rules.export import export_rules
from scripts.run import main, run_pipeline

DATASET = {
    "clients": [
        {
            "ClientID": "C1",
            "ClientName": "Acme",
            "PriorityLevel": 2,
            "RequestedTaskIDs": "T1",
            "GroupTag": "GroupA",
            "AttributesJSON": "{}",
        }
    ],
    "workers": [
        {
            "WorkerID": "W1",
            "WorkerName": "Ann",
            "Skills": "python",
            "AvailableSlots": "[1]",
            "MaxLoadPerPhase": 3,
            "WorkerGroup": "Backend",
        }
    ],
    "tasks": [
        {
            "TaskID": "T1",
            "TaskName": "Ingest",
            "Category": "ETL",
            "Duration": 2,
            "RequiredSkills": "python",
            "PreferredPhases": "[1]",
            "MaxConcurrent": 1,
        }
    ],
}


@pytest.fixture()
def data_path(tmp_path: Path) -> Path:
    path = tmp_path / "data.json"
    path.write_text(json.dumps(DATASET), encoding="utf-8")
    return path


def write_rules(path: Path, rules: list) -> Path:
    path.write_text(json.dumps(export_rules(rules)), encoding="utf-8")
    return path


def test_clean_run_writes_report(tmp_path: Path, data_path: Path) -> None:
    """
    @brief
    A clean dataset without rules produces a valid, non-blocking report.
    """
    # --- Arrange ---
    out_dir = tmp_path / "out"

    # --- Act ---
    result = run_pipeline(None, data_path, output_dir=out_dir)

    # --- Assert ---
    assert result["valid"] is True
    assert result["blocking"] is False
    assert result["path"] == out_dir / "validation_report.json"
    report = json.loads(result["path"].read_text(encoding="utf-8"))
    assert report["valid"] is True
    assert report["rules"]["per_rule"] == {}
    assert [w["id"] for w in report["rules"]["priority_weights"]][0] == "client-priority-level"
    assert report["checks"]["phase-slot-saturation"] is True


def test_rule_findings_are_reported_per_rule(tmp_path: Path, data_path: Path) -> None:
    """
    @brief
    Per-rule, data-reference and conflict findings all reach the report.

    @details
    The load-limit rule points at an unknown worker group (warning); the two
    co-run rules disagree on T1 (error), which makes the run invalid.
    """
    # --- Arrange ---
    limit = new_rule(
        "load-limit",
        description="cap",
        config={"worker_group": "Ops", "max_slots_per_phase": 2},
    )
    together = new_rule(
        "co-run", name="Together", description="d", config={"task_ids": ["T1", "T2"]}
    )
    apart = new_rule(
        "co-run",
        name="Apart",
        description="d",
        config={"task_ids": ["T1", "T3"], "must_run_together": False},
    )
    rules_path = write_rules(tmp_path / "rules.json", [limit, together, apart])

    # --- Act ---
    result = run_pipeline(None, data_path, rules_path, tmp_path / "out")

    # --- Assert ---
    rules = result["report"]["rules"]
    assert result["valid"] is False
    assert result["blocking"] is True
    assert rules["per_rule"][limit.id]["data"]["warnings"] == [
        "Worker group not found in data: Ops"
    ]
    assert rules["per_rule"][together.id]["rule"]["isValid"] is True
    assert rules["conflicts"]["errors"] == [
        'Conflicting co-run rules for tasks: T1 (rules "Together" and "Apart")'
    ]
    assert rules["error_count"] == 1


def test_fail_on_warnings_blocks(tmp_path: Path) -> None:
    dataset = json.loads(json.dumps(DATASET))
    dataset["workers"][0]["MaxLoadPerPhase"] = 12
    data_path = tmp_path / "data.json"
    data_path.write_text(json.dumps(dataset), encoding="utf-8")
    config_path = tmp_path / "datarules.yaml"
    config_path.write_text(
        "report:\n  fail_on_warnings: true\n  write_report: false\n", encoding="utf-8"
    )

    result = run_pipeline(config_path, data_path, output_dir=tmp_path / "out")

    assert result["valid"] is True
    assert result["blocking"] is True
    assert result["path"] is None
    assert not (tmp_path / "out").exists()


def test_missing_rules_file_raises(tmp_path: Path, data_path: Path) -> None:
    with pytest.raises(DataError):
        run_pipeline(None, data_path, tmp_path / "missing.json", tmp_path / "out")


def test_corrupt_rules_file_raises(tmp_path: Path, data_path: Path) -> None:
    rules_path = tmp_path / "rules.json"
    rules_path.write_text('{"rules": [{"type": "co-run"}]}', encoding="utf-8")
    with pytest.raises(RuleError):
        run_pipeline(None, data_path, rules_path, tmp_path / "out")


def test_main_exit_codes(monkeypatch, tmp_path: Path, data_path: Path) -> None:
    """
    @brief
    main() returns 0 on a clean run and 1 on a controlled failure.
    """
    monkeypatch.setattr(
        sys, "argv", ["run.py", "--data", str(data_path), "--output", str(tmp_path / "out")]
    )
    assert main() == 0

    monkeypatch.setattr(sys, "argv", ["run.py", "--data", str(tmp_path / "missing.json")])
    assert main() == 1
