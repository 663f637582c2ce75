# src/datarules/validator/validator.py
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from datarules.report import has_blocking_errors, summarize_issues
from datarules.schemas.models import (
    Config,
    Dataset,
    EntityType,
    Row,
    Severity,
    ValidationIssue,
)
from datarules.validator.cross_entity import (
    validate_phase_slot_saturation,
    validate_skill_coverage,
    validate_unknown_references,
)
from datarules.validator.schema_checks import (
    validate_broken_json,
    validate_duplicate_ids,
    validate_malformed_lists,
    validate_out_of_range_values,
    validate_required_fields,
)

logger = logging.getLogger(__name__)


# ----------------------------
# CHECK CATALOG
# ----------------------------
@dataclass(frozen=True)
class CheckInfo:
    """
    @brief
    Descriptor of one dataset check.

    @details
    `key` matches the toggle name in ChecksConfig; `id` is the stable
    identifier used in reports.
    """

    key: str
    id: str
    name: str
    description: str


VALIDATION_CHECKS: tuple[CheckInfo, ...] = (
    CheckInfo(
        "required_fields",
        "required-fields",
        "Required Fields",
        "Check for missing required columns",
    ),
    CheckInfo("duplicate_ids", "duplicate-ids", "Duplicate IDs", "Detect duplicate entity IDs"),
    CheckInfo(
        "malformed_lists",
        "malformed-lists",
        "Malformed Lists",
        "Validate comma-separated and JSON array formats",
    ),
    CheckInfo(
        "out_of_range",
        "out-of-range",
        "Out-of-range Values",
        "Check for values outside expected ranges",
    ),
    CheckInfo(
        "broken_json",
        "broken-json",
        "Broken JSON",
        "Validate JSON syntax in AttributesJSON fields",
    ),
    CheckInfo(
        "unknown_references",
        "unknown-references",
        "Unknown References",
        "Check for references to non-existent entities",
    ),
    CheckInfo(
        "skill_coverage",
        "skill-coverage",
        "Skill Coverage",
        "Verify tasks have workers with required skills",
    ),
    CheckInfo(
        "phase_slot_saturation",
        "phase-slot-saturation",
        "Phase Slot Saturation",
        "Check for phase oversubscription",
    ),
)


def _required_fields_for_rows(
    rows: Sequence[Row], entity_type: EntityType | str
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for index, row in enumerate(rows):
        issues.extend(validate_required_fields(row, entity_type, index))
    return issues


EntityCheck = Callable[[Sequence[Row], EntityType], list[ValidationIssue]]

# Execution order of the per-entity checks.
_ENTITY_CHECKS: tuple[tuple[str, EntityCheck], ...] = (
    ("required_fields", _required_fields_for_rows),
    ("duplicate_ids", validate_duplicate_ids),
    ("malformed_lists", validate_malformed_lists),
    ("out_of_range", validate_out_of_range_values),
    ("broken_json", validate_broken_json),
)


def _enabled(cfg: Config, key: str) -> bool:
    return bool(getattr(cfg.checks, key))


# ----------------------------
# PURE ENTRY POINTS
# ----------------------------
def validate_entity_rows(
    rows: Sequence[Row], entity_type: EntityType | str, cfg: Config | None = None
) -> list[ValidationIssue]:
    """
    @brief
    Run every enabled schema check over one entity collection.

    @details
    Order: required fields (row by row), duplicate ids, malformed lists,
    out-of-range values, broken JSON. Deterministic: the same rows always
    produce the same issues in the same order.
    """
    cfg = cfg or Config()
    entity_type = EntityType(entity_type)
    issues: list[ValidationIssue] = []
    for key, check in _ENTITY_CHECKS:
        if _enabled(cfg, key):
            issues.extend(check(rows, entity_type))
    return issues


def validate_across_entities(
    clients: Sequence[Row],
    workers: Sequence[Row],
    tasks: Sequence[Row],
    cfg: Config | None = None,
) -> list[ValidationIssue]:
    """
    @brief
    Run the enabled cross-entity checks.

    @details
    Unknown-reference issues index client rows; skill-coverage and
    saturation issues index task rows. Callers invoke this only once all
    three collections are populated.
    """
    cfg = cfg or Config()
    issues: list[ValidationIssue] = []
    if _enabled(cfg, "unknown_references"):
        issues.extend(validate_unknown_references(clients, tasks, workers))
    if _enabled(cfg, "skill_coverage"):
        issues.extend(validate_skill_coverage(tasks, workers))
    if _enabled(cfg, "phase_slot_saturation"):
        issues.extend(validate_phase_slot_saturation(tasks, workers))
    return issues


# ----------------------------
# DATASET VALIDATOR (instance core)
# ----------------------------
class DatasetValidator:
    """
    @brief
    Full-dataset validator with per-check bookkeeping.

    @details
    Runs the schema checks on each collection and, once all three are
    populated, the cross-entity checks. Issues are attributed to the
    collection whose row triggered them. Each check is marked passed (no
    error-severity issue), failed, or skipped (disabled in configuration or
    not applicable yet). Never raises for malformed data.
    """

    def __init__(self, dataset: Dataset, cfg: Config | None = None) -> None:
        self.dataset = dataset
        self.cfg = cfg or Config()

        self.issues: dict[EntityType, list[ValidationIssue]] = {e: [] for e in EntityType}
        self.checks: dict[str, bool] = {}
        self.skipped: list[str] = []

    # ---------- Public lifecycle API ----------
    def run_all_checks(self) -> None:
        """
        @brief
        Execute the validation sequence from scratch.
        """
        # (1) Reset accumulators
        self.issues = {e: [] for e in EntityType}
        self.checks = {}
        self.skipped = []

        # (2) Per-entity schema checks
        for key, check in _ENTITY_CHECKS:
            info = _check_info(key)
            if not _enabled(self.cfg, key):
                self.skipped.append(info.id)
                continue
            found: list[ValidationIssue] = []
            for entity_type in EntityType:
                rows = self.dataset.collection(entity_type).rows
                entity_issues = check(rows, entity_type)
                self.issues[entity_type].extend(entity_issues)
                found.extend(entity_issues)
            self._mark(info, found)

        # (3) Cross-entity checks, only on a complete dataset
        cross_ready = self.cfg.cross_entity and self.dataset.is_complete()
        clients = self.dataset.clients.rows
        workers = self.dataset.workers.rows
        tasks = self.dataset.tasks.rows
        cross_checks: tuple[tuple[str, EntityType, Callable[[], list[ValidationIssue]]], ...] = (
            (
                "unknown_references",
                EntityType.CLIENTS,
                lambda: validate_unknown_references(clients, tasks, workers),
            ),
            ("skill_coverage", EntityType.TASKS, lambda: validate_skill_coverage(tasks, workers)),
            (
                "phase_slot_saturation",
                EntityType.TASKS,
                lambda: validate_phase_slot_saturation(tasks, workers),
            ),
        )
        for key, owner, run in cross_checks:
            info = _check_info(key)
            if not cross_ready or not _enabled(self.cfg, key):
                self.skipped.append(info.id)
                continue
            found = run()
            self.issues[owner].extend(found)
            self._mark(info, found)

        logger.debug(
            "Dataset checks done: %d passed, %d failed, %d skipped",
            sum(self.checks.values()),
            len(self.checks) - sum(self.checks.values()),
            len(self.skipped),
        )

    def build_report(self) -> dict[str, Any]:
        """
        @brief
        Assemble validation results into a JSON-serializable dictionary.

        @returns
            Report with a global `valid` flag (no error-severity issue in any
            collection), per-entity issues and summaries, check flags and the
            list of skipped checks.
        """
        entities: dict[str, Any] = {}
        for entity_type in EntityType:
            issues = self.issues[entity_type]
            total_rows = len(self.dataset.collection(entity_type).rows)
            entities[entity_type.value] = {
                "issues": [i.model_dump(mode="json", by_alias=True) for i in issues],
                "summary": summarize_issues(issues, total_rows).model_dump(
                    mode="json", by_alias=True
                ),
            }

        all_issues = [i for issues in self.issues.values() for i in issues]
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "valid": not has_blocking_errors(all_issues),
            "entities": entities,
            "checks": dict(self.checks),
            "skipped": list(self.skipped),
        }

    # ---------- Utilities ----------
    def _mark(self, info: CheckInfo, found: list[ValidationIssue]) -> None:
        self.checks[info.id] = not any(i.severity == Severity.ERROR for i in found)


def _check_info(key: str) -> CheckInfo:
    return next(c for c in VALIDATION_CHECKS if c.key == key)


# ----------------------------
# THIN FACADE
# ----------------------------
def validate_dataset(
    dataset: Dataset, cfg: Config | None = None
) -> dict[EntityType, list[ValidationIssue]]:
    """
    @brief
    Convenience wrapper returning only the per-collection issue lists.
    """
    validator = DatasetValidator(dataset, cfg)
    validator.run_all_checks()
    return validator.issues
