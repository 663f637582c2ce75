# src/datarules/rules/data_refs.py
"""
Cross-check the identifiers a rule references against the current dataset.

A rule pointing at ids that are absent from the data is not wrong, only
currently inapplicable, so every finding here is a warning.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from datarules.schemas.models import Row
from datarules.schemas.rules import (
    CoRunRule,
    DataContext,
    LoadLimitRule,
    PhaseWindowRule,
    PrecedenceOverrideRule,
    RuleValidationResult,
    SlotRestrictionRule,
)
from datarules.validator.fields import cell_text


def build_data_context(
    clients: Iterable[Row], workers: Iterable[Row], tasks: Iterable[Row]
) -> DataContext:
    """
    @brief
    Derive the available identifier sets from the entity rows.

    @details
    Task ids come from TaskID, worker groups from WorkerGroup, client groups
    from GroupTag. Null cells are dropped; values are stringified.
    """

    def _values(rows: Iterable[Row], column: str) -> set[str]:
        return {cell_text(r.get(column)) for r in rows if r.get(column) is not None}

    return DataContext(
        available_task_ids=_values(tasks, "TaskID"),
        available_worker_groups=_values(workers, "WorkerGroup"),
        available_client_groups=_values(clients, "GroupTag"),
    )


def validate_rule_against_data(rule: Any, context: DataContext) -> RuleValidationResult:
    """
    @brief
    Warn once per referenced identifier missing from the data context.

    @details
    Blank references are skipped (validate_rule reports them). Pattern-match
    rules reference no identifiers. Precedence-override items are looked up
    in the set matching the rule's entity type; an unknown entity type is
    left to validate_rule.
    """
    result = RuleValidationResult()
    warnings = result.warnings

    if isinstance(rule, CoRunRule):
        for task_id in rule.config.task_ids:
            if task_id.strip() and task_id not in context.available_task_ids:
                warnings.append(f"Task ID not found in data: {task_id}")

    elif isinstance(rule, LoadLimitRule):
        group = rule.config.worker_group
        if group.strip() and group not in context.available_worker_groups:
            warnings.append(f"Worker group not found in data: {group}")

    elif isinstance(rule, SlotRestrictionRule):
        worker_group = rule.config.worker_group
        client_group = rule.config.client_group
        if worker_group and worker_group not in context.available_worker_groups:
            warnings.append(f"Worker group not found in data: {worker_group}")
        if client_group and client_group not in context.available_client_groups:
            warnings.append(f"Client group not found in data: {client_group}")

    elif isinstance(rule, PhaseWindowRule):
        task_id = rule.config.task_id
        if task_id.strip() and task_id not in context.available_task_ids:
            warnings.append(f"Task ID not found in data: {task_id}")

    elif isinstance(rule, PrecedenceOverrideRule):
        available = {
            "clients": context.available_client_groups,
            "workers": context.available_worker_groups,
            "tasks": context.available_task_ids,
        }.get(rule.config.entity_type)
        if available is not None:
            for item in rule.config.higher_priority_items:
                if item.strip() and item not in available:
                    warnings.append(f"Higher priority item not found in data: {item}")
            for item in rule.config.lower_priority_items:
                if item.strip() and item not in available:
                    warnings.append(f"Lower priority item not found in data: {item}")

    return result.finalize()
