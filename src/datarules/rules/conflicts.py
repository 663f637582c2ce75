# src/datarules/rules/conflicts.py
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from datarules.schemas.rules import CoRunRule, LoadLimitRule, RuleValidationResult


def validate_rule_conflicts(rules: Sequence[Any]) -> RuleValidationResult:
    """
    @brief
    Check a rule collection for mutual consistency.

    @details
    - duplicate names (case-insensitive, trimmed): warning naming both
      1-based positions, each later duplicate compared with the first one
    - co-run rules sharing a task id with different mustRunTogether
      polarity: one error per conflicting pair
    - several load-limit rules for the same worker group: one warning per
      group listing the rule names

    @params
        rules : Sequence[Rule]
            The full rule collection in display order.

    @returns
        Aggregated RuleValidationResult for the whole set.
    """
    result = RuleValidationResult()

    # (1) Duplicate names
    first_seen: dict[str, int] = {}
    for index, rule in enumerate(rules):
        key = (rule.name or "").strip().lower()
        if not key:
            continue
        if key in first_seen:
            result.warnings.append(
                f'Duplicate rule name: "{rule.name}" '
                f"(rules {first_seen[key] + 1} and {index + 1})"
            )
        else:
            first_seen[key] = index

    # (2) Co-run polarity conflicts, pairwise over co-run rules only
    co_run = [r for r in rules if isinstance(r, CoRunRule)]
    for i, first in enumerate(co_run):
        for second in co_run[i + 1 :]:
            if first.config.must_run_together == second.config.must_run_together:
                continue
            other_ids = set(second.config.task_ids)
            shared = [t for t in dict.fromkeys(first.config.task_ids) if t in other_ids]
            if shared:
                result.errors.append(
                    f"Conflicting co-run rules for tasks: {', '.join(shared)} "
                    f'(rules "{first.name}" and "{second.name}")'
                )

    # (3) Redundant load limits per worker group
    by_group: dict[str, list[LoadLimitRule]] = {}
    for rule in rules:
        if isinstance(rule, LoadLimitRule):
            by_group.setdefault(rule.config.worker_group, []).append(rule)
    for group, group_rules in by_group.items():
        if len(group_rules) > 1:
            names = ", ".join(r.name for r in group_rules)
            result.warnings.append(f'Multiple load limit rules for worker group "{group}": {names}')

    return result.finalize()
