# src/datarules/rules/rule_validator.py
"""
Well-formedness checks for a single allocation rule.

Common checks apply to every variant; a dispatch table maps each rule type
to its variant-specific check. A type tag missing from the table is a
programming defect and raises RuleTypeError.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from datarules.errors import RuleTypeError
from datarules.schemas.models import EntityType
from datarules.schemas.rules import (
    RULE_ACTIONS,
    CoRunRule,
    LoadLimitRule,
    PatternMatchRule,
    PhaseWindowRule,
    PrecedenceOverrideRule,
    RuleValidationResult,
    SlotRestrictionRule,
)

ENTITY_TYPES = tuple(e.value for e in EntityType)

MAX_CO_RUN_TASKS = 10
MAX_COMMON_SLOTS = 24
MAX_SLOTS_PER_PHASE = 100
MAX_PATTERN_LENGTH = 200


def validate_rule(rule: Any) -> RuleValidationResult:
    """
    @brief
    Validate the internal consistency of one rule.

    @details
    Common checks: name required (error), description recommended
    (warning), priority within [0, 100] (error). Variant checks follow the
    per-type table. `is_valid` is true iff no error was recorded.

    @params
        rule : Rule
            Any of the six rule variants.

    @returns
        RuleValidationResult with errors, warnings and suggestions.

    @raises
        RuleTypeError
            Raised when the rule's type tag has no registered check.
    """
    result = RuleValidationResult()

    # (1) Common attributes
    if not (rule.name or "").strip():
        result.errors.append("Rule name is required")
    if not (rule.description or "").strip():
        result.warnings.append("Rule description is recommended for clarity")
    if rule.priority < 0 or rule.priority > 100:
        result.errors.append("Rule priority must be between 0 and 100")

    # (2) Variant-specific configuration
    check = _VARIANT_CHECKS.get(rule.type)
    if check is None:
        raise RuleTypeError(
            f"Unknown rule type: {rule.type}",
            source="rule_validator.validate_rule",
            suggested_action="Register a variant check for the new rule type.",
        )
    check(rule, result)

    return result.finalize()


def _check_co_run(rule: CoRunRule, result: RuleValidationResult) -> None:
    task_ids = rule.config.task_ids

    if len(task_ids) < 2:
        result.errors.append("Co-run rules require at least 2 task IDs")
    if any(not task_id.strip() for task_id in task_ids):
        result.errors.append("All task IDs must be non-empty")
    if len(set(task_ids)) != len(task_ids):
        result.errors.append("Task IDs must be unique")
    if len(task_ids) > MAX_CO_RUN_TASKS:
        result.warnings.append("Co-run rules with many tasks may impact performance")


def _check_slot_restriction(rule: SlotRestrictionRule, result: RuleValidationResult) -> None:
    config = rule.config

    if not (config.worker_group or "").strip() and not (config.client_group or "").strip():
        result.errors.append("Either worker group or client group must be specified")
    if config.min_common_slots < 0:
        result.errors.append("Minimum common slots must be non-negative")
    if config.max_common_slots is not None and config.max_common_slots < config.min_common_slots:
        result.errors.append("Maximum common slots must be greater than or equal to minimum")
    if config.phases is not None and len(config.phases) == 0:
        result.warnings.append("Empty phases array will have no effect")
    if config.min_common_slots > MAX_COMMON_SLOTS:
        result.warnings.append("Very high slot requirements may be difficult to satisfy")


def _check_load_limit(rule: LoadLimitRule, result: RuleValidationResult) -> None:
    config = rule.config

    if not config.worker_group.strip():
        result.errors.append("Worker group is required for load limit rules")
    if config.max_slots_per_phase <= 0:
        result.errors.append("Maximum slots per phase must be positive")
    if config.max_slots_per_phase > MAX_SLOTS_PER_PHASE:
        result.warnings.append("Very high slot limits may not be practical")
    if config.phases is not None and len(config.phases) == 0:
        result.warnings.append("Empty phases array will apply to all phases")


def _check_phase_window(rule: PhaseWindowRule, result: RuleValidationResult) -> None:
    config = rule.config

    if not config.task_id.strip():
        result.errors.append("Task ID is required for phase window rules")
    if not config.allowed_phases:
        result.errors.append("At least one allowed phase must be specified")
    if config.restricted_phases and set(config.allowed_phases) & set(config.restricted_phases):
        result.errors.append("Allowed and restricted phases cannot overlap")

    if config.time_window is not None:
        start = _parse_moment(config.time_window.start)
        end = _parse_moment(config.time_window.end)
        if start is None:
            result.errors.append("Invalid start time format")
        if end is None:
            result.errors.append("Invalid end time format")
        if start is not None and end is not None and start >= end:
            result.errors.append("Start time must be before end time")


def _check_pattern_match(rule: PatternMatchRule, result: RuleValidationResult) -> None:
    config = rule.config

    if not config.field.strip():
        result.errors.append("Field name is required for pattern match rules")
    if not config.pattern.strip():
        result.errors.append("Pattern is required for pattern match rules")
    elif not is_valid_regex(config.pattern):
        result.errors.append("Invalid regular expression pattern")
    if config.action not in RULE_ACTIONS:
        result.errors.append("Action must be one of: allow, deny, flag")
    if config.entity_type not in ENTITY_TYPES:
        result.errors.append("Entity type must be one of: clients, workers, tasks")
    if len(config.pattern) > MAX_PATTERN_LENGTH:
        result.warnings.append("Complex regex patterns may impact performance")
    if config.action == "flag" and not config.message:
        result.suggestions.append("Consider adding a message for flag actions to improve clarity")


def _check_precedence_override(
    rule: PrecedenceOverrideRule, result: RuleValidationResult
) -> None:
    config = rule.config
    higher = config.higher_priority_items
    lower = config.lower_priority_items

    if not higher and not lower:
        result.errors.append("Either higher or lower priority items must be specified")
    if set(higher) & set(lower):
        result.errors.append("Items cannot be in both higher and lower priority lists")
    if config.entity_type not in ENTITY_TYPES:
        result.errors.append("Entity type must be one of: clients, workers, tasks")
    if any(not item.strip() for item in [*higher, *lower]):
        result.errors.append("All item IDs must be non-empty")
    if len(set(higher)) != len(higher):
        result.errors.append("Higher priority items must be unique")
    if len(set(lower)) != len(lower):
        result.errors.append("Lower priority items must be unique")


_VARIANT_CHECKS: dict[str, Callable[[Any, RuleValidationResult], None]] = {
    "co-run": _check_co_run,
    "slot-restriction": _check_slot_restriction,
    "load-limit": _check_load_limit,
    "phase-window": _check_phase_window,
    "pattern-match": _check_pattern_match,
    "precedence-override": _check_precedence_override,
}


def is_valid_regex(pattern: str) -> bool:
    """Compile the pattern; construction failure means invalid."""
    try:
        re.compile(pattern)
    except re.error:
        return False
    return True


def _parse_moment(value: str) -> datetime | None:
    """ISO-8601 date/datetime; naive values are read as UTC."""
    try:
        moment = datetime.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment
