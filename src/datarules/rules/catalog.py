# src/datarules/rules/catalog.py
"""
Rule lifecycle helpers: templates, creation, partial updates, duplication.

Rules are immutable pydantic objects here; every helper returns a new rule.
A rule keeps its id for life, and every update refreshes `updated_at`.
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from datarules.errors import RuleError, RuleTypeError
from datarules.schemas.rules import parse_rule

RULE_TEMPLATES: dict[str, dict[str, Any]] = {
    "co-run": {
        "name": "Co-run Tasks",
        "description": "Specify tasks that must or must not run together",
        "config": {"task_ids": [], "must_run_together": True},
    },
    "slot-restriction": {
        "name": "Slot Restriction",
        "description": "Limit available slots for specific worker or client groups",
        "config": {"min_common_slots": 1},
    },
    "load-limit": {
        "name": "Load Limit",
        "description": "Set maximum workload limits for worker groups",
        "config": {"worker_group": "", "max_slots_per_phase": 5},
    },
    "phase-window": {
        "name": "Phase Window",
        "description": "Restrict tasks to specific phases or time windows",
        "config": {"task_id": "", "allowed_phases": []},
    },
    "pattern-match": {
        "name": "Pattern Match",
        "description": "Apply regex-based rules to filter or validate data",
        "config": {"field": "", "pattern": "", "action": "allow", "entity_type": "clients"},
    },
    "precedence-override": {
        "name": "Precedence Override",
        "description": "Override default priority ordering for specific items",
        "config": {
            "higher_priority_items": [],
            "lower_priority_items": [],
            "entity_type": "clients",
        },
    },
}

_IMMUTABLE_FIELDS = frozenset({"id", "type", "created_at"})


def new_rule(rule_type: str, **fields: Any) -> Any:
    """
    @brief
    Create a rule from its type template.

    @details
    Assigns a fresh id and creation/update timestamps. `fields` override
    template values; a `config` mapping is merged key by key into the
    template config.

    @raises
        RuleTypeError
            Unknown rule type.
        RuleError
            The resulting payload is structurally invalid.
    """
    if rule_type not in RULE_TEMPLATES:
        raise RuleTypeError(
            f"Unknown rule type: {rule_type}",
            source="catalog.new_rule",
            suggested_action=f"Use one of: {', '.join(RULE_TEMPLATES)}",
        )

    fields = dict(fields)
    fields.pop("type", None)
    template = copy.deepcopy(RULE_TEMPLATES[rule_type])
    config = {**template.pop("config"), **fields.pop("config", {})}

    now = _utc_now()
    payload: dict[str, Any] = {
        **template,
        "id": _generate_id(),
        "type": rule_type,
        "created_at": now,
        "updated_at": now,
        **fields,
        "config": config,
    }
    return parse_rule(payload)


def update_rule(rule: Any, **changes: Any) -> Any:
    """
    @brief
    Return a copy of `rule` with `changes` applied and `updated_at` refreshed.

    @details
    A `config` mapping is applied as a partial replacement of the current
    configuration. id, type and created_at cannot change. Keys may use the
    wire (camelCase) or the field name.
    """
    changes = _snake_keys(rule, changes)
    forbidden = _IMMUTABLE_FIELDS & set(changes)
    if forbidden:
        raise RuleError(
            f"Cannot change {', '.join(sorted(forbidden))} of rule {rule.id}",
            source="catalog.update_rule",
            suggested_action="Create a new rule instead of re-keying an existing one.",
        )

    data = rule.model_dump()
    config_changes = changes.pop("config", None)
    if config_changes is not None:
        data["config"] = {**data["config"], **_snake_keys(rule.config, config_changes)}
    data.update(changes)
    data["updated_at"] = _utc_now()
    return parse_rule(data)


def duplicate_rule(rule: Any) -> Any:
    """Copy with a new id, name suffixed ' (Copy)', marked as manual."""
    data = rule.model_dump(exclude={"id", "type", "created_at", "updated_at"})
    data["name"] = f"{rule.name} (Copy)"
    data["source"] = "manual"
    return new_rule(rule.type, **data)


def sort_rules(rules: Iterable[Any]) -> list[Any]:
    """Priority descending; ties keep their current order."""
    return sorted(rules, key=lambda r: -r.priority)


def _snake_keys(model: Any, changes: dict[str, Any]) -> dict[str, Any]:
    # Accept wire (camelCase) keys in partial updates as well.
    by_alias = {f.alias: name for name, f in type(model).model_fields.items() if f.alias}
    return {by_alias.get(k, k): v for k, v in changes.items()}


def _generate_id() -> str:
    return uuid.uuid4().hex


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
