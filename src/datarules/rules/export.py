# src/datarules/rules/export.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from datarules.errors import RuleError
from datarules.schemas.rules import (
    DEFAULT_PRIORITY_WEIGHTS,
    RULE_LIST_ADAPTER,
    PriorityWeight,
    RulesImport,
)

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
_COUNT_KEYS = {"clients": "clientCount", "workers": "workerCount", "tasks": "taskCount"}
_WEIGHT_LIST_ADAPTER: TypeAdapter[list[PriorityWeight]] = TypeAdapter(list[PriorityWeight])


def export_rules(
    rules: Sequence[Any],
    *,
    priority_weights: Sequence[PriorityWeight] | None = None,
    data_counts: Mapping[str, int] | None = None,
) -> dict[str, Any]:
    """
    @brief
    Build the rules configuration export document.

    @details
    Rules are serialized in wire form (camelCase keys, unset optionals
    omitted). `priority_weights` defaults to DEFAULT_PRIORITY_WEIGHTS.
    Metadata records the export time, format version and rule counts;
    `data_counts` (clients/workers/tasks row counts) is attached as
    `dataContext` when given.
    """
    if priority_weights is None:
        priority_weights = DEFAULT_PRIORITY_WEIGHTS

    metadata: dict[str, Any] = {
        "exportedAt": datetime.now(timezone.utc).isoformat(),
        "version": EXPORT_VERSION,
        "totalRules": len(rules),
        "enabledRules": sum(1 for r in rules if r.enabled),
    }
    if data_counts is not None:
        metadata["dataContext"] = {
            _COUNT_KEYS.get(entity, f"{entity}Count"): count
            for entity, count in data_counts.items()
        }

    return {
        "rules": [
            r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in rules
        ],
        "priorityWeights": [w.model_dump(mode="json", by_alias=True) for w in priority_weights],
        "metadata": metadata,
    }


def import_rules(payload: str | Mapping[str, Any]) -> RulesImport:
    """
    @brief
    Parse an export document (dict or JSON text) back into typed rules.

    @details
    A document without `priorityWeights` restores the default weights.

    @raises
        RuleError
            Raised on invalid JSON, a missing `rules` list, a rule that fails
            structural validation or a malformed weight list.
    """
    # (1) Decode JSON text
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as e:
            raise RuleError(
                f"Invalid JSON format: {e.msg}",
                source="export.import_rules",
                suggested_action="Import a file produced by export_rules.",
            ) from e

    # (2) Check document shape
    rules = payload.get("rules") if isinstance(payload, Mapping) else None
    if not isinstance(rules, list):
        raise RuleError(
            "Rules export must be an object with a 'rules' list",
            source="export.import_rules",
            suggested_action="Import a file produced by export_rules.",
        )

    # (3) Validate every rule
    try:
        parsed = RULE_LIST_ADAPTER.validate_python(rules)
    except PydanticValidationError as e:
        raise RuleError(
            f"Invalid rule in export: {e}",
            source="export.import_rules",
            suggested_action="Fix or remove the rule at the reported index.",
        ) from e

    # (4) Validate priority weights
    weights = payload.get("priorityWeights")
    if weights is None:
        weights = list(DEFAULT_PRIORITY_WEIGHTS)
    try:
        parsed_weights = _WEIGHT_LIST_ADAPTER.validate_python(weights)
    except PydanticValidationError as e:
        raise RuleError(
            f"Invalid priority weights in export: {e}",
            source="export.import_rules",
            suggested_action="Weights need id, name, category and a weight between 0 and 100.",
        ) from e

    logger.info("Imported %d rule(s) and %d priority weight(s)", len(parsed), len(parsed_weights))
    return RulesImport(rules=parsed, priority_weights=parsed_weights)


__all__ = ["EXPORT_VERSION", "export_rules", "import_rules"]
