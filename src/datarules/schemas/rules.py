"""
@brief
Pydantic contracts for allocation rules and rule validation results.

@details
A rule is a tagged union over six variants sharing common base attributes.
The `type` field is the discriminator; each variant carries its own
configuration object. Models are deliberately permissive about values
(priorities, actions, entity types are not range-checked here) so that bad
input reaches the rule validator and is reported there instead of failing
at parse time. Only structural problems (wrong types, unknown keys, unknown
variant tag) are rejected by `parse_rule`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from datarules.errors import RuleError
from datarules.schemas.models import _StrictBaseModel

RULE_TYPES = (
    "co-run",
    "slot-restriction",
    "load-limit",
    "phase-window",
    "pattern-match",
    "precedence-override",
)
RULE_ACTIONS = ("allow", "deny", "flag")


def _to_str(value: Any) -> Any:
    # Phases arrive as "1" from forms and as 1 from generated rules.
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


PhaseId = Annotated[str, BeforeValidator(_to_str)]


# ------------------------------------------------------------
# Variant configurations
# ------------------------------------------------------------
class CoRunConfig(_StrictBaseModel):
    task_ids: list[str] = Field(default_factory=list)
    must_run_together: bool
    same_phase: bool | None = None


class SlotRestrictionConfig(_StrictBaseModel):
    worker_group: str | None = None
    client_group: str | None = None
    min_common_slots: int | float
    max_common_slots: int | float | None = None
    phases: list[PhaseId] | None = None


class LoadLimitConfig(_StrictBaseModel):
    worker_group: str = ""
    max_slots_per_phase: int | float
    phases: list[PhaseId] | None = None
    override_individual_limits: bool | None = None


class TimeWindow(_StrictBaseModel):
    start: str
    end: str


class PhaseWindowConfig(_StrictBaseModel):
    task_id: str = ""
    allowed_phases: list[PhaseId] = Field(default_factory=list)
    restricted_phases: list[PhaseId] | None = None
    time_window: TimeWindow | None = None


class PatternMatchConfig(_StrictBaseModel):
    field: str = ""
    pattern: str = ""
    action: str = "allow"
    entity_type: str = "clients"
    message: str | None = None


class PrecedenceOverrideConfig(_StrictBaseModel):
    higher_priority_items: list[str] = Field(default_factory=list)
    lower_priority_items: list[str] = Field(default_factory=list)
    entity_type: str = "clients"
    reason: str | None = None


# ------------------------------------------------------------
# Rule variants
# ------------------------------------------------------------
class _RuleBase(_StrictBaseModel):
    """
    @brief
    Attributes shared by every rule variant.

    @details
    `id` never changes after creation; `updated_at` is refreshed on every
    whole- or partial-field replacement (see datarules.rules.catalog).
    """

    id: str
    name: str = ""
    description: str = ""
    enabled: bool = True
    priority: int | float = 50
    created_at: str = ""
    updated_at: str = ""
    source: Literal["manual", "ai-generated"] = "manual"


class CoRunRule(_RuleBase):
    type: Literal["co-run"] = "co-run"
    config: CoRunConfig


class SlotRestrictionRule(_RuleBase):
    type: Literal["slot-restriction"] = "slot-restriction"
    config: SlotRestrictionConfig


class LoadLimitRule(_RuleBase):
    type: Literal["load-limit"] = "load-limit"
    config: LoadLimitConfig


class PhaseWindowRule(_RuleBase):
    type: Literal["phase-window"] = "phase-window"
    config: PhaseWindowConfig


class PatternMatchRule(_RuleBase):
    type: Literal["pattern-match"] = "pattern-match"
    config: PatternMatchConfig


class PrecedenceOverrideRule(_RuleBase):
    type: Literal["precedence-override"] = "precedence-override"
    config: PrecedenceOverrideConfig


Rule = Annotated[
    Union[
        CoRunRule,
        SlotRestrictionRule,
        LoadLimitRule,
        PhaseWindowRule,
        PatternMatchRule,
        PrecedenceOverrideRule,
    ],
    Field(discriminator="type"),
]

RULE_ADAPTER: TypeAdapter[Any] = TypeAdapter(Rule)
RULE_LIST_ADAPTER: TypeAdapter[Any] = TypeAdapter(list[Rule])


def parse_rule(data: Mapping[str, Any]) -> Any:
    """
    @brief
    Build a typed rule from a plain mapping.

    @params
        data : Mapping[str, Any]
            Rule payload using camelCase (wire) or snake_case keys.

    @returns
        One of the six rule variant instances.

    @raises
        RuleError
            Raised when the payload is structurally invalid.
    """
    try:
        return RULE_ADAPTER.validate_python(dict(data))
    except PydanticValidationError as e:
        raise RuleError(
            message=f"Invalid rule payload: {e}",
            source="schemas.parse_rule",
            suggested_action="Check the rule type tag, config keys and value types.",
        ) from e


# ------------------------------------------------------------
# Priority weights
# ------------------------------------------------------------
class PriorityWeight(_StrictBaseModel):
    """
    @brief
    Relative importance of one allocation criterion.

    @details
    `weight` is a percentage in [0, 100]. Weights travel with the rules in
    the configuration export; disabled weights are kept but do not count.
    """

    model_config = {**_StrictBaseModel.model_config, "frozen": True}

    id: str
    name: str
    description: str = ""
    weight: int | float = Field(..., ge=0, le=100)
    category: Literal["client", "worker", "task", "system"]
    enabled: bool = True


DEFAULT_PRIORITY_WEIGHTS: tuple[PriorityWeight, ...] = (
    PriorityWeight(
        id="client-priority-level",
        name="Client Priority Level",
        description="Weight given to client-specified priority levels",
        weight=80,
        category="client",
    ),
    PriorityWeight(
        id="worker-qualification",
        name="Worker Qualification Match",
        description="Weight given to how well worker qualifications match task requirements",
        weight=70,
        category="worker",
    ),
    PriorityWeight(
        id="task-duration",
        name="Task Duration Optimization",
        description="Weight given to optimizing for shorter task completion times",
        weight=60,
        category="task",
    ),
    PriorityWeight(
        id="load-balancing",
        name="Load Balancing",
        description="Weight given to distributing work evenly across workers",
        weight=50,
        category="system",
    ),
    PriorityWeight(
        id="skill-matching",
        name="Skill Matching",
        description="Weight given to matching required skills exactly",
        weight=75,
        category="worker",
    ),
)


class RulesImport(BaseModel):
    """Rules and priority weights restored from a configuration export."""

    rules: list[Rule] = Field(default_factory=list)
    priority_weights: list[PriorityWeight] = Field(
        default_factory=lambda: list(DEFAULT_PRIORITY_WEIGHTS)
    )


# ------------------------------------------------------------
# Results and data context
# ------------------------------------------------------------
class RuleValidationResult(_StrictBaseModel):
    """
    @brief
    Outcome of validating one rule or a whole rule set.

    @details
    `is_valid` is true iff `errors` is empty. Warnings and suggestions never
    affect validity.
    """

    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)

    def finalize(self) -> RuleValidationResult:
        self.is_valid = not self.errors
        return self


class DataContext(BaseModel):
    """
    @brief
    Identifier sets available in the current dataset.

    @details
    Supplied to the rule-vs-data validator by the caller; see
    datarules.rules.data_refs.build_data_context for the usual derivation.
    """

    available_task_ids: set[str] = Field(default_factory=set)
    available_worker_groups: set[str] = Field(default_factory=set)
    available_client_groups: set[str] = Field(default_factory=set)


__all__ = [
    "CoRunRule",
    "DEFAULT_PRIORITY_WEIGHTS",
    "DataContext",
    "LoadLimitRule",
    "PatternMatchRule",
    "PhaseWindowRule",
    "PrecedenceOverrideRule",
    "PriorityWeight",
    "RULE_ACTIONS",
    "RULE_TYPES",
    "Rule",
    "RuleValidationResult",
    "RulesImport",
    "SlotRestrictionRule",
    "parse_rule",
]
