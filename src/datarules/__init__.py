"""
datarules: validation and rule-consistency engine for client/worker/task datasets.
"""

from datarules.rules.conflicts import validate_rule_conflicts
from datarules.rules.data_refs import build_data_context, validate_rule_against_data
from datarules.rules.rule_validator import validate_rule
from datarules.schemas.models import (
    Config,
    Dataset,
    EntityCollection,
    EntityType,
    Severity,
    ValidationIssue,
)
from datarules.schemas.rules import DataContext, RuleValidationResult, parse_rule
from datarules.validator.validator import validate_across_entities, validate_entity_rows

__all__ = [
    "Config",
    "DataContext",
    "Dataset",
    "EntityCollection",
    "EntityType",
    "RuleValidationResult",
    "Severity",
    "ValidationIssue",
    "build_data_context",
    "parse_rule",
    "validate_across_entities",
    "validate_entity_rows",
    "validate_rule",
    "validate_rule_against_data",
    "validate_rule_conflicts",
]
