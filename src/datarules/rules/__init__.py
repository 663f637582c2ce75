from datarules.rules.conflicts import validate_rule_conflicts
from datarules.rules.data_refs import build_data_context, validate_rule_against_data
from datarules.rules.rule_validator import validate_rule

__all__ = [
    "build_data_context",
    "validate_rule",
    "validate_rule_against_data",
    "validate_rule_conflicts",
]
