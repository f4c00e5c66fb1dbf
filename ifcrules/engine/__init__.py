"""Selection engine — condition evaluation, rule execution and validation."""

from ifcrules.engine.engine import RuleEngine, create_rule_engine
from ifcrules.engine.evaluator import (
    evaluate_condition,
    evaluate_conditions,
    find_property_value,
    find_quantity_value,
)
from ifcrules.engine.result import SelectionResult, resolve_path
from ifcrules.engine.validation import ValidationIssue, ValidationResult, validate_rule

__all__ = [
    "RuleEngine",
    "SelectionResult",
    "ValidationIssue",
    "ValidationResult",
    "create_rule_engine",
    "evaluate_condition",
    "evaluate_conditions",
    "find_property_value",
    "find_quantity_value",
    "resolve_path",
    "validate_rule",
]
