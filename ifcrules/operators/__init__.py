"""Pattern & operator matching — primitive, side-effect-free comparisons."""

from ifcrules.operators.comparison import (
    ComparisonOperator,
    NumericOperator,
    StringOperator,
    evaluate_numeric_operator,
    evaluate_operator,
    evaluate_string_operator,
    parse_boolean_value,
    parse_numeric_value,
    stringify,
)
from ifcrules.operators.patterns import glob_to_regex, has_wildcard, matches_pattern

__all__ = [
    "ComparisonOperator",
    "NumericOperator",
    "StringOperator",
    "evaluate_numeric_operator",
    "evaluate_operator",
    "evaluate_string_operator",
    "glob_to_regex",
    "has_wildcard",
    "matches_pattern",
    "parse_boolean_value",
    "parse_numeric_value",
    "stringify",
]
