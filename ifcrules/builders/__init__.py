"""Fluent rule construction."""

from ifcrules.builders.fluent import (
    AttributeConditionBuilder,
    OrBuilder,
    PropertyConditionBuilder,
    QuantityConditionBuilder,
    RuleBuilder,
    RuleBuilderImpl,
)

__all__ = [
    "AttributeConditionBuilder",
    "OrBuilder",
    "PropertyConditionBuilder",
    "QuantityConditionBuilder",
    "RuleBuilder",
    "RuleBuilderImpl",
]
