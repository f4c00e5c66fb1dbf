"""ifc-rules — rule-based element selection for IFC building models."""

__version__ = "0.1.0"

from ifcrules.builders.fluent import RuleBuilder, RuleBuilderImpl
from ifcrules.engine.engine import RuleEngine, create_rule_engine
from ifcrules.engine.result import SelectionResult
from ifcrules.engine.validation import ValidationIssue, ValidationResult
from ifcrules.indexing.builder import IndexConstructionError, build_element_index
from ifcrules.indexing.index import ElementIndex
from ifcrules.indexing.schema import ModelSchema, extract_model_schema
from ifcrules.models.conditions import SelectionRule, parse_condition, parse_rule
from ifcrules.models.element import PropertyValue, UnifiedElement

__all__ = [
    "__version__",
    # Index
    "ElementIndex",
    "IndexConstructionError",
    "build_element_index",
    # Models
    "PropertyValue",
    "SelectionRule",
    "UnifiedElement",
    "parse_condition",
    "parse_rule",
    # Engine
    "RuleBuilder",
    "RuleBuilderImpl",
    "RuleEngine",
    "SelectionResult",
    "ValidationIssue",
    "ValidationResult",
    "create_rule_engine",
    # Schema
    "ModelSchema",
    "extract_model_schema",
]
