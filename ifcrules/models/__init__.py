"""Data models: the unified element record, conditions and rules."""

from ifcrules.models.conditions import (
    AttributeCondition,
    ClassificationCondition,
    CompositeCondition,
    Condition,
    ElevationFilter,
    EntityTypeCondition,
    MaterialCondition,
    PropertyCondition,
    QuantityCondition,
    RelationshipCondition,
    RelationshipTarget,
    SelectionRule,
    SpatialCondition,
    UnknownCondition,
    parse_condition,
    parse_rule,
)
from ifcrules.models.element import (
    ElementClassification,
    ElementMaterial,
    ElementRelationships,
    MaterialLayer,
    PropertyValue,
    SpatialLocation,
    UnifiedElement,
)

__all__ = [
    "AttributeCondition",
    "ClassificationCondition",
    "CompositeCondition",
    "Condition",
    "ElementClassification",
    "ElementMaterial",
    "ElementRelationships",
    "ElevationFilter",
    "EntityTypeCondition",
    "MaterialCondition",
    "MaterialLayer",
    "PropertyCondition",
    "PropertyValue",
    "QuantityCondition",
    "RelationshipCondition",
    "RelationshipTarget",
    "SelectionRule",
    "SpatialCondition",
    "SpatialLocation",
    "UnifiedElement",
    "UnknownCondition",
    "parse_condition",
    "parse_rule",
]
