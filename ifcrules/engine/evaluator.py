"""Condition evaluation — does one element satisfy one condition tree?

Every condition kind has its own evaluator, looked up by the condition's
class.  A kind with no evaluator (an :class:`UnknownCondition`, or any
foreign object) is logged and treated as a non-match; evaluation never
raises for irregular data.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from ifcrules.indexing.index import ElementIndex
from ifcrules.models.conditions import (
    AttributeCondition,
    ClassificationCondition,
    CompositeCondition,
    EntityTypeCondition,
    MaterialCondition,
    PropertyCondition,
    QuantityCondition,
    RelationshipCondition,
    SpatialCondition,
)
from ifcrules.models.element import PropertyValue, UnifiedElement
from ifcrules.operators.comparison import (
    evaluate_numeric_operator,
    evaluate_operator,
    evaluate_string_operator,
)
from ifcrules.operators.patterns import has_wildcard, matches_pattern

logger = logging.getLogger(__name__)

_ATTRIBUTE_FIELDS = {
    "name": "name",
    "description": "description",
    "tag": "tag",
    "objectType": "object_type",
    "predefinedType": "predefined_type",
}


# ---------------------------------------------------------------------------
# Namespace lookup
# ---------------------------------------------------------------------------


def find_property_value(
    element: UnifiedElement,
    property_set: str,
    property_name: str,
) -> PropertyValue | None:
    """Find a property by set + name.

    ``"*"`` searches every set and a wildcarded set name searches the
    matching ones; the first hit in the record's set order wins.  A plain
    set name is an exact key lookup.
    """
    if property_set == "*" or has_wildcard(property_set):
        for pset_name, props in element.properties.items():
            if property_set != "*" and not matches_pattern(pset_name, property_set):
                continue
            if property_name in props:
                return props[property_name]
        return None

    props = element.properties.get(property_set)
    if props is None:
        return None
    return props.get(property_name)


def find_quantity_value(
    element: UnifiedElement,
    quantity_set: str | None,
    quantity_name: str,
) -> float | None:
    """Find a quantity; set names are patterns, ``None``/``"*"`` means any set."""
    for qset_name, quantities in element.quantities.items():
        if quantity_set not in (None, "*") and not matches_pattern(qset_name, quantity_set):
            continue
        if quantity_name in quantities:
            return quantities[quantity_name]
    return None


# ---------------------------------------------------------------------------
# Per-kind evaluators
# ---------------------------------------------------------------------------


def _eval_entity_type(
    element: UnifiedElement,
    condition: EntityTypeCondition,
    index: ElementIndex | None,
) -> bool:
    for type_name in condition.type_names:
        if condition.include_subtypes:
            hit = any(matches_pattern(t, type_name) for t in element.inheritance_chain)
        else:
            hit = matches_pattern(element.ifc_class, type_name)
        if not hit:
            continue
        if condition.predefined_type is not None and not matches_pattern(
            element.predefined_type, condition.predefined_type
        ):
            continue
        return True
    return False


def _eval_property(
    element: UnifiedElement,
    condition: PropertyCondition,
    index: ElementIndex | None,
) -> bool:
    prop = find_property_value(element, condition.property_set, condition.property_name)

    if condition.operator == "exists":
        return prop is not None
    if condition.operator == "notExists":
        return prop is None
    if prop is None:
        return condition.operator == "notEquals"

    return evaluate_operator(prop.value, condition.operator, condition.value, condition.value_to)


def _eval_spatial(
    element: UnifiedElement,
    condition: SpatialCondition,
    index: ElementIndex | None,
) -> bool:
    placement: str | None = getattr(element.spatial, condition.level)

    if condition.name is not None:
        if not placement or not matches_pattern(placement, condition.name):
            return False

    # Only storeys carry an elevation
    elevation_filter = condition.elevation if condition.level == "storey" else None
    if elevation_filter is not None:
        elevation = element.spatial.storey_elevation
        if elevation is None:
            return False
        if not evaluate_numeric_operator(
            elevation,
            elevation_filter.operator,
            elevation_filter.value,
            elevation_filter.value_to,
        ):
            return False

    if condition.name is None and elevation_filter is None:
        return placement is not None
    return True


def _eval_material(
    element: UnifiedElement,
    condition: MaterialCondition,
    index: ElementIndex | None,
) -> bool:
    material = element.material
    if material is None:
        return False

    if condition.name is not None:
        name_matches = matches_pattern(material.name, condition.name) or any(
            matches_pattern(layer.material, condition.name) for layer in material.layers
        )
        if not name_matches:
            return False

    if condition.min_thickness is not None or condition.max_thickness is not None:
        thickness = material.total_thickness
        if thickness is None:
            return False
        if condition.min_thickness is not None and thickness < condition.min_thickness:
            return False
        if condition.max_thickness is not None and thickness > condition.max_thickness:
            return False

    return True


def _eval_classification(
    element: UnifiedElement,
    condition: ClassificationCondition,
    index: ElementIndex | None,
) -> bool:
    for cls in element.classifications:
        if condition.system not in (None, "*") and not matches_pattern(cls.system, condition.system):
            continue
        if condition.code is not None and not matches_pattern(cls.code, condition.code):
            continue
        if condition.name is not None and not matches_pattern(cls.name, condition.name):
            continue
        return True
    return False


def _eval_attribute(
    element: UnifiedElement,
    condition: AttributeCondition,
    index: ElementIndex | None,
) -> bool:
    value = getattr(element, _ATTRIBUTE_FIELDS[condition.attribute])
    return evaluate_string_operator(value, condition.operator, condition.value)


def _eval_quantity(
    element: UnifiedElement,
    condition: QuantityCondition,
    index: ElementIndex | None,
) -> bool:
    value = find_quantity_value(element, condition.quantity_set, condition.quantity_name)
    return evaluate_numeric_operator(value, condition.operator, condition.value, condition.value_to)


def _related_ids(element: UnifiedElement, relation: str) -> list[int]:
    rels = element.relationships
    if relation == "containedIn":
        return [rels.contained_in] if rels.contained_in is not None else []
    if relation == "aggregatedBy":
        return [rels.aggregated_by] if rels.aggregated_by is not None else []
    if relation == "connectedTo":
        return list(rels.connected_to)
    if relation == "hasOpenings":
        return list(rels.has_openings)
    if relation == "fillsOpening":
        return [rels.fills_opening] if rels.fills_opening is not None else []
    if relation == "hasType":
        return [rels.has_type] if rels.has_type is not None else []
    return []


def _eval_relationship(
    element: UnifiedElement,
    condition: RelationshipCondition,
    index: ElementIndex | None,
) -> bool:
    related = _related_ids(element, condition.relation)
    if not related:
        return False

    target = condition.target
    if target is None or (target.type is None and target.name is None):
        return True

    if index is None:
        logger.debug(
            "Relationship target for %s cannot be resolved without an index",
            condition.relation,
        )
        return False

    for related_id in related:
        other = index.get(related_id)
        if other is None:
            continue
        if target.type is not None and not any(
            matches_pattern(t, target.type) for t in other.inheritance_chain
        ):
            continue
        if target.name is not None and not matches_pattern(other.name, target.name):
            continue
        return True
    return False


def _eval_composite(
    element: UnifiedElement,
    condition: CompositeCondition,
    index: ElementIndex | None,
) -> bool:
    results = (evaluate_condition(element, c, index) for c in condition.conditions)
    if condition.type == "and":
        return all(results)
    if condition.type == "or":
        return any(results)
    # not: none of the children may match
    return not any(results)


_EVALUATORS: dict[type, Callable[[UnifiedElement, Any, ElementIndex | None], bool]] = {
    EntityTypeCondition: _eval_entity_type,
    PropertyCondition: _eval_property,
    SpatialCondition: _eval_spatial,
    MaterialCondition: _eval_material,
    ClassificationCondition: _eval_classification,
    AttributeCondition: _eval_attribute,
    QuantityCondition: _eval_quantity,
    RelationshipCondition: _eval_relationship,
    CompositeCondition: _eval_composite,
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def evaluate_condition(
    element: UnifiedElement,
    condition: Any,
    index: ElementIndex | None = None,
) -> bool:
    """Return True if *element* satisfies *condition*.

    Parameters
    ----------
    element:
        The record under test.
    condition:
        Any condition model, including nested composites.
    index:
        Needed only to resolve relationship targets.
    """
    evaluator = _EVALUATORS.get(type(condition))
    if evaluator is None:
        kind = getattr(condition, "type", type(condition).__name__)
        logger.warning("Unknown condition type %r; treating as no match", kind)
        return False
    return evaluator(element, condition, index)


def evaluate_conditions(
    element: UnifiedElement,
    conditions: Iterable[Any],
    mode: str = "all",
    index: ElementIndex | None = None,
) -> bool:
    """Combine top-level *conditions* under *mode* (``all`` or ``any``).

    With no conditions, ``all`` is vacuously true and ``any`` is false.
    """
    results = (evaluate_condition(element, c, index) for c in conditions)
    if mode == "any":
        return any(results)
    return all(results)
