"""Fluent builder for selection rules.

Example::

    rule = (
        RuleBuilder.select("IfcWall")
        .where("Pset_WallCommon.IsExternal").equals(True)
        .and_("Pset_WallCommon.LoadBearing").equals(True)
        .on_storey("Ground Floor")
        .with_material("*Concrete*")
        .build()
    )

The builder is mutable and every chaining method returns it; ``build()``
freezes the accumulated state into a :class:`SelectionRule`.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from ifcrules.config import DEFAULT_MODE, STOREY_ELEVATION_TOLERANCE
from ifcrules.models.conditions import (
    AttributeCondition,
    AttributeName,
    ClassificationCondition,
    CompositeCondition,
    ElevationFilter,
    EntityTypeCondition,
    MaterialCondition,
    PropertyCondition,
    QuantityCondition,
    RuleMode,
    SelectionRule,
    SpatialCondition,
    parse_condition,
)
from ifcrules.models.element import Scalar

DEFAULT_RULE_NAME = "Unnamed Rule"


def _split_path(path: str) -> tuple[str | None, str]:
    """Split ``"Set.Name"``; anything else is a bare name searched in every set."""
    parts = path.split(".")
    if len(parts) == 2:
        return parts[0], parts[1]
    return None, path


def _type_condition(entity_type: str | Sequence[str]) -> EntityTypeCondition | None:
    types = (entity_type,) if isinstance(entity_type, str) else tuple(entity_type)
    if not types or types[0] == "*":
        return None
    return EntityTypeCondition(entity_type=types, include_subtypes=True)


# ---------------------------------------------------------------------------
# Sub-builders
# ---------------------------------------------------------------------------


class PropertyConditionBuilder:
    """Pending property condition; an operator method completes it."""

    def __init__(self, builder: RuleBuilderImpl, property_path: str) -> None:
        self._builder = builder
        property_set, self.property_name = _split_path(property_path)
        self.property_set = property_set or "*"

    def _add(self, operator: str, value: Scalar = None, value_to: float | None = None) -> RuleBuilderImpl:
        return self._builder.add_condition(PropertyCondition(
            property_set=self.property_set,
            property_name=self.property_name,
            operator=operator,
            value=value,
            value_to=value_to,
        ))

    def equals(self, value: Scalar) -> RuleBuilderImpl:
        return self._add("equals", value)

    def not_equals(self, value: Scalar) -> RuleBuilderImpl:
        return self._add("notEquals", value)

    def contains(self, value: str) -> RuleBuilderImpl:
        return self._add("contains", value)

    def not_contains(self, value: str) -> RuleBuilderImpl:
        return self._add("notContains", value)

    def starts_with(self, value: str) -> RuleBuilderImpl:
        return self._add("startsWith", value)

    def ends_with(self, value: str) -> RuleBuilderImpl:
        return self._add("endsWith", value)

    def matches(self, regex: str) -> RuleBuilderImpl:
        return self._add("matches", regex)

    def greater_than(self, value: float) -> RuleBuilderImpl:
        return self._add("greaterThan", value)

    def less_than(self, value: float) -> RuleBuilderImpl:
        return self._add("lessThan", value)

    def greater_or_equal(self, value: float) -> RuleBuilderImpl:
        return self._add("greaterOrEqual", value)

    def less_or_equal(self, value: float) -> RuleBuilderImpl:
        return self._add("lessOrEqual", value)

    def between(self, minimum: float, maximum: float) -> RuleBuilderImpl:
        return self._add("between", minimum, maximum)

    def exists(self) -> RuleBuilderImpl:
        return self._add("exists")

    def not_exists(self) -> RuleBuilderImpl:
        return self._add("notExists")


class QuantityConditionBuilder:
    """Pending quantity condition; numeric operators only."""

    def __init__(self, builder: RuleBuilderImpl, quantity_path: str) -> None:
        self._builder = builder
        self.quantity_set, self.quantity_name = _split_path(quantity_path)

    def _add(self, operator: str, value: float, value_to: float | None = None) -> RuleBuilderImpl:
        return self._builder.add_condition(QuantityCondition(
            quantity_set=self.quantity_set,
            quantity_name=self.quantity_name,
            operator=operator,
            value=value,
            value_to=value_to,
        ))

    def equals(self, value: float) -> RuleBuilderImpl:
        return self._add("equals", value)

    def not_equals(self, value: float) -> RuleBuilderImpl:
        return self._add("notEquals", value)

    def greater_than(self, value: float) -> RuleBuilderImpl:
        return self._add("greaterThan", value)

    def less_than(self, value: float) -> RuleBuilderImpl:
        return self._add("lessThan", value)

    def greater_or_equal(self, value: float) -> RuleBuilderImpl:
        return self._add("greaterOrEqual", value)

    def less_or_equal(self, value: float) -> RuleBuilderImpl:
        return self._add("lessOrEqual", value)

    def between(self, minimum: float, maximum: float) -> RuleBuilderImpl:
        return self._add("between", minimum, maximum)


class AttributeConditionBuilder:
    def __init__(self, builder: RuleBuilderImpl, attribute: AttributeName) -> None:
        self._builder = builder
        self.attribute = attribute

    def _add(self, operator: str, value: str) -> RuleBuilderImpl:
        return self._builder.add_condition(AttributeCondition(
            attribute=self.attribute,
            operator=operator,
            value=value,
        ))

    def equals(self, value: str) -> RuleBuilderImpl:
        return self._add("equals", value)

    def not_equals(self, value: str) -> RuleBuilderImpl:
        return self._add("notEquals", value)

    def contains(self, value: str) -> RuleBuilderImpl:
        return self._add("contains", value)

    def starts_with(self, value: str) -> RuleBuilderImpl:
        return self._add("startsWith", value)

    def ends_with(self, value: str) -> RuleBuilderImpl:
        return self._add("endsWith", value)

    def matches(self, regex: str) -> RuleBuilderImpl:
        return self._add("matches", regex)


class OrBuilder:
    """Collects alternatives for :meth:`RuleBuilderImpl.or_`."""

    def __init__(self) -> None:
        self.conditions: list[Any] = []

    def type(self, entity_type: str | Sequence[str]) -> OrBuilder:
        names = entity_type if isinstance(entity_type, str) else tuple(entity_type)
        self.conditions.append(EntityTypeCondition(entity_type=names, include_subtypes=True))
        return self

    def property(self, property_set: str, property_name: str, value: Scalar) -> OrBuilder:
        self.conditions.append(PropertyCondition(
            property_set=property_set,
            property_name=property_name,
            operator="equals",
            value=value,
        ))
        return self

    def classification(self, system: str, code: str | None = None) -> OrBuilder:
        self.conditions.append(ClassificationCondition(system=system, code=code))
        return self

    def material(self, name: str) -> OrBuilder:
        self.conditions.append(MaterialCondition(name=name))
        return self


# ---------------------------------------------------------------------------
# Main builder
# ---------------------------------------------------------------------------


class RuleBuilderImpl:
    """Mutable rule under construction."""

    def __init__(self, entity_type: str | Sequence[str] | None = None) -> None:
        self.rule_id = f"rule-{int(time.time() * 1000)}"
        self.rule_name = DEFAULT_RULE_NAME
        self.rule_description: str | None = None
        self.conditions: list[Any] = []
        self.mode: RuleMode = DEFAULT_MODE
        if entity_type is not None:
            self.select(entity_type)

    def add_condition(self, condition: Any) -> RuleBuilderImpl:
        """Append a condition model or condition document."""
        if isinstance(condition, dict):
            condition = parse_condition(condition)
        self.conditions.append(condition)
        return self

    def select(self, entity_type: str | Sequence[str]) -> RuleBuilderImpl:
        """Install or replace the leading entity-type condition.

        ``"*"`` removes the type filter.
        """
        if self.conditions and isinstance(self.conditions[0], EntityTypeCondition):
            del self.conditions[0]
        seed = _type_condition(entity_type)
        if seed is not None:
            self.conditions.insert(0, seed)
        return self

    # -- metadata ----------------------------------------------------------

    def with_id(self, rule_id: str) -> RuleBuilderImpl:
        self.rule_id = rule_id
        return self

    def with_name(self, name: str) -> RuleBuilderImpl:
        self.rule_name = name
        return self

    def with_description(self, description: str) -> RuleBuilderImpl:
        self.rule_description = description
        return self

    # -- properties, quantities, attributes ----------------------------------

    def where(self, property_path: str) -> PropertyConditionBuilder:
        """Start a property condition on ``"Pset.Name"`` or a bare name."""
        return PropertyConditionBuilder(self, property_path)

    def and_(self, property_path: str) -> PropertyConditionBuilder:
        return PropertyConditionBuilder(self, property_path)

    def with_quantity(self, quantity_path: str) -> QuantityConditionBuilder:
        return QuantityConditionBuilder(self, quantity_path)

    def where_name(self) -> AttributeConditionBuilder:
        return AttributeConditionBuilder(self, "name")

    def where_description(self) -> AttributeConditionBuilder:
        return AttributeConditionBuilder(self, "description")

    def where_tag(self) -> AttributeConditionBuilder:
        return AttributeConditionBuilder(self, "tag")

    def where_object_type(self) -> AttributeConditionBuilder:
        return AttributeConditionBuilder(self, "objectType")

    # -- spatial -------------------------------------------------------------

    def on_storey(self, name: str) -> RuleBuilderImpl:
        return self.add_condition(SpatialCondition(level="storey", name=name))

    def on_storey_at_elevation(
        self,
        elevation: float,
        tolerance: float = STOREY_ELEVATION_TOLERANCE,
    ) -> RuleBuilderImpl:
        """Match storeys whose elevation is within *tolerance* of *elevation*."""
        return self.add_condition(SpatialCondition(
            level="storey",
            elevation=ElevationFilter(
                operator="between",
                value=elevation - tolerance,
                value_to=elevation + tolerance,
            ),
        ))

    def in_building(self, name: str) -> RuleBuilderImpl:
        return self.add_condition(SpatialCondition(level="building", name=name))

    def in_space(self, name: str) -> RuleBuilderImpl:
        return self.add_condition(SpatialCondition(level="space", name=name))

    # -- material, classification --------------------------------------------

    def with_material(self, name: str) -> RuleBuilderImpl:
        return self.add_condition(MaterialCondition(name=name))

    def with_material_thickness(
        self,
        minimum: float | None = None,
        maximum: float | None = None,
    ) -> RuleBuilderImpl:
        return self.add_condition(MaterialCondition(min_thickness=minimum, max_thickness=maximum))

    def with_classification(self, system: str, code: str | None = None) -> RuleBuilderImpl:
        return self.add_condition(ClassificationCondition(system=system, code=code))

    def with_classification_code(self, code: str) -> RuleBuilderImpl:
        return self.add_condition(ClassificationCondition(system="*", code=code))

    def with_predefined_type(self, predefined_type: str) -> RuleBuilderImpl:
        """Narrow the first entity-type condition, or add an attribute check.

        Without a type condition the predefined type is compared with
        ``equals`` on the ``predefinedType`` attribute.
        """
        for i, condition in enumerate(self.conditions):
            if isinstance(condition, EntityTypeCondition):
                self.conditions[i] = condition.model_copy(
                    update={"predefined_type": predefined_type}
                )
                return self
        return self.add_condition(AttributeCondition(
            attribute="predefinedType",
            operator="equals",
            value=predefined_type,
        ))

    # -- grouping ------------------------------------------------------------

    def or_(self, build_alternatives: Callable[[OrBuilder], Any]) -> RuleBuilderImpl:
        """Append one ``or`` group filled in by *build_alternatives*.

        An empty group is dropped.
        """
        alternatives = OrBuilder()
        build_alternatives(alternatives)
        if alternatives.conditions:
            self.add_condition(CompositeCondition(
                type="or",
                conditions=tuple(alternatives.conditions),
            ))
        return self

    def match_any(self) -> RuleBuilderImpl:
        self.mode = "any"
        return self

    def build(self) -> SelectionRule:
        return SelectionRule(
            id=self.rule_id,
            name=self.rule_name,
            description=self.rule_description,
            conditions=tuple(self.conditions),
            mode=self.mode,
        )


class RuleBuilder:
    """Entry points for the fluent builder."""

    @staticmethod
    def select(entity_type: str | Sequence[str]) -> RuleBuilderImpl:
        """Start a rule for one or more IFC classes; ``"*"`` means any class."""
        return RuleBuilderImpl(entity_type)

    @staticmethod
    def all() -> RuleBuilderImpl:
        return RuleBuilderImpl()

    @staticmethod
    def from_conditions(conditions: Iterable[Any]) -> RuleBuilderImpl:
        builder = RuleBuilderImpl()
        for condition in conditions:
            builder.add_condition(condition)
        return builder
