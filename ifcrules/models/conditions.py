"""Condition tree and SelectionRule models.

A condition is one node of a boolean predicate tree, discriminated by its
``type`` field.  On the wire (rule documents) fields use camelCase
(``propertySet``, ``valueTo``, ``includeSubtypes``); in Python they are
snake_case.  Both spellings are accepted on input.

A ``type`` tag that is not recognised parses to :class:`UnknownCondition`
instead of failing, so that evaluation can treat it as a non-match.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter
from pydantic.alias_generators import to_camel

from ifcrules.config import DEFAULT_MODE
from ifcrules.models.element import Scalar
from ifcrules.operators.comparison import ComparisonOperator, NumericOperator, StringOperator

SpatialLevel = Literal["project", "site", "building", "storey", "space"]
AttributeName = Literal["name", "description", "tag", "objectType", "predefinedType"]
RelationName = Literal[
    "containedIn", "aggregatedBy", "connectedTo", "hasOpenings", "fillsOpening", "hasType"
]
CompositeKind = Literal["and", "or", "not"]
RuleMode = Literal["all", "any"]


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class EntityTypeCondition(_Model):
    """Match by IFC class.

    With ``include_subtypes`` (the default) a requested name may appear
    anywhere in the element's inheritance chain; otherwise it must match
    the element's own class.  Several names are OR'd.
    """

    type: Literal["entityType"] = "entityType"
    entity_type: str | tuple[str, ...]
    include_subtypes: bool = True
    predefined_type: str | None = None

    @property
    def type_names(self) -> tuple[str, ...]:
        if isinstance(self.entity_type, str):
            return (self.entity_type,)
        return self.entity_type


class PropertyCondition(_Model):
    """Compare a property found by property-set + name.

    ``property_set`` may be ``"*"`` or a glob to search several sets.
    """

    type: Literal["property"] = "property"
    property_set: str = "*"
    property_name: str
    operator: ComparisonOperator
    value: Scalar = None
    value_to: float | None = None


class ElevationFilter(_Model):
    operator: NumericOperator
    value: float
    value_to: float | None = None


class SpatialCondition(_Model):
    """Match by placement at one containment level."""

    type: Literal["spatial"] = "spatial"
    level: SpatialLevel
    name: str | None = None
    elevation: ElevationFilter | None = None


class MaterialCondition(_Model):
    """Match by material or layer name and/or aggregate thickness."""

    type: Literal["material"] = "material"
    name: str | None = None
    min_thickness: float | None = None
    max_thickness: float | None = None


class ClassificationCondition(_Model):
    type: Literal["classification"] = "classification"
    system: str | None = None
    code: str | None = None
    name: str | None = None


class AttributeCondition(_Model):
    type: Literal["attribute"] = "attribute"
    attribute: AttributeName
    operator: StringOperator
    value: str


class QuantityCondition(_Model):
    """Numeric comparison against a quantity; ``quantity_set`` None means any set."""

    type: Literal["quantity"] = "quantity"
    quantity_set: str | None = None
    quantity_name: str
    operator: NumericOperator
    value: float
    value_to: float | None = None


class RelationshipTarget(_Model):
    type: str | None = None
    name: str | None = None


class RelationshipCondition(_Model):
    type: Literal["relationship"] = "relationship"
    relation: RelationName
    target: RelationshipTarget | None = None


class CompositeCondition(_Model):
    """Boolean combination of nested conditions.

    ``and``: all children match.  ``or``: at least one matches.
    ``not``: *none* of the children match, i.e. NOT(c1 OR c2 ...), which
    is different from NOT(c1 AND c2 ...) once there are two children.
    """

    type: CompositeKind
    conditions: tuple[Condition, ...] = ()


class UnknownCondition(_Model):
    """Placeholder for a condition kind this version does not know."""

    model_config = ConfigDict(frozen=True, extra="allow")

    type: str


_COMPOSITE_KINDS = ("and", "or", "not")
_LEAF_KINDS = (
    "entityType",
    "property",
    "spatial",
    "material",
    "classification",
    "attribute",
    "quantity",
    "relationship",
)


def _condition_tag(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if kind in _COMPOSITE_KINDS:
        return "composite"
    if kind in _LEAF_KINDS:
        return kind
    return "unknown"


Condition = Annotated[
    Union[
        Annotated[EntityTypeCondition, Tag("entityType")],
        Annotated[PropertyCondition, Tag("property")],
        Annotated[SpatialCondition, Tag("spatial")],
        Annotated[MaterialCondition, Tag("material")],
        Annotated[ClassificationCondition, Tag("classification")],
        Annotated[AttributeCondition, Tag("attribute")],
        Annotated[QuantityCondition, Tag("quantity")],
        Annotated[RelationshipCondition, Tag("relationship")],
        Annotated[CompositeCondition, Tag("composite")],
        Annotated[UnknownCondition, Tag("unknown")],
    ],
    Discriminator(_condition_tag),
]

CompositeCondition.model_rebuild()


class SelectionRule(_Model):
    """A named, top-level list of conditions plus a combination mode.

    ``mode`` applies only to the top level: ``all`` is a conjunction,
    ``any`` a disjunction.  A rule with no conditions in ``all`` mode
    matches every element (vacuous conjunction).
    """

    id: str
    name: str
    description: str | None = None
    conditions: tuple[Condition, ...] = Field(default_factory=tuple)
    mode: RuleMode = DEFAULT_MODE

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-compatible rule document (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_document(), indent=indent)


_CONDITION_ADAPTER: TypeAdapter[Any] = TypeAdapter(Condition)


def parse_condition(data: dict[str, Any] | BaseModel) -> Any:
    """Validate a single condition document into its condition model."""
    return _CONDITION_ADAPTER.validate_python(data)


def parse_rule(data: dict[str, Any] | str | bytes) -> SelectionRule:
    """Validate a rule document (dict or JSON text) into a :class:`SelectionRule`."""
    if isinstance(data, (str, bytes)):
        return SelectionRule.model_validate_json(data)
    return SelectionRule.model_validate(data)
