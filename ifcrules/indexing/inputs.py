"""Input contract for the index builder.

These models describe what an upstream IFC parser hands over: the raw
entity collection plus optional extraction results.  Every optional input
may be omitted; the builder then leaves the matching record fields empty.

Relationship and set types use the upper-case STEP spelling
(``IFCRELDEFINESBYPROPERTIES``, ``IFCPROPERTYSET``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ifcrules.models.element import PropertyValue


class RawEntity(BaseModel):
    """One parsed STEP entity.

    ``attributes`` is either the positional attribute list (references to
    other entities as express ids) or a mapping of attribute name to value.
    """

    express_id: int
    type: str
    attributes: list[Any] | dict[str, Any] = Field(default_factory=list)


class ParseResult(BaseModel):
    """The raw entity graph."""

    entities: dict[int, RawEntity]
    entities_by_type: dict[str, list[int]] = Field(default_factory=dict)

    def ids_of_type(self, type_name: str) -> list[int]:
        """Express ids of every entity whose type is *type_name* (any case)."""
        wanted = type_name.upper()
        if self.entities_by_type:
            for key, ids in self.entities_by_type.items():
                if key.upper() == wanted:
                    return list(ids)
            return []
        return [eid for eid, ent in self.entities.items() if ent.type.upper() == wanted]


class PropertySetData(BaseModel):
    name: str
    properties: dict[str, PropertyValue] = Field(default_factory=dict)


class QuantitySetData(BaseModel):
    name: str
    quantities: dict[str, float] = Field(default_factory=dict)


class MaterialData(BaseModel):
    name: str
    description: str | None = None


class MaterialLayerData(BaseModel):
    name: str | None = None
    thickness: float = 0.0
    material: str | None = None


class MaterialLayerSetData(BaseModel):
    name: str | None = None
    layers: list[int] = Field(default_factory=list)
    total_thickness: float | None = None


class MaterialAssociation(BaseModel):
    element_id: int
    material_id: int
    type: str = "single"
    """``single`` or ``layer_set``."""


class MaterialsData(BaseModel):
    materials: dict[int, MaterialData] = Field(default_factory=dict)
    material_layers: dict[int, MaterialLayerData] = Field(default_factory=dict)
    material_layer_sets: dict[int, MaterialLayerSetData] = Field(default_factory=dict)
    associations: list[MaterialAssociation] = Field(default_factory=list)


class ClassificationSource(BaseModel):
    """A classification system, e.g. Uniclass 2015."""

    name: str
    source: str | None = None


class ClassificationReferenceData(BaseModel):
    identification: str
    name: str | None = None
    referenced_source: int | None = None
    """Id of the owning system, or of a parent reference."""


class ClassificationsData(BaseModel):
    classifications: dict[int, ClassificationSource] = Field(default_factory=dict)
    classification_references: dict[int, ClassificationReferenceData] = Field(
        default_factory=dict
    )
    element_classifications: dict[int, list[int]] = Field(default_factory=dict)


class ProjectRef(BaseModel):
    express_id: int
    name: str | None = None


class SpatialHierarchy(BaseModel):
    """Spatial containers and the elements under each of them."""

    by_storey: dict[int, list[int]] = Field(default_factory=dict)
    by_building: dict[int, list[int]] = Field(default_factory=dict)
    by_site: dict[int, list[int]] = Field(default_factory=dict)
    by_space: dict[int, list[int]] = Field(default_factory=dict)
    storey_elevations: dict[int, float] = Field(default_factory=dict)
    element_to_storey: dict[int, int] = Field(default_factory=dict)
    project: ProjectRef | None = None


class RelationshipData(BaseModel):
    type: str
    relating_object: int
    related_objects: list[int] = Field(default_factory=list)


class IndexInputs(BaseModel):
    """Everything the builder consumes, bundled (used by the IFC adapter)."""

    parse_result: ParseResult
    property_sets: dict[int, PropertySetData] | None = None
    quantity_sets: dict[int, QuantitySetData] | None = None
    materials: MaterialsData | None = None
    classifications: ClassificationsData | None = None
    spatial_hierarchy: SpatialHierarchy | None = None
    relationships: list[RelationshipData] | None = None
    entity_names: dict[int, str] | None = None
