"""Index builder — raw IFC entity graph to an immutable element index."""

from ifcrules.indexing.builder import (
    IndexConstructionError,
    build_element_index,
    extract_property_sets_map,
    extract_quantity_sets_map,
)
from ifcrules.indexing.hierarchy import IFC4_HIERARCHY, IFC4_PARENTS, TypeHierarchy
from ifcrules.indexing.index import ElementIndex
from ifcrules.indexing.inputs import (
    ClassificationReferenceData,
    ClassificationsData,
    ClassificationSource,
    IndexInputs,
    MaterialAssociation,
    MaterialData,
    MaterialLayerData,
    MaterialLayerSetData,
    MaterialsData,
    ParseResult,
    ProjectRef,
    PropertySetData,
    QuantitySetData,
    RawEntity,
    RelationshipData,
    SpatialHierarchy,
)
from ifcrules.indexing.schema import ModelSchema, extract_model_schema

__all__ = [
    "ClassificationReferenceData",
    "ClassificationSource",
    "ClassificationsData",
    "ElementIndex",
    "IFC4_HIERARCHY",
    "IFC4_PARENTS",
    "IndexConstructionError",
    "IndexInputs",
    "MaterialAssociation",
    "MaterialData",
    "MaterialLayerData",
    "MaterialLayerSetData",
    "MaterialsData",
    "ModelSchema",
    "ParseResult",
    "ProjectRef",
    "PropertySetData",
    "QuantitySetData",
    "RawEntity",
    "RelationshipData",
    "SpatialHierarchy",
    "TypeHierarchy",
    "build_element_index",
    "extract_model_schema",
    "extract_property_sets_map",
    "extract_quantity_sets_map",
]
