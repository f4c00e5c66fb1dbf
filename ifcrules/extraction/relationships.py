"""Extract spatial placement and element relationships from an IFC file."""

from __future__ import annotations

import logging

import ifcopenshell

from ifcrules.indexing.inputs import ProjectRef, RelationshipData, SpatialHierarchy

logger = logging.getLogger(__name__)

_LEVEL_GROUPS = {
    "IfcBuildingStorey": "by_storey",
    "IfcBuilding": "by_building",
    "IfcSite": "by_site",
    "IfcSpace": "by_space",
}

# IFC relationship class -> (relating attribute, related attribute)
_RELATIONSHIP_ATTRIBUTES = {
    "IfcRelDefinesByProperties": ("RelatingPropertyDefinition", "RelatedObjects"),
    "IfcRelDefinesByType": ("RelatingType", "RelatedObjects"),
    "IfcRelContainedInSpatialStructure": ("RelatingStructure", "RelatedElements"),
    "IfcRelAggregates": ("RelatingObject", "RelatedObjects"),
    "IfcRelConnectsElements": ("RelatingElement", "RelatedElement"),
    "IfcRelVoidsElement": ("RelatingBuildingElement", "RelatedOpeningElement"),
    "IfcRelFillsElement": ("RelatingOpeningElement", "RelatedBuildingElement"),
}


def _parent(entity: ifcopenshell.entity_instance) -> ifcopenshell.entity_instance | None:
    """Spatial container, or the aggregating object, of *entity*."""
    containment = getattr(entity, "ContainedInStructure", None)
    if containment:
        return containment[0].RelatingStructure
    decomposes = getattr(entity, "Decomposes", None)
    if decomposes:
        return decomposes[0].RelatingObject
    return None


def extract_spatial_hierarchy(ifc_file: ifcopenshell.file) -> SpatialHierarchy:
    """Group every product under its nearest storey, building, site and space.

    Walks up IfcRelContainedInSpatialStructure and IfcRelAggregates from
    each product; the first container found at each level wins.
    """
    hierarchy = SpatialHierarchy()

    for storey in ifc_file.by_type("IfcBuildingStorey"):
        if storey.Elevation is not None:
            hierarchy.storey_elevations[storey.id()] = float(storey.Elevation)

    projects = ifc_file.by_type("IfcProject")
    if projects:
        hierarchy.project = ProjectRef(express_id=projects[0].id(), name=projects[0].Name)

    for product in ifc_file.by_type("IfcProduct"):
        seen_levels: set[str] = set()
        visited = {product.id()}
        current = _parent(product)
        while current is not None and current.id() not in visited:
            visited.add(current.id())
            group = _LEVEL_GROUPS.get(current.is_a())
            if group is not None and group not in seen_levels:
                seen_levels.add(group)
                getattr(hierarchy, group).setdefault(current.id(), []).append(product.id())
                if group == "by_storey":
                    hierarchy.element_to_storey[product.id()] = current.id()
            current = _parent(current)

    return hierarchy


def _ids(value: object) -> list[int]:
    if value is None:
        return []
    if isinstance(value, ifcopenshell.entity_instance):
        return [value.id()]
    return [v.id() for v in value if isinstance(v, ifcopenshell.entity_instance)]


def extract_relationships(ifc_file: ifcopenshell.file) -> list[RelationshipData]:
    """Normalise relationship entities to (relating, related ids) records.

    ``IfcRelConnectsPathElements`` is picked up as a subtype of
    ``IfcRelConnectsElements`` and keeps its own type name.
    """
    relationships: list[RelationshipData] = []
    for rel_class, (relating_attr, related_attr) in _RELATIONSHIP_ATTRIBUTES.items():
        for rel in ifc_file.by_type(rel_class):
            related = _ids(getattr(rel, related_attr, None))
            # IFC4 allows a set of property definitions on the relating side
            for relating_id in _ids(getattr(rel, relating_attr, None)):
                relationships.append(RelationshipData(
                    type=rel.is_a().upper(),
                    relating_object=relating_id,
                    related_objects=related,
                ))
    logger.debug("Extracted %d relationships", len(relationships))
    return relationships
