"""Index builder — raw entity graph to :class:`ElementIndex`.

Entry point: ``build_element_index(parse_result, **optional_inputs)``

Filters the entity graph down to IFC products (elements and spatial
structure), resolves each one's ancestry chain, and joins in property
and quantity sets, material, classifications, spatial placement and
relationships.  Every join is a dictionary lookup prepared up front, so
cost is linear in entity + relationship count.

Missing optional inputs leave the corresponding record fields empty.
The builder never mutates its inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from ifcrules.config import (
    ATTR_DESCRIPTION,
    ATTR_GLOBAL_ID,
    ATTR_NAME,
    ATTR_OBJECT_TYPE,
    ATTR_PREDEFINED_TYPE,
    ATTR_TAG,
    PRODUCT_ROOT_CLASSES,
    REL_AGGREGATES,
    REL_CONNECTS_ELEMENTS,
    REL_CONNECTS_PATH_ELEMENTS,
    REL_CONTAINED_IN_SPATIAL_STRUCTURE,
    REL_DEFINES_BY_PROPERTIES,
    REL_DEFINES_BY_TYPE,
    REL_FILLS_ELEMENT,
    REL_VOIDS_ELEMENT,
)
from ifcrules.indexing.hierarchy import IFC4_HIERARCHY, TypeHierarchy
from ifcrules.indexing.index import ElementIndex
from ifcrules.indexing.inputs import (
    ClassificationsData,
    MaterialAssociation,
    MaterialsData,
    ParseResult,
    PropertySetData,
    QuantitySetData,
    RawEntity,
    RelationshipData,
    SpatialHierarchy,
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
from ifcrules.operators.comparison import parse_numeric_value

logger = logging.getLogger(__name__)

_LAYER_SET_KINDS = ("layerset", "ifcmateriallayerset", "ifcmateriallayersetusage")


class IndexConstructionError(ValueError):
    """The raw entity collection is missing or malformed."""


# ---------------------------------------------------------------------------
# Attribute access
# ---------------------------------------------------------------------------


def _attribute(entity: RawEntity, position: int, name: str) -> Any:
    """Read an attribute by name (mapping form) or position (list form)."""
    attrs = entity.attributes
    if isinstance(attrs, dict):
        return attrs.get(name)
    if 0 <= position < len(attrs):
        return attrs[position]
    return None


def _text(entity: RawEntity, position: int, name: str) -> str | None:
    value = _attribute(entity, position, name)
    return value if isinstance(value, str) else None


def _enum_text(entity: RawEntity, position: int, name: str) -> str | None:
    """Read an enumeration attribute, dropping STEP dots (``.EXTERNAL.``)."""
    value = _text(entity, position, name)
    if value is None:
        return None
    return value.strip(".") or None


# ---------------------------------------------------------------------------
# Relationship joins
# ---------------------------------------------------------------------------


@dataclass
class _Joins:
    """Per-element lookups prepared from the relationship list."""

    definitions: dict[int, list[int]] = field(default_factory=dict)
    type_of: dict[int, int] = field(default_factory=dict)
    contained_in: dict[int, int] = field(default_factory=dict)
    aggregated_by: dict[int, int] = field(default_factory=dict)
    connected_to: dict[int, list[int]] = field(default_factory=dict)
    openings: dict[int, list[int]] = field(default_factory=dict)
    fills: dict[int, int] = field(default_factory=dict)


def _prepare_joins(relationships: list[RelationshipData] | None) -> _Joins:
    joins = _Joins()
    for rel in relationships or []:
        rel_type = rel.type.upper()
        relating = rel.relating_object
        if rel_type == REL_DEFINES_BY_PROPERTIES:
            for eid in rel.related_objects:
                joins.definitions.setdefault(eid, []).append(relating)
        elif rel_type == REL_DEFINES_BY_TYPE:
            for eid in rel.related_objects:
                joins.type_of[eid] = relating
        elif rel_type == REL_CONTAINED_IN_SPATIAL_STRUCTURE:
            for eid in rel.related_objects:
                joins.contained_in[eid] = relating
        elif rel_type == REL_AGGREGATES:
            for eid in rel.related_objects:
                joins.aggregated_by[eid] = relating
        elif rel_type in (REL_CONNECTS_ELEMENTS, REL_CONNECTS_PATH_ELEMENTS):
            # Connections are symmetric
            for eid in rel.related_objects:
                joins.connected_to.setdefault(relating, []).append(eid)
                joins.connected_to.setdefault(eid, []).append(relating)
        elif rel_type == REL_VOIDS_ELEMENT:
            joins.openings.setdefault(relating, []).extend(rel.related_objects)
        elif rel_type == REL_FILLS_ELEMENT:
            for eid in rel.related_objects:
                joins.fills[eid] = relating
    return joins


# ---------------------------------------------------------------------------
# Spatial placement
# ---------------------------------------------------------------------------


def _container_name(parse_result: ParseResult, container_id: int, fallback: str) -> str:
    entity = parse_result.entities.get(container_id)
    name = _text(entity, ATTR_NAME, "Name") if entity is not None else None
    return name or f"{fallback} {container_id}"


def _spatial_locations(
    parse_result: ParseResult,
    hierarchy: SpatialHierarchy | None,
) -> tuple[dict[int, dict[str, Any]], str | None]:
    """Return (element id -> SpatialLocation fields, project name)."""
    if hierarchy is None:
        return {}, None

    placement: dict[int, dict[str, Any]] = {}

    def assign(groups: dict[int, list[int]], level: str, fallback: str) -> None:
        for container_id, element_ids in groups.items():
            name = _container_name(parse_result, container_id, fallback)
            for eid in element_ids:
                placement.setdefault(eid, {}).setdefault(level, name)

    # Direct storey assignment wins over the grouped view
    for eid, storey_id in hierarchy.element_to_storey.items():
        fields = placement.setdefault(eid, {})
        fields["storey"] = _container_name(parse_result, storey_id, "Storey")
        if storey_id in hierarchy.storey_elevations:
            fields["storey_elevation"] = hierarchy.storey_elevations[storey_id]

    for storey_id, element_ids in hierarchy.by_storey.items():
        elevation = hierarchy.storey_elevations.get(storey_id)
        name = _container_name(parse_result, storey_id, "Storey")
        for eid in element_ids:
            fields = placement.setdefault(eid, {})
            if "storey" not in fields:
                fields["storey"] = name
                if elevation is not None:
                    fields["storey_elevation"] = elevation

    assign(hierarchy.by_building, "building", "Building")
    assign(hierarchy.by_site, "site", "Site")
    assign(hierarchy.by_space, "space", "Space")

    project = hierarchy.project.name if hierarchy.project is not None else None
    return placement, project


# ---------------------------------------------------------------------------
# Materials and classifications
# ---------------------------------------------------------------------------


def _resolve_material(
    assoc: MaterialAssociation,
    materials: MaterialsData,
) -> ElementMaterial | None:
    kind = assoc.type.lower().replace("_", "")
    if kind in _LAYER_SET_KINDS:
        layer_set = materials.material_layer_sets.get(assoc.material_id)
        if layer_set is None:
            return None
        layers: list[MaterialLayer] = []
        for layer_id in layer_set.layers:
            data = materials.material_layers.get(layer_id)
            if data is None:
                layers.append(MaterialLayer())
            else:
                layers.append(MaterialLayer(
                    material=data.material or "Unknown",
                    thickness=data.thickness,
                ))
        total = layer_set.total_thickness
        if total is None:
            total = sum(layer.thickness for layer in layers)
        return ElementMaterial(
            name=layer_set.name or "Unnamed Layer Set",
            kind="layerSet",
            layers=tuple(layers),
            total_thickness=total,
        )

    mat = materials.materials.get(assoc.material_id)
    if mat is None:
        return None
    return ElementMaterial(name=mat.name, kind="single")


def _resolve_classification(
    ref_id: int,
    data: ClassificationsData,
) -> ElementClassification | None:
    """Resolve a reference, walking parent references up to the system."""
    ref = data.classification_references.get(ref_id)
    if ref is None:
        return None

    path = [ref.identification]
    system = "Unknown System"
    seen = {ref_id}
    source_id = ref.referenced_source
    while source_id is not None and source_id not in seen:
        seen.add(source_id)
        if source_id in data.classifications:
            system = data.classifications[source_id].name
            break
        parent = data.classification_references.get(source_id)
        if parent is None:
            break
        path.insert(0, parent.identification)
        source_id = parent.referenced_source

    return ElementClassification(
        system=system,
        code=ref.identification,
        name=ref.name or ref.identification,
        path=tuple(path),
    )


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def _coerce_parse_result(parse_result: Any) -> ParseResult:
    if parse_result is None:
        raise IndexConstructionError("An entity collection is required to build an index")
    if isinstance(parse_result, ParseResult):
        return parse_result
    if not isinstance(parse_result, Mapping):
        raise IndexConstructionError(
            f"Expected ParseResult or mapping of entities, got {type(parse_result).__name__}"
        )
    entities: dict[int, Any] = {}
    for eid, entity in parse_result.items():
        if isinstance(entity, Mapping):
            entity = {"express_id": eid, **entity}
        entities[eid] = entity
    try:
        return ParseResult(entities=entities)
    except ValidationError as exc:
        raise IndexConstructionError(f"Malformed entity collection: {exc}") from exc


def build_element_index(
    parse_result: ParseResult | Mapping[int, Any] | None,
    *,
    property_sets: dict[int, PropertySetData] | None = None,
    quantity_sets: dict[int, QuantitySetData] | None = None,
    materials: MaterialsData | None = None,
    classifications: ClassificationsData | None = None,
    spatial_hierarchy: SpatialHierarchy | None = None,
    relationships: list[RelationshipData] | None = None,
    entity_names: dict[int, str] | None = None,
    hierarchy: TypeHierarchy = IFC4_HIERARCHY,
) -> ElementIndex:
    """Build a unified element index from a parsed entity graph.

    Parameters
    ----------
    parse_result:
        The raw entity collection, as a :class:`ParseResult` or a mapping
        of express id to :class:`RawEntity` (or equivalent dict).
    property_sets, quantity_sets:
        Set id -> set data; joined through defines-by-properties
        relationships.
    materials, classifications, spatial_hierarchy:
        Optional extraction results.
    relationships:
        Normalised relationship list (relating object + related objects).
    entity_names:
        Fallback names for entities whose Name attribute is empty.
    hierarchy:
        Type ancestry lookup.  Defaults to the built-in IFC4 table.

    Raises
    ------
    IndexConstructionError
        If *parse_result* is absent or malformed.
    """
    graph = _coerce_parse_result(parse_result)
    joins = _prepare_joins(relationships)
    placements, project_name = _spatial_locations(graph, spatial_hierarchy)

    material_assoc: dict[int, MaterialAssociation] = {}
    if materials is not None:
        for assoc in materials.associations:
            material_assoc.setdefault(assoc.element_id, assoc)

    elements: dict[int, UnifiedElement] = {}
    by_type: dict[str, list[int]] = {}
    by_storey: dict[str, list[int]] = {}
    by_classification: dict[str, list[int]] = {}
    by_material: dict[str, list[int]] = {}
    psets_found: set[str] = set()
    qsets_found: set[str] = set()
    systems_found: set[str] = set()
    skipped = 0

    for express_id, entity in graph.entities.items():
        ifc_class = hierarchy.resolve(entity.type)
        chain = hierarchy.chain(ifc_class)
        if not any(root in chain for root in PRODUCT_ROOT_CLASSES):
            skipped += 1
            continue

        is_element = "IfcElement" in chain
        name = _text(entity, ATTR_NAME, "Name")
        if not name and entity_names:
            name = entity_names.get(express_id)

        # Property and quantity sets
        properties: dict[str, dict[str, PropertyValue]] = {}
        quantities: dict[str, dict[str, float]] = {}
        for definition_id in joins.definitions.get(express_id, []):
            if property_sets and definition_id in property_sets:
                pset = property_sets[definition_id]
                properties.setdefault(pset.name, {}).update(pset.properties)
                psets_found.add(pset.name)
            elif quantity_sets and definition_id in quantity_sets:
                qset = quantity_sets[definition_id]
                quantities.setdefault(qset.name, {}).update(qset.quantities)
                qsets_found.add(qset.name)

        # Material
        material: ElementMaterial | None = None
        if materials is not None and express_id in material_assoc:
            material = _resolve_material(material_assoc[express_id], materials)

        # Classifications
        element_classes: list[ElementClassification] = []
        if classifications is not None:
            for ref_id in classifications.element_classifications.get(express_id, []):
                resolved = _resolve_classification(ref_id, classifications)
                if resolved is not None:
                    element_classes.append(resolved)
                    systems_found.add(resolved.system)

        # Spatial
        spatial_fields = dict(placements.get(express_id, {}))
        if project_name is not None:
            spatial_fields.setdefault("project", project_name)
        spatial = SpatialLocation(**spatial_fields)

        contained_in = joins.contained_in.get(express_id)
        if contained_in is None and spatial_hierarchy is not None:
            contained_in = spatial_hierarchy.element_to_storey.get(express_id)

        element = UnifiedElement(
            express_id=express_id,
            global_id=_text(entity, ATTR_GLOBAL_ID, "GlobalId") or "",
            ifc_class=ifc_class,
            inheritance_chain=chain,
            name=name,
            description=_text(entity, ATTR_DESCRIPTION, "Description"),
            object_type=_text(entity, ATTR_OBJECT_TYPE, "ObjectType"),
            tag=_text(entity, ATTR_TAG, "Tag") if is_element else None,
            predefined_type=(
                _enum_text(entity, ATTR_PREDEFINED_TYPE, "PredefinedType")
                if is_element else None
            ),
            spatial=spatial,
            properties=properties,
            quantities=quantities,
            material=material,
            classifications=tuple(element_classes),
            relationships=ElementRelationships(
                contained_in=contained_in,
                aggregated_by=joins.aggregated_by.get(express_id),
                connected_to=tuple(joins.connected_to.get(express_id, ())),
                has_openings=tuple(joins.openings.get(express_id, ())),
                fills_opening=joins.fills.get(express_id),
                has_type=joins.type_of.get(express_id),
            ),
        )
        elements[express_id] = element

        # Secondary lookups
        by_type.setdefault(ifc_class, []).append(express_id)
        if spatial.storey:
            by_storey.setdefault(spatial.storey, []).append(express_id)
        if material is not None:
            by_material.setdefault(material.name.lower(), []).append(express_id)
        for cls in element_classes:
            by_classification.setdefault(f"{cls.system}:{cls.code}", []).append(express_id)

    logger.info(
        "Indexed %d elements (%d entities skipped, %d property sets, %d quantity sets)",
        len(elements),
        skipped,
        len(psets_found),
        len(qsets_found),
    )

    return ElementIndex(
        elements,
        by_type=by_type,
        by_storey=by_storey,
        by_classification=by_classification,
        by_material=by_material,
        property_sets=psets_found,
        quantity_sets=qsets_found,
        classification_systems=systems_found,
        hierarchy=hierarchy,
    )


# ---------------------------------------------------------------------------
# Helpers for raw STEP graphs
# ---------------------------------------------------------------------------


def _unwrap(value: Any) -> Any:
    """Unwrap typed values such as ``{"type": "IFCLABEL", "value": "x"}``."""
    if isinstance(value, dict) and "value" in value:
        return value["value"]
    return value


def extract_property_sets_map(parse_result: ParseResult) -> dict[int, PropertySetData]:
    """Build property set data from raw ``IFCPROPERTYSET`` entities.

    Reads each set's HasProperties references and the NominalValue of
    every single-value property.  STEP booleans become real booleans.
    """
    result: dict[int, PropertySetData] = {}
    for pset_id in parse_result.ids_of_type("IFCPROPERTYSET"):
        pset = parse_result.entities.get(pset_id)
        if pset is None:
            continue
        name = _text(pset, ATTR_NAME, "Name") or "Unnamed"
        refs = _attribute(pset, 4, "HasProperties") or []

        properties: dict[str, PropertyValue] = {}
        for ref in refs:
            prop = parse_result.entities.get(ref) if isinstance(ref, int) else None
            if prop is None:
                continue
            prop_name = _text(prop, 0, "Name")
            if not prop_name:
                continue
            properties[prop_name] = PropertyValue.of(_unwrap(_attribute(prop, 2, "NominalValue")))

        result[pset_id] = PropertySetData(name=name, properties=properties)
    return result


def _quantity_value(qty: RawEntity) -> Any:
    if isinstance(qty.attributes, dict):
        for key, value in qty.attributes.items():
            if key.endswith("Value"):
                return value
        return None
    return _attribute(qty, 3, "Value")


def extract_quantity_sets_map(parse_result: ParseResult) -> dict[int, QuantitySetData]:
    """Build quantity set data from raw ``IFCELEMENTQUANTITY`` entities.

    Every physical quantity stores its value in the fourth attribute
    (LengthValue, AreaValue, VolumeValue, CountValue, WeightValue, ...).
    """
    result: dict[int, QuantitySetData] = {}
    for qset_id in parse_result.ids_of_type("IFCELEMENTQUANTITY"):
        qset = parse_result.entities.get(qset_id)
        if qset is None:
            continue
        name = _text(qset, ATTR_NAME, "Name") or "Unnamed"
        refs = _attribute(qset, 5, "Quantities") or []

        quantities: dict[str, float] = {}
        for ref in refs:
            qty = parse_result.entities.get(ref) if isinstance(ref, int) else None
            if qty is None:
                continue
            qty_name = _text(qty, 0, "Name")
            value = parse_numeric_value(_unwrap(_quantity_value(qty)))
            if qty_name and value is not None:
                quantities[qty_name] = value

        result[qset_id] = QuantitySetData(name=name, quantities=quantities)
    return result
