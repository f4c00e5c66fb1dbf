"""IFC file adapter — open a model with ifcopenshell and index it.

Entry point: ``load_ifc(ifc_path)``

Produces the same inputs an upstream STEP parser would hand to
:func:`~ifcrules.indexing.build_element_index`, with the type hierarchy
taken from the file's own schema rather than the built-in IFC4 table.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.ifcopenshell_wrapper

from ifcrules.config import PRODUCT_ROOT_CLASSES
from ifcrules.extraction.classifications import extract_classifications
from ifcrules.extraction.materials import extract_materials
from ifcrules.extraction.properties import extract_property_sets, extract_quantity_sets
from ifcrules.extraction.relationships import extract_relationships, extract_spatial_hierarchy
from ifcrules.indexing.builder import build_element_index
from ifcrules.indexing.hierarchy import TypeHierarchy
from ifcrules.indexing.index import ElementIndex
from ifcrules.indexing.inputs import IndexInputs, ParseResult, RawEntity

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """Replace entity references with express ids, recursively."""
    if isinstance(value, ifcopenshell.entity_instance):
        return value.id()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _raw_entity(entity: ifcopenshell.entity_instance) -> RawEntity:
    info = entity.get_info(recursive=False)
    attributes = {
        key: _plain(value)
        for key, value in info.items()
        if key not in ("id", "type")
    }
    return RawEntity(express_id=entity.id(), type=entity.is_a(), attributes=attributes)


def schema_hierarchy(ifc_file: ifcopenshell.file) -> TypeHierarchy:
    """Build the ancestry lookup from the file's EXPRESS schema."""
    schema = ifcopenshell.ifcopenshell_wrapper.schema_by_name(ifc_file.schema)
    parents: dict[str, str | None] = {}
    for declaration in schema.entities():
        supertype = declaration.supertype()
        parents[declaration.name()] = supertype.name() if supertype is not None else None
    return TypeHierarchy(parents)


def extract_index_inputs(ifc_file: ifcopenshell.file) -> IndexInputs:
    """Gather everything the index builder consumes from an open IFC file.

    Only products (and their subtypes) are carried over as raw entities;
    attributes are passed by name with references turned into express ids.
    """
    entities: dict[int, RawEntity] = {}
    by_type: dict[str, list[int]] = {}
    for root in PRODUCT_ROOT_CLASSES:
        for entity in ifc_file.by_type(root):
            raw = _raw_entity(entity)
            entities[raw.express_id] = raw
            by_type.setdefault(raw.type.upper(), []).append(raw.express_id)

    names = {eid: raw.attributes["Name"] for eid, raw in entities.items() if raw.attributes.get("Name")}

    return IndexInputs(
        parse_result=ParseResult(entities=entities, entities_by_type=by_type),
        property_sets=extract_property_sets(ifc_file),
        quantity_sets=extract_quantity_sets(ifc_file),
        materials=extract_materials(ifc_file),
        classifications=extract_classifications(ifc_file),
        spatial_hierarchy=extract_spatial_hierarchy(ifc_file),
        relationships=extract_relationships(ifc_file),
        entity_names=names,
    )


def index_ifc_file(ifc_file: ifcopenshell.file) -> ElementIndex:
    """Index an already opened IFC file."""
    inputs = extract_index_inputs(ifc_file)
    return build_element_index(
        inputs.parse_result,
        property_sets=inputs.property_sets,
        quantity_sets=inputs.quantity_sets,
        materials=inputs.materials,
        classifications=inputs.classifications,
        spatial_hierarchy=inputs.spatial_hierarchy,
        relationships=inputs.relationships,
        entity_names=inputs.entity_names,
        hierarchy=schema_hierarchy(ifc_file),
    )


def load_ifc(ifc_path: str | Path) -> ElementIndex:
    """Open an IFC2X3 / IFC4 file and build its element index.

    Parameters
    ----------
    ifc_path:
        Path to the ``.ifc`` file.

    Returns
    -------
    ElementIndex
        Immutable index ready for :class:`~ifcrules.engine.RuleEngine`.
    """
    ifc_path = Path(ifc_path)
    logger.info("Opening %s", ifc_path)
    ifc_file = ifcopenshell.open(str(ifc_path))
    return index_ifc_file(ifc_file)
