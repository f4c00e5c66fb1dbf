"""Extract property sets and quantity sets from an IFC file."""

from __future__ import annotations

import logging

import ifcopenshell
import ifcopenshell.util.element

from ifcrules.indexing.inputs import PropertySetData, QuantitySetData
from ifcrules.models.element import PropertyValue

logger = logging.getLogger(__name__)


def _definition(entity: ifcopenshell.entity_instance) -> dict:
    try:
        return ifcopenshell.util.element.get_property_definition(entity)
    except Exception:
        logger.debug("Could not read %s #%d", entity.is_a(), entity.id(), exc_info=True)
        return {}


def extract_property_sets(ifc_file: ifcopenshell.file) -> dict[int, PropertySetData]:
    """Return every IfcPropertySet, keyed by its express id.

    Values that are IFC entity references are stored as their string form.
    """
    result: dict[int, PropertySetData] = {}
    for pset in ifc_file.by_type("IfcPropertySet"):
        props: dict[str, PropertyValue] = {}
        for key, value in _definition(pset).items():
            if key == "id":
                continue
            if isinstance(value, (list, tuple)):
                # Enumerated or list values: keep the first entry
                value = value[0] if value else None
            if isinstance(value, ifcopenshell.entity_instance):
                value = str(value)
            elif isinstance(value, dict):
                continue
            props[key] = PropertyValue.of(value)
        result[pset.id()] = PropertySetData(name=pset.Name or "", properties=props)
    return result


def extract_quantity_sets(ifc_file: ifcopenshell.file) -> dict[int, QuantitySetData]:
    """Return every IfcElementQuantity, keyed by its express id."""
    result: dict[int, QuantitySetData] = {}
    for qto in ifc_file.by_type("IfcElementQuantity"):
        quantities: dict[str, float] = {}
        for key, value in _definition(qto).items():
            if key == "id" or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                quantities[key] = float(value)
        result[qto.id()] = QuantitySetData(name=qto.Name or "", quantities=quantities)
    return result
