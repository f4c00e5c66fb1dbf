"""Extract material definitions and their element associations."""

from __future__ import annotations

import logging

import ifcopenshell

from ifcrules.indexing.inputs import (
    MaterialAssociation,
    MaterialData,
    MaterialLayerData,
    MaterialLayerSetData,
    MaterialsData,
)

logger = logging.getLogger(__name__)


def _layer_set_of(material: ifcopenshell.entity_instance) -> ifcopenshell.entity_instance | None:
    mat_type = material.is_a()
    if mat_type == "IfcMaterialLayerSetUsage":
        return material.ForLayerSet
    if mat_type == "IfcMaterialLayerSet":
        return material
    return None


def extract_materials(ifc_file: ifcopenshell.file) -> MaterialsData:
    """Collect materials, layers, layer sets and element associations.

    Handles single IfcMaterial assignments and IfcMaterialLayerSet /
    IfcMaterialLayerSetUsage.  Constituent sets, profile sets and material
    lists are not associated.
    """
    data = MaterialsData()

    for mat in ifc_file.by_type("IfcMaterial"):
        data.materials[mat.id()] = MaterialData(
            name=mat.Name or "",
            description=getattr(mat, "Description", None),
        )

    for layer in ifc_file.by_type("IfcMaterialLayer"):
        data.material_layers[layer.id()] = MaterialLayerData(
            name=getattr(layer, "Name", None),
            thickness=float(layer.LayerThickness or 0.0),
            material=layer.Material.Name if layer.Material else None,
        )

    for layer_set in ifc_file.by_type("IfcMaterialLayerSet"):
        layers = list(layer_set.MaterialLayers or [])
        data.material_layer_sets[layer_set.id()] = MaterialLayerSetData(
            name=layer_set.LayerSetName,
            layers=[layer.id() for layer in layers],
            total_thickness=sum(float(layer.LayerThickness or 0.0) for layer in layers),
        )

    for rel in ifc_file.by_type("IfcRelAssociatesMaterial"):
        material = rel.RelatingMaterial
        layer_set = _layer_set_of(material)
        if layer_set is not None:
            material_id, kind = layer_set.id(), "layer_set"
        elif material.is_a("IfcMaterial"):
            material_id, kind = material.id(), "single"
        else:
            logger.debug("Skipping %s association #%d", material.is_a(), rel.id())
            continue
        for obj in rel.RelatedObjects or []:
            data.associations.append(MaterialAssociation(
                element_id=obj.id(),
                material_id=material_id,
                type=kind,
            ))

    return data
