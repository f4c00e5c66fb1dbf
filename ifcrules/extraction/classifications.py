"""Extract classification systems, references and element assignments."""

from __future__ import annotations

import ifcopenshell

from ifcrules.indexing.inputs import (
    ClassificationReferenceData,
    ClassificationsData,
    ClassificationSource,
)


def _identification(ref: ifcopenshell.entity_instance) -> str:
    # IFC4 uses Identification, IFC2X3 ItemReference
    code = getattr(ref, "Identification", None) or getattr(ref, "ItemReference", None)
    return code or ref.Name or ""


def extract_classifications(ifc_file: ifcopenshell.file) -> ClassificationsData:
    data = ClassificationsData()

    for system in ifc_file.by_type("IfcClassification"):
        data.classifications[system.id()] = ClassificationSource(
            name=system.Name or "",
            source=system.Source,
        )

    for ref in ifc_file.by_type("IfcClassificationReference"):
        source = ref.ReferencedSource
        data.classification_references[ref.id()] = ClassificationReferenceData(
            identification=_identification(ref),
            name=ref.Name,
            referenced_source=source.id() if source is not None else None,
        )

    for rel in ifc_file.by_type("IfcRelAssociatesClassification"):
        relating = rel.RelatingClassification
        if not relating.is_a("IfcClassificationReference"):
            continue
        for obj in rel.RelatedObjects or []:
            data.element_classifications.setdefault(obj.id(), []).append(relating.id())

    return data
