"""IFC extraction via ifcopenshell."""

from ifcrules.extraction.pipeline import (
    extract_index_inputs,
    index_ifc_file,
    load_ifc,
    schema_hierarchy,
)

__all__ = ["extract_index_inputs", "index_ifc_file", "load_ifc", "schema_hierarchy"]
