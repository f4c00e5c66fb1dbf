"""Tests for model schema extraction."""

from __future__ import annotations

import pytest

from ifcrules import ModelSchema, extract_model_schema
from ifcrules.indexing import ElementIndex


@pytest.fixture
def schema(sample_index: ElementIndex) -> ModelSchema:
    return extract_model_schema(sample_index)


class TestModelSchema:
    def test_entity_types(self, schema: ModelSchema) -> None:
        assert schema.total_elements == 14
        counts = dict(schema.types_by_count())
        assert counts["IfcWindow"] == 3
        assert counts["IfcWall"] == 1
        assert schema.types_by_count()[0] == ("IfcWindow", 3)

        wall = next(t for t in schema.entity_types if t.type == "IfcWall")
        assert wall.has_subtypes  # IfcWallStandardCase is present

    def test_property_sets(self, schema: ModelSchema) -> None:
        wall_common = next(p for p in schema.property_sets if p.name == "Pset_WallCommon")
        assert wall_common.element_count == 2
        assert wall_common.applies_to == ["IfcWall", "IfcWallStandardCase"]

        is_external = next(p for p in wall_common.properties if p.name == "IsExternal")
        assert is_external.value_kind == "boolean"
        assert is_external.frequency == 2
        assert sorted(is_external.values) == [(False, 1), (True, 1)]

        assert ("Pset_WallCommon", "IsExternal", 2) in schema.properties_by_frequency()

    def test_string_values_keep_their_kind(self, schema: ModelSchema) -> None:
        fire = [
            prop
            for pset in schema.property_sets
            for prop in pset.properties
            if prop.name == "FireRating"
        ]
        assert all(p.value_kind == "string" for p in fire)

    def test_spatial_summary(self, schema: ModelSchema) -> None:
        assert schema.storeys_by_elevation() == [("Ground Floor", 0.0), ("Level 1", 3.5)]
        assert schema.spatial.projects == ["Demo Project"]
        (building,) = schema.spatial.buildings
        assert building.name == "Main Building"
        assert [s.name for s in building.storeys] == ["Ground Floor", "Level 1"]
        spaces = {s.name: s for s in schema.spatial.spaces}
        assert spaces["Office 101"].area == 61.0
        assert spaces["Storage"].storey == "Level 1"

    def test_materials(self, schema: ModelSchema) -> None:
        by_name = {m.name: m for m in schema.materials}
        assert by_name["Exterior 250"].kind == "layerSet"
        assert by_name["Exterior 250"].thickness_range == (250.0, 250.0)
        assert by_name["Oak"].thickness_range is None

    def test_classifications(self, schema: ModelSchema) -> None:
        (uniclass,) = schema.classifications
        assert uniclass.system == "Uniclass 2015"
        assert [c.code for c in uniclass.codes] == ["EF_25_10_25", "EF_25_30"]
        assert uniclass.element_count == 2

    def test_quantity_sets(self, schema: ModelSchema) -> None:
        spaces = next(q for q in schema.quantity_sets if q.name == "Qto_SpaceBaseQuantities")
        (area,) = spaces.quantities
        assert area.range == (42.0, 61.0)
        assert area.frequency == 2
        assert spaces.applies_to == ["IfcSpace"]

    def test_empty_index(self) -> None:
        schema = extract_model_schema(ElementIndex({}))
        assert schema.total_elements == 0
        assert schema.entity_types == []
