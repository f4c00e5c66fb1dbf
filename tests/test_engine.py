"""Tests for RuleEngine: select, query, validate, and SelectionResult."""

from __future__ import annotations

import json

import pytest

from ifcrules import RuleEngine, SelectionRule, create_rule_engine
from ifcrules.config import INLINE_RULE_ID
from ifcrules.indexing import (
    ElementIndex,
    ParseResult,
    PropertySetData,
    QuantitySetData,
    RawEntity,
    RelationshipData,
    build_element_index,
)
from ifcrules.models import EntityTypeCondition, PropertyValue


def _graph(*entities: tuple[int, str, str]) -> ParseResult:
    return ParseResult(entities={
        eid: RawEntity(express_id=eid, type=ifc_type, attributes=[f"g{eid}", None, name])
        for eid, ifc_type, name in entities
    })


@pytest.fixture
def engine(sample_index: ElementIndex) -> RuleEngine:
    return RuleEngine(sample_index)


@pytest.fixture
def external_wall_index() -> ElementIndex:
    """One wall with Pset_WallCommon.IsExternal = true."""
    return build_element_index(
        _graph((1, "IFCWALL", "Wall")),
        property_sets={
            50: PropertySetData(
                name="Pset_WallCommon",
                properties={"IsExternal": PropertyValue.of(True)},
            ),
        },
        relationships=[
            RelationshipData(type="IFCRELDEFINESBYPROPERTIES", relating_object=50, related_objects=[1]),
        ],
    )


def _space_index(net_floor_area: float) -> ElementIndex:
    return build_element_index(
        _graph((1, "IFCSPACE", "Room")),
        quantity_sets={
            60: QuantitySetData(name="Qto_SpaceBaseQuantities", quantities={"NetFloorArea": net_floor_area}),
        },
        relationships=[
            RelationshipData(type="IFCRELDEFINESBYPROPERTIES", relating_object=60, related_objects=[1]),
        ],
    )


# ---------------------------------------------------------------------------
# End-to-end scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_type_and_property(self, external_wall_index: ElementIndex) -> None:
        rule = {
            "id": "external-walls",
            "name": "External walls",
            "mode": "all",
            "conditions": [
                {"type": "entityType", "entityType": "IfcWall"},
                {
                    "type": "property",
                    "propertySet": "Pset_WallCommon",
                    "propertyName": "IsExternal",
                    "operator": "equals",
                    "value": True,
                },
            ],
        }
        assert RuleEngine(external_wall_index).select(rule).count == 1

    def test_wildcard_namespace(self, external_wall_index: ElementIndex) -> None:
        rule = {
            "id": "r",
            "name": "r",
            "conditions": [
                {"type": "property", "propertySet": "*", "propertyName": "IsExternal",
                 "operator": "equals", "value": True},
            ],
        }
        assert RuleEngine(external_wall_index).select(rule).count == 1

    def test_doors_or_windows(self) -> None:
        index = build_element_index(_graph(
            (1, "IFCDOOR", "D1"),
            (2, "IFCDOOR", "D2"),
            (3, "IFCWINDOW", "W1"),
            (4, "IFCWINDOW", "W2"),
            (5, "IFCWINDOW", "W3"),
            (6, "IFCSLAB", "S1"),
        ))
        rule = {
            "id": "openings",
            "name": "Doors and windows",
            "conditions": [{
                "type": "or",
                "conditions": [
                    {"type": "entityType", "entityType": "IfcDoor"},
                    {"type": "entityType", "entityType": "IfcWindow"},
                ],
            }],
        }
        result = RuleEngine(index).select(rule)
        assert result.count == 5
        assert result.express_ids == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("area, expected", [(42.0, 0), (61.0, 1)])
    def test_floor_area_threshold(self, area: float, expected: int) -> None:
        rule = {
            "id": "big-rooms",
            "name": "Big rooms",
            "conditions": [
                {"type": "quantity", "quantityName": "NetFloorArea", "operator": "greaterThan", "value": 50},
            ],
        }
        assert RuleEngine(_space_index(area)).select(rule).count == expected

    def test_invalid_regex_matches_nothing(self, engine: RuleEngine) -> None:
        rule = {
            "id": "bad-regex",
            "name": "Bad regex",
            "conditions": [
                {"type": "attribute", "attribute": "name", "operator": "matches", "value": "[A-"},
            ],
        }
        assert engine.select(rule).count == 0


# ---------------------------------------------------------------------------
# Select semantics
# ---------------------------------------------------------------------------


class TestSelect:
    def test_idempotent(self, engine: RuleEngine) -> None:
        rule = SelectionRule(
            id="walls", name="Walls", conditions=(EntityTypeCondition(entity_type="IfcWall"),)
        )
        first = engine.select(rule)
        second = engine.select(rule)
        assert first.express_ids == second.express_ids == [100, 101]

    def test_modes_are_intersection_and_union(self, engine: RuleEngine) -> None:
        conditions = [
            {"type": "entityType", "entityType": "IfcBuildingElement"},
            {"type": "spatial", "level": "storey", "name": "Level 1"},
        ]
        c1 = set(engine.query(conditions[0]).express_ids)
        c2 = set(engine.query(conditions[1]).express_ids)

        both = engine.select({"id": "a", "name": "a", "mode": "all", "conditions": conditions})
        either = engine.select({"id": "b", "name": "b", "mode": "any", "conditions": conditions})
        assert set(both.express_ids) == c1 & c2
        assert set(either.express_ids) == c1 | c2

    def test_empty_rule_matches_everything(self, engine: RuleEngine, sample_index: ElementIndex) -> None:
        result = engine.select({"id": "empty", "name": "Empty", "conditions": []})
        assert result.count == len(sample_index)

    def test_empty_rule_in_any_mode_matches_nothing(self, engine: RuleEngine) -> None:
        result = engine.select({"id": "empty", "name": "Empty", "mode": "any", "conditions": []})
        assert result.count == 0

    def test_accepts_json_document(self, engine: RuleEngine) -> None:
        doc = json.dumps({
            "id": "doors",
            "name": "Doors",
            "conditions": [{"type": "entityType", "entityType": "IfcDoor"}],
        })
        assert engine.select(doc).express_ids == [102, 103]

    def test_result_metadata(self, engine: RuleEngine) -> None:
        result = engine.select({"id": "doors", "name": "Doors", "conditions": [
            {"type": "entityType", "entityType": "IfcDoor"},
        ]})
        assert result.rule.id == "doors"
        assert result.evaluation_time_ms >= 0.0

    def test_create_rule_engine(self, sample_index: ElementIndex) -> None:
        assert create_rule_engine(sample_index).index is sample_index


class TestQuery:
    def test_single_condition(self, engine: RuleEngine) -> None:
        result = engine.query({"type": "entityType", "entityType": "IfcSpace"})
        assert result.express_ids == [107, 108]
        assert result.rule.id == INLINE_RULE_ID
        assert result.rule.mode == "all"

    def test_condition_list_is_conjunction(self, engine: RuleEngine) -> None:
        result = engine.query([
            EntityTypeCondition(entity_type="IfcWindow"),
            {"type": "spatial", "level": "storey", "name": "Ground Floor"},
        ])
        assert result.express_ids == [104, 105]


# ---------------------------------------------------------------------------
# SelectionResult
# ---------------------------------------------------------------------------


class TestSelectionResult:
    def test_get_elements(self, engine: RuleEngine) -> None:
        elements = engine.query({"type": "entityType", "entityType": "IfcDoor"}).get_elements()
        assert [el.name for el in elements] == ["Door A", "Door B"]

    def test_group_by_storey(self, engine: RuleEngine) -> None:
        result = engine.query({"type": "entityType", "entityType": "IfcBuildingElement"})
        groups = result.group_by("spatial.storey")
        assert groups == {
            "Ground Floor": [100, 102, 104, 105],
            "Level 1": [101, 103, 106],
        }

    def test_group_by_unresolved_path(self, engine: RuleEngine) -> None:
        result = engine.query({"type": "entityType", "entityType": "IfcWall"})
        groups = result.group_by("properties.Pset_WallCommon.IsExternal")
        assert groups == {"true": [100], "false": [101]}

        groups = result.group_by("material.kind")
        assert groups == {"layerSet": [100], "single": [101]}

        assert result.group_by("no.such.path") == {"undefined": [100, 101]}

    def test_group_by_aliases(self, engine: RuleEngine) -> None:
        result = engine.query({"type": "entityType", "entityType": "IfcSpace"})
        assert result.group_by("type") == {"IfcSpace": [107, 108]}
        assert result.group_by("spatial.storeyElevation") == {"0": [107], "3.5": [108]}
        assert result.group_by("quantities.Qto_SpaceBaseQuantities.NetFloorArea") == {
            "61": [107],
            "42": [108],
        }

    def test_to_dict(self, engine: RuleEngine) -> None:
        data = engine.query({"type": "entityType", "entityType": "IfcDoor"}).to_dict()
        assert data["expressIds"] == [102, 103]
        assert data["count"] == 2
        assert data["rule"]["conditions"][0]["entityType"] == "IfcDoor"


# ---------------------------------------------------------------------------
# Validation through the engine
# ---------------------------------------------------------------------------


class TestEngineValidate:
    def test_valid_rule(self, engine: RuleEngine) -> None:
        result = engine.validate({"id": "w", "name": "w", "conditions": [
            {"type": "property", "propertySet": "Pset_WallCommon", "propertyName": "IsExternal",
             "operator": "equals", "value": True},
        ]})
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_empty_rule_is_invalid_but_still_selectable(self, engine: RuleEngine) -> None:
        rule = {"id": "e", "name": "e", "conditions": []}
        assert not engine.validate(rule).valid
        assert engine.select(rule).count > 0
