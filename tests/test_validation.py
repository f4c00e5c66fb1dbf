"""Tests for advisory rule validation."""

from __future__ import annotations

from ifcrules.engine import validate_rule
from ifcrules.indexing import ElementIndex
from ifcrules.models import SelectionRule, parse_rule


def _rule(*conditions: dict) -> SelectionRule:
    return parse_rule({"id": "r", "name": "r", "conditions": list(conditions)})


class TestValidateRule:
    def test_no_conditions_is_an_error(self, sample_index: ElementIndex) -> None:
        result = validate_rule(_rule(), sample_index)
        assert not result.valid
        assert [e.path for e in result.errors] == ["conditions"]
        assert result.errors[0].severity == "error"

    def test_known_names_pass(self, sample_index: ElementIndex) -> None:
        result = validate_rule(
            _rule(
                {"type": "property", "propertySet": "Pset_DoorCommon", "propertyName": "FireRating",
                 "operator": "exists"},
                {"type": "quantity", "quantitySet": "Qto_SpaceBaseQuantities",
                 "quantityName": "NetFloorArea", "operator": "greaterThan", "value": 10},
                {"type": "classification", "system": "Uniclass 2015"},
            ),
            sample_index,
        )
        assert result.valid
        assert result.warnings == []

    def test_unknown_property_set_warns_with_suggestion(self, sample_index: ElementIndex) -> None:
        result = validate_rule(
            _rule({"type": "property", "propertySet": "Pset_WalCommon", "propertyName": "IsExternal",
                   "operator": "equals", "value": True}),
            sample_index,
        )
        assert result.valid
        (warning,) = result.warnings
        assert warning.severity == "warning"
        assert warning.path == "conditions[0].propertySet"
        assert "Pset_WalCommon" in warning.message
        assert warning.suggestion.startswith("Available: Pset_WallCommon")

    def test_wildcard_sets_are_not_checked(self, sample_index: ElementIndex) -> None:
        result = validate_rule(
            _rule(
                {"type": "property", "propertySet": "*", "propertyName": "X", "operator": "exists"},
                {"type": "property", "propertySet": "Custom_*", "propertyName": "X", "operator": "exists"},
                {"type": "quantity", "quantityName": "Area", "operator": "greaterThan", "value": 1},
                {"type": "classification", "code": "EF_*"},
            ),
            sample_index,
        )
        assert result.warnings == []

    def test_unknown_quantity_set_and_system(self, sample_index: ElementIndex) -> None:
        result = validate_rule(
            _rule(
                {"type": "quantity", "quantitySet": "Qto_BeamBaseQuantities", "quantityName": "Length",
                 "operator": "greaterThan", "value": 1},
                {"type": "classification", "system": "OmniClass"},
            ),
            sample_index,
        )
        assert [w.path for w in result.warnings] == [
            "conditions[0].quantitySet",
            "conditions[1].system",
        ]
        assert "Uniclass 2015" in result.warnings[1].suggestion

    def test_recurses_into_composites(self, sample_index: ElementIndex) -> None:
        result = validate_rule(
            _rule({
                "type": "or",
                "conditions": [
                    {"type": "entityType", "entityType": "IfcWall"},
                    {"type": "not", "conditions": [
                        {"type": "property", "propertySet": "Pset_Missing", "propertyName": "X",
                         "operator": "exists"},
                    ]},
                ],
            }),
            sample_index,
        )
        assert [w.path for w in result.warnings] == [
            "conditions[0].conditions[1].conditions[0].propertySet",
        ]

    def test_empty_group_and_unknown_kind_warn(self, sample_index: ElementIndex) -> None:
        result = validate_rule(
            _rule({"type": "and", "conditions": []}, {"type": "geometry"}),
            sample_index,
        )
        assert result.valid
        assert [w.path for w in result.warnings] == [
            "conditions[0].conditions",
            "conditions[1].type",
        ]

    def test_suggestions_are_capped(self) -> None:
        index = ElementIndex({}, property_sets={f"Pset_{i:02d}" for i in range(12)})
        result = validate_rule(
            _rule({"type": "property", "propertySet": "Other", "propertyName": "X", "operator": "exists"}),
            index,
        )
        suggestion = result.warnings[0].suggestion
        assert suggestion.count(",") == 4
        assert suggestion.endswith("...")

    def test_empty_model(self) -> None:
        result = validate_rule(
            _rule({"type": "classification", "system": "Uniclass"}),
            ElementIndex({}),
        )
        assert result.warnings[0].suggestion == "The model contains none"
