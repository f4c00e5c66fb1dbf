"""Shared fixtures: a small synthetic building model.

Layout::

    Demo Project (#1)
      Site (#2)
        Main Building (#3)
          Ground Floor (#10, elevation 0.0)
            Exterior Wall 1 (#100, IfcWall)  -- voided by Opening (#109)
            Door A (#102)                    -- fills Opening (#109)
            Window 1, Window 2 (#104, #105)
            Office 101 (#107, IfcSpace, NetFloorArea 61)
          Level 1 (#11, elevation 3.5)
            Interior Wall (#101, IfcWallStandardCase)
            Door B (#103), Window 3 (#106)
            Storage (#108, IfcSpace, NetFloorArea 42)

The project (#1), a wall type (#300) and the property set entity (#500)
are present in the graph but are not products, so they are not indexed.
"""

from __future__ import annotations

import pytest

from ifcrules.indexing import (
    ClassificationReferenceData,
    ClassificationsData,
    ClassificationSource,
    ElementIndex,
    MaterialAssociation,
    MaterialData,
    MaterialLayerData,
    MaterialLayerSetData,
    MaterialsData,
    ParseResult,
    ProjectRef,
    PropertySetData,
    QuantitySetData,
    RawEntity,
    RelationshipData,
    SpatialHierarchy,
    build_element_index,
)
from ifcrules.models import PropertyValue

GROUND_FLOOR_ELEMENTS = [100, 102, 104, 105, 107, 109]
LEVEL_1_ELEMENTS = [101, 103, 106, 108]


def _entity(express_id: int, ifc_type: str, *attributes: object) -> RawEntity:
    return RawEntity(express_id=express_id, type=ifc_type, attributes=list(attributes))


def _pset(name: str, **props: object) -> PropertySetData:
    return PropertySetData(
        name=name,
        properties={k: PropertyValue.of(v) for k, v in props.items()},
    )


def _rel(rel_type: str, relating: int, *related: int) -> RelationshipData:
    return RelationshipData(type=rel_type, relating_object=relating, related_objects=list(related))


# ---------------------------------------------------------------------------
# Raw inputs
# ---------------------------------------------------------------------------


@pytest.fixture
def parse_result() -> ParseResult:
    entities = [
        _entity(1, "IFCPROJECT", "0proj", None, "Demo Project"),
        _entity(2, "IFCSITE", "0site", None, "Site"),
        _entity(3, "IFCBUILDING", "0bldg", None, "Main Building"),
        _entity(10, "IFCBUILDINGSTOREY", "0gf", None, "Ground Floor"),
        _entity(11, "IFCBUILDINGSTOREY", "0l1", None, "Level 1"),
        _entity(
            100, "IFCWALL", "0w1", None, "Exterior Wall 1", "Load bearing",
            "Basic Wall:250mm", None, None, "W-01", ".SOLIDWALL.",
        ),
        _entity(
            101, "IFCWALLSTANDARDCASE", "0w2", None, "Interior Wall", None,
            None, None, None, "W-02", ".PARTITIONING.",
        ),
        _entity(102, "IFCDOOR", "0d1", None, "Door A"),
        _entity(103, "IFCDOOR", "0d2", None, "Door B"),
        _entity(104, "IFCWINDOW", "0win1", None, "Window 1"),
        _entity(105, "IFCWINDOW", "0win2", None, "Window 2"),
        _entity(106, "IFCWINDOW", "0win3", None, "Window 3"),
        _entity(107, "IFCSPACE", "0sp1", None, "Office 101"),
        _entity(108, "IFCSPACE", "0sp2", None, "Storage"),
        _entity(109, "IFCOPENINGELEMENT", "0op1", None, "Opening"),
        _entity(300, "IFCWALLTYPE", "0wt", None, "Basic Wall:250mm"),
        _entity(500, "IFCPROPERTYSET", "0ps", None, "Pset_WallCommon", None, []),
    ]
    return ParseResult(entities={e.express_id: e for e in entities})


@pytest.fixture
def property_sets() -> dict[int, PropertySetData]:
    return {
        500: _pset("Pset_WallCommon", IsExternal=True, LoadBearing=True, FireRating="2HR"),
        501: _pset("Pset_WallCommon", IsExternal=False, LoadBearing=False),
        502: _pset("Pset_DoorCommon", IsExternal=True, FireRating="1HR"),
    }


@pytest.fixture
def quantity_sets() -> dict[int, QuantitySetData]:
    return {
        600: QuantitySetData(name="Qto_SpaceBaseQuantities", quantities={"NetFloorArea": 61.0}),
        601: QuantitySetData(name="Qto_SpaceBaseQuantities", quantities={"NetFloorArea": 42.0}),
        602: QuantitySetData(name="Qto_WallBaseQuantities", quantities={"Length": 5.0, "Width": 0.25}),
    }


@pytest.fixture
def relationships() -> list[RelationshipData]:
    return [
        _rel("IFCRELDEFINESBYPROPERTIES", 500, 100),
        _rel("IFCRELDEFINESBYPROPERTIES", 501, 101),
        _rel("IFCRELDEFINESBYPROPERTIES", 502, 102),
        _rel("IFCRELDEFINESBYPROPERTIES", 600, 107),
        _rel("IFCRELDEFINESBYPROPERTIES", 601, 108),
        _rel("IFCRELDEFINESBYPROPERTIES", 602, 100),
        _rel("IFCRELDEFINESBYTYPE", 300, 100, 101),
        _rel("IFCRELCONTAINEDINSPATIALSTRUCTURE", 10, 100, 102, 104, 105, 109),
        _rel("IFCRELCONTAINEDINSPATIALSTRUCTURE", 11, 101, 103, 106),
        _rel("IFCRELAGGREGATES", 1, 2),
        _rel("IFCRELAGGREGATES", 2, 3),
        _rel("IFCRELAGGREGATES", 3, 10, 11),
        _rel("IFCRELAGGREGATES", 10, 107),
        _rel("IFCRELAGGREGATES", 11, 108),
        _rel("IFCRELVOIDSELEMENT", 100, 109),
        _rel("IFCRELFILLSELEMENT", 109, 102),
        _rel("IFCRELCONNECTSPATHELEMENTS", 100, 101),
    ]


@pytest.fixture
def spatial_hierarchy() -> SpatialHierarchy:
    return SpatialHierarchy(
        by_storey={10: GROUND_FLOOR_ELEMENTS, 11: LEVEL_1_ELEMENTS},
        by_building={3: [10, 11, *GROUND_FLOOR_ELEMENTS, *LEVEL_1_ELEMENTS]},
        by_site={2: [3]},
        storey_elevations={10: 0.0, 11: 3.5},
        project=ProjectRef(express_id=1, name="Demo Project"),
    )


@pytest.fixture
def materials() -> MaterialsData:
    return MaterialsData(
        materials={
            700: MaterialData(name="Concrete"),
            701: MaterialData(name="Insulation"),
            702: MaterialData(name="Oak"),
        },
        material_layers={
            710: MaterialLayerData(thickness=200.0, material="Concrete"),
            711: MaterialLayerData(thickness=50.0, material="Insulation"),
        },
        material_layer_sets={
            720: MaterialLayerSetData(name="Exterior 250", layers=[710, 711]),
        },
        associations=[
            MaterialAssociation(element_id=100, material_id=720, type="layer_set"),
            MaterialAssociation(element_id=101, material_id=700),
            MaterialAssociation(element_id=102, material_id=702),
        ],
    )


@pytest.fixture
def classifications() -> ClassificationsData:
    return ClassificationsData(
        classifications={800: ClassificationSource(name="Uniclass 2015")},
        classification_references={
            810: ClassificationReferenceData(identification="EF_25_10", name="Walls", referenced_source=800),
            811: ClassificationReferenceData(identification="EF_25_30", name="Doors", referenced_source=800),
            812: ClassificationReferenceData(
                identification="EF_25_10_25", name="External walls", referenced_source=810
            ),
        },
        element_classifications={100: [812], 102: [811]},
    )


# ---------------------------------------------------------------------------
# Built index
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_index(
    parse_result: ParseResult,
    property_sets: dict[int, PropertySetData],
    quantity_sets: dict[int, QuantitySetData],
    relationships: list[RelationshipData],
    spatial_hierarchy: SpatialHierarchy,
    materials: MaterialsData,
    classifications: ClassificationsData,
) -> ElementIndex:
    return build_element_index(
        parse_result,
        property_sets=property_sets,
        quantity_sets=quantity_sets,
        materials=materials,
        classifications=classifications,
        spatial_hierarchy=spatial_hierarchy,
        relationships=relationships,
    )
