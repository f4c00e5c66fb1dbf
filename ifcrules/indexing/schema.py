"""Model schema — what exists in a loaded model.

Summarises an :class:`ElementIndex` into entity types, property sets and
their values, spatial structure, materials, classifications and quantity
sets.  Used for autocomplete and for validation suggestions.
"""

from __future__ import annotations

import json
from collections import Counter
from typing import Any, Literal

from pydantic import BaseModel, Field

from ifcrules.indexing.index import ElementIndex

TOP_VALUES = 10


class EntityTypeInfo(BaseModel):
    type: str
    count: int
    has_subtypes: bool = False


class PropertyInfo(BaseModel):
    name: str
    value_kind: Literal["string", "number", "boolean", "null", "mixed"]
    values: list[tuple[Any, int]] = Field(default_factory=list)
    """Most common values with their counts."""

    frequency: int = 0
    """How many elements carry this property."""


class PropertySetInfo(BaseModel):
    name: str
    applies_to: list[str] = Field(default_factory=list)
    element_count: int = 0
    properties: list[PropertyInfo] = Field(default_factory=list)


class StoreyInfo(BaseModel):
    name: str
    elevation: float = 0.0
    element_count: int = 0


class BuildingInfo(BaseModel):
    name: str
    storeys: list[StoreyInfo] = Field(default_factory=list)
    element_count: int = 0


class SpaceInfo(BaseModel):
    name: str
    storey: str | None = None
    area: float | None = None


class MaterialInfo(BaseModel):
    name: str
    kind: str
    element_count: int = 0
    thickness_range: tuple[float, float] | None = None


class ClassificationCodeInfo(BaseModel):
    code: str
    name: str
    element_count: int = 0


class ClassificationSystemInfo(BaseModel):
    system: str
    codes: list[ClassificationCodeInfo] = Field(default_factory=list)
    element_count: int = 0


class QuantityInfo(BaseModel):
    name: str
    range: tuple[float, float]
    frequency: int = 0


class QuantitySetInfo(BaseModel):
    name: str
    applies_to: list[str] = Field(default_factory=list)
    quantities: list[QuantityInfo] = Field(default_factory=list)


class SpatialSummary(BaseModel):
    projects: list[str] = Field(default_factory=list)
    sites: list[str] = Field(default_factory=list)
    buildings: list[BuildingInfo] = Field(default_factory=list)
    storeys: list[StoreyInfo] = Field(default_factory=list)
    spaces: list[SpaceInfo] = Field(default_factory=list)


class ModelSchema(BaseModel):
    """Everything a rule author can refer to in the loaded model."""

    total_elements: int = 0
    entity_types: list[EntityTypeInfo] = Field(default_factory=list)
    property_sets: list[PropertySetInfo] = Field(default_factory=list)
    spatial: SpatialSummary = Field(default_factory=SpatialSummary)
    materials: list[MaterialInfo] = Field(default_factory=list)
    classifications: list[ClassificationSystemInfo] = Field(default_factory=list)
    quantity_sets: list[QuantitySetInfo] = Field(default_factory=list)

    def types_by_count(self) -> list[tuple[str, int]]:
        return [(t.type, t.count) for t in self.entity_types]

    def properties_by_frequency(self) -> list[tuple[str, str, int]]:
        """``(pset, property, frequency)`` triples, most frequent first."""
        rows = [
            (pset.name, prop.name, prop.frequency)
            for pset in self.property_sets
            for prop in pset.properties
        ]
        rows.sort(key=lambda row: row[2], reverse=True)
        return rows

    def storeys_by_elevation(self) -> list[tuple[str, float]]:
        return [(s.name, s.elevation) for s in self.spatial.storeys]


def _value_key(value: Any) -> str:
    return json.dumps(value, default=str)


def _property_sets(index: ElementIndex) -> list[PropertySetInfo]:
    applies: dict[str, set[str]] = {}
    counts: Counter[str] = Counter()
    kinds: dict[tuple[str, str], set[str]] = {}
    values: dict[tuple[str, str], Counter[str]] = {}

    for el in index:
        for pset_name, props in el.properties.items():
            applies.setdefault(pset_name, set()).add(el.ifc_class)
            counts[pset_name] += 1
            for prop_name, prop in props.items():
                key = (pset_name, prop_name)
                kinds.setdefault(key, set()).add(prop.kind)
                values.setdefault(key, Counter())[_value_key(prop.value)] += 1

    result: list[PropertySetInfo] = []
    for pset_name, element_count in counts.items():
        props: list[PropertyInfo] = []
        for (owner, prop_name), seen_kinds in kinds.items():
            if owner != pset_name:
                continue
            value_counts = values[(owner, prop_name)]
            props.append(PropertyInfo(
                name=prop_name,
                value_kind=next(iter(seen_kinds)) if len(seen_kinds) == 1 else "mixed",
                values=[(json.loads(v), n) for v, n in value_counts.most_common(TOP_VALUES)],
                frequency=sum(value_counts.values()),
            ))
        props.sort(key=lambda p: p.frequency, reverse=True)
        result.append(PropertySetInfo(
            name=pset_name,
            applies_to=sorted(applies[pset_name]),
            element_count=element_count,
            properties=props,
        ))
    result.sort(key=lambda p: p.element_count, reverse=True)
    return result


def _spatial(index: ElementIndex) -> SpatialSummary:
    storeys: dict[str, StoreyInfo] = {}
    buildings: dict[str, set[str]] = {}
    projects: list[str] = []
    sites: list[str] = []
    spaces: list[SpaceInfo] = []

    for el in index:
        loc = el.spatial
        if loc.storey:
            info = storeys.get(loc.storey)
            if info is None:
                info = storeys[loc.storey] = StoreyInfo(
                    name=loc.storey, elevation=loc.storey_elevation or 0.0
                )
            info.element_count += 1
        if loc.building:
            group = buildings.setdefault(loc.building, set())
            if loc.storey:
                group.add(loc.storey)
        if loc.project and loc.project not in projects:
            projects.append(loc.project)
        if loc.site and loc.site not in sites:
            sites.append(loc.site)
        if el.ifc_class == "IfcSpace":
            area = None
            for qset in el.quantities.values():
                if "NetFloorArea" in qset:
                    area = qset["NetFloorArea"]
                    break
            spaces.append(SpaceInfo(
                name=el.name or "Unnamed Space", storey=loc.storey, area=area
            ))

    storey_list = sorted(storeys.values(), key=lambda s: s.elevation)
    building_list = [
        BuildingInfo(
            name=name,
            storeys=[s for s in storey_list if s.name in names],
            element_count=sum(storeys[s].element_count for s in names),
        )
        for name, names in buildings.items()
    ]
    return SpatialSummary(
        projects=projects,
        sites=sites,
        buildings=building_list,
        storeys=storey_list,
        spaces=spaces,
    )


def _materials(index: ElementIndex) -> list[MaterialInfo]:
    kinds: dict[str, str] = {}
    counts: Counter[str] = Counter()
    thicknesses: dict[str, list[float]] = {}
    for el in index:
        if el.material is None:
            continue
        name = el.material.name
        kinds.setdefault(name, el.material.kind)
        counts[name] += 1
        if el.material.total_thickness:
            thicknesses.setdefault(name, []).append(el.material.total_thickness)

    result = [
        MaterialInfo(
            name=name,
            kind=kinds[name],
            element_count=count,
            thickness_range=(
                (min(thicknesses[name]), max(thicknesses[name]))
                if name in thicknesses else None
            ),
        )
        for name, count in counts.items()
    ]
    result.sort(key=lambda m: m.element_count, reverse=True)
    return result


def _classifications(index: ElementIndex) -> list[ClassificationSystemInfo]:
    systems: dict[str, dict[str, ClassificationCodeInfo]] = {}
    for el in index:
        for cls in el.classifications:
            codes = systems.setdefault(cls.system, {})
            info = codes.get(cls.code)
            if info is None:
                info = codes[cls.code] = ClassificationCodeInfo(code=cls.code, name=cls.name)
            info.element_count += 1

    result = [
        ClassificationSystemInfo(
            system=system,
            codes=sorted(codes.values(), key=lambda c: c.code),
            element_count=sum(c.element_count for c in codes.values()),
        )
        for system, codes in systems.items()
    ]
    result.sort(key=lambda s: s.element_count, reverse=True)
    return result


def _quantity_sets(index: ElementIndex) -> list[QuantitySetInfo]:
    applies: dict[str, set[str]] = {}
    values: dict[str, dict[str, list[float]]] = {}
    for el in index:
        for qset_name, quantities in el.quantities.items():
            applies.setdefault(qset_name, set()).add(el.ifc_class)
            bucket = values.setdefault(qset_name, {})
            for qty_name, value in quantities.items():
                bucket.setdefault(qty_name, []).append(value)

    return [
        QuantitySetInfo(
            name=qset_name,
            applies_to=sorted(applies[qset_name]),
            quantities=[
                QuantityInfo(name=name, range=(min(vals), max(vals)), frequency=len(vals))
                for name, vals in bucket.items()
            ],
        )
        for qset_name, bucket in values.items()
    ]


def extract_model_schema(index: ElementIndex) -> ModelSchema:
    """Summarise *index* for autocomplete and validation suggestions."""
    type_counts = Counter(el.ifc_class for el in index)

    parents: set[str] = set()
    for el in index:
        parents.update(el.inheritance_chain[:-1])

    entity_types = [
        EntityTypeInfo(type=name, count=count, has_subtypes=name in parents)
        for name, count in type_counts.most_common()
    ]

    return ModelSchema(
        total_elements=len(index),
        entity_types=entity_types,
        property_sets=_property_sets(index),
        spatial=_spatial(index),
        materials=_materials(index),
        classifications=_classifications(index),
        quantity_sets=_quantity_sets(index),
    )
