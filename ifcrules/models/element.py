"""UnifiedElement — the denormalized, per-element record the rules run against.

One record per indexed IFC product.  Properties, quantities, material,
classifications and spatial placement are joined in at index time so
that condition evaluation is a pure function of (record, condition).
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

PropertyKind = Literal["string", "number", "boolean", "null"]

Scalar = bool | int | float | str | None


class PropertyValue(BaseModel):
    """A single property value tagged with its original kind."""

    model_config = ConfigDict(frozen=True)

    kind: PropertyKind
    value: Scalar = None
    unit: str | None = None

    @classmethod
    def of(cls, value: Any, unit: str | None = None) -> PropertyValue:
        """Wrap a raw scalar, inferring its kind.

        STEP booleans (``.T.`` / ``.F.``) are decoded to real booleans.
        Anything that is not a scalar is stored as its string form.
        """
        if value is None:
            return cls(kind="null", value=None, unit=unit)
        if isinstance(value, bool):
            return cls(kind="boolean", value=value, unit=unit)
        if isinstance(value, (int, float)):
            return cls(kind="number", value=value, unit=unit)
        if value == ".T.":
            return cls(kind="boolean", value=True, unit=unit)
        if value == ".F.":
            return cls(kind="boolean", value=False, unit=unit)
        return cls(kind="string", value=str(value), unit=unit)


class MaterialLayer(BaseModel):
    """One layer of a layered material."""

    model_config = ConfigDict(frozen=True)

    material: str = "Unknown"
    thickness: float = 0.0


class ElementMaterial(BaseModel):
    """Material assigned to an element."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: Literal["single", "layerSet", "profileSet", "constituentSet"] = "single"
    layers: tuple[MaterialLayer, ...] = ()
    total_thickness: float | None = None


class ElementClassification(BaseModel):
    """A classification reference, e.g. Uniclass ``EF_25_10``."""

    model_config = ConfigDict(frozen=True)

    system: str
    code: str
    name: str = ""
    path: tuple[str, ...] = ()


class SpatialLocation(BaseModel):
    """Where an element sits in the spatial hierarchy."""

    model_config = ConfigDict(frozen=True)

    project: str | None = None
    site: str | None = None
    building: str | None = None
    storey: str | None = None
    space: str | None = None
    storey_elevation: float | None = None


class ElementRelationships(BaseModel):
    """Express ids of related entities."""

    model_config = ConfigDict(frozen=True)

    contained_in: int | None = None
    aggregated_by: int | None = None
    connected_to: tuple[int, ...] = ()
    has_openings: tuple[int, ...] = ()
    fills_opening: int | None = None
    has_type: int | None = None


def _read_only(groups: Mapping[str, Mapping[str, Any]]) -> Mapping[str, Mapping[str, Any]]:
    return MappingProxyType({name: MappingProxyType(dict(values)) for name, values in groups.items()})


class UnifiedElement(BaseModel):
    """Denormalized view of one IFC entity with all its joined data.

    ``express_id`` is unique within one index and stable only for the
    lifetime of the loaded model.  ``global_id`` is carried through but
    never used for matching.  Sequences are tuples and the property and
    quantity maps are read-only, so a record shared through the index
    cannot be changed in place.
    """

    model_config = ConfigDict(frozen=True)

    express_id: int
    global_id: str = ""

    ifc_class: str
    inheritance_chain: tuple[str, ...] = ()
    """Type names from most general to ``ifc_class`` (always last)."""

    name: str | None = None
    description: str | None = None
    tag: str | None = None
    object_type: str | None = None
    predefined_type: str | None = None

    spatial: SpatialLocation = Field(default_factory=SpatialLocation)

    properties: Mapping[str, Mapping[str, PropertyValue]] = Field(default_factory=dict)
    """``{"Pset_WallCommon": {"IsExternal": PropertyValue(...)}}``"""

    quantities: Mapping[str, Mapping[str, float]] = Field(default_factory=dict)
    """``{"Qto_WallBaseQuantities": {"GrossVolume": 12.5}}``"""

    material: ElementMaterial | None = None
    classifications: tuple[ElementClassification, ...] = ()
    relationships: ElementRelationships = Field(default_factory=ElementRelationships)

    @model_validator(mode="after")
    def _freeze_maps(self) -> UnifiedElement:
        # Frozen models reject attribute assignment
        self.__dict__["properties"] = _read_only(self.properties)
        self.__dict__["quantities"] = _read_only(self.quantities)
        return self

    @field_serializer("properties", "quantities")
    def _plain_maps(self, groups: Mapping[str, Mapping[str, Any]]) -> dict[str, dict[str, Any]]:
        return {name: dict(values) for name, values in groups.items()}
