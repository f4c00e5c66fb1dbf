"""IFC type hierarchy — ancestry chains for "is-a" matching.

The table maps each class to its direct supertype.  Chains are computed
once when a :class:`TypeHierarchy` is created and never change after
that; pass a different hierarchy to the index builder to extend it (the
IFC adapter derives one from the file's own schema).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

# Direct supertype per class (IFC4).  None marks the root.
IFC4_PARENTS: Mapping[str, str | None] = MappingProxyType({
    "IfcRoot": None,
    "IfcObjectDefinition": "IfcRoot",
    "IfcObject": "IfcObjectDefinition",
    "IfcContext": "IfcObjectDefinition",
    "IfcProject": "IfcContext",
    "IfcProduct": "IfcObject",
    # Elements
    "IfcElement": "IfcProduct",
    "IfcBuildingElement": "IfcElement",
    "IfcWall": "IfcBuildingElement",
    "IfcWallStandardCase": "IfcWall",
    "IfcWallElementedCase": "IfcWall",
    "IfcCurtainWall": "IfcBuildingElement",
    "IfcDoor": "IfcBuildingElement",
    "IfcDoorStandardCase": "IfcDoor",
    "IfcWindow": "IfcBuildingElement",
    "IfcWindowStandardCase": "IfcWindow",
    "IfcSlab": "IfcBuildingElement",
    "IfcSlabStandardCase": "IfcSlab",
    "IfcSlabElementedCase": "IfcSlab",
    "IfcColumn": "IfcBuildingElement",
    "IfcColumnStandardCase": "IfcColumn",
    "IfcBeam": "IfcBuildingElement",
    "IfcBeamStandardCase": "IfcBeam",
    "IfcMember": "IfcBuildingElement",
    "IfcMemberStandardCase": "IfcMember",
    "IfcPlate": "IfcBuildingElement",
    "IfcPlateStandardCase": "IfcPlate",
    "IfcRoof": "IfcBuildingElement",
    "IfcStair": "IfcBuildingElement",
    "IfcStairFlight": "IfcBuildingElement",
    "IfcRamp": "IfcBuildingElement",
    "IfcRampFlight": "IfcBuildingElement",
    "IfcRailing": "IfcBuildingElement",
    "IfcCovering": "IfcBuildingElement",
    "IfcFooting": "IfcBuildingElement",
    "IfcPile": "IfcBuildingElement",
    "IfcChimney": "IfcBuildingElement",
    "IfcShadingDevice": "IfcBuildingElement",
    "IfcBuildingElementProxy": "IfcBuildingElement",
    "IfcFurnishingElement": "IfcElement",
    "IfcFurniture": "IfcFurnishingElement",
    "IfcSystemFurnitureElement": "IfcFurnishingElement",
    "IfcElementAssembly": "IfcElement",
    "IfcFeatureElement": "IfcElement",
    "IfcFeatureElementSubtraction": "IfcFeatureElement",
    "IfcOpeningElement": "IfcFeatureElementSubtraction",
    "IfcOpeningStandardCase": "IfcOpeningElement",
    "IfcVoidingFeature": "IfcFeatureElementSubtraction",
    "IfcDistributionElement": "IfcElement",
    "IfcDistributionControlElement": "IfcDistributionElement",
    "IfcDistributionFlowElement": "IfcDistributionElement",
    "IfcFlowSegment": "IfcDistributionFlowElement",
    "IfcPipeSegment": "IfcFlowSegment",
    "IfcDuctSegment": "IfcFlowSegment",
    "IfcCableSegment": "IfcFlowSegment",
    "IfcFlowFitting": "IfcDistributionFlowElement",
    "IfcPipeFitting": "IfcFlowFitting",
    "IfcDuctFitting": "IfcFlowFitting",
    "IfcFlowTerminal": "IfcDistributionFlowElement",
    "IfcAirTerminal": "IfcFlowTerminal",
    "IfcLightFixture": "IfcFlowTerminal",
    "IfcSanitaryTerminal": "IfcFlowTerminal",
    "IfcFlowController": "IfcDistributionFlowElement",
    "IfcValve": "IfcFlowController",
    "IfcEnergyConversionDevice": "IfcDistributionFlowElement",
    "IfcTransportElement": "IfcElement",
    "IfcVirtualElement": "IfcElement",
    "IfcCivilElement": "IfcElement",
    "IfcGeographicElement": "IfcElement",
    # Spatial structure
    "IfcSpatialElement": "IfcProduct",
    "IfcSpatialStructureElement": "IfcSpatialElement",
    "IfcSite": "IfcSpatialStructureElement",
    "IfcBuilding": "IfcSpatialStructureElement",
    "IfcBuildingStorey": "IfcSpatialStructureElement",
    "IfcSpace": "IfcSpatialStructureElement",
    "IfcSpatialZone": "IfcSpatialElement",
    "IfcExternalSpatialElement": "IfcSpatialElement",
    # Other products
    "IfcAnnotation": "IfcProduct",
    "IfcGrid": "IfcProduct",
    "IfcProxy": "IfcProduct",
    # Definitions (never indexed, listed so their chains resolve)
    "IfcTypeObject": "IfcObjectDefinition",
    "IfcTypeProduct": "IfcTypeObject",
    "IfcElementType": "IfcTypeProduct",
    "IfcBuildingElementType": "IfcElementType",
    "IfcWallType": "IfcBuildingElementType",
    "IfcDoorType": "IfcBuildingElementType",
    "IfcWindowType": "IfcBuildingElementType",
    "IfcSlabType": "IfcBuildingElementType",
    "IfcPropertyDefinition": "IfcRoot",
    "IfcPropertySetDefinition": "IfcPropertyDefinition",
    "IfcPropertySet": "IfcPropertySetDefinition",
    "IfcElementQuantity": "IfcPropertySetDefinition",
})


class TypeHierarchy:
    """Immutable lookup of ancestry chains.

    Type names are resolved case-insensitively, so the STEP spelling
    ``IFCWALL`` resolves to ``IfcWall``.  Unknown types get the
    single-element chain ``(type_name,)``.
    """

    def __init__(self, parents: Mapping[str, str | None]) -> None:
        self._parents: Mapping[str, str | None] = MappingProxyType(dict(parents))
        self._canonical = {name.upper(): name for name in self._parents}
        self._chains = {name: self._walk(name) for name in self._parents}

    def _walk(self, name: str) -> tuple[str, ...]:
        chain: list[str] = []
        current: str | None = name
        while current is not None and current not in chain:
            chain.append(current)
            current = self._parents.get(current)
        chain.reverse()
        return tuple(chain)

    def resolve(self, type_name: str) -> str:
        """Return the canonical spelling of *type_name* (unchanged if unknown)."""
        return self._canonical.get(type_name.upper(), type_name)

    def chain(self, type_name: str) -> tuple[str, ...]:
        """Ancestry of *type_name*, most general first, ending with itself."""
        canonical = self.resolve(type_name)
        return self._chains.get(canonical, (canonical,))

    def is_subtype(self, type_name: str, ancestor: str) -> bool:
        wanted = ancestor.upper()
        return any(t.upper() == wanted for t in self.chain(type_name))

    def __contains__(self, type_name: object) -> bool:
        return isinstance(type_name, str) and type_name.upper() in self._canonical

    def __iter__(self) -> Iterator[str]:
        return iter(self._parents)

    def __len__(self) -> int:
        return len(self._parents)


IFC4_HIERARCHY = TypeHierarchy(IFC4_PARENTS)
