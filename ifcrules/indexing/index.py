"""ElementIndex — the immutable collection of unified element records."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

from ifcrules.indexing.hierarchy import IFC4_HIERARCHY, TypeHierarchy
from ifcrules.models.element import UnifiedElement


def _freeze(groups: Mapping[str, list[int]]) -> Mapping[str, tuple[int, ...]]:
    return MappingProxyType({key: tuple(ids) for key, ids in groups.items()})


class ElementIndex:
    """All indexed elements plus secondary lookups.

    Built once per loaded model by :func:`~ifcrules.indexing.builder.build_element_index`
    and read-only afterwards.  Iteration yields elements in build order,
    which is the entity order of the source graph.

    Secondary lookups:

    * ``by_type``: IFC class -> express ids
    * ``by_storey``: storey name -> express ids
    * ``by_classification``: ``"system:code"`` -> express ids
    * ``by_material``: lower-cased material name -> express ids
    * ``property_sets`` / ``quantity_sets`` / ``classification_systems``:
      names observed anywhere in the model
    """

    def __init__(
        self,
        elements: Mapping[int, UnifiedElement],
        *,
        by_type: Mapping[str, list[int]] | None = None,
        by_storey: Mapping[str, list[int]] | None = None,
        by_classification: Mapping[str, list[int]] | None = None,
        by_material: Mapping[str, list[int]] | None = None,
        property_sets: set[str] | frozenset[str] = frozenset(),
        quantity_sets: set[str] | frozenset[str] = frozenset(),
        classification_systems: set[str] | frozenset[str] = frozenset(),
        hierarchy: TypeHierarchy = IFC4_HIERARCHY,
    ) -> None:
        self._elements: Mapping[int, UnifiedElement] = MappingProxyType(dict(elements))
        self.by_type = _freeze(by_type or {})
        self.by_storey = _freeze(by_storey or {})
        self.by_classification = _freeze(by_classification or {})
        self.by_material = _freeze(by_material or {})
        self.property_sets = frozenset(property_sets)
        self.quantity_sets = frozenset(quantity_sets)
        self.classification_systems = frozenset(classification_systems)
        self.hierarchy = hierarchy

    @property
    def elements(self) -> Mapping[int, UnifiedElement]:
        return self._elements

    def get(self, express_id: int) -> UnifiedElement | None:
        return self._elements.get(express_id)

    def get_by_type(
        self,
        type_name: str,
        include_subtypes: bool = True,
    ) -> list[UnifiedElement]:
        """Return every element of *type_name*.

        With *include_subtypes*, elements whose class descends from
        *type_name* are included (``IfcWall`` also returns
        ``IfcWallStandardCase``).  Matching ignores case.
        """
        result: list[UnifiedElement] = []
        wanted = type_name.upper()
        for ifc_class, ids in self.by_type.items():
            if include_subtypes:
                hit = self.hierarchy.is_subtype(ifc_class, type_name)
            else:
                hit = ifc_class.upper() == wanted
            if hit:
                result.extend(self._elements[i] for i in ids)
        return result

    def __iter__(self) -> Iterator[UnifiedElement]:
        return iter(self._elements.values())

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, express_id: object) -> bool:
        return express_id in self._elements

    def __repr__(self) -> str:
        return f"ElementIndex({len(self)} elements, {len(self.by_type)} types)"
