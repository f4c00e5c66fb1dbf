"""SelectionResult — matched ids plus materialization and grouping helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from ifcrules.indexing.index import ElementIndex
from ifcrules.models.conditions import SelectionRule
from ifcrules.models.element import UnifiedElement
from ifcrules.operators.comparison import stringify

# Rule-document spellings of record fields
_FIELD_ALIASES = {
    "id": "express_id",
    "externalId": "global_id",
    "type": "ifc_class",
    "typeName": "ifc_class",
    "typeAncestry": "inheritance_chain",
}

UNDEFINED_GROUP = "undefined"


def _step(current: Any, part: str) -> Any:
    if current is None:
        return None
    if isinstance(current, Mapping):
        return current.get(part)
    if isinstance(current, BaseModel):
        for name in (part, _FIELD_ALIASES.get(part), to_snake(part)):
            if name and name in type(current).model_fields:
                return getattr(current, name)
    return None


def resolve_path(element: UnifiedElement, path: str) -> Any:
    """Resolve a dotted *path* against *element*.

    Path segments may be field names (``spatial.storey``), their camelCase
    spellings (``spatial.storeyElevation``) or dictionary keys
    (``quantities.Qto_SpaceBaseQuantities.NetFloorArea``).  Property
    values resolve to their payload.
    """
    current: Any = element
    for part in path.split("."):
        current = _step(current, part)
        if current is None:
            return None
    if isinstance(current, BaseModel) and "value" in type(current).model_fields:
        current = current.value
    return current


@dataclass
class SelectionResult:
    """Outcome of evaluating one rule against an index.

    Produced fresh per evaluation; ``express_ids`` keeps index order.
    """

    express_ids: list[int]
    rule: SelectionRule
    evaluation_time_ms: float
    index: ElementIndex = field(repr=False)

    @property
    def count(self) -> int:
        return len(self.express_ids)

    def get_elements(self) -> list[UnifiedElement]:
        """Resolve the matched ids back to their records."""
        elements: list[UnifiedElement] = []
        for express_id in self.express_ids:
            element = self.index.get(express_id)
            if element is not None:
                elements.append(element)
        return elements

    def group_by(self, path: str) -> dict[str, list[int]]:
        """Bucket matched ids by the value at dotted *path*.

        Elements where the path does not resolve go under ``"undefined"``.
        """
        groups: dict[str, list[int]] = {}
        for express_id in self.express_ids:
            element = self.index.get(express_id)
            if element is None:
                continue
            value = resolve_path(element, path)
            key = UNDEFINED_GROUP if value is None else stringify(value)
            groups.setdefault(key, []).append(express_id)
        return groups

    def to_dict(self) -> dict[str, Any]:
        return {
            "expressIds": list(self.express_ids),
            "count": self.count,
            "rule": self.rule.to_document(),
            "evaluationTimeMs": self.evaluation_time_ms,
        }
