"""Advisory rule validation against a loaded index.

Validation never blocks evaluation.  A rule without conditions is an
error (it would select every element in ``all`` mode); references to
property sets, quantity sets or classification systems the model does
not contain are warnings with suggestions.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable
from typing import Any, Literal

from pydantic import BaseModel, Field

from ifcrules.config import MAX_SUGGESTIONS
from ifcrules.indexing.index import ElementIndex
from ifcrules.models.conditions import (
    ClassificationCondition,
    CompositeCondition,
    PropertyCondition,
    QuantityCondition,
    SelectionRule,
    UnknownCondition,
)
from ifcrules.operators.patterns import has_wildcard


class ValidationIssue(BaseModel):
    """A single problem found in a rule."""

    severity: Literal["error", "warning"]
    path: str
    """Location in the rule document, e.g. ``conditions[1].propertySet``."""

    message: str
    suggestion: str = ""


class ValidationResult(BaseModel):
    valid: bool = True
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)


def _suggest(name: str, known: Iterable[str]) -> str:
    """List up to MAX_SUGGESTIONS known names, closest to *name* first."""
    candidates = sorted(known)
    if not candidates:
        return "The model contains none"
    close = difflib.get_close_matches(name, candidates, n=MAX_SUGGESTIONS, cutoff=0.4)
    rest = [c for c in candidates if c not in close]
    picked = (close + rest)[:MAX_SUGGESTIONS]
    more = "..." if len(candidates) > len(picked) else ""
    return f"Available: {', '.join(picked)}{more}"


def _is_concrete(name: str | None) -> bool:
    return bool(name) and name != "*" and not has_wildcard(name)


def _check_condition(
    condition: Any,
    path: str,
    index: ElementIndex,
    warnings: list[ValidationIssue],
) -> None:
    if isinstance(condition, PropertyCondition):
        pset = condition.property_set
        if _is_concrete(pset) and pset not in index.property_sets:
            warnings.append(ValidationIssue(
                severity="warning",
                path=f"{path}.propertySet",
                message=f'Property set "{pset}" not found in model',
                suggestion=_suggest(pset, index.property_sets),
            ))

    elif isinstance(condition, QuantityCondition):
        qset = condition.quantity_set
        if _is_concrete(qset) and qset not in index.quantity_sets:
            warnings.append(ValidationIssue(
                severity="warning",
                path=f"{path}.quantitySet",
                message=f'Quantity set "{qset}" not found in model',
                suggestion=_suggest(qset, index.quantity_sets),
            ))

    elif isinstance(condition, ClassificationCondition):
        system = condition.system
        if _is_concrete(system) and system not in index.classification_systems:
            warnings.append(ValidationIssue(
                severity="warning",
                path=f"{path}.system",
                message=f'Classification system "{system}" not found in model',
                suggestion=_suggest(system, index.classification_systems),
            ))

    elif isinstance(condition, CompositeCondition):
        if not condition.conditions:
            warnings.append(ValidationIssue(
                severity="warning",
                path=f"{path}.conditions",
                message=f'"{condition.type}" group has no conditions',
            ))
        for i, child in enumerate(condition.conditions):
            _check_condition(child, f"{path}.conditions[{i}]", index, warnings)

    elif isinstance(condition, UnknownCondition):
        warnings.append(ValidationIssue(
            severity="warning",
            path=f"{path}.type",
            message=f'Unknown condition type "{condition.type}" never matches',
        ))


def validate_rule(rule: SelectionRule, index: ElementIndex) -> ValidationResult:
    """Check *rule* against what *index* contains."""
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    if not rule.conditions:
        errors.append(ValidationIssue(
            severity="error",
            path="conditions",
            message="Rule must have at least one condition",
        ))

    for i, condition in enumerate(rule.conditions):
        _check_condition(condition, f"conditions[{i}]", index, warnings)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
