"""RuleEngine — main entry point for element selection.

Usage::

    from ifcrules import RuleEngine, build_element_index

    index = build_element_index(parse_result, property_sets=psets, relationships=rels)
    engine = RuleEngine(index)
    result = engine.select(rule)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import Any

from ifcrules.config import INLINE_RULE_ID, INLINE_RULE_NAME
from ifcrules.engine.evaluator import evaluate_conditions
from ifcrules.engine.result import SelectionResult
from ifcrules.engine.validation import ValidationResult, validate_rule
from ifcrules.indexing.index import ElementIndex
from ifcrules.models.conditions import SelectionRule, parse_condition, parse_rule

logger = logging.getLogger(__name__)


def _as_rule(rule: SelectionRule | dict[str, Any] | str) -> SelectionRule:
    if isinstance(rule, SelectionRule):
        return rule
    return parse_rule(rule)


class RuleEngine:
    """Evaluate selection rules against one :class:`ElementIndex`.

    The engine holds no mutable state; concurrent calls against the same
    index are safe.
    """

    def __init__(self, index: ElementIndex) -> None:
        self.index = index

    def select(self, rule: SelectionRule | dict[str, Any] | str) -> SelectionResult:
        """Run *rule* over every element and collect the matches.

        *rule* may be a :class:`SelectionRule` or a rule document (dict or
        JSON text).  Matched ids keep index order, so repeated calls on an
        unchanged index return identical results.
        """
        rule = _as_rule(rule)
        start = time.perf_counter()

        matched = [
            element.express_id
            for element in self.index
            if evaluate_conditions(element, rule.conditions, rule.mode, self.index)
        ]

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.debug(
            "Rule %s matched %d/%d elements in %.2f ms",
            rule.id,
            len(matched),
            len(self.index),
            elapsed_ms,
        )
        return SelectionResult(
            express_ids=matched,
            rule=rule,
            evaluation_time_ms=elapsed_ms,
            index=self.index,
        )

    def query(self, conditions: Any | Sequence[Any]) -> SelectionResult:
        """Evaluate ad hoc condition(s) as an ``all``-mode inline rule."""
        if isinstance(conditions, (list, tuple)):
            items = list(conditions)
        else:
            items = [conditions]
        rule = SelectionRule(
            id=INLINE_RULE_ID,
            name=INLINE_RULE_NAME,
            conditions=tuple(parse_condition(c) for c in items),
        )
        return self.select(rule)

    def validate(self, rule: SelectionRule | dict[str, Any] | str) -> ValidationResult:
        """Advisory check of *rule* against this engine's index."""
        return validate_rule(_as_rule(rule), self.index)


def create_rule_engine(index: ElementIndex) -> RuleEngine:
    return RuleEngine(index)
