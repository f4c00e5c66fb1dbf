"""Comparison operators for rule evaluation.

String, numeric, boolean and existence comparisons.  All functions are
pure: a comparison that cannot be performed (missing value, malformed
regular expression, unknown operator) evaluates to ``False`` rather than
raising.
"""

from __future__ import annotations

import functools
import logging
import math
import re
from typing import Any, Literal, get_args

from ifcrules.config import NUMERIC_TOLERANCE
from ifcrules.operators.patterns import has_wildcard, matches_pattern

logger = logging.getLogger(__name__)

StringOperator = Literal[
    "equals",
    "notEquals",
    "contains",
    "notContains",
    "startsWith",
    "endsWith",
    "matches",
]

NumericOperator = Literal[
    "equals",
    "notEquals",
    "greaterThan",
    "lessThan",
    "greaterOrEqual",
    "lessOrEqual",
    "between",
]

ExistenceOperator = Literal["exists", "notExists"]

ComparisonOperator = Literal[
    "equals",
    "notEquals",
    "contains",
    "notContains",
    "startsWith",
    "endsWith",
    "matches",
    "greaterThan",
    "lessThan",
    "greaterOrEqual",
    "lessOrEqual",
    "between",
    "exists",
    "notExists",
]

STRING_OPERATORS: frozenset[str] = frozenset(get_args(StringOperator))
NUMERIC_OPERATORS: frozenset[str] = frozenset(get_args(NumericOperator))

# Operators a missing subject value still satisfies
_ABSENCE_OPERATORS = ("notEquals", "notExists")

_TRUE_STRINGS = ("true", "TRUE", "1", ".T.")
_FALSE_STRINGS = ("false", "FALSE", "0", ".F.")


def is_number(value: Any) -> bool:
    """True for int/float values.  Booleans are not numbers here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@functools.lru_cache(maxsize=256)
def _compile_regex(pattern: str) -> re.Pattern[str] | None:
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        # Cached, so this is logged once per distinct pattern
        logger.warning("Invalid regular expression %r: %s", pattern, exc)
        return None


def evaluate_string_operator(
    value: str | None,
    operator: str,
    compare_value: str,
) -> bool:
    """Apply a string *operator* to *value*.

    ``equals``/``notEquals`` are pattern matches, so a wildcarded
    *compare_value* behaves like a glob.  ``contains``, ``startsWith``
    and ``endsWith`` wrap a wildcarded value (``*v*``, ``v*``, ``*v``)
    before matching.  ``matches`` is a case-insensitive regular
    expression search; an invalid expression yields ``False``.
    """
    if value is None:
        return operator in _ABSENCE_OPERATORS

    lower_value = value.lower()
    lower_compare = compare_value.lower()
    wildcard = has_wildcard(compare_value)

    if operator == "equals":
        return matches_pattern(value, compare_value)

    if operator == "notEquals":
        return not matches_pattern(value, compare_value)

    if operator == "contains":
        if wildcard:
            return matches_pattern(value, f"*{compare_value}*")
        return lower_compare in lower_value

    if operator == "notContains":
        if wildcard:
            return not matches_pattern(value, f"*{compare_value}*")
        return lower_compare not in lower_value

    if operator == "startsWith":
        if wildcard:
            return matches_pattern(value, f"{compare_value}*")
        return lower_value.startswith(lower_compare)

    if operator == "endsWith":
        if wildcard:
            return matches_pattern(value, f"*{compare_value}")
        return lower_value.endswith(lower_compare)

    if operator == "matches":
        regex = _compile_regex(compare_value)
        if regex is None:
            return False
        return regex.search(value) is not None

    return False


def evaluate_numeric_operator(
    value: float | None,
    operator: str,
    compare_value: float,
    compare_to: float | None = None,
) -> bool:
    """Apply a numeric *operator* to *value*.

    ``equals``/``notEquals`` treat values closer than
    :data:`~ifcrules.config.NUMERIC_TOLERANCE` as equal (strictly less
    than; a difference of exactly the tolerance is *not* equal).
    ``between`` is inclusive and needs *compare_to*.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return operator == "notEquals"

    if operator == "equals":
        return abs(value - compare_value) < NUMERIC_TOLERANCE
    if operator == "notEquals":
        return abs(value - compare_value) >= NUMERIC_TOLERANCE
    if operator == "greaterThan":
        return value > compare_value
    if operator == "lessThan":
        return value < compare_value
    if operator == "greaterOrEqual":
        return value >= compare_value
    if operator == "lessOrEqual":
        return value <= compare_value
    if operator == "between":
        if compare_to is None:
            return False
        return compare_value <= value <= compare_to
    return False


def parse_numeric_value(value: Any) -> float | None:
    """Coerce *value* to float.  Accepts a decimal comma in strings."""
    if is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip().replace(",", "."))
        except ValueError:
            return None
    return None


def parse_boolean_value(value: Any) -> bool | None:
    """Coerce *value* to bool, or return None if it is not a boolean.

    Recognises native booleans, ``"true"/"TRUE"/"1"`` and
    ``"false"/"FALSE"/"0"`` (plus the STEP literals ``.T.``/``.F.``).
    """
    if isinstance(value, bool):
        return value
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    return None


def stringify(value: Any) -> str:
    """Render a scalar the way it reads in a model file.

    Booleans become ``true``/``false``; integral floats drop the ``.0``.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def evaluate_operator(
    value: Any,
    operator: str,
    compare_value: Any = None,
    compare_to: float | None = None,
) -> bool:
    """Evaluate any comparison operator against a raw scalar *value*.

    Dispatch order: existence operators first, then numeric comparison
    when both sides are numbers, boolean equality when the subject is a
    boolean, and string comparison of both sides otherwise.
    """
    if operator == "exists":
        return value is not None
    if operator == "notExists":
        return value is None

    if value is None:
        return operator in _ABSENCE_OPERATORS

    if is_number(value) and is_number(compare_value):
        return evaluate_numeric_operator(value, operator, compare_value, compare_to)

    if isinstance(value, bool):
        expected = parse_boolean_value(compare_value)
        if operator == "equals":
            return expected is not None and value == expected
        if operator == "notEquals":
            return expected is None or value != expected
        return False

    return evaluate_string_operator(stringify(value), operator, stringify(compare_value))
