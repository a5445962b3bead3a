"""Local evaluation of price rules.

The backend is the authority on which products a rule touches and what
their new price is. This module mirrors its semantics so preview rows that
come back without a `new_selling_price` can still be annotated:

- Conditions are combined with ALL (match_type="all") or ANY ("any").
- Text comparisons are case-insensitive and ignore surrounding whitespace.
- `selling_price` comparisons are numeric; an unparseable value never matches.
- `regions` may be a list of region codes or a comma-separated string.
- The action adds/subtracts a percentage of the face value or an absolute
  amount; results are rounded to cents and never go below zero.
"""

import math
import operator as op
from collections.abc import Callable, Mapping
from typing import Any

from marketplace_admin.schemas import Condition, PriceRule

_NUMERIC_OPS: dict[str, Callable[[float, float], bool]] = {
    "=": op.eq,
    "!=": op.ne,
    ">": op.gt,
    ">=": op.ge,
    "<": op.lt,
    "<=": op.le,
}

NUMERIC_FIELDS = frozenset({"selling_price"})
LIST_FIELDS = frozenset({"regions"})


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip().lower() for part in value.split(",") if part.strip()]
    return [str(item).strip().lower() for item in value]


def _attribute(product: Mapping[str, Any], field: str) -> Any:
    value = product.get(field)
    # Products may carry the brand as a nested object.
    if field == "brand_name" and value is None:
        brand = product.get("brand")
        if isinstance(brand, Mapping):
            return brand.get("name")
        return brand
    return value


def condition_matches(condition: Condition, product: Mapping[str, Any]) -> bool:
    """Evaluate one condition against a product's attributes."""
    actual = _attribute(product, condition.field)
    expected = condition.value.strip()

    if condition.field in NUMERIC_FIELDS:
        compare = _NUMERIC_OPS.get(condition.operator)
        left, right = _to_float(actual), _to_float(expected)
        if compare is None or left is None or right is None:
            return False
        return compare(left, right)

    if condition.field in LIST_FIELDS:
        values = _as_list(actual)
        needle = expected.lower()
        if condition.operator == "contains":
            return needle in values
        if condition.operator == "=":
            return values == [needle]
        if condition.operator == "!=":
            return values != [needle]
        return False

    text = "" if actual is None else str(actual).strip().lower()
    needle = expected.lower()
    if condition.operator == "=":
        return text == needle
    if condition.operator == "!=":
        return text != needle
    if condition.operator == "contains":
        return needle in text
    return False


def rule_matches(rule: PriceRule, product: Mapping[str, Any]) -> bool:
    """Apply the rule's match type across its conditions."""
    if not rule.conditions:
        return False
    results = (condition_matches(c, product) for c in rule.conditions)
    if rule.match_type == "any":
        return any(results)
    return all(results)


def apply_action(
    face_value: float,
    action_value: float,
    action_operator: str = "+",
    action_mode: str = "percentage",
) -> float:
    """Compute the adjusted selling price from a face value.

    Args:
        face_value: Base amount the adjustment is computed on.
        action_value: Percentage points or absolute amount.
        action_operator: "+" to add, "-" to subtract.
        action_mode: "percentage" or "absolute".

    Returns:
        New selling price, rounded to 2 decimals and floored at 0.
    """
    if action_mode == "percentage":
        delta = face_value * action_value / 100.0
    elif action_mode == "absolute":
        delta = action_value
    else:
        raise ValueError(f"Unknown action mode: {action_mode}")

    if action_operator == "-":
        delta = -delta
    elif action_operator != "+":
        raise ValueError(f"Unknown action operator: {action_operator}")

    return max(0.0, round(face_value + delta, 2))


def price_for_rule(rule: PriceRule, face_value: float) -> float | None:
    """New selling price for a face value under the rule's action.

    Returns None while the rule's action is incomplete.
    """
    action_value = _to_float(rule.action_value)
    if action_value is None or not math.isfinite(action_value) or action_value <= 0:
        return None
    if not rule.action_mode:
        return None
    try:
        return apply_action(face_value, action_value, rule.action_operator, rule.action_mode)
    except ValueError:
        return None
