"""Price rule form state: draft data, validation and reset.

Validation never raises. It fills `errors` (one message per key, "" when
the key is fine) and returns a bool that callers branch on before submit.
Updates are merged as-is; bad or missing values are reported by
`validate_form`, not by the merge.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any

from marketplace_admin.schemas import PriceRule
from marketplace_admin.services.conditions import ConditionListEditor, new_condition

RULE_ERROR_KEYS = (
    "name",
    "status",
    "match_type",
    "conditions",
    "action_value",
    "action_operator",
    "action_mode",
)

RULE_STATUSES = ("active", "in_active")
MATCH_TYPES = ("all", "any")
ACTION_OPERATORS = ("+", "-")
ACTION_MODES = ("percentage", "absolute")


def default_rule() -> PriceRule:
    """Empty rule with a single default condition."""
    return PriceRule(
        name="",
        description="",
        status="active",
        match_type="all",
        conditions=[new_condition()],
        action_operator="+",
        action_mode="percentage",
        action_value=None,
    )


def empty_errors() -> dict[str, str]:
    return {key: "" for key in RULE_ERROR_KEYS}


def parse_action_value(raw: Any) -> float | None:
    """Action value as a finite float; None when missing or not a number."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _coerce_rule(data: PriceRule | Mapping[str, Any]) -> PriceRule:
    if isinstance(data, PriceRule):
        return data
    return PriceRule.model_validate(dict(data))


class RuleFormState:
    """Draft of a price rule being created or edited."""

    def __init__(
        self,
        edit_mode: bool = False,
        initial_data: PriceRule | Mapping[str, Any] | None = None,
    ):
        self.edit_mode = edit_mode
        self.form_data = self._initial_form(edit_mode, initial_data)
        self.errors = empty_errors()

    @staticmethod
    def _initial_form(
        edit_mode: bool,
        initial_data: PriceRule | Mapping[str, Any] | None,
    ) -> PriceRule:
        base = default_rule()
        if not edit_mode or initial_data is None:
            return base

        initial = _coerce_rule(initial_data)
        provided = initial.model_dump(exclude_unset=True)
        merged = {**base.model_dump(), **provided}
        # A rule never has zero conditions.
        if not initial.conditions:
            merged["conditions"] = base.model_dump()["conditions"]
        return PriceRule.model_validate(merged)

    def update_form_data(self, **updates: Any) -> None:
        """Shallow-merge updates into the draft. Does not validate."""
        self.form_data = self.form_data.model_copy(update=updates)

    def validate_form(self) -> bool:
        """Check required parts of the draft and record field errors."""
        errors = empty_errors()
        data = self.form_data

        if not (data.name or "").strip():
            errors["name"] = "Name is required"

        if data.status not in RULE_STATUSES:
            errors["status"] = "Status must be active or in_active"

        if data.match_type not in MATCH_TYPES:
            errors["match_type"] = "Match type must be all or any"

        action_value = parse_action_value(data.action_value)
        if data.action_value is None or data.action_value == "":
            errors["action_value"] = "Value is required"
        elif action_value is None:
            errors["action_value"] = "Value must be a valid number"
        elif action_value <= 0:
            errors["action_value"] = "Value must be greater than 0"

        if data.action_operator not in ACTION_OPERATORS:
            errors["action_operator"] = "Operator must be + or -"

        if not data.action_mode:
            errors["action_mode"] = "Mode is required"
        elif data.action_mode not in ACTION_MODES:
            errors["action_mode"] = "Mode must be percentage or absolute"

        for condition in data.conditions:
            if not condition.value or not condition.value.strip():
                errors["conditions"] = "Value is required"

        self.errors = errors
        return all(message == "" for message in errors.values())

    def reset_form(self) -> None:
        self.form_data = default_rule()
        self.errors = empty_errors()

    def field_errors(self) -> dict[str, str]:
        """Only the keys that currently carry an error."""
        return {key: message for key, message in self.errors.items() if message}

    def conditions_editor(self, brand_names: Sequence[str] | None = None) -> ConditionListEditor:
        """Mount a condition editor on this form (runs startup normalization)."""
        return ConditionListEditor(self, brand_names=brand_names)

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the backend create/update call."""
        payload = self.form_data.model_dump(exclude={"id"}, warnings=False)
        payload["action_value"] = parse_action_value(self.form_data.action_value)
        return payload
