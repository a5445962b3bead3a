"""Condition list editing for price rule drafts.

The list always holds at least one condition. Changing a condition's field
resets its operator to the new field's default and clears its value, since
operator legality and value meaning both depend on the field.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from marketplace_admin.schemas import Condition
from marketplace_admin.services.operators import (
    CLOSED_VALUE_FIELDS,
    DEFAULT_FIELD,
    default_operator,
    is_legal_operator,
    legal_operators,
)

if TYPE_CHECKING:
    from marketplace_admin.services.rule_form import RuleFormState

logger = logging.getLogger("uvicorn.error")

_CONDITION_FIELDS = frozenset(Condition.model_fields)


def new_condition_id(existing: Sequence[Condition] = ()) -> str:
    """Time-based condition id, unique within `existing`."""
    taken = {c.id for c in existing}
    stamp = time.time_ns() // 1_000
    while str(stamp) in taken:
        stamp += 1
    return str(stamp)


def new_condition(existing: Sequence[Condition] = (), field: str = DEFAULT_FIELD) -> Condition:
    """Fresh condition row with the field's default operator and an empty value."""
    return Condition(
        id=new_condition_id(existing),
        field=field,
        operator=default_operator(field),
        value="",
    )


def normalize_conditions(conditions: Sequence[Condition]) -> list[Condition]:
    """Replace illegal operators with the field default.

    Conditions that are already valid, or whose field is unknown, are returned
    untouched. Running this twice gives the same result as running it once.
    """
    normalized: list[Condition] = []
    for condition in conditions:
        if legal_operators(condition.field) and not is_legal_operator(
            condition.field, condition.operator
        ):
            condition = condition.model_copy(
                update={"operator": default_operator(condition.field)}
            )
        normalized.append(condition)
    return normalized


class ConditionListEditor:
    """Edits the conditions and match type of a rule form.

    The rule form owns the data; the editor reads it from and writes it back
    to `form.form_data`. Constructing the editor runs the startup
    normalization once.
    """

    def __init__(
        self,
        form: RuleFormState,
        brand_names: Sequence[str] | None = None,
        normalize: bool = True,
    ):
        self.form = form
        self.brand_names = list(brand_names or [])
        if normalize:
            self.normalize()

    @property
    def conditions(self) -> list[Condition]:
        return self.form.form_data.conditions

    @property
    def match_condition(self) -> str:
        return self.form.form_data.match_type

    def set_match_condition(self, match_type: str) -> None:
        self.form.update_form_data(match_type=match_type)

    def _set_conditions(self, conditions: list[Condition]) -> None:
        self.form.update_form_data(conditions=conditions)

    def add_condition(self) -> Condition:
        """Append a fresh `name` condition and return it."""
        condition = new_condition(self.conditions)
        self._set_conditions([*self.conditions, condition])
        return condition

    def delete_condition(self, condition_id: str) -> bool:
        """Remove a condition; the last remaining one is never removed.

        Returns:
            True if a condition was removed.
        """
        if len(self.conditions) <= 1:
            return False
        remaining = [c for c in self.conditions if c.id != condition_id]
        if len(remaining) == len(self.conditions):
            return False
        self._set_conditions(remaining)
        return True

    def edit_condition(self, condition_id: str, **updates: str) -> None:
        """Merge updates into the matching condition.

        A field change forces the operator to the new field's default and
        clears the value, whatever else `updates` carries.
        """
        unknown = set(updates) - _CONDITION_FIELDS
        if unknown:
            raise ValueError(f"Unknown condition attributes: {sorted(unknown)}")
        # Row ids are fixed once assigned.
        updates.pop("id", None)

        edited: list[Condition] = []
        for condition in self.conditions:
            if condition.id == condition_id:
                merged = dict(updates)
                new_field = updates.get("field")
                if new_field is not None and new_field != condition.field:
                    merged["operator"] = default_operator(new_field)
                    merged["value"] = ""
                condition = condition.model_copy(update=merged)
            edited.append(condition)
        self._set_conditions(edited)

    def normalize(self) -> int:
        """Correct conditions carrying an operator illegal for their field.

        Returns:
            Number of conditions corrected.
        """
        normalized = normalize_conditions(self.conditions)
        changed = sum(
            1 for before, after in zip(self.conditions, normalized) if before is not after
        )
        if changed:
            logger.info(f"Normalized operator on {changed} condition(s)")
            self._set_conditions(normalized)
        return changed

    def value_options(self, field: str) -> list[str] | None:
        """Closed value domain for a field, or None when the value is free text."""
        if field in CLOSED_VALUE_FIELDS:
            return list(self.brand_names)
        return None
