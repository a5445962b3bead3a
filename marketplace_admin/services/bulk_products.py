"""Bulk digital product entry: N independent product drafts, one supplier.

Every entry has its own form data and error map. The supplier is chosen
once for the whole batch and broadcast to all entries with
`update_all_suppliers`. Entries are replaced rather than mutated in place,
so an entry object handed out earlier never changes under the caller.
"""

import random
import time
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from marketplace_admin.schemas import DigitalProductFormState, DigitalProductPayload, ProductFormItem
from marketplace_admin.services.product_form import convert_form_to_submit_data, validate_core_fields


def new_product_form_id() -> str:
    """Client-side entry id: product-<timestamp ms>-<random>."""
    return f"product-{int(time.time() * 1000)}-{random.random()}"


def create_initial_form(supplier_id: int = 0) -> ProductFormItem:
    return ProductFormItem(
        id=new_product_form_id(),
        form_data=DigitalProductFormState(supplier_id=supplier_id),
        errors={},
        is_expanded=True,
    )


@dataclass
class AccordionLayout:
    """How the entries are displayed.

    With more than one entry, all but the last sit in a collapsible
    accordion and the last one is always shown expanded inline.
    """

    accordion: list[ProductFormItem]
    inline: ProductFormItem | None


class BulkProductForm:
    """Array of product drafts plus the set of expanded entry ids."""

    def __init__(self) -> None:
        self.product_forms: list[ProductFormItem] = []
        self.expanded_items: set[str] = set()

    def initialize_forms(self, supplier_id: int = 0) -> ProductFormItem:
        """Reset to exactly one fresh, expanded entry."""
        initial = create_initial_form(supplier_id)
        self.product_forms = [initial]
        self.expanded_items = {initial.id}
        return initial

    def add_product(self, supplier_id: int) -> ProductFormItem:
        """Append a fresh expanded entry seeded with the batch supplier."""
        form = create_initial_form(supplier_id)
        self.product_forms = [*self.product_forms, form]
        self.expanded_items = self.expanded_items | {form.id}
        return form

    def remove_product(self, form_id: str) -> None:
        # No minimum here; submit refuses an empty batch.
        self.product_forms = [f for f in self.product_forms if f.id != form_id]
        self.expanded_items = self.expanded_items - {form_id}

    def toggle_accordion(self, form_id: str) -> None:
        expanded = form_id not in self.expanded_items
        self.expanded_items = (
            self.expanded_items | {form_id} if expanded else self.expanded_items - {form_id}
        )
        self._replace(form_id, lambda f: f.model_copy(update={"is_expanded": expanded}))

    def update_product_form(self, form_id: str, **updates: Any) -> None:
        """Merge updates into one entry's form data."""

        def merge(form: ProductFormItem) -> ProductFormItem:
            merged = {**form.form_data.model_dump(), **updates}
            return form.model_copy(
                update={"form_data": DigitalProductFormState.model_validate(merged)}
            )

        self._replace(form_id, merge)

    def update_all_suppliers(self, supplier_id: int) -> None:
        """Overwrite supplier_id on every entry; nothing else changes."""
        self.product_forms = [
            form.model_copy(
                update={"form_data": form.form_data.model_copy(update={"supplier_id": supplier_id})}
            )
            for form in self.product_forms
        ]

    def validate_product_form(self, form: ProductFormItem) -> bool:
        """Validate one entry and store its error map on that entry only."""
        errors = validate_core_fields(form.form_data)
        self._replace(form.id, lambda f: f.model_copy(update={"errors": errors}))
        return not errors

    def validate_all(self) -> bool:
        """Validate every entry (each gets its errors) and report if all passed."""
        results = [self.validate_product_form(form) for form in list(self.product_forms)]
        return all(results)

    def reset(self) -> None:
        self.product_forms = []
        self.expanded_items = set()

    def get(self, form_id: str) -> ProductFormItem | None:
        return next((f for f in self.product_forms if f.id == form_id), None)

    def layout(self) -> AccordionLayout:
        if not self.product_forms:
            return AccordionLayout(accordion=[], inline=None)
        if len(self.product_forms) == 1:
            return AccordionLayout(accordion=[], inline=self.product_forms[0])
        return AccordionLayout(accordion=self.product_forms[:-1], inline=self.product_forms[-1])

    def errors_by_entry(self) -> dict[str, dict[str, str]]:
        return {f.id: f.errors for f in self.product_forms if f.errors}

    def to_submit_payload(self, supplier_id: int) -> list[DigitalProductPayload]:
        return [convert_form_to_submit_data(f.form_data, supplier_id) for f in self.product_forms]

    @classmethod
    def from_drafts(
        cls,
        supplier_id: int,
        drafts: Iterable[DigitalProductFormState],
    ) -> "BulkProductForm":
        """Build a form array from submitted drafts under one supplier."""
        bulk = cls()
        for draft in drafts:
            entry = bulk.add_product(supplier_id)
            bulk.update_product_form(entry.id, **draft.model_dump(exclude={"supplier_id"}))
        bulk.update_all_suppliers(supplier_id)
        return bulk

    def _replace(self, form_id: str, change) -> None:
        self.product_forms = [change(f) if f.id == form_id else f for f in self.product_forms]
