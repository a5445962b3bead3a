"""Digital product form validation and submit conversion.

Shared by the single create/edit form and by every entry of the bulk
product form array. Invalid metadata JSON is reported as a field error,
never raised.
"""

import json
import math
from typing import Any

from marketplace_admin.schemas import DigitalProductFormState, DigitalProductPayload

NAME_MAX_LENGTH = 255
SKU_MAX_LENGTH = 100
TAG_MAX_LENGTH = 100
REGION_MAX_LENGTH = 10


def split_tags(tags: str) -> list[str]:
    """Comma-separated input -> trimmed, non-empty tags."""
    return [tag.strip() for tag in tags.split(",") if tag.strip()]


def parse_cost_price(raw: str) -> float | None:
    """Parse a cost price input; None when it is not a finite number."""
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_metadata(raw: str) -> dict[str, Any] | None:
    """Parse the metadata JSON input; None when empty or invalid."""
    if not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def validate_core_fields(form: DigitalProductFormState, check_sku: bool = True) -> dict[str, str]:
    """Name, SKU, cost price and metadata checks common to every product form."""
    errors: dict[str, str] = {}

    if not form.name.strip():
        errors["name"] = "Name is required"
    elif len(form.name) > NAME_MAX_LENGTH:
        errors["name"] = f"Name must be {NAME_MAX_LENGTH} characters or less"

    if check_sku:
        if not form.sku.strip():
            errors["sku"] = "SKU is required"
        elif len(form.sku) > SKU_MAX_LENGTH:
            errors["sku"] = f"SKU must be {SKU_MAX_LENGTH} characters or less"

    if not form.cost_price.strip():
        errors["cost_price"] = "Cost price is required"
    else:
        cost_price = parse_cost_price(form.cost_price)
        if cost_price is None:
            errors["cost_price"] = "Cost price must be a valid number"
        elif cost_price < 0:
            errors["cost_price"] = "Cost price must be 0 or greater"

    if form.metadata.strip():
        try:
            metadata = json.loads(form.metadata)
        except json.JSONDecodeError:
            errors["metadata"] = "Metadata must be valid JSON"
        else:
            if not isinstance(metadata, dict):
                errors["metadata"] = "Metadata must be a JSON object"

    return errors


def convert_form_to_submit_data(form: DigitalProductFormState, supplier_id: int) -> DigitalProductPayload:
    """Bulk entry -> create payload, using the batch-wide supplier id."""
    tags = split_tags(form.tags)
    return DigitalProductPayload(
        supplier_id=supplier_id,
        name=form.name.strip(),
        sku=form.sku.strip(),
        brand=form.brand.strip() or None,
        description=form.description.strip() or None,
        tags=tags or None,
        image=form.image.strip() or None,
        cost_price=parse_cost_price(form.cost_price) or 0.0,
        region=form.region or None,
        metadata=parse_metadata(form.metadata),
        currency=form.currency or None,
    )


class DigitalProductForm:
    """Single digital product form (create dialog or edit page).

    In edit mode the SKU and supplier cannot change, so they are neither
    validated nor submitted.
    """

    def __init__(self, edit_mode: bool = False, initial_data: DigitalProductFormState | None = None):
        self.edit_mode = edit_mode
        self.form_data = initial_data or DigitalProductFormState()
        self.errors: dict[str, str] = {}

    def update_form_data(self, **updates: Any) -> None:
        merged = {**self.form_data.model_dump(), **updates}
        self.form_data = DigitalProductFormState.model_validate(merged)

    def validate_form(self) -> bool:
        form = self.form_data
        errors: dict[str, str] = {}

        if not self.edit_mode and not form.supplier_id:
            errors["supplier_id"] = "Supplier is required"

        errors.update(validate_core_fields(form, check_sku=not self.edit_mode))

        if any(len(tag) > TAG_MAX_LENGTH for tag in split_tags(form.tags)):
            errors["tags"] = f"Each tag must be {TAG_MAX_LENGTH} characters or less"

        if len(form.region.strip()) > REGION_MAX_LENGTH:
            errors["regions"] = f"Each region code must be {REGION_MAX_LENGTH} characters or less"

        self.errors = errors
        return not errors

    def reset_form(self) -> None:
        self.form_data = DigitalProductFormState()
        self.errors = {}

    def get_form_data_for_submit(self) -> dict[str, Any]:
        """Backend payload; edit mode drops sku and supplier_id."""
        form = self.form_data
        tags = split_tags(form.tags)
        payload: dict[str, Any] = {
            "name": form.name.strip(),
            "brand": form.brand.strip() or None,
            "description": form.description.strip() or None,
            "tags": tags or None,
            "image": form.image.strip() or None,
            "cost_price": parse_cost_price(form.cost_price),
            "regions": form.region or None,
            "metadata": parse_metadata(form.metadata),
            "currency": form.currency or None,
        }
        if not self.edit_mode:
            payload = {"supplier_id": form.supplier_id, "sku": form.sku.strip(), **payload}
        return {k: v for k, v in payload.items() if v is not None}
