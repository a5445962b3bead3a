"""Catalog product and purchase-order form validation.

Same contract as the other forms: `validate_form` fills `errors` and returns
a bool, updates are merged without validating.
"""

from typing import Any

from marketplace_admin.schemas import ProductFormState, PurchaseOrderFormState
from marketplace_admin.services.product_form import NAME_MAX_LENGTH, SKU_MAX_LENGTH, parse_cost_price, split_tags

OPTIONAL_TEXT_FIELDS = ("brand", "description", "short_description", "long_description", "image")


class ProductForm:
    """Catalog product create/edit form. The SKU is fixed after creation."""

    def __init__(self, edit_mode: bool = False, initial_data: ProductFormState | None = None):
        self.edit_mode = edit_mode
        self.form_data = initial_data or ProductFormState()
        self.errors: dict[str, str] = {}

    def update_form_data(self, **updates: Any) -> None:
        self.form_data = self.form_data.model_copy(update=updates)

    def validate_form(self, is_external_supplier: bool = False, third_party_product: str = "") -> bool:
        form = self.form_data
        errors: dict[str, str] = {}

        if not self.edit_mode and is_external_supplier and not third_party_product:
            errors["third_party_product"] = "Please select a third-party product"

        if not form.name.strip():
            errors["name"] = "Name is required"
        elif len(form.name) > NAME_MAX_LENGTH:
            errors["name"] = f"Name must be {NAME_MAX_LENGTH} characters or less"

        if not self.edit_mode:
            if not form.sku.strip():
                errors["sku"] = "SKU is required"
            elif len(form.sku) > SKU_MAX_LENGTH:
                errors["sku"] = f"SKU must be {SKU_MAX_LENGTH} characters or less"

        if not form.selling_price.strip():
            errors["selling_price"] = "Selling price is required"
        else:
            selling_price = parse_cost_price(form.selling_price)
            if selling_price is None:
                errors["selling_price"] = "Selling price must be a valid number"
            elif selling_price < 0:
                errors["selling_price"] = "Selling price must be 0 or greater"

        self.errors = errors
        return not errors

    def reset_form(self) -> None:
        self.form_data = ProductFormState()
        self.errors = {}

    def get_form_data_for_submit(self) -> dict[str, Any]:
        """Backend payload; blank optional fields are left out."""
        form = self.form_data
        payload: dict[str, Any] = {
            "name": form.name.strip(),
            "sku": form.sku.strip(),
            "selling_price": parse_cost_price(form.selling_price),
            "status": form.status,
        }
        if self.edit_mode:
            del payload["sku"]
        for field in OPTIONAL_TEXT_FIELDS:
            value = getattr(form, field).strip()
            if value:
                payload[field] = value
        if tags := split_tags(form.tags):
            payload["tags"] = tags
        if regions := split_tags(form.regions):
            payload["regions"] = regions
        return payload


class PurchaseOrderForm:
    """Purchase order create form."""

    def __init__(self, initial_data: PurchaseOrderFormState | None = None):
        self.form_data = initial_data or PurchaseOrderFormState()
        self.errors: dict[str, str] = {}

    def update_form_data(self, **updates: Any) -> None:
        self.form_data = self.form_data.model_copy(update=updates)

    def validate_form(self) -> bool:
        form = self.form_data
        errors: dict[str, str] = {}

        if not form.product_id:
            errors["product_id"] = "Product is required"
        if not form.supplier_id:
            errors["supplier_id"] = "Supplier is required"
        if form.purchase_price <= 0:
            errors["purchase_price"] = "Purchase price must be greater than 0"
        if form.quantity <= 0:
            errors["quantity"] = "Quantity must be at least 1"

        self.errors = errors
        return not errors

    def reset_form(self) -> None:
        self.form_data = PurchaseOrderFormState()
        self.errors = {}

    def get_form_data_for_submit(self) -> dict[str, Any]:
        return self.form_data.model_dump()
