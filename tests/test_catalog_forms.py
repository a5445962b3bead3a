import pytest
from pydantic import ValidationError

from marketplace_admin.schemas import ProductFormState, PurchaseOrderFormState
from marketplace_admin.services.catalog_forms import ProductForm, PurchaseOrderForm


def _product(**overrides) -> ProductFormState:
    values = {"name": " Gift Card ", "sku": " GC-1 ", "selling_price": "12.50"}
    values.update(overrides)
    return ProductFormState(**values)


def test_product_create_requires_name_sku_and_price() -> None:
    form = ProductForm()
    assert form.validate_form() is False
    assert form.errors == {
        "name": "Name is required",
        "sku": "SKU is required",
        "selling_price": "Selling price is required",
    }


def test_product_length_and_price_checks() -> None:
    form = ProductForm(initial_data=_product(name="n" * 256, sku="s" * 101, selling_price="-1"))
    assert form.validate_form() is False
    assert form.errors == {
        "name": "Name must be 255 characters or less",
        "sku": "SKU must be 100 characters or less",
        "selling_price": "Selling price must be 0 or greater",
    }

    form.update_form_data(name="ok", sku="ok", selling_price="abc")
    assert form.validate_form() is False
    assert form.errors == {"selling_price": "Selling price must be a valid number"}

    form.update_form_data(selling_price="0")
    assert form.validate_form() is True


def test_external_supplier_needs_third_party_product_on_create() -> None:
    form = ProductForm(initial_data=_product())
    assert form.validate_form(is_external_supplier=True) is False
    assert form.errors == {"third_party_product": "Please select a third-party product"}
    assert form.validate_form(is_external_supplier=True, third_party_product="tp-9") is True

    edit = ProductForm(edit_mode=True, initial_data=_product(sku=""))
    assert edit.validate_form(is_external_supplier=True) is True


def test_product_payload_keeps_only_filled_fields() -> None:
    form = ProductForm(initial_data=_product(brand=" Acme ", tags="a, ,b", regions="US, EU", description="  "))
    assert form.validate_form() is True

    assert form.get_form_data_for_submit() == {
        "name": "Gift Card",
        "sku": "GC-1",
        "selling_price": 12.5,
        "status": "active",
        "brand": "Acme",
        "tags": ["a", "b"],
        "regions": ["US", "EU"],
    }


def test_product_edit_payload_omits_sku() -> None:
    form = ProductForm(edit_mode=True, initial_data=_product())
    assert "sku" not in form.get_form_data_for_submit()


def test_product_reset() -> None:
    form = ProductForm(initial_data=_product())
    form.validate_form(is_external_supplier=True)
    form.reset_form()
    assert form.form_data == ProductFormState()
    assert form.errors == {}


def test_purchase_order_defaults_fail_validation() -> None:
    form = PurchaseOrderForm()
    assert form.form_data.quantity == 1
    assert form.validate_form() is False
    assert form.errors == {
        "product_id": "Product is required",
        "supplier_id": "Supplier is required",
        "purchase_price": "Purchase price must be greater than 0",
    }


def test_purchase_order_quantity_and_submit() -> None:
    form = PurchaseOrderForm(PurchaseOrderFormState(product_id=3, supplier_id=4, purchase_price=7.5, quantity=0))
    assert form.validate_form() is False
    assert form.errors == {"quantity": "Quantity must be at least 1"}

    form.update_form_data(quantity=2)
    assert form.validate_form() is True
    assert form.get_form_data_for_submit() == {"product_id": 3, "supplier_id": 4, "purchase_price": 7.5, "quantity": 2}


def test_purchase_price_must_be_finite() -> None:
    with pytest.raises(ValidationError):
        PurchaseOrderFormState.model_validate({"purchase_price": "nan"})
