"""Schemas for digital stock (supplier-sourced SKUs) entry and import."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DigitalProductFormState(BaseModel):
    """Draft of a single digital product as typed into the form.

    Inputs are kept as strings: tags is comma-separated, metadata is a JSON
    string, cost_price is parsed at submit time.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    supplier_id: int = 0
    name: str = ""
    sku: str = ""
    brand: str = ""
    description: str = ""
    tags: str = ""
    image: str = ""
    cost_price: str = ""
    status: str = "active"
    region: str = ""
    metadata: str = ""
    currency: str = "usd"


class ProductFormItem(BaseModel):
    """One entry of the bulk product form array."""

    id: str
    form_data: DigitalProductFormState = Field(default_factory=DigitalProductFormState)
    errors: dict[str, str] = Field(default_factory=dict)
    is_expanded: bool = True


class DigitalProductPayload(BaseModel):
    """Digital product body sent to the backend on create."""

    supplier_id: int | None = None
    name: str
    sku: str | None = None
    brand: str | None = None
    description: str | None = None
    tags: list[str] | None = None
    image: str | None = None
    cost_price: float
    region: str | None = None
    metadata: dict[str, Any] | None = None
    currency: str | None = None


class BulkProductRequest(BaseModel):
    """Request body for POST /v1/admin/digital-products/bulk."""

    supplier_id: int = 0
    products: list[DigitalProductFormState] = Field(default_factory=list)


class BulkProductResponse(BaseModel):
    """Created digital products returned by the backend."""

    created: list[dict[str, Any]] = Field(default_factory=list)


class ManualVoucher(BaseModel):
    """A manually entered voucher code for a purchase-order line item."""

    code: str = Field(min_length=1)
    digital_product_id: int = Field(alias="digitalProductID")

    model_config = {"populate_by_name": True}

