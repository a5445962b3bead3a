"""Schemas for catalog product and purchase-order forms."""

from pydantic import BaseModel, ConfigDict, Field


class ProductFormState(BaseModel):
    """Draft of a catalog product as typed into the create/edit form.

    tags and regions are comma-separated; selling_price is parsed at submit.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True, extra="ignore")

    name: str = ""
    brand: str = ""
    description: str = ""
    short_description: str = ""
    long_description: str = ""
    sku: str = ""
    selling_price: str = ""
    status: str = "active"
    tags: str = ""
    image: str = ""
    regions: str = ""


class ProductCreateRequest(ProductFormState):
    """Create body; external suppliers must pick a third-party product first."""

    is_external_supplier: bool = False
    third_party_product: str = ""


class PurchaseOrderFormState(BaseModel):
    """Draft of a purchase order (0 means "not selected")."""

    model_config = ConfigDict(extra="ignore")

    product_id: int = 0
    supplier_id: int = 0
    purchase_price: float = Field(default=0, allow_inf_nan=False)
    quantity: int = 1
