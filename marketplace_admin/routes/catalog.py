"""Catalog endpoints proxied to the backend (reads cached, tag-invalidated).

GET  /v1/admin/products[/{id}]
POST /v1/admin/products            - validate and create a product
POST /v1/admin/products/{id}       - validate and update a product
GET  /v1/admin/brands
GET  /v1/admin/suppliers
GET  /v1/admin/purchase-orders[/{id}]
POST /v1/admin/purchase-orders     - validate and create a purchase order
"""

from typing import Any

from fastapi import APIRouter, Depends, Query

from marketplace_admin.routes.deps import get_backend, validation_failed
from marketplace_admin.schemas import Page, ProductCreateRequest, ProductFormState, PurchaseOrderFormState
from marketplace_admin.services.backend_client import (
    BRANDS,
    PRODUCTS,
    PURCHASE_ORDERS,
    SUPPLIERS,
    MarketplaceClient,
)
from marketplace_admin.services.catalog_forms import ProductForm, PurchaseOrderForm

router = APIRouter()


def _list_params(
    page: int | None = Query(default=None, ge=1),
    per_page: int | None = Query(default=None, ge=1, le=100),
    search: str | None = Query(default=None, max_length=200),
    status: str | None = Query(default=None, max_length=20),
) -> dict[str, Any]:
    return {"page": page, "per_page": per_page, "search": search, "status": status}


@router.get("/products", response_model=Page[dict[str, Any]])
async def list_products(
    params: dict[str, Any] = Depends(_list_params),
    backend: MarketplaceClient = Depends(get_backend),
) -> Page[dict[str, Any]]:
    return await backend.list_resource(PRODUCTS, params)


@router.get("/products/{product_id}")
async def get_product(
    product_id: int,
    backend: MarketplaceClient = Depends(get_backend),
) -> dict[str, Any]:
    return await backend.get_resource(PRODUCTS, product_id)


@router.get("/brands", response_model=Page[dict[str, Any]])
async def list_brands(
    params: dict[str, Any] = Depends(_list_params),
    backend: MarketplaceClient = Depends(get_backend),
) -> Page[dict[str, Any]]:
    return await backend.list_resource(BRANDS, params)


@router.get("/suppliers", response_model=Page[dict[str, Any]])
async def list_suppliers(
    params: dict[str, Any] = Depends(_list_params),
    backend: MarketplaceClient = Depends(get_backend),
) -> Page[dict[str, Any]]:
    return await backend.list_resource(SUPPLIERS, params)


@router.get("/purchase-orders", response_model=Page[dict[str, Any]])
async def list_purchase_orders(
    params: dict[str, Any] = Depends(_list_params),
    backend: MarketplaceClient = Depends(get_backend),
) -> Page[dict[str, Any]]:
    return await backend.list_resource(PURCHASE_ORDERS, params)


@router.get("/purchase-orders/{order_id}")
async def get_purchase_order(
    order_id: int,
    backend: MarketplaceClient = Depends(get_backend),
) -> dict[str, Any]:
    return await backend.get_resource(PURCHASE_ORDERS, order_id)


@router.post("/products", status_code=201)
async def create_product(
    request: ProductCreateRequest,
    backend: MarketplaceClient = Depends(get_backend),
):
    form = ProductForm(edit_mode=False, initial_data=ProductFormState.model_validate(request.model_dump()))
    if not form.validate_form(request.is_external_supplier, request.third_party_product):
        return validation_failed(form.errors)
    return await backend.create_product(form.get_form_data_for_submit())


@router.post("/products/{product_id}")
async def update_product(
    product_id: int,
    draft: ProductFormState,
    backend: MarketplaceClient = Depends(get_backend),
):
    form = ProductForm(edit_mode=True, initial_data=draft)
    if not form.validate_form():
        return validation_failed(form.errors)
    return await backend.update_product(product_id, form.get_form_data_for_submit())


@router.post("/purchase-orders", status_code=201)
async def create_purchase_order(
    draft: PurchaseOrderFormState,
    backend: MarketplaceClient = Depends(get_backend),
):
    form = PurchaseOrderForm(initial_data=draft)
    if not form.validate_form():
        return validation_failed(form.errors)
    return await backend.create_purchase_order(form.get_form_data_for_submit())
