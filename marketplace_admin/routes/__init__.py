"""API routes."""

from fastapi import APIRouter

from marketplace_admin.routes import catalog, digital_products, price_rules, vouchers

api_router = APIRouter()

# Price automation rules (registry, CRUD, preview)
api_router.include_router(price_rules.router, prefix="/v1/admin/price-rules", tags=["price-rules"])

# Catalog lookups (products, brands, suppliers, purchase orders)
api_router.include_router(catalog.router, prefix="/v1/admin", tags=["catalog"])

# Digital stock entry
api_router.include_router(
    digital_products.router, prefix="/v1/admin/digital-products", tags=["digital-products"]
)

# Voucher import
api_router.include_router(vouchers.router, prefix="/v1/admin/vouchers", tags=["vouchers"])
