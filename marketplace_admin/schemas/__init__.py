"""Pydantic schemas for API request/response validation."""

from marketplace_admin.schemas.common import ErrorDetail, ErrorResponse, Page, PaginationMeta
from marketplace_admin.schemas.catalog import ProductCreateRequest, ProductFormState, PurchaseOrderFormState
from marketplace_admin.schemas.digital_products import (
    BulkProductRequest,
    BulkProductResponse,
    DigitalProductFormState,
    DigitalProductPayload,
    ManualVoucher,
    ProductFormItem,
)
from marketplace_admin.schemas.price_rules import (
    Condition,
    PreviewProduct,
    PreviewResponse,
    PreviewRow,
    PriceRule,
    PriceRuleQuery,
    RuleRegistry,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "Page",
    "PaginationMeta",
    "ProductCreateRequest",
    "ProductFormState",
    "PurchaseOrderFormState",
    "BulkProductRequest",
    "BulkProductResponse",
    "DigitalProductFormState",
    "DigitalProductPayload",
    "ManualVoucher",
    "ProductFormItem",
    "Condition",
    "PreviewProduct",
    "PreviewResponse",
    "PreviewRow",
    "PriceRule",
    "PriceRuleQuery",
    "RuleRegistry",
]
