"""Digital stock entry endpoints.

POST /v1/admin/digital-products/bulk          - validate and create a batch (one supplier)
POST /v1/admin/digital-products               - validate and create one product
POST /v1/admin/digital-products/{id}          - validate and update one product
POST /v1/admin/digital-products/batch-import  - CSV upload for a supplier
GET  /v1/admin/digital-products/sample-csv    - downloadable sample CSV
"""

import logging
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from marketplace_admin.routes.deps import get_backend, validation_failed
from marketplace_admin.schemas import BulkProductRequest, BulkProductResponse, DigitalProductFormState
from marketplace_admin.services.backend_client import MarketplaceClient
from marketplace_admin.services.bulk_products import BulkProductForm
from marketplace_admin.services.product_form import DigitalProductForm
from marketplace_admin.services.uploads import validate_csv_upload

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

SAMPLE_CSV_PATH = Path(__file__).resolve().parent.parent / "static" / "sample-digital-products.csv"


@router.get("/sample-csv")
async def download_sample_csv() -> FileResponse:
    return FileResponse(
        SAMPLE_CSV_PATH,
        media_type="text/csv",
        filename="sample-digital-products.csv",
    )


@router.post("/bulk", response_model=BulkProductResponse, status_code=201)
async def create_digital_products_bulk(
    request: BulkProductRequest,
    backend: MarketplaceClient = Depends(get_backend),
) -> BulkProductResponse | JSONResponse:
    """Create every product of the batch under the selected supplier.

    Nothing is sent unless a supplier is selected, the batch is non-empty and
    every entry validates. Entry errors come back in submission order.
    """
    if not request.supplier_id:
        return validation_failed({"supplier_id": "Supplier is required"})
    if not request.products:
        return validation_failed({"products": "At least one product is required"})

    bulk = BulkProductForm.from_drafts(request.supplier_id, request.products)
    if not bulk.validate_all():
        return validation_failed({"products": [form.errors for form in bulk.product_forms]})

    payload = [p.model_dump(exclude_none=True) for p in bulk.to_submit_payload(request.supplier_id)]
    created = await backend.create_digital_products(payload)
    logger.info(f"Created {len(created)} digital product(s) for supplier {request.supplier_id}")
    return BulkProductResponse(created=created)


@router.post("/batch-import")
async def batch_import_digital_products(
    supplier_id: int | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    backend: MarketplaceClient = Depends(get_backend),
):
    """Forward a CSV of digital products to the backend batch importer."""
    filename = file.filename if file else None
    content_type = file.content_type if file else None
    errors = validate_csv_upload(filename, content_type, supplier_id)
    if errors:
        return validation_failed(errors)

    content = await file.read()
    return await backend.batch_import_digital_products(filename, content, content_type, supplier_id)


@router.post("", response_model=BulkProductResponse, status_code=201)
async def create_digital_product(
    draft: DigitalProductFormState,
    backend: MarketplaceClient = Depends(get_backend),
) -> BulkProductResponse | JSONResponse:
    form = DigitalProductForm(edit_mode=False, initial_data=draft)
    if not form.validate_form():
        return validation_failed(form.errors)
    created = await backend.create_digital_products([form.get_form_data_for_submit()])
    return BulkProductResponse(created=created)


@router.post("/{product_id}")
async def update_digital_product(
    product_id: int,
    draft: DigitalProductFormState,
    backend: MarketplaceClient = Depends(get_backend),
):
    form = DigitalProductForm(edit_mode=True, initial_data=draft)
    if not form.validate_form():
        return validation_failed(form.errors)
    return await backend.update_digital_product(product_id, form.get_form_data_for_submit())
