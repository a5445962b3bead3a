"""Voucher import for purchase orders.

POST /v1/admin/vouchers/store - multipart: purchase_order_id, optional file,
optional voucher_codes (JSON list of {code, digitalProductID}).

When both a file and manual codes are sent, only the file is imported.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import TypeAdapter, ValidationError

from marketplace_admin.routes.deps import get_backend, validation_failed
from marketplace_admin.schemas import ManualVoucher
from marketplace_admin.services.backend_client import MarketplaceClient
from marketplace_admin.services.uploads import (
    VoucherImportSource,
    resolve_voucher_import,
    validate_voucher_file,
)
from marketplace_admin.settings import get_settings

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

_manual_codes = TypeAdapter(list[ManualVoucher])


@router.post("/store")
async def store_vouchers(
    purchase_order_id: int = Form(...),
    file: UploadFile | None = File(default=None),
    voucher_codes: str | None = Form(default=None),
    backend: MarketplaceClient = Depends(get_backend),
):
    manual: list[ManualVoucher] = []
    if voucher_codes:
        try:
            manual = _manual_codes.validate_json(voucher_codes)
        except ValidationError:
            return validation_failed({"voucher_codes": "Voucher codes must be a list of {code, digitalProductID}"})

    has_file = file is not None and bool(file.filename)
    plan = resolve_voucher_import(has_file, len(manual))
    if plan.error:
        return validation_failed({"file": plan.error})

    if plan.source is VoucherImportSource.FILE:
        max_bytes = get_settings().voucher_import_max_bytes
        if file.size is not None:
            error = validate_voucher_file(file.filename, file.size, max_bytes)
            if error:
                return validation_failed({"file": error})
        # Never buffer more than one byte past the limit.
        content = await file.read(max_bytes + 1)
        error = validate_voucher_file(file.filename, len(content), max_bytes)
        if error:
            return validation_failed({"file": error})
        if manual:
            logger.info(f"Ignoring {len(manual)} manual voucher code(s): file import takes precedence")
        return await backend.import_vouchers(file.filename, content, file.content_type, purchase_order_id)

    return await backend.store_vouchers(
        purchase_order_id,
        [v.model_dump(by_alias=True) for v in manual],
    )
