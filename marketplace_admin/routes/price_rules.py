"""Price automation rule endpoints.

GET    /v1/admin/price-rules/registry  - operators, labels and select options
GET    /v1/admin/price-rules           - paginated rule list
POST   /v1/admin/price-rules/preview   - affected products for a draft (read-only)
GET    /v1/admin/price-rules/{id}      - rule hydrated for the edit form
POST   /v1/admin/price-rules           - validate and create
POST   /v1/admin/price-rules/{id}      - validate and update
DELETE /v1/admin/price-rules/{id}      - delete

Drafts are hydrated into a RuleFormState, normalized and validated before
anything is sent to the backend.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from marketplace_admin.routes.deps import error_response, get_backend, validation_failed
from marketplace_admin.schemas import Page, PreviewResponse, PriceRule, PriceRuleQuery, RuleRegistry
from marketplace_admin.services.backend_client import BackendError, MarketplaceClient
from marketplace_admin.services.operators import (
    FIELD_OPERATOR_MAP,
    OPERATOR_LABELS,
    field_options,
    match_options,
)
from marketplace_admin.services.preview import PreviewTrigger
from marketplace_admin.services.rule_form import RuleFormState

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def _hydrate(draft: PriceRule) -> RuleFormState:
    """Load a draft into form state and run the startup normalization."""
    form = RuleFormState(edit_mode=True, initial_data=draft)
    form.conditions_editor()
    return form


@router.get("/registry", response_model=RuleRegistry)
async def get_registry(backend: MarketplaceClient = Depends(get_backend)) -> RuleRegistry:
    """Field/operator registry plus the brand list used for brand_name values."""
    try:
        brand_names = await backend.list_brand_names()
    except BackendError as e:
        logger.warning(f"Brand lookup failed, brand_name values unavailable: {e.message}")
        brand_names = []

    return RuleRegistry(
        field_operators={field: list(ops) for field, ops in FIELD_OPERATOR_MAP.items()},
        operator_labels=dict(OPERATOR_LABELS),
        field_options=field_options(),
        match_options=match_options(),
        value_options={"brand_name": brand_names},
    )


@router.get("", response_model=Page[PriceRule])
async def list_price_rules(
    page: int | None = Query(default=None, ge=1),
    per_page: int | None = Query(default=None, ge=1, le=100),
    status: str | None = Query(default=None, pattern="^(active|in_active)$"),
    name: str | None = Query(default=None, max_length=100),
    backend: MarketplaceClient = Depends(get_backend),
) -> Page[PriceRule]:
    query = PriceRuleQuery(page=page, per_page=per_page, status=status, name=name)
    return await backend.list_price_rules(query)


@router.post("/preview", response_model=PreviewResponse)
async def preview_price_rule(
    draft: PriceRule,
    backend: MarketplaceClient = Depends(get_backend),
) -> PreviewResponse | JSONResponse:
    """Products the draft would affect, with current and new selling prices.

    An incomplete draft only adds a warning; the preview is still requested.
    """
    form = _hydrate(draft)
    outcome = await PreviewTrigger(form, backend).handle_preview()
    if outcome.error:
        return error_response(
            502,
            "PREVIEW_FAILED",
            outcome.error,
            {"warning": outcome.warning} if outcome.warning else None,
        )
    return PreviewResponse(warning=outcome.warning, products=outcome.rows)


@router.get("/{rule_id}", response_model=PriceRule)
async def get_price_rule(
    rule_id: int,
    backend: MarketplaceClient = Depends(get_backend),
) -> PriceRule:
    """Rule as the edit form should show it (never zero conditions)."""
    rule = await backend.get_price_rule(rule_id)
    return _hydrate(rule).form_data


@router.post("", response_model=PriceRule, status_code=201)
async def create_price_rule(
    draft: PriceRule,
    backend: MarketplaceClient = Depends(get_backend),
) -> PriceRule | JSONResponse:
    form = _hydrate(draft)
    if not form.validate_form():
        return validation_failed(form.field_errors())
    return await backend.create_price_rule(form.to_payload())


@router.post("/{rule_id}", response_model=PriceRule)
async def update_price_rule(
    rule_id: int,
    draft: PriceRule,
    backend: MarketplaceClient = Depends(get_backend),
) -> PriceRule | JSONResponse:
    form = _hydrate(draft)
    if not form.validate_form():
        return validation_failed(form.field_errors())
    return await backend.update_price_rule(rule_id, form.to_payload())


@router.delete("/{rule_id}", status_code=204)
async def delete_price_rule(
    rule_id: int,
    backend: MarketplaceClient = Depends(get_backend),
) -> Response:
    await backend.delete_price_rule(rule_id)
    return Response(status_code=204)
