"""HTTP client for the marketplace REST backend.

Response contract:
- Every response is an envelope: { "data": ..., "error"?: bool, "message"?: str }
- List endpoints nest Laravel pagination inside `data`:
  { "data": { "data": [...], "current_page", "per_page", "total",
              "last_page", "from", "to" } }

Caching:
- Read queries (list/get) are cached in Redis and tagged with
  (resource type, id) plus (resource type, "LIST") for lists
- Writes invalidate the tags they affect so the next read refetches
- Redis being unavailable only disables caching
- Cached entries are scoped to the caller's bearer token; invalidation
  clears a tag for every caller

Errors:
- Non-2xx responses and envelopes with `error: true` raise BackendError
- Network failures raise BackendError with status 502
- No retries: callers surface the message and leave their state untouched
"""

import hashlib
import logging
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

import httpx

from marketplace_admin.schemas import (
    Page,
    PaginationMeta,
    PreviewProduct,
    PriceRule,
    PriceRuleQuery,
)
from marketplace_admin.settings import get_settings
from marketplace_admin.stores.redis import (
    LIST_ID,
    Tag,
    cache_get_json,
    cache_set_tagged,
    invalidate_tags,
    query_key,
)

logger = logging.getLogger("uvicorn.error")


class BackendError(RuntimeError):
    """Backend call failed (HTTP error status, error envelope or network)."""

    def __init__(self, status: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.payload = payload

    @property
    def field_errors(self) -> dict[str, Any] | None:
        """Laravel validation errors ({field: [messages]}) when present."""
        if isinstance(self.payload, dict) and isinstance(self.payload.get("errors"), dict):
            return self.payload["errors"]
        return None


@dataclass(frozen=True)
class Resource:
    """A backend collection and the cache tags it provides."""

    tag_type: str
    path: str
    # Extra tags invalidated when an item is created or updated.
    save_invalidates: tuple[Tag, ...] = ()

    def item_path(self, item_id: int | str) -> str:
        return f"{self.path}/{item_id}"

    def item_tag(self, item_id: int | str) -> Tag:
        return (self.tag_type, str(item_id))

    @property
    def list_tag(self) -> Tag:
        return (self.tag_type, LIST_ID)


PRODUCTS = Resource("Product", "/admin/products")
PRICE_RULES = Resource(
    "price-automation",
    "/admin/price-rules",
    save_invalidates=(PRODUCTS.list_tag,),
)
BRANDS = Resource("Brand", "/admin/brands")
SUPPLIERS = Resource("Supplier", "/admin/suppliers")
DIGITAL_PRODUCTS = Resource("DigitalProduct", "/admin/digital-products")
PURCHASE_ORDERS = Resource("PurchaseOrder", "/admin/purchase-orders")
VOUCHERS = Resource("Voucher", "/admin/vouchers")

_EMPTY_PAGINATION = PaginationMeta()


def unwrap_envelope(payload: Any) -> Any:
    """Return `data` from an envelope, or the payload itself if it has none."""
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload


def parse_page(payload: Any) -> Page[dict[str, Any]]:
    """Parse a Laravel-paginated list envelope.

    Anything that does not carry a `data.data` list becomes an empty page
    with default pagination.
    """
    inner = payload.get("data") if isinstance(payload, dict) else None
    if isinstance(inner, dict) and isinstance(inner.get("data"), list):
        return Page[dict[str, Any]](
            data=inner["data"],
            pagination=PaginationMeta(
                current_page=inner.get("current_page") or 1,
                per_page=inner.get("per_page") or 10,
                total=inner.get("total") or 0,
                last_page=inner.get("last_page") or 1,
                from_=inner.get("from"),
                to=inner.get("to"),
            ),
        )
    return Page[dict[str, Any]](data=[], pagination=_EMPTY_PAGINATION.model_copy())


# Shared HTTP client (initialized on startup)
_http_client: httpx.AsyncClient | None = None


def _build_http_client() -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(
        base_url=settings.backend_base_url,
        timeout=settings.backend_timeout,
        headers={"Accept": "application/json"},
    )


async def init_http_client() -> None:
    """Create the shared backend HTTP client."""
    global _http_client
    settings = get_settings()
    _http_client = _build_http_client()
    logger.info(f"Backend client ready for {settings.backend_base_url}")


async def close_http_client() -> None:
    """Close the shared backend HTTP client."""
    global _http_client
    if _http_client:
        await _http_client.aclose()
        _http_client = None


class MarketplaceClient:
    """Client for the marketplace admin REST API.

    Instances are cheap: they carry the caller's bearer token and share one
    underlying httpx.AsyncClient.
    """

    def __init__(
        self,
        token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        use_cache: bool = True,
    ):
        settings = get_settings()
        self.token = token or settings.backend_api_token
        self.use_cache = use_cache
        self._http_client = http_client

    def _get_client(self) -> httpx.AsyncClient:
        """Get the injected client or the shared one (created lazily)."""
        global _http_client
        if self._http_client is not None:
            return self._http_client
        if _http_client is None:
            _http_client = _build_http_client()
        return _http_client

    @property
    def cache_scope(self) -> str:
        """Cache namespace for this caller (token hash, or "anon")."""
        if not self.token:
            return "anon"
        return hashlib.sha256(self.token.encode()).hexdigest()[:16]

    def _headers(self) -> dict[str, str]:
        headers = {"X-Request-ID": str(uuid4())}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded JSON envelope."""
        if params:
            params = {k: v for k, v in params.items() if v is not None and v != ""}

        client = self._get_client()
        try:
            response = await client.request(
                method,
                path,
                params=params or None,
                json=json,
                data=data,
                files=files,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            logger.exception(f"Backend {method} {path} failed")
            raise BackendError(502, f"Backend unreachable: {e}") from e

        try:
            payload = response.json() if response.content else {}
        except ValueError:
            payload = {"message": response.text[:200]}

        if response.status_code >= 400:
            message = "An unexpected error occurred"
            if isinstance(payload, dict) and payload.get("message"):
                message = str(payload["message"])
            logger.error(f"Backend {method} {path} returned {response.status_code}: {message}")
            raise BackendError(response.status_code, message, payload)

        if isinstance(payload, dict) and payload.get("error") is True:
            message = str(payload.get("message") or "Request failed")
            logger.error(f"Backend {method} {path} reported error: {message}")
            raise BackendError(response.status_code, message, payload)

        return payload

    # ============================================================
    # Cache helpers
    # ============================================================

    async def _cached(self, key: str) -> Any | None:
        if not self.use_cache:
            return None
        try:
            cached = await cache_get_json(key)
        except Exception as e:
            logger.warning(f"Redis cache read failed: {e}")
            return None
        if cached is not None:
            logger.info(f"Query cache HIT for {key}")
        return cached

    async def _store(self, key: str, value: Any, tags: list[Tag]) -> None:
        if not self.use_cache:
            return
        try:
            await cache_set_tagged(key, value, tags, get_settings().query_cache_ttl)
        except Exception as e:
            logger.warning(f"Redis cache write failed: {e}")

    async def invalidate(self, tags: list[Tag]) -> None:
        """Invalidate cached queries; failures only log."""
        try:
            await invalidate_tags(tags)
        except Exception as e:
            logger.warning(f"Redis cache invalidation failed for {tags}: {e}")

    # ============================================================
    # Generic resource operations
    # ============================================================

    async def list_resource(
        self,
        resource: Resource,
        params: dict[str, Any] | None = None,
    ) -> Page[dict[str, Any]]:
        """List one page of a resource (cached, tagged per item + LIST)."""
        params = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        key = query_key(
            f"{resource.tag_type}:list",
            self.cache_scope,
            *(f"{k}={params[k]}" for k in sorted(params)),
        )
        cached = await self._cached(key)
        if cached is not None:
            return Page[dict[str, Any]].model_validate(cached)

        payload = await self.request("GET", resource.path, params=params)
        page = parse_page(payload)

        tags = [resource.item_tag(item["id"]) for item in page.data if "id" in item]
        tags.append(resource.list_tag)
        await self._store(key, page.model_dump(by_alias=True), tags)
        return page

    async def get_resource(self, resource: Resource, item_id: int | str) -> dict[str, Any]:
        """Fetch one item of a resource (cached, tagged by id)."""
        key = query_key(f"{resource.tag_type}:item", self.cache_scope, item_id)
        cached = await self._cached(key)
        if cached is not None:
            return cached

        payload = await self.request("GET", resource.item_path(item_id))
        item = unwrap_envelope(payload)
        await self._store(key, item, [resource.item_tag(item_id)])
        return item

    async def create_resource(self, resource: Resource, body: Any) -> Any:
        payload = await self.request("POST", resource.path, json=body)
        await self.invalidate([resource.list_tag, *resource.save_invalidates])
        return unwrap_envelope(payload)

    async def update_resource(self, resource: Resource, item_id: int | str, body: Any) -> Any:
        # The backend takes updates as POST /resource/{id}.
        payload = await self.request("POST", resource.item_path(item_id), json=body)
        await self.invalidate(
            [resource.item_tag(item_id), resource.list_tag, *resource.save_invalidates]
        )
        return unwrap_envelope(payload)

    async def delete_resource(self, resource: Resource, item_id: int | str) -> None:
        await self.request("DELETE", resource.item_path(item_id))
        await self.invalidate([resource.item_tag(item_id), resource.list_tag])

    # ============================================================
    # Price rules
    # ============================================================

    async def list_price_rules(self, query: PriceRuleQuery | None = None) -> Page[PriceRule]:
        params = query.model_dump(exclude_none=True) if query else None
        page = await self.list_resource(PRICE_RULES, params)
        return Page[PriceRule](
            data=[PriceRule.model_validate(item) for item in page.data],
            pagination=page.pagination,
        )

    async def get_price_rule(self, rule_id: int | str) -> PriceRule:
        return PriceRule.model_validate(await self.get_resource(PRICE_RULES, rule_id))

    async def create_price_rule(self, body: dict[str, Any]) -> PriceRule:
        return PriceRule.model_validate(await self.create_resource(PRICE_RULES, body))

    async def update_price_rule(self, rule_id: int | str, body: dict[str, Any]) -> PriceRule:
        return PriceRule.model_validate(await self.update_resource(PRICE_RULES, rule_id, body))

    async def delete_price_rule(self, rule_id: int | str) -> None:
        await self.delete_resource(PRICE_RULES, rule_id)

    async def preview_price_rule(self, body: dict[str, Any]) -> list[PreviewProduct]:
        """Products the draft rule would affect. Read-only: no cache, no invalidation."""
        payload = await self.request("POST", f"{PRICE_RULES.path}/preview", json=body)
        items = unwrap_envelope(payload)
        if not isinstance(items, list):
            return []
        return [PreviewProduct.model_validate(item) for item in items]

    # ============================================================
    # Lookups
    # ============================================================

    async def list_brand_names(self, per_page: int | None = None) -> list[str]:
        """Brand names for the brand_name condition value select."""
        per_page = per_page or get_settings().brand_lookup_limit
        page = await self.list_resource(BRANDS, {"per_page": per_page})
        return [str(b["name"]) for b in page.data if b.get("name")]

    # ============================================================
    # Products & purchase orders
    # ============================================================

    async def create_product(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self.create_resource(PRODUCTS, body)

    async def update_product(self, product_id: int | str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.update_resource(PRODUCTS, product_id, body)

    async def create_purchase_order(self, body: dict[str, Any]) -> dict[str, Any]:
        return await self.create_resource(PURCHASE_ORDERS, body)

    # ============================================================
    # Digital products & vouchers
    # ============================================================

    async def create_digital_products(self, products: list[dict[str, Any]]) -> list[dict[str, Any]]:
        created = await self.create_resource(DIGITAL_PRODUCTS, {"products": products})
        if isinstance(created, list):
            return created
        return [created]

    async def update_digital_product(self, product_id: int | str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.update_resource(DIGITAL_PRODUCTS, product_id, body)

    async def batch_import_digital_products(
        self,
        filename: str,
        content: bytes,
        content_type: str | None,
        supplier_id: int,
    ) -> Any:
        """Upload a CSV of digital products for one supplier."""
        payload = await self.request(
            "POST",
            f"{DIGITAL_PRODUCTS.path}/batch-import",
            data={"supplier_id": str(supplier_id)},
            files={"file": (filename, content, content_type or "text/csv")},
        )
        await self.invalidate([DIGITAL_PRODUCTS.list_tag, PURCHASE_ORDERS.list_tag])
        return unwrap_envelope(payload)

    async def import_vouchers(
        self,
        filename: str,
        content: bytes,
        content_type: str | None,
        purchase_order_id: int,
    ) -> Any:
        """Upload a voucher file (.csv/.xlsx/.xls/.zip) for a purchase order."""
        payload = await self.request(
            "POST",
            f"{VOUCHERS.path}/store",
            data={"purchase_order_id": str(purchase_order_id)},
            files={"file": (filename, content, content_type or "application/octet-stream")},
        )
        await self.invalidate([VOUCHERS.list_tag])
        return payload

    async def store_vouchers(
        self,
        purchase_order_id: int,
        voucher_codes: list[dict[str, Any]],
    ) -> Any:
        """Store manually entered voucher codes for a purchase order."""
        payload = await self.request(
            "POST",
            f"{VOUCHERS.path}/store",
            json={"purchase_order_id": purchase_order_id, "voucher_codes": voucher_codes},
        )
        await self.invalidate([VOUCHERS.list_tag])
        return payload
