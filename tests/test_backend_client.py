"""Tests for the backend client: envelopes, errors and the tagged query cache."""

import json

import httpx
import pytest

from marketplace_admin.services.backend_client import (
    PRODUCTS,
    SUPPLIERS,
    BackendError,
    MarketplaceClient,
    parse_page,
    unwrap_envelope,
)
from marketplace_admin.stores import redis as redis_store


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the cache uses."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.sets: dict[str, set[str]] = {}

    async def get(self, key: str) -> str | None:
        return self.values.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.values[key] = value

    async def sadd(self, key: str, *members: str) -> int:
        self.sets.setdefault(key, set()).update(members)
        return len(members)

    async def expire(self, key: str, ttl: int) -> bool:
        return True

    async def smembers(self, key: str) -> set[str]:
        return set(self.sets.get(key, set()))

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            if self.sets.pop(key, None) is not None:
                removed += 1
        return removed


RULE = {
    "id": 12,
    "name": "Markup",
    "status": "active",
    "match_type": "all",
    "conditions": [{"id": 1, "field": "name", "operator": "contains", "value": "gift"}],
    "action_value": "5.00",
    "action_operator": "+",
    "action_mode": "percentage",
}


def _paginated(items: list[dict]) -> dict:
    return {
        "data": {
            "data": items,
            "current_page": 1,
            "per_page": 10,
            "total": len(items),
            "last_page": 1,
            "from": 1 if items else None,
            "to": len(items) if items else None,
        }
    }


class Backend:
    """Scripted backend that counts requests per (method, path)."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []

    def count(self, method: str, path: str) -> int:
        return sum(1 for r in self.calls if r.method == method and r.url.path == path)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path
        if request.method == "GET" and path == "/admin/price-rules":
            return httpx.Response(200, json=_paginated([RULE]))
        if request.method == "GET" and path == "/admin/price-rules/12":
            return httpx.Response(200, json={"data": RULE})
        if request.method == "POST" and path == "/admin/price-rules/12":
            body = json.loads(request.content)
            return httpx.Response(200, json={"data": {**RULE, **body, "id": 12}})
        if request.method == "POST" and path == "/admin/price-rules/preview":
            return httpx.Response(
                200,
                json={"data": [{"product_name": "Card", "face_value": 10, "current_selling_price": 10}]},
            )
        if request.method == "GET" and path == "/admin/products":
            return httpx.Response(200, json=_paginated([{"id": 1, "name": "Card"}]))
        if request.method == "POST" and path == "/admin/products":
            return httpx.Response(201, json={"data": {"id": 2, **json.loads(request.content)}})
        if request.method == "POST" and path == "/admin/digital-products":
            body = json.loads(request.content)
            return httpx.Response(201, json={"data": body["products"]})
        if path == "/admin/brands":
            return httpx.Response(200, json={"error": True, "message": "Brands unavailable"})
        if path == "/admin/suppliers":
            return httpx.Response(
                422,
                json={"message": "The given data was invalid.", "errors": {"name": ["Required"]}},
            )
        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def backend() -> Backend:
    return Backend()


@pytest.fixture
def fake_redis(monkeypatch: pytest.MonkeyPatch) -> FakeRedis:
    fake = FakeRedis()
    monkeypatch.setattr(redis_store, "_redis", fake)
    return fake


@pytest.fixture
async def client(backend: Backend):
    http = httpx.AsyncClient(transport=httpx.MockTransport(backend.handler), base_url="http://backend")
    yield MarketplaceClient(token="secret", http_client=http)
    await http.aclose()


def test_unwrap_envelope() -> None:
    assert unwrap_envelope({"data": [1]}) == [1]
    assert unwrap_envelope({"message": "ok"}) == {"message": "ok"}
    assert unwrap_envelope([1]) == [1]


def test_parse_page_malformed_payload_is_empty() -> None:
    for payload in (None, {}, {"data": []}, {"data": {"items": []}}):
        page = parse_page(payload)
        assert page.data == []
        assert page.pagination.current_page == 1
        assert page.pagination.total == 0


@pytest.mark.asyncio
async def test_list_price_rules_parses_pagination(client: MarketplaceClient, fake_redis: FakeRedis):
    page = await client.list_price_rules()

    assert page.pagination.total == 1
    assert page.pagination.from_ == 1
    assert page.data[0].id == "12"
    assert page.data[0].action_value == 5.0
    assert page.data[0].conditions[0].id == "1"


@pytest.mark.asyncio
async def test_requests_carry_bearer_token(client: MarketplaceClient, backend: Backend, fake_redis: FakeRedis):
    await client.get_price_rule(12)

    request = backend.calls[0]
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_reads_are_cached(client: MarketplaceClient, backend: Backend, fake_redis: FakeRedis):
    await client.get_price_rule(12)
    await client.get_price_rule(12)
    await client.list_price_rules()
    await client.list_price_rules()

    assert backend.count("GET", "/admin/price-rules/12") == 1
    assert backend.count("GET", "/admin/price-rules") == 1
    assert "tag:price-automation:12" in fake_redis.sets
    assert "tag:price-automation:LIST" in fake_redis.sets


@pytest.mark.asyncio
async def test_rule_update_invalidates_rule_and_product_lists(
    client: MarketplaceClient, backend: Backend, fake_redis: FakeRedis
):
    await client.get_price_rule(12)
    await client.list_price_rules()
    await client.list_resource(PRODUCTS)

    updated = await client.update_price_rule(12, {"name": "Renamed"})
    assert updated.name == "Renamed"

    await client.get_price_rule(12)
    await client.list_price_rules()
    await client.list_resource(PRODUCTS)

    assert backend.count("GET", "/admin/price-rules/12") == 2
    assert backend.count("GET", "/admin/price-rules") == 2
    assert backend.count("GET", "/admin/products") == 2


@pytest.mark.asyncio
async def test_preview_is_not_cached_and_invalidates_nothing(
    client: MarketplaceClient, backend: Backend, fake_redis: FakeRedis
):
    await client.list_price_rules()

    products = await client.preview_price_rule({"name": "draft"})
    await client.preview_price_rule({"name": "draft"})
    await client.list_price_rules()

    assert products[0].product_name == "Card"
    assert backend.count("POST", "/admin/price-rules/preview") == 2
    assert backend.count("GET", "/admin/price-rules") == 1


@pytest.mark.asyncio
async def test_works_without_redis(client: MarketplaceClient, backend: Backend, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(redis_store, "_redis", None)

    await client.get_price_rule(12)
    await client.get_price_rule(12)
    await client.update_price_rule(12, {"name": "x"})

    assert backend.count("GET", "/admin/price-rules/12") == 2


@pytest.mark.asyncio
async def test_bulk_create_sends_products_list(client: MarketplaceClient, backend: Backend, fake_redis: FakeRedis):
    created = await client.create_digital_products([{"name": "A"}, {"name": "B"}])

    assert [p["name"] for p in created] == ["A", "B"]
    assert json.loads(backend.calls[0].content) == {"products": [{"name": "A"}, {"name": "B"}]}


@pytest.mark.asyncio
async def test_error_envelope_raises(client: MarketplaceClient, fake_redis: FakeRedis):
    with pytest.raises(BackendError) as exc_info:
        await client.list_brand_names()
    assert exc_info.value.message == "Brands unavailable"


@pytest.mark.asyncio
async def test_validation_errors_are_exposed(client: MarketplaceClient, fake_redis: FakeRedis):
    with pytest.raises(BackendError) as exc_info:
        await client.create_resource(SUPPLIERS, {})
    assert exc_info.value.status == 422
    assert exc_info.value.field_errors == {"name": ["Required"]}


@pytest.mark.asyncio
async def test_network_failure_is_502(fake_redis: FakeRedis):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url="http://backend") as http:
        with pytest.raises(BackendError) as exc_info:
            await MarketplaceClient(http_client=http).get_price_rule(1)
    assert exc_info.value.status == 502


@pytest.mark.asyncio
async def test_cache_is_not_shared_between_tokens(backend: Backend, fake_redis: FakeRedis):
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler), base_url="http://backend") as http:
        admin = MarketplaceClient(token="admin", http_client=http)
        other = MarketplaceClient(token="other", http_client=http)
        anonymous = MarketplaceClient(token=None, http_client=http)

        await admin.list_resource(PRODUCTS)
        await other.list_resource(PRODUCTS)
        await anonymous.list_resource(PRODUCTS)
        await admin.list_resource(PRODUCTS)

    seen = [r.headers.get("Authorization") for r in backend.calls]
    assert seen == ["Bearer admin", "Bearer other", None]


@pytest.mark.asyncio
async def test_invalidation_clears_every_callers_entries(backend: Backend, fake_redis: FakeRedis):
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler), base_url="http://backend") as http:
        admin = MarketplaceClient(token="admin", http_client=http)
        other = MarketplaceClient(token="other", http_client=http)

        await admin.get_price_rule(12)
        await other.get_price_rule(12)
        await admin.update_price_rule(12, {"name": "Renamed"})
        await other.get_price_rule(12)

    assert backend.count("GET", "/admin/price-rules/12") == 3


@pytest.mark.asyncio
async def test_product_create_invalidates_product_list(
    client: MarketplaceClient, backend: Backend, fake_redis: FakeRedis
):
    await client.list_resource(PRODUCTS)

    product = await client.create_product({"name": "New", "sku": "N-1", "selling_price": 3.0})
    await client.list_resource(PRODUCTS)

    assert product["id"] == 2
    assert backend.count("GET", "/admin/products") == 2
