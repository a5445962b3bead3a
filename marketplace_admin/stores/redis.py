"""Redis store for the backend query cache.

Handles:
- Caching of backend read queries with TTL
- Invalidation tags (refetch-on-mutation)

Tags are (type, id) pairs, e.g. ("price-automation", "12") or
("Product", "LIST"). A cached query registers its key under every tag it
provides; a mutation invalidates tags, which deletes every key registered
under them so the next read goes to the backend again.

TTL policies:
- Query payloads: settings.query_cache_ttl (default 60 seconds)
- Tag index sets: same TTL as the newest key registered under them
"""

import json
import logging
from collections.abc import Iterable
from typing import Any

import redis.asyncio as redis

from marketplace_admin.settings import get_settings

# Key prefixes
PREFIX_QUERY = "query:"
PREFIX_TAG = "tag:"

# Sentinel id used for "any list of this type"
LIST_ID = "LIST"

Tag = tuple[str, str]

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_get_json(key: str) -> Any | None:
    """Get JSON value from cache.

    Returns:
        Parsed JSON value or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


# ============================================================
# Tagged query cache
# ============================================================


def tag_key(tag: Tag) -> str:
    """Redis key of the set holding cache keys registered under a tag."""
    tag_type, tag_id = tag
    return f"{PREFIX_TAG}{tag_type}:{tag_id}"


def query_key(name: str, *parts: object) -> str:
    """Build a cache key for a named backend query and its arguments."""
    suffix = ":".join(str(p) for p in parts if p is not None and p != "")
    return f"{PREFIX_QUERY}{name}:{suffix}" if suffix else f"{PREFIX_QUERY}{name}"


async def cache_set_tagged(key: str, value: Any, tags: Iterable[Tag], ttl: int) -> None:
    """Cache a JSON value and register its key under every tag."""
    client = _get_redis()
    await client.setex(key, ttl, json.dumps(value))
    for tag in tags:
        index_key = tag_key(tag)
        await client.sadd(index_key, key)
        await client.expire(index_key, ttl)


async def invalidate_tags(tags: Iterable[Tag]) -> int:
    """Drop every cached query registered under any of the tags.

    Returns:
        Number of cached query keys removed.
    """
    client = _get_redis()
    removed = 0
    for tag in tags:
        index_key = tag_key(tag)
        members = await client.smembers(index_key)
        if members:
            removed += await client.delete(*members)
        await client.delete(index_key)
    logger.info(f"Invalidated {removed} cached queries")
    return removed
