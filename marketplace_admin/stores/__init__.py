"""Data stores for caching.

Stores handle:
- Redis: backend query cache, invalidation tags, TTL policies

No form/validation logic in stores - that belongs in services.
"""
