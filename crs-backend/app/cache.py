from __future__ import annotations
"""Lightweight Redis-backed JSON cache with graceful no-op fallback.

Usage:
    from app.cache import build_cache_from_env
    cache = await build_cache_from_env()
    await cache.set_json("key", {"a": 1})
    data = await cache.get_json("key")

Connection errors are logged and treated as cache misses so the service
keeps working without Redis (tests, CI, local runs). Keys are prefixed.
"""
import os
import json
import asyncio
import logging
from typing import Any, Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class NoopCache:
    async def get_json(self, key: str):  # pragma: no cover - trivial
        return None
    async def set_json(self, key: str, value: Any, ttl: int | None = None):  # pragma: no cover - trivial
        return False
    async def close(self):  # pragma: no cover - trivial
        return None


class RedisCache:
    def __init__(self, client: Any, prefix: str = "geojson", default_ttl: int = 3600):
        self.client = client
        self.prefix = prefix.rstrip(":")
        self.default_ttl = default_ttl
    def _k(self, key: str) -> str:
        return f"{self.prefix}:{key}" if self.prefix else key
    async def get_json(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(self._k(key))
        except redis.RedisError as e:  # pragma: no cover (network issues)
            logger.debug("Redis get failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.debug("Discarding undecodable cache entry %s", key)
            return None
    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        data = json.dumps(value, separators=(",", ":"))
        ex = ttl if ttl is not None else self.default_ttl
        try:
            await self.client.set(self._k(key), data, ex=ex)
            return True
        except redis.RedisError as e:  # pragma: no cover
            logger.debug("Redis set failed for %s: %s", key, e)
            return False
    async def close(self):  # pragma: no cover - rarely used
        await self.client.aclose()


async def build_cache_from_env() -> RedisCache | NoopCache:
    """Instantiate a RedisCache if REDIS_URL is set and reachable; else a no-op.

    Env vars:
      REDIS_URL          e.g. redis://redis:6379/0
      CACHE_DISABLE=1    force disable
      CACHE_PREFIX       (optional) namespace prefix (default 'geojson')
      CACHE_TTL_SECONDS  (optional) default TTL (int, default 3600)
    """
    if os.getenv("CACHE_DISABLE") == "1":
        return NoopCache()
    url = os.getenv("REDIS_URL")
    if not url:
        return NoopCache()
    try:
        client = redis.from_url(url, encoding="utf-8", decode_responses=False)
        # Ping with short timeout so startup isn't delayed badly
        await asyncio.wait_for(client.ping(), timeout=0.75)
    except (redis.RedisError, OSError, asyncio.TimeoutError) as e:  # pragma: no cover (network issues)
        logger.info("Redis unavailable (%s); proceeding without cache", e)
        return NoopCache()
    prefix = os.getenv("CACHE_PREFIX", "geojson")
    ttl = int(os.getenv("CACHE_TTL_SECONDS", "3600"))
    return RedisCache(client, prefix=prefix, default_ttl=ttl)
