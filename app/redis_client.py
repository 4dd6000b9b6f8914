from __future__ import annotations

import logging
from typing import Protocol

import redis

from app.config import settings

logger = logging.getLogger(__name__)

class TokenStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None: ...

    def ping(self) -> bool: ...

class RedisTokenStore:
    """TTL key-value store backed by redis; expiry is enforced by redis itself."""

    def __init__(self, client: redis.Redis):
        self.client = client

    def get(self, key: str) -> str | None:
        value = self.client.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.client.set(key, value, ex=int(ttl_seconds))

    def ping(self) -> bool:
        return bool(self.client.ping())

redis_client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
token_store = RedisTokenStore(redis_client)

# token store connectivity check
def redis_ping(store: TokenStore = token_store) -> bool:
    try:
        return bool(store.ping())
    except Exception:
        logger.warning("token store ping failed", exc_info=True)
        return False
