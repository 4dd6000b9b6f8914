from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request

from app.config import Settings
from app.deps import get_settings, get_token_store
from app.redis_client import TokenStore

logger = logging.getLogger(__name__)

def client_identity(request: Request, trust_cf_connecting_ip: bool = False) -> str:
    ip = request.headers.get("cf-connecting-ip") if trust_cf_connecting_ip else None
    if not ip and request.client:
        ip = request.client.host
    return (ip or "unknown").strip()

class RateLimiter:
    """Fixed-window counter per identity.

    Known limitations, kept deliberately:
    - every admitted request re-arms the TTL, and the window only restarts
      once the key expires, so a burst straddling a boundary can pass ~2x the
      limit in under one window;
    - get-then-put is not atomic, concurrent requests from one identity can
      lose increments and under-count.
    """

    def __init__(self, store: TokenStore, limit: int, window_seconds: int, prefix: str = "ratelimit:ip"):
        self.store = store
        self.limit = limit
        self.window_seconds = window_seconds
        self.prefix = prefix

    def key(self, identity: str) -> str:
        return f"{self.prefix}:{identity}"

    def admit(self, identity: str) -> bool:
        key = self.key(identity)
        raw = self.store.get(key)

        if raw is None:
            self.store.put(key, "1", self.window_seconds)
            return True

        try:
            count = int(raw)
        except ValueError:
            count = 0

        if count >= self.limit:
            return False

        self.store.put(key, str(count + 1), self.window_seconds)
        return True

def rate_limit(limit_setting: str, window_setting: str = "rate_limit_window_seconds"):
    def _dep(
        request: Request,
        config: Settings = Depends(get_settings),
        store: TokenStore = Depends(get_token_store),
    ) -> None:
        if not config.rate_limit_enabled:
            return

        limiter = RateLimiter(store, getattr(config, limit_setting), getattr(config, window_setting))
        try:
            allowed = limiter.admit(client_identity(request, config.trust_cf_connecting_ip))
        except Exception:
            # fail-open if the token store is down
            logger.exception("rate limiter unavailable, allowing request")
            return

        if not allowed:
            raise HTTPException(status_code=429, detail="Too many requests. Please try again later.")

    return _dep
