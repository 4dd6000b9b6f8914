from __future__ import annotations

import logging
import time

from pydantic import ValidationError

from app.auth.tokens import Clock, new_magic_token, now_ms
from app.config import Settings
from app.models.auth import MagicLinkToken
from app.redis_client import TokenStore

logger = logging.getLogger(__name__)

def token_key(token: str) -> str:
    return f"auth:token:{token}"

class MagicLinks:
    """Single-use login tokens kept in the TTL token store.

    A token moves unused -> used exactly once, inside consume(). peek() never
    mutates, so link prefetchers (mail scanners) cannot burn a token.
    """

    def __init__(self, store: TokenStore, config: Settings, clock: Clock = time.time):
        self.store = store
        self.ttl_seconds = config.magic_link_ttl_seconds
        self.used_ttl_seconds = config.magic_link_used_ttl_seconds
        self.reuse_window_ms = config.magic_link_reuse_window_ms
        self.clock = clock

    def issue(self, email: str) -> str:
        token = new_magic_token()
        record = MagicLinkToken(email=email, timestamp=now_ms(self.clock), used=False)
        self.store.put(token_key(token), record.model_dump_json(), self.ttl_seconds)
        return token

    def _load(self, token: str) -> MagicLinkToken | None:
        if not token:
            return None
        raw = self.store.get(token_key(token))
        if raw is None:
            return None
        try:
            return MagicLinkToken.model_validate_json(raw)
        except ValidationError:
            logger.warning("discarding malformed magic link record")
            return None

    def peek(self, token: str) -> bool:
        return self._load(token) is not None

    def consume(self, token: str) -> str | None:
        record = self._load(token)
        if record is None or record.used:
            return None

        now = now_ms(self.clock)
        # the store is eventually consistent: a reader may still see used=false
        # right after another request consumed the token
        if now - record.timestamp < self.reuse_window_ms:
            return None

        # not atomic; the reuse window above covers the propagation gap
        used = record.model_copy(update={"used": True, "timestamp": now})
        self.store.put(token_key(token), used.model_dump_json(), self.used_ttl_seconds)
        return record.email
