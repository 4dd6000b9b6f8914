from __future__ import annotations

import secrets
import time
from collections.abc import Callable

import jwt
from pydantic import ValidationError

from app.errors import ConfigurationMissing
from app.models.auth import SessionPayload

AUTH_COOKIE_NAME = "auth_token"
AUTH_COOKIE_PATH = "/admin"

Clock = Callable[[], float]

def now_ms(clock: Clock = time.time) -> int:
    return int(clock() * 1000)

def new_magic_token() -> str:
    # 32 random bytes, url-safe
    return secrets.token_urlsafe(32)

class SessionCodec:
    """Signs and verifies the admin session credential (HS256 JWT).

    Every failure mode of verify() collapses to None so callers cannot tell a
    bad signature from an expired or garbled credential.
    """

    algorithm = "HS256"

    def __init__(self, secret: str | None, ttl_seconds: int, clock: Clock = time.time):
        if not secret:
            raise ConfigurationMissing("JWT_SECRET not configured")
        self.secret = secret
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def mint(self, email: str) -> str:
        iat = int(self.clock())
        payload = SessionPayload(email=email, iat=iat, exp=iat + self.ttl_seconds)
        return jwt.encode(payload.model_dump(), self.secret, algorithm=self.algorithm)

    def verify(self, credential: str | None) -> str | None:
        if not credential or len(credential.split(".")) != 3:
            return None

        try:
            # expiry is checked below against our own clock
            claims = jwt.decode(
                credential,
                self.secret,
                algorithms=[self.algorithm],
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["email", "iat", "exp"],
                },
            )
            payload = SessionPayload.model_validate(claims)
        except (jwt.PyJWTError, ValidationError, ValueError):
            return None

        if int(self.clock()) >= payload.exp:
            return None
        return payload.email

def build_auth_cookie(credential: str, max_age: int) -> str:
    return (
        f"{AUTH_COOKIE_NAME}={credential}; HttpOnly; Secure; SameSite=Strict; "
        f"Max-Age={max_age}; Path={AUTH_COOKIE_PATH}"
    )

def clear_auth_cookie() -> str:
    return f"{AUTH_COOKIE_NAME}=; HttpOnly; Secure; SameSite=Strict; Max-Age=0; Path={AUTH_COOKIE_PATH}"
