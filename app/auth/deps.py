from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request

from app.auth.tokens import AUTH_COOKIE_NAME, Clock, SessionCodec
from app.config import Settings
from app.deps import get_clock, get_settings
from app.errors import ConfigurationMissing

logger = logging.getLogger(__name__)

def parse_cookies(header: str | None) -> dict[str, str]:
    # values may themselves contain "=", keep everything after the first one
    cookies: dict[str, str] = {}
    if not header:
        return cookies
    for part in header.split(";"):
        key, *rest = part.strip().split("=")
        if key:
            cookies[key] = "=".join(rest)
    return cookies

def get_session_codec(config: Settings = Depends(get_settings), clock: Clock = Depends(get_clock)) -> SessionCodec:
    return SessionCodec(config.jwt_secret, config.session_ttl_seconds, clock)

def authenticate(request: Request, codec: SessionCodec) -> str | None:
    credential = parse_cookies(request.headers.get("cookie")).get(AUTH_COOKIE_NAME)
    if not credential:
        return None
    return codec.verify(credential)

def require_admin(
    request: Request,
    config: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> str:
    try:
        codec = get_session_codec(config, clock)
    except ConfigurationMissing:
        logger.error("JWT_SECRET not configured, rejecting admin request")
        raise HTTPException(status_code=401, detail="unauthorized")

    # absent, expired, malformed and forged all look the same from outside
    email = authenticate(request, codec)
    if email is None:
        raise HTTPException(status_code=401, detail="unauthorized")
    return email

def request_origin(request: Request) -> str:
    return f"{request.url.scheme}://{request.url.netloc}"

def require_same_origin(request: Request) -> None:
    if request.headers.get("origin") != request_origin(request):
        raise HTTPException(status_code=403, detail="forbidden")
