from __future__ import annotations

import html
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse, RedirectResponse

from app.auth.deps import require_same_origin
from app.auth.magic_links import MagicLinks
from app.auth.tokens import Clock, SessionCodec, build_auth_cookie, clear_auth_cookie
from app.config import Settings
from app.deps import get_clock, get_email_sender, get_settings, get_token_store
from app.errors import ConfigurationMissing
from app.mailer import EmailSender, magic_link_email
from app.ratelimit import rate_limit
from app.redis_client import TokenStore
from app.schemas.auth import RequestLinkIn, RequestLinkOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["auth"])

LOGIN_PATH = "/admin"
DASHBOARD_PATH = "/admin/dashboard"
VERIFY_PATH = "/admin/api/verify-token"

def _login_redirect(error: str) -> RedirectResponse:
    return RedirectResponse(f"{LOGIN_PATH}?error={error}", status_code=302)

def _is_admin(config: Settings, email: str) -> bool:
    if not config.admin_email:
        logger.error("ADMIN_EMAIL not configured")
        return False
    return email.lower() == config.admin_email.strip().lower()

@router.post("/api/send-magic-link", response_model=RequestLinkOut)
def send_magic_link(
    payload: RequestLinkIn,
    config: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
    mailer: EmailSender = Depends(get_email_sender),
    clock: Clock = Depends(get_clock),
    _: None = Depends(rate_limit("rate_limit_send_link_per_window")),
) -> RequestLinkOut:
    email = payload.email.strip()

    # same answer either way, only the logs tell them apart
    if _is_admin(config, email):
        token = MagicLinks(store, config, clock).issue(email)
        link = f"{config.base_url.rstrip('/')}{VERIFY_PATH}?token={quote(token)}"
        body = magic_link_email(link, config.magic_link_ttl_seconds // 60)
        if not mailer.send(email, "Your admin login link", body):
            logger.error("failed to send magic link email")
    else:
        logger.info("non-admin email attempted login: %s", email)

    return RequestLinkOut()

def _confirm_page(token: str) -> str:
    action = html.escape(f"{VERIFY_PATH}?token={quote(token)}", quote=True)
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        "<title>Confirm login</title></head><body>"
        f"<form method=\"post\" action=\"{action}\">"
        "<button type=\"submit\">Log in to admin</button>"
        "</form></body></html>"
    )

# safe to prefetch: never consumes the token
@router.get("/api/verify-token", response_class=HTMLResponse)
def confirm_login(
    token: str | None = None,
    config: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
    clock: Clock = Depends(get_clock),
):
    if not token:
        return _login_redirect("invalid-link")

    try:
        exists = MagicLinks(store, config, clock).peek(token)
    except Exception:
        logger.exception("error checking magic link")
        return _login_redirect("server-error")

    if not exists:
        return _login_redirect("link-expired")

    return HTMLResponse(
        _confirm_page(token),
        headers={"Cache-Control": "no-store", "Referrer-Policy": "no-referrer"},
    )

@router.post("/api/verify-token", dependencies=[Depends(require_same_origin)])
def verify_token(
    token: str | None = None,
    config: Settings = Depends(get_settings),
    store: TokenStore = Depends(get_token_store),
    clock: Clock = Depends(get_clock),
):
    if not token:
        return _login_redirect("invalid-link")

    # build the codec first so a missing secret never burns a token
    try:
        codec = SessionCodec(config.jwt_secret, config.session_ttl_seconds, clock)
    except ConfigurationMissing:
        logger.error("JWT_SECRET not configured, cannot complete login")
        return _login_redirect("server-error")

    try:
        email = MagicLinks(store, config, clock).consume(token)
    except Exception:
        logger.exception("error consuming magic link")
        return _login_redirect("server-error")

    if email is None:
        return _login_redirect("link-expired")

    resp = RedirectResponse(DASHBOARD_PATH, status_code=302)
    resp.headers["set-cookie"] = build_auth_cookie(codec.mint(email), config.session_ttl_seconds)
    return resp

@router.post("/logout", dependencies=[Depends(require_same_origin)])
def logout():
    resp = RedirectResponse(LOGIN_PATH, status_code=302)
    resp.headers["set-cookie"] = clear_auth_cookie()
    return resp
