from __future__ import annotations

import html
import logging

import requests

from app.config import Settings
from app.http_client import http_session

logger = logging.getLogger(__name__)

class EmailSender:
    """Resend HTTP API client. Failures are logged and reported as False, never raised."""

    def __init__(self, config: Settings, session: requests.Session | None = None):
        self.api_key = config.resend_api_key
        self.api_url = config.resend_api_url
        self.sender = config.email_from
        self.session = session or http_session

    def send(self, to: str, subject: str, body_html: str) -> bool:
        if not self.api_key:
            logger.error("RESEND_API_KEY not configured")
            return False

        try:
            resp = self.session.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"from": self.sender, "to": to, "subject": subject, "html": body_html},
                timeout=10,
            )
        except requests.RequestException:
            logger.exception("failed to send email")
            return False

        if not resp.ok:
            logger.error("resend api error: %s %s", resp.status_code, resp.text[:200])
            return False
        return True

def magic_link_email(link: str, ttl_minutes: int) -> str:
    href = html.escape(link, quote=True)
    return (
        "<!DOCTYPE html><html><body>"
        "<h1>Admin Login</h1>"
        f'<p><a href="{href}">Log in to admin</a></p>'
        f"<p>Or paste this link into your browser:<br>{href}</p>"
        f"<p>This link expires in {ttl_minutes} minutes and can only be used once. "
        "If you didn't request it, ignore this email.</p>"
        "</body></html>"
    )
