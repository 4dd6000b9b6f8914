from app.auth.deps import parse_cookies
from app.auth.tokens import SessionCodec

from tests.conftest import ADMIN_EMAIL

def test_parse_cookies_keeps_equals_in_values():
    cookies = parse_cookies("theme=dark; auth_token=a.b.c==; other=x=y=z")
    assert cookies == {"theme": "dark", "auth_token": "a.b.c==", "other": "x=y=z"}

def test_parse_cookies_empty():
    assert parse_cookies(None) == {}
    assert parse_cookies("") == {}

def test_no_cookie_is_unauthorized(client):
    r = client.get("/admin/api/updates")
    assert r.status_code == 401
    assert r.json()["detail"] == "unauthorized"

def test_valid_session_admits(client, admin_headers):
    r = client.get("/admin/api/updates", headers=admin_headers)
    assert r.status_code == 200, r.text
    assert r.json() == {"updates": []}

def test_all_failure_modes_look_the_same(client, config, clock):
    good = SessionCodec(config.jwt_secret, config.session_ttl_seconds, clock).mint(ADMIN_EMAIL)
    forged = SessionCodec("another-secret-0123456789abcdef01234567", config.session_ttl_seconds, clock).mint(ADMIN_EMAIL)

    bodies = []
    for cookie in ("auth_token=", "auth_token=garbage", f"auth_token={forged}", f"other={good}"):
        r = client.get("/admin/api/updates", headers={"cookie": cookie})
        assert r.status_code == 401
        bodies.append(r.json())

    clock.advance(config.session_ttl_seconds)
    r = client.get("/admin/api/updates", headers={"cookie": f"auth_token={good}"})
    assert r.status_code == 401
    bodies.append(r.json())

    assert all(b == bodies[0] for b in bodies)

def test_missing_secret_rejects_instead_of_crashing(client, config, admin_headers):
    config.jwt_secret = None
    r = client.get("/admin/api/updates", headers=admin_headers)
    assert r.status_code == 401
