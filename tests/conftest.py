import itertools

import pytest
from fastapi.testclient import TestClient

from app.auth.tokens import SessionCodec
from app.config import Settings
from app.content.github import DirEntry, StoredFile
from app.deps import get_clock, get_content_store, get_email_sender, get_settings, get_token_store
from app.errors import ConflictError, ContentStoreError, NotFoundError
from app.main import create_app

ADMIN_EMAIL = "admin@example.com"
ORIGIN = "http://testserver"

class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

class MemoryTokenStore:
    """TTL store that expires keys against the fake clock."""

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.data: dict[str, tuple[str, float]] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        item = self.data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self.clock() >= expires_at:
            del self.data[key]
            return None
        return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self.data[key] = (value, self.clock() + ttl_seconds)
        self.ttls[key] = ttl_seconds

    def ping(self) -> bool:
        return True

class MemoryContentStore:
    """Revision-tagged file store. inject_conflicts(n) makes the next n writes lose a race."""

    def __init__(self):
        self.files: dict[str, tuple[bytes, str]] = {}
        self._shas = itertools.count(1)
        self.reads: list[str] = []
        self.writes: list[tuple[str, str | None]] = []
        self.pending_conflicts = 0
        self.fail_writes_with: int | None = None
        self.fail_reads_with: int | None = None

    def inject_conflicts(self, n: int) -> None:
        self.pending_conflicts = n

    def _next_sha(self) -> str:
        return f"sha{next(self._shas)}"

    def seed(self, path: str, content: bytes) -> str:
        sha = self._next_sha()
        self.files[path] = (content, sha)
        return sha

    def read(self, path: str) -> StoredFile:
        self.reads.append(path)
        if self.fail_reads_with is not None:
            raise ContentStoreError(f"GitHub API error: {self.fail_reads_with}", status_code=self.fail_reads_with)
        if path not in self.files:
            raise NotFoundError(f"not found: {path}", status_code=404)
        content, sha = self.files[path]
        return StoredFile(path=path, content=content, sha=sha)

    def write(self, path: str, content: bytes, message: str, sha: str | None = None) -> str:
        self.writes.append((path, sha))
        if self.fail_writes_with is not None:
            raise ContentStoreError(f"GitHub API error: {self.fail_writes_with}", status_code=self.fail_writes_with)

        if self.pending_conflicts:
            # another writer got in first
            self.pending_conflicts -= 1
            if path in self.files:
                self.files[path] = (self.files[path][0], self._next_sha())
            raise ConflictError(f"revision conflict on {path}", status_code=409)

        current = self.files.get(path)
        if (current is None and sha is not None) or (current is not None and current[1] != sha):
            raise ConflictError(f"revision conflict on {path}", status_code=409)

        new_sha = self._next_sha()
        self.files[path] = (content, new_sha)
        return new_sha

    def delete(self, path: str, sha: str, message: str) -> None:
        current = self.files.get(path)
        if current is None:
            raise NotFoundError(f"not found: {path}", status_code=404)
        if current[1] != sha:
            raise ConflictError(f"revision conflict on {path}", status_code=409)
        del self.files[path]

    def list_dir(self, path: str) -> list[DirEntry]:
        prefix = path.rstrip("/") + "/"
        entries: dict[str, DirEntry] = {}
        for p, (_, sha) in self.files.items():
            if not p.startswith(prefix):
                continue
            name, _, rest = p[len(prefix):].partition("/")
            kind = "dir" if rest else "file"
            entries.setdefault(name, DirEntry(name=name, path=prefix + name, type=kind, sha=sha))
        if not entries:
            raise NotFoundError(f"not found: {path}", status_code=404)
        return list(entries.values())

class RecordingEmailSender:
    def __init__(self, ok: bool = True):
        self.ok = ok
        self.sent: list[dict[str, str]] = []

    def send(self, to: str, subject: str, body_html: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "html": body_html})
        return self.ok

@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()

@pytest.fixture()
def config() -> Settings:
    return Settings(
        _env_file=None,
        base_url=ORIGIN,
        jwt_secret="test-jwt-secret-0123456789abcdef0123456789",
        admin_email=ADMIN_EMAIL,
        admin_author="Test Admin",
        github_token="gh-test-token",
    )

@pytest.fixture()
def token_store(clock) -> MemoryTokenStore:
    return MemoryTokenStore(clock)

@pytest.fixture()
def content_store() -> MemoryContentStore:
    return MemoryContentStore()

@pytest.fixture()
def mailer() -> RecordingEmailSender:
    return RecordingEmailSender()

@pytest.fixture()
def client(config, clock, token_store, content_store, mailer) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_settings] = lambda: config
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_token_store] = lambda: token_store
    app.dependency_overrides[get_content_store] = lambda: content_store
    app.dependency_overrides[get_email_sender] = lambda: mailer
    return TestClient(app, follow_redirects=False)

@pytest.fixture()
def admin_headers(config, clock) -> dict[str, str]:
    credential = SessionCodec(config.jwt_secret, config.session_ttl_seconds, clock).mint(ADMIN_EMAIL)
    return {"cookie": f"auth_token={credential}", "origin": ORIGIN}
