from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Protocol

import requests

from app.config import Settings
from app.errors import ConfigurationMissing, ConflictError, ContentStoreError, NotFoundError
from app.http_client import http_session

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class StoredFile:
    path: str
    content: bytes
    sha: str

    def text(self) -> str:
        return self.content.decode("utf-8")

@dataclass(frozen=True)
class DirEntry:
    name: str
    path: str
    type: str
    sha: str

class ContentStore(Protocol):
    def read(self, path: str) -> StoredFile: ...

    def write(self, path: str, content: bytes, message: str, sha: str | None = None) -> str: ...

    def delete(self, path: str, sha: str, message: str) -> None: ...

    def list_dir(self, path: str) -> list[DirEntry]: ...

def _is_conflict(resp: requests.Response) -> bool:
    if resp.status_code == 409:
        return True
    # 422 "sha wasn't supplied": someone created the file since our read
    if resp.status_code == 422:
        try:
            message = str(resp.json().get("message", ""))
        except ValueError:
            return False
        return "sha" in message.lower()
    return False

class GitHubContentStore:
    """Versioned file store over the GitHub Contents API; the blob sha is the revision tag."""

    def __init__(self, config: Settings, session: requests.Session | None = None):
        if not config.github_token:
            raise ConfigurationMissing("GITHUB_TOKEN not configured")

        self.base = f"{config.github_api_base.rstrip('/')}/repos/{config.github_repo}/contents"
        self.branch = config.github_branch
        self.timeout = config.github_timeout_seconds
        self.session = session or http_session
        self.headers = {
            "Authorization": f"token {config.github_token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "site-admin-api",
        }

    def _url(self, path: str) -> str:
        return f"{self.base}/{path.lstrip('/')}"

    def _params(self) -> dict[str, str]:
        return {"ref": self.branch} if self.branch else {}

    def _body(self, body: dict) -> dict:
        if self.branch:
            body["branch"] = self.branch
        return body

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(
                method, self._url(path), headers=self.headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise ContentStoreError(f"github request failed: {e.__class__.__name__}") from e

    def read(self, path: str) -> StoredFile:
        resp = self._request("GET", path, params=self._params())
        if resp.status_code == 404:
            raise NotFoundError(f"not found: {path}", status_code=404)
        if not resp.ok:
            raise ContentStoreError(f"GitHub API error: {resp.status_code}", status_code=resp.status_code)

        data = resp.json()
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise ContentStoreError(f"not a file: {path}")
        content = base64.b64decode(data.get("content") or "")
        return StoredFile(path=path, content=content, sha=data["sha"])

    def write(self, path: str, content: bytes, message: str, sha: str | None = None) -> str:
        body = {"message": message, "content": base64.b64encode(content).decode("ascii")}
        if sha:
            body["sha"] = sha

        resp = self._request("PUT", path, json=self._body(body))
        if _is_conflict(resp):
            raise ConflictError(f"revision conflict on {path}", status_code=resp.status_code)
        if not resp.ok:
            raise ContentStoreError(f"GitHub API error: {resp.status_code}", status_code=resp.status_code)

        return resp.json()["content"]["sha"]

    def delete(self, path: str, sha: str, message: str) -> None:
        resp = self._request("DELETE", path, json=self._body({"message": message, "sha": sha}))
        if resp.status_code == 404:
            raise NotFoundError(f"not found: {path}", status_code=404)
        if _is_conflict(resp):
            raise ConflictError(f"revision conflict on {path}", status_code=resp.status_code)
        if not resp.ok:
            raise ContentStoreError(f"Failed to delete: {resp.status_code}", status_code=resp.status_code)

    def list_dir(self, path: str) -> list[DirEntry]:
        resp = self._request("GET", path, params=self._params())
        if resp.status_code == 404:
            raise NotFoundError(f"not found: {path}", status_code=404)
        if not resp.ok:
            raise ContentStoreError(f"GitHub API error: {resp.status_code}", status_code=resp.status_code)

        data = resp.json()
        if not isinstance(data, list):
            raise ContentStoreError(f"not a directory: {path}")
        return [
            DirEntry(name=e["name"], path=e["path"], type=e.get("type", "file"), sha=e["sha"])
            for e in data
        ]
