from __future__ import annotations

import logging

from app.content.github import ContentStore
from app.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

def current_sha(store: ContentStore, path: str) -> str | None:
    # None means "create"; any other read failure propagates
    try:
        return store.read(path).sha
    except NotFoundError:
        return None

def save_file(store: ContentStore, path: str, content: bytes, message: str, max_attempts: int = 2) -> str:
    """Optimistic read-sha-then-write; a stale sha re-reads and retries.

    Bounded: after max_attempts conflicts the ConflictError is raised. Returns
    the new revision tag.
    """
    attempt = 0
    while True:
        attempt += 1
        sha = current_sha(store, path)
        try:
            return store.write(path, content, message, sha)
        except ConflictError:
            if attempt >= max_attempts:
                logger.error("giving up on %s after %d conflicting writes", path, attempt)
                raise
            logger.warning("revision conflict writing %s, retrying with a fresh read", path)

def put_binary(store: ContentStore, path: str, content: bytes, message: str) -> str:
    # images: overwrite is fine, no conflict retry
    return store.write(path, content, message, current_sha(store, path))
