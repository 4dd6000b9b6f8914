from __future__ import annotations

import logging
import re
import time
from datetime import datetime, timezone

from pydantic import ValidationError

from app.auth.tokens import Clock
from app.config import Settings
from app.content.github import ContentStore
from app.content.save import put_binary, save_file
from app.errors import ContentStoreError, NotFoundError
from app.models.enums import UpdateStatus
from app.models.update import Update, UpdateIndex, UpdateIndexEntry

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.json"
MAX_SLUG_LENGTH = 60

def generate_slug(title: str, existing: list[str] | set[str]) -> str:
    base = re.sub(r"[^a-z0-9\s-]", "", title.lower()).strip()
    base = re.sub(r"\s+", "-", base)
    base = re.sub(r"-+", "-", base)
    base = base[:MAX_SLUG_LENGTH].rstrip("-") or "update"

    taken = set(existing)
    if base not in taken:
        return base

    n = 2
    while f"{base}-{n}" in taken:
        n += 1
    return f"{base}-{n}"

def iso_now(clock: Clock = time.time) -> str:
    dt = datetime.fromtimestamp(clock(), tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")

def _dump(model) -> bytes:
    return model.model_dump_json(by_alias=True, indent=2).encode("utf-8")

class UpdatesRepository:
    """Updates stored as one JSON file per slug, plus a published-only index."""

    def __init__(self, store: ContentStore, config: Settings, clock: Clock = time.time):
        self.store = store
        self.data_path = config.updates_data_path.rstrip("/")
        self.images_path = config.images_path.rstrip("/")
        self.public_images_prefix = config.public_images_prefix.rstrip("/")
        self.author = config.admin_author
        self.max_attempts = config.save_max_attempts
        self.clock = clock

    def update_path(self, slug: str) -> str:
        return f"{self.data_path}/{slug}.json"

    @property
    def index_path(self) -> str:
        return f"{self.data_path}/{INDEX_FILENAME}"

    def image_path(self, slug: str, filename: str) -> str:
        return f"{self.images_path}/{slug}/{filename}"

    def public_image_path(self, slug: str, filename: str) -> str:
        return f"{self.public_images_prefix}/{slug}/{filename}"

    def list_updates(self) -> list[Update]:
        try:
            entries = self.store.list_dir(self.data_path)
        except NotFoundError:
            return []

        updates: list[Update] = []
        for entry in entries:
            if entry.type != "file" or not entry.name.endswith(".json") or entry.name == INDEX_FILENAME:
                continue
            try:
                updates.append(Update.model_validate_json(self.store.read(entry.path).content))
            except (ContentStoreError, ValidationError):
                logger.warning("skipping unreadable update file %s", entry.path)

        # most recently edited first
        return sorted(updates, key=lambda u: u.edited_date, reverse=True)

    def get_update(self, slug: str) -> Update | None:
        try:
            f = self.store.read(self.update_path(slug))
        except NotFoundError:
            return None
        try:
            return Update.model_validate_json(f.content)
        except ValidationError:
            logger.warning("update file for %s is malformed", slug)
            return None

    def save_update(
        self,
        title: str,
        content: str,
        status: UpdateStatus,
        excerpt: str = "",
        slug: str | None = None,
    ) -> tuple[Update, bool]:
        now = iso_now(self.clock)
        is_new = not slug
        images: list[str] = []

        if is_new:
            slug = generate_slug(title, [u.slug for u in self.list_updates()])
            published_date = now if status == UpdateStatus.published else ""
        else:
            existing = self.get_update(slug)
            # publishedDate is only ever set once
            if existing and existing.published_date:
                published_date = existing.published_date
            elif status == UpdateStatus.published:
                published_date = now
            else:
                published_date = ""
            images = list(existing.images) if existing else []

        update = Update(
            slug=slug,
            title=title,
            excerpt=excerpt,
            content=content,
            status=status,
            published_date=published_date,
            edited_date=now,
            author=self.author,
            images=images,
        )
        verb = "Create" if is_new else "Update"
        save_file(self.store, self.update_path(slug), _dump(update), f"{verb} update: {slug}", self.max_attempts)
        self.refresh_index()
        return update, is_new

    def build_index(self, updates: list[Update]) -> UpdateIndex:
        published = [u for u in updates if u.status == UpdateStatus.published]
        published.sort(key=lambda u: u.published_date, reverse=True)
        return UpdateIndex(
            updates=[
                UpdateIndexEntry(slug=u.slug, title=u.title, excerpt=u.excerpt, published_date=u.published_date)
                for u in published
            ]
        )

    def refresh_index(self) -> None:
        # the update file is already saved; a stale index is repaired by the next save
        try:
            index = self.build_index(self.list_updates())
            save_file(self.store, self.index_path, _dump(index), "Rebuild updates index", self.max_attempts)
        except ContentStoreError:
            logger.exception("failed to rebuild updates index")

    def delete_update(self, slug: str) -> None:
        path = self.update_path(slug)
        f = self.store.read(path)
        self.store.delete(path, f.sha, f"Delete update: {slug}")
        self.delete_images(slug)
        self.refresh_index()

    def delete_images(self, slug: str) -> None:
        try:
            entries = self.store.list_dir(f"{self.images_path}/{slug}")
        except ContentStoreError:
            return

        for entry in entries:
            try:
                self.store.delete(entry.path, entry.sha, f"Delete image from update: {slug}")
            except ContentStoreError:
                logger.error("failed to delete image %s for update %s", entry.name, slug)

    def add_image(self, slug: str, filename: str, data: bytes) -> str:
        put_binary(self.store, self.image_path(slug, filename), data, f"Add image to update: {slug}")
        public = self.public_image_path(slug, filename)

        update = self.get_update(slug)
        if update is not None and public not in update.images:
            update = update.model_copy(update={"images": [*update.images, public]})
            save_file(self.store, self.update_path(slug), _dump(update), f"Update update: {slug}", self.max_attempts)
        return public

    def remove_image(self, slug: str, filename: str) -> None:
        path = self.image_path(slug, filename)
        f = self.store.read(path)
        self.store.delete(path, f.sha, f"Delete image from update: {slug}")

        public = self.public_image_path(slug, filename)
        update = self.get_update(slug)
        if update is not None and public in update.images:
            update = update.model_copy(update={"images": [i for i in update.images if i != public]})
            save_file(self.store, self.update_path(slug), _dump(update), f"Update update: {slug}", self.max_attempts)
