from __future__ import annotations

import time

from fastapi import Depends

from app.auth.tokens import Clock
from app.config import Settings, settings
from app.content.github import ContentStore, GitHubContentStore
from app.content.updates import UpdatesRepository
from app.mailer import EmailSender
from app.redis_client import TokenStore, token_store

def get_settings() -> Settings:
    return settings

def get_clock() -> Clock:
    return time.time

def get_token_store() -> TokenStore:
    return token_store

def get_content_store(config: Settings = Depends(get_settings)) -> ContentStore:
    return GitHubContentStore(config)

def get_email_sender(config: Settings = Depends(get_settings)) -> EmailSender:
    return EmailSender(config)

def get_updates_repository(
    store: ContentStore = Depends(get_content_store),
    config: Settings = Depends(get_settings),
    clock: Clock = Depends(get_clock),
) -> UpdatesRepository:
    return UpdatesRepository(store, config, clock)
