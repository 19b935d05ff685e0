from __future__ import annotations
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from fitclub.config import settings
from fitclub.db import get_session
from fitclub.services.application_store import SqlApplicationStore
from fitclub.services.card_store import SqlCardQueueStore
from fitclub.services.post_store import SqlPostStore
from fitclub.services.kv_store import build_kv_store
from fitclub.services.signed_urls import SignedUrlCache
from fitclub.services.storage import create_signed_url


def build_signed_url_cache() -> SignedUrlCache:
    return SignedUrlCache(
        build_kv_store(settings.redis_url),
        create_signed_url,
        ttl=settings.signed_url_ttl_seconds,
        refresh_margin=settings.signed_url_refresh_margin_seconds,
        hint_ttl=settings.signed_url_bucket_hint_ttl_seconds,
    )


def get_card_store(session: AsyncSession = Depends(get_session)) -> SqlCardQueueStore:
    return SqlCardQueueStore(session)


def get_application_store(session: AsyncSession = Depends(get_session)) -> SqlApplicationStore:
    return SqlApplicationStore(session)


def get_post_store(session: AsyncSession = Depends(get_session)) -> SqlPostStore:
    return SqlPostStore(session)


def get_signed_url_cache(request: Request) -> SignedUrlCache:
    # Normally built in the app lifespan; built lazily when lifespan did not run
    cache = getattr(request.app.state, "signed_urls", None)
    if cache is None:
        cache = build_signed_url_cache()
        request.app.state.signed_urls = cache
    return cache
