from __future__ import annotations
import uuid
from typing import Literal
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
import structlog

from fitclub.auth_deps import get_current_user_id
from fitclub.config import settings
from fitclub.deps import get_card_store, get_signed_url_cache
from fitclub.models.dating_card import DatingCard
from fitclub.schemas.dating_card import CardCreate, CardPublic, CardSex, QueueStats, UploadResult
from fitclub.services.card_queue import queue_stats, sync_queue
from fitclub.services.media import validate_image, ext_for_mime
from fitclub.services.signed_urls import SignedUrlCache
from fitclub.services.storage import put_bytes, ensure_bucket
from fitclub.services.time_windows import remaining_label

router = APIRouter(prefix="/dating/cards", tags=["dating-cards"])
log = structlog.get_logger()


def photo_buckets() -> list[str]:
    # Older card photos may still live in the legacy bucket
    return [settings.s3_bucket_card_photos, settings.s3_bucket_legacy_photos]


async def _photo_urls(cache: SignedUrlCache, paths: list[str]) -> list[str]:
    urls = []
    for path in paths:
        res = await cache.resolve_any(path, photo_buckets())
        if res.url:
            urls.append(res.url)
    return urls


def _pub(card: DatingCard, now: datetime, photo_urls: list[str] | None = None, queue_position: int | None = None) -> CardPublic:
    return CardPublic(
        id=card.id,
        sex=card.sex,
        status=card.status,
        display_nickname=card.display_nickname,
        age=card.age,
        region=card.region,
        intro=card.intro,
        photo_urls=photo_urls or [],
        created_at=card.created_at,
        published_at=card.published_at,
        expires_at=card.expires_at,
        remaining=remaining_label(card.expires_at, now) if card.status == "public" and card.expires_at else None,
        queue_position=queue_position,
    )


@router.get("/queue-stats", response_model=QueueStats)
async def get_queue_stats(store=Depends(get_card_store)):
    return await queue_stats(store, datetime.now(dt_tz.utc))


@router.get("/public", response_model=list[CardPublic])
async def list_public_cards(
    sex: CardSex = Query(...),
    limit: int = Query(default=30, ge=1, le=100),
    store=Depends(get_card_store),
    cache: SignedUrlCache = Depends(get_signed_url_cache),
):
    now = datetime.now(dt_tz.utc)
    # Query-time sync keeps the board fresh between cron runs
    await sync_queue(store, now)
    cards = await store.list_public(sex, now, limit)
    return [_pub(c, now, await _photo_urls(cache, c.photo_paths or [])) for c in cards]


@router.get("/my", response_model=list[CardPublic])
async def list_my_cards(
    store=Depends(get_card_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
    cache: SignedUrlCache = Depends(get_signed_url_cache),
):
    now = datetime.now(dt_tz.utc)
    await sync_queue(store, now)
    out = []
    for c in await store.list_for_owner(user_id):
        out.append(_pub(c, now, await _photo_urls(cache, c.photo_paths or []), await store.queue_position(c)))
    return out


@router.post("", response_model=CardPublic, status_code=201)
async def create_card(
    payload: CardCreate,
    store=Depends(get_card_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    now = datetime.now(dt_tz.utc)
    await sync_queue(store, now)
    if await store.has_open_card(user_id):
        raise HTTPException(status_code=409, detail="You already have a card in the queue or on the board")

    try:
        card = await store.add(DatingCard(
            owner_user_id=user_id,
            sex=payload.sex,
            status="pending",
            display_nickname=payload.display_nickname,
            age=payload.age,
            region=payload.region,
            intro=payload.intro,
            photo_paths=payload.photo_paths,
            instagram_id=payload.instagram_id,
        ))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="You already have a card in the queue or on the board")
    log.info("open_card_created", card_id=str(card.id), sex=card.sex)

    # A free slot publishes the new card right away
    await sync_queue(store, now)
    card = await store.get(card.id)
    return _pub(card, now, queue_position=await store.queue_position(card))


@router.post("/upload", response_model=UploadResult, status_code=201)
async def upload_card_photo(
    image: UploadFile = File(...),
    purpose: Literal["card", "application"] = Query(default="card"),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    data = await image.read()
    try:
        mime = validate_image(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid image: {e}")

    bucket = settings.s3_bucket_card_photos
    prefix = "cards" if purpose == "card" else "card-applications"
    path = f"{prefix}/{user_id}/{uuid.uuid4().hex}.{ext_for_mime(mime)}"
    await run_in_threadpool(ensure_bucket, bucket)
    await run_in_threadpool(put_bytes, bucket, path, data, mime)
    return UploadResult(path=path, mime_type=mime)
