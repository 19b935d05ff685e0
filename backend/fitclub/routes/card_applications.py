from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
import structlog

from fitclub.auth_deps import get_current_user_id
from fitclub.config import settings
from fitclub.deps import get_application_store, get_card_store, get_signed_url_cache
from fitclub.models.dating_card import DatingCardApplication
from fitclub.routes.dating_cards import _photo_urls, _pub
from fitclub.schemas.dating_card import (
    ApplicationCreate, ApplicationCreated, ApplicationPublic, ApplicationStatusResult, ApplicationStatusUpdate,
    Connection, ConnectionList, ReceivedApplications,
)
from fitclub.services.card_queue import sync_queue
from fitclub.services.signed_urls import SignedUrlCache
from fitclub.services.time_windows import day_window_utc

router = APIRouter(prefix="/dating/cards", tags=["dating-card-applications"])
log = structlog.get_logger()


async def _app_pub(cache: SignedUrlCache, app: DatingCardApplication, show_instagram: bool) -> ApplicationPublic:
    return ApplicationPublic(
        id=app.id,
        card_id=app.card_id,
        applicant_user_id=app.applicant_user_id,
        age=app.age,
        height_cm=app.height_cm,
        training_years=app.training_years,
        region=app.region,
        job=app.job,
        intro_text=app.intro_text,
        status=app.status,
        created_at=app.created_at,
        instagram_id=app.instagram_id if show_instagram else None,
        photo_urls=await _photo_urls(cache, app.photo_paths or []),
    )


@router.post("/apply", response_model=ApplicationCreated, status_code=201)
async def apply_to_card(
    payload: ApplicationCreate,
    cards=Depends(get_card_store),
    apps=Depends(get_application_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    now = datetime.now(dt_tz.utc)
    # a card whose 48h just ran out must not take applications
    await sync_queue(cards, now)
    card = await cards.get(payload.card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")
    if card.status != "public":
        raise HTTPException(status_code=400, detail="Only cards on the board accept applications")
    if card.owner_user_id == user_id:
        raise HTTPException(status_code=400, detail="You cannot apply to your own card")

    own_prefix = f"card-applications/{user_id}/"
    if any(not p.startswith(own_prefix) for p in payload.photo_paths):
        raise HTTPException(status_code=400, detail="Photos must be uploaded for this application")

    start, end = day_window_utc(now, settings.ranking_timezone)
    if await apps.count_by_applicant(user_id, start, end) >= settings.card_applications_per_day:
        raise HTTPException(status_code=429, detail="Daily application limit reached")

    try:
        app = await apps.add(DatingCardApplication(
            card_id=card.id,
            applicant_user_id=user_id,
            age=payload.age,
            height_cm=payload.height_cm,
            training_years=payload.training_years,
            region=payload.region,
            job=payload.job,
            intro_text=payload.intro_text,
            instagram_id=payload.instagram_id,
            photo_paths=payload.photo_paths,
            status="submitted",
        ))
    except IntegrityError:
        raise HTTPException(status_code=409, detail="You already applied to this card")
    log.info("card_application_created", application_id=str(app.id), card_id=str(card.id))
    return ApplicationCreated(id=app.id)


@router.get("/my/received", response_model=ReceivedApplications)
async def list_received_applications(
    cards=Depends(get_card_store),
    apps=Depends(get_application_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
    cache: SignedUrlCache = Depends(get_signed_url_cache),
):
    now = datetime.now(dt_tz.utc)
    await sync_queue(cards, now)
    mine = await cards.list_for_owner(user_id)
    received = await apps.list_for_cards([c.id for c in mine])
    return ReceivedApplications(
        cards=[_pub(c, now, await _photo_urls(cache, c.photo_paths or [])) for c in mine],
        applications=[await _app_pub(cache, a, show_instagram=a.status == "accepted") for a in received],
    )


@router.get("/my/applied", response_model=list[ApplicationPublic])
async def list_my_applications(
    apps=Depends(get_application_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
    cache: SignedUrlCache = Depends(get_signed_url_cache),
):
    return [await _app_pub(cache, a, show_instagram=True) for a in await apps.list_for_applicant(user_id)]


@router.patch("/applications/{application_id}", response_model=ApplicationStatusResult)
async def update_application_status(
    application_id: uuid.UUID,
    payload: ApplicationStatusUpdate,
    cards=Depends(get_card_store),
    apps=Depends(get_application_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    app = await apps.get(application_id)
    if app is None:
        raise HTTPException(status_code=404, detail="Application not found")
    card = await cards.get(app.card_id)
    if card is None:
        raise HTTPException(status_code=404, detail="Card not found")

    if payload.status == "canceled":
        if app.applicant_user_id != user_id:
            raise HTTPException(status_code=403, detail="Only the applicant can cancel")
    elif card.owner_user_id != user_id:
        raise HTTPException(status_code=403, detail="Only the card owner can decide")
    if app.status != "submitted":
        raise HTTPException(status_code=409, detail=f"Application already {app.status}")

    if payload.status == "accepted":
        ok = await apps.accept(app, datetime.now(dt_tz.utc))
    else:
        ok = await apps.set_status(app.id, payload.status)
    if not ok:
        raise HTTPException(status_code=409, detail="Application was already decided")

    log.info("card_application_status", application_id=str(app.id), status=payload.status)
    return ApplicationStatusResult(status=payload.status, card_hidden=payload.status == "accepted")


@router.get("/my/connections", response_model=ConnectionList)
async def list_connections(
    cards=Depends(get_card_store),
    apps=Depends(get_application_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    items: list[Connection] = []

    mine = {c.id: c for c in await cards.list_for_owner(user_id)}
    as_owner = await apps.list_for_cards(list(mine), status="accepted")
    nicknames = await apps.nicknames(a.applicant_user_id for a in as_owner)
    for a in as_owner:
        items.append(Connection(
            application_id=a.id,
            card_id=a.card_id,
            created_at=a.created_at,
            role="owner",
            other_user_id=a.applicant_user_id,
            other_nickname=nicknames.get(a.applicant_user_id) or "anonymous",
            my_instagram_id=mine[a.card_id].instagram_id,
            other_instagram_id=a.instagram_id,
        ))

    as_applicant = await apps.list_for_applicant(user_id, status="accepted")
    theirs = await cards.get_many([a.card_id for a in as_applicant])
    for a in as_applicant:
        card = theirs.get(a.card_id)
        if card is None:
            continue
        items.append(Connection(
            application_id=a.id,
            card_id=a.card_id,
            created_at=a.created_at,
            role="applicant",
            other_user_id=card.owner_user_id,
            other_nickname=card.display_nickname or "anonymous",
            my_instagram_id=a.instagram_id,
            other_instagram_id=card.instagram_id,
        ))

    items.sort(key=lambda c: c.created_at, reverse=True)
    return ConnectionList(items=items)
