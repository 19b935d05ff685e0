from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends
import structlog

from fitclub.auth_deps import require_cron
from fitclub.deps import get_card_store, get_post_store
from fitclub.services.card_queue import sweep_expired, sync_queue
from fitclub.services.weekly_winners import record_weekly_winners

router = APIRouter(prefix="/cron", tags=["cron"], dependencies=[Depends(require_cron)])
log = structlog.get_logger()


@router.get("/dating-cards-expire")
async def expire_dating_cards(store=Depends(get_card_store)):
    expired = await sweep_expired(store, datetime.now(dt_tz.utc))
    return {"ok": True, "expired_count": len(expired)}


@router.get("/dating-cards-sync")
async def sync_dating_cards(store=Depends(get_card_store)):
    res = await sync_queue(store, datetime.now(dt_tz.utc))
    return {
        "ok": True,
        "expired_ids": [str(i) for i in res.expired_ids],
        "promoted": {sex: [str(i) for i in ids] for sex, ids in res.promoted.items()},
    }


@router.get("/weekly-winners")
async def weekly_winners(store=Depends(get_post_store)):
    return await record_weekly_winners(store, datetime.now(dt_tz.utc))
