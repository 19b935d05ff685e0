from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from datetime import datetime, timezone
from fitclub.config import settings
from fitclub.deps import get_signed_url_cache
from fitclub.services.signed_urls import SignedUrlCache
from fitclub.services.time_windows import week_window_utc, week_id

router = APIRouter(tags=["system"])

@router.get("/health")
async def health(request: Request, cache: SignedUrlCache = Depends(get_signed_url_cache)):
    now = datetime.now(timezone.utc)
    start_utc, _ = week_window_utc(now, settings.ranking_timezone)
    return {
        "status": "ok",
        "env": settings.environment,
        "time": now.isoformat(),
        "ranking_week": week_id(start_utc, settings.ranking_timezone),
        "kv_store": type(cache.kv).__name__,
        "request_id": request.headers.get("x-request-id") or request.state.request_id,
    }

@router.get("/version")
async def version():
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "git_sha": settings.git_sha,
    }
