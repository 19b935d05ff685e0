from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from fitclub.config import settings
from fitclub.deps import get_signed_url_cache
from fitclub.services.signed_urls import SignedUrlCache

router = APIRouter(prefix="/i", tags=["media"])


def candidate_buckets(bucket: str) -> list[str]:
    # Legacy card photos were written to the old dating bucket
    if bucket == settings.s3_bucket_card_photos:
        return [bucket, settings.s3_bucket_legacy_photos]
    return [bucket]


@router.get("/signed/{bucket}/{path:path}")
async def signed_media(bucket: str, path: str, cache: SignedUrlCache = Depends(get_signed_url_cache)):
    allowed = {settings.s3_bucket_uploads, settings.s3_bucket_card_photos, settings.s3_bucket_legacy_photos}
    if bucket not in allowed or not path or ".." in path.split("/"):
        raise HTTPException(status_code=404, detail="Not Found")

    res = await cache.resolve_any(path, candidate_buckets(bucket))
    if not res.url:
        raise HTTPException(status_code=404, detail="Not Found")
    return RedirectResponse(res.url, status_code=307, headers={"Cache-Control": "no-store", "X-Cache": res.cache_status})
