from __future__ import annotations
from urllib.parse import quote
from fastapi import APIRouter, Depends, Query

from fitclub.config import settings
from fitclub.deps import get_post_store
from fitclub.schemas.ranking import HallOfFameEntry

router = APIRouter(prefix="/hall-of-fame", tags=["rankings"])


def media_url(bucket: str, path: str | None) -> str | None:
    if not path:
        return None
    return f"/i/signed/{quote(bucket, safe='')}/{quote(path)}"


@router.get("", response_model=list[HallOfFameEntry])
async def list_hall_of_fame(
    limit: int = Query(default=30, ge=1, le=100),
    store=Depends(get_post_store),
):
    rows = await store.list_hall_of_fame(limit)
    return [
        HallOfFameEntry(
            week_id=r.week_id,
            gender=r.gender,
            post_id=r.post_id,
            user_id=r.user_id,
            nickname=r.nickname,
            image_url=media_url(settings.s3_bucket_uploads, r.image_path),
            score_sum=r.score_sum,
            score_avg=r.score_avg,
            vote_count=r.vote_count,
            created_at=r.created_at,
        )
        for r in rows
    ]
