from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends, Query

from fitclub.auth_deps import get_current_user_id
from fitclub.config import settings
from fitclub.deps import get_post_store
from fitclub.schemas.ranking import Gender, RankingItem, WeeklyRanking, MyWeeklyRank, WeekRange
from fitclub.services.ranking import ScoredEntry, top_n, rank_of, best_entry, average_score
from fitclub.services.time_windows import week_window_utc

router = APIRouter(prefix="/rankings", tags=["rankings"])


def to_item(rank: int, e: ScoredEntry, nickname: str | None = None) -> RankingItem:
    return RankingItem(
        rank=rank,
        id=e.id,
        user_id=e.user_id,
        title=e.title,
        gender=e.gender,
        score_sum=e.score,
        vote_count=e.votes,
        average_score=average_score(e.score, e.votes),
        created_at=e.created_at,
        nickname=nickname,
    )


@router.get("/weekly-bodycheck", response_model=WeeklyRanking)
async def weekly_bodycheck(
    gender: Gender = Query(...),
    top: int = Query(default=1, ge=1, le=50),
    store=Depends(get_post_store),
):
    start_utc, end_utc = week_window_utc(datetime.now(dt_tz.utc), settings.ranking_timezone)
    pool = await store.weekly_entries(gender, start_utc, end_utc)
    best = top_n(pool, top, min_votes=settings.weekly_min_votes)
    nicknames = await store.nicknames([e.user_id for e in best])
    return WeeklyRanking(
        items=[to_item(i, e, nicknames.get(e.user_id)) for i, e in enumerate(best, start=1)],
        range=WeekRange(start_utc=start_utc, end_utc=end_utc),
    )


@router.get("/my-weekly-bodycheck", response_model=MyWeeklyRank)
async def my_weekly_bodycheck(
    store=Depends(get_post_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    start_utc, end_utc = week_window_utc(datetime.now(dt_tz.utc), settings.ranking_timezone)
    week = WeekRange(start_utc=start_utc, end_utc=end_utc)

    mine = best_entry(await store.user_entries(user_id, start_utc, end_utc))
    if mine is None:
        return MyWeeklyRank(has_post=False, week=week)

    # Own position is measured against the whole pool, including low-vote posts
    pool = await store.weekly_entries(mine.gender, start_utc, end_utc)
    position = rank_of(pool, mine.id)
    if position is None:
        # the post was hidden or moved between the two reads
        return MyWeeklyRank(has_post=False, week=week)
    rank, total = position
    return MyWeeklyRank(has_post=True, week=week, rank=rank, total=total, post=to_item(rank, mine))
