from __future__ import annotations
from datetime import datetime
import structlog
from fitclub.config import settings
from fitclub.services.ranking import top_n, average_score
from fitclub.services.time_windows import previous_week_window_utc, week_id

log = structlog.get_logger()

GENDERS = ("male", "female")


async def record_weekly_winners(store, now: datetime) -> dict:
    """
    Record last week's top body-check post per gender in the hall of fame.
    Posts below settings.weekly_min_votes never win. Re-running for the same week is a no-op.
    """
    tz_name = settings.ranking_timezone
    start_utc, end_utc = previous_week_window_utc(now, tz_name)
    wid = week_id(start_utc, tz_name)

    inserted: list[str] = []
    for gender in GENDERS:
        pool = await store.weekly_entries(gender, start_utc, end_utc)
        winners = top_n(pool, 1, min_votes=settings.weekly_min_votes)
        if not winners:
            log.info("weekly_winner_none", week_id=wid, gender=gender, pool=len(pool))
            continue
        top = winners[0]
        nicknames = await store.nicknames([top.user_id])
        images = await store.first_images([top.id])
        created = await store.add_hall_of_fame({
            "week_id": wid,
            "gender": gender,
            "post_id": top.id,
            "user_id": top.user_id,
            "nickname": nicknames.get(top.user_id),
            "image_path": images.get(top.id),
            "score_sum": top.score,
            "score_avg": average_score(top.score, top.votes),
            "vote_count": top.votes,
        })
        if created:
            inserted.append(gender)
            log.info("weekly_winner_recorded", week_id=wid, gender=gender, post_id=str(top.id), score=top.score)

    return {"ok": True, "week_id": wid, "inserted": inserted, "skipped": not inserted}
