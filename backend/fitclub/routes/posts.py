from __future__ import annotations
import uuid
from fastapi import APIRouter, Depends, HTTPException
import structlog

from fitclub.auth_deps import get_current_user_id
from fitclub.deps import get_post_store
from fitclub.schemas.ranking import VoteCreate, VoteSummary
from fitclub.services.post_store import BODYCHECK
from fitclub.services.ranking import average_score

router = APIRouter(prefix="/posts", tags=["posts"])
log = structlog.get_logger()


@router.post("/{post_id}/vote", response_model=VoteSummary)
async def cast_vote(
    post_id: uuid.UUID,
    payload: VoteCreate,
    store=Depends(get_post_store),
    user_id: uuid.UUID = Depends(get_current_user_id),
):
    post = await store.get_post(post_id)
    if not post or post.is_deleted:
        raise HTTPException(status_code=404, detail="Post not found")
    if post.type != BODYCHECK:
        raise HTTPException(status_code=400, detail="Only photo body-check posts can be rated")
    if post.user_id == user_id:
        raise HTTPException(status_code=403, detail="Cannot vote on your own post")

    post = await store.cast_vote(post, user_id, payload.rating)
    log.info("bodycheck_vote", post_id=str(post.id), rating=payload.rating, vote_count=post.vote_count)
    return VoteSummary(
        score_sum=post.score_sum,
        vote_count=post.vote_count,
        great_count=post.great_count,
        good_count=post.good_count,
        normal_count=post.normal_count,
        rookie_count=post.rookie_count,
        average_score=average_score(post.score_sum, post.vote_count),
    )
