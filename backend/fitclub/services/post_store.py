from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession
from fitclub.models.post import Post, BodycheckVote, Profile
from fitclub.models.hall_of_fame import HallOfFame
from fitclub.services.ranking import ScoredEntry

BODYCHECK = "photo_bodycheck"

RATING_SCORES: dict[str, int] = {"great": 4, "good": 3, "normal": 2, "rookie": 1}


def _entry(p: Post) -> ScoredEntry:
    return ScoredEntry(
        id=p.id, user_id=p.user_id, score=int(p.score_sum or 0), votes=int(p.vote_count or 0),
        created_at=p.created_at, gender=p.gender, title=p.title,
    )


def _visible_bodycheck():
    return (
        select(Post)
        .where(Post.type == BODYCHECK)
        .where(Post.is_hidden.is_(False))
        .where(Post.is_deleted.is_(False))
    )


class SqlPostStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def weekly_entries(self, gender: str, start_utc: datetime, end_utc: datetime) -> list[ScoredEntry]:
        rows = (await self.session.execute(
            _visible_bodycheck()
            .where(Post.gender == gender)
            .where(Post.created_at >= start_utc, Post.created_at < end_utc)
        )).scalars().all()
        return [_entry(p) for p in rows]

    async def user_entries(self, user_id: uuid.UUID, start_utc: datetime, end_utc: datetime) -> list[ScoredEntry]:
        rows = (await self.session.execute(
            _visible_bodycheck()
            .where(Post.user_id == user_id)
            .where(Post.created_at >= start_utc, Post.created_at < end_utc)
        )).scalars().all()
        return [_entry(p) for p in rows]

    async def nicknames(self, user_ids: list[uuid.UUID]) -> dict[uuid.UUID, str | None]:
        if not user_ids:
            return {}
        rows = (await self.session.execute(
            select(Profile).where(Profile.user_id.in_(set(user_ids)))
        )).scalars().all()
        return {p.user_id: p.nickname for p in rows}

    async def first_images(self, post_ids: list[uuid.UUID]) -> dict[uuid.UUID, str | None]:
        if not post_ids:
            return {}
        rows = (await self.session.execute(select(Post.id, Post.images).where(Post.id.in_(set(post_ids))))).all()
        return {pid: (images[0] if images else None) for pid, images in rows}

    async def get_post(self, post_id: uuid.UUID) -> Post | None:
        return await self.session.get(Post, post_id)

    async def cast_vote(self, post: Post, user_id: uuid.UUID, rating: str) -> Post:
        """Upsert the user's vote, then recompute the post's denormalized stats in the same transaction."""
        score = RATING_SCORES[rating]
        stmt = pg_insert(BodycheckVote).values(
            id=uuid.uuid4(), post_id=post.id, user_id=user_id, rating=rating, score=score,
        ).on_conflict_do_update(
            constraint="uq_bodycheck_vote_once_per_user",
            set_={"rating": rating, "score": score},
        )
        await self.session.execute(stmt)

        stats = (await self.session.execute(
            select(
                func.coalesce(func.sum(BodycheckVote.score), 0),
                func.count(),
                func.count().filter(BodycheckVote.rating == "great"),
                func.count().filter(BodycheckVote.rating == "good"),
                func.count().filter(BodycheckVote.rating == "normal"),
                func.count().filter(BodycheckVote.rating == "rookie"),
            ).where(BodycheckVote.post_id == post.id)
        )).one()
        post.score_sum, post.vote_count, post.great_count, post.good_count, post.normal_count, post.rookie_count = (
            int(v or 0) for v in stats
        )
        await self.session.commit()
        await self.session.refresh(post)
        return post

    async def add_hall_of_fame(self, row: dict) -> bool:
        """Idempotent on (week_id, gender). Returns False when the week was already recorded."""
        res = await self.session.execute(
            pg_insert(HallOfFame).values(id=uuid.uuid4(), **row)
            .on_conflict_do_nothing(constraint="uq_hall_of_fame_week_gender")
            .returning(HallOfFame.id)
        )
        inserted = res.scalar_one_or_none() is not None
        await self.session.commit()
        return inserted

    async def list_hall_of_fame(self, limit: int) -> list[HallOfFame]:
        return list((await self.session.execute(
            select(HallOfFame).order_by(HallOfFame.week_id.desc(), HallOfFame.gender.asc()).limit(limit)
        )).scalars().all())
