from __future__ import annotations
from pydantic import BaseModel
from typing import Literal
from uuid import UUID
from datetime import datetime

Gender = Literal["male", "female"]
Rating = Literal["great", "good", "normal", "rookie"]


class VoteCreate(BaseModel):
    rating: Rating


class VoteSummary(BaseModel):
    score_sum: int
    vote_count: int
    great_count: int
    good_count: int
    normal_count: int
    rookie_count: int
    average_score: float


class WeekRange(BaseModel):
    start_utc: datetime
    end_utc: datetime


class RankingItem(BaseModel):
    rank: int
    id: UUID
    user_id: UUID
    title: str
    gender: Gender | None = None
    score_sum: int
    vote_count: int
    average_score: float
    created_at: datetime
    nickname: str | None = None


class WeeklyRanking(BaseModel):
    items: list[RankingItem]
    range: WeekRange


class MyWeeklyRank(BaseModel):
    has_post: bool
    week: WeekRange
    rank: int | None = None
    total: int | None = None
    post: RankingItem | None = None


class HallOfFameEntry(BaseModel):
    week_id: str
    gender: Gender
    post_id: UUID
    user_id: UUID
    nickname: str | None = None
    image_url: str | None = None  # proxied through /i/signed, never a raw storage URL
    score_sum: int
    score_avg: float
    vote_count: int
    created_at: datetime
