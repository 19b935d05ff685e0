from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Float, Text, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from fitclub.db import Base


class HallOfFame(Base):
    """One weekly body-check winner per (week, gender). Rows are never rewritten."""
    __tablename__ = "hall_of_fame"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    week_id: Mapped[str] = mapped_column(String(10), nullable=False)  # local Monday, e.g. '2025-01-06'
    gender: Mapped[str] = mapped_column(String(8), nullable=False)
    post_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    nickname: Mapped[str | None] = mapped_column(String(40), nullable=True)
    image_path: Mapped[str | None] = mapped_column(Text(), nullable=True)
    score_sum: Mapped[int] = mapped_column(Integer, nullable=False)
    score_avg: Mapped[float] = mapped_column(Float, nullable=False)
    vote_count: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("week_id", "gender", name="uq_hall_of_fame_week_gender"),
    )
