from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Text, DateTime, ForeignKey, Index, UniqueConstraint, func, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from fitclub.db import Base


class DatingCard(Base):
    """
    Open dating card. Cards wait in a FIFO pending pool per sex and are
    promoted into a limited number of public slots.

    Lifecycle:
      pending --promote--> public --expire--> expired (terminal)
                           public --owner accepts an applicant--> hidden (terminal)
    """
    __tablename__ = "dating_cards"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)

    sex: Mapped[str] = mapped_column(String(8), nullable=False)  # male | female
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")  # pending | public | expired | hidden

    display_nickname: Mapped[str] = mapped_column(String(40), nullable=False)
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    region: Mapped[str | None] = mapped_column(String(60), nullable=True)
    intro: Mapped[str | None] = mapped_column(Text(), nullable=True)
    # revealed only to an accepted applicant
    instagram_id: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # object paths inside the card-photo bucket, never full URLs
    photo_paths: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_dating_cards_sex_status_created", "sex", "status", "created_at"),
        Index(
            "uq_dating_cards_one_open_per_user", "owner_user_id", unique=True,
            postgresql_where=text("status IN ('pending','public')"),
        ),
    )


class DatingCardApplication(Base):
    """
    A user's application to a public card. The card owner accepts or rejects it;
    the applicant may cancel while it is still submitted.

      submitted --> accepted | rejected | canceled

    Accepting one application hides the card and rejects the other submitted ones.
    """
    __tablename__ = "dating_card_applications"

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    card_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("dating_cards.id", ondelete="CASCADE"), index=True, nullable=False)
    applicant_user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), index=True, nullable=False)

    age: Mapped[int] = mapped_column(Integer, nullable=False)
    height_cm: Mapped[int] = mapped_column(Integer, nullable=False)
    training_years: Mapped[int] = mapped_column(Integer, nullable=False)
    region: Mapped[str] = mapped_column(String(30), nullable=False, default="")
    job: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    intro_text: Mapped[str] = mapped_column(Text(), nullable=False)
    instagram_id: Mapped[str] = mapped_column(String(30), nullable=False)
    photo_paths: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)

    status: Mapped[str] = mapped_column(String(16), nullable=False, default="submitted")  # submitted | accepted | rejected | canceled
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("card_id", "applicant_user_id", name="uq_dating_card_applications_once_per_card"),
        Index("ix_dating_card_applications_applicant_created", "applicant_user_id", "created_at"),
    )
