from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fitclub.models.dating_card import DatingCard


class SqlCardQueueStore:
    """CardQueueStore over the dating_cards table. Every mutation commits on its own."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def count_public(self, sex: str, now: datetime) -> int:
        total = await self.session.scalar(
            select(func.count()).select_from(DatingCard)
            .where(DatingCard.sex == sex)
            .where(DatingCard.status == "public")
            .where(DatingCard.expires_at > now)
        )
        return int(total or 0)

    async def count_pending(self, sex: str) -> int:
        total = await self.session.scalar(
            select(func.count()).select_from(DatingCard)
            .where(DatingCard.sex == sex, DatingCard.status == "pending")
        )
        return int(total or 0)

    async def oldest_pending(self, sex: str) -> uuid.UUID | None:
        return await self.session.scalar(
            select(DatingCard.id)
            .where(DatingCard.sex == sex, DatingCard.status == "pending")
            .order_by(DatingCard.created_at.asc())
            .limit(1)
        )

    async def claim_pending(self, card_id: uuid.UUID, published_at: datetime, expires_at: datetime) -> bool:
        # Compare-and-swap: only a card still pending is flipped
        res = await self.session.execute(
            update(DatingCard)
            .where(DatingCard.id == card_id, DatingCard.status == "pending")
            .values(status="public", published_at=published_at, expires_at=expires_at)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return res.rowcount == 1

    async def expire_due(self, now: datetime) -> list[uuid.UUID]:
        rows = (await self.session.execute(
            update(DatingCard)
            .where(DatingCard.status == "public", DatingCard.expires_at <= now)
            .values(status="expired")
            .returning(DatingCard.id)
            .execution_options(synchronize_session=False)
        )).scalars().all()
        await self.session.commit()
        return list(rows)

    async def queue_position(self, card: DatingCard) -> int | None:
        """1-based position among pending cards of the same sex, None when not pending."""
        if card.status != "pending":
            return None
        ahead = await self.session.scalar(
            select(func.count()).select_from(DatingCard)
            .where(DatingCard.sex == card.sex, DatingCard.status == "pending")
            .where(DatingCard.created_at < card.created_at)
        )
        return int(ahead or 0) + 1

    async def list_public(self, sex: str, now: datetime, limit: int) -> list[DatingCard]:
        return list((await self.session.execute(
            select(DatingCard)
            .where(DatingCard.sex == sex, DatingCard.status == "public", DatingCard.expires_at > now)
            .order_by(DatingCard.published_at.desc())
            .limit(limit)
        )).scalars().all())

    async def list_for_owner(self, user_id: uuid.UUID) -> list[DatingCard]:
        return list((await self.session.execute(
            select(DatingCard).where(DatingCard.owner_user_id == user_id).order_by(DatingCard.created_at.desc())
        )).scalars().all())

    async def has_open_card(self, user_id: uuid.UUID) -> bool:
        found = await self.session.scalar(
            select(DatingCard.id)
            .where(DatingCard.owner_user_id == user_id, DatingCard.status.in_(("pending", "public")))
            .limit(1)
        )
        return found is not None

    async def get(self, card_id: uuid.UUID) -> DatingCard | None:
        # bulk updates above skip the identity map, so reload from the row
        return await self.session.get(DatingCard, card_id, populate_existing=True)

    async def add(self, card: DatingCard) -> DatingCard:
        self.session.add(card)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        await self.session.refresh(card)
        return card

    async def get_many(self, card_ids: list[uuid.UUID]) -> dict[uuid.UUID, DatingCard]:
        if not card_ids:
            return {}
        rows = (await self.session.execute(select(DatingCard).where(DatingCard.id.in_(card_ids)))).scalars().all()
        return {c.id: c for c in rows}
