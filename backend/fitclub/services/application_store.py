from __future__ import annotations
import uuid
from datetime import datetime
from typing import Iterable
from sqlalchemy import select, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fitclub.models.dating_card import DatingCard, DatingCardApplication
from fitclub.models.post import Profile


class SqlApplicationStore:
    """Applications to public dating cards. Status changes are conditional on `submitted`."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, application_id: uuid.UUID) -> DatingCardApplication | None:
        return await self.session.get(DatingCardApplication, application_id, populate_existing=True)

    async def add(self, application: DatingCardApplication) -> DatingCardApplication:
        self.session.add(application)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        await self.session.refresh(application)
        return application

    async def count_by_applicant(self, user_id: uuid.UUID, start_utc: datetime, end_utc: datetime) -> int:
        total = await self.session.scalar(
            select(func.count()).select_from(DatingCardApplication)
            .where(DatingCardApplication.applicant_user_id == user_id)
            .where(DatingCardApplication.created_at >= start_utc, DatingCardApplication.created_at < end_utc)
        )
        return int(total or 0)

    async def list_for_cards(self, card_ids: Iterable[uuid.UUID], status: str | None = None) -> list[DatingCardApplication]:
        ids = list(card_ids)
        if not ids:
            return []
        q = select(DatingCardApplication).where(DatingCardApplication.card_id.in_(ids))
        if status:
            q = q.where(DatingCardApplication.status == status)
        return list((await self.session.execute(q.order_by(DatingCardApplication.created_at.desc()))).scalars().all())

    async def list_for_applicant(self, user_id: uuid.UUID, status: str | None = None) -> list[DatingCardApplication]:
        q = select(DatingCardApplication).where(DatingCardApplication.applicant_user_id == user_id)
        if status:
            q = q.where(DatingCardApplication.status == status)
        return list((await self.session.execute(q.order_by(DatingCardApplication.created_at.desc()))).scalars().all())

    async def set_status(self, application_id: uuid.UUID, status: str) -> bool:
        """submitted -> `status`. False when the application already left `submitted`."""
        res = await self.session.execute(
            update(DatingCardApplication)
            .where(DatingCardApplication.id == application_id, DatingCardApplication.status == "submitted")
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return res.rowcount == 1

    async def accept(self, application: DatingCardApplication, now: datetime) -> bool:
        """
        Accept `application`, take its card off the board and reject the other
        submitted applications to that card, in one transaction.
        """
        res = await self.session.execute(
            update(DatingCardApplication)
            .where(DatingCardApplication.id == application.id, DatingCardApplication.status == "submitted")
            .values(status="accepted")
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            await self.session.rollback()
            return False
        await self.session.execute(
            update(DatingCard)
            .where(DatingCard.id == application.card_id, DatingCard.status.in_(("pending", "public")))
            .values(status="hidden", expires_at=now)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(
            update(DatingCardApplication)
            .where(DatingCardApplication.card_id == application.card_id)
            .where(DatingCardApplication.status == "submitted", DatingCardApplication.id != application.id)
            .values(status="rejected")
            .execution_options(synchronize_session=False)
        )
        await self.session.commit()
        return True

    async def nicknames(self, user_ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, str]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        rows = (await self.session.execute(
            select(Profile.user_id, Profile.nickname).where(Profile.user_id.in_(ids))
        )).all()
        return {uid: nick for uid, nick in rows}
