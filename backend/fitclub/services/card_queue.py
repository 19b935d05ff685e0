from __future__ import annotations
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal, Protocol
import structlog
from fitclub.config import settings

log = structlog.get_logger()

CardSex = Literal["male", "female"]
CARD_SEXES: tuple[CardSex, ...] = ("male", "female")


class UnknownCategory(ValueError):
    pass


class CardQueueStore(Protocol):
    """
    Storage the promoter needs. `claim_pending` must be a conditional update
    (only flips a card that is still pending) so two promoters never publish
    the same card.
    """

    async def count_public(self, sex: str, now: datetime) -> int: ...

    async def count_pending(self, sex: str) -> int: ...

    async def oldest_pending(self, sex: str) -> uuid.UUID | None: ...

    async def claim_pending(self, card_id: uuid.UUID, published_at: datetime, expires_at: datetime) -> bool: ...

    async def expire_due(self, now: datetime) -> list[uuid.UUID]: ...


@dataclass
class PromotionResult:
    sex: str
    promoted_ids: list[uuid.UUID] = field(default_factory=list)
    public_count: int = 0


@dataclass
class SyncResult:
    expired_ids: list[uuid.UUID]
    promoted: dict[str, list[uuid.UUID]]


def slot_limit(sex: str) -> int:
    if sex == "male":
        return settings.open_card_limit_male
    if sex == "female":
        return settings.open_card_limit_female
    raise UnknownCategory(f"No open card capacity for category {sex!r}")


def card_lifetime() -> timedelta:
    return timedelta(hours=settings.open_card_expire_hours)


async def sweep_expired(store: CardQueueStore, now: datetime) -> list[uuid.UUID]:
    """Public cards whose expires_at <= now become expired. Frees their slots."""
    expired = await store.expire_due(now)
    if expired:
        log.info("open_cards_expired", count=len(expired))
    return expired


async def promote(store: CardQueueStore, sex: str, now: datetime) -> PromotionResult:
    """
    Fill free public slots for `sex` with the oldest pending cards.

    The capacity check is read-then-act: concurrent promoters can overshoot
    the limit slightly. Only double-publishing a single card is prevented,
    by the store's conditional claim.
    """
    limit = slot_limit(sex)
    result = PromotionResult(sex=sex, public_count=await store.count_public(sex, now))
    expires_at = now + card_lifetime()

    while result.public_count < limit:
        card_id = await store.oldest_pending(sex)
        if card_id is None:
            break
        if await store.claim_pending(card_id, now, expires_at):
            result.promoted_ids.append(card_id)
            result.public_count += 1
            continue
        # Lost the claim to another promoter: re-read, the winner already holds that slot
        log.info("open_card_claim_lost", sex=sex, card_id=str(card_id))
        result.public_count = await store.count_public(sex, now)

    if result.promoted_ids:
        log.info("open_cards_promoted", sex=sex, count=len(result.promoted_ids), public_count=result.public_count)
    return result


async def sync_queue(store: CardQueueStore, now: datetime) -> SyncResult:
    # Sweep first so slots freed by expiry are refilled in the same call
    expired_ids = await sweep_expired(store, now)
    promoted: dict[str, list[uuid.UUID]] = {}
    for sex in CARD_SEXES:
        promoted[sex] = (await promote(store, sex, now)).promoted_ids
    return SyncResult(expired_ids=expired_ids, promoted=promoted)


async def queue_stats(store: CardQueueStore, now: datetime) -> dict[str, dict[str, int]]:
    await sync_queue(store, now)
    out: dict[str, dict[str, int]] = {}
    for sex in CARD_SEXES:
        out[sex] = {
            "public_count": await store.count_public(sex, now),
            "pending_count": await store.count_pending(sex),
            "slot_limit": slot_limit(sex),
        }
    return out
