from __future__ import annotations
import uuid
from datetime import datetime, timedelta, timezone
import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.exc import IntegrityError

from fitclub.main import app
from fitclub.deps import get_application_store, get_card_store, get_post_store, get_signed_url_cache
from fitclub.models.dating_card import DatingCard, DatingCardApplication
from fitclub.models.hall_of_fame import HallOfFame
from fitclub.models.post import Post
from fitclub.security import make_access_token
from fitclub.services.kv_store import MemoryKeyValueStore
from fitclub.services.post_store import RATING_SCORES
from fitclub.services.ranking import ScoredEntry
from fitclub.services.signed_urls import SignedUrlCache
from fitclub.services.time_windows import in_window

T0 = datetime(2025, 1, 8, 3, 0, tzinfo=timezone.utc)  # Wed 2025-01-08 12:00 KST


class FakeCardStore:
    """In-memory CardQueueStore with the same conditional-claim semantics as the SQL store."""

    def __init__(self):
        self.cards: dict[uuid.UUID, DatingCard] = {}
        self.steal_next_claim = False

    def put(self, sex="male", created_at=T0, status="pending", owner=None, published_at=None,
            expires_at=None, photo_paths=None, nickname="lifter", instagram_id=None) -> DatingCard:
        card = DatingCard(
            id=uuid.uuid4(), owner_user_id=owner or uuid.uuid4(), sex=sex, status=status,
            display_nickname=nickname, photo_paths=photo_paths or [], created_at=created_at,
            published_at=published_at, expires_at=expires_at, instagram_id=instagram_id,
        )
        self.cards[card.id] = card
        return card

    def by_status(self, sex: str, status: str) -> list[DatingCard]:
        return sorted(
            (c for c in self.cards.values() if c.sex == sex and c.status == status),
            key=lambda c: c.created_at,
        )

    async def count_public(self, sex, now):
        return sum(1 for c in self.by_status(sex, "public") if c.expires_at and c.expires_at > now)

    async def count_pending(self, sex):
        return len(self.by_status(sex, "pending"))

    async def oldest_pending(self, sex):
        pending = self.by_status(sex, "pending")
        return pending[0].id if pending else None

    async def claim_pending(self, card_id, published_at, expires_at):
        card = self.cards[card_id]
        if self.steal_next_claim:
            # another promoter publishes the card between our read and our claim
            self.steal_next_claim = False
            card.status, card.published_at, card.expires_at = "public", published_at, expires_at
            return False
        if card.status != "pending":
            return False
        card.status, card.published_at, card.expires_at = "public", published_at, expires_at
        return True

    async def expire_due(self, now):
        out = []
        for c in self.cards.values():
            if c.status == "public" and c.expires_at is not None and c.expires_at <= now:
                c.status = "expired"
                out.append(c.id)
        return out

    async def queue_position(self, card):
        if card.status != "pending":
            return None
        return [c.id for c in self.by_status(card.sex, "pending")].index(card.id) + 1

    async def list_public(self, sex, now, limit):
        cards = [c for c in self.by_status(sex, "public") if c.expires_at > now]
        return sorted(cards, key=lambda c: c.published_at, reverse=True)[:limit]

    async def list_for_owner(self, user_id):
        return [c for c in self.cards.values() if c.owner_user_id == user_id]

    async def has_open_card(self, user_id):
        return any(c.status in ("pending", "public") for c in await self.list_for_owner(user_id))

    async def get(self, card_id):
        return self.cards.get(card_id)

    async def add(self, card):
        card.id = card.id or uuid.uuid4()
        card.created_at = card.created_at or datetime.now(timezone.utc)
        self.cards[card.id] = card
        return card

    async def get_many(self, card_ids):
        return {cid: self.cards[cid] for cid in card_ids if cid in self.cards}


class FakeApplicationStore:
    """In-memory application store; one application per (card, applicant) like the unique constraint."""

    def __init__(self, cards: FakeCardStore):
        self.cards = cards
        self.apps: dict[uuid.UUID, DatingCardApplication] = {}
        self.profiles: dict[uuid.UUID, str] = {}

    async def get(self, application_id):
        return self.apps.get(application_id)

    async def add(self, application):
        if any(a.card_id == application.card_id and a.applicant_user_id == application.applicant_user_id
               for a in self.apps.values()):
            raise IntegrityError("INSERT INTO dating_card_applications", {}, Exception("duplicate"))
        application.id = application.id or uuid.uuid4()
        application.created_at = application.created_at or datetime.now(timezone.utc)
        self.apps[application.id] = application
        return application

    async def count_by_applicant(self, user_id, start_utc, end_utc):
        return sum(1 for a in self.apps.values()
                   if a.applicant_user_id == user_id and in_window(a.created_at, start_utc, end_utc))

    async def list_for_cards(self, card_ids, status=None):
        ids = set(card_ids)
        return [a for a in self.apps.values() if a.card_id in ids and (status is None or a.status == status)]

    async def list_for_applicant(self, user_id, status=None):
        return [a for a in self.apps.values()
                if a.applicant_user_id == user_id and (status is None or a.status == status)]

    async def set_status(self, application_id, status):
        app = self.apps[application_id]
        if app.status != "submitted":
            return False
        app.status = status
        return True

    async def accept(self, application, now):
        if not await self.set_status(application.id, "accepted"):
            return False
        card = self.cards.cards[application.card_id]
        if card.status in ("pending", "public"):
            card.status, card.expires_at = "hidden", now
        for a in self.apps.values():
            if a.card_id == application.card_id and a.status == "submitted":
                a.status = "rejected"
        return True

    async def nicknames(self, user_ids):
        return {u: self.profiles[u] for u in user_ids if u in self.profiles}


class FakePostStore:
    def __init__(self):
        self.posts: dict[uuid.UUID, Post] = {}
        self.votes: dict[tuple[uuid.UUID, uuid.UUID], str] = {}
        self.profiles: dict[uuid.UUID, str] = {}
        self.hall: list[HallOfFame] = []

    def put(self, gender="male", score=0, votes=0, created_at=T0, user_id=None, type="photo_bodycheck",
            title="week check", images=None, is_hidden=False) -> Post:
        post = Post(
            id=uuid.uuid4(), user_id=user_id or uuid.uuid4(), type=type, title=title, gender=gender,
            images=images or [], score_sum=score, vote_count=votes, great_count=0, good_count=0,
            normal_count=0, rookie_count=0, is_hidden=is_hidden, is_deleted=False, created_at=created_at,
        )
        self.posts[post.id] = post
        return post

    def _visible(self):
        return [p for p in self.posts.values() if p.type == "photo_bodycheck" and not p.is_hidden and not p.is_deleted]

    @staticmethod
    def _entry(p: Post) -> ScoredEntry:
        return ScoredEntry(id=p.id, user_id=p.user_id, score=p.score_sum, votes=p.vote_count,
                           created_at=p.created_at, gender=p.gender, title=p.title)

    async def weekly_entries(self, gender, start_utc, end_utc):
        return [self._entry(p) for p in self._visible() if p.gender == gender and in_window(p.created_at, start_utc, end_utc)]

    async def user_entries(self, user_id, start_utc, end_utc):
        return [self._entry(p) for p in self._visible() if p.user_id == user_id and in_window(p.created_at, start_utc, end_utc)]

    async def nicknames(self, user_ids):
        return {u: self.profiles.get(u) for u in user_ids if u in self.profiles}

    async def first_images(self, post_ids):
        return {pid: (self.posts[pid].images or [None])[0] for pid in post_ids if pid in self.posts}

    async def get_post(self, post_id):
        return self.posts.get(post_id)

    async def cast_vote(self, post, user_id, rating):
        self.votes[(post.id, user_id)] = rating
        ratings = [r for (pid, _), r in self.votes.items() if pid == post.id]
        post.score_sum = sum(RATING_SCORES[r] for r in ratings)
        post.vote_count = len(ratings)
        for name in RATING_SCORES:
            setattr(post, f"{name}_count", ratings.count(name))
        return post

    async def add_hall_of_fame(self, row):
        if any(h.week_id == row["week_id"] and h.gender == row["gender"] for h in self.hall):
            return False
        self.hall.append(HallOfFame(id=uuid.uuid4(), created_at=datetime.now(timezone.utc), **row))
        return True

    async def list_hall_of_fame(self, limit):
        return sorted(self.hall, key=lambda h: (h.week_id, h.gender), reverse=True)[:limit]


class FakeSigner:
    def __init__(self, objects: set[tuple[str, str]] | None = None):
        self.objects = objects if objects is not None else set()
        self.calls: list[tuple[str, str, int]] = []

    async def __call__(self, bucket: str, path: str, ttl: int) -> str:
        self.calls.append((bucket, path, ttl))
        if (bucket, path) not in self.objects:
            return ""
        return f"https://storage.test/{bucket}/{path}?sig={len(self.calls)}"


@pytest.fixture
def card_store():
    return FakeCardStore()


@pytest.fixture
def application_store(card_store):
    return FakeApplicationStore(card_store)


@pytest.fixture
def post_store():
    return FakePostStore()


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def url_cache(signer):
    return SignedUrlCache(MemoryKeyValueStore(), signer, ttl=3600, refresh_margin=600)


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id):
    return {"Authorization": f"Bearer {make_access_token(str(user_id))}"}


@pytest_asyncio.fixture
async def client(card_store, application_store, post_store, url_cache):
    app.dependency_overrides[get_card_store] = lambda: card_store
    app.dependency_overrides[get_application_store] = lambda: application_store
    app.dependency_overrides[get_post_store] = lambda: post_store
    app.dependency_overrides[get_signed_url_cache] = lambda: url_cache
    try:
        async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


def hours(n: float) -> timedelta:
    return timedelta(hours=n)
