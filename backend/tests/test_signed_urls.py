from __future__ import annotations
import pytest

from fitclub.services.kv_store import MemoryKeyValueStore
from fitclub.services.signed_urls import SignedUrlCache, bucket_hint_key, cache_key, path_tail
from tests.conftest import FakeSigner

NOW_MS = 1_700_000_000_000


class MsClock:
    def __init__(self, t: int = NOW_MS):
        self.t = t

    def __call__(self) -> int:
        return self.t

    def advance(self, seconds: int):
        self.t += seconds * 1000


def make_cache(signer, clock=None, kv=None):
    return SignedUrlCache(kv or MemoryKeyValueStore(), signer, ttl=3600, refresh_margin=600, clock_ms=clock or MsClock())


@pytest.mark.asyncio
async def test_second_resolve_is_a_hit():
    signer = FakeSigner({("photos", "a/b.jpg")})
    cache = make_cache(signer)

    first = await cache.resolve("photos", "a/b.jpg")
    second = await cache.resolve("photos", "a/b.jpg")

    assert first.cache_status == "miss" and first.sign_called
    assert second.cache_status == "hit" and not second.sign_called
    assert second.url == first.url
    assert len(signer.calls) == 1


@pytest.mark.asyncio
async def test_refresh_margin_boundary():
    """expiry = t0+3600s, margin 600s: at t0+2500 hit, at t0+3100 regenerated"""
    signer = FakeSigner({("photos", "x.jpg")})
    clock = MsClock()
    cache = make_cache(signer, clock)
    await cache.resolve("photos", "x.jpg")

    clock.advance(2500)
    hit = await cache.resolve("photos", "x.jpg")
    assert hit.cache_status == "hit"
    assert hit.ttl_remaining_ms == 1100 * 1000

    clock.advance(600)  # 500s left < 600s margin
    miss = await cache.resolve("photos", "x.jpg")
    assert miss.cache_status == "miss"
    assert miss.url != hit.url
    assert len(signer.calls) == 2


@pytest.mark.asyncio
async def test_exactly_at_margin_is_a_miss():
    signer = FakeSigner({("photos", "x.jpg")})
    clock = MsClock()
    cache = make_cache(signer, clock)
    await cache.resolve("photos", "x.jpg")
    clock.advance(3000)
    assert (await cache.resolve("photos", "x.jpg")).cache_status == "miss"


@pytest.mark.asyncio
async def test_failed_sign_is_not_cached():
    signer = FakeSigner()
    kv = MemoryKeyValueStore()
    cache = make_cache(signer, kv=kv)

    res = await cache.resolve("photos", "missing.jpg")

    assert res.url == "" and res.sign_called
    assert await kv.get(cache_key("photos", "missing.jpg")) is None


@pytest.mark.asyncio
async def test_cache_path_overrides_key():
    signer = FakeSigner({("photos", "v2/a.jpg")})
    kv = MemoryKeyValueStore()
    cache = make_cache(signer, kv=kv)
    await cache.resolve("photos", "v2/a.jpg", cache_path="a.jpg")
    assert await kv.get(cache_key("photos", "a.jpg")) is not None


@pytest.mark.asyncio
async def test_resolve_any_falls_back_and_remembers_bucket():
    signer = FakeSigner({("legacy", "p.jpg")})
    kv = MemoryKeyValueStore()
    cache = make_cache(signer, kv=kv)

    res = await cache.resolve_any("p.jpg", ["cards", "legacy"])
    assert res.bucket == "legacy" and res.url
    assert [c[0] for c in signer.calls] == ["cards", "legacy"]
    assert await kv.get(bucket_hint_key("p.jpg")) == "legacy"


@pytest.mark.asyncio
async def test_resolve_any_tries_hinted_bucket_first():
    signer = FakeSigner({("cards", "p.jpg"), ("legacy", "p.jpg")})
    kv = MemoryKeyValueStore()
    await kv.set(bucket_hint_key("p.jpg"), "legacy", 60)
    cache = make_cache(signer, kv=kv)

    res = await cache.resolve_any("p.jpg", ["cards", "legacy"])

    assert res.bucket == "legacy"
    assert signer.calls == [("legacy", "p.jpg", 3600)]


@pytest.mark.asyncio
async def test_resolve_any_ignores_hint_outside_candidates():
    signer = FakeSigner({("uploads", "p.jpg"), ("legacy", "p.jpg")})
    kv = MemoryKeyValueStore()
    await kv.set(bucket_hint_key("p.jpg"), "legacy", 60)
    cache = make_cache(signer, kv=kv)

    res = await cache.resolve_any("p.jpg", ["uploads"])

    assert res.bucket == "uploads"
    assert [c[0] for c in signer.calls] == ["uploads"]


@pytest.mark.asyncio
async def test_resolve_any_all_buckets_empty():
    signer = FakeSigner()
    cache = make_cache(signer)
    res = await cache.resolve_any("nope.jpg", ["cards", "legacy"])
    assert res.url == "" and res.bucket == ""


def test_path_tail():
    assert path_tail("cards/u1/abc.jpg") == "u1/abc.jpg"
    assert path_tail("abc.jpg") == "abc.jpg"
    assert path_tail("") == ""
