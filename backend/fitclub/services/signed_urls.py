from __future__ import annotations
import time
from dataclasses import dataclass
from typing import Awaitable, Callable
import structlog
from fitclub.services.kv_store import KeyValueStore, get_json, set_json

log = structlog.get_logger()

# (bucket, path, ttl_seconds) -> signed url, or "" when the object cannot be signed
Signer = Callable[[str, str, int], Awaitable[str]]

HOUR_BURST_THRESHOLDS = (1_000, 5_000, 10_000)
DAY_BURST_THRESHOLDS = (10_000, 50_000, 100_000)


@dataclass(frozen=True)
class SignedUrlResult:
    url: str
    cache_status: str  # hit | miss
    sign_called: bool
    bucket: str
    ttl_remaining_ms: int


EMPTY_RESULT = SignedUrlResult(url="", cache_status="miss", sign_called=False, bucket="", ttl_remaining_ms=0)


def cache_key(bucket: str, path: str) -> str:
    return f"signedurl:{bucket}:{path}"


def bucket_hint_key(path: str) -> str:
    return f"signedurlbucket:{path}"


def path_tail(path: str) -> str:
    parts = [p for p in path.split("/") if p]
    return "/".join(parts[-2:])


def _now_ms() -> int:
    return int(time.time() * 1000)


class SignedUrlCache:
    """
    Read-through cache of time-limited object URLs.

    A cached URL is reused only while it still has more than `refresh_margin`
    seconds to live, so callers never hand out a link that is about to die.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        signer: Signer,
        ttl: int = 3600,
        refresh_margin: int = 600,
        hint_ttl: int = 24 * 60 * 60,
        clock_ms: Callable[[], int] = _now_ms,
    ):
        self.kv = kv
        self.signer = signer
        self.ttl = ttl
        self.refresh_margin = refresh_margin
        self.hint_ttl = hint_ttl
        self.clock_ms = clock_ms

    async def resolve(self, bucket: str, path: str, cache_path: str | None = None) -> SignedUrlResult:
        key = cache_key(bucket, cache_path or path)
        now = self.clock_ms()

        cached = await get_json(self.kv, key)
        if isinstance(cached, dict) and cached.get("url"):
            remaining = int(cached.get("expires_at", 0)) - now
            if remaining > self.refresh_margin * 1000:
                log.debug("signed_url_cache", cache="hit", bucket=bucket, path_tail=path_tail(path), ttl_remaining_ms=remaining)
                return SignedUrlResult(cached["url"], "hit", False, bucket, remaining)

        log.debug("signed_url_cache", cache="miss", bucket=bucket, path_tail=path_tail(path))
        await self._record_miss(bucket)
        url = await self.signer(bucket, path, self.ttl)
        if not url:
            return SignedUrlResult("", "miss", True, bucket, 0)

        await set_json(self.kv, key, {"url": url, "expires_at": now + self.ttl * 1000}, self.ttl)
        return SignedUrlResult(url, "miss", True, bucket, self.ttl * 1000)

    async def resolve_any(self, path: str, buckets: list[str], cache_path: str | None = None) -> SignedUrlResult:
        """Try the last bucket that worked for `path` first, then the others in order."""
        hint = await self.kv.get(bucket_hint_key(path))
        # a hint left by another caller only reorders, it never adds a bucket
        ordered = [hint, *(b for b in buckets if b != hint)] if hint in buckets else list(buckets)

        for bucket in ordered:
            result = await self.resolve(bucket, path, cache_path)
            if result.url:
                await self.kv.set(bucket_hint_key(path), bucket, self.hint_ttl)
                return result
        return EMPTY_RESULT

    async def _record_miss(self, bucket: str):
        hour = await self.kv.incr_window(f"signedurl:miss:hour:{bucket}", 60 * 60)
        if hour.count in HOUR_BURST_THRESHOLDS:
            log.warning("signed_url_miss_burst", bucket=bucket, window="hour", count=hour.count, provider=hour.provider)
        day = await self.kv.incr_window(f"signedurl:miss:day:{bucket}", 24 * 60 * 60)
        if day.count in DAY_BURST_THRESHOLDS:
            log.warning("signed_url_miss_burst", bucket=bucket, window="day", count=day.count, provider=day.provider)
