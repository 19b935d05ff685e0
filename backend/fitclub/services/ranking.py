from __future__ import annotations
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


@dataclass(frozen=True)
class ScoredEntry:
    id: uuid.UUID
    user_id: uuid.UUID
    score: int
    votes: int
    created_at: datetime
    gender: str | None = None
    title: str = ""


def sort_key(entry: ScoredEntry):
    """
    Ascending key for the leaderboard order:
      score desc -> votes desc -> created_at asc -> id
    The id only matters for identical timestamps and keeps the order total.
    """
    return (-entry.score, -entry.votes, entry.created_at, str(entry.id))


def compare(a: ScoredEntry, b: ScoredEntry) -> int:
    ka, kb = sort_key(a), sort_key(b)
    return (ka > kb) - (ka < kb)


def sort_entries(entries: Iterable[ScoredEntry]) -> list[ScoredEntry]:
    return sorted(entries, key=sort_key)


def rank_entries(entries: Iterable[ScoredEntry]) -> list[tuple[int, ScoredEntry]]:
    # Order is total, so rank is simply the 1-based position
    return [(i, e) for i, e in enumerate(sort_entries(entries), start=1)]


def top_n(entries: Iterable[ScoredEntry], n: int, min_votes: int = 0) -> list[ScoredEntry]:
    """Best `n` entries among those with at least `min_votes` votes."""
    if n <= 0:
        return []
    eligible = [e for e in entries if e.votes >= min_votes]
    return sort_entries(eligible)[:n]


def rank_of(entries: Iterable[ScoredEntry], entry_id: uuid.UUID) -> tuple[int, int] | None:
    """
    (rank, total) of `entry_id` within the full pool. No minimum-vote filter
    here: a participant's own position is measured against everyone.
    """
    ranked = rank_entries(entries)
    for rank, e in ranked:
        if e.id == entry_id:
            return rank, len(ranked)
    return None


def best_entry(entries: Iterable[ScoredEntry]) -> ScoredEntry | None:
    ordered = sort_entries(entries)
    return ordered[0] if ordered else None


def average_score(score: int, votes: int) -> float:
    if not votes:
        return 0.0
    return round(score / votes, 2)
