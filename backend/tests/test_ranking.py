from __future__ import annotations
import itertools
import uuid
from datetime import datetime, timedelta, timezone
import pytest

from fitclub.services.ranking import (
    ScoredEntry, average_score, best_entry, compare, rank_entries, rank_of, sort_entries, top_n,
)

BASE = datetime(2025, 1, 6, tzinfo=timezone.utc)


def entry(score, votes, t, gender="male") -> ScoredEntry:
    return ScoredEntry(id=uuid.uuid4(), user_id=uuid.uuid4(), score=score, votes=votes,
                       created_at=BASE + timedelta(seconds=t), gender=gender)


def test_tie_on_score_and_votes_goes_to_earlier_post():
    late = entry(10, 3, 100)
    early = entry(10, 3, 50)
    ranked = rank_entries([late, early])
    assert ranked == [(1, early), (2, late)]


def test_comparator_key_order():
    pool = [
        entry(8, 9, 1),    # lower score loses despite more votes
        entry(10, 2, 2),
        entry(10, 4, 300),  # same score, more votes wins over earlier
        entry(12, 1, 999),
    ]
    ordered = sort_entries(pool)
    assert [(e.score, e.votes) for e in ordered] == [(12, 1), (10, 4), (10, 2), (8, 9)]


def test_order_is_total_and_consistent_with_rank():
    pool = [entry(s, v, t) for s, v, t in [(5, 2, 10), (5, 2, 11), (7, 1, 3), (5, 3, 9), (0, 0, 1)]]
    ranks = {e.id: r for r, e in rank_entries(pool)}
    for a, b in itertools.permutations(pool, 2):
        assert compare(a, b) != 0
        assert (ranks[a.id] < ranks[b.id]) == (compare(a, b) < 0)


def test_identical_timestamps_still_totally_ordered():
    a, b = entry(3, 3, 0), entry(3, 3, 0)
    assert compare(a, b) == -compare(b, a) != 0


def test_top_n_excludes_low_sample_entries():
    strong_but_few = entry(50, 2, 1)
    ok = entry(20, 5, 2)
    better = entry(30, 6, 3)
    best = top_n([strong_but_few, ok, better], 2, min_votes=5)
    assert best == [better, ok]


def test_top_n_prefix_length():
    pool = [entry(i, 5, i) for i in range(4)]
    assert len(top_n(pool, 10)) == 4
    assert len(top_n(pool, 2)) == 2
    assert top_n(pool, 0) == []
    assert top_n([], 3) == []


def test_rank_of_uses_full_pool():
    """Own rank counts low-vote posts too, unlike top queries"""
    low_votes_high_score = entry(40, 1, 1)
    mine = entry(20, 6, 2)
    other = entry(10, 8, 3)
    assert rank_of([other, mine, low_votes_high_score], mine.id) == (2, 3)


def test_rank_of_missing_entry():
    assert rank_of([entry(1, 1, 1)], uuid.uuid4()) is None


def test_best_entry():
    a, b = entry(4, 1, 5), entry(9, 1, 6)
    assert best_entry([a, b]) == b
    assert best_entry([]) is None


@pytest.mark.parametrize("score,votes,expected", [(10, 3, 3.33), (8, 2, 4.0), (5, 0, 0.0)])
def test_average_score(score, votes, expected):
    assert average_score(score, votes) == expected
