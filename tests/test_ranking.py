import itertools
import random

import pytest

from app.services.ranking import TopKSelector, clamp_limit


def scores(candidates):
    return [c.score for c in candidates]


def test_keeps_best_k_and_evicts_worst(make_candidate):
    selector = TopKSelector(2)
    for seq, s in enumerate([500, 300, 900]):
        selector.offer(make_candidate(s, seq))

    assert scores(selector.drain()) == [300, 500]


def test_offer_evicts_at_most_one(make_candidate):
    selector = TopKSelector(3)
    evicted = []
    for seq, s in enumerate([50, 40, 30, 20, 10, 60]):
        before = len(selector)
        out = selector.offer(make_candidate(s, seq))
        assert len(selector) <= 3
        assert len(selector) >= before
        if out is not None:
            evicted.append(out.score)

    assert evicted == [50, 40, 60]
    assert scores(selector.drain()) == [10, 20, 30]


def test_new_worst_candidate_is_rejected_when_full(make_candidate):
    selector = TopKSelector(2)
    selector.offer(make_candidate(1, 0))
    selector.offer(make_candidate(2, 1))
    rejected = make_candidate(3, 2)

    assert selector.offer(rejected) is rejected
    assert scores(selector.drain()) == [1, 2]


def test_equal_scores_are_both_retained(make_candidate):
    selector = TopKSelector(3)
    a = make_candidate(100, 0, destination="TPA")
    b = make_candidate(100, 1, destination="CLT")
    selector.offer(a)
    selector.offer(b)

    drained = selector.drain()
    assert [c.record.destination for c in drained] == ["TPA", "CLT"]


def test_tied_worst_evicts_most_recent(make_candidate):
    selector = TopKSelector(2)
    selector.offer(make_candidate(100, 0))
    first_200 = make_candidate(200, 1)
    selector.offer(first_200)

    evicted = selector.offer(make_candidate(200, 2))

    assert evicted.sequence == 2
    assert [c.sequence for c in selector.drain()] == [0, first_200.sequence]


def test_ties_drain_in_sequence_order(make_candidate):
    selector = TopKSelector(5)
    for seq in (3, 1, 4, 0, 2):
        selector.offer(make_candidate(7, seq))

    assert [c.sequence for c in selector.drain()] == [0, 1, 2, 3, 4]


@pytest.mark.parametrize("k", [1, 3, 10, 50])
def test_size_is_min_of_k_and_n(make_candidate, k):
    rng = random.Random(k)
    n = 20
    selector = TopKSelector(k)
    for seq in range(n):
        selector.offer(make_candidate(rng.uniform(0, 1000), seq))

    drained = selector.drain()
    assert len(drained) == min(k, n)
    assert [c.sort_key for c in drained] == sorted(c.sort_key for c in drained)


def test_selected_set_does_not_depend_on_offer_order(make_candidate):
    values = [42.0, 7.0, 19.5, 88.0, 3.0, 61.0]
    expected = sorted(values)[:3]

    for perm in itertools.permutations(values):
        selector = TopKSelector(3)
        for seq, s in enumerate(perm):
            selector.offer(make_candidate(s, seq))
        assert scores(selector.drain()) == expected


def test_matches_full_sort_when_k_exceeds_n(make_candidate):
    values = [5.0, 1.0, 5.0, 3.0]
    selector = TopKSelector(10)
    for seq, s in enumerate(values):
        selector.offer(make_candidate(s, seq))

    assert scores(selector.drain()) == sorted(values)


def test_empty_selector_drains_to_empty_list():
    assert TopKSelector(5).drain() == []


def test_drained_selector_cannot_be_reused(make_candidate):
    selector = TopKSelector(2)
    selector.offer(make_candidate(1, 0))
    selector.drain()

    with pytest.raises(RuntimeError):
        selector.offer(make_candidate(2, 1))
    with pytest.raises(RuntimeError):
        selector.drain()


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        TopKSelector(0)


@pytest.mark.parametrize(
    "limit,expected",
    [(0, 1), (1, 1), (2, 2), (100, 100), (500, 100)],
)
def test_clamp_limit(limit, expected):
    assert clamp_limit(limit) == expected


def test_repeated_sequence_numbers_do_not_collide(make_candidate):
    selector = TopKSelector(1)
    first = make_candidate(5.0, 0)
    second = make_candidate(5.0, 0)
    selector.offer(first)

    assert selector.offer(second) is second
    assert selector.drain() == [first]


def test_repeated_sequence_numbers_drain_in_arrival_order(make_candidate):
    selector = TopKSelector(3)
    for dest in ("TPA", "CLT", "JFK"):
        selector.offer(make_candidate(5.0, 0, destination=dest))

    assert [c.record.destination for c in selector.drain()] == ["TPA", "CLT", "JFK"]
