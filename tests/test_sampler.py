import random

import pytest
from conftest import FakeBank, FakeQuestion, make_questions

from quizgen.core.errors import InsufficientStockError, InvalidRequestError
from quizgen.models.domain import Difficulty, Quota
from quizgen.services.sampler import add_until_unique, draw_with_quota

E, M, H = Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD


def ids(questions):
    return [q.id for q in questions]


def test_exact_stock_with_thin_hard_bucket():
    # 3 easy, 2 medium, 1 hard; quota 2/2/2 only works through the top-up
    bank = FakeBank(make_questions(3, 2, 1))
    out = draw_with_quota(bank, [1], Quota(2, 2, 2), 6, rng=random.Random(0))
    assert sorted(ids(out)) == [1, 2, 3, 4, 5, 6]
    top_up = bank.called("draw_random_questions")[-1]
    assert top_up[2] is None and top_up[3] == 2  # one missing, overdrawn x2


def test_bucket_counts_follow_quota_when_supply_allows():
    bank = FakeBank(make_questions(10, 10, 10))
    out = draw_with_quota(bank, [1], Quota(4, 4, 2), 10, rng=random.Random(5))
    assert len(out) == 10
    assert len(set(ids(out))) == 10
    by = {d: sum(1 for q in out if q.difficulty == d) for d in (E, M, H)}
    assert by == {E: 4, M: 4, H: 2}
    assert len(bank.called("draw_random_questions")) == 3


def test_overdraw_factor_sizes_batches():
    bank = FakeBank(make_questions(10, 10, 10))
    draw_with_quota(bank, [1], Quota(3, 2, 1), 6, overdraw=3)
    limits = [(c[2], c[3]) for c in bank.called("draw_random_questions")]
    assert limits == [(E, 9), (M, 6), (H, 3)]


def test_empty_bucket_is_skipped():
    bank = FakeBank(make_questions(5, 5, 0))
    out = draw_with_quota(bank, [1], Quota(3, 2, 0), 5)
    assert len(out) == 5
    assert [c[2] for c in bank.called("draw_random_questions")] == [E, M]


def test_duplicates_across_batches_are_dropped():
    q = {i: FakeQuestion(i, E) for i in range(1, 6)}
    batches = [
        [q[1], q[2], q[1]],          # easy
        [q[2], q[3], q[3], q[4]],    # medium batch overlaps easy
        [q[4], q[5], q[1], q[2]],    # top-up
    ]
    bank = FakeBank(list(q.values()), fixed_batches=batches)
    out = draw_with_quota(bank, [1], Quota(2, 2, 0), 5, rng=random.Random(1))
    assert sorted(ids(out)) == [1, 2, 3, 4, 5]


def test_stock_guard_fails_before_any_draw():
    bank = FakeBank(make_questions(2, 2, 1))
    with pytest.raises(InsufficientStockError) as exc:
        draw_with_quota(bank, [1], Quota(2, 2, 2), 6)
    assert exc.value.have == 5 and exc.value.need == 6
    assert "have 5, need 6" in str(exc.value)
    assert bank.called("draw_random_questions") == []


def test_stock_is_counted_across_all_resolved_categories():
    questions = make_questions(2, 1, 0, category_id=1) + make_questions(1, 1, 1, category_id=2, start=10)
    bank = FakeBank(questions, children={1: [2]})
    out = draw_with_quota(bank, [1, 2], Quota(3, 2, 1), 6)
    assert len(out) == 6
    assert {q.category_id for q in out} == {1, 2}


def test_short_supply_returns_short_list():
    # stock guard passes but the batches come back thin, as with a concurrent delete
    q1, q2 = FakeQuestion(1, E), FakeQuestion(2, M)
    bank = FakeBank(make_questions(5, 0, 0), fixed_batches=[[q1], [q2], [q1, q2]])
    out = draw_with_quota(bank, [1], Quota(3, 2, 0), 5)
    assert sorted(ids(out)) == [1, 2]


def test_result_is_truncated_to_total():
    batch = [FakeQuestion(i, E) for i in range(1, 9)]
    bank = FakeBank(batch, fixed_batches=[batch])
    out = draw_with_quota(bank, [1], Quota(10, 0, 0), 4)
    assert len(out) == 4


def test_final_order_is_shuffled():
    bank = FakeBank(make_questions(10, 10, 10))
    orders = {tuple(q.difficulty for q in draw_with_quota(bank, [1], Quota(4, 4, 2), 10, rng=random.Random(s)))
              for s in range(10)}
    grouped = tuple([E] * 4 + [M] * 4 + [H] * 2)
    assert orders != {grouped}


def test_preconditions():
    bank = FakeBank(make_questions(5, 5, 5))
    with pytest.raises(InvalidRequestError):
        draw_with_quota(bank, [], Quota(1, 0, 0), 1)
    with pytest.raises(InvalidRequestError):
        draw_with_quota(bank, [1], Quota(0, 0, 0), 0)
    assert bank.calls == []


def test_dedup_invariant_over_many_draws():
    rng = random.Random(11)
    questions = make_questions(6, 6, 6)
    for seed in range(50):
        bank = FakeBank(questions, seed=seed)
        e, m = rng.randint(0, 8), rng.randint(0, 8)
        total = rng.choice([5, 10, 15])
        quota = Quota(min(e, total), max(0, min(m, total - e)), 0)
        quota = Quota(quota.easy, quota.medium, total - quota.easy - quota.medium)
        out = draw_with_quota(bank, [1], quota, total, rng=random.Random(seed))
        assert len(out) == total
        assert len(set(ids(out))) == total


def test_add_until_unique_stops_at_need():
    seen = {1}
    target = []
    added = add_until_unique(target, [FakeQuestion(i, E) for i in (1, 2, 3, 4)], 2, seen)
    assert added == 2
    assert ids(target) == [2, 3]
    assert seen == {1, 2, 3}
