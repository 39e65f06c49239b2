import numpy as np
import pytest

from cemantix_solver.pool import CandidatePool
from cemantix_solver.weighting import (
    DIST_LOG_PROD,
    DIST_SUM,
    AccumulatorPolicy,
    InverseDistancePolicy,
    make_policy,
    normalize,
)


def make_pool(freqs):
    return CandidatePool.from_entries((f"w{i}", f) for i, f in enumerate(freqs))


def test_normalize_sums_to_one():
    np.testing.assert_allclose(normalize(np.array([1.0, 3.0])), [0.25, 0.75])


@pytest.mark.parametrize("weights", [[0.0, 0.0, 0.0], [np.inf, 1.0, 1.0], [np.nan, 1.0, 1.0]])
def test_normalize_degenerate_is_uniform(weights):
    np.testing.assert_allclose(normalize(np.array(weights)), [1 / 3] * 3)


def test_inverse_prepare_uses_frequency_prior():
    pool = make_pool([1.0, 3.0])
    InverseDistancePolicy().prepare(pool)
    np.testing.assert_allclose(pool.weights, [0.25, 0.75])


def test_inverse_update_prefers_small_distance():
    pool = make_pool([1.0, 1.0, 1.0])
    policy = InverseDistancePolicy()
    policy.prepare(pool)

    policy.update(pool, np.array([0.1, 0.2, 0.4], dtype=np.float32))

    assert pool.weights.sum() == pytest.approx(1.0)
    assert np.argmax(pool.weights) == 0
    assert pool.weights[0] / pool.weights[1] == pytest.approx(2.0, rel=1e-5)


def test_inverse_update_zero_distance_stays_finite():
    pool = make_pool([1.0, 1.0])
    policy = InverseDistancePolicy()
    policy.prepare(pool)

    for _ in range(200):
        policy.update(pool, np.zeros(2, dtype=np.float32))

    assert np.all(np.isfinite(pool.weights))
    assert pool.weights.sum() == pytest.approx(1.0)


def test_accumulator_pure_product_matches_formula():
    pool = make_pool([2.0, 1.0])
    policy = AccumulatorPolicy(alpha=0.0, beta=1.0)
    policy.prepare(pool)
    np.testing.assert_allclose(pool.weights, [2 / 3, 1 / 3])

    policy.update(pool, np.array([0.5, 0.25]))

    # 2 / 0.5 = 4, 1 / 0.25 = 4
    np.testing.assert_allclose(pool.weights, [0.5, 0.5])
    np.testing.assert_allclose(pool.column(DIST_SUM), [1.5, 1.25])
    np.testing.assert_allclose(np.exp(pool.column(DIST_LOG_PROD)), [0.5, 0.25])


def test_accumulator_mixed_coefficients():
    pool = make_pool([1.0, 1.0])
    policy = AccumulatorPolicy(alpha=1.0, beta=1.0)
    policy.prepare(pool)

    policy.update(pool, np.array([0.5, 1.0]))

    raw = np.array([1 / 1.5 + 1 / 0.5, 1 / 2.0 + 1 / 1.0])
    np.testing.assert_allclose(pool.weights, raw / raw.sum())


def test_accumulator_survives_product_underflow():
    pool = make_pool([1.0, 1.0, 1.0])
    policy = AccumulatorPolicy(alpha=0.5, beta=1.0)
    policy.prepare(pool)

    for _ in range(500):
        policy.update(pool, np.array([1e-3, 2e-3, 0.5]))

    assert np.all(np.isfinite(pool.weights))
    assert pool.weights.sum() == pytest.approx(1.0)
    assert np.argmax(pool.weights) == 0


@pytest.mark.parametrize("policy_cls", [InverseDistancePolicy, AccumulatorPolicy])
def test_non_finite_distance_counts_as_neutral(policy_cls):
    pool = make_pool([1.0, 1.0, 1.0])
    policy = policy_cls()
    policy.prepare(pool)

    policy.update(pool, np.array([np.nan, 0.1, np.inf]))
    policy.update(pool, np.array([0.5, 0.1, 0.5]))

    assert np.all(np.isfinite(pool.weights))
    assert np.argmax(pool.weights) == 1
    assert pool.weights[0] == pytest.approx(pool.weights[2])
    if policy_cls is AccumulatorPolicy:
        np.testing.assert_allclose(pool.column(DIST_SUM), [2.5, 1.2, 2.5])


def test_accumulator_zero_frequencies_fall_back_to_uniform():
    pool = make_pool([0.0, 0.0])
    policy = AccumulatorPolicy()
    policy.prepare(pool)
    np.testing.assert_allclose(pool.weights, [0.5, 0.5])


def test_accumulator_state_follows_removal():
    pool = make_pool([1.0, 1.0, 1.0])
    policy = AccumulatorPolicy()
    policy.prepare(pool)
    policy.update(pool, np.array([0.1, 0.2, 0.3]))

    pool.remove(0)
    policy.update(pool, np.array([0.1, 0.1]))

    # w2 moved into slot 0: sum 1 + 0.3 + 0.1
    np.testing.assert_allclose(pool.column(DIST_SUM), [1.4, 1.3])


def test_make_policy():
    assert isinstance(make_policy("inverse"), InverseDistancePolicy)
    policy = make_policy("accumulator", alpha=0.3, beta=0.7)
    assert isinstance(policy, AccumulatorPolicy)
    assert (policy.alpha, policy.beta) == (0.3, 0.7)
    with pytest.raises(ValueError):
        make_policy("softmax")
    with pytest.raises(ValueError):
        AccumulatorPolicy(alpha=0.0, beta=0.0)
