"""Reweighting strategies driven by score/similarity distances.

A distance d_i = |score - sim_i| near zero means candidate i sits at the same
embedding similarity to the tried word as the target does, so smaller
distances get larger weights under both policies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from cemantix_solver.pool import CandidatePool

DISTANCE_FLOOR = 1e-6
NEUTRAL_DISTANCE = 1.0
DIST_SUM = "dist_sum"
DIST_LOG_PROD = "dist_log_prod"

POLICY_INVERSE = "inverse"
POLICY_ACCUMULATOR = "accumulator"
POLICIES = (POLICY_INVERSE, POLICY_ACCUMULATOR)


def normalize(weights: np.ndarray) -> np.ndarray:
    """Scale to sum 1; uniform when the sum is zero or non-finite."""
    weights = np.asarray(weights, dtype=np.float64)
    if weights.size == 0:
        return weights
    total = float(weights.sum())
    if not np.isfinite(total) or total <= 0.0 or not np.all(np.isfinite(weights)):
        return np.full(weights.shape, 1.0 / weights.size)
    return weights / total


def sanitize_distances(distances: np.ndarray) -> np.ndarray:
    """Replace NaN and infinite distances with a neutral 1.0."""
    distances = np.asarray(distances, dtype=np.float64)
    return np.nan_to_num(distances, nan=NEUTRAL_DISTANCE, posinf=NEUTRAL_DISTANCE, neginf=NEUTRAL_DISTANCE)


def clamp_distances(distances: np.ndarray) -> np.ndarray:
    return np.maximum(sanitize_distances(distances), DISTANCE_FLOOR)


class WeightingPolicy(ABC):
    name: str

    @abstractmethod
    def prepare(self, pool: CandidatePool) -> None:
        """Set initial weights before the first draw."""

    @abstractmethod
    def update(self, pool: CandidatePool, distances: np.ndarray) -> None:
        """Fold one query's distances (aligned with pool slots) into the weights."""


class InverseDistancePolicy(WeightingPolicy):
    """w_i <- w_i / d_i, renormalized after every update."""

    name = POLICY_INVERSE

    def prepare(self, pool: CandidatePool) -> None:
        pool.set_weights(normalize(pool.frequencies))

    def update(self, pool: CandidatePool, distances: np.ndarray) -> None:
        if len(pool) == 0:
            return
        with np.errstate(over="ignore"):
            updated = pool.weights / clamp_distances(distances)
        pool.set_weights(normalize(updated))


class AccumulatorPolicy(WeightingPolicy):
    """w_i = frequency_i * (alpha / sum_i + beta / prod_i).

    sum_i and prod_i start at 1 and accumulate every distance seen by the
    candidate. The product is kept as a log-sum so long runs of small
    distances cannot underflow to zero.
    """

    name = POLICY_ACCUMULATOR

    def __init__(self, alpha: float = 0.0, beta: float = 1.0) -> None:
        if alpha < 0 or beta < 0:
            raise ValueError("alpha and beta must be non-negative")
        if alpha == 0 and beta == 0:
            raise ValueError("alpha and beta cannot both be zero")
        self.alpha = float(alpha)
        self.beta = float(beta)

    def prepare(self, pool: CandidatePool) -> None:
        pool.column(DIST_SUM, fill=1.0)
        pool.column(DIST_LOG_PROD, fill=0.0)
        self._refresh(pool)

    def update(self, pool: CandidatePool, distances: np.ndarray) -> None:
        if len(pool) == 0:
            return
        distances = sanitize_distances(distances)
        pool.column(DIST_SUM)[:] += distances
        pool.column(DIST_LOG_PROD)[:] += np.log(clamp_distances(distances))
        self._refresh(pool)

    def _refresh(self, pool: CandidatePool) -> None:
        if len(pool) == 0:
            return
        sums = np.maximum(pool.column(DIST_SUM), DISTANCE_FLOOR)
        log_prods = pool.column(DIST_LOG_PROD)

        with np.errstate(divide="ignore"):
            sum_term = np.log(self.alpha) - np.log(sums)
            prod_term = np.log(self.beta) - log_prods
            log_weights = np.log(pool.frequencies) + np.logaddexp(sum_term, prod_term)

        peak = float(np.max(log_weights))
        if not np.isfinite(peak):
            pool.set_weights(normalize(np.zeros(len(pool))))
            return
        pool.set_weights(normalize(np.exp(log_weights - peak)))


def make_policy(name: str, alpha: float = 0.0, beta: float = 1.0) -> WeightingPolicy:
    if name == POLICY_INVERSE:
        return InverseDistancePolicy()
    if name == POLICY_ACCUMULATOR:
        return AccumulatorPolicy(alpha=alpha, beta=beta)
    raise ValueError(f"Unknown weighting policy '{name}'. Choose from: {', '.join(POLICIES)}")
