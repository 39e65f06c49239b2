"""Adaptive sampling loop: draw a candidate, score it, reweight the rest."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Protocol

import numpy as np

from cemantix_solver.config import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    ErrorPolicy,
    SolverContext,
)
from cemantix_solver.errors import (
    EmptyPoolError,
    OracleError,
    SolverAbortedError,
    UnknownWordError,
)
from cemantix_solver.pool import CandidatePool
from cemantix_solver.similarity import SimilarityOracleAdapter
from cemantix_solver.weighting import WeightingPolicy, make_policy, sanitize_distances

DISTANCE = "distance"
PERFECT_SCORE = np.float32(1.0)


class SolverState(str, Enum):
    RUNNING = "running"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"
    ABORTED = "aborted"


class Scorer(Protocol):
    def score(self, word: str) -> float: ...


@dataclass
class QueryOutcome:
    word: str
    score: float | None
    timestamp: float
    error: str | None = None
    eager: bool = False


@dataclass
class SolveResult:
    state: SolverState
    word: str | None
    queries: int
    attempts: int
    history: List[QueryOutcome] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.state is SolverState.SOLVED


class Solver:
    """One solve over one candidate pool.

    Every word put to the oracle leaves the pool, whether or not the query
    succeeded. `queries` counts distinct words submitted, `attempts` counts
    HTTP calls including retries.
    """

    def __init__(
        self,
        pool: CandidatePool,
        client: Scorer,
        adapter: SimilarityOracleAdapter,
        policy: WeightingPolicy,
        rng: np.random.Generator | None = None,
        eager_zero_distance: bool = True,
        on_error: ErrorPolicy = ErrorPolicy.FORFEIT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF,
        max_queries: int | None = None,
        transcript: Callable[[str], None] = print,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.pool = pool
        self.client = client
        self.adapter = adapter
        self.policy = policy
        self.rng = rng if rng is not None else np.random.default_rng()
        self.eager_zero_distance = eager_zero_distance
        self.on_error = on_error
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.max_queries = max_queries
        self.transcript = transcript
        self.sleep = sleep

        self.state = SolverState.RUNNING
        self.word: str | None = None
        self.last_word: str | None = None
        self.queries = 0
        self.attempts = 0
        self.history: List[QueryOutcome] = []

        self.pool.column(DISTANCE, fill=0.0)
        self.policy.prepare(self.pool)

    @classmethod
    def from_context(cls, context: SolverContext, client: Scorer, **kwargs: Any) -> "Solver":
        """Build a solver with a fresh pool and the context's settings."""
        config = context.config
        return cls(
            pool=context.new_pool(),
            client=client,
            adapter=SimilarityOracleAdapter(context.model),
            policy=make_policy(config.policy, alpha=config.alpha, beta=config.beta),
            rng=np.random.default_rng(config.seed),
            eager_zero_distance=config.eager_zero_distance,
            on_error=config.on_error,
            max_retries=config.max_retries,
            retry_backoff=config.retry_backoff,
            max_queries=config.max_queries,
            **kwargs,
        )

    # -------------------- Main loop --------------------
    def run(self) -> SolveResult:
        """Step until solved or out of candidates.

        Raises SolverAbortedError if the error policy or an internal fault
        stops the solve.
        """
        while self.state is SolverState.RUNNING:
            self.step()
        return self.result()

    def step(self) -> None:
        if self.state is not SolverState.RUNNING:
            return
        if len(self.pool) == 0 or self._budget_spent():
            self._exhaust()
            return

        try:
            index = self.pool.sample(self.rng)
        except EmptyPoolError:
            self._exhaust()
            return

        word = self.pool.remove(index)
        score = self._query(word)
        if score is None:
            return
        if score == PERFECT_SCORE:
            self._solve(word)
            return
        self.reweight(word, score)

    def reweight(self, word: str, score: float) -> None:
        """Update the remaining candidates from the score of `word`.

        Candidates whose similarity to `word` equals the score exactly are
        queried straight away when eager mode is on; the policy then reweights
        whatever is left.
        """
        remaining = self.pool.words()
        try:
            sims = self.adapter.similarities(word, remaining)
        except UnknownWordError as exc:
            raise self._abort(f"Model has no vector for '{exc.word}'") from exc

        distances = self.pool.column(DISTANCE)
        distances[:] = sanitize_distances(np.abs(np.float32(score) - sims))

        if self.eager_zero_distance:
            for candidate in [remaining[i] for i in np.flatnonzero(distances == 0)]:
                if self._budget_spent():
                    break
                self.pool.remove_word(candidate)
                logging.info("'%s' is at distance 0 from '%s', trying it now", candidate, word)
                if self._query(candidate, eager=True) == PERFECT_SCORE:
                    self._solve(candidate)
                    return

        self.policy.update(self.pool, self.pool.column(DISTANCE))

    # -------------------- Oracle calls --------------------
    def _query(self, word: str, eager: bool = False) -> np.float32 | None:
        """Score `word`, applying the error policy. None means no score."""
        self.queries += 1
        self.last_word = word
        retries = 0

        while True:
            self.attempts += 1
            try:
                score = np.float32(self.client.score(word))
            except OracleError as exc:
                if self.on_error is ErrorPolicy.ABORT:
                    self._record(word, None, error=str(exc), eager=eager)
                    raise self._abort(f"Oracle failed on '{word}': {exc}") from exc

                if self.on_error is ErrorPolicy.RETRY and exc.retryable and retries < self.max_retries:
                    delay = self.retry_backoff * (2 ** retries)
                    retries += 1
                    logging.warning("Query for '%s' failed (%s); retry %d in %.1fs", word, exc, retries, delay)
                    self.sleep(delay)
                    continue

                logging.error("Query for '%s' failed, skipping: %s", word, exc)
                self._record(word, None, error=str(exc), eager=eager)
                return None

            self._record(word, float(score), eager=eager)
            self.transcript(f"{word} {score!s}")
            return score

    def _record(self, word: str, score: float | None, error: str | None = None, eager: bool = False) -> None:
        self.history.append(QueryOutcome(word=word, score=score, timestamp=time.time(), error=error, eager=eager))

    # -------------------- Termination --------------------
    def _budget_spent(self) -> bool:
        return self.max_queries is not None and self.queries >= self.max_queries

    def _solve(self, word: str) -> None:
        self.state = SolverState.SOLVED
        self.word = word
        logging.info("Solved with '%s' after %d queries", word, self.queries)

    def _exhaust(self) -> None:
        self.state = SolverState.EXHAUSTED
        if len(self.pool) == 0:
            logging.warning("Candidate pool exhausted after %d queries", self.queries)
        else:
            logging.warning("Query budget of %d spent, %d candidates left", self.max_queries, len(self.pool))

    def _abort(self, message: str) -> SolverAbortedError:
        self.state = SolverState.ABORTED
        return SolverAbortedError(message, self.diagnostics())

    def diagnostics(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "state": self.state.value,
            "queries": self.queries,
            "attempts": self.attempts,
            "last_word": self.last_word,
        }
        info.update(self.pool.diagnostics())
        return info

    def result(self) -> SolveResult:
        return SolveResult(
            state=self.state,
            word=self.word,
            queries=self.queries,
            attempts=self.attempts,
            history=list(self.history),
        )
