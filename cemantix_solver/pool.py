"""Weighted candidate pool with O(1) removal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple

import numpy as np

from cemantix_solver.errors import EmptyPoolError

FREQUENCY = "frequency"
WEIGHT = "weight"
DIAGNOSTIC_TOP = 5


@dataclass(frozen=True)
class Candidate:
    word: str
    frequency: float
    weight: float


class CandidatePool:
    """Dense arena of live candidates.

    Candidates are stored column-wise: words in a list, numeric state in
    parallel numpy arrays. Only the first `len(pool)` slots are live. Removal
    moves the last live candidate into the freed slot, so indices returned
    before a removal must not be reused after it.
    """

    def __init__(self, words: Sequence[str], frequencies: Sequence[float]) -> None:
        if len(words) != len(frequencies):
            raise ValueError("words and frequencies must have the same length")

        self._words: List[str] = list(words)
        self._index: Dict[str, int] = {}
        for idx, word in enumerate(self._words):
            if word in self._index:
                raise ValueError(f"Duplicate candidate '{word}'")
            self._index[word] = idx

        freqs = np.asarray(frequencies, dtype=np.float64)
        if np.any(freqs < 0) or not np.all(np.isfinite(freqs)):
            raise ValueError("Frequencies must be finite and non-negative")

        self._size = len(self._words)
        self._columns: Dict[str, np.ndarray] = {
            FREQUENCY: freqs.copy(),
            WEIGHT: freqs.copy(),
        }

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, float]]) -> "CandidatePool":
        """Build a pool from (word, frequency) pairs; initial weight = frequency."""
        pairs = list(entries)
        return cls([w for w, _ in pairs], [f for _, f in pairs])

    # -------------------- Access --------------------
    def __len__(self) -> int:
        return self._size

    def __contains__(self, word: object) -> bool:
        return word in self._index

    def __getitem__(self, index: int) -> Candidate:
        self._check_index(index)
        return Candidate(
            word=self._words[index],
            frequency=float(self._columns[FREQUENCY][index]),
            weight=float(self._columns[WEIGHT][index]),
        )

    def words(self) -> List[str]:
        """Live words, in slot order."""
        return self._words[: self._size]

    def index_of(self, word: str) -> int:
        return self._index[word]

    @property
    def frequencies(self) -> np.ndarray:
        return self._columns[FREQUENCY][: self._size]

    @property
    def weights(self) -> np.ndarray:
        """Live view of the weights; writes go straight into the pool."""
        return self._columns[WEIGHT][: self._size]

    def set_weights(self, values: Sequence[float] | np.ndarray) -> None:
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (self._size,):
            raise ValueError(f"Expected {self._size} weights, got shape {values.shape}")
        if np.any(values < 0):
            raise ValueError("Weights must be non-negative")
        self._columns[WEIGHT][: self._size] = values

    def column(self, name: str, fill: float = 0.0) -> np.ndarray:
        """Return a live view of a per-candidate column, creating it if needed.

        Extra columns follow their candidate through removals, which lets a
        weighting policy keep running state per word.
        """
        if name not in self._columns:
            self._columns[name] = np.full(len(self._words), fill, dtype=np.float64)
        return self._columns[name][: self._size]

    # -------------------- Mutation --------------------
    def remove(self, index: int) -> str:
        """Remove the candidate at `index` and return its word."""
        self._check_index(index)
        last = self._size - 1
        word = self._words[index]

        if index != last:
            moved = self._words[last]
            self._words[index] = moved
            self._index[moved] = index
            for values in self._columns.values():
                values[index] = values[last]

        del self._index[word]
        self._size = last
        return word

    def remove_word(self, word: str) -> None:
        self.remove(self._index[word])

    # -------------------- Sampling --------------------
    def sample(self, rng: np.random.Generator) -> int:
        """Draw one index with probability proportional to its weight.

        Weights are normalized here. When they sum to zero (or to something
        non-finite) the draw is uniform over the live candidates; +inf weights
        share all the mass between them.
        """
        n = self._size
        if n == 0:
            raise EmptyPoolError("Candidate pool is empty")
        if n == 1:
            return 0

        weights = self.weights
        infinite = np.isposinf(weights)
        if infinite.any():
            choices = np.flatnonzero(infinite)
            return int(choices[rng.integers(len(choices))])

        weights = np.where(np.isnan(weights), 0.0, weights)
        cumulative = np.cumsum(weights)
        total = float(cumulative[-1])
        if not np.isfinite(total) or total <= 0.0:
            return int(rng.integers(n))

        index = int(np.searchsorted(cumulative, rng.random() * total, side="right"))
        return min(index, n - 1)

    # -------------------- Diagnostics --------------------
    def diagnostics(self) -> Dict[str, Any]:
        weights = self.weights
        info: Dict[str, Any] = {"pool_size": self._size}
        if self._size == 0:
            return info

        finite = weights[np.isfinite(weights)]
        info.update(
            weight_sum=float(finite.sum()) if finite.size else 0.0,
            weight_min=float(finite.min()) if finite.size else None,
            weight_max=float(finite.max()) if finite.size else None,
            non_finite_weights=int(self._size - finite.size),
        )
        order = np.argsort(-np.nan_to_num(weights, nan=0.0))[:DIAGNOSTIC_TOP]
        info["top_candidates"] = [(self._words[i], float(weights[i])) for i in order]
        return info

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._size:
            raise IndexError(f"Candidate index {index} out of range for pool of {self._size}")
