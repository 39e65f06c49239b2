"""Embedding similarity of a tried word against the remaining candidates."""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from cemantix_solver.errors import UnknownWordError


class SupportsSimilarity(Protocol):
    def __contains__(self, word: object) -> bool: ...

    def similarity(self, word_a: str, word_b: str) -> float: ...


class SimilarityOracleAdapter:
    """Read-only view of an embedding model used by the solver loop.

    Models exposing a batched `similarities(anchor, words)` are used directly;
    anything with `similarity(a, b)` works, one pair at a time.
    """

    def __init__(self, model: SupportsSimilarity) -> None:
        self.model = model

    def similarities(self, anchor_word: str, remaining_words: Sequence[str]) -> np.ndarray:
        if anchor_word not in self.model:
            raise UnknownWordError(anchor_word)
        if len(remaining_words) == 0:
            return np.zeros(0, dtype=np.float32)

        batched = getattr(self.model, "similarities", None)
        if batched is not None:
            sims = batched(anchor_word, remaining_words)
        else:
            sims = [self.model.similarity(anchor_word, word) for word in remaining_words]

        sims = np.asarray(sims, dtype=np.float32)
        if sims.shape != (len(remaining_words),):
            raise ValueError(f"Model returned {sims.shape} similarities for {len(remaining_words)} words")
        return sims
