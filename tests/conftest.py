from __future__ import annotations

from typing import Dict, List, Sequence

import numpy as np
import pytest

from cemantix_solver.errors import UnknownWordError


class FakeModel:
    """Embedding stand-in: similarities come from a {anchor: {word: sim}} table.

    Pairs missing from the table get `default`.
    """

    def __init__(self, vocab: Sequence[str], table: Dict[str, Dict[str, float]] | None = None, default: float = 0.1):
        self.vocab = set(vocab)
        self.table = table or {}
        self.default = default

    def __contains__(self, word):
        return word in self.vocab

    def similarity(self, word_a: str, word_b: str) -> float:
        if word_a not in self.vocab:
            raise UnknownWordError(word_a)
        if word_b not in self.vocab:
            raise UnknownWordError(word_b)
        return self.table.get(word_a, {}).get(word_b, self.default)


class ScriptedOracle:
    """Scores words from a dict; `errors` maps word -> list of exceptions to raise first."""

    def __init__(self, scores: Dict[str, float] | None = None, default: float = 0.2, errors=None):
        self.scores = scores or {}
        self.default = default
        self.errors = {w: list(excs) for w, excs in (errors or {}).items()}
        self.calls: List[str] = []

    def score(self, word: str) -> float:
        self.calls.append(word)
        pending = self.errors.get(word)
        if pending:
            raise pending.pop(0)
        return self.scores.get(word, self.default)


class NthWordOracle:
    """Returns 1.0 for the k-th distinct word it is asked about, `miss` before that."""

    def __init__(self, k: int, miss: float = 0.3):
        self.k = k
        self.miss = miss
        self.seen: List[str] = []

    def score(self, word: str) -> float:
        if word not in self.seen:
            self.seen.append(word)
        return 1.0 if len(self.seen) == self.k and self.seen[-1] == word else self.miss


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def silent():
    lines: List[str] = []
    return lines.append
