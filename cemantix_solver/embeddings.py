"""Pretrained word vectors, loaded once and shared read-only."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Sequence

import gensim.downloader as gensim_api
import numpy as np
from gensim.models import KeyedVectors

from cemantix_solver.errors import ConfigLoadError, UnknownWordError


class EmbeddingModel:
    """Thin wrapper over gensim KeyedVectors.

    Exposes vocabulary membership and cosine similarity, single and batched.
    Nothing here mutates the vectors once the model is built.
    """

    def __init__(self, vectors: KeyedVectors) -> None:
        self._vectors = vectors
        # Unit-norm matrix, computed once so batched cosines are a single dot.
        self._normed = np.asarray(vectors.get_normed_vectors(), dtype=np.float32)

    @classmethod
    def from_word2vec(cls, path: str | Path, binary: bool = True) -> "EmbeddingModel":
        """Load a word2vec-format file (binary by default)."""
        path = Path(path)
        if not path.is_file():
            raise ConfigLoadError(f"Embedding model not found: {path}")

        logging.info("Loading word2vec model from %s", path)
        try:
            vectors = KeyedVectors.load_word2vec_format(str(path), binary=binary, unicode_errors="ignore")
        except (OSError, ValueError, EOFError) as exc:
            raise ConfigLoadError(f"Could not read embedding model {path}: {exc}") from exc

        logging.info("Loaded %d vectors of size %d", len(vectors.index_to_key), vectors.vector_size)
        return cls(vectors)

    @classmethod
    def from_gensim_data(cls, model_name: str) -> "EmbeddingModel":
        """Load pretrained keyed vectors from gensim-data (download once)."""
        logging.info("Loading gensim model '%s'", model_name)
        try:
            vectors = gensim_api.load(model_name)
        except (OSError, ValueError) as exc:
            raise ConfigLoadError(f"Could not load gensim model '{model_name}': {exc}") from exc
        return cls(vectors)

    # -------------------- Vocabulary --------------------
    def __contains__(self, word: object) -> bool:
        return word in self._vectors.key_to_index

    def contains(self, word: str) -> bool:
        return word in self

    def __len__(self) -> int:
        return len(self._vectors.index_to_key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._vectors.index_to_key)

    @property
    def vector_size(self) -> int:
        return int(self._vectors.vector_size)

    # -------------------- Similarity --------------------
    def _row(self, word: str) -> int:
        try:
            return self._vectors.key_to_index[word]
        except KeyError:
            raise UnknownWordError(word) from None

    def similarity(self, word_a: str, word_b: str) -> float:
        """Cosine similarity between two in-vocabulary words."""
        a = self._normed[self._row(word_a)]
        b = self._normed[self._row(word_b)]
        return float(np.float32(a @ b))

    def similarities(self, anchor: str, words: Sequence[str]) -> np.ndarray:
        """Cosine similarity of `anchor` against each of `words`, in order."""
        anchor_vec = self._normed[self._row(anchor)]
        if not words:
            return np.zeros(0, dtype=np.float32)

        rows = np.fromiter((self._row(w) for w in words), dtype=np.int64, count=len(words))
        return (self._normed[rows] @ anchor_vec).astype(np.float32)
