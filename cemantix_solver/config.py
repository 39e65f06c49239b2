"""Run configuration and the immutable context shared by solves."""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from cemantix_solver.embeddings import EmbeddingModel
from cemantix_solver.lexicon import build_candidates_from_wordfreq, load_lexicon
from cemantix_solver.pool import CandidatePool
from cemantix_solver.scoring import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from cemantix_solver.weighting import POLICY_ACCUMULATOR, POLICIES

# -------------------- Defaults --------------------
DEFAULT_LEXICON_PATH = "lexique-grammalecte-fr-v7.0.csv"
DEFAULT_MODEL_PATH = "frWac_non_lem_no_postag_no_phrase_200_cbow_cut100.bin"
DEFAULT_LANG = "fr"
DEFAULT_CANDIDATE_SIZE = 50_000
DEFAULT_ALPHA = 0.0
DEFAULT_BETA = 1.0
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_BACKOFF = 1.0


class ErrorPolicy(str, Enum):
    """What the solver does with a word whose query failed."""

    FORFEIT = "forfeit"
    RETRY = "retry"
    ABORT = "abort"


@dataclass(frozen=True)
class SolverConfig:
    lexicon_path: str | None = DEFAULT_LEXICON_PATH
    model_path: str | None = DEFAULT_MODEL_PATH
    gensim_model: str | None = None
    lang: str = DEFAULT_LANG
    candidate_size: int = DEFAULT_CANDIDATE_SIZE
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    policy: str = POLICY_ACCUMULATOR
    alpha: float = DEFAULT_ALPHA
    beta: float = DEFAULT_BETA
    eager_zero_distance: bool = True
    on_error: ErrorPolicy = ErrorPolicy.FORFEIT
    max_retries: int = DEFAULT_MAX_RETRIES
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    max_queries: int | None = None
    seed: int | None = None

    def validate(self) -> None:
        if self.model_path is None and self.gensim_model is None:
            raise ValueError("Provide an embedding model path or a gensim model name")
        if self.policy not in POLICIES:
            raise ValueError(f"--policy must be one of: {', '.join(POLICIES)}")
        if self.alpha < 0 or self.beta < 0:
            raise ValueError("--alpha and --beta must be >= 0")
        if self.policy == POLICY_ACCUMULATOR and self.alpha == 0 and self.beta == 0:
            raise ValueError("--alpha and --beta cannot both be 0")
        if self.timeout <= 0:
            raise ValueError("--timeout must be > 0")
        if self.max_retries < 0:
            raise ValueError("--max-retries must be >= 0")
        if self.retry_backoff < 0:
            raise ValueError("--retry-backoff must be >= 0")
        if self.max_queries is not None and self.max_queries <= 0:
            raise ValueError("--max-queries must be > 0")
        if self.candidate_size <= 0:
            raise ValueError("--candidate-size must be > 0")

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "SolverConfig":
        model_path = args.model
        if model_path is None and args.gensim_model is None:
            model_path = DEFAULT_MODEL_PATH
        config = cls(
            lexicon_path=None if args.no_lexicon else args.lexicon,
            model_path=model_path,
            gensim_model=args.gensim_model,
            lang=args.lang,
            candidate_size=args.candidate_size,
            base_url=args.url,
            timeout=args.timeout,
            policy=args.policy,
            alpha=args.alpha,
            beta=args.beta,
            eager_zero_distance=not args.no_eager,
            on_error=ErrorPolicy(args.on_error),
            max_retries=args.max_retries,
            retry_backoff=args.retry_backoff,
            max_queries=args.max_queries,
            seed=args.seed,
        )
        config.validate()
        return config


@dataclass(frozen=True)
class SolverContext:
    """Model and candidate list, loaded once and only ever read.

    Each solve takes its own pool from `new_pool()`, so a context can back
    any number of solves.
    """

    model: EmbeddingModel
    entries: Tuple[Tuple[str, float], ...]
    config: SolverConfig

    @classmethod
    def load(cls, config: SolverConfig) -> "SolverContext":
        if config.model_path is not None:
            model = EmbeddingModel.from_word2vec(config.model_path)
        else:
            model = EmbeddingModel.from_gensim_data(config.gensim_model)

        if config.lexicon_path is not None:
            entries = load_lexicon(config.lexicon_path, model)
        else:
            entries = build_candidates_from_wordfreq(model, config.lang, config.candidate_size)

        logging.info("Candidate pool: %d words", len(entries))
        return cls(model=model, entries=tuple(entries), config=config)

    def new_pool(self) -> CandidatePool:
        return CandidatePool.from_entries(self.entries)
