"""Command-line entry point: load the context, run one solve, report."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from cemantix_solver.config import (
    DEFAULT_ALPHA,
    DEFAULT_BETA,
    DEFAULT_CANDIDATE_SIZE,
    DEFAULT_LANG,
    DEFAULT_LEXICON_PATH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BACKOFF,
    ErrorPolicy,
    SolverConfig,
    SolverContext,
)
from cemantix_solver.errors import ConfigLoadError, SolverAbortedError
from cemantix_solver.scoring import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ScoringClient
from cemantix_solver.solver import Solver
from cemantix_solver.weighting import POLICIES, POLICY_ACCUMULATOR

EXIT_SOLVED = 0
EXIT_EXHAUSTED = 1
EXIT_FAILED = 2


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Silence noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("gensim").setLevel(logging.WARNING)
    logging.getLogger("smart_open").setLevel(logging.WARNING)


# -------------------- Argument parsing --------------------
def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Solve today's Cemantix by frequency-weighted sampling and embedding feedback."
    )
    parser.add_argument(
        "--lexicon",
        type=str,
        default=DEFAULT_LEXICON_PATH,
        help="Tab-delimited Grammalecte lexicon (lemma, form, POS, frequency columns).",
    )
    parser.add_argument(
        "--no-lexicon",
        action="store_true",
        help="Ignore --lexicon and build candidates from the wordfreq top-N list.",
    )
    parser.add_argument("--model", type=str, help="word2vec binary file with the game's embeddings.")
    parser.add_argument(
        "--gensim-model",
        type=str,
        help="gensim-data model name, used instead of --model (e.g. glove-wiki-gigaword-300).",
    )
    parser.add_argument("--lang", type=str, default=DEFAULT_LANG, help="wordfreq language for --no-lexicon.")
    parser.add_argument(
        "--candidate-size",
        type=int,
        default=DEFAULT_CANDIDATE_SIZE,
        help="Candidate pool size when building from wordfreq.",
    )
    parser.add_argument("--url", type=str, default=DEFAULT_BASE_URL, help="Scoring server base URL.")
    parser.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="Per-request timeout in seconds.")
    parser.add_argument(
        "--policy",
        choices=POLICIES,
        default=POLICY_ACCUMULATOR,
        help="Reweighting policy: inverse distance, or frequency-weighted sum/product accumulators.",
    )
    parser.add_argument("--alpha", type=float, default=DEFAULT_ALPHA, help="Accumulator weight of 1/sum(d).")
    parser.add_argument("--beta", type=float, default=DEFAULT_BETA, help="Accumulator weight of 1/prod(d).")
    parser.add_argument(
        "--no-eager",
        action="store_true",
        help="Do not immediately try candidates at distance 0 from a scored word.",
    )
    parser.add_argument(
        "--on-error",
        choices=[p.value for p in ErrorPolicy],
        default=ErrorPolicy.FORFEIT.value,
        help="On a failed query: forfeit the word, retry transport errors, or abort the solve.",
    )
    parser.add_argument("--max-retries", type=int, default=DEFAULT_MAX_RETRIES, help="Retries with --on-error retry.")
    parser.add_argument(
        "--retry-backoff",
        type=float,
        default=DEFAULT_RETRY_BACKOFF,
        help="Initial retry delay in seconds, doubled on each retry.",
    )
    parser.add_argument("--max-queries", type=int, help="Stop after this many words were submitted.")
    parser.add_argument("--seed", type=int, help="Seed for reproducible sampling.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = SolverConfig.from_args(args)
        context = SolverContext.load(config)
    except (ValueError, ConfigLoadError) as exc:
        logging.error("%s", exc)
        return EXIT_FAILED

    client = ScoringClient(base_url=config.base_url, timeout=config.timeout)
    solver = Solver.from_context(context, client)
    try:
        result = solver.run()
    except SolverAbortedError as exc:
        logging.error("Solve aborted: %s", exc)
        logging.error("Diagnostics: %s", exc.diagnostics)
        return EXIT_FAILED
    finally:
        client.close()

    if result.solved:
        print(f"Solved! '{result.word}' found in {result.queries} queries.")
        return EXIT_SOLVED

    print(f"No solution after {result.queries} queries ({len(solver.pool)} candidates left).")
    return EXIT_EXHAUSTED


if __name__ == "__main__":
    sys.exit(main())
