"""Candidate words and their frequency prior.

Two sources: the Grammalecte lexicon table (tab-delimited, one row per
inflected form) or, without a lexicon file, the wordfreq top-N list.
"""

from __future__ import annotations

import csv
import logging
import re
from pathlib import Path
from typing import Container, Iterable, List, Sequence, Tuple

from wordfreq import top_n_list, word_frequency

from cemantix_solver.errors import ConfigLoadError

LEMMA_COL = 2
SURFACE_COL = 3
POS_COL = 4
FREQUENCY_COL = 18

# nouns, verb groups 1-3, adjectives
POS_PATTERN = re.compile(r"nom|v[123]|adj")

Entry = Tuple[str, float]


# -------------------- Basic helpers --------------------
def normalize_query(word: str) -> str:
    return word.strip().lower()


def is_clean_word(word: str) -> bool:
    """Keep simple alphabetic tokens that match typical guesses."""
    return word.isalpha() and 2 <= len(word) <= 24


# -------------------- Lexicon table --------------------
def filter_lexicon_rows(rows: Iterable[Sequence[str]], vocabulary: Container[str]) -> List[Entry]:
    """Select candidate rows from a lexicon table (header already skipped).

    A row is kept when its lemma equals its surface form, its POS tag matches
    POS_PATTERN and the surface form is known to the model. The first row for
    a surface form wins; later duplicates are skipped.
    """
    entries: List[Entry] = []
    seen = set()

    for line_no, row in enumerate(rows, start=2):
        if not row:
            continue
        if len(row) <= FREQUENCY_COL:
            raise ConfigLoadError(
                f"Lexicon line {line_no}: expected at least {FREQUENCY_COL + 1} columns, got {len(row)}"
            )

        surface = row[SURFACE_COL]
        if row[LEMMA_COL] != surface:
            continue
        if not POS_PATTERN.search(row[POS_COL]):
            continue
        if surface in seen or surface not in vocabulary:
            continue

        try:
            frequency = float(row[FREQUENCY_COL])
        except ValueError as exc:
            raise ConfigLoadError(
                f"Lexicon line {line_no}: invalid frequency {row[FREQUENCY_COL]!r}"
            ) from exc

        seen.add(surface)
        entries.append((surface, frequency))

    return entries


def load_lexicon(path: str | Path, vocabulary: Container[str]) -> List[Entry]:
    """Read a tab-delimited lexicon file and return the accepted candidates."""
    path = Path(path)
    logging.info("Reading lexicon %s", path)
    try:
        with path.open(encoding="utf-8", newline="") as handle:
            reader = csv.reader(handle, delimiter="\t", quoting=csv.QUOTE_NONE)
            next(reader, None)  # header
            entries = filter_lexicon_rows(reader, vocabulary)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise ConfigLoadError(f"Could not read lexicon {path}: {exc}") from exc

    if not entries:
        raise ConfigLoadError(f"No overlap between lexicon {path} and model vocabulary")
    return entries


# -------------------- wordfreq fallback --------------------
def build_candidates_from_wordfreq(
    vocabulary: Container[str],
    lang: str,
    size: int,
    multiplier: int = 3,
) -> List[Entry]:
    """Frequent words of `lang` that the model knows, with per-million counts."""
    raw_words = top_n_list(lang, size * multiplier)
    entries: List[Entry] = []
    seen = set()

    for word in raw_words:
        token = normalize_query(word)
        if not is_clean_word(token):
            continue
        if token in seen or token not in vocabulary:
            continue

        seen.add(token)
        entries.append((token, word_frequency(token, lang) * 1e6))

        if len(entries) >= size:
            break

    if not entries:
        raise ConfigLoadError(f"No overlap between wordfreq '{lang}' words and model vocabulary")
    return entries
