import numpy as np
import pytest
from gensim.models import KeyedVectors

import cemantix_solver.lexicon as lexicon
from cemantix_solver.config import SolverConfig, SolverContext
from cemantix_solver.errors import ConfigLoadError


@pytest.fixture
def model_file(tmp_path):
    kv = KeyedVectors(vector_size=2)
    kv.add_vectors(["chat", "chien", "manger"], np.array([[1, 0], [0.9, 0.1], [0, 1]], dtype=np.float32))
    path = tmp_path / "vectors.bin"
    kv.save_word2vec_format(str(path), binary=True)
    return path


@pytest.fixture
def lexicon_file(tmp_path):
    def line(surface, pos, freq):
        return "\t".join(["1", "f", surface, surface, pos] + ["-"] * 13 + [freq])

    path = tmp_path / "lexique.csv"
    path.write_text(
        "\n".join(["header"] + [line("chat", "nom", "10"), line("manger", "v1", "5"), line("loup", "nom", "7")]),
        encoding="utf-8",
    )
    return path


def test_context_from_lexicon(model_file, lexicon_file):
    config = SolverConfig(lexicon_path=str(lexicon_file), model_path=str(model_file))

    context = SolverContext.load(config)

    assert context.entries == (("chat", 10.0), ("manger", 5.0))
    pool = context.new_pool()
    assert pool.words() == ["chat", "manger"]
    pool.remove(0)
    assert len(context.new_pool()) == 2


def test_context_from_wordfreq(model_file, monkeypatch):
    monkeypatch.setattr(lexicon, "top_n_list", lambda lang, n: ["chien", "le", "chat"])
    monkeypatch.setattr(lexicon, "word_frequency", lambda word, lang: 1e-4)
    config = SolverConfig(lexicon_path=None, model_path=str(model_file), candidate_size=10)

    context = SolverContext.load(config)

    assert [w for w, _ in context.entries] == ["chien", "chat"]


def test_context_missing_lexicon(model_file, tmp_path):
    config = SolverConfig(lexicon_path=str(tmp_path / "nope.csv"), model_path=str(model_file))
    with pytest.raises(ConfigLoadError):
        SolverContext.load(config)


def test_validate_rejects_missing_model():
    with pytest.raises(ValueError):
        SolverConfig(model_path=None, gensim_model=None).validate()
