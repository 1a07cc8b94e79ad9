import math

import pytest

from okapi_rank.bm25 import BM25, rank_documents
from okapi_rank.corpus import Corpus
from okapi_rank.tokenizer import tokenize

ANIMALS = {"d1": "cat dog", "d2": "cat cat cat", "d3": "fish"}

# N = 3, avgdl = 6 / 3, idf(cat) = ln(3.5 / 2.5)
# d1: raw_freq = 1/2, tf = 0.5 * 2.2 / (0.5 + 1.2 * (0.25 + 0.75 * 2 / 2))
# d2: raw_freq = 3/3, tf = 1.0 * 2.2 / (1.0 + 1.2 * (0.25 + 0.75 * 3 / 2))
EXPECTED_D1 = math.log(1.4) * 1.1 / 1.7
EXPECTED_D2 = math.log(1.4) * 2.2 / 2.65


def test_bm25_animals_regression() -> None:
    ranked = rank_documents("cat", ANIMALS, top_n=2, k1=1.2, b=0.75, tokenizer=tokenize)

    assert list(ranked) == ["d2", "d1"]
    assert ranked["d2"] == pytest.approx(EXPECTED_D2, rel=1e-12)
    assert ranked["d1"] == pytest.approx(EXPECTED_D1, rel=1e-12)
    assert ranked["d2"] == pytest.approx(0.2793354417, abs=1e-9)
    assert ranked["d1"] == pytest.approx(0.2177173296, abs=1e-9)


def test_bm25_ordering_regression() -> None:
    """
    Regression check to guard BM25 kernel behavior:
    - Documents with repeated query terms should score higher than those with fewer matches.
    - Non-matching documents should rank last.
    """
    documents = [
        "foo foo foo bar".split(),  # heavy tf on foo
        "foo bar baz".split(),  # single foo/bar
        "baz qux".split(),  # no query terms
    ]
    corpus = Corpus(documents)
    bm25 = BM25(k1=1.5, b=0.75)

    ranked = bm25.rank(["foo", "bar"], corpus, top_n=3)

    # Expected ordering: doc0 > doc1 > doc2
    assert list(ranked) == ["0", "1", "2"]

    scores = list(ranked.values())
    assert scores[0] > scores[1] > scores[2]
    assert scores[2] == 0.0


def test_rank_is_idempotent() -> None:
    documents = {f"doc{i}": " ".join(["cat"] * (i % 4 + 1) + ["dog"] * (i % 3) + ["fish"]) for i in range(20)}

    first = rank_documents("cat dog", documents, top_n=20, tokenizer=tokenize)
    second = rank_documents("cat dog", documents, top_n=20, tokenizer=tokenize)
    assert list(first.items()) == list(second.items())


def test_calls_do_not_share_corpus_state() -> None:
    rank_documents("cat", {"x": "cat cat", "y": "cat bird", "z": "bird"}, tokenizer=tokenize)
    ranked = rank_documents("cat", ANIMALS, top_n=2, k1=1.2, b=0.75, tokenizer=tokenize)
    assert ranked["d2"] == pytest.approx(EXPECTED_D2, rel=1e-12)
