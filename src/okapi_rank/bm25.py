"""
Okapi BM25 scoring over a per-call `Corpus`.

Formulas (|d| = document length, avgdl = corpus average length, N = documents):
    raw_freq(t, d) = count(t, d) / |d|
    tf(t, d)       = raw_freq * (k1 + 1) / (raw_freq + k1 * (1 - b + b * |d| / avgdl))
    score(d)       = sum(tf(t, d) * idf(t) for t in query)  [query terms not deduplicated]

IDF variants (neither is floored at zero):
    classic:   ln((N + 0.5) / (df(t) + 0.5))
    robertson: ln((N - df(t) + 0.5) / (df(t) + 0.5))        [negative when df > N / 2]

Usage:
    from okapi_rank.bm25 import rank_documents

    rank_documents("cat", {"d1": "cat dog", "d2": "cat cat cat", "d3": "fish"}, top_n=2)
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Iterable, Mapping

import numpy as np

from okapi_rank.config import DEFAULT_TOP_N, Config
from okapi_rank.corpus import Corpus
from okapi_rank.errors import InvalidParameterError, TokenizationError
from okapi_rank.ranking_utils import parallel_map, select_top_k
from okapi_rank.tokenizer import JiebaTokenizer, Tokenizer

logger = logging.getLogger(__name__)


def classic_idf(df: int, num_docs: int) -> float:
    smoothing = Config.idf_smoothing
    return math.log((num_docs + smoothing) / (df + smoothing))


def robertson_idf(df: int, num_docs: int) -> float:
    smoothing = Config.idf_smoothing
    return math.log((num_docs - df + smoothing) / (df + smoothing))


IDF_VARIANTS = {
    "classic": classic_idf,
    "robertson": robertson_idf,
}


class BM25:
    """
    BM25 scorer. Holds only its parameters; the corpus is passed to every call.

    Args:
        k1 (float): Term frequency saturation parameter, finite and >= 0. A k1 of 0 ignores
            term frequency entirely; large values approach raw term frequency.
        b (float): Length normalization parameter in [0, 1]. b = 1 fully scales term
            weight by document length, b = 0 disables length normalization.
        idf_variant (str): "classic" or "robertson" (see module docstring).

    Raises:
        InvalidParameterError: k1 negative or infinite, b outside [0, 1], or an unknown idf_variant.
    """

    def __init__(self, k1: float | None = None, b: float | None = None, idf_variant: str | None = None):
        k1 = Config.k1 if k1 is None else k1
        b = Config.b if b is None else b
        idf_variant = Config.idf_variant if idf_variant is None else idf_variant
        if not (math.isfinite(k1) and k1 >= 0):
            raise InvalidParameterError(f"Invalid k1 = {k1}")
        if not 0 <= b <= 1:
            raise InvalidParameterError(f"Invalid b = {b}")
        if idf_variant not in IDF_VARIANTS:
            raise InvalidParameterError(f"Unknown idf_variant = {idf_variant!r}")
        self.k1 = float(k1)
        self.b = float(b)
        self.idf_variant = idf_variant
        self._idf_formula = IDF_VARIANTS[idf_variant]

    @classmethod
    def public(cls, k1: float | None = None, b: float | None = None, idf_variant: str | None = None) -> "BM25":
        """Scorer with the defaults used by `rank_documents` (k1=1.2, b=0.95)."""
        return cls(k1, Config.public_b if b is None else b, idf_variant)

    def __repr__(self) -> str:
        return f"BM25(k1={self.k1}, b={self.b}, idf_variant={self.idf_variant!r})"

    def tf(self, term: str, corpus: Corpus, index: int) -> float:
        """Saturated, length-normalized frequency of `term` in document `index`."""
        count = corpus.term_frequency[index].get(term.lower(), 0)
        if count == 0:
            return 0.0
        length = int(corpus.document_length[index])
        freq = count / length
        k1, b = self.k1, self.b
        return (freq * (k1 + 1)) / (freq + k1 * (1 - b + b * length / corpus.average_document_length))

    def idf(self, term: str, corpus: Corpus) -> float:
        """Inverse document frequency of `term`."""
        df = corpus.document_frequency.get(term.lower(), 0)
        return self._idf_formula(df, corpus.document_count)

    def _idf_table(self, query: list[str], corpus: Corpus) -> dict[str, float]:
        return {term: self.idf(term, corpus) for term in set(query)}

    def _score(self, query: list[str], idf: dict[str, float], corpus: Corpus, index: int) -> float:
        total = 0.0
        for term in query:
            total += self.tf(term, corpus, index) * idf[term]
        return total

    def score(self, query: Iterable[str], corpus: Corpus, index: int) -> float:
        """BM25 score of document `index` for the query terms."""
        terms = [term.lower() for term in query]
        return self._score(terms, self._idf_table(terms, corpus), corpus, index)

    def get_scores(
        self,
        query: Iterable[str],
        corpus: Corpus,
        num_workers: int | None = None,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> np.ndarray:
        """
        Score every document in the corpus.

        Args:
            query: Query terms
            corpus: Corpus built for this call
            num_workers: Thread pool size (None for sequential)
            deadline: Absolute `time.monotonic()` deadline checked between documents
            cancel_event: Cancellation event checked between documents

        Returns:
            Scores aligned with `corpus.ids`
        """
        terms = [term.lower() for term in query]
        corpus.freeze()
        idf = self._idf_table(terms, corpus)

        def score_one(index: int) -> float:
            return self._score(terms, idf, corpus, index)

        scores = parallel_map(score_one, range(len(corpus)), num_workers, deadline, cancel_event)
        return np.array(scores, dtype=np.float64)

    def rank(
        self,
        query: Iterable[str],
        corpus: Corpus,
        top_n: int,
        num_workers: int | None = None,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, float]:
        """
        Rank the corpus against the query.

        Returns:
            Up to `top_n` ids mapped to their scores, best first. Equal scores keep
            the corpus insertion order. `top_n <= 0` returns an empty dict.
        """
        if top_n <= 0:
            return {}
        scores = self.get_scores(query, corpus, num_workers, deadline, cancel_event)
        order = select_top_k(scores, top_n)
        return {corpus.ids[idx]: float(scores[idx]) for idx in order}


def rank_documents(
    query: str,
    documents: Mapping[str, str] | Iterable[tuple[str, str]],
    top_n: int = DEFAULT_TOP_N,
    k1: float | None = None,
    b: float | None = None,
    idf_variant: str | None = None,
    tokenizer: Tokenizer | None = None,
    num_workers: int | None = None,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
) -> dict[str, float]:
    """
    Rank raw documents against a raw query with BM25.

    Args:
        query: Query text
        documents: Mapping of id -> text, or an iterable of (id, text) pairs
        top_n: Number of results to return
        k1: TF saturation parameter, finite and >= 0 (default: Config.k1)
        b: Length normalization parameter in [0, 1] (default: Config.public_b)
        idf_variant: "classic" or "robertson" (default: Config.idf_variant)
        tokenizer: Text -> terms callable (default: JiebaTokenizer)
        num_workers: Thread pool size for tokenization and scoring
            (default: OKAPI_RANK_NUM_WORKERS, sequential when unset)
        timeout: Seconds allowed for the whole call
        cancel_event: Event the caller may set to abort the call

    Returns:
        Ordered mapping of id -> score, highest score first

    Raises:
        InvalidParameterError: Bad k1, b or idf_variant
        EmptyCorpusError: `documents` is empty
        DuplicateDocumentError: An id appears more than once
        TokenizationError: The tokenizer failed on the query or a document
        DeadlineExceededError: `timeout` elapsed
        RankingCancelledError: `cancel_event` was set
    """
    scorer = BM25.public(k1, b, idf_variant)
    if tokenizer is None:
        tokenizer = JiebaTokenizer()
    if num_workers is None:
        num_workers = Config.num_workers
    deadline = time.monotonic() + timeout if timeout is not None else None

    try:
        query_terms = list(tokenizer(query))
    except Exception as exc:
        raise TokenizationError(None, str(exc)) from exc

    corpus = Corpus.build(documents, tokenizer, num_workers, deadline, cancel_event)
    logger.debug("Ranking %d documents for %d query terms with %r", len(corpus), len(query_terms), scorer)
    return scorer.rank(query_terms, corpus, top_n, num_workers, deadline, cancel_event)
