"""
Per-call corpus index for BM25.

A `Corpus` holds every document's terms next to its id, in insertion order,
and derives the statistics BM25 needs (document lengths, document frequencies,
average length). It is built for a single ranking call and never shared.
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from collections.abc import Callable, Iterable, Iterator, Mapping
from functools import cached_property

import numpy as np

from okapi_rank.errors import DuplicateDocumentError, EmptyCorpusError, TokenizationError
from okapi_rank.ranking_utils import parallel_map

logger = logging.getLogger(__name__)


def _document_pairs(documents: Mapping[str, str] | Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    if isinstance(documents, Mapping):
        return list(documents.items())
    return list(documents)


def _check_unique(ids: Iterable[str]) -> None:
    seen: set[str] = set()
    for doc_id in ids:
        if doc_id in seen:
            raise DuplicateDocumentError(doc_id)
        seen.add(doc_id)


class Corpus:
    """
    A tokenized collection of documents and its BM25 statistics.

    Args:
        documents (list[list[str]]): Tokenized documents. Each document is a list of terms.
        ids (list[str] | None): Document ids, parallel to `documents`. Defaults to
            the string form of each document's position.

    Attributes:
        documents (list[list[str]]): The tokenized documents, lowercased.
        ids (list[str]): Document ids in insertion order.
        document_count (int): Total number of documents in the corpus.

    Raises:
        EmptyCorpusError: No documents were given.
        DuplicateDocumentError: An id appears more than once.
        ValueError: `ids` and `documents` differ in length.
    """

    def __init__(self, documents: list[list[str]], ids: list[str] | None = None):
        if not documents:
            raise EmptyCorpusError("Cannot build a corpus from zero documents")
        if ids is None:
            ids = [str(idx) for idx in range(len(documents))]
        if len(ids) != len(documents):
            raise ValueError(f"Got {len(ids)} ids for {len(documents)} documents")
        _check_unique(ids)

        self.documents = [[term.lower() for term in doc] for doc in documents]
        self.ids = list(ids)
        self.document_count = len(self.documents)

    @classmethod
    def build(
        cls,
        documents: Mapping[str, str] | Iterable[tuple[str, str]],
        tokenize: Callable[[str], list[str]],
        num_workers: int | None = None,
        deadline: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> "Corpus":
        """
        Tokenize raw documents and index them.

        Args:
            documents: Mapping of id -> raw text, or an iterable of (id, text) pairs.
            tokenize: Tokenizer applied to every document independently.
            num_workers: Thread pool size for tokenization (None for sequential).
            deadline: Absolute `time.monotonic()` deadline checked between documents.
            cancel_event: Cancellation event checked between documents.

        Raises:
            EmptyCorpusError: `documents` is empty.
            DuplicateDocumentError: An id appears more than once.
            TokenizationError: The tokenizer raised on a document.
        """
        pairs = _document_pairs(documents)
        if not pairs:
            raise EmptyCorpusError("Cannot build a corpus from zero documents")
        ids = [doc_id for doc_id, _ in pairs]
        _check_unique(ids)

        def tokenize_one(pair: tuple[str, str]) -> list[str]:
            doc_id, text = pair
            try:
                return list(tokenize(text))
            except Exception as exc:
                raise TokenizationError(doc_id, str(exc)) from exc

        tokenized = parallel_map(tokenize_one, pairs, num_workers, deadline, cancel_event)
        corpus = cls(tokenized, ids)
        logger.debug(
            "Built corpus: %d documents, %d terms, %d unique terms",
            corpus.document_count,
            corpus.total_term_count,
            len(corpus.document_frequency),
        )
        return corpus

    def __len__(self) -> int:
        return self.document_count

    def __getitem__(self, index: int) -> list[str]:
        return self.documents[index]

    def __iter__(self) -> Iterator[tuple[str, list[str]]]:
        return zip(self.ids, self.documents)

    @cached_property
    def term_frequency(self) -> list[Counter[str]]:
        """Term counts for each document."""
        return [Counter(doc) for doc in self.documents]

    @cached_property
    def document_frequency(self) -> Counter[str]:
        """Number of documents each term appears in."""
        return Counter(term for doc in self.documents for term in set(doc))

    @cached_property
    def document_length(self) -> np.ndarray:
        """Number of terms in each document."""
        return np.array([len(doc) for doc in self.documents], dtype=np.int64)

    @cached_property
    def total_term_count(self) -> int:
        return int(self.document_length.sum())

    @cached_property
    def average_document_length(self) -> float:
        """Average number of terms per document."""
        return self.total_term_count / self.document_count

    def freeze(self) -> "Corpus":
        """Materialize every derived statistic so the corpus can be read from many threads."""
        _ = self.term_frequency, self.document_frequency, self.average_document_length
        return self
