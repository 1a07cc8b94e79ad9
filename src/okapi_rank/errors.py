"""Exceptions raised by the ranking pipeline."""

from __future__ import annotations


class RankingError(Exception):
    """Base class for every error raised by okapi_rank."""


class InvalidParameterError(RankingError, ValueError):
    """BM25 was configured with k1 < 0 or b outside [0, 1]."""


class EmptyCorpusError(RankingError, ValueError):
    """A corpus was built from zero documents."""


class DuplicateDocumentError(RankingError, ValueError):
    """The same document id was supplied more than once."""

    def __init__(self, document_id: str):
        super().__init__(f"Duplicate document id: {document_id!r}")
        self.document_id = document_id


class TokenizationError(RankingError):
    """
    The tokenizer failed on a piece of text.

    Attributes:
        document_id (str | None): Id of the offending document, or None when the query failed.
    """

    def __init__(self, document_id: str | None, message: str):
        target = "query" if document_id is None else f"document {document_id!r}"
        super().__init__(f"Failed to tokenize {target}: {message}")
        self.document_id = document_id


class RankingCancelledError(RankingError):
    """The caller's cancel event was set while ranking was in progress."""


class DeadlineExceededError(RankingError):
    """Ranking did not finish before the caller's deadline."""
