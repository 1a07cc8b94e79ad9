"""BM25 top-N ranking of small in-memory corpora."""

from okapi_rank.bm25 import BM25, rank_documents
from okapi_rank.corpus import Corpus
from okapi_rank.errors import (
    DeadlineExceededError,
    DuplicateDocumentError,
    EmptyCorpusError,
    InvalidParameterError,
    RankingCancelledError,
    RankingError,
    TokenizationError,
)
from okapi_rank.tokenizer import JiebaTokenizer, Tokenizer, normalize_terms, tokenize

__all__ = [
    "BM25",
    "Corpus",
    "DeadlineExceededError",
    "DuplicateDocumentError",
    "EmptyCorpusError",
    "InvalidParameterError",
    "JiebaTokenizer",
    "RankingCancelledError",
    "RankingError",
    "TokenizationError",
    "Tokenizer",
    "normalize_terms",
    "rank_documents",
    "tokenize",
]
