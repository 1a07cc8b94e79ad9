"""
Tokenizers for BM25 text processing.

Any callable mapping text to a list of terms can be used as a tokenizer. Both
tokenizers shipped here apply the same normalization policy (see
`normalize_terms`) so corpus statistics stay comparable:

1. Strip surrounding whitespace from each raw token
2. Drop tokens shorter than `min_length` characters (default 2)
3. Lowercase the survivors

Usage:
    from okapi_rank.tokenizer import JiebaTokenizer, tokenize

    tokenize("The cat sat on a mat")        # ['the', 'cat', 'sat', 'on', 'mat']
    JiebaTokenizer()("我爱北京天安门")        # ['北京', '天安门']
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Protocol

import jieba

from okapi_rank.config import Config

_WORD_PATTERN = re.compile(r"\w+")


class Tokenizer(Protocol):
    """Text -> ordered list of normalized terms."""

    def __call__(self, text: str) -> list[str]: ...


def _as_text(text: str | bytes) -> str:
    if isinstance(text, bytes):
        return text.decode("utf-8")
    if not isinstance(text, str):
        raise TypeError(f"Expected str or bytes, got {type(text).__name__}")
    return text


def normalize_terms(tokens: Iterable[str], min_length: int = Config.min_term_length) -> list[str]:
    """
    Apply the shared normalization policy to raw tokens.

    The length check and the stored term both use the whitespace-stripped token,
    so " Cat " is kept as "cat".
    """
    terms = []
    for token in tokens:
        token = token.strip()
        if len(token) >= min_length:
            terms.append(token.lower())
    return terms


def tokenize(text: str | bytes) -> list[str]:
    """Lowercase and split on contiguous word characters, dropping one-character terms."""
    return normalize_terms(_WORD_PATTERN.findall(_as_text(text)))


class JiebaTokenizer:
    """
    Word segmentation with jieba, suitable for Chinese and mixed-language text.

    Args:
        hmm (bool): Let jieba discover out-of-vocabulary words with its HMM model.
        min_length (int): Minimum term length kept after stripping.
        dictionary (str | None): Path to a custom jieba dictionary. When omitted the
            shared default jieba segmenter is used.
    """

    def __init__(self, hmm: bool = True, min_length: int = Config.min_term_length, dictionary: str | None = None):
        self.hmm = hmm
        self.min_length = min_length
        self._segmenter = jieba.Tokenizer(dictionary) if dictionary else jieba.dt

    def __call__(self, text: str | bytes) -> list[str]:
        segments = self._segmenter.lcut(_as_text(text), HMM=self.hmm)
        return normalize_terms(segments, self.min_length)

    def __repr__(self) -> str:
        return f"JiebaTokenizer(hmm={self.hmm}, min_length={self.min_length})"
