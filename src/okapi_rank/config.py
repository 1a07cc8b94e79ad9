"""
Default settings for okapi_rank.

Runtime knobs can be overridden with environment variables:
    OKAPI_RANK_TOP_N=10                 # Default number of results
    OKAPI_RANK_NUM_WORKERS=0            # Thread pool size (0 = sequential)
    OKAPI_RANK_MIN_DOCS_FOR_PARALLEL=64 # Corpus size before threads are used
"""

from __future__ import annotations

import os

DEFAULT_TOP_N = int(os.environ.get("OKAPI_RANK_TOP_N", "10"))
DEFAULT_NUM_WORKERS = int(os.environ.get("OKAPI_RANK_NUM_WORKERS", "0")) or None
MIN_DOCUMENTS_FOR_PARALLEL = int(os.environ.get("OKAPI_RANK_MIN_DOCS_FOR_PARALLEL", "64"))


class Config:
    """BM25 parameter defaults."""

    k1: float = 1.2  # TF saturation
    b: float = 0.75  # Length normalization for BM25()
    public_b: float = 0.95  # Length normalization for rank_documents()
    idf_variant: str = "classic"  # See okapi_rank.bm25.IDF_VARIANTS

    idf_smoothing: float = 0.5  # Added to N and df in the IDF ratio
    min_term_length: int = 2  # Shorter tokens are dropped by the tokenizers

    num_workers: int | None = DEFAULT_NUM_WORKERS
    min_documents_for_parallel: int = MIN_DOCUMENTS_FOR_PARALLEL
