"""
Shared utilities for BM25 ranking.

1. Top-k selection - stable descending sort, ties keep insertion order
2. Parallel map - ThreadPoolExecutor over documents for large corpora
3. Interruption - cooperative deadline / cancel checks between documents

Usage:
    from okapi_rank.ranking_utils import (
        check_interrupted,
        parallel_map,
        select_top_k,
    )
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

import numpy as np

from okapi_rank.config import Config
from okapi_rank.errors import DeadlineExceededError, RankingCancelledError

if TYPE_CHECKING:
    from numpy.typing import NDArray

T = TypeVar("T")
R = TypeVar("R")


# =============================================================================
# Interruption
# =============================================================================


def check_interrupted(
    deadline: float | None = None,
    cancel_event: threading.Event | None = None,
) -> None:
    """
    Raise if the caller asked to stop.

    Args:
        deadline: Absolute `time.monotonic()` value after which work must stop
        cancel_event: Event set by the caller to cancel the ranking call

    Raises:
        RankingCancelledError: cancel_event is set
        DeadlineExceededError: deadline has passed
    """
    if cancel_event is not None and cancel_event.is_set():
        raise RankingCancelledError("Ranking cancelled by caller")
    if deadline is not None and time.monotonic() > deadline:
        raise DeadlineExceededError("Ranking deadline exceeded")


# =============================================================================
# Parallel Map
# =============================================================================


def parallel_map(
    func: Callable[[T], R],
    items: Sequence[T],
    num_workers: int | None = None,
    deadline: float | None = None,
    cancel_event: threading.Event | None = None,
    min_items_for_parallel: int | None = None,
) -> list[R]:
    """
    Apply `func` to every item, in order, optionally across a thread pool.

    The interruption check runs before each item. Results are returned in input
    order regardless of which worker produced them; the first exception raised
    by `func` propagates to the caller and pending items are cancelled.

    Args:
        func: Function applied to each item
        items: Items to process
        num_workers: Thread pool size (None or <= 1 for sequential)
        deadline: Absolute `time.monotonic()` deadline
        cancel_event: Caller-controlled cancellation event
        min_items_for_parallel: Minimum number of items before threads are used

    Returns:
        [func(item) for item in items]
    """
    if min_items_for_parallel is None:
        min_items_for_parallel = Config.min_documents_for_parallel

    def run(item: T) -> R:
        check_interrupted(deadline, cancel_event)
        return func(item)

    # For small inputs, run sequentially
    if not num_workers or num_workers <= 1 or len(items) < min_items_for_parallel:
        return [run(item) for item in items]

    executor = ThreadPoolExecutor(max_workers=num_workers)
    try:
        return list(executor.map(run, items))
    finally:
        executor.shutdown(wait=True, cancel_futures=True)


# =============================================================================
# Efficient Top-K Selection
# =============================================================================


def select_top_k(scores: NDArray[np.float64], top_k: int | None) -> NDArray[np.int64]:
    """
    Select the indices of the top-k scores in descending order.

    A stable sort is used so that equal scores keep their original (insertion)
    order, which makes the result deterministic.

    Args:
        scores: Score array for all documents (N,)
        top_k: Number of top results (None for all, <= 0 for none)

    Returns:
        Indices of the min(top_k, N) best documents, best first
    """
    if top_k is not None and top_k <= 0:
        return np.array([], dtype=np.int64)

    order = np.argsort(-scores, kind="stable").astype(np.int64)
    if top_k is not None:
        order = order[:top_k]
    return order


__all__ = [
    "check_interrupted",
    "parallel_map",
    "select_top_k",
]
