import threading
import time

import numpy as np
import pytest

from okapi_rank.errors import DeadlineExceededError, RankingCancelledError
from okapi_rank.ranking_utils import check_interrupted, parallel_map, select_top_k


class TestSelectTopK:
    def test_descending_order(self):
        scores = np.array([0.1, 0.9, 0.5])
        assert list(select_top_k(scores, 3)) == [1, 2, 0]

    def test_truncates(self):
        scores = np.array([0.1, 0.9, 0.5, 0.7])
        assert list(select_top_k(scores, 2)) == [1, 3]

    def test_ties_keep_original_order(self):
        scores = np.array([0.5, 1.0, 0.5, 1.0, 0.5])
        assert list(select_top_k(scores, 5)) == [1, 3, 0, 2, 4]

    def test_negative_scores(self):
        scores = np.array([-0.2, 0.0, -1.0])
        assert list(select_top_k(scores, 3)) == [1, 0, 2]

    @pytest.mark.parametrize("top_k", [0, -3])
    def test_non_positive(self, top_k):
        assert len(select_top_k(np.array([1.0, 2.0]), top_k)) == 0

    def test_none_returns_all(self):
        assert list(select_top_k(np.array([1.0, 2.0]), None)) == [1, 0]

    def test_larger_than_input(self):
        assert list(select_top_k(np.array([1.0, 2.0]), 10)) == [1, 0]


class TestCheckInterrupted:
    def test_nothing_requested(self):
        check_interrupted()
        check_interrupted(time.monotonic() + 60, threading.Event())

    def test_deadline_passed(self):
        with pytest.raises(DeadlineExceededError):
            check_interrupted(deadline=time.monotonic() - 1)

    def test_cancelled(self):
        event = threading.Event()
        event.set()
        with pytest.raises(RankingCancelledError):
            check_interrupted(cancel_event=event)


class TestParallelMap:
    def test_sequential_preserves_order(self):
        assert parallel_map(lambda x: x * 2, [3, 1, 2]) == [6, 2, 4]

    def test_parallel_preserves_order(self):
        items = list(range(100))
        assert parallel_map(lambda x: x * x, items, num_workers=8, min_items_for_parallel=1) == [x * x for x in items]

    def test_exception_propagates(self):
        def fail_on_five(x):
            if x == 5:
                raise KeyError(x)
            return x

        with pytest.raises(KeyError):
            parallel_map(fail_on_five, list(range(20)), num_workers=4, min_items_for_parallel=1)

    def test_cancel_stops_processing(self):
        event = threading.Event()
        seen = []

        def record(x):
            seen.append(x)
            if x == 2:
                event.set()
            return x

        with pytest.raises(RankingCancelledError):
            parallel_map(record, list(range(10)), cancel_event=event)
        assert seen == [0, 1, 2]
