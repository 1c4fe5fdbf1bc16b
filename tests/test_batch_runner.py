"""Tests for the bounded worker pool."""

import threading
import time

import pytest

from ytscribe.batch_runner import BatchRunner, resolve_worker_count


class TestResolveWorkerCount:

    def test_capped_by_cpu_count(self):
        assert resolve_worker_count(4, cpu_count=2) == 2

    def test_capped_by_max_workers(self):
        assert resolve_worker_count(4, cpu_count=16) == 4

    def test_never_below_one(self):
        assert resolve_worker_count(4, cpu_count=0) == 1

    def test_detects_cpu_count(self):
        assert 1 <= resolve_worker_count(4) <= 4


class TestBatchRunner:

    def test_failure_does_not_affect_siblings(self):
        def task(item, number, total):
            if item == "bad":
                raise RuntimeError("boom")
            return item.upper()

        summary = BatchRunner(max_workers=3, show_progress=False).run(["a", "bad", "c"], task)
        assert [outcome.item for outcome in summary.outcomes] == ["a", "bad", "c"]
        assert [outcome.result for outcome in summary.succeeded] == ["A", "C"]
        assert len(summary.failed) == 1
        assert isinstance(summary.failed[0].error, RuntimeError)

    def test_passes_position_and_total(self):
        seen = []
        lock = threading.Lock()

        def task(item, number, total):
            with lock:
                seen.append((item, number, total))

        BatchRunner(max_workers=2, show_progress=False).run(["x", "y"], task)
        assert sorted(seen) == [("x", 1, 2), ("y", 2, 2)]

    def test_concurrency_is_bounded(self):
        active = 0
        peak = 0
        lock = threading.Lock()

        def task(item, number, total):
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

        BatchRunner(max_workers=2, show_progress=False).run(list(range(8)), task)
        assert peak <= 2

    def test_empty_batch(self):
        summary = BatchRunner(show_progress=False).run([], lambda item, number, total: None)
        assert summary.outcomes == []

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            BatchRunner(max_workers=0)
