"""Bounded-concurrency batch execution with per-task failure capture."""

import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, Optional, Sequence

from tqdm import tqdm

from .models import BatchSummary, TaskOutcome

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


def resolve_worker_count(max_workers: int = DEFAULT_MAX_WORKERS, cpu_count: Optional[int] = None) -> int:
    """Returns min(max_workers, available CPUs), never less than one."""
    if cpu_count is None:
        cpu_count = os.cpu_count() or 1
    return max(1, min(max_workers, cpu_count))


class BatchRunner:
    """
    Runs one task per item in a fixed-size thread pool.

    A task that raises is recorded in its TaskOutcome and does not affect the
    other tasks. Completion order is arbitrary; the summary is ordered by
    submission.
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS, show_progress: bool = True, description: str = "Transcripts"):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.show_progress = show_progress
        self.description = description

    def run(self, items: Sequence[Any], task: Callable[[Any, int, int], Any]) -> BatchSummary:
        """
        Executes ``task(item, number, total)`` for every item.

        Args:
            items: Work items, e.g. video URLs.
            task: Callable receiving the item, its 1-based position and the
                batch size.

        Returns:
            A BatchSummary with one outcome per item.

        Raises:
            KeyboardInterrupt: Re-raised after pending tasks are cancelled.
        """
        total = len(items)
        start_time = time.time()
        outcomes: Dict[int, TaskOutcome] = {}
        logger.info(f"Running {total} tasks with {self.max_workers} workers...")

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures: Dict[Future, int] = {
                executor.submit(task, item, index + 1, total): index
                for index, item in enumerate(items)
            }
            with tqdm(total=total, unit="video", desc=self.description, disable=not self.show_progress) as pbar:
                for future in as_completed(futures):
                    index = futures[future]
                    outcome = TaskOutcome(index=index, item=items[index])
                    try:
                        outcome.result = future.result()
                    except Exception as e:
                        logger.error(f"Task failed for {items[index]}: {e}")
                        outcome.error = e
                    outcomes[index] = outcome
                    pbar.update(1)
        except KeyboardInterrupt:
            logger.warning("Batch interrupted. Cancelling pending tasks...")
            executor.shutdown(wait=False, cancel_futures=True)
            raise
        executor.shutdown(wait=True)

        summary = BatchSummary(
            outcomes=[outcomes[index] for index in sorted(outcomes)],
            elapsed_seconds=time.time() - start_time,
        )
        logger.info(
            f"Batch finished in {summary.elapsed_seconds:.2f} seconds: "
            f"{len(summary.succeeded)} succeeded, {len(summary.failed)} failed."
        )
        return summary
