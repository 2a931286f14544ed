"""Bounded worker pool on top of ``ThreadPoolExecutor``.

Every pool thread builds its own ``BaseWorker`` when it starts, so per-worker
resources such as HTTP sessions are never shared between threads. The
coordinator submits every job and then drains exactly one result per job,
in completion order.
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Generic, Iterator, List, Sequence, TypeVar

logger = logging.getLogger(__name__)

J = TypeVar("J")
R = TypeVar("R")


class BaseWorker(ABC, Generic[J, R]):
    """One pool worker. Instances are used by a single thread only."""

    def __init__(self, worker_id: int) -> None:
        self.worker_id = worker_id

    @abstractmethod
    def process(self, job: J) -> R:
        """Handle one job and return its result; errors belong in the result."""

    @abstractmethod
    def failure(self, job: J, exc: BaseException) -> R:
        """Build the failure result for a job whose ``process`` raised."""

    def close(self) -> None:
        """Release per-worker resources."""


class WorkerPool(Generic[J, R]):
    """Fixed-size thread pool with one worker object per thread."""

    def __init__(
        self,
        name: str,
        size: int,
        worker_factory: Callable[[int], BaseWorker[J, R]],
        *,
        yield_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        if size < 1:
            raise ValueError("Worker pool size must be at least 1")
        self.name = name
        self.size = size
        self._worker_factory = worker_factory
        self._yield = yield_fn

    def run(self, jobs: Sequence[J]) -> Iterator[R]:
        """Process ``jobs`` concurrently and yield exactly one result per job."""

        jobs = list(jobs)
        if not jobs:
            return

        local = threading.local()
        workers: List[BaseWorker[J, R]] = []
        lock = threading.Lock()
        worker_ids = itertools.count()

        def start_worker() -> None:
            with lock:
                worker = self._worker_factory(next(worker_ids))
                workers.append(worker)
            local.worker = worker

        def handle(job: J) -> R:
            worker = local.worker
            try:
                return worker.process(job)
            except Exception as exc:
                logger.exception("%s worker %d failed unexpectedly", self.name, worker.worker_id)
                return worker.failure(job, exc)

        logger.debug("%s: %d jobs for up to %d workers", self.name, len(jobs), min(self.size, len(jobs)))

        try:
            with ThreadPoolExecutor(
                max_workers=min(self.size, len(jobs)),
                thread_name_prefix=self.name,
                initializer=start_worker,
            ) as executor:
                futures = [executor.submit(handle, job) for job in jobs]
                for future in as_completed(futures):
                    yield future.result()
                    # Let workers run before the next drain
                    self._yield(0)
        finally:
            for worker in workers:
                worker.close()
