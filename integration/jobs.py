"""
POS Integration — Background External Calls
=============================================
External calls run on a worker thread so the catalog keeps serving
other operations meanwhile. A job only produces a value; applying it
to a store is the caller's decision once the job has finished.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger("pos.integration")


class JobStatus(Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class ExternalJob:
    """Handle on an in-flight external call with explicit loading/error state."""

    def __init__(self, name: str, future: Future):
        self.name = name
        self._future = future

    @property
    def status(self) -> JobStatus:
        if not self._future.done():
            return JobStatus.RUNNING if self._future.running() else JobStatus.PENDING
        if self._future.exception() is not None:
            return JobStatus.FAILED
        return JobStatus.SUCCEEDED

    @property
    def is_loading(self) -> bool:
        return self.status in (JobStatus.PENDING, JobStatus.RUNNING)

    @property
    def error(self) -> Optional[BaseException]:
        if not self._future.done():
            return None
        return self._future.exception()

    def result(self, timeout: Optional[float] = None) -> Any:
        """Block until done; re-raises the call's exception."""
        return self._future.result(timeout=timeout)

    def add_done_callback(self, callback: Callable[["ExternalJob"], None]) -> None:
        self._future.add_done_callback(lambda _future: callback(self))


class ExternalJobRunner:
    """Small thread pool for collaborator calls."""

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="pos-external",
        )

    def submit(self, name: str, fn: Callable[..., Any], *args, **kwargs) -> ExternalJob:
        logger.info(f"External job submitted: {name}")
        job = ExternalJob(name, self._executor.submit(fn, *args, **kwargs))
        job.add_done_callback(_log_outcome)
        return job

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "ExternalJobRunner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=True)


def _log_outcome(job: ExternalJob) -> None:
    if job.status is JobStatus.FAILED:
        logger.error(f"External job failed: {job.name}: {job.error}")
    else:
        logger.info(f"External job finished: {job.name}")
