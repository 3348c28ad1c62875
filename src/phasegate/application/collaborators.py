"""
Deadline enforcement for calls into external collaborators.

Every generator or substrate call goes through a bounded thread pool and
``Future.result(timeout=...)``. A call that overruns its deadline cannot be
interrupted, so the pool it occupies is retired and later calls get fresh
workers. The stuck thread ends when the collaborator finally returns.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, TypeVar

from phasegate.domain.exceptions import CollaboratorTimeout

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollaboratorGateway:
    """
    Bounded pool for collaborator calls.

    Args:
        max_workers: Cap on simultaneous outstanding calls
    """

    def __init__(self, max_workers: int = 1):
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._executor = self._new_executor()
        self._closed = False

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix="phasegate-collab"
        )

    def _submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        with self._lock:
            return self._executor.submit(fn, *args, **kwargs)

    def call(
        self,
        operation: str,
        fn: Callable[..., T],
        *args: Any,
        timeout: float,
        **kwargs: Any,
    ) -> T:
        """
        Run ``fn`` in the pool and wait at most ``timeout`` seconds.

        Raises:
            CollaboratorTimeout: If the deadline passes first
            Exception: Whatever ``fn`` raised
        """
        return self._wait(operation, self._submit(fn, *args, **kwargs), timeout)

    def map_ordered(
        self,
        operation: str,
        calls: Sequence[Callable[[], T]],
        timeout: float,
    ) -> list[T]:
        """
        Fan ``calls`` out over the pool; results come back in input order.

        Each call gets its own ``timeout``. On the first failure the
        remaining futures are cancelled and the error propagates.
        """
        futures = [self._submit(c) for c in calls]
        results: list[T] = []
        try:
            for future in futures:
                results.append(self._wait(operation, future, timeout))
        except BaseException:
            for future in futures:
                future.cancel()
            raise
        return results

    def _wait(self, operation: str, future: Future[T], timeout: float) -> T:
        try:
            return future.result(timeout=timeout)
        except FutureTimeout as e:
            if not future.cancel():
                self._retire_executor(operation)
            logger.warning("%s exceeded %.1fs deadline", operation, timeout)
            raise CollaboratorTimeout(operation, timeout) from e

    def _retire_executor(self, operation: str) -> None:
        """Swap in a fresh pool; the old one keeps its stuck worker."""
        with self._lock:
            if self._closed:
                return
            stuck = self._executor
            self._executor = self._new_executor()
        # Queued work on the old pool still runs once its workers free up.
        stuck.shutdown(wait=False)
        logger.debug("Replaced collaborator pool after %s overran", operation)

    def close(self) -> None:
        """Shut the pool down without waiting on abandoned calls."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False, cancel_futures=True)
