"""Execution queue: the serialized background context.

Each database owns one single-worker thread pool. Operations submitted
without an explicit executor run on it one at a time, in submission order.
Any ``concurrent.futures.Executor`` can be passed per call instead; such
operations have no ordering relative to the default queue.

A body runs to completion before its future resolves. There is no
cancellation or timeout: a caller that stops waiting does not stop a body
that has started.
"""

from __future__ import annotations

import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, TypeVar

from db_gateway.infrastructure.logging import get_logger
from db_gateway.infrastructure.metrics import MetricsRegistry, get_metrics

T = TypeVar("T")


class ExecutionQueue:
    """Serialized worker with per-call executor override.

    Thread Safety:
        ``submit`` may be called from any thread.

    Re-entrancy:
        A submission made from the queue's own worker (for example a
        lifecycle callback calling a deferred operation) runs inline and
        returns an already-resolved future. Queuing it instead would
        deadlock the single worker.
    """

    def __init__(
        self,
        thread_name_prefix: str = "db_gateway",
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._local = threading.local()
        self._metrics = metrics or get_metrics()
        self._logger = get_logger(__name__)
        self._executor = ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix=thread_name_prefix,
            initializer=self._mark_worker,
        )

    def _mark_worker(self) -> None:
        self._local.is_worker = True

    def on_worker(self) -> bool:
        """Return True if called from this queue's worker thread."""
        return getattr(self._local, "is_worker", False)

    def submit(
        self,
        fn: Callable[..., T],
        /,
        *args: Any,
        executor: Executor | None = None,
        **kwargs: Any,
    ) -> Future[T]:
        """Schedule ``fn(*args, **kwargs)``.

        Args:
            fn: The operation body.
            executor: Run on this executor instead of the default queue.

        Returns:
            A future resolved with the body's result or exception.

        Raises:
            RuntimeError: If the queue has been shut down.
        """
        if executor is not None:
            return executor.submit(fn, *args, **kwargs)
        if self.on_worker():
            return self._run_inline(fn, *args, **kwargs)

        self._metrics.queue_pending.inc()
        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except RuntimeError:
            self._metrics.queue_pending.dec()
            raise
        future.add_done_callback(self._on_done)
        return future

    def _on_done(self, _future: Future[Any]) -> None:
        self._metrics.queue_pending.dec()

    def _run_inline(self, fn: Callable[..., T], /, *args: Any, **kwargs: Any) -> Future[T]:
        future: Future[T] = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work. Pending operations still run.

        Called from the worker itself, the queue does not wait for its own
        thread.
        """
        wait = wait and not self.on_worker()
        self._logger.debug("execution_queue_shutdown", wait=wait)
        self._executor.shutdown(wait=wait)
