"""
Bounded background pool for email delivery.

Request threads submit email jobs and return immediately. A fixed number of
worker threads send them. The pool is created at application startup and
drained at shutdown; it is never a module-level global.

Overload policy: at most `queue_limit` jobs may be queued or running. A
submission beyond that, or after shutdown started, is dropped with a
warning. Submitting never raises and never blocks.
"""

from concurrent.futures import Future, ThreadPoolExecutor, wait
import logging
import threading
from typing import Callable, Optional, Set

from ..core.enums import NotificationChannel
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)

EmailJob = Callable[[], None]


class EmailWorkerPool:
    def __init__(self, max_workers: int = 5, queue_limit: int = 100, thread_name_prefix: str = "booking-email"):
        if max_workers < 1 or queue_limit < 1:
            raise ValueError("max_workers and queue_limit must be positive")
        self.max_workers = max_workers
        self.queue_limit = queue_limit
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix)
        self._slots = threading.BoundedSemaphore(queue_limit)
        self._lock = threading.Lock()
        self._pending: Set[Future] = set()
        self._closed = False
        logger.info(
            f"[EXECUTORS] Created email worker pool with {max_workers} workers "
            f"(queue limit {queue_limit})"
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def submit(self, job: EmailJob, description: str = "email") -> bool:
        """
        Schedule a job. Returns False if it was dropped.

        The job's own exceptions are logged by the worker and never retried.
        """
        if self._closed:
            logger.warning("Email pool is shut down, dropping %s", description)
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "rejected")
            return False

        if not self._slots.acquire(blocking=False):
            logger.warning(
                "Email pool saturated (%s jobs in flight), dropping %s", self.queue_limit, description
            )
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "rejected")
            return False

        prometheus_metrics.email_job_started()
        try:
            with self._lock:
                future = self._executor.submit(self._run, job, description)
                self._pending.add(future)
        except RuntimeError:
            # Executor shut down between the closed check and submit
            self._release()
            logger.warning("Email pool is shut down, dropping %s", description)
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "rejected")
            return False

        future.add_done_callback(self._on_done)
        return True

    def _run(self, job: EmailJob, description: str) -> None:
        try:
            job()
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "sent")
        except Exception:
            logger.error("Background %s failed", description, exc_info=True)
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "failed")
        finally:
            self._release()

    def _release(self) -> None:
        self._slots.release()
        prometheus_metrics.email_job_finished()

    def _on_done(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)
        if future.cancelled():
            # Cancelled before a worker picked it up, so _run never released the slot
            self._release()
            prometheus_metrics.record_notification(NotificationChannel.EMAIL.value, "rejected")

    def wait_for_pending(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted job has finished. Returns False on timeout."""
        with self._lock:
            pending = set(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    def shutdown(self, timeout: Optional[float] = None) -> None:
        """
        Stop accepting jobs and drain the queue.

        Jobs still queued after `timeout` seconds are cancelled; jobs already
        running are allowed to finish.
        """
        if self._closed:
            return
        self._closed = True
        drained = self.wait_for_pending(timeout)
        if not drained:
            logger.warning("Email pool drain timed out, cancelling %s queued jobs", self.pending_count())
        self._executor.shutdown(wait=drained, cancel_futures=not drained)
        logger.info("Email worker pool shut down")
