"""Periodic snapshot refresh owned by a single worker thread."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Event
from typing import Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotPoller(Generic[T]):
    """Call ``fetch`` every ``interval`` seconds and hand each result to ``subscriber``.

    The first tick runs immediately. A tick whose fetch fails is logged and
    skipped; the next tick supersedes it. ``max_ticks`` bounds the number of
    attempts, after which the poller stops by itself.
    """

    def __init__(
        self,
        fetch: Callable[[], T],
        subscriber: Callable[[T], None],
        interval: float,
        max_ticks: Optional[int] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("Poll interval must be positive.")
        self.fetch = fetch
        self.subscriber = subscriber
        self.interval = interval
        self.max_ticks = max_ticks
        self.ticks = 0
        self._stopped = Event()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._future: Optional[Future[None]] = None

    @property
    def running(self) -> bool:
        return self._future is not None and not self._future.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopped.clear()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapshot-poller")
        self._future = self._executor.submit(self._run)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the poller finishes. Returns False if ``timeout`` elapsed first."""
        if self._future is None:
            return True
        return self._stopped.wait(timeout)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stopped.set()
        if self._future is not None:
            self._future.result(timeout=timeout)
        if self._executor is not None:
            self._executor.shutdown(wait=False)
        self._future = None
        self._executor = None

    def _run(self) -> None:
        try:
            while not self._stopped.is_set():
                self._tick()
                if self.max_ticks is not None and self.ticks >= self.max_ticks:
                    break
                if self._stopped.wait(self.interval):
                    break
        finally:
            self._stopped.set()

    def _tick(self) -> None:
        self.ticks += 1
        try:
            value = self.fetch()
        except Exception as exc:  # noqa: BLE001 - next tick supersedes a failed fetch
            logger.warning("Snapshot refresh failed", extra={"reason": exc})
            return
        self.subscriber(value)
