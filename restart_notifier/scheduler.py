"""
Per-monitor cycle scheduling.

Each monitor has at most one pending trigger, stored as a monotonic
"next eligible run" timestamp. Cycles for the same monitor never overlap,
while different monitors run concurrently on a thread pool. Waiting is done
on an Event, so stop(), cancel() and new triggers take effect without
sleeping out the full requeue delay.
"""

import heapq
import itertools
import time
from concurrent.futures import ThreadPoolExecutor
from threading import Event, Lock
from typing import Callable, Mapping, Optional, Tuple

from restart_notifier.logger import get_logger
from restart_notifier.models import ReconcileResult

logger = get_logger(__name__)

MonitorKey = Tuple[str, str]

# Upper bound on a single wait when nothing is queued
IDLE_WAIT_SECONDS = 60.0


class Scheduler:
    def __init__(self, reconcile_fn: Callable[[str, str], ReconcileResult],
                 requeue_after: float = 120, max_workers: int = 4,
                 executor=None, clock: Callable[[], float] = time.monotonic):
        self.reconcile_fn = reconcile_fn
        self.requeue_after = requeue_after
        self.clock = clock
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="reconcile")

        self._lock = Lock()
        self._heap = []
        self._due = {}
        self._known = set()
        self._generations = {}
        self._in_flight = set()
        self._seq = itertools.count()
        self._wakeup = Event()
        self._stopped = Event()

    @property
    def known(self):
        with self._lock:
            return set(self._known)

    def is_pending(self, key: MonitorKey) -> bool:
        with self._lock:
            return key in self._due

    def schedule(self, key: MonitorKey, delay: float = 0.0) -> None:
        """Trigger a cycle after delay seconds, unless an earlier trigger is already pending"""
        with self._lock:
            self._known.add(key)
            self._push(key, self.clock() + delay)
        self._wakeup.set()

    def cancel(self, key: MonitorKey) -> None:
        """Drop a monitor and any pending trigger; an in-flight cycle is not requeued"""
        with self._lock:
            self._known.discard(key)
            self._due.pop(key, None)
            self._generations.pop(key, None)
        logger.info("Monitor unscheduled", monitor="/".join(key))
        self._wakeup.set()

    def sync(self, monitors: Mapping[MonitorKey, Optional[int]]) -> None:
        """
        Reconcile the schedule with the listed monitors and their generations.

        New monitors and monitors whose generation moved are triggered now;
        monitors no longer listed are cancelled.
        """
        with self._lock:
            known = set(self._known)
            generations = dict(self._generations)
            self._generations.update(monitors)
        for key in sorted(monitors):
            if key not in known:
                logger.info("Monitor discovered", monitor="/".join(key))
                self.schedule(key)
            elif monitors[key] != generations.get(key):
                logger.info("Monitor changed", monitor="/".join(key),
                            generation=monitors[key])
                self.schedule(key)
        for key in known - set(monitors):
            self.cancel(key)

    def _push(self, key, due):
        current = self._due.get(key)
        if current is not None and current <= due:
            return
        self._due[key] = due
        heapq.heappush(self._heap, (due, next(self._seq), key))

    def run_pending(self) -> Optional[float]:
        """Start every due cycle; return seconds until the next trigger, or None"""
        now = self.clock()
        to_start = []
        with self._lock:
            while self._heap and self._heap[0][0] <= now:
                due, _, key = heapq.heappop(self._heap)
                if self._due.get(key) != due:
                    continue  # superseded or cancelled
                if key in self._in_flight:
                    continue  # re-pushed when the running cycle finishes
                del self._due[key]
                self._in_flight.add(key)
                to_start.append(key)

        for key in to_start:
            self.executor.submit(self._run_cycle, key)

        with self._lock:
            if not self._heap:
                return None
            return self._heap[0][0] - self.clock()

    def _run_cycle(self, key):
        namespace, name = key
        delay = self.requeue_after
        try:
            result = self.reconcile_fn(namespace, name)
            delay = result.requeue_after
        except Exception as e:
            logger.error(
                "Reconciliation failed, will retry",
                monitor=f"{namespace}/{name}",
                error=str(e),
                error_type=type(e).__name__,
                retry_in=delay,
                exc_info=True,
            )
        self._finish(key, delay)

    def _finish(self, key, delay):
        with self._lock:
            self._in_flight.discard(key)
            if key not in self._known:
                return
            pending = self._due.get(key)
            if pending is not None:
                # Triggered again while running
                heapq.heappush(self._heap, (pending, next(self._seq), key))
            elif delay is None:
                self._known.discard(key)
                self._generations.pop(key, None)
            else:
                self._push(key, self.clock() + delay)
        self._wakeup.set()

    def run(self) -> None:
        """Drive cycles until stop() is called"""
        logger.info("Scheduler started")
        while True:
            self._wakeup.clear()
            if self._stopped.is_set():
                break
            next_in = self.run_pending()
            self._wakeup.wait(IDLE_WAIT_SECONDS if next_in is None else max(next_in, 0))
        self.executor.shutdown(wait=True)
        logger.info("Scheduler stopped")

    def stop(self) -> None:
        self._stopped.set()
        self._wakeup.set()
