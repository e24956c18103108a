"""Single background worker with cancellable delayed tasks.

All coordinator state lives on one thread. Callers hand work over with
submit(); timers (threading.Timer) only enqueue, they never run task code
themselves, so every task executes on the worker in submission order.
"""
import logging
import queue
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_STOP = object()


class ScheduledTask:
    """A task that runs on the worker after a delay, unless cancelled first."""

    def __init__(self, worker: "Worker", delay_ms: int, fn: Callable[[], None]):
        self._worker = worker
        self._fn = fn
        self._cancel = threading.Event()
        self._timer = threading.Timer(max(delay_ms, 0) / 1000.0, self._expire)
        self._timer.daemon = True

    def start(self):
        self._timer.start()

    def cancel(self):
        # The flag also covers the window between timer expiry and the
        # worker picking the task up.
        self._cancel.set()
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def _expire(self):
        if not self._cancel.is_set():
            self._worker.submit(self._run)

    def _run(self):
        if self._cancel.is_set():
            return
        self._fn()


class Worker:
    """One daemon thread draining a FIFO queue of callables."""

    def __init__(self, name: str = "imeswitch-worker"):
        self._queue: "queue.Queue" = queue.Queue()
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._thread.start()

    @property
    def running(self) -> bool:
        return self._thread.is_alive() and not self._stopped.is_set()

    def is_current(self) -> bool:
        """True when called from the worker thread itself."""
        return threading.current_thread() is self._thread

    def submit(self, fn: Callable[[], None]):
        if self._stopped.is_set():
            logger.debug("Worker stopped, dropping task %r", fn)
            return
        self._queue.put(fn)

    def schedule(self, delay_ms: int, fn: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(self, delay_ms, fn)
        task.start()
        return task

    def shutdown(self, timeout: Optional[float] = 2.0):
        if self._stopped.is_set():
            return
        self._stopped.set()
        self._queue.put(_STOP)
        if not self.is_current():
            self._thread.join(timeout=timeout)

    def _loop(self):
        while True:
            fn = self._queue.get()
            if fn is _STOP:
                break
            try:
                fn()
            except Exception:
                logger.exception("Worker task failed")
