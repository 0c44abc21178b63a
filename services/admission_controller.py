"""
Admission control for the local store.

Bounds the number of in-flight store operations system-wide. Callers past the
ceiling wait in a FIFO queue; release() hands the freed slot directly to the
oldest waiter, so a late arrival can never overtake a queued one.

Only store reads go through the controller unless STORE_GATE_WRITES is set.
"""

from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional
import threading
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AdmissionStatus:
    """Point-in-time view of the controller."""
    in_flight: int
    queued: int
    ceiling: int

    def to_dict(self) -> dict:
        return {"in_flight": self.in_flight, "queued": self.queued, "ceiling": self.ceiling}


class AdmissionController:
    """
    Counting semaphore with an explicit FIFO wait queue.

    Invariant: in_flight <= ceiling at all times.
    """

    def __init__(self, max_concurrent: int):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self._ceiling = max_concurrent
        self._in_flight = 0
        self._waiters: deque[threading.Event] = deque()
        self._lock = threading.Lock()

    def acquire(self) -> None:
        """
        Take a slot, blocking until one is available.

        Grants immediately only when below the ceiling and nobody is queued.
        """
        with self._lock:
            if self._in_flight < self._ceiling and not self._waiters:
                self._in_flight += 1
                return
            ticket = threading.Event()
            self._waiters.append(ticket)
            queued = len(self._waiters)

        logger.debug("admission_queued", queue_depth=queued, ceiling=self._ceiling)
        # The releasing thread counts the slot on our behalf before setting the event
        ticket.wait()

    def release(self) -> None:
        """
        Return a slot.

        If anyone is waiting, the slot passes straight to the head of the queue.

        Raises:
            RuntimeError: If called more often than acquire()
        """
        with self._lock:
            if self._in_flight <= 0:
                raise RuntimeError("release() called without a matching acquire()")
            self._in_flight -= 1
            if self._waiters:
                ticket = self._waiters.popleft()
                self._in_flight += 1
                ticket.set()

    @contextmanager
    def slot(self) -> Iterator[None]:
        """Hold a slot for the duration of the block."""
        self.acquire()
        try:
            yield
        finally:
            self.release()

    def status(self) -> AdmissionStatus:
        """Report in-flight count, queue depth and ceiling."""
        with self._lock:
            return AdmissionStatus(
                in_flight=self._in_flight,
                queued=len(self._waiters),
                ceiling=self._ceiling
            )


# Singleton instance for convenience
_admission_controller: Optional[AdmissionController] = None
_singleton_lock = threading.Lock()

def get_admission_controller() -> AdmissionController:
    """Get or create the process-wide AdmissionController."""
    global _admission_controller
    with _singleton_lock:
        if _admission_controller is None:
            _admission_controller = AdmissionController(settings.store_max_concurrent_reads)
            logger.info(
                "admission_controller_created",
                ceiling=settings.store_max_concurrent_reads,
                gate_writes=settings.store_gate_writes
            )
        return _admission_controller
