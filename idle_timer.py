import logging
import threading
from typing import Callable, Optional


class IdleResetTimer:
    """
    Re-armable one-shot timer.
    - stop(): cancel a pending firing (no-op when idle)
    - reset_to(seconds): fire at now+seconds, replacing any pending schedule
    - Last write wins: a superseded schedule never fires
    """

    def __init__(self, callback: Callable[[], None], initial_seconds: Optional[float] = None):
        self._callback = callback
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        if initial_seconds is not None:
            self.reset_to(initial_seconds)

    @property
    def armed(self) -> bool:
        with self._lock:
            return self._timer is not None

    def stop(self) -> None:
        with self._lock:
            self._cancel_locked()

    def reset_to(self, seconds: float) -> None:
        with self._lock:
            self._cancel_locked()
            self._generation += 1
            timer = threading.Timer(seconds, self._fire, args=(self._generation,))
            timer.daemon = True
            timer.name = "IdleResetTimer"
            self._timer = timer
            timer.start()

    def _cancel_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # A timer thread that already woke up must not fire either.
        self._generation += 1

    def _fire(self, generation: int) -> None:
        # The callback runs under the lock: stop() returns only once an
        # in-progress firing has finished, so nothing drawn after stop() is
        # overwritten by the idle screen.
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
            logging.debug("Idle timeout reached; showing idle screen")
            self._callback()
