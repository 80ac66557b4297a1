import threading
import time

from classes.Errors import ClockError


class Clock:
    """Wall-clock source for countdown deadlines (epoch seconds)."""

    def __init__(self, source=time.time):
        self._source = source
        self._last = None
        self._lock = threading.Lock()

    def now(self) -> float:
        with self._lock:
            try:
                t = float(self._source())
            except Exception as e:
                raise ClockError(f"time source unavailable: {e}") from e

            if self._last is not None and t < self._last:
                raise ClockError(
                    f"time source went backwards ({t:.3f} < {self._last:.3f})"
                )
            self._last = t
            return t
