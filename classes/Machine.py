import logging
import math
import threading

from classes.Errors import ClockError
from state import Device, MachineState, MachineStatus, TimerState


def format_time_left(remaining):
    """Render remaining seconds as e.g. "1h 30m left", "45s left", "0s left"."""
    if remaining is None or remaining <= 0:
        return "0s left"

    total_seconds = int(math.floor(remaining))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")
    return " ".join(parts) + " left"


class Machine:
    """
    Countdown state machine for one washer or dryer.

    available --press--> running --press--> available   (manual cancel)
    running --tick, deadline reached--> finished --press--> available

    All transitions happen under self._lock, so a tick that was already
    scheduled when a cancel ran finds the machine available and does nothing.
    """

    def __init__(self, device: Device, duration, clock, ticker=None, logger=None):
        self.logger = logger or logging.getLogger(__name__)

        self.device = device
        self.duration = float(duration)  # seconds
        self.clock = clock
        self.ticker = ticker

        self._state = TimerState()
        self._lock = threading.RLock()
        self._listeners = []

    @property
    def name(self):
        return self.device.name

    @property
    def status(self):
        return self._state.status

    def press(self) -> MachineState:
        with self._lock:
            st = self._state.status
            now = None
            if st == MachineStatus.AVAILABLE:
                now = self._start()
            elif st == MachineStatus.RUNNING:
                self._finish(MachineStatus.AVAILABLE)
                self.logger.info(f"{self.name} stopped before finishing")
            elif st == MachineStatus.FINISHED:
                self._state.time_left = None
                self._state.status = MachineStatus.AVAILABLE
                self.logger.info(f"{self.name} reset, available again")

            snapshot = self._snapshot(now)
            self._notify(snapshot)
            return snapshot

    def _start(self):
        # a failing clock or ticker leaves the machine available
        now = self.clock.now()
        if self.ticker is not None:
            self.ticker.register(self)

        self._state.end_ts = now + self.duration
        self._state.status = MachineStatus.RUNNING
        self._state.time_left = format_time_left(self.duration)
        self.logger.info(
            f"Starting {self.name} for {self.duration:.0f} seconds "
            f"({self._state.time_left})"
        )
        return now

    def _finish(self, status):
        """Leave the running state: unregister the tick, drop the deadline."""
        if self._state.status != MachineStatus.RUNNING:
            return
        try:
            if self.ticker is not None:
                self.ticker.unregister(self)
        finally:
            self._state.end_ts = None
            self._state.time_left = None
            self._state.status = status

    def tick(self):
        with self._lock:
            if self._state.status != MachineStatus.RUNNING:
                # stale registration, machine was stopped or already finished
                return None
            try:
                now = self.clock.now()
            except ClockError as e:
                self.logger.warning(f"Skipping tick for {self.name}: {e}")
                return None

            if now >= self._state.end_ts:
                self._finish(MachineStatus.FINISHED)
                self.logger.info(f"{self.name} finished")
                snapshot = self._snapshot()
            else:
                self._state.time_left = format_time_left(self._state.end_ts - now)
                snapshot = self._snapshot(now)

            self._notify(snapshot)
            return snapshot

    def current_state(self) -> MachineState:
        with self._lock:
            if self._state.status != MachineStatus.RUNNING:
                return self._snapshot()
            try:
                return self._snapshot(self.clock.now())
            except ClockError as e:
                self.logger.warning(f"Clock unavailable while reading {self.name}: {e}")
                return self._snapshot()

    def _snapshot(self, now=None) -> MachineState:
        st = self._state
        remaining = None
        time_left = st.time_left
        if st.status == MachineStatus.RUNNING and now is not None:
            remaining = max(0.0, st.end_ts - now)
            time_left = format_time_left(remaining)
        return MachineState(
            device=self.device,
            status=st.status,
            end_ts=st.end_ts,
            remaining=remaining,
            time_left=time_left,
        )

    def subscribe(self, callback):
        """callback(MachineState) after every transition or new projection."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._listeners:
                    self._listeners.remove(callback)

        return unsubscribe

    def _notify(self, snapshot):
        for cb in list(self._listeners):
            try:
                cb(snapshot)
            except Exception as e:
                self.logger.warning(f"Listener failed for {self.name}: {e}")

    def __repr__(self):
        return f"<Machine {self.device.key} {self._state.status.value}>"
