from __future__ import annotations
import logging
import threading
from zoneinfo import ZoneInfo

from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler

from state import Device


class TickScheduler:
    """
    One interval job per running machine.

    Keeps its own (device -> job id) table so a device never has more than
    one registration, and so removal takes effect before the next tick.
    """

    def __init__(self, interval: float = 1.0, timezone: str = "UTC", logger=None):
        if interval <= 0:
            raise ValueError("tick interval must be positive")

        self.logger = logger or logging.getLogger(__name__)
        self.interval = interval

        jobstores = {"default": MemoryJobStore()}  # machine state is not persisted
        job_defaults = {"coalesce": True, "max_instances": 1}
        self.scheduler = BackgroundScheduler(
            jobstores=jobstores, job_defaults=job_defaults, timezone=ZoneInfo(timezone)
        )

        self._jobs: dict[Device, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _job_id_for(device: Device) -> str:
        return f"tick:{device.kind.value}:{device.id}"

    def register(self, machine) -> str:
        jid = self._job_id_for(machine.device)
        with self._lock:
            self.scheduler.add_job(
                machine.tick,
                "interval",
                seconds=self.interval,
                id=jid,
                name=f"Tick {machine.device.name}",
                replace_existing=True,
            )
            self._jobs[machine.device] = jid
        self.logger.debug("Registered tick %s every %ss", jid, self.interval)
        return jid

    def unregister(self, machine) -> None:
        with self._lock:
            jid = self._jobs.pop(machine.device, None)
            if jid is None:
                return
            try:
                self.scheduler.remove_job(jid)
            except JobLookupError:
                self.logger.debug("Tick %s already gone", jid)
                return
        self.logger.debug("Removed tick %s", jid)

    def is_registered(self, device: Device) -> bool:
        with self._lock:
            return device in self._jobs

    def registered_devices(self) -> list[Device]:
        with self._lock:
            return list(self._jobs)

    def start(self):
        if not self.scheduler.running:
            self.scheduler.start()
            self.logger.info("Tick scheduler started (interval %ss)", self.interval)

    def shutdown(self, wait: bool = False):
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)
            self.logger.info("Tick scheduler stopped")
