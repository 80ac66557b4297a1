import logging
import os
from dataclasses import dataclass

import yaml

from classes.Errors import ConfigError
from classes.Laundry import LaundryRoom
from state import Device, MachineKind

logger = logging.getLogger("laundry")  # central logger
LAUNDRY: LaundryRoom | None = None

DEFAULT_CONF = {
    "timezone": "UTC",
    "tick_seconds": 1,
    "poll_seconds": 1,
    "durations": {"washer_minutes": 90, "dryer_minutes": 120},
    "machines": [
        {"kind": "washer", "id": 1},
        {"kind": "washer", "id": 2},
        {"kind": "dryer", "id": 1},
        {"kind": "dryer", "id": 2},
    ],
}


@dataclass(frozen=True)
class LaundryConfig:
    washer_duration: float  # seconds
    dryer_duration: float
    tick_interval: float = 1.0
    poll_seconds: int = 1
    timezone: str = "UTC"
    devices: tuple = ()

    def duration(self, kind) -> float:
        kind = MachineKind(kind)
        if kind == MachineKind.WASHER:
            return self.washer_duration
        return self.dryer_duration

    @classmethod
    def from_dict(cls, conf: dict | None) -> "LaundryConfig":
        conf = conf or {}
        durations = conf.get("durations", DEFAULT_CONF["durations"])
        try:
            washer = float(durations.get("washer_minutes", 90)) * 60
            dryer = float(durations.get("dryer_minutes", 120)) * 60
            tick = float(conf.get("tick_seconds", 1))
            poll = int(conf.get("poll_seconds", 1))
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigError(f"invalid timing settings: {e}") from e

        if washer <= 0 or dryer <= 0:
            raise ConfigError("machine durations must be positive")
        if tick <= 0:
            raise ConfigError("tick_seconds must be positive")
        if poll < 1:
            raise ConfigError("poll_seconds must be at least 1")

        devices = []
        for m in conf.get("machines", DEFAULT_CONF["machines"]):
            try:
                dev = Device(MachineKind(m["kind"]), int(m["id"]))
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigError(f"invalid machine entry {m!r}: {e}") from e
            if dev in devices:
                raise ConfigError(f"duplicate machine {dev.key}")
            devices.append(dev)

        return cls(
            washer_duration=washer,
            dryer_duration=dryer,
            tick_interval=tick,
            poll_seconds=poll,
            timezone=str(conf.get("timezone", "UTC")),
            devices=tuple(devices),
        )


def load_config(path: str | None = None) -> dict:
    path = path or os.environ.get("LAUNDRY_CONF", "laundry.yaml")
    if not os.path.exists(path):
        logger.warning("Config %s not found, using defaults", path)
        return dict(DEFAULT_CONF)
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def init_runtime(conf) -> LaundryRoom:
    global LAUNDRY
    config = LaundryConfig.from_dict(conf)
    LAUNDRY = LaundryRoom(config, logger=logger)
    logger.info(
        "Laundry room ready: %s",
        ", ".join(d.name for d in config.devices),
    )
    return LAUNDRY
