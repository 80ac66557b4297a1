from dataclasses import dataclass
from enum import Enum
from typing import Optional


class MachineKind(str, Enum):
    WASHER = "washer"
    DRYER = "dryer"


class MachineStatus(str, Enum):
    AVAILABLE = "available"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass(frozen=True)
class Device:
    kind: MachineKind
    id: int

    @property
    def name(self) -> str:
        return f"{self.kind.value.capitalize()} {self.id}"  # "Washer 1"

    @property
    def key(self) -> str:
        return f"{self.kind.value}:{self.id}"


@dataclass
class TimerState:
    """Mutable per-machine record. end_ts is set only while running."""
    status: MachineStatus = MachineStatus.AVAILABLE
    end_ts: Optional[float] = None
    time_left: Optional[str] = None  # last published projection


@dataclass(frozen=True)
class MachineState:
    device: Device
    status: MachineStatus
    end_ts: Optional[float] = None
    remaining: Optional[float] = None  # seconds
    time_left: Optional[str] = None

    def to_dict(self):
        return {
            "kind": self.device.kind.value,
            "id": self.device.id,
            "name": self.device.name,
            "status": self.status.value,
            "end_ts": self.end_ts,
            "remaining": self.remaining,
            "time_left": self.time_left,
        }

