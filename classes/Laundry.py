import logging

from classes.Clock import Clock
from classes.Errors import InvalidDevice
from classes.Machine import Machine
from classes.Scheduler import TickScheduler
from state import Device, MachineKind, MachineState, MachineStatus


class LaundryRoom:
    def __init__(self, config, clock=None, ticker=None, logger=None):
        self.logger = logger or logging.getLogger(__name__)

        self.config = config
        self.clock = clock or Clock()
        self.ticker = ticker or TickScheduler(
            interval=config.tick_interval, timezone=config.timezone, logger=self.logger
        )

        self.machines_by_device: dict[Device, Machine] = {
            device: Machine(
                device,
                duration=config.duration(device.kind),
                clock=self.clock,
                ticker=self.ticker,
                logger=self.logger,
            )
            for device in config.devices
        }

    def device(self, kind, id) -> Device:
        """Resolve e.g. ("washer", 1) to a registered Device."""
        try:
            dev = Device(MachineKind(kind), int(id))
        except (ValueError, TypeError):
            raise InvalidDevice(f"{kind}:{id}") from None
        if dev not in self.machines_by_device:
            raise InvalidDevice(dev.key)
        return dev

    def machine(self, device: Device) -> Machine:
        m = self.machines_by_device.get(device)
        if m is None:
            raise InvalidDevice(getattr(device, "key", device))
        return m

    def press(self, device: Device) -> MachineState:
        return self.machine(device).press()

    def current_state(self, device: Device) -> MachineState:
        return self.machine(device).current_state()

    def machines_of(self, kind) -> list[Machine]:
        kind = MachineKind(kind)
        return sorted(
            (m for d, m in self.machines_by_device.items() if d.kind == kind),
            key=lambda m: m.device.id,
        )

    def states(self) -> list[MachineState]:
        return [m.current_state() for kind in MachineKind for m in self.machines_of(kind)]

    def tick_all(self) -> list[MachineState]:
        """Polling alternative to per-machine tick jobs."""
        out = []
        for m in list(self.machines_by_device.values()):
            if m.status != MachineStatus.RUNNING:
                continue
            snapshot = m.tick()
            if snapshot is not None:
                out.append(snapshot)
        return out

    def subscribe(self, callback):
        unsubscribers = [m.subscribe(callback) for m in self.machines_by_device.values()]

        def unsubscribe():
            for unsub in unsubscribers:
                unsub()

        return unsubscribe

    def start(self):
        self.ticker.start()

    def shutdown(self):
        self.ticker.shutdown()
