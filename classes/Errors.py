class LaundryError(Exception):
    """Base class for laundry room errors."""


class InvalidDevice(LaundryError, KeyError):
    """Press or query against a machine that is not registered."""

    def __init__(self, device):
        self.device = device
        super().__init__(f"unknown machine: {device}")

    def __str__(self):
        # KeyError would repr() the message
        return self.args[0]


class ClockError(LaundryError):
    """Time source is unavailable or went backwards."""


class ConfigError(LaundryError, ValueError):
    pass
