from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import time

PIN_COUNT = 8


class ControllerStatus(Enum):
    """Lifecycle states of a background controller"""
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


@dataclass
class PinChange:
    """A clean, debounced change of a single input pin."""
    pin: int
    state: bool
    timestamp: float
    name: str = ""

    @classmethod
    def create(cls, pin: int, state: bool, name: str = "") -> PinChange:
        """Creates a new PinChange instance with current timestamp"""
        return cls(
            pin=pin,
            state=state,
            timestamp=time.time(),
            name=name
        )


@dataclass
class InputsChanged:
    """Raw snapshot of all input pins as reported by a device."""
    bitmask: int
    timestamp: float

    @classmethod
    def create(cls, bitmask: int) -> InputsChanged:
        return cls(bitmask=bitmask & 0xFF, timestamp=time.time())


@dataclass
class PerformanceMetrics:
    """Performance tracking."""
    read_count: int = 0
    write_count: int = 0
    avg_read_time_ms: float = 0.0
    avg_write_time_ms: float = 0.0
    error_count: int = 0

    def update_read_time(self, duration_ms: float) -> None:
        """Update average read time."""
        self.read_count += 1
        if self.avg_read_time_ms == 0:
            self.avg_read_time_ms = duration_ms
        else:
            self.avg_read_time_ms = self.avg_read_time_ms * 0.9 + duration_ms * 0.1

    def update_write_time(self, duration_ms: float) -> None:
        """Update average write time."""
        self.write_count += 1
        if self.avg_write_time_ms == 0:
            self.avg_write_time_ms = duration_ms
        else:
            self.avg_write_time_ms = self.avg_write_time_ms * 0.9 + duration_ms * 0.1
