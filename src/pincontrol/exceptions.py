"""Exception types raised by pincontrol"""

from __future__ import annotations

from .types import PIN_COUNT


class PinControlError(Exception):
    """Base class for all pincontrol errors"""


class OutOfRangeError(PinControlError, ValueError):
    """A pin index, interval or duration is outside its allowed range"""


class InvalidStateError(PinControlError, RuntimeError):
    """A lifecycle transition was requested from the wrong state"""


class InvalidCapabilityError(PinControlError, TypeError):
    """The device lacks a capability the caller needs"""


class DeviceError(PinControlError, IOError):
    """The hardware device failed to complete a read or write"""


class ConfigurationError(PinControlError, ValueError):
    """Configuration content could not be loaded or is invalid"""


def check_pin(pin: int, name: str = "pin") -> int:
    """Return pin if it addresses one of the board's pins, else raise OutOfRangeError"""
    if isinstance(pin, bool) or not isinstance(pin, int) or not 0 <= pin < PIN_COUNT:
        raise OutOfRangeError(f"{name} must be in the range 0-{PIN_COUNT - 1}, got {pin!r}")
    return pin
