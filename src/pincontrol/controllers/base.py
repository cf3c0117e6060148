"""Common base for pin controllers"""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..devices.base import PinDevice


class PinControllerBase:
    """Base class for controllers bound to a pin device.

    The device is shared, not owned: it must outlive every controller
    attached to it, and closing a controller never closes the device.
    """

    def __init__(self, device: PinDevice, name: str = ""):
        if device is None:
            raise ValueError("device must not be None")
        self._device = device
        self.name = name

    @property
    def device(self) -> PinDevice:
        return self._device

    def __repr__(self) -> str:
        label = f" {self.name!r}" if self.name else ""
        return f"<{type(self).__name__}{label} on {self._device.name}>"
