"""Blinking output controller"""

from __future__ import annotations
import logging
from typing import TYPE_CHECKING

from .background import BackgroundPinController
from ..exceptions import OutOfRangeError, check_pin

if TYPE_CHECKING:
    from ..devices.base import PinDevice

logger = logging.getLogger(__name__)

# Practical limit on how fast the output pins can be updated
MIN_BLINK_INTERVAL_MS = 10


class BlinkingPinController(BackgroundPinController):
    """Switches an output pin on and off at a regular interval (e.g. a status LED)"""

    def __init__(self, device: PinDevice, output_pin: int, interval: int, name: str = ""):
        super().__init__(device, name)
        self._output_pin = check_pin(output_pin, "output_pin")
        if interval < MIN_BLINK_INTERVAL_MS:
            raise OutOfRangeError(
                f"interval must be at least {MIN_BLINK_INTERVAL_MS}ms, got {interval}"
            )
        self._interval = interval
        self._enabled = False

    @property
    def output_pin(self) -> int:
        return self._output_pin

    @property
    def interval(self) -> int:
        """Milliseconds between turning the output on and off"""
        return self._interval

    def _on_start(self) -> None:
        self._enabled = False

    async def step(self) -> None:
        await self.device.write_output(self._output_pin, self._enabled)
        logger.debug(f"{self!r} wrote {self._enabled} to pin {self._output_pin}")
        await self.sleep(self._interval / 1000)
        self._enabled = not self._enabled
