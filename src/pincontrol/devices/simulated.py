"""Simulated expansion board for testing"""

from __future__ import annotations
import asyncio
import logging
import random
import time
from typing import Callable, List

from .base import InterruptPinDevice
from ..exceptions import DeviceError, check_pin
from ..types import PIN_COUNT

logger = logging.getLogger(__name__)


class SimulatedPinDevice(InterruptPinDevice):
    """Simulated 8-in/8-out board with active-low inputs"""

    def __init__(self, name: str = "simulator", initial_inputs: int = 0xFF):
        super().__init__(name)
        self._inputs = initial_inputs & 0xFF
        self._outputs: List[bool] = [False] * PIN_COUNT
        self._simulated_delay = 0.0
        self._error_rate = 0.0  # Probability of simulated errors
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the simulated device"""
        if self._initialized:
            return
        self._initialized = True
        logger.info(f"Initialized simulated device {self.name}")

    async def write_output(self, pin: int, value: bool) -> None:
        """Drive a simulated output pin"""
        check_pin(pin)
        start_time = time.perf_counter()

        async with self._lock:
            await self._simulate_io("write")
            self._outputs[pin] = bool(value)

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.update_write_time(duration_ms)
        logger.debug(f"Simulated write to output {pin}: {value}")

    async def read_input(self, pin: int) -> bool:
        """Read the logical level of a simulated input pin"""
        check_pin(pin)
        start_time = time.perf_counter()

        async with self._lock:
            await self._simulate_io("read")
            raw = self._inputs

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.update_read_time(duration_ms)
        return (raw & (1 << pin)) == 0

    async def close(self) -> None:
        """Close the simulated device"""
        self.clear_subscriptions()
        if not self._initialized:
            return
        self._initialized = False
        logger.info(f"Closed simulated device {self.name}")

    async def set_inputs(self, bitmask: int, force: bool = False) -> None:
        """Replace the raw input byte and notify subscribers if it changed"""
        bitmask &= 0xFF
        await self._update_inputs(lambda raw: bitmask, force)

    async def set_input(self, pin: int, state: bool) -> None:
        """Set one logical input (True pulls the raw bit low)"""
        check_pin(pin)
        bit = 1 << pin
        if state:
            await self._update_inputs(lambda raw: raw & ~bit)
        else:
            await self._update_inputs(lambda raw: raw | bit)

    def get_inputs(self) -> int:
        """Get the raw input byte"""
        return self._inputs

    def get_outputs(self) -> List[bool]:
        """Get the current simulated output levels"""
        return list(self._outputs)

    def set_simulated_delay(self, delay: float) -> None:
        """Set the simulated delay for operations"""
        self._simulated_delay = max(0.0, delay)

    def set_error_rate(self, rate: float) -> None:
        """Set the probability of simulated errors"""
        self._error_rate = max(0.0, min(1.0, rate))

    async def _update_inputs(self, update: Callable[[int], int], force: bool = False) -> None:
        # The new byte is derived from the current one under the lock
        async with self._lock:
            previous = self._inputs
            bitmask = update(previous) & 0xFF
            self._inputs = bitmask

        if bitmask != previous or force:
            logger.debug(f"Simulated input change on {self.name}: 0x{bitmask:02X}")
            await self.publish_inputs(bitmask)

    async def _simulate_io(self, operation: str) -> None:
        if self._simulated_delay:
            await asyncio.sleep(self._simulated_delay)

        if self._error_rate > 0 and random.random() < self._error_rate:
            self.metrics.error_count += 1
            raise DeviceError(f"Simulated {operation} error on {self.name}")
