"""MCP23008 I/O expander device"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .base import InterruptPinDevice
from .common.i2c import AsyncI2CDevice
from ..controllers.background import BackgroundPinController
from ..exceptions import OutOfRangeError, check_pin

logger = logging.getLogger(__name__)

# MCP23008 Register Addresses
IODIR = 0x00    # I/O Direction Register
IPOL = 0x01     # Input Polarity Register
GPINTEN = 0x02  # Interrupt Enable Register
DEFVAL = 0x03   # Default Compare Register
INTCON = 0x04   # Interrupt Control Register
IOCON = 0x05    # Configuration Register
GPPU = 0x06     # Pull-up Resistor Register
INTF = 0x07     # Interrupt Flag Register
INTCAP = 0x08   # Interrupt Capture Register
GPIO = 0x09     # Port Register
OLAT = 0x0A     # Output Latch Register


@dataclass
class MCP23008Config:
    """Configuration for a single MCP23008 chip"""
    address: int = 0x20
    bus_number: int = 1
    output_mask: int = 0x0F  # set bits are outputs, the rest inputs
    pull_ups: bool = True
    poll_interval: int = 5  # ms between GPIO reads for change detection


class _InputPoller(BackgroundPinController):
    """Reads the GPIO register and publishes the inputs whenever they change"""

    def __init__(self, device: MCP23008PinDevice, poll_interval: int):
        super().__init__(device, name="input-poller")
        self._poll_interval = poll_interval

    async def step(self) -> None:
        await self.device.poll_inputs()
        await self.sleep(self._poll_interval / 1000)


class MCP23008PinDevice(InterruptPinDevice):
    """
    MCP23008 8-bit I2C expander used as a pin device.

    Pins in ``output_mask`` are driven through the output latch; the remaining
    pins are active-low inputs. Input-change notifications are produced by
    polling the GPIO register on a background controller, with output bits
    reported as high (inactive).
    """

    def __init__(self, config: Optional[MCP23008Config] = None, name: Optional[str] = None):
        self.config = config or MCP23008Config()
        super().__init__(name or f"mcp23008@0x{self.config.address:02X}")
        self.i2c = AsyncI2CDevice(bus_number=self.config.bus_number, address=self.config.address)
        self._output_mask = self.config.output_mask & 0xFF
        self._latch = 0
        self._lock = asyncio.Lock()  # guards _latch across the OLAT write
        self._last_raw: Optional[int] = None
        self._poller = _InputPoller(self, self.config.poll_interval)

    @property
    def output_mask(self) -> int:
        return self._output_mask

    @property
    def poller(self) -> _InputPoller:
        return self._poller

    async def initialize(self) -> None:
        """Configure directions and pull-ups, then start watching the inputs"""
        if self._initialized:
            return

        input_mask = ~self._output_mask & 0xFF
        try:
            await self.i2c.write_byte(IODIR, input_mask)
            await self.i2c.write_byte(GPPU, input_mask if self.config.pull_ups else 0x00)
            await self.i2c.write_byte(IPOL, 0x00)
            await self.i2c.write_byte(OLAT, self._latch)
            self._last_raw = await self._read_raw_inputs()
        except Exception as e:
            logger.error(f"Failed to initialize {self.name}: {e}")
            raise

        self._initialized = True
        await self._poller.start()
        logger.info(f"Initialized {self.name} (outputs=0x{self._output_mask:02X})")

    async def write_output(self, pin: int, value: bool) -> None:
        """Drive an output pin through the output latch"""
        check_pin(pin)
        if not self._output_mask & (1 << pin):
            raise OutOfRangeError(f"Pin {pin} of {self.name} is not configured as an output")

        start_time = time.perf_counter()
        async with self._lock:
            if value:
                latch = self._latch | (1 << pin)
            else:
                latch = self._latch & ~(1 << pin)

            try:
                await self.i2c.write_byte(OLAT, latch)
            except Exception:
                self.metrics.error_count += 1
                raise
            self._latch = latch

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.update_write_time(duration_ms)

    async def read_input(self, pin: int) -> bool:
        """Read the logical level of an input pin"""
        check_pin(pin)
        raw = await self._read_raw_inputs()
        return (raw & (1 << pin)) == 0

    async def poll_inputs(self) -> None:
        """Read the inputs once and publish them if they changed"""
        raw = await self._read_raw_inputs()
        if raw != self._last_raw:
            self._last_raw = raw
            logger.debug(f"{self.name} inputs changed: 0x{raw:02X}")
            await self.publish_inputs(raw)

    async def close(self) -> None:
        """Stop polling and release the bus"""
        await self._poller.close()
        self.clear_subscriptions()
        await self.i2c.close()
        if self._initialized:
            self._initialized = False
            logger.info(f"Closed {self.name}")

    async def _read_raw_inputs(self) -> int:
        start_time = time.perf_counter()
        try:
            value = await self.i2c.read_byte(GPIO)
        except Exception:
            self.metrics.error_count += 1
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.update_read_time(duration_ms)
        return (value | self._output_mask) & 0xFF
