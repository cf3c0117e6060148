"""Common I2C device functionality"""

from __future__ import annotations
import asyncio
import logging
import smbus2
from typing import Optional
from concurrent.futures import ThreadPoolExecutor

from ...exceptions import DeviceError

logger = logging.getLogger(__name__)


class AsyncI2CDevice:
    """Asynchronous I2C register access with a thread pool for bus operations"""

    def __init__(self, bus_number: int = 1, address: Optional[int] = None):
        self._bus_number = bus_number
        self._bus: Optional[smbus2.SMBus] = None
        self._address = address
        self._executor = ThreadPoolExecutor(max_workers=1)  # Single worker for I2C
        self._lock = asyncio.Lock()

    @property
    def address(self) -> Optional[int]:
        return self._address

    def set_address(self, address: int) -> None:
        """Set the I2C device address"""
        self._address = address

    def _get_bus(self) -> smbus2.SMBus:
        if self._bus is None:
            self._bus = smbus2.SMBus(self._bus_number)
            logger.debug(f"Opened I2C bus {self._bus_number}")
        return self._bus

    async def write_byte(self, register: int, value: int) -> None:
        """Write a byte to a register asynchronously"""
        if self._address is None:
            raise ValueError("I2C address not set")

        async with self._lock:
            try:
                await asyncio.get_running_loop().run_in_executor(
                    self._executor,
                    self._get_bus().write_byte_data,
                    self._address,
                    register,
                    value
                )
            except OSError as e:
                raise DeviceError(
                    f"I2C write to 0x{self._address:02X} register 0x{register:02X} failed: {e}"
                ) from e

    async def read_byte(self, register: int) -> int:
        """Read a byte from a register asynchronously"""
        if self._address is None:
            raise ValueError("I2C address not set")

        async with self._lock:
            try:
                return await asyncio.get_running_loop().run_in_executor(
                    self._executor,
                    self._get_bus().read_byte_data,
                    self._address,
                    register
                )
            except OSError as e:
                raise DeviceError(
                    f"I2C read from 0x{self._address:02X} register 0x{register:02X} failed: {e}"
                ) from e

    async def close(self) -> None:
        """Close the I2C bus and executor"""
        self._executor.shutdown(wait=True)
        if self._bus is not None:
            self._bus.close()
            self._bus = None
