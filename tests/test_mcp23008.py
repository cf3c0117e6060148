"""Tests for the MCP23008 pin device"""

import pytest
import asyncio
from unittest.mock import AsyncMock, MagicMock

from pincontrol import ControllerStatus, InputPinController
from pincontrol.devices.common.i2c import AsyncI2CDevice
from pincontrol.devices.mcp23008 import (
    MCP23008Config,
    MCP23008PinDevice,
    GPIO,
    GPPU,
    IODIR,
    IPOL,
    OLAT,
)
from pincontrol.exceptions import DeviceError, OutOfRangeError


@pytest.fixture
def device():
    """MCP23008 with the I2C register access mocked out"""
    device = MCP23008PinDevice(MCP23008Config(address=0x20, output_mask=0x0F, poll_interval=1))
    device.i2c.write_byte = AsyncMock()
    device.i2c.read_byte = AsyncMock(return_value=0xFF)
    return device


class TestMCP23008PinDevice:
    """Test cases for MCP23008PinDevice"""

    def test_defaults(self):
        device = MCP23008PinDevice()
        assert device.config.address == 0x20
        assert device.output_mask == 0x0F
        assert device.name == "mcp23008@0x20"
        assert device.interrupt_capable

    async def test_initialize(self, device):
        await device.initialize()
        try:
            assert device.is_initialized()
            device.i2c.write_byte.assert_any_call(IODIR, 0xF0)
            device.i2c.write_byte.assert_any_call(GPPU, 0xF0)
            device.i2c.write_byte.assert_any_call(IPOL, 0x00)
            device.i2c.write_byte.assert_any_call(OLAT, 0x00)
            assert device.poller.status in (ControllerStatus.STARTING, ControllerStatus.RUNNING)
        finally:
            await device.close()

        assert not device.is_initialized()
        assert device.poller.status is ControllerStatus.STOPPED

    async def test_initialize_without_pull_ups(self):
        device = MCP23008PinDevice(MCP23008Config(pull_ups=False))
        device.i2c.write_byte = AsyncMock()
        device.i2c.read_byte = AsyncMock(return_value=0xFF)

        await device.initialize()
        device.i2c.write_byte.assert_any_call(GPPU, 0x00)
        await device.close()

    async def test_write_output_updates_latch(self, device):
        await device.write_output(1, True)
        device.i2c.write_byte.assert_called_with(OLAT, 0x02)

        await device.write_output(0, True)
        device.i2c.write_byte.assert_called_with(OLAT, 0x03)

        await device.write_output(1, False)
        device.i2c.write_byte.assert_called_with(OLAT, 0x01)
        assert device.metrics.write_count == 3

    async def test_concurrent_writes_keep_both_bits(self, device):
        written = []

        async def slow_write(register, value):
            await asyncio.sleep(0.001)
            written.append((register, value))

        device.i2c.write_byte = slow_write
        await asyncio.gather(device.write_output(0, True), device.write_output(1, True))

        assert device._latch == 0x03
        assert written[-1] == (OLAT, 0x03)

    async def test_write_to_input_pin_fails(self, device):
        with pytest.raises(OutOfRangeError):
            await device.write_output(5, True)
        device.i2c.write_byte.assert_not_called()

    async def test_failed_write_keeps_latch(self, device):
        device.i2c.write_byte = AsyncMock(side_effect=DeviceError("bus error"))
        with pytest.raises(DeviceError):
            await device.write_output(0, True)
        assert device._latch == 0
        assert device.metrics.error_count == 1

    async def test_read_input(self, device):
        device.i2c.read_byte = AsyncMock(return_value=0xDF)

        assert await device.read_input(5) is True
        assert await device.read_input(4) is False
        device.i2c.read_byte.assert_called_with(GPIO)

    async def test_output_bits_read_as_inactive(self, device):
        device.i2c.read_byte = AsyncMock(return_value=0x00)
        assert await device.read_input(0) is False
        assert await device.read_input(7) is True

    async def test_poll_publishes_changes(self, device):
        received = []
        device.subscribe(received.append)
        device.i2c.read_byte = AsyncMock(side_effect=[0xFF, 0xFF, 0xDF, 0x00])

        for _ in range(4):
            await device.poll_inputs()

        assert received == [0xFF, 0xDF, 0x0F]

    async def test_bus_error_becomes_device_error(self):
        device = MCP23008PinDevice()
        bus = MagicMock()
        bus.read_byte_data.side_effect = OSError(121, "Remote I/O error")
        device.i2c._bus = bus

        with pytest.raises(DeviceError):
            await device.read_input(5)
        assert device.metrics.error_count == 1
        await device.close()

    async def test_input_controller_via_polling(self, device):
        raw = {"value": 0xFF}

        async def read_byte(register):
            return raw["value"]

        device.i2c.read_byte = read_byte
        await device.initialize()
        try:
            controller = await InputPinController.create(device, 6, 0)
            changes = []
            controller.on_change(changes.append)

            raw["value"] = 0xBF
            await asyncio.sleep(0.03)
            assert controller.state is True

            raw["value"] = 0xFF
            await asyncio.sleep(0.03)
            assert [c.state for c in changes] == [True, False]
            controller.close()
        finally:
            await device.close()


class TestAsyncI2CDevice:
    """Register access wrapper"""

    async def test_address_required(self):
        i2c = AsyncI2CDevice(bus_number=1)
        with pytest.raises(ValueError):
            await i2c.read_byte(GPIO)
        with pytest.raises(ValueError):
            await i2c.write_byte(GPIO, 0)
        await i2c.close()

    async def test_write_and_read(self):
        i2c = AsyncI2CDevice(bus_number=1, address=0x21)
        bus = MagicMock()
        bus.read_byte_data.return_value = 0x5A
        i2c._bus = bus

        await i2c.write_byte(OLAT, 0xAA)
        value = await i2c.read_byte(GPIO)

        bus.write_byte_data.assert_called_once_with(0x21, OLAT, 0xAA)
        bus.read_byte_data.assert_called_once_with(0x21, GPIO)
        assert value == 0x5A

        await i2c.close()
        bus.close.assert_called_once()
