"""Tests for PinManager"""

import pytest
import asyncio
import yaml

from pincontrol import (
    BlinkingPinController,
    ControllerStatus,
    InputPinController,
    PinManager,
    SimulatedPinDevice,
)


class TestPinManager:
    """Test cases for PinManager"""

    @pytest.fixture
    def device(self):
        return SimulatedPinDevice("test")

    @pytest.fixture
    def manager(self, device):
        return PinManager(device)

    @pytest.fixture
    def sample_config(self):
        """Sample configuration for testing"""
        return {
            "device": {"type": "simulated"},
            "controllers": [
                {
                    "name": "status_led",
                    "type": "blinking",
                    "pin": 0,
                    "interval": 10,
                    "description": "Heartbeat LED"
                },
                {
                    "name": "door_switch",
                    "type": "input",
                    "pin": 3,
                    "gate_duration": 0,
                    "description": "Door contact"
                }
            ]
        }

    async def test_configure_from_dict(self, manager, sample_config):
        success = await manager.configure_from_dict(sample_config)
        assert success

        assert set(manager.controllers) == {"status_led", "door_switch"}
        assert isinstance(manager.get_controller("status_led"), BlinkingPinController)
        assert isinstance(manager.get_controller("door_switch"), InputPinController)
        assert manager.get_controller("missing") is None

    async def test_configure_invalid(self, manager, sample_config):
        sample_config["controllers"][0]["interval"] = 1
        success = await manager.configure_from_dict(sample_config)
        assert not success
        assert manager.controllers == {}

    async def test_configure_from_file(self, manager, sample_config, tmp_path):
        path = tmp_path / "board.yaml"
        path.write_text(yaml.dump(sample_config))

        assert await manager.configure_from_file(path)
        assert len(manager.controllers) == 2

    async def test_configure_from_missing_file(self, manager, tmp_path):
        assert not await manager.configure_from_file(tmp_path / "missing.yaml")

    async def test_start_stop(self, manager, device, sample_config):
        await manager.configure_from_dict(sample_config)

        await manager.start()
        assert manager.running
        assert device.is_initialized()
        await asyncio.sleep(0.03)
        assert manager.get_status() == {"status_led": "running"}
        assert device.metrics.write_count > 0

        await manager.stop()
        assert not manager.running
        assert manager.get_status() == {"status_led": "stopped"}
        assert manager.get_controller("door_switch").closed

        # The device is shared and stays open
        assert device.is_initialized()

    async def test_change_callbacks(self, manager, device, sample_config):
        await manager.configure_from_dict(sample_config)

        changes_received = []
        manager.on_change(changes_received.append)

        async def on_change_async(change):
            changes_received.append(change)

        manager.on_change(on_change_async)
        await manager.start()

        try:
            await device.set_input(3, True)
            assert len(changes_received) == 2
            assert all(c.name == "door_switch" and c.state for c in changes_received)
        finally:
            await manager.stop()

    async def test_add_controller_while_running(self, manager, device):
        await manager.start()
        try:
            controller = BlinkingPinController(device, 5, 10, name="late")
            await manager.add_controller("late", controller)
            assert controller.status in (ControllerStatus.STARTING, ControllerStatus.RUNNING)

            with pytest.raises(ValueError):
                await manager.add_controller("late", controller)
        finally:
            await manager.stop()
        assert controller.status is ControllerStatus.STOPPED

    async def test_stop_after_controller_fault(self, manager, device, sample_config):
        await manager.configure_from_dict(sample_config)
        device.set_error_rate(1.0)

        await manager.start()
        await asyncio.sleep(0.02)
        assert manager.get_status() == {"status_led": "stopped"}

        # Stopping does not trip over the already stopped controller
        await manager.stop()
        assert manager.get_controller("status_led").last_error is not None

    async def test_start_twice(self, manager, sample_config):
        await manager.configure_from_dict(sample_config)
        await manager.start()
        await manager.start()
        await manager.stop()


@pytest.mark.asyncio
async def test_integration_example():
    """Integration test similar to the basic example"""
    device = SimulatedPinDevice("bench")
    manager = PinManager(device)

    success = await manager.configure_from_dict({
        "device": {"type": "simulated"},
        "controllers": [
            {"name": "led", "type": "blinking", "pin": 7, "interval": 10},
            {"name": "button", "type": "input", "pin": 0, "gate_duration": 50}
        ]
    })
    assert success

    presses = []
    manager.on_change(lambda change: presses.append(change.state))
    await manager.start()

    try:
        # A bouncing press is reported once, releases always get through
        for _ in range(3):
            await device.set_input(0, True)
            await device.set_input(0, False)
        assert presses == [True, False]

        # Next press arrives after the gate
        await asyncio.sleep(0.06)
        await device.set_input(0, True)
        assert presses == [True, False, True]
        assert manager.get_controller("button").state is True
    finally:
        await manager.stop()
