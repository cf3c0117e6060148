"""PinManager: configuration-driven controller set for one device"""

from __future__ import annotations
import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .config import BoardConfig, load_config, parse_config
from .controllers import BackgroundPinController, BlinkingPinController, InputPinController, PinControllerBase
from .devices import PinDevice
from .types import ControllerStatus, PinChange

logger = logging.getLogger(__name__)

Controller = Union[BackgroundPinController, InputPinController]


class PinManager:
    """
    Owns the controllers configured for one pin device.

    Background controllers are started and stopped together; input
    controllers are attached at configuration time and their changes are
    forwarded to callbacks registered with ``on_change``. The device itself
    is shared and is only initialized here, never closed.
    """

    def __init__(self, device: PinDevice):
        self.device = device
        self.controllers: Dict[str, Controller] = {}
        self.change_callbacks: List[Callable[[PinChange], Union[None, Awaitable[None]]]] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def configure_from_dict(self, config: Dict[str, Any]) -> bool:
        """Configure controllers from a dictionary"""
        try:
            board = parse_config(config)
            await self._build_controllers(board)
            logger.info(f"Configured {len(self.controllers)} controllers on {self.device.name}")
            return True
        except Exception as e:
            logger.error(f"Configuration failed: {e}")
            return False

    async def configure_from_file(self, config_path: Union[str, Path]) -> bool:
        """Configure from JSON/YAML file"""
        try:
            config = load_config(config_path)
        except Exception as e:
            logger.error(f"Failed to load configuration from {config_path}: {e}")
            return False
        return await self.configure_from_dict(config)

    async def add_controller(self, name: str, controller: Controller) -> None:
        """Register an already built controller"""
        if name in self.controllers:
            raise ValueError(f"Controller {name} already exists")
        if isinstance(controller, InputPinController):
            controller.on_change(self._forward_change)
        self.controllers[name] = controller
        if self._running and isinstance(controller, BackgroundPinController):
            await controller.start()
        logger.info(f"Added controller: {name}")

    def get_controller(self, name: str) -> Optional[PinControllerBase]:
        return self.controllers.get(name)

    def on_change(self, callback: Callable[[PinChange], Union[None, Awaitable[None]]]) -> None:
        """Register a callback for debounced input changes"""
        self.change_callbacks.append(callback)

    async def start(self) -> None:
        """Initialize the device and start every background controller"""
        if self._running:
            return
        await self.device.initialize()
        for controller in self._background_controllers():
            if controller.status is ControllerStatus.STOPPED:
                await controller.start()
        self._running = True
        logger.info("PinManager started")

    async def stop(self) -> None:
        """Stop background controllers and detach input controllers"""
        for controller in self._background_controllers():
            await controller.close()
            if controller.last_error is not None:
                logger.warning(f"{controller!r} had stopped on error: {controller.last_error}")
        for controller in self.controllers.values():
            if isinstance(controller, InputPinController):
                controller.close()
        self._running = False
        logger.info("PinManager stopped")

    def get_status(self) -> Dict[str, str]:
        """Lifecycle state of every background controller"""
        return {
            controller.name: controller.status.value
            for controller in self._background_controllers()
        }

    async def _build_controllers(self, board: BoardConfig) -> None:
        for entry in board.controllers:
            if entry.type == "blinking":
                controller = BlinkingPinController(
                    self.device, entry.pin, entry.interval, name=entry.name
                )
            else:
                controller = await InputPinController.create(
                    self.device, entry.pin, entry.gate_duration, name=entry.name
                )
            await self.add_controller(entry.name, controller)

    def _background_controllers(self) -> List[BackgroundPinController]:
        return [c for c in self.controllers.values() if isinstance(c, BackgroundPinController)]

    async def _forward_change(self, change: PinChange) -> None:
        for callback in self.change_callbacks:
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(change)
                else:
                    await asyncio.to_thread(callback, change)
            except Exception as e:
                logger.error(f"Error in change callback: {e}")
