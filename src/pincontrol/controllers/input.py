"""Debounced input pin controller"""

from __future__ import annotations
import asyncio
import inspect
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional, Union

from .base import PinControllerBase
from ..exceptions import InvalidCapabilityError, OutOfRangeError, check_pin
from ..types import PinChange

if TYPE_CHECKING:
    from ..devices.base import PinDevice, Subscription

logger = logging.getLogger(__name__)

DEFAULT_GATE_DURATION_MS = 20

ChangeCallback = Callable[[PinChange], Union[None, Awaitable[None]]]


class InputPinController(PinControllerBase):
    """
    Tracks the state of one input pin from a device's input-change notifications.

    Inputs are active-low: a clear bit in the raw bitmask means the pin is on.
    A change to True is only accepted once ``gate_duration`` milliseconds have
    passed since the last accepted change to True; a change to False is always
    accepted. The gate is measured between rising edges only so that a
    suppressed bounce can never leave the controller stuck half way through a
    press/release cycle.

    The device must be interrupt capable and must outlive this controller.
    Call ``close()`` to unsubscribe from the device.

    Use ``create()`` to start from the level the device currently reports.
    The constructor takes ``initial_state`` explicitly and does no I/O.
    """

    def __init__(
        self,
        device: PinDevice,
        input_pin: int,
        gate_duration: int = DEFAULT_GATE_DURATION_MS,
        *,
        initial_state: bool,
        name: str = "",
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(device, name)
        self._input_pin = check_pin(input_pin, "input_pin")
        self._check_gate_duration(gate_duration)
        if not device.interrupt_capable:
            raise InvalidCapabilityError(f"Device {device.name} does not deliver input-change notifications")

        self._gate_duration = gate_duration
        self._state = bool(initial_state)
        self._last_rising_edge_at: Optional[float] = None
        self._clock = clock
        self._lock = asyncio.Lock()
        self.change_callbacks: List[ChangeCallback] = []
        self._subscription: Optional[Subscription] = device.subscribe(self._on_inputs_changed)
        logger.debug(f"Attached {self!r} to input {input_pin}, state={self._state}")

    @classmethod
    async def create(
        cls,
        device: PinDevice,
        input_pin: int,
        gate_duration: int = DEFAULT_GATE_DURATION_MS,
        **kwargs,
    ) -> InputPinController:
        """Create a controller whose initial state is read from the device"""
        check_pin(input_pin, "input_pin")
        cls._check_gate_duration(gate_duration)
        if not device.interrupt_capable:
            raise InvalidCapabilityError(f"Device {device.name} does not deliver input-change notifications")

        initial_state = await device.read_input(input_pin)
        return cls(device, input_pin, gate_duration, initial_state=initial_state, **kwargs)

    @property
    def input_pin(self) -> int:
        return self._input_pin

    @property
    def state(self) -> bool:
        """The last clean state emitted"""
        return self._state

    @property
    def gate_duration(self) -> int:
        """Minimum milliseconds between two accepted changes to True"""
        return self._gate_duration

    @gate_duration.setter
    def gate_duration(self, value: int) -> None:
        self._check_gate_duration(value)
        self._gate_duration = value

    @property
    def last_rising_edge_at(self) -> Optional[float]:
        return self._last_rising_edge_at

    @property
    def closed(self) -> bool:
        return self._subscription is None

    def on_change(self, callback: ChangeCallback) -> None:
        """
        Register a callback for clean state changes.

        Callbacks run while the controller holds its notification lock. A
        callback must not cause another input notification on the same
        device and wait for it (for example by awaiting
        ``SimulatedPinDevice.set_inputs``): the lock is not reentrant and the
        call deadlocks. Schedule such work with ``asyncio.create_task``.
        """
        self.change_callbacks.append(callback)

    def close(self) -> None:
        """Stop listening to the device"""
        if self._subscription is None:
            return
        self._subscription.cancel()
        self._subscription = None
        logger.debug(f"Detached {self!r}")

    @staticmethod
    def _check_gate_duration(value: int) -> None:
        if value < 0:
            raise OutOfRangeError(f"gate_duration must not be negative, got {value}")

    async def _on_inputs_changed(self, bitmask: int) -> None:
        async with self._lock:
            state = (bitmask & (1 << self._input_pin)) == 0
            now = self._clock()

            if not self._state and state:
                if (self._last_rising_edge_at is not None and
                        (now - self._last_rising_edge_at) * 1000 < self._gate_duration):
                    logger.debug(f"{self!r} ignored change to True inside {self._gate_duration}ms gate")
                    return
                self._state = True
                self._last_rising_edge_at = now
            elif self._state and not state:
                self._state = False
            else:
                return

            await self._notify_change(PinChange.create(self._input_pin, self._state, self.name))

    async def _notify_change(self, change: PinChange) -> None:
        """Notify all registered callbacks about a state change"""
        logger.debug(f"{self!r} input {change.pin} -> {change.state}")
        for callback in self.change_callbacks:
            try:
                if inspect.iscoroutinefunction(callback):
                    await callback(change)
                else:
                    await asyncio.to_thread(callback, change)
            except Exception as e:
                logger.error(f"Error in pin change callback: {e}")
