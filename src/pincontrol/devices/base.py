"""Base pin device interfaces"""

from __future__ import annotations
import inspect
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, List, Optional, Union

from ..types import InputsChanged, PerformanceMetrics

logger = logging.getLogger(__name__)

InputsCallback = Callable[[int], Union[None, Awaitable[None]]]


class PinDevice(ABC):
    """Abstract base class for expansion boards with 8 outputs and 8 inputs"""

    def __init__(self, name: str = "device"):
        self.name = name
        self.metrics = PerformanceMetrics()
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the device"""
        pass

    @abstractmethod
    async def write_output(self, pin: int, value: bool) -> None:
        """Drive an output pin"""
        pass

    @abstractmethod
    async def read_input(self, pin: int) -> bool:
        """Read the logical level of an input pin (active-low decoded)"""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the device"""
        pass

    @property
    def interrupt_capable(self) -> bool:
        """Whether the device pushes input-change notifications"""
        return False

    def is_initialized(self) -> bool:
        """Check if the device is initialized"""
        return self._initialized


class Subscription:
    """Handle returned by InterruptPinDevice.subscribe"""

    def __init__(self, device: InterruptPinDevice, callback: InputsCallback):
        self.device = device
        self.callback = callback

    @property
    def active(self) -> bool:
        return self in self.device._subscriptions

    def cancel(self) -> None:
        self.device.unsubscribe(self)


class InterruptPinDevice(PinDevice):
    """A pin device that notifies subscribers whenever any input changes.

    Subscribers receive the raw input byte: bit n set means input n is
    electrically high, which on an active-low board means released/off.
    """

    def __init__(self, name: str = "device"):
        super().__init__(name)
        self._subscriptions: List[Subscription] = []
        self.last_inputs: Optional[InputsChanged] = None

    @property
    def interrupt_capable(self) -> bool:
        return True

    def subscribe(self, callback: InputsCallback) -> Subscription:
        """Register a callback for raw input bitmask notifications"""
        subscription = Subscription(self, callback)
        self._subscriptions.append(subscription)
        logger.debug(f"{self.name}: added input subscriber ({len(self._subscriptions)} total)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Removing an inactive subscription is a no-op."""
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            logger.debug(f"{self.name}: removed input subscriber ({len(self._subscriptions)} left)")

    def clear_subscriptions(self) -> None:
        self._subscriptions.clear()

    async def publish_inputs(self, bitmask: int) -> None:
        """Deliver a raw input snapshot to every current subscriber"""
        event = InputsChanged.create(bitmask)
        self.last_inputs = event

        # Snapshot so callbacks may unsubscribe while we iterate
        for subscription in list(self._subscriptions):
            try:
                result = subscription.callback(event.bitmask)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in input subscriber on {self.name}: {e}")
