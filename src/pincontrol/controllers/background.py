"""Background pin controller lifecycle"""

from __future__ import annotations
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from .base import PinControllerBase
from ..exceptions import InvalidStateError
from ..types import ControllerStatus

if TYPE_CHECKING:
    from ..devices.base import PinDevice

logger = logging.getLogger(__name__)


class BackgroundPinController(PinControllerBase, ABC):
    """
    Runs a control loop against a pin device on its own asyncio task.

    Subclasses implement ``step()``, which is awaited repeatedly while the
    controller is running. Lifecycle::

        STOPPED -> STARTING -> RUNNING -> STOPPING -> STOPPED

    ``start()`` returns as soon as the task is spawned. ``stop()`` signals the
    loop and waits for the task to finish, so once it returns no iteration is
    still executing. An exception raised by ``step()`` ends the run: it is
    logged, kept in ``last_error`` and the controller drops straight back to
    STOPPED. There is no retry. ``stop()`` must be called from outside the
    loop; a ``step()`` that wants to end the run should raise instead.
    """

    def __init__(self, device: PinDevice, name: str = ""):
        super().__init__(device, name)
        self._status = ControllerStatus.STOPPED
        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self.last_error: Optional[BaseException] = None

    @property
    def status(self) -> ControllerStatus:
        """Current lifecycle state"""
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status is ControllerStatus.RUNNING

    async def start(self) -> None:
        """Spawn the control loop"""
        if self._status is not ControllerStatus.STOPPED:
            raise InvalidStateError(f"Cannot start {self!r}: status is {self._status.value}")

        self._status = ControllerStatus.STARTING
        self.last_error = None
        self._stop_event = asyncio.Event()
        self._on_start()
        self._task = asyncio.create_task(self._run(), name=f"{type(self).__name__}:{self.name}")
        logger.info(f"Started {self!r}")

    async def stop(self) -> None:
        """Signal the control loop to exit and wait until it has"""
        if self._status not in (ControllerStatus.RUNNING, ControllerStatus.STARTING):
            raise InvalidStateError(f"Cannot stop {self!r}: status is {self._status.value}")
        if self._task is not None and asyncio.current_task() is self._task:
            raise InvalidStateError(f"Cannot stop {self!r} from its own control loop")

        self._status = ControllerStatus.STOPPING
        self._stop_event.set()

        task = self._task
        if task is not None:
            await task
        self._task = None
        self._status = ControllerStatus.STOPPED
        logger.info(f"Stopped {self!r}")

    async def close(self) -> None:
        """Stop the controller if it is active"""
        if self._status in (ControllerStatus.RUNNING, ControllerStatus.STARTING):
            await self.stop()

    async def sleep(self, seconds: float) -> bool:
        """Pause the loop body. Returns True if cut short by a stop request."""
        if self._stop_event is None:
            await asyncio.sleep(seconds)
            return False
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

    @abstractmethod
    async def step(self) -> None:
        """One iteration of the control loop"""
        pass

    def _on_start(self) -> None:
        """Reset per-run state before the loop task is spawned"""
        pass

    async def _run(self) -> None:
        # stop() may already have moved us to STOPPING
        if self._status is ControllerStatus.STARTING:
            self._status = ControllerStatus.RUNNING

        try:
            while self._status is ControllerStatus.RUNNING:
                await self.step()
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            logger.info(f"{self!r} loop cancelled")
            self._task = None
            self._status = ControllerStatus.STOPPED
            raise
        except Exception as e:
            logger.exception(f"{self!r} loop failed: {e}")
            self.last_error = e
            if self._status is not ControllerStatus.STOPPING:
                self._task = None
                self._status = ControllerStatus.STOPPED
