from .controllers import (
    BackgroundPinController,
    BlinkingPinController,
    InputPinController,
    PinControllerBase,
)
from .devices import PinDevice, InterruptPinDevice, SimulatedPinDevice, MCP23008PinDevice, MCP23008Config
from .exceptions import (
    PinControlError,
    OutOfRangeError,
    InvalidStateError,
    InvalidCapabilityError,
    DeviceError,
    ConfigurationError,
)
from .manager import PinManager
from .types import ControllerStatus, PinChange, InputsChanged, PerformanceMetrics

__version__ = "0.1.0"
__license__ = "MIT"
__description__ = "Background output controllers and debounced inputs for I/O expansion boards"
__keywords__ = ["I/O", "hardware", "embedded", "asyncio", "gpio", "debounce"]

__all__ = [
    "PinManager",
    "PinControllerBase",
    "BackgroundPinController",
    "BlinkingPinController",
    "InputPinController",
    "PinDevice",
    "InterruptPinDevice",
    "SimulatedPinDevice",
    "MCP23008PinDevice",
    "MCP23008Config",
    "ControllerStatus",
    "PinChange",
    "InputsChanged",
    "PerformanceMetrics",
    "PinControlError",
    "OutOfRangeError",
    "InvalidStateError",
    "InvalidCapabilityError",
    "DeviceError",
    "ConfigurationError",
]
