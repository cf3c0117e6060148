"""Pin device implementations"""

from .base import PinDevice, InterruptPinDevice, Subscription
from .mcp23008 import MCP23008PinDevice, MCP23008Config
from .simulated import SimulatedPinDevice

__all__ = [
    'PinDevice',
    'InterruptPinDevice',
    'Subscription',
    'MCP23008PinDevice',
    'MCP23008Config',
    'SimulatedPinDevice',
]
