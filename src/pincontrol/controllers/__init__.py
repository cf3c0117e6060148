"""Pin controllers"""

from .base import PinControllerBase
from .background import BackgroundPinController
from .blinking import BlinkingPinController, MIN_BLINK_INTERVAL_MS
from .input import InputPinController, DEFAULT_GATE_DURATION_MS

__all__ = [
    'PinControllerBase',
    'BackgroundPinController',
    'BlinkingPinController',
    'InputPinController',
    'MIN_BLINK_INTERVAL_MS',
    'DEFAULT_GATE_DURATION_MS',
]
