"""Configuration loading for pincontrol boards"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .controllers.input import DEFAULT_GATE_DURATION_MS
from .devices import MCP23008Config, MCP23008PinDevice, PinDevice, SimulatedPinDevice
from .exceptions import ConfigurationError
from .validation import ValidationLevel, log_validation_results, validate_pin_config

logger = logging.getLogger(__name__)


@dataclass
class DeviceConfig:
    """Which device to drive and how to reach it"""
    type: str
    name: Optional[str] = None
    address: int = 0x20
    bus_number: int = 1
    output_mask: int = 0x0F
    pull_ups: bool = True
    poll_interval: int = 5
    initial_inputs: int = 0xFF


@dataclass
class ControllerConfig:
    """A single blinking or input controller"""
    name: str
    type: str
    pin: int
    interval: Optional[int] = None
    gate_duration: int = DEFAULT_GATE_DURATION_MS
    description: str = ""


@dataclass
class BoardConfig:
    device: DeviceConfig
    controllers: List[ControllerConfig] = field(default_factory=list)


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a configuration dict from a YAML or JSON file"""
    path = Path(config_path)
    try:
        with open(path, 'r') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                config = yaml.safe_load(f)
            else:
                config = json.load(f)
    except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to load configuration from {path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration in {path} must be a mapping")

    logger.info(f"Loaded configuration from {path}")
    return config


def parse_config(config: Dict[str, Any]) -> BoardConfig:
    """Validate a configuration dict and build a BoardConfig from it"""
    is_valid, issues = validate_pin_config(config)
    log_validation_results(issues)
    if not is_valid:
        errors = [i.message for i in issues if i.level == ValidationLevel.ERROR]
        raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}")

    device = DeviceConfig(**config["device"])
    controllers = [ControllerConfig(**c) for c in config.get("controllers", [])]
    return BoardConfig(device=device, controllers=controllers)


def build_device(config: DeviceConfig) -> PinDevice:
    """Create the device described by a DeviceConfig"""
    if config.type == "simulated":
        return SimulatedPinDevice(
            name=config.name or "simulator",
            initial_inputs=config.initial_inputs
        )
    if config.type == "mcp23008":
        chip_config = MCP23008Config(
            address=config.address,
            bus_number=config.bus_number,
            output_mask=config.output_mask,
            pull_ups=config.pull_ups,
            poll_interval=config.poll_interval
        )
        return MCP23008PinDevice(chip_config, name=config.name)
    raise ConfigurationError(f"Unknown device type: {config.type}")
