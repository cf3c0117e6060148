"""Configuration validation for pincontrol"""

from __future__ import annotations
import logging
from typing import Dict, Any, List, Optional, Tuple
from dataclasses import dataclass
from enum import Enum

import jsonschema

from .controllers.blinking import MIN_BLINK_INTERVAL_MS
from .types import PIN_COUNT

logger = logging.getLogger(__name__)

# Device types able to push input-change notifications
INTERRUPT_DEVICE_TYPES = {"simulated", "mcp23008"}


class ValidationLevel(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationIssue:
    """Represents a configuration validation issue"""
    level: ValidationLevel
    category: str
    message: str
    path: str
    suggestion: Optional[str] = None


class ConfigValidator:
    """Configuration validator for pin boards and their controllers"""

    SCHEMA = {
        "type": "object",
        "required": ["device"],
        "properties": {
            "device": {
                "type": "object",
                "required": ["type"],
                "properties": {
                    "type": {"type": "string", "enum": ["simulated", "mcp23008"]},
                    "name": {"type": "string", "minLength": 1},
                    "address": {"type": "integer", "minimum": 0x03, "maximum": 0x77},
                    "bus_number": {"type": "integer", "minimum": 0},
                    "output_mask": {"type": "integer", "minimum": 0, "maximum": 0xFF},
                    "pull_ups": {"type": "boolean"},
                    "poll_interval": {"type": "integer", "minimum": 1},
                    "initial_inputs": {"type": "integer", "minimum": 0, "maximum": 0xFF}
                }
            },
            "controllers": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["name", "type", "pin"],
                    "properties": {
                        "name": {
                            "type": "string",
                            "pattern": "^[a-zA-Z][a-zA-Z0-9_]*$",
                            "minLength": 1,
                            "maxLength": 64
                        },
                        "type": {"type": "string", "enum": ["blinking", "input"]},
                        "pin": {"type": "integer", "minimum": 0, "maximum": PIN_COUNT - 1},
                        "interval": {"type": "integer", "minimum": MIN_BLINK_INTERVAL_MS},
                        "gate_duration": {"type": "integer", "minimum": 0},
                        "description": {"type": "string"}
                    }
                }
            }
        }
    }

    def validate_config(self, config: Dict[str, Any]) -> List[ValidationIssue]:
        """Validate configuration and return all issues"""
        issues = []

        try:
            jsonschema.validate(config, self.SCHEMA)
        except jsonschema.ValidationError as e:
            path = ".".join(str(p) for p in e.absolute_path) or "root"
            issues.append(ValidationIssue(
                level=ValidationLevel.ERROR,
                category="schema",
                message=f"Schema validation failed: {e.message}",
                path=path,
                suggestion="Check configuration format against examples"
            ))
            return issues  # Don't continue if schema is invalid

        device = config["device"]
        controllers = config.get("controllers", [])

        for i, controller in enumerate(controllers):
            issues.extend(self._validate_controller(controller, device, f"controllers[{i}]"))

        issues.extend(self._check_conflicts(controllers))
        return issues

    def _validate_controller(self, controller: Dict[str, Any], device: Dict[str, Any],
                             path: str) -> List[ValidationIssue]:
        issues = []
        kind = controller["type"]
        pin = controller["pin"]

        if kind == "blinking":
            if "interval" not in controller:
                issues.append(ValidationIssue(
                    level=ValidationLevel.ERROR,
                    category="missing_field",
                    message="Blinking controller requires an interval",
                    path=f"{path}.interval",
                    suggestion=f"Set interval in milliseconds (at least {MIN_BLINK_INTERVAL_MS})"
                ))
            if "gate_duration" in controller:
                issues.append(ValidationIssue(
                    level=ValidationLevel.INFO,
                    category="unnecessary_field",
                    message="gate_duration only applies to input controllers",
                    path=f"{path}.gate_duration",
                    suggestion="Remove gate_duration"
                ))
            if device["type"] == "mcp23008":
                output_mask = device.get("output_mask", 0x0F)
                if not output_mask & (1 << pin):
                    issues.append(ValidationIssue(
                        level=ValidationLevel.ERROR,
                        category="pin_direction",
                        message=f"Pin {pin} is not an output in output_mask 0x{output_mask:02X}",
                        path=f"{path}.pin",
                        suggestion="Add the pin to the device output_mask"
                    ))

        elif kind == "input":
            if device["type"] not in INTERRUPT_DEVICE_TYPES:
                issues.append(ValidationIssue(
                    level=ValidationLevel.ERROR,
                    category="capability",
                    message=f"Device type {device['type']} cannot deliver input notifications",
                    path=path
                ))
            if "interval" in controller:
                issues.append(ValidationIssue(
                    level=ValidationLevel.INFO,
                    category="unnecessary_field",
                    message="interval only applies to blinking controllers",
                    path=f"{path}.interval",
                    suggestion="Remove interval"
                ))
            if device["type"] == "mcp23008" and device.get("output_mask", 0x0F) & (1 << pin):
                issues.append(ValidationIssue(
                    level=ValidationLevel.ERROR,
                    category="pin_direction",
                    message=f"Pin {pin} is configured as an output",
                    path=f"{path}.pin",
                    suggestion="Remove the pin from the device output_mask"
                ))

        return issues

    def _check_conflicts(self, controllers: List[Dict[str, Any]]) -> List[ValidationIssue]:
        """Check for conflicts between controllers"""
        issues = []

        names_seen = set()
        for i, controller in enumerate(controllers):
            name = controller["name"]
            if name in names_seen:
                issues.append(ValidationIssue(
                    level=ValidationLevel.ERROR,
                    category="duplicate_name",
                    message=f"Duplicate controller name '{name}'",
                    path=f"controllers[{i}].name",
                    suggestion="Each controller must have a unique name"
                ))
            names_seen.add(name)

        # Outputs and inputs are separate ports, so only same-kind pins clash
        pins_seen = set()
        for i, controller in enumerate(controllers):
            key = (controller["type"], controller["pin"])
            if key in pins_seen:
                level = ValidationLevel.ERROR if controller["type"] == "blinking" else ValidationLevel.WARNING
                issues.append(ValidationIssue(
                    level=level,
                    category="duplicate_pin",
                    message=f"Pin {controller['pin']} is used by more than one {controller['type']} controller",
                    path=f"controllers[{i}].pin",
                    suggestion="Give each controller its own pin"
                ))
            pins_seen.add(key)

        return issues


def validate_pin_config(config: Dict[str, Any]) -> Tuple[bool, List[ValidationIssue]]:
    """
    Validate board configuration

    Returns:
        (is_valid, issues) - is_valid is False if there are ERROR level issues
    """
    validator = ConfigValidator()
    issues = validator.validate_config(config)

    has_errors = any(issue.level == ValidationLevel.ERROR for issue in issues)
    return not has_errors, issues


def log_validation_results(issues: List[ValidationIssue]) -> None:
    """Log validation issues at a matching log level"""
    for issue in issues:
        text = f"[{issue.category}] {issue.path}: {issue.message}"
        if issue.suggestion:
            text += f" ({issue.suggestion})"

        if issue.level == ValidationLevel.ERROR:
            logger.error(text)
        elif issue.level == ValidationLevel.WARNING:
            logger.warning(text)
        else:
            logger.info(text)
