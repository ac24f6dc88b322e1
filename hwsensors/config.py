"""Sensor configuration values, names and well-known bus identifiers."""

from __future__ import annotations

import enum
import math
import re
from collections.abc import Mapping
from typing import Any

JSON_STORE = "/var/configuration/flattened.json"
INVENTORY_PATH = "/xyz/openbmc_project/inventory"
ENTITY_MANAGER_NAME = "xyz.openbmc_project.EntityManager"
CPU_INVENTORY_PATH = "/xyz/openbmc_project/inventory/system/chassis/motherboard"
CONFIG_INTERFACE_PREFIX = "xyz.openbmc_project.Configuration."

MAPPER_BUS_NAME = "xyz.openbmc_project.ObjectMapper"
MAPPER_PATH = "/xyz/openbmc_project/object_mapper"
MAPPER_INTERFACE = "xyz.openbmc_project.ObjectMapper"
MAPPER_SUBTREE = "GetSubTree"

PROPERTIES_INTERFACE = "org.freedesktop.DBus.Properties"
PROPERTIES_GET = "Get"
PROPERTIES_SET = "Set"

POWER_BUS_NAME = "xyz.openbmc_project.State.Host0"
POWER_INTERFACE = "xyz.openbmc_project.State.Host"
POWER_PATH = "/xyz/openbmc_project/state/host0"
POWER_PROPERTY = "CurrentHostState"

CHASSIS_BUS_NAME = "xyz.openbmc_project.State.Chassis0"
CHASSIS_INTERFACE = "xyz.openbmc_project.State.Chassis"
CHASSIS_PATH = "/xyz/openbmc_project/state/chassis0"
CHASSIS_PROPERTY = "CurrentPowerState"
CHASSIS_ON_SUFFIX = ".On"

POST_BUS_NAME = "xyz.openbmc_project.State.Host0"
POST_INTERFACE = "xyz.openbmc_project.State.OperatingSystem.Status"
POST_PATH = "/xyz/openbmc_project/state/host0"
POST_PROPERTY = "OperatingSystemState"

ASSOCIATION_INTERFACE = "xyz.openbmc_project.Association.Definitions"


class PowerState(enum.Enum):
    """Host power condition under which a sensor reading is valid."""

    ON = "On"
    BIOS_POST = "BiosPost"
    ALWAYS = "Always"
    CHASSIS_ON = "ChassisOn"


class MissingKeyError(KeyError):
    """A required configuration key is absent."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Configuration missing {key}")
        self.key = key


def _require_number(value: Any) -> int | float:
    if isinstance(value, (int, float)):
        return value
    raise TypeError(f"expected a number, got {type(value).__name__}")


def to_double(value: Any) -> float:
    """Convert a numeric configuration value to float."""
    return float(_require_number(value))


def to_int(value: Any) -> int:
    """Convert a numeric configuration value to int, truncating fractions."""
    return int(_require_number(value))


def to_unsigned(value: Any) -> int:
    """Convert a numeric configuration value to a non-negative int."""
    result = int(_require_number(value))
    if result < 0:
        raise ValueError(f"expected a non-negative value, got {value!r}")
    return result


def to_string(value: Any) -> str:
    """Convert a string or numeric configuration value to str."""
    if isinstance(value, str):
        return value
    return str(_require_number(value))


def escape_name(sensor_name: str) -> str:
    """Replace spaces in a sensor name with underscores."""
    return sensor_name.replace(" ", "_")


def config_interface_name(sensor_type: str) -> str:
    """Return the configuration interface name for a sensor type."""
    return CONFIG_INTERFACE_PREFIX + sensor_type


def parse_power_state(text: str, default: PowerState = PowerState.ALWAYS) -> PowerState:
    """Map a configured power state name to PowerState, else return default."""
    try:
        return PowerState(text)
    except ValueError:
        return default


def get_power_state(cfg: Mapping[str, Any]) -> PowerState:
    """Read the "PowerState" key of a configuration; ALWAYS if absent."""
    if "PowerState" not in cfg:
        return PowerState.ALWAYS
    return parse_power_state(to_string(cfg["PowerState"]))


def get_poll_rate(cfg: Mapping[str, Any], default: float) -> float:
    """Read the "PollRate" key, falling back to default if absent or invalid."""
    if "PollRate" not in cfg:
        return default
    rate = to_double(cfg["PollRate"])
    if not math.isfinite(rate) or rate <= 0.0:
        return default
    return rate


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise MissingKeyError(key) from None


def load_double(data: Mapping[str, Any], key: str) -> float:
    """Return a required configuration value as float."""
    return to_double(_lookup(data, key))


def load_unsigned(data: Mapping[str, Any], key: str) -> int:
    """Return a required configuration value as a non-negative int."""
    return to_unsigned(_lookup(data, key))


def load_string(data: Mapping[str, Any], key: str) -> str:
    """Return a required configuration value as str."""
    return to_string(_lookup(data, key))


_DECIMAL = re.compile(r"[0-9]+")
_HEX = re.compile(r"[0-9a-fA-F]+")


def get_device_bus_addr(device_name: str) -> tuple[int, int]:
    """Split an i2c device name such as "3-0048" into (bus, address).

    The bus is decimal and the address hexadecimal. Raises ValueError on a
    malformed name.
    """
    bus_text, hyphen, addr_text = device_name.partition("-")
    if not hyphen:
        raise ValueError(f"found bad device {device_name}")
    if not _DECIMAL.fullmatch(bus_text):
        raise ValueError(f"Error finding bus for {device_name}")
    if not _HEX.fullmatch(addr_text):
        raise ValueError(f"Error finding addr for {device_name}")
    return int(bus_text, 10), int(addr_text, 16)