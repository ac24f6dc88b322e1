"""Sensor unit names and D-Bus object path helpers."""

from __future__ import annotations

import re

UNIT_DEGREES_C = "xyz.openbmc_project.Sensor.Value.Unit.DegreesC"
UNIT_RPMS = "xyz.openbmc_project.Sensor.Value.Unit.RPMS"
UNIT_VOLTS = "xyz.openbmc_project.Sensor.Value.Unit.Volts"
UNIT_METERS = "xyz.openbmc_project.Sensor.Value.Unit.Meters"
UNIT_AMPERES = "xyz.openbmc_project.Sensor.Value.Unit.Amperes"
UNIT_WATTS = "xyz.openbmc_project.Sensor.Value.Unit.Watts"
UNIT_JOULES = "xyz.openbmc_project.Sensor.Value.Unit.Joules"
UNIT_PERCENT = "xyz.openbmc_project.Sensor.Value.Unit.Percent"
UNIT_CFM = "xyz.openbmc_project.Sensor.Value.Unit.CFM"
UNIT_PASCALS = "xyz.openbmc_project.Sensor.Value.Unit.Pascals"
UNIT_PERCENT_RH = "xyz.openbmc_project.Sensor.Value.Unit.PercentRH"

# Each entry: (short unit name, full unit name, path segment), in lookup order.
_UNIT_PATHS = (
    ("DegreesC", UNIT_DEGREES_C, "temperature"),
    ("RPMS", UNIT_RPMS, "fan_tach"),
    ("Volts", UNIT_VOLTS, "voltage"),
    ("Meters", UNIT_METERS, "altitude"),
    ("Amperes", UNIT_AMPERES, "current"),
    ("Watts", UNIT_WATTS, "power"),
    ("Joules", UNIT_JOULES, "energy"),
    ("Percent", UNIT_PERCENT, "utilization"),
    ("Pascals", UNIT_PASCALS, "pressure"),
)

_ILLEGAL_PATH_CHARS = re.compile(r"[^a-zA-Z0-9_/]+")


def get_path_for_units(units: str) -> str:
    """Return the sensor path segment for a unit name, or "" if unknown."""
    for short, full, segment in _UNIT_PATHS:
        if units in (short, full):
            return segment
    return ""


def escape_path_for_dbus(name: str) -> str:
    """Replace every run of characters not allowed in a D-Bus path with '_'."""
    return _ILLEGAL_PATH_CHARS.sub("_", name)