"""Sensor threshold definitions, configuration parsing and delay timers."""

from __future__ import annotations

import asyncio
import enum
import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from hwsensors.config import to_double, to_int, to_string, to_unsigned
from hwsensors.hwmon import read_file, split_file_name

_log = logging.getLogger(__name__)

THRESHOLD_INTERFACE_PREFIX = "xyz.openbmc_project.Sensor.Threshold."


class Level(enum.Enum):
    """Severity level of a threshold."""

    WARNING = 0
    CRITICAL = 1
    PERFORMANCELOSS = 2
    SOFTSHUTDOWN = 3
    HARDSHUTDOWN = 4
    ERROR = 5


class Direction(enum.Enum):
    """Side of the threshold value on which it is crossed."""

    HIGH = 0
    LOW = 1
    ERROR = 2


@dataclass
class Threshold:
    """A threshold; equality ignores hysteresis and writeability."""

    level: Level
    direction: Direction
    value: float
    hysteresis: float = field(default=math.nan, compare=False)
    writeable: bool = field(default=True, compare=False)


@dataclass(frozen=True)
class ThresholdDefinition:
    """Maps a threshold level to its severity order and interface name."""

    level: Level
    sev_order: int
    level_name: str


THRESHOLD_DEFINITIONS: tuple[ThresholdDefinition, ...] = (
    ThresholdDefinition(Level.WARNING, 0, "Warning"),
    ThresholdDefinition(Level.CRITICAL, 1, "Critical"),
    ThresholdDefinition(Level.PERFORMANCELOSS, 2, "PerformanceLoss"),
    ThresholdDefinition(Level.SOFTSHUTDOWN, 3, "SoftShutdown"),
    ThresholdDefinition(Level.HARDSHUTDOWN, 4, "HardShutdown"),
)


class MalformedThresholdError(ValueError):
    """A threshold configuration lacks Value, Severity or Direction."""

    def __init__(self, interface: str) -> None:
        super().__init__(
            f"Malformed threshold on configuration interface {interface}"
        )
        self.interface = interface


def find_threshold_level(severity: int) -> Level:
    """Return the level for a severity order, or Level.ERROR if unknown."""
    for definition in THRESHOLD_DEFINITIONS:
        if definition.sev_order == severity:
            return definition.level
    return Level.ERROR


def find_threshold_direction(direction: str) -> Direction:
    """Map "greater than" / "less than" to a Direction, else Direction.ERROR."""
    if direction == "greater than":
        return Direction.HIGH
    if direction == "less than":
        return Direction.LOW
    return Direction.ERROR


def parse_thresholds_from_config(
    sensor_data: Mapping[str, Mapping[str, Any]],
    match_label: str | None = None,
    sensor_index: int | None = None,
) -> list[Threshold]:
    """Collect thresholds from the "Thresholds" interfaces of a configuration.

    Only interfaces whose Label equals match_label and whose Index equals
    sensor_index are used when those are given; a missing Index counts as
    index 1. Entries with an unknown severity or direction are skipped.
    Raises MalformedThresholdError when Value, Severity or Direction is absent.
    """
    found: list[Threshold] = []
    for interface, cfg in sorted(sensor_data.items()):
        if "Thresholds" not in interface:
            continue
        if match_label is not None:
            if "Label" not in cfg or to_string(cfg["Label"]) != match_label:
                continue
        if sensor_index is not None:
            if "Index" in cfg:
                if to_int(cfg["Index"]) != sensor_index:
                    continue
            elif sensor_index != 1:
                continue

        hysteresis = to_double(cfg["Hysteresis"]) if "Hysteresis" in cfg else math.nan

        if not {"Value", "Severity", "Direction"} <= cfg.keys():
            raise MalformedThresholdError(interface)

        level = find_threshold_level(to_unsigned(cfg["Severity"]))
        direction = find_threshold_direction(to_string(cfg["Direction"]))
        if level is Level.ERROR or direction is Direction.ERROR:
            continue
        found.append(Threshold(level, direction, to_double(cfg["Value"]), hysteresis))
    return found


def parse_thresholds_from_attr(
    input_path: str,
    scale_factor: float,
    offset: float = 0.0,
    hysteresis: float = math.nan,
) -> list[Threshold]:
    """Read thresholds from the hwmon attribute files next to an input file.

    For "<type><n>_input" the min, max, lcrit and crit files are read, and
    offset is added to crit; for "<type><n>_average" the average_min and
    average_max files are read. Missing or unreadable files are skipped.
    """
    attributes: dict[str, tuple[tuple[str, Level, Direction, float], ...]] = {
        "average": (
            ("average_min", Level.WARNING, Direction.LOW, 0.0),
            ("average_max", Level.WARNING, Direction.HIGH, 0.0),
        ),
        "input": (
            ("min", Level.WARNING, Direction.LOW, 0.0),
            ("max", Level.WARNING, Direction.HIGH, 0.0),
            ("lcrit", Level.CRITICAL, Direction.LOW, 0.0),
            ("crit", Level.CRITICAL, Direction.HIGH, offset),
        ),
    }

    found: list[Threshold] = []
    parts = split_file_name(input_path)
    if parts is None:
        return found
    item = parts[2]
    for suffix, level, direction, extra in attributes.get(item, ()):
        attr_path = input_path.replace(item, suffix)
        value = read_file(attr_path, scale_factor)
        if value is None:
            continue
        value += extra
        _log.debug("Threshold: %s: %s", attr_path, value)
        found.append(Threshold(level, direction, value, hysteresis))
    return found


def get_interface(level: Level) -> str:
    """Return the threshold interface name for a level, or "" if none."""
    for definition in THRESHOLD_DEFINITIONS:
        if definition.level is level:
            return THRESHOLD_INTERFACE_PREFIX + definition.level_name
    return ""


TimerCallback = Callable[[Threshold, bool, float], None]


@dataclass
class _TimerSlot:
    used: bool = False
    level: Level = Level.ERROR
    direction: Direction = Direction.ERROR
    asserted: bool = False
    handle: asyncio.TimerHandle | None = None

    def matches(self, threshold: Threshold, asserted: bool) -> bool:
        return (
            self.used
            and self.level is threshold.level
            and self.direction is threshold.direction
            and self.asserted == asserted
        )


class ThresholdTimer:
    """Delays threshold events by a fixed time on the running event loop."""

    def __init__(self, wait_time: float = 5.0) -> None:
        self.wait_time = wait_time
        self._slots: list[_TimerSlot] = []

    def has_active_timer(self, threshold: Threshold, asserted: bool) -> bool:
        """Tell whether a pending timer exists for this threshold and state."""
        return any(slot.matches(threshold, asserted) for slot in self._slots)

    def stop_timer(self, threshold: Threshold, asserted: bool) -> None:
        """Cancel pending timers for this threshold and state."""
        for slot in self._slots:
            if slot.matches(threshold, asserted):
                if slot.handle is not None:
                    slot.handle.cancel()
                    slot.handle = None
                slot.used = False

    def start_timer(
        self,
        threshold: Threshold,
        asserted: bool,
        assert_value: float,
        callback: TimerCallback,
    ) -> None:
        """Call callback(threshold, asserted, assert_value) after wait_time.

        Must be called while an asyncio event loop is running.
        """
        loop = asyncio.get_running_loop()
        slot = next((s for s in self._slots if not s.used), None)
        if slot is None:
            slot = _TimerSlot()
            self._slots.append(slot)
        slot.used = True
        slot.level = threshold.level
        slot.direction = threshold.direction
        slot.asserted = asserted
        slot.handle = loop.call_later(
            self.wait_time,
            self._expire,
            slot,
            threshold,
            asserted,
            assert_value,
            callback,
        )

    @staticmethod
    def _expire(
        slot: _TimerSlot,
        threshold: Threshold,
        asserted: bool,
        assert_value: float,
        callback: TimerCallback,
    ) -> None:
        slot.used = False
        slot.handle = None
        callback(threshold, asserted, assert_value)