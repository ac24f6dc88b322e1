"""Threshold crossing detection and alarm state."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from hwsensors.thresholds import Direction, Level, Threshold, ThresholdTimer

_log = logging.getLogger(__name__)


@dataclass
class ThresholdChange:
    """A threshold whose alarm should be asserted or de-asserted."""

    threshold: Threshold
    asserted: bool
    assert_value: float


def check_thresholds(thresholds: Iterable[Threshold], value: float) -> list[ThresholdChange]:
    """Compare a reading with thresholds, with Schmitt-trigger hysteresis.

    A threshold asserts as soon as it is reached, but de-asserts only once
    the reading has moved past it by more than its hysteresis; readings in
    between produce no change.
    """
    changes: list[ThresholdChange] = []
    for threshold in thresholds:
        if threshold.direction is Direction.HIGH:
            if value >= threshold.value:
                changes.append(ThresholdChange(threshold, True, value))
                _log.debug(
                    "high threshold %s assert: value %s", threshold.value, value
                )
            elif value < threshold.value - threshold.hysteresis:
                changes.append(ThresholdChange(threshold, False, value))
        elif threshold.direction is Direction.LOW:
            if value <= threshold.value:
                changes.append(ThresholdChange(threshold, True, value))
                _log.debug(
                    "low threshold %s assert: value %s", threshold.value, value
                )
            elif value > threshold.value + threshold.hysteresis:
                changes.append(ThresholdChange(threshold, False, value))
        else:
            _log.error("Error determining threshold direction")
    return changes


class ThresholdAlarms:
    """Alarm flags for each threshold level and direction.

    Every change of a flag is recorded in events as
    (level, direction, asserted, value).
    """

    def __init__(self) -> None:
        self._alarms: dict[tuple[Level, Direction], bool] = {}
        self.events: list[tuple[Level, Direction, bool, float]] = []

    def assert_threshold(
        self, level: Level, direction: Direction, asserted: bool, value: float
    ) -> bool:
        """Set an alarm flag; return True if the flag changed."""
        if level is Level.ERROR or direction is Direction.ERROR:
            _log.info("Alarm property is empty")
            return False
        key = (level, direction)
        if self._alarms.get(key, False) == asserted:
            return False
        self._alarms[key] = asserted
        self.events.append((level, direction, asserted, value))
        return True

    def apply(self, changes: Iterable[ThresholdChange]) -> bool:
        """Apply changes; return False if any critical threshold is asserted."""
        status = True
        for change in changes:
            threshold = change.threshold
            self.assert_threshold(
                threshold.level, threshold.direction, change.asserted, change.assert_value
            )
            if threshold.level is Level.CRITICAL and change.asserted:
                status = False
        return status

    def is_asserted(self, level: Level, direction: Direction) -> bool:
        """Tell whether the alarm for this level and direction is set."""
        return self._alarms.get((level, direction), False)


def check_thresholds_power_delay(
    thresholds: Iterable[Threshold],
    value: float,
    alarms: ThresholdAlarms,
    timer: ThresholdTimer,
    reading_state_good: Callable[[], bool],
) -> None:
    """Check thresholds, delaying low events that a power-off may cause.

    Low assertions are always delayed, and low de-assertions are delayed
    while an assertion for the same threshold is pending. High events are
    applied at once. A delayed event is applied only if reading_state_good()
    still holds when its timer expires.
    """

    def expire(threshold: Threshold, asserted: bool, assert_value: float) -> None:
        if reading_state_good():
            alarms.assert_threshold(
                threshold.level, threshold.direction, asserted, assert_value
            )

    for change in check_thresholds(thresholds, value):
        threshold = change.threshold
        if threshold.direction is Direction.LOW and (
            change.asserted or timer.has_active_timer(threshold, not change.asserted)
        ):
            timer.start_timer(threshold, change.asserted, change.assert_value, expire)
            continue
        alarms.assert_threshold(
            threshold.level, threshold.direction, change.asserted, change.assert_value
        )