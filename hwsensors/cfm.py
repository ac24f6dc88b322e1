"""Airflow (CFM) sensor derived from fan tachometer readings."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from typing import Protocol

from hwsensors.alarms import ThresholdAlarms, check_thresholds
from hwsensors.config import escape_name
from hwsensors.sensor_paths import UNIT_CFM
from hwsensors.thresholds import Threshold

_log = logging.getLogger(__name__)

CFM_MAX_READING = 255.0
CFM_MIN_READING = 0.0


class _ReadingListener(Protocol):
    def update_reading(self) -> None: ...


def _find_by_suffix(entries: Mapping[str, object], suffix: str) -> str | None:
    """Return the first key, in sorted order, that ends with suffix."""
    return next((key for key in sorted(entries) if key.endswith(suffix)), None)


class CFMSensor:
    """Computes system airflow from fan speeds.

    c1 and c2 are the airflow coefficients as fractions (a configured
    percentage divided by 100); tach_min_percent and tach_max_percent bound
    the linear interpolation between them. Fans are matched to tach names by
    the end of their sensor path.
    """

    unit = UNIT_CFM
    max_reading = CFM_MAX_READING
    min_reading = CFM_MIN_READING

    def __init__(
        self,
        name: str,
        configuration: str,
        thresholds: Iterable[Threshold] = (),
        tachs: Iterable[str] = (),
        max_cfm: float = 0.0,
        c1: float = 0.0,
        c2: float = 0.0,
        tach_min_percent: float = 0.0,
        tach_max_percent: float = 0.0,
        parent: _ReadingListener | None = None,
    ) -> None:
        self.name = escape_name(name)
        self.configuration = configuration
        self.thresholds = list(thresholds)
        self.tachs = list(tachs)
        self.max_cfm = max_cfm
        self.c1 = c1
        self.c2 = c2
        self.tach_min_percent = tach_min_percent
        self.tach_max_percent = tach_max_percent
        self.parent = parent
        self.value = math.nan
        self.alarms = ThresholdAlarms()
        self._tach_readings: dict[str, float] = {}
        self._tach_ranges: dict[str, tuple[float, float]] = {}

    def _coefficient(self, percent: float) -> float:
        """Interpolate the airflow coefficient for a fan speed in percent."""
        if percent == 0:
            return 0.0
        if percent < self.tach_min_percent:
            return self.c1
        if percent > self.tach_max_percent:
            return self.c2
        span = self.tach_max_percent - self.tach_min_percent
        if span == 0:
            return math.nan
        return self.c1 + ((self.c2 - self.c1) * (percent - self.tach_min_percent)) / span

    def calculate(self) -> float | None:
        """Return the total airflow, or None if a fan's range is unusable.

        Fans without a reading yet are left out of the sum.
        """
        total = 0.0
        for tach in self.tachs:
            reading_key = _find_by_suffix(self._tach_readings, tach)
            range_key = _find_by_suffix(self._tach_ranges, tach)
            if reading_key is None:
                _log.debug("Can't find %s in readings", tach)
                continue
            if range_key is None:
                _log.error("Can't find %s in ranges", tach)
                return None
            maximum = self._tach_ranges[range_key][1]
            if maximum == 0:
                _log.error("Tach Max Set to 0, tachName: %s", tach)
                return None
            # The minimum speed of a fan is taken to be 0.
            rpm = self._tach_readings[reading_key] / maximum * 100
            total += self._coefficient(rpm) * self.max_cfm * rpm
        return total / 100

    def get_max_rpm(self, cfm_max_setting: float) -> int:
        """Return the highest fan PWM percentage keeping airflow within a limit.

        A limit of 0 means no limit and gives 100.
        """
        setting = int(cfm_max_setting)
        pwm_percent = 100
        if setting == 0:
            return pwm_percent
        total = math.inf
        first = True
        while total > setting:
            if first:
                first = False
            else:
                pwm_percent -= 1
            total = self._coefficient(pwm_percent) * self.max_cfm * pwm_percent
            total *= len(self.tachs)
            total /= 100
            if pwm_percent <= 0:
                break
        return pwm_percent

    def update_tach_reading(self, path: str, value: float) -> bool:
        """Record a fan reading; return whether that fan's range is known.

        NaN readings are ignored. When the range is already known the sensor
        reading is recomputed; otherwise the caller is expected to supply it
        with set_tach_range, which recomputes then.
        """
        if math.isnan(value):
            return path in self._tach_ranges
        self._tach_readings[path] = value
        if path not in self._tach_ranges:
            return False
        self.update_reading()
        return True

    def set_tach_range(self, path: str, minimum: float, maximum: float) -> None:
        """Record a fan's MinValue and MaxValue and recompute the reading."""
        self._tach_ranges[path] = (minimum, maximum)
        self.update_reading()

    def update_reading(self) -> None:
        """Recompute the value, telling the parent when it changes."""
        result = self.calculate()
        if result is None:
            self.value = math.nan
            return
        if self.value != result and self.parent is not None:
            self.parent.update_reading()
        self.value = result

    def max_cfm_limit(self) -> float:
        """Return the greatest airflow all fans together can deliver."""
        return self.c2 * self.max_cfm * len(self.tachs)

    def check_thresholds(self) -> bool:
        """Update alarms; return False if a critical threshold is asserted."""
        return self.alarms.apply(check_thresholds(self.thresholds, self.value))