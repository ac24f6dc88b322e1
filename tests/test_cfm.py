import math

import pytest

from hwsensors.cfm import CFM_MAX_READING, CFM_MIN_READING, CFMSensor
from hwsensors.thresholds import Direction, Level, Threshold

FAN1 = "/xyz/openbmc_project/sensors/fan_tach/Fan_1"
FAN2 = "/xyz/openbmc_project/sensors/fan_tach/Fan_2"


class ParentRecorder:
    def __init__(self):
        self.calls = 0

    def update_reading(self):
        self.calls += 1


def make_sensor(tachs=("Fan_1",), parent=None, thresholds=()):
    return CFMSensor(
        "System Airflow",
        "/xyz/openbmc_project/inventory/system/board/cfm",
        thresholds,
        tachs,
        max_cfm=20.0,
        c1=0.5,
        c2=1.0,
        tach_min_percent=30.0,
        tach_max_percent=100.0,
        parent=parent,
    )


def test_name_is_escaped():
    assert make_sensor().name == "System_Airflow"


def test_reading_limits():
    sensor = make_sensor()
    assert sensor.max_reading == CFM_MAX_READING == 255
    assert sensor.min_reading == CFM_MIN_READING == 0


def test_no_readings_gives_zero():
    assert make_sensor().calculate() == 0.0


def test_full_speed_gives_max_cfm():
    sensor = make_sensor()
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    sensor.update_tach_reading(FAN1, 10000.0)
    # At 100 % speed the coefficient is c2 = 1.0, so airflow is max_cfm.
    assert sensor.calculate() == pytest.approx(sensor.max_cfm)
    assert sensor.value == pytest.approx(sensor.max_cfm)


def test_zero_speed_gives_zero():
    sensor = make_sensor()
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    sensor.update_tach_reading(FAN1, 0.0)
    assert sensor.calculate() == 0.0


def test_two_fans_sum():
    single = make_sensor()
    single.set_tach_range(FAN1, 0.0, 8000.0)
    single.update_tach_reading(FAN1, 5000.0)

    double = make_sensor(tachs=("Fan_1", "Fan_2"))
    for path in (FAN1, FAN2):
        double.set_tach_range(path, 0.0, 8000.0)
        double.update_tach_reading(path, 5000.0)

    assert double.calculate() == pytest.approx(2 * single.calculate())


def test_airflow_grows_with_speed():
    sensor = make_sensor()
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    results = []
    for speed in (1000.0, 4000.0, 7000.0, 10000.0):
        sensor.update_tach_reading(FAN1, speed)
        results.append(sensor.calculate())
    assert results == sorted(results)
    assert results[0] < results[-1]


def test_missing_range_fails():
    sensor = make_sensor()
    assert sensor.update_tach_reading(FAN1, 3000.0) is False
    assert sensor.calculate() is None


def test_zero_max_fails_and_value_is_nan():
    sensor = make_sensor()
    sensor.update_tach_reading(FAN1, 3000.0)
    sensor.set_tach_range(FAN1, 0.0, 0.0)
    assert sensor.calculate() is None
    assert math.isnan(sensor.value)


def test_nan_reading_ignored():
    sensor = make_sensor()
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    sensor.update_tach_reading(FAN1, 10000.0)
    before = sensor.value
    assert sensor.update_tach_reading(FAN1, math.nan) is True
    assert sensor.calculate() == pytest.approx(before)


def test_update_returns_range_known():
    sensor = make_sensor()
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    assert sensor.update_tach_reading(FAN1, 2000.0) is True


def test_parent_notified_only_on_change():
    parent = ParentRecorder()
    sensor = make_sensor(parent=parent)
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    calls = parent.calls
    sensor.update_tach_reading(FAN1, 6000.0)
    assert parent.calls == calls + 1
    sensor.update_tach_reading(FAN1, 6000.0)
    assert parent.calls == calls + 1


def test_max_cfm_limit():
    sensor = make_sensor(tachs=("Fan_1", "Fan_2"))
    assert sensor.max_cfm_limit() == pytest.approx(sensor.c2 * sensor.max_cfm * 2)


def test_get_max_rpm_zero_means_unlimited():
    assert make_sensor().get_max_rpm(0) == 100


def test_get_max_rpm_large_limit():
    sensor = make_sensor(tachs=("Fan_1", "Fan_2"))
    assert sensor.get_max_rpm(10_000) == 100


def test_get_max_rpm_monotonic_and_bounded():
    sensor = make_sensor(tachs=("Fan_1", "Fan_2"))
    previous = 0
    for limit in range(1, 60, 3):
        pwm = sensor.get_max_rpm(limit)
        assert 0 <= pwm <= 100
        assert pwm >= previous
        previous = pwm


def test_get_max_rpm_respects_limit():
    sensor = make_sensor(tachs=("Fan_1", "Fan_2"))
    limit = 15
    pwm = sensor.get_max_rpm(limit)
    flow_at = sensor._coefficient(pwm) * sensor.max_cfm * pwm * 2 / 100
    assert flow_at <= limit
    assert pwm < 100


def test_check_thresholds_critical():
    threshold = Threshold(Level.CRITICAL, Direction.HIGH, 5.0, 1.0)
    sensor = make_sensor(thresholds=[threshold])
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    sensor.update_tach_reading(FAN1, 10000.0)
    assert sensor.check_thresholds() is False
    assert sensor.alarms.is_asserted(Level.CRITICAL, Direction.HIGH)


def test_check_thresholds_ok():
    threshold = Threshold(Level.WARNING, Direction.HIGH, 100.0, 1.0)
    sensor = make_sensor(thresholds=[threshold])
    sensor.set_tach_range(FAN1, 0.0, 10000.0)
    sensor.update_tach_reading(FAN1, 10000.0)
    assert sensor.check_thresholds() is True
    assert not sensor.alarms.is_asserted(Level.WARNING, Direction.HIGH)