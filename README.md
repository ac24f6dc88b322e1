# hwsensors

Building blocks for a hardware sensor daemon, independent of any message bus:

- `hwsensors.sensor_paths`: map unit names to sensor path categories with
  `get_path_for_units` (an unknown unit gives `""`), and sanitise object path
  names with `escape_path_for_dbus`. Unit name constants such as
  `UNIT_DEGREES_C` and `UNIT_CFM` live here too.
- `hwsensors.config`: read typed values from sensor configuration mappings
  (`load_double`, `load_unsigned`, `load_string`, which raise
  `MissingKeyError` for an absent key; `get_poll_rate`, `get_power_state`
  returning a `PowerState`), build names with `escape_name` and
  `config_interface_name`, and parse `bus-addr` device names such as
  `"3-0048"` into `(bus, address)` with `get_device_bus_addr`.
- `hwsensors.file_handle`: `FileHandle`, a context manager that owns a raw
  file descriptor; `FileOpenError` is raised when opening fails.
- `hwsensors.hwmon`: sysfs discovery and reading: `find_files`,
  `get_full_hwmon_file_path`, `open_and_read`, `read_file` and
  `split_file_name`.
- `hwsensors.inventory`: configuration filtering and association helpers:
  `get_permit_set`, `find_limits`, `filter_sensor_configuration`,
  `find_containing_chassis`, `chassis_association` and
  `inventory_associations`.
- `hwsensors.thresholds`: `Threshold`, `Level` and `Direction`;
  `parse_thresholds_from_config` (raising `MalformedThresholdError` when a
  threshold lacks Value, Severity or Direction) and
  `parse_thresholds_from_attr`; `get_interface`; and `ThresholdTimer`, which
  delays threshold events on the running asyncio event loop.
- `hwsensors.alarms`: hysteresis-aware threshold checking with
  `check_thresholds`, alarm state kept in `ThresholdAlarms`, and delayed
  low-threshold assertion through `check_thresholds_power_delay`.
- `hwsensors.cfm`: `CFMSensor` works out system airflow from fan tach
  readings and ranges, and finds the highest PWM percentage that keeps
  airflow within a limit with `get_max_rpm`.

## Installing

```
pip install .
```

The package needs nothing beyond the standard library. The test suite needs
the `test` extra:

```
pip install ".[test]"
pytest
```

## Examples

Threshold alarms with hysteresis:

```python
from hwsensors.thresholds import Threshold, Level, Direction
from hwsensors.alarms import ThresholdAlarms, check_thresholds

thresholds = [Threshold(Level.CRITICAL, Direction.HIGH, 90.0, hysteresis=2.0)]
alarms = ThresholdAlarms()

alarms.apply(check_thresholds(thresholds, 91.0))
assert alarms.is_asserted(Level.CRITICAL, Direction.HIGH)

alarms.apply(check_thresholds(thresholds, 89.0))   # inside the hysteresis band
assert alarms.is_asserted(Level.CRITICAL, Direction.HIGH)

alarms.apply(check_thresholds(thresholds, 87.0))
assert not alarms.is_asserted(Level.CRITICAL, Direction.HIGH)
```

Airflow from one fan:

```python
from hwsensors.cfm import CFMSensor

sensor = CFMSensor(
    "System Airflow",
    "/xyz/openbmc_project/inventory/system/board/System_Airflow",
    tachs=["Fan_1"],
    max_cfm=20.0,
    c1=0.5,
    c2=0.8,
    tach_min_percent=20.0,
    tach_max_percent=80.0,
)
fan = "/xyz/openbmc_project/sensors/fan_tach/Fan_1"
sensor.update_tach_reading(fan, 5000.0)    # False: the fan's range is not known yet
sensor.set_tach_range(fan, 0.0, 10000.0)   # recomputes the reading
print(sensor.value)                        # 6.5
```

## What this package does not do

It holds no connection to a message bus: it publishes no sensor objects,
sends no signals and reads no configuration from a bus service. It does not
poll hardware on its own, has no command-line program and no long-running
service. It does not track host or chassis power state, and it does not
derive an exit air temperature from airflow and power readings; callers
supply readings and act on the results themselves.