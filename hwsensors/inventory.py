"""Configuration lookups and inventory association helpers."""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from hwsensors.config import config_interface_name, to_double

_log = logging.getLogger(__name__)

SYSTEM_INTERFACE = "xyz.openbmc_project.Inventory.Item.System"

Association = tuple[str, str, str]
SubTree = Iterable[tuple[str, Iterable[tuple[str, Sequence[str]]]]]


def get_permit_set(config: Mapping[str, Any]) -> set[str]:
    """Return the labels or base names a device permits; empty means all."""
    labels = config.get("Labels")
    if labels is None:
        return set()
    if not isinstance(labels, (list, tuple)) or not all(
        isinstance(item, str) for item in labels
    ):
        _log.error("PermitList does not contain a list, wrong variant type.")
        return set()
    return set(labels)


def find_limits(
    limits: tuple[float, float], config: Mapping[str, Any] | None
) -> tuple[float, float]:
    """Return (min, max) limits overridden by MinReading and MaxReading."""
    low, high = limits
    if config is None:
        return low, high
    if "MinReading" in config:
        low = to_double(config["MinReading"])
    if "MaxReading" in config:
        high = to_double(config["MaxReading"])
    return low, high


def filter_sensor_configuration(
    managed_objects: Mapping[str, Mapping[str, Any]], sensor_type: str
) -> dict[str, Mapping[str, Any]]:
    """Keep the objects that have an interface for the given sensor type."""
    prefix = config_interface_name(sensor_type)
    return {
        path: interfaces
        for path, interfaces in managed_objects.items()
        if any(name.startswith(prefix) for name in interfaces)
    }


def find_containing_chassis(config_parent: str, subtree: SubTree) -> str | None:
    """Pick the chassis for a configuration from a mapper subtree.

    The configuration's parent wins if it appears in the subtree; otherwise
    the first object implementing the System item interface is used.
    """
    entries = [(obj, list(services)) for obj, services in subtree]
    for obj, _ in entries:
        if obj == config_parent:
            return obj
    for obj, services in entries:
        if any(SYSTEM_INTERFACE in interfaces for _, interfaces in services):
            return obj
    return None


def chassis_association(path: str) -> list[Association]:
    """Associate a sensor with the parent object of its configuration path."""
    return [("chassis", "all_sensors", posixpath.dirname(path))]


def inventory_associations(inventory_path: str, chassis_path: str) -> list[Association]:
    """Associate a sensor with an inventory item and its chassis."""
    return [
        ("inventory", "sensors", inventory_path),
        ("chassis", "all_sensors", chassis_path),
    ]