"""Helpers for locating and reading hwmon sysfs attribute files."""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Union

PathArg = Union[str, "os.PathLike[str]"]

# Leading part of a line that strtod-style parsing accepts as a number.
_NUMBER_PREFIX = re.compile(
    r"\s*[+-]?(?:"
    r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
    r"|inf(?:inity)?"
    r"|nan"
    r")",
    re.IGNORECASE,
)


def open_and_read(path: PathArg) -> str | None:
    """Return the first line of a file, or None if it cannot be read."""
    try:
        with open(path, encoding="utf-8", errors="replace", newline="") as stream:
            line = stream.readline()
    except OSError:
        return None
    return line.removesuffix("\n")


def get_full_hwmon_file_path(
    directory: str, base_name: str, permit_set: Iterable[str]
) -> str | None:
    """Return the "_input" file for a hwmon base name if it is permitted.

    An empty permit set permits everything. Otherwise the base name's label
    (or the base name itself when there is no label file) must be in the set.
    """
    permitted = set(permit_set)
    input_path = f"{directory}/{base_name}_input"
    if not permitted:
        return input_path
    label = open_and_read(f"{directory}/{base_name}_label")
    if label is None:
        label = base_name
    return input_path if label in permitted else None


def _walk(directory: Path, depth: int, visit: Callable[[Path, int], bool]) -> None:
    """Visit entries below directory; descend where visit returns True."""
    for child in sorted(directory.iterdir()):
        if visit(child, depth) and child.is_dir():
            _walk(child, depth + 1, visit)


def find_files(
    dir_path: PathArg, match_string: str, symlink_depth: int = 1
) -> list[Path]:
    """Find files below dir_path whose path matches match_string.

    Without a '/', match_string is a regular expression searched for in the
    whole path. With '/', each piece must fully match the path component at
    the same level below dir_path. Directory symlinks are followed; recursion
    stops below entries at depth symlink_depth or more. Raises
    FileNotFoundError if dir_path does not exist.
    """
    root = Path(dir_path)
    if not root.exists():
        raise FileNotFoundError(f"{root} does not exist")

    found: list[Path] = []
    pieces = match_string.split("/")

    if len(pieces) <= 1:
        search = re.compile(match_string)

        def visit_flat(entry: Path, depth: int) -> bool:
            if not entry.is_dir() and search.search(str(entry)):
                found.append(entry)
            return depth < symlink_depth

        _walk(root, 0, visit_flat)
        return found

    patterns = [re.compile(piece) for piece in pieces]

    def visit_nested(entry: Path, depth: int) -> bool:
        components = entry.relative_to(root).parts
        descend = depth < symlink_depth
        matched = 0
        for component in components:
            if matched == len(patterns):
                descend = False
                break
            if not patterns[matched].fullmatch(component):
                descend = False
                break
            matched += 1
        if not entry.is_dir() and matched == len(patterns):
            found.append(entry)
        return descend

    _walk(root, 0, visit_nested)
    return found


def read_file(path: PathArg, scale_factor: float) -> float | None:
    """Read a number from the first line of a file, divided by scale_factor.

    Returns None if the file cannot be read or does not start with a number.
    """
    line = open_and_read(path)
    if line is None:
        return None
    match = _NUMBER_PREFIX.match(line)
    if match is None:
        return None
    return float(match.group().strip()) / scale_factor


def split_file_name(file_path: PathArg) -> tuple[str, str, str] | None:
    """Split a sysfs name of the form <type><number>_<item> into its parts."""
    name = os.path.basename(os.fspath(file_path))
    if not name:
        return None
    number_pos = next((i for i, ch in enumerate(name) if ch in "0123456789"), len(name))
    item_pos = name.find("_")
    if item_pos < 0:
        item_pos = len(name)
    if number_pos > 0 and item_pos > number_pos and len(name) > item_pos:
        return name[:number_pos], name[number_pos:item_pos], name[item_pos + 1 :]
    return None