"""An owning wrapper around a POSIX file descriptor."""

from __future__ import annotations

import logging
import os
from typing import Union

_log = logging.getLogger(__name__)


class FileOpenError(OSError):
    """Opening a file for a FileHandle failed."""


class FileHandle:
    """Owns a file descriptor and closes it when done."""

    def __init__(
        self,
        source: Union[str, "os.PathLike[str]", int],
        flags: int = os.O_RDWR,
    ) -> None:
        if isinstance(source, int):
            self._fd = source
            return
        path = os.fspath(source)
        try:
            self._fd = os.open(path, flags)
        except OSError as exc:
            raise FileOpenError(exc.errno, f"{path} failed to open") from exc

    def fileno(self) -> int:
        """Return the owned descriptor, or -1 once closed or detached."""
        return self._fd

    def detach(self) -> int:
        """Give up ownership of the descriptor and return it."""
        fd, self._fd = self._fd, -1
        return fd

    def close(self) -> None:
        """Close the descriptor if one is still owned."""
        fd = self.detach()
        if fd < 0:
            return
        try:
            os.close(fd)
        except OSError:
            _log.error("Failed to close fd %d", fd)

    def __enter__(self) -> "FileHandle":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_fd", -1) >= 0:
            self.close()