# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Private temporary directories with guaranteed cleanup."""

from __future__ import annotations

import atexit
import shutil
import signal
import sys
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from types import FrameType
from typing import Final

TEMP_DIR_MODE: Final[int] = 0o700
TEMP_PREFIX: Final[str] = "hook-helpers-"


class TempResourceError(RuntimeError):
    """Raised when a temporary directory or file cannot be created."""


class TempDirRegistry:
    """Track live temporary directories so they are removed at interpreter exit."""

    def __init__(self) -> None:
        self._live: set[Path] = set()
        self._registered = False

    @property
    def live(self) -> frozenset[Path]:
        return frozenset(self._live)

    def create(self, *, prefix: str = TEMP_PREFIX) -> Path:
        """Create a new directory readable only by the current user.

        Raises:
            TempResourceError: If the directory cannot be created.
        """

        try:
            path = Path(tempfile.mkdtemp(prefix=prefix))
            path.chmod(TEMP_DIR_MODE)
        except OSError as exc:
            raise TempResourceError(f"cannot create temporary directory: {exc}") from exc
        self._live.add(path)
        if not self._registered:
            atexit.register(self.cleanup_all)
            self._registered = True
        return path

    def release(self, path: Path) -> None:
        """Remove ``path`` and stop tracking it."""

        self._live.discard(path)
        shutil.rmtree(path, ignore_errors=True)

    def cleanup_all(self) -> None:
        for path in list(self._live):
            self.release(path)


_REGISTRY: Final[TempDirRegistry] = TempDirRegistry()


def registry() -> TempDirRegistry:
    return _REGISTRY


@contextmanager
def scoped_tempdir(*, prefix: str = TEMP_PREFIX) -> Iterator[Path]:
    """Yield a fresh private directory, removed on every exit path.

    Raises:
        TempResourceError: If the directory cannot be created.
    """

    path = _REGISTRY.create(prefix=prefix)
    try:
        yield path
    finally:
        _REGISTRY.release(path)


def _exit_on_signal(signum: int, frame: FrameType | None) -> None:
    del frame
    # SystemExit unwinds ``scoped_tempdir`` blocks and then runs the atexit hook.
    sys.exit(128 + signum)


def install_signal_cleanup() -> None:
    """Turn SIGTERM and SIGHUP into ``SystemExit`` so temporary directories are removed."""

    for name in ("SIGTERM", "SIGHUP"):
        if (signum := getattr(signal, name, None)) is not None:
            signal.signal(signum, _exit_on_signal)


__all__ = [
    "TEMP_DIR_MODE",
    "TempDirRegistry",
    "TempResourceError",
    "install_signal_cleanup",
    "registry",
    "scoped_tempdir",
]
