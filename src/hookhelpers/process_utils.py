# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Safe wrappers around ``subprocess`` execution."""

from __future__ import annotations

import shutil

# Bandit: subprocess usage is intentional. Helpers are executed from argument
# lists without ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from subprocess import CompletedProcess
from typing import IO

from .constants import TIMEOUT_EXIT


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Immutable command execution options.

    ``stdout`` and ``stderr`` accept open binary handles; they take precedence
    over ``capture_output`` for the stream they name.
    """

    env: Mapping[str, str] | None = None
    capture_output: bool = False
    timeout: float | None = None
    stdout: IO[bytes] | None = None
    stderr: IO[bytes] | None = None

    def with_overrides(self, **overrides: object) -> CommandOptions:
        """Return a copy of the options with ``overrides`` applied.

        Raises:
            TypeError: If an unknown option name is supplied.
            ValueError: When a timeout override is negative.
        """

        unknown = sorted(key for key in overrides if key not in self.__dataclass_fields__)
        if unknown:
            raise TypeError(f"Unknown command option(s): {', '.join(unknown)}")
        timeout = overrides.get("timeout", self.timeout)
        if isinstance(timeout, (int, float)) and timeout < 0:
            raise ValueError("timeout override must be non-negative")
        return replace(self, **overrides)  # type: ignore[arg-type]


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Return ``args`` with the executable resolved to an absolute path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If a bare executable name is not on ``PATH``.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute() or len(head_path.parts) > 1:
        return [str(head_path), *rest]

    found = shutil.which(head)
    if found is None:
        raise FileNotFoundError(f"Executable '{head}' was not found on PATH")
    return [found, *rest]


def run_command(
    args: Sequence[str],
    *,
    options: CommandOptions | None = None,
    **overrides: object,
) -> CompletedProcess[bytes]:
    """Execute ``args`` after normalising the executable path.

    Output is kept as bytes: helpers may rewrite files in any encoding and the
    bytes are passed through untouched.

    Args:
        args: Command and argument sequence to execute.
        options: Base options configuring execution semantics.
        **overrides: Per-call replacements applied to a copy of ``options``.

    Returns:
        CompletedProcess: Subprocess execution metadata. A timed-out command is
        reported with exit status 124.

    Raises:
        FileNotFoundError: If the executable cannot be resolved.
    """

    normalized = _normalize_args(args)
    resolved = (options or CommandOptions()).with_overrides(**overrides)
    capture = subprocess.PIPE if resolved.capture_output else None

    try:
        # Bandit: argument lists come from resolved helper paths, never a shell string.
        completed: CompletedProcess[bytes] = subprocess.run(  # nosec B603
            normalized,
            env=dict(resolved.env) if resolved.env is not None else None,
            check=False,
            stdout=resolved.stdout if resolved.stdout is not None else capture,
            stderr=resolved.stderr if resolved.stderr is not None else capture,
            timeout=resolved.timeout,
        )
    except subprocess.TimeoutExpired as exc:
        timeout_msg = f"Command timed out after {resolved.timeout:.1f}s".encode()
        stderr = exc.stderr if isinstance(exc.stderr, bytes) else b""
        completed = subprocess.CompletedProcess(
            args=normalized,
            returncode=TIMEOUT_EXIT,
            stdout=exc.stdout if isinstance(exc.stdout, bytes) else b"",
            stderr=stderr + b"\n" + timeout_msg if stderr else timeout_msg,
        )

    return completed


__all__ = ["CommandOptions", "run_command"]
