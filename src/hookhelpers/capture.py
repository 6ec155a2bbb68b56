# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run a filter command and commit its stdout over a target file on success."""

from __future__ import annotations

import shutil
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TextIO

from .constants import CANNOT_EXECUTE_EXIT, MISSING_COMMAND_EXIT
from .process_utils import CommandOptions, run_command
from .tempfiles import scoped_tempdir


def _replay(data: bytes, stream: TextIO) -> None:
    """Write captured ``data`` to ``stream`` without re-encoding when possible."""

    if not data:
        return
    stream.flush()
    buffer = getattr(stream, "buffer", None)
    if buffer is not None:
        buffer.write(data)
        buffer.flush()
    else:
        stream.write(data.decode(errors="replace"))
        stream.flush()


def _commit(source: Path, target: Path) -> None:
    """Copy ``source`` bytes into ``target``.

    The target is rewritten through its existing inode, so its permission
    bits and ownership are untouched.
    """

    with source.open("rb") as reader, target.open("wb") as writer:
        shutil.copyfileobj(reader, writer)


def capture_and_commit(
    target: Path | str,
    invocation: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run ``invocation`` and replace ``target`` with its stdout when it succeeds.

    Args:
        target: File whose contents are replaced on success.
        invocation: Command and arguments; usually names ``target`` itself.
        env: Environment for the child; defaults to the current environment.
        timeout: Optional time limit in seconds.
        stdout: Stream receiving replayed stdout on failure; defaults to ``sys.stdout``.
        stderr: Stream receiving replayed stderr on failure; defaults to ``sys.stderr``.

    Returns:
        int: The command's exit status. On nonzero status ``target`` is
        unchanged and the captured stderr then stdout are replayed. A target
        that cannot be written yields 126.

    Raises:
        TempResourceError: If the capture directory cannot be created.
        ValueError: If ``invocation`` is empty.
    """

    out_stream = stdout if stdout is not None else sys.stdout
    err_stream = stderr if stderr is not None else sys.stderr
    target_path = Path(target)
    if not invocation:
        raise ValueError("capture requires a command to run")

    with scoped_tempdir(prefix="hook-helpers-capture-") as workdir:
        out_path = workdir / "stdout"
        err_path = workdir / "stderr"
        with out_path.open("wb") as out_handle, err_path.open("wb") as err_handle:
            try:
                completed = run_command(
                    list(invocation),
                    options=CommandOptions(env=env, timeout=timeout),
                    stdout=out_handle,
                    stderr=err_handle,
                )
            except FileNotFoundError as exc:
                _replay(f"{exc}\n".encode(), err_stream)
                return MISSING_COMMAND_EXIT
            except OSError as exc:
                _replay(f"cannot execute {invocation[0]}: {exc.strerror or exc}\n".encode(), err_stream)
                return CANNOT_EXECUTE_EXIT
        # A timeout yields a synthetic result whose output never reached the files.
        if completed.stderr:
            with err_path.open("ab") as err_handle:
                err_handle.write(completed.stderr)

        if completed.returncode == 0:
            try:
                _commit(out_path, target_path)
            except OSError as exc:
                _replay(f"cannot write {target_path}: {exc.strerror or exc}\n".encode(), err_stream)
                return CANNOT_EXECUTE_EXIT
            return 0

        _replay(err_path.read_bytes(), err_stream)
        _replay(out_path.read_bytes(), out_stream)
        return completed.returncode


__all__ = ["capture_and_commit"]
