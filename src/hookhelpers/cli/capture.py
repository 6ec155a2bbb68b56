# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command that rewrites a file with a filter's output when it succeeds."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ..capture import capture_and_commit
from ..tempfiles import TempResourceError
from .shared import exit_with

# Options after the command (such as a filter's own flags) stay part of the command.
CAPTURE_CONTEXT = {"ignore_unknown_options": True}


def capture_command(
    target: Annotated[Path, typer.Argument(help="File replaced with the command's stdout on success.")],
    command: Annotated[
        list[str],
        typer.Argument(help="Command and arguments; put them after '--'.", show_default=False),
    ],
    timeout: Annotated[float | None, typer.Option("--timeout", min=0, help="Time limit in seconds.")] = None,
) -> None:
    """Run COMMAND and commit its stdout over TARGET only when it exits 0."""

    if not target.is_file():
        typer.echo(f"capture target is not a regular file: {target}", err=True)
        raise typer.Exit(code=2)
    try:
        code = capture_and_commit(target, command, timeout=timeout)
    except TempResourceError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    exit_with(code)


__all__ = ["CAPTURE_CONTEXT", "capture_command"]
