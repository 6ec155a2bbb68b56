# SPDX-License-Identifier: MIT
"""Option aliases and data structures shared by the hook-helpers commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer

from ..constants import LOCAL_DIR_ENV, PROJECT_DIR_ENV, SHARED_DIR_ENV

LOCAL_DIR_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--local-dir",
        envvar=LOCAL_DIR_ENV,
        help="User override directory searched first.",
    ),
]
PROJECT_DIR_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--project-dir",
        envvar=PROJECT_DIR_ENV,
        help="Target repository root. Defaults to the current directory.",
    ),
]
SHARED_DIR_OPTION = Annotated[
    Path | None,
    typer.Option(
        "--shared-dir",
        envvar=SHARED_DIR_ENV,
        help="Shared tooling directory, searched only when it lives inside the project.",
    ),
]
CONFIG_OPTION = Annotated[
    Path | None,
    typer.Option("--config", help="Extra TOML configuration applied above every other layer."),
]
EMOJI_OPTION = Annotated[
    bool | None,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool | None,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]
VERBOSE_OPTION = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show resolution and dispatch decisions."),
]
QUIET_OPTION = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Only report warnings and failures."),
]

FILES_ARGUMENT = Annotated[
    list[Path],
    typer.Argument(help="Files to dispatch.", show_default=False),
]
HELPER_DIR_OPTION = Annotated[
    str | None,
    typer.Option("--helper-dir", help="Helper directory relative to each root. Defaults to helpers/<purpose>."),
]
ARG_OPTION = Annotated[
    list[str] | None,
    typer.Option("--arg", "-a", help="Extra argument passed to every helper before the file path."),
]
STRICT_OPTION = Annotated[
    bool,
    typer.Option("--strict", help="Treat lint warnings (exit status 1) as failures."),
]


@dataclass(slots=True)
class GlobalOptions:
    """Capture the options given to the top-level ``hook-helpers`` callback."""

    local_dir: Path | None = None
    project_dir: Path | None = None
    shared_dir: Path | None = None
    config_file: Path | None = None
    emoji: bool | None = None
    color: bool | None = None
    verbose: bool = False
    quiet: bool = False


def global_options(ctx: typer.Context) -> GlobalOptions:
    """Return the options stored by the application callback."""

    options = ctx.find_object(GlobalOptions)
    return options if options is not None else GlobalOptions()


__all__ = [
    "ARG_OPTION",
    "COLOR_OPTION",
    "CONFIG_OPTION",
    "EMOJI_OPTION",
    "FILES_ARGUMENT",
    "GlobalOptions",
    "HELPER_DIR_OPTION",
    "LOCAL_DIR_OPTION",
    "PROJECT_DIR_OPTION",
    "QUIET_OPTION",
    "SHARED_DIR_OPTION",
    "STRICT_OPTION",
    "VERBOSE_OPTION",
    "global_options",
]
