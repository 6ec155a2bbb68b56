# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared options."""

from __future__ import annotations

import typer

from ..tempfiles import install_signal_cleanup
from ._cli_models import (
    COLOR_OPTION,
    CONFIG_OPTION,
    EMOJI_OPTION,
    LOCAL_DIR_OPTION,
    PROJECT_DIR_OPTION,
    QUIET_OPTION,
    SHARED_DIR_OPTION,
    VERBOSE_OPTION,
    GlobalOptions,
)
from .capture import CAPTURE_CONTEXT, capture_command
from .introspect import classify_command, config_command, which_command
from .run import lint_command, pretty_command, run_command

app = typer.Typer(
    name="hook-helpers",
    help="Resolve and run git hook helper chains.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def configure(
    ctx: typer.Context,
    local_dir: LOCAL_DIR_OPTION = None,
    project_dir: PROJECT_DIR_OPTION = None,
    shared_dir: SHARED_DIR_OPTION = None,
    config: CONFIG_OPTION = None,
    emoji: EMOJI_OPTION = None,
    color: COLOR_OPTION = None,
    verbose: VERBOSE_OPTION = False,
    quiet: QUIET_OPTION = False,
) -> None:
    """Store the search roots and output preferences for the chosen command."""

    ctx.obj = GlobalOptions(
        local_dir=local_dir,
        project_dir=project_dir,
        shared_dir=shared_dir,
        config_file=config,
        emoji=emoji,
        color=color,
        verbose=verbose,
        quiet=quiet,
    )


app.command("run")(run_command)
app.command("lint")(lint_command)
app.command("pretty")(pretty_command)
app.command("capture", context_settings=CAPTURE_CONTEXT)(capture_command)
app.command("classify")(classify_command)
app.command("which")(which_command)
app.command("config")(config_command)


def main() -> None:
    """Console-script entry point."""

    install_signal_cleanup()
    app()


__all__ = ["app", "main"]
