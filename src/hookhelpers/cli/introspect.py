# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI commands that explain classification, resolution and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from ..filetypes import TypeClassifier
from ..roots import ExecutableResolver, LookupStatus
from ._cli_models import FILES_ARGUMENT, global_options
from ._cli_services import HelperSession, build_layout, build_session
from .shared import CLIError, build_cli_logger

_STATUS_LABELS = {
    LookupStatus.FOUND: "found",
    LookupStatus.NOT_EXECUTABLE: "not executable",
    LookupStatus.MISSING: "missing",
}


def classify_command(ctx: typer.Context, files: FILES_ARGUMENT) -> None:
    """Print the detected file type of each file."""

    options = global_options(ctx)
    logger = build_cli_logger(emoji=options.emoji is not False, debug=options.verbose)
    classifier = TypeClassifier(logger=logger)
    for path in files:
        typer.echo(f"{path}\t{classifier.classify(path)}")


def which_command(
    ctx: typer.Context,
    relative_path: Annotated[str, typer.Argument(help="Path relative to each root, e.g. helpers/lint/css/stylelint.")],
) -> None:
    """Show every root checked for RELATIVE_PATH and which one wins."""

    layout = build_layout(global_options(ctx))
    try:
        resolution = ExecutableResolver(layout).inspect(relative_path)
    except ValueError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=2) from exc
    for record in resolution.records:
        typer.echo(f"{record.tier}\t{_STATUS_LABELS[record.status]}\t{record.path}")
    if resolution.executable is None:
        typer.echo(f"{relative_path}: not found", err=True)
        raise typer.Exit(code=1)
    typer.echo(str(resolution.executable))


def _helper_table(session: HelperSession) -> Table:
    table = Table(title="Helpers", box=box.SIMPLE, expand=False)
    table.add_column("Purpose", style="cyan")
    table.add_column("File type", style="magenta")
    table.add_column("Alternatives", overflow="fold")
    table.add_column("Source", style="dim", overflow="fold")
    for key, alternatives in session.table.entries():
        table.add_row(
            key.purpose,
            key.file_type,
            " ".join(str(alternative) for alternative in alternatives),
            session.loaded.source_of(key.purpose, key.file_type) or "-",
        )
    return table


def config_command(ctx: typer.Context) -> None:
    """Print the effective helper table with the source of each entry."""

    try:
        session = build_session(global_options(ctx))
    except CLIError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    console = Console(highlight=False, soft_wrap=True)
    console.print(_helper_table(session))
    if session.table.options:
        options = Table(title="Options", box=box.SIMPLE, expand=False)
        for column in ("Purpose", "File type", "Command", "Options"):
            options.add_column(column)
        for key in sorted(session.table.options, key=lambda item: (item.purpose, item.file_type, item.command)):
            options.add_row(key.purpose, key.file_type, key.command, session.table.options[key])
        console.print(options)
    execution = session.loaded.config.execution
    console.print(
        f"lint helpers: {execution.lint_helper_dir}  pretty helpers: {execution.pretty_helper_dir}  "
        f"timeout: {execution.timeout if execution.timeout is not None else 'none'}"
    )
    console.print("sources: " + (", ".join(session.loaded.sources) or "none"))


__all__ = ["classify_command", "config_command", "which_command"]
