# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI commands dispatching files to configured helper chains."""

from __future__ import annotations

from typing import Annotated

import typer

from ._cli_models import (
    ARG_OPTION,
    FILES_ARGUMENT,
    HELPER_DIR_OPTION,
    STRICT_OPTION,
    global_options,
)
from ._cli_services import build_session, emit_report, lint_exit_code, run_dispatch
from .shared import CLIError, exit_with


def run_command(
    ctx: typer.Context,
    purpose: Annotated[str, typer.Argument(help="Configuration namespace, such as lint or pretty.")],
    files: FILES_ARGUMENT,
    helper_dir: HELPER_DIR_OPTION = None,
    args: ARG_OPTION = None,
) -> None:
    """Run the configured PURPOSE helpers for each file."""

    try:
        session = build_session(global_options(ctx))
        report = run_dispatch(session, purpose, files, helper_dir=helper_dir, args=args or ())
    except CLIError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    emit_report(report, purpose, logger=session.logger)
    exit_with(report.exit_code)


def lint_command(
    ctx: typer.Context,
    files: FILES_ARGUMENT,
    strict: STRICT_OPTION = False,
) -> None:
    """Run lint helpers; exit status 1 from a helper counts as warnings."""

    try:
        session = build_session(global_options(ctx))
        report = run_dispatch(session, "lint", files)
    except CLIError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    strict = strict or session.loaded.config.execution.lint_warnings_fatal
    emit_report(report, "lint", logger=session.logger, warnings_tolerated=not strict)
    raise typer.Exit(code=lint_exit_code(report, strict=strict))


def pretty_command(ctx: typer.Context, files: FILES_ARGUMENT) -> None:
    """Run formatter helpers over each file."""

    try:
        session = build_session(global_options(ctx))
        report = run_dispatch(session, "pretty", files)
    except CLIError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=exc.exit_code) from exc
    emit_report(report, "pretty", logger=session.logger)
    exit_with(report.exit_code)


__all__ = ["lint_command", "pretty_command", "run_command"]
