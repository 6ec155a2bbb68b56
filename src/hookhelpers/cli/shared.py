# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, exit statuses)."""

from __future__ import annotations

from typing import Final

import typer

from ..config import ConfigError
from ..logging import HelperLogger

CONFIG_ERROR_EXIT: Final[int] = 2
SIGNAL_EXIT_BASE: Final[int] = 128


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code

    @classmethod
    def from_config_error(cls, exc: ConfigError) -> CLIError:
        return cls(f"Invalid configuration: {exc}", exit_code=CONFIG_ERROR_EXIT)


def build_cli_logger(
    *,
    emoji: bool,
    debug: bool = False,
    color: bool | None = None,
    quiet: bool = False,
) -> HelperLogger:
    """Return a ``HelperLogger`` configured for the CLI output preferences.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        color: Force colour on or off; ``None`` follows the terminal.
        quiet: Suppress informational and success messages.

    Returns:
        HelperLogger: Logger writing through the shared stderr console.
    """

    return HelperLogger(use_emoji=emoji, use_color=color, debug_enabled=debug, quiet=quiet)


def normalise_exit_code(code: int) -> int:
    """Map a subprocess status to a shell exit status (``-N`` becomes ``128 + N``)."""

    if code < 0:
        return SIGNAL_EXIT_BASE - code
    return code


def exit_with(code: int) -> None:
    """Raise :class:`typer.Exit` carrying ``code`` normalised for the shell."""

    raise typer.Exit(code=normalise_exit_code(code))


__all__ = [
    "CLIError",
    "CONFIG_ERROR_EXIT",
    "build_cli_logger",
    "exit_with",
    "normalise_exit_code",
]
