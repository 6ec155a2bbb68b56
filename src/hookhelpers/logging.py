# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User-facing logging helpers with optional colour and emoji support."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from rich.rule import Rule
from rich.text import Text

from .console import detect_tty, get_console_manager

_KEY_VALUE_RE = re.compile(r"([\w-]+)=(\".*?\"|\S+)")


def emoji(symbol: str, enable: bool) -> str:
    """Return ``symbol`` when emoji output is enabled, otherwise blank."""

    return symbol if enable else ""


def _print_line(
    msg: str,
    *,
    style: str | None,
    use_emoji: bool,
    use_color: bool | None = None,
) -> None:
    """Render ``msg`` to the console using shared styling helpers.

    Args:
        msg: Message text to print to the console.
        style: Rich style name to apply when colour output is active.
        use_emoji: Flag indicating whether emoji output is desired.
        use_color: Optional explicit colour flag overriding TTY detection.
    """

    color_enabled = detect_tty() if use_color is None else use_color
    console = get_console_manager().get(color=color_enabled, emoji=use_emoji)
    text = Text(msg)
    if style and color_enabled:
        text.stylize(style)
    console.print(text)


def section(title: str, *, use_color: bool) -> None:
    """Render a section header to delineate console output blocks."""

    console = get_console_manager().get(color=use_color, emoji=True)
    if use_color:
        console.print()
        console.print(Rule(title))
    else:
        console.print(f"\n--- {title} ---")


def info(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an informational message."""

    prefix = emoji("ℹ️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="cyan", use_emoji=use_emoji, use_color=use_color)


def ok(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a success message."""

    prefix = emoji("✅ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="green", use_emoji=use_emoji, use_color=use_color)


def warn(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit a warning message."""

    prefix = emoji("⚠️ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="yellow", use_emoji=use_emoji, use_color=use_color)


def fail(msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Emit an error message."""

    prefix = emoji("❌ ", use_emoji)
    _print_line(f"{prefix}{msg}", style="red", use_emoji=use_emoji, use_color=use_color)


@dataclass(slots=True)
class HelperLogger:
    """Adapter around the logging helpers honouring emoji, colour and verbosity settings.

    Every message is also recorded in ``messages`` in emission order.
    """

    use_emoji: bool = True
    use_color: bool | None = None
    debug_enabled: bool = False
    quiet: bool = False
    messages: list[tuple[str, str]] = field(default_factory=list)

    def info(self, message: str) -> None:
        """Log an informational message unless running quietly."""

        self.messages.append(("info", message))
        if not self.quiet:
            info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        """Log a success message unless running quietly."""

        self.messages.append(("ok", message))
        if not self.quiet:
            ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        self.messages.append(("warn", message))
        warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def fail(self, message: str) -> None:
        """Log a failure message."""

        self.messages.append(("fail", message))
        fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def section(self, title: str) -> None:
        """Render a section header unless running quietly."""

        self.messages.append(("section", title))
        if not self.quiet:
            section(title, use_color=detect_tty() if self.use_color is None else self.use_color)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload; ``key=value`` pairs are highlighted.
        """

        self.messages.append(("debug", message))
        if not self.debug_enabled:
            return
        text = Text("[debug] ", style="bold cyan")
        cursor = 0
        for match in _KEY_VALUE_RE.finditer(message):
            start, end = match.span()
            if start > cursor:
                text.append(message[cursor:start], style="dim")
            key, raw_value = match.group(1), match.group(2)
            text.append(key, style="bold magenta")
            text.append("=", style="dim")
            value_style = "bold blue" if key in {"command", "cmd", "chain"} else "bold green"
            text.append(raw_value, style=value_style)
            cursor = end
        if cursor < len(message):
            text.append(message[cursor:], style="dim")
        color_enabled = detect_tty() if self.use_color is None else self.use_color
        get_console_manager().get(color=color_enabled, emoji=self.use_emoji).print(text)


def quiet_logger() -> HelperLogger:
    """Return a logger that records messages without printing informational output."""

    return HelperLogger(use_emoji=False, use_color=False, quiet=True)


__all__ = [
    "HelperLogger",
    "emoji",
    "fail",
    "info",
    "quiet_logger",
    "ok",
    "section",
    "warn",
]
