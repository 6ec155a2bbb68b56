# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-set parsing and sequential execution of helper chains."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Final

from .constants import (
    CANNOT_EXECUTE_EXIT,
    CHAIN_SEPARATOR,
    COMMON_HELPER_DIR,
    MISSING_COMMAND_EXIT,
)
from .environment import EnvironmentSnapshot
from .logging import HelperLogger, quiet_logger
from .process_utils import CommandOptions, run_command
from .roots import ExecutableResolver

if TYPE_CHECKING:
    from .config import HelperTable

_FORBIDDEN_NAMES: Final[frozenset[str]] = frozenset({".", ".."})


def _validate_command_name(name: str, spec: str) -> str:
    if not name:
        raise ValueError(f"empty command name in '{spec}'")
    if name in _FORBIDDEN_NAMES or "/" in name or "\\" in name:
        raise ValueError(f"invalid command name '{name}' in '{spec}'")
    return name


@dataclass(frozen=True, slots=True)
class CommandSet:
    """Ordered helper names run as one chain, for example ``prettier+trim``."""

    names: tuple[str, ...]

    @classmethod
    def parse(cls, spec: str) -> CommandSet:
        """Split ``spec`` on the chain separator.

        Raises:
            ValueError: If ``spec`` is empty or contains an empty or path-like name.
        """

        text = spec.strip()
        if not text:
            raise ValueError("command set must not be empty")
        names = tuple(_validate_command_name(part.strip(), text) for part in text.split(CHAIN_SEPARATOR))
        return cls(names=names)

    @property
    def first(self) -> str:
        return self.names[0]

    def __str__(self) -> str:
        return CHAIN_SEPARATOR.join(self.names)


def parse_alternatives(entry: str) -> tuple[CommandSet, ...]:
    """Parse a space-separated list of command sets, preserving order.

    Args:
        entry: Configuration value such as ``"prettier+trim trim"``.

    Returns:
        tuple[CommandSet, ...]: Alternatives in the order they should be tried.
    """

    return tuple(CommandSet.parse(spec) for spec in entry.split())


class OutcomeKind(StrEnum):
    """How a chain or dispatch call ended."""

    SUCCESS = "success"
    FAILURE = "failure"
    CONFIG_ERROR = "config-error"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Exit status and context of a chain or dispatch call."""

    exit_code: int
    kind: OutcomeKind
    command_set: CommandSet | None = None
    command: str | None = None
    executed: tuple[str, ...] = ()
    stdout: bytes | None = None
    stderr: bytes | None = None
    file_type: str | None = None
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @classmethod
    def skipped(cls, reason: str, *, file_type: str | None = None) -> ExecutionOutcome:
        return cls(exit_code=0, kind=OutcomeKind.SKIPPED, file_type=file_type, reason=reason)


@dataclass(frozen=True, slots=True)
class _LinkResult:
    exit_code: int
    stdout: bytes | None
    stderr: bytes | None


@dataclass(slots=True)
class _CapturedStreams:
    stdout: list[bytes] = field(default_factory=list)
    stderr: list[bytes] = field(default_factory=list)

    def add(self, result: _LinkResult) -> None:
        if result.stdout:
            self.stdout.append(result.stdout)
        if result.stderr:
            self.stderr.append(result.stderr)

    def joined(self) -> tuple[bytes, bytes]:
        return b"".join(self.stdout), b"".join(self.stderr)


class ChainExecutor:
    """Run command sets for one purpose and helper directory.

    Each link is resolved as ``<helper_dir>/<file_type>/<name>`` and then
    ``<helper_dir>/_common/<name>`` across every search root. Links run one at
    a time; the first nonzero exit ends the chain.
    """

    def __init__(
        self,
        resolver: ExecutableResolver,
        table: HelperTable,
        *,
        purpose: str,
        helper_dir: PurePath | str,
        env: EnvironmentSnapshot | None = None,
        logger: HelperLogger | None = None,
        timeout: float | None = None,
        capture_output: bool = False,
    ) -> None:
        self._resolver = resolver
        self._table = table
        self._purpose = purpose.lower()
        self._helper_dir = PurePath(helper_dir)
        self._env = env if env is not None else EnvironmentSnapshot.capture()
        self._logger = logger or quiet_logger()
        self._timeout = timeout
        self._capture_output = capture_output
        self._warned: set[Path] = set()

    @property
    def purpose(self) -> str:
        return self._purpose

    @property
    def helper_dir(self) -> PurePath:
        return self._helper_dir

    def candidate_paths(self, file_type: str, name: str) -> tuple[PurePath, PurePath]:
        """Return the type-specific and shared relative paths for ``name``."""

        return (
            self._helper_dir / file_type / name,
            self._helper_dir / COMMON_HELPER_DIR / name,
        )

    def resolve_command(self, file_type: str, name: str) -> Path | None:
        """Return the executable for ``name``, preferring the type-specific helper.

        Files that exist but are not executable are skipped with a warning,
        issued once per file for the lifetime of the executor.
        """

        for relative in self.candidate_paths(file_type, name):
            resolution = self._resolver.inspect(relative)
            for unusable in resolution.unusable:
                if unusable in self._warned:
                    continue
                self._warned.add(unusable)
                self._logger.warn(f"Ignoring {unusable}: file is not executable")
            if resolution.executable is not None:
                self._logger.debug(f"resolved command={name} tier={resolution.tier} path={resolution.executable}")
                return resolution.executable
        return None

    def run_chain(
        self,
        command_set: CommandSet | str,
        file_type: str,
        args: Sequence[str] = (),
    ) -> ExecutionOutcome:
        """Run every link of ``command_set`` in order, stopping at the first failure.

        Args:
            command_set: Parsed command set or its ``a+b`` spelling.
            file_type: File type tag selecting the helper subdirectory.
            args: Arguments appended after each helper's configured options.

        Returns:
            ExecutionOutcome: ``success`` when all links exit 0, ``failure``
            with the first nonzero status otherwise, or ``config-error`` (127)
            when a link cannot be resolved.
        """

        chain = command_set if isinstance(command_set, CommandSet) else CommandSet.parse(command_set)
        executed: list[str] = []
        streams = _CapturedStreams()
        for name in chain.names:
            executable = self.resolve_command(file_type, name)
            if executable is None:
                self._logger.fail(
                    f"{self._purpose}: helper '{name}' from '{chain}' not found for file type {file_type}"
                )
                return self._finish(
                    chain,
                    file_type,
                    streams,
                    exit_code=MISSING_COMMAND_EXIT,
                    kind=OutcomeKind.CONFIG_ERROR,
                    command=name,
                    executed=executed,
                    reason=f"helper '{name}' not found",
                )
            result = self._run_link(executable, name, file_type, args)
            executed.append(name)
            streams.add(result)
            if result.exit_code != 0:
                self._logger.debug(f"chain={chain} command={name} exit={result.exit_code}")
                return self._finish(
                    chain,
                    file_type,
                    streams,
                    exit_code=result.exit_code,
                    kind=OutcomeKind.FAILURE,
                    command=name,
                    executed=executed,
                )
        return self._finish(
            chain,
            file_type,
            streams,
            exit_code=0,
            kind=OutcomeKind.SUCCESS,
            command=chain.names[-1],
            executed=executed,
        )

    def _finish(
        self,
        chain: CommandSet,
        file_type: str,
        streams: _CapturedStreams,
        *,
        exit_code: int,
        kind: OutcomeKind,
        command: str,
        executed: Sequence[str],
        reason: str | None = None,
    ) -> ExecutionOutcome:
        stdout, stderr = streams.joined()
        return ExecutionOutcome(
            exit_code=exit_code,
            kind=kind,
            command_set=chain,
            command=command,
            executed=tuple(executed),
            stdout=stdout if self._capture_output else None,
            stderr=stderr if self._capture_output else None,
            file_type=file_type,
            reason=reason,
        )

    def _run_link(
        self,
        executable: Path,
        name: str,
        file_type: str,
        args: Sequence[str],
    ) -> _LinkResult:
        options = self._table.options_for(self._purpose, file_type, name)
        env = self._env.for_helper(purpose=self._purpose, file_type=file_type, command=name)
        argv = [str(executable), *options, *args]
        self._logger.debug(f"running command={name} path={executable} args={len(argv) - 1}")
        try:
            completed = run_command(
                argv,
                options=CommandOptions(
                    env=env,
                    capture_output=self._capture_output,
                    timeout=self._timeout,
                ),
            )
        except OSError as exc:
            self._logger.fail(f"{self._purpose}: cannot execute {executable}: {exc.strerror or exc}")
            return _LinkResult(exit_code=CANNOT_EXECUTE_EXIT, stdout=None, stderr=None)
        return _LinkResult(exit_code=completed.returncode, stdout=completed.stdout, stderr=completed.stderr)


__all__ = [
    "ChainExecutor",
    "CommandSet",
    "ExecutionOutcome",
    "OutcomeKind",
    "parse_alternatives",
]
