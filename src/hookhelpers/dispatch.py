# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Dispatch files to the first installed helper chain configured for their type.

A missing configuration entry, an ``unknown`` file type, or a list of
alternatives none of which is installed all count as success: optional tools
never block a hook. Once an alternative resolves it is committed to, and its
chain's outcome is final for the call.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path, PurePath

from .chain import ChainExecutor, CommandSet, ExecutionOutcome
from .config import HelperTable
from .environment import EnvironmentSnapshot
from .filetypes import TypeClassifier, is_known
from .logging import HelperLogger, quiet_logger
from .roots import ExecutableResolver


@dataclass(slots=True)
class FileOutcome:
    """Outcome of dispatching a single path."""

    path: Path
    outcome: ExecutionOutcome


@dataclass(slots=True)
class DispatchReport:
    """Per-file outcomes of :meth:`HelperDispatcher.dispatch_many`, in input order."""

    results: list[FileOutcome] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        """Return the first nonzero exit status, or 0 when every file succeeded."""

        for result in self.results:
            if result.outcome.exit_code != 0:
                return result.outcome.exit_code
        return 0

    @property
    def failures(self) -> list[FileOutcome]:
        return [result for result in self.results if not result.outcome.ok]

    @property
    def executed_count(self) -> int:
        return sum(1 for result in self.results if result.outcome.executed)


class HelperDispatcher:
    """Classify a file, pick the first resolvable command set and run it."""

    def __init__(
        self,
        resolver: ExecutableResolver,
        table: HelperTable,
        *,
        classifier: TypeClassifier | None = None,
        env: EnvironmentSnapshot | None = None,
        logger: HelperLogger | None = None,
        timeout: float | None = None,
        capture_output: bool = False,
    ) -> None:
        self._resolver = resolver
        self._table = table
        self._logger = logger or quiet_logger()
        self._classifier = classifier or TypeClassifier(logger=self._logger)
        base_env = env if env is not None else EnvironmentSnapshot.capture()
        self._env = base_env.with_layout(resolver.layout)
        self._timeout = timeout
        self._capture_output = capture_output

    @property
    def table(self) -> HelperTable:
        return self._table

    def executor(self, purpose: str, helper_dir: PurePath | str) -> ChainExecutor:
        """Return a chain executor bound to ``purpose`` and ``helper_dir``."""

        return ChainExecutor(
            self._resolver,
            self._table,
            purpose=purpose,
            helper_dir=helper_dir,
            env=self._env,
            logger=self._logger,
            timeout=self._timeout,
            capture_output=self._capture_output,
        )

    def select(
        self,
        executor: ChainExecutor,
        file_type: str,
        alternatives: Iterable[CommandSet],
    ) -> CommandSet | None:
        """Return the first alternative whose first link resolves, or ``None``.

        Only the first link is checked; a later link that turns out to be
        missing fails the committed chain instead of falling through.
        """

        for alternative in alternatives:
            if executor.resolve_command(file_type, alternative.first) is not None:
                return alternative
            self._logger.debug(f"skipping chain={alternative} reason=unresolvable")
        return None

    def dispatch(
        self,
        purpose: str,
        helper_dir: PurePath | str,
        file_path: Path | str,
        args: Sequence[str] = (),
    ) -> ExecutionOutcome:
        """Run the configured helper chain for ``file_path``.

        Args:
            purpose: Configuration namespace, such as ``lint`` or ``pretty``.
            helper_dir: Helper directory relative to each search root.
            file_path: File being checked; used for classification only.
            args: Arguments passed to every helper in the chain.

        Returns:
            ExecutionOutcome: A ``skipped`` success when nothing applies, otherwise
            the committed chain's outcome.
        """

        path = Path(file_path)
        file_type = self._classifier.classify(path)
        if not is_known(file_type):
            self._logger.debug(f"no file type for path={path}")
            return ExecutionOutcome.skipped("unknown file type", file_type=file_type)

        alternatives = self._table.alternatives(purpose, file_type)
        if not alternatives:
            self._logger.debug(f"no {purpose} helpers configured type={file_type}")
            return ExecutionOutcome.skipped("no configuration", file_type=file_type)

        executor = self.executor(purpose, helper_dir)
        selected = self.select(executor, file_type, alternatives)
        if selected is None:
            listed = " ".join(str(alternative) for alternative in alternatives)
            self._logger.debug(f"no installed {purpose} helper type={file_type} tried={listed!r}")
            return ExecutionOutcome.skipped("no resolvable helper", file_type=file_type)

        self._logger.debug(f"dispatch purpose={purpose} type={file_type} chain={selected} path={path}")
        return executor.run_chain(selected, file_type, args)

    def dispatch_many(
        self,
        purpose: str,
        helper_dir: PurePath | str,
        paths: Iterable[Path | str],
        args: Sequence[str] = (),
        *,
        append_path: bool = True,
    ) -> DispatchReport:
        """Dispatch each path in order and collect the outcomes.

        Every path is dispatched even after a failure.

        Args:
            purpose: Configuration namespace.
            helper_dir: Helper directory relative to each search root.
            paths: Files to dispatch.
            args: Extra arguments placed before the file path.
            append_path: When ``True`` the file path is appended to ``args``.

        Returns:
            DispatchReport: Outcomes in input order.
        """

        report = DispatchReport()
        for raw in paths:
            path = Path(raw)
            call_args = [*args, str(path)] if append_path else list(args)
            outcome = self.dispatch(purpose, helper_dir, path, call_args)
            report.results.append(FileOutcome(path=path, outcome=outcome))
        return report


def dispatch(
    resolver: ExecutableResolver,
    table: HelperTable,
    purpose: str,
    helper_dir: PurePath | str,
    file_path: Path | str,
    args: Sequence[str] = (),
    *,
    logger: HelperLogger | None = None,
) -> ExecutionOutcome:
    """Dispatch ``file_path`` once with a throwaway :class:`HelperDispatcher`."""

    return HelperDispatcher(resolver, table, logger=logger).dispatch(purpose, helper_dir, file_path, args)


__all__ = ["DispatchReport", "FileOutcome", "HelperDispatcher", "dispatch"]
