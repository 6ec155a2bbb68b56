# SPDX-License-Identifier: MIT
"""Service helpers that turn CLI options into configured dispatch sessions."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from ..chain import OutcomeKind
from ..config import ConfigError, HelperTable
from ..config_loader import ConfigLoader, ConfigLoadResult
from ..dispatch import DispatchReport, FileOutcome, HelperDispatcher
from ..environment import EnvironmentSnapshot
from ..logging import HelperLogger
from ..roots import ExecutableResolver, RootLayout
from ._cli_models import GlobalOptions
from .shared import CLIError, build_cli_logger, normalise_exit_code

LINT_WARNING_EXIT: Final[int] = 1


@dataclass(slots=True)
class HelperSession:
    """Layout, configuration and logger shared by one CLI invocation."""

    layout: RootLayout
    loaded: ConfigLoadResult
    table: HelperTable
    logger: HelperLogger

    @property
    def resolver(self) -> ExecutableResolver:
        return ExecutableResolver(self.layout)

    def dispatcher(self, *, env: EnvironmentSnapshot | None = None) -> HelperDispatcher:
        return HelperDispatcher(
            self.resolver,
            self.table,
            env=env,
            logger=self.logger,
            timeout=self.loaded.config.execution.timeout,
        )

    def helper_dir_for(self, purpose: str, override: str | None = None) -> str:
        """Return the helper directory for ``purpose``, honouring configured defaults."""

        if override:
            return override
        execution = self.loaded.config.execution
        match purpose.lower():
            case "lint":
                return execution.lint_helper_dir
            case "pretty":
                return execution.pretty_helper_dir
            case other:
                return f"helpers/{other}"


def build_layout(options: GlobalOptions) -> RootLayout:
    return RootLayout.discover(
        project_dir=options.project_dir or Path.cwd(),
        local_dir=options.local_dir,
        shared_dir=options.shared_dir,
    )


def build_session(options: GlobalOptions) -> HelperSession:
    """Load configuration for ``options`` and prepare the session logger.

    Raises:
        CLIError: If configuration loading fails (exit status 2).
    """

    layout = build_layout(options)
    try:
        loaded = ConfigLoader.for_layout(layout, config_file=options.config_file).load_with_trace()
        table = HelperTable.from_config(loaded.config)
    except ConfigError as exc:
        raise CLIError.from_config_error(exc) from exc
    output = loaded.config.output
    logger = build_cli_logger(
        emoji=output.emoji if options.emoji is None else options.emoji,
        debug=options.verbose or output.verbose,
        color=options.color if options.color is not None else (None if output.color else False),
        quiet=options.quiet or output.quiet,
    )
    logger.debug(
        f"layout local={layout.local_dir} project={layout.project_dir} "
        f"shared={layout.shared_dir} subcomponent={layout.subcomponent}"
    )
    return HelperSession(layout=layout, loaded=loaded, table=table, logger=logger)


def run_dispatch(
    session: HelperSession,
    purpose: str,
    files: Sequence[Path],
    *,
    helper_dir: str | None = None,
    args: Sequence[str] = (),
) -> DispatchReport:
    """Dispatch every file for ``purpose``, converting config errors to CLI errors."""

    directory = session.helper_dir_for(purpose, helper_dir)
    try:
        return session.dispatcher().dispatch_many(purpose, directory, files, args)
    except ConfigError as exc:
        raise CLIError.from_config_error(exc) from exc


def _is_lint_warning(result: FileOutcome) -> bool:
    outcome = result.outcome
    return outcome.kind is OutcomeKind.FAILURE and outcome.exit_code == LINT_WARNING_EXIT


def lint_exit_code(report: DispatchReport, *, strict: bool) -> int:
    """Return the lint exit status; exit 1 from a helper only fails in strict mode."""

    for result in report.results:
        if result.outcome.ok:
            continue
        if _is_lint_warning(result) and not strict:
            continue
        return normalise_exit_code(result.outcome.exit_code)
    return 0


def emit_report(
    report: DispatchReport,
    purpose: str,
    *,
    logger: HelperLogger,
    warnings_tolerated: bool = False,
) -> None:
    """Log one line per failed file followed by a summary."""

    warned = 0
    if report.failures:
        logger.section(f"{purpose} results")
    for result in report.failures:
        outcome = result.outcome
        if warnings_tolerated and _is_lint_warning(result):
            warned += 1
            logger.warn(f"{purpose}: {result.path} has warnings ({outcome.command_set})")
            continue
        if outcome.kind is OutcomeKind.CONFIG_ERROR:
            # The chain executor already named the missing helper.
            continue
        logger.fail(
            f"{purpose}: {result.path} failed in {outcome.command} "
            f"({outcome.command_set}, exit {normalise_exit_code(outcome.exit_code)})"
        )
    failed = len(report.failures) - warned
    total = len(report.results)
    if failed:
        logger.fail(f"{purpose}: {failed} of {total} file(s) failed")
    elif warned:
        logger.warn(f"{purpose}: {total} file(s) checked, {warned} with warnings")
    else:
        logger.ok(f"{purpose}: {total} file(s) checked, {report.executed_count} handled by helpers")


__all__ = [
    "HelperSession",
    "build_layout",
    "build_session",
    "emit_report",
    "lint_exit_code",
    "run_dispatch",
]
