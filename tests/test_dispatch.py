# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for per-file helper dispatch."""

from __future__ import annotations

from pathlib import Path

from hookhelpers.chain import OutcomeKind
from hookhelpers.config import HelperTable
from hookhelpers.dispatch import HelperDispatcher, dispatch
from hookhelpers.environment import EnvironmentSnapshot
from hookhelpers.logging import quiet_logger
from hookhelpers.roots import ExecutableResolver, RootLayout

PRETTY = "helpers/pretty"
LINT = "helpers/lint"

TRIM_BODY = """tmp=$(mktemp) || exit 1
sed 's/[[:space:]]*$//' "$1" > "$tmp" && cat "$tmp" > "$1"
status=$?
rm -f "$tmp"
exit $status"""


def _dispatcher(layout: RootLayout, table: HelperTable) -> HelperDispatcher:
    return HelperDispatcher(
        ExecutableResolver(layout),
        table,
        env=EnvironmentSnapshot.capture(),
        logger=quiet_logger(),
    )


def test_empty_configuration_is_success(layout: RootLayout, tmp_path: Path) -> None:
    target = tmp_path / "site.css"
    target.write_text("a {}\n", encoding="utf-8")

    outcome = dispatch(ExecutableResolver(layout), HelperTable(), "pretty", PRETTY, target, [str(target)])

    assert outcome.exit_code == 0
    assert outcome.kind is OutcomeKind.SKIPPED
    assert outcome.executed == ()


def test_unknown_file_type_is_skipped(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    make_helper(layout.project_dir, f"{PRETTY}/_common/trim", "exit 9")
    table = HelperTable.from_entries({("pretty", "unknown"): "trim"})

    outcome = _dispatcher(layout, table).dispatch("pretty", PRETTY, tmp_path / "blob.zzz")

    assert outcome.ok
    assert outcome.reason == "unknown file type"


def test_nothing_installed_is_success(layout: RootLayout, tmp_path: Path) -> None:
    table = HelperTable.from_entries({("lint", "css"): "stylelint csslint"})

    outcome = _dispatcher(layout, table).dispatch("lint", LINT, tmp_path / "site.css")

    assert outcome.ok
    assert outcome.reason == "no resolvable helper"


def test_unresolvable_alternative_falls_through(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    marker = tmp_path / "y-ran"
    make_helper(layout.project_dir, f"{LINT}/css/Y", f'touch "{marker}"')
    table = HelperTable.from_entries({("lint", "css"): "X Y"})

    outcome = _dispatcher(layout, table).dispatch("lint", LINT, tmp_path / "site.css")

    assert outcome.kind is OutcomeKind.SUCCESS
    assert str(outcome.command_set) == "Y"
    assert marker.exists()


def test_only_first_link_decides_selection(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    marker = tmp_path / "fallback-ran"
    make_helper(layout.project_dir, f"{PRETTY}/css/fmt")
    make_helper(layout.project_dir, f"{PRETTY}/_common/trim", f'touch "{marker}"')
    table = HelperTable.from_entries({("pretty", "css"): "fmt+absent trim"})

    outcome = _dispatcher(layout, table).dispatch("pretty", PRETTY, tmp_path / "site.css")

    assert outcome.exit_code == 127
    assert outcome.kind is OutcomeKind.CONFIG_ERROR
    assert not marker.exists()


def test_pretty_css_formatter_then_trim(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    target = tmp_path / "site.css"
    target.write_text("a {  \n  color: red;\t\n}   \n", encoding="utf-8")
    make_helper(layout.project_dir, f"{PRETTY}/css/formatterA", 'printf "/* formatted */\\n" >> "$1"')
    make_helper(layout.project_dir, f"{PRETTY}/_common/trim", TRIM_BODY)
    table = HelperTable.from_entries({("PRETTY", "CSS"): "formatterA+trim trim"})

    outcome = _dispatcher(layout, table).dispatch("pretty", PRETTY, target, [str(target)])

    assert outcome.exit_code == 0
    assert outcome.executed == ("formatterA", "trim")
    assert target.read_text(encoding="utf-8") == "a {\n  color: red;\n}\n/* formatted */\n"


def test_pretty_css_trim_only_when_formatter_missing(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    target = tmp_path / "site.css"
    target.write_text("a {}   \n", encoding="utf-8")
    make_helper(layout.project_dir, f"{PRETTY}/_common/trim", TRIM_BODY)
    table = HelperTable.from_entries({("pretty", "css"): "formatterA+trim trim"})

    outcome = _dispatcher(layout, table).dispatch("pretty", PRETTY, target, [str(target)])

    assert outcome.ok
    assert outcome.executed == ("trim",)
    assert target.read_text(encoding="utf-8") == "a {}\n"


def test_lint_failure_is_not_retried_with_next_alternative(
    layout: RootLayout, make_helper, tmp_path: Path
) -> None:
    marker = tmp_path / "tooly-ran"
    make_helper(layout.project_dir, f"{LINT}/js/toolX", "exit 1")
    make_helper(layout.project_dir, f"{LINT}/js/toolY", f'touch "{marker}"')
    table = HelperTable.from_entries({("lint", "js"): "toolX toolY"})

    outcome = _dispatcher(layout, table).dispatch("lint", LINT, tmp_path / "app.js")

    assert outcome.exit_code == 1
    assert outcome.kind is OutcomeKind.FAILURE
    assert not marker.exists()


def test_non_executable_candidate_warns(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    make_helper(layout.local_dir, f"{LINT}/css/stylelint", mode=0o644)
    table = HelperTable.from_entries({("lint", "css"): "stylelint"})
    logger = quiet_logger()
    dispatcher = HelperDispatcher(ExecutableResolver(layout), table, logger=logger)

    outcome = dispatcher.dispatch("lint", LINT, tmp_path / "site.css")

    assert outcome.ok
    assert outcome.kind is OutcomeKind.SKIPPED
    assert any(level == "warn" and "not executable" in message for level, message in logger.messages)


def test_dispatch_many_reports_first_failure(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    make_helper(layout.project_dir, f"{LINT}/css/check", 'case "$1" in *bad.css) exit 4;; esac; exit 0')
    make_helper(layout.project_dir, f"{LINT}/js/check", "exit 2")
    table = HelperTable.from_entries({("lint", "css"): "check", ("lint", "js"): "check"})
    files = [tmp_path / "ok.css", tmp_path / "bad.css", tmp_path / "app.js", tmp_path / "notes.zzz"]

    report = _dispatcher(layout, table).dispatch_many("lint", LINT, files)

    assert [result.outcome.exit_code for result in report.results] == [0, 4, 2, 0]
    assert report.exit_code == 4
    assert [result.path.name for result in report.failures] == ["bad.css", "app.js"]
    assert report.executed_count == 3


def test_dispatcher_exports_roots_to_helpers(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    record = tmp_path / "roots"
    make_helper(layout.project_dir, f"{LINT}/css/show", f'echo "$LOCAL_DIR|$TARGET_DIR" > "{record}"')
    table = HelperTable.from_entries({("lint", "css"): "show"})

    _dispatcher(layout, table).dispatch("lint", LINT, tmp_path / "site.css")

    assert record.read_text(encoding="utf-8").strip() == f"{layout.local_dir}|{layout.project_dir}"


def test_unusable_candidate_warned_once(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    make_helper(layout.local_dir, f"{LINT}/css/stylelint", mode=0o644)
    make_helper(layout.project_dir, f"{LINT}/css/stylelint")
    table = HelperTable.from_entries({("lint", "css"): "stylelint"})
    logger = quiet_logger()
    dispatcher = HelperDispatcher(ExecutableResolver(layout), table, logger=logger)

    outcome = dispatcher.dispatch("lint", LINT, tmp_path / "site.css")

    assert outcome.kind is OutcomeKind.SUCCESS
    warnings = [message for level, message in logger.messages if level == "warn"]
    assert len(warnings) == 1
    assert str(layout.local_dir / LINT / "css" / "stylelint") in warnings[0]
