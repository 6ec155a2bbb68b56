# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for command-set parsing and chain execution."""

from __future__ import annotations

from pathlib import Path

import pytest

from hookhelpers.chain import ChainExecutor, CommandSet, OutcomeKind, parse_alternatives
from hookhelpers.config import HelperTable
from hookhelpers.environment import EnvironmentSnapshot
from hookhelpers.logging import quiet_logger
from hookhelpers.roots import ExecutableResolver, RootLayout

HELPER_DIR = "helpers/pretty"


def _executor(layout: RootLayout, table: HelperTable | None = None, **kwargs) -> ChainExecutor:
    return ChainExecutor(
        ExecutableResolver(layout),
        table or HelperTable(),
        purpose="pretty",
        helper_dir=HELPER_DIR,
        env=kwargs.pop("env", EnvironmentSnapshot.capture()),
        logger=kwargs.pop("logger", quiet_logger()),
        **kwargs,
    )


def test_parse_alternatives_preserves_order() -> None:
    alternatives = parse_alternatives("formatterA+trim  trim")

    assert [alt.names for alt in alternatives] == [("formatterA", "trim"), ("trim",)]
    assert str(alternatives[0]) == "formatterA+trim"
    assert alternatives[0].first == "formatterA"


@pytest.mark.parametrize("spec", ["", "a++b", "+a", "../evil", "a+./b"])
def test_invalid_command_sets(spec: str) -> None:
    with pytest.raises(ValueError):
        CommandSet.parse(spec)


def test_chain_runs_links_in_order(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    log = tmp_path / "calls.log"
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/first", f'echo first >> "{log}"')
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/second", f'echo second >> "{log}"')

    outcome = _executor(layout).run_chain("first+second", "css")

    assert outcome.kind is OutcomeKind.SUCCESS
    assert outcome.executed == ("first", "second")
    assert log.read_text(encoding="utf-8").split() == ["first", "second"]


def test_chain_stops_at_first_failure(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    marker = tmp_path / "b-ran"
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/a", "exit 3")
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/b", f'touch "{marker}"')

    outcome = _executor(layout).run_chain("a+b", "css")

    assert outcome.exit_code == 3
    assert outcome.kind is OutcomeKind.FAILURE
    assert outcome.command == "a"
    assert not marker.exists()


def test_common_directory_fallback(layout: RootLayout, make_helper) -> None:
    make_helper(layout.project_dir, f"{HELPER_DIR}/_common/trim")
    executor = _executor(layout)

    assert executor.resolve_command("css", "trim") == layout.project_dir / HELPER_DIR / "_common" / "trim"


def test_type_specific_helper_beats_common(layout: RootLayout, make_helper) -> None:
    make_helper(layout.project_dir, f"{HELPER_DIR}/_common/trim")
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/trim")

    assert _executor(layout).resolve_command("css", "trim") == layout.project_dir / HELPER_DIR / "css" / "trim"


def test_missing_link_is_config_error(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    marker = tmp_path / "first-ran"
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/first", f'touch "{marker}"')
    logger = quiet_logger()

    outcome = _executor(layout, logger=logger).run_chain("first+absent", "css")

    assert outcome.exit_code == 127
    assert outcome.kind is OutcomeKind.CONFIG_ERROR
    assert outcome.command == "absent"
    assert marker.exists()
    assert any(level == "fail" and "absent" in message for level, message in logger.messages)


def test_options_and_args_are_passed(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    record = tmp_path / "argv"
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/fmt", f'printf "%s\\n" "$@" > "{record}"')
    table = HelperTable.from_entries({}, {("PRETTY", "CSS", "FMT"): "--indent 2 '--name=a b'"})

    outcome = _executor(layout, table).run_chain("fmt", "css", ["site.css"])

    assert outcome.ok
    assert record.read_text(encoding="utf-8").splitlines() == ["--indent", "2", "--name=a b", "site.css"]


def test_helper_environment(layout: RootLayout, make_helper, tmp_path: Path) -> None:
    record = tmp_path / "env"
    make_helper(
        layout.project_dir,
        f"{HELPER_DIR}/css/show",
        f'echo "$HOOK_HELPERS_PURPOSE $HOOK_HELPERS_FILE_TYPE $HOOK_HELPERS_COMMAND $EXTRA" > "{record}"',
    )
    env = EnvironmentSnapshot.capture().with_values(EXTRA="kept")

    _executor(layout, env=env).run_chain("show", "css")

    assert record.read_text(encoding="utf-8").strip() == "pretty css show kept"


def test_captured_output(layout: RootLayout, make_helper) -> None:
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/noisy", "echo out; echo err >&2; exit 1")

    outcome = _executor(layout, capture_output=True).run_chain("noisy", "css")

    assert outcome.exit_code == 1
    assert outcome.stdout == b"out\n"
    assert outcome.stderr == b"err\n"


def test_timeout_reports_124(layout: RootLayout, make_helper) -> None:
    make_helper(layout.project_dir, f"{HELPER_DIR}/css/slow", "sleep 5")

    outcome = _executor(layout, timeout=0.2).run_chain("slow", "css")

    assert outcome.exit_code == 124
