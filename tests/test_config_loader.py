# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for layered configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from hookhelpers.config import ConfigError, HelperTable
from hookhelpers.config_loader import ConfigLoader, TomlConfigSource, load_config, normalise_fragment
from hookhelpers.roots import RootLayout


def _layout(tmp_path: Path, *, shared: bool = False) -> RootLayout:
    project = tmp_path / "project"
    project.mkdir(exist_ok=True)
    local = tmp_path / "local"
    local.mkdir(exist_ok=True)
    shared_dir = None
    if shared:
        shared_dir = project / "tooling"
        shared_dir.mkdir(exist_ok=True)
    return RootLayout.discover(project_dir=project, local_dir=local, shared_dir=shared_dir)


def test_load_config_defaults(tmp_path: Path) -> None:
    cfg = load_config(_layout(tmp_path))

    assert cfg.execution.lint_helper_dir == "helpers/lint"
    assert cfg.execution.timeout is None
    assert cfg.helpers["pretty"]["css"] == "prettier+trim trim"


def test_layers_apply_in_precedence_order(tmp_path: Path) -> None:
    layout = _layout(tmp_path, shared=True)
    assert layout.shared_dir is not None
    (layout.shared_dir / "hook-helpers.toml").write_text(
        '[helpers.lint]\ncss = "shared-lint"\njs = "shared-js"\n', encoding="utf-8"
    )
    (layout.project_dir / ".hook-helpers.toml").write_text(
        '[helpers.lint]\ncss = "project-lint"\n\n[execution]\ntimeout = 30\n', encoding="utf-8"
    )
    (layout.project_dir / "pyproject.toml").write_text(
        '[project]\nname = "demo"\n\n[tool.hook-helpers.helpers.lint]\nmarkdown = "mdl"\n', encoding="utf-8"
    )
    (layout.local_dir / "hook-helpers.toml").write_text('LINT_CSS = "mine"\n', encoding="utf-8")

    result = ConfigLoader.for_layout(layout).load_with_trace()

    assert result.config.helpers["lint"]["css"] == "mine"
    assert result.config.helpers["lint"]["js"] == "shared-js"
    assert result.config.helpers["lint"]["markdown"] == "mdl"
    assert result.config.execution.timeout == 30
    assert result.source_of("lint", "css") == str(layout.local_dir / "hook-helpers.toml")
    assert result.source_of("LINT", "JS") == str(layout.shared_dir / "hook-helpers.toml")
    assert result.source_of("pretty", "css") == "defaults"


def test_shared_file_ignored_outside_subcomponent_mode(tmp_path: Path) -> None:
    outside = tmp_path / "tooling"
    outside.mkdir()
    (outside / "hook-helpers.toml").write_text('LINT_CSS = "shared"\n', encoding="utf-8")
    project = tmp_path / "project"
    project.mkdir()
    layout = RootLayout.discover(project_dir=project, shared_dir=outside)

    cfg = load_config(layout)

    assert cfg.helpers["lint"]["css"] == "stylelint"


def test_flat_keys_are_normalised() -> None:
    fragment = normalise_fragment(
        {
            "PRETTY_CSS": "formatterA+trim trim",
            "PRETTY_CSS_FORMATTERA_OPTIONS": "--tabs",
            "LINT_PYTHON_RUFF_CHECK_OPTIONS": "--quiet",
        }
    )

    assert fragment == {
        "helpers": {"pretty": {"css": "formatterA+trim trim"}},
        "options": {
            "pretty": {"css": {"formattera": "--tabs"}},
            "lint": {"python": {"ruff_check": "--quiet"}},
        },
    }


def test_unrecognised_key_rejected(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    (layout.project_dir / ".hook-helpers.toml").write_text('WHAT_IS_THIS_KEY = "x"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="unrecognised"):
        load_config(layout)


def test_replacing_entry_replaces_whole_list(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    (layout.project_dir / ".hook-helpers.toml").write_text('[helpers.pretty]\npython = "black"\n', encoding="utf-8")

    table = ConfigLoader.for_layout(layout).load_table()

    assert [str(alt) for alt in table.alternatives("pretty", "python")] == ["black"]
    assert isinstance(table, HelperTable)


def test_includes_and_env_expansion(tmp_path: Path) -> None:
    base = tmp_path / "base.toml"
    base.write_text('[helpers.lint]\ncss = "from-base"\njs = "${LINTER}"\n', encoding="utf-8")
    main = tmp_path / "main.toml"
    main.write_text('include = ["base.toml"]\n\n[helpers.lint]\ncss = "from-main"\n', encoding="utf-8")

    data = TomlConfigSource(main, env={"LINTER": "eslint"}).load()

    assert data == {"helpers": {"lint": {"css": "from-main", "js": "eslint"}}}


def test_circular_include_detected(tmp_path: Path) -> None:
    first = tmp_path / "a.toml"
    second = tmp_path / "b.toml"
    first.write_text('include = "b.toml"\n', encoding="utf-8")
    second.write_text('include = "a.toml"\n', encoding="utf-8")

    with pytest.raises(ConfigError, match="Circular include"):
        TomlConfigSource(first).load()


def test_invalid_toml_reported(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    (layout.local_dir / "hook-helpers.toml").write_text("[helpers\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(layout)


def test_invalid_values_wrapped(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    (layout.project_dir / ".hook-helpers.toml").write_text("[execution]\ntimeout = -1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(layout)


def test_explicit_config_file_applies_last(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    (layout.local_dir / "hook-helpers.toml").write_text('LINT_CSS = "local"\n', encoding="utf-8")
    extra = tmp_path / "extra.toml"
    extra.write_text('LINT_CSS = "extra"\n', encoding="utf-8")

    cfg = ConfigLoader.for_layout(layout, config_file=extra).load()

    assert cfg.helpers["lint"]["css"] == "extra"


def test_key_case_is_ignored_across_layers(tmp_path: Path) -> None:
    layout = _layout(tmp_path)
    (layout.project_dir / ".hook-helpers.toml").write_text(
        '[helpers.PRETTY]\nCSS = "project-css"\n\n[options.Lint.JS]\nESLint = "--quiet"\n', encoding="utf-8"
    )
    (layout.local_dir / "hook-helpers.toml").write_text(
        'PRETTY_CSS = "local-css"\nlint_js_eslint_options = "--fix"\n', encoding="utf-8"
    )

    result = ConfigLoader.for_layout(layout).load_with_trace()
    table = HelperTable.from_config(result.config)

    assert [str(alt) for alt in table.alternatives("pretty", "css")] == ["local-css"]
    assert [str(alt) for alt in table.alternatives("Pretty", "Python")] == ["ruff-format+trim", "black+trim", "trim"]
    assert table.options_for("LINT", "js", "eslint") == ("--fix",)
    assert result.source_of("pretty", "css") == str(layout.local_dir / "hook-helpers.toml")


def test_nested_section_keys_are_lowercased() -> None:
    fragment = normalise_fragment({"Helpers": {"LINT": {"CSS": "a"}}, "OPTIONS": {"Lint": {"Css": {"A": "-x"}}}})

    assert fragment == {"helpers": {"lint": {"css": "a"}}, "options": {"lint": {"css": {"a": "-x"}}}}
