# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and the read-only helper table used during dispatch."""

from __future__ import annotations

import shlex
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import PurePath
from types import MappingProxyType
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .chain import CommandSet, parse_alternatives


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


DEFAULT_HELPERS: Final[dict[str, dict[str, str]]] = {
    "lint": {
        "css": "stylelint",
        "docker": "hadolint",
        "go": "golangci-lint",
        "js": "eslint",
        "json": "jsonlint",
        "lua": "luacheck",
        "markdown": "markdownlint",
        "perl": "perlcritic",
        "php": "phplint",
        "python": "ruff pylint",
        "shell": "shellcheck",
        "sql": "sqlfluff",
        "ts": "eslint",
        "yaml": "yamllint",
    },
    "pretty": {
        "css": "prettier+trim trim",
        "go": "gofmt+trim",
        "html": "prettier+trim trim",
        "js": "prettier+trim trim",
        "json": "jq+trim prettier+trim trim",
        "markdown": "prettier+trim trim",
        "perl": "perltidy+trim trim",
        "python": "ruff-format+trim black+trim trim",
        "shell": "shfmt+trim trim",
        "sql": "sqlfluff-fix+trim trim",
        "ts": "prettier+trim trim",
        "yaml": "prettier+trim trim",
    },
}


def lower_keys(value: Any, *, depth: int) -> Any:
    """Return ``value`` with mapping keys lower-cased down to ``depth`` levels."""

    if depth <= 0 or not isinstance(value, Mapping):
        return value
    return {str(key).lower(): lower_keys(item, depth=depth - 1) for key, item in value.items()}


class OutputConfig(BaseModel):
    """Console presentation settings."""

    model_config = ConfigDict(validate_assignment=True)

    emoji: bool = True
    color: bool = True
    verbose: bool = False
    quiet: bool = False


class ExecutionConfig(BaseModel):
    """Helper execution policy."""

    model_config = ConfigDict(validate_assignment=True)

    timeout: float | None = Field(default=None, ge=0)
    lint_warnings_fatal: bool = False
    lint_helper_dir: str = "helpers/lint"
    pretty_helper_dir: str = "helpers/pretty"

    @field_validator("lint_helper_dir", "pretty_helper_dir")
    @classmethod
    def _relative_helper_dir(cls, value: str) -> str:
        path = PurePath(value)
        if path.is_absolute() or ".." in path.parts:
            raise ValueError("helper directories are relative to the search roots")
        return value


class Config(BaseModel):
    """Top-level configuration model."""

    model_config = ConfigDict(validate_assignment=True)

    output: OutputConfig = Field(default_factory=OutputConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    helpers: dict[str, dict[str, str]] = Field(default_factory=dict)
    options: dict[str, dict[str, dict[str, str]]] = Field(default_factory=dict)

    @field_validator("helpers", mode="before")
    @classmethod
    def _normalise_helpers(cls, value: Any) -> Any:
        return lower_keys(value, depth=2)

    @field_validator("options", mode="before")
    @classmethod
    def _normalise_options(cls, value: Any) -> Any:
        return lower_keys(value, depth=3)

    @field_validator("helpers")
    @classmethod
    def _validate_command_sets(cls, value: dict[str, dict[str, str]]) -> dict[str, dict[str, str]]:
        for purpose, table in value.items():
            for file_type, entry in table.items():
                try:
                    parse_alternatives(entry)
                except ValueError as exc:
                    raise ValueError(f"helpers.{purpose}.{file_type}: {exc}") from exc
        return value

    @field_validator("options")
    @classmethod
    def _validate_option_strings(
        cls,
        value: dict[str, dict[str, dict[str, str]]],
    ) -> dict[str, dict[str, dict[str, str]]]:
        for purpose, types in value.items():
            for file_type, commands in types.items():
                for command, raw in commands.items():
                    try:
                        shlex.split(raw)
                    except ValueError as exc:
                        raise ValueError(f"options.{purpose}.{file_type}.{command}: {exc}") from exc
        return value

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="python")


def default_config() -> Config:
    """Return the built-in configuration including the default helper table."""

    return Config(helpers={purpose: dict(table) for purpose, table in DEFAULT_HELPERS.items()})


@dataclass(frozen=True, slots=True)
class HelperKey:
    """Composite key naming the command-set list for a purpose and file type."""

    purpose: str
    file_type: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "purpose", self.purpose.lower())
        object.__setattr__(self, "file_type", self.file_type.lower())


@dataclass(frozen=True, slots=True)
class OptionKey:
    """Composite key naming the option string for one helper command."""

    purpose: str
    file_type: str
    command: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "purpose", self.purpose.lower())
        object.__setattr__(self, "file_type", self.file_type.lower())
        object.__setattr__(self, "command", self.command.lower())


@dataclass(frozen=True, slots=True)
class HelperTable:
    """Read-only lookup tables consulted by the dispatcher and chain executor."""

    command_sets: Mapping[HelperKey, tuple[CommandSet, ...]] = field(default_factory=lambda: MappingProxyType({}))
    options: Mapping[OptionKey, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_config(cls, config: Config) -> HelperTable:
        """Freeze ``config``'s helper and option sections into composite-key tables."""

        command_sets: dict[HelperKey, tuple[CommandSet, ...]] = {}
        for purpose, table in config.helpers.items():
            for file_type, entry in table.items():
                command_sets[HelperKey(purpose, file_type)] = parse_alternatives(entry)
        options: dict[OptionKey, str] = {}
        for purpose, types in config.options.items():
            for file_type, commands in types.items():
                for command, value in commands.items():
                    options[OptionKey(purpose, file_type, command)] = value
        return cls(command_sets=MappingProxyType(command_sets), options=MappingProxyType(options))

    @classmethod
    def from_entries(
        cls,
        helpers: Mapping[tuple[str, str], str],
        options: Mapping[tuple[str, str, str], str] | None = None,
    ) -> HelperTable:
        """Build a table from ``(purpose, file_type)`` and ``(purpose, file_type, command)`` keyed entries."""

        command_sets = {HelperKey(*key): parse_alternatives(value) for key, value in helpers.items()}
        option_values = {OptionKey(*key): value for key, value in (options or {}).items()}
        return cls(command_sets=MappingProxyType(command_sets), options=MappingProxyType(option_values))

    def alternatives(self, purpose: str, file_type: str) -> tuple[CommandSet, ...]:
        """Return the configured alternatives for ``purpose`` and ``file_type`` (possibly empty)."""

        return self.command_sets.get(HelperKey(purpose, file_type), ())

    def option_string(self, purpose: str, file_type: str, command: str) -> str:
        return self.options.get(OptionKey(purpose, file_type, command), "")

    def options_for(self, purpose: str, file_type: str, command: str) -> tuple[str, ...]:
        """Return the option string for a helper split with shell quoting rules.

        Raises:
            ConfigError: If the option string has unbalanced quotes.
        """

        raw = self.option_string(purpose, file_type, command)
        try:
            return tuple(shlex.split(raw))
        except ValueError as exc:
            raise ConfigError(f"invalid options for {purpose}/{file_type}/{command}: {exc}") from exc

    def purposes(self) -> tuple[str, ...]:
        return tuple(sorted({key.purpose for key in self.command_sets}))

    def entries(self, purpose: str | None = None) -> Iterable[tuple[HelperKey, tuple[CommandSet, ...]]]:
        """Yield table entries sorted by purpose and file type."""

        for key in sorted(self.command_sets, key=lambda item: (item.purpose, item.file_type)):
            if purpose is None or key.purpose == purpose.lower():
                yield key, self.command_sets[key]


__all__ = [
    "Config",
    "ConfigError",
    "DEFAULT_HELPERS",
    "ExecutionConfig",
    "HelperKey",
    "HelperTable",
    "OptionKey",
    "OutputConfig",
    "default_config",
    "lower_keys",
]
