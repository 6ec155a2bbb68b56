# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Config loading utilities with layered precedence and traceability."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Iterable, Mapping, MutableMapping, Sequence
from pathlib import Path
from typing import Any, Final, Protocol

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import Config, ConfigError, HelperTable, default_config, lower_keys
from .constants import (
    LOCAL_CONFIG_NAME,
    OPTIONS_SUFFIX,
    PROJECT_CONFIG_NAME,
    PYPROJECT_SECTION,
    SHARED_CONFIG_NAME,
)
from .roots import RootLayout

DEFAULT_INCLUDE_KEY: Final[str] = "include"
SECTION_KEYS: Final[frozenset[str]] = frozenset({"output", "execution", "helpers", "options"})
# Case-insensitive key levels below each section; model field names keep their case.
_SECTION_KEY_DEPTHS: Final[dict[str, int]] = {"helpers": 2, "options": 3}
_ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)")


class ConfigSource(Protocol):
    """Provide a raw configuration fragment."""

    name: str

    def load(self) -> Mapping[str, Any]:
        """Return the fragment, or an empty mapping when the source is absent."""
        ...

    def describe(self) -> str:
        """Return a human-readable description of the source."""
        ...


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):

        def _replace(match: re.Match[str]) -> str:
            key = match.group(1) or match.group(2)
            return env.get(key, match.group(0))

        return _ENV_VAR_PATTERN.sub(_replace, value)
    if isinstance(value, Mapping):
        return {key: _expand_env(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item, env) for item in value]
    return value


def _split_flat_key(key: str) -> tuple[str, ...] | None:
    """Map ``PURPOSE_TYPE`` and ``PURPOSE_TYPE_COMMAND_OPTIONS`` keys to nested paths.

    Returns:
        tuple[str, ...] | None: ``("helpers", purpose, type)`` or
        ``("options", purpose, type, command)``; ``None`` when ``key`` has neither shape.
    """

    parts = key.lower().split("_")
    if any(not part for part in parts):
        return None
    if len(parts) >= 4 and parts[-1] == OPTIONS_SUFFIX.lower():
        return ("options", parts[0], parts[1], "_".join(parts[2:-1]))
    if len(parts) == 2:
        return ("helpers", parts[0], parts[1])
    return None


def normalise_fragment(fragment: Mapping[str, Any], *, source: str = "<memory>") -> dict[str, Any]:
    """Fold flat ``PURPOSE_TYPE`` keys into the nested sections.

    Args:
        fragment: Raw mapping read from a source.
        source: Source name used in error messages.

    Returns:
        dict[str, Any]: Fragment containing only known sections.

    Raises:
        ConfigError: If a key is neither a known section nor a flat helper key.
    """

    result: dict[str, Any] = {}
    for raw_key, value in fragment.items():
        key = str(raw_key)
        section = key.lower()
        if section in SECTION_KEYS:
            if not isinstance(value, Mapping):
                raise ConfigError(f"{source}: [{key}] must be a table")
            table = lower_keys(value, depth=_SECTION_KEY_DEPTHS.get(section, 0))
            result = _deep_merge(result, {section: table})
            continue
        path = _split_flat_key(key)
        if path is None or not isinstance(value, str):
            raise ConfigError(f"{source}: unrecognised configuration key '{key}'")
        nested: Any = value
        for part in reversed(path):
            nested = {part: nested}
        result = _deep_merge(result, nested)
    return result


class DefaultConfigSource:
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return default_config().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource:
    """Load configuration data from a TOML document with include support."""

    def __init__(
        self,
        path: Path,
        *,
        name: str | None = None,
        include_key: str = DEFAULT_INCLUDE_KEY,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.path = path
        self.name = name or str(path)
        self._include_key = include_key
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        return self._load(self.path, ())

    def _load(self, path: Path, stack: tuple[Path, ...]) -> Mapping[str, Any]:
        if not path.exists():
            return {}
        resolved = path.resolve()
        if resolved in stack:
            include_chain = " -> ".join(str(entry) for entry in (*stack, resolved))
            raise ConfigError(f"Circular include detected: {include_chain}")
        try:
            with resolved.open("rb") as handle:
                data = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
        if not isinstance(data, MutableMapping):
            raise ConfigError(f"Configuration at {path} must be a table")
        document: dict[str, Any] = dict(data)
        includes = document.pop(self._include_key, None)
        merged: dict[str, Any] = {}
        for include_path in self._coerce_includes(includes, resolved.parent):
            fragment = self._load(include_path, stack + (resolved,))
            merged = _deep_merge(merged, fragment)
        merged = _deep_merge(merged, self._select(document))
        return _expand_env(merged, self._env)

    def _select(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        return document

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        if raw is None:
            return []
        if isinstance(raw, str):
            return [self._resolve_path(Path(raw), base_dir)]
        if isinstance(raw, list):
            return [self._resolve_path(Path(str(item)), base_dir) for item in raw]
        raise ConfigError(f"Unsupported include declaration: {raw!r}")

    @staticmethod
    def _resolve_path(path: Path, base_dir: Path) -> Path:
        return path if path.is_absolute() else (base_dir / path)

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.hook-helpers]`` within ``pyproject.toml``."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        super().__init__(path, name=str(path), env=env)

    def _select(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        tool_section = document.get("tool")
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION)
        if not isinstance(section, Mapping):
            return {}
        return dict(section)

    def _coerce_includes(self, raw: Any, base_dir: Path) -> Iterable[Path]:
        # ``include`` at the top of pyproject.toml is not ours.
        return []

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


class HelperUpdate(BaseModel):
    """Record of a configuration source setting one helper entry."""

    model_config = ConfigDict(validate_assignment=True)

    purpose: str
    file_type: str
    source: str
    value: str


class ConfigLoadResult(BaseModel):
    """Container bundling a resolved config with provenance metadata."""

    model_config = ConfigDict(validate_assignment=True)

    config: Config
    updates: list[HelperUpdate] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)

    def source_of(self, purpose: str, file_type: str) -> str | None:
        """Return the name of the last source that set ``purpose``/``file_type``."""

        winner: str | None = None
        for update in self.updates:
            if update.purpose == purpose.lower() and update.file_type == file_type.lower():
                winner = update.source
        return winner


class ConfigLoader:
    """Apply layered configuration sources with predictable precedence."""

    def __init__(self, *, sources: Sequence[ConfigSource]) -> None:
        if not sources:
            raise ValueError("at least one configuration source is required")
        self._sources = list(sources)

    @property
    def sources(self) -> tuple[ConfigSource, ...]:
        return tuple(self._sources)

    @classmethod
    def for_layout(
        cls,
        layout: RootLayout,
        *,
        config_file: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ConfigLoader:
        """Build a loader for ``layout``: defaults, shared, project, pyproject, local.

        Args:
            layout: Search roots; the shared file is only read in sub-component mode.
            config_file: Optional extra file applied last, above the local override.
            env: Environment used for ``${VAR}`` expansion.

        Returns:
            ConfigLoader: Loader with the default precedence ordering.
        """

        sources: list[ConfigSource] = [DefaultConfigSource()]
        if layout.subcomponent and layout.shared_dir is not None:
            shared = layout.shared_dir / SHARED_CONFIG_NAME
            sources.append(TomlConfigSource(shared, name=str(shared), env=env))
        project_file = layout.project_dir / PROJECT_CONFIG_NAME
        sources.append(TomlConfigSource(project_file, name=str(project_file), env=env))
        pyproject = layout.project_dir / "pyproject.toml"
        if pyproject.exists():
            sources.append(PyProjectConfigSource(pyproject, env=env))
        local_file = layout.local_dir / LOCAL_CONFIG_NAME
        sources.append(TomlConfigSource(local_file, name=str(local_file), env=env))
        if config_file is not None:
            sources.append(TomlConfigSource(config_file, name=str(config_file), env=env))
        return cls(sources=sources)

    def load(self) -> Config:
        """Return the resolved configuration without provenance metadata."""

        return self.load_with_trace().config

    def load_table(self) -> HelperTable:
        return HelperTable.from_config(self.load())

    def load_with_trace(self) -> ConfigLoadResult:
        """Return the resolved configuration with the source of every helper entry.

        Raises:
            ConfigError: If a source is malformed or the merged result is invalid.
        """

        merged: dict[str, Any] = {}
        updates: list[HelperUpdate] = []
        applied: list[str] = []
        for source in self._sources:
            if not (fragment := source.load()):
                continue
            normalised = normalise_fragment(fragment, source=source.name)
            if not normalised:
                continue
            updates.extend(_helper_updates(normalised, source.name))
            merged = _deep_merge(merged, normalised)
            applied.append(source.name)
        try:
            config = Config.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
        return ConfigLoadResult(config=config, updates=updates, sources=applied)


def _helper_updates(fragment: Mapping[str, Any], source: str) -> list[HelperUpdate]:
    helpers = fragment.get("helpers")
    if not isinstance(helpers, Mapping):
        return []
    updates: list[HelperUpdate] = []
    for purpose, table in helpers.items():
        if not isinstance(table, Mapping):
            continue
        for file_type, value in table.items():
            updates.append(
                HelperUpdate(
                    purpose=str(purpose).lower(),
                    file_type=str(file_type).lower(),
                    source=source,
                    value=str(value),
                )
            )
    return updates


def load_config(layout: RootLayout, *, config_file: Path | None = None) -> Config:
    """Load configuration for ``layout`` using the default tiered sources."""

    return ConfigLoader.for_layout(layout, config_file=config_file).load()


__all__ = [
    "ConfigLoadResult",
    "ConfigLoader",
    "ConfigSource",
    "DefaultConfigSource",
    "HelperUpdate",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_config",
    "normalise_fragment",
]
