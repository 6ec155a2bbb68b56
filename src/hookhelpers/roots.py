# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Three-tier executable resolution across local, project and shared roots."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass, field
from enum import StrEnum
from functools import cache
from pathlib import Path, PurePath

from .constants import DEFAULT_LOCAL_DIR_NAME


class ToolRoot(StrEnum):
    """Search tiers in priority order."""

    LOCAL = "local"
    PROJECT = "project"
    SHARED = "shared"


class LookupStatus(StrEnum):
    """Outcome of testing a single candidate path."""

    FOUND = "found"
    NOT_EXECUTABLE = "not-executable"
    MISSING = "missing"


def _best_effort_resolve(path: Path) -> Path:
    try:
        return path.expanduser().resolve(strict=False)
    except (OSError, RuntimeError):
        return path.absolute()


@cache
def _is_embedded(project_dir: str, shared_dir: str) -> bool:
    """Cached helper deciding whether ``shared_dir`` is embedded in ``project_dir``."""

    project = Path(project_dir)
    shared = Path(shared_dir)
    if shared == project or not shared.is_dir():
        return False
    return shared.is_relative_to(project)


def detect_subcomponent(project_dir: Path, shared_dir: Path | None) -> bool:
    """Return whether the tooling runs as a sub-component of the project.

    The shared tier is only meaningful when the tooling distribution lives
    inside the target repository (for example as a git submodule) rather than
    being the repository itself.

    Args:
        project_dir: Target repository root.
        shared_dir: Tooling distribution root, when known.

    Returns:
        bool: ``True`` when ``shared_dir`` is an existing directory nested below ``project_dir``.
    """

    if shared_dir is None:
        return False
    return _is_embedded(str(_best_effort_resolve(project_dir)), str(_best_effort_resolve(shared_dir)))


def reset_layout_cache() -> None:
    """Forget cached sub-component decisions; intended for tests."""

    _is_embedded.cache_clear()


@dataclass(frozen=True, slots=True)
class RootLayout:
    """Resolved search roots, built once at startup and passed to the resolver."""

    local_dir: Path
    project_dir: Path
    shared_dir: Path | None = None
    subcomponent: bool = False

    @classmethod
    def discover(
        cls,
        *,
        project_dir: Path,
        local_dir: Path | None = None,
        shared_dir: Path | None = None,
    ) -> RootLayout:
        """Build a layout, deciding sub-component mode once.

        Args:
            project_dir: Target repository root.
            local_dir: User override directory. Defaults to ``<project>/.hook-helpers.local``.
            shared_dir: Tooling distribution root.

        Returns:
            RootLayout: Layout with absolute directories.
        """

        project = _best_effort_resolve(project_dir)
        local = _best_effort_resolve(local_dir) if local_dir is not None else project / DEFAULT_LOCAL_DIR_NAME
        shared = _best_effort_resolve(shared_dir) if shared_dir is not None else None
        return cls(
            local_dir=local,
            project_dir=project,
            shared_dir=shared,
            subcomponent=detect_subcomponent(project, shared),
        )

    def candidates(self) -> tuple[tuple[ToolRoot, Path], ...]:
        """Return the roots to search, in priority order."""

        ordered: list[tuple[ToolRoot, Path]] = [
            (ToolRoot.LOCAL, self.local_dir),
            (ToolRoot.PROJECT, self.project_dir),
        ]
        if self.subcomponent and self.shared_dir is not None:
            ordered.append((ToolRoot.SHARED, self.shared_dir))
        return tuple(ordered)

    def root_for(self, tier: ToolRoot) -> Path | None:
        for candidate_tier, path in self.candidates():
            if candidate_tier is tier:
                return path
        return None


@dataclass(frozen=True, slots=True)
class LookupRecord:
    """Result of testing one tier for a relative path."""

    tier: ToolRoot
    path: Path
    status: LookupStatus


@dataclass(frozen=True, slots=True)
class Resolution:
    """Every lookup made while resolving a relative path, in search order."""

    relative_path: PurePath
    records: tuple[LookupRecord, ...] = field(default_factory=tuple)

    @property
    def executable(self) -> Path | None:
        for record in self.records:
            if record.status is LookupStatus.FOUND:
                return record.path
        return None

    @property
    def tier(self) -> ToolRoot | None:
        for record in self.records:
            if record.status is LookupStatus.FOUND:
                return record.tier
        return None

    @property
    def unusable(self) -> tuple[Path, ...]:
        """Return files found before the winner that exist but are not executable."""

        found: list[Path] = []
        for record in self.records:
            if record.status is LookupStatus.FOUND:
                break
            if record.status is LookupStatus.NOT_EXECUTABLE:
                found.append(record.path)
        return tuple(found)


def check_path(path: Path) -> LookupStatus:
    """Classify ``path`` as an executable regular file, an unusable file, or missing."""

    try:
        mode = path.stat().st_mode
    except OSError:
        return LookupStatus.MISSING
    if not stat.S_ISREG(mode):
        return LookupStatus.MISSING
    if not os.access(path, os.X_OK):
        return LookupStatus.NOT_EXECUTABLE
    return LookupStatus.FOUND


def _validate_relative(relative_path: PurePath | str) -> PurePath:
    """Return ``relative_path`` as a pure path, rejecting absolute or escaping paths.

    Raises:
        ValueError: If the path is empty, absolute or contains ``..``.
    """

    candidate = PurePath(relative_path)
    if not candidate.parts or str(candidate) == ".":
        raise ValueError("relative path must not be empty")
    if candidate.is_absolute():
        raise ValueError(f"expected a path relative to the search roots, got {candidate}")
    if ".." in candidate.parts:
        raise ValueError(f"relative path must not leave its root: {candidate}")
    return candidate


class ExecutableResolver:
    """Find executables by searching the layout's roots in priority order."""

    def __init__(self, layout: RootLayout) -> None:
        self._layout = layout

    @property
    def layout(self) -> RootLayout:
        return self._layout

    def inspect(self, relative_path: PurePath | str) -> Resolution:
        """Check every tier for ``relative_path``, stopping at the first executable.

        Args:
            relative_path: Path relative to each root, such as ``helpers/lint/css/stylelint``.

        Returns:
            Resolution: Lookup records in search order.
        """

        relative = _validate_relative(relative_path)
        records: list[LookupRecord] = []
        for tier, root in self._layout.candidates():
            candidate = root / relative
            status = check_path(candidate)
            records.append(LookupRecord(tier=tier, path=candidate, status=status))
            if status is LookupStatus.FOUND:
                break
        return Resolution(relative_path=relative, records=tuple(records))

    def resolve(self, relative_path: PurePath | str) -> Path | None:
        """Return the first executable match for ``relative_path`` or ``None``."""

        return self.inspect(relative_path).executable


__all__ = [
    "ExecutableResolver",
    "LookupRecord",
    "LookupStatus",
    "Resolution",
    "RootLayout",
    "ToolRoot",
    "check_path",
    "detect_subcomponent",
    "reset_layout_cache",
]
