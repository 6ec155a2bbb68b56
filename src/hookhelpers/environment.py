# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Immutable environment snapshots handed to helper child processes."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from types import MappingProxyType

from .constants import (
    COMMAND_ENV,
    FILE_TYPE_ENV,
    LOCAL_DIR_ENV,
    PROJECT_DIR_ENV,
    PURPOSE_ENV,
    SHARED_DIR_ENV,
)
from .roots import RootLayout, ToolRoot


class EnvironmentSnapshot(Mapping[str, str]):
    """Read-only copy of a process environment.

    Layers are produced with :meth:`with_values`; the original snapshot is
    never changed, so each chain link sees the same parent environment.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, str]) -> None:
        self._values: Mapping[str, str] = MappingProxyType(dict(values))

    @classmethod
    def capture(cls, source: Mapping[str, str] | None = None) -> EnvironmentSnapshot:
        """Return a snapshot of ``source`` or of ``os.environ`` at call time."""

        return cls(os.environ if source is None else source)

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"EnvironmentSnapshot({len(self._values)} variables)"

    def with_values(self, **values: str | None) -> EnvironmentSnapshot:
        """Return a new snapshot with ``values`` set; ``None`` removes a variable."""

        merged = dict(self._values)
        for key, value in values.items():
            if value is None:
                merged.pop(key, None)
            else:
                merged[key] = value
        return EnvironmentSnapshot(merged)

    def with_layout(self, layout: RootLayout) -> EnvironmentSnapshot:
        """Return a snapshot exporting the searched roots to helpers.

        ``HOOK_HELPERS_DIR`` is only exported in sub-component mode, when the
        shared tier is part of the search.
        """

        exported = {LOCAL_DIR_ENV: ToolRoot.LOCAL, PROJECT_DIR_ENV: ToolRoot.PROJECT, SHARED_DIR_ENV: ToolRoot.SHARED}
        values: dict[str, str] = {}
        for name, tier in exported.items():
            if (root := layout.root_for(tier)) is not None:
                values[name] = str(root)
        return self.with_values(**values)

    def for_helper(self, *, purpose: str, file_type: str, command: str) -> EnvironmentSnapshot:
        """Return a snapshot describing the helper about to run."""

        return self.with_values(
            **{
                PURPOSE_ENV: purpose,
                FILE_TYPE_ENV: file_type,
                COMMAND_ENV: command,
            }
        )


__all__ = ["EnvironmentSnapshot"]
