# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from hookhelpers.console import get_console_manager
from hookhelpers.roots import RootLayout, reset_layout_cache

HelperFactory = Callable[..., Path]


@pytest.fixture(autouse=True)
def _fresh_caches() -> Iterator[None]:
    reset_layout_cache()
    get_console_manager().clear()
    yield
    reset_layout_cache()
    get_console_manager().clear()


@pytest.fixture
def make_helper() -> HelperFactory:
    """Return a factory writing ``/bin/sh`` scripts below a root directory."""

    def _make(root: Path, relative: str, body: str = "exit 0", *, mode: int = 0o755) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\n{body}\n", encoding="utf-8")
        path.chmod(mode)
        return path

    return _make


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def layout(tmp_path: Path, project: Path) -> RootLayout:
    """Return a layout with separate local and project roots and no shared tier."""

    local = tmp_path / "local"
    local.mkdir()
    return RootLayout.discover(project_dir=project, local_dir=local)
