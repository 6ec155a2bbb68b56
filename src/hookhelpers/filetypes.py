# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""File type classification used to select helper configuration."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol

from .constants import (
    FILETYPE_EXTENSIONS,
    FILETYPE_FILENAMES,
    FILETYPE_INTERPRETERS,
    SHEBANG_READ_LIMIT,
    UNKNOWN_FILE_TYPE,
)
from .logging import HelperLogger

_VERSION_TAIL_RE: Final[re.Pattern[str]] = re.compile(r"[\d.]+$")


class FileTypeDetector(Protocol):
    """Detector that recognises a file type from a path."""

    name: str

    def detect(self, path: Path) -> str | None:
        """Return the file type tag for ``path`` or ``None`` when not recognised."""
        ...


def _invert(table: Mapping[str, Iterable[str]]) -> dict[str, str]:
    """Return ``table`` inverted so each member maps to its file type.

    Raises:
        ValueError: If a member is claimed by more than one file type.
    """

    inverted: dict[str, str] = {}
    for file_type, members in table.items():
        for member in members:
            key = member.lower()
            if key in inverted and inverted[key] != file_type:
                raise ValueError(f"'{member}' is claimed by both {inverted[key]} and {file_type}")
            inverted[key] = file_type
    return inverted


@dataclass(frozen=True, slots=True)
class FilenameDetector:
    """Match well-known file names such as ``Makefile``."""

    names: Mapping[str, str]
    name: str = "filename"

    @classmethod
    def from_table(cls, table: Mapping[str, Iterable[str]]) -> FilenameDetector:
        return cls(names=_invert(table))

    def detect(self, path: Path) -> str | None:
        return self.names.get(path.name.lower())


@dataclass(frozen=True, slots=True)
class ExtensionDetector:
    """Match the final suffix of the path, case-insensitively."""

    suffixes: Mapping[str, str]
    name: str = "extension"

    @classmethod
    def from_table(cls, table: Mapping[str, Iterable[str]]) -> ExtensionDetector:
        return cls(suffixes=_invert(table))

    def detect(self, path: Path) -> str | None:
        suffix = path.suffix.lower()
        if not suffix:
            return None
        return self.suffixes.get(suffix)


@dataclass(frozen=True, slots=True)
class ShebangDetector:
    """Match the interpreter named on a ``#!`` first line.

    ``#!/usr/bin/env python3`` and ``#!/bin/bash -e`` both resolve through the
    interpreter basename with any trailing version number removed.
    """

    interpreters: Mapping[str, str]
    name: str = "shebang"

    @classmethod
    def from_table(cls, table: Mapping[str, Iterable[str]]) -> ShebangDetector:
        return cls(interpreters=_invert(table))

    def detect(self, path: Path) -> str | None:
        interpreter = read_interpreter(path)
        if interpreter is None:
            return None
        if (match := self.interpreters.get(interpreter)) is not None:
            return match
        return self.interpreters.get(_VERSION_TAIL_RE.sub("", interpreter))


def read_interpreter(path: Path) -> str | None:
    """Return the interpreter basename declared by ``path``'s shebang line.

    Args:
        path: File to inspect. Missing or unreadable files yield ``None``.

    Returns:
        str | None: Lower-cased interpreter name, or ``None`` without a shebang.
    """

    try:
        with path.open("rb") as handle:
            head = handle.read(SHEBANG_READ_LIMIT)
    except OSError:
        return None
    if not head.startswith(b"#!"):
        return None
    first_line = head[2:].split(b"\n", 1)[0].decode("utf-8", errors="replace")
    parts = first_line.split()
    if not parts:
        return None
    program = Path(parts[0]).name
    if program == "env":
        arguments = [part for part in parts[1:] if not part.startswith("-") and "=" not in part]
        if not arguments:
            return None
        program = Path(arguments[0]).name
    return program.lower()


def default_detectors() -> tuple[FileTypeDetector, ...]:
    """Return the default detector order: exact file names, extensions, then shebangs."""

    return (
        FilenameDetector.from_table(FILETYPE_FILENAMES),
        ExtensionDetector.from_table(FILETYPE_EXTENSIONS),
        ShebangDetector.from_table(FILETYPE_INTERPRETERS),
    )


class TypeClassifier:
    """Map file paths to file type tags with an ordered tuple of detectors."""

    def __init__(
        self,
        detectors: Iterable[FileTypeDetector] | None = None,
        *,
        logger: HelperLogger | None = None,
    ) -> None:
        self._detectors: tuple[FileTypeDetector, ...] = tuple(detectors) if detectors is not None else default_detectors()
        self._logger = logger

    @property
    def detectors(self) -> tuple[FileTypeDetector, ...]:
        return self._detectors

    def classify(self, path: Path | str) -> str:
        """Return the file type tag for ``path``.

        The first detector that recognises the path wins. Unrecognised paths
        yield ``unknown``; this is a soft failure and is only logged at debug
        level.

        Args:
            path: File to classify. The file only needs to exist for shebang detection.

        Returns:
            str: File type tag.
        """

        candidate = Path(path)
        for detector in self._detectors:
            if (file_type := detector.detect(candidate)) is not None:
                return file_type
        if self._logger is not None:
            self._logger.debug(f"no file type matched path={candidate}")
        return UNKNOWN_FILE_TYPE


_DEFAULT_CLASSIFIER: Final[TypeClassifier] = TypeClassifier()


def classify(path: Path | str) -> str:
    """Return the file type tag for ``path`` using the default detectors."""

    return _DEFAULT_CLASSIFIER.classify(path)


def is_known(file_type: str) -> bool:
    """Return whether ``file_type`` identifies a recognised file type."""

    return file_type != UNKNOWN_FILE_TYPE


__all__ = [
    "ExtensionDetector",
    "FileTypeDetector",
    "FilenameDetector",
    "ShebangDetector",
    "TypeClassifier",
    "classify",
    "default_detectors",
    "is_known",
    "read_interpreter",
]
