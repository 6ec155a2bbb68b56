# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared constants used across hookhelpers modules."""

from __future__ import annotations

from typing import Final

UNKNOWN_FILE_TYPE: Final[str] = "unknown"
COMMON_HELPER_DIR: Final[str] = "_common"
CHAIN_SEPARATOR: Final[str] = "+"
OPTIONS_SUFFIX: Final[str] = "OPTIONS"

# Exit statuses reported for conditions that never reached a helper.
MISSING_COMMAND_EXIT: Final[int] = 127
CANNOT_EXECUTE_EXIT: Final[int] = 126
TIMEOUT_EXIT: Final[int] = 124

PROJECT_CONFIG_NAME: Final[str] = ".hook-helpers.toml"
LOCAL_CONFIG_NAME: Final[str] = "hook-helpers.toml"
SHARED_CONFIG_NAME: Final[str] = "hook-helpers.toml"
PYPROJECT_SECTION: Final[str] = "hook-helpers"

LOCAL_DIR_ENV: Final[str] = "LOCAL_DIR"
PROJECT_DIR_ENV: Final[str] = "TARGET_DIR"
SHARED_DIR_ENV: Final[str] = "HOOK_HELPERS_DIR"
PURPOSE_ENV: Final[str] = "HOOK_HELPERS_PURPOSE"
FILE_TYPE_ENV: Final[str] = "HOOK_HELPERS_FILE_TYPE"
COMMAND_ENV: Final[str] = "HOOK_HELPERS_COMMAND"

DEFAULT_LOCAL_DIR_NAME: Final[str] = ".hook-helpers.local"

# Each suffix belongs to exactly one file type so classification stays deterministic.
FILETYPE_EXTENSIONS: Final[dict[str, frozenset[str]]] = {
    "python": frozenset({".py", ".pyi"}),
    "js": frozenset({".js", ".jsx", ".mjs", ".cjs"}),
    "ts": frozenset({".ts", ".tsx"}),
    "json": frozenset({".json"}),
    "css": frozenset({".css", ".scss", ".sass", ".less"}),
    "html": frozenset({".html", ".htm"}),
    "xml": frozenset({".xml", ".xsd", ".xsl"}),
    "yaml": frozenset({".yml", ".yaml"}),
    "toml": frozenset({".toml"}),
    "markdown": frozenset({".md", ".mdx", ".markdown"}),
    "shell": frozenset({".sh", ".bash", ".zsh"}),
    "perl": frozenset({".pl", ".pm", ".t"}),
    "php": frozenset({".php", ".phtml"}),
    "ruby": frozenset({".rb"}),
    "lua": frozenset({".lua"}),
    "go": frozenset({".go"}),
    "rust": frozenset({".rs"}),
    "c": frozenset({".c", ".h"}),
    "cpp": frozenset({".cc", ".cpp", ".cxx", ".c++", ".hh", ".hpp", ".hxx", ".h++"}),
    "sql": frozenset({".sql"}),
    "make": frozenset({".mk"}),
}

FILETYPE_FILENAMES: Final[dict[str, frozenset[str]]] = {
    "make": frozenset({"makefile", "gnumakefile"}),
    "docker": frozenset({"dockerfile", "containerfile"}),
    "shell": frozenset({".bashrc", ".bash_profile", ".profile", ".zshrc"}),
    "ruby": frozenset({"gemfile", "rakefile"}),
}

# Interpreter basenames recognised in ``#!`` lines.
FILETYPE_INTERPRETERS: Final[dict[str, frozenset[str]]] = {
    "shell": frozenset({"sh", "bash", "zsh", "dash", "ksh"}),
    "python": frozenset({"python", "python2", "python3"}),
    "perl": frozenset({"perl"}),
    "ruby": frozenset({"ruby"}),
    "js": frozenset({"node", "nodejs"}),
    "php": frozenset({"php"}),
    "lua": frozenset({"lua"}),
}

SHEBANG_READ_LIMIT: Final[int] = 256
