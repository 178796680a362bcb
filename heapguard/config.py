"""
heapguard.config
AUTHOR: carter-vin

Environment-driven defaults

Env var overrides are important for:
- pointing at a specific JDK's tools without touching PATH
- running the CLI against fake tools in tests and demos
"""

from __future__ import annotations

import os
import shlex
import tempfile
from dataclasses import dataclass
from pathlib import Path

DUMP_DIR_ENV = "HEAPGUARD_DUMP_DIR"
SAFETY_MARGIN_ENV = "HEAPGUARD_SAFETY_MARGIN"

# Fraction of free space a dump may consume
DEFAULT_SAFETY_MARGIN = 2 / 3

# Tool name -> env var carrying its command line
TOOL_ENV = {
    "jps": "HEAPGUARD_JPS",
    "jstat": "HEAPGUARD_JSTAT",
    "df": "HEAPGUARD_DF",
    "jmap": "HEAPGUARD_JMAP",
    "gzip": "HEAPGUARD_GZIP",
}


@dataclass(frozen=True)
class ToolCommands:
    """
    argv prefixes for the external tools

    Each entry may carry extra arguments (e.g. a full JDK path plus flags);
    callers append their own arguments after it.
    """

    jps: tuple[str, ...] = ("jps",)
    jstat: tuple[str, ...] = ("jstat",)
    df: tuple[str, ...] = ("df",)
    jmap: tuple[str, ...] = ("jmap",)
    gzip: tuple[str, ...] = ("gzip",)


def _tool_from_env(name: str) -> tuple[str, ...]:
    raw = os.environ.get(TOOL_ENV[name], "").strip()
    if not raw:
        return (name,)
    return tuple(shlex.split(raw))


def load_tool_commands() -> ToolCommands:
    """
    Build ToolCommands from HEAPGUARD_<TOOL> env vars, falling back to PATH lookup
    """
    return ToolCommands(**{name: _tool_from_env(name) for name in TOOL_ENV})


def default_dump_dir() -> Path:
    """
    Default output directory

    Precedence:
    1) HEAPGUARD_DUMP_DIR
    2) system temp dir
    """
    override = os.environ.get(DUMP_DIR_ENV, "").strip()
    if override:
        return Path(override)
    return Path(tempfile.gettempdir())
