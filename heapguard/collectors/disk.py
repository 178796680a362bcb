"""
heapguard.collectors.disk
AUTHOR: carter-vin

Free space estimate from `df -k <dir>`

df output:
    Filesystem  1K-blocks  Used  Available  Use%  Mounted on
    /dev/sda1   10485760   ...   5242880    50%   /home

A long filesystem name makes df wrap the row:
    /dev/mapper/very-long-volume-name
                10485760   ...   5242880    50%   /home

The available column is therefore read as the third token from the END of a
row. Counting from the start breaks on the wrapped form; keep it end-relative.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable

from heapguard.collectors.scanner import scan_records, stream_command
from heapguard.config import ToolCommands

_DIGITS = re.compile(r"[0-9]+")

# Available, Use%, Mounted on
AVAILABLE_FROM_END = 3


def available_kb(tokens: list[str]) -> int | None:
    """
    Available kB from one df row, or None if this row does not carry it
    """
    if len(tokens) < AVAILABLE_FROM_END:
        return None

    candidate = tokens[len(tokens) - AVAILABLE_FROM_END]
    if not _DIGITS.fullmatch(candidate):
        # Wrapped filesystem-name fragment or other non-data row
        return None
    return int(candidate)


def estimate_free_space(records: Iterable[list[str]]) -> int | None:
    """
    Free space in kB from scanned df rows

    The first row with a numeric available column wins and scanning stops.
    None means unavailable; it must not be compared as a number.
    """
    for tokens in records:
        value = available_kb(tokens)
        if value is not None:
            return value
    return None


def collect_free_space(directory: Path, tools: ToolCommands = ToolCommands()) -> int | None:
    """
    Run df against directory and read its free space

    Raises OSError if df cannot be started.
    """
    lines = stream_command([*tools.df, "-k", str(directory)])
    try:
        return estimate_free_space(scan_records(lines))
    finally:
        # Stop reading once an answer is found; reaps df
        lines.close()
