"""
heapguard.collectors.identity

AUTHOR: carter-vin

- process identity: is the pid a JVM, and what is it called (`jps`)
- host identity: short hostname for output file names

Design goals:
- Stop reading jps output at the first matching pid
- Graceful degradation: an unverified identity is reported, not raised
"""

from __future__ import annotations

import socket
from dataclasses import dataclass
from typing import Iterable, Optional

from heapguard.collectors.scanner import stream_command, tokenize
from heapguard.config import ToolCommands


@dataclass(frozen=True)
class ProcessIdentity:
    """
    Identity collector output.

    verified is True only when jps listed the pid.
    name is lowercased for use in the output file name.
    """

    pid: int
    name: Optional[str]
    verified: bool


def find_process_name(lines: Iterable[str], pid: int) -> Optional[str]:
    """
    Scan `pid name` rows and return the lowercased name for pid

    jps has no header, so every line is a candidate row.
    """
    target = str(pid)
    for line in lines:
        tokens = tokenize(line)
        if len(tokens) < 2:
            # jps -q style or blank line: nothing to match against
            continue
        if tokens[0] == target:
            return tokens[1].lower()
    return None


def collect_process_identity(pid: int, tools: ToolCommands = ToolCommands()) -> ProcessIdentity:
    """
    Confirm pid is a JVM via jps

    Raises OSError if jps cannot be started.
    """
    lines = stream_command(list(tools.jps))
    try:
        name = find_process_name(lines, pid)
    finally:
        lines.close()

    return ProcessIdentity(pid=pid, name=name, verified=name is not None)


def short_hostname() -> str:
    """
    Local hostname without any domain suffix
    """
    return socket.gethostname().split(".", 1)[0]
