"""
heapguard.collectors.scanner
AUTHOR: carter-vin

Line-oriented scanner for the whitespace-delimited reports printed by
`jstat` and `df`

Contract:
- first line is a header and is always dropped
- every later line becomes a list of tokens (blank line -> empty list)
- lazy and forward-only; the source is consumed once
"""

from __future__ import annotations

import os
import subprocess
from typing import Iterable, Iterator, Sequence


def tokenize(line: str) -> list[str]:
    """
    Split one report line on runs of whitespace
    """
    return line.strip().split()


def scan_records(lines: Iterable[str]) -> Iterator[list[str]]:
    """
    Yield token lists for every line after the header

    Consumers must tolerate empty token lists and ragged column counts.
    """
    it = iter(lines)

    # Header is discarded unconditionally, even if it looks like data
    next(it, None)

    for line in it:
        yield tokenize(line)


def stream_command(argv: Sequence[str]) -> Iterator[str]:
    """
    Run a reporting tool and yield its stdout lines as they arrive

    - LC_ALL=C keeps numeric formatting parseable
    - stderr is discarded; tools report "not found" style errors there
    - raises OSError on first iteration if the tool cannot be started
    - closing the generator early closes the pipe and reaps the child
    """
    env = os.environ.copy()
    env["LC_ALL"] = "C"

    with subprocess.Popen(
        list(argv),
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        stdin=subprocess.DEVNULL,
        text=True,
        env=env,
    ) as proc:
        assert proc.stdout is not None
        for line in proc.stdout:
            yield line
