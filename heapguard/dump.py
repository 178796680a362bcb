"""
heapguard.dump

AUTHOR: carter-vin

OUTPUT:
- one binary heap dump per run, written by jmap
- optional gzip of that file, launched detached

Design goals:
- Deterministic, sortable output names (host, time, process, pid)
- jmap status is the only success signal; any failure is fatal
- Compression is fire-and-forget: its outcome is never observed
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from heapguard.config import ToolCommands

# 1 GiB in kB; dumps this large get a patience notice
LARGE_DUMP_KB = 1024 * 1024

UNKNOWN_PROCESS_NAME = "unknown"


def build_output_path(
    output_dir: Path,
    hostname: str,
    process_name: str | None,
    pid: int,
    now: datetime,
) -> Path:
    """
    <dir>/jmap.<shorthost>.<YYYYMMDD-HHMMSS>.<name>.<pid>.bin
    """
    short_host = hostname.split(".", 1)[0]
    name = (process_name or UNKNOWN_PROCESS_NAME).lower()
    stamp = now.strftime("%Y%m%d-%H%M%S")
    return output_dir / f"jmap.{short_host}.{stamp}.{name}.{pid}.bin"


def is_large_dump(dump_kb: int | None) -> bool:
    return dump_kb is not None and dump_kb >= LARGE_DUMP_KB


@dataclass(frozen=True)
class DumpResult:
    """
    jmap outcome
    - returncode: 0 is the only success
    - output: combined jmap output, kept off stdout so event lines stay parseable
    """

    returncode: int
    output: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def run_dump(pid: int, output_path: Path, tools: ToolCommands = ToolCommands()) -> DumpResult:
    """
    Run jmap and wait for it

    A jmap that cannot be started is reported as status 127, the shell's
    "command not found".
    """
    argv = [*tools.jmap, f"-dump:format=b,file={output_path}", str(pid)]
    try:
        completed = subprocess.run(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as e:
        return DumpResult(returncode=127, output=str(e))
    return DumpResult(returncode=completed.returncode, output=(completed.stdout or "").strip())


def schedule_compression(output_path: Path, tools: ToolCommands = ToolCommands()) -> subprocess.Popen:
    """
    Launch gzip on the dump without waiting

    The child runs in its own session with stdio detached so it outlives
    this process. Raises OSError if gzip cannot be started.
    """
    return subprocess.Popen(
        [*tools.gzip, str(output_path)],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
    )
