"""
heapguard.collectors.memory
AUTHOR: carter-vin

Heap dump size estimate from `jstat -gc <pid>`

Column layout (legacy 15-column form):
    S0C S1C S0U S1U EC EU OC OU PC PU YGC YGCT FGC FGCT GCT

Newer JDKs print MC/MU in place of PC/PU and append compressed class
and concurrent GC columns. The used columns keep their positions, so both
layouts are read the same way.

jstat prints `-` for regions the active collector does not have (ZGC has
no survivor or eden spaces); those count as 0 kB, not as a bad row.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from heapguard.collectors.scanner import scan_records, stream_command
from heapguard.config import ToolCommands

# Capacity/used pairs for S0, S1, eden, old and metadata
REGION_COLUMNS = 10

# Only the legacy layout puts the collection counters right after the regions
LEGACY_COLUMNS = 15

ABSENT_REGION = "-"


def _parse_float(token: str) -> Optional[float]:
    try:
        value = float(token)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def _parse_region(token: str) -> Optional[float]:
    if token == ABSENT_REGION:
        return 0.0
    return _parse_float(token)


@dataclass(frozen=True)
class MemoryRecord:
    """
    One jstat -gc row, values in kB

    Collection counters are carried for the legacy layout only and never
    used for sizing.
    """

    s0c: float
    s1c: float
    s0u: float
    s1u: float
    ec: float
    eu: float
    oc: float
    ou: float
    pc: float
    pu: float
    ygc: Optional[float] = None
    ygct: Optional[float] = None
    fgc: Optional[float] = None
    fgct: Optional[float] = None
    gct: Optional[float] = None

    @staticmethod
    def from_tokens(tokens: list[str]) -> "MemoryRecord | None":
        """
        Parse a token row; None for short rows or tokens that are neither
        numbers nor `-`
        """
        if len(tokens) < REGION_COLUMNS:
            return None

        regions = [_parse_region(token) for token in tokens[:REGION_COLUMNS]]
        if any(value is None for value in regions):
            return None

        if len(tokens) != LEGACY_COLUMNS:
            return MemoryRecord(*regions)

        counters = [_parse_float(token) for token in tokens[REGION_COLUMNS:]]
        return MemoryRecord(*regions, *counters)

    @property
    def used_kb(self) -> int:
        """
        Sum of used space across regions, rounded up to whole kB
        """
        total = self.s0u + self.s1u + self.eu + self.ou + self.pu
        return int(math.ceil(total))


def estimate_dump_size(records: Iterable[list[str]]) -> int | None:
    """
    Estimated dump size in kB from scanned jstat rows

    Rules:
    - the last valid row wins (no averaging)
    - None when no valid row was seen; never 0 as a stand-in
    """
    latest: MemoryRecord | None = None
    for tokens in records:
        if not tokens:
            continue
        record = MemoryRecord.from_tokens(tokens)
        if record is not None:
            latest = record

    if latest is None:
        return None
    return latest.used_kb


def collect_dump_size(pid: int, tools: ToolCommands = ToolCommands()) -> int | None:
    """
    Run jstat against pid and estimate the dump size

    Raises OSError if jstat cannot be started.
    """
    lines = stream_command([*tools.jstat, "-gc", str(pid)])
    try:
        return estimate_dump_size(scan_records(lines))
    finally:
        lines.close()
