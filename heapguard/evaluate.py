"""
heapguard.evaluate
AUTHOR: carter-vin

Safety evaluation for a heap dump

Each check returns its own list of diagnostics. evaluate_safety runs all of
them, in order, and merges the results; no check short-circuits another.
"""

from __future__ import annotations

import os
from pathlib import Path

from heapguard.model import Diagnostics, SafetyVerdict


def validate_margin(margin: float) -> float:
    """
    Safety margin must be a fraction in (0, 1]
    """
    if not 0 < margin <= 1:
        raise ValueError(f"safety margin must be in (0, 1], got {margin}")
    return margin


def minimum_free_kb(dump_kb: int, margin: float) -> int:
    """
    Free space needed for dump_kb to fit within margin
    """
    return int(round(dump_kb / margin))


def check_process_identity(pid: int, verified: bool) -> list[str]:
    if verified:
        return []
    return [f"pid {pid} could not be confirmed as a java process"]


def check_output_directory(output_dir: Path) -> list[str]:
    if output_dir.is_dir():
        return []
    return [f"output directory {output_dir} does not exist or is not a directory"]


def check_output_file(output_path: Path) -> list[str]:
    """
    Output path must be new and writable

    Writability is tested by creating the file and removing it again.
    """
    if os.path.lexists(output_path):
        return [f"output file {output_path} already exists"]

    try:
        with output_path.open("xb"):
            pass
        output_path.unlink()
    except OSError as e:
        return [f"cannot write output file {output_path}: {e.strerror or e}"]
    return []


def check_disk_space(
    dump_kb: int | None,
    free_kb: int | None,
    margin: float,
    output_dir: Path,
) -> list[str]:
    """
    Fail iff the estimated dump exceeds margin * free space

    An unavailable reading carries no information: the comparison is
    skipped rather than failed.
    """
    if dump_kb is None or free_kb is None:
        return []

    if dump_kb > free_kb * margin:
        return [
            f"insufficient disk space in {output_dir}: "
            f"need at least {minimum_free_kb(dump_kb, margin):,} kB free, "
            f"have {free_kb:,} kB"
        ]
    return []


def describe_disk_usage(dump_kb: int | None, free_kb: int | None, margin: float) -> str:
    """
    Human-readable sizing summary for the run log
    """
    dump_text = f"{dump_kb:,} kB" if dump_kb is not None else "unknown"
    free_text = f"{free_kb:,} kB" if free_kb is not None else "unavailable"

    if dump_kb is None:
        return f"estimated dump size: {dump_text}; free space: {free_text}"

    return (
        f"estimated dump size: {dump_text}; free space: {free_text}; "
        f"minimum required at {margin:.0%} margin: {minimum_free_kb(dump_kb, margin):,} kB"
    )


def evaluate_safety(
    *,
    pid: int,
    identity_verified: bool,
    dump_kb: int | None,
    free_kb: int | None,
    margin: float,
    output_dir: Path,
    output_path: Path,
) -> SafetyVerdict:
    """
    Run every safety check and combine the results
    """
    validate_margin(margin)

    diagnostics = Diagnostics()
    diagnostics.extend(check_process_identity(pid, identity_verified))
    diagnostics.extend(check_output_directory(output_dir))
    diagnostics.extend(check_output_file(output_path))
    diagnostics.extend(check_disk_space(dump_kb, free_kb, margin, output_dir))

    return SafetyVerdict.from_diagnostics(diagnostics)
