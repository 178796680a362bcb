"""
heapguard.main
------------
AUTHOR: carter-vin

PURPOSE:
- Take a JVM heap dump only when it is safe to do so
- Run every safety check before deciding, so operators see all problems at once
- Keep output machine-readable: one JSON event per line

Key contract:
- `heapguard <pid>` checks, dumps, then compresses in the background
- `heapguard --check <pid>` checks only; exit 0 on pass, 1 on failure
- exit 1 on bad pid, failed checks without --force, or a failed dump
"""

from __future__ import annotations

import platform
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

import typer

from heapguard.collectors.base import CollectorOutcome, run_collector
from heapguard.collectors.disk import collect_free_space
from heapguard.collectors.identity import ProcessIdentity, collect_process_identity, short_hostname
from heapguard.collectors.memory import collect_dump_size
from heapguard.config import (
    DEFAULT_SAFETY_MARGIN,
    SAFETY_MARGIN_ENV,
    default_dump_dir,
    load_tool_commands,
)
from heapguard.dump import build_output_path, is_large_dump, run_dump, schedule_compression
from heapguard.evaluate import describe_disk_usage, evaluate_safety, validate_margin
from heapguard.logging import RunLog

app = typer.Typer(
    add_completion=False,
    help="heapguard: safety-checked JVM heap dumps",
)

TOOL_VERSION = "0.1.0"

# -----------------------------
# DATA CLASSES
# -----------------------------
@dataclass(frozen=True)
class EnvironmentInfo:
    """
    Snapshot of the runtime environment
    - help correlate dumps across hosts and times
    """

    python_version: str
    os: str
    machine: str
    utc_now: str


def collect_environment_info() -> EnvironmentInfo:
    return EnvironmentInfo(
        python_version=sys.version.split()[0],
        os=f"{platform.system()} {platform.release()}",
        machine=platform.machine(),
        utc_now=datetime.now(timezone.utc).isoformat(),
    )



# -----------------------------
# HELPERS
# -----------------------------
def parse_pid(raw: str | None) -> int | None:
    """
    Decimal pid or None (missing, empty or not all digits)
    """
    if raw is None:
        return None
    raw = raw.strip()
    if not raw or not raw.isascii() or not raw.isdigit():
        return None
    return int(raw)


def _version_callback(value: bool) -> None:
    if not value:
        return

    env = collect_environment_info()
    typer.echo(f"heapguard v{TOOL_VERSION}")
    typer.echo(f"python={env.python_version}")
    typer.echo(f"os={env.os}")
    typer.echo(f"machine={env.machine}")
    typer.echo(f"utc_now={env.utc_now}")
    raise typer.Exit()


def _usage_error(log: RunLog, message: str) -> None:
    # Usage problems are fatal preconditions: exit 1, same as failed checks
    log.emit("usage_error", message=message)
    raise typer.Exit(code=1)


def _report_collector_failure(log: RunLog, outcome: CollectorOutcome) -> None:
    # Best effort: the estimate degrades to unknown, checks still run
    log.emit(
        "collector_failed",
        collector=outcome.name,
        error_type=outcome.error_type,
        message=outcome.error_message,
    )


# -----------------------------
# CLI COMMAND
# -----------------------------
@app.command()
def dump(
    pid: str | None = typer.Argument(
        None,
        help="Process id of the target JVM.",
        show_default=False,
    ),
    check: bool = typer.Option(
        False,
        "--check",
        help="Run the safety checks only; exit 0 if they pass, 1 if not.",
    ),
    output_dir: str | None = typer.Option(
        None,
        "--dir",
        help="Directory for the dump file (default: $HEAPGUARD_DUMP_DIR or the system temp dir).",
        show_default=False,
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Dump even when safety checks fail (failures become warnings).",
    ),
    no_compress: bool = typer.Option(
        False,
        "--no-compress",
        help="Leave the dump uncompressed.",
    ),
    margin: float = typer.Option(
        DEFAULT_SAFETY_MARGIN,
        "--margin",
        envvar=SAFETY_MARGIN_ENV,
        help="Fraction of free disk space the dump may use, in (0, 1].",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Print version and runtime environment, then exit.",
    ),
) -> None:
    """
    Check that a heap dump of PID is safe, then take it

    Failure semantics:
    - every check runs before any decision; all failures are reported together
    - --check takes precedence over --force
    - a failed jmap is always fatal and skips compression
    """
    log = RunLog(tool_version=TOOL_VERSION)

    target_pid = parse_pid(pid)
    if target_pid is None:
        if pid is None:
            _usage_error(log, "missing pid argument")
        _usage_error(log, f"pid must be a non-negative integer, got {pid!r}")

    try:
        validate_margin(margin)
    except ValueError as e:
        _usage_error(log, str(e))

    log = log.bind(pid=target_pid)

    tools = load_tool_commands()
    directory = Path(output_dir).expanduser() if output_dir else default_dump_dir()
    directory = directory.absolute()

    log.emit(
        "run_start",
        output_dir=str(directory),
        check_only=check,
        force=force,
        margin=margin,
    )

    # Collect estimates; a tool that cannot start leaves its value unknown
    ident_out = run_collector("jps", collect_process_identity, target_pid, tools)
    size_out = run_collector("jstat", collect_dump_size, target_pid, tools)
    free_out = run_collector("df", collect_free_space, directory, tools)

    for outcome in (ident_out, size_out, free_out):
        if not outcome.ok:
            _report_collector_failure(log, outcome)

    identity: ProcessIdentity = ident_out.value_or(
        ProcessIdentity(pid=target_pid, name=None, verified=False)
    )
    dump_kb: int | None = size_out.value_or(None)
    free_kb: int | None = free_out.value_or(None)

    output_path = build_output_path(
        directory,
        short_hostname(),
        identity.name,
        target_pid,
        datetime.now(),
    )

    log.emit(
        "disk_estimate",
        dump_kb=dump_kb,
        free_kb=free_kb,
        margin=margin,
        message=describe_disk_usage(dump_kb, free_kb, margin),
    )

    verdict = evaluate_safety(
        pid=target_pid,
        identity_verified=identity.verified,
        dump_kb=dump_kb,
        free_kb=free_kb,
        margin=margin,
        output_dir=directory,
        output_path=output_path,
    )

    if verdict.passed:
        log.emit("checks_passed", output_path=str(output_path), verdict=verdict.to_dict())
    else:
        # Full report first, decision after
        event_type = "check_warning" if force and not check else "check_failed"
        for message in verdict.diagnostics:
            log.emit(event_type, message=message)

    if check:
        if not verdict.passed:
            log.emit(
                "dump_aborted",
                verdict=verdict.to_dict(),
                message="check-only run failed; no action taken",
            )
            raise typer.Exit(code=1)
        return

    if not verdict.passed and not force:
        log.emit(
            "dump_aborted",
            verdict=verdict.to_dict(),
            message="safety checks failed; no action taken (use --force to override)",
        )
        raise typer.Exit(code=1)

    if is_large_dump(dump_kb):
        log.emit(
            "dump_patience",
            dump_kb=dump_kb,
            message=f"dumping roughly {dump_kb:,} kB of heap; this can take several minutes",
        )

    log.emit("dump_started", output_path=str(output_path))

    result = run_dump(target_pid, output_path, tools)
    if not result.ok:
        # Never overridable: a partial dump must not be compressed or reported as done
        log.emit(
            "dump_failed",
            returncode=result.returncode,
            output_path=str(output_path),
            message=result.output or f"jmap exited with status {result.returncode}",
        )
        raise typer.Exit(code=1)

    log.emit("dump_completed", output_path=str(output_path))

    if no_compress:
        return

    try:
        proc = schedule_compression(output_path, tools)
    except OSError as e:
        # Dump is already safe on disk; compression is a nicety
        log.emit(
            "compression_failed",
            output_path=str(output_path),
            error_type=type(e).__name__,
            message=str(e),
        )
        return

    log.emit(
        "compression_scheduled",
        output_path=str(output_path),
        compressor_pid=proc.pid,
    )


if __name__ == "__main__":
    app()
