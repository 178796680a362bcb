"""
heapguard.model
AUTHOR: carter-vin

Verdict schema + diagnostics accumulator.

Design goals:
- Every check runs; diagnostics are collected, never raised
- Explicit structure (no accidental serialization via __dict__)
- Deterministic ordering: diagnostics keep the order the checks ran in
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator


class Diagnostics:
    """
    Ordered, append-only collector of failure messages for one run

    Adding a message never stops evaluation; the empty/non-empty state at
    the end is the only pass/fail signal.
    """

    def __init__(self) -> None:
        self._items: list[str] = []

    def add(self, message: str) -> None:
        self._items.append(message)

    def extend(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.add(message)

    @property
    def items(self) -> tuple[str, ...]:
        return tuple(self._items)

    @property
    def passed(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._items))


@dataclass(frozen=True)
class SafetyVerdict:
    """
    Go/no-go decision for a dump
    - passed: true only when no diagnostics were recorded
    - diagnostics: every failure, in check order
    """

    passed: bool
    diagnostics: tuple[str, ...]

    @staticmethod
    def from_diagnostics(diagnostics: Diagnostics) -> "SafetyVerdict":
        return SafetyVerdict(passed=diagnostics.passed, diagnostics=diagnostics.items)

    def to_dict(self) -> dict[str, Any]:
        # Explicit key mapping for stability
        return {
            "passed": self.passed,
            "diagnostics": list(self.diagnostics),
        }
