"""heapguard.collectors package exports."""

from heapguard.collectors.disk import collect_free_space
from heapguard.collectors.identity import collect_process_identity, short_hostname
from heapguard.collectors.memory import collect_dump_size

__all__ = [
    "collect_dump_size",
    "collect_free_space",
    "collect_process_identity",
    "short_hostname",
]
