"""
Lightweight timing and memory probes for pipeline steps.

Ingest buffers the whole upload in memory, so the pipeline logs how long each
call took and how much the process RSS moved while it ran.

Usage:
    from src.utils.profiler import profile_block

    with profile_block("ingest") as stats:
        run_ingest()

    log.info("done", extra=stats.as_log_extra())
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, Optional

try:
    import psutil
except ImportError:  # pragma: no cover - optional until dependencies are installed
    psutil = None  # type: ignore[assignment]


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    rss_start_bytes: Optional[int] = field(default=None)
    rss_end_bytes: Optional[int] = field(default=None)

    @property
    def rss_delta_bytes(self) -> Optional[int]:
        if self.rss_start_bytes is None or self.rss_end_bytes is None:
            return None
        return self.rss_end_bytes - self.rss_start_bytes

    def as_log_extra(self) -> Dict[str, Any]:
        return {
            "step": self.label,
            "duration_seconds": round(self.duration_seconds, 4),
            "rss_delta_bytes": self.rss_delta_bytes,
        }


def _current_rss() -> Optional[int]:
    if psutil is None:
        return None
    try:
        return psutil.Process().memory_info().rss
    except psutil.Error:
        return None


@contextlib.contextmanager
def profile_block(label: str) -> Generator[ProfileStats, None, None]:
    """
    Measure wall-clock duration and RSS movement of a block.

    The stats are filled in when the block exits, including on error.
    """
    stats = ProfileStats(label=label, rss_start_bytes=_current_rss())
    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stats.rss_end_bytes = _current_rss()


__all__ = ["ProfileStats", "profile_block"]
