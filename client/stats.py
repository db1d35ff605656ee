"""
Network measurement statistics.

Pure functions and lightweight dataclasses -- no I/O, no side effects.
Everything here is deterministic and easy to unit-test.
"""
from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import List

from .constants import MIB


# ---------------------------------------------------------------------------
# Dataclasses
# ---------------------------------------------------------------------------

@dataclass
class Sample:
    """One periodic snapshot of a running throughput phase."""

    elapsed_s: float = 0.0
    bytes_total: int = 0
    speed_mbps: float = 0.0
    progress: float = 0.0

    def to_dict(self) -> dict:
        return {
            "elapsed_s": round(self.elapsed_s, 3),
            "bytes": self.bytes_total,
            "speed_mbps": round(self.speed_mbps, 2),
            "progress": round(self.progress, 2),
        }


@dataclass
class LatencyStats:
    """Aggregated latency statistics computed from a list of samples."""

    samples: List[float] = field(default_factory=list)
    min: float = 0.0
    max: float = 0.0
    mean: float = 0.0
    median: float = 0.0
    jitter: float = 0.0
    count: int = 0

    def calculate(self) -> None:
        if not self.samples:
            return
        self.count = len(self.samples)
        self.min = min(self.samples)
        self.max = max(self.samples)
        self.mean = statistics.mean(self.samples)
        self.median = statistics.median(self.samples)
        self.jitter = calculate_jitter(self.samples)

    def to_dict(self) -> dict:
        return {
            "samples": [round(s, 3) for s in self.samples],
            "min": round(self.min, 3),
            "max": round(self.max, 3),
            "mean": round(self.mean, 3),
            "median": round(self.median, 3),
            "jitter": round(self.jitter, 3),
            "count": self.count,
        }


@dataclass
class ConnectionStats:
    """Per-worker statistics collected by download / upload workers."""

    id: int = 0
    bytes_transferred: int = 0
    requests: int = 0
    failures: int = 0
    duration_ms: float = 0.0
    speed_mbps: float = 0.0

    def calculate(self) -> None:
        self.speed_mbps = compute_speed_mbps(self.bytes_transferred, self.duration_ms / 1000)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bytes": self.bytes_transferred,
            "requests": self.requests,
            "failures": self.failures,
            "duration_ms": round(self.duration_ms, 2),
            "speed_mbps": round(self.speed_mbps, 2),
        }


# ---------------------------------------------------------------------------
# Pure helper functions
# ---------------------------------------------------------------------------

def compute_speed_mbps(bytes_total: int, elapsed_s: float) -> float:
    """Megabits per second on a 1024*1024 base; zero until time has passed."""
    if elapsed_s <= 0:
        return 0.0
    return (bytes_total * 8) / MIB / elapsed_s


def phase_progress(elapsed_s: float, duration_s: float, lower: float, upper: float) -> float:
    """Map elapsed time into the ``[lower, upper]`` slice of overall progress."""
    if duration_s <= 0:
        return upper
    fraction = min(max(elapsed_s / duration_s, 0.0), 1.0)
    return lower + fraction * (upper - lower)


def calculate_jitter(samples: List[float]) -> float:
    """Mean absolute difference between consecutive samples."""
    if len(samples) < 2:
        return 0.0
    diffs = [abs(samples[i] - samples[i - 1]) for i in range(1, len(samples))]
    return statistics.mean(diffs)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_speed(speed_mbps: float) -> str:
    """Human-readable speed string."""
    if speed_mbps >= 1000:
        return f"{speed_mbps / 1000:.2f} Gbps"
    return f"{speed_mbps:.2f} Mbps"


def format_latency(latency_ms: float) -> str:
    """Human-readable latency string."""
    if latency_ms >= 1000:
        return f"{latency_ms / 1000:.2f} s"
    return f"{latency_ms:.0f} ms"


def format_bytes(n: int) -> str:
    if n >= 1024 * MIB:
        return f"{n / (1024 * MIB):.2f} GiB"
    return f"{n / MIB:.1f} MiB"
