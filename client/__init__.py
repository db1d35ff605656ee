"""Speed test client library -- probes, measurement phases, and statistics."""

from .api import Endpoint, ProbeClient, ProbeError, cache_buster
from .download import DownloadResult, DownloadTester
from .engine import EngineSettings, MeasurementEngine, SpeedReport
from .latency import LatencyResult, LatencyTester
from .session import MeasurementSession, PhaseControl, PhaseState, SessionPhase
from .stats import (
    ConnectionStats,
    LatencyStats,
    Sample,
    calculate_jitter,
    compute_speed_mbps,
    format_bytes,
    format_latency,
    format_speed,
    phase_progress,
)
from .throughput import ThroughputResult, ThroughputTester
from .upload import UploadResult, UploadTester

__all__ = [
    "ConnectionStats",
    "DownloadResult",
    "DownloadTester",
    "Endpoint",
    "EngineSettings",
    "LatencyResult",
    "LatencyStats",
    "LatencyTester",
    "MeasurementEngine",
    "MeasurementSession",
    "PhaseControl",
    "PhaseState",
    "ProbeClient",
    "ProbeError",
    "Sample",
    "SessionPhase",
    "SpeedReport",
    "ThroughputResult",
    "ThroughputTester",
    "UploadResult",
    "UploadTester",
    "cache_buster",
    "calculate_jitter",
    "compute_speed_mbps",
    "format_bytes",
    "format_latency",
    "format_speed",
    "phase_progress",
]
