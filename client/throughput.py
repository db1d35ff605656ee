"""
Concurrent throughput measurement.

``ThroughputTester`` runs N worker coroutines against the probe endpoint
for a fixed time window.  Each worker issues one probe, adds the bytes to
the phase's shared counter and immediately issues the next one.  A
sampler wakes every ``sample_interval`` seconds, reports the running
speed and, once the window has elapsed, flips the stop flag.

The final figure is taken from the counter at the instant of stop, so it
does not depend on how long the workers take to finish their in-flight
request.  Subclasses only say what one probe is.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import aiohttp

from .api import ProbeClient
from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_DURATION,
    MAX_CONNECTIONS,
    MIN_CONNECTIONS,
    SAMPLE_INTERVAL,
)
from .session import PhaseControl
from .stats import ConnectionStats, Sample, compute_speed_mbps, phase_progress

LOGGER = logging.getLogger(__name__)

# Faults a worker recovers from by issuing a fresh request.
RETRYABLE_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class ThroughputResult:
    """Outcome of one download or upload phase."""

    direction: str = ""
    speed_mbps: float = 0.0
    bytes_total: int = 0
    late_bytes: int = 0
    duration_ms: float = 0.0
    requests: int = 0
    failures: int = 0
    connections: List[ConnectionStats] = field(default_factory=list)
    samples: List[Sample] = field(default_factory=list)

    def calculate(self) -> None:
        """Derive speed from the stop-time byte count and window length."""
        self.speed_mbps = compute_speed_mbps(self.bytes_total, self.duration_ms / 1000)

    def to_dict(self) -> dict:
        return {
            "direction": self.direction,
            "speed_mbps": round(self.speed_mbps, 2),
            "bytes_total": self.bytes_total,
            "late_bytes": self.late_bytes,
            "duration_ms": round(self.duration_ms, 2),
            "requests": self.requests,
            "failures": self.failures,
            "connections": [c.to_dict() for c in self.connections],
            "samples": [s.to_dict() for s in self.samples],
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class ThroughputTester:
    """Fixed-concurrency, fixed-duration throughput phase."""

    direction = "throughput"
    progress_range: Tuple[float, float] = (0.0, 100.0)

    def __init__(
        self,
        duration_seconds: float = DEFAULT_DURATION,
        sample_interval: float = SAMPLE_INTERVAL,
    ) -> None:
        self.duration_seconds = duration_seconds
        self.sample_interval = sample_interval
        self.on_sample: Optional[Callable[[Sample], None]] = None

    async def _probe(self, probe: ProbeClient) -> int:
        """Issue one probe and return the number of bytes it moved."""
        raise NotImplementedError

    # -- Public -------------------------------------------------------------

    async def test(
        self,
        probe: ProbeClient,
        connections: int = DEFAULT_CONNECTIONS,
        control: Optional[PhaseControl] = None,
    ) -> ThroughputResult:
        connections = max(MIN_CONNECTIONS, min(connections, MAX_CONNECTIONS))
        control = control if control is not None else PhaseControl()

        result = ThroughputResult(direction=self.direction)
        samples: List[Sample] = []

        LOGGER.info(
            "Starting %s phase: %d connections, %.1f s",
            self.direction, connections, self.duration_seconds,
        )

        control.start()
        workers = [
            asyncio.create_task(self._worker(probe, control, ConnectionStats(id=i), result))
            for i in range(connections)
        ]

        try:
            bytes_at_stop, elapsed = await self._sample_until_stopped(control, samples)
        except BaseException:
            control.stop()
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

        # Workers see the flag on their own and finish their in-flight probe.
        outcomes = await asyncio.gather(*workers, return_exceptions=True)
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                raise outcome

        result.bytes_total = bytes_at_stop
        result.late_bytes = control.bytes_total - bytes_at_stop
        result.duration_ms = elapsed * 1000
        result.requests = control.requests
        result.failures = control.failures
        result.samples = samples
        result.connections.sort(key=lambda c: c.id)
        result.calculate()

        LOGGER.info(
            "%s phase done: %.2f Mbps over %.2f s (%d requests, %d failed)",
            self.direction.capitalize(), result.speed_mbps, elapsed,
            result.requests, result.failures,
        )
        return result

    # -- Worker -------------------------------------------------------------

    async def _worker(
        self,
        probe: ProbeClient,
        control: PhaseControl,
        stats: ConnectionStats,
        result: ThroughputResult,
    ) -> None:
        result.connections.append(stats)
        t0 = time.perf_counter()

        try:
            while control.running:
                try:
                    n = await self._probe(probe)
                except RETRYABLE_ERRORS as exc:
                    control.add_failure()
                    stats.failures += 1
                    LOGGER.debug("%s worker %d: probe failed: %r", self.direction, stats.id, exc)
                    await asyncio.sleep(0)
                    continue

                control.add_bytes(n)
                stats.bytes_transferred += n
                stats.requests += 1
        except Exception:
            # Not a transport fault; end the phase for everyone.
            control.stop()
            raise
        finally:
            stats.duration_ms = (time.perf_counter() - t0) * 1000
            stats.calculate()

    # -- Sampler ------------------------------------------------------------

    def _sample(self, elapsed: float, bytes_total: int) -> Sample:
        lower, upper = self.progress_range
        return Sample(
            elapsed_s=elapsed,
            bytes_total=bytes_total,
            speed_mbps=compute_speed_mbps(bytes_total, elapsed),
            progress=phase_progress(elapsed, self.duration_seconds, lower, upper),
        )

    def _emit(self, sample: Sample, samples: List[Sample]) -> None:
        samples.append(sample)
        if self.on_sample:
            self.on_sample(sample)

    async def _sample_until_stopped(
        self,
        control: PhaseControl,
        samples: List[Sample],
    ) -> Tuple[int, float]:
        """Tick until the window closes; return (bytes, elapsed) at stop."""
        while control.running:
            remaining = self.duration_seconds - control.elapsed()
            await asyncio.sleep(min(self.sample_interval, max(remaining, 0.0)))

            now = time.perf_counter()
            elapsed = control.elapsed(now)

            if elapsed >= self.duration_seconds:
                bytes_at_stop = control.stop(now)
                self._emit(self._sample(elapsed, bytes_at_stop), samples)
                return bytes_at_stop, elapsed

            self._emit(self._sample(elapsed, control.bytes_total), samples)

        # Stopped early by a failing worker.
        return control.bytes_total, control.elapsed()
