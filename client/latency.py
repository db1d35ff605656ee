"""
HTTP latency measurement against the probe endpoint.

Each sample is one ``GET ?mode=ping&t=<nonce>``; the nonce keeps every
request distinct so no cache can answer in the endpoint's place.  The
reported latency is the best (minimum) round trip.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

import aiohttp

from .api import ProbeClient, ProbeError
from .constants import DEFAULT_PING_COUNT
from .stats import LatencyStats, calculate_jitter

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass
class LatencyResult:
    """Aggregated latency data for one endpoint."""

    pings: List[float] = field(default_factory=list)
    attempts: int = 0
    latency_ms: float = 0.0     # best (min) latency
    jitter_ms: float = 0.0
    packet_loss: float = 0.0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return bool(self.pings)

    def calculate(self) -> None:
        """Derive min-latency, jitter and loss from collected pings."""
        if self.pings:
            self.latency_ms = min(self.pings)
            self.jitter_ms = calculate_jitter(self.pings)
        if self.attempts > 0:
            self.packet_loss = (1 - len(self.pings) / self.attempts) * 100

    def stats(self) -> LatencyStats:
        ls = LatencyStats(samples=list(self.pings))
        ls.calculate()
        return ls

    def to_dict(self) -> dict:
        return {
            "pings": [round(p, 1) for p in self.pings],
            "latency_ms": round(self.latency_ms, 1),
            "jitter_ms": round(self.jitter_ms, 3),
            "packet_loss": round(self.packet_loss, 1),
            "success": self.success,
        }


# ---------------------------------------------------------------------------
# Tester
# ---------------------------------------------------------------------------

class LatencyTester:
    """Measure ping latency with ``ping_count`` sequential probes."""

    def __init__(self, ping_count: int = DEFAULT_PING_COUNT) -> None:
        self.ping_count = ping_count

    async def test(self, probe: ProbeClient) -> LatencyResult:
        result = LatencyResult()

        for _ in range(self.ping_count):
            result.attempts += 1
            try:
                rtt = await probe.ping()
            except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
                LOGGER.debug("Ping failed: %s", exc)
                result.error = str(exc) or exc.__class__.__name__
                continue
            result.pings.append(max(rtt, 0.0))

        result.calculate()

        if not result.success:
            raise ProbeError(f"Endpoint did not answer ping: {result.error}")

        LOGGER.info(
            "Latency %.1f ms (jitter %.2f ms, %d/%d replies)",
            result.latency_ms, result.jitter_ms, len(result.pings), result.attempts,
        )
        return result
