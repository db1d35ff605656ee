"""
Download speed test module.

Every worker repeatedly fetches ``GET ?mode=down&t=<nonce>`` and counts the
full body.  The endpoint always answers with the same fixed-size buffer,
so each completed request adds exactly one payload to the counter.
"""
from __future__ import annotations

from .api import ProbeClient
from .constants import PROGRESS_DOWNLOAD_DONE, PROGRESS_LATENCY_DONE
from .throughput import ThroughputResult, ThroughputTester

DownloadResult = ThroughputResult


class DownloadTester(ThroughputTester):
    """Parallel download speed tester."""

    direction = "download"
    progress_range = (PROGRESS_LATENCY_DONE, PROGRESS_DOWNLOAD_DONE)

    async def _probe(self, probe: ProbeClient) -> int:
        return await probe.download()
