"""
Upload speed test module.

Every worker POSTs the same constant body to ``?mode=up`` and, once the
endpoint has confirmed it, credits the body size to the shared counter.
"""
from __future__ import annotations

import logging

from .api import ProbeClient
from .constants import (
    DEFAULT_DURATION,
    PROGRESS_DOWNLOAD_DONE,
    PROGRESS_UPLOAD_DONE,
    SAMPLE_INTERVAL,
    UPLOAD_CHUNK_SIZE,
    UPLOAD_FILL_BYTE,
)
from .throughput import ThroughputResult, ThroughputTester

LOGGER = logging.getLogger(__name__)

UploadResult = ThroughputResult


class UploadTester(ThroughputTester):
    """Parallel upload speed tester."""

    direction = "upload"
    progress_range = (PROGRESS_DOWNLOAD_DONE, PROGRESS_UPLOAD_DONE)

    def __init__(
        self,
        duration_seconds: float = DEFAULT_DURATION,
        sample_interval: float = SAMPLE_INTERVAL,
        chunk_size: int = UPLOAD_CHUNK_SIZE,
    ) -> None:
        super().__init__(duration_seconds=duration_seconds, sample_interval=sample_interval)
        # Built once; every request reuses the same immutable body.
        self._body = bytes([UPLOAD_FILL_BYTE]) * chunk_size

    @property
    def chunk_size(self) -> int:
        return len(self._body)

    async def _probe(self, probe: ProbeClient) -> int:
        received = await probe.upload(self._body)
        if received != len(self._body):
            LOGGER.debug("Endpoint confirmed %d of %d bytes", received, len(self._body))
        return len(self._body)
