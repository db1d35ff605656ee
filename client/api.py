"""
Probe endpoint client.

Builds cache-busted probe URLs and issues the three probe requests.  All
HTTP work goes through a single ``aiohttp.ClientSession`` managed via the
async-context-manager protocol (``async with ProbeClient(ep) as probe: ...``).
"""
from __future__ import annotations

import itertools
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from .constants import (
    COMMON_HEADERS,
    DEFAULT_CONNECTIONS,
    MODE_DOWN,
    MODE_PING,
    MODE_UP,
    READ_CHUNK_SIZE,
    REQUEST_TIMEOUT,
)

_SEQUENCE = itertools.count()


class ProbeError(Exception):
    """A probe failed in a way the current phase cannot recover from."""


def cache_buster() -> str:
    """Unique per call: millisecond clock, process sequence, random tail."""
    return f"{int(time.time() * 1000)}{next(_SEQUENCE):06d}{random.getrandbits(16):05d}"


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@dataclass
class Endpoint:
    """A probe endpoint reachable at ``base_url``."""

    base_url: str

    def _url(self, mode: str) -> str:
        sep = "&" if "?" in self.base_url else "?"
        return f"{self.base_url}{sep}mode={mode}&t={cache_buster()}"

    def ping_url(self) -> str:
        return self._url(MODE_PING)

    def download_url(self) -> str:
        return self._url(MODE_DOWN)

    def upload_url(self) -> str:
        return self._url(MODE_UP)

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.base_url}


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class ProbeClient:
    """Async context-manager issuing ping / download / upload probes."""

    def __init__(
        self,
        endpoint: Endpoint,
        connections: int = DEFAULT_CONNECTIONS,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint
        self.connections = connections
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    # -- Context manager ----------------------------------------------------

    async def __aenter__(self) -> ProbeClient:
        connector = aiohttp.TCPConnector(
            limit=self.connections,
            limit_per_host=self.connections,
            force_close=False,
        )
        self._session = aiohttp.ClientSession(
            headers=COMMON_HEADERS,
            connector=connector,
            # Stall timeout: one payload may legitimately take longer than this.
            timeout=aiohttp.ClientTimeout(total=None, connect=self.timeout, sock_read=self.timeout),
            auto_decompress=False,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._session:
            await self._session.close()
            self._session = None

    # -- Internal helpers ---------------------------------------------------

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            raise RuntimeError(
                "ProbeClient must be used as an async context manager "
                "(async with ProbeClient(endpoint) as probe: ...)"
            )
        return self._session

    # -- Probes -------------------------------------------------------------

    async def ping(self) -> float:
        """Round-trip time in milliseconds, send to full receipt."""
        session = self._ensure_session()
        url = self.endpoint.ping_url()

        start = time.perf_counter()
        async with session.get(url) as resp:
            resp.raise_for_status()
            await resp.read()
        return (time.perf_counter() - start) * 1000

    async def download(self) -> int:
        """Fetch one download payload and return its size in bytes."""
        session = self._ensure_session()

        received = 0
        async with session.get(self.endpoint.download_url()) as resp:
            resp.raise_for_status()
            async for chunk in resp.content.iter_chunked(READ_CHUNK_SIZE):
                received += len(chunk)
        return received

    async def upload(self, body: bytes) -> int:
        """POST *body* and return the byte count the endpoint confirmed."""
        session = self._ensure_session()

        async with session.post(
            self.endpoint.upload_url(),
            data=body,
            headers={"Content-Type": "application/octet-stream"},
        ) as resp:
            resp.raise_for_status()
            try:
                data = await resp.json(content_type=None)
            except ValueError as exc:
                raise aiohttp.ClientPayloadError(f"Malformed upload confirmation: {exc}") from exc

        # A redirected or proxied reply can be any 200 body.
        received = data.get("received") if isinstance(data, dict) else None
        if not isinstance(received, int):
            raise aiohttp.ClientPayloadError(f"Unexpected upload confirmation: {data!r}")
        return received
