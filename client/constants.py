"""
Client constants.

Centralises magic numbers, default headers, and tunables so they live in
exactly one place.  Protocol names shared with the probe endpoint come
from ``endpoint.constants``.
"""

from endpoint.constants import (  # noqa: F401  re-exported
    DEFAULT_HOST,
    DEFAULT_PORT,
    DOWNLOAD_PAYLOAD_SIZE,
    MIB,
    MODE_DOWN,
    MODE_PING,
    MODE_UP,
    NO_CACHE_HEADERS,
    PAYLOAD_FILL_BYTE,
    READ_CHUNK_SIZE,
)

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = "edgespeed/1.0 (+aiohttp)"

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    # Compressed bodies would make the byte counter lie about the wire.
    "Accept-Encoding": "identity",
}

# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

DEFAULT_URL = "http://127.0.0.1:8080/"

# ---------------------------------------------------------------------------
# Connection limits
# ---------------------------------------------------------------------------

MIN_CONNECTIONS = 1
MAX_CONNECTIONS = 32
DEFAULT_CONNECTIONS = 6

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

DEFAULT_PING_COUNT = 1
MIN_PING_COUNT = 1
MAX_PING_COUNT = 100

DEFAULT_DURATION = 10.0          # seconds per throughput phase
MIN_DURATION = 1.0
MAX_DURATION = 300.0

SAMPLE_INTERVAL = 0.2            # 200 ms between speed samples
MIN_SAMPLE_INTERVAL = 0.01
MAX_SAMPLE_INTERVAL = 5.0

REQUEST_TIMEOUT = 5.0            # per-request ceiling, seconds
MIN_REQUEST_TIMEOUT = 0.1
MAX_REQUEST_TIMEOUT = 120.0

# ---------------------------------------------------------------------------
# Data transfer
# ---------------------------------------------------------------------------

UPLOAD_CHUNK_SIZE = 1 * MIB       # body of every upload probe
UPLOAD_FILL_BYTE = 0x01
MIN_TRANSFER_SIZE = 1
MAX_TRANSFER_SIZE = 256 * MIB

# ---------------------------------------------------------------------------
# Progress marks (percent of the whole run)
# ---------------------------------------------------------------------------

PROGRESS_LATENCY_DONE = 10.0
PROGRESS_DOWNLOAD_DONE = 55.0
PROGRESS_UPLOAD_DONE = 100.0
