"""
Wire-level constants of the probe protocol.

Both halves of the speed test speak this protocol; the client package
re-exports these names.
"""

NO_CACHE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
}

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

MODE_PING = "ping"
MODE_DOWN = "down"
MODE_UP = "up"

MIB = 1024 * 1024

DOWNLOAD_PAYLOAD_SIZE = 16 * MIB  # served verbatim by every download probe
PAYLOAD_FILL_BYTE = 0x58          # 'X'

READ_CHUNK_SIZE = 256 * 1024      # body read granularity, both sides
