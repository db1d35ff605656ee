"""Process-wide download payload."""
from __future__ import annotations

import threading
from typing import Dict

from .constants import DOWNLOAD_PAYLOAD_SIZE, PAYLOAD_FILL_BYTE

_BUFFERS: Dict[int, bytes] = {}
_LOCK = threading.Lock()


def shared_payload(size: int = DOWNLOAD_PAYLOAD_SIZE) -> bytes:
    """
    Return the immutable payload of *size* bytes, building it on first use.

    Every caller asking for the same size gets the very same object, so
    download probes never allocate per request.
    """
    if size < 0:
        raise ValueError("Payload size cannot be negative")

    with _LOCK:
        buf = _BUFFERS.get(size)
        if buf is None:
            buf = bytes([PAYLOAD_FILL_BYTE]) * size
            _BUFFERS[size] = buf
        return buf
