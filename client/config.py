"""
User configuration file support.

Reads/writes ``~/.edgespeed/config.json``.  Command-line flags override
whatever is stored here; ``--save-config`` writes the effective values
back.

Supported keys::

    url = "http://127.0.0.1:8080/"   # probe endpoint
    connections = 6                   # concurrent workers per phase
    ping_count = 1
    download_duration = 10.0
    upload_duration = 10.0
    upload_chunk_size = 1048576       # bytes per upload probe
    sample_interval = 0.2
    request_timeout = 5.0
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_DURATION,
    DEFAULT_PING_COUNT,
    DEFAULT_URL,
    REQUEST_TIMEOUT,
    SAMPLE_INTERVAL,
    UPLOAD_CHUNK_SIZE,
)

LOGGER = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(Path.home(), ".edgespeed")
_CONFIG_FILE = "config.json"


def _config_path() -> str:
    return os.path.join(_CONFIG_DIR, _CONFIG_FILE)


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULTS: Dict[str, Any] = {
    "url": DEFAULT_URL,
    "connections": DEFAULT_CONNECTIONS,
    "ping_count": DEFAULT_PING_COUNT,
    "download_duration": DEFAULT_DURATION,
    "upload_duration": DEFAULT_DURATION,
    "upload_chunk_size": UPLOAD_CHUNK_SIZE,
    "sample_interval": SAMPLE_INTERVAL,
    "request_timeout": REQUEST_TIMEOUT,
}


# ---------------------------------------------------------------------------
# Read / Write
# ---------------------------------------------------------------------------

def load_config() -> Dict[str, Any]:
    """Load config from disk, returning defaults for missing keys."""
    path = _config_path()
    config = dict(DEFAULTS)

    if not os.path.isfile(path):
        return config

    try:
        with open(path, encoding="utf-8") as fh:
            user = json.load(fh)
    except (json.JSONDecodeError, IOError) as exc:
        LOGGER.warning("Ignoring unreadable config %s: %s", path, exc)
        return config

    if isinstance(user, dict):
        config.update({k: v for k, v in user.items() if k in DEFAULTS})

    return config


def save_config(config: Dict[str, Any]) -> str:
    """Write *config* to disk.  Returns the file path."""
    path = _config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)

    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config, fh, indent=2, ensure_ascii=False)

    return path
