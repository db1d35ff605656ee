"""Probe endpoint -- the server half of the speed test."""

from .app import PAYLOAD_KEY, create_app, error_middleware, handle_request, run_server
from .payload import shared_payload

__all__ = [
    "PAYLOAD_KEY",
    "create_app",
    "error_middleware",
    "handle_request",
    "run_server",
    "shared_payload",
]
