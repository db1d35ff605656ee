"""
Measurement session state.

A session owns one ``PhaseControl`` per throughput phase.  Workers of a
phase share exactly one control: they add to its byte counter and poll its
stop flag.  Both are lock-guarded so the counter stays exact even if
probes are ever driven from threads rather than event-loop tasks.
"""
from __future__ import annotations

import enum
import threading
import time
from typing import Optional


class SessionPhase(str, enum.Enum):
    IDLE = "idle"
    PING = "ping"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    DONE = "done"


class PhaseState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class PhaseControl:
    """Shared byte counter and stop flag for the workers of one phase."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bytes = 0
        self._requests = 0
        self._failures = 0
        self._state = PhaseState.IDLE
        self.started_at: Optional[float] = None
        self.stopped_at: Optional[float] = None

    # -- Counter ------------------------------------------------------------

    def add_bytes(self, n: int) -> int:
        with self._lock:
            self._bytes += n
            self._requests += 1
            return self._bytes

    def add_failure(self) -> None:
        with self._lock:
            self._failures += 1

    @property
    def bytes_total(self) -> int:
        with self._lock:
            return self._bytes

    @property
    def requests(self) -> int:
        with self._lock:
            return self._requests

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    # -- Stop flag ----------------------------------------------------------

    @property
    def state(self) -> PhaseState:
        with self._lock:
            return self._state

    @property
    def running(self) -> bool:
        """True until a stop has been requested."""
        with self._lock:
            return self._state in (PhaseState.IDLE, PhaseState.RUNNING)

    def start(self) -> None:
        with self._lock:
            if self._state is not PhaseState.IDLE:
                raise RuntimeError(f"Phase already {self._state.value}")
            self._state = PhaseState.RUNNING
            self.started_at = time.perf_counter()

    def elapsed(self, now: Optional[float] = None) -> float:
        if self.started_at is None:
            return 0.0
        end = self.stopped_at if self.stopped_at is not None else now
        if end is None:
            end = time.perf_counter()
        return max(end - self.started_at, 0.0)

    def stop(self, now: Optional[float] = None) -> int:
        """Flip the flag and return the counter value at the moment of stop."""
        with self._lock:
            if self._state in (PhaseState.STOPPING, PhaseState.STOPPED):
                return self._bytes
            self._state = PhaseState.STOPPING
            self.stopped_at = now if now is not None else time.perf_counter()
            snapshot = self._bytes
            self._state = PhaseState.STOPPED
            return snapshot


class MeasurementSession:
    """Ephemeral client-side state for one measurement run."""

    def __init__(self) -> None:
        self.phase = SessionPhase.IDLE
        self.download = PhaseControl()
        self.upload = PhaseControl()
        self.report = None

    def reset(self) -> None:
        """Start over: fresh counters, flags back to running, no report."""
        self.phase = SessionPhase.IDLE
        self.download = PhaseControl()
        self.upload = PhaseControl()
        self.report = None
