"""
Measurement engine.

Runs the three phases in order -- latency, concurrent download,
concurrent upload -- against one probe endpoint and produces a
``SpeedReport``.  A failure inside a worker's request loop never reaches
this level; anything that does (no ping reply, a programming error)
aborts the remaining phases and propagates to the caller.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .api import Endpoint, ProbeClient
from .constants import (
    DEFAULT_CONNECTIONS,
    DEFAULT_DURATION,
    DEFAULT_PING_COUNT,
    MAX_CONNECTIONS,
    MAX_DURATION,
    MAX_PING_COUNT,
    MAX_REQUEST_TIMEOUT,
    MAX_SAMPLE_INTERVAL,
    MAX_TRANSFER_SIZE,
    MIN_CONNECTIONS,
    MIN_DURATION,
    MIN_PING_COUNT,
    MIN_REQUEST_TIMEOUT,
    MIN_SAMPLE_INTERVAL,
    MIN_TRANSFER_SIZE,
    PROGRESS_LATENCY_DONE,
    REQUEST_TIMEOUT,
    SAMPLE_INTERVAL,
    UPLOAD_CHUNK_SIZE,
)
from .download import DownloadTester
from .latency import LatencyResult, LatencyTester
from .session import MeasurementSession, SessionPhase
from .stats import Sample
from .throughput import ThroughputResult
from .upload import UploadTester

LOGGER = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclass
class EngineSettings:
    """Client-side tunables for one run."""

    connections: int = DEFAULT_CONNECTIONS
    ping_count: int = DEFAULT_PING_COUNT
    download_duration: float = DEFAULT_DURATION
    upload_duration: float = DEFAULT_DURATION
    upload_chunk_size: int = UPLOAD_CHUNK_SIZE
    sample_interval: float = SAMPLE_INTERVAL
    request_timeout: float = REQUEST_TIMEOUT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EngineSettings:
        """Build from a config mapping, ignoring keys that are not tunables.

        Values are coerced to the type of the field default, so a
        hand-edited ``"connections": "6"`` still works; a value that cannot
        be coerced raises ``ValueError``.
        """
        values = {}
        for f in fields(cls):
            value = data.get(f.name)
            if value is None:
                continue
            kind = type(f.default)
            try:
                values[f.name] = kind(value)
            except (TypeError, ValueError, OverflowError):
                raise ValueError(f"Invalid value for {f.name}: {value!r}") from None
        return cls(**values)

    def validate(self) -> None:
        """Raise ``ValueError`` if any parameter is out of range."""
        if not MIN_CONNECTIONS <= self.connections <= MAX_CONNECTIONS:
            raise ValueError(f"Connections must be between {MIN_CONNECTIONS} and {MAX_CONNECTIONS}")
        if not MIN_PING_COUNT <= self.ping_count <= MAX_PING_COUNT:
            raise ValueError(f"Ping count must be between {MIN_PING_COUNT} and {MAX_PING_COUNT}")
        if not MIN_DURATION <= self.download_duration <= MAX_DURATION:
            raise ValueError(f"Download duration must be between {MIN_DURATION} and {MAX_DURATION} s")
        if not MIN_DURATION <= self.upload_duration <= MAX_DURATION:
            raise ValueError(f"Upload duration must be between {MIN_DURATION} and {MAX_DURATION} s")
        if not MIN_TRANSFER_SIZE <= self.upload_chunk_size <= MAX_TRANSFER_SIZE:
            raise ValueError(f"Upload size must be between {MIN_TRANSFER_SIZE} and {MAX_TRANSFER_SIZE} bytes")
        if not MIN_SAMPLE_INTERVAL <= self.sample_interval <= MAX_SAMPLE_INTERVAL:
            raise ValueError(
                f"Sample interval must be between {MIN_SAMPLE_INTERVAL} and {MAX_SAMPLE_INTERVAL} s"
            )
        if not MIN_REQUEST_TIMEOUT <= self.request_timeout <= MAX_REQUEST_TIMEOUT:
            raise ValueError(
                f"Request timeout must be between {MIN_REQUEST_TIMEOUT} and {MAX_REQUEST_TIMEOUT} s"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------

@dataclass
class SpeedReport:
    """Final, stable result of one run."""

    endpoint: str
    latency: LatencyResult
    download: ThroughputResult
    upload: ThroughputResult
    settings: EngineSettings = field(default_factory=EngineSettings)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def latency_ms(self) -> float:
        return self.latency.latency_ms

    @property
    def download_mbps(self) -> float:
        return self.download.speed_mbps

    @property
    def upload_mbps(self) -> float:
        return self.upload.speed_mbps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "endpoint": self.endpoint,
            "settings": self.settings.to_dict(),
            "latency": self.latency.to_dict(),
            "download": self.download.to_dict(),
            "upload": self.upload.to_dict(),
        }


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class MeasurementEngine:
    """Drives latency -> download -> upload against one endpoint."""

    def __init__(
        self,
        base_url: str,
        settings: Optional[EngineSettings] = None,
    ) -> None:
        self.endpoint = Endpoint(base_url)
        self.settings = settings or EngineSettings()
        self.session = MeasurementSession()
        self.on_phase: Optional[Callable[[SessionPhase], None]] = None
        self.on_sample: Optional[Callable[[SessionPhase, Sample], None]] = None

    @property
    def report(self) -> Optional[SpeedReport]:
        return self.session.report

    # -- Callbacks ----------------------------------------------------------

    def _enter(self, phase: SessionPhase) -> None:
        self.session.phase = phase
        LOGGER.debug("Entering %s phase", phase.value)
        if self.on_phase:
            self.on_phase(phase)

    def _emit(self, phase: SessionPhase, sample: Sample) -> None:
        if self.on_sample:
            self.on_sample(phase, sample)

    def _forward(self, phase: SessionPhase) -> Callable[[Sample], None]:
        return lambda sample: self._emit(phase, sample)

    # -- Run ----------------------------------------------------------------

    async def run(self) -> SpeedReport:
        """Execute a full run; a fresh session is started every time."""
        self.settings.validate()
        self.session.reset()
        s = self.settings

        try:
            async with ProbeClient(
                self.endpoint,
                connections=s.connections,
                timeout=s.request_timeout,
            ) as probe:
                self._enter(SessionPhase.PING)
                latency = await LatencyTester(ping_count=s.ping_count).test(probe)
                self._emit(SessionPhase.PING, Sample(progress=PROGRESS_LATENCY_DONE))

                self._enter(SessionPhase.DOWNLOAD)
                dl_tester = DownloadTester(
                    duration_seconds=s.download_duration,
                    sample_interval=s.sample_interval,
                )
                dl_tester.on_sample = self._forward(SessionPhase.DOWNLOAD)
                download = await dl_tester.test(
                    probe, connections=s.connections, control=self.session.download,
                )

                self._enter(SessionPhase.UPLOAD)
                ul_tester = UploadTester(
                    duration_seconds=s.upload_duration,
                    sample_interval=s.sample_interval,
                    chunk_size=s.upload_chunk_size,
                )
                ul_tester.on_sample = self._forward(SessionPhase.UPLOAD)
                upload = await ul_tester.test(
                    probe, connections=s.connections, control=self.session.upload,
                )
        except Exception as exc:
            LOGGER.error("Measurement aborted during %s phase: %s", self.session.phase.value, exc)
            raise

        report = SpeedReport(
            endpoint=self.endpoint.base_url,
            latency=latency,
            download=download,
            upload=upload,
            settings=s,
        )
        self.session.report = report
        self._enter(SessionPhase.DONE)
        return report
