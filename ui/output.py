"""
Output formatting -- JSON export and plain text.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict


def create_result_json(report) -> Dict[str, Any]:  # noqa: ANN001 (SpeedReport)
    """Full report plus the three headline figures at the top level."""
    result: Dict[str, Any] = {
        "ping": round(report.latency_ms, 1),
        "jitter": round(report.latency.jitter_ms, 3),
        "download_mbps": round(report.download_mbps, 2),
        "upload_mbps": round(report.upload_mbps, 2),
    }
    result.update(report.to_dict())
    return result


def save_json(result: Dict[str, Any], filepath: str) -> None:
    """Write *result* to *filepath* atomically (write-tmp then rename)."""
    dir_path = os.path.dirname(filepath) or "."
    tmp = os.path.join(dir_path, f".tmp_{os.path.basename(filepath)}")

    try:
        with open(tmp, "w", encoding="utf-8") as fh:
            json.dump(result, fh, indent=2, ensure_ascii=False)
        os.replace(tmp, filepath)
    except (IOError, OSError) as exc:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise IOError(f"Failed to save JSON to {filepath}: {exc}") from exc


def format_text_result(
    ping_ms: float,
    download_mbps: float,
    upload_mbps: float,
    url: str,
) -> str:
    sep = "=" * 50
    mid = "-" * 50
    return (
        f"{sep}\n"
        f"Speed Test Results\n"
        f"{sep}\n"
        f"Endpoint: {url}\n"
        f"{mid}\n"
        f"Ping: {ping_ms:.0f} ms\n"
        f"Download: {download_mbps:.2f} Mbps\n"
        f"Upload: {upload_mbps:.2f} Mbps\n"
        f"{sep}"
    )
