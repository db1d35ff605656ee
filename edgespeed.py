#!/usr/bin/env python3
"""
edgespeed -- concurrent HTTP speed test against an edge probe endpoint.

Usage::

    python edgespeed.py --serve                     # run the probe endpoint
    python edgespeed.py --url http://host:8080/     # rich dashboard
    python edgespeed.py --simple                    # plain text
    python edgespeed.py --json                      # JSON to stdout
    python edgespeed.py -o result.json              # save to file
    python edgespeed.py --connections 4 --save-config
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, Optional

from rich.console import Console

from client.config import load_config, save_config
from client.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DOWNLOAD_PAYLOAD_SIZE,
    MAX_TRANSFER_SIZE,
    MIN_TRANSFER_SIZE,
)
from client.engine import EngineSettings, MeasurementEngine, SpeedReport
from client.session import SessionPhase
from client.stats import Sample
from ui.dashboard import (
    ProgressDisplay,
    console,
    print_final_results,
    print_header,
    print_latency_details,
    print_speed_result,
)
from ui.logging_setup import configure_logging
from ui.output import create_result_json, format_text_result, save_json

LOGGER = logging.getLogger("edgespeed")

_PHASE_LABELS = {
    SessionPhase.PING: "Latency",
    SessionPhase.DOWNLOAD: "Download",
    SessionPhase.UPLOAD: "Upload",
    SessionPhase.DONE: "Done",
}


# ---------------------------------------------------------------------------
# Settings resolution
# ---------------------------------------------------------------------------

def _resolve(args: argparse.Namespace, config: Dict[str, Any]) -> Dict[str, Any]:
    """Command-line values win over the config file."""
    resolved = dict(config)
    for key in config:
        value = getattr(args, key, None)
        if value is not None:
            resolved[key] = value
    return resolved


def _validate_payload_size(size: int) -> None:
    if not MIN_TRANSFER_SIZE <= size <= MAX_TRANSFER_SIZE:
        raise ValueError(f"Payload size must be between {MIN_TRANSFER_SIZE} and {MAX_TRANSFER_SIZE} bytes")


# ---------------------------------------------------------------------------
# Core test runner
# ---------------------------------------------------------------------------

async def run_speedtest(
    url: str,
    settings: EngineSettings,
    *,
    json_output: bool = False,
    output_file: Optional[str] = None,
    simple: bool = False,
) -> SpeedReport:
    """Execute the full measurement sequence and render it."""

    show_ui = not json_output and not simple
    engine = MeasurementEngine(url, settings)

    if show_ui:
        print_header(url, settings.connections)
        progress = ProgressDisplay()
        engine.on_phase = lambda phase: progress.set_phase(_PHASE_LABELS[phase])
        engine.on_sample = lambda phase, sample: progress.update(sample.progress, sample.speed_mbps)
        progress.start("Starting")
    elif simple:
        def _log_sample(phase: SessionPhase, sample: Sample) -> None:
            LOGGER.debug("%s %.0f%% %.2f Mbps", phase.value, sample.progress, sample.speed_mbps)
        engine.on_sample = _log_sample

    try:
        report = await engine.run()
    finally:
        if show_ui:
            progress.stop()

    if show_ui:
        print_latency_details(report.latency)
        print_speed_result(report.download, "Download Results", "green")
        print_speed_result(report.upload, "Upload Results", "blue")
        print_final_results(
            ping_ms=report.latency_ms,
            download_mbps=report.download_mbps,
            upload_mbps=report.upload_mbps,
            url=url,
            jitter_ms=report.latency.jitter_ms if len(report.latency.pings) > 1 else None,
        )
    elif simple:
        print(format_text_result(report.latency_ms, report.download_mbps, report.upload_mbps, url))

    result_json = create_result_json(report)

    if json_output:
        print(json.dumps(result_json, indent=2))

    if output_file:
        save_json(result_json, output_file)
        if not json_output:
            console.print(f"\n[green]Results saved to:[/green] {output_file}")

    return report


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="edgespeed -- concurrent HTTP speed test",
    )
    # Server mode
    parser.add_argument("--serve", action="store_true", help="Run the probe endpoint instead of a test")
    parser.add_argument("--host", type=str, default=DEFAULT_HOST, help=f"Bind address for --serve (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Port for --serve (default: {DEFAULT_PORT})")
    parser.add_argument("--payload-size", type=int, default=DOWNLOAD_PAYLOAD_SIZE, metavar="BYTES", help="Download payload size served by --serve (default: 16 MiB)")

    # Output modes
    parser.add_argument("--json", "-j", action="store_true", help="Output results as JSON")
    parser.add_argument("--output", "-o", type=str, metavar="FILE", help="Save results to JSON file")
    parser.add_argument("--simple", "-s", action="store_true", help="Simple output mode (no dashboard)")

    # Test parameters (None = take from config file)
    parser.add_argument("--url", type=str, metavar="URL", help="Probe endpoint URL")
    parser.add_argument("--connections", type=int, metavar="N", help="Concurrent connections per phase (default: 6)")
    parser.add_argument("--ping-count", dest="ping_count", type=int, metavar="N", help="Number of ping samples (default: 1)")
    parser.add_argument("--download-duration", dest="download_duration", type=float, metavar="SECS", help="Download phase duration (default: 10)")
    parser.add_argument("--upload-duration", dest="upload_duration", type=float, metavar="SECS", help="Upload phase duration (default: 10)")
    parser.add_argument("--upload-size", dest="upload_chunk_size", type=int, metavar="BYTES", help="Body size of each upload probe (default: 1 MiB)")
    parser.add_argument("--sample-interval", dest="sample_interval", type=float, metavar="SECS", help="Seconds between speed samples (default: 0.2)")
    parser.add_argument("--timeout", dest="request_timeout", type=float, metavar="SECS", help="Per-request timeout (default: 5)")
    parser.add_argument("--save-config", action="store_true", help="Persist the effective test parameters")

    # Diagnostics
    parser.add_argument("--log-level", help="Logging level (default: INFO with --serve, else WARNING)")
    parser.add_argument("--log-file", metavar="FILE", help="Also write logs to a rotating file")

    return parser


def main(argv: Optional[list] = None) -> None:
    args = build_parser().parse_args(argv)

    # JSON goes to stdout untouched; logs and messages go to stderr.
    log_console = Console(stderr=True) if args.json else console
    level = args.log_level or ("INFO" if args.serve else "WARNING")
    configure_logging(level, console=log_console, log_file=args.log_file)

    if args.serve:
        from endpoint.app import run_server

        try:
            _validate_payload_size(args.payload_size)
        except ValueError as exc:
            log_console.print(f"[red]Error: {exc}[/red]")
            sys.exit(1)
        run_server(host=args.host, port=args.port, payload_size=args.payload_size)
        return

    resolved = _resolve(args, load_config())

    try:
        settings = EngineSettings.from_dict(resolved)
        settings.validate()
    except ValueError as exc:
        log_console.print(f"[red]Error: {exc}[/red]")
        sys.exit(1)

    if args.save_config:
        path = save_config(resolved)
        log_console.print(f"[green]Config saved to:[/green] {path}")

    try:
        asyncio.run(
            run_speedtest(
                resolved["url"],
                settings,
                json_output=args.json,
                output_file=args.output,
                simple=args.simple,
            )
        )
    except KeyboardInterrupt:
        log_console.print("\n[yellow]Test cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as exc:
        LOGGER.debug("Run failed", exc_info=True)
        log_console.print(f"\n[red]Error: {exc}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
