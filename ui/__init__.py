"""UI layer -- Rich dashboard, output formatters and logging setup."""

from .dashboard import (
    ProgressDisplay,
    console,
    create_histogram,
    print_final_results,
    print_header,
    print_latency_details,
    print_speed_result,
)
from .logging_setup import configure_logging
from .output import create_result_json, format_text_result, save_json

__all__ = [
    "ProgressDisplay",
    "configure_logging",
    "console",
    "create_histogram",
    "create_result_json",
    "format_text_result",
    "print_final_results",
    "print_header",
    "print_latency_details",
    "print_speed_result",
    "save_json",
]
