"""Unit tests for ui.output and ui.dashboard helpers."""

import json
import os
import tempfile
import unittest

from client.engine import EngineSettings, SpeedReport
from client.latency import LatencyResult
from client.stats import Sample
from client.throughput import ThroughputResult
from ui.dashboard import create_histogram
from ui.output import create_result_json, format_text_result, save_json


def _report():
    latency = LatencyResult(pings=[12.0, 14.0], attempts=2)
    latency.calculate()
    download = ThroughputResult(
        direction="download", speed_mbps=123.456, bytes_total=10, duration_ms=10_000,
        samples=[Sample(elapsed_s=10.0, progress=55.0)],
    )
    upload = ThroughputResult(direction="upload", speed_mbps=45.678, bytes_total=5, duration_ms=10_000)
    return SpeedReport(
        endpoint="http://edge/", latency=latency, download=download, upload=upload,
        settings=EngineSettings(),
    )


class TestCreateResultJson(unittest.TestCase):
    def test_headline_figures(self):
        r = create_result_json(_report())
        self.assertEqual(r["ping"], 12.0)
        self.assertEqual(r["jitter"], 2.0)
        self.assertEqual(r["download_mbps"], 123.46)
        self.assertEqual(r["upload_mbps"], 45.68)

    def test_full_report_included(self):
        r = create_result_json(_report())
        for key in ("timestamp", "endpoint", "settings", "latency", "download", "upload"):
            self.assertIn(key, r)
        self.assertEqual(r["download"]["samples"][0]["progress"], 55.0)

    def test_serialisable(self):
        json.dumps(create_result_json(_report()))


class TestLatencyResult(unittest.TestCase):
    def test_packet_loss(self):
        r = LatencyResult(pings=[10.0], attempts=4)
        r.calculate()
        self.assertAlmostEqual(r.packet_loss, 75.0)
        self.assertTrue(r.success)

    def test_no_pings(self):
        r = LatencyResult(attempts=1)
        r.calculate()
        self.assertFalse(r.success)
        self.assertEqual(r.latency_ms, 0.0)


class TestSaveJson(unittest.TestCase):
    def test_roundtrip(self):
        data = {"key": "value", "number": 42}
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            path = f.name
        try:
            save_json(data, path)
            with open(path) as fh:
                loaded = json.load(fh)
            self.assertEqual(loaded, data)
        finally:
            os.unlink(path)

    def test_atomic_no_partial(self):
        with self.assertRaises(IOError):
            save_json({"a": 1}, "/nonexistent/dir/file.json")


class TestFormatTextResult(unittest.TestCase):
    def test_contains_values(self):
        text = format_text_result(ping_ms=15.0, download_mbps=100.0, upload_mbps=50.0, url="http://edge/")
        self.assertIn("15 ms", text)
        self.assertIn("100.00 Mbps", text)
        self.assertIn("50.00 Mbps", text)
        self.assertIn("http://edge/", text)


class TestHistogram(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(create_histogram([]), "No data")

    def test_one_bar_per_value(self):
        self.assertEqual(len(create_histogram([1.0, 5.0, 3.0])), 3)

    def test_extremes(self):
        bars = create_histogram([0.0, 10.0])
        self.assertEqual(bars, "▁█")


if __name__ == "__main__":
    unittest.main()
