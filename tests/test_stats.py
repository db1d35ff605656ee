"""Unit tests for client.stats -- pure functions and dataclasses."""

import unittest

from client.constants import MIB
from client.stats import (
    ConnectionStats,
    LatencyStats,
    Sample,
    calculate_jitter,
    compute_speed_mbps,
    format_bytes,
    format_latency,
    format_speed,
    phase_progress,
)


class TestComputeSpeed(unittest.TestCase):
    def test_zero_elapsed_is_zero(self):
        self.assertEqual(compute_speed_mbps(16 * MIB, 0.0), 0.0)

    def test_negative_elapsed_is_zero(self):
        self.assertEqual(compute_speed_mbps(16 * MIB, -1.0), 0.0)

    def test_mebibit_base(self):
        # 1 MiB in 1 s = 8 Mbps on a 1024*1024 base
        self.assertAlmostEqual(compute_speed_mbps(MIB, 1.0), 8.0)

    def test_ten_second_window(self):
        # 6 workers x 10 payloads of 16 MiB over 10 s
        self.assertAlmostEqual(compute_speed_mbps(6 * 10 * 16 * MIB, 10.0), 768.0)

    def test_monotonic_in_bytes(self):
        speeds = [compute_speed_mbps(n, 2.5) for n in range(0, 10 * MIB, MIB // 3)]
        self.assertEqual(speeds, sorted(speeds))

    def test_zero_bytes(self):
        self.assertEqual(compute_speed_mbps(0, 3.0), 0.0)


class TestPhaseProgress(unittest.TestCase):
    def test_start_is_lower_bound(self):
        self.assertEqual(phase_progress(0.0, 10.0, 10.0, 55.0), 10.0)

    def test_midpoint(self):
        self.assertAlmostEqual(phase_progress(5.0, 10.0, 10.0, 55.0), 32.5)

    def test_end_is_exact_upper_bound(self):
        self.assertEqual(phase_progress(10.0, 10.0, 10.0, 55.0), 55.0)
        self.assertEqual(phase_progress(10.0, 10.0, 55.0, 100.0), 100.0)

    def test_overshoot_is_clamped(self):
        self.assertEqual(phase_progress(12.3, 10.0, 55.0, 100.0), 100.0)

    def test_zero_duration(self):
        self.assertEqual(phase_progress(0.0, 0.0, 10.0, 55.0), 55.0)


class TestCalculateJitter(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(calculate_jitter([]), 0.0)

    def test_single(self):
        self.assertEqual(calculate_jitter([10.0]), 0.0)

    def test_constant(self):
        self.assertAlmostEqual(calculate_jitter([5.0, 5.0, 5.0]), 0.0)

    def test_varying(self):
        # |15-10| + |10-15| + |20-10| = 20 / 3
        self.assertAlmostEqual(calculate_jitter([10.0, 15.0, 10.0, 20.0]), 20.0 / 3, places=3)


class TestFormatting(unittest.TestCase):
    def test_speed_mbps(self):
        self.assertEqual(format_speed(50.0), "50.00 Mbps")

    def test_speed_gbps(self):
        self.assertEqual(format_speed(1500.0), "1.50 Gbps")

    def test_latency_ms(self):
        self.assertEqual(format_latency(25.3), "25 ms")

    def test_latency_seconds(self):
        self.assertEqual(format_latency(1500.0), "1.50 s")

    def test_bytes(self):
        self.assertEqual(format_bytes(16 * MIB), "16.0 MiB")
        self.assertEqual(format_bytes(2048 * MIB), "2.00 GiB")


class TestLatencyStats(unittest.TestCase):
    def test_calculate(self):
        ls = LatencyStats(samples=[10.0, 20.0, 15.0, 25.0, 12.0])
        ls.calculate()
        self.assertEqual(ls.count, 5)
        self.assertAlmostEqual(ls.min, 10.0)
        self.assertAlmostEqual(ls.max, 25.0)
        self.assertAlmostEqual(ls.mean, 16.4)
        self.assertAlmostEqual(ls.median, 15.0)
        self.assertGreater(ls.jitter, 0)

    def test_empty(self):
        ls = LatencyStats()
        ls.calculate()
        self.assertEqual(ls.count, 0)


class TestConnectionStats(unittest.TestCase):
    def test_calculate(self):
        cs = ConnectionStats(bytes_transferred=MIB, duration_ms=1000)
        cs.calculate()
        self.assertAlmostEqual(cs.speed_mbps, 8.0)

    def test_zero_duration(self):
        cs = ConnectionStats(bytes_transferred=MIB, duration_ms=0)
        cs.calculate()
        self.assertEqual(cs.speed_mbps, 0.0)

    def test_to_dict(self):
        cs = ConnectionStats(id=2, requests=3, failures=1)
        d = cs.to_dict()
        self.assertEqual(d["id"], 2)
        self.assertEqual(d["requests"], 3)
        self.assertEqual(d["failures"], 1)


class TestSample(unittest.TestCase):
    def test_to_dict(self):
        d = Sample(elapsed_s=1.23456, bytes_total=10, speed_mbps=3.14159, progress=55.0).to_dict()
        self.assertEqual(d["elapsed_s"], 1.235)
        self.assertEqual(d["speed_mbps"], 3.14)
        self.assertEqual(d["progress"], 55.0)


if __name__ == "__main__":
    unittest.main()
