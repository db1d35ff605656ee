"""Tests for client.config -- configuration persistence."""

import json
import os
import tempfile
import unittest
from unittest import mock

from client.config import DEFAULTS, load_config, save_config
from client.constants import DEFAULT_CONNECTIONS


class TestConfigDefaults(unittest.TestCase):
    def test_defaults_have_required_keys(self):
        for key in ("url", "connections", "ping_count", "download_duration",
                    "upload_duration", "upload_chunk_size", "sample_interval",
                    "request_timeout"):
            self.assertIn(key, DEFAULTS)

    def test_default_concurrency(self):
        self.assertEqual(DEFAULTS["connections"], 6)


class TestLoadSaveConfig(unittest.TestCase):
    def test_load_defaults_when_missing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertEqual(cfg, DEFAULTS)

    def test_save_and_load(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "sub", "config.json")
            with mock.patch("client.config._config_path", return_value=path):
                returned = save_config({"url": "http://edge/", "connections": 4})
                self.assertEqual(returned, path)
                cfg = load_config()
                self.assertEqual(cfg["url"], "http://edge/")
                self.assertEqual(cfg["connections"], 4)
                # Defaults still present
                self.assertEqual(cfg["ping_count"], DEFAULTS["ping_count"])

    def test_unknown_keys_dropped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                json.dump({"colour": "blue", "connections": 2}, f)
            with mock.patch("client.config._config_path", return_value=path):
                cfg = load_config()
                self.assertNotIn("colour", cfg)
                self.assertEqual(cfg["connections"], 2)

    def test_corrupt_file_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                f.write("NOT JSON")
            with mock.patch("client.config._config_path", return_value=path):
                with self.assertLogs("client.config", level="WARNING"):
                    cfg = load_config()
                self.assertEqual(cfg["connections"], DEFAULT_CONNECTIONS)

    def test_non_dict_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with open(path, "w") as f:
                json.dump([1, 2, 3], f)
            with mock.patch("client.config._config_path", return_value=path):
                self.assertEqual(load_config(), DEFAULTS)


if __name__ == "__main__":
    unittest.main()
