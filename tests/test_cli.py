"""Tests for CLI argument handling, settings resolution, and a simple-mode run."""

import contextlib
import io
import json
import os
import tempfile
import unittest
from unittest import mock

from aiohttp.test_utils import TestServer

from client.config import DEFAULTS
from client.engine import EngineSettings
from endpoint.app import create_app


class TestResolve(unittest.TestCase):
    def _resolve(self, argv, config=None):
        from edgespeed import _resolve, build_parser
        args = build_parser().parse_args(argv)
        return _resolve(args, dict(config or DEFAULTS))

    def test_defaults_from_config(self):
        resolved = self._resolve([])
        self.assertEqual(resolved, DEFAULTS)

    def test_cli_overrides_config(self):
        resolved = self._resolve(
            ["--url", "http://edge/", "--connections", "4", "--timeout", "3", "--upload-size", "512"],
            config={**DEFAULTS, "connections": 2},
        )
        self.assertEqual(resolved["url"], "http://edge/")
        self.assertEqual(resolved["connections"], 4)
        self.assertEqual(resolved["request_timeout"], 3.0)
        self.assertEqual(resolved["upload_chunk_size"], 512)

    def test_config_value_kept_when_flag_absent(self):
        resolved = self._resolve([], config={**DEFAULTS, "ping_count": 5})
        self.assertEqual(resolved["ping_count"], 5)

    def test_resolved_builds_valid_settings(self):
        settings = EngineSettings.from_dict(self._resolve(["--download-duration", "3"]))
        settings.validate()
        self.assertEqual(settings.download_duration, 3.0)


class TestMainValidation(unittest.TestCase):
    def _main(self, argv):
        from edgespeed import main
        with mock.patch("edgespeed.load_config", return_value=dict(DEFAULTS)):
            with self.assertRaises(SystemExit) as ctx:
                main(argv)
        return ctx.exception.code

    def test_connections_too_high(self):
        self.assertEqual(self._main(["--connections", "33"]), 1)

    def test_duration_too_low(self):
        self.assertEqual(self._main(["--upload-duration", "0"]), 1)

    def test_bad_payload_size_for_server(self):
        self.assertEqual(self._main(["--serve", "--payload-size", "0"]), 1)

    def test_bad_config_value_exits_cleanly(self):
        from edgespeed import main
        config = {**DEFAULTS, "connections": "many"}
        err = io.StringIO()
        with mock.patch("edgespeed.load_config", return_value=config), \
                contextlib.redirect_stderr(err), contextlib.redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                main([])
        self.assertEqual(ctx.exception.code, 1)

    def test_string_config_value_accepted(self):
        from edgespeed import main
        config = {**DEFAULTS, "connections": "3"}
        with mock.patch("edgespeed.load_config", return_value=config), \
                mock.patch("edgespeed.run_speedtest", new=mock.MagicMock(return_value=None)), \
                mock.patch("edgespeed.asyncio.run") as run:
            main([])
        run.assert_called_once()

    def test_json_mode_keeps_stdout_clean_on_failure(self):
        from edgespeed import main
        out, err = io.StringIO(), io.StringIO()
        with mock.patch("edgespeed.load_config", return_value=dict(DEFAULTS)), \
                contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            with self.assertRaises(SystemExit) as ctx:
                main(["--json", "--url", "http://127.0.0.1:1/", "--timeout", "0.5"])
        self.assertEqual(ctx.exception.code, 1)
        self.assertEqual(out.getvalue(), "")
        self.assertIn("Error", err.getvalue())

    def test_serve_starts_server(self):
        from edgespeed import main
        with mock.patch("endpoint.app.run_server") as run_server:
            main(["--serve", "--port", "9999", "--payload-size", "1024"])
        run_server.assert_called_once_with(host="0.0.0.0", port=9999, payload_size=1024)

    def test_unreachable_endpoint_exits(self):
        self.assertEqual(
            self._main(["--url", "http://127.0.0.1:1/", "--simple", "--timeout", "0.5"]),
            1,
        )

    def test_save_config(self):
        from edgespeed import main
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "config.json")
            with mock.patch("client.config._config_path", return_value=path), \
                    mock.patch("edgespeed.run_speedtest", new=mock.MagicMock(return_value=None)), \
                    mock.patch("edgespeed.asyncio.run"):
                main(["--connections", "3", "--save-config"])
            with open(path) as fh:
                saved = json.load(fh)
        self.assertEqual(saved["connections"], 3)


class TestSimpleRun(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = TestServer(create_app(payload_size=32 * 1024))
        await self.server.start_server()
        self.url = str(self.server.make_url("/"))

    async def asyncTearDown(self):
        await self.server.close()

    async def test_simple_output_and_json_file(self):
        from edgespeed import run_speedtest
        settings = EngineSettings(
            connections=2, download_duration=1.0, upload_duration=1.0,
            upload_chunk_size=8 * 1024, sample_interval=0.1,
        )
        with tempfile.TemporaryDirectory() as tmpdir:
            out = os.path.join(tmpdir, "result.json")
            buf = io.StringIO()
            with contextlib.redirect_stdout(buf):
                report = await run_speedtest(self.url, settings, simple=True, output_file=out)
            with open(out) as fh:
                saved = json.load(fh)

        text = buf.getvalue()
        self.assertIn("Download:", text)
        self.assertIn("Upload:", text)
        self.assertAlmostEqual(saved["download_mbps"], round(report.download_mbps, 2))
        self.assertEqual(saved["endpoint"], self.url)


if __name__ == "__main__":
    unittest.main()
