"""Unit tests for shared scan plumbing."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

from mediaproc.core.process import ProcessRunner
from mediaproc.filters.chain import FilterChain
from mediaproc.scanner.common import (
    ScanRunner,
    ScanWindow,
    build_scan_args,
    null_output,
)


class TestScanWindow:
    """Tests for ScanWindow."""

    def test_zero_duration_scans_whole_file(self) -> None:
        assert ScanWindow().resolve_duration(612.7) == 613

    def test_whole_file_rounds_half_to_even(self) -> None:
        assert ScanWindow().resolve_duration(90.5) == 90

    def test_sub_second_media_scans_one_second(self, make_media) -> None:
        assert ScanWindow().resolve_duration(0.4) == 1
        args = build_scan_args(
            make_media(duration=0.8), FilterChain(("idet",)), ScanWindow()
        )
        assert args[args.index("-t") + 1] == "1"

    def test_explicit_duration(self) -> None:
        assert ScanWindow(duration_seconds=120).resolve_duration(612.7) == 120

    def test_centered(self) -> None:
        assert ScanWindow.centered(600.0, 120) == ScanWindow(240, 120)

    def test_centered_on_short_media_starts_at_zero(self) -> None:
        assert ScanWindow.centered(60.0, 120).start_seconds == 0


class TestNullOutput:
    """Tests for null_output."""

    def test_windows(self) -> None:
        with patch("mediaproc.scanner.common.platform.system", return_value="Windows"):
            assert null_output() == "NUL"

    def test_posix(self) -> None:
        with patch("mediaproc.scanner.common.platform.system", return_value="Linux"):
            assert null_output() == "/dev/null"


class TestBuildScanArgs:
    """Tests for build_scan_args."""

    def test_argument_order(self, make_media) -> None:
        props = make_media(file_path="/media/in/a.mkv", duration=90.5)
        chain = FilterChain(("idet",))
        window = ScanWindow(start_seconds=10, duration_seconds=0)

        with patch("mediaproc.scanner.common.null_output", return_value="/dev/null"):
            args = build_scan_args(props, chain, window)

        assert args == [
            "-hide_banner",
            "-ss",
            "10",
            "-y",
            "-i",
            str(Path("/media/in/a.mkv")),
            "-pix_fmt",
            "yuv420p",
            "-t",
            "90",
            "-vf",
            "[F1]idet[V]",
            "-an",
            "-f",
            "null",
            "/dev/null",
        ]


class TestScanRunner:
    """Tests for ScanRunner."""

    def _runner_emitting(self, *lines: str) -> MagicMock:
        runner = MagicMock(spec=ProcessRunner)

        def fake_streaming(executable, args, on_stdout, on_stderr, env=None):
            for line in lines:
                on_stderr(line)
            return 0

        runner.run_streaming.side_effect = fake_streaming
        return runner

    def test_returns_diagnostics_without_progress(self, make_media) -> None:
        """Status lines are logged, not returned."""
        runner = self._runner_emitting(
            "[Parsed_idet_0 @ 0x1] Repeated Fields: Neither: 1 Top: 0 Bottom: 0",
            "frame= 100 fps=50 q=-0.0 size=N/A time=00:00:04.00 bitrate=N/A",
            "",
            "[Parsed_cropdetect_0 @ 0x1] crop=1920:800:0:140",
        )
        scanner = ScanRunner(runner, "/usr/bin/ffmpeg")

        text = scanner.run(make_media(), FilterChain(("idet",)), ScanWindow())

        assert text.splitlines() == [
            "[Parsed_idet_0 @ 0x1] Repeated Fields: Neither: 1 Top: 0 Bottom: 0",
            "[Parsed_cropdetect_0 @ 0x1] crop=1920:800:0:140",
        ]

    def test_passes_environment_overlay(self, make_media) -> None:
        runner = self._runner_emitting()
        env = {"FONTCONFIG_FILE": "/fonts/fonts.conf"}
        scanner = ScanRunner(runner, "/usr/bin/ffmpeg", env=env)

        scanner.run(make_media(), FilterChain(("idet",)), ScanWindow())

        call = runner.run_streaming.call_args
        assert call.args[0] == "/usr/bin/ffmpeg"
        assert call.kwargs["env"] == env

    def test_concurrent_scans_do_not_share_output(self, make_media) -> None:
        """Each call collects its own diagnostics."""
        runner = self._runner_emitting("line")
        scanner = ScanRunner(runner, "ffmpeg")
        chain = FilterChain(("idet",))

        first = scanner.run(make_media(), chain, ScanWindow())
        second = scanner.run(make_media(), chain, ScanWindow())

        assert first == second == "line"
