"""Shared plumbing for ffmpeg analysis scans.

A scan decodes part of the input through an analysis filter chain, discards
the frames (-f null) and returns the diagnostic text ffmpeg writes to
stderr. Status lines are logged as progress and left out of the returned
text.
"""

from __future__ import annotations

import logging
import platform
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from mediaproc.core.process import ProcessRunner
from mediaproc.domain.models import MediaProperties
from mediaproc.filters.chain import FilterChain
from mediaproc.tools.progress import ProgressLogger, is_progress_line

logger = logging.getLogger(__name__)

# Scans always decode to 8-bit 4:2:0 so filters see a consistent format
SCAN_PIXEL_FORMAT = "yuv420p"


def null_output() -> str:
    """Platform null device for discarded ffmpeg output."""
    return "NUL" if platform.system() == "Windows" else "/dev/null"


@dataclass(frozen=True)
class ScanWindow:
    """Portion of the input to analyze.

    Attributes:
        start_seconds: Offset into the file.
        duration_seconds: Seconds to scan; 0 means the whole file.
    """

    start_seconds: int = 0
    duration_seconds: int = 0

    def resolve_duration(self, media_duration: float) -> int:
        """Return the effective scan length in whole seconds, at least 1."""
        if self.duration_seconds == 0:
            return max(1, round(media_duration))
        return self.duration_seconds

    @classmethod
    def centered(cls, media_duration: float, duration_seconds: int) -> ScanWindow:
        """A window of duration_seconds around the middle of the media."""
        start = max(0, int(media_duration / 2 - duration_seconds / 2))
        return cls(start_seconds=start, duration_seconds=duration_seconds)


def build_scan_args(
    props: MediaProperties,
    chain: FilterChain,
    window: ScanWindow,
) -> list[str]:
    """Build ffmpeg arguments (without the executable) for an analysis scan."""
    return [
        "-hide_banner",
        "-ss",
        str(window.start_seconds),
        "-y",
        "-i",
        str(props.file_path),
        "-pix_fmt",
        SCAN_PIXEL_FORMAT,
        "-t",
        str(window.resolve_duration(props.duration)),
        "-vf",
        chain.video_filters(),
        "-an",
        "-f",
        "null",
        null_output(),
    ]


class ScanRunner:
    """Runs analysis scans through ffmpeg.

    Args:
        runner: Process runner used to spawn ffmpeg.
        ffmpeg_path: ffmpeg executable.
        env: Environment overlay applied to every scan.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        ffmpeg_path: Path | str,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._runner = runner
        self._ffmpeg_path = ffmpeg_path
        self._env = dict(env) if env else None

    def run(
        self,
        props: MediaProperties,
        chain: FilterChain,
        window: ScanWindow,
    ) -> str:
        """Run one scan and return its diagnostic stderr text.

        Raises:
            ToolNotFoundError: If ffmpeg cannot be started.
            ToolExecutionError: If ffmpeg exits non-zero.
        """
        args = build_scan_args(props, chain, window)
        progress = ProgressLogger(
            window.resolve_duration(props.duration), label="Scan progress"
        )
        diagnostics: list[str] = []

        def on_stderr(line: str) -> None:
            if is_progress_line(line):
                progress(line)
            elif line:
                diagnostics.append(line)

        self._runner.run_streaming(
            self._ffmpeg_path, args, None, on_stderr, env=self._env
        )
        return "\n".join(diagnostics)
