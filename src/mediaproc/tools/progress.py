"""FFmpeg stderr progress parsing.

ffmpeg reports progress on stderr as lines like:
frame= 1234 fps= 30 q=28.0 size= 2048kB time=00:01:23.45 bitrate=5000kbits/s speed=2.0x

Scans and encodes log these lines as they arrive instead of accumulating
them with the diagnostic text.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class FFmpegProgress:
    """Parsed ffmpeg progress line."""

    frame: int | None = None
    fps: float | None = None
    bitrate: str | None = None
    out_time_us: int | None = None  # Output time in microseconds
    speed: str | None = None

    @property
    def out_time_seconds(self) -> float | None:
        if self.out_time_us is not None:
            return self.out_time_us / 1_000_000
        return None

    def get_percent(self, duration_seconds: float | None) -> float:
        """Return progress percentage (0.0 to 100.0), or 0.0 if unknown."""
        if duration_seconds is None or duration_seconds <= 0:
            return 0.0
        out_time = self.out_time_seconds
        if out_time is None:
            return 0.0
        return min(100.0, (out_time / duration_seconds) * 100)


PROGRESS_PATTERNS = {
    "frame": re.compile(r"frame=\s*(\d+)"),
    "fps": re.compile(r"fps=\s*([\d.]+)"),
    "bitrate": re.compile(r"bitrate=\s*([^\s]+)"),
    "speed": re.compile(r"speed=\s*([^\s]+)"),
}

_TIME_PATTERN = re.compile(r"time=(\d+):(\d+):(\d+)\.(\d+)")


def is_progress_line(line: str) -> bool:
    """Return True for ffmpeg status lines (they carry both fps and time)."""
    return "fps" in line and "time=" in line


def parse_stderr_progress(line: str) -> FFmpegProgress | None:
    """Parse an ffmpeg stderr progress line.

    Args:
        line: A line from ffmpeg stderr.

    Returns:
        Parsed FFmpegProgress or None if not a progress line.
    """
    if not is_progress_line(line):
        return None

    result = FFmpegProgress()
    for key, pattern in PROGRESS_PATTERNS.items():
        match = pattern.search(line)
        if not match:
            continue
        value = match.group(1)
        if key == "frame":
            result.frame = int(value)
        elif key == "fps":
            try:
                result.fps = float(value)
            except ValueError:
                pass
        elif value != "N/A":
            setattr(result, key, value)

    time_match = _TIME_PATTERN.search(line)
    if time_match:
        hours = int(time_match.group(1))
        minutes = int(time_match.group(2))
        seconds = int(time_match.group(3))
        centiseconds = int(time_match.group(4))
        result.out_time_us = (
            hours * 3600 + minutes * 60 + seconds
        ) * 1_000_000 + centiseconds * 10_000

    return result


def format_timestamp(seconds: float) -> str:
    """Format seconds as HH:MM:SS."""
    total = int(seconds)
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


class ProgressLogger:
    """Line callback that logs ffmpeg progress against a known duration.

    Args:
        duration_seconds: Length of the media being processed.
        label: Prefix for log messages (e.g. "pass 1/2").
    """

    def __init__(self, duration_seconds: float, label: str = "Progress") -> None:
        self._duration = duration_seconds
        self._label = label
        self.last: FFmpegProgress | None = None

    def __call__(self, line: str) -> None:
        progress = parse_stderr_progress(line)
        if progress is None:
            return
        self.last = progress
        done = progress.out_time_seconds
        logger.info(
            "%s: %s of %s (%.1f%%)",
            self._label,
            format_timestamp(done) if done is not None else "--:--:--",
            format_timestamp(self._duration),
            progress.get_percent(self._duration),
        )
