"""MediaInfo + ffprobe implementation of the MediaIntrospector protocol."""

from __future__ import annotations

import logging
from pathlib import Path

from mediaproc.core.process import ProcessRunner
from mediaproc.domain.models import MediaProperties
from mediaproc.encoder.command import PROBE_SIZE
from mediaproc.introspector.parsers import parse_probe_output

logger = logging.getLogger(__name__)


class FFprobeIntrospector:
    """Probes media with MediaInfo and ffprobe.

    Three tool runs are made per file: MediaInfo JSON, ffprobe JSON, and a
    plain ffprobe run whose diagnostics reveal MOV edit lists.

    Args:
        runner: Process runner used for every tool call.
        ffprobe_path: ffprobe executable.
        mediainfo_path: mediainfo executable.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        ffprobe_path: Path | str,
        mediainfo_path: Path | str,
    ) -> None:
        self._runner = runner
        self._ffprobe_path = ffprobe_path
        self._mediainfo_path = mediainfo_path

    def get_media_properties(self, path: Path) -> MediaProperties:
        """Probe a media file.

        Raises:
            ProbeError: If probe output cannot be deserialized.
            ToolError: If a probe tool is missing or fails.
        """
        logger.info("Probing %s", path)

        diagnostics = self._runner.run_stderr(
            self._ffprobe_path,
            ["-hide_banner", "-probesize", PROBE_SIZE, str(path)],
        )
        if not diagnostics.strip():
            logger.error("ffprobe reported nothing for %s; file may be corrupt", path)

        mediainfo_text = self._runner.run_stdout(
            self._mediainfo_path,
            ["--Output=JSON", "-f", str(path)],
        )
        ffprobe_text = self._runner.run_stdout(
            self._ffprobe_path,
            [
                "-v",
                "quiet",
                "-probesize",
                PROBE_SIZE,
                "-print_format",
                "json",
                "-show_format",
                "-show_streams",
                str(path),
            ],
        )

        props = parse_probe_output(path, mediainfo_text, ffprobe_text, diagnostics)
        logger.debug(
            "Probed %s: %d video, %d audio stream(s), duration %.3fs",
            path,
            props.video_stream_count,
            props.audio_stream_count,
            props.duration,
        )
        return props
