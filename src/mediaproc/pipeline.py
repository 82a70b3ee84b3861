"""Analysis and encode pipeline.

MediaProcessor wires the stages together from a MediaProcConfig:

    probe (MediaInfo + ffprobe)
      -> detect_combing (idet + fieldmatch scan)
      -> detect_letterbox (cropdetect scan, optional re-scan)
      -> VideoEncoder (filter chain, parameters, ffmpeg passes)

Each analysis stage returns a new MediaProperties snapshot.
"""

from __future__ import annotations

import logging
from pathlib import Path

from mediaproc.config.models import MediaProcConfig
from mediaproc.core.process import ProcessRunner
from mediaproc.domain.models import MediaProperties
from mediaproc.encoder.executor import EncodeResult, VideoEncoder
from mediaproc.introspector.ffprobe import FFprobeIntrospector
from mediaproc.introspector.interface import MediaIntrospector
from mediaproc.jobs.models import VideoEncodeJob
from mediaproc.scanner.common import ScanRunner, ScanWindow
from mediaproc.scanner.interlace import detect_combing
from mediaproc.scanner.letterbox import detect_letterbox
from mediaproc.tools.paths import fontconfig_env, require_tool

logger = logging.getLogger(__name__)


class MediaProcessor:
    """Probe, analyse and encode media using configured tools.

    Tools are resolved lazily, so a processor that only analyses never
    needs an encoder-capable setup beyond ffmpeg itself.

    Args:
        config: Tool paths, scan window, worker count and logging settings.
        runner: Process runner for probes and scans. Defaults to one using
            the configured scan timeout.
        introspector: Probe implementation. Defaults to FFprobeIntrospector.
    """

    def __init__(
        self,
        config: MediaProcConfig | None = None,
        runner: ProcessRunner | None = None,
        introspector: MediaIntrospector | None = None,
    ) -> None:
        self._config = config or MediaProcConfig()
        self._runner = runner or ProcessRunner(
            timeout=self._config.scan.timeout_seconds
        )
        self._introspector = introspector

    @property
    def config(self) -> MediaProcConfig:
        return self._config

    def _tool_env(self) -> dict[str, str]:
        return fontconfig_env(self._config.tools.fonts_dir)

    def _get_introspector(self) -> MediaIntrospector:
        if self._introspector is None:
            tools = self._config.tools
            self._introspector = FFprobeIntrospector(
                self._runner,
                ffprobe_path=require_tool("ffprobe", tools.ffprobe),
                mediainfo_path=require_tool("mediainfo", tools.mediainfo),
            )
        return self._introspector

    def scan_runner(self) -> ScanRunner:
        """ScanRunner bound to the configured ffmpeg and environment."""
        ffmpeg = require_tool("ffmpeg", self._config.tools.ffmpeg)
        return ScanRunner(self._runner, ffmpeg, env=self._tool_env())

    def default_window(self) -> ScanWindow:
        scan = self._config.scan
        return ScanWindow(
            start_seconds=scan.start_seconds, duration_seconds=scan.duration_seconds
        )

    def probe(self, path: Path) -> MediaProperties:
        """Gather structural facts about path without scanning its pictures.

        Raises:
            ProbeError: If probe output cannot be deserialized.
            ToolError: If a probe tool is missing or fails.
        """
        return self._get_introspector().get_media_properties(path)

    def analyze(
        self,
        path: Path,
        *,
        window: ScanWindow | None = None,
        combing: bool = True,
        letterbox: bool = True,
    ) -> MediaProperties:
        """Probe path and run the requested analysis scans.

        Args:
            path: Media file to analyse.
            window: Scan window; defaults to the configured one.
            combing: Run interlace/telecine classification.
            letterbox: Run letterbox detection.

        Returns:
            The final MediaProperties snapshot.

        Raises:
            ProbeError: If probe output cannot be deserialized.
            ToolError: If a tool is missing or fails.
        """
        props = self.probe(path)
        if props.video_stream_count == 0 or not (combing or letterbox):
            return props

        window = window or self.default_window()
        scanner = self.scan_runner()
        if combing:
            props = detect_combing(props, scanner, window)
        if letterbox:
            props = detect_letterbox(props, scanner, window)
        return props

    def encode(self, job: VideoEncodeJob) -> list[EncodeResult]:
        """Encode every output of a job whose input media is attached.

        Encode passes run without a timeout.

        Raises:
            JobValidationError: If the job is misconfigured.
            ProviderContentError: If the source cannot be encoded as delivered.
            ToolError: If ffmpeg is missing or a pass fails.
        """
        encoder = VideoEncoder(
            ProcessRunner(),
            require_tool("ffmpeg", self._config.tools.ffmpeg),
            env=self._tool_env(),
            max_workers=self._config.encode.max_workers,
        )
        return encoder.execute(job)

    def run_job(
        self,
        job: VideoEncodeJob,
        input_path: Path,
        *,
        window: ScanWindow | None = None,
    ) -> list[EncodeResult]:
        """Analyse input_path, attach it to job and encode.

        Letterbox detection only runs when the job allows auto-crop.
        """
        props = self.analyze(input_path, window=window, letterbox=job.auto_crop)
        job.add_input_media(props)
        logger.info(
            "Encoding %s to %d output(s) in %s",
            input_path,
            len(job.outputs),
            job.output_dir,
        )
        return self.encode(job)
