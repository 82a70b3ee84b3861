"""Encode job and output stream definitions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from mediaproc.domain.hdr import (
    ContentLightLevel,
    MasteringDisplayLuminance,
    MasteringDisplayPrimaries,
)
from mediaproc.domain.models import MediaProperties
from mediaproc.errors import JobValidationError
from mediaproc.jobs.types import (
    DeinterlaceOverride,
    EncodeSpeed,
    OutputColorSpec,
    PixelFormat,
    StreamRole,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputStreamDefinition:
    """One video rendition to produce.

    Output pixels are always square, so only the width is given; the height
    is derived from the source aspect ratio. Bitrates are in kbps.
    """

    width: int
    target_bitrate: int
    peak_bitrate: int
    vbv_buffer_size: int
    output_file_name: str
    passes: int = 1
    allow_scene_detection: bool = False
    # Raw "key=value" encoder options appended after all derived ones
    encoder_overrides: tuple[str, ...] = ()
    role: StreamRole = StreamRole.UNDEFINED
    stream_name: str | None = None
    # Per-stream encoder selection; not supported for video jobs
    encoder: str | None = None

    def __post_init__(self) -> None:
        if self.width <= 0:
            raise JobValidationError(f"width must be positive, got {self.width}")
        if self.passes < 1:
            raise JobValidationError(f"passes must be >= 1, got {self.passes}")
        if not self.output_file_name:
            raise JobValidationError("output_file_name must not be empty")

    @property
    def stats_file_name(self) -> str:
        """Rate-control statistics file shared by the passes of this output."""
        return f"{Path(self.output_file_name).stem}_STATS"


@dataclass
class VideoEncodeJob:
    """Settings for encoding one source into one or more video streams.

    Build the job, then attach the source with add_input_media() and the
    renditions with add_output().
    """

    language: str
    output_dir: Path
    encoder: str = "x264"
    color_spec: OutputColorSpec = OutputColorSpec.UNKNOWN
    speed: EncodeSpeed = EncodeSpeed.FAST
    pixel_format: PixelFormat = PixelFormat.YUV420P
    deinterlace_override: DeinterlaceOverride = DeinterlaceOverride.NONE
    auto_crop: bool = False
    gop_seconds: int = 4
    lookahead_frames: int = 48
    # Match-to-master: fit and pad the picture to these dimensions first
    match_width: int = 0
    match_height: int = 0
    # Forced output frame rate (0 keeps the source rate)
    match_rate: float = 0.0
    burn_subtitles: str | None = None
    # Job-level HDR metadata wins over metadata embedded in the source
    mastering_primaries: MasteringDisplayPrimaries | None = None
    mastering_luminance: MasteringDisplayLuminance | None = None
    light_level: ContentLightLevel | None = None
    inputs: list[MediaProperties] = field(default_factory=list)
    outputs: list[OutputStreamDefinition] = field(default_factory=list)

    def add_input_media(self, media: MediaProperties) -> None:
        """Attach the source media.

        HDR metadata from the source's first video stream is copied onto the
        job unless the job already carries mastering display primaries.

        Raises:
            JobValidationError: If the job already has an input.
        """
        if self.inputs:
            raise JobValidationError("Video encoding jobs may have only one input")

        if media.has_hdr and self.mastering_primaries is None:
            stream = media.first_video_stream
            if stream is not None:
                self.mastering_primaries = stream.mastering_primaries
                self.mastering_luminance = stream.mastering_luminance
                self.light_level = stream.light_level
                logger.debug("Using HDR metadata embedded in %s", media.file_path)

        self.inputs.append(media)

    def add_output(self, output: OutputStreamDefinition) -> None:
        self.outputs.append(output)

    @property
    def input_media(self) -> MediaProperties:
        """The single source media.

        Raises:
            JobValidationError: If no input has been added.
        """
        if not self.inputs:
            raise JobValidationError("Video encoding job has no input media")
        return self.inputs[0]

    @property
    def has_match_dimensions(self) -> bool:
        return self.match_width != 0 and self.match_height != 0

    def output_path(self, output: OutputStreamDefinition) -> Path:
        return self.output_dir / output.output_file_name

    def stats_path(self, output: OutputStreamDefinition) -> Path:
        return self.output_dir / output.stats_file_name
