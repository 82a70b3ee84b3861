"""Pydantic models for YAML job definition files.

A job file describes one video encode job without its input media, which
is probed at run time and attached with VideoEncodeJob.add_input_media().

Example:
    language: eng
    output_dir: /srv/out/title
    encoder: x265
    color_spec: hdr10
    pixel_format: yuv420p10
    auto_crop: true
    hdr:
      mastering_primaries: "Display P3"
      mastering_luminance: "min: 0.0050 cd/m2, max: 1000 cd/m2"
      max_cll: "1000 cd/m2"
      max_fall: "400 cd/m2"
    outputs:
      - width: 1920
        target_bitrate: 6000
        peak_bitrate: 9000
        vbv_buffer_size: 12000
        output_file_name: title_1080.mp4
        passes: 2
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mediaproc.jobs.types import (
    DeinterlaceOverride,
    EncodeSpeed,
    OutputColorSpec,
    PixelFormat,
    StreamRole,
)

# Characters that would break out of an x264/x265 parameter block
FORBIDDEN_OVERRIDE_CHARS = (":", " ", "\n", ";", "|", "&", "`", "$")


class OutputModel(BaseModel):
    """Pydantic model for one output rendition."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(gt=0)
    target_bitrate: int = Field(gt=0)
    peak_bitrate: int = Field(gt=0)
    vbv_buffer_size: int = Field(gt=0)
    output_file_name: str = Field(min_length=1)
    passes: int = Field(default=1, ge=1)
    allow_scene_detection: bool = False
    encoder_overrides: list[str] = Field(default_factory=list)
    role: StreamRole = StreamRole.UNDEFINED
    stream_name: str | None = None
    encoder: str | None = None

    @field_validator("output_file_name")
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        """Output files are written inside the job's output directory."""
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"output_file_name must be a bare file name, got '{v}'")
        return v

    @field_validator("encoder_overrides")
    @classmethod
    def validate_overrides(cls, v: list[str]) -> list[str]:
        """Each override must be a single key=value field."""
        for item in v:
            if "=" not in item:
                raise ValueError(f"Encoder override '{item}' must be key=value")
            for char in FORBIDDEN_OVERRIDE_CHARS:
                if char in item:
                    raise ValueError(
                        f"Encoder override '{item}' contains forbidden character "
                        f"{char!r}"
                    )
        return v


class MatchModel(BaseModel):
    """Pydantic model for match-to-master settings."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    rate: float = Field(default=0.0, ge=0.0)

    @model_validator(mode="after")
    def validate_dimensions(self) -> MatchModel:
        if (self.width == 0) != (self.height == 0):
            raise ValueError("match width and height must be given together")
        return self


class HdrModel(BaseModel):
    """Pydantic model for job-level HDR metadata, in MediaInfo notation."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mastering_primaries: str
    mastering_luminance: str
    max_cll: str | None = None
    max_fall: str | None = None

    @model_validator(mode="after")
    def validate_light_level(self) -> HdrModel:
        if (self.max_cll is None) != (self.max_fall is None):
            raise ValueError("max_cll and max_fall must be given together")
        return self


class VideoJobModel(BaseModel):
    """Pydantic model for a video encode job file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    language: str = Field(min_length=1)
    output_dir: str = Field(min_length=1)
    encoder: str = "x264"
    color_spec: OutputColorSpec = OutputColorSpec.UNKNOWN
    speed: EncodeSpeed = EncodeSpeed.FAST
    pixel_format: PixelFormat = PixelFormat.YUV420P
    deinterlace_override: DeinterlaceOverride = DeinterlaceOverride.NONE
    auto_crop: bool = False
    gop_seconds: int = Field(default=4, gt=0)
    lookahead_frames: int = Field(default=48, ge=0)
    match: MatchModel | None = None
    burn_subtitles: str | None = None
    hdr: HdrModel | None = None
    outputs: list[OutputModel] = Field(min_length=1)
