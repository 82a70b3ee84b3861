"""Probe result model.

MediaProperties is the aggregate root describing one input file. It is a
frozen snapshot: analysis stages (signal classification, letterbox
detection) return updated copies via dataclasses.replace() instead of
mutating the record in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from mediaproc.domain.hdr import (
    ContentLightLevel,
    MasteringDisplayLuminance,
    MasteringDisplayPrimaries,
)


class StreamType(Enum):
    """Kind of elementary stream."""

    VIDEO = "video"
    AUDIO = "audio"


@dataclass(frozen=True)
class VideoColorProperties:
    """Color description as reported by ffprobe."""

    primaries: str  # e.g. "bt709", "bt2020"
    transfer: str  # e.g. "bt709", "smpte2084"
    matrix: str  # e.g. "bt709", "bt2020nc"


@dataclass(frozen=True)
class CropValue:
    """Visible (non-bar) region of a frame."""

    x_offset: int
    y_offset: int
    x_extent: int
    y_extent: int


@dataclass(frozen=True)
class MediaStream:
    """Facts about one decoded stream."""

    index: int
    stream_type: StreamType
    codec_name: str | None = None
    codec_format: str | None = None
    bitrate: int | None = None
    duration: float = 0.0
    frame_rate: float = 0.0
    frame_count: int | None = None
    display_aspect_ratio: str | None = None
    pixel_aspect_ratio: float = 1.0
    pixel_format: str | None = None
    bit_depth: int | None = None
    chroma_subsampling: str | None = None
    width: int = 0
    height: int = 0
    # Aspect-corrected dimensions: width * pixel_aspect_ratio, height
    square_width: int = 0
    square_height: int = 0
    color: VideoColorProperties | None = None
    mastering_primaries: MasteringDisplayPrimaries | None = None
    mastering_luminance: MasteringDisplayLuminance | None = None
    light_level: ContentLightLevel | None = None
    # Audio-specific fields
    channels: int | None = None
    channel_layout: str | None = None
    sample_rate: int | None = None
    audio_bit_depth: int | None = None
    format_profile: str | None = None

    @property
    def is_video(self) -> bool:
        return self.stream_type is StreamType.VIDEO

    @property
    def is_audio(self) -> bool:
        return self.stream_type is StreamType.AUDIO


@dataclass(frozen=True)
class MediaProperties:
    """Structural facts and analysis results for one input file.

    The IsPureFilm / IsPureVideo / IsMixedFilmVideo flags are filled in by
    the signal classifier; crop fields by the letterbox detector. Both
    default to "nothing detected".
    """

    file_path: Path
    duration: float = 0.0
    audio_stream_count: int = 0
    video_stream_count: int = 0
    audio_channel_max: int = 0
    first_video_index: int | None = None
    streams: tuple[MediaStream, ...] = field(default_factory=tuple)

    # Signal classification
    has_combing: bool = False
    has_telecine: bool = False
    is_pure_film: bool = False
    is_pure_video: bool = False
    is_mixed_film_video: bool = False
    bad_delivery: bool = False

    # Geometry
    has_letterbox: bool = False
    crop: CropValue | None = None
    crop_filter: str | None = None

    # Container/probe level facts
    has_hdr: bool = False
    has_atmos: bool = False
    has_edit_list: bool = False

    @property
    def video_streams(self) -> tuple[MediaStream, ...]:
        return tuple(s for s in self.streams if s.is_video)

    @property
    def audio_streams(self) -> tuple[MediaStream, ...]:
        return tuple(s for s in self.streams if s.is_audio)

    @property
    def first_video_stream(self) -> MediaStream | None:
        """Return the stream at first_video_index, if any."""
        if self.first_video_index is None:
            return None
        for stream in self.streams:
            if stream.index == self.first_video_index:
                return stream
        return None

    def require_video_stream(self) -> MediaStream:
        """Return the first video stream or raise ValueError."""
        stream = self.first_video_stream
        if stream is None:
            raise ValueError(f"{self.file_path} has no video stream")
        return stream
