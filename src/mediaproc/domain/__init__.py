"""Domain models for probe results and HDR metadata."""

from mediaproc.domain.hdr import (
    NAMED_PRIMARIES,
    ContentLightLevel,
    MasteringDisplayLuminance,
    MasteringDisplayPrimaries,
    parse_content_light_level,
    parse_mastering_luminance,
    parse_mastering_primaries,
)
from mediaproc.domain.models import (
    CropValue,
    MediaProperties,
    MediaStream,
    StreamType,
    VideoColorProperties,
)

__all__ = [
    "NAMED_PRIMARIES",
    "ContentLightLevel",
    "CropValue",
    "MasteringDisplayLuminance",
    "MasteringDisplayPrimaries",
    "MediaProperties",
    "MediaStream",
    "StreamType",
    "VideoColorProperties",
    "parse_content_light_level",
    "parse_mastering_luminance",
    "parse_mastering_primaries",
]
