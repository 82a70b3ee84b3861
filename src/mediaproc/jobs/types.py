"""Enumerated encode job settings."""

from __future__ import annotations

from enum import Enum


class OutputColorSpec(Enum):
    """Target color description for the encoded stream."""

    UNKNOWN = "unknown"  # derive from the source
    REC709 = "rec709"
    REC601 = "rec601"
    HDR10 = "hdr10"
    DOLBY_VISION = "dolby_vision"


class EncodeSpeed(Enum):
    """Encoder speed/quality trade-off."""

    SLOW = "slow"
    FAST = "fast"
    FASTER = "faster"


class PixelFormat(Enum):
    """Output pixel format (value is the ffmpeg -pix_fmt name)."""

    YUV420P = "yuv420p"
    YUV420P10 = "yuv420p10"
    YUV422P10 = "yuv422p10"


class DeinterlaceOverride(Enum):
    """Operator-selected deinterlace filter, replacing automatic choice."""

    NONE = "none"
    MIXED_FILM_BIAS = "mixed_film_bias"
    MIXED_VIDEO_BIAS = "mixed_video_bias"
    PURE_TELECINE = "pure_telecine"
    PURE_VIDEO_SD = "pure_video_sd"
    PURE_VIDEO_HD = "pure_video_hd"


class StreamRole(Enum):
    """Delivery role of an output stream."""

    UNDEFINED = "undefined"
    STREAMING = "streaming"
    DOWNLOAD = "download"
    BOTH = "both"
