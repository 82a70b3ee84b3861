"""ffmpeg spellings of job settings."""

from __future__ import annotations

from mediaproc.filters import catalog
from mediaproc.jobs.types import DeinterlaceOverride, EncodeSpeed

# x264/x265 -preset names
PRESET_NAMES: dict[EncodeSpeed, str] = {
    EncodeSpeed.SLOW: "slow",
    EncodeSpeed.FAST: "fast",
    EncodeSpeed.FASTER: "superfast",
}

DEINTERLACE_OVERRIDE_FILTERS: dict[DeinterlaceOverride, str] = {
    DeinterlaceOverride.PURE_TELECINE: catalog.DEINT_PURE_TELECINE,
    DeinterlaceOverride.PURE_VIDEO_HD: catalog.DEINT_PURE_VIDEO_HD,
    DeinterlaceOverride.PURE_VIDEO_SD: catalog.DEINT_PURE_VIDEO_SD,
    DeinterlaceOverride.MIXED_FILM_BIAS: catalog.DEINT_FILM_BIAS,
    DeinterlaceOverride.MIXED_VIDEO_BIAS: catalog.DEINT_VIDEO_BIAS,
}
