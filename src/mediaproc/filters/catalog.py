"""ffmpeg filter expressions used by scans and encodes."""

from __future__ import annotations

# Analysis filters
IDET = "idet"
FIELDMATCH_PROBE = "fieldmatch=order=auto:combmatch=full:cthresh=12"
CROPDETECT = "cropdetect=0.1:2:0"

# Deinterlace filters
# Cleanly telecined film: inverse telecine and decimate to film rate.
DEINT_PURE_TELECINE = (
    "fieldmatch=order=auto:combmatch=full:combpel=80:cthresh=8,decimate"
)
# Mixed sources that keep the video frame rate.
DEINT_VIDEO_BIAS = (
    "fieldmatch=order=auto:combmatch=full:combpel=90:cthresh=9,yadif=deint=interlaced"
)
# Mixed sources where decimation to film rate is acceptable.
DEINT_FILM_BIAS = (
    "fieldmatch=order=auto:combmatch=full:combpel=80:cthresh=8,"
    "decimate,yadif=deint=interlaced"
)
# Interlaced video without a telecine pattern.
DEINT_PURE_VIDEO_SD = "yadif=1:0,mcdeint=0:0:10,framestep=2"
DEINT_PURE_VIDEO_HD = "yadif"

SETSAR_SQUARE = "setsar=1/1"

# Fit-and-pad to a master frame size; {w} and {h} are the target dimensions.
# The non-square variant first expands anamorphic pixels to square.
_FIT = r"min({w}/iw\,{h}/ih)"
SCALE_MATCH_SQUARE = (
    f"scale=iw*{_FIT}:ih*{_FIT}[c];"
    f"[c]pad={{w}}:{{h}}:({{w}}-iw*{_FIT})/2:({{h}}-ih*{_FIT})/2[d];"
    "[d]setsar=1:1"
)
SCALE_MATCH_ANAMORPHIC = (
    "scale=iw*sar:ih[a];[a]scale=-4:ih[b];[b]" + SCALE_MATCH_SQUARE
)


def crop_filter(width: int, height: int, x: int, y: int) -> str:
    return f"crop={width}:{height}:{x}:{y}"


def scale_filter(width: int, height: int) -> str:
    return f"scale={width}:{height}"


def scale_match_filter(square_pixels: bool, width: int, height: int) -> str:
    """Aspect-preserving fit of the picture into width x height with padding."""
    template = SCALE_MATCH_SQUARE if square_pixels else SCALE_MATCH_ANAMORPHIC
    return template.format(w=width, h=height)


def escape_filter_path(path: str) -> str:
    """Escape backslashes and colons for a filter-graph argument."""
    return path.replace("\\", "\\\\").replace(":", "\\:")


def subtitle_burn_filter(path: str) -> str:
    return f"ass='{escape_filter_path(path)}'"
