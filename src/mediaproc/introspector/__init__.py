"""Media introspection: probe tool output to MediaProperties."""

from mediaproc.introspector.ffprobe import FFprobeIntrospector
from mediaproc.introspector.interface import MediaIntrospector
from mediaproc.introspector.parsers import (
    apply_ffprobe_output,
    parse_mediainfo_output,
    parse_probe_output,
)

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospector",
    "apply_ffprobe_output",
    "parse_mediainfo_output",
    "parse_probe_output",
]
