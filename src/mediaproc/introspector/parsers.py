"""Pure parsing functions for MediaInfo and ffprobe JSON output.

MediaInfo supplies most stream facts (geometry, rates, HDR mastering
metadata, audio layout). ffprobe supplies the color description and audio
channel layout in the spelling ffmpeg itself uses. All functions are pure
(no I/O, no side effects) for easy testing.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

from mediaproc.domain.hdr import (
    parse_content_light_level,
    parse_mastering_luminance,
    parse_mastering_primaries,
)
from mediaproc.domain.models import (
    MediaProperties,
    MediaStream,
    StreamType,
    VideoColorProperties,
)
from mediaproc.errors import ProbeError

logger = logging.getLogger(__name__)

# ffprobe diagnostic emitted for MOV/MP4 files carrying edit lists
EDIT_LIST_MARKER = "multiple edit list entries"

_LEADING_NUMBER = re.compile(r"^\s*(-?[0-9]+(?:\.[0-9]+)?)")


def load_json(text: str, tool: str) -> dict[str, Any]:
    """Decode a tool's JSON output.

    Raises:
        ProbeError: If text is not a JSON object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProbeError(f"Invalid {tool} output: {e}") from e
    if not isinstance(data, dict):
        raise ProbeError(f"Invalid {tool} output: expected a JSON object")
    return data


def _decimal(value: Any, field: str) -> Decimal | None:
    if value is None or value == "":
        return None
    match = _LEADING_NUMBER.match(str(value))
    if match is None:
        raise ProbeError(f"Invalid numeric value for {field}: {value!r}")
    try:
        return Decimal(match.group(1))
    except InvalidOperation as e:
        raise ProbeError(f"Invalid numeric value for {field}: {value!r}") from e


def parse_int(value: Any, field: str) -> int | None:
    """Parse a MediaInfo numeric string ("1920", "48000", "8.0") as int."""
    number = _decimal(value, field)
    return None if number is None else int(round(number))


def parse_float(value: Any, field: str) -> float | None:
    """Parse a MediaInfo numeric string ("23.976", "1.333") as float."""
    number = _decimal(value, field)
    return None if number is None else float(number)


def parse_stream_order(value: Any) -> int:
    """Parse MediaInfo StreamOrder ("1", or "0-1" inside programs).

    Raises:
        ProbeError: If the value is missing or malformed.
    """
    if value is None:
        raise ProbeError("MediaInfo track is missing StreamOrder")
    last = str(value).split("-")[-1]
    index = parse_int(last, "StreamOrder")
    if index is None:
        raise ProbeError(f"Invalid StreamOrder: {value!r}")
    return index


def split_aggregate(value: Any, position: int) -> str | None:
    """Pick one side of an "a / b" style MediaInfo value.

    Dolby Atmos tracks report both the core and the aggregate figure.
    """
    if value is None:
        return None
    parts = [p.strip() for p in str(value).split("/")]
    if position < len(parts):
        return parts[position]
    return parts[-1]


def is_atmos_track(track: dict[str, Any]) -> bool:
    profile = track.get("Format_Profile") or ""
    return "atmos" in profile.casefold()


def _mediainfo_tracks(data: dict[str, Any]) -> list[dict[str, Any]]:
    media = data.get("media")
    if not isinstance(media, dict):
        raise ProbeError("MediaInfo output is missing 'media'")
    tracks = media.get("track")
    if not isinstance(tracks, list):
        raise ProbeError("MediaInfo output is missing 'media.track'")
    return tracks


def parse_video_track(track: dict[str, Any], file_path: Path) -> MediaStream:
    """Build a video MediaStream from a MediaInfo video track."""
    width = parse_int(track.get("Width"), "Width") or 0
    height = parse_int(track.get("Height"), "Height") or 0
    par = parse_float(track.get("PixelAspectRatio"), "PixelAspectRatio") or 1.0

    primaries = luminance = light_level = None
    if track.get("MasteringDisplay_ColorPrimaries") and track.get(
        "MasteringDisplay_Luminance"
    ):
        primaries = parse_mastering_primaries(track["MasteringDisplay_ColorPrimaries"])
        luminance = parse_mastering_luminance(track["MasteringDisplay_Luminance"])
        # Light levels are optional even on HDR content
        if track.get("MaxCLL") and track.get("MaxFALL"):
            light_level = parse_content_light_level(track["MaxCLL"], track["MaxFALL"])
        logger.debug("HDR mastering metadata present in %s", file_path)

    return MediaStream(
        index=parse_stream_order(track.get("StreamOrder")),
        stream_type=StreamType.VIDEO,
        codec_name=track.get("CodecID"),
        codec_format=track.get("Format"),
        bitrate=parse_int(track.get("BitRate"), "BitRate"),
        duration=parse_float(track.get("Duration"), "Duration") or 0.0,
        frame_rate=parse_float(track.get("FrameRate"), "FrameRate") or 0.0,
        frame_count=parse_int(track.get("FrameCount"), "FrameCount"),
        display_aspect_ratio=track.get("DisplayAspectRatio"),
        pixel_aspect_ratio=par,
        pixel_format=track.get("ColorSpace"),
        bit_depth=parse_int(track.get("BitDepth"), "BitDepth"),
        chroma_subsampling=track.get("ChromaSubsampling"),
        width=width,
        height=height,
        square_width=round(width * par),
        square_height=height,
        mastering_primaries=primaries,
        mastering_luminance=luminance,
        light_level=light_level,
    )


def parse_audio_track(track: dict[str, Any]) -> MediaStream:
    """Build an audio MediaStream from a MediaInfo audio track."""
    channels_value = track.get("Channels")
    bitrate_value = track.get("BitRate")
    if is_atmos_track(track):
        # Aggregate channel count is reported second, aggregate bitrate first
        channels_value = split_aggregate(channels_value, 1)
        bitrate_value = split_aggregate(bitrate_value, 0)

    return MediaStream(
        index=parse_stream_order(track.get("StreamOrder")),
        stream_type=StreamType.AUDIO,
        codec_name=track.get("CodecID"),
        codec_format=track.get("Format"),
        bitrate=parse_int(bitrate_value, "BitRate"),
        duration=parse_float(track.get("Duration"), "Duration") or 0.0,
        channels=parse_int(channels_value, "Channels"),
        sample_rate=parse_int(track.get("SamplingRate"), "SamplingRate"),
        audio_bit_depth=parse_int(track.get("BitDepth"), "BitDepth"),
        format_profile=track.get("Format_Profile"),
    )


def parse_mediainfo_output(data: dict[str, Any], file_path: Path) -> MediaProperties:
    """Convert MediaInfo JSON (--Output=JSON) into MediaProperties.

    Tracks other than General, Video and Audio are ignored. When several
    video tracks are present the last one becomes first_video_index.

    Raises:
        ProbeError: If the structure or a value cannot be interpreted.
    """
    duration = 0.0
    streams: list[MediaStream] = []
    has_hdr = has_atmos = False
    first_video_index: int | None = None

    for track in _mediainfo_tracks(data):
        track_type = str(track.get("@type", "")).casefold()
        if track_type == "general":
            duration = parse_float(track.get("Duration"), "Duration") or 0.0
        elif track_type == "video":
            stream = parse_video_track(track, file_path)
            has_hdr = has_hdr or stream.mastering_primaries is not None
            first_video_index = stream.index
            streams.append(stream)
        elif track_type == "audio":
            has_atmos = has_atmos or is_atmos_track(track)
            streams.append(parse_audio_track(track))

    audio = [s for s in streams if s.is_audio]
    return MediaProperties(
        file_path=file_path,
        duration=duration,
        audio_stream_count=len(audio),
        video_stream_count=len(streams) - len(audio),
        audio_channel_max=max((s.channels or 0 for s in audio), default=0),
        first_video_index=first_video_index,
        streams=tuple(streams),
        has_hdr=has_hdr,
        has_atmos=has_atmos,
    )


def apply_ffprobe_output(
    props: MediaProperties, data: dict[str, Any]
) -> MediaProperties:
    """Overlay ffprobe stream facts (-show_streams JSON) onto props.

    ffprobe streams are matched to MediaInfo streams by index. Video streams
    gain a color description when primaries, transfer and matrix are all
    reported; audio streams gain ffmpeg's channel layout name.

    Raises:
        ProbeError: If the structure cannot be interpreted.
    """
    probe_streams = data.get("streams")
    if not isinstance(probe_streams, list):
        raise ProbeError("ffprobe output is missing 'streams'")

    by_index = {s.index: s for s in props.streams}
    for position, probe in enumerate(probe_streams):
        index = probe.get("index", position)
        stream = by_index.get(index)
        if stream is None:
            continue

        codec_type = probe.get("codec_type")
        if codec_type == "video" and stream.is_video:
            primaries = probe.get("color_primaries")
            transfer = probe.get("color_transfer")
            matrix = probe.get("color_space")
            if primaries and transfer and matrix:
                by_index[index] = replace(
                    stream,
                    color=VideoColorProperties(
                        primaries=primaries, transfer=transfer, matrix=matrix
                    ),
                )
        elif codec_type == "audio" and stream.is_audio:
            layout = probe.get("channel_layout")
            by_index[index] = replace(stream, channel_layout=layout)

    return replace(props, streams=tuple(by_index[s.index] for s in props.streams))


def has_edit_list(diagnostics: str) -> bool:
    return EDIT_LIST_MARKER in diagnostics


def parse_probe_output(
    file_path: Path,
    mediainfo_text: str,
    ffprobe_text: str,
    ffprobe_diagnostics: str = "",
) -> MediaProperties:
    """Build MediaProperties from raw MediaInfo and ffprobe output.

    Args:
        file_path: The probed file.
        mediainfo_text: MediaInfo JSON (--Output=JSON -f).
        ffprobe_text: ffprobe JSON (-show_format -show_streams).
        ffprobe_diagnostics: stderr of a plain ffprobe run.

    Returns:
        Unclassified MediaProperties.

    Raises:
        ProbeError: If either output cannot be deserialized.
    """
    props = parse_mediainfo_output(load_json(mediainfo_text, "MediaInfo"), file_path)
    props = apply_ffprobe_output(props, load_json(ffprobe_text, "ffprobe"))
    if has_edit_list(ffprobe_diagnostics):
        logger.warning(
            "%s contains multiple edit list entries; output may be out of sync",
            file_path,
        )
        props = replace(props, has_edit_list=True)
    return props
