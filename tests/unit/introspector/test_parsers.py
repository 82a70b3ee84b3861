"""Tests for MediaInfo and ffprobe output parsing."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from mediaproc.domain.models import StreamType, VideoColorProperties
from mediaproc.errors import ProbeError
from mediaproc.introspector.parsers import (
    apply_ffprobe_output,
    is_atmos_track,
    load_json,
    parse_audio_track,
    parse_float,
    parse_int,
    parse_mediainfo_output,
    parse_probe_output,
    parse_stream_order,
    parse_video_track,
    split_aggregate,
)

FEATURE = Path("/media/in/feature.mov")


def mediainfo(*tracks: dict) -> dict:
    return {"media": {"@ref": str(FEATURE), "track": list(tracks)}}


SD_VIDEO_TRACK = {
    "@type": "Video",
    "StreamOrder": "0-1",
    "Format": "MPEG Video",
    "Width": "720",
    "Height": "480",
    "PixelAspectRatio": "0.889",
    "FrameRate": "29.970",
    "ScanType": "Interlaced",
}


class TestScalarParsing:
    """Tests for numeric helpers."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1920", 1920), ("48000", 48000), ("8.0", 8), (" 16 ", 16), (720, 720)],
    )
    def test_parse_int(self, value, expected: int) -> None:
        assert parse_int(value, "Width") == expected

    def test_parse_int_ignores_units(self) -> None:
        assert parse_int("1000 cd/m2", "MaxCLL") == 1000

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_values(self, value) -> None:
        assert parse_int(value, "Width") is None
        assert parse_float(value, "FrameRate") is None

    def test_parse_float(self) -> None:
        assert parse_float("23.976", "FrameRate") == pytest.approx(23.976)

    def test_malformed_number_raises(self) -> None:
        with pytest.raises(ProbeError, match="Width"):
            parse_int("wide", "Width")

    @pytest.mark.parametrize(("value", "expected"), [("1", 1), ("0-1", 1), (2, 2)])
    def test_stream_order(self, value, expected: int) -> None:
        assert parse_stream_order(value) == expected

    def test_stream_order_missing(self) -> None:
        with pytest.raises(ProbeError, match="StreamOrder"):
            parse_stream_order(None)

    def test_split_aggregate(self) -> None:
        assert split_aggregate("1536000 / 768000", 0) == "1536000"
        assert split_aggregate("6 / 8", 1) == "8"
        assert split_aggregate("2", 1) == "2"
        assert split_aggregate(None, 0) is None

    def test_load_json_rejects_garbage(self) -> None:
        with pytest.raises(ProbeError, match="MediaInfo"):
            load_json("not json", "MediaInfo")
        with pytest.raises(ProbeError):
            load_json("[1, 2]", "ffprobe")


class TestTrackParsing:
    """Tests for individual MediaInfo tracks."""

    def test_anamorphic_video(self) -> None:
        stream = parse_video_track(SD_VIDEO_TRACK, FEATURE)

        assert stream.index == 1
        assert stream.stream_type is StreamType.VIDEO
        assert (stream.width, stream.height) == (720, 480)
        assert stream.pixel_aspect_ratio == pytest.approx(0.889)
        assert (stream.square_width, stream.square_height) == (640, 480)
        assert stream.mastering_primaries is None

    def test_missing_par_is_square(self) -> None:
        track = {**SD_VIDEO_TRACK, "PixelAspectRatio": None}
        stream = parse_video_track(track, FEATURE)
        assert stream.pixel_aspect_ratio == 1.0
        assert stream.square_width == 720

    def test_invalid_hdr_string_raises(self) -> None:
        track = {
            **SD_VIDEO_TRACK,
            "MasteringDisplay_ColorPrimaries": "mystery",
            "MasteringDisplay_Luminance": "min: 0.0050 cd/m2, max: 1000 cd/m2",
        }
        with pytest.raises(ProbeError):
            parse_video_track(track, FEATURE)

    def test_atmos_uses_aggregate_values(self) -> None:
        track = {
            "@type": "Audio",
            "StreamOrder": "1",
            "Format_Profile": "Dolby Digital Plus + Dolby Atmos",
            "BitRate": "1536000 / 768000",
            "Channels": "6 / 8",
        }
        assert is_atmos_track(track)
        stream = parse_audio_track(track)
        assert stream.channels == 8
        assert stream.bitrate == 1536000

    def test_plain_audio(self) -> None:
        track = {"@type": "Audio", "StreamOrder": "2", "Channels": "2"}
        assert not is_atmos_track(track)
        assert parse_audio_track(track).channels == 2


class TestParseMediainfoOutput:
    """Tests for parse_mediainfo_output."""

    def test_uhd_hdr_fixture(self, load_json_fixture) -> None:
        props = parse_mediainfo_output(
            load_json_fixture("probe/mediainfo_uhd_hdr.json"), FEATURE
        )

        assert props.file_path == FEATURE
        assert props.duration == pytest.approx(5400.123)
        assert props.video_stream_count == 1
        assert props.audio_stream_count == 2
        assert props.audio_channel_max == 8
        assert props.first_video_index == 0
        assert props.has_hdr
        assert props.has_atmos
        # Text tracks are not modelled
        assert [s.index for s in props.streams] == [0, 1, 2]

    def test_hdr_metadata_on_video_stream(self, load_json_fixture) -> None:
        props = parse_mediainfo_output(
            load_json_fixture("probe/mediainfo_uhd_hdr.json"), FEATURE
        )
        video = props.require_video_stream()

        assert video.frame_rate == pytest.approx(23.976)
        assert video.bit_depth == 10
        assert video.mastering_primaries is not None
        assert video.mastering_primaries.gx == Decimal("0.265")
        assert video.mastering_luminance is not None
        assert video.mastering_luminance.max == Decimal("1000")
        assert video.light_level is not None
        assert video.light_level.max_fall == 400

    def test_last_video_track_is_first_video_index(self) -> None:
        props = parse_mediainfo_output(
            mediainfo(
                {**SD_VIDEO_TRACK, "StreamOrder": "0"},
                {**SD_VIDEO_TRACK, "StreamOrder": "1"},
            ),
            FEATURE,
        )
        assert props.video_stream_count == 2
        assert props.first_video_index == 1

    def test_audio_only(self) -> None:
        props = parse_mediainfo_output(
            mediainfo({"@type": "Audio", "StreamOrder": "0", "Channels": "2"}),
            FEATURE,
        )
        assert props.first_video_index is None
        assert props.first_video_stream is None

    def test_missing_track_list(self) -> None:
        with pytest.raises(ProbeError, match="media"):
            parse_mediainfo_output({"creatingLibrary": {}}, FEATURE)


class TestApplyFfprobeOutput:
    """Tests for apply_ffprobe_output."""

    def test_color_and_layout_applied(self, load_json_fixture) -> None:
        props = parse_mediainfo_output(
            load_json_fixture("probe/mediainfo_uhd_hdr.json"), FEATURE
        )
        props = apply_ffprobe_output(
            props, load_json_fixture("probe/ffprobe_uhd_hdr.json")
        )

        video = props.require_video_stream()
        assert video.color == VideoColorProperties("bt2020", "smpte2084", "bt2020nc")
        assert [s.channel_layout for s in props.audio_streams] == [
            "5.1(side)",
            "stereo",
        ]

    def test_partial_color_ignored(self) -> None:
        props = parse_mediainfo_output(mediainfo(SD_VIDEO_TRACK), FEATURE)
        probe = {
            "streams": [
                {"index": 1, "codec_type": "video", "color_primaries": "smpte170m"}
            ]
        }
        result = apply_ffprobe_output(props, probe)
        assert result.require_video_stream().color is None

    def test_missing_streams_raises(self) -> None:
        props = parse_mediainfo_output(mediainfo(SD_VIDEO_TRACK), FEATURE)
        with pytest.raises(ProbeError, match="streams"):
            apply_ffprobe_output(props, {"format": {}})


class TestParseProbeOutput:
    """Tests for parse_probe_output."""

    def test_combined(self, load_fixture) -> None:
        props = parse_probe_output(
            FEATURE,
            load_fixture("probe/mediainfo_uhd_hdr.json"),
            load_fixture("probe/ffprobe_uhd_hdr.json"),
        )
        assert props.require_video_stream().color is not None
        assert not props.has_edit_list
        # Analysis flags start cleared
        assert not props.has_combing
        assert props.crop is None

    def test_edit_list_flagged(self, load_fixture, caplog) -> None:
        props = parse_probe_output(
            FEATURE,
            load_fixture("probe/mediainfo_uhd_hdr.json"),
            load_fixture("probe/ffprobe_uhd_hdr.json"),
            load_fixture("probe/ffprobe_edit_list.txt"),
        )
        assert props.has_edit_list
        assert "edit list" in caplog.text

    def test_invalid_ffprobe_json(self, load_fixture) -> None:
        with pytest.raises(ProbeError, match="ffprobe"):
            parse_probe_output(
                FEATURE, load_fixture("probe/mediainfo_uhd_hdr.json"), "{"
            )
