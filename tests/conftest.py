"""Shared test fixtures for mediaproc."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from mediaproc.config.loader import clear_config_cache
from mediaproc.domain.models import MediaProperties, MediaStream, StreamType
from mediaproc.jobs.models import OutputStreamDefinition, VideoEncodeJob

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolate_config_cache():
    """Keep the module-level config cache from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def load_fixture() -> Callable[[str], str]:
    """Return a loader for fixture files by relative path."""

    def _load(name: str) -> str:
        return (FIXTURES_DIR / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def load_json_fixture() -> Callable[[str], dict[str, Any]]:
    """Return a loader for JSON fixture files by relative path."""

    def _load(name: str) -> dict[str, Any]:
        return json.loads((FIXTURES_DIR / name).read_text(encoding="utf-8"))

    return _load


def _video_stream(**overrides: Any) -> MediaStream:
    values: dict[str, Any] = {
        "index": 0,
        "stream_type": StreamType.VIDEO,
        "codec_format": "AVC",
        "duration": 600.0,
        "frame_rate": 29.97,
        "width": 1920,
        "height": 1080,
        "square_width": 1920,
        "square_height": 1080,
    }
    values.update(overrides)
    return MediaStream(**values)


def _media(
    *,
    stream: MediaStream | None = None,
    file_path: str | Path = "/media/in/source.mov",
    **overrides: Any,
) -> MediaProperties:
    stream = stream if stream is not None else _video_stream()
    values: dict[str, Any] = {
        "file_path": Path(file_path),
        "duration": 600.0,
        "video_stream_count": 1,
        "first_video_index": stream.index,
        "streams": (stream,),
    }
    values.update(overrides)
    return MediaProperties(**values)


@pytest.fixture
def make_video_stream() -> Callable[..., MediaStream]:
    """Factory for 1080p29.97 video streams; keyword overrides any field."""
    return _video_stream


@pytest.fixture
def make_media() -> Callable[..., MediaProperties]:
    """Factory for single-video-stream MediaProperties."""
    return _media


@pytest.fixture
def make_output() -> Callable[..., OutputStreamDefinition]:
    """Factory for output stream definitions."""

    def _make(**overrides: Any) -> OutputStreamDefinition:
        values: dict[str, Any] = {
            "width": 1280,
            "target_bitrate": 3000,
            "peak_bitrate": 4500,
            "vbv_buffer_size": 6000,
            "output_file_name": "out_720.mp4",
        }
        values.update(overrides)
        return OutputStreamDefinition(**values)

    return _make


@pytest.fixture
def make_job(tmp_path: Path) -> Callable[..., VideoEncodeJob]:
    """Factory for jobs writing into tmp_path/out."""

    def _make(**overrides: Any) -> VideoEncodeJob:
        values: dict[str, Any] = {"language": "eng", "output_dir": tmp_path / "out"}
        values.update(overrides)
        return VideoEncodeJob(**values)

    return _make
