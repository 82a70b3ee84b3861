"""Tests for EnvReader."""

from __future__ import annotations

from pathlib import Path

import pytest

from mediaproc.config.env import EnvReader


def reader(**values: str) -> EnvReader:
    return EnvReader(env={f"MEDIAPROC_{key}": value for key, value in values.items()})


class TestPrefix:
    """Keys are read with the MEDIAPROC_ prefix."""

    def test_name(self) -> None:
        assert EnvReader.name("MAX_WORKERS") == "MEDIAPROC_MAX_WORKERS"

    def test_unprefixed_variable_ignored(self) -> None:
        assert EnvReader(env={"LOG_LEVEL": "debug"}).text("LOG_LEVEL") is None

    def test_blank_value_is_unset(self) -> None:
        assert reader(LOG_LEVEL="  ").text("LOG_LEVEL") is None

    def test_value_stripped(self) -> None:
        assert reader(LOG_FORMAT=" json\n").text("LOG_FORMAT") == "json"

    def test_reads_os_environ_by_default(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MEDIAPROC_LOG_FORMAT", "json")
        assert EnvReader().text("LOG_FORMAT") == "json"


class TestCount:
    """Tests for EnvReader.count."""

    def test_parses_integer(self) -> None:
        assert reader(SCAN_START="300").count("SCAN_START") == 300

    def test_unset(self) -> None:
        assert reader().count("SCAN_START") is None

    @pytest.mark.parametrize("value", ["ten", "2.5"])
    def test_not_an_integer(self, value: str, caplog) -> None:
        assert reader(SCAN_DURATION=value).count("SCAN_DURATION") is None
        assert "MEDIAPROC_SCAN_DURATION" in caplog.text
        assert "not an integer" in caplog.text

    def test_negative_rejected(self, caplog) -> None:
        assert reader(SCAN_START="-5").count("SCAN_START") is None
        assert "must be >= 0" in caplog.text

    def test_minimum(self) -> None:
        assert reader(MAX_WORKERS="0").count("MAX_WORKERS", minimum=1) is None
        assert reader(MAX_WORKERS="1").count("MAX_WORKERS", minimum=1) == 1


class TestFlag:
    """Tests for EnvReader.flag."""

    @pytest.mark.parametrize("value", ["1", "true", "Yes", "ON"])
    def test_true(self, value: str) -> None:
        assert reader(LOG_INCLUDE_STDERR=value).flag("LOG_INCLUDE_STDERR") is True

    @pytest.mark.parametrize("value", ["0", "false", "No", "off"])
    def test_false(self, value: str) -> None:
        assert reader(LOG_INCLUDE_STDERR=value).flag("LOG_INCLUDE_STDERR") is False

    def test_unrecognized_is_unset(self, caplog) -> None:
        assert reader(LOG_INCLUDE_STDERR="maybe").flag("LOG_INCLUDE_STDERR") is None
        assert "expected true/false" in caplog.text


class TestPaths:
    """Tests for the path getters."""

    def test_tool_path(self, tmp_path: Path) -> None:
        ffprobe = tmp_path / "ffprobe"
        ffprobe.touch()
        assert reader(FFPROBE_PATH=str(ffprobe)).tool_path("ffprobe") == ffprobe

    def test_missing_tool_ignored(self, tmp_path: Path, caplog) -> None:
        env = reader(MEDIAINFO_PATH=str(tmp_path / "mediainfo"))
        assert env.tool_path("mediainfo") is None
        assert "MEDIAPROC_MEDIAINFO_PATH" in caplog.text

    def test_directory_is_not_a_tool(self, tmp_path: Path) -> None:
        assert reader(FFMPEG_PATH=str(tmp_path)).tool_path("ffmpeg") is None

    def test_fonts_directory(self, tmp_path: Path) -> None:
        assert reader(FONTS_DIR=str(tmp_path)).directory("FONTS_DIR") == tmp_path

    def test_fonts_directory_must_exist(self, tmp_path: Path) -> None:
        env = reader(FONTS_DIR=str(tmp_path / "fonts"))
        assert env.directory("FONTS_DIR") is None

    def test_file_path_need_not_exist(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "mediaproc.log"
        assert reader(LOG_FILE=str(log_file)).file_path("LOG_FILE") == log_file

    def test_tilde_expanded(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))
        (tmp_path / "fonts").mkdir()
        assert reader(FONTS_DIR="~/fonts").directory("FONTS_DIR") == tmp_path / "fonts"
