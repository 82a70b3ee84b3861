"""Configuration data models for mediaproc.

All sections are plain dataclasses with defaults, so MediaProcConfig() is a
usable configuration on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from mediaproc.tools.paths import FONTCONFIG_FILE_NAME


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None
    mediainfo: Path | None = None

    # Directory holding fonts and fonts.conf for subtitle burn-in
    fonts_dir: Path | None = None

    @property
    def fonts_conf(self) -> Path | None:
        if self.fonts_dir is None:
            return None
        return self.fonts_dir / FONTCONFIG_FILE_NAME


@dataclass
class ScanConfig:
    """Default window for analysis scans."""

    # Offset into the file, in seconds
    start_seconds: int = 0

    # Seconds to scan; 0 scans through to the end of the file
    duration_seconds: int = 0

    # Seconds before a probe or scan process is killed (None = no limit)
    timeout_seconds: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.start_seconds < 0:
            raise ValueError(
                f"start_seconds must be >= 0, got {self.start_seconds}"
            )
        if self.duration_seconds < 0:
            raise ValueError(
                f"duration_seconds must be >= 0, got {self.duration_seconds}"
            )


@dataclass
class EncodeConfig:
    """Configuration for the encode worker pool."""

    # Concurrent output streams (None = half the CPU cores, minimum 1)
    max_workers: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class MediaProcConfig:
    """Top-level configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    encode: EncodeConfig = field(default_factory=EncodeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
