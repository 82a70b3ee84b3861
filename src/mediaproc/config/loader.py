"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. Arguments passed directly to get_config()
2. Environment variables (MEDIAPROC_*)
3. Config file (~/.mediaproc/config.toml)
4. Default values

Environment variables:
- MEDIAPROC_CONFIG_PATH: Path to config file (overrides default location)
- MEDIAPROC_FFMPEG_PATH: Path to ffmpeg executable
- MEDIAPROC_FFPROBE_PATH: Path to ffprobe executable
- MEDIAPROC_MEDIAINFO_PATH: Path to mediainfo executable
- MEDIAPROC_FONTS_DIR: Directory with fonts.conf used for subtitle burn-in
- MEDIAPROC_SCAN_START / MEDIAPROC_SCAN_DURATION / MEDIAPROC_SCAN_TIMEOUT: Scan
  window and per-process timeout, in seconds
- MEDIAPROC_MAX_WORKERS: Concurrent output encodes
- MEDIAPROC_LOG_LEVEL / MEDIAPROC_LOG_FORMAT / MEDIAPROC_LOG_FILE /
  MEDIAPROC_LOG_INCLUDE_STDERR

Unusable environment values are logged and skipped (see EnvReader).
"""

from __future__ import annotations

import logging
import threading
import tomllib
from pathlib import Path
from typing import Any

from mediaproc.config.env import EnvReader
from mediaproc.config.models import (
    EncodeConfig,
    LoggingConfig,
    MediaProcConfig,
    ScanConfig,
    ToolPathsConfig,
)
from mediaproc.errors import JobValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".mediaproc"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# Cache for loaded config files (path -> (parsed dict, mtime))
_config_cache: dict[Path, tuple[dict, float]] = {}
_config_cache_lock = threading.Lock()


class ConfigFileError(JobValidationError):
    """Raised when a config file exists but cannot be parsed."""


def get_default_config_path(reader: EnvReader | None = None) -> Path:
    """Get the config file path, honouring MEDIAPROC_CONFIG_PATH."""
    return (reader or EnvReader()).file_path("CONFIG_PATH") or DEFAULT_CONFIG_FILE


def load_toml_file(path: Path, *, strict: bool = False) -> dict[str, Any]:
    """Parse a TOML file.

    Args:
        path: File to read. A missing file yields an empty dict.
        strict: Raise ConfigFileError on parse failures instead of logging
            a warning and returning an empty dict.
    """
    if not path.exists():
        return {}
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as e:
        if strict:
            raise ConfigFileError(f"Cannot parse config file {path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Results are cached with mtime-based invalidation: the file is re-read
    when it has changed since the last load.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigFileError on parse failures.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        current_mtime = 0.0

    with _config_cache_lock:
        if path in _config_cache:
            cached_config, cached_mtime = _config_cache[path]
            if current_mtime == cached_mtime:
                return cached_config

        result = load_toml_file(path, strict=strict)
        _config_cache[path] = (result, current_mtime)
        return result


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _first(*values: Any) -> Any:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None


def _file_path(section: dict[str, Any], key: str) -> Path | None:
    value = section.get(key)
    if value is None:
        return None
    return Path(str(value)).expanduser()


def get_config(
    config_path: Path | None = None,
    # Explicit overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    mediainfo_path: Path | None = None,
    fonts_dir: Path | None = None,
    max_workers: int | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> MediaProcConfig:
    """Build configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides MEDIAPROC_CONFIG_PATH).
        ffmpeg_path: Override for ffmpeg path.
        ffprobe_path: Override for ffprobe path.
        mediainfo_path: Override for mediainfo path.
        fonts_dir: Override for the fonts directory.
        max_workers: Override for encode worker count.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigFileError on config file parse failures.

    Returns:
        MediaProcConfig with merged configuration.
    """
    reader = env_reader or EnvReader()
    file_config = load_config_file(
        config_path or get_default_config_path(reader), strict=strict
    )

    tools_file = file_config.get("tools", {})
    scan_file = file_config.get("scan", {})
    encode_file = file_config.get("encode", {})
    logging_file = file_config.get("logging", {})

    tools = ToolPathsConfig(
        ffmpeg=_first(
            ffmpeg_path,
            reader.tool_path("ffmpeg"),
            _file_path(tools_file, "ffmpeg"),
        ),
        ffprobe=_first(
            ffprobe_path,
            reader.tool_path("ffprobe"),
            _file_path(tools_file, "ffprobe"),
        ),
        mediainfo=_first(
            mediainfo_path,
            reader.tool_path("mediainfo"),
            _file_path(tools_file, "mediainfo"),
        ),
        fonts_dir=_first(
            fonts_dir,
            reader.directory("FONTS_DIR"),
            _file_path(tools_file, "fonts_dir"),
        ),
    )

    scan_defaults = ScanConfig()
    scan = ScanConfig(
        start_seconds=_first(
            reader.count("SCAN_START"),
            scan_file.get("start_seconds"),
            scan_defaults.start_seconds,
        ),
        duration_seconds=_first(
            reader.count("SCAN_DURATION"),
            scan_file.get("duration_seconds"),
            scan_defaults.duration_seconds,
        ),
        timeout_seconds=_first(
            reader.count("SCAN_TIMEOUT", minimum=1),
            scan_file.get("timeout_seconds"),
        ),
    )

    encode = EncodeConfig(
        max_workers=_first(
            max_workers,
            reader.count("MAX_WORKERS", minimum=1),
            encode_file.get("max_workers"),
        ),
    )

    log_defaults = LoggingConfig()
    log_config = LoggingConfig(
        level=_first(
            reader.text("LOG_LEVEL"),
            logging_file.get("level"),
            log_defaults.level,
        ),
        file=_first(
            reader.file_path("LOG_FILE"),
            _file_path(logging_file, "file"),
        ),
        format=_first(
            reader.text("LOG_FORMAT"),
            logging_file.get("format"),
            log_defaults.format,
        ),
        include_stderr=_first(
            reader.flag("LOG_INCLUDE_STDERR"),
            logging_file.get("include_stderr"),
            log_defaults.include_stderr,
        ),
        max_bytes=_first(logging_file.get("max_bytes"), log_defaults.max_bytes),
        backup_count=_first(
            logging_file.get("backup_count"), log_defaults.backup_count
        ),
    )

    return MediaProcConfig(
        tools=tools, scan=scan, encode=encode, logging=log_config
    )
