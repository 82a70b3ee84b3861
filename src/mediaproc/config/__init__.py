"""Configuration for mediaproc: TOML file, environment and defaults."""

from mediaproc.config.env import EnvReader
from mediaproc.config.loader import (
    ConfigFileError,
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from mediaproc.config.models import (
    EncodeConfig,
    LoggingConfig,
    MediaProcConfig,
    ScanConfig,
    ToolPathsConfig,
)

__all__ = [
    "ConfigFileError",
    "EncodeConfig",
    "EnvReader",
    "LoggingConfig",
    "MediaProcConfig",
    "ScanConfig",
    "ToolPathsConfig",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
