"""External tool helpers: path resolution and progress parsing."""

from mediaproc.tools.paths import FONTCONFIG_FILE_NAME, fontconfig_env, require_tool
from mediaproc.tools.progress import (
    FFmpegProgress,
    ProgressLogger,
    is_progress_line,
    parse_stderr_progress,
)

__all__ = [
    "FONTCONFIG_FILE_NAME",
    "FFmpegProgress",
    "ProgressLogger",
    "fontconfig_env",
    "is_progress_line",
    "parse_stderr_progress",
    "require_tool",
]
