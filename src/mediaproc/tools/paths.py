"""External tool location and per-call environment."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from mediaproc.errors import ToolNotFoundError

logger = logging.getLogger(__name__)

FONTCONFIG_FILE_NAME = "fonts.conf"


def require_tool(tool_name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool, raising an error if not available.

    Args:
        tool_name: Executable name to look up on PATH (e.g. "ffmpeg").
        configured: Explicitly configured path, used in preference to PATH.

    Returns:
        Path to the tool executable.

    Raises:
        ToolNotFoundError: If the tool cannot be found.
    """
    if configured is not None:
        if configured.exists():
            return configured
        logger.warning(
            "Configured path for %s does not exist: %s", tool_name, configured
        )
        raise ToolNotFoundError(tool_name)

    found = shutil.which(tool_name)
    if found is None:
        raise ToolNotFoundError(tool_name)
    return Path(found)


def fontconfig_env(fonts_dir: Path | None) -> dict[str, str]:
    """Environment overlay pointing fontconfig at a private fonts directory.

    Subtitle burn-in (the ass filter) renders through libass, which finds
    fonts via fontconfig.

    Returns:
        FONTCONFIG_FILE, FC_CONFIG_DIR and FONTCONFIG_PATH, or an empty
        dict when no fonts directory is configured.
    """
    if fonts_dir is None:
        return {}
    return {
        "FONTCONFIG_FILE": str(fonts_dir / FONTCONFIG_FILE_NAME),
        "FC_CONFIG_DIR": str(fonts_dir),
        "FONTCONFIG_PATH": str(fonts_dir),
    }
