"""MEDIAPROC_* environment settings.

Keys are given without the prefix: ``reader.count("MAX_WORKERS")`` reads
MEDIAPROC_MAX_WORKERS. A value that is set but unusable is logged and
treated as unset, so the config file or the default applies instead.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

ENV_PREFIX = "MEDIAPROC_"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class EnvReader:
    """Typed access to MEDIAPROC_* variables.

    Args:
        env: Mapping to read instead of os.environ.
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    @staticmethod
    def name(key: str) -> str:
        return f"{ENV_PREFIX}{key}"

    def _raw(self, key: str) -> str | None:
        value = self._env.get(self.name(key))
        if value is None or not value.strip():
            return None
        return value.strip()

    def _ignore(self, key: str, value: str, reason: str) -> None:
        logger.warning("Ignoring %s=%r: %s", self.name(key), value, reason)

    def text(self, key: str) -> str | None:
        return self._raw(key)

    def count(self, key: str, *, minimum: int = 0) -> int | None:
        """Whole number of seconds, workers, etc. no smaller than minimum."""
        value = self._raw(key)
        if value is None:
            return None
        try:
            number = int(value)
        except ValueError:
            self._ignore(key, value, "not an integer")
            return None
        if number < minimum:
            self._ignore(key, value, f"must be >= {minimum}")
            return None
        return number

    def flag(self, key: str) -> bool | None:
        value = self._raw(key)
        if value is None:
            return None
        if value.casefold() in _TRUE:
            return True
        if value.casefold() in _FALSE:
            return False
        self._ignore(key, value, "expected true/false")
        return None

    def file_path(self, key: str) -> Path | None:
        """A path that may not exist yet (log file, config file)."""
        value = self._raw(key)
        return Path(value).expanduser() if value is not None else None

    def tool_path(self, tool: str) -> Path | None:
        """Executable configured as MEDIAPROC_<TOOL>_PATH; must exist."""
        key = f"{tool.upper()}_PATH"
        path = self.file_path(key)
        if path is not None and not path.is_file():
            self._ignore(key, str(path), "no such file")
            return None
        return path

    def directory(self, key: str) -> Path | None:
        path = self.file_path(key)
        if path is not None and not path.is_dir():
            self._ignore(key, str(path), "no such directory")
            return None
        return path
