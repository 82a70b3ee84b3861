"""Core utilities shared across mediaproc."""

from mediaproc.core.process import (
    LineCallback,
    ProcessResult,
    ProcessRunner,
    merge_env,
)

__all__ = [
    "LineCallback",
    "ProcessResult",
    "ProcessRunner",
    "merge_env",
]
