"""Encode context for log records.

Each output is encoded by one worker, one pass at a time. The worker
slot, output id, output file and current pass are held in a single
ContextVar so concurrent workers never see each other's values.
"""

from __future__ import annotations

import contextvars
import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator


@dataclass(frozen=True)
class EncodeLogContext:
    """What a worker is producing right now."""

    worker_id: str | None = None
    output_id: str | None = None
    file_path: str | None = None
    # "1/2" while a pass is running
    encode_pass: str | None = None

    @property
    def tag(self) -> str:
        """Compact prefix for the text format, e.g. "[W01:O2 P1/2] "."""
        if not self.worker_id:
            return ""
        tag = f"W{self.worker_id}"
        if self.output_id:
            tag += f":{self.output_id}"
        if self.encode_pass:
            tag += f" P{self.encode_pass}"
        return f"[{tag}] "


_EMPTY = EncodeLogContext()

_current: contextvars.ContextVar[EncodeLogContext] = contextvars.ContextVar(
    "mediaproc_encode_context", default=_EMPTY
)


def current_context() -> EncodeLogContext:
    return _current.get()


def get_worker_context() -> tuple[str | None, str | None, str | None]:
    """Get current worker context as (worker_id, output_id, file_path)."""
    ctx = _current.get()
    return ctx.worker_id, ctx.output_id, ctx.file_path


def get_encode_pass() -> str | None:
    return _current.get().encode_pass


@contextmanager
def _using(ctx: EncodeLogContext) -> Generator[None, None, None]:
    token = _current.set(ctx)
    try:
        yield
    finally:
        _current.reset(token)


@contextmanager
def worker_context(
    worker_id: str,
    output_id: str | None = None,
    file_path: Path | str | None = None,
) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with a worker and output.

    Example:
        with worker_context("01", "O1", "/out/video_1.mp4"):
            logger.info("Encoding")  # record carries [W01:O1]
    """
    ctx = EncodeLogContext(
        worker_id=worker_id,
        output_id=output_id,
        file_path=str(file_path) if file_path is not None else None,
    )
    with _using(ctx):
        yield


@contextmanager
def pass_context(pass_number: int, total_passes: int) -> Generator[None, None, None]:
    """Add the running pass to the current worker context."""
    ctx = dataclasses.replace(
        _current.get(), encode_pass=f"{pass_number}/{total_passes}"
    )
    with _using(ctx):
        yield


class WorkerContextFilter(logging.Filter):
    """Copy the encode context onto each record.

    Sets worker_id, output_id, file_path and encode_pass, plus worker_tag
    for the text format. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _current.get()
        record.worker_id = ctx.worker_id
        record.output_id = ctx.output_id
        record.file_path = ctx.file_path
        record.encode_pass = ctx.encode_pass
        record.worker_tag = ctx.tag
        return True
