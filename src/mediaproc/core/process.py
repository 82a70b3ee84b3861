"""Process runner for external tool invocation.

ProcessRunner starts an executable, drains standard output and standard
error on two reader threads while the process runs, and reports non-zero
exits as ToolExecutionError. Each call owns its accumulators, so concurrent
invocations never share captured text.

Environment changes are passed as an explicit overlay per call. The overlay
is merged onto a copy of os.environ; the ambient process environment is
never modified.
"""

from __future__ import annotations

import logging
import os
import subprocess  # nosec B404 - subprocess is required for ffmpeg invocation
import threading
import time
from collections import deque
from collections.abc import Callable, Mapping, MutableSequence, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

from mediaproc.errors import ToolExecutionError, ToolNotFoundError

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]


@dataclass(frozen=True)
class ProcessResult:
    """Outcome of a completed external process."""

    returncode: int
    stdout: str
    stderr: str
    elapsed: float


def merge_env(
    overlay: Mapping[str, str] | None,
    base: Mapping[str, str] | None = None,
) -> dict[str, str] | None:
    """Return a fresh environment with overlay applied on top of base.

    Args:
        overlay: Variables to add or replace for one invocation.
        base: Starting environment. Defaults to os.environ.

    Returns:
        A new dict, or None when there is nothing to overlay (the child then
        inherits the parent environment unchanged).
    """
    if not overlay:
        return None
    env = dict(base if base is not None else os.environ)
    env.update(overlay)
    return env


def _drain(
    stream: IO[str],
    sink: MutableSequence[str],
    callback: LineCallback | None,
) -> None:
    """Read lines from a pipe until EOF."""
    try:
        for raw in stream:
            line = raw.rstrip("\r\n")
            sink.append(line)
            if callback is not None:
                callback(line)
    except (ValueError, OSError) as e:
        # Pipe closed underneath us
        logger.debug("Output reader stopped: %s", e)
    finally:
        stream.close()


class ProcessRunner:
    """Runs external executables with concurrent output draining.

    Args:
        timeout: Seconds to wait for a process before killing it. None
            waits indefinitely.
        stream_tail_lines: Lines of each channel retained in streaming mode
            (for error reporting only).
    """

    def __init__(
        self,
        timeout: float | None = None,
        stream_tail_lines: int = 200,
    ) -> None:
        self._timeout = timeout
        self._stream_tail_lines = stream_tail_lines

    def run(
        self,
        executable: str | Path,
        args: Sequence[str | Path],
        *,
        env: Mapping[str, str] | None = None,
        on_stdout: LineCallback | None = None,
        on_stderr: LineCallback | None = None,
        keep_output: bool = True,
    ) -> ProcessResult:
        """Run a process to completion.

        Args:
            executable: Path or name of the executable.
            args: Arguments, excluding the executable itself.
            env: Environment overlay for this call only.
            on_stdout: Invoked with each stdout line as it arrives.
            on_stderr: Invoked with each stderr line as it arrives.
            keep_output: When False only a bounded tail of each channel
                is retained.

        Returns:
            ProcessResult with the captured text.

        Raises:
            ToolNotFoundError: If the executable cannot be started.
            ToolExecutionError: If the process exits non-zero or times out.
        """
        cmd = [str(executable), *(str(a) for a in args)]
        tool_name = Path(cmd[0]).name

        logger.debug(
            "Executing command: %s",
            " ".join(cmd),
            extra={"command": tool_name, "arg_count": len(cmd)},
        )
        start_time = time.monotonic()

        try:
            process = subprocess.Popen(  # nosec B603 - args built internally
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                env=merge_env(env),
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(tool_name) from e

        stdout_sink: MutableSequence[str]
        stderr_sink: MutableSequence[str]
        if keep_output:
            stdout_sink, stderr_sink = [], []
        else:
            stdout_sink = deque(maxlen=self._stream_tail_lines)
            stderr_sink = deque(maxlen=self._stream_tail_lines)

        assert process.stdout is not None
        assert process.stderr is not None
        readers = [
            threading.Thread(
                target=_drain,
                args=(process.stdout, stdout_sink, on_stdout),
                daemon=True,
            ),
            threading.Thread(
                target=_drain,
                args=(process.stderr, stderr_sink, on_stderr),
                daemon=True,
            ),
        ]
        for reader in readers:
            reader.start()

        try:
            returncode = process.wait(timeout=self._timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
            for reader in readers:
                reader.join()
            logger.error(
                "Command timed out after %s seconds: %s", self._timeout, tool_name
            )
            raise ToolExecutionError(
                cmd[0], -1, "\n".join(stderr_sink) + "\n(timed out)"
            ) from None

        for reader in readers:
            reader.join()

        elapsed = time.monotonic() - start_time
        result = ProcessResult(
            returncode=returncode,
            stdout="\n".join(stdout_sink),
            stderr="\n".join(stderr_sink),
            elapsed=elapsed,
        )
        logger.debug(
            "Command completed",
            extra={
                "command": tool_name,
                "return_code": returncode,
                "elapsed_seconds": round(elapsed, 3),
            },
        )

        if returncode != 0:
            raise ToolExecutionError(cmd[0], returncode, result.stderr)
        return result

    def run_stdout(
        self,
        executable: str | Path,
        args: Sequence[str | Path],
        env: Mapping[str, str] | None = None,
    ) -> str:
        """Run a process and return its captured standard output."""
        return self.run(executable, args, env=env).stdout

    def run_stderr(
        self,
        executable: str | Path,
        args: Sequence[str | Path],
        env: Mapping[str, str] | None = None,
    ) -> str:
        """Run a process and return its captured standard error."""
        return self.run(executable, args, env=env).stderr

    def run_streaming(
        self,
        executable: str | Path,
        args: Sequence[str | Path],
        on_stdout: LineCallback | None,
        on_stderr: LineCallback | None,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run a process, delivering lines to callbacks as they arrive.

        Returns:
            The process exit code (always 0; failures raise).
        """
        result = self.run(
            executable,
            args,
            env=env,
            on_stdout=on_stdout,
            on_stderr=on_stderr,
            keep_output=False,
        )
        return result.returncode
