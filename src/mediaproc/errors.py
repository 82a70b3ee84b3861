"""Exception hierarchy for mediaproc.

Three kinds of failure are distinguished so callers can route them:

- JobValidationError: caller-correctable configuration mistakes.
- ProviderContentError: defects attributable to the delivered media.
- ToolError: external executables that are missing or exit non-zero.

ProbeError covers structured probe output that cannot be deserialized.
"""

from __future__ import annotations


class MediaProcError(Exception):
    """Base class for all mediaproc errors."""


class JobValidationError(MediaProcError):
    """Raised when an encode job is configured incorrectly."""


class ProviderContentError(MediaProcError):
    """Raised when the input media itself is unsuitable for the job."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        super().__init__(message)
        self.file_path = file_path


class ToolError(MediaProcError):
    """Base class for external tool failures."""


class ToolNotFoundError(ToolError):
    """Raised when a required external executable cannot be located."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            f"Required tool '{tool_name}' not found. Install it or configure "
            f"its path (e.g. MEDIAPROC_{tool_name.upper()}_PATH)."
        )
        self.tool_name = tool_name


class ToolExecutionError(ToolError):
    """Raised when an external tool exits with a non-zero status.

    Attributes:
        executable: Path or name of the executable that failed.
        returncode: Process exit status.
        stderr: Tail of the captured diagnostic output.
    """

    # Amount of stderr carried on the exception
    STDERR_TAIL_CHARS = 2000

    def __init__(self, executable: str, returncode: int, stderr: str = "") -> None:
        tail = stderr[-self.STDERR_TAIL_CHARS :] if stderr else ""
        message = f"{executable} exited with code {returncode}"
        if tail:
            message = f"{message}: {tail.strip()}"
        super().__init__(message)
        self.executable = executable
        self.returncode = returncode
        self.stderr = tail


class ProbeError(MediaProcError):
    """Raised when probe output cannot be deserialized."""
