"""Tests for ProcessRunner using the running Python interpreter as the tool."""

from __future__ import annotations

import os
import sys
import threading

import pytest

from mediaproc.core.process import ProcessRunner, merge_env
from mediaproc.errors import ToolExecutionError, ToolNotFoundError

PY = sys.executable


def script(code: str) -> list[str]:
    return ["-c", code]


class TestMergeEnv:
    """Tests for merge_env."""

    def test_no_overlay_inherits(self) -> None:
        assert merge_env(None) is None
        assert merge_env({}) is None

    def test_overlay_applied_to_copy(self) -> None:
        base = {"PATH": "/bin", "LANG": "C"}
        merged = merge_env({"LANG": "en_US.UTF-8", "X": "1"}, base)

        assert merged == {"PATH": "/bin", "LANG": "en_US.UTF-8", "X": "1"}
        assert base == {"PATH": "/bin", "LANG": "C"}

    def test_defaults_to_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MEDIAPROC_BASE_VAR", "present")
        merged = merge_env({"X": "1"})
        assert merged is not None
        assert merged["MEDIAPROC_BASE_VAR"] == "present"


class TestProcessRunner:
    """Tests for ProcessRunner."""

    def test_captures_stdout_and_stderr(self) -> None:
        result = ProcessRunner().run(
            PY,
            script("import sys; print('out'); print('err', file=sys.stderr)"),
        )
        assert result.returncode == 0
        assert result.stdout == "out"
        assert result.stderr == "err"
        assert result.elapsed >= 0

    def test_run_stdout_and_run_stderr(self) -> None:
        runner = ProcessRunner()
        code = script("import sys; print('o'); print('e', file=sys.stderr)")
        assert runner.run_stdout(PY, code) == "o"
        assert runner.run_stderr(PY, code) == "e"

    def test_large_output_on_both_channels(self) -> None:
        """Both pipes are drained while the process runs."""
        code = script(
            "import sys\n"
            "for i in range(20000):\n"
            "    print(i)\n"
            "    print(i, file=sys.stderr)\n"
        )
        result = ProcessRunner(timeout=30).run(PY, code)
        assert len(result.stdout.splitlines()) == 20000
        assert len(result.stderr.splitlines()) == 20000

    def test_nonzero_exit_raises(self) -> None:
        code = script("import sys; print('bad input', file=sys.stderr); sys.exit(3)")
        with pytest.raises(ToolExecutionError) as exc_info:
            ProcessRunner().run(PY, code)

        assert exc_info.value.returncode == 3
        assert "bad input" in exc_info.value.stderr
        assert "exited with code 3" in str(exc_info.value)

    def test_missing_executable(self) -> None:
        with pytest.raises(ToolNotFoundError) as exc_info:
            ProcessRunner().run("/nonexistent/bin/ffmpeg", ["-version"])
        assert exc_info.value.tool_name == "ffmpeg"

    def test_timeout_kills_process(self) -> None:
        runner = ProcessRunner(timeout=0.5)
        with pytest.raises(ToolExecutionError) as exc_info:
            runner.run(PY, script("import time; time.sleep(30)"))
        assert exc_info.value.returncode == -1
        assert "timed out" in exc_info.value.stderr

    def test_env_overlay_reaches_child_only(self) -> None:
        code = script("import os; print(os.environ['FONTCONFIG_FILE'])")
        out = ProcessRunner().run_stdout(
            PY, code, env={"FONTCONFIG_FILE": "/fonts/fonts.conf"}
        )
        assert out == "/fonts/fonts.conf"
        assert "FONTCONFIG_FILE" not in os.environ or (
            os.environ["FONTCONFIG_FILE"] != "/fonts/fonts.conf"
        )

    def test_streaming_delivers_lines(self) -> None:
        out_lines: list[str] = []
        err_lines: list[str] = []
        code = script(
            "import sys\n"
            "print('a'); print('b')\n"
            "print('frame= 1 fps=1 time=00:00:01.00', file=sys.stderr)\n"
        )

        rc = ProcessRunner().run_streaming(PY, code, out_lines.append, err_lines.append)

        assert rc == 0
        assert out_lines == ["a", "b"]
        assert err_lines == ["frame= 1 fps=1 time=00:00:01.00"]

    def test_streaming_keeps_bounded_tail_for_errors(self) -> None:
        code = script(
            "import sys\n"
            "for i in range(500):\n"
            "    print(f'line {i}', file=sys.stderr)\n"
            "sys.exit(1)\n"
        )
        runner = ProcessRunner(stream_tail_lines=10)
        with pytest.raises(ToolExecutionError) as exc_info:
            runner.run_streaming(PY, code, None, None)

        assert "line 499" in exc_info.value.stderr
        assert "line 400" not in exc_info.value.stderr

    def test_concurrent_runs_do_not_share_output(self) -> None:
        runner = ProcessRunner()
        results: dict[int, str] = {}

        def work(n: int) -> None:
            results[n] = runner.run_stdout(PY, script(f"print({n})"))

        threads = [threading.Thread(target=work, args=(n,)) for n in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == {n: str(n) for n in range(4)}
