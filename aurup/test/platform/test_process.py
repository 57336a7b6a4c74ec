"""Tests for aurup.platform.process."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from aurup.core.result import Err, Ok
from aurup.platform.process import ProcessError, run, run_silent

PY = sys.executable


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "push"), returncode=128, stdout="", stderr="denied")
        assert str(error) == "git push failed (exit 128)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("git", "clone", "ssh://aur@aur.archlinux.org/x.git", "/tmp/x"),
            returncode=128,
            stdout="",
            stderr="",
        )
        assert str(error) == "git clone ssh://aur@aur.archlinux.org/x.git ... failed (exit 128)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "print('pkgbase = foo')"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "pkgbase = foo" in result.value

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert len(result.error.stderr) > 0

    def test_captures_stderr(self, tmp_path: Path) -> None:
        result = run(
            [PY, "-c", "import sys; sys.stderr.write('error msg'); sys.exit(1)"],
            cwd=tmp_path,
        )

        assert isinstance(result, Err)
        assert "error msg" in result.error.stderr

    def test_uses_cwd(self, tmp_path: Path) -> None:
        (tmp_path / "PKGBUILD").write_text("pkgname=x\n")

        result = run([PY, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert "PKGBUILD" in result.value

    def test_uses_env(self, tmp_path: Path) -> None:
        env = os.environ.copy()
        env["GIT_SSH_COMMAND"] = "ssh -i key"

        result = run(
            [PY, "-c", "import os; print(os.environ['GIT_SSH_COMMAND'])"],
            cwd=tmp_path,
            env=env,
        )

        assert isinstance(result, Ok)
        assert "ssh -i key" in result.value

    def test_arguments_are_not_shell_interpreted(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import sys; print(sys.argv[1])", "1.0;rm -rf x"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert result.value.strip() == "1.0;rm -rf x"

    def test_timeout(self, tmp_path: Path) -> None:
        result = run([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.5)

        assert isinstance(result, Err)
        assert "timed out" in result.error.stderr.lower()


class TestRunSilent:
    def test_success_returns_none(self, tmp_path: Path) -> None:
        result = run_silent([PY, "-c", "pass"], cwd=tmp_path, timeout=30.0)

        assert isinstance(result, Ok)
        assert result.value is None

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run_silent([PY, "-c", "import sys; sys.exit(3)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 3

    def test_timeout(self, tmp_path: Path) -> None:
        result = run_silent([PY, "-c", "import time; time.sleep(10)"], cwd=tmp_path, timeout=0.5)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
