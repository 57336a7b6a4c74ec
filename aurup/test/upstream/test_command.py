"""Tests for aurup.upstream.command."""

from __future__ import annotations

import sys
from pathlib import Path

from aurup.core.result import Err, Ok
from aurup.upstream.command import run_tag_command

PY = sys.executable


def test_last_line_is_tag(tmp_path: Path) -> None:
    result = run_tag_command((PY, "-c", "print('checking...'); print('v2.3.4')"), tmp_path)

    assert result == Ok("v2.3.4")


def test_runs_in_package_dir(tmp_path: Path) -> None:
    (tmp_path / "VERSION").write_text("v9.9\n", encoding="utf-8")

    result = run_tag_command((PY, "-c", "print(open('VERSION').read())"), tmp_path)

    assert result == Ok("v9.9")


def test_no_output_is_failure(tmp_path: Path) -> None:
    result = run_tag_command((PY, "-c", "pass"), tmp_path)

    assert isinstance(result, Err)
    assert "no tag" in result.error.stderr


def test_nonzero_exit_is_failure(tmp_path: Path) -> None:
    result = run_tag_command((PY, "-c", "import sys; sys.exit(2)"), tmp_path)

    assert isinstance(result, Err)
    assert result.error.returncode == 2
