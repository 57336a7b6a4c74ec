"""Tests for aurup.services.update.metadata with the Arch tools faked."""

from __future__ import annotations

from pathlib import Path

import pytest

from aurup.core.manifest import load_manifest
from aurup.core.result import Err, Ok
from aurup.output.console import MockConsole
from aurup.platform.process import ProcessError
from aurup.services.update.metadata import (
    regenerate_checksums,
    regenerate_srcinfo,
    rewrite_version,
    update_metadata,
)
from aurup.services.update.model import UpdateDecision

PKGBUILD = """\
_repouser=acme
_reponame=foo
pkgname=foo-bin
pkgver=1.0.0
pkgrel=4
source=("https://example.com/foo-${pkgver}.tar.gz")
sha256sums=('aaaa')
"""

SRCINFO = "pkgbase = foo-bin\n\tpkgver = 1.1.0\n"


@pytest.fixture
def pkg_dir(tmp_path: Path) -> Path:
    d = tmp_path / "foo-bin"
    d.mkdir()
    (d / "PKGBUILD").write_text(PKGBUILD, encoding="utf-8")
    return d


@pytest.fixture
def tools(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Pretend updpkgsums and makepkg are installed and succeed."""
    calls: list[list[str]] = []

    def fake_run(cmd, cwd, env=None, *, timeout=None):
        calls.append(cmd)
        return Ok(SRCINFO)

    def fake_run_silent(cmd, cwd, env=None, *, timeout=None):
        calls.append(cmd)
        return Ok(None)

    monkeypatch.setattr("aurup.services.update.metadata.shutil.which", lambda name: f"/usr/bin/{name}")
    monkeypatch.setattr("aurup.services.update.metadata.run", fake_run)
    monkeypatch.setattr("aurup.services.update.metadata.run_silent", fake_run_silent)
    return calls


def _failing(stderr: str):
    def fake(cmd, cwd, env=None, *, timeout=None):
        return Err(ProcessError(tuple(cmd), 1, "", stderr))

    return fake


class TestRewriteVersion:
    def test_version_change_resets_revision(self, pkg_dir: Path) -> None:
        manifest = load_manifest(pkg_dir).unwrap()
        console = MockConsole()

        result = rewrite_version(manifest, "1.1.0", reset_revision=True, console=console)

        assert result == Ok(None)
        text = (pkg_dir / "PKGBUILD").read_text(encoding="utf-8")
        assert "pkgver=1.1.0\n" in text
        assert "pkgrel=1\n" in text
        assert console.find("Reset pkgrel to 1")

    def test_forced_keeps_revision(self, pkg_dir: Path) -> None:
        manifest = load_manifest(pkg_dir).unwrap()

        rewrite_version(manifest, "1.0.0", reset_revision=False, console=MockConsole())

        text = (pkg_dir / "PKGBUILD").read_text(encoding="utf-8")
        assert "pkgver=1.0.0\n" in text
        assert "pkgrel=4\n" in text

    def test_other_lines_untouched(self, pkg_dir: Path) -> None:
        manifest = load_manifest(pkg_dir).unwrap()

        rewrite_version(manifest, "2.0", reset_revision=True, console=MockConsole())

        text = (pkg_dir / "PKGBUILD").read_text(encoding="utf-8")
        assert 'source=("https://example.com/foo-${pkgver}.tar.gz")' in text
        assert "sha256sums=('aaaa')" in text

    def test_missing_pkgver_line_is_refused(self, pkg_dir: Path) -> None:
        (pkg_dir / "PKGBUILD").write_text("pkgname=foo-bin\npkgrel=4\n", encoding="utf-8")
        manifest = load_manifest(pkg_dir).unwrap()
        console = MockConsole()

        result = rewrite_version(manifest, "1.1.0", reset_revision=True, console=console)

        assert isinstance(result, Err)
        assert result.error.kind == "manifest_write_failed"
        assert "pkgver" in result.error.message
        assert (pkg_dir / "PKGBUILD").read_text(encoding="utf-8") == "pkgname=foo-bin\npkgrel=4\n"
        assert not console.find("pkgver=1.1.0")

    def test_missing_pkgrel_line_is_not_reported_as_reset(self, pkg_dir: Path) -> None:
        (pkg_dir / "PKGBUILD").write_text("pkgname=foo-bin\npkgver=1.0\n", encoding="utf-8")
        manifest = load_manifest(pkg_dir).unwrap()
        console = MockConsole()

        result = rewrite_version(manifest, "1.1", reset_revision=True, console=console)

        assert result == Ok(None)
        assert (pkg_dir / "PKGBUILD").read_text(encoding="utf-8") == "pkgname=foo-bin\npkgver=1.1\n"
        assert not console.find("Reset pkgrel to 1")
        assert console.find("no pkgrel= line")

    def test_unwritable(self, pkg_dir: Path) -> None:
        manifest = load_manifest(pkg_dir).unwrap()
        (pkg_dir / "PKGBUILD").unlink()

        result = rewrite_version(manifest, "2.0", reset_revision=True, console=MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "manifest_write_failed"


class TestRegenerate:
    def test_checksums_tool_missing(self, pkg_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("aurup.services.update.metadata.shutil.which", lambda name: None)

        result = regenerate_checksums(pkg_dir, MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "tool_missing"
        assert result.error.hint == "install pacman-contrib"

    def test_checksums_failure(
        self, pkg_dir: Path, tools: list[list[str]], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("aurup.services.update.metadata.run_silent", _failing("404 Not Found"))

        result = regenerate_checksums(pkg_dir, MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "checksum_failed"
        assert result.error.hint is not None
        assert result.error.hint.startswith("404 Not Found\n")
        assert "git checkout -- PKGBUILD" in result.error.hint

    def test_checksums_failure_without_stderr_points_at_rollback(
        self, pkg_dir: Path, tools: list[list[str]], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("aurup.services.update.metadata.run_silent", _failing(""))

        result = regenerate_checksums(pkg_dir, MockConsole())

        assert isinstance(result, Err)
        assert result.error.hint is not None
        assert "git checkout -- PKGBUILD" in result.error.hint

    def test_srcinfo_written_from_output(self, pkg_dir: Path, tools: list[list[str]]) -> None:
        result = regenerate_srcinfo(pkg_dir, MockConsole())

        assert result == Ok(pkg_dir / ".SRCINFO")
        assert (pkg_dir / ".SRCINFO").read_text(encoding="utf-8") == SRCINFO
        assert tools == [["makepkg", "--printsrcinfo"]]

    def test_srcinfo_failure_leaves_no_file(
        self, pkg_dir: Path, tools: list[list[str]], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("aurup.services.update.metadata.run", _failing("syntax error"))

        result = regenerate_srcinfo(pkg_dir, MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "srcinfo_failed"
        assert not (pkg_dir / ".SRCINFO").exists()


class TestUpdateMetadata:
    def test_order(self, pkg_dir: Path, tools: list[list[str]]) -> None:
        manifest = load_manifest(pkg_dir).unwrap()

        result = update_metadata(manifest, "1.1.0", UpdateDecision.VERSION_CHANGED, MockConsole())

        assert result == Ok(None)
        assert tools == [["updpkgsums"], ["makepkg", "--printsrcinfo"]]
        assert "pkgver=1.1.0" in (pkg_dir / "PKGBUILD").read_text(encoding="utf-8")
        assert (pkg_dir / ".SRCINFO").is_file()

    def test_checksum_failure_stops_before_srcinfo(
        self, pkg_dir: Path, tools: list[list[str]], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("aurup.services.update.metadata.run_silent", _failing("boom"))
        manifest = load_manifest(pkg_dir).unwrap()

        result = update_metadata(manifest, "1.1.0", UpdateDecision.VERSION_CHANGED, MockConsole())

        assert isinstance(result, Err)
        assert result.error.kind == "checksum_failed"
        assert tools == []
        assert not (pkg_dir / ".SRCINFO").exists()
        # the pkgver rewrite is not rolled back
        assert "pkgver=1.1.0" in (pkg_dir / "PKGBUILD").read_text(encoding="utf-8")
