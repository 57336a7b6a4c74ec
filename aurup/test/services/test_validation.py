"""Tests for aurup.services.update.validation."""

from __future__ import annotations

from pathlib import Path

import pytest

from aurup.core.result import Err, Ok
from aurup.services.update.validation import (
    normalize_tag,
    validate_identifier,
    validate_package_dir,
)

TAGS = ["v1.0.0", "1.0.0", "v2.0.0-rc.1", "v1.2.3+build.5", "vv1", "version_2", "20240101", "v0"]


class TestNormalizeTag:
    def test_strips_leading_v(self) -> None:
        result = normalize_tag("v1.1.0")

        assert isinstance(result, Ok)
        assert result.value.raw_tag == "v1.1.0"
        assert result.value.normalized_version == "1.1.0"

    def test_without_prefix(self) -> None:
        assert normalize_tag("1.1.0").unwrap().normalized_version == "1.1.0"

    @pytest.mark.parametrize("tag", TAGS)
    def test_idempotent(self, tag: str) -> None:
        once = normalize_tag(tag).unwrap().normalized_version
        twice = normalize_tag(once).unwrap().normalized_version
        assert twice == once

    @pytest.mark.parametrize("tag", TAGS)
    def test_strips_at_most_one_v(self, tag: str) -> None:
        version = normalize_tag(tag).unwrap().normalized_version
        assert version in (tag, tag[1:])

    def test_v_without_digit_is_kept(self) -> None:
        assert normalize_tag("vv1").unwrap().normalized_version == "vv1"

    def test_surrounding_whitespace(self) -> None:
        assert normalize_tag(" v1.0\n").unwrap().normalized_version == "1.0"

    @pytest.mark.parametrize(
        "tag",
        [
            "v1.2.3-evil;rm",
            "v1.0 && curl x",
            "1.0$(id)",
            "1.0`id`",
            "1.0/../x",
            "1.0\n2.0",
            "",
            "1.0'",
        ],
    )
    def test_rejects_outside_whitelist(self, tag: str) -> None:
        result = normalize_tag(tag)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
        assert result.error.is_security


class TestValidateIdentifier:
    @pytest.mark.parametrize("value", ["foo", "foo-bin", "python-foo_bar", "lib32-x+y", "a.b"])
    def test_accepts(self, value: str) -> None:
        assert validate_identifier(value, "package name") == Ok(value)

    @pytest.mark.parametrize("value", ["..", ".", "a b", "a;b", "a/b", "$(id)", ""])
    def test_rejects(self, value: str) -> None:
        result = validate_identifier(value, "package name")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_identifier"


class TestValidatePackageDir:
    def test_accepts_existing(self, tmp_path: Path) -> None:
        pkg = tmp_path / "foo-bin"
        pkg.mkdir()

        assert validate_package_dir(str(pkg)) == Ok(pkg)

    def test_missing(self, tmp_path: Path) -> None:
        result = validate_package_dir(str(tmp_path / "absent"))

        assert isinstance(result, Err)
        assert result.error.kind == "directory_missing"

    @pytest.mark.parametrize("raw", ["../etc", "foo/../../x", "foo;rm", "foo bar", "$HOME"])
    def test_rejects_traversal_and_metacharacters(self, raw: str) -> None:
        result = validate_package_dir(raw)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_identifier"
