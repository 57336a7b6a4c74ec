"""Typed configuration for a package update run.

Two sources feed a run:
- the process environment (CI flags, commit identity, SSH key material),
  read once into a frozen RunEnvironment;
- an optional per-package update_config.toml next to the PKGBUILD, which can
  override the upstream coordinates, replace the upstream query with a
  command, and list extra files to publish.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "AUR_REPO_URL_TEMPLATE",
    "AUR_DEFAULT_BRANCH",
    "PACKAGE_CONFIG_NAME",
    "ConfigError",
    "PackageConfig",
    "PublishConfig",
    "RunEnvironment",
    "UpstreamConfig",
    "load_package_config",
]

AUR_REPO_URL_TEMPLATE = "ssh://aur@aur.archlinux.org/{name}.git"
AUR_DEFAULT_BRANCH = "master"
DEFAULT_COMMIT_NAME = "aurup"
DEFAULT_COMMIT_EMAIL = "aurup@users.noreply.github.com"

PACKAGE_CONFIG_NAME = "update_config.toml"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when configuration cannot be loaded or parsed."""

    message: str
    path: Path | None = None


def _flag(env: Mapping[str, str], key: str) -> bool:
    return env.get(key, "").strip().lower() == "true"


def _float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True, slots=True)
class RunEnvironment:
    """Settings sourced from environment variables.

    Every field is optional; absence degrades to a local run (no publish)
    rather than an error.

    Attributes:
        ci: True when CI=true (unattended; enables publish and --noconfirm)
        github_actions: True when GITHUB_ACTIONS=true (log grouping markers)
        commit_name: git user.name for registry commits (AUR_USERNAME)
        commit_email: git user.email for registry commits (AUR_EMAIL)
        ssh_private_key: key material for the registry (AUR_SSH_PRIVATE_KEY)
        repo_url_template: registry clone URL with a {name} slot (AUR_REPO_URL)
        branch: registry branch to push to (AUR_BRANCH)
        github_token: optional token for the releases API (GITHUB_TOKEN)
        build_timeout: seconds before makepkg is killed (AURUP_BUILD_TIMEOUT)
    """

    ci: bool = False
    github_actions: bool = False
    commit_name: str = DEFAULT_COMMIT_NAME
    commit_email: str = DEFAULT_COMMIT_EMAIL
    ssh_private_key: str | None = field(default=None, repr=False)
    repo_url_template: str = AUR_REPO_URL_TEMPLATE
    branch: str = AUR_DEFAULT_BRANCH
    github_token: str | None = field(default=None, repr=False)
    build_timeout: float | None = None

    @classmethod
    def from_environ(cls, env: Mapping[str, str]) -> RunEnvironment:
        return cls(
            ci=_flag(env, "CI"),
            github_actions=_flag(env, "GITHUB_ACTIONS"),
            commit_name=get_str(env, "AUR_USERNAME") or DEFAULT_COMMIT_NAME,
            commit_email=get_str(env, "AUR_EMAIL") or DEFAULT_COMMIT_EMAIL,
            ssh_private_key=get_str(env, "AUR_SSH_PRIVATE_KEY"),
            repo_url_template=get_str(env, "AUR_REPO_URL") or AUR_REPO_URL_TEMPLATE,
            branch=get_str(env, "AUR_BRANCH") or AUR_DEFAULT_BRANCH,
            github_token=get_str(env, "GITHUB_TOKEN"),
            build_timeout=_float(env, "AURUP_BUILD_TIMEOUT"),
        )

    @property
    def can_publish(self) -> bool:
        """True when both the automated-environment flag and a key are set."""
        return self.ci and self.ssh_private_key is not None

    def repo_url(self, package: str) -> str:
        return self.repo_url_template.replace("{name}", package)


@dataclass(frozen=True, slots=True)
class UpstreamConfig:
    """[upstream] table.

    A non-empty command replaces the GitHub query entirely; its stdout is
    taken as the release tag.
    """

    owner: str | None = None
    repo: str | None = None
    command: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """[publish] table: glob patterns of extra files to sync to the registry."""

    extra_files: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PackageConfig:
    """Per-package configuration container."""

    upstream: UpstreamConfig = field(default_factory=UpstreamConfig)
    publish: PublishConfig = field(default_factory=PublishConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PackageConfig:
        upstream: StrDict = get_table(data, "upstream") or {}
        publish: StrDict = get_table(data, "publish") or {}

        command = upstream.get("command")
        if command is not None and get_str_list(upstream, "command") is None:
            raise TypeError("upstream.command must be a list of strings")
        extra = publish.get("extra_files")
        if extra is not None and get_str_list(publish, "extra_files") is None:
            raise TypeError("publish.extra_files must be a list of strings")

        return cls(
            upstream=UpstreamConfig(
                owner=get_str(upstream, "owner"),
                repo=get_str(upstream, "repo"),
                command=tuple(get_str_list(upstream, "command") or ()),
            ),
            publish=PublishConfig(
                extra_files=tuple(get_str_list(publish, "extra_files") or ()),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_package_config(pkg_dir: Path) -> Result[PackageConfig, ConfigError]:
    """Load update_config.toml from a package directory.

    A missing file is not an error and yields the default (empty) config.

    Returns:
        Ok(PackageConfig) on success, Err(ConfigError) on a malformed file
    """
    path = pkg_dir / PACKAGE_CONFIG_NAME
    if not path.is_file():
        return Ok(PackageConfig())

    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(PackageConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
