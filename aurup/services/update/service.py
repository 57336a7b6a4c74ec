"""Update orchestration for a single package directory.

    validate dir -> PKGBUILD -> resolve upstream tag -> normalize/validate
      -> decide (up to date / forced / changed)
      -> rewrite pkgver/pkgrel, updpkgsums, .SRCINFO
      -> makepkg (unless --skip-build)
      -> publish

Each step returns a Result and the first Err ends the run. The package
directory is passed to every step explicitly; the process working directory
is never changed, so two services can run in one process without
interfering.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from aurup.core.config import PackageConfig, RunEnvironment, load_package_config
from aurup.core.manifest import PackageManifest, load_manifest
from aurup.core.result import Err, Ok, Result
from aurup.output.console import ConsoleProtocol, Style
from aurup.services.update.build import verify_build
from aurup.services.update.errors import UpdateError
from aurup.services.update.metadata import update_metadata
from aurup.services.update.model import (
    ResolvedRelease,
    RunOptions,
    UpdateDecision,
    UpdateReport,
    decide,
)
from aurup.services.update.publish import Publisher, RegistryTransport
from aurup.services.update.validation import (
    normalize_tag,
    validate_identifier,
    validate_package_dir,
)
from aurup.upstream.command import run_tag_command
from aurup.upstream.github import github_latest_tag
from aurup.upstream.http import HttpClient, RealHttpClient

__all__ = ["UpdateService"]


class UpdateService:
    """Decides whether a package needs an update and carries it through.

    Attributes:
        env: Run environment (CI flag, identity, key material)
        console: Output sink
        http: Client for the releases API (default: urllib client)
        transport: Registry transport (default: git CLI over SSH)
    """

    def __init__(
        self,
        *,
        env: RunEnvironment,
        console: ConsoleProtocol,
        http: HttpClient | None = None,
        transport: RegistryTransport | None = None,
    ) -> None:
        self._env = env
        self._console = console
        self._http = http or RealHttpClient(token=env.github_token)
        self._publisher = Publisher(env=env, console=console, transport=transport)

    @contextmanager
    def _phase(self, title: str) -> Iterator[None]:
        self._console.group(title)
        try:
            yield
        finally:
            self._console.end_group()

    def run(self, pkg_dir: Path, options: RunOptions) -> Result[UpdateReport, UpdateError]:
        """Run the whole pipeline for one package.

        Returns:
            Ok(UpdateReport) for every successful outcome, including "up to
            date" and "nothing to publish"; Err(UpdateError) otherwise.
        """
        with self._phase(f"Initialization: {pkg_dir}"):
            loaded = self._load(pkg_dir)
            if isinstance(loaded, Err):
                return loaded
            manifest, config = loaded.value

        with self._phase("Check Upstream"):
            release = self._resolve(manifest, config)
            if isinstance(release, Err):
                return release
            new_version = release.value.normalized_version
            self._console.info(f"Upstream Version: {new_version}")

            decision = decide(manifest.version, release.value, options)
            match decision:
                case UpdateDecision.UP_TO_DATE:
                    self._console.success("Package is up to date.")
                    return Ok(
                        UpdateReport(
                            package=manifest.name,
                            current_version=manifest.version,
                            new_version=new_version,
                            decision=decision,
                        )
                    )
                case UpdateDecision.FORCED_UPDATE:
                    self._console.info("Versions match, but forcing update...")
                case UpdateDecision.VERSION_CHANGED:
                    self._console.info("New version available!")

        with self._phase("Update Metadata"):
            mutated = update_metadata(manifest, new_version, decision, self._console)
            if isinstance(mutated, Err):
                return mutated

        with self._phase("Build & Verify"):
            built = verify_build(
                manifest.directory,
                skip=options.skip_build,
                unattended=self._env.ci,
                console=self._console,
                timeout=self._env.build_timeout,
            )
            if isinstance(built, Err):
                return built

        with self._phase("Publish to AUR"):
            published = self._publisher.publish(
                manifest,
                new_version,
                options,
                extra_patterns=config.publish.extra_files,
            )
            if isinstance(published, Err):
                return published

        return Ok(
            UpdateReport(
                package=manifest.name,
                current_version=manifest.version,
                new_version=new_version,
                decision=decision,
                publish=published.value,
                built=built.value,
            )
        )

    def _load(self, pkg_dir: Path) -> Result[tuple[PackageManifest, PackageConfig], UpdateError]:
        checked = validate_package_dir(str(pkg_dir))
        if isinstance(checked, Err):
            return checked
        self._console.info(f"Working directory: {checked.value.resolve()}")

        loaded = load_manifest(checked.value)
        if isinstance(loaded, Err):
            return Err(UpdateError(kind="manifest_missing", message=loaded.error.message))
        manifest = loaded.value

        if manifest.name_from_directory:
            self._console.info(
                f"Could not parse pkgname, using directory name: {manifest.name}"
            )
        name = validate_identifier(manifest.name, "package name")
        if isinstance(name, Err):
            return name

        config = load_package_config(checked.value)
        if isinstance(config, Err):
            return Err(UpdateError(kind="config_invalid", message=config.error.message))
        if config.value.upstream.command:
            self._console.info("Using custom upstream command from update_config.toml")

        owner = config.value.upstream.owner or manifest.upstream_owner
        repo = config.value.upstream.repo or manifest.upstream_repo
        self._console.info(f"Package: {manifest.name}")
        self._console.info(f"Upstream: {owner or '?'}/{repo or '?'}")
        self._console.info(f"Current Version: {manifest.version or '(none)'}")
        return Ok((manifest, config.value))

    def _resolve(
        self,
        manifest: PackageManifest,
        config: PackageConfig,
    ) -> Result[ResolvedRelease, UpdateError]:
        tag = self._latest_tag(manifest, config)
        if isinstance(tag, Err):
            return tag
        self._console.print(f"latest tag: {tag.value}", Style.DIM)
        return normalize_tag(tag.value)

    def _latest_tag(
        self,
        manifest: PackageManifest,
        config: PackageConfig,
    ) -> Result[str, UpdateError]:
        command = config.upstream.command
        if command:
            hooked = run_tag_command(command, manifest.directory)
            if isinstance(hooked, Err):
                e = hooked.error
                return Err(
                    UpdateError(
                        kind="hook_failed",
                        message=f"custom upstream command failed: {e}",
                        hint=e.stderr.strip() or None,
                    )
                )
            return Ok(hooked.value)

        owner = config.upstream.owner or manifest.upstream_owner
        repo = config.upstream.repo or manifest.upstream_repo
        if not owner or not repo:
            return Err(
                UpdateError(
                    kind="missing_upstream",
                    message="Missing _repouser or _reponame in PKGBUILD",
                    hint="set them, or add [upstream] command to update_config.toml",
                )
            )

        for value, what in ((owner, "upstream owner"), (repo, "upstream repository")):
            checked = validate_identifier(value, what)
            if isinstance(checked, Err):
                return checked

        fetched = github_latest_tag(self._http, owner, repo)
        if isinstance(fetched, Err):
            return Err(
                UpdateError(
                    kind="upstream_failed",
                    message="Failed to fetch upstream version",
                    hint=str(fetched.error),
                )
            )
        return Ok(fetched.value)
