from __future__ import annotations

import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from types import FrameType

import typer

from aurup import __version__
from aurup.cli.context import build_context
from aurup.core.errors import ErrorCode
from aurup.core.result import Err, Ok
from aurup.output.console import ConsoleProtocol
from aurup.output.errors import print_update_error, update_error_exit_code
from aurup.services.update.model import PublishOutcome, RunOptions, UpdateReport
from aurup.services.update.service import UpdateService

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


@dataclass
class _Invocation:
    """Set once argument parsing succeeded and the command body runs."""

    started: bool = False


def _report(report: UpdateReport, console: ConsoleProtocol) -> None:
    match report.publish:
        case None:
            return
        case PublishOutcome.NO_CHANGES:
            console.success(f"{report.package} {report.new_version}: registry already up to date")
        case PublishOutcome.COMMITTED:
            console.success(
                f"[DRY RUN] {report.package} {report.new_version}: committed, push skipped"
            )
        case PublishOutcome.PUBLISHED:
            console.success(f"{report.package} {report.new_version}: published")
        case PublishOutcome.SKIPPED:
            console.success(f"{report.package} {report.new_version}: updated locally")


@app.command()
def update(
    ctx: typer.Context,
    package_dir: str | None = typer.Argument(
        None,
        help="Package directory containing a PKGBUILD",
        show_default=False,
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Force update even if version matches"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Commit but do not push to AUR"),
    skip_build: bool = typer.Option(
        False, "--skip-build", help="Skip makepkg step (metadata update only)"
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Check upstream for a new release and update/publish one AUR package."""
    if isinstance(ctx.obj, _Invocation):
        ctx.obj.started = True

    if version:
        typer.echo(__version__)
        raise typer.Exit(code=int(ErrorCode.OK))

    if not package_dir:
        typer.echo("error: No package directory specified.", err=True)
        typer.echo(ctx.get_help(), err=True)
        raise typer.Exit(code=int(ErrorCode.USAGE_ERROR))

    cli = build_context()
    service = UpdateService(
        env=cli.env,
        console=cli.console,
        http=cli.http,
        transport=cli.transport,
    )
    options = RunOptions(force=force, dry_run=dry_run, skip_build=skip_build)

    match service.run(Path(package_dir), options):
        case Ok(report):
            _report(report, cli.console)
        case Err(error):
            print_update_error(error, cli.console)
            raise typer.Exit(code=update_error_exit_code(error))


def _terminate(signum: int, _frame: FrameType | None) -> None:
    # Unwind through context managers so key files and clones are removed.
    raise SystemExit(128 + signum)


def main() -> None:
    signal.signal(signal.SIGTERM, _terminate)
    invocation = _Invocation()
    try:
        app(obj=invocation)
    except SystemExit as e:
        # Parse errors exit with 2, which is also RESOLUTION_ERROR.
        if e.code == 2 and not invocation.started:
            sys.exit(int(ErrorCode.USAGE_ERROR))
        raise
