from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from dotconverge import __version__
from dotconverge.errors import DotConvergeError
from dotconverge.executor import ConvergenceExecutor
from dotconverge.logging_utils import LOG_LEVEL_ENV, setup_logging
from dotconverge.settings import Settings
from dotconverge.stores import StoreBackend
from dotconverge.tui import ConvergeConsoleUI
from dotconverge.tui.enums import OutputFormat


STORE_VALUES = [backend.value for backend in StoreBackend]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--repo",
    "repo_root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="DOTCONVERGE_REPO",
    default=None,
    help="Configuration repository root (default: current directory).",
)
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="DOTCONVERGE_HOME",
    default=None,
    help="Root that relative destinations resolve under (default: your home).",
)
@click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="DOTCONVERGE_MANIFEST",
    default=None,
    help="Action manifest (default: dotconverge.yaml in the repository).",
)
@click.option(
    "--store",
    "store_backend",
    type=click.Choice(STORE_VALUES, case_sensitive=False),
    envvar="DOTCONVERGE_STORE",
    default=StoreBackend.USER.value,
    show_default=True,
    help="Where PATH entries and environment variables are written.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar=LOG_LEVEL_ENV,
    default="WARNING",
    show_default=True,
)
@click.version_option(__version__, prog_name="dotconverge")
@click.pass_context
def cli(
    ctx: click.Context,
    repo_root: Optional[Path],
    home: Optional[Path],
    manifest: Optional[Path],
    store_backend: str,
    log_level: str,
) -> None:
    """Converge your home directory toward a dotfiles repository."""
    setup_logging(log_level)
    ctx.obj = Settings(
        repo_root=repo_root or Path.cwd(),
        home=(home or Path.home()).expanduser(),
        store_backend=StoreBackend(store_backend.lower()),
        manifest=manifest,
    )


def _load_actions(settings: Settings):
    repository = settings.repository()
    try:
        return repository, repository.load_actions()
    except DotConvergeError as exc:
        raise click.ClickException(str(exc))


@cli.command(help="Apply every declared action and report the results.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice([item.value for item in OutputFormat], case_sensitive=False),
    default=OutputFormat.TABLE.value,
    show_default=True,
)
@click.pass_obj
def apply(settings: Settings, output_format: str) -> None:
    ui = ConvergeConsoleUI(Console(), home=settings.home)
    _, actions = _load_actions(settings)

    try:
        context = settings.context()
    except DotConvergeError as exc:
        raise click.ClickException(str(exc))

    report = ConvergenceExecutor(context).execute(actions)

    if output_format.lower() == OutputFormat.JSON.value:
        ui.render_report_json(report)
    else:
        ui.render_report(report, mode=f"apply:{settings.store_backend.value}")

    if report.has_failures():
        raise click.exceptions.Exit(report.exit_code())


@cli.command("list", help="List declared actions with resolved paths.")
@click.pass_obj
def list_actions(settings: Settings) -> None:
    ui = ConvergeConsoleUI(Console(), home=settings.home)
    repository, actions = _load_actions(settings)
    try:
        context = settings.context()
    except DotConvergeError as exc:
        raise click.ClickException(str(exc))
    rows = ConvergenceExecutor(context).describe(actions)
    ui.render_actions(rows, manifest=repository.manifest_path)


@cli.command(help="Validate the action manifest without applying it.")
@click.pass_obj
def validate(settings: Settings) -> None:
    ui = ConvergeConsoleUI(Console(), home=settings.home)
    repository, actions = _load_actions(settings)
    ui.render_manifest_valid(repository.manifest_path, len(actions))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
