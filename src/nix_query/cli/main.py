"""
nix-query CLI: cached fuzzy search over the Nix package set.

Usage:
    nix-query                         # fuzzy-search every attribute with fzf
    nix-query info nixpkgs.gzip
    nix-query info --json nixpkgs.gzip
    nix-query print-cache
    nix-query clear-cache --rebuild
    nix-query check-schemas --start-at nixpkgs.lzip --limit 500
"""

import json
import logging

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from nix_query.cli import exit_codes
from nix_query.cli.selector import FzfSelector
from nix_query.core.cache import AttrCache
from nix_query.core.config import Settings
from nix_query.core.proc import CommandRunner, SubprocessRunner
from nix_query.exceptions import (
    CommandError,
    EmptyResultError,
    MetadataDecodeError,
    NixQueryError,
)
from nix_query.parsers.nix_env import is_private_attr, listed_attrs, query_all, query_attr
from nix_query.render.console import render_record

logger = logging.getLogger(__name__)


class Session:
    """Settings, command runner and cache for one CLI invocation."""

    def __init__(self, settings: Settings | None = None, runner: CommandRunner | None = None):
        self._settings = settings
        self.runner = runner or SubprocessRunner()

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = Settings.from_env()
        return self._settings

    @property
    def cache(self) -> AttrCache:
        return AttrCache(self.settings.cache_path)

    def populate(self) -> str:
        return query_all(self.runner, self.settings.extra_roots, self.settings.nix_env)

    def ensure_cache(self) -> str:
        cache = self.cache
        if not cache.exists():
            stderr_console().print(
                "[bold green]Populating the Nix package name cache "
                "(this may take a minute or two)...[/bold green]"
            )
        return cache.ensure(self.populate)


def stderr_console() -> Console:
    return Console(stderr=True, highlight=False)


def report_error(error: NixQueryError) -> None:
    console = stderr_console()
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    if error.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape(error.hint)}")


class NixQueryGroup(click.Group):
    """Click group that renders NixQueryError cleanly instead of a traceback."""

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except NixQueryError as e:
            logger.debug("Command failed", exc_info=True)
            report_error(e)
            ctx.exit(exit_codes.GENERAL_ERROR)
        except KeyboardInterrupt:
            stderr_console().print("\n[yellow]Aborted.[/yellow]")
            ctx.exit(exit_codes.KEYBOARD_INTERRUPT)


@click.group(cls=NixQueryGroup, invoke_without_command=True)
@click.version_option(package_name="nix-query")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.pass_context
def cli(ctx, verbose):
    """nix-query: cached fuzzy search over Nix packages."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if ctx.obj is None:
        ctx.obj = Session()

    if ctx.invoked_subcommand is None:
        ctx.invoke(search)


@cli.command()
@click.pass_obj
def search(session: Session):
    """Pick packages with fzf and print their attribute paths."""
    listing = session.ensure_cache()
    selector = FzfSelector(session.runner, fzf=session.settings.fzf)
    for attr in selector.select(listing):
        click.echo(attr)


@cli.command()
@click.argument("attr")
@click.option(
    "--color/--no-color",
    default=None,
    help="Force or disable styled output (default: only on a terminal).",
)
@click.option("--json", "as_json", is_flag=True, help="Print the normalized record as JSON.")
@click.pass_obj
def info(session: Session, attr, color, as_json):
    """Show the metadata for a single attribute, e.g. nixpkgs.gzip."""
    record = query_attr(session.runner, attr, nix_env=session.settings.nix_env)

    if as_json:
        click.echo(json.dumps({record.attribute_path: record.to_dict()}, indent=2))
        return

    console = Console(
        force_terminal=True if color else None,
        color_system=None if color is False else "auto",
        highlight=False,
        soft_wrap=True,
    )
    console.print(render_record(record), end="")


@cli.command("print-cache")
@click.pass_obj
def print_cache(session: Session):
    """Print every cached attribute, populating the cache if needed."""
    click.echo(session.ensure_cache(), nl=False)


@cli.command("clear-cache")
@click.option("--rebuild", is_flag=True, help="Repopulate the cache right away.")
@click.pass_obj
def clear_cache(session: Session, rebuild):
    """Delete the attribute cache."""
    session.cache.clear()
    if rebuild:
        session.ensure_cache()


@cli.command("check-schemas")
@click.option("--start-at", default=None, help="Skip attributes until one starts with this prefix.")
@click.option("--limit", "-l", type=int, default=None, help="Check at most this many attributes.")
@click.pass_obj
def check_schemas(session: Session, start_at, limit):
    """Query every cached attribute and report the ones that fail to decode."""
    attrs = sorted(a for a in listed_attrs(session.ensure_cache()) if not is_private_attr(a))

    if start_at is not None:
        attrs = attrs[next((i for i, a in enumerate(attrs) if a.startswith(start_at)), len(attrs)):]
    if limit is not None:
        attrs = attrs[:limit]

    failures: list[tuple[str, NixQueryError]] = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[bold cyan]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=stderr_console(),
        transient=True,
    ) as progress:
        task = progress.add_task("Checking", total=len(attrs))
        for attr in attrs:
            progress.update(task, description=escape(attr))
            try:
                query_attr(session.runner, attr, nix_env=session.settings.nix_env)
            except (MetadataDecodeError, EmptyResultError, CommandError) as e:
                failures.append((attr, e))
                progress.console.print(f"[red]FAIL[/red] {escape(attr)}")
            progress.advance(task)

    for attr, error in failures:
        click.echo(f"{attr} | {error}")
        if isinstance(error, MetadataDecodeError):
            click.echo(f"\t{error.text}")
        elif error.hint:
            click.echo(f"\t{error.hint}")

    click.echo(f"Checked {len(attrs)} attributes, {len(failures)} failed.")
    if failures:
        click.get_current_context().exit(exit_codes.GENERAL_ERROR)


if __name__ == "__main__":
    cli()
