"""Main CLI entry point and application setup."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from click.core import ParameterSource
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt
from rich.table import Table

from mdcite import __version__
from mdcite.catalog import PLACEHOLDER_NOT_FOUND
from mdcite.cli.config import load_config, save_bibliography_path
from mdcite.exceptions import ConfigError, MdciteError
from mdcite.formatter import is_insertable
from mdcite.session import CitationSession, SessionState


@dataclass
class Context:
    """CLI context that holds shared resources."""

    session: CitationSession
    console: Console
    config: dict
    config_path: Path | None = None
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings.

    Messages go to stderr so that stdout carries only the citation.
    """
    return Console(
        stderr=True,
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class MdciteGroup(click.Group):
    """Custom group that handles KeyboardInterrupt and mdcite errors."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            # Let Click exceptions and exits propagate with their exit codes
            raise
        except (MdciteError, OSError) as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=MdciteGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--bibliography",
    "-b",
    help="Bibliography file used when a document declares none",
)
@click.version_option(
    version=__version__, prog_name="mdcite", message="mdcite version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    bibliography: str | None,
) -> None:
    """Insert Markdown citations from BibTeX bibliographies.

    Bibliography files listed in a document's YAML front matter take
    precedence over the configured bibliography path.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
    except ConfigError as e:
        if debug:
            raise
        console.print(f"[red]Error loading config file:[/red] {escape(str(e))}")
        ctx.exit(1)

    explicit_path = bibliography or config_data.get("bibliography_path")

    ctx.obj = Context(
        session=CitationSession(explicit_path=explicit_path),
        console=console,
        config=config_data,
        config_path=config,
        debug=debug,
    )


def _report(console: Console, state: SessionState) -> None:
    """Print load warnings and the not-found placeholder."""
    for warning in state.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
    if not state.found:
        console.print(f"[red]{PLACEHOLDER_NOT_FOUND}[/red]")


def _choices_table(choices: list[tuple[str, str]], numbered: bool = False) -> Table:
    table = Table(show_header=True, header_style="bold")
    if numbered:
        table.add_column("#", justify="right", style="dim")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Reference")

    for index, (key, label) in enumerate(choices, 1):
        row = [escape(key), escape(label)]
        if numbered:
            row.insert(0, str(index))
        table.add_row(*row)

    return table


def _in_parentheses(ctx: click.Context, narrative: bool) -> bool:
    """Citation form from --narrative/--parentheses, else from the config."""
    if ctx.get_parameter_source("narrative") in (None, ParameterSource.DEFAULT):
        return bool(ctx.obj.config.get("in_parentheses", True))
    return not narrative


@cli.command()
@click.argument(
    "document", required=False, type=click.Path(exists=True, path_type=Path)
)
@click.pass_context
def paths(ctx: click.Context, document: Path | None) -> None:
    """Show the bibliography files that apply to DOCUMENT."""
    console = ctx.obj.console
    session = ctx.obj.session

    if document:
        session.open_document(document)

    resolved, _ = session.resolver.resolve(
        session.explicit_path,
        session.document.declared_paths,
        session.document.directory,
    )

    source = {
        "front_matter": "YAML front matter",
        "explicit": "configured bibliography path",
    }.get(session.resolver.source, "none")
    console.print(f"Source: {source}")

    if resolved.empty:
        console.print("[yellow]No bibliography configured[/yellow]")
        return

    for path in resolved:
        marker = "[green]✓[/green]" if path.exists() else "[red]✗[/red]"
        console.print(f"  {marker} {escape(str(path))}")


@cli.command(name="list")
@click.argument(
    "document", required=False, type=click.Path(exists=True, path_type=Path)
)
@click.option("--search", "-s", "term", help="Filter references by search terms")
@click.option("--limit", "-n", type=int, help="Maximum references to show")
@click.pass_context
def list_cmd(
    ctx: click.Context, document: Path | None, term: str | None, limit: int | None
) -> None:
    """List the references available for DOCUMENT."""
    console = ctx.obj.console
    session = ctx.obj.session

    state = session.refresh(document)
    _report(console, state)
    if not state.found:
        ctx.exit(1)

    choices = session.search(term or "", limit=limit)
    if not choices:
        console.print(f"[yellow]No references match '{escape(term or '')}'[/yellow]")
        return

    console.print(f"[dim]{escape(state.status)}[/dim]")
    console.print(_choices_table(choices))


@cli.command()
@click.argument("keys", nargs=-1)
@click.option(
    "--document",
    "-d",
    type=click.Path(exists=True, path_type=Path),
    help="Document whose bibliography the keys belong to",
)
@click.option(
    "--narrative/--parentheses",
    "-t/-p",
    help="Cite in running text (@key) or in parentheses ([@key]); "
    "defaults to the in_parentheses setting",
)
@click.pass_context
def cite(
    ctx: click.Context, keys: tuple[str, ...], document: Path | None, narrative: bool
) -> None:
    """Format KEYS as a Markdown citation."""
    console = ctx.obj.console
    session = ctx.obj.session

    if document:
        state = session.refresh(document)
        _report(console, state)

    in_parentheses = _in_parentheses(ctx, narrative)
    session.check_keys(keys)
    result, error = session.formatter.try_format(list(keys), in_parentheses)

    if error is not None:
        console.print(f"[red]Error:[/red] {escape(str(error))}")
        ctx.exit(1)

    if not is_insertable(result):
        console.print("[yellow]No reference selected.[/yellow]")
        ctx.exit(1)

    click.echo(result)


@cli.command()
@click.argument(
    "document", required=False, type=click.Path(exists=True, path_type=Path)
)
@click.option(
    "--narrative/--parentheses",
    "-t/-p",
    help="Start in running-text or parenthetical mode; "
    "defaults to the in_parentheses setting",
)
@click.pass_context
def pick(ctx: click.Context, document: Path | None, narrative: bool) -> None:
    """Interactively select references and print the citation.

    Enter numbers or keys to add references, -N or -KEY to remove one,
    /TERM to search, p to toggle parentheses, r to reload the
    bibliography, q to cancel and an empty line to finish.
    """
    console = ctx.obj.console
    session = ctx.obj.session

    state = session.refresh(document)
    _report(console, state)
    console.print(f"[dim]{escape(state.status)}[/dim]")

    shown = state.choices
    selected: list[str] = []
    in_parentheses = _in_parentheses(ctx, narrative)

    if shown:
        console.print(_choices_table(shown, numbered=True))

    while True:
        preview = session.formatter.format(selected, in_parentheses)
        console.print(f"Citation: [bold]{escape(str(preview))}[/bold]")

        answer = Prompt.ask(
            "Select", default="", show_default=False, console=console
        ).strip()

        if not answer:
            break
        if answer == "q":
            console.print("[yellow]Cancelled[/yellow]")
            ctx.exit(1)
        if answer == "p":
            in_parentheses = not in_parentheses
            continue
        if answer == "r":
            state = session.reload()
            _report(console, state)
            shown = state.choices
            selected = [k for k in selected if k in state.entry]
            if shown:
                console.print(_choices_table(shown, numbered=True))
            continue
        if answer.startswith("/"):
            shown = session.search(answer[1:])
            if shown:
                console.print(_choices_table(shown, numbered=True))
            else:
                console.print("[yellow]No matches[/yellow]")
            continue

        remove = answer.startswith("-")
        for token in answer.lstrip("-").replace(",", " ").split():
            key = _lookup(token, shown, state)
            if key is None:
                console.print(f"[yellow]Unknown reference: {escape(token)}[/yellow]")
            elif remove:
                if key in selected:
                    selected.remove(key)
            elif key not in selected:
                selected.append(key)

    result = session.cite(selected, in_parentheses)
    if not is_insertable(result):
        console.print("[yellow]No reference selected.[/yellow]")
        ctx.exit(1)

    click.echo(result)


def _lookup(token: str, shown: list[tuple[str, str]], state: SessionState) -> str | None:
    """Map a picker token (list number or key) to a citation key."""
    if token.isdigit():
        index = int(token) - 1
        if 0 <= index < len(shown):
            return shown[index][0]
    if token in state.entry:
        return token
    return None


@cli.command(name="set-path")
@click.argument("bibliography")
@click.pass_context
def set_path(ctx: click.Context, bibliography: str) -> None:
    """Remember BIBLIOGRAPHY as the configured bibliography path."""
    console = ctx.obj.console

    target = save_bibliography_path(bibliography, ctx.obj.config_path)
    ctx.obj.session.explicit_path = bibliography

    console.print(f"[green]✓[/green] Bibliography path saved to {escape(str(target))}")


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        # Exit gracefully on Ctrl+C
        sys.exit(130)


if __name__ == "__main__":
    main()
