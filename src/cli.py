"""CLI interface for folio."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from folio.config import load_config, merge_cli_overrides
from folio.content.models import ABSENT, AttributeKey
from folio.site import Site

app = typer.Typer(
    name="folio",
    help="Compile a folio site into its output directory.",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from folio import __version__

        console.print(f"folio {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug output."),
    ] = False,
) -> None:
    """Folio - incremental static-content compiler."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _build_site(config_path: Optional[Path], output_dir: Optional[Path]) -> Site:
    config = load_config(config_path)
    config = merge_cli_overrides(
        config,
        output_directory=str(output_dir) if output_dir is not None else None,
    )
    return Site(config)


@app.command("compile")
def compile_cmd(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .folio.toml file."),
    ] = None,
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Override the output directory."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Compile pages even when up to date."),
    ] = False,
) -> None:
    """Compile every outdated page of the site."""
    site = _build_site(config_path, output_dir)
    report = site.compile(force=force)

    table = Table(title="Build")
    table.add_column("Result")
    table.add_column("Pages", justify="right")
    table.add_row("created", str(len(report.created)))
    table.add_row("modified", str(len(report.modified)))
    table.add_row("unchanged", str(len(report.unchanged)))
    table.add_row("skipped", str(len(report.skipped)))
    table.add_row("failed", str(len(report.failed)))
    console.print(table)

    for failure in report.failed:
        console.print(f"[red]{failure.path}[/red] {failure.error_type}: {failure.error}")

    if not report.ok:
        raise typer.Exit(1)


@app.command()
def show(
    path: Annotated[str, typer.Argument(help="Logical path of the page, e.g. /about/.")],
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .folio.toml file."),
    ] = None,
) -> None:
    """Show the resolved attributes and output paths of one page."""
    site = _build_site(config_path, None)
    site.load()
    page = site.page_at(path)
    if page is None:
        console.print(f"[red]No page at {path}[/red]")
        raise typer.Exit(1)

    table = Table(title=page.path)
    table.add_column("Attribute")
    table.add_column("Value")
    keys = list(page.attributes)
    keys += [k.value for k in AttributeKey if k.value not in page.attributes]
    for key in keys:
        value = page.attribute_named(key)
        if value is ABSENT:
            continue
        table.add_row(key, repr(value))
    console.print(table)
    console.print(f"web path:  {page.web_path}")
    console.print(f"disk path: {page.disk_path}")
