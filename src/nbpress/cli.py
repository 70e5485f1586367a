"""Command-line interface for nbpress."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nbpress import NbPressError, __version__
from nbpress.cache import CacheStore
from nbpress.config import NbPressConfig, get_config
from nbpress.converter import NotebookConverter, slug_for
from nbpress.hashing import ContentHasher
from nbpress.log import setup_logging
from nbpress.models import ConversionResult, ConversionStatus
from nbpress.pipeline import PipelineDriver

console = Console()

STATUS_STYLES = {
    ConversionStatus.CONVERTED: "green",
    ConversionStatus.SKIPPED: "dim",
    ConversionStatus.FAILED: "red",
    ConversionStatus.IGNORED: "yellow",
}


def _load_config(**overrides) -> NbPressConfig:
    """Load configuration and apply command-line overrides."""
    config = get_config()
    update = {key: value for key, value in overrides.items() if value is not None}
    if update:
        config = config.model_copy(update=update)
    return config


def _fail(title: str, error: Exception) -> None:
    console.print()
    console.print(
        Panel.fit(
            f"[red]Error:[/red] {error}",
            border_style="red",
            title=f"[bold red]{title}[/bold red]",
        )
    )
    sys.exit(1)


def _results_table(results: list[ConversionResult]) -> Table:
    table = Table(title="Notebooks")
    table.add_column("Notebook", style="cyan")
    table.add_column("Status", min_width=9, no_wrap=True)
    table.add_column("Assets", justify="right")
    table.add_column("Details", style="dim")

    for result in results:
        style = STATUS_STYLES[result.status]
        details = result.error or (str(result.document_path) if result.document_path else "")
        table.add_row(
            escape(result.filename),
            f"[{style}]{result.status.value}[/{style}]",
            str(len(result.assets)),
            escape(details),
        )
    return table


@click.group()
@click.version_option(version=__version__)
def main():
    """nbpress - Convert Jupyter notebooks into MDX blog posts.

    Unchanged notebooks are skipped using a content fingerprint cache.
    """
    pass


@main.command()
@click.option("--watch", "-w", is_flag=True, help="Keep running and convert notebooks as they change")
@click.option("--force", "-f", is_flag=True, help="Reconvert every notebook, ignoring the cache")
@click.option(
    "--notebooks-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .ipynb files (default: from config)",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for rendered documents (default: from config)",
)
@click.option(
    "--assets-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for extracted assets (default: from config)",
)
@click.option(
    "--cache-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Fingerprint cache file (default: from config)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def build(
    watch: bool,
    force: bool,
    notebooks_dir: Optional[Path],
    output_dir: Optional[Path],
    assets_dir: Optional[Path],
    cache_path: Optional[Path],
    verbose: bool,
):
    """Convert all notebooks, optionally watching for changes."""
    setup_logging(verbose, console=console)

    try:
        config = _load_config(
            notebooks_dir=notebooks_dir,
            output_dir=output_dir,
            assets_dir=assets_dir,
            cache_path=cache_path,
        )
    except NbPressError as e:
        _fail("Configuration Error", e)

    cache = CacheStore(config.cache_path)
    cache.load()
    driver = PipelineDriver(
        NotebookConverter.from_config(config, cache),
        poll_interval=config.watch_poll_interval,
    )

    results = driver.run_once(force=force)
    if results:
        console.print(_results_table(results))

    counts = {status: 0 for status in ConversionStatus}
    for result in results:
        counts[result.status] += 1
    console.print(
        f"[green]{counts[ConversionStatus.CONVERTED]} converted[/green], "
        f"{counts[ConversionStatus.SKIPPED]} unchanged, "
        f"[red]{counts[ConversionStatus.FAILED]} failed[/red]"
    )

    if watch:
        console.print("[cyan]Watching notebooks for changes... (Ctrl-C to stop)[/cyan]")
        driver.watch()
    elif counts[ConversionStatus.FAILED]:
        sys.exit(1)


@main.command()
@click.option(
    "--notebooks-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding .ipynb files (default: from config)",
)
@click.option(
    "--cache-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Fingerprint cache file (default: from config)",
)
def status(notebooks_dir: Optional[Path], cache_path: Optional[Path]):
    """Show which notebooks would be converted by the next build."""
    try:
        config = _load_config(notebooks_dir=notebooks_dir, cache_path=cache_path)
    except NbPressError as e:
        _fail("Configuration Error", e)

    cache = CacheStore(config.cache_path)
    entries = cache.load()
    hasher = ContentHasher()
    driver = PipelineDriver(NotebookConverter.from_config(config, cache))

    filenames = driver.discover()
    if not filenames:
        console.print(f"[yellow]No notebooks found in {config.notebooks_dir}[/yellow]")
        return

    table = Table(title=f"Notebooks in {config.notebooks_dir}")
    table.add_column("Notebook", style="cyan")
    table.add_column("State", min_width=10, no_wrap=True)
    table.add_column("Document", style="dim")

    for filename in filenames:
        try:
            fingerprint = hasher.fingerprint((config.notebooks_dir / filename).read_bytes())
        except OSError:
            fingerprint = None

        if fingerprint is None:
            state = "[red]unreadable[/red]"
        elif cache.should_skip(filename, fingerprint):
            state = "[green]up to date[/green]"
        elif filename in entries:
            state = "[yellow]changed[/yellow]"
        else:
            state = "[blue]new[/blue]"
        document = driver.converter.writer.document_path(slug_for(filename))
        table.add_row(escape(filename), state, escape(str(document)) if document.exists() else "-")

    console.print(table)


@main.command()
def config_show():
    """Show current configuration."""
    try:
        config = get_config()
    except NbPressError as e:
        _fail("Configuration Error", e)

    console.print(Panel.fit("[bold cyan]nbpress Configuration[/bold cyan]", border_style="cyan"))
    console.print()
    console.print(f"[cyan]Notebooks Dir:[/cyan] {config.notebooks_dir}")
    console.print(f"[cyan]Output Dir:[/cyan] {config.output_dir}")
    console.print(f"[cyan]Assets Dir:[/cyan] {config.assets_dir}")
    console.print(f"[cyan]Assets URL Root:[/cyan] /{config.assets_url_root}")
    console.print(f"[cyan]Cache Path:[/cyan] {config.cache_path}")
    console.print(f"[cyan]Document Extension:[/cyan] {config.document_extension}")
    console.print(f"[cyan]Default Language:[/cyan] {config.default_language}")
    console.print(f"[cyan]Frontmatter Layout:[/cyan] {config.frontmatter_layout or '-'}")
    console.print(f"[cyan]Frame Height:[/cyan] {config.frame_height}px")
    console.print(f"[cyan]Prune Stale Assets:[/cyan] {'Yes' if config.prune_stale_assets else 'No'}")


@main.command()
@click.option(
    "--cache-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Fingerprint cache file (default: from config)",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
def cache_clear(cache_path: Optional[Path], yes: bool):
    """Forget all fingerprints so the next build reconverts everything."""
    try:
        config = _load_config(cache_path=cache_path)
    except NbPressError as e:
        _fail("Configuration Error", e)

    cache = CacheStore(config.cache_path)
    entries = cache.load()
    if not entries:
        console.print("[dim]Cache is already empty.[/dim]")
        return

    if not yes and not click.confirm(f"Forget {len(entries)} cached notebook(s)?"):
        console.print("[dim]Cancelled.[/dim]")
        return

    cache.clear()
    try:
        cache.flush()
    except OSError as e:
        _fail("Cache Error", e)
    console.print(f"[green]Cleared {len(entries)} cache entries.[/green]")


if __name__ == "__main__":
    main()
