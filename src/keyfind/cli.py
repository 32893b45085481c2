"""Command-line interface for keyfind.

Provides the Typer app behind the ``keyfind`` console script. Search
results are printed one ``path<TAB>keyword`` line per match (or as JSON),
while a Rich progress bar is drawn on stderr so output can be piped.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn

from . import __version__
from .config.parser import ConfigurationError, create_config_template, load_config, validate_config_file
from .engine import CancellationToken, SearchEngine
from .models.config import SearchConfig
from .models.search_request import SearchMode, SearchRequest
from .models.search_results import SearchStatus
from .tools.progress import ProgressEvent, ProgressPhase, ProgressReporter


logger = logging.getLogger(__name__)

# ENV VAR used to disable rich progress output (useful for piping or testing)
_ENV_NO_PROGRESS = "KEYFIND_NO_PROGRESS"

EXIT_NO_MATCHES = 1
EXIT_BAD_INPUT = 2
EXIT_CANCELLED = 130

app = typer.Typer(
    name="keyfind",
    help="Search a directory tree for keywords in file contents, file names or directory names.",
    add_completion=False,
)


class RichProgressReporter(ProgressReporter):
    """Render progress events on a Rich progress bar."""

    def __init__(self, progress: Progress, task_id: TaskID):
        self.progress = progress
        self.task_id = task_id

    def report(self, event: ProgressEvent) -> None:
        description = "Searching" if event.phase is ProgressPhase.MATCHING else event.phase.value.capitalize()
        self.progress.update(
            self.task_id,
            completed=event.current,
            total=event.total or 1,
            description=f"{event.glyph} {description}",
        )


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _load_search_config(config_path: Optional[Path], workers: Optional[int]) -> SearchConfig:
    result = load_config(config_path)
    for warning in result.warnings:
        logger.info(warning)

    config = result.config
    if workers is not None:
        data = config.to_dict()
        data['limits']['max_workers'] = workers
        config = SearchConfig.from_dict(data)
    return config


@app.command()
def search(
    path: Path = typer.Argument(..., help="Root directory to search."),
    keywords: List[str] = typer.Argument(..., help="One or more keywords."),
    mode: SearchMode = typer.Option(SearchMode.CONTENT, "--mode", "-m", help="What to match keywords against."),
    extensions: Optional[List[str]] = typer.Option(None, "--ext", "-e", help="Only search files with this extension (repeatable)."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file (YAML)."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Worker threads for matching."),
    as_json: bool = typer.Option(False, "--json", help="Print the full outcome as JSON."),
    no_progress: bool = typer.Option(False, "--no-progress", help="Do not draw a progress bar."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Search PATH for KEYWORDS."""
    err = Console(stderr=True)
    _configure_logging(verbose)

    try:
        config = _load_search_config(config_path, workers)
    except ConfigurationError as e:
        err.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(EXIT_BAD_INPUT)

    try:
        request = SearchRequest(path=str(path), mode=mode, keywords=keywords, extensions=extensions)
    except ValidationError as e:
        err.print(f"[red]Invalid search request:[/red] {e.errors()[0]['msg']}")
        raise typer.Exit(EXIT_BAD_INPUT)

    engine = SearchEngine(config)
    token = CancellationToken()

    show_progress = not no_progress and os.getenv(_ENV_NO_PROGRESS, "0").lower() not in {"1", "true", "yes"}

    try:
        if show_progress:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
                TimeElapsedColumn(),
                console=err,
                transient=True,
            ) as progress:
                task_id = progress.add_task("Enumerating", total=None)
                outcome = engine.search(request, RichProgressReporter(progress, task_id), token)
        else:
            outcome = engine.search(request, cancel_token=token)
    except KeyboardInterrupt:
        token.cancel()
        err.print("[yellow]Search interrupted[/yellow]")
        raise typer.Exit(EXIT_CANCELLED)

    if as_json:
        typer.echo(json.dumps(outcome.to_dict(), indent=2))
    else:
        for record in outcome.matches:
            typer.echo(f"{record.path}\t{record.keyword}")

    for message in outcome.skipped:
        logger.debug(f"Skipped: {message}")

    if outcome.status is SearchStatus.PATH_NOT_FOUND:
        err.print(f"[red]Search root not found or not accessible:[/red] {request.path}")
        raise typer.Exit(EXIT_BAD_INPUT)
    if outcome.status is SearchStatus.CANCELLED:
        raise typer.Exit(EXIT_CANCELLED)
    if not outcome.matches:
        raise typer.Exit(EXIT_NO_MATCHES)


@app.command("init-config")
def init_config(
    output: Path = typer.Argument(Path(".keyfind.yaml"), help="Where to write the template."),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Write a commented configuration template."""
    err = Console(stderr=True)
    if output.exists() and not force:
        err.print(f"[red]{output} already exists[/red] (use --force to overwrite)")
        raise typer.Exit(EXIT_BAD_INPUT)
    try:
        create_config_template(output)
    except ConfigurationError as e:
        err.print(f"[red]{e}[/red]")
        raise typer.Exit(EXIT_BAD_INPUT)
    Console().print(f"Configuration template written to {output}", markup=False)


@app.command("validate-config")
def validate_config(
    config_file: Path = typer.Argument(..., help="Configuration file to check."),
) -> None:
    """Check a configuration file and report problems."""
    errors = validate_config_file(config_file)
    console = Console()
    if errors:
        for error in errors:
            console.print(f"[red]✗[/red] {error}")
        raise typer.Exit(EXIT_BAD_INPUT)
    console.print(f"[green]✓[/green] {config_file} is valid")


@app.command()
def version() -> None:
    """Show the version of keyfind."""
    Console().print(f"keyfind version: [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
