"""
Command-line interface for feedchain.

Uses Typer to provide two commands:
- ``run``: resolve the feed graph and write the report
- ``plan``: validate the graph and print the processing queue, no fetching
"""

from __future__ import annotations

from pathlib import Path

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import config_from_dict, read_yaml
from .core.errors import FeedChainError
from .runner import build_plan, describe_queue, run_pipeline

app = typer.Typer(add_completion=False)
console = Console()


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]{type(exc).__name__}[/bold red]: {escape(str(exc))}")
    raise typer.Exit(code=1)


@app.command()
def run(
    config: Path = typer.Option(Path("feedchain.yaml"), "--config", "-c", exists=True, readable=True),
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    fmt: str | None = typer.Option(None, "--format", "-f", help="Report format: markdown or html."),
    title: str | None = typer.Option(None, "--title", help="Report heading."),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
    cache: bool | None = typer.Option(
        None, "--cache/--no-cache", help="Enable or disable the fetched-feed cache."
    ),
    dedup: bool | None = typer.Option(
        None, "--dedup/--no-dedup", help="Drop entries already shown earlier in the report."
    ),
):
    """Resolve the configured feed graph and render the report.

    Args:
        config: YAML file with sources, filters, output and settings
        output: Directory for the report (and log file)
        fmt: Report format override
        title: Report heading override
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Enable/disable file logging
        cache: Enable/disable the feed cache
        dedup: Enable/disable cross-output deduplication
    """
    try:
        cfg = config_from_dict(read_yaml(config))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        _fail(exc)

    # Override with CLI options
    if fmt:
        cfg.output.format = fmt
    if title:
        cfg.output.title = title
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file
    if cache is not None:
        cfg.cache.enabled = cache
    if dedup is not None:
        cfg.dedup.enabled = dedup

    try:
        report_path = run_pipeline(config, output, cfg, console=console)
    except (FeedChainError, ValueError, yaml.YAMLError) as exc:
        _fail(exc)
    console.print(f"Report generated: {report_path}")


@app.command()
def plan(
    config: Path = typer.Option(Path("feedchain.yaml"), "--config", "-c", exists=True, readable=True),
):
    """Validate the feed graph and show the order items will be processed in."""
    try:
        _registry, queue = build_plan(read_yaml(config))
    except (FeedChainError, OSError, ValueError, yaml.YAMLError) as exc:
        _fail(exc)

    table = Table(title="Processing queue")
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Output")
    for row in describe_queue(queue):
        table.add_row(str(row["index"]), row["name"], row["kind"], "yes" if row["output"] else "")
    console.print(table)


if __name__ == "__main__":
    app()
