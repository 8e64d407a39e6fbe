"""
Main pipeline orchestration for feedchain.

This module coordinates the entire workflow:
1. Parse graph declarations from the configuration
2. Validate them into a registry
3. Plan the processing queue
4. Resolve the queue (fetching sources, applying filters)
5. Deduplicate entries across outputs
6. Render the report

A run that stalls or fails validation raises before the report is written.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from rich.console import Console

from .config import AppConfig, config_from_dict, read_yaml
from .core.dedup import dedup_outputs
from .core.graph import Registry, build_from_declaration
from .core.planner import plan_queue
from .core.resolver import Resolution, resolve
from .core.types import Entry, ProcessingQueue
from .fetch import FeedFetcher, FetchStats
from .input.declarations import parse_declarations
from .output.renderer import render_report
from .utils.logging import log_event, setup_logging


def build_plan(raw: dict[str, Any]) -> tuple[Registry, ProcessingQueue]:
    """Validate the graph sections of a configuration and plan the queue.

    Raises:
        ConfigFormatError: Graph sections have the wrong shape
        ConfigIntegrityError: Names are duplicated, unknown or missing
    """
    registry = build_from_declaration(parse_declarations(raw))
    return registry, plan_queue(registry)


def run_pipeline(
    config_path: Path,
    output_dir: Path,
    cfg: AppConfig | None = None,
    console: Console | None = None,
    fetch: Callable[[str], list[Entry]] | None = None,
) -> Path:
    """Run the complete feedchain pipeline.

    Args:
        config_path: YAML file holding the graph (and default settings)
        output_dir: Directory for the report and log file
        cfg: Settings; loaded from config_path when None
        console: Rich console for the summary line (creates default if None)
        fetch: Fetch collaborator; a FeedFetcher built from cfg when None

    Returns:
        Path to the generated report

    Raises:
        FeedChainError: Invalid configuration or a stalled resolution
    """
    raw = read_yaml(config_path)
    if cfg is None:
        cfg = config_from_dict(raw)
    console = console or Console()

    logger = setup_logging(cfg.logging, output_dir)
    log_event(
        logger,
        "Pipeline start",
        event="run_start",
        config=str(config_path),
        output=str(output_dir),
    )

    registry, queue = build_plan(raw)
    log_event(
        logger,
        "Queue planned",
        event="queue_planned",
        queue=queue.names,
        outputs=list(registry.outputs),
    )

    fetcher = fetch
    if fetcher is None:
        fetcher = FeedFetcher(cfg.fetch, cfg.cache, base_dir=config_path.resolve().parent)

    resolution = resolve(queue, registry, fetcher)

    outputs = resolution.outputs()
    if cfg.dedup.enabled:
        outputs = dedup_outputs(outputs, cfg.dedup.title_similarity_threshold)

    report_path = render_report(
        outputs,
        output_dir,
        filename=cfg.output.filename,
        fmt=cfg.output.format,
        title=cfg.output.title,
    )
    log_event(
        logger,
        "Report written",
        event="report_written",
        path=str(report_path),
        entries=sum(len(entries) for _, entries in outputs),
    )
    _render_run_stats(resolution, getattr(fetcher, "stats", None), console)
    return report_path


def _render_run_stats(resolution: Resolution, stats: FetchStats | None, console: Console) -> None:
    """Display pass and fetch statistics to the console."""
    line = (
        "[bold]Run summary[/bold]: "
        f"items={len(resolution.resolved)}, passes={resolution.passes}, "
        f"fetch_failures={resolution.fetch_failures}"
    )
    if stats is not None:
        line += f", fetched={stats.success}, cache_hits={stats.cache_hits}"
    console.print(line)


def describe_queue(queue: ProcessingQueue) -> list[dict[str, Any]]:
    return [
        {"index": index, "name": item.name, "kind": item.kind.value, "output": item.is_output}
        for index, item in enumerate(queue)
    ]

