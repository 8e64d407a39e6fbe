"""
Configuration management using YAML files and dataclasses.

A single YAML file holds both the feed graph (``sources``, ``filters``,
``output.combine``; see ``feedchain.input.declarations``) and the run
settings defined here. Settings sections:
- FetchConfig: HTTP fetching settings
- CacheConfig: On-disk feed cache
- DedupConfig: Entry deduplication in the report
- OutputConfig: Report format and naming
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for feed fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        retries: Extra attempts inside one fetch call; the resolver itself
            never retries beyond asking again on its next pass
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 20.0
    retries: int = 0
    trust_env: bool = True
    user_agent: str = "feedchain/0.1 (+https://pypi.org/project/feedchain/)"


@dataclass
class CacheConfig:
    """Configuration for the fetched-feed cache.

    Attributes:
        enabled: Whether fetched feeds are cached on disk
        dir: Cache directory
        ttl_minutes: Maximum cache age; None means entries never expire
    """

    enabled: bool = False
    dir: str = ".feedchain-cache"
    ttl_minutes: int | None = 60


@dataclass
class DedupConfig:
    """Configuration for entry deduplication in the report.

    Attributes:
        enabled: Whether to drop entries already shown earlier in the report
        title_similarity_threshold: Fuzzy match threshold (0-100) for titles
    """

    enabled: bool = True
    title_similarity_threshold: int = 92


@dataclass
class OutputConfig:
    """Configuration for report generation.

    Attributes:
        format: "markdown" or "html"
        title: Report heading
        filename: Report file name without extension
    """

    format: str = "markdown"
    title: str = "Feedchain output"
    filename: str = "index"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to a file in the output directory
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all settings sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def read_yaml(path: str | Path) -> dict[str, Any]:
    """Read a YAML mapping; an empty file yields an empty dict."""
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return raw


def load_config(path: str | Path | None) -> AppConfig:
    """Load settings from a YAML file with defaults."""
    if not path:
        return AppConfig()
    return config_from_dict(read_yaml(path))


def config_from_dict(raw: dict[str, Any]) -> AppConfig:
    """Merge a raw mapping into the default settings.

    Unknown sections and keys are ignored, so graph sections living in the
    same file pass through untouched.
    """
    data = _asdict(AppConfig())
    for key, value in raw.items():
        if key not in data or not isinstance(value, dict):
            continue
        data[key].update({k: v for k, v in value.items() if k in data[key]})
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "fetch": {
            "timeout_seconds": cfg.fetch.timeout_seconds,
            "retries": cfg.fetch.retries,
            "trust_env": cfg.fetch.trust_env,
            "user_agent": cfg.fetch.user_agent,
        },
        "cache": {
            "enabled": cfg.cache.enabled,
            "dir": cfg.cache.dir,
            "ttl_minutes": cfg.cache.ttl_minutes,
        },
        "dedup": {
            "enabled": cfg.dedup.enabled,
            "title_similarity_threshold": cfg.dedup.title_similarity_threshold,
        },
        "output": {
            "format": cfg.output.format,
            "title": cfg.output.title,
            "filename": cfg.output.filename,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        cache=CacheConfig(**data["cache"]),
        dedup=DedupConfig(**data["dedup"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )
