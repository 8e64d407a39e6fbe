"""End-to-end tests for the pipeline and the CLI, using local feed files."""

from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from feedchain.cli import app
from feedchain.core.errors import DuplicateNameError, UnresolvableGraphError
from feedchain.core.types import Entry
from feedchain.runner import build_plan, run_pipeline


def _rss(*items):
    body = "".join(
        f"<item><title>{title}</title><link>https://example.com/{slug}</link>"
        f"<description>{text}</description></item>"
        for title, slug, text in items
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?><rss version="2.0"><channel>'
        f"<title>t</title><link>https://example.com/</link><description>d</description>{body}"
        "</channel></rss>"
    )


def _write_project(tmp_path: Path, graph: str) -> Path:
    feeds = tmp_path / "feeds"
    feeds.mkdir()
    (feeds / "pets.xml").write_text(
        _rss(
            ("Cat food", "cat-food", "cat food on sale"),
            ("Dog toys", "dog-toys", "dog toys for sale"),
            ("Cat toys", "cat-toys", "cat toys are back"),
        ),
        encoding="utf-8",
    )
    (feeds / "news.xml").write_text(
        _rss(("Market news", "market", "breaking: market news")),
        encoding="utf-8",
    )
    config = tmp_path / "feedchain.yaml"
    config.write_text(graph + "\nlogging:\n  console: false\n", encoding="utf-8")
    return config


GRAPH = """
sources:
  pets: feeds/pets.xml
  news: feeds/news.xml
filters:
  cats:
    in: [pets]
    contains: cat
  cat_toys:
    in: [cats]
    contains: toys
  market:
    in: [news, pets]
    contains: [market, Market]
output:
  combine: [cats, cat_toys, market]
  title: Test digest
"""


def test_run_pipeline_writes_markdown_report(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH)

    report = run_pipeline(config, tmp_path / "out", console=Console(quiet=True))

    text = report.read_text(encoding="utf-8")
    assert report == tmp_path / "out" / "index.md"
    assert "# Test digest" in text
    assert "## cats (2)" in text
    assert "### Cat food" in text
    assert "### Cat toys" in text
    assert "Dog toys" not in text
    # Cat toys was already shown under "cats"
    assert "## cat_toys (0)" in text
    assert "## market (1)" in text
    assert "breaking: market news" in text


def test_run_pipeline_without_dedup_repeats_entries(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH + "dedup:\n  enabled: false\n")

    report = run_pipeline(config, tmp_path / "out", console=Console(quiet=True))

    assert "## cat_toys (1)" in report.read_text(encoding="utf-8")


def test_run_pipeline_accepts_injected_fetcher(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH)
    calls = []

    def fetch(locator):
        calls.append(locator)
        return [Entry(title="Only cat", body="cat", links=("https://example.com/only",))]

    report = run_pipeline(config, tmp_path / "out", console=Console(quiet=True), fetch=fetch)

    assert sorted(calls) == ["feeds/news.xml", "feeds/pets.xml"]
    assert "### Only cat" in report.read_text(encoding="utf-8")


def test_stalled_run_writes_no_report(tmp_path: Path):
    graph = GRAPH.replace("in: [pets]\n    contains: cat", "in: [pets, cat_toys]\n    contains: cat")
    config = _write_project(tmp_path, graph)

    with pytest.raises(UnresolvableGraphError) as excinfo:
        run_pipeline(config, tmp_path / "out", console=Console(quiet=True))

    assert sorted(excinfo.value.cycle) == ["cat_toys", "cats"]
    assert not (tmp_path / "out" / "index.md").exists()


def test_missing_feed_file_stalls(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH.replace("feeds/news.xml", "feeds/gone.xml"))

    with pytest.raises(UnresolvableGraphError) as excinfo:
        run_pipeline(config, tmp_path / "out", console=Console(quiet=True))

    assert excinfo.value.failed_sources == ["news"]


def test_build_plan_rejects_duplicate_names(tmp_path: Path):
    raw = {
        "sources": {"cats": "feeds/pets.xml"},
        "filters": {"cats": {"in": ["cats"], "contains": "cat"}},
        "output": {"combine": ["cats"]},
    }

    with pytest.raises(DuplicateNameError):
        build_plan(raw)


def test_cli_run_writes_html_report(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH)
    out = tmp_path / "out"

    result = CliRunner().invoke(app, ["run", "-c", str(config), "-o", str(out), "--format", "html"])

    assert result.exit_code == 0, result.output
    assert "Report generated" in result.output
    assert (out / "index.html").exists()


def test_cli_plan_lists_queue(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH)

    result = CliRunner().invoke(app, ["plan", "-c", str(config)])

    assert result.exit_code == 0, result.output
    for name in ("pets", "news", "cats", "cat_toys", "market"):
        assert name in result.output


def test_cli_reports_configuration_errors(tmp_path: Path):
    config = _write_project(tmp_path, GRAPH.replace("combine: [cats, cat_toys, market]", "combine: [nope]"))

    result = CliRunner().invoke(app, ["run", "-c", str(config), "-o", str(tmp_path / "out")])

    assert result.exit_code == 1
    assert "UnknownReferenceError" in result.output


def test_cli_reports_malformed_yaml(tmp_path: Path):
    config = tmp_path / "feedchain.yaml"
    config.write_text("sources: [unclosed\n  - : :\n", encoding="utf-8")

    for args in (["run", "-c", str(config), "-o", str(tmp_path / "out")], ["plan", "-c", str(config)]):
        result = CliRunner().invoke(app, args)

        assert result.exit_code == 1
        assert "Error" in result.output
        assert isinstance(result.exception, SystemExit)
