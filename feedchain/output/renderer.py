"""
Report rendering for Markdown and HTML output.

This module generates the final report with one section per output, in
declared order. HTML goes through a Jinja2 template; Markdown is assembled
line by line. Feed summaries usually carry HTML markup, which is flattened
to plain text with BeautifulSoup.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.types import Entry


OutputSections = list[tuple[str, list[Entry]]]

UNTITLED = "Untitled"
TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def plain_text(html: str | None) -> str:
    """Strip markup from a feed fragment, keeping non-empty lines."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = soup.get_text(separator="\n")
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


def _slugify(value: str) -> str:
    """Convert a string to an anchor-safe slug.

    Examples:
        >>> _slugify("Hello World!")
        'hello-world'
    """
    lowered = value.strip().lower()
    cleaned = []
    last_dash = False
    for ch in lowered:
        if ch.isalnum():
            cleaned.append(ch)
            last_dash = False
        else:
            if not last_dash:
                cleaned.append("-")
                last_dash = True
    slug = "".join(cleaned).strip("-")
    return slug or "section"


def _entry_text(entry: Entry) -> str:
    return plain_text(entry.summary) or plain_text(entry.body)


def render_markdown(outputs: OutputSections, output_path: Path, title: str) -> None:
    """Write the report as Markdown.

    Args:
        outputs: (output name, entries) pairs in declared order
        output_path: Destination file
        title: Report heading
    """
    total = sum(len(entries) for _, entries in outputs)
    lines = [f"# {title}", "", f"Total: {total}", ""]
    for name, entries in outputs:
        lines.append(f"## {name} ({len(entries)})")
        lines.append("")
        for entry in entries:
            lines.append(f"### {entry.title or UNTITLED}")
            lines.append("")
            if entry.published:
                lines.append(f"- Published: {entry.published}")
            if entry.link:
                lines.append(f"- Link: [Go to story]({entry.link})")
            if entry.published or entry.link:
                lines.append("")
            text = _entry_text(entry)
            if text:
                lines.append(text)
                lines.append("")

    output_path.write_text("\n".join(lines), encoding="utf-8")


def render_html(outputs: OutputSections, output_path: Path, title: str) -> None:
    """Write the report as HTML using the bundled Jinja2 template.

    Sections get anchor ids derived from the output name so the table of
    contents can link to them.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("report.html")

    used_ids: dict[str, int] = {}
    sections = []
    for name, entries in outputs:
        base_id = _slugify(name)
        count = used_ids.get(base_id, 0)
        used_ids[base_id] = count + 1
        section_id = f"{base_id}-{count + 1}" if count else base_id
        sections.append(
            {
                "id": section_id,
                "name": name,
                "count": len(entries),
                "entries": [
                    {
                        "title": entry.title or UNTITLED,
                        "link": entry.link,
                        "published": entry.published,
                        "text": _entry_text(entry),
                    }
                    for entry in entries
                ],
            }
        )

    html = template.render(
        title=title,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        sections=sections,
        total=sum(section["count"] for section in sections),
    )
    output_path.write_text(html, encoding="utf-8")


RENDERERS = {
    "markdown": (render_markdown, "md"),
    "html": (render_html, "html"),
}


def render_report(outputs: OutputSections, output_dir: Path, filename: str, fmt: str, title: str) -> Path:
    """Render with the renderer for ``fmt`` and return the written path.

    Raises:
        ValueError: If the format is not supported
    """
    try:
        renderer, suffix = RENDERERS[fmt.lower()]
    except KeyError:
        raise ValueError(f"Unsupported output format: {fmt}. Use 'markdown' or 'html'.") from None
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / f"{filename}.{suffix}"
    renderer(outputs, output_path, title)
    return output_path
