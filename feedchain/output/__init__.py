"""
Report output.

This package renders resolved outputs to Markdown or HTML files.
"""

from .renderer import plain_text, render_html, render_markdown, render_report

__all__ = [
    "plain_text",
    "render_html",
    "render_markdown",
    "render_report",
]
