"""Content conversion helpers for displaying page HTML outside the editor."""

from __future__ import annotations

from markdownify import markdownify as to_markdown


class ContentConverter:
    """Translate editor HTML into Markdown for plain-text display."""

    def html_to_markdown(self, html: str) -> str:
        return to_markdown(html, heading_style="ATX").strip()
