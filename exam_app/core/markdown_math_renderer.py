"""Markdown + LaTeX rendering of question text.

Question text is authored in Markdown with optional ``$...$`` math. The Qt
session panel shows the rendered fragment in a rich-text label; math is left
as source for MathJax-capable viewers.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single line (option text) without the wrapping paragraph."""
        return self._markdown.renderInline(markdown_text.strip())


renderer = MarkdownMathRenderer()
# MarkdownIt is safe for concurrent read-only renders, so the UI and the API
# thread share this instance.
