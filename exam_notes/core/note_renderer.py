"""Markdown rendering for note pages.

Architecture note:
    Notes are stored as markdown-like text and rendered to HTML on request, so
    the stored content stays editable and the browser only receives finished
    fragments. Student highlights are applied after rendering, on text nodes
    only, which keeps them from breaking tags produced by the markdown pass.
    Math is left in place for MathJax to typeset on the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml

from exam_notes.core.models import Highlight

_MATHJAX_SCRIPT = (
    "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js"
)
_TAG_SPLIT = re.compile(r"(<[^>]+>)")
_ENTITY = r"&(?:#\d+|#x[0-9a-fA-F]+|\w+);"


@dataclass(slots=True)
class NoteRenderer:
    """Converts note markdown into HTML fragments or full documents."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html, "breaks": True})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str, highlights: list[Highlight] | None = None) -> str:
        """Render a page into an HTML fragment, marking any highlighted passages."""
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        html = self._markdown.render(sanitized)
        if highlights:
            html = mark_highlights(html, highlights)
        return html

    def wrap_with_mathjax(self, body_html: str, title: str = "ExamNotes") -> str:
        """Wrap a fragment inside a minimal HTML document that loads MathJax."""

        return f"""<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>{escapeHtml(title)}</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      body {{ font-family: Georgia, 'Noto Serif Sinhala', serif; margin: 0 auto; padding: 1rem; max-width: 46rem; line-height: 1.7; }}
      mark {{ border-radius: 0.2rem; padding: 0 0.1rem; }}
    </style>
    <script>
      window.MathJax = {{ tex: {{ inlineMath: [['$','$']], displayMath: [['$$','$$']] }} }};
    </script>
    <script defer src=\"{_MATHJAX_SCRIPT}\"></script>
  </head>
  <body>
    <article class=\"note-page\">{body_html}</article>
  </body>
</html>"""

    def render_full_document(
        self,
        markdown_text: str,
        title: str = "ExamNotes",
        highlights: list[Highlight] | None = None,
    ) -> str:
        fragment = self.render_fragment(markdown_text, highlights)
        return self.wrap_with_mathjax(fragment, title=title)


def mark_highlights(html: str, highlights: list[Highlight]) -> str:
    """Wrap every occurrence of each highlight's text in a ``<mark>`` element."""
    colors: dict[str, str] = {}
    for highlight in highlights:
        needle = escapeHtml(highlight.text)
        if needle:
            colors.setdefault(needle, escapeHtml(highlight.color))
    if not colors:
        return html

    # Longest first so overlapping highlights prefer the wider passage. Entities
    # come last and are consumed whole so a needle never matches inside one.
    needles = [re.escape(n) for n in sorted(colors, key=len, reverse=True)]
    pattern = re.compile("|".join([*needles, _ENTITY]))

    def wrap(match: re.Match[str]) -> str:
        text = match.group(0)
        if text not in colors:
            return text
        return f'<mark class="highlight-{colors[text]}">{text}</mark>'

    parts = _TAG_SPLIT.split(html)
    for index, part in enumerate(parts):
        if part and not part.startswith("<"):
            parts[index] = pattern.sub(wrap, part)
    return "".join(parts)


def count_words(markdown_text: str) -> int:
    return len(markdown_text.split())


# MarkdownIt renders are read-only, so one instance is shared.
renderer = NoteRenderer()
