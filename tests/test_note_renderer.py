from __future__ import annotations

from exam_notes.core.models import Highlight
from exam_notes.core.note_renderer import NoteRenderer, count_words, mark_highlights


def test_renders_markdown_fragment():
    html = NoteRenderer().render_fragment("# Title\n\n**bold** and *soft*")

    assert "<h1>Title</h1>" in html
    assert "<strong>bold</strong>" in html
    assert "<em>soft</em>" in html


def test_empty_content_placeholder():
    assert "No content provided" in NoteRenderer().render_fragment("   ")


def test_raw_html_is_escaped_by_default():
    html = NoteRenderer().render_fragment("<script>alert(1)</script>")

    assert "<script>" not in html


def test_highlights_wrap_text_not_tags():
    highlights = [Highlight(id="h1", text="strong", color="green")]

    html = NoteRenderer().render_fragment("a **strong** force is strong", highlights)

    assert html.count('<mark class="highlight-green">strong</mark>') == 2
    assert "<strong>" in html


def test_longer_highlight_wins_on_overlap():
    highlights = [Highlight(id="1", text="force"), Highlight(id="2", text="net force", color="blue")]

    html = mark_highlights("<p>the net force</p>", highlights)

    assert html == '<p>the <mark class="highlight-blue">net force</mark></p>'


def test_full_document_loads_mathjax():
    document = NoteRenderer().render_full_document("$x^2$", title="Calculus")

    assert "<title>Calculus</title>" in document
    assert "mathjax" in document.lower()


def test_count_words():
    assert count_words("one two\n\nthree") == 3


def test_highlights_leave_entities_intact():
    html = "<p>Tom &amp; Jerry</p>"

    assert mark_highlights(html, [Highlight(id="1", text="amp")]) == html
    assert mark_highlights(html, [Highlight(id="2", text="Tom & Jerry")]) == (
        '<p><mark class="highlight-yellow">Tom &amp; Jerry</mark></p>'
    )
