import textwrap
from pathlib import Path

import pytest
from pygments.util import ClassNotFound

from quire.engine import MarkdownEngine
from quire.errors import HighlightError, QuireError
from quire.highlight import load_theme

# No repeated digit pairs, so Pygments cannot shorten it to #rgb form.
KEYWORD_COLOUR = "#123456"


@pytest.fixture
def keyword_engine(tmp_path: Path) -> MarkdownEngine:
    (tmp_path / "keywords.toml").write_text(
        f'background_color = "#000000"\n\n[styles]\nKeyword = "{KEYWORD_COLOUR}"\n',
        encoding="utf-8",
    )
    return MarkdownEngine(load_theme("keywords.toml", tmp_path))


class TestHighlighting:
    def test_known_language_gets_inline_styles(self, keyword_engine: MarkdownEngine) -> None:
        html = keyword_engine.render_html("```python\ndef main():\n    pass\n```\n")

        assert 'class="codehilite"' in html
        assert f'<span style="color: {KEYWORD_COLOUR}">def</span>' in html
        assert 'class="k"' not in html

    def test_unknown_language_falls_back_to_plain_text(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("```nosuchlang\nx < y\n```\n")

        assert 'class="codehilite"' in html
        assert "x &lt; y" in html

    def test_untagged_block_is_plain_text(self, keyword_engine: MarkdownEngine) -> None:
        html = keyword_engine.render_html("```\ndef main(): pass\n```\n")

        assert "def main(): pass" in html
        assert KEYWORD_COLOUR not in html

    def test_indented_code_is_highlighted_as_text(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("Before.\n\n    a && b\n")

        assert 'class="codehilite"' in html
        assert "a &amp;&amp; b" in html

    def test_indented_shebang_line_is_code(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("Run:\n\n    #!/bin/sh\n    echo hi\n")

        assert "#!/bin/sh" in html
        assert "echo hi" in html
        assert "linenos" not in html
        assert "codehilitetable" not in html

    def test_indented_language_header_is_code(self, keyword_engine: MarkdownEngine) -> None:
        html = keyword_engine.render_html("Example:\n\n    :::python\n    def f(): pass\n")

        assert ":::python" in html
        assert "def f(): pass" in html
        assert KEYWORD_COLOUR not in html

    def test_pygments_errors_become_highlight_errors(self, tmp_path: Path, monkeypatch) -> None:
        """Only the translation of Pygments exceptions is checked here; the
        conversion itself is replaced by one that raises."""
        engine = MarkdownEngine(load_theme(None, tmp_path))

        def explode(text):
            raise ClassNotFound("no lexer for alias 'x' found")

        monkeypatch.setattr(engine._md, "convert", explode)

        with pytest.raises(HighlightError) as excinfo:
            engine.render_html("```x\ny\n```")

        assert isinstance(excinfo.value, QuireError)
        assert "no lexer" in str(excinfo.value)


class TestFootnotes:
    def test_numbered_footnote_is_printed_in_place(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("Text[^1].\n\n[^1]: Body text.\n")

        assert "<p>Text<sup>1</sup>.</p>" in html
        assert "<p><sup>1</sup> Body text.</p>" in html
        assert "footnote" not in html
        assert "<hr" not in html
        assert "<ol" not in html

    def test_definition_stays_where_it_was_written(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("First[^note].\n\n[^note]: The note.\n\nLast paragraph.\n")

        assert html.index("The note.") < html.index("Last paragraph.")
        assert "<sup>note</sup> The note." in html

    def test_definition_inline_markup_is_kept(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("A[^2].\n\n[^2]: See *this*.\n")

        assert "<p><sup>2</sup> See <em>this</em>.</p>" in html

    def test_definition_body_has_no_nested_paragraphs(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("A[^1].\n\n[^1]: Body text.\n")

        definition = html[html.index("<p><sup>1</sup>") :]
        assert definition.count("<p>") == 1

    def test_text_before_a_definition_stays_a_paragraph(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("Intro line.\n[^1]: Body text.\n")

        assert "<p>Intro line.</p>" in html
        assert "<p><sup>1</sup> Body text.</p>" in html

    def test_plain_brackets_are_untouched(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("A [link](https://example.com) and [text].\n")

        assert '<a href="https://example.com">link</a>' in html
        assert "[text]" in html


class TestSidenotes:
    def test_reference_becomes_the_sidenote(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("Later[^s1].\n\n[^s1]: An aside.\n")

        assert (
            '<p>Later<span class="sidenote-number"><small class="sidenote">An aside.</small></span>.</p>'
            in html
        )
        assert html.count("An aside.") == 1
        assert "<sup>" not in html

    def test_matching_follows_document_order(self, engine: MarkdownEngine) -> None:
        text = "A[^s1] and B[^s2].\n\n[^s2]: Two.\n\n[^s1]: One.\n"

        html = engine.render_html(text)

        assert html.index("Two.") < html.index("One.")
        assert html.count("Two.") == 1
        assert html.count("One.") == 1

    def test_extra_references_are_dropped(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("A[^s1] and B[^s2].\n\n[^s1]: Only.\n")

        assert html.count('class="sidenote"') == 1
        assert "</span> and B.</p>" in html

    def test_text_is_flattened(self, engine: MarkdownEngine) -> None:
        text = textwrap.dedent(
            """\
            Claim[^s1].

            [^s1]: Some *emphasis*
                over two lines.
            """
        )

        html = engine.render_html(text)

        assert '<small class="sidenote">Some emphasis over two lines.</small>' in html

    def test_text_is_escaped(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("X[^s1].\n\n[^s1]: a < b\n")

        assert '<small class="sidenote">a &lt; b</small>' in html

    def test_mixed_notes(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("One[^1] two[^s1].\n\n[^1]: Foot.\n\n[^s1]: Side.\n")

        assert "<sup>1</sup>" in html
        assert '<small class="sidenote">Side.</small>' in html
        assert "<p><sup>1</sup> Foot.</p>" in html


class TestEngine:
    def test_rendering_is_repeatable(self, engine: MarkdownEngine) -> None:
        text = "A[^s1] b[^1].\n\n[^s1]: Side.\n\n[^1]: Foot.\n\n```python\nprint('hi')\n```\n"

        assert engine.render_html(text) == engine.render_html(text)

    def test_tables(self, engine: MarkdownEngine) -> None:
        html = engine.render_html("| a | b |\n| - | - |\n| 1 | 2 |\n")

        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_plain_markdown(self, engine: MarkdownEngine) -> None:
        assert engine.render_html("# Title\n\nHello *world*.") == (
            "<h1>Title</h1>\n<p>Hello <em>world</em>.</p>"
        )
