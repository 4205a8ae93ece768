from __future__ import annotations

import markdown
from markdown.extensions import Extension
from markdown.extensions.codehilite import CodeHilite, HiliteTreeprocessor
from pygments.style import Style
from pygments.util import ClassNotFound, OptionError

from .errors import HighlightError
from .notes import NotesExtension


class IndentedCodeProcessor(HiliteTreeprocessor):
    """Highlight indented code blocks as plain text.

    The stock ``codehilite`` processor reads a leading ``:::lang`` or ``#!lang``
    line as a language header. Indented blocks have no language, so every line
    is kept as code.
    """

    def run(self, root):
        for block in root.iter("pre"):
            if len(block) != 1 or block[0].tag != "code" or block[0].text is None:
                continue
            config = dict(self.config)
            config.pop("lang", None)
            code = CodeHilite(
                self.code_unescape(block[0].text),
                tab_length=self.md.tab_length,
                style=config.pop("pygments_style", "default"),
                lang="text",
                **config,
            )
            placeholder = self.md.htmlStash.store(code.hilite(shebang=False))
            block.clear()
            block.tag = "p"
            block.text = placeholder


class IndentedCodeExtension(Extension):
    """Swap ``codehilite``'s tree processor for :class:`IndentedCodeProcessor`.

    Must be loaded after ``codehilite``; fenced blocks are highlighted earlier
    by ``fenced_code`` and never reach it.
    """

    def extendMarkdown(self, md):
        processor = IndentedCodeProcessor(md)
        processor.config = md.treeprocessors["hilite"].config
        md.treeprocessors.register(processor, "hilite", 30)


class MarkdownEngine:
    """Markdown to HTML conversion shared by every page of a build.

    Code blocks are highlighted by Pygments with inline styles taken from
    ``theme``; fenced blocks pick their lexer from the language tag and fall
    back to plain text, indented blocks are always plain text. Footnote
    syntax is rewritten by :mod:`quire.notes`.
    """

    def __init__(self, theme: type[Style]) -> None:
        self.theme = theme
        self._md = markdown.Markdown(
            extensions=["fenced_code", "codehilite", IndentedCodeExtension(), "tables", NotesExtension()],
            extension_configs={
                "codehilite": {
                    "noclasses": True,
                    "guess_lang": False,
                    "use_pygments": True,
                    "pygments_style": theme,
                }
            },
        )

    def render_html(self, text: str) -> str:
        try:
            return self._md.convert(text)
        except (ClassNotFound, OptionError) as exc:
            raise HighlightError(exc) from exc
        finally:
            self._md.reset()
