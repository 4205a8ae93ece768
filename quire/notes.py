"""Footnotes and sidenotes for Python-Markdown.

Authors use ordinary footnote syntax::

    A claim[^1] and an aside[^s1].

    [^1]: Printed in place as a paragraph prefixed with a superscript label.
    [^s1]: Moved to where it is referenced, inside a sidenote span.

Labels starting with ``s`` are sidenotes. Their definitions produce no output
where they are written; their text replaces the matching reference instead,
definitions and references being paired in document order. Every other
definition is rendered in place as ``<p><sup>label</sup> body</p>`` and no
separate footnotes section is generated.
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from typing import Optional

from markdown.blockprocessors import BlockProcessor
from markdown.extensions import Extension
from markdown.inlinepatterns import InlineProcessor
from markdown.treeprocessors import Treeprocessor

SIDENOTE_PREFIX = "s"
DEFINITION_TAG = "footnote-definition"
REFERENCE_TAG = "footnote-reference"

DEFINITION_RE = re.compile(r"^[ ]{0,3}\[\^([^\]]+)\]:[ ]*(.*)$", re.MULTILINE)
RE_REFERENCE = r"\[\^([^\]]+)\]"


def is_sidenote(label: str) -> bool:
    return label.startswith(SIDENOTE_PREFIX)


class FootnoteDefinitionProcessor(BlockProcessor):
    """Parse ``[^label]: body`` into a definition element left in place."""

    def test(self, parent: etree.Element, block: str) -> bool:
        return bool(DEFINITION_RE.search(block))

    def run(self, parent: etree.Element, blocks: list[str]) -> Optional[bool]:
        block = blocks.pop(0)
        m = DEFINITION_RE.search(block)
        before = block[: m.start()].rstrip("\n")
        if before.strip():
            # Text above the definition is handed on as a block of its own.
            blocks.insert(0, block[m.start() :])
            blocks.insert(0, before)
            return False

        label = m.group(1)
        body = [m.group(2)]
        rest = block[m.end() :].lstrip("\n")
        following = DEFINITION_RE.search(rest)
        if following:
            body[0] = "\n".join([body[0], self.dedent(rest[: following.start()])]).strip("\n")
            blocks.insert(0, rest[following.start() :])
        else:
            body[0] = "\n".join([body[0], self.dedent(rest)]).strip("\n")
            body.extend(self.continuation(blocks))

        definition = etree.SubElement(parent, DEFINITION_TAG)
        definition.set("label", label)
        self.parser.parseChunk(definition, "\n\n".join(body))
        return True

    def continuation(self, blocks: list[str]) -> list[str]:
        """Pop the indented blocks that continue a definition."""
        body = []
        indent = " " * self.tab_length
        while blocks and blocks[0].startswith(indent):
            block = blocks.pop(0)
            m = DEFINITION_RE.search(block)
            if m and m.start() > 0:
                body.append(self.dedent(block[: m.start()]))
                blocks.insert(0, block[m.start() :])
                break
            body.append(self.dedent(block))
        return body

    def dedent(self, block: str) -> str:
        indent = " " * self.tab_length
        lines = block.split("\n")
        for i, line in enumerate(lines):
            if line.startswith(indent):
                lines[i] = line[self.tab_length :]
        return "\n".join(lines)


class FootnoteReferenceProcessor(InlineProcessor):
    def handleMatch(self, m, data):
        el = etree.Element(REFERENCE_TAG)
        el.set("label", m.group(1))
        return el, m.start(0), m.end(0)


def flatten_text(el: etree.Element) -> str:
    return "".join(el.itertext()).replace("\n", " ").strip()


def collect_sidenotes(root: etree.Element) -> list[str]:
    """Sidenote bodies in reverse document order, ready to be popped."""
    sidenotes = [
        flatten_text(definition)
        for definition in root.iter(DEFINITION_TAG)
        if is_sidenote(definition.get("label", ""))
    ]
    sidenotes.reverse()
    return sidenotes


def parent_map(root: etree.Element) -> dict[etree.Element, etree.Element]:
    return {child: parent for parent in root.iter() for child in parent}


def add_text(parent: etree.Element, index: int, text: Optional[str]) -> None:
    """Append ``text`` just before position ``index`` of ``parent``."""
    if not text:
        return
    if index == 0:
        parent.text = (parent.text or "") + text
    else:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + text


def splice(
    parent: etree.Element,
    el: etree.Element,
    replacement: list[etree.Element],
    text: Optional[str] = None,
) -> None:
    """Replace ``el`` by ``text`` followed by ``replacement``, keeping its tail."""
    index = list(parent).index(el)
    tail = el.tail
    parent.remove(el)
    add_text(parent, index, text)
    for offset, child in enumerate(replacement):
        parent.insert(index + offset, child)
    add_text(parent, index + len(replacement), tail)


def sidenote_element(note: str) -> etree.Element:
    span = etree.Element("span")
    span.set("class", "sidenote-number")
    small = etree.SubElement(span, "small")
    small.set("class", "sidenote")
    small.text = note
    return span


def reference_element(label: str) -> etree.Element:
    sup = etree.Element("sup")
    sup.text = label
    return sup


def inline_definition(definition: etree.Element) -> None:
    """Turn a definition into one paragraph led by its superscript label."""
    label = definition.attrib.pop("label")
    for parent in list(definition.iter()):
        for child in list(parent):
            if child.tag == "p":
                splice(parent, child, list(child), child.text)
    definition.tag = "p"
    sup = reference_element(label)
    sup.tail = " " + (definition.text or "").lstrip()
    definition.text = None
    definition.insert(0, sup)


class NotesTreeprocessor(Treeprocessor):
    def run(self, root: etree.Element) -> None:
        sidenotes = collect_sidenotes(root)

        parents = parent_map(root)
        for definition in list(root.iter(DEFINITION_TAG)):
            if is_sidenote(definition.get("label", "")):
                splice(parents[definition], definition, [])

        parents = parent_map(root)
        for reference in list(root.iter(REFERENCE_TAG)):
            label = reference.get("label", "")
            if not is_sidenote(label):
                replacement = [reference_element(label)]
            elif sidenotes:
                replacement = [sidenote_element(sidenotes.pop())]
            else:
                replacement = []
            splice(parents[reference], reference, replacement)

        # Innermost first, so nested definitions are rewritten before their parents.
        for definition in reversed(list(root.iter(DEFINITION_TAG))):
            inline_definition(definition)


class NotesExtension(Extension):
    def extendMarkdown(self, md):
        # Ahead of "reference" (15) so definitions are not read as link references.
        md.parser.blockprocessors.register(FootnoteDefinitionProcessor(md.parser), "footnote_definition", 17)
        # Ahead of "reference" (170) and "link" (160).
        md.inlinePatterns.register(FootnoteReferenceProcessor(RE_REFERENCE, md), "footnote_reference", 175)
        # After "inline" (20), before "prettify" (10).
        md.treeprocessors.register(NotesTreeprocessor(md), "notes", 15)
