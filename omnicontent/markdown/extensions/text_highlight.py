# omnicontent/markdown/extensions/text_highlight.py
"""``==text==`` -> ``<mark class="note-highlight">text</mark>``"""

import xml.etree.ElementTree as etree

from markdown.extensions import Extension as MarkdownExtension
from markdown.inlinepatterns import InlineProcessor

from .base import Extension

HIGHLIGHT_RE = r"==(?!=)([^\n]+?)(?<!=)=="


class HighlightInlineProcessor(InlineProcessor):
    def handleMatch(self, m, data):
        el = etree.Element("mark")
        el.set("class", "note-highlight")
        el.text = m.group(1)
        return el, m.start(0), m.end(0)


class _TextHighlightMarkdownExtension(MarkdownExtension):
    def extendMarkdown(self, md):
        # Before strong/emphasis (60) so "==**x**==" nests
        md.inlinePatterns.register(HighlightInlineProcessor(HIGHLIGHT_RE, md), "text_highlight", 65)


class TextHighlight(Extension):
    name = "TextHighlight"

    def markdown_extension(self):
        return _TextHighlightMarkdownExtension()
