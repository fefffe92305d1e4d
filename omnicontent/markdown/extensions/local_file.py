# omnicontent/markdown/extensions/local_file.py
"""
Obsidian embeds: ``![[image.png]]`` and ``![[image.png|300]]``.

Targets are resolved through the asset provider. Names the provider cannot
resolve render as a muted ``<span class="embed-missing">``.
"""

import logging
import xml.etree.ElementTree as etree

from markdown.extensions import Extension as MarkdownExtension
from markdown.inlinepatterns import InlineProcessor

from .base import Extension

logger = logging.getLogger(__name__)

EMBED_RE = r"!\[\[([^\]|\n]+)(?:\|([^\]\n]*))?\]\]"


class EmbedInlineProcessor(InlineProcessor):
    def __init__(self, pattern, md, assets):
        super().__init__(pattern, md)
        self.assets = assets

    def handleMatch(self, m, data):
        name = m.group(1).strip()
        option = (m.group(2) or "").strip()

        src = self.assets.resolve_embed(name)
        if src is None:
            logger.warning("Cannot resolve embed %r", name)
            el = etree.Element("span")
            el.set("class", "embed-missing")
            el.text = name
            return el, m.start(0), m.end(0)

        el = etree.Element("img")
        el.set("src", src)
        el.set("alt", name)
        if option.isdigit():
            el.set("width", option)
        elif option:
            el.set("alt", option)
        return el, m.start(0), m.end(0)


class _LocalFileMarkdownExtension(MarkdownExtension):
    def __init__(self, assets, **kwargs):
        self.assets = assets
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        # Ahead of the stock image patterns (150)
        md.inlinePatterns.register(EmbedInlineProcessor(EMBED_RE, md, self.assets), "embed", 176)


class LocalFile(Extension):
    name = "LocalFile"

    def markdown_extension(self):
        return _LocalFileMarkdownExtension(self.assets)
