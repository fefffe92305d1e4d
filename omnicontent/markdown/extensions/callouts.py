# omnicontent/markdown/extensions/callouts.py
"""
Obsidian callouts.

Renders

    > [!warning] Mind the gap
    > Body text, parsed as markdown

as

    <section class="ad ad-question">
      <section class="ad-title-wrap">
        <span class="ad-icon"><svg .../></span><span class="ad-title">Mind the gap</span>
      </section>
      <section class="ad-content"><p>Body text, parsed as markdown</p></section>
    </section>

The same structure is used for ```` ```ad-TYPE ```` fences (see ``code.py``).
"""

import logging
import re
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor
from markdown.extensions import Extension as MarkdownExtension

from .base import Extension

logger = logging.getLogger(__name__)

DEFAULT_CALLOUT_TYPE = "note"


def build_callout(md, parent, info, title):
    """
    Append the callout skeleton to ``parent``.

    Returns:
        The ``ad-content`` element, ready to receive the parsed body
    """
    section = etree.SubElement(parent, "section")
    section.set("class", f"ad {info.style}")

    title_wrap = etree.SubElement(section, "section")
    title_wrap.set("class", "ad-title-wrap")

    icon = etree.SubElement(title_wrap, "span")
    icon.set("class", "ad-icon")
    icon.text = md.htmlStash.store(info.icon)

    title_el = etree.SubElement(title_wrap, "span")
    title_el.set("class", "ad-title")
    title_el.text = title

    content = etree.SubElement(section, "section")
    content.set("class", "ad-content")
    return content


class CalloutBlockProcessor(BlockProcessor):
    RE = re.compile(r"^ {0,3}> ?\[!(?P<type>[\w-]+)\][+-]?[ \t]*(?P<title>.*)$")
    QUOTE_PREFIX = re.compile(r"^ {0,3}> ?")

    def __init__(self, parser, assets):
        super().__init__(parser)
        self.assets = assets

    def test(self, parent, block):
        return bool(self.RE.match(block.split("\n", 1)[0]))

    def run(self, parent, blocks):
        block = blocks.pop(0)
        first_line, _, rest = block.partition("\n")
        match = self.RE.match(first_line)

        callout_type = match.group("type").lower()
        info = self.assets.get_callout(callout_type)
        if info is None:
            logger.debug("Unknown callout type %r, rendering as note", callout_type)
            info = self.assets.get_callout(DEFAULT_CALLOUT_TYPE)
        title = match.group("title").strip() or callout_type.capitalize()

        content = build_callout(self.parser.md, parent, info, title)
        body = "\n".join(self.QUOTE_PREFIX.sub("", line) for line in rest.split("\n"))
        if body.strip():
            self.parser.parseChunk(content, body)


class _CalloutMarkdownExtension(MarkdownExtension):
    def __init__(self, assets, **kwargs):
        self.assets = assets
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        # Just above the stock blockquote processor (20)
        md.parser.blockprocessors.register(
            CalloutBlockProcessor(md.parser, self.assets), "callout", 21
        )


class CalloutRenderer(Extension):
    name = "CalloutRenderer"

    def markdown_extension(self):
        return _CalloutMarkdownExtension(self.assets)
