# omnicontent/markdown/extensions/links.py
"""
Link rendering.

- ``mailto:`` and bare e-mail links render as their plain text
- links selected by ``link_footnote_mode`` render as ``<a>text<sup>[n]</sup></a>``
  (``<a><sup>[n]</sup></a>`` when ``link_description_mode`` is ``empty``) and are
  listed with their text and URL in a trailing ``<section class="footnotes">``
- inline, reference and auto links all follow these rules
- every other link renders as a normal anchor

Numbers follow reading order. Inline patterns do not visit the tree in
document order, so each converted link is first tagged with a key; a tree
processor then stamps the document position of every tag, and ``postprocess``
sorts by that position before numbering.
"""

import logging
import re
import xml.etree.ElementTree as etree

from django.utils.html import escape
from markdown.extensions import Extension as MarkdownExtension
from markdown.inlinepatterns import (
    AUTOLINK_RE,
    LINK_RE,
    REFERENCE_RE,
    AutolinkInlineProcessor,
    LinkInlineProcessor,
    ReferenceInlineProcessor,
    ShortReferenceInlineProcessor,
)
from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString

from omnicontent.settings import LinkDescriptionMode, LinkFootnoteMode

from .base import Extension, ReferenceEntry

logger = logging.getLogger(__name__)

WECHAT_LINK_PREFIXES = (
    "https://mp.weixin.qq.com/mp",
    "https://mp.weixin.qq.com/s",
    "https://mmbiz.qpic.cn",
)

EMAIL_RE = re.compile(r"^[^@\s/:]+@[^@\s/]+\.[^@\s/]+$")
LINK_REF_ATTR = "data-link-ref"
LINK_REF_RE = re.compile(r'<sup data-link-ref="(\d+)">\[\?\]</sup>')


def is_wechat_link(href):
    return href.startswith(WECHAT_LINK_PREFIXES)


class FootnoteLinkMixin:
    """Routes every anchor a link pattern produces through ``LinkRenderer.render_link``."""

    def __init__(self, pattern, md, owner):
        super().__init__(pattern, md)
        self.owner = owner

    def handleMatch(self, m, data):
        el, start, end = super().handleMatch(m, data)
        if el is None:
            return el, start, end
        return self.owner.render_link(el), start, end


class FootnoteLinkInlineProcessor(FootnoteLinkMixin, LinkInlineProcessor):
    pass


class FootnoteReferenceInlineProcessor(FootnoteLinkMixin, ReferenceInlineProcessor):
    pass


class FootnoteShortReferenceInlineProcessor(FootnoteLinkMixin, ShortReferenceInlineProcessor):
    pass


class FootnoteAutolinkInlineProcessor(FootnoteLinkMixin, AutolinkInlineProcessor):
    pass


class LinkPositionTreeprocessor(Treeprocessor):
    def __init__(self, md, owner):
        super().__init__(md)
        self.owner = owner

    def run(self, root):
        position = 0
        for el in root.iter("sup"):
            key = el.get(LINK_REF_ATTR)
            if key is not None:
                self.owner.record_link_position(int(key), position)
                position += 1


class _LinkMarkdownExtension(MarkdownExtension):
    def __init__(self, owner, **kwargs):
        self.owner = owner
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        # Replace the stock link patterns under their own names and priorities
        patterns = md.inlinePatterns
        patterns.register(FootnoteLinkInlineProcessor(LINK_RE, md, self.owner), "link", 160)
        patterns.register(
            FootnoteReferenceInlineProcessor(REFERENCE_RE, md, self.owner), "reference", 170
        )
        patterns.register(
            FootnoteShortReferenceInlineProcessor(REFERENCE_RE, md, self.owner), "short_reference", 130
        )
        patterns.register(FootnoteAutolinkInlineProcessor(AUTOLINK_RE, md, self.owner), "autolink", 120)
        # After the inline processor (20) has built the full tree
        md.treeprocessors.register(LinkPositionTreeprocessor(md, self.owner), "link_positions", 15)


class LinkRenderer(Extension):
    name = "LinkRenderer"

    def __init__(self, context):
        super().__init__(context)
        self.footnote_links = []

    def prepare(self):
        self.footnote_links = []

    def should_convert_to_footnote(self, href):
        mode = self.settings.link_footnote_mode
        if mode == LinkFootnoteMode.ALL:
            return True
        if mode == LinkFootnoteMode.NON_WX:
            return not is_wechat_link(href)
        return False

    def render_link(self, el):
        """
        Apply the link rules to an anchor built by a link pattern.

        Returns the anchor, or its text for e-mail links.
        """
        href = el.get("href", "")
        text = el.text or ""
        if href.startswith("mailto:") or EMAIL_RE.match(href):
            return text

        if not self.should_convert_to_footnote(href):
            return el

        key = self.add_footnote_link(href, text)
        el.attrib.clear()
        if self.settings.link_description_mode == LinkDescriptionMode.EMPTY:
            el.text = None
            for child in list(el):
                el.remove(child)
        sup = etree.SubElement(el, "sup")
        sup.set(LINK_REF_ATTR, str(key))
        sup.text = AtomicString("[?]")
        return el

    def add_footnote_link(self, href, text):
        """Collect a converted link. Returns its key."""
        key = len(self.footnote_links)
        entry = ReferenceEntry(id=str(key), text=text, href=href)
        self.footnote_links.append(entry)
        return key

    def record_link_position(self, key, position):
        self.footnote_links[key].position = position

    def ordered_links(self):
        return sorted(self.footnote_links, key=ReferenceEntry.sort_key)

    def postprocess(self, html):
        if not self.footnote_links:
            return html

        ordered = self.ordered_links()
        numbers = {entry.id: number for number, entry in enumerate(ordered, start=1)}
        html = LINK_REF_RE.sub(lambda m: f"<sup>[{numbers[m.group(1)]}]</sup>", html)

        items = [
            f"<li>{escape(entry.text)}<br>"
            f'<span class="footnote-url">{escape(entry.href)}</span></li>'
            for entry in ordered
        ]

        logger.debug("Converted %d links to footnotes", len(items))
        return f'{html}<section class="footnotes"><hr><ol>{"".join(items)}</ol></section>'

    def markdown_extension(self):
        return _LinkMarkdownExtension(self)
