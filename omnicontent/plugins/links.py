# omnicontent/plugins/links.py
"""
Links process plugin.

This plugin:
- Does nothing when ``link_footnote_mode`` is ``none``
- Unwraps anchors that belong to the footnote system (``#fn-``/``#fnref-``
  targets, ``footnote-ref``/``footnote-backref`` classes, or anchors inside a
  <sup>) while keeping their superscript look
- Replaces every other selected anchor with its text followed by a numbered
  ``<sup>`` (all links, or only links outside weixin.qq.com for ``non-wx``)
- Appends the collected URLs after an <hr> in a muted footnote section
"""

import logging

from omnicontent.settings import LinkDescriptionMode, LinkFootnoteMode

from .base import ProcessPlugin
from .utils import get_classes, parse_html, soup_to_html

logger = logging.getLogger(__name__)

FOOTNOTE_REF_COLOR = "#3370ff"
FOOTNOTE_SECTION_STYLE = "font-size: 14px; color: #888; margin-top: 30px;"
FOOTNOTE_CLASSES = {"footnote-ref", "footnote-backref"}


def is_footnote_anchor(link):
    href = link.get("href", "")
    if href.startswith(("#fn-", "#fnref-")):
        return True
    if FOOTNOTE_CLASSES.intersection(get_classes(link)):
        return True
    return link.parent is not None and link.parent.name == "sup"


def should_convert(href, mode):
    if mode == LinkFootnoteMode.ALL:
        return True
    if mode == LinkFootnoteMode.NON_WX:
        return "weixin.qq.com" not in href
    return False


class LinksPlugin(ProcessPlugin):
    name = "Links"

    def apply(self, html, settings):
        mode = settings.link_footnote_mode
        if mode == LinkFootnoteMode.NONE:
            return html

        soup = parse_html(html)
        footnotes = []

        for link in soup.find_all("a"):
            href = link.get("href")
            if not href:
                continue

            text = link.get_text()
            if is_footnote_anchor(link):
                if link.parent is not None and link.parent.name == "sup":
                    link.replace_with(text)
                else:
                    sup = soup.new_tag("sup")
                    sup.string = text
                    link.replace_with(sup)
                continue

            if not should_convert(href, mode):
                continue

            number = len(footnotes) + 1
            ref = soup.new_tag("sup", style=f"color: {FOOTNOTE_REF_COLOR};")
            ref.string = f"[{number}]"
            link.insert_after(ref)
            link.replace_with(text)

            if settings.link_description_mode == LinkDescriptionMode.RAW:
                footnotes.append(f"[{number}] {text}: {href}")
            else:
                footnotes.append(f"[{number}] {href}")

        if footnotes:
            section = soup.new_tag("section", style=FOOTNOTE_SECTION_STYLE)
            for note in footnotes:
                p = soup.new_tag("p")
                p.string = note
                section.append(p)
            soup.append(soup.new_tag("hr"))
            soup.append(section)
            logger.debug("Converted %d links to footnotes", len(footnotes))

        return soup_to_html(soup)
