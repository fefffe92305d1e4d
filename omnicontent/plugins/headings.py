# omnicontent/plugins/headings.py
"""
Headings process plugin.

For every <h2> that carries the renderer's ``span.content`` wrapper, this plugin:
- Centers the heading
- Inserts a line break after each delimiter (``,，、；：;:|``) when
  ``enableHeadingDelimiterBreak`` is on
- Prepends a large two digit number (01, 02, ...) on its own line when
  ``enableHeadingNumber`` is on

Both switches live in the plugin's own config, seeded from the settings.
"""

import re

from bs4 import NavigableString

from .base import ProcessPlugin
from .utils import parse_html, set_style, soup_to_html

DELIMITER_RE = re.compile(r"[,，、；：;:|]")
NUMBER_STYLE = "font-size: 48px; "


class HeadingsPlugin(ProcessPlugin):
    name = "Headings"

    def __init__(self, settings):
        self.default_config = {
            "enableHeadingNumber": settings.enable_heading_number,
            "enableHeadingDelimiterBreak": settings.enable_heading_delimiter_break,
        }
        super().__init__(settings)

    def get_meta_config(self):
        meta = super().get_meta_config()
        meta["enableHeadingNumber"] = {"type": "switch", "title": "Number headings"}
        meta["enableHeadingDelimiterBreak"] = {
            "type": "switch",
            "title": "Break lines after delimiters",
        }
        return meta

    def apply(self, html, settings):
        config = self.get_config()
        add_number = config["enableHeadingNumber"]
        break_delimiters = config["enableHeadingDelimiterBreak"]
        if not (add_number or break_delimiters):
            return html

        soup = parse_html(html)
        for index, h2 in enumerate(soup.find_all("h2")):
            content = h2.select_one(".content")
            if content is None:
                continue
            set_style(h2, text_align="center")
            if break_delimiters:
                self.break_after_delimiters(soup, content)
            if add_number:
                self.insert_number(soup, content, index)
        return soup_to_html(soup)

    @staticmethod
    def insert_number(soup, content, index):
        number = soup.new_tag("span", attrs={"leaf": "", "style": NUMBER_STYLE})
        number.string = f"{index + 1:02d}"
        wrapper = soup.new_tag("span", attrs={"textstyle": ""})
        wrapper.append(number)
        content.insert(0, wrapper)
        content.insert(1, soup.new_tag("br"))

    @staticmethod
    def break_after_delimiters(soup, content):
        for text_node in list(content.find_all(string=True)):
            text = str(text_node)
            if not DELIMITER_RE.search(text):
                continue
            nodes = []
            start = 0
            for match in DELIMITER_RE.finditer(text):
                nodes.append(NavigableString(text[start : match.end()]))
                nodes.append(soup.new_tag("br"))
                start = match.end()
            if start < len(text):
                nodes.append(NavigableString(text[start:]))
            text_node.replace_with(*nodes)
