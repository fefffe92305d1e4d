# omnicontent/plugins/lists.py
"""
Lists process plugin.

Rich-text editors such as WeChat drop markers or collapse nesting when a list
sits inside an <li>. This plugin:
- Rebuilds every top-level <ul>/<ol> (one whose parent is not li/ul/ol)
- Moves each nested list out of its <li> and places it right after that <li>,
  as a sibling inside the same rebuilt list
- Marks depth with the marker style: ordered lists are always ``decimal``,
  unordered lists use ``square``, then ``disc``, then ``circle`` from level 2 on
- Colors each <li> (its marker) with the theme color and resets the wrapping
  <section> to the body text color (``textColor`` config)
- Leaves the lists of ``section.footnotes`` alone; their <li> ids are link targets
"""

import logging

from .base import ProcessPlugin, get_theme_color
from .utils import parse_html, set_style, soup_to_html

logger = logging.getLogger(__name__)

DEFAULT_TEXT_COLOR = "#222222"
LIST_CLASS = "list-paddingleft-1"
UNORDERED_MARKERS = ("square", "disc", "circle")
LIST_TAGS = ("ul", "ol")


def marker_for(tag_name, level):
    if tag_name == "ol":
        return "decimal"
    return UNORDERED_MARKERS[min(level, len(UNORDERED_MARKERS) - 1)]


def is_top_level(lst):
    return lst.parent is None or lst.parent.name not in ("li", "ul", "ol")


def in_footnotes(lst):
    return lst.find_parent("section", class_="footnotes") is not None


class ListsPlugin(ProcessPlugin):
    name = "Lists"
    default_config = {"textColor": DEFAULT_TEXT_COLOR}

    def get_meta_config(self):
        meta = super().get_meta_config()
        meta["textColor"] = {"type": "text", "title": "List text color"}
        return meta

    def apply(self, html, settings):
        soup = parse_html(html)
        top_level = [
            lst for lst in soup.find_all(LIST_TAGS) if is_top_level(lst) and not in_footnotes(lst)
        ]
        if not top_level:
            return html

        theme_color = get_theme_color(settings)
        text_color = self.get_config().get("textColor") or DEFAULT_TEXT_COLOR

        for lst in top_level:
            lst.replace_with(self.transform_list(soup, lst, 0, theme_color, text_color))

        logger.debug("Flattened %d top-level lists", len(top_level))
        return soup_to_html(soup)

    def transform_list(self, soup, source, level, theme_color, text_color):
        """
        Build a flat copy of ``source``.

        The returned list never holds a list inside an <li>: nested lists are
        transformed at ``level + 1`` and follow their former parent item.
        """
        new_list = soup.new_tag(source.name, attrs={"class": LIST_CLASS})
        set_style(
            new_list,
            list_style_type=marker_for(source.name, level),
            padding="0 0 0 1em",
            margin="0.5em 0",
        )

        nested = []
        for item in source.find_all("li", recursive=False):
            new_item = soup.new_tag("li")
            for child_list in item.find_all(LIST_TAGS, recursive=False):
                nested.append((new_item, child_list.extract()))

            set_style(new_item, color=theme_color)
            section = soup.new_tag("section")
            set_style(section, color=text_color)
            for node in list(item.contents):
                section.append(node.extract())

            new_item.append(section)
            new_list.append(new_item)

        # Keep sibling order when one item owned several nested lists
        last_inserted = {}
        for parent_item, child_list in nested:
            new_child = self.transform_list(soup, child_list, level + 1, theme_color, text_color)
            anchor = last_inserted.get(id(parent_item), parent_item)
            anchor.insert_after(new_child)
            last_inserted[id(parent_item)] = new_child

        return new_list
