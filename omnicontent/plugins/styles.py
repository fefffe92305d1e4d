# omnicontent/plugins/styles.py
"""
Styles process plugin.

WeChat strips <style> blocks and ignores class based css, so the final look
has to live in style attributes. This plugin:
- Computes the style of every element from the packaged inline stylesheet, the
  theme css, the custom css and the document's <style> elements
- Appends the allow-listed properties to each element's style attribute
- Always writes the editor-safe font stack as font-family
- Clamps font-size to 12px..40px (<sup> and <sub> may stay smaller)
- Removes every <style> element

It must run last: it captures the structure and classes left by every plugin
before it.
"""

import logging
import re

from omnicontent.markdown.inline_css import INLINE_CSS

from .base import ProcessPlugin
from .css import CascadeResolver
from .utils import append_style, parse_html, soup_to_html

logger = logging.getLogger(__name__)

ALLOWED_PROPERTIES = (
    "color",
    "background-color",
    "font-family",
    "font-size",
    "font-weight",
    "text-align",
    "line-height",
    "margin",
    "padding",
    "border",
    "border-radius",
    "position",
)

SAFE_FONT_FAMILY = (
    '-apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Oxygen, Ubuntu, '
    '"Helvetica Neue", sans-serif'
)
MAX_FONT_SIZE = 40
MIN_FONT_SIZE = 12
SMALL_TEXT_TAGS = ("sup", "sub")

_SIZE_RE = re.compile(r"^\s*(-?\d*\.?\d+)")


def clamp_font_size(value, tag_name):
    """
    Clamp a computed font size into the range the editor renders well.

    Values that are not numeric (``calc()`` and the like) are kept as is.
    """
    match = _SIZE_RE.match(value)
    if not match:
        return value
    size = float(match.group(1))
    if size > MAX_FONT_SIZE:
        return f"{MAX_FONT_SIZE}px"
    if size < MIN_FONT_SIZE and tag_name not in SMALL_TEXT_TAGS:
        return f"{MIN_FONT_SIZE}px"
    return value


def inline_declarations(computed, tag_name):
    declarations = []
    for prop in ALLOWED_PROPERTIES:
        if prop == "font-family":
            declarations.append(f"font-family: {SAFE_FONT_FAMILY};")
            continue
        value = computed.get(prop)
        if not value or value == "none":
            continue
        if prop == "font-size":
            value = clamp_font_size(value, tag_name)
        declarations.append(f"{prop}: {value};")
    return " ".join(declarations)


class StylesPlugin(ProcessPlugin):
    name = "Styles"

    def apply(self, html, settings):
        soup = parse_html(html)
        resolver = CascadeResolver([INLINE_CSS, settings.theme_css, settings.effective_custom_css])
        computed = resolver.compute(soup)

        elements = [el for el in soup.find_all(True) if el.name != "style"]
        logger.debug("Inlining computed styles on %d elements", len(elements))
        for element in elements:
            declarations = inline_declarations(computed.get(id(element), {}), element.name)
            if declarations:
                append_style(element, declarations)

        for style in soup.find_all("style"):
            style.decompose()

        return soup_to_html(soup)
