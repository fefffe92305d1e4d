# omnicontent/plugins/blockquotes.py
"""
Blockquotes process plugin.

The WeChat editor applies its own blockquote look. This plugin overrides it
with ``!important`` declarations: a theme colored left border and muted text,
also applied to the paragraphs inside. Registered disabled by default.
"""

from .base import ProcessPlugin, get_theme_color
from .utils import parse_html, set_style, soup_to_html

QUOTE_TEXT_COLOR = "rgba(0, 0, 0, 0.6)"


class BlockquotesPlugin(ProcessPlugin):
    name = "Blockquotes"
    default_config = {"enabled": False}

    def apply(self, html, settings):
        soup = parse_html(html)
        blockquotes = soup.find_all("blockquote")
        if not blockquotes:
            return html

        theme_color = get_theme_color(settings)
        for blockquote in blockquotes:
            blockquote["style"] = (
                "padding-left: 10px !important; "
                f"border-left: 3px solid {theme_color} !important; "
                f"color: {QUOTE_TEXT_COLOR} !important; "
                "font-size: 15px !important; "
                "padding-top: 4px !important; "
                "margin: 1em 0 !important; "
                "text-indent: 0 !important;"
            )
            for p in blockquote.find_all("p"):
                set_style(p, color=QUOTE_TEXT_COLOR, margin="0")

        return soup_to_html(soup)
