# omnicontent/plugins/code_blocks.py
"""
Code blocks process plugin.

This plugin:
- Does nothing when the WeChat code format is enabled (those blocks are
  already laid out for the editor)
- Gives every ``pre > code`` block a light background, padding and monospace
  metrics as inline styles
- Forces wrapping or no wrapping with ``!important`` declarations, per the
  ``codeWrap`` config
- Prefixes each line with a ``span.line-number`` and appends the matching
  <style> block when ``line_number`` is on
"""

import logging

from .base import ProcessPlugin
from .utils import append_style, parse_html, set_style, soup_to_html

logger = logging.getLogger(__name__)

WRAP_STYLE = (
    "white-space: pre-wrap !important; word-break: break-all !important; "
    "overflow-x: visible !important; word-wrap: break-word !important;"
)
NOWRAP_STYLE = (
    "white-space: pre !important; word-break: normal !important; "
    "overflow-x: auto !important; word-wrap: normal !important; "
    "text-wrap: nowrap !important; overflow-wrap: normal !important;"
)
LINE_NUMBER_CSS = """
.line-number {
  display: inline-block;
  width: 2em;
  text-align: right;
  padding-right: 1em;
  margin-right: 1em;
  color: #999;
  border-right: 1px solid #ddd;
}
"""


class CodeBlocksPlugin(ProcessPlugin):
    name = "CodeBlocks"
    default_config = {"codeWrap": False}

    def get_meta_config(self):
        meta = super().get_meta_config()
        meta["codeWrap"] = {"type": "switch", "title": "Wrap long code lines"}
        return meta

    def apply(self, html, settings):
        if settings.enable_weixin_code_format:
            logger.debug("WeChat code format enabled, skipping %s", self.name)
            return html

        soup = parse_html(html)
        code_blocks = soup.select("pre > code")
        if not code_blocks:
            return html

        wrap_style = WRAP_STYLE if self.get_config().get("codeWrap") else NOWRAP_STYLE
        for code in code_blocks:
            pre = code.parent
            set_style(
                pre,
                background="#f8f8f8",
                border_radius="4px",
                padding="16px",
                overflow="auto",
                font_size="14px",
                line_height="1.5",
            )
            append_style(pre, wrap_style)
            append_style(code, wrap_style)

            if settings.line_number:
                self.number_lines(soup, code)
                style = soup.new_tag("style")
                style.string = LINE_NUMBER_CSS
                pre.append(style)

        return soup_to_html(soup)

    @staticmethod
    def number_lines(soup, code):
        lines = code.decode_contents().split("\n")
        if len(lines) > 1 and lines[-1] == "":
            lines.pop()
        numbered = "\n".join(
            f'<span class="line-number">{index}</span>{line}'
            for index, line in enumerate(lines, start=1)
        )
        code.clear()
        for node in list(parse_html(numbered + "\n").contents):
            code.append(node.extract())
