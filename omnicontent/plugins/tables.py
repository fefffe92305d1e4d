# omnicontent/plugins/tables.py
"""
Tables process plugin.

This plugin:
- Collapses borders and stretches every <table> to the full width
- Shades and bolds header cells with a thicker bottom border
- Pads and borders body cells
- Stripes every other body row
"""

from .base import ProcessPlugin
from .utils import parse_html, set_style, soup_to_html

HEADER_BACKGROUND = "#f2f2f2"
STRIPE_BACKGROUND = "#f9f9f9"
CELL_BORDER = "1px solid #ddd"


class TablesPlugin(ProcessPlugin):
    name = "Tables"

    def apply(self, html, settings):
        soup = parse_html(html)
        tables = soup.find_all("table")
        if not tables:
            return html

        for table in tables:
            set_style(table, border_collapse="collapse", width="100%", margin_bottom="20px")

            for th in table.find_all("th"):
                set_style(
                    th,
                    background_color=HEADER_BACKGROUND,
                    padding="8px",
                    border_bottom="2px solid #ddd",
                    text_align="left",
                    font_weight="bold",
                )

            for td in table.find_all("td"):
                set_style(td, padding="8px", border=CELL_BORDER, text_align="left")

            body_rows = [row for row in table.find_all("tr") if row.find("td") is not None]
            for index, row in enumerate(body_rows):
                if index % 2 == 0:
                    set_style(row, background_color=STRIPE_BACKGROUND)

        return soup_to_html(soup)
