"""Tests for the DOM rewriting process plugins."""

from bs4 import BeautifulSoup

from omnicontent.plugins import (
    BlockquotesPlugin,
    CodeBlocksPlugin,
    HeadingsPlugin,
    ImagesPlugin,
    LinksPlugin,
    TablesPlugin,
    get_theme_color,
)
from omnicontent.plugins.utils import parse_style
from omnicontent.settings import LinkDescriptionMode, LinkFootnoteMode


def soup(html):
    return BeautifulSoup(html, "html.parser")


HEADING = (
    '<h2><span class="prefix"></span><span class="content">{}</span>'
    '<span class="suffix"></span></h2>'
)


class TestThemeColor:
    def test_default(self, settings) -> None:
        """Without a custom color or theme variable the default accent is used."""
        assert get_theme_color(settings) == "#7852ee"

    def test_custom_color_when_enabled(self, settings) -> None:
        """The custom color wins only when switched on."""
        settings.theme_color = "#ff0000"
        assert get_theme_color(settings) == "#7852ee"
        settings.enable_theme_color = True
        assert get_theme_color(settings) == "#ff0000"

    def test_primary_color_from_theme_css(self, settings) -> None:
        """The theme's --primary-color declaration is picked up."""
        settings.theme_css = ":root { --primary-color: #00aa88; --text: #333; }"
        assert get_theme_color(settings) == "#00aa88"


class TestImagesPlugin:
    def test_data_src_style_and_centered_parent(self, settings) -> None:
        """Images get data-src, a default style and a centered parent."""
        html = ImagesPlugin(settings).process('<p><img src="https://x.test/a.png"></p>', settings)
        img = soup(html).img
        assert img["data-src"] == "https://x.test/a.png"
        assert img["style"] == "max-width: 100%; height: auto;"
        assert parse_style(soup(html).p["style"])["text-align"] == "center"

    def test_existing_style_is_kept(self, settings) -> None:
        """An image that already has a style is not restyled."""
        html = ImagesPlugin(settings).process('<p><img src="a.png" style="width: 10px;"></p>', settings)
        assert soup(html).img["style"] == "width: 10px;"

    def test_rerun_is_stable(self, settings) -> None:
        """Running the plugin on its own output changes nothing."""
        plugin = ImagesPlugin(settings)
        once = plugin.process('<p><img src="a.png"></p>', settings)
        assert plugin.process(once, settings) == once

    def test_local_sources_are_uploaded_once(self, settings) -> None:
        """Local sources are replaced with the uploader's URL."""
        calls = []

        def uploader(src):
            calls.append(src)
            return f"https://cdn.test/{src}"

        plugin = ImagesPlugin(settings, uploader=uploader)
        html = plugin.process(
            '<p><img src="a.png"><img src="a.png"><img src="https://x.test/b.png"></p>', settings
        )
        sources = [img["src"] for img in soup(html).find_all("img")]
        assert sources == ["https://cdn.test/a.png", "https://cdn.test/a.png", "https://x.test/b.png"]
        assert calls == ["a.png"]

    def test_failed_upload_keeps_source(self, settings) -> None:
        """An uploader error leaves the local source in place."""

        def uploader(src):
            raise OSError("offline")

        html = ImagesPlugin(settings, uploader=uploader).process('<p><img src="a.png"></p>', settings)
        assert soup(html).img["src"] == "a.png"


class TestLinksPlugin:
    def test_mode_none_is_identity(self, settings) -> None:
        """No conversion happens when link footnotes are off."""
        settings.link_footnote_mode = LinkFootnoteMode.NONE
        html = '<p><a href="https://example.com">x</a></p>'
        assert LinksPlugin(settings).process(html, settings) == html

    def test_links_become_numbered_footnotes(self, settings) -> None:
        """Each link turns into its text plus a [n] superscript and a footnote line."""
        settings.link_footnote_mode = LinkFootnoteMode.ALL
        html = LinksPlugin(settings).process(
            '<p><a href="https://a.test">A</a> and <a href="https://b.test">B</a></p>', settings
        )
        doc = soup(html)
        assert doc.find("a") is None
        assert [sup.get_text() for sup in doc.p.find_all("sup")] == ["[1]", "[2]"]
        notes = [p.get_text() for p in doc.find("section").find_all("p")]
        assert notes == ["[1] https://a.test", "[2] https://b.test"]
        assert doc.find("hr") is not None

    def test_raw_description_includes_text(self, settings) -> None:
        """In raw mode the footnote repeats the link text."""
        settings.link_footnote_mode = LinkFootnoteMode.ALL
        settings.link_description_mode = LinkDescriptionMode.RAW
        html = LinksPlugin(settings).process('<p><a href="https://a.test">A</a></p>', settings)
        assert soup(html).find("section").p.get_text() == "[1] A: https://a.test"

    def test_wechat_links_kept_in_non_wx_mode(self, settings) -> None:
        """Links to weixin.qq.com stay clickable in non-wx mode."""
        settings.link_footnote_mode = LinkFootnoteMode.NON_WX
        html = LinksPlugin(settings).process(
            '<p><a href="https://mp.weixin.qq.com/s/abc">wx</a><a href="https://a.test">A</a></p>',
            settings,
        )
        doc = soup(html)
        assert [a["href"] for a in doc.find_all("a")] == ["https://mp.weixin.qq.com/s/abc"]
        assert doc.find("section").p.get_text() == "[1] https://a.test"

    def test_footnote_anchors_are_unwrapped(self, settings) -> None:
        """Footnote references keep their superscript but lose the anchor."""
        settings.link_footnote_mode = LinkFootnoteMode.ALL
        html = LinksPlugin(settings).process(
            '<p>x<sup id="fnref-1"><a href="#fn-1" class="footnote-ref">[1]</a></sup></p>'
            '<ol><li id="fn-1">note <a href="#fnref-1" class="footnote-backref">back</a></li></ol>',
            settings,
        )
        doc = soup(html)
        assert doc.find("a") is None
        assert str(doc.p) == '<p>x<sup id="fnref-1">[1]</sup></p>'
        assert doc.li.sup.get_text() == "back"
        assert doc.find("section") is None


class TestHeadingsPlugin:
    def test_number_and_delimiter_break(self, settings) -> None:
        """h2 headings are centered, numbered and broken after delimiters."""
        html = HeadingsPlugin(settings).process(
            HEADING.format("One, two") + HEADING.format("Three"), settings
        )
        first, second = soup(html).find_all("h2")
        assert parse_style(first["style"]) == {"text-align": "center"}
        number = first.select_one('.content span[textstyle] span[leaf]')
        assert number.get_text() == "01"
        assert number["style"] == "font-size: 48px; "
        assert second.select_one("span[leaf]").get_text() == "02"
        assert str(first.select_one(".content")).endswith("One,<br/> two</span>")

    def test_numbering_counts_every_h2(self, settings) -> None:
        """The number is the index among all h2 elements."""
        html = HeadingsPlugin(settings).process("<h2>plain</h2>" + HEADING.format("x"), settings)
        assert soup(html).select_one("span[leaf]").get_text() == "02"

    def test_config_switches(self, settings) -> None:
        """Both behaviors follow the plugin config, seeded from settings."""
        settings.enable_heading_number = False
        plugin = HeadingsPlugin(settings)
        assert plugin.get_config()["enableHeadingNumber"] is False
        html = plugin.process(HEADING.format("a：b"), settings)
        assert soup(html).select_one("span[leaf]") is None
        assert soup(html).find("br") is not None

        plugin.update_config({"enableHeadingDelimiterBreak": False})
        source = HEADING.format("a：b")
        assert plugin.process(source, settings) == source

    def test_other_headings_untouched(self, settings) -> None:
        """Only h2 headings are decorated."""
        html = "<h1><span class=\"content\">a, b</span></h1>"
        assert HeadingsPlugin(settings).process(html, settings) == html


class TestCodeBlocksPlugin:
    def test_pre_styles_and_line_numbers(self, settings) -> None:
        """Code blocks are styled inline and every line gets a number."""
        html = CodeBlocksPlugin(settings).process(
            '<pre><code class="hljs">a = 1\nb = 2\n</code></pre>', settings
        )
        doc = soup(html)
        style = parse_style(doc.pre["style"])
        assert style["background"] == "#f8f8f8"
        assert style["padding"] == "16px"
        assert style["white-space"] == "pre !important"
        assert [span.get_text() for span in doc.select("span.line-number")] == ["1", "2"]
        assert ".line-number" in doc.pre.style.get_text()

    def test_code_wrap(self, settings) -> None:
        """The codeWrap switch forces wrapping."""
        plugin = CodeBlocksPlugin(settings)
        plugin.update_config({"codeWrap": True})
        settings.line_number = False
        html = plugin.process("<pre><code>x</code></pre>", settings)
        assert "white-space: pre-wrap !important" in soup(html).code["style"]
        assert soup(html).select("span.line-number") == []

    def test_skipped_with_weixin_code_format(self, settings) -> None:
        """WeChat formatted snippets are left alone."""
        settings.enable_weixin_code_format = True
        html = "<pre><code>x</code></pre>"
        assert CodeBlocksPlugin(settings).process(html, settings) == html


class TestTablesPlugin:
    def test_table_styles(self, settings) -> None:
        """Tables, header cells, body cells and stripes get inline styles."""
        html = TablesPlugin(settings).process(
            "<table><thead><tr><th>h</th></tr></thead>"
            "<tbody><tr><td>1</td></tr><tr><td>2</td></tr><tr><td>3</td></tr></tbody></table>",
            settings,
        )
        doc = soup(html)
        assert parse_style(doc.table["style"])["border-collapse"] == "collapse"
        assert parse_style(doc.th["style"])["background-color"] == "#f2f2f2"
        assert parse_style(doc.td["style"])["border"] == "1px solid #ddd"
        rows = doc.tbody.find_all("tr")
        assert [parse_style(row.get("style")).get("background-color") for row in rows] == [
            "#f9f9f9",
            None,
            "#f9f9f9",
        ]


class TestBlockquotesPlugin:
    def test_disabled_by_default(self, settings) -> None:
        """Blockquote restyling is opt-in."""
        assert not BlockquotesPlugin(settings).is_enabled()

    def test_theme_border(self, settings) -> None:
        """The border uses the theme color and paragraphs are muted."""
        html = BlockquotesPlugin(settings).process("<blockquote><p>q</p></blockquote>", settings)
        doc = soup(html)
        assert "border-left: 3px solid #7852ee !important" in doc.blockquote["style"]
        assert parse_style(doc.p["style"]) == {"color": "rgba(0, 0, 0, 0.6)", "margin": "0"}
