"""Tests for platform adapters and the end to end pipeline."""

import pytest
from bs4 import BeautifulSoup
from django.template import Context, Template

from omnicontent.adapters import AdapterRegistry, PlatformAdapter
from omnicontent.cards import CardDataManager
from omnicontent.errors import AdapterNotFoundError
from omnicontent.markdown.extensions.math import math_cache_key
from omnicontent.plugins import ListsPlugin, PluginManager, StylesPlugin
from omnicontent.plugins.utils import parse_style
from omnicontent.settings import LinkFootnoteMode, MathDialect

SAMPLE = (
    "<h2>One, two</h2><ul><li>a<ul><li>b</li></ul></li></ul>"
    "<blockquote><p>q</p></blockquote><pre><code>x = 1\ny = 2</code></pre>"
    "<table><tr><th>h</th></tr><tr><td>1</td></tr><tr><td>2</td></tr></table>"
    '<p><a href="https://example.com">link</a><img src="a.png"></p>'
)


def soup(html):
    return BeautifulSoup(html, "html.parser")


class TestAdapterRegistry:
    def _adapter(self, key, settings):
        return PlatformAdapter(key, key.title(), [], PluginManager(), CardDataManager())

    def test_lookup_is_case_insensitive(self, settings) -> None:
        """Keys are stored and looked up in lower case."""
        registry = AdapterRegistry()
        adapter = registry.register(self._adapter("WeChat", settings))
        assert registry.get("wechat") is adapter
        assert registry.get("WECHAT") is adapter

    def test_unknown_platform_uses_preview(self, settings) -> None:
        """Unknown platforms get the preview adapter."""
        registry = AdapterRegistry()
        registry.register(self._adapter("wechat", settings))
        preview = registry.register(self._adapter("preview", settings))
        assert registry.get("medium") is preview
        assert registry.get(None) is preview

    def test_first_registered_without_preview(self, settings) -> None:
        """Without a preview adapter the first registered one is used."""
        registry = AdapterRegistry()
        first = registry.register(self._adapter("zhihu", settings))
        registry.register(self._adapter("wechat", settings))
        assert registry.get("medium") is first

    def test_empty_registry(self) -> None:
        """Lookups on an empty registry raise."""
        with pytest.raises(AdapterNotFoundError):
            AdapterRegistry().get("wechat")

    def test_unknown_plugin_names_are_skipped(self, settings, caplog) -> None:
        """An adapter naming a missing plugin runs the others."""
        manager = PluginManager([ListsPlugin(settings)])
        adapter = PlatformAdapter("x", "X", ["Missing", "Lists"], manager, CardDataManager())
        assert [plugin.get_name() for plugin in adapter.get_plugins()] == ["Lists"]
        assert "Missing" in caplog.text

    def test_adapt_restores_cards(self, settings) -> None:
        """Card placeholders are swapped back after the plugins ran."""
        cards = CardDataManager()
        payload = '<section data-id="c1" data-x=\'1\'><br/></section>'
        cards.set_card_data("c1", payload)
        manager = PluginManager([StylesPlugin(settings)])
        adapter = PlatformAdapter("x", "X", ["Styles"], manager, cards)
        html = adapter.adapt('  <section data-id="c1"><p>card</p></section>  ', settings)
        assert html == payload


class TestPluginOrder:
    def test_order_changes_output(self, settings) -> None:
        """Running Styles before Lists leaves the list sections unstyled."""
        html = "<ul><li>a<ul><li>b</li></ul></li></ul>"
        manager = PluginManager([ListsPlugin(settings), StylesPlugin(settings)])
        lists, styles = manager.get_plugin("Lists"), manager.get_plugin("Styles")

        after = soup(manager.run_plugins(html, settings, [lists, styles]))
        before = soup(manager.run_plugins(html, settings, [styles, lists]))

        assert str(after) != str(before)
        for li in after.find_all("li"):
            assert parse_style(li["style"])["color"] == "#7852ee"
            assert "font-family" in parse_style(li.section["style"])
        for li in before.find_all("li"):
            assert "font-family" not in parse_style(li.section["style"])

    def test_canonical_order(self, pipeline) -> None:
        """Styles runs last in the canonical order."""
        names = [plugin.get_name() for plugin in pipeline.manager.get_plugins()]
        assert names[-1] == "Styles"
        assert names.index("Lists") < names.index("Styles")

    @pytest.mark.parametrize(
        "name", ["Images", "Links", "Headings", "Lists", "CodeBlocks", "Tables", "Blockquotes", "Styles"]
    )
    def test_disabling_a_plugin_removes_its_stage(self, pipeline, settings, name) -> None:
        """A disabled plugin behaves as if it was left out of the chain."""
        manager = pipeline.manager
        others = [plugin for plugin in manager.get_plugins() if plugin.get_name() != name]
        expected = manager.run_plugins(SAMPLE, settings, others)

        manager.set_plugin_enabled(name, False)
        assert manager.process_content(SAMPLE, settings) == expected


class TestContentPipeline:
    def test_wechat_render(self, pipeline, settings) -> None:
        """Headings, flattened lists and link footnotes survive the WeChat chain."""
        settings.link_footnote_mode = LinkFootnoteMode.ALL
        html = pipeline.render(
            "# Title\n\n- a\n  - b\n- c\n\n[link](https://example.com)", platform="wechat"
        )
        doc = soup(html)
        assert doc.select_one("h1 > span.content").get_text() == "Title"
        assert doc.select("li > ul, li > ol") == []
        body_items = [li for li in doc.find_all("li") if not li.find_parent("section", class_="footnotes")]
        assert [li.get_text().strip() for li in body_items] == ["a", "b", "c"]
        assert doc.find("sup").get_text() == "[1]"
        assert "https://example.com" in doc.select_one("section.footnotes").get_text()
        assert doc.find("style") is None
        assert pipeline.manager.last_failures == {}

    def test_every_link_form_becomes_a_footnote(self, pipeline, settings) -> None:
        """Inline, reference and auto links share one numbered footnote list."""
        settings.link_footnote_mode = LinkFootnoteMode.ALL
        html = pipeline.render(
            "[a](https://a.test) and [b][r] and <https://c.test>\n\n[r]: https://b.test", platform="wechat"
        )
        doc = soup(html)
        sups = [sup.get_text() for sup in doc.find_all("sup") if not sup.find_parent("section", class_="footnotes")]
        assert sups == ["[1]", "[2]", "[3]"]
        assert doc.select("a[href]") == []
        assert len(doc.select("section.footnotes")) == 1
        urls = [span.get_text() for span in doc.select("section.footnotes span.footnote-url")]
        assert urls == ["https://a.test", "https://b.test", "https://c.test"]

    def test_unknown_platform_renders_as_preview(self, pipeline) -> None:
        """An unknown platform key renders like the preview."""
        text = "## A, b\n\ntext"
        assert pipeline.render(text, platform="medium") == pipeline.render(text, platform="preview")

    def test_zhihu_leaves_headings_alone(self, pipeline) -> None:
        """Heading numbering only runs where the platform asks for it."""
        doc = soup(pipeline.render("## A", platform="zhihu"))
        assert doc.h2.get("style") is None
        assert soup(pipeline.render("## A", platform="preview")).h2.get("style")

    def test_card_round_trip(self, pipeline) -> None:
        """An account card comes back byte for byte on every platform."""
        payload = '<section data-id="gh_1" data-nickname="Name"><img src="x"/></section>'
        for platform in pipeline.get_platforms():
            html = pipeline.render(f"```mpcard\n{payload}\n```", platform=platform)
            assert payload in html
            assert "note-mpcard-wrapper" not in html

    def test_wrap_runs_before_adapting(self, pipeline) -> None:
        """The template wrapper sees parsed HTML and its output is adapted."""
        html = pipeline.render("text", platform="wechat", wrap=lambda body: f"<section>{body}</section>")
        assert soup(html).section.p.get_text() == "text"
        assert "font-family" in soup(html).section["style"]

    def test_switch_document_clears_cards(self, pipeline) -> None:
        """Cards of the previous document are forgotten."""
        pipeline.render('```mpcard\n<section data-id="gh_1"></section>\n```')
        assert len(pipeline.cards) == 1
        pipeline.switch_document()
        assert len(pipeline.cards) == 0

    def test_math_dialect_change_invalidates_cache(self, pipeline) -> None:
        """Switching the math dialect changes every cache key."""
        before = math_cache_key("a", True, "latex")
        pipeline.update_settings(math="asciimath")
        assert pipeline.settings.math is MathDialect.ASCIIMATH
        assert math_cache_key("a", True, "latex") != before

    def test_update_settings_accepts_host_keys(self, pipeline) -> None:
        """camelCase keys of the persisted host settings are applied."""
        pipeline.update_settings(linkFootnoteMode="none")
        assert pipeline.settings.link_footnote_mode is LinkFootnoteMode.NONE
        html = pipeline.render("[x](https://example.com)", platform="wechat")
        assert soup(html).a["href"] == "https://example.com"

    def test_heading_switches_live_in_plugin_config(self, pipeline) -> None:
        """Turning both heading switches off leaves h2 untouched."""
        pipeline.manager.update_plugin_config(
            "Headings", {"enableHeadingNumber": False, "enableHeadingDelimiterBreak": False}
        )
        assert "<br" not in pipeline.render("## A, b", platform="preview")

    def test_get_platforms(self, pipeline) -> None:
        """Every platform is listed with its display name."""
        assert pipeline.get_platforms() == {"preview": "Preview", "wechat": "WeChat", "zhihu": "Zhihu"}


class TestTemplateFilter:
    def test_platform_html_filter(self) -> None:
        """The filter renders with the settings from ``settings.OMNICONTENT``."""
        template = Template("{% load omnicontent_tags %}{{ body|platform_html:'wechat' }}")
        html = template.render(Context({"body": "[link](https://example.com)"}))
        doc = soup(html)
        assert doc.find("sup").get_text() == "[1]"
        assert "https://example.com" in doc.select_one("section.footnotes").get_text()

    def test_empty_value(self) -> None:
        """None renders to an empty string."""
        template = Template("{% load omnicontent_tags %}{{ body|platform_html }}")
        assert template.render(Context({"body": None})).strip() == ""
