"""Tests for the cascade resolver and the Styles plugin."""

import pytest
from bs4 import BeautifulSoup

from omnicontent.plugins import StylesPlugin
from omnicontent.plugins.css import CascadeResolver, parse_stylesheet, specificity
from omnicontent.plugins.styles import SAFE_FONT_FAMILY, clamp_font_size
from omnicontent.plugins.utils import parse_style


def computed_style(css, html, select):
    doc = BeautifulSoup(html, "html.parser")
    computed = CascadeResolver([css]).compute(doc)
    return computed[id(doc.select_one(select))]


def inline(settings, html):
    return BeautifulSoup(StylesPlugin(settings).process(html, settings), "html.parser")


class TestStylesheetParsing:
    def test_selector_lists_and_comments(self) -> None:
        """Each selector of a list becomes its own rule; comments are dropped."""
        rules = parse_stylesheet("/* c */ h1, .x > p { color: red; margin: 0 }")
        assert [rule.selector for rule in rules] == ["h1", ".x > p"]
        assert rules[0].declarations == {"color": "red", "margin": "0"}

    def test_at_rules_are_skipped(self) -> None:
        """Media queries and imports do not produce rules."""
        rules = parse_stylesheet(
            "@import url(x.css); @media screen { p { color: red; } } em { color: blue; }"
        )
        assert [rule.selector for rule in rules] == ["em"]

    @pytest.mark.parametrize(
        "selector, expected",
        [
            ("p", (0, 0, 1)),
            (".x", (0, 1, 0)),
            ("p.x", (0, 1, 1)),
            ("#id .x li", (1, 1, 1)),
            ("a[href]:hover", (0, 2, 1)),
            ("ul > li + li", (0, 0, 3)),
        ],
    )
    def test_specificity(self, selector, expected) -> None:
        """Specificity counts ids, classes and types."""
        assert specificity(selector) == expected


class TestCascadeResolver:
    def test_specificity_wins_over_order(self) -> None:
        """The more specific rule wins even when it comes first."""
        style = computed_style("p.x { color: blue; } .x { color: red; }", '<p class="x">t</p>', "p")
        assert style["color"] == "blue"

    def test_source_order_breaks_ties(self) -> None:
        """Between equally specific rules the later one wins."""
        style = computed_style(".x { color: red; } .x { color: green; }", '<p class="x">t</p>', "p")
        assert style["color"] == "green"

    def test_inline_style_beats_rules(self) -> None:
        """The style attribute overrides matched rules."""
        style = computed_style("#a { color: red; }", '<p id="a" style="color: blue">t</p>', "p")
        assert style["color"] == "blue"

    def test_important_beats_inline(self) -> None:
        """An !important rule overrides a normal inline declaration."""
        style = computed_style(
            "p { color: red !important; }", '<p style="color: blue">t</p>', "p"
        )
        assert style["color"] == "red"

    def test_inherited_and_non_inherited(self) -> None:
        """Text properties inherit, box properties do not."""
        style = computed_style(
            "div { color: #333; margin: 10px; }", "<div><span>t</span></div>", "span"
        )
        assert style["color"] == "#333"
        assert "margin" not in style

    def test_custom_properties_from_root(self) -> None:
        """var() resolves against :root custom properties and fallbacks."""
        css = ":root { --primary-color: #123456; } strong { color: var(--primary-color); } em { color: var(--missing, #abcdef); }"
        html = "<p><strong>a</strong><em>b</em></p>"
        assert computed_style(css, html, "strong")["color"] == "#123456"
        assert computed_style(css, html, "em")["color"] == "#abcdef"

    def test_undefined_variable_invalidates_declaration(self) -> None:
        """A var() without value or fallback makes the declaration inherit instead."""
        style = computed_style(
            "div { color: green; } span { color: var(--nope); }", "<div><span>t</span></div>", "span"
        )
        assert style["color"] == "green"

    def test_relative_font_sizes(self) -> None:
        """em, rem and percentages resolve to pixels."""
        html = '<div style="font-size: 20px"><span style="font-size: 1.5em">a</span><b style="font-size: 2rem">b</b><i style="font-size: 50%">c</i></div>'
        assert computed_style("", html, "span")["font-size"] == "30px"
        assert computed_style("", html, "b")["font-size"] == "32px"
        assert computed_style("", html, "i")["font-size"] == "10px"

    def test_root_font_size_and_headings(self) -> None:
        """The root renders at 16px and headings use browser defaults."""
        assert computed_style("", "<p>a</p>", "p")["font-size"] == "16px"
        assert computed_style("", "<h1>a</h1>", "h1")["font-size"] == "32px"

    def test_body_rules_apply_to_fragment(self) -> None:
        """Rules on body reach the fragment through inheritance."""
        assert computed_style("body { color: #111; }", "<p>a</p>", "p")["color"] == "#111"
        assert computed_style("body p { color: #222; }", "<p>a</p>", "p")["color"] == "#222"

    def test_unsupported_selector_is_ignored(self) -> None:
        """A selector soupsieve cannot handle does not break the cascade."""
        style = computed_style("p::before { color: red; } p { color: green; }", "<p>a</p>", "p")
        assert style["color"] == "green"

    def test_document_style_elements(self) -> None:
        """<style> elements in the document contribute rules."""
        style = computed_style("", "<style>p { color: teal; }</style><p>a</p>", "p")
        assert style["color"] == "teal"


class TestFontSizeClamp:
    @pytest.mark.parametrize(
        "value, tag, expected",
        [
            ("41px", "p", "40px"),
            ("40px", "p", "40px"),
            ("11px", "p", "12px"),
            ("12px", "p", "12px"),
            ("8px", "sup", "8px"),
            ("8px", "sub", "8px"),
            ("calc(1em + 2px)", "p", "calc(1em + 2px)"),
        ],
    )
    def test_clamp(self, value, tag, expected) -> None:
        """Sizes are clamped to 12..40px, superscripts may be smaller."""
        assert clamp_font_size(value, tag) == expected


class TestStylesPlugin:
    @pytest.mark.parametrize(
        "html, select, expected",
        [
            ('<p style="font-size: 41px">a</p>', "p", "40px"),
            ('<p style="font-size: 40px">a</p>', "p", "40px"),
            ('<p style="font-size: 11px">a</p>', "p", "12px"),
            ('<p style="font-size: 12px">a</p>', "p", "12px"),
            ('<p>x<sup style="font-size: 8px">1</sup></p>', "sup", "8px"),
        ],
    )
    def test_font_size_clamping(self, settings, html, select, expected) -> None:
        """Computed font sizes are clamped when written inline."""
        doc = inline(settings, html)
        assert parse_style(doc.select_one(select)["style"])["font-size"] == expected

    def test_theme_rules_are_inlined(self, settings) -> None:
        """Matched theme rules end up in the style attribute."""
        settings.theme_css = "h2 { color: #7852ee; text-align: center; } .big { font-size: 3em; }"
        doc = inline(settings, '<h2>t</h2><p class="big">b</p>')
        h2 = parse_style(doc.h2["style"])
        assert h2["color"] == "#7852ee"
        assert h2["text-align"] == "center"
        assert h2["font-family"] == SAFE_FONT_FAMILY
        assert parse_style(doc.p["style"])["font-size"] == "40px"

    def test_custom_css_overrides_theme(self, settings) -> None:
        """Custom css comes after the theme css."""
        settings.theme_css = "p { color: red; }"
        settings.custom_css = "p { color: blue; }"
        settings.use_custom_css = True
        assert parse_style(inline(settings, "<p>a</p>").p["style"])["color"] == "blue"

    def test_existing_style_is_kept_in_front(self, settings) -> None:
        """Declarations are appended after the existing style."""
        doc = inline(settings, '<p style="color: red">a</p>')
        assert doc.p["style"].startswith("color: red; ")

    def test_style_elements_removed(self, settings) -> None:
        """<style> elements are applied, then dropped."""
        doc = inline(settings, "<style>.x { color: teal; }</style><p class=\"x\">a</p>")
        assert doc.find("style") is None
        assert parse_style(doc.p["style"])["color"] == "teal"

    def test_packaged_callout_css_is_inlined(self, settings) -> None:
        """Renderer markup picks up the packaged stylesheet."""
        doc = inline(settings, '<section class="ad ad-note"><p>n</p></section>')
        assert parse_style(doc.section["style"])["color"] == "rgb(8, 109, 221)"
