# omnicontent/plugins/css.py
"""
Minimal CSS cascade used to compute element styles without a browser.

The resolver knows the bounded set of stylesheets the renderer ships with (the
packaged inline stylesheet, the theme css, the user's custom css and any
<style> element in the document) and nothing else. For every element it:

- Collects the declarations of the rules whose selector matches (soupsieve)
- Orders them by ``!important``, origin (inline style beats rules),
  specificity and source order, the last one winning
- Inherits color, font and text properties and custom properties from the
  parent, starting from a 16px root
- Resolves ``var()`` against the inherited custom properties
- Converts ``em``, ``rem``, ``%``, ``pt`` and keyword font sizes to pixels

``:root``, ``html`` and ``body`` rules describe the root the fragment renders
into. @-rules (media queries, font faces, imports) are ignored.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

import soupsieve
from bs4 import BeautifulSoup, Tag

from .utils import parse_style

logger = logging.getLogger(__name__)

ROOT_FONT_SIZE = 16.0

INHERITED_PROPERTIES = frozenset(
    {
        "color",
        "font-family",
        "font-size",
        "font-style",
        "font-weight",
        "letter-spacing",
        "line-height",
        "text-align",
        "text-indent",
        "visibility",
        "white-space",
        "word-break",
    }
)

# Defaults a browser applies before any author rule
USER_AGENT_STYLES: Dict[str, Dict[str, str]] = {
    "h1": {"font-size": "2em", "font-weight": "bold"},
    "h2": {"font-size": "1.5em", "font-weight": "bold"},
    "h3": {"font-size": "1.17em", "font-weight": "bold"},
    "h4": {"font-size": "1em", "font-weight": "bold"},
    "h5": {"font-size": "0.83em", "font-weight": "bold"},
    "h6": {"font-size": "0.67em", "font-weight": "bold"},
    "th": {"font-weight": "bold"},
    "strong": {"font-weight": "bold"},
    "b": {"font-weight": "bold"},
    "small": {"font-size": "smaller"},
    "sup": {"font-size": "smaller"},
    "sub": {"font-size": "smaller"},
    "code": {"font-family": "monospace"},
    "pre": {"font-family": "monospace"},
}

FONT_SIZE_KEYWORDS = {
    "xx-small": 9.0,
    "x-small": 10.0,
    "small": 13.0,
    "medium": 16.0,
    "large": 18.0,
    "x-large": 24.0,
    "xx-large": 32.0,
}

ROOT_SELECTORS = frozenset({":root", "html", "body"})

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_IMPORTANT_RE = re.compile(r"\s*!\s*important\s*$", re.IGNORECASE)
_VAR_RE = re.compile(r"var\(\s*(--[\w-]+)\s*(?:,\s*([^()]*(?:\([^()]*\)[^()]*)*))?\)")
_LENGTH_RE = re.compile(r"^(-?\d*\.?\d+)(px|em|rem|%|pt)?$")
_ROOT_PREFIX_RE = re.compile(r"^(?::root|html|body)(?:\s*>\s*|\s+)")

_ATTRIBUTE_RE = re.compile(r"\[[^\]]*\]")
_WHERE_RE = re.compile(r":where\([^)]*\)")
_PSEUDO_ELEMENT_RE = re.compile(r"::[\w-]+")
_ID_RE = re.compile(r"#[\w-]+")
_CLASS_RE = re.compile(r"\.[\w-]+")
_PSEUDO_CLASS_RE = re.compile(r":(?!not\b|is\b)[\w-]+")
_TYPE_RE = re.compile(r"(?:^|[\s>+~(,])([a-zA-Z][\w-]*)")

Specificity = Tuple[int, int, int]


@dataclass(frozen=True)
class Declaration:
    prop: str
    value: str
    important: bool
    inline: bool
    specificity: Specificity
    order: int

    def sort_key(self):
        return (self.important, self.inline, self.specificity, self.order)


@dataclass
class Rule:
    selector: str
    specificity: Specificity
    declarations: Dict[str, str]
    order: int


def strip_comments(css: str) -> str:
    return _COMMENT_RE.sub("", css or "")


def iter_blocks(css: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(prelude, body)`` for every top-level block, braces balanced."""
    css = strip_comments(css)
    pos, length = 0, len(css)
    while pos < length:
        brace = css.find("{", pos)
        if brace == -1:
            return
        depth, end = 1, brace + 1
        while end < length and depth:
            if css[end] == "{":
                depth += 1
            elif css[end] == "}":
                depth -= 1
            end += 1
        # Statement at-rules (@import ...;) end up in front of the next prelude
        prelude = css[pos:brace].rsplit(";", 1)[-1].strip()
        yield prelude, css[brace + 1 : end - 1]
        pos = end


def split_selectors(prelude: str) -> List[str]:
    """Split a selector list on commas outside parentheses and brackets."""
    selectors, depth, current = [], 0, []
    for char in prelude:
        if char in "([":
            depth += 1
        elif char in ")]":
            depth -= 1
        if char == "," and depth == 0:
            selectors.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    selectors.append("".join(current).strip())
    return [selector for selector in selectors if selector]


def specificity(selector: str) -> Specificity:
    text = _WHERE_RE.sub(" ", selector)
    b = len(_ATTRIBUTE_RE.findall(text))
    text = _ATTRIBUTE_RE.sub(" ", text)
    c = len(_PSEUDO_ELEMENT_RE.findall(text))
    text = _PSEUDO_ELEMENT_RE.sub(" ", text)
    a = len(_ID_RE.findall(text))
    text = _ID_RE.sub(" ", text)
    b += len(_CLASS_RE.findall(text))
    text = _CLASS_RE.sub(" ", text)
    b += len(_PSEUDO_CLASS_RE.findall(text))
    text = _PSEUDO_CLASS_RE.sub(" ", text)
    c += len(_TYPE_RE.findall(text))
    return (a, b, c)


def parse_stylesheet(css: str, start_order: int = 0) -> List[Rule]:
    """
    Parse ``css`` into rules, one per selector of a selector list.

    Args:
        css: Stylesheet text.
        start_order: Source order given to the first rule, so that several
            sheets keep their relative order.

    Returns:
        The rules in source order. @-rule blocks are dropped.
    """
    rules = []
    order = start_order
    for prelude, body in iter_blocks(css):
        if not prelude or prelude.startswith("@"):
            continue
        declarations = parse_style(body)
        if not declarations:
            continue
        for selector in split_selectors(prelude):
            rules.append(Rule(selector, specificity(selector), declarations, order))
            order += 1
    return rules


def split_important(value: str) -> Tuple[str, bool]:
    stripped = _IMPORTANT_RE.sub("", value)
    return stripped.strip(), stripped != value


def resolve_var(value: str, custom: Dict[str, str], depth: int = 0) -> Optional[str]:
    """
    Substitute ``var(--name, fallback)`` references.

    Returns ``None`` when a variable is undefined and has no fallback, which
    makes the declaration invalid.
    """
    if "var(" not in value:
        return value
    if depth > 10:
        logger.warning("Custom property cycle while resolving %r", value)
        return None

    missing = False

    def substitute(match):
        nonlocal missing
        name, fallback = match.group(1), match.group(2)
        if name in custom:
            return custom[name]
        if fallback is not None:
            return fallback.strip()
        missing = True
        return ""

    resolved = _VAR_RE.sub(substitute, value)
    if missing:
        return None
    return resolve_var(resolved, custom, depth + 1)


def format_px(size: float) -> str:
    size = round(size, 2)
    if size == int(size):
        return f"{int(size)}px"
    return f"{size}px"


def parse_px(value: str) -> Optional[float]:
    match = re.match(r"^\s*(-?\d*\.?\d+)px\s*$", value or "")
    return float(match.group(1)) if match else None


def resolve_font_size(value: str, parent_size: float) -> str:
    keyword = value.strip().lower()
    if keyword in FONT_SIZE_KEYWORDS:
        return format_px(FONT_SIZE_KEYWORDS[keyword])
    if keyword == "smaller":
        return format_px(parent_size / 1.2)
    if keyword == "larger":
        return format_px(parent_size * 1.2)

    match = _LENGTH_RE.match(keyword)
    if not match:
        return value
    number, unit = float(match.group(1)), match.group(2) or "px"
    if unit == "px":
        size = number
    elif unit == "em":
        size = number * parent_size
    elif unit == "rem":
        size = number * ROOT_FONT_SIZE
    elif unit == "%":
        size = number * parent_size / 100
    else:
        size = number * 4 / 3
    return format_px(size)


class CascadeResolver:
    """
    Computes styles for every element of a parsed fragment.

    Usage:
        resolver = CascadeResolver([INLINE_CSS, settings.theme_css])
        computed = resolver.compute(soup)
        computed[id(element)]["font-size"]
    """

    def __init__(self, stylesheets: Iterable[str]):
        self.rules: List[Rule] = []
        for css in stylesheets:
            if css:
                self.rules.extend(parse_stylesheet(css, start_order=len(self.rules)))

    def add_stylesheet(self, css: str) -> None:
        self.rules.extend(parse_stylesheet(css, start_order=len(self.rules)))

    def compute(self, soup: BeautifulSoup) -> Dict[int, Dict[str, str]]:
        """
        Return the computed style of every element, keyed by ``id(element)``.

        Rules from the document's own <style> elements come last in source
        order. The ids are only valid while ``soup`` is alive and unmodified.
        """
        for style in soup.find_all("style"):
            self.add_stylesheet(style.get_text())

        root_declarations: List[Declaration] = []
        matched: Dict[int, List[Declaration]] = {}
        for rule in self.rules:
            selector = rule.selector
            if selector in ROOT_SELECTORS:
                root_declarations.extend(self._declarations(rule))
                continue
            while _ROOT_PREFIX_RE.match(selector):
                selector = _ROOT_PREFIX_RE.sub("", selector, count=1)
            try:
                elements = soup.select(selector)
            except (soupsieve.SelectorSyntaxError, NotImplementedError):
                logger.debug("Skipping unsupported selector %r", rule.selector)
                continue
            if not elements:
                continue
            declarations = self._declarations(rule)
            for element in elements:
                matched.setdefault(id(element), []).extend(declarations)

        root_style = {"font-size": format_px(ROOT_FONT_SIZE)}
        root_style = self._apply(root_style, root_declarations, {}, is_root=True)

        computed: Dict[int, Dict[str, str]] = {}
        self._walk(soup, root_style, matched, computed)
        return computed

    def _walk(self, parent, parent_style, matched, computed):
        for child in parent.children:
            if not isinstance(child, Tag):
                continue
            declarations = list(self._user_agent(child))
            declarations.extend(matched.get(id(child), ()))
            declarations.extend(self._inline(child))
            style = self._apply(parent_style, declarations, parent_style)
            computed[id(child)] = style
            self._walk(child, style, matched, computed)

    @staticmethod
    def _declarations(rule: Rule) -> List[Declaration]:
        result = []
        for prop, raw in rule.declarations.items():
            value, important = split_important(raw)
            result.append(Declaration(prop, value, important, False, rule.specificity, rule.order))
        return result

    @staticmethod
    def _user_agent(element: Tag) -> Iterator[Declaration]:
        for prop, value in USER_AGENT_STYLES.get(element.name, {}).items():
            yield Declaration(prop, value, False, False, (-1, 0, 0), -1)

    @staticmethod
    def _inline(element: Tag) -> Iterator[Declaration]:
        for prop, raw in parse_style(element.get("style")).items():
            value, important = split_important(raw)
            yield Declaration(prop, value, important, True, (0, 0, 0), 0)

    def _apply(self, inherited_from, declarations, parent_style, is_root=False):
        style = {
            prop: value
            for prop, value in inherited_from.items()
            if is_root or prop in INHERITED_PROPERTIES or prop.startswith("--")
        }

        winners: Dict[str, Declaration] = {}
        for declaration in sorted(declarations, key=Declaration.sort_key):
            winners[declaration.prop] = declaration

        for prop, declaration in winners.items():
            if prop.startswith("--"):
                style[prop] = declaration.value

        parent_size = parse_px(parent_style.get("font-size", "")) or ROOT_FONT_SIZE
        custom = {prop: value for prop, value in style.items() if prop.startswith("--")}
        for prop, declaration in winners.items():
            if prop.startswith("--"):
                continue
            value = resolve_var(declaration.value, custom)
            if value is None:
                continue
            keyword = value.lower()
            if keyword == "inherit" or (keyword == "unset" and prop in INHERITED_PROPERTIES):
                if prop in parent_style:
                    style[prop] = parent_style[prop]
                continue
            if keyword in ("initial", "unset"):
                style.pop(prop, None)
                continue
            if prop == "font-size":
                value = resolve_font_size(value, parent_size)
            elif prop == "background" and " " not in value and "(" not in value:
                style["background-color"] = value
            style[prop] = value
        return style
