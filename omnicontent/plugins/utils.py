"""Utilities shared by the BeautifulSoup based process plugins."""

from __future__ import annotations

import re
from typing import Dict, List

from bs4 import BeautifulSoup, Tag

_DECLARATION_SPLIT_RE = re.compile(r";(?![^(]*\))")


def parse_html(html: str) -> BeautifulSoup:
    """Parse an HTML fragment. Plugins never share a tree between each other."""
    return BeautifulSoup(html, "html.parser")


def soup_to_html(soup: BeautifulSoup) -> str:
    return str(soup)


def get_classes(element: Tag) -> List[str]:
    classes = element.get("class", [])
    if isinstance(classes, str):
        classes = classes.split()
    return list(classes)


def add_class(element: Tag, *class_names: str) -> None:
    classes = get_classes(element)
    for class_name in class_names:
        if class_name not in classes:
            classes.append(class_name)
    element["class"] = classes


def parse_style(style: str | None) -> Dict[str, str]:
    """Parse an inline style attribute into an ordered property -> value dict."""
    declarations: Dict[str, str] = {}
    if not style:
        return declarations
    for declaration in _DECLARATION_SPLIT_RE.split(style):
        prop, sep, value = declaration.partition(":")
        if not sep:
            continue
        prop = prop.strip().lower()
        value = value.strip()
        if prop and value:
            declarations[prop] = value
    return declarations


def format_style(declarations: Dict[str, str]) -> str:
    return " ".join(f"{prop}: {value};" for prop, value in declarations.items())


def set_style(element: Tag, **properties: str) -> None:
    """
    Set style properties on ``element``, keeping its other declarations.

    Keyword names use underscores for dashes: ``text_align="center"``.
    """
    declarations = parse_style(element.get("style"))
    for prop, value in properties.items():
        declarations[prop.replace("_", "-")] = value
    element["style"] = format_style(declarations)


def append_style(element: Tag, style: str) -> None:
    """Append raw declarations to the style attribute, without replacing any."""
    existing = (element.get("style") or "").strip()
    if existing and not existing.endswith(";"):
        existing += ";"
    element["style"] = f"{existing} {style}".strip() if existing else style
