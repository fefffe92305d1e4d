# omnicontent/assets.py
"""
Asset provider consumed by the renderers.

The host application owns themes and highlight stylesheets; this module only
defines the lookups the pipeline needs and ships the built-in defaults.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalloutInfo:
    style: str
    icon: str


_ICON = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" width="18" height="18" '
    'fill="none" stroke="currentColor" stroke-width="2">{body}</svg>'
)

_CALLOUT_ICONS = {
    "ad-note": _ICON.format(body='<path d="M12 20h9"></path><path d="M16.5 3.5a2.1 2.1 0 0 1 3 3L7 19l-4 1 1-4Z"></path>'),
    "ad-abstract": _ICON.format(body='<rect x="8" y="2" width="8" height="4" rx="1"></rect><path d="M16 4h2a2 2 0 0 1 2 2v14a2 2 0 0 1-2 2H6a2 2 0 0 1-2-2V6a2 2 0 0 1 2-2h2"></path>'),
    "ad-success": _ICON.format(body='<polyline points="20 6 9 17 4 12"></polyline>'),
    "ad-question": _ICON.format(body='<circle cx="12" cy="12" r="10"></circle><path d="M9.1 9a3 3 0 0 1 5.8 1c0 2-3 3-3 3"></path><path d="M12 17h.01"></path>'),
    "ad-failure": _ICON.format(body='<line x1="18" y1="6" x2="6" y2="18"></line><line x1="6" y1="6" x2="18" y2="18"></line>'),
    "ad-example": _ICON.format(body='<line x1="8" y1="6" x2="21" y2="6"></line><line x1="8" y1="12" x2="21" y2="12"></line><line x1="8" y1="18" x2="21" y2="18"></line>'),
    "ad-quote": _ICON.format(body='<path d="M3 21c3 0 7-1 7-8V5c0-1.25-.76-2-2-2H4c-1.25 0-2 .75-2 2v6c0 1.25.75 2 2 2 1 0 1 0 1 1v1c0 1-1 2-2 2s-1 .01-1 1.03V20c0 1 0 1 1 1z"></path>'),
}

# Callout type -> style class, grouped the way Obsidian groups its aliases
CALLOUT_STYLES: Dict[str, str] = {
    "note": "ad-note",
    "info": "ad-note",
    "todo": "ad-note",
    "abstract": "ad-abstract",
    "summary": "ad-abstract",
    "tldr": "ad-abstract",
    "tip": "ad-abstract",
    "hint": "ad-abstract",
    "important": "ad-abstract",
    "success": "ad-success",
    "check": "ad-success",
    "done": "ad-success",
    "question": "ad-question",
    "help": "ad-question",
    "faq": "ad-question",
    "warning": "ad-question",
    "caution": "ad-question",
    "attention": "ad-question",
    "failure": "ad-failure",
    "fail": "ad-failure",
    "missing": "ad-failure",
    "danger": "ad-failure",
    "error": "ad-failure",
    "bug": "ad-failure",
    "example": "ad-example",
    "quote": "ad-quote",
    "cite": "ad-quote",
}

DEFAULT_HIGHLIGHT_CSS = """
.hljs { color: #383a42; background: #fafafa; }
.hljs-comment, .hljs-quote { color: #a0a1a7; font-style: italic; }
.hljs-keyword, .hljs-selector-tag { color: #a626a4; }
.hljs-string, .hljs-regexp { color: #50a14f; }
.hljs-number, .hljs-literal { color: #986801; }
.hljs-title, .hljs-function { color: #4078f2; }
.hljs-built_in, .hljs-type { color: #c18401; }
.hljs-attr, .hljs-variable { color: #e45649; }
.hljs-meta { color: #4078f2; }
"""

IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "bmp", "svg", "tiff"}


class AssetProvider:
    """
    Default asset provider.

    Args:
        theme_css: CSS of the active theme, used by the style inliner
        highlights: Mapping of highlight theme name to CSS text
        embed_resolver: Maps an embed target (``![[name]]``) to a URL, or None
    """

    def __init__(
        self,
        theme_css: str = "",
        highlights: Optional[Dict[str, str]] = None,
        embed_resolver: Optional[Callable[[str], Optional[str]]] = None,
    ):
        self.theme_css = theme_css
        self.highlights = {"default": DEFAULT_HIGHLIGHT_CSS}
        self.highlights.update(highlights or {})
        self.embed_resolver = embed_resolver

    def get_highlight_css(self, name: str) -> str:
        css = self.highlights.get(name)
        if css is None:
            logger.warning("Unknown highlight theme %r, using default", name)
            css = self.highlights["default"]
        return css

    def get_callout(self, callout_type: str) -> Optional[CalloutInfo]:
        style = CALLOUT_STYLES.get(callout_type.lower())
        if style is None:
            return None
        return CalloutInfo(style=style, icon=_CALLOUT_ICONS[style])

    def resolve_embed(self, name: str) -> Optional[str]:
        if self.embed_resolver is not None:
            return self.embed_resolver(name)
        # Without a vault, only image files can be embedded, by relative path
        extension = name.rsplit(".", 1)[-1].lower() if "." in name else ""
        if extension in IMAGE_EXTENSIONS:
            return name
        return None
