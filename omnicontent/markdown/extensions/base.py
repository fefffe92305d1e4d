# omnicontent/markdown/extensions/base.py
"""
Base class for renderer extensions.

An extension is one unit of Obsidian flavoured syntax. It contributes grammar to
the Python-Markdown instance through ``markdown_extension()`` and takes part in
the per-document lifecycle driven by ``MarkdownParser``:

    prepare() -> [markdown conversion] -> postprocess(html) -> before_publish(html)

Every extension receives the same ``RenderContext`` at construction instead of
reaching for global managers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from omnicontent.assets import AssetProvider
from omnicontent.callbacks import NullCallback, RenderCallback
from omnicontent.cards import CardDataManager
from omnicontent.settings import Configurable, Settings

if TYPE_CHECKING:
    from markdown.extensions import Extension as MarkdownExtension

    from .math import MathRendererQueue

logger = logging.getLogger(__name__)


@dataclass
class RenderContext:
    settings: Settings
    assets: AssetProvider = field(default_factory=AssetProvider)
    cards: CardDataManager = field(default_factory=CardDataManager)
    callback: RenderCallback = field(default_factory=NullCallback)
    math_queue: Optional["MathRendererQueue"] = None

    def __post_init__(self):
        if self.math_queue is None:
            from .math import MathRendererQueue

            self.math_queue = MathRendererQueue(self.settings, self.callback)


class Extension(Configurable):
    """Renderer extension. Subclasses set ``name`` and override the hooks they need."""

    def __init__(self, context: RenderContext):
        self.context = context
        super().__init__(context.settings)

    @property
    def assets(self) -> AssetProvider:
        return self.context.assets

    @property
    def callback(self) -> RenderCallback:
        return self.context.callback

    def prepare(self) -> None:
        """Reset per-document state. Called before every parse."""

    def postprocess(self, html: str) -> str:
        return html

    def before_publish(self, html: str) -> str:
        return html

    def cleanup(self) -> None:
        """Release state kept across documents."""

    def markdown_extension(self) -> Optional["MarkdownExtension"]:
        """Python-Markdown extension carrying this extension's grammar, if any."""
        return None

    def __repr__(self):
        state = "enabled" if self.is_enabled() else "disabled"
        return f"<{type(self).__name__} {self.name} ({state})>"


@dataclass
class ReferenceEntry:
    """A link or footnote reference collected while rendering one document."""

    id: str
    text: str = ""
    href: str = ""
    position: Optional[int] = None

    def sort_key(self):
        # Entries never seen in the tree sort last, in collection order
        return (self.position is None, self.position or 0)
