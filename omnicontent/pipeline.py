# omnicontent/pipeline.py
"""
Markdown to platform HTML, end to end.

    pipeline = ContentPipeline(Settings.from_django())
    html = pipeline.render(text, platform="wechat")

The pipeline owns one render session: the markdown parser and its extensions,
the plugin manager with every process plugin in canonical order, the platform
adapters and the card store they share.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from .adapters import AdapterRegistry, build_adapters
from .assets import AssetProvider
from .callbacks import DocumentCallback, NullCallback, RenderCallback
from .cards import CardDataManager
from .markdown.extensions.base import RenderContext
from .markdown.extensions.math import clean_math_cache
from .markdown.renderer import MarkdownParser
from .plugins import PLUGINS, ImagesPlugin, PluginManager
from .plugins.images import ImageUploader
from .settings import Settings

logger = logging.getLogger(__name__)

TemplateWrapper = Callable[[str], str]


class ContentPipeline:
    """
    Args:
        settings: Host settings, read on every call
        assets: Highlight css, callout descriptors and embed resolution
        callback: Receives deferred updates (math SVGs) by element id
        uploader: Turns local image sources into public URLs
    """

    def __init__(
        self,
        settings: Settings,
        assets: Optional[AssetProvider] = None,
        callback: Optional[RenderCallback] = None,
        uploader: Optional[ImageUploader] = None,
    ):
        self.settings = settings
        self.cards = CardDataManager()
        self.callback = callback or NullCallback()
        self.context = RenderContext(
            settings=settings,
            assets=assets or AssetProvider(theme_css=settings.theme_css),
            cards=self.cards,
            callback=self.callback,
        )
        self.parser = MarkdownParser(self.context)
        self.manager = PluginManager(
            plugin_class(settings, uploader) if plugin_class is ImagesPlugin else plugin_class(settings)
            for plugin_class in PLUGINS
        )
        self.adapters: AdapterRegistry = build_adapters(self.manager, self.cards)

    def parse(self, text: str) -> str:
        return self.parser.parse(text)

    def render(
        self, text: str, platform: str = "preview", wrap: Optional[TemplateWrapper] = None
    ) -> str:
        """
        Render markdown ``text`` for ``platform``.

        Args:
            text: Markdown source
            platform: Adapter key. Unknown keys fall back to the preview adapter
            wrap: Optional template collaborator applied between parsing and
                adapting, e.g. to put the body into a themed container

        Returns:
            The adapted HTML
        """
        html = self.parser.parse(text)
        if wrap is not None:
            html = wrap(html)
        html = self.adapters.get(platform).adapt(html, self.settings)
        if isinstance(self.callback, DocumentCallback):
            html = self.callback.attach(html)
        return html

    def flush_math(self) -> int:
        """Run the queued math requests, patching placeholders through the callback."""
        return self.context.math_queue.flush()

    def switch_document(self) -> None:
        """Drop everything kept for the previous document."""
        self.cards.cleanup()
        self.parser.cleanup()
        logger.debug("Render session switched to a new document")

    def update_settings(self, **changes: Any) -> Settings:
        """
        Apply setting changes, e.g. ``update_settings(math="asciimath")``.

        Changing the math dialect invalidates the cached SVGs.
        """
        previous_math = self.settings.math
        self.settings.load(changes)
        if self.settings.math != previous_math:
            clean_math_cache()
            self.context.math_queue.clear()
        if "theme_css" in changes:
            self.context.assets.theme_css = self.settings.theme_css
        self.parser.invalidate()
        return self.settings

    def get_platforms(self):
        return {key: adapter.name for key, adapter in self.adapters.get_registered().items()}


_default_pipeline: Optional[ContentPipeline] = None


def get_default_pipeline() -> ContentPipeline:
    """Pipeline configured from ``settings.OMNICONTENT``, created on first use."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = ContentPipeline(Settings.from_django())
    return _default_pipeline


def render_markdown(text: str, platform: str = "preview") -> str:
    return get_default_pipeline().render(text, platform=platform)
