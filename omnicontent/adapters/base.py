# omnicontent/adapters/base.py
"""
Platform adapters.

An adapter is a named, totally ordered subset of the registered process
plugins, tailored to one publishing target:

    html = adapter.adapt(html, settings)

``adapt`` runs ``preprocess``, then the enabled plugins of the subset in the
adapter's order, then swaps card placeholders back to their stored payload.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from omnicontent.cards import CardDataManager
from omnicontent.errors import AdapterNotFoundError
from omnicontent.plugins.base import ProcessPlugin
from omnicontent.plugins.manager import PluginManager
from omnicontent.settings import Settings

logger = logging.getLogger(__name__)

DEFAULT_ADAPTER = "preview"


class PlatformAdapter:
    """
    Args:
        key: Lookup key, e.g. ``"wechat"``
        name: Display name
        plugin_names: Plugin names in the order they run
        manager: Manager that owns the plugin instances
        cards: Card store restored after the plugins ran
    """

    def __init__(
        self,
        key: str,
        name: str,
        plugin_names: Sequence[str],
        manager: PluginManager,
        cards: CardDataManager,
    ):
        self.key = key.lower()
        self.name = name
        self.plugin_names = list(plugin_names)
        self.manager = manager
        self.cards = cards

    def __repr__(self):
        return f"<{type(self).__name__} {self.key}: {' -> '.join(self.plugin_names)}>"

    def get_plugins(self) -> List[ProcessPlugin]:
        plugins = []
        for name in self.plugin_names:
            plugin = self.manager.get_plugin(name)
            if plugin is None:
                logger.warning("Adapter %s references unknown plugin %r", self.key, name)
                continue
            plugins.append(plugin)
        return plugins

    def preprocess(self, html: str, settings: Settings) -> str:
        return html.strip()

    def postprocess(self, html: str, settings: Settings) -> str:
        return self.cards.restore_card(html)

    def adapt(self, html: str, settings: Settings) -> str:
        logger.debug("Adapting content for %s", self.key)
        html = self.preprocess(html, settings)
        html = self.manager.run_plugins(html, settings, self.get_plugins())
        return self.postprocess(html, settings)


class AdapterRegistry:
    def __init__(self):
        self._adapters: Dict[str, PlatformAdapter] = {}

    def register(self, adapter: PlatformAdapter) -> PlatformAdapter:
        logger.info("Registered platform adapter %s", adapter.key)
        self._adapters[adapter.key] = adapter
        return adapter

    def get(self, platform: Optional[str]) -> PlatformAdapter:
        """
        Return the adapter for ``platform``.

        Unknown platforms fall back to the preview adapter, else to the first
        registered adapter.

        Raises:
            AdapterNotFoundError: No adapter is registered.
        """
        key = (platform or DEFAULT_ADAPTER).lower()
        adapter = self._adapters.get(key)
        if adapter is not None:
            return adapter

        if not self._adapters:
            raise AdapterNotFoundError(f"No platform adapter registered for {platform!r}")

        logger.warning("No adapter for platform %r, using the default adapter", platform)
        return self._adapters.get(DEFAULT_ADAPTER) or next(iter(self._adapters.values()))

    def get_registered(self) -> Dict[str, PlatformAdapter]:
        return dict(self._adapters)
