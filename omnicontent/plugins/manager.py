# omnicontent/plugins/manager.py
"""
Plugin manager.

Owns the process plugins in their canonical order and reduces HTML through the
enabled ones:

    html = manager.process_content(html, settings)

Disabling a plugin removes its stage without reordering the others.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from omnicontent.errors import PluginError
from omnicontent.registry import Registry
from omnicontent.settings import Settings

from .base import ProcessPlugin

logger = logging.getLogger(__name__)


class PluginManager:
    def __init__(self, plugins: Iterable[ProcessPlugin] = ()):
        self._registry: Registry[ProcessPlugin] = Registry("plugin")
        self.last_failures: Dict[str, PluginError] = {}
        self.register_plugins(plugins)

    def register_plugin(self, plugin: ProcessPlugin) -> ProcessPlugin:
        return self._registry.register(plugin)

    def register_plugins(self, plugins: Iterable[ProcessPlugin]) -> None:
        for plugin in plugins:
            self.register_plugin(plugin)

    def get_plugins(self) -> List[ProcessPlugin]:
        return self._registry.all()

    def get_enabled_plugins(self) -> List[ProcessPlugin]:
        return self._registry.enabled()

    def get_plugin(self, name: str) -> Optional[ProcessPlugin]:
        return self._registry.get(name)

    def run_plugins(
        self, html: str, settings: Settings, plugins: Iterable[ProcessPlugin]
    ) -> str:
        """
        Reduce ``html`` through the enabled plugins among ``plugins``, in order.

        Failures are recorded in ``last_failures`` and the failing stage keeps
        its input.
        """
        self.last_failures = {}
        result = html
        for plugin in plugins:
            if not plugin.is_enabled():
                continue
            logger.debug("Running process plugin %s", plugin.get_name())
            try:
                result = plugin.process(result, settings)
            except Exception as exc:
                plugin.last_error = PluginError(plugin.get_name(), str(exc) or type(exc).__name__)
                logger.error(
                    "Process plugin %s raised outside its guard", plugin.get_name(), exc_info=True
                )
            if plugin.last_error is not None:
                self.last_failures[plugin.get_name()] = plugin.last_error
        return result

    def process_content(self, html: str, settings: Settings) -> str:
        return self.run_plugins(html, settings, self._registry.all())

    def set_plugin_enabled(self, name: str, enabled: bool) -> bool:
        return self._registry.set_enabled(name, enabled)

    def get_plugin_config(self, name: str) -> Optional[Dict[str, Any]]:
        return self._registry.get_config(name)

    def update_plugin_config(
        self, name: str, config: Mapping[str, Any]
    ) -> Optional[Dict[str, Any]]:
        return self._registry.update_config(name, config)

    def get_plugin_meta_config(self, name: str) -> Optional[Dict[str, Dict[str, Any]]]:
        return self._registry.get_meta_config(name)

    def get_plugins_summary(self) -> List[Dict[str, Any]]:
        return self._registry.summary()

    def batch_update_plugins_enabled(self, updates: Mapping[str, bool]) -> Dict[str, List[str]]:
        return self._registry.batch_update_enabled(updates)
