# omnicontent/adapters/platforms.py
"""Plugin compositions of the supported platforms."""

from omnicontent.cards import CardDataManager
from omnicontent.plugins.manager import PluginManager

from .base import AdapterRegistry, PlatformAdapter

# key -> (display name, plugins in run order)
PLATFORMS = {
    "preview": ("Preview", ["Headings"]),
    "wechat": (
        "WeChat",
        ["Images", "Links", "Headings", "Lists", "CodeBlocks", "Tables", "Styles"],
    ),
    "zhihu": ("Zhihu", ["Images", "CodeBlocks", "Tables"]),
}


def build_adapters(manager: PluginManager, cards: CardDataManager) -> AdapterRegistry:
    registry = AdapterRegistry()
    for key, (name, plugin_names) in PLATFORMS.items():
        registry.register(PlatformAdapter(key, name, plugin_names, manager, cards))
    return registry
