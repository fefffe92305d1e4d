# omnicontent/plugins/__init__.py

from .base import ProcessPlugin, get_theme_color
from .blockquotes import BlockquotesPlugin
from .code_blocks import CodeBlocksPlugin
from .headings import HeadingsPlugin
from .images import ImagesPlugin
from .links import LinksPlugin
from .lists import ListsPlugin
from .manager import PluginManager
from .styles import StylesPlugin
from .tables import TablesPlugin

# Canonical order. Styles stays last: it inlines the final computed styles.
PLUGINS = [
    ImagesPlugin,
    LinksPlugin,
    HeadingsPlugin,
    ListsPlugin,
    CodeBlocksPlugin,
    TablesPlugin,
    BlockquotesPlugin,
    StylesPlugin,
]

__all__ = [
    "PLUGINS",
    "BlockquotesPlugin",
    "CodeBlocksPlugin",
    "HeadingsPlugin",
    "ImagesPlugin",
    "LinksPlugin",
    "ListsPlugin",
    "PluginManager",
    "ProcessPlugin",
    "StylesPlugin",
    "TablesPlugin",
    "get_theme_color",
]
