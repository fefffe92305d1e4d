# omnicontent/__init__.py
"""Markdown notes to platform specific HTML (preview, WeChat, Zhihu)."""

from .cards import CardDataManager
from .errors import (
    AdapterNotFoundError,
    DuplicateNameError,
    ExtensionError,
    OmniContentError,
    PluginError,
)
from .pipeline import ContentPipeline, render_markdown
from .settings import LinkDescriptionMode, LinkFootnoteMode, MathDialect, Settings

__all__ = [
    "AdapterNotFoundError",
    "CardDataManager",
    "ContentPipeline",
    "DuplicateNameError",
    "ExtensionError",
    "LinkDescriptionMode",
    "LinkFootnoteMode",
    "MathDialect",
    "OmniContentError",
    "PluginError",
    "Settings",
    "render_markdown",
]
