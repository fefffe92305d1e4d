# omnicontent/plugins/base.py
"""
Base class for process plugins.

A process plugin is one DOM rewriting stage applied to rendered HTML:

    html = plugin.process(html, settings)

``process`` never raises. Subclasses implement ``apply``; any exception it
raises is logged, remembered in ``last_error`` and the stage returns its input
unchanged, so a broken stage is transparent to the rest of the chain.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from omnicontent.errors import PluginError
from omnicontent.settings import DEFAULT_THEME_COLOR, Configurable, Settings

logger = logging.getLogger(__name__)

_PRIMARY_COLOR_RE = re.compile(r"--primary-color\s*:\s*([^;}\s][^;}]*?)\s*(?:!important\s*)?[;}]")


def get_theme_color(settings: Settings) -> str:
    """
    Accent color used for list markers, blockquote borders and the like.

    Custom color when enabled, else ``--primary-color`` declared by the theme
    css, else ``#7852ee``.
    """
    if settings.enable_theme_color and settings.theme_color:
        return settings.theme_color

    for css in (settings.effective_custom_css, settings.theme_css):
        match = _PRIMARY_COLOR_RE.search(css or "")
        if match:
            return match.group(1)
    return DEFAULT_THEME_COLOR


class ProcessPlugin(Configurable):
    def __init__(self, settings: Settings):
        super().__init__(settings)
        self.last_error: Optional[PluginError] = None

    def process(self, html: str, settings: Settings) -> str:
        self.last_error = None
        try:
            return self.apply(html, settings)
        except Exception as exc:
            self.last_error = PluginError(self.name, str(exc) or type(exc).__name__)
            logger.error("Process plugin %s failed, keeping its input", self.name, exc_info=True)
            return html

    def apply(self, html: str, settings: Settings) -> str:
        raise NotImplementedError

    def __repr__(self):
        state = "enabled" if self.is_enabled() else "disabled"
        return f"<{type(self).__name__} {self.name} ({state})>"
