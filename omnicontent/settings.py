# omnicontent/settings.py
"""
Host settings shared by every extension and process plugin.

The settings object is a plain mutable struct. Extensions and plugins read it on
every call and persist their own configuration slice into ``plugins_config``.
Inside a Django project the initial values come from ``settings.OMNICONTENT``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_THEME_COLOR = "#7852ee"


class LinkFootnoteMode(str, Enum):
    NONE = "none"
    ALL = "all"
    NON_WX = "non-wx"


class LinkDescriptionMode(str, Enum):
    EMPTY = "empty"
    RAW = "raw"


class MathDialect(str, Enum):
    LATEX = "latex"
    ASCIIMATH = "asciimath"


_ENUM_FIELDS = {
    "link_footnote_mode": LinkFootnoteMode,
    "link_description_mode": LinkDescriptionMode,
    "math": MathDialect,
}

# Keys that are host UI state and never exported
_PRIVATE_KEYS = {"expanded_accordion_sections", "last_selected_platform"}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake(key: str) -> str:
    """Convert ``linkFootnoteMode`` style keys to ``link_footnote_mode``."""
    return _CAMEL_RE.sub("_", key).lower()


@dataclass
class Settings:
    default_style: str = "obsidian-light"
    default_highlight: str = "default"
    link_footnote_mode: LinkFootnoteMode = LinkFootnoteMode.NON_WX
    link_description_mode: LinkDescriptionMode = LinkDescriptionMode.EMPTY
    line_number: bool = True
    enable_weixin_code_format: bool = False
    math: MathDialect = MathDialect.LATEX
    math_service_url: str = ""
    theme_color: str = DEFAULT_THEME_COLOR
    enable_theme_color: bool = False
    enable_heading_number: bool = True
    enable_heading_delimiter_break: bool = True
    theme_css: str = ""
    custom_css: str = ""
    use_custom_css: bool = False
    report_url: str = ""
    plugins_config: dict[str, dict[str, Any]] = field(default_factory=dict)
    expanded_accordion_sections: list[str] = field(default_factory=list)
    last_selected_platform: str = ""

    def __post_init__(self):
        for name, enum_cls in _ENUM_FIELDS.items():
            value = getattr(self, name)
            if not isinstance(value, enum_cls):
                setattr(self, name, enum_cls(value))

    def load(self, data: Mapping[str, Any] | None) -> "Settings":
        """
        Merge persisted settings into this instance.

        Accepts both ``snake_case`` and the ``camelCase`` keys of the persisted
        host settings. Unknown keys and ``None`` values are ignored.
        """
        if not data:
            return self

        known = {f.name for f in fields(self)}
        for raw_key, value in data.items():
            key = _to_snake(raw_key)
            if value is None or key not in known:
                if key not in known:
                    logger.debug("Ignoring unknown setting %r", raw_key)
                continue
            enum_cls = _ENUM_FIELDS.get(key)
            if enum_cls is not None:
                try:
                    value = enum_cls(value)
                except ValueError:
                    logger.warning("Invalid value %r for setting %s", value, key)
                    continue
            if key == "plugins_config":
                value = {name: dict(cfg) for name, cfg in value.items()}
            setattr(self, key, value)
        return self

    def as_dict(self) -> dict[str, Any]:
        """Export all settings except host UI state."""
        data = asdict(self)
        for key in _PRIVATE_KEYS:
            data.pop(key, None)
        for key in _ENUM_FIELDS:
            data[key] = data[key].value
        return data

    @property
    def effective_custom_css(self) -> str:
        return self.custom_css if self.use_custom_css else ""

    @classmethod
    def from_django(cls) -> "Settings":
        """Build settings from the ``OMNICONTENT`` dict of the Django settings."""
        from django.conf import settings as django_settings

        return cls().load(getattr(django_settings, "OMNICONTENT", {}))


class Configurable:
    """
    Enable state plus a config slice persisted in ``settings.plugins_config[name]``.

    Shared by markdown extensions and process plugins. Subclasses set ``name`` and
    may extend ``default_config`` and ``get_meta_config``.
    """

    name: str = ""
    default_config: dict[str, Any] = {}

    def __init__(self, settings: Settings):
        if not self.name:
            raise TypeError(f"{type(self).__name__} must define a name")
        self.settings = settings
        self._config: dict[str, Any] = {"enabled": True, **self.default_config}
        self._load_config()

    def _load_config(self) -> None:
        stored = self.settings.plugins_config.get(self.name)
        if stored:
            self._config.update(stored)
            logger.debug("Loaded config for %s: %s", self.name, self._config)

    def _save_config(self) -> None:
        self.settings.plugins_config[self.name] = self.get_config()
        logger.debug("Saved config for %s: %s", self.name, self._config)

    def get_name(self) -> str:
        return self.name

    def get_config(self) -> dict[str, Any]:
        return dict(self._config)

    def update_config(self, config: Mapping[str, Any]) -> dict[str, Any]:
        self._config.update(config)
        self._save_config()
        return self.get_config()

    def is_enabled(self) -> bool:
        return self._config.get("enabled") is not False

    def set_enabled(self, enabled: bool) -> None:
        self._config["enabled"] = bool(enabled)
        self._save_config()

    def get_meta_config(self) -> dict[str, dict[str, Any]]:
        return {"enabled": {"type": "switch", "title": "Enabled"}}
