# omnicontent/errors.py
"""Exception hierarchy for the rendering pipeline."""


class OmniContentError(Exception):
    """Base class for all omnicontent errors."""


class ExtensionError(OmniContentError):
    """A markdown extension failed in a way that compromises the document."""

    def __init__(self, extension_name: str, message: str):
        self.extension_name = extension_name
        super().__init__(f"{extension_name}: {message}")


class PluginError(OmniContentError):
    """A process plugin failed while rewriting HTML."""

    def __init__(self, plugin_name: str, message: str):
        self.plugin_name = plugin_name
        super().__init__(f"{plugin_name}: {message}")


class DuplicateNameError(OmniContentError, ValueError):
    """An extension or plugin with the same name is already registered."""


class AdapterNotFoundError(OmniContentError, LookupError):
    """No platform adapter is registered at all."""
