# omnicontent/adapters/__init__.py

from .base import AdapterRegistry, PlatformAdapter
from .platforms import PLATFORMS, build_adapters

__all__ = ["PLATFORMS", "AdapterRegistry", "PlatformAdapter", "build_adapters"]
