# omnicontent/registry.py
"""Ordered, name-unique collection of configurable extensions or plugins."""

import logging
from typing import Any, Dict, Generic, List, Mapping, Optional, TypeVar

from .errors import DuplicateNameError
from .settings import Configurable

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Configurable)


class Registry(Generic[T]):
    """
    Keeps items in registration order and enforces unique names.

    Args:
        kind: Human readable item kind, used in log and error messages
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._items: List[T] = []

    def __iter__(self):
        return iter(list(self._items))

    def __len__(self):
        return len(self._items)

    def register(self, item: T) -> T:
        name = item.get_name()
        if self.get(name) is not None:
            raise DuplicateNameError(f"{self.kind} {name!r} is already registered")
        self._items.append(item)
        logger.info("Registered %s %s", self.kind, name)
        return item

    def unregister(self, name: str) -> bool:
        item = self.get(name)
        if item is None:
            return False
        self._items.remove(item)
        logger.info("Unregistered %s %s", self.kind, name)
        return True

    def get(self, name: str) -> Optional[T]:
        for item in self._items:
            if item.get_name() == name:
                return item
        return None

    def all(self) -> List[T]:
        return list(self._items)

    def enabled(self) -> List[T]:
        return [item for item in self._items if item.is_enabled()]

    def set_enabled(self, name: str, enabled: bool) -> bool:
        item = self.get(name)
        if item is None:
            logger.warning("Cannot toggle unknown %s %r", self.kind, name)
            return False
        item.set_enabled(enabled)
        logger.debug("%s %s %s", self.kind.capitalize(), name, "enabled" if enabled else "disabled")
        return True

    def get_config(self, name: str) -> Optional[Dict[str, Any]]:
        item = self.get(name)
        return item.get_config() if item else None

    def update_config(self, name: str, config: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
        item = self.get(name)
        if item is None:
            logger.warning("Cannot configure unknown %s %r", self.kind, name)
            return None
        return item.update_config(config)

    def get_meta_config(self, name: str) -> Optional[Dict[str, Dict[str, Any]]]:
        item = self.get(name)
        return item.get_meta_config() if item else None

    def summary(self) -> List[Dict[str, Any]]:
        return [
            {
                "name": item.get_name(),
                "enabled": item.is_enabled(),
                "config": item.get_config(),
                "meta_config": item.get_meta_config(),
            }
            for item in self._items
        ]

    def batch_update_enabled(self, updates: Mapping[str, bool]) -> Dict[str, List[str]]:
        success, failed = [], []
        for name, enabled in updates.items():
            (success if self.set_enabled(name, enabled) else failed).append(name)
        logger.debug(
            "Batch %s update: %d succeeded, %d failed", self.kind, len(success), len(failed)
        )
        return {"success": success, "failed": failed}
