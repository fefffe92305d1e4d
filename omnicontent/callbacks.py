# omnicontent/callbacks.py
"""Callbacks used by deferred renderers to patch placeholders after a render."""

import logging
from typing import Dict, Protocol

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class RenderCallback(Protocol):
    def update_element_by_id(self, element_id: str, html: str) -> None: ...


class NullCallback:
    """Callback that drops updates. Used when the host does not care about them."""

    def update_element_by_id(self, element_id: str, html: str) -> None:
        logger.debug("Dropping update for #%s, no callback configured", element_id)


class DocumentCallback:
    """
    Keeps the most recent rendered HTML and patches elements in it by id.

    Updates that arrive before the element exists are remembered and applied
    when the next document is attached.
    """

    def __init__(self, html: str = ""):
        self.html = html
        self._pending: Dict[str, str] = {}

    def attach(self, html: str) -> str:
        self.html = html
        pending, self._pending = self._pending, {}
        for element_id, fragment in pending.items():
            self.update_element_by_id(element_id, fragment)
        return self.html

    def update_element_by_id(self, element_id: str, html: str) -> None:
        soup = BeautifulSoup(self.html, "html.parser")
        element = soup.find(id=element_id)
        if element is None:
            logger.debug("Element #%s not rendered yet, deferring update", element_id)
            self._pending[element_id] = html
            return

        element.clear()
        fragment = BeautifulSoup(html, "html.parser")
        for child in list(fragment.contents):
            element.append(child.extract())
        self.html = str(soup)
