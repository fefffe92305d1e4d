# omnicontent/cards.py
"""
Out-of-band storage for HTML fragments that must survive DOM processing verbatim.

Renderers emit a placeholder ``<section data-id="ID">...</section>`` and store the
literal payload here. After every DOM based plugin has run, ``restore_card`` swaps
each placeholder for its payload with a plain regex replace, so attribute order,
self-closing tags and entities of the payload are emitted byte for byte.
"""

import logging
import re
from typing import Dict

logger = logging.getLogger(__name__)


class CardDataManager:
    def __init__(self):
        self._card_data: Dict[str, str] = {}

    def set_card_data(self, card_id: str, card_html: str) -> None:
        self._card_data[card_id] = card_html

    def get_card_data(self, card_id: str) -> str | None:
        return self._card_data.get(card_id)

    def __len__(self) -> int:
        return len(self._card_data)

    def cleanup(self) -> None:
        """Forget all cards. Called when the active document changes."""
        self._card_data.clear()

    def restore_card(self, html: str) -> str:
        """
        Replace every card placeholder section with its stored payload.

        A card whose placeholder cannot be found is logged and skipped; the HTML is
        returned unchanged for that card.
        """
        for card_id, payload in self._card_data.items():
            pattern = re.compile(
                r'<section[^>]*\sdata-id="' + re.escape(card_id) + r'"[^>]*>(.*?)</section>',
                re.DOTALL,
            )
            if not pattern.search(html):
                logger.error("Card placeholder for %r not found, cannot restore card", card_id)
                continue
            # A function replacement keeps backslashes in the payload literal
            html = pattern.sub(lambda _m, payload=payload: payload, html)
        return html
