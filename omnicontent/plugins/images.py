# omnicontent/plugins/images.py
"""
Images process plugin.

This plugin:
- Copies ``src`` into ``data-src``, the attribute the WeChat editor loads from
- Gives images without a style attribute ``max-width: 100%; height: auto;``
- Centers the parent of every image, unless it is a <center>
- Optionally replaces local sources with the URL returned by an uploader
"""

import logging
from typing import Callable, Optional

from .base import ProcessPlugin
from .utils import parse_html, parse_style, set_style, soup_to_html

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_STYLE = "max-width: 100%; height: auto;"

ImageUploader = Callable[[str], Optional[str]]


def is_local_source(src):
    return not src.startswith(("http://", "https://", "data:", "//"))


class ImagesPlugin(ProcessPlugin):
    name = "Images"

    def __init__(self, settings, uploader: Optional[ImageUploader] = None):
        super().__init__(settings)
        self.uploader = uploader

    def upload(self, src):
        try:
            url = self.uploader(src)
        except Exception:
            logger.error("Image upload failed for %s", src, exc_info=True)
            return None
        if not url:
            logger.warning("Uploader returned no URL for %s", src)
        return url

    def apply(self, html, settings):
        soup = parse_html(html)
        uploaded = {}

        for img in soup.find_all("img"):
            src = img.get("src")
            if not src:
                continue

            if self.uploader is not None and is_local_source(src):
                if src not in uploaded:
                    uploaded[src] = self.upload(src)
                if uploaded[src]:
                    img["src"] = src = uploaded[src]

            img["data-src"] = src
            if not img.has_attr("style"):
                img["style"] = DEFAULT_IMAGE_STYLE

            parent = img.parent
            if parent is None or parent.name in ("[document]", "center"):
                continue
            if parse_style(parent.get("style")).get("text-align") != "center":
                set_style(parent, text_align="center")

        return soup_to_html(soup)
