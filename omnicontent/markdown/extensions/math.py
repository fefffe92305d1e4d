# omnicontent/markdown/extensions/math.py
"""
Math rendering: inline ``$...$`` / ``$$...$$`` and block ``$$\\n...\\n$$``.

Expressions are rendered to SVG by a remote math service. Rendering never blocks
the parse: the renderer emits a placeholder span and queues a request, and
``MathRendererQueue.flush()`` performs the queued requests in order, patching each
placeholder through ``callback.update_element_by_id``. SVG results are cached in
the Django cache so the next render of the same expression is immediate.
"""

from __future__ import annotations

import hashlib
import logging
import re
from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional

import requests
from django.core.cache import cache
from django.utils.html import escape
from markdown.extensions import Extension as MarkdownExtension
from markdown.inlinepatterns import InlineProcessor
from markdown.preprocessors import Preprocessor

from omnicontent.settings import MathDialect

from .base import Extension

logger = logging.getLogger(__name__)

INLINE_MATH_RE = r"(\${1,2})(?!\$)((?:\\.|[^\\\n])*?(?:\\.|[^\\\n$]))\1"
BLOCK_MATH_RE = re.compile(
    r"^(\${1,2})\n((?:\\.|[^\\])+?)\n\1[ \t]*$", re.MULTILINE | re.DOTALL
)

RENDERING_TEXT = "Rendering"
FAILED_TEXT = "Rendering failed"

MATH_CACHE_PREFIX = "omnicontent:math"
_GENERATION_KEY = f"{MATH_CACHE_PREFIX}:generation"


def _cache_generation() -> int:
    return cache.get_or_set(_GENERATION_KEY, 1, None)


def clean_math_cache() -> None:
    """Invalidate every cached SVG, e.g. after the math dialect changed."""
    try:
        cache.incr(_GENERATION_KEY)
    except ValueError:
        cache.set(_GENERATION_KEY, 2, None)
    logger.info("Math cache invalidated")


def math_cache_key(expression: str, inline: bool, dialect: str) -> str:
    digest = hashlib.sha256(expression.encode("utf-8")).hexdigest()
    return f"{MATH_CACHE_PREFIX}:{_cache_generation()}:{dialect}:{int(inline)}:{digest}"


def request_math_svg(
    service_url: str, expression: str, inline: bool, dialect: str, timeout: float = 10
) -> str:
    """POST an expression to the math service and return the SVG text."""
    path = "/math/am" if dialect == MathDialect.ASCIIMATH.value else "/math/tex"
    response = requests.post(
        service_url.rstrip("/") + path,
        json={"expression": expression, "inline": inline},
        timeout=timeout,
    )
    response.raise_for_status()
    return response.text


@dataclass
class MathRequest:
    element_id: str
    expression: str
    inline: bool
    dialect: str


MathClient = Callable[[str, str, bool, str], str]


class MathRendererQueue:
    """
    FIFO of pending math render requests.

    ``render`` is called from the markdown grammar and returns the placeholder
    markup immediately. ``flush`` runs the requests in the order they were queued.
    """

    def __init__(self, settings, callback, client: Optional[MathClient] = None):
        self.settings = settings
        self.callback = callback
        self.client = client or request_math_svg
        self.pending: deque[MathRequest] = deque()
        self._math_index = 0

    def generate_id(self) -> str:
        self._math_index += 1
        return f"math-id-{self._math_index}"

    def render(self, expression: str, inline: bool, dialect: Optional[str] = None) -> str:
        dialect = dialect or self.settings.math.value
        element_id = self.generate_id()
        class_name = "inline-math-svg" if inline else "block-math-svg"

        if not self.settings.math_service_url:
            content = escape(expression)
        else:
            content = cache.get(math_cache_key(expression, inline, dialect))
            if content is None:
                self.pending.append(MathRequest(element_id, expression, inline, dialect))
                content = RENDERING_TEXT

        return f'<span id="{element_id}" class="{class_name}">{content}</span>'

    def flush(self) -> int:
        """Perform every queued request. Returns the number of requests handled."""
        handled = 0
        while self.pending:
            request = self.pending.popleft()
            try:
                svg = self.client(
                    self.settings.math_service_url,
                    request.expression,
                    request.inline,
                    request.dialect,
                )
            except Exception:
                logger.error(
                    "Math rendering failed for %s", request.element_id, exc_info=True
                )
                svg = FAILED_TEXT
            else:
                cache.set(
                    math_cache_key(request.expression, request.inline, request.dialect),
                    svg,
                    None,
                )
            self.callback.update_element_by_id(request.element_id, svg)
            handled += 1
        return handled

    def clear(self) -> None:
        self.pending.clear()


class InlineMathProcessor(InlineProcessor):
    def __init__(self, pattern, md, renderer):
        super().__init__(pattern, md)
        self.renderer = renderer

    def handleMatch(self, m, data):
        html = self.renderer.render(m.group(2).strip(), inline=True)
        return self.md.htmlStash.store(html), m.start(0), m.end(0)


class BlockMathPreprocessor(Preprocessor):
    def __init__(self, md, renderer):
        super().__init__(md)
        self.renderer = renderer

    def run(self, lines):
        text = "\n".join(lines)

        def replace(m):
            html = self.renderer.render(m.group(2).strip(), inline=False)
            return "\n\n" + self.md.htmlStash.store(html) + "\n\n"

        return BLOCK_MATH_RE.sub(replace, text).split("\n")


class _MathMarkdownExtension(MarkdownExtension):
    def __init__(self, renderer, **kwargs):
        self.renderer = renderer
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        # Below the fence preprocessors so "$$" inside code stays code
        md.preprocessors.register(BlockMathPreprocessor(md, self.renderer), "block_math", 24)
        # Ahead of "escape" (180) so TeX backslashes reach the renderer untouched
        md.inlinePatterns.register(
            InlineMathProcessor(INLINE_MATH_RE, md, self.renderer), "inline_math", 185
        )


class MathRenderer(Extension):
    name = "MathRenderer"

    def render(self, expression: str, inline: bool, dialect: Optional[str] = None) -> str:
        return self.context.math_queue.render(expression, inline, dialect)

    def cleanup(self):
        self.context.math_queue.clear()

    def markdown_extension(self):
        return _MathMarkdownExtension(self)
