# omnicontent/markdown/extensions/__init__.py

from .base import Extension, ReferenceEntry, RenderContext
from .block_id import BlockIdMarker
from .callouts import CalloutRenderer
from .code import CodeHighlight, CodeRenderer
from .footnotes import FootnoteRenderer
from .links import LinkRenderer
from .local_file import LocalFile
from .math import MathRenderer, MathRendererQueue, clean_math_cache
from .text_highlight import TextHighlight

# Registration order is significant: postprocess hooks run in this order
EXTENSIONS = [
    LocalFile,
    CalloutRenderer,
    CodeHighlight,
    BlockIdMarker,
    LinkRenderer,
    FootnoteRenderer,
    TextHighlight,
    CodeRenderer,
    MathRenderer,
]

__all__ = [
    "EXTENSIONS",
    "BlockIdMarker",
    "CalloutRenderer",
    "CodeHighlight",
    "CodeRenderer",
    "Extension",
    "FootnoteRenderer",
    "LinkRenderer",
    "LocalFile",
    "MathRenderer",
    "MathRendererQueue",
    "ReferenceEntry",
    "RenderContext",
    "TextHighlight",
    "clean_math_cache",
]
