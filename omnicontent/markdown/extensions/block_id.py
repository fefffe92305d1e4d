# omnicontent/markdown/extensions/block_id.py
"""Strip Obsidian block ids (``Some paragraph ^intro-1``) from the rendered text."""

import re

from markdown.extensions import Extension as MarkdownExtension
from markdown.preprocessors import Preprocessor

from .base import Extension

BLOCK_ID_RE = re.compile(r"[ \t]+\^[A-Za-z0-9-]+[ \t]*$")
# A block id alone on its own line, referencing the block above
BLOCK_ID_LINE_RE = re.compile(r"^\^[A-Za-z0-9-]+[ \t]*$")


class BlockIdPreprocessor(Preprocessor):
    def run(self, lines):
        output = []
        for line in lines:
            if BLOCK_ID_LINE_RE.match(line):
                continue
            output.append(BLOCK_ID_RE.sub("", line))
        return output


class _BlockIdMarkdownExtension(MarkdownExtension):
    def extendMarkdown(self, md):
        # After fences are stashed (25/26) so code keeps its carets
        md.preprocessors.register(BlockIdPreprocessor(md), "block_id", 21)


class BlockIdMarker(Extension):
    name = "BlockIdMarker"

    def markdown_extension(self):
        return _BlockIdMarkdownExtension()
