# omnicontent/markdown/extensions/code.py
"""
Fenced code blocks.

CodeHighlight provides Pygments highlighting with highlight.js class names.
CodeRenderer owns the fences and dispatches on the fence language:

- ``ad-TYPE``: callout, body parsed as markdown
- ``latex``, ``tex``, ``am``, ``asciimath``: block math through the math queue
- ``mermaid``: placeholder section for a diagram rendered by the host
- ``mpcard``: official account card, stored in the card data manager
- anything else: ``<section class="code-section"><pre><code class="hljs language-X">``
  or the WeChat ``code-snippet__js`` markup when WeChat code format is on
"""

import logging
import re

from django.utils.html import escape
from markdown.blockprocessors import BlockProcessor
from markdown.extensions import Extension as MarkdownExtension
from markdown.preprocessors import Preprocessor

from omnicontent.markdown.highlight import format_code_for_weixin, highlight_code

from .base import Extension
from .callouts import build_callout

logger = logging.getLogger(__name__)

FENCE_OPEN_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^`\n]*)$")

CALLOUT_OPEN = "\x02omni-callout:{}\x03"
CALLOUT_OPEN_RE = re.compile(r"^\x02omni-callout:(\d+)\x03$")
CALLOUT_CLOSE = "\x02/omni-callout\x03"

MERMAID_SECTION_CLASS = "note-mermaid"


def get_math_type(lang):
    if not lang:
        return None
    lang = lang.strip().lower()
    if lang in ("am", "asciimath"):
        return "asciimath"
    if lang in ("latex", "tex"):
        return "latex"
    return None


def _is_fence_close(line, fence):
    stripped = line.strip()
    return (
        len(stripped) >= len(fence)
        and set(stripped) == {fence[0]}
        and len(line) - len(line.lstrip(" ")) <= 3
    )


class CodeHighlight(Extension):
    name = "CodeHighlight"

    def highlight(self, code, lang):
        lang_key = (lang or "").strip().lower()
        if get_math_type(lang_key) or lang_key in ("mpcard", "mermaid"):
            return escape(code)
        try:
            return highlight_code(code, lang_key or None)
        except Exception:
            logger.error("Highlighting failed for language %r", lang, exc_info=True)
            return escape(code)

    def markdown_extension(self):
        return _HighlightMarkdownExtension(self)


class _HighlightMarkdownExtension(MarkdownExtension):
    def __init__(self, owner, **kwargs):
        self.owner = owner
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        md.code_highlighter = self.owner.highlight


class FencePreprocessor(Preprocessor):
    """
    Replace fenced blocks with stashed HTML.

    ``ad-`` fences are not stashed: their body stays in the line stream between
    two marker lines so it is parsed as markdown by ``CalloutFenceProcessor``.
    """

    def __init__(self, md, renderer):
        super().__init__(md)
        self.renderer = renderer

    def run(self, lines):
        output = []
        index = 0
        while index < len(lines):
            match = FENCE_OPEN_RE.match(lines[index])
            if not match:
                output.append(lines[index])
                index += 1
                continue

            fence = match.group("fence")
            end = index + 1
            while end < len(lines) and not _is_fence_close(lines[end], fence):
                end += 1
            if end == len(lines):
                # Unclosed fence is plain text
                output.append(lines[index])
                index += 1
                continue

            info = match.group("info").strip()
            lang = info.split()[0] if info else ""
            body = lines[index + 1 : end]
            callout = self.renderer.open_callout(lang, body) if lang.startswith("ad-") else None
            if callout is not None:
                marker, content = callout
                output.extend(["", marker, "", *self.run(content), "", CALLOUT_CLOSE, ""])
            else:
                html = self.renderer.render_fence("\n".join(body), lang)
                output.extend(["", self.md.htmlStash.store(html), ""])
            index = end + 1
        return output


class CalloutFenceProcessor(BlockProcessor):
    def __init__(self, parser, renderer):
        super().__init__(parser)
        self.renderer = renderer

    def test(self, parent, block):
        return bool(CALLOUT_OPEN_RE.match(block.strip()))

    def run(self, parent, blocks):
        callout_index = int(CALLOUT_OPEN_RE.match(blocks.pop(0).strip()).group(1))
        info, title = self.renderer.fenced_callouts[callout_index]

        depth = 1
        body = []
        while blocks:
            block = blocks.pop(0)
            if CALLOUT_OPEN_RE.match(block.strip()):
                depth += 1
            elif block.strip() == CALLOUT_CLOSE:
                depth -= 1
                if depth == 0:
                    break
            body.append(block)

        content = build_callout(self.parser.md, parent, info, title)
        if body:
            self.parser.parseBlocks(content, body)


class _CodeMarkdownExtension(MarkdownExtension):
    def __init__(self, renderer, **kwargs):
        self.renderer = renderer
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        self.renderer.md = md
        # Ahead of the stock fenced_code preprocessor (25)
        md.preprocessors.register(FencePreprocessor(md, self.renderer), "omni_fenced_code", 26)
        md.parser.blockprocessors.register(
            CalloutFenceProcessor(md.parser, self.renderer), "callout_fence", 105
        )


class CodeRenderer(Extension):
    name = "CodeRenderer"

    def __init__(self, context):
        super().__init__(context)
        self.md = None
        self.mermaid_index = 0
        self.fenced_callouts = []

    def prepare(self):
        self.mermaid_index = 0
        self.fenced_callouts = []

    def markdown_extension(self):
        return _CodeMarkdownExtension(self)

    def open_callout(self, lang, lines):
        """
        Register an ``ad-TYPE`` fence.

        The first line is the title unless it is empty or followed by a blank
        line. Returns the marker line and the body lines, or None for an unknown
        callout type (the fence then renders as code).
        """
        callout_type = lang[3:].lower()
        info = self.assets.get_callout(callout_type)
        if info is None:
            return None

        title = callout_type.capitalize()
        first_line = lines[0].strip() if lines else ""
        if first_line and not (len(lines) > 1 and not lines[1].strip()):
            title = first_line
            lines = lines[1:]

        while lines and not lines[0].strip():
            lines = lines[1:]
        while lines and not lines[-1].strip():
            lines = lines[:-1]

        self.fenced_callouts.append((info, title))
        return CALLOUT_OPEN.format(len(self.fenced_callouts) - 1), lines

    def render_fence(self, code, lang):
        lang_key = lang.strip().lower()

        math_type = get_math_type(lang_key)
        if math_type:
            return self.context.math_queue.render(code.strip(), inline=False, dialect=math_type)
        if lang_key == "mermaid":
            return self.render_mermaid(code)
        if lang_key == "mpcard":
            return self.render_card(code)
        return self.render_code(code, lang)

    def render_code(self, code, lang):
        code = re.sub(r"\n$", "", code) + "\n"

        if self.settings.enable_weixin_code_format:
            return format_code_for_weixin(code, lang or None)

        highlighter = getattr(self.md, "code_highlighter", None)
        body = highlighter(code, lang) if highlighter else escape(code)
        code_tag = f'<code class="hljs language-{lang}">' if lang else "<code>"
        pre = f"<pre>{code_tag}{body}</code></pre>"

        if self.settings.line_number:
            return f'<section class="code-section"><div class="code-content">{pre}</div></section>'
        return f'<section class="code-section">{pre}</section>'

    def render_mermaid(self, code):
        container_id = f"mermaid-{self.mermaid_index}"
        self.mermaid_index += 1
        return (
            f'<section id="{container_id}" class="{MERMAID_SECTION_CLASS}">'
            f'<pre class="mermaid">{escape(code)}</pre></section>'
        )

    @staticmethod
    def parse_card(text):
        def attr(name, default=""):
            match = re.search(rf'data-{name}="([^"]+)"', text)
            return match.group(1) if match else default

        return {
            "id": attr("id"),
            "headimg": attr("headimg"),
            "nickname": attr("nickname", "Account name"),
            "signature": attr("signature", "Account description"),
        }

    def render_card(self, text):
        card = self.parse_card(text)
        if not card["id"]:
            logger.warning("mpcard block without data-id")
            return "<span>Invalid account card: missing id</span>"

        self.context.cards.set_card_data(card["id"], text)
        return (
            f'<section data-id="{card["id"]}" class="note-mpcard-wrapper">'
            '<div class="note-mpcard-content">'
            f'<img class="note-mpcard-headimg" width="54" height="54" src="{card["headimg"]}">'
            '<div class="note-mpcard-info">'
            f'<div class="note-mpcard-nickname">{card["nickname"]}</div>'
            f'<div class="note-mpcard-signature">{card["signature"]}</div>'
            "</div></div>"
            '<div class="note-mpcard-foot">Official account</div>'
            "</section>"
        )
