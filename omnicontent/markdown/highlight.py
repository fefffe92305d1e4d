# omnicontent/markdown/highlight.py
"""
Syntax highlighting with Pygments.

Highlight themes are written against highlight.js class names (``hljs-keyword``,
``hljs-string`` ...), so this module ships a Pygments formatter that emits those
classes instead of the Pygments short names. The WeChat editor needs yet another
markup (``code-snippet__*`` classes, one ``<code>`` per line), produced by
``format_code_for_weixin``.
"""

import logging
import re

from django.utils.html import escape
from pygments import highlight
from pygments.formatter import Formatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.token import (
    Comment,
    Generic,
    Keyword,
    Literal,
    Name,
    Number,
    Operator,
    Punctuation,
    String,
)
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

# Most specific token types first; lookup walks up the token hierarchy
TOKEN_CLASS_MAP = {
    Keyword.Type: "hljs-type",
    Keyword.Constant: "hljs-literal",
    Keyword: "hljs-keyword",
    Name.Builtin: "hljs-built_in",
    Name.Function: "hljs-title",
    Name.Class: "hljs-title",
    Name.Decorator: "hljs-meta",
    Name.Tag: "hljs-name",
    Name.Attribute: "hljs-attr",
    Name.Variable: "hljs-variable",
    Name.Property: "hljs-property",
    Name.Constant: "hljs-literal",
    String.Regex: "hljs-regexp",
    String: "hljs-string",
    Number: "hljs-number",
    Literal: "hljs-literal",
    Comment.Preproc: "hljs-meta",
    Comment: "hljs-comment",
    Operator.Word: "hljs-keyword",
    Operator: "hljs-operator",
    Punctuation: "hljs-punctuation",
    Generic.Deleted: "hljs-deletion",
    Generic.Inserted: "hljs-addition",
    Generic.Heading: "hljs-section",
    Generic.Emph: "hljs-emphasis",
    Generic.Strong: "hljs-strong",
}

# highlight.js class -> WeChat editor class
WEIXIN_CLASS_MAP = {
    "hljs-keyword": "code-snippet__keyword",
    "hljs-string": "code-snippet__string",
    "hljs-number": "code-snippet__number",
    "hljs-comment": "code-snippet__comment",
    "hljs-attr": "code-snippet__attr",
    "hljs-name": "code-snippet__attr",
    "hljs-property": "code-snippet__attr",
    "hljs-punctuation": "code-snippet__punctuation",
    "hljs-title": "code-snippet__title",
    "hljs-function": "code-snippet__function",
    "hljs-variable": "code-snippet__variable",
    "hljs-type": "code-snippet__type",
    "hljs-built_in": "code-snippet__built_in",
    "hljs-operator": "code-snippet__operator",
    "hljs-literal": "code-snippet__literal",
    "hljs-meta": "code-snippet__meta",
    "hljs-tag": "code-snippet__keyword",
    "hljs-attribute": "code-snippet__attr",
}

_HLJS_CLASS_RE = re.compile(r'class="(hljs-[\w-]+)"')

WEIXIN_EMPTY_LINE = '<code><span leaf=""><br class="ProseMirror-trailingBreak"></span></code>'


def css_class_for(ttype):
    while ttype is not None:
        css_class = TOKEN_CLASS_MAP.get(ttype)
        if css_class:
            return css_class
        ttype = ttype.parent
    return None


class HljsFormatter(Formatter):
    """
    Format a token stream as HTML spans with highlight.js class names.

    Spans never cross a line break, so the output can be split per line.
    """

    name = "hljs"
    aliases = ["hljs"]

    def format(self, tokensource, outfile):
        for ttype, value in tokensource:
            css_class = css_class_for(ttype)
            parts = value.split("\n")
            for index, part in enumerate(parts):
                if index:
                    outfile.write("\n")
                if not part:
                    continue
                if css_class:
                    outfile.write(f'<span class="{css_class}">{escape(part)}</span>')
                else:
                    outfile.write(escape(part))


def get_lexer(code, lang=None):
    options = {"stripnl": False, "ensurenl": False}
    if lang:
        try:
            return get_lexer_by_name(lang, **options)
        except ClassNotFound:
            logger.debug("No lexer for language %r, guessing", lang)
    try:
        return guess_lexer(code, **options)
    except ClassNotFound:
        return None


def highlight_code(code, lang=None):
    """
    Highlight ``code`` and return HTML with ``hljs-*`` spans.

    Falls back to guessing the language, then to plain escaped text.
    """
    lexer = get_lexer(code, lang)
    if lexer is None:
        return escape(code)
    return highlight(code, lexer, HljsFormatter())


def _to_weixin_classes(html):
    return _HLJS_CLASS_RE.sub(
        lambda m: f'class="{WEIXIN_CLASS_MAP.get(m.group(1), m.group(1))}"', html
    )


def _weixin_snippet(lines, language):
    code_elements = []
    for line in lines:
        if not line.strip():
            code_elements.append(WEIXIN_EMPTY_LINE)
        else:
            code_elements.append(f'<code><span leaf="">{line}</span></code>')
    return (
        '<section class="code-snippet__js">'
        f'<pre class="code-snippet__js code-snippet code-snippet_nowrap" data-lang="{language}">'
        f'{"".join(code_elements)}</pre></section>'
    )


def format_code_for_weixin(code, language=None):
    """
    Format a code block for the WeChat official account editor.

    Each source line becomes ``<code><span leaf="">...</span></code>``; blank lines
    become a ProseMirror trailing break so the editor keeps them.

    Args:
        code: Raw code text
        language: Fence language, or None for plain text

    Returns:
        ``<section class="code-snippet__js">`` wrapped snippet
    """
    clean_code = re.sub(r"\n$", "", code)
    if not language:
        lines = [escape(line) for line in clean_code.split("\n")]
        return _weixin_snippet(lines, "text")

    processed = _to_weixin_classes(highlight_code(clean_code, language))
    return _weixin_snippet(processed.split("\n"), language)
