# omnicontent/markdown/renderer.py

import logging
import re
import xml.etree.ElementTree as etree

import markdown
from django.utils.html import format_html
from markdown.extensions import Extension as MarkdownExtension
from markdown.preprocessors import Preprocessor
from markdown.treeprocessors import Treeprocessor

from omnicontent.errors import ExtensionError
from omnicontent.registry import Registry

from .config import get_markdown_config
from .extensions import EXTENSIONS, FootnoteRenderer

logger = logging.getLogger(__name__)

HEADING_TAGS = {f"h{level}" for level in range(1, 7)}

ERROR_HINT = "Check the note for unsupported syntax, then render it again."

LIST_ITEM_RE = re.compile(r"^( *)([-*+]|\d+[.)])([ \t]+|$)")


def render_error(error, report_url=""):
    """User visible replacement for a document that could not be rendered."""
    report = format_html(' <a href="{}">Report this problem</a>', report_url) if report_url else ""
    return str(
        format_html(
            '<div class="error-message"><p>{}</p><p>{}{}</p></div>',
            str(error) or type(error).__name__,
            ERROR_HINT,
            report,
        )
    )


class HeadingSpanTreeprocessor(Treeprocessor):
    """
    Wrap heading text as
    ``<span class="prefix"></span><span class="content">...</span><span class="suffix"></span>``
    so process plugins get stable insertion points for numbering and decoration.
    """

    def run(self, root):
        headings = [el for el in root.iter() if el.tag in HEADING_TAGS]
        for heading in headings:
            content = etree.Element("span", {"class": "content"})
            content.text = heading.text
            for child in list(heading):
                heading.remove(child)
                content.append(child)
            heading.text = None
            heading.append(etree.Element("span", {"class": "prefix"}))
            heading.append(content)
            heading.append(etree.Element("span", {"class": "suffix"}))


class HorizontalRuleTreeprocessor(Treeprocessor):
    def run(self, root):
        for hr in root.iter("hr"):
            hr.attrib.clear()


class ListIndentPreprocessor(Preprocessor):
    """
    Normalise nested list indentation to four spaces per level.

    Obsidian nests lists with two spaces (``- a`` / ``  - b``) while
    Python-Markdown requires a full tab length. A list opens only at an indent
    below four spaces after a blank line; other lines are renormalised only while
    a list is open.
    """

    def run(self, lines):
        output = []
        stack = []
        previous_blank = True
        for line in lines:
            if not line.strip():
                output.append(line)
                previous_blank = True
                continue

            indent = len(line) - len(line.lstrip(" "))
            match = LIST_ITEM_RE.match(line)
            if match and not stack and (indent >= 4 or not previous_blank):
                # Indented code or a paragraph line, not the start of a list
                output.append(line)
            elif match:
                while stack and stack[-1] > indent:
                    stack.pop()
                if not stack or stack[-1] < indent:
                    stack.append(indent)
                output.append(" " * (4 * (len(stack) - 1)) + line[indent:])
            elif stack and indent > 0:
                depth = sum(1 for level in stack if level < indent)
                output.append(" " * (4 * depth) + line[indent:])
            else:
                if previous_blank:
                    stack = []
                output.append(line)
            previous_blank = False
        return output


class CoreExtension(MarkdownExtension):
    def extendMarkdown(self, md):
        # After fences (25/26) and block math (24) are stashed
        md.preprocessors.register(ListIndentPreprocessor(md), "list_indent", 22)
        # After the inline processor (20)
        md.treeprocessors.register(HeadingSpanTreeprocessor(md), "heading_spans", 17)
        md.treeprocessors.register(HorizontalRuleTreeprocessor(md), "hr_normalize", 16)


class MarkdownParser:
    """
    Markdown to HTML renderer built from an ordered list of extensions.

    Per document:
        1. build the Markdown instance from enabled extensions (once, lazily)
        2. prepare() every enabled extension
        3. strip footnote definitions from the text
        4. convert
        5. postprocess() through every enabled extension, in order
        6. before_publish() through every enabled extension, in order

    Args:
        context: RenderContext shared by all extensions
        extensions: Extension classes to register, in order. Defaults to EXTENSIONS
    """

    def __init__(self, context, extensions=None):
        self.context = context
        self.registry = Registry("extension")
        self._md = None
        self._built_for = ()
        for extension_class in EXTENSIONS if extensions is None else extensions:
            self.register_extension(extension_class(context))

    @property
    def settings(self):
        return self.context.settings

    def register_extension(self, extension):
        self.registry.register(extension)
        self.invalidate()
        return extension

    def invalidate(self):
        """Drop the built Markdown instance; the next parse rebuilds it."""
        self._md = None

    def build(self):
        config = get_markdown_config()
        markdown_extensions = list(config["extensions"]) + [CoreExtension()]
        for extension in self.get_enabled_extensions():
            markdown_extension = extension.markdown_extension()
            if markdown_extension is not None:
                markdown_extensions.append(markdown_extension)

        md = markdown.Markdown(
            extensions=markdown_extensions,
            extension_configs=config["extension_configs"],
            output_format=config["output_format"],
            tab_length=config["tab_length"],
        )
        logger.debug(
            "Built markdown renderer with %s",
            [extension.get_name() for extension in self.get_enabled_extensions()],
        )
        return md

    def prepare(self):
        for extension in self.get_enabled_extensions():
            extension.prepare()

    def postprocess(self, html):
        for extension in self.get_enabled_extensions():
            try:
                html = extension.postprocess(html)
            except Exception as exc:
                logger.error("Postprocess failed in %s", extension.get_name(), exc_info=True)
                raise ExtensionError(extension.get_name(), str(exc) or type(exc).__name__) from exc
        return html

    def before_publish(self, html):
        for extension in self.get_enabled_extensions():
            html = extension.before_publish(html)
        return html

    def parse(self, text):
        """
        Render markdown ``text`` to HTML.

        Never raises: a failure anywhere in the lifecycle returns the
        ``<div class="error-message">`` fragment instead of a partial document.
        """
        enabled = tuple(extension.get_name() for extension in self.get_enabled_extensions())
        try:
            if self._md is None or self._built_for != enabled:
                self._md = self.build()
                self._built_for = enabled
        except Exception as exc:
            logger.error("Failed to build markdown renderer", exc_info=True)
            return render_error(exc, self.settings.report_url)

        try:
            self.prepare()
            footnotes = self.get_extension_by_name(FootnoteRenderer.name)
            if footnotes is not None and footnotes.is_enabled():
                text = footnotes.preprocess_text(text)
            self._md.reset()
            html = self._md.convert(text)
            html = self.postprocess(html)
            html = self.before_publish(html)
        except Exception as exc:
            logger.error("Failed to render markdown", exc_info=True)
            return render_error(exc, self.settings.report_url)
        return html

    def cleanup(self):
        for extension in self.registry:
            extension.cleanup()

    # Registry

    def get_extensions(self):
        return self.registry.all()

    def get_enabled_extensions(self):
        return self.registry.enabled()

    def get_extension_by_name(self, name):
        return self.registry.get(name)

    def set_extension_enabled(self, name, enabled):
        changed = self.registry.set_enabled(name, enabled)
        if changed:
            self.invalidate()
        return changed

    def get_extension_config(self, name):
        return self.registry.get_config(name)

    def update_extension_config(self, name, config):
        result = self.registry.update_config(name, config)
        if result is not None:
            self.invalidate()
        return result

    def get_extension_meta_config(self, name):
        return self.registry.get_meta_config(name)

    def get_extensions_summary(self):
        return self.registry.summary()

    def batch_update_extensions_enabled(self, updates):
        result = self.registry.batch_update_enabled(updates)
        if result["success"]:
            self.invalidate()
        return result
