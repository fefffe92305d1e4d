# omnicontent/markdown/extensions/footnotes.py
"""
Obsidian footnotes.

Definitions (``[^id]: text``) are removed from the markdown before conversion
by ``preprocess_text`` and stored by id. References (``[^id]``) render as

    <sup id="fnref-ID"><a href="#fn-ID" class="footnote-ref">[n]</a></sup>

and ``postprocess`` appends the list of referenced footnotes:

    <section class="footnotes"><hr><ol><li id="fn-ID">text <a href="#fnref-ID"
    class="footnote-backref">↩︎</a></li></ol></section>

Numbers are assigned by the first document position of each id, never by the
order the references were collected in. Repeated references to one id get
``fnref-ID-2``, ``fnref-ID-3``, ... as their <sup> id. Definition text is
rendered as inline markdown.
"""

import logging
import re
import xml.etree.ElementTree as etree

import markdown
from django.utils.html import escape
from markdown.extensions import Extension as MarkdownExtension
from markdown.inlinepatterns import InlineProcessor
from markdown.treeprocessors import Treeprocessor
from markdown.util import AtomicString

from .base import Extension, ReferenceEntry

logger = logging.getLogger(__name__)

FOOTNOTE_DEF_RE = re.compile(r"^\[\^([\w-]+)\]:[ \t]*(.*?)[ \t]*$\n?", re.MULTILINE)
FOOTNOTE_REF_RE = r"\[\^([\w-]+)\]"
RENDERED_REF_RE = re.compile(
    r'(<a\b(?=[^>]*\bclass="footnote-ref")(?=[^>]*\bhref="#fn-([\w-]+)")[^>]*>)\[[^\]<]*\](</a>)'
)
FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
PARAGRAPH_RE = re.compile(r"^<p>(.*)</p>$", re.DOTALL)

UNDEFINED_TEXT = "Footnote {} is not defined"


class FootnoteRefInlineProcessor(InlineProcessor):
    def handleMatch(self, m, data):
        footnote_id = m.group(1)
        sup = etree.Element("sup")
        sup.set("id", f"fnref-{footnote_id}")
        anchor = etree.SubElement(sup, "a")
        anchor.set("href", f"#fn-{footnote_id}")
        anchor.set("class", "footnote-ref")
        anchor.text = AtomicString(f"[{footnote_id}]")
        return sup, m.start(0), m.end(0)


class FootnotePositionTreeprocessor(Treeprocessor):
    """Stamp reference positions in reading order and keep <sup> ids unique."""

    def __init__(self, md, owner):
        super().__init__(md)
        self.owner = owner

    def run(self, root):
        seen = {}
        for sup in root.iter("sup"):
            anchor = sup.find("a")
            if anchor is None or anchor.get("class") != "footnote-ref":
                continue
            footnote_id = anchor.get("href")[len("#fn-") :]
            self.owner.record_reference(footnote_id, self.owner.next_position())
            seen[footnote_id] = seen.get(footnote_id, 0) + 1
            if seen[footnote_id] > 1:
                sup.set("id", f"fnref-{footnote_id}-{seen[footnote_id]}")


class _FootnoteMarkdownExtension(MarkdownExtension):
    def __init__(self, owner, **kwargs):
        self.owner = owner
        super().__init__(**kwargs)

    def extendMarkdown(self, md):
        # Ahead of "link" (160) and the reference patterns
        md.inlinePatterns.register(FootnoteRefInlineProcessor(FOOTNOTE_REF_RE, md), "footnote_ref", 175)
        md.treeprocessors.register(FootnotePositionTreeprocessor(md, self.owner), "footnote_positions", 15)


class FootnoteRenderer(Extension):
    name = "FootnoteRenderer"

    def __init__(self, context):
        super().__init__(context)
        self.prepare()

    def prepare(self):
        self.footnotes = {}
        self.references = {}
        self.current_position = 0

    def preprocess_text(self, text):
        """
        Strip footnote definitions from ``text`` and store them by id.

        Lines inside fenced code blocks are left alone.
        """
        output = []
        fence = None
        for line in text.splitlines(keepends=True):
            marker = FENCE_RE.match(line)
            if fence is None and marker:
                fence = marker.group(1)
            elif fence is not None and marker and marker.group(1).startswith(fence):
                fence = None
            elif fence is None:
                definition = FOOTNOTE_DEF_RE.match(line)
                if definition:
                    self.footnotes[definition.group(1)] = definition.group(2)
                    continue
            output.append(line)
        return "".join(output)

    def render_text(self, text):
        """Render the inline markdown of a footnote definition."""
        html = markdown.markdown(text)
        match = PARAGRAPH_RE.match(html)
        return match.group(1) if match else html

    def next_position(self):
        position = self.current_position
        self.current_position += 1
        return position

    def record_reference(self, footnote_id, position):
        """Record a reference, keeping the earliest position seen for the id."""
        entry = self.references.get(footnote_id)
        if entry is None:
            self.references[footnote_id] = ReferenceEntry(id=footnote_id, position=position)
        elif entry.position is None or position < entry.position:
            entry.position = position

    def ordered_references(self):
        return sorted(self.references.values(), key=ReferenceEntry.sort_key)

    def postprocess(self, html):
        if not self.references:
            return html

        ordered = self.ordered_references()
        numbers = {entry.id: number for number, entry in enumerate(ordered, start=1)}

        def number_ref(m):
            number = numbers.get(m.group(2))
            if number is None:
                return m.group(0)
            return f"{m.group(1)}[{number}]{m.group(3)}"

        html = RENDERED_REF_RE.sub(number_ref, html)

        items = []
        for entry in ordered:
            entry.text = self.footnotes.get(entry.id, "")
            items.append(
                f'<li id="fn-{entry.id}">{self.render_text(entry.text)} '
                f'<a href="#fnref-{entry.id}" class="footnote-backref">↩︎</a></li>'
            )
        return f'{html}<section class="footnotes"><hr><ol>{"".join(items)}</ol></section>'

    def before_publish(self, html):
        """Fill in placeholder text for referenced ids that were never defined."""
        for footnote_id in self.references:
            if footnote_id in self.footnotes:
                continue
            placeholder = UNDEFINED_TEXT.format(footnote_id)
            logger.warning("Footnote %r is referenced but not defined", footnote_id)
            self.footnotes[footnote_id] = placeholder
            html = html.replace(
                f'<li id="fn-{footnote_id}"> ',
                f'<li id="fn-{footnote_id}">{escape(placeholder)} ',
                1,
            )
        return html

    def markdown_extension(self):
        return _FootnoteMarkdownExtension(self)
