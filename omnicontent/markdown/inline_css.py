# omnicontent/markdown/inline_css.py
"""
Stylesheet for markup produced by the renderer extensions.

Platforms that strip <style> (WeChat) only keep what the Styles plugin copies
into inline style attributes, so every rule here is resolved against the final
DOM together with the theme css.
"""

INLINE_CSS = """
/* callout */
.ad {
  border: none;
  padding: 1em 1em 1em 1.5em;
  margin: 1em 0;
  border-radius: 4px;
}

.ad-title-wrap {
  font-size: 1em;
  font-weight: 600;
}

.ad-icon {
  width: 18px;
  height: 18px;
}

.ad-title {
  margin: 0 0 0 0.25em;
}

.ad-content {
  color: rgb(34, 34, 34);
}

/* note info todo */
.ad-note {
  color: rgb(8, 109, 221);
  background-color: rgba(8, 109, 221, 0.1);
}

/* abstract tip hint */
.ad-abstract {
  color: rgb(0, 191, 188);
  background-color: rgba(0, 191, 188, 0.1);
}

.ad-success {
  color: rgb(8, 185, 78);
  background-color: rgba(8, 185, 78, 0.1);
}

/* question help faq warning caution attention */
.ad-question {
  color: rgb(236, 117, 0);
  background-color: rgba(236, 117, 0, 0.1);
}

/* failure fail missing danger error bug */
.ad-failure {
  color: rgb(233, 49, 71);
  background-color: rgba(233, 49, 71, 0.1);
}

.ad-example {
  color: rgb(120, 82, 238);
  background-color: rgba(120, 82, 238, 0.1);
}

.ad-quote {
  color: rgb(158, 158, 158);
  background-color: rgba(158, 158, 158, 0.1);
}

/* math */
.block-math-svg {
  text-align: center;
  margin: 20px 0px;
}

/* text highlight */
.note-highlight {
  background-color: rgba(255, 208, 0, 0.4);
}

/* embeds */
.embed-missing {
  color: rgb(158, 158, 158);
}

/* footnotes */
.footnotes {
  font-size: 14px;
}

.footnote-url {
  color: rgb(136, 136, 136);
}
"""
