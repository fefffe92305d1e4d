# omnicontent/markdown/config.py


def get_markdown_config():
    """
    Configuration for the Python-Markdown base renderer.

    Only the stock extensions live here. Obsidian specific syntax (callouts,
    embeds, math, footnotes, link footnotes) is contributed by the extensions in
    ``omnicontent.markdown.extensions`` and registered on top of this base.

    Note: ``fenced_code`` stays in the base so fences still render when the
    CodeRenderer extension is disabled. CodeRenderer registers its own fence
    preprocessor with a higher priority and takes over when enabled.
    """
    return {
        "extensions": [
            "tables",
            "fenced_code",
            # GitHub style line breaks, single newlines become <br>
            "nl2br",
            "sane_lists",
        ],
        "extension_configs": {},
        "output_format": "html",
        "tab_length": 4,
    }
