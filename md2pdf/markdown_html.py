#!/usr/bin/env python3
"""
Markdown to HTML conversion with syntax highlighting and diagram blocks.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import html
import re
from typing import Optional

from markdown_it import MarkdownIt
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

DIAGRAM_LANGUAGE = "mermaid"

_DIAGRAM_FENCE_RE = re.compile(r"^[ \t]*(?:`{3,}|~{3,})[ \t]*mermaid\b", re.IGNORECASE | re.MULTILINE)


def has_diagrams(markdown: str) -> bool:
    """Check if markdown contains mermaid diagram blocks."""
    return bool(_DIAGRAM_FENCE_RE.search(markdown))


class CodeBlockRenderer:
    """Renders fenced code: diagrams as mermaid containers, the rest highlighted."""

    def __init__(self, formatter: Optional[HtmlFormatter] = None):
        self.formatter = formatter or HtmlFormatter(nowrap=True)

    def fence(self, code: str, info: Optional[str]) -> str:
        lang = info.strip().split()[0].lower() if info and info.strip() else ""

        if lang == DIAGRAM_LANGUAGE:
            return f'<div class="mermaid">{html.escape(code)}</div>\n'

        try:
            lexer = get_lexer_by_name(lang) if lang else None
        except ClassNotFound:
            lexer = None

        if lexer is None:
            body, language = html.escape(code), "plaintext"
        else:
            body, language = highlight(code, lexer, self.formatter), lang
        return (f'<pre class="highlight"><code class="language-{html.escape(language)}">'
                f'{body}</code></pre>\n')


def build_markdown_parser(renderer: Optional[CodeBlockRenderer] = None) -> MarkdownIt:
    """GFM-like parser with task lists and custom fence rendering."""
    renderer = renderer or CodeBlockRenderer()
    md = MarkdownIt("gfm-like", {"html": True, "linkify": True})
    md.use(tasklists_plugin)

    def fence_rule(tokens, idx, options, env):
        token = tokens[idx]
        return renderer.fence(token.content, token.info)

    md.renderer.rules["fence"] = fence_rule
    return md


def markdown_to_html(markdown: str) -> str:
    """Convert markdown to an HTML fragment (no document envelope)."""
    return build_markdown_parser().render(markdown)
