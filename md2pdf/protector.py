#!/usr/bin/env python3
"""
Reversible masking of spans the markdown fixes must never rewrite.

Fenced and indented code blocks, inline code contents, link destinations
and raw URLs are swapped for opaque tokens before the normalization passes
run and put back afterwards. Tokens are wrapped in Unicode private-use
characters, so they cannot be confused with emphasis markers, word
boundaries or newlines.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from dataclasses import dataclass
from typing import Tuple

TOKEN_OPEN = "\ue000"
TOKEN_CLOSE = "\ue001"

# Token kinds
FENCE = "F"
INDENTED = "I"     # indented code block
CODE = "C"          # inline code content without internal whitespace
SPACED_CODE = "S"   # inline code content with internal whitespace or backticks
URL = "U"

TOKEN_RE = re.compile(TOKEN_OPEN + r"([A-Z])(\d+)" + TOKEN_CLOSE)

# Spans found by the later stages never swallow an earlier token
_NO_TOKEN = TOKEN_OPEN + TOKEN_CLOSE

# A fence left open runs to the end of the document. A backtick fence's info
# string cannot contain backticks, so ```x``` at the start of a line stays inline.
_FENCED_BLOCK_RE = re.compile(
    r"^[ \t]*(?P<fence>`{3,}(?=[^`\n]*$)|~{3,})[^\n]*"
    r"(?:\n.*?^[ \t]*(?P=fence)[ \t]*$|.*\Z)",
    re.MULTILINE | re.DOTALL,
)
# Indented code: whole lines indented by four spaces or a tab, after a blank
# line. A block opening with a list marker is a nested list, not code.
_INDENTED_LINE = r"(?: {4}|\t)[^\n" + _NO_TOKEN + r"]*(?![^\n])"
_INDENTED_BLOCK_RE = re.compile(
    r"(?:\A|(?<=\n\n))(?![ \t]*(?:[-*+]|\d+[.)])[ \t])"
    + _INDENTED_LINE + r"(?:\n" + _INDENTED_LINE + r")*"
)
# Inline code may wrap onto the next line, but not across a blank line or into a new block
_CODE_LINE_BREAK = r"\n(?![ \t]*(?:\n|#|>|[-*+][ \t]|\d+[.)][ \t]))"
_INLINE_CODE_RE = re.compile(
    r"(?<!`)(?P<ticks>`+)(?!`)(?P<body>(?:[^\n" + _NO_TOKEN + r"]|" + _CODE_LINE_BREAK + r")+?)"
    r"(?<!`)(?P=ticks)(?!`)"
)
_LINK_DEST_RE = re.compile(r"(?P<head>\]\()(?P<dest>[^)\s" + _NO_TOKEN + r"]+)")
_REF_DEF_RE = re.compile(
    r"^(?P<head>[ \t]{0,3}\[[^\]\n]+\]:[ \t]*)(?P<dest>[^\s" + _NO_TOKEN + r"]+)",
    re.MULTILINE,
)
_RAW_URL_RE = re.compile(r"(?:https?|ftp)://[^\s<>()\[\]*`" + _NO_TOKEN + r"]+")


def make_token(kind: str, index: int) -> str:
    """Build the token text for one protected span."""
    return f"{TOKEN_OPEN}{kind}{index}{TOKEN_CLOSE}"


def token_pattern(kind: str) -> str:
    """Regex source matching any token of the given kind."""
    return TOKEN_OPEN + kind + r"\d+" + TOKEN_CLOSE


@dataclass(frozen=True)
class ProtectedText:
    """Masked text plus the table of spans it stands for.

    ``spans[i]`` is the original text behind every token with index ``i``.
    """

    text: str
    spans: Tuple[str, ...]

    def restore(self, text: str) -> str:
        """Expand every token in ``text`` using this table."""
        return restore(text, self.spans)


class _SpanTable:
    """Collects spans for a single ``protect`` call."""

    def __init__(self):
        self.spans = []

    def add(self, kind: str, span: str) -> str:
        self.spans.append(span)
        return make_token(kind, len(self.spans) - 1)


def _protect_fences(text: str, table: _SpanTable) -> str:
    return _FENCED_BLOCK_RE.sub(lambda m: table.add(FENCE, m.group(0)), text)


def _protect_indented_code(text: str, table: _SpanTable) -> str:
    return _INDENTED_BLOCK_RE.sub(lambda m: table.add(INDENTED, m.group(0)), text)


def _protect_inline_code(text: str, table: _SpanTable) -> str:
    def replace(match):
        ticks, body = match.group("ticks"), match.group("body")
        core = body.strip()
        if not core:
            return match.group(0)
        start = body.index(core)
        lead, trail = body[:start], body[start + len(core):]
        kind = SPACED_CODE if re.search(r"[\s`]", core) else CODE
        return f"{ticks}{lead}{table.add(kind, core)}{trail}{ticks}"

    return _INLINE_CODE_RE.sub(replace, text)


def _protect_urls(text: str, table: _SpanTable) -> str:
    def keep_head(match):
        return match.group("head") + table.add(URL, match.group("dest"))

    text = _LINK_DEST_RE.sub(keep_head, text)
    text = _REF_DEF_RE.sub(keep_head, text)
    return _RAW_URL_RE.sub(lambda m: table.add(URL, m.group(0)), text)


def protect(text: str) -> ProtectedText:
    """Mask code first (fenced, indented, then inline), then link destinations and URLs."""
    table = _SpanTable()
    masked = _protect_fences(text, table)
    masked = _protect_indented_code(masked, table)
    masked = _protect_inline_code(masked, table)
    masked = _protect_urls(masked, table)
    return ProtectedText(text=masked, spans=tuple(table.spans))


def restore(text: str, spans: Tuple[str, ...]) -> str:
    """Replace tokens with their original spans.

    Token-shaped text whose index is not in the table is left alone.
    """
    def replace(match):
        index = int(match.group(2))
        if index < len(spans):
            return spans[index]
        return match.group(0)

    return TOKEN_RE.sub(replace, text)
