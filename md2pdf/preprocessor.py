#!/usr/bin/env python3
"""
Markdown preprocessor.
Validates and fixes common markdown formatting issues before conversion.

The fixes run as an ordered list of passes over placeholder-protected text
(see ``protector``), so code and URLs are never rewritten. Every pass is a
function ``text -> (text, fixes)``; the heading hierarchy fix runs after the
passes and the balance check reads the restored result.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from dataclasses import dataclass, field
from functools import reduce
from typing import Callable, List, Optional, Pattern, Sequence, Tuple

from .protector import CODE, FENCE, protect, token_pattern

PassResult = Tuple[str, List[str]]
NormalizationPass = Callable[[str], PassResult]

MAX_HEADING_LEVEL = 6
LONG_LINE_LIMIT = 500

ALERT_KEYWORDS = ("Remember", "Note", "Important", "Warning", "Caution")
ALERT_EMOJI = ("\u26a0\ufe0f", "\u26a0", "\u26a1", "\u2705", "\u274c",
               "\U0001f512", "\U0001f4a1", "\U0001f4ca", "\U0001f3af")


@dataclass
class PreprocessResult:
    """Normalized markdown with the fixes applied and the warnings found."""

    markdown: str
    fixes: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _unique(items: Sequence[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


# ---------------------------------------------------------------------------
# Pass 1: escaped emphasis
# ---------------------------------------------------------------------------

_ESCAPED_BOLD_RE = re.compile(r"\\?\*\\?\*[ \t]*([^*\n]+?)[ \t]*\\?\*\\?\*")


def fix_escaped_emphasis(text: str) -> PassResult:
    """Turn ``\\*\\*text\\*\\*`` back into bold when the escapes look accidental."""
    fixes = []

    def replace(match):
        original = match.group(0)
        if "\\*" not in original:
            return original
        fixed = f"**{match.group(1).strip()}**"
        fixes.append(f'Fixed escaped bold markers: "{original}" \u2192 "{fixed}"')
        return fixed

    return _ESCAPED_BOLD_RE.sub(replace, text), fixes


# ---------------------------------------------------------------------------
# Passes 2-3: spacing inside emphasis and strikethrough markers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _Marker:
    name: str
    token: str
    pattern: Pattern
    intraword: bool = True


_BOLD_STAR = _Marker("bold", "**", re.compile(r"(?<![*\\])\*\*(?!\*)"))
_BOLD_UNDERSCORE = _Marker("bold", "__", re.compile(r"(?<![_\\])__(?!_)"), intraword=False)
_ITALIC_STAR = _Marker("italic", "*", re.compile(r"(?<![*\\])\*(?!\*)"))
_ITALIC_UNDERSCORE = _Marker("italic", "_", re.compile(r"(?<![_\\])_(?!_)"), intraword=False)
_STRIKETHROUGH = _Marker("strikethrough", "~~", re.compile(r"(?<![~\\])~~(?!~)"))

_STAR_BULLET_RE = re.compile(r"^[ \t]*\*(?=[ \t])")


def _marker_positions(line: str, marker: _Marker) -> List[int]:
    positions = []
    for match in marker.pattern.finditer(line):
        start, end = match.span()
        if not marker.intraword:
            before = line[start - 1] if start > 0 else ""
            after = line[end] if end < len(line) else ""
            if before.isalnum() and after.isalnum():
                continue
        positions.append(start)
    if marker is _ITALIC_STAR:
        bullet = _STAR_BULLET_RE.match(line)
        if bullet and positions and positions[0] == bullet.end() - 1:
            positions = positions[1:]
    return positions


def _trim_marker_pairs(line: str, marker: _Marker) -> Tuple[str, List[str]]:
    """Strip whitespace just inside each marker pair of a single line.

    Markers are paired in order of appearance, so the number of markers on
    the line never changes and an unmatched marker stays unmatched.
    """
    positions = _marker_positions(line, marker)
    width = len(marker.token)
    pieces, repaired, cursor = [], [], 0

    for opening, closing in zip(positions[0::2], positions[1::2]):
        inner = line[opening + width:closing]
        trimmed = inner.strip()
        if not trimmed or trimmed == inner:
            continue
        pieces.append(line[cursor:opening + width])
        pieces.append(trimmed)
        cursor = closing
        repaired.append(line[opening:closing + width])

    if not repaired:
        return line, []
    pieces.append(line[cursor:])
    return "".join(pieces), repaired


def _trim_markers(text: str, markers: Sequence[_Marker]) -> PassResult:
    fixes = []
    lines = text.split("\n")
    for marker in markers:
        for index, line in enumerate(lines):
            lines[index], repaired = _trim_marker_pairs(line, marker)
            fixes.extend(
                f'Fixed {marker.name} formatting with extra spaces: "{span}"'
                for span in repaired
            )
    return "\n".join(lines), fixes


def fix_emphasis_spacing(text: str) -> PassResult:
    """Remove spaces just inside bold and italic markers."""
    return _trim_markers(text, (_BOLD_STAR, _BOLD_UNDERSCORE, _ITALIC_STAR, _ITALIC_UNDERSCORE))


def fix_strikethrough_spacing(text: str) -> PassResult:
    """Remove spaces just inside strikethrough markers."""
    return _trim_markers(text, (_STRIKETHROUGH,))


# ---------------------------------------------------------------------------
# Pass 4: inline code spacing
# ---------------------------------------------------------------------------

# Only CODE tokens qualify: their content has no internal whitespace.
_PADDED_CODE_RE = re.compile(
    r"(?P<ticks>`+)(?P<lead>[ \t]*)(?P<token>" + token_pattern(CODE)
    + r")(?P<trail>[ \t]*)(?P=ticks)"
)


def fix_inline_code_spacing(text: str) -> PassResult:
    """Strip padding inside single-word code spans; multi-word spans are kept."""
    fixes = []

    def replace(match):
        if not (match.group("lead") or match.group("trail")):
            return match.group(0)
        fixes.append(f'Fixed inline code formatting with extra spaces: "{match.group(0)}"')
        ticks = match.group("ticks")
        return f"{ticks}{match.group('token')}{ticks}"

    return _PADDED_CODE_RE.sub(replace, text), fixes


# ---------------------------------------------------------------------------
# Passes 5-7: block spacing
# ---------------------------------------------------------------------------

_HEADING_RE = re.compile(
    r"^(?P<indent>[ \t]{0,3})(?P<hashes>#{1,%d})(?P<rest>[ \t]+\S.*)$" % MAX_HEADING_LEVEL
)


def heading_level(line: str) -> int:
    """Level of an ATX heading line, or 0 when the line is not a heading."""
    match = _HEADING_RE.match(line)
    return len(match.group("hashes")) if match else 0


def ensure_blank_line_before_headings(text: str) -> PassResult:
    """Every heading except one on the first line gets a blank line above it."""
    fixed_lines: List[str] = []
    added = False

    for line in text.split("\n"):
        if heading_level(line) and fixed_lines and fixed_lines[-1].strip():
            fixed_lines.append("")
            added = True
        fixed_lines.append(line)

    fixes = ["Added blank line before header"] if added else []
    return "\n".join(fixed_lines), fixes


_EXCESS_NEWLINES_RE = re.compile(r"\n{4,}")


def collapse_blank_lines(text: str) -> PassResult:
    """Reduce runs of more than two blank lines to two."""
    collapsed = _EXCESS_NEWLINES_RE.sub("\n\n\n", text)
    if collapsed != text:
        return collapsed, ["Removed excessive blank lines (reduced to max 2 consecutive)"]
    return text, []


_BEFORE_FENCE_RE = re.compile(r"([^\n])\n(" + token_pattern(FENCE) + ")")
_AFTER_FENCE_RE = re.compile("(" + token_pattern(FENCE) + r")\n([^\n])")


def ensure_code_block_spacing(text: str) -> PassResult:
    """Put a blank line before and after every fenced code block."""
    fixes = []
    spaced, count = _BEFORE_FENCE_RE.subn(r"\1\n\n\2", text)
    if count:
        fixes.append("Added blank line before code block")
    spaced, count = _AFTER_FENCE_RE.subn(r"\1\n\n\2", spaced)
    if count:
        fixes.append("Added blank line after code block")
    return spaced, fixes


# ---------------------------------------------------------------------------
# Pass 8: concatenated words
# ---------------------------------------------------------------------------

# Blunt heuristic: also splits camel-case names in prose ("JavaScript").
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")

KNOWN_CONCATENATIONS: Tuple[Tuple[Pattern, str], ...] = (
    (re.compile(r"(are)(official|tested|verified)", re.IGNORECASE), r"\1 \2"),
    (re.compile(r"(tested|verified)(and)", re.IGNORECASE), r"\1 \2"),
    (re.compile(r"(reports)(Internal|External)", re.IGNORECASE), r"\1\n\n\2"),
    (re.compile(r"systems\.---"), "systems.\n\n---"),
)


def fix_concatenated_words(text: str) -> PassResult:
    """Insert spaces lost between words (OCR / copy-paste damage)."""
    fixes = []
    text, count = _CAMEL_BOUNDARY_RE.subn(r"\1 \2", text)
    if count:
        fixes.append(f"Inserted missing spaces between concatenated words ({count} places)")

    for pattern, replacement in KNOWN_CONCATENATIONS:
        text, count = pattern.subn(replacement, text)
        if count:
            fixes.append(f"Fixed concatenated words: /{pattern.pattern}/")
    return text, fixes


# ---------------------------------------------------------------------------
# Passes 9-10: lists and alert labels
# ---------------------------------------------------------------------------

_LIST_MARKER_RE = re.compile(r"^([ \t]*[*+-])[ \t]{2,}(?=\S)", re.MULTILINE)


def normalize_list_markers(text: str) -> PassResult:
    """Use exactly one space after a bullet marker."""
    normalized, count = _LIST_MARKER_RE.subn(r"\1 ", text)
    if count:
        return normalized, ["Normalized spacing after list markers"]
    return text, []


_ALERT_LINE_RE = re.compile(
    r"^(?P<prefix>[ \t]*(?:>[ \t]*)*)(?P<label>" + "|".join(ALERT_KEYWORDS) + r"):(?=[ \t]|$)",
    re.MULTILINE,
)
_EMOJI_LABEL_RE = re.compile(
    r"(\S)[ \t]*(" + "|".join(ALERT_EMOJI) + r")[ \t]*([A-Z][A-Za-z ]*:)"
)


def format_alert_lines(text: str) -> PassResult:
    """Bold leading "Note:"-style labels and start emoji alerts on their own line."""
    fixes = []

    def bold_label(match):
        fixes.append(f'Formatted "{match.group("label")}:" label as bold')
        return f"{match.group('prefix')}**{match.group('label')}:**"

    text = _ALERT_LINE_RE.sub(bold_label, text)
    text, count = _EMOJI_LABEL_RE.subn(r"\1\n\n\2 \3", text)
    if count:
        fixes.append("Moved alert labels onto their own line")
    return text, fixes


NORMALIZATION_PASSES: Tuple[NormalizationPass, ...] = (
    fix_escaped_emphasis,
    fix_emphasis_spacing,
    fix_strikethrough_spacing,
    fix_inline_code_spacing,
    ensure_blank_line_before_headings,
    collapse_blank_lines,
    ensure_code_block_spacing,
    fix_concatenated_words,
    normalize_list_markers,
    format_alert_lines,
)


def run_passes(text: str, passes: Sequence[NormalizationPass] = NORMALIZATION_PASSES) -> PassResult:
    """Apply the passes in order, collecting their fixes in execution order."""
    def apply(state, normalize):
        current, fixes = state
        current, new_fixes = normalize(current)
        return current, fixes + new_fixes

    return reduce(apply, passes, (text, []))


# ---------------------------------------------------------------------------
# Heading hierarchy
# ---------------------------------------------------------------------------

def _heading_step(last_level: int, line: str) -> Tuple[int, str, Optional[str]]:
    """Process one line given the level of the last heading seen.

    Returns the new last level, the (possibly rewritten) line and a fix
    description when the line was demoted.
    """
    match = _HEADING_RE.match(line)
    if not match:
        return last_level, line, None

    level = len(match.group("hashes"))
    if last_level and level > last_level + 1:
        emitted = last_level + 1
        fixed = f"{match.group('indent')}{'#' * emitted}{match.group('rest')}"
        fix = (f'Fixed heading hierarchy: "{line.strip()}" demoted from level '
               f"{level} to level {emitted}")
        return emitted, fixed, fix
    return level, line, None


def fix_heading_hierarchy(text: str) -> PassResult:
    """Clamp headings that skip levels to one below the previous heading."""
    last_level = 0
    lines, fixes = [], []
    for line in text.split("\n"):
        last_level, line, fix = _heading_step(last_level, line)
        lines.append(line)
        if fix:
            fixes.append(fix)
    return "\n".join(lines), fixes


# ---------------------------------------------------------------------------
# Balance checks and validation
# ---------------------------------------------------------------------------

_THEMATIC_BREAK_RE = re.compile(r"^[ \t]*(?:\*[ \t]*){3,}$", re.MULTILINE)
_BULLET_MARKER_RE = re.compile(r"^[ \t]*\*[ \t]+", re.MULTILINE)
_SINGLE_STAR_RE = re.compile(r"(?<!\*)\*(?!\*)")


def check_balance(text: str) -> List[str]:
    """Warnings about markers left unmatched in the final text. Advisory only."""
    warnings = []
    emphasis_text = _BULLET_MARKER_RE.sub("", _THEMATIC_BREAK_RE.sub("", text))

    if len(re.findall(r"\*\*", emphasis_text)) % 2 != 0:
        warnings.append("Unbalanced bold markers (**) detected. Please check your markdown.")

    if len(_SINGLE_STAR_RE.findall(emphasis_text)) % 2 != 0:
        warnings.append("Unbalanced italic markers (*) detected. Please check your markdown.")

    if text.count("`") % 2 != 0:
        warnings.append("Unbalanced inline code markers (`) detected. Please check your markdown.")

    if "\\*" in text:
        warnings.append("Escaped formatting markers detected. If you want actual formatting, "
                        "remove the backslashes.")
    return warnings


# A single-star pair inside a bold pair on one line
_NESTED_EMPHASIS_RE = re.compile(
    r"\*\*[^*\n]*(?<!\*)\*(?!\*)[^*\n]+(?<!\*)\*(?!\*)[^*\n]*\*\*"
)


def validate_markdown(markdown: str) -> List[str]:
    """Report issues that may render badly but are not worth rewriting."""
    issues = []

    for index, line in enumerate(markdown.split("\n"), start=1):
        if len(line) > LONG_LINE_LIMIT and not line.lstrip().startswith("```"):
            issues.append(f"Line {index} is very long ({len(line)} chars). "
                          f"Consider adding line breaks.")

    if _NESTED_EMPHASIS_RE.search(markdown):
        issues.append("Nested bold and italic formatting detected. This may render unexpectedly.")

    return issues


def preprocess_markdown(markdown: str) -> PreprocessResult:
    """Fix common formatting issues and report what could not be fixed."""
    protected = protect(markdown)

    masked, fixes = run_passes(protected.text)
    masked, heading_fixes = fix_heading_hierarchy(masked)

    processed = protected.restore(masked)
    fixes = _unique([protected.restore(fix) for fix in fixes + heading_fixes])

    return PreprocessResult(
        markdown=processed,
        fixes=fixes,
        warnings=check_balance(processed),
    )
