#!/usr/bin/env python3
"""
Markdown to PDF rendering using Playwright (Puppeteer approach).

One browser and one page are created for every conversion and closed again
whatever the outcome; nothing is pooled or shared between conversions.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import asyncio
import html
import re
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from playwright.async_api import async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .console import ConsoleLogger
from .errors import ConversionError, HardRenderTimeout, InternalRenderError, SoftDiagramTimeout, ValidationError
from .markdown_html import has_diagrams, markdown_to_html
from .pages import count_pdf_file_pages, format_bytes
from .styles import get_first_page_watermark_styles, get_mermaid_styles, get_styles

PAPER_FORMATS = ("letter", "legal", "tabloid", "ledger", "a0", "a1", "a2", "a3", "a4", "a5", "a6")
ORIENTATIONS = ("portrait", "landscape")
WATERMARK_SCOPES = ("all-pages", "first-page")
CODE_THEME_NAMES = ("light", "dark")

MAX_CONTENT_BYTES = 10 * 1024 * 1024
WATERMARK_MAX_LENGTH = 15
LARGE_DOCUMENT_LINES = 1300

BASE_TIMEOUT_MS = 30000
PER_LINE_TIMEOUT_MS = 10
MAX_LINE_TIMEOUT_MS = 270000
DIAGRAM_TIMEOUT_MS = 30000

MERMAID_SCRIPT_URL = "https://cdn.jsdelivr.net/npm/mermaid@10/dist/mermaid.min.js"

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--font-render-hinting=none",
    "--js-flags=--max-old-space-size=4096",
    "--disable-extensions",
    "--disable-background-networking",
    "--disable-sync",
    "--disable-translate",
    "--metrics-recording-only",
    "--no-first-run",
]
VIEWPORT = {"width": 1200, "height": 800}

FONTS_READY_JS = "() => document.fonts.ready.then(() => true)"

# Every diagram container ends with either an <svg> or the error marker class
DIAGRAMS_READY_JS = """
() => {
    const diagrams = document.querySelectorAll('.mermaid');
    if (diagrams.length === 0) return true;
    return Array.from(diagrams).every(
        (node) => node.querySelector('svg') !== null || node.classList.contains('mermaid-error')
    );
}
"""

EMPTY_TEMPLATE = "<span></span>"
TEMPLATE_STYLE = ("font-size: 9px; width: 100%; padding: 0 20px; color: #666; "
                  "font-family: 'IBM Plex Serif', serif;")


@dataclass(frozen=True)
class RenderOptions:
    """Resolved rendering settings for a single conversion."""

    paper_format: str = "letter"
    orientation: str = "portrait"
    margin: str = "2cm"
    watermark_text: Optional[str] = None
    watermark_scope: str = "all-pages"
    show_page_numbers: bool = False
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    code_theme: str = "light"
    custom_styles: Optional[str] = None

    @property
    def watermark(self) -> Optional[str]:
        """Watermark as printed: at most 15 characters, upper-cased."""
        if not self.watermark_text:
            return None
        return self.watermark_text[:WATERMARK_MAX_LENGTH].upper()

    @property
    def header_footer_enabled(self) -> bool:
        return bool(self.show_page_numbers or self.header_text or self.footer_text)

    @property
    def landscape(self) -> bool:
        return self.orientation == "landscape"


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of one conversion; failures carry ``error`` and ``error_stage``."""

    success: bool
    artifact_path: Path
    page_count: Optional[int] = None
    content_size: Optional[int] = None
    line_count: Optional[int] = None
    processing_time_ms: Optional[int] = None
    has_diagrams: Optional[bool] = None
    error: Optional[str] = None
    error_stage: Optional[str] = None
    fixes: Tuple[str, ...] = field(default_factory=tuple)
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["artifact_path"] = str(self.artifact_path)
        payload["fixes"] = list(self.fixes)
        payload["warnings"] = list(self.warnings)
        return payload


def compute_timeout_ms(line_count: int, diagrams: bool = False) -> int:
    """Content timeout: 30s base, plus 10ms per line up to 270s, plus 30s for diagrams."""
    additional = min(max(line_count, 0) * PER_LINE_TIMEOUT_MS, MAX_LINE_TIMEOUT_MS)
    return BASE_TIMEOUT_MS + additional + (DIAGRAM_TIMEOUT_MS if diagrams else 0)


def validate_content(markdown: str) -> Tuple[int, int]:
    """Reject empty or oversized content; returns (byte size, line count)."""
    if not markdown or not markdown.strip():
        raise ValidationError("Markdown content is empty")

    content_size = len(markdown.encode("utf-8"))
    if content_size > MAX_CONTENT_BYTES:
        raise ValidationError(
            f"Markdown content exceeds {MAX_CONTENT_BYTES // (1024 * 1024)}MB limit "
            f"({format_bytes(content_size)})"
        )
    return content_size, markdown.count("\n") + 1


def extract_title(markdown: str, fallback: str = "Document") -> str:
    """Document title from the first H1 (ATX or setext), else ``fallback``."""
    lines = markdown.splitlines()
    for line in lines:
        stripped = line.strip()
        if stripped.startswith("# "):
            heading_text = stripped[2:].strip()
            if heading_text:
                return heading_text

    for current, underline in zip(lines, lines[1:]):
        if current.strip() and re.fullmatch(r"=+", underline.strip()):
            return current.strip()

    return fallback


def build_diagram_script(code_theme: str = "light") -> str:
    """Script that renders every ``.mermaid`` block and marks failures."""
    theme = "dark" if code_theme == "dark" else "default"
    return f"""
<script src="{MERMAID_SCRIPT_URL}"></script>
<script>
    document.addEventListener('DOMContentLoaded', async function() {{
        const diagrams = Array.from(document.querySelectorAll('.mermaid'));
        const markFailed = (node, err) => {{
            node.classList.add('mermaid-error');
            node.setAttribute('data-error', String(err));
            console.error('Mermaid render error:', err);
        }};
        if (typeof mermaid === 'undefined') {{
            diagrams.forEach((node) => markFailed(node, 'mermaid library not available'));
            return;
        }}
        mermaid.initialize({{
            startOnLoad: false,
            theme: '{theme}',
            securityLevel: 'loose',
            flowchart: {{ useMaxWidth: true, htmlLabels: true, curve: 'basis' }},
            sequence: {{ useMaxWidth: true, wrap: true }},
            gantt: {{ useMaxWidth: true }}
        }});
        for (const node of diagrams) {{
            try {{
                await mermaid.run({{ nodes: [node] }});
            }} catch (err) {{
                markFailed(node, err);
            }}
        }}
    }});
</script>
"""


def build_html_document(content: str, options: RenderOptions, include_diagrams: bool = False,
                        title: str = "Document") -> str:
    """Wrap converted HTML in a full document with styles, watermark and diagram script.

    Custom styles come after every built-in stylesheet so they win ties.
    """
    style_blocks = [f"<style>{get_styles(options.code_theme)}</style>"]
    if include_diagrams:
        style_blocks.append(f"<style>{get_mermaid_styles()}</style>")
    if options.custom_styles:
        style_blocks.append(f"<style>/* Custom User CSS */\n{options.custom_styles}</style>")
    if options.watermark_scope == "first-page":
        style_blocks.append(f"<style>{get_first_page_watermark_styles()}</style>")

    script = build_diagram_script(options.code_theme) if include_diagrams else ""

    watermark_html = ""
    if options.watermark:
        scope_class = " first-page-only" if options.watermark_scope == "first-page" else ""
        watermark_html = f'<div class="watermark{scope_class}">{html.escape(options.watermark)}</div>'

    styles = "\n    ".join(style_blocks)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{html.escape(title)}</title>
    {styles}
    {script}
</head>
<body>
    {watermark_html}
    <div class="content">
{content}
    </div>
</body>
</html>
"""


def build_header_template(options: RenderOptions) -> str:
    """Centered header text, or an empty placeholder."""
    if not options.header_text:
        return EMPTY_TEMPLATE
    return (f'<div style="{TEMPLATE_STYLE} text-align: center;">'
            f'{html.escape(options.header_text)}</div>')


def build_footer_template(options: RenderOptions) -> str:
    """Footer text on the left and "Page N of M" on the right."""
    if not (options.show_page_numbers or options.footer_text):
        return EMPTY_TEMPLATE
    page_counter = ""
    if options.show_page_numbers:
        page_counter = ('<span>Page <span class="pageNumber"></span> of '
                        '<span class="totalPages"></span></span>')
    return (f'<div style="{TEMPLATE_STYLE} display: flex; justify-content: space-between;">'
            f'<span>{html.escape(options.footer_text or "")}</span>{page_counter}</div>')


class PdfRenderer:
    """Render orchestrator: markdown in, paginated PDF out."""

    def __init__(self, logger: Optional[ConsoleLogger] = None,
                 playwright_factory: Callable[[], Any] = async_playwright,
                 markdown_renderer: Callable[[str], str] = markdown_to_html):
        self.logger = logger or ConsoleLogger()
        self._playwright_factory = playwright_factory
        self._markdown_renderer = markdown_renderer

    async def render(self, markdown: str, output_path: Path,
                     options: Optional[RenderOptions] = None) -> ConversionResult:
        """Convert markdown to a PDF at ``output_path``. Never raises."""
        options = options or RenderOptions()
        output_path = Path(output_path)
        start = time.perf_counter()

        def elapsed_ms() -> int:
            return int((time.perf_counter() - start) * 1000)

        try:
            content_size, line_count = validate_content(markdown)
            diagrams = has_diagrams(markdown)
            timeout_ms = compute_timeout_ms(line_count, diagrams)

            self.logger.info(f"Converting markdown to PDF: {output_path} "
                             f"({format_bytes(content_size)}, {line_count} lines)")
            self.logger.debug(f"Render timeout: {timeout_ms / 1000:.0f}s")
            if line_count > LARGE_DOCUMENT_LINES:
                self.logger.warning(f"Large file detected ({line_count} lines). "
                                    f"Processing may take longer.")

            output_path.parent.mkdir(parents=True, exist_ok=True)
            document = build_html_document(
                self._markdown_renderer(markdown),
                options,
                include_diagrams=diagrams,
                title=extract_title(markdown, fallback=output_path.stem),
            )
            await self._render_session(document, output_path, options, timeout_ms, diagrams)
            page_count = count_pdf_file_pages(output_path)

        except ConversionError as e:
            self.logger.error(f"Failed to convert markdown to PDF ({e.stage}): {e.message}")
            return ConversionResult(success=False, artifact_path=output_path, error=e.message,
                                    error_stage=e.stage, processing_time_ms=elapsed_ms())
        except Exception as e:
            error = InternalRenderError(str(e) or e.__class__.__name__)
            self.logger.error(f"Failed to convert markdown to PDF: {error.message}")
            return ConversionResult(success=False, artifact_path=output_path, error=error.message,
                                    error_stage=error.stage, processing_time_ms=elapsed_ms())

        self.logger.success(f"Converted markdown to {output_path.name} ({page_count} pages)")
        return ConversionResult(
            success=True,
            artifact_path=output_path,
            page_count=page_count,
            content_size=content_size,
            line_count=line_count,
            processing_time_ms=elapsed_ms(),
            has_diagrams=diagrams,
        )

    async def _render_session(self, document: str, output_path: Path, options: RenderOptions,
                              timeout_ms: int, diagrams: bool) -> None:
        async with self._playwright_factory() as p:
            browser = await p.chromium.launch(headless=True, args=BROWSER_ARGS)
            try:
                page = await browser.new_page(viewport=VIEWPORT, device_scale_factor=2)

                try:
                    await page.set_content(document, wait_until="networkidle", timeout=timeout_ms)
                except PlaywrightTimeoutError as e:
                    raise HardRenderTimeout(
                        f"Content did not finish loading within {timeout_ms / 1000:.0f}s"
                    ) from e

                await page.evaluate(FONTS_READY_JS)

                if diagrams:
                    try:
                        await self._wait_for_diagrams(page)
                    except SoftDiagramTimeout as e:
                        self.logger.warning(e.message)

                self.logger.debug(f"Generating PDF ({options.paper_format}, {options.orientation}, "
                                  f"margin {options.margin})")
                try:
                    await asyncio.wait_for(
                        page.pdf(
                            path=str(output_path),
                            format=options.paper_format,
                            landscape=options.landscape,
                            margin={
                                'top': options.margin,
                                'right': options.margin,
                                'bottom': options.margin,
                                'left': options.margin,
                            },
                            print_background=True,
                            display_header_footer=options.header_footer_enabled,
                            header_template=build_header_template(options),
                            footer_template=build_footer_template(options),
                        ),
                        timeout=timeout_ms / 1000,
                    )
                except asyncio.TimeoutError as e:
                    raise HardRenderTimeout(
                        f"PDF export did not finish within {timeout_ms / 1000:.0f}s"
                    ) from e
            finally:
                await browser.close()

    async def _wait_for_diagrams(self, page) -> None:
        """Wait until every diagram rendered or failed; raises SoftDiagramTimeout."""
        try:
            await page.wait_for_function(DIAGRAMS_READY_JS, timeout=DIAGRAM_TIMEOUT_MS)
        except PlaywrightTimeoutError as e:
            raise SoftDiagramTimeout(
                f"Diagram rendering timed out after {DIAGRAM_TIMEOUT_MS // 1000}s, "
                f"continuing with available content"
            ) from e
