#!/usr/bin/env python3
"""
Conversion service: validates a request, preprocesses the markdown and
hands it to the renderer.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import Config
from .console import ConsoleLogger
from .errors import ConversionError, ValidationError
from .pages import format_bytes, format_duration, reserve_unique_filename
from .preprocessor import preprocess_markdown, validate_markdown
from .renderer import (
    CODE_THEME_NAMES,
    ORIENTATIONS,
    PAPER_FORMATS,
    WATERMARK_MAX_LENGTH,
    WATERMARK_SCOPES,
    ConversionResult,
    PdfRenderer,
    RenderOptions,
    validate_content,
)

DEFAULT_OUTPUT_FILENAME = "output.pdf"
DEFAULT_MARGIN = "2cm"
MAX_MARGIN_INCHES = 3

_MARGIN_RE = re.compile(r'^(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)\s*(cm|in|mm|pt|px)?$')
_UNITS_PER_INCH = {"in": 1, "cm": 2.54, "mm": 25.4, "pt": 72, "px": 96}


def validate_margin(margin_str: str) -> str:
    """Validate and normalize a single margin value."""
    match = _MARGIN_RE.match(margin_str.strip())
    if not match:
        raise ValidationError(f"Invalid margin format: '{margin_str}'. Use format like '1in', '2.5cm', '10mm', etc.")

    value_str, unit = match.groups()
    value = float(value_str)

    # Set default unit to 'in' if not specified
    unit = unit or 'in'
    value_inches = value / _UNITS_PER_INCH[unit]

    if value_inches < 0:
        raise ValidationError(f"Margin cannot be negative: '{margin_str}'. Minimum value is 0.")
    if value_inches > MAX_MARGIN_INCHES:
        raise ValidationError(f"Margin too large: '{margin_str}'. Maximum value is 3 inches (7.62cm).")

    return f"{value:g}{unit}"


def _choice(payload: Mapping[str, Any], key: str, choices, default: str, label: str) -> str:
    value = payload.get(key) or default
    if value not in choices:
        raise ValidationError(f"Invalid {label}. Must be one of: {', '.join(choices)}")
    return value


def _optional_text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid '{key}' parameter: expected a string")
    return value


@dataclass(frozen=True)
class ConversionRequest:
    """One conversion: markdown text plus rendering options."""

    markdown: str
    output_filename: str = DEFAULT_OUTPUT_FILENAME
    paper_format: str = "letter"
    paper_orientation: str = "portrait"
    margin: str = DEFAULT_MARGIN
    watermark: Optional[str] = None
    watermark_scope: str = "all-pages"
    show_page_numbers: bool = False
    header_text: Optional[str] = None
    footer_text: Optional[str] = None
    code_theme: str = "light"
    custom_css: Optional[str] = None
    skip_preprocessing: bool = False

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ConversionRequest":
        """Build a request from camelCase request fields, validating each one."""
        markdown = payload.get("markdown")
        if not markdown or not isinstance(markdown, str):
            raise ValidationError("Missing or invalid 'markdown' parameter")

        watermark = _optional_text(payload, "watermark")
        if watermark:
            watermark = watermark[:WATERMARK_MAX_LENGTH].upper()

        return cls(
            markdown=markdown,
            output_filename=_optional_text(payload, "outputFilename") or DEFAULT_OUTPUT_FILENAME,
            paper_format=_choice(payload, "paperFormat", PAPER_FORMATS, "letter", "paper format"),
            paper_orientation=_choice(payload, "paperOrientation", ORIENTATIONS, "portrait",
                                      "paper orientation"),
            margin=validate_margin(_optional_text(payload, "margin") or DEFAULT_MARGIN),
            watermark=watermark,
            watermark_scope=_choice(payload, "watermarkScope", WATERMARK_SCOPES, "all-pages",
                                    "watermark scope"),
            show_page_numbers=bool(payload.get("showPageNumbers", False)),
            header_text=_optional_text(payload, "headerText"),
            footer_text=_optional_text(payload, "footerText"),
            code_theme=_choice(payload, "codeTheme", CODE_THEME_NAMES, "light", "code theme"),
            custom_css=_optional_text(payload, "customCss"),
            skip_preprocessing=bool(payload.get("skipPreprocessing", False)),
        )

    def to_render_options(self) -> RenderOptions:
        return RenderOptions(
            paper_format=self.paper_format,
            orientation=self.paper_orientation,
            margin=self.margin,
            watermark_text=self.watermark,
            watermark_scope=self.watermark_scope,
            show_page_numbers=self.show_page_numbers,
            header_text=self.header_text,
            footer_text=self.footer_text,
            code_theme=self.code_theme,
            custom_styles=self.custom_css,
        )


@dataclass(frozen=True)
class ConversionResponse:
    """What the caller gets back: a report message and, when rendered, the result."""

    success: bool
    message: str
    result: Optional[ConversionResult] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"success": self.success, "message": self.message}
        if self.result is not None:
            payload["result"] = self.result.to_dict()
        return payload


def output_path_for(filename: str, output_dir: Union[str, Path]) -> Path:
    """Requested output path inside ``output_dir`` with a .pdf suffix."""
    name = filename if filename.lower().endswith(".pdf") else f"{filename}.pdf"
    return Path(output_dir).expanduser() / name


def format_success_message(request: ConversionRequest, result: ConversionResult) -> str:
    """Human-readable report of a successful conversion."""
    lines = [
        "Successfully created PDF",
        "",
        f"Output: {result.artifact_path}",
        f"Pages: {result.page_count or 'Unknown'}",
        f"Format: {request.paper_format} ({request.paper_orientation})",
    ]

    if result.content_size:
        lines.append(f"Size: {format_bytes(result.content_size)} ({result.line_count} lines)")
    if result.processing_time_ms:
        lines.append(f"Processing Time: {format_duration(result.processing_time_ms)}")
    if result.has_diagrams:
        lines.append("Mermaid Diagrams: Rendered")
    if request.watermark:
        lines.append(f'Watermark: "{request.watermark}" ({request.watermark_scope})')
    if request.show_page_numbers:
        lines.append("Page Numbers: Enabled")

    if result.fixes:
        lines.extend(["", "Markdown Fixes Applied:"])
        lines.extend(f"   • {fix}" for fix in result.fixes)
    if result.warnings:
        lines.extend(["", "Warnings:"])
        lines.extend(f"   • {warning}" for warning in result.warnings)

    return "\n".join(lines)


async def convert_markdown(request: Union[ConversionRequest, Mapping[str, Any]],
                           config: Optional[Config] = None,
                           logger: Optional[ConsoleLogger] = None,
                           renderer: Optional[PdfRenderer] = None) -> ConversionResponse:
    """Handle one conversion request. Failures come back as a response, never raised."""
    config = config or Config()
    logger = logger or ConsoleLogger(verbose=config.is_verbose())
    renderer = renderer or PdfRenderer(logger)

    try:
        if not isinstance(request, ConversionRequest):
            request = ConversionRequest.from_dict(request)
    except ValidationError as e:
        logger.error(f"Invalid conversion request: {e.message}")
        return ConversionResponse(success=False, message=f"Invalid request: {e.message}")

    # Size and emptiness are checked before any preprocessing work is spent
    output_path = output_path_for(request.output_filename, config.get_output_dir())
    try:
        validate_content(request.markdown)
        output_path = reserve_unique_filename(output_path)
    except ConversionError as e:
        return _failed(ConversionResult(success=False, artifact_path=output_path,
                                        error=e.message, error_stage=e.stage), logger)
    except OSError as e:
        return _failed(ConversionResult(success=False, artifact_path=output_path,
                                        error=f"Cannot create output file: {e.strerror or e}",
                                        error_stage="output"), logger)

    markdown = request.markdown
    fixes: List[str] = []
    warnings: List[str] = []

    if not request.skip_preprocessing:
        preprocessed = preprocess_markdown(markdown)
        markdown = preprocessed.markdown
        fixes = list(preprocessed.fixes)
        warnings = list(preprocessed.warnings) + validate_markdown(markdown)

        if fixes:
            logger.info(f"Applied {len(fixes)} markdown fix(es)")
            for fix in fixes:
                logger.debug(f"  - {fix}")
        for warning in warnings:
            logger.warning(warning)

    result = await renderer.render(markdown, output_path, request.to_render_options())
    result = replace(result, fixes=tuple(fixes), warnings=tuple(warnings))

    if not result.success:
        _discard_placeholder(output_path)
        return ConversionResponse(
            success=False,
            message=f"Failed to convert markdown to PDF: {result.error}",
            result=result,
        )

    return ConversionResponse(success=True, message=format_success_message(request, result), result=result)


def _failed(result: ConversionResult, logger: ConsoleLogger) -> ConversionResponse:
    logger.error(f"Failed to convert markdown to PDF ({result.error_stage}): {result.error}")
    return ConversionResponse(
        success=False,
        message=f"Failed to convert markdown to PDF: {result.error}",
        result=result,
    )


def _discard_placeholder(path: Path) -> None:
    # Only the empty reserved file is removed, never a written artifact
    if path.is_file() and path.stat().st_size == 0:
        path.unlink()
