"""
Markdown to PDF converter package.
Normalizes sloppy markdown and renders it to PDF with syntax highlighting and Mermaid support.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

__version__ = "1.0.0"

from .config import Config, get_user_config_dir
from .console import ConsoleLogger
from .dependencies import DependencyChecker, check_dependencies
from .errors import ConversionError, HardRenderTimeout, InternalRenderError, SoftDiagramTimeout, ValidationError
from .preprocessor import PreprocessResult, check_balance, preprocess_markdown, validate_markdown
from .protector import ProtectedText, protect, restore
from .renderer import ConversionResult, PdfRenderer, RenderOptions, compute_timeout_ms
from .service import ConversionRequest, ConversionResponse, convert_markdown

__all__ = [
    "Config",
    "get_user_config_dir",
    "ConsoleLogger",
    "DependencyChecker",
    "check_dependencies",
    "ConversionError",
    "ValidationError",
    "HardRenderTimeout",
    "SoftDiagramTimeout",
    "InternalRenderError",
    "PreprocessResult",
    "preprocess_markdown",
    "check_balance",
    "validate_markdown",
    "ProtectedText",
    "protect",
    "restore",
    "ConversionResult",
    "PdfRenderer",
    "RenderOptions",
    "compute_timeout_ms",
    "ConversionRequest",
    "ConversionResponse",
    "convert_markdown",
]
