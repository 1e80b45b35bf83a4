#!/usr/bin/env python3
"""
Error types raised inside the conversion pipeline.

None of these escape the renderer or the service: they are caught at the
boundary and turned into structured failure results.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

from typing import Optional


class ConversionError(Exception):
    """Base class for conversion failures, tagged with the stage that failed."""

    stage = "conversion"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage


class ValidationError(ConversionError, ValueError):
    """Bad request field, empty content or content over the size limit."""

    stage = "validation"


class HardRenderTimeout(ConversionError):
    """Content did not settle (or export) within the computed timeout."""

    stage = "render"


class SoftDiagramTimeout(ConversionError):
    """Diagrams were not ready in time. Logged only, never a failure."""

    stage = "diagrams"


class InternalRenderError(ConversionError):
    """Any other failure inside the rendering session."""

    stage = "render"
