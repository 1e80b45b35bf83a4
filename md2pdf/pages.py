#!/usr/bin/env python3
"""
PDF page counting and small output helpers.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import re
from pathlib import Path
from typing import Union

# "/Type /Page" objects, but not the "/Type /Pages" tree node
_PAGE_OBJECT_RE = re.compile(rb"/Type\s*/Page[^s]")


def count_pdf_pages(data: bytes) -> int:
    """Estimate the page count of a PDF from its raw bytes (never less than 1)."""
    matches = _PAGE_OBJECT_RE.findall(data)
    return len(matches) if matches else 1


def count_pdf_file_pages(pdf_path: Union[str, Path]) -> int:
    """Page count of a PDF file on disk."""
    return count_pdf_pages(Path(pdf_path).read_bytes())


def reserve_unique_filename(filepath: Union[str, Path]) -> Path:
    """Claim ``filepath`` or the first free ``name-N.ext`` next to it.

    The name is claimed by creating an empty file with exclusive access, so
    conversions running at the same time never end up with the same path.
    The caller owns the placeholder and writes the artifact over it.
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    counter = 1
    candidate = path
    while True:
        try:
            with candidate.open("x"):
                return candidate
        except FileExistsError:
            candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
            counter += 1


def format_bytes(size: int) -> str:
    """Format bytes to human readable string."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value, index = float(size), 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, 2):g} {units[index]}"


def format_duration(ms: float) -> str:
    """Format milliseconds to human readable string."""
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    minutes = int(ms // 60000)
    seconds = round((ms % 60000) / 1000)
    return f"{minutes}m {seconds}s"
