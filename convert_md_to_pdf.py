#!/usr/bin/env python3
"""
Markdown to PDF converter using Puppeteer approach (inspired by vscode-markdown-pdf).
Launcher kept at the repository root; the implementation lives in the md2pdf package.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import sys

from md2pdf.cli import main

if __name__ == "__main__":
    sys.exit(main())
