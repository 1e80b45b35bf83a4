#!/usr/bin/env python3
"""
Command line interface: convert one or more markdown files to PDF.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from colorama import Fore, Style

from . import __version__
from .config import Config
from .console import ConsoleLogger
from .dependencies import check_dependencies
from .renderer import CODE_THEME_NAMES, ORIENTATIONS, PAPER_FORMATS, WATERMARK_SCOPES
from .service import DEFAULT_OUTPUT_FILENAME, ConversionResponse, convert_markdown

STDIN_SOURCE = "-"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="md2pdf",
        description="Convert markdown files to PDF with syntax highlighting and Mermaid support (Puppeteer approach)",
    )
    parser.add_argument("files", nargs="*", help="Markdown files to convert (default: read from stdin)")
    parser.add_argument("-o", "--output", default=None, help="Output filename for a single input (default: <input name>.pdf or output.pdf)")
    parser.add_argument("--output-dir", default=None, help="Output directory (default: from config/env/home directory)")
    parser.add_argument("--paper-format", default="letter", choices=PAPER_FORMATS, help="Paper size (default: letter)")
    parser.add_argument("--orientation", default="portrait", choices=ORIENTATIONS, help="Paper orientation (default: portrait)")
    parser.add_argument("--margin", default="2cm", help="Page margin on all sides (default: 2cm). Range: 0-3 inches. Units: in, cm, mm, pt, px")
    parser.add_argument("--watermark", default=None, help="Watermark text (max 15 characters, upper-cased)")
    parser.add_argument("--watermark-scope", default="all-pages", choices=WATERMARK_SCOPES, help="Pages carrying the watermark (default: all-pages)")
    parser.add_argument("--page-numbers", action="store_true", help="Print 'Page N of M' in the footer")
    parser.add_argument("--header", default=None, help="Header text, centered on every page")
    parser.add_argument("--footer", default=None, help="Footer text, left-aligned on every page")
    parser.add_argument("--code-theme", default="light", choices=CODE_THEME_NAMES, help="Code block theme (default: light)")
    parser.add_argument("--css", default=None, help="Stylesheet file applied after the built-in styles")
    parser.add_argument("--skip-preprocessing", action="store_true", help="Convert the markdown as-is, without automatic fixes")
    parser.add_argument("--max-workers", type=int, default=None, help="Maximum number of conversions running at once (default: from config/env/4)")
    parser.add_argument("--verbose", action="store_true", default=None, help="Enable debug logging for detailed output")
    parser.add_argument("--check-deps", action="store_true", help="Check dependencies and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def read_source(source: str) -> str:
    if source == STDIN_SOURCE:
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def output_filename_for(source: str, args: argparse.Namespace, total: int) -> str:
    """Explicit --output for a single input, otherwise named after the input file."""
    if args.output and total == 1:
        return args.output
    if source == STDIN_SOURCE:
        return DEFAULT_OUTPUT_FILENAME
    return f"{Path(source).stem}.pdf"


def build_request(markdown: str, output_filename: str, args: argparse.Namespace,
                  custom_css: Optional[str]) -> Dict[str, Any]:
    return {
        "markdown": markdown,
        "outputFilename": output_filename,
        "paperFormat": args.paper_format,
        "paperOrientation": args.orientation,
        "margin": args.margin,
        "watermark": args.watermark,
        "watermarkScope": args.watermark_scope,
        "showPageNumbers": args.page_numbers,
        "headerText": args.header,
        "footerText": args.footer,
        "codeTheme": args.code_theme,
        "customCss": custom_css,
        "skipPreprocessing": args.skip_preprocessing,
    }


async def convert_sources(sources: Sequence[str], args: argparse.Namespace, config: Config,
                          logger: ConsoleLogger, custom_css: Optional[str] = None) -> List[ConversionResponse]:
    """Convert every source, at most ``max_workers`` at a time."""
    semaphore = asyncio.Semaphore(config.get_max_workers())

    async def convert_one(source: str) -> ConversionResponse:
        try:
            markdown = read_source(source)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {source}: {e}")
            return ConversionResponse(success=False, message=f"Cannot read {source}: {e}")

        request = build_request(markdown, output_filename_for(source, args, len(sources)), args, custom_css)
        async with semaphore:
            return await convert_markdown(request, config, logger)

    return await asyncio.gather(*(convert_one(source) for source in sources))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.check_deps:
        return 0 if check_dependencies() else 1

    config = Config({
        "output_dir": args.output_dir,
        "verbose": args.verbose,
        "max_workers": args.max_workers,
    })
    logger = ConsoleLogger(verbose=config.is_verbose())

    custom_css = None
    if args.css:
        try:
            custom_css = Path(args.css).read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Cannot read stylesheet {args.css}: {e}")
            return 1

    logger.debug(f"Configuration: {config.to_dict()}")
    sources = args.files or [STDIN_SOURCE]
    if args.output and len(sources) > 1:
        logger.warning(f"--output {args.output} is ignored when converting several files; "
                       f"each PDF is named after its input file")
    responses = asyncio.run(convert_sources(sources, args, config, logger, custom_css))

    for response in responses:
        colour = Fore.GREEN if response.success else Fore.RED
        print(f"\n{colour}{response.message}{Style.RESET_ALL}")

    failed = sum(1 for response in responses if not response.success)
    if len(responses) > 1:
        print(f"\nConverted {len(responses) - failed}/{len(responses)} file(s)")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
