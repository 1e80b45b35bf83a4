#!/usr/bin/env python3
"""
Coloured console logging shared by the converter components.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import sys
import threading
from typing import Optional, TextIO

from colorama import init, Fore, Style

# Initialize colorama for cross-platform colored output
init(autoreset=True)


class ConsoleLogger:
    """Thread-safe coloured logger; debug lines are printed only in verbose mode."""

    def __init__(self, verbose: bool = False, stream: Optional[TextIO] = None):
        self.verbose = verbose
        self.stream = stream
        self._lock = threading.Lock()  # For thread-safe logging

    def _emit(self, tag: str, message: str) -> None:
        with self._lock:
            print(f"{tag}{Style.RESET_ALL} {message}", file=self.stream or sys.stdout)

    def debug(self, message: str) -> None:
        """Log debug message with color (only if verbose mode is enabled)."""
        if self.verbose:
            self._emit(f"{Fore.CYAN}[DEBUG]", message)

    def info(self, message: str) -> None:
        """Log info message with color."""
        self._emit(f"{Fore.GREEN}[INFO]", message)

    def warning(self, message: str) -> None:
        """Log warning message with color."""
        self._emit(f"{Fore.YELLOW}[WARNING]", message)

    def error(self, message: str) -> None:
        """Log error message with color."""
        self._emit(f"{Fore.RED}[ERROR]", message)

    def success(self, message: str) -> None:
        """Log success message with color."""
        self._emit(f"{Fore.GREEN}[OK]", message)
