#!/usr/bin/env python3
"""
Dependency checking and validation for the markdown-to-pdf converter.
Provides installation guidance for anything missing.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import importlib
import subprocess
import sys
from typing import List, Optional, Tuple

from colorama import Fore, Style, init

init(autoreset=True)

# (distribution name, import name)
REQUIRED_PACKAGES = [
    ("playwright", "playwright"),
    ("markdown-it-py", "markdown_it"),
    ("mdit-py-plugins", "mdit_py_plugins"),
    ("linkify-it-py", "linkify_it"),
    ("pygments", "pygments"),
    ("colorama", "colorama"),
]


class DependencyChecker:
    """Check and report on required dependencies."""

    def __init__(self):
        """Initialize dependency checker."""
        self.missing_python_packages: List[str] = []

    def check_python_package(self, package_name: str, import_name: Optional[str] = None) -> bool:
        """Check if a Python package is installed."""
        if import_name is None:
            import_name = package_name

        try:
            importlib.import_module(import_name)
            return True
        except ImportError:
            self.missing_python_packages.append(package_name)
            return False

    def check_playwright_browsers(self) -> bool:
        """Check if the Playwright chromium browser is installed."""
        try:
            result = subprocess.run(
                [sys.executable, "-m", "playwright", "install", "--dry-run", "chromium"],
                capture_output=True,
                text=True,
                timeout=10
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def get_playwright_install_command(self) -> str:
        """Get the Playwright browser install command."""
        return f"{sys.executable} -m playwright install chromium"

    def check_all(self) -> Tuple[bool, List[str]]:
        """Check all dependencies and return status and messages."""
        messages: List[str] = []
        all_ok = True

        print(f"{Fore.CYAN}Checking Python packages...{Style.RESET_ALL}")

        for package_name, import_name in REQUIRED_PACKAGES:
            if not self.check_python_package(package_name, import_name):
                all_ok = False
                messages.append(f"{Fore.RED}[MISSING]{Style.RESET_ALL} {package_name} - Run: pip install {package_name}")
            else:
                print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} {package_name} is available")

        if "playwright" not in self.missing_python_packages:
            print(f"\n{Fore.CYAN}Checking browsers...{Style.RESET_ALL}")
            if not self.check_playwright_browsers():
                all_ok = False
                messages.append(f"{Fore.YELLOW}[WARNING]{Style.RESET_ALL} Playwright browsers not installed")
                messages.append(f"  Run: {self.get_playwright_install_command()}")
            else:
                print(f"{Fore.GREEN}[OK]{Style.RESET_ALL} Playwright browsers are installed")
        else:
            messages.append(f"  Then install browser: {self.get_playwright_install_command()}")

        return all_ok, messages

    def print_summary(self) -> bool:
        """Check dependencies and print summary. Returns True if all required deps are available."""
        all_ok, messages = self.check_all()

        if messages:
            print(f"\n{Fore.YELLOW}Dependency Summary:{Style.RESET_ALL}")
            for msg in messages:
                print(f"  {msg}")
        else:
            print(f"\n{Fore.GREEN}All dependencies are available!{Style.RESET_ALL}")

        return all_ok


def check_dependencies() -> bool:
    """Convenience function to check dependencies."""
    checker = DependencyChecker()
    return checker.print_summary()
