#!/usr/bin/env python3
"""
Configuration management for the markdown-to-pdf converter.
Supports environment variables, config file, and CLI arguments.

MIT License - Copyright (c) 2025 Markdown to PDF Converter
"""

import os
import json
import platform
from pathlib import Path
from typing import Dict, Optional, Any


TRUE_VALUES = ("1", "true", "yes", "on")


def get_user_config_dir() -> Path:
    """Get platform-appropriate user config directory."""
    system = platform.system()

    if system == "Windows":
        config_dir = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif system == "Darwin":  # macOS
        config_dir = Path.home() / "Library" / "Application Support"
    else:  # Linux and others
        config_dir = Path.home() / ".config"

    return config_dir / "md2pdf"


def load_config_file(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from config file if it exists."""
    config_file = config_file or get_user_config_dir() / "config.json"

    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
        return data if isinstance(data, dict) else {}

    return {}


def parse_bool(value: Any) -> bool:
    """Interpret an environment/config value as a boolean flag."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


def get_config_from_env(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Load configuration from environment variables."""
    environ = os.environ if environ is None else environ
    config: Dict[str, Any] = {}

    env_mapping = {
        "MD2PDF_OUTPUT_DIR": "output_dir",
        "MD2PDF_VERBOSE": "verbose",
        "MD2PDF_MAX_WORKERS": "max_workers",
    }

    for env_var, config_key in env_mapping.items():
        value = environ.get(env_var)
        if not value:
            continue
        if config_key == "verbose":
            config[config_key] = parse_bool(value)
        elif config_key == "max_workers":
            try:
                workers = int(value)
            except ValueError:
                continue
            if workers > 0:
                config[config_key] = workers
        else:
            config[config_key] = value

    return config


class Config:
    """Configuration manager with multi-layer precedence.

    Built once at process start and passed down explicitly; nothing below
    the command line reads the environment itself.
    """

    def __init__(self, cli_args: Optional[Dict[str, Any]] = None,
                 environ: Optional[Dict[str, str]] = None,
                 config_file: Optional[Path] = None):
        """Initialize configuration.

        Precedence order (highest to lowest):
        1. CLI arguments
        2. Environment variables
        3. Config file
        4. Defaults
        """
        self.cli_args = {k: v for k, v in (cli_args or {}).items() if v is not None}

        # Merge with precedence: CLI > ENV > FILE > DEFAULTS
        self._config: Dict[str, Any] = {}
        self._config.update(self._get_defaults())
        self._config.update(load_config_file(config_file))
        self._config.update(get_config_from_env(environ))
        self._config.update(self.cli_args)

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default configuration values."""
        return {
            "output_dir": str(Path.home()),
            "verbose": False,
            "max_workers": 4,
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def get_output_dir(self) -> Path:
        """Get output directory path."""
        return Path(self._config.get("output_dir") or Path.home()).expanduser()

    def is_verbose(self) -> bool:
        """Whether debug logging is enabled."""
        return parse_bool(self._config.get("verbose", False))

    def get_max_workers(self) -> int:
        """Get the number of conversions allowed to run at once."""
        return max(1, int(self._config.get("max_workers", 4)))

    def to_dict(self) -> Dict[str, Any]:
        """Get configuration as dictionary."""
        return self._config.copy()
