"""CLI utilities package."""

from typing import Optional
from ...config import InspectConfig, load_inspect_config
from ...contracts.module import Module
from ...utils.logging import get_logger, setup_logging
from .file_resolver import resolve_module_dir

logger = get_logger("cli.utils")


def format_error(message: str, suggestion: Optional[str] = None) -> str:
    """
    Format error message with optional suggestion.

    Args:
        message: Error message
        suggestion: Optional suggestion or help text

    Returns:
        Formatted error string
    """
    error = f"Error: {message}"
    if suggestion:
        error += f"\nTip: {suggestion}"
    return error


def load_cli_config(config_path: Optional[str] = None, quiet: bool = False) -> InspectConfig:
    """Load configuration and apply its log level (WARNING when quiet)."""
    config = load_inspect_config(config_path)
    setup_logging("WARNING" if quiet else config.logging.level)
    return config


def run_inspection(module_dir: str, config: InspectConfig, strict: bool = False) -> Module:
    """
    Shared inspection helper - all commands call this.

    Args:
        module_dir: Module directory
        config: Loaded configuration
        strict: Raise on unreadable or unparsable files

    Returns:
        Extracted Module

    Raises:
        TfInspectError: If the module cannot be loaded
    """
    from ... import inspect_module

    return inspect_module(str(module_dir), strict=strict, config=config)


__all__ = ["format_error", "load_cli_config", "resolve_module_dir", "run_inspection"]
