"""Configuration module: load and validate tfinspect settings."""

from pathlib import Path
from typing import Optional, Union
from pydantic import ValidationError
from ..utils.errors import ConfigError
from ..utils.logging import get_logger
from .manager import load_config
from .models import DiscoverySettings, ExtractionSettings, InspectConfig, LoggingSettings
from .paths import get_user_config_path, get_project_config_path

__all__ = [
    "DiscoverySettings",
    "ExtractionSettings",
    "InspectConfig",
    "LoggingSettings",
    "get_project_config_path",
    "get_user_config_path",
    "load_config",
    "load_inspect_config",
]

logger = get_logger("config")


def load_inspect_config(config_path: Optional[Union[str, Path]] = None) -> InspectConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Optional explicit config file, applied over the
            user and project files

    Returns:
        Validated InspectConfig

    Raises:
        ConfigError: If a config file cannot be loaded or has an invalid shape
    """
    raw = load_config(config_path)
    try:
        config = InspectConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
    logger.debug(
        f"Configuration: max_workers={config.extraction.max_workers}, "
        f"strict={config.extraction.strict}, "
        f"include_overrides={config.discovery.include_overrides}"
    )
    return config
