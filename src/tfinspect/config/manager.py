"""Layered configuration: packaged defaults, user file, project file, explicit file."""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from .paths import get_defaults_path, get_user_config_path, get_project_config_path
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("config.manager")


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load the full config tree.

    Later layers override earlier ones key by key: defaults, then
    ~/.tfinspect/config.yaml, then .tfinspect/config.yaml, then config_path.

    Args:
        config_path: Optional explicit config file, applied last

    Returns:
        Merged configuration dictionary

    Raises:
        ConfigError: If a config file is not valid YAML or not a mapping,
            or if config_path does not exist
    """
    config = read_yaml(get_defaults_path())

    user_config_path = get_user_config_path()
    if user_config_path.exists():
        _deep_merge(config, read_yaml(user_config_path))
        logger.debug(f"Loaded user config from {user_config_path}")

    project_config_path = get_project_config_path()
    if project_config_path:
        _deep_merge(config, read_yaml(project_config_path))
        logger.info(f"Loaded project config from {project_config_path}")

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        _deep_merge(config, read_yaml(path))
        logger.info(f"Loaded configuration from {path}")

    return config


def read_yaml(path: Path) -> Dict[str, Any]:
    """Read one YAML config file; an empty file is an empty mapping."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error reading config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a dictionary: {path}")
    return data


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
