"""Configuration loading for the migration CLI."""
import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .patterns import SOURCE_EXTENSIONS
from .store import DEFAULT_STATE_FILE
from .utils import setup_logging


logger = setup_logging(__name__)

CONFIG_ENV_VAR = "MIGRATE_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    'scan': {
        'base_path': 'src',
        'extensions': list(SOURCE_EXTENSIONS),
        # An explicit file list replaces the directory walk
        'files': [],
    },
    'registry': {
        'state_file': DEFAULT_STATE_FILE,
    },
    'notifications': {
        'slack': {
            'enabled': False,
            'webhook_url_env': 'SLACK_WEBHOOK_URL',
        },
        'teams': {
            'enabled': False,
            'webhook_url_env': 'TEAMS_WEBHOOK_URL',
        },
    },
    'logging': {
        'level': 'INFO',
    },
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load config.yaml merged over the defaults.

    The path comes from the argument, then the MIGRATE_CONFIG_PATH environment
    variable, then config.yaml in the working directory. An explicitly named
    file must exist; a missing default file just means defaults.

    Args:
        config_path: Path to a YAML configuration file

    Returns:
        Configuration dictionary
    """
    explicit = config_path or os.getenv(CONFIG_ENV_VAR)
    cfg_path = Path(explicit or DEFAULT_CONFIG_PATH)

    if not cfg_path.exists():
        if explicit:
            logger.error("Configuration file not found: %s", cfg_path)
            raise FileNotFoundError(f"Could not find configuration file at {cfg_path.resolve()}")
        logger.debug("No %s found, using default configuration", cfg_path)
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load configuration from %s: %s", cfg_path, exc)
        raise RuntimeError(f"Failed to load configuration from {cfg_path}") from exc

    if not isinstance(loaded, dict):
        raise RuntimeError(f"Configuration in {cfg_path} must be a mapping")

    logger.debug("Loaded configuration from %s", cfg_path)
    return _merge(DEFAULT_CONFIG, loaded)


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif value is not None:
            merged[key] = value
    return merged
