"""
Configuration loading for the podstats package.

Loads YAML configuration files, merges them over built-in defaults, and
applies environment variable overrides.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


MAX_FILE_SIZE_BYTES = 5 * 1024 * 1024

DEFAULT_INGESTION_CONFIG = {
    "max_file_size_bytes": MAX_FILE_SIZE_BYTES,
    "allowed_extensions": [".csv"],
    "min_fields": 10,
    "accepted_headers": [
        "Slug,Title,Published,Day 1,Day 7,Day 14,Day 30,Day 90,Spotify,All Time",
        "Slug,Title,Published,1 Day,7 Days,14 Days,30 Days,90 Days,Spotify,All Time",
    ],
}

DEFAULT_STORAGE_CONFIG = {
    "storage_dir": "~/.podstats",
    "raw_key": "podstats.dataset.raw",
    "metadata_key": "podstats.dataset.metadata",
}

DEFAULT_ANALYTICS_CONFIG = {
    "performance_thresholds": {
        "excellent": 1.5,
        "good": 1.1,
        "average": 0.9,
    },
    "recent_window": 30,
    "monthly_window": 24,
    "distribution_bins": [
        {"name": "0-1K", "min": 0, "max": 1000},
        {"name": "1K-2K", "min": 1000, "max": 2000},
        {"name": "2K-3K", "min": 2000, "max": 3000},
        {"name": "3K-4K", "min": 3000, "max": 4000},
        {"name": "4K-5K", "min": 4000, "max": 5000},
        {"name": "5K+", "min": 5000, "max": None},
    ],
    # Additional topic keywords: [{"keyword": "Tauri", "tier": 3}, ...]
    "extra_topic_keywords": [],
}

CONFIG_FILES = {
    "ingestion": ("ingestion_config.yaml", DEFAULT_INGESTION_CONFIG),
    "storage": ("storage_config.yaml", DEFAULT_STORAGE_CONFIG),
    "analytics": ("analytics_config.yaml", DEFAULT_ANALYTICS_CONFIG),
}

ENV_STORAGE_DIR = "PODSTATS_STORAGE_DIR"
ENV_MAX_FILE_SIZE = "PODSTATS_MAX_FILE_SIZE"


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with override taking precedence.

    Lists are replaced wholesale, not concatenated.

    Args:
        base: Base dictionary
        override: Override dictionary (takes precedence)

    Returns:
        Merged dictionary (inputs are not modified)
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """
    Load a YAML file and return its contents as a dictionary.

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary with YAML contents (empty for an empty file)

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If file is not valid YAML
        ValueError: If the top level is not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {file_path}")
    return config


def load_config(
    config_dir: Optional[Path] = None,
    config_type: str = "ingestion",
) -> Dict[str, Any]:
    """
    Load configuration from YAML file with fallback to defaults.

    Args:
        config_dir: Directory containing config files (default: ./config)
        config_type: Type of config to load ("ingestion", "storage", "analytics")

    Returns:
        Configuration dictionary

    Example:
        >>> config = load_config(Path("config"), "analytics")
        >>> config["performance_thresholds"]["excellent"]
        1.5
    """
    config_dir = Path(config_dir) if config_dir is not None else Path("config")

    if config_type not in CONFIG_FILES:
        raise ValueError(f"Invalid config_type: {config_type}. Must be one of {list(CONFIG_FILES.keys())}")

    filename, default_config = CONFIG_FILES[config_type]

    try:
        config = deep_merge(default_config, load_yaml_file(config_dir / filename))
    except FileNotFoundError:
        config = copy.deepcopy(default_config)

    if config_type == "storage":
        env_storage_dir = os.environ.get(ENV_STORAGE_DIR)
        if env_storage_dir:
            config["storage_dir"] = env_storage_dir
    elif config_type == "ingestion":
        env_max_size = os.environ.get(ENV_MAX_FILE_SIZE)
        if env_max_size:
            try:
                config["max_file_size_bytes"] = int(env_max_size)
            except ValueError:
                raise ValueError(f"{ENV_MAX_FILE_SIZE} must be an integer, got {env_max_size!r}") from None

    return config


class Config:
    """
    Configuration manager for podstats.

    Provides lazy access to the ingestion, storage and analytics settings.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing config files (default: ./config)
        """
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self._loaded: Dict[str, Dict[str, Any]] = {}

    def _section(self, config_type: str) -> Dict[str, Any]:
        if config_type not in self._loaded:
            self._loaded[config_type] = load_config(self.config_dir, config_type)
        return self._loaded[config_type]

    @property
    def ingestion(self) -> Dict[str, Any]:
        """Get ingestion configuration (lazy load)."""
        return self._section("ingestion")

    @property
    def storage(self) -> Dict[str, Any]:
        """Get storage configuration (lazy load)."""
        return self._section("storage")

    @property
    def analytics(self) -> Dict[str, Any]:
        """Get analytics configuration (lazy load)."""
        return self._section("analytics")

    @property
    def storage_dir(self) -> Path:
        """Resolved directory used by the file storage backend."""
        return Path(os.path.expanduser(str(self.storage["storage_dir"])))

    def reload(self) -> None:
        """Reload all configurations from disk."""
        self._loaded.clear()

    def get(self, config_type: str, *keys: str, default: Any = None) -> Any:
        """
        Get a nested configuration value by key path.

        Args:
            config_type: Type of config ("ingestion", "storage", "analytics")
            *keys: Keys to traverse (e.g., "performance_thresholds", "good")
            default: Default value if key path not found

        Returns:
            Configuration value or default

        Example:
            >>> Config().get("analytics", "performance_thresholds", "good")
            1.1
        """
        if config_type not in CONFIG_FILES:
            return default

        value: Any = self._section(config_type)
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value
