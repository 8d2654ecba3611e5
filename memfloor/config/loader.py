"""Configuration loader for memfloor."""

import os
from pathlib import Path

import yaml

from memfloor.config.models import MemfloorConfig


def load_config(config_path: str | Path | None = None) -> MemfloorConfig:
    """Load memfloor configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, uses MEMFLOOR_CONFIG env var;
            if that is unset too, returns the defaults.

    Returns:
        Validated MemfloorConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid.
    """
    if config_path is None:
        config_path = os.environ.get("MEMFLOOR_CONFIG")

    if config_path is None:
        config = MemfloorConfig()
    else:
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        try:
            with open(config_path) as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        except OSError as e:
            raise ValueError(f"Cannot read config file {config_path}: {e.strerror or e}") from e

        if config_data is None:
            raise ValueError(f"Config file is empty: {config_path}")

        try:
            config = MemfloorConfig(**config_data)
        except Exception as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    return config
