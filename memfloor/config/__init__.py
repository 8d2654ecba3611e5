"""Configuration management for memfloor."""

from memfloor.config.loader import load_config
from memfloor.config.models import (
    LoggingConfig,
    MemfloorConfig,
    ProbeConfig,
    ReportingUnit,
)

__all__ = [
    "load_config",
    "MemfloorConfig",
    "ProbeConfig",
    "LoggingConfig",
    "ReportingUnit",
]
