"""Configuration loading, schema, and defaults."""

from patchwise.config.loader import ConfigError, load_config
from patchwise.config.schema import ApplyConfig, OutputConfig, PatchwiseConfig

__all__ = [
    "ApplyConfig",
    "ConfigError",
    "OutputConfig",
    "PatchwiseConfig",
    "load_config",
]
