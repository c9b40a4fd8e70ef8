"""
NeuroCore Configuration System

Pydantic-based configuration models, file loading/saving and the
plugin configuration file loader.
"""

from .models import CoreConfig, PluginDiscoveryConfig, PluginDirectory, PluginDirectoryConfig, LogLevel, TieBreak
from .manager import ConfigManager, ConfigValidationError
from .plugin_config_loader import PluginConfigLoader, PluginConfigError, ValidationResult

__all__ = [
    "CoreConfig",
    "PluginDiscoveryConfig",
    "PluginDirectory",
    "PluginDirectoryConfig",
    "LogLevel",
    "TieBreak",
    "ConfigManager",
    "ConfigValidationError",
    "PluginConfigLoader",
    "PluginConfigError",
    "ValidationResult",
]
