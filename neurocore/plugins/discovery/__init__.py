"""
Plugin Discovery - Manifest scanning, loading and priority resolution

Plugin Structure:
    <root>/
    └── my-plugin/
        ├── manifest.json      # id, entryPoint, enabled, substitutes, intentMapping, config
        └── plugin.py          # defines create_plugin(options) -> IntentPlugin
"""

from .manifest import ManifestError, PluginManifest, IntentHandlerConfig, PluginRegistrationInfo
from ...config.models import PluginDirectory
from .loader import PluginLoader, PluginLoadError, PluginLoadResult
from .resolver import PriorityResolver, Resolution, ResolutionIndex, TieBreak
from .discovery import PluginDiscovery

__all__ = [
    "ManifestError",
    "PluginManifest",
    "IntentHandlerConfig",
    "PluginRegistrationInfo",
    "PluginLoader",
    "PluginLoadError",
    "PluginLoadResult",
    "PluginDirectory",
    "PriorityResolver",
    "Resolution",
    "ResolutionIndex",
    "TieBreak",
    "PluginDiscovery",
]
