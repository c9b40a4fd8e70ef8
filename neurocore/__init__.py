"""
NeuroCore - Plugin discovery and intent resolution

Finds intent-handling plugins from manifest directories or explicit
registration and routes each intent action to exactly one handler.
"""

__version__ = "0.1.0"

from .intents.models import Intent, RequestContext, PluginResult
from .core.interfaces.plugin import IntentPlugin, PluginOptions
from .plugins.manager import PluginManagerAdapter
from .plugins.discovery import PluginDiscovery
from .plugins.registry import LegacyPluginRegistry

__all__ = [
    "Intent",
    "RequestContext",
    "PluginResult",
    "IntentPlugin",
    "PluginOptions",
    "PluginManagerAdapter",
    "PluginDiscovery",
    "LegacyPluginRegistry",
]
