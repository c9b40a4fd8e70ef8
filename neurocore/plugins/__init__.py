"""
NeuroCore Plugin System - Discovery, legacy registration and resolution

Plugins are found either by scanning manifest directories (discovery)
or by explicit registration (legacy registry). The adapter merges both
behind one lookup surface.
"""

from .base import BaseIntentPlugin
from .discovery import PluginDiscovery
from .registry import LegacyPluginRegistry, PluginRegistrationError, RegistrationConflictError
from .manager import PluginManagerAdapter

__all__ = [
    "BaseIntentPlugin",
    "PluginDiscovery",
    "LegacyPluginRegistry",
    "PluginRegistrationError",
    "RegistrationConflictError",
    "PluginManagerAdapter",
]
