"""Core interfaces for intent plugins."""

from .plugin import IntentPlugin, PluginOptions

__all__ = [
    "IntentPlugin",
    "PluginOptions",
]
