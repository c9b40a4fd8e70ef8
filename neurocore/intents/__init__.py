"""Intent data models shared by plugins and the routing layer."""

from .models import Intent, RequestContext, PluginResult, action_namespace

__all__ = [
    "Intent",
    "RequestContext",
    "PluginResult",
    "action_namespace",
]
