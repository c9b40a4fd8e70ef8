"""Echo system plugin - returns the intent payload unchanged."""

import time

from neurocore.core.interfaces.plugin import PluginOptions
from neurocore.intents.models import Intent, PluginResult, RequestContext
from neurocore.plugins.base import BaseIntentPlugin


class EchoPlugin(BaseIntentPlugin):
    """Answers echo:say with its payload and system:ping with a timestamp."""

    INTENTS = ["echo:say", "system:ping"]

    async def handle_say(self, intent: Intent, context: RequestContext) -> PluginResult:
        prefix = self.get_config("prefix", "")
        if isinstance(intent.data, str):
            return PluginResult.ok(f"{prefix}{intent.data}")
        return PluginResult.ok(intent.data)

    async def handle_ping(self, intent: Intent, context: RequestContext) -> PluginResult:
        return PluginResult.ok({"pong": True, "request_id": context.request_id, "time": time.time()})


def create_plugin(options: PluginOptions) -> EchoPlugin:
    return EchoPlugin(options)
