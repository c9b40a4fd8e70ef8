"""
Plugin Manager Adapter - One lookup surface over discovery and legacy plugins

Discovery is always asked first; the legacy registry is consulted only
when discovery reports "not found". Listing starts from the legacy
registry, hides plugins substituted by a discovered plugin, and overlays
every discovered plugin.
"""

import logging
from typing import Any, Dict, Optional

from ..config.models import PluginDiscoveryConfig
from ..core.interfaces.plugin import IntentPlugin
from ..intents.models import Intent, PluginResult, RequestContext
from .discovery import PluginDiscovery
from .registry import LegacyPluginRegistry

logger = logging.getLogger(__name__)


def no_handler_message(action: str) -> str:
    return f"No plugin found for intent: {action}"


class PluginManagerAdapter:
    """
    Merges manifest discovery and the legacy registry.

    The resolution path never raises: a lookup yields a plugin or None,
    and execution yields a PluginResult.
    """

    def __init__(
        self,
        discovery: Optional[PluginDiscovery] = None,
        legacy: Optional[LegacyPluginRegistry] = None,
    ):
        self.discovery = discovery or PluginDiscovery(PluginDiscoveryConfig(enabled=False))
        self.legacy = legacy or LegacyPluginRegistry()
        logger.info("Plugin manager adapter created")

    @classmethod
    def from_config(cls, config: PluginDiscoveryConfig, orchestrator: Any = None) -> "PluginManagerAdapter":
        """Build an adapter with discovery configured from settings"""
        return cls(discovery=PluginDiscovery(config, orchestrator=orchestrator))

    async def initialize(self) -> None:
        await self.discovery.initialize()
        logger.info("Plugin manager adapter initialized")

    async def shutdown(self) -> None:
        await self.discovery.shutdown()
        await self.legacy.shutdown()

    async def register_plugin(self, plugin: IntentPlugin) -> Optional[str]:
        """
        Register a plugin with the legacy registry.

        Discovered plugins come from manifests only, so explicit
        registration never touches discovery.
        """
        plugin_id = await self.legacy.register_plugin(plugin)
        if plugin_id is not None:
            logger.debug(f"Plugin registered via adapter: {plugin_id}")
        return plugin_id

    async def unregister_plugin(self, plugin_id: str) -> bool:
        return await self.legacy.unregister_plugin(plugin_id)

    def find_plugin_for_intent(self, intent: Intent) -> Optional[IntentPlugin]:
        """Discovery first, then the legacy registry"""
        plugin = self.discovery.find_plugin_for_intent(intent)
        if plugin is not None:
            return plugin

        logger.debug(f"Falling back to legacy registry for intent {intent.action}")
        return self.legacy.find_plugin_for_intent(intent)

    async def execute_intent(self, intent: Intent, context: Optional[RequestContext] = None) -> PluginResult:
        """
        Resolve and execute an intent.

        Returns:
            The handler's result; a failure result when no plugin resolves
            or the handler raises
        """
        plugin = self.find_plugin_for_intent(intent)
        if plugin is None:
            logger.warning(no_handler_message(intent.action))
            return PluginResult.failure(no_handler_message(intent.action))

        if context is None:
            context = RequestContext.create()

        try:
            result = await plugin.execute(intent, context)
        except Exception as e:
            logger.error(f"Error executing intent '{intent.action}': {e}", exc_info=True)
            return PluginResult.failure(f"Error executing intent {intent.action}: {e}")

        if not isinstance(result, PluginResult):
            logger.error(f"Plugin for {intent.action} returned {type(result).__name__}, expected PluginResult")
            return PluginResult.failure(f"Invalid result from plugin for intent: {intent.action}")
        return result

    def get_plugin(self, plugin_id: str) -> Optional[IntentPlugin]:
        plugin = self.discovery.get_plugin(plugin_id)
        if plugin is not None:
            return plugin
        return self.legacy.get_plugin(plugin_id)

    def get_plugins(self) -> Dict[str, IntentPlugin]:
        """All plugins keyed by id; discovered plugins win on id collision"""
        result: Dict[str, IntentPlugin] = {}

        for plugin_id, plugin in self.legacy.get_plugins().items():
            if self.discovery.is_plugin_substituted(plugin_id):
                if self.discovery.get_substituting_plugin(plugin_id) is not None:
                    logger.debug(f"Plugin {plugin_id} is substituted by another plugin")
                    continue
            result[plugin_id] = plugin

        result.update(self.discovery.get_all_plugins())
        return result

    def is_plugin_substituted(self, plugin_id: str) -> bool:
        return self.discovery.is_plugin_substituted(plugin_id)

    def get_substituting_plugin(self, plugin_id: str) -> Optional[IntentPlugin]:
        return self.discovery.get_substituting_plugin(plugin_id)
