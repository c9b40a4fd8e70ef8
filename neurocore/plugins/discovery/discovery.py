"""
Plugin Discovery - Loader and resolver behind one facade

When disabled, discovery is a passthrough: initialization does nothing
and every lookup reports "not found", leaving resolution to the legacy
registry.
"""

import logging
from typing import Any, Dict, List, Optional

from ...config.models import PluginDiscoveryConfig
from ...core.interfaces.plugin import IntentPlugin
from ...intents.models import Intent
from .loader import PluginLoader, PluginLoadResult
from .resolver import PRIORITY_PIPELINE, SIMPLE_PIPELINE, PriorityResolver, Resolution

logger = logging.getLogger(__name__)


class PluginDiscovery:
    """
    Manifest-driven plugin discovery and resolution.

    Features:
    - Enable flag with passthrough mode
    - Sequential plugin loading and lifecycle hooks
    - Priority pipeline or simple first-match resolution
    - Substitution queries for listing
    """

    def __init__(self, config: Optional[PluginDiscoveryConfig] = None, orchestrator: Any = None):
        self.config = config or PluginDiscoveryConfig()
        self.enabled = self.config.enabled
        self.use_priority_resolver = self.config.use_priority_resolver

        self._loader = PluginLoader(
            directories=self.config.plugin_directories(),
            load_system_plugins=self.config.load_system_plugins,
            load_user_plugins=self.config.load_user_plugins,
            orchestrator=orchestrator,
        )
        self._resolver = PriorityResolver(
            intent_handlers=self.config.intent_handlers,
            tie_break=self.config.tie_break,
            substitution_affects_resolution=self.config.substitution_affects_resolution,
            strategies=PRIORITY_PIPELINE if self.use_priority_resolver else SIMPLE_PIPELINE,
        )
        self._loaded: Dict[str, IntentPlugin] = {}
        self._initialized = False

        if self.config.debug:
            logger.info(f"Plugin discovery options: {self.config.model_dump_json()}")

        if self.enabled:
            mode = "priority-based" if self.use_priority_resolver else "simple first-match"
            logger.info(f"Plugin discovery system enabled, using {mode} intent resolver")
        else:
            logger.info("Plugin discovery system disabled (passthrough mode)")

    @property
    def resolver(self) -> PriorityResolver:
        return self._resolver

    @property
    def load_errors(self) -> List[Dict[str, Any]]:
        """Errors collected while scanning and loading plugins"""
        return self._loader.errors

    async def initialize(self) -> None:
        """Load plugins, run their initialize hooks and build the resolver index"""
        if not self.enabled:
            logger.debug("Plugin discovery system not enabled, skipping initialization")
            return
        if self._initialized:
            return

        results = await self._loader.load_plugins()

        ready: List[PluginLoadResult] = []
        for result in results:
            try:
                await result.plugin.initialize()
            except Exception as e:
                logger.error(f"Plugin {result.id} failed to initialize, dropping it: {e}", exc_info=True)
                continue
            ready.append(result)

        self._resolver.register_plugins(ready)
        self._loaded = {result.id: result.plugin for result in ready}
        self._initialized = True

        if self.config.debug:
            for action, ids in self._resolver.index.candidates.items():
                logger.info(f"Intent {action} -> {', '.join(ids)}")

        logger.info(f"Plugin discovery system initialized with {len(self._loaded)} plugins")

    async def shutdown(self) -> None:
        """Run shutdown hooks in reverse load order"""
        for plugin_id in reversed(list(self._loaded)):
            try:
                await self._loaded[plugin_id].shutdown()
            except Exception as e:
                logger.error(f"Error shutting down plugin {plugin_id}: {e}")
        self._loaded = {}
        self._resolver.register_plugins([])
        self._initialized = False

    def find_plugin_for_intent(self, intent: Intent) -> Optional[IntentPlugin]:
        """Resolve the handler for an intent, or None if discovery cannot"""
        if not self.enabled:
            return None
        return self._resolver.resolve_plugin_for_intent(intent)

    def explain(self, action: str) -> Optional[Resolution]:
        """Resolution details for an action"""
        if not self.enabled:
            return None
        return self._resolver.explain(action)

    def get_plugin(self, plugin_id: str) -> Optional[IntentPlugin]:
        return self._loaded.get(plugin_id)

    def get_all_plugins(self) -> Dict[str, IntentPlugin]:
        """Loaded plugins keyed by id, in load order"""
        return dict(self._loaded)

    def get_plugins(self) -> Dict[str, IntentPlugin]:
        return self.get_all_plugins()

    def is_system_plugin(self, plugin_id: str) -> bool:
        result = self._resolver.index.plugins.get(plugin_id)
        return result is not None and result.info.is_system

    def is_plugin_substituted(self, plugin_id: str) -> bool:
        if not self.enabled:
            return False
        return self._resolver.is_plugin_substituted(plugin_id)

    def get_substituting_plugin(self, plugin_id: str) -> Optional[IntentPlugin]:
        if not self.enabled:
            return None
        return self._resolver.get_substituting_plugin(plugin_id)
