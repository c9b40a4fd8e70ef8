"""
Base Plugin Classes - Common plugin functionality

Provides a base class plugin authors can inherit from: options storage,
lifecycle bookkeeping and dispatch of intents to ``handle_<verb>``
methods.
"""

from typing import Any, ClassVar, Dict, List, Optional

from ..core.interfaces.plugin import IntentPlugin, PluginOptions
from ..intents.models import Intent, PluginResult, RequestContext
from ..utils.logging import plugin_logger


class BaseIntentPlugin(IntentPlugin):
    """
    Base intent plugin with common functionality.

    Subclasses list their actions in ``INTENTS`` and implement one
    ``handle_<verb>(intent, context)`` coroutine per action, where the
    verb is the part after the namespace colon.
    """

    INTENTS: ClassVar[List[str]] = []

    def __init__(self, options: Optional[PluginOptions] = None):
        self.options = options or PluginOptions(logger=plugin_logger(type(self).__name__))
        self.logger = self.options.logger
        self._initialized = False

    def supported_intents(self) -> List[str]:
        return list(self.INTENTS)

    async def initialize(self) -> None:
        self._initialized = True
        self.logger.info(f"Plugin {type(self).__name__} initialized")

    async def shutdown(self) -> None:
        self._initialized = False
        self.logger.info(f"Plugin {type(self).__name__} shutdown")

    async def execute(self, intent: Intent, context: RequestContext) -> PluginResult:
        """Dispatch to the matching handle_<verb> method, catching handler errors"""
        if intent.action not in self.supported_intents():
            return PluginResult.failure(f"Unsupported intent: {intent.action}")

        handler = getattr(self, f"handle_{intent.verb.replace('-', '_')}", None)
        if handler is None:
            return PluginResult.failure(f"No handler method for intent: {intent.action}")

        try:
            return await handler(intent, context)
        except Exception as e:
            self.logger.error(f"Error handling intent '{intent.action}': {e}")
            return PluginResult.failure(f"Intent failed: {e}")

    def get_config(self, key: str, default: Any = None) -> Any:
        """Get a value from the manifest config"""
        return self.options.config.get(key, default)

    @property
    def config(self) -> Dict[str, Any]:
        return self.options.config

    @property
    def orchestrator(self) -> Any:
        """Orchestrator handle injected at construction"""
        return self.options.orchestrator

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def get_plugin_directory(self) -> Optional[str]:
        if self.options.plugin_directory is None:
            return None
        return str(self.options.plugin_directory)
