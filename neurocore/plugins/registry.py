"""
Legacy Plugin Registry - Explicitly registered plugins

Plugins are registered in code rather than discovered on disk. Each
registration is keyed by the namespace of the plugin's first declared
intent. Used when discovery is disabled, and as the fallback target of
the plugin manager adapter.

Mutation is not synchronized against lookups: callers serialize
register/unregister calls against in-flight traffic themselves.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config.plugin_config_loader import LocatedConfigFiles, PluginConfigError, PluginConfigLoader
from ..core.interfaces.plugin import IntentPlugin
from ..intents.models import Intent, action_namespace

logger = logging.getLogger(__name__)


class PluginRegistrationError(Exception):
    """Exception raised when a plugin cannot be registered"""
    pass


class RegistrationConflictError(PluginRegistrationError):
    """Duplicate derived id, or a plugin declaring no supported intents"""
    pass


@dataclass
class LegacyRegistration:
    """A registered plugin with its optionally loaded config and characters"""
    plugin: IntentPlugin
    config: Optional[Dict[str, Any]] = None
    character_ids: List[str] = field(default_factory=list)


class LegacyPluginRegistry:
    """
    Registry of explicitly registered intent plugins.

    Features:
    - Id derived from the namespace of the first supported intent
    - Duplicate-id and empty-intent rejection
    - Best-effort plugin config and character loading
    - Exact id+intent lookup with linear-scan fallback
    """

    def __init__(self, config_loader: Optional[PluginConfigLoader] = None):
        self._registrations: Dict[str, LegacyRegistration] = {}
        self._config_loader = config_loader or PluginConfigLoader()

    @staticmethod
    def derive_plugin_id(plugin: IntentPlugin) -> str:
        """
        Registration id for a plugin: the namespace of its first intent.

        Raises:
            RegistrationConflictError: If the plugin declares no intents
        """
        intents = plugin.supported_intents()
        if not intents:
            raise RegistrationConflictError(
                f"Plugin {plugin.__class__.__name__} must declare at least one supported intent"
            )
        return action_namespace(intents[0])

    async def register_plugin(self, plugin: IntentPlugin) -> Optional[str]:
        """
        Register a plugin and run its initialize hook.

        Returns:
            The derived plugin id, or None if the plugin failed to initialize

        Raises:
            RegistrationConflictError: On empty intents or an id already in use
        """
        plugin_id = self.derive_plugin_id(plugin)
        if plugin_id in self._registrations:
            raise RegistrationConflictError(f"Plugin with ID {plugin_id} is already registered")

        registration = LegacyRegistration(plugin=plugin)
        located = self._locate_config_files(plugin_id, plugin)
        registration.config = self._load_plugin_config(plugin_id, plugin, located)
        registration.character_ids = self._load_characters(plugin_id, plugin, located)

        try:
            await plugin.initialize()
        except Exception as e:
            logger.error(f"Plugin {plugin_id} failed to initialize, not registering it: {e}", exc_info=True)
            return None

        self._registrations[plugin_id] = registration
        logger.info(f"Registered plugin: {plugin_id} -> {plugin.__class__.__name__}")
        return plugin_id

    async def unregister_plugin(self, plugin_id: str) -> bool:
        """
        Remove a plugin and run its shutdown hook.

        Returns:
            True if the plugin was removed, False if not found
        """
        registration = self._registrations.pop(plugin_id, None)
        if registration is None:
            return False

        try:
            await registration.plugin.shutdown()
        except Exception as e:
            logger.error(f"Error shutting down plugin {plugin_id}: {e}")

        logger.info(f"Unregistered plugin: {plugin_id}")
        return True

    def find_plugin_for_intent(self, intent: Intent) -> Optional[IntentPlugin]:
        """
        Find a plugin for an intent.

        The registration whose id matches the intent namespace is tried
        first; otherwise the first plugin in registration order that
        supports the action wins.
        """
        action = intent.action

        registration = self._registrations.get(intent.namespace)
        if registration is not None and self._supports(intent.namespace, registration.plugin, action):
            return registration.plugin

        for plugin_id, registration in self._registrations.items():
            if self._supports(plugin_id, registration.plugin, action):
                return registration.plugin

        logger.debug(f"No legacy plugin found for intent: {action}")
        return None

    def get_plugin(self, plugin_id: str) -> Optional[IntentPlugin]:
        registration = self._registrations.get(plugin_id)
        return registration.plugin if registration else None

    def get_registration(self, plugin_id: str) -> Optional[LegacyRegistration]:
        return self._registrations.get(plugin_id)

    def get_plugins(self) -> Dict[str, IntentPlugin]:
        """Registered plugins keyed by id, in registration order"""
        return {plugin_id: reg.plugin for plugin_id, reg in self._registrations.items()}

    async def shutdown(self) -> None:
        """Unregister every plugin, newest first"""
        for plugin_id in reversed(list(self._registrations)):
            await self.unregister_plugin(plugin_id)

    def __len__(self) -> int:
        return len(self._registrations)

    def __contains__(self, plugin_id: str) -> bool:
        return plugin_id in self._registrations

    def _supports(self, plugin_id: str, plugin: IntentPlugin, action: str) -> bool:
        try:
            return action in plugin.supported_intents()
        except Exception as e:
            logger.error(f"Plugin {plugin_id} failed to report supported intents: {e}")
            return False

    def _locate_config_files(self, plugin_id: str, plugin: IntentPlugin) -> LocatedConfigFiles:
        """Conventional config files in the plugin directory, used when the plugin names none"""
        try:
            plugin_dir = plugin.get_plugin_directory()
            if plugin_dir:
                return self._config_loader.locate_config_files(plugin_dir)
        except Exception as e:
            logger.error(f"Failed to inspect directory of plugin {plugin_id}: {e}")
        return LocatedConfigFiles()

    def _load_plugin_config(self, plugin_id: str, plugin: IntentPlugin,
                            located: LocatedConfigFiles) -> Optional[Dict[str, Any]]:
        """Load the plugin's config file; failures are logged and ignored"""
        try:
            config_path = plugin.get_config_path() or located.plugin_config
            if not config_path:
                return None
            config = self._config_loader.load_plugin_config(self._resolve_path(plugin, config_path))
            logger.debug(f"Loaded configuration for plugin {plugin_id}")
            return config
        except (PluginConfigError, OSError) as e:
            logger.warning(f"Failed to load configuration for plugin {plugin_id}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error loading configuration for plugin {plugin_id}: {e}")
        return None

    def _load_characters(self, plugin_id: str, plugin: IntentPlugin, located: LocatedConfigFiles) -> List[str]:
        """Load character definitions; each failure is logged and skipped"""
        try:
            character_paths = plugin.get_character_paths() or located.character_definitions
        except Exception as e:
            logger.error(f"Plugin {plugin_id} failed to report character paths: {e}")
            return []

        character_ids: List[str] = []
        for path in character_paths:
            try:
                character = self._config_loader.load_character_definition(self._resolve_path(plugin, path))
                character_ids.append(self._config_loader.character_id(character))
            except (PluginConfigError, OSError) as e:
                logger.warning(f"Failed to load character {path} for plugin {plugin_id}: {e}")
            except Exception as e:
                logger.error(f"Unexpected error loading character {path} for plugin {plugin_id}: {e}")

        if character_ids:
            logger.info(f"Loaded {len(character_ids)} characters for plugin {plugin_id}: {character_ids}")
        return character_ids

    @staticmethod
    def _resolve_path(plugin: IntentPlugin, path: Union[str, Path]) -> Path:
        """Relative paths are resolved against the plugin directory when it has one"""
        resolved = Path(path)
        if not resolved.is_absolute():
            plugin_dir = plugin.get_plugin_directory()
            if plugin_dir:
                resolved = Path(plugin_dir) / resolved
        return resolved
