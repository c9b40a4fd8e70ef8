"""
Plugin Loader - Manifest scanning and dynamic module loading

Scans configured root directories for plugin subdirectories carrying a
manifest, validates them, and instantiates the plugin through the
module's ``create_plugin`` factory. Failures are isolated per directory,
per manifest and per plugin: one bad plugin never aborts the load.
"""

import importlib.util
import inspect
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional

from ...config.models import PluginDirectory
from ...core.interfaces.plugin import IntentPlugin, PluginOptions
from ...utils.logging import plugin_logger
from .manifest import MANIFEST_FILE, ManifestError, PluginManifest, PluginRegistrationInfo

logger = logging.getLogger(__name__)

FACTORY_NAME = "create_plugin"


class PluginLoadError(Exception):
    """Error loading a plugin module or creating its instance"""
    pass


@dataclass(frozen=True)
class PluginLoadResult:
    """A usable plugin instance together with its registration info"""
    plugin: IntentPlugin
    info: PluginRegistrationInfo

    @property
    def id(self) -> str:
        return self.info.id

    @property
    def manifest(self) -> PluginManifest:
        return self.info.manifest


class PluginLoader:
    """
    Loads plugins from filesystem.

    Features:
    - Explicit system/user classification per root directory
    - Deterministic scan order (sorted subdirectory names)
    - Required ``create_plugin`` factory per entry module
    - Error tracking and reporting
    - Sequential loading, one plugin at a time
    """

    def __init__(
        self,
        directories: List[PluginDirectory],
        load_system_plugins: bool = True,
        load_user_plugins: bool = True,
        orchestrator: Any = None,
    ):
        self.directories = list(directories)
        self.load_system_plugins = load_system_plugins
        self.load_user_plugins = load_user_plugins
        self.orchestrator = orchestrator
        self._errors: List[Dict[str, Any]] = []

    @property
    def errors(self) -> List[Dict[str, Any]]:
        """Errors encountered during the last scan/load"""
        return self._errors.copy()

    async def load_plugins(self) -> List[PluginLoadResult]:
        """
        Scan directories and load every enabled plugin.

        Returns:
            Load results for plugins that were successfully instantiated
        """
        results: List[PluginLoadResult] = []
        registration_info = self.scan_directories()

        for info in registration_info:
            if info.is_system and not self.load_system_plugins:
                logger.debug(f"Skipping system plugin {info.id}")
                continue
            if not info.is_system and not self.load_user_plugins:
                logger.debug(f"Skipping user plugin {info.id}")
                continue

            try:
                plugin = await self.load_plugin(info)
            except PluginLoadError as e:
                self._record_error("load_error", str(e), plugin_id=info.id, path=info.plugin_path)
                logger.error(f"Failed to load plugin {info.id}: {e}")
                continue
            except Exception as e:
                self._record_error("load_error", str(e), plugin_id=info.id, path=info.plugin_path)
                logger.error(f"Unexpected error loading plugin {info.id}: {e}", exc_info=True)
                continue

            results.append(PluginLoadResult(plugin=plugin, info=info))
            logger.info(f"Loaded plugin: {info.id} ({info.manifest.name or info.id})")

        logger.info(f"Loaded {len(results)} of {len(registration_info)} discovered plugins")
        return results

    def scan_directories(self) -> List[PluginRegistrationInfo]:
        """
        Scan all root directories for enabled plugin manifests.

        Returns:
            Registration info in scan order (directory order, then folder name)
        """
        self._errors.clear()
        results: List[PluginRegistrationInfo] = []
        seen_ids: Dict[str, Path] = {}

        for directory in self.directories:
            root = Path(directory.path)
            if not root.is_dir():
                message = f"Plugin directory does not exist: {root}"
                logger.warning(message)
                self._record_error("directory_not_found", message, path=root)
                continue

            try:
                subdirs = sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name)
            except OSError as e:
                message = f"Error scanning directory {root}: {e}"
                logger.error(message)
                self._record_error("directory_scan_error", message, path=root)
                continue

            for plugin_dir in subdirs:
                info = self._scan_plugin_directory(plugin_dir, directory.is_system)
                if info is None:
                    continue

                # Ids are unique within one loaded set
                if info.id in seen_ids:
                    message = (f"Duplicate plugin id '{info.id}' in {plugin_dir}, "
                               f"already found in {seen_ids[info.id]}")
                    logger.warning(message)
                    self._record_error("duplicate_id", message, plugin_id=info.id, path=plugin_dir)
                    continue

                seen_ids[info.id] = plugin_dir
                results.append(info)

        return results

    def _scan_plugin_directory(self, plugin_dir: Path, is_system: bool) -> Optional[PluginRegistrationInfo]:
        """Read one plugin folder's manifest; None if absent, invalid or disabled"""
        manifest_path = plugin_dir / MANIFEST_FILE
        if not manifest_path.is_file():
            logger.debug(f"No manifest found in {plugin_dir}")
            return None

        try:
            manifest = PluginManifest.from_file(manifest_path)
        except ManifestError as e:
            logger.warning(f"Skipping plugin in {plugin_dir}: {e}")
            self._record_error("manifest_error", str(e), path=manifest_path)
            return None

        if not manifest.enabled:
            logger.debug(f"Plugin {manifest.id} is disabled, skipping")
            return None

        logger.debug(f"Found plugin: {manifest.id} at {plugin_dir}")
        return PluginRegistrationInfo(
            id=manifest.id,
            manifest=manifest,
            plugin_path=plugin_dir.resolve(),
            is_system=is_system,
        )

    async def load_plugin(self, info: PluginRegistrationInfo) -> IntentPlugin:
        """
        Import a plugin's entry module and create its instance.

        Raises:
            PluginLoadError: If the plugin cannot be loaded
        """
        entry_path = self._resolve_entry_point(info)
        module = self._import_module(info, entry_path)

        factory = getattr(module, FACTORY_NAME, None)
        if factory is None or not callable(factory):
            raise PluginLoadError(f"Entry module {entry_path} does not export a '{FACTORY_NAME}' factory")

        options = PluginOptions(
            logger=plugin_logger(info.id),
            config=dict(info.manifest.config),
            plugin_directory=info.plugin_path,
            orchestrator=self.orchestrator,
        )

        try:
            plugin = factory(options)
            if inspect.isawaitable(plugin):
                plugin = await plugin
        except Exception as e:
            raise PluginLoadError(f"Factory in {entry_path} failed: {e}") from e

        if not isinstance(plugin, IntentPlugin):
            raise PluginLoadError(
                f"Factory in {entry_path} returned {type(plugin).__name__}, expected an IntentPlugin"
            )

        try:
            intents = plugin.supported_intents()
        except Exception as e:
            raise PluginLoadError(f"supported_intents() failed: {e}") from e
        if not intents:
            raise PluginLoadError(f"Plugin {info.id} declares no supported intents")

        return plugin

    def _resolve_entry_point(self, info: PluginRegistrationInfo) -> Path:
        """Entry point file, which must live inside the plugin directory"""
        plugin_dir = info.plugin_path
        entry_path = (plugin_dir / info.manifest.entry_point).resolve()

        if not entry_path.is_relative_to(plugin_dir):
            raise PluginLoadError(f"Entry point escapes plugin directory: {info.manifest.entry_point}")
        if not entry_path.is_file():
            raise PluginLoadError(f"Entry point not found: {entry_path}")
        return entry_path

    def _import_module(self, info: PluginRegistrationInfo, entry_path: Path) -> ModuleType:
        """Load the entry module under a unique name"""
        module_name = f"neurocore_plugin_{re.sub(r'[^0-9a-zA-Z_]', '_', info.id)}"

        spec = importlib.util.spec_from_file_location(module_name, entry_path)
        if spec is None or spec.loader is None:
            raise PluginLoadError(f"Cannot load module spec: {entry_path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise PluginLoadError(f"Failed to import {entry_path}: {e}") from e
        return module

    def _record_error(self, error_type: str, message: str, plugin_id: Optional[str] = None,
                      path: Optional[Path] = None) -> None:
        self._errors.append({
            "type": error_type,
            "plugin_id": plugin_id,
            "path": str(path) if path is not None else None,
            "message": message,
        })
