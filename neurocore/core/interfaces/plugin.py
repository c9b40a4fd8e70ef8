"""
Intent Plugin Interface - Core handler contract

Defines the interface every intent plugin implements and the options a
plugin factory receives.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Any, Dict, List

from ...intents.models import Intent, RequestContext, PluginResult


class IntentPlugin(ABC):
    """
    Base interface that all intent plugins must implement.

    A plugin declares the intent actions it can execute and executes
    them. Lifecycle hooks and auxiliary-file accessors are optional.
    """

    @abstractmethod
    def supported_intents(self) -> List[str]:
        """Intent actions this plugin can execute (must be non-empty)"""
        pass

    @abstractmethod
    async def execute(self, intent: Intent, context: RequestContext) -> PluginResult:
        """
        Execute an intent.

        Args:
            intent: The intent to execute
            context: Request context for this execution

        Returns:
            PluginResult with success flag, data and error
        """
        pass

    async def initialize(self) -> None:
        """Called once by the owner after the plugin is registered"""
        pass

    async def shutdown(self) -> None:
        """Called once by the owner at teardown"""
        pass

    def get_config_path(self) -> Optional[str]:
        """Path to the plugin configuration file, if any"""
        return None

    def get_character_paths(self) -> List[str]:
        """Paths to character definition files, if any"""
        return []

    def get_plugin_directory(self) -> Optional[str]:
        """Directory the plugin was loaded from, if any"""
        return None


@dataclass
class PluginOptions:
    """Arguments handed to a plugin module's ``create_plugin`` factory."""

    logger: logging.Logger
    config: Dict[str, Any] = field(default_factory=dict)
    plugin_directory: Optional[Path] = None
    orchestrator: Any = None

