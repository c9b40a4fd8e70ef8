"""
Configuration Manager - Loading and saving configurations

Handles configuration file loading, saving and validation with support
for TOML and JSON formats and environment variable overrides.

Requires: pydantic>=2.0.0, tomli-w>=1.0.0
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Any

import tomllib

import tomli_w
from pydantic import ValidationError

from .models import CoreConfig

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration validation fails"""
    pass


class ConfigManager:
    """
    Manages configuration loading, saving, and validation.

    Features:
    - TOML and JSON format support
    - Async file operations
    - Configuration validation with Pydantic
    - Environment variable overrides (NEUROCORE_ prefix)
    """

    SEARCH_PATHS = [
        Path("./neurocore.toml"),
        Path("./neurocore.json"),
        Path("./config.toml"),
        Path.home() / ".config" / "neurocore" / "config.toml",
    ]

    def __init__(self):
        self._config_cache: dict[str, CoreConfig] = {}

    async def load_config(self, config_path: Optional[Path] = None) -> CoreConfig:
        """
        Load configuration from file.

        Args:
            config_path: Path to configuration file (auto-detect if None)

        Returns:
            Loaded CoreConfig instance; defaults plus environment if no file exists

        Raises:
            ConfigValidationError: If the file cannot be parsed or fails validation
        """
        if config_path is None:
            config_path = self._find_config_file()

        if config_path is None or not config_path.exists():
            if config_path is not None:
                logger.warning(f"Config file not found: {config_path}, using defaults")
            return CoreConfig()

        try:
            content = await asyncio.to_thread(config_path.read_text, encoding='utf-8')

            suffix = config_path.suffix.lower()
            if suffix == '.toml':
                data = await self._parse_toml(content)
            elif suffix == '.json':
                data = await self._parse_json(content)
            else:
                raise ConfigValidationError(f"Unsupported config format: {config_path.suffix}")

            config = self._dict_to_config(data)

        except ConfigValidationError:
            raise
        except ValidationError as e:
            logger.error(f"Configuration validation errors:\n{e}")
            raise ConfigValidationError(f"Invalid configuration in {config_path}: {e}") from e
        except (OSError, ValueError) as e:
            raise ConfigValidationError(f"Failed to load config from {config_path}: {e}") from e

        self._config_cache[str(config_path)] = config
        logger.info(f"Loaded configuration from: {config_path}")
        return config

    async def save_config(self, config: CoreConfig, config_path: Path) -> bool:
        """
        Save configuration to file.

        Returns:
            True if saved successfully
        """
        try:
            data = self._config_to_dict(config)

            suffix = config_path.suffix.lower()
            if suffix == '.toml':
                content = await self._format_toml(data)
            elif suffix == '.json':
                content = await self._format_json(data)
            else:
                raise ValueError(f"Unsupported config format: {config_path.suffix}")

            config_path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(config_path.write_text, content, encoding='utf-8')

            self._config_cache[str(config_path)] = config
            logger.info(f"Saved configuration to: {config_path}")
            return True

        except Exception as e:
            logger.error(f"Failed to save config to {config_path}: {e}")
            return False

    def get_cached_config(self, config_path: Path) -> Optional[CoreConfig]:
        return self._config_cache.get(str(config_path))

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in standard locations"""
        for path in self.SEARCH_PATHS:
            if path.exists():
                return path
        return None

    async def _parse_toml(self, content: str) -> dict[str, Any]:
        """Parse TOML content"""
        return await asyncio.to_thread(tomllib.loads, content)

    async def _parse_json(self, content: str) -> dict[str, Any]:
        """Parse JSON content"""
        data = await asyncio.to_thread(json.loads, content)
        if not isinstance(data, dict):
            raise ValueError("Configuration root must be an object")
        return data

    async def _format_toml(self, data: dict[str, Any]) -> str:
        """Format data as TOML"""
        return await asyncio.to_thread(tomli_w.dumps, data)

    async def _format_json(self, data: dict[str, Any]) -> str:
        """Format data as JSON"""
        return await asyncio.to_thread(json.dumps, data, indent=2)

    def _dict_to_config(self, data: dict[str, Any]) -> CoreConfig:
        """Convert dictionary to CoreConfig; file values take precedence over environment"""
        return CoreConfig(**data)

    def _config_to_dict(self, config: CoreConfig) -> dict[str, Any]:
        """Convert CoreConfig to a TOML/JSON friendly dictionary"""
        data = config.model_dump(mode="json", exclude_none=True)
        # TOML has no null; an empty path keeps a directory disabled on reload
        for key in ("system_directory", "user_directory"):
            if getattr(config.plugins, key) is None:
                data["plugins"][key] = ""
        return data
