"""
Plugin Configuration Loader - Plugin config and character definition files

Used by the legacy registry to load the optional configuration file and
character definitions a plugin ships. Structure is checked with pydantic
models; a structural failure rejects the file. Softer problems (missing
descriptions, defaults or styling) are reported as warnings and only logged.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = ("plugin-config.json", "config.json")
CHARACTERS_DIR = "characters"
STYLE_CONTEXTS = ("all", "chat", "post")


class PluginConfigError(Exception):
    """Raised when a plugin config or character file is missing or invalid"""
    pass


# ============================================================
# FILE SCHEMAS
# ============================================================

class ExposedIntent(BaseModel):
    """An intent the plugin offers to others"""
    model_config = ConfigDict(extra="allow")

    action: str = Field(..., min_length=1, description="Intent action")
    description: Optional[str] = Field(default=None, description="What the intent does")

    @field_validator('action')
    @classmethod
    def validate_action(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("action cannot be blank")
        return v


class RequiredIntent(BaseModel):
    """An intent the plugin needs another plugin to provide"""
    model_config = ConfigDict(extra="allow")

    action: str = Field(..., min_length=1, description="Intent action")
    required: Optional[bool] = Field(default=None, description="Whether the plugin fails without it")


class PluginSettingsSection(BaseModel):
    """The ``config`` section: declared parameters and their defaults"""
    model_config = ConfigDict(extra="allow")

    required: List[str] = Field(..., description="Parameters the plugin needs")
    optional: List[str] = Field(default_factory=list, description="Parameters the plugin accepts")
    defaults: Dict[str, Any] = Field(default_factory=dict, description="Default parameter values")
    environment: Dict[str, str] = Field(default_factory=dict, description="Parameter -> environment variable")


class PluginConfigFile(BaseModel):
    """Plugin configuration file schema (plugin-config.json)"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    exposed_intents: List[ExposedIntent] = Field(..., min_length=1, alias="exposedIntents")
    required_intents: List[RequiredIntent] = Field(default_factory=list, alias="requiredIntents")
    config: Optional[PluginSettingsSection] = None

    @field_validator('exposed_intents', mode='before')
    @classmethod
    def expand_bare_actions(cls, v):
        # A bare string is shorthand for {"action": ...}
        if isinstance(v, list):
            return [{"action": item} if isinstance(item, str) else item for item in v]
        return v


class CharacterStyle(BaseModel):
    model_config = ConfigDict(extra="allow")

    all: Optional[List[str]] = None
    chat: Optional[List[str]] = None
    post: Optional[List[str]] = None


class CharacterDefinition(BaseModel):
    """Character definition file schema (characters/*.json)"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    bio: List[str] = Field(..., min_length=1)
    adjectives: Optional[List[str]] = None
    style: Optional[CharacterStyle] = None
    message_examples: Optional[Any] = Field(default=None, alias="messageExamples")


# ============================================================
# LOADER
# ============================================================

@dataclass
class ValidationResult:
    """Validation outcome for a configuration document"""
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class LocatedConfigFiles:
    """Configuration files found in a plugin directory"""
    plugin_config: Optional[Path] = None
    character_definitions: List[Path] = field(default_factory=list)


def _format_errors(error: ValidationError) -> List[str]:
    messages = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        if err["type"] == "missing":
            messages.append(f"Missing required field: {location}")
        else:
            messages.append(f"{location}: {err['msg']}")
    return messages


class PluginConfigLoader:
    """
    Loads and validates plugin configuration and character definition files.

    Features:
    - Pydantic schemas for both file kinds
    - Warnings for incomplete but usable files
    - Conventional file lookup inside a plugin directory
    """

    def load_plugin_config(self, config_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load and validate a plugin configuration file.

        Raises:
            PluginConfigError: If the file is missing, not JSON, or invalid
        """
        data = self._read_json(Path(config_path), "Plugin configuration")

        result = self.validate_plugin_config(data)
        if not result.valid:
            raise PluginConfigError(f"Invalid plugin configuration: {', '.join(result.errors)}")
        if result.warnings:
            logger.warning(f"Plugin configuration warnings ({config_path}): {', '.join(result.warnings)}")
        return data

    def load_character_definition(self, character_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Load and validate a character definition file.

        Raises:
            PluginConfigError: If the file is missing, not JSON, or invalid
        """
        data = self._read_json(Path(character_path), "Character definition")

        result = self.validate_character_definition(data)
        if not result.valid:
            raise PluginConfigError(f"Invalid character definition: {', '.join(result.errors)}")
        if result.warnings:
            logger.warning(f"Character definition warnings ({character_path}): {', '.join(result.warnings)}")
        return data

    def locate_config_files(self, plugin_dir: Union[str, Path]) -> LocatedConfigFiles:
        """Find the plugin config file and character definitions in a plugin directory"""
        plugin_dir = Path(plugin_dir)
        located = LocatedConfigFiles()

        for name in CONFIG_FILE_NAMES:
            candidate = plugin_dir / name
            if candidate.is_file():
                located.plugin_config = candidate
                break

        characters_dir = plugin_dir / CHARACTERS_DIR
        if characters_dir.is_dir():
            located.character_definitions = sorted(characters_dir.glob("*.json"))

        return located

    @staticmethod
    def character_id(character: Dict[str, Any]) -> str:
        """Identifier for a loaded character: explicit id, else its name"""
        return str(character.get("id") or character["name"])

    def _read_json(self, path: Path, label: str) -> Dict[str, Any]:
        if not path.is_file():
            raise PluginConfigError(f"{label} file not found: {path}")
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise PluginConfigError(f"Invalid JSON in {label.lower()}: {e}") from e
        except OSError as e:
            raise PluginConfigError(f"Cannot read {label.lower()} {path}: {e}") from e
        if not isinstance(data, dict):
            raise PluginConfigError(f"{label} must be a JSON object: {path}")
        return data

    @staticmethod
    def _parse(schema: Type[BaseModel], data: Dict[str, Any]) -> Union[BaseModel, ValidationResult]:
        try:
            return schema.model_validate(data)
        except ValidationError as e:
            return ValidationResult(valid=False, errors=_format_errors(e))

    def validate_plugin_config(self, config: Dict[str, Any]) -> ValidationResult:
        parsed = self._parse(PluginConfigFile, config)
        if isinstance(parsed, ValidationResult):
            return parsed

        warnings: List[str] = []
        for intent in parsed.exposed_intents:
            if not intent.description:
                warnings.append(f"Exposed intent '{intent.action}' is missing 'description'")
        for intent in parsed.required_intents:
            if intent.required is None:
                warnings.append(f"Required intent '{intent.action}' is missing 'required' field")

        if parsed.config is None:
            warnings.append("Missing 'config' section")
        else:
            for param in parsed.config.required:
                if param not in parsed.config.defaults:
                    warnings.append(f"Required parameter '{param}' has no default value")

        return ValidationResult(valid=True, warnings=warnings)

    def validate_character_definition(self, character: Dict[str, Any]) -> ValidationResult:
        parsed = self._parse(CharacterDefinition, character)
        if isinstance(parsed, ValidationResult):
            return parsed

        warnings: List[str] = []
        if parsed.adjectives is None:
            warnings.append("Missing 'adjectives' for personality traits")
        elif not parsed.adjectives:
            warnings.append("'adjectives' array is empty")

        if parsed.style is None:
            warnings.append("Missing 'style' for communication styling")
        elif not any(getattr(parsed.style, context) for context in STYLE_CONTEXTS):
            warnings.append("'style' object has no context definitions")

        examples = parsed.message_examples
        if not isinstance(examples, list):
            warnings.append("Missing or invalid 'messageExamples'")
        elif not examples:
            warnings.append("'messageExamples' array is empty")
        else:
            for index, example in enumerate(examples):
                if not isinstance(example, list) or len(example) < 2:
                    warnings.append(f"Message example at index {index} should contain at least 2 messages")

        return ValidationResult(valid=True, warnings=warnings)
