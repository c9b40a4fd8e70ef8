"""
Plugin Manifest - Declarative descriptor for discoverable plugins

Each plugin directory carries a ``manifest.json`` describing the plugin's
identity, entry point, enablement, substitutions and per-intent priority.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

MANIFEST_FILE = "manifest.json"


class ManifestError(Exception):
    """Raised when a manifest cannot be read or fails validation"""
    pass


class IntentHandlerConfig(BaseModel):
    """Priority entry for one intent action in a manifest"""
    priority: Union[int, float] = Field(..., description="Higher values take precedence")
    enabled: bool = Field(default=True, description="Whether this plugin competes for the action")


class PluginManifest(BaseModel):
    """Plugin manifest schema (manifest.json)"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., description="Unique plugin identifier")
    name: str = Field(default="", description="Human-readable plugin name")
    version: str = Field(default="", description="Plugin version")
    entry_point: str = Field(..., alias="entryPoint", description="Module path relative to the manifest directory")
    enabled: bool = Field(default=False, description="Disabled manifests are never loaded")
    substitutes: List[str] = Field(default_factory=list, description="Ids of plugins this plugin replaces")
    intent_mapping: Dict[str, IntentHandlerConfig] = Field(
        default_factory=dict, alias="intentMapping",
        description="Per-action priority configuration"
    )
    config: Dict[str, Any] = Field(default_factory=dict, description="Passed verbatim to the plugin factory")

    @field_validator('id', 'entry_point')
    @classmethod
    def validate_required_text(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator('config', mode='before')
    @classmethod
    def validate_config(cls, v):
        return {} if v is None else v

    def intent_config(self, action: str) -> Optional[IntentHandlerConfig]:
        """Priority entry for an action, or None if the manifest has none"""
        return self.intent_mapping.get(action)

    @classmethod
    def from_file(cls, manifest_path: Path) -> "PluginManifest":
        """
        Load and validate a manifest file.

        Raises:
            ManifestError: If the file is unreadable, not a JSON object, or invalid
        """
        try:
            content = manifest_path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(f"Cannot read manifest {manifest_path}: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON in manifest {manifest_path}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"Manifest {manifest_path} must contain a JSON object")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise ManifestError(f"Invalid manifest {manifest_path}: {fields}") from e


@dataclass(frozen=True)
class PluginRegistrationInfo:
    """Scan result for one enabled manifest, immutable after discovery"""
    id: str
    manifest: PluginManifest
    plugin_path: Path
    is_system: bool
