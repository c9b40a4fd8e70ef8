"""
Configuration Models - Pydantic models for type-safe configuration

- Plugin discovery (directories, load gates, resolver mode, overrides)
- Core settings (logging, debug) with environment overrides

Requires: pydantic>=2.0.0, pydantic-settings>=2.0.0
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Dict, List

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings

DEFAULT_SYSTEM_PLUGIN_DIR = Path(__file__).resolve().parent.parent / "plugins" / "system"
DEFAULT_USER_PLUGIN_DIR = Path("plugins") / "custom"


class LogLevel(str, Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class TieBreak(str, Enum):
    """How to choose among candidates sharing the highest priority"""
    PLUGIN_ID = "plugin_id"      # Lexicographically smallest plugin id wins
    LOAD_ORDER = "load_order"    # Earliest loaded plugin wins


# ============================================================
# PLUGIN DISCOVERY CONFIGURATION
# ============================================================

@dataclass(frozen=True)
class PluginDirectory:
    """A root directory to scan, with its explicit system/user classification"""
    path: Path
    is_system: bool


class PluginDirectoryConfig(BaseModel):
    """An extra plugin root with its explicit classification"""
    path: Path = Field(..., description="Directory containing plugin folders")
    system: bool = Field(default=False, description="Treat plugins found here as system plugins")


class PluginDiscoveryConfig(BaseModel):
    """Plugin discovery and intent resolution configuration"""
    enabled: bool = Field(default=False, description="Enable manifest-driven plugin discovery")
    system_directory: Optional[Path] = Field(
        default=DEFAULT_SYSTEM_PLUGIN_DIR, description="Directory of shipped system plugins"
    )
    user_directory: Optional[Path] = Field(
        default=DEFAULT_USER_PLUGIN_DIR, description="Directory of operator-supplied plugins"
    )
    additional_directories: List[PluginDirectoryConfig] = Field(
        default_factory=list, description="Extra plugin directories, scanned after system and user"
    )
    load_system_plugins: bool = Field(default=True, description="Load plugins from system directories")
    load_user_plugins: bool = Field(default=True, description="Load plugins from user directories")
    use_priority_resolver: bool = Field(
        default=True, description="Use priority-based resolution instead of first structural match"
    )
    intent_handlers: Dict[str, str] = Field(
        default_factory=dict, description="Operator overrides: intent action -> plugin id"
    )
    tie_break: TieBreak = Field(
        default=TieBreak.PLUGIN_ID, description="Tie-break among equal-priority candidates"
    )
    substitution_affects_resolution: bool = Field(
        default=False, description="Exclude substituted plugins from winning resolution"
    )
    debug: bool = Field(default=False, description="Log discovery options and the intent index")

    @field_validator('system_directory', 'user_directory', mode='before')
    @classmethod
    def validate_directory(cls, v):
        # An empty path disables the directory; TOML has no null
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('intent_handlers')
    @classmethod
    def validate_intent_handlers(cls, v):
        for action, plugin_id in v.items():
            if not action or not action.strip():
                raise ValueError("Intent handler override action cannot be empty")
            if not plugin_id or not plugin_id.strip():
                raise ValueError(f"Intent handler override for '{action}' must name a plugin id")
        return v

    def plugin_directories(self) -> List[PluginDirectory]:
        """Ordered scan roots: system, user, then additional directories"""
        directories: List[PluginDirectory] = []
        if self.system_directory is not None:
            directories.append(PluginDirectory(path=self.system_directory, is_system=True))
        if self.user_directory is not None:
            directories.append(PluginDirectory(path=self.user_directory, is_system=False))
        for extra in self.additional_directories:
            directories.append(PluginDirectory(path=extra.path, is_system=extra.system))
        return directories


# ============================================================
# MAIN CONFIGURATION
# ============================================================

class CoreConfig(BaseSettings):
    """Main configuration for NeuroCore"""

    name: str = Field(default="NeuroCore", description="Application name")
    version: str = Field(default="0.1.0", description="Version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")
    plugin_log_level: Optional[LogLevel] = Field(
        default=None, description="Level for plugin loggers (neurocore.plugin.*); inherits log_level if unset"
    )

    plugins: PluginDiscoveryConfig = Field(
        default_factory=PluginDiscoveryConfig, description="Plugin discovery configuration"
    )

    model_config = {
        "env_prefix": "NEUROCORE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
    }

    @model_validator(mode='after')
    def apply_debug_mode(self):
        if self.debug:
            self.log_level = LogLevel.DEBUG
        return self
