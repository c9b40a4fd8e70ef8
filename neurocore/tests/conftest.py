"""
Shared fixtures for NeuroCore tests

Plugins are written to temporary directories as a manifest.json plus a
plugin.py exporting create_plugin.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

from neurocore.config.models import PluginDirectoryConfig, PluginDiscoveryConfig


PLUGIN_SOURCE = '''
from neurocore.intents.models import PluginResult
from neurocore.plugins.base import BaseIntentPlugin


class GeneratedPlugin(BaseIntentPlugin):
    INTENTS = {intents!r}

    async def execute(self, intent, context):
        return PluginResult.ok({{"plugin": {plugin_id!r}, "action": intent.action, "data": intent.data}})


def create_plugin(options):
    return GeneratedPlugin(options)
'''


def write_plugin(
    root: Path,
    plugin_id: str,
    intents: Iterable[str],
    priorities: Optional[Dict[str, Any]] = None,
    enabled: bool = True,
    substitutes: Iterable[str] = (),
    dirname: Optional[str] = None,
    source: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
) -> Path:
    """
    Write a plugin folder under root and return its path.

    priorities maps an action to a priority number, or to a full
    {"priority": ..., "enabled": ...} entry.
    """
    plugin_dir = root / (dirname or plugin_id)
    plugin_dir.mkdir(parents=True, exist_ok=True)

    mapping = {}
    for action, entry in (priorities or {}).items():
        mapping[action] = entry if isinstance(entry, dict) else {"priority": entry}

    manifest = {
        "id": plugin_id,
        "name": f"{plugin_id} plugin",
        "version": "1.0.0",
        "entryPoint": "plugin.py",
        "enabled": enabled,
        "substitutes": list(substitutes),
        "intentMapping": mapping,
        "config": config or {},
    }
    (plugin_dir / "manifest.json").write_text(json.dumps(manifest), encoding="utf-8")

    if source is None:
        source = PLUGIN_SOURCE.format(intents=list(intents), plugin_id=plugin_id)
    (plugin_dir / "plugin.py").write_text(source, encoding="utf-8")
    return plugin_dir


@pytest.fixture
def user_root(tmp_path: Path) -> Path:
    root = tmp_path / "user"
    root.mkdir()
    return root


@pytest.fixture
def system_root(tmp_path: Path) -> Path:
    root = tmp_path / "system"
    root.mkdir()
    return root


@pytest.fixture
def discovery_config(system_root: Path, user_root: Path):
    """Factory for an enabled discovery config over the temporary roots"""
    def _make(**overrides) -> PluginDiscoveryConfig:
        values = {
            "enabled": True,
            "system_directory": system_root,
            "user_directory": user_root,
        }
        values.update(overrides)
        return PluginDiscoveryConfig(**values)
    return _make


@pytest.fixture
def extra_directory(tmp_path: Path):
    """Factory for an additional plugin directory entry"""
    def _make(name: str, system: bool = False) -> PluginDirectoryConfig:
        path = tmp_path / name
        path.mkdir(exist_ok=True)
        return PluginDirectoryConfig(path=path, system=system)
    return _make


@pytest.fixture
def make_plugin():
    """The write_plugin helper, as a fixture"""
    return write_plugin
