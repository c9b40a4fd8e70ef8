"""
Tests for configuration models and the configuration manager
"""

import json

import pytest

from neurocore.config.manager import ConfigManager, ConfigValidationError
from neurocore.config.models import (
    DEFAULT_SYSTEM_PLUGIN_DIR,
    CoreConfig,
    LogLevel,
    PluginDirectory,
    PluginDirectoryConfig,
    PluginDiscoveryConfig,
    TieBreak,
)


class TestPluginDiscoveryConfig:
    """Test discovery settings and directory ordering"""

    def test_defaults(self):
        config = PluginDiscoveryConfig()
        assert config.enabled is False
        assert config.use_priority_resolver is True
        assert config.tie_break == TieBreak.PLUGIN_ID
        assert config.substitution_affects_resolution is False
        assert config.system_directory == DEFAULT_SYSTEM_PLUGIN_DIR

    def test_plugin_directories_order(self, tmp_path):
        config = PluginDiscoveryConfig(
            system_directory=tmp_path / "sys",
            user_directory=tmp_path / "usr",
            additional_directories=[
                PluginDirectoryConfig(path=tmp_path / "extra-sys", system=True),
                PluginDirectoryConfig(path=tmp_path / "extra-usr"),
            ],
        )
        directories = config.plugin_directories()
        assert [d.path.name for d in directories] == ["sys", "usr", "extra-sys", "extra-usr"]
        assert [d.is_system for d in directories] == [True, False, True, False]
        assert directories[0] == PluginDirectory(path=tmp_path / "sys", is_system=True)

    def test_directories_can_be_disabled(self):
        config = PluginDiscoveryConfig(system_directory=None, user_directory=None)
        assert config.plugin_directories() == []

    def test_empty_path_disables_directory(self):
        config = PluginDiscoveryConfig(system_directory="", user_directory="  ")
        assert config.system_directory is None
        assert config.user_directory is None
        assert config.plugin_directories() == []

    @pytest.mark.parametrize("handlers", [{"": "p1"}, {"chat:send": ""}, {"chat:send": "  "}])
    def test_invalid_intent_handlers(self, handlers):
        with pytest.raises(ValueError):
            PluginDiscoveryConfig(intent_handlers=handlers)

    def test_tie_break_from_string(self):
        assert PluginDiscoveryConfig(tie_break="load_order").tie_break == TieBreak.LOAD_ORDER


class TestCoreConfig:
    """Test core settings and environment overrides"""

    def test_debug_forces_debug_level(self):
        assert CoreConfig(debug=True).log_level == LogLevel.DEBUG

    def test_plugin_log_level(self):
        assert CoreConfig().plugin_log_level is None
        assert CoreConfig(plugin_log_level="DEBUG").plugin_log_level == LogLevel.DEBUG

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("NEUROCORE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("NEUROCORE_PLUGINS__ENABLED", "true")
        config = CoreConfig()
        assert config.log_level == LogLevel.WARNING
        assert config.plugins.enabled is True


class TestConfigManager:
    """Test loading and saving configuration files"""

    @pytest.mark.asyncio
    async def test_missing_file_yields_defaults(self, tmp_path):
        config = await ConfigManager().load_config(tmp_path / "absent.toml")
        assert config == CoreConfig()

    @pytest.mark.asyncio
    async def test_toml_round_trip(self, tmp_path):
        manager = ConfigManager()
        original = CoreConfig(
            log_level=LogLevel.WARNING,
            plugins=PluginDiscoveryConfig(
                enabled=True,
                user_directory=tmp_path / "plugins",
                intent_handlers={"chat:send": "p2"},
                tie_break=TieBreak.LOAD_ORDER,
            ),
        )
        path = tmp_path / "neurocore.toml"

        assert await manager.save_config(original, path) is True
        loaded = await manager.load_config(path)

        assert loaded.log_level == LogLevel.WARNING
        assert loaded.plugins.enabled is True
        assert loaded.plugins.user_directory == tmp_path / "plugins"
        assert loaded.plugins.intent_handlers == {"chat:send": "p2"}
        assert loaded.plugins.tie_break == TieBreak.LOAD_ORDER
        assert manager.get_cached_config(path) is loaded

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["neurocore.toml", "neurocore.json"])
    async def test_disabled_directories_survive_round_trip(self, tmp_path, name):
        original = CoreConfig(plugins=PluginDiscoveryConfig(system_directory=None, user_directory=None))
        path = tmp_path / name

        assert await ConfigManager().save_config(original, path) is True
        loaded = await ConfigManager().load_config(path)

        assert loaded.plugins.system_directory is None
        assert loaded.plugins.user_directory is None
        assert loaded.plugins.plugin_directories() == []

    @pytest.mark.asyncio
    async def test_json_config(self, tmp_path):
        path = tmp_path / "neurocore.json"
        path.write_text(json.dumps({"plugins": {"enabled": True, "use_priority_resolver": False}}),
                        encoding="utf-8")
        config = await ConfigManager().load_config(path)
        assert config.plugins.enabled is True
        assert config.plugins.use_priority_resolver is False

    @pytest.mark.asyncio
    async def test_file_values_beat_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NEUROCORE_LOG_LEVEL", "ERROR")
        path = tmp_path / "neurocore.toml"
        path.write_text('log_level = "WARNING"\n', encoding="utf-8")
        config = await ConfigManager().load_config(path)
        assert config.log_level == LogLevel.WARNING

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,content", [
        ("bad.toml", "log_level = "),
        ("bad.json", "{not json"),
        ("list.json", "[1, 2]"),
        ("invalid.toml", 'log_level = "LOUD"\n'),
        ("invalid.json", '{"plugins": {"intent_handlers": {"chat:send": ""}}}'),
        ("config.yaml", "log_level: INFO"),
    ])
    async def test_invalid_files_raise(self, tmp_path, name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            await ConfigManager().load_config(path)

    @pytest.mark.asyncio
    async def test_save_unsupported_format(self, tmp_path):
        assert await ConfigManager().save_config(CoreConfig(), tmp_path / "config.ini") is False
