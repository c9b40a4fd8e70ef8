"""
Tests for plugin configuration and character definition loading
"""

import json
import logging

import pytest

from neurocore.config.plugin_config_loader import PluginConfigError, PluginConfigLoader


PLUGIN_CONFIG = {
    "name": "chat",
    "version": "1.0.0",
    "description": "Chat plugin",
    "exposedIntents": [{"action": "chat:send", "description": "Send"}],
    "requiredIntents": [{"action": "memory:store", "required": True}],
    "config": {"required": ["model"], "defaults": {"model": "small"}},
}

CHARACTER = {
    "id": "ada-v1",
    "name": "Ada",
    "bio": ["Mathematician"],
    "adjectives": ["precise"],
    "style": {"all": ["concise"], "chat": ["friendly"]},
    "messageExamples": [[{"user": "a"}, {"user": "b"}]],
}


@pytest.fixture
def loader():
    return PluginConfigLoader()


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestPluginConfig:
    """Test plugin configuration validation"""

    def test_valid_config(self, loader, tmp_path):
        data = loader.load_plugin_config(_write(tmp_path / "plugin-config.json", PLUGIN_CONFIG))
        assert data["name"] == "chat"

    def test_missing_required_fields(self, loader):
        result = loader.validate_plugin_config({"name": "chat"})
        assert result.valid is False
        assert "Missing required field: version" in result.errors
        assert "Missing required field: exposedIntents" in result.errors

    def test_exposed_intent_without_action(self, loader):
        config = dict(PLUGIN_CONFIG, exposedIntents=[{"description": "no action"}])
        result = loader.validate_plugin_config(config)
        assert result.valid is False
        assert "Missing required field: exposedIntents.0.action" in result.errors

    def test_bare_string_intents_are_accepted(self, loader):
        config = dict(PLUGIN_CONFIG, exposedIntents=["chat:send"])
        result = loader.validate_plugin_config(config)
        assert result.valid is True
        assert "Exposed intent 'chat:send' is missing 'description'" in result.warnings

    def test_blank_action_is_error(self, loader):
        config = dict(PLUGIN_CONFIG, exposedIntents=[{"action": "  "}])
        assert loader.validate_plugin_config(config).valid is False

    def test_empty_exposed_intents_is_error(self, loader):
        result = loader.validate_plugin_config(dict(PLUGIN_CONFIG, exposedIntents=[]))
        assert result.valid is False
        assert any(error.startswith("exposedIntents:") for error in result.errors)

    def test_warnings_do_not_invalidate(self, loader, tmp_path, caplog):
        config = dict(PLUGIN_CONFIG)
        config["requiredIntents"] = [{"action": "memory:store"}]
        config["config"] = {"required": ["model"], "defaults": {}}
        result = loader.validate_plugin_config(config)
        assert result.valid is True
        assert len(result.warnings) == 2

        with caplog.at_level(logging.WARNING):
            loader.load_plugin_config(_write(tmp_path / "config.json", config))
        assert "Plugin configuration warnings" in caplog.text

    def test_missing_config_section_is_warning(self, loader):
        config = {k: v for k, v in PLUGIN_CONFIG.items() if k != "config"}
        result = loader.validate_plugin_config(config)
        assert result.valid is True
        assert "Missing 'config' section" in result.warnings

    def test_invalid_config_raises(self, loader, tmp_path):
        with pytest.raises(PluginConfigError, match="Invalid plugin configuration"):
            loader.load_plugin_config(_write(tmp_path / "config.json", {"name": "chat"}))

    def test_missing_file_raises(self, loader, tmp_path):
        with pytest.raises(PluginConfigError, match="not found"):
            loader.load_plugin_config(tmp_path / "absent.json")

    def test_invalid_json_raises(self, loader, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{nope", encoding="utf-8")
        with pytest.raises(PluginConfigError, match="Invalid JSON"):
            loader.load_plugin_config(path)

    def test_undecodable_file_raises(self, loader, tmp_path):
        path = tmp_path / "config.json"
        path.write_bytes(b'{"name": "chat\xff"}')
        with pytest.raises(PluginConfigError, match="Invalid JSON"):
            loader.load_plugin_config(path)


class TestCharacterDefinition:
    """Test character definition validation"""

    def test_valid_character(self, loader, tmp_path):
        character = loader.load_character_definition(_write(tmp_path / "ada.json", CHARACTER))
        assert loader.character_id(character) == "ada-v1"

    def test_character_id_falls_back_to_name(self, loader):
        assert loader.character_id({"name": "Ada"}) == "Ada"

    def test_missing_bio_is_error(self, loader):
        result = loader.validate_character_definition({"name": "Ada"})
        assert result.valid is False
        assert "Missing required field: bio" in result.errors

    def test_bio_must_be_list(self, loader):
        result = loader.validate_character_definition({"name": "Ada", "bio": "Mathematician"})
        assert result.valid is False
        assert any(error.startswith("bio:") for error in result.errors)

    def test_empty_name_is_error(self, loader):
        assert loader.validate_character_definition({"name": "", "bio": ["x"]}).valid is False

    def test_short_message_example_is_warning(self, loader):
        result = loader.validate_character_definition(dict(CHARACTER, messageExamples=[[{"user": "a"}]]))
        assert result.valid is True
        assert result.warnings == ["Message example at index 0 should contain at least 2 messages"]

    def test_invalid_character_raises(self, loader, tmp_path):
        with pytest.raises(PluginConfigError, match="Invalid character definition: Missing required field: bio"):
            loader.load_character_definition(_write(tmp_path / "ada.json", {"name": "Ada"}))

    def test_minimal_character_has_warnings(self, loader):
        result = loader.validate_character_definition({"name": "Ada", "bio": ["x"]})
        assert result.valid is True
        assert len(result.warnings) == 3

    def test_style_context_must_be_list(self, loader):
        result = loader.validate_character_definition(dict(CHARACTER, style={"chat": "friendly"}))
        assert result.valid is False
        assert any(error.startswith("style.chat:") for error in result.errors)


class TestLocateConfigFiles:
    """Test discovery of config files inside a plugin directory"""

    def test_prefers_plugin_config(self, loader, tmp_path):
        _write(tmp_path / "config.json", {})
        _write(tmp_path / "plugin-config.json", {})
        (tmp_path / "characters").mkdir()
        _write(tmp_path / "characters" / "b.json", {})
        _write(tmp_path / "characters" / "a.json", {})
        (tmp_path / "characters" / "notes.txt").write_text("ignored", encoding="utf-8")

        located = loader.locate_config_files(tmp_path)

        assert located.plugin_config == tmp_path / "plugin-config.json"
        assert [p.name for p in located.character_definitions] == ["a.json", "b.json"]

    def test_empty_directory(self, loader, tmp_path):
        located = loader.locate_config_files(tmp_path)
        assert located.plugin_config is None
        assert located.character_definitions == []
