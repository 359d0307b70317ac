#!/usr/bin/env python3
"""
Tests for configuration management module.
"""

import json
import pytest
from unittest.mock import patch

from couch_shell.config import DEFAULTS, Config, ConfigManager, get_config, get_config_manager


# ============================================================================
# Config Model Tests
# ============================================================================

class TestConfig:
    """Tests for Config model."""

    def test_create_empty_config(self):
        """Test creating config with all defaults."""
        cfg = Config()
        assert cfg.server is None
        assert cfg.username is None
        assert cfg.plugins is None
        assert cfg.history_size is None
        assert cfg.timeout is None
        assert cfg.color is None
        assert cfg.simple is None
        assert cfg.log_file is None

    def test_create_config_with_values(self):
        """Test creating config with specific values."""
        cfg = Config(
            server="localhost:5984",
            plugins=["stats"],
            history_size=20,
            color=False,
        )
        assert cfg.server == "localhost:5984"
        assert cfg.plugins == ["stats"]
        assert cfg.history_size == 20
        assert cfg.color is False

    def test_history_size_must_be_positive(self):
        with pytest.raises(ValueError):
            Config(history_size=0)

    def test_get_with_value(self):
        """Test get method when value exists."""
        cfg = Config(history_size=5)
        assert cfg.get("history_size") == 5
        assert cfg.get("history_size", 8) == 5

    def test_get_with_none(self):
        """Test get method when value is None falls back to DEFAULTS."""
        cfg = Config()
        assert cfg.get("history_size") == DEFAULTS["history_size"]
        # Explicit default is ignored when DEFAULTS has the key
        assert cfg.get("history_size", 8) == DEFAULTS["history_size"]

    def test_get_unknown_key(self):
        """Test get with unknown key returns default."""
        cfg = Config()
        assert cfg.get("unknown_key") is None
        assert cfg.get("unknown_key", "default") == "default"

    def test_unknown_fields_ignored(self):
        cfg = Config.model_validate({"_comment": "x", "server": "s"})
        assert cfg.server == "s"


# ============================================================================
# ConfigManager Tests
# ============================================================================

class TestConfigManager:
    """Tests for ConfigManager."""

    @pytest.fixture
    def temp_config_dir(self, tmp_path):
        """Create temporary config directory."""
        config_dir = tmp_path / ".couch-shell"
        config_dir.mkdir()
        return config_dir

    @pytest.fixture
    def mgr_paths(self, temp_config_dir):
        """Point ConfigManager at the temporary directory."""
        config_file = temp_config_dir / "config.json"
        with patch.object(ConfigManager, 'CONFIG_DIR', temp_config_dir):
            with patch.object(ConfigManager, 'CONFIG_FILE', config_file):
                yield config_file

    def test_load_nonexistent_config(self, mgr_paths):
        """Test loading config when file doesn't exist (without creating)."""
        cfg = ConfigManager().load(create_if_missing=False)
        assert cfg.server is None
        assert not mgr_paths.exists()

    def test_load_creates_default_config(self, mgr_paths):
        """Test that load creates default config file if missing."""
        cfg = ConfigManager().load(create_if_missing=True)
        assert cfg.server is None
        assert mgr_paths.exists()
        content = json.loads(mgr_paths.read_text())
        assert content["history_size"] == DEFAULTS["history_size"]

    def test_save_and_load_config(self, mgr_paths):
        """Test saving and loading config."""
        ConfigManager().save(Config(server="localhost:5984", history_size=20))
        loaded = ConfigManager().load()
        assert loaded.server == "localhost:5984"
        assert loaded.history_size == 20

    def test_save_only_non_none_values(self, mgr_paths):
        """Test that save only writes non-None values."""
        ConfigManager().save(Config(timeout=5.0))
        data = json.loads(mgr_paths.read_text())
        assert data == {"timeout": 5.0}

    def test_set_value(self, mgr_paths):
        """Test setting a config value."""
        ConfigManager().set("server", "couch.example.com")
        assert ConfigManager().load().server == "couch.example.com"

    def test_set_coerces_value(self, mgr_paths):
        """Test that string values are validated into the field type."""
        mgr = ConfigManager()
        mgr.set("history_size", "20")
        assert mgr.get("history_size") == 20

    def test_set_invalid_value_raises(self, mgr_paths):
        with pytest.raises(ValueError):
            ConfigManager().set("history_size", 0)

    def test_set_preserves_other_values(self, mgr_paths):
        """Test that setting one value preserves other existing values."""
        ConfigManager().set("server", "localhost:5984")
        ConfigManager().set("username", "admin")
        ConfigManager().set("plugins", ["stats"])

        final = ConfigManager().load(create_if_missing=False)
        assert final.server == "localhost:5984"
        assert final.username == "admin"
        assert final.plugins == ["stats"]

    def test_set_unknown_key_raises(self, mgr_paths):
        """Test that setting unknown key raises ValueError."""
        with pytest.raises(ValueError, match="Unknown config key"):
            ConfigManager().set("unknown_key", "value")

    def test_unset_value(self, mgr_paths):
        """Test unsetting a config value."""
        mgr = ConfigManager()
        mgr.set("server", "localhost:5984")
        mgr.set("color", False)
        mgr.unset("server")

        loaded = ConfigManager().load()
        assert loaded.server is None
        assert loaded.color is False

    def test_unset_unknown_key_raises(self, mgr_paths):
        with pytest.raises(ValueError):
            ConfigManager().unset("nope")

    def test_get_value(self, mgr_paths):
        """Test getting a config value."""
        mgr = ConfigManager()
        mgr.set("timeout", 5.0)
        assert mgr.get("timeout") == 5.0
        # Unset values fall back to DEFAULTS
        assert mgr.get("history_size") == DEFAULTS["history_size"]

    def test_list_settings(self, mgr_paths):
        """Test listing non-default settings."""
        mgr = ConfigManager()
        mgr.set("history_size", 20)
        mgr.set("color", False)
        assert mgr.list_settings() == {"history_size": 20, "color": False}

    def test_list_settings_skips_default_values(self, mgr_paths):
        mgr = ConfigManager()
        mgr.set("history_size", DEFAULTS["history_size"])
        assert mgr.list_settings() == {}

    def test_reset(self, mgr_paths):
        """Test resetting config to defaults."""
        mgr = ConfigManager()
        mgr.set("server", "localhost:5984")
        assert mgr_paths.exists()

        mgr.reset()
        assert not mgr_paths.exists()
        assert mgr.load().server is None

    def test_load_invalid_json(self, mgr_paths):
        """Test loading invalid JSON returns defaults."""
        mgr_paths.write_text("not valid json")
        assert ConfigManager().load().server is None

    def test_load_invalid_schema(self, mgr_paths):
        """Test loading invalid schema returns defaults."""
        mgr_paths.write_text('{"history_size": "lots"}')
        assert ConfigManager().load().history_size is None


# ============================================================================
# Singleton Tests
# ============================================================================

class TestSingleton:
    """Tests for singleton functions."""

    def test_get_config_manager_returns_same_instance(self, tmp_path):
        """Test that get_config_manager returns singleton."""
        import couch_shell.config.config as config_module

        config_module._manager = None
        with patch.object(ConfigManager, 'CONFIG_DIR', tmp_path):
            with patch.object(ConfigManager, 'CONFIG_FILE', tmp_path / "config.json"):
                assert get_config_manager() is get_config_manager()
        config_module._manager = None

    def test_get_config_returns_config(self, tmp_path):
        """Test that get_config returns Config instance."""
        import couch_shell.config.config as config_module

        config_module._manager = None
        with patch.object(ConfigManager, 'CONFIG_DIR', tmp_path):
            with patch.object(ConfigManager, 'CONFIG_FILE', tmp_path / "config.json"):
                assert isinstance(get_config(), Config)
        config_module._manager = None


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
