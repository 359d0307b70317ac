#!/usr/bin/env python3
"""
Tests for plugin name derivation.
"""

import pytest

from couch_shell.core.naming import derive_plugin_name, is_valid_plugin_name


# ============================================================================
# Derivation Tests
# ============================================================================

class TestDerivePluginName:
    """Tests for derive_plugin_name."""

    @pytest.mark.parametrize("identifier,expected", [
        ("CorePlugin", "core"),
        ("HTTP", "http"),
        ("HttpClient", "http_client"),
        ("HTTPClient", "http_client"),
        ("HttpC", "http_c"),
        ("HClient", "h_client"),
        ("Http11Client", "http11_client"),
        ("HTTP11Client", "http11_client"),
        ("Test0", "test0"),
        ("Http_Client", "http_client"),
    ])
    def test_known_names(self, identifier, expected):
        """Test the canonical class name -> plugin name table."""
        assert derive_plugin_name(identifier) == expected

    def test_namespace_is_stripped(self):
        """Test that only the last segment of a dotted name is used."""
        assert derive_plugin_name("couch_shell.plugins.CoreHelpPlugin") == "core_help"

    def test_double_colon_namespace_is_stripped(self):
        """Test that :: separated namespaces are stripped too."""
        assert derive_plugin_name("Outer::HTTPClientPlugin") == "http_client"

    def test_suffix_removed_only_at_end(self):
        """Test that Plugin in the middle of a name is kept."""
        assert derive_plugin_name("PluginManager") == "plugin_manager"

    def test_bare_suffix_gives_empty_name(self):
        """Test that a class called just Plugin derives to an empty name."""
        assert derive_plugin_name("Plugin") == ""

    def test_deterministic(self):
        """Test repeated calls return the same value."""
        assert derive_plugin_name("CouchDBStats") == derive_plugin_name("CouchDBStats")
        assert derive_plugin_name("CouchDBStats") == "couch_db_stats"


# ============================================================================
# Validation Tests
# ============================================================================

class TestIsValidPluginName:
    """Tests for is_valid_plugin_name."""

    @pytest.mark.parametrize("name", ["core", "core_help", "http11_client", "a"])
    def test_valid(self, name):
        assert is_valid_plugin_name(name)

    @pytest.mark.parametrize("name", ["", "_core", "1core", "core-help", "core help"])
    def test_invalid(self, name):
        assert not is_valid_plugin_name(name)
