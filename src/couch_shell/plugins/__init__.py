"""
Plugin system for couch-shell.

Plugins are loaded from:
1. ~/.couch-shell/plugins/ (user-hackable)
2. Package builtins (core, core_help)
"""

from __future__ import annotations

from couch_shell.plugins.loader import (
    BUILTIN_PACKAGE,
    USER_PLUGINS_DIR,
    import_plugin_module,
    load_plugin,
    plugin_classes,
)

# Plugins every shell starts with
DEFAULT_PLUGINS = ["core", "core_help"]

__all__ = [
    "BUILTIN_PACKAGE",
    "DEFAULT_PLUGINS",
    "USER_PLUGINS_DIR",
    "import_plugin_module",
    "load_plugin",
    "plugin_classes",
]
