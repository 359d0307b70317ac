"""
Plugin loader - resolves plugin names to plugin classes and loads them.

Plugins are looked up in:
1. ~/.couch-shell/plugins/ (user-hackable, ``<name>/__init__.py`` or ``<name>.py``)
2. Package builtins (couch_shell.plugins.builtins.<name>)

A plugin module defines one or more Plugin subclasses:

    # ~/.couch-shell/plugins/stats/__init__.py
    from couch_shell.core import Plugin, command

    class StatsPlugin(Plugin):

        @command("Show server statistics.")
        def execute_stats(self, argstr):
            self.shell.request("GET", "/_node/_local/_stats")
"""

from __future__ import annotations

import importlib
import inspect
import logging
import sys
from importlib.util import module_from_spec, spec_from_file_location
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, Optional

from couch_shell.core.declarations import declarations
from couch_shell.core.exceptions import (
    DuplicatePluginError,
    NameDerivationError,
    ShellError,
)
from couch_shell.core.naming import derive_plugin_name, is_valid_plugin_name
from couch_shell.core.plugin import Plugin

if TYPE_CHECKING:
    from couch_shell.shell import Shell

logger = logging.getLogger(__name__)

# Default user plugins directory
USER_PLUGINS_DIR = Path.home() / ".couch-shell" / "plugins"

# Package builtins
BUILTIN_PACKAGE = "couch_shell.plugins.builtins"


def _user_plugin_path(name: str, user_dir: Path) -> Optional[Path]:
    package_init = user_dir / name / "__init__.py"
    if package_init.exists():
        return package_init
    module_file = user_dir / f"{name}.py"
    if module_file.exists():
        return module_file
    return None


def import_plugin_module(name: str, user_dir: Path | None = None) -> ModuleType:
    """Import the module for plugin ``name``.

    Raises:
        ShellError: no module found, or it failed to import.
    """
    user_dir = user_dir or USER_PLUGINS_DIR
    if not name or name.startswith((".", "_")) or "/" in name:
        raise ShellError(f"invalid plugin name: {name!r}")

    path = _user_plugin_path(name, user_dir)
    if path is not None:
        module_name = f"couch_shell_user_plugin.{name}"
        spec = spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise ShellError(f"Could not create module spec for {path}")
        module = module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(module_name, None)
            raise ShellError(f"Failed to load plugin '{name}' from {path}: {e}") from e
        return module

    try:
        return importlib.import_module(f"{BUILTIN_PACKAGE}.{name}")
    except ModuleNotFoundError as e:
        if e.name and e.name.startswith(BUILTIN_PACKAGE):
            raise ShellError(f"No such plugin: {name}") from e
        raise ShellError(f"Failed to load plugin '{name}': {e}") from e


def plugin_classes(module: ModuleType) -> list[type[Plugin]]:
    """Plugin subclasses defined in ``module``, in definition order."""
    return [
        value for value in vars(module).values()
        if inspect.isclass(value)
        and issubclass(value, Plugin)
        and value is not Plugin
        and value.__module__ == module.__name__
    ]


def load_plugin(shell: "Shell", name: str, user_dir: Path | None = None) -> list[Plugin]:
    """Load every plugin class of module ``name`` into the shell.

    Names of all classes are checked before any of them is registered, so a
    failing load leaves the registry as it was.

    Returns:
        The new plugin instances.
    """
    module = import_plugin_module(name, user_dir)
    classes = plugin_classes(module)
    if not classes:
        raise ShellError(f"Module for plugin '{name}' defines no plugin class")

    infos = []
    names: set[str] = set()
    for cls in classes:
        plugin_name = derive_plugin_name(cls.__qualname__)
        if not is_valid_plugin_name(plugin_name):
            raise NameDerivationError(cls.__qualname__, plugin_name)
        if plugin_name in shell.registry or plugin_name in names:
            raise DuplicatePluginError(plugin_name)
        names.add(plugin_name)
        infos.append(declarations.build_plugin_info(cls, plugin_name))

    instances = []
    for cls, info in zip(classes, infos):
        instance = cls(shell, info)
        shell.registry.load(info, instance)
        instances.append(instance)
        logger.info(f"Loaded plugin {info.plugin_name} from {module.__name__}")

    for instance in instances:
        instance.plugin_initialization()
    return instances
