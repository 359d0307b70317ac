"""
Plugin registry: loaded plugins and the commands/variables they export.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator

from couch_shell.core.datamodels import CommandInfo, PluginInfo, VariableInfo
from couch_shell.core.exceptions import DuplicatePluginError, NameDerivationError
from couch_shell.core.naming import is_valid_plugin_name

logger = logging.getLogger(__name__)


class PluginRegistry:
    """Registry for plugins, commands and variables.

    Name collisions between commands or variables of different plugins are
    not errors: the first registrant keeps the unqualified name, the later
    one is reported to the warning sink and stays reachable through its
    qualified ``@plugin.name`` form.
    """

    def __init__(self, warn: Callable[[str], None] | None = None):
        self._plugins: dict[str, PluginInfo] = {}
        self._instances: dict[str, Any] = {}
        self._commands: dict[str, CommandInfo] = {}
        self._variables: dict[str, VariableInfo] = {}
        self._variable_prefixes: list[VariableInfo] = []
        self._warn = warn or logger.warning

    def register(self, plugin_info: PluginInfo, instance: Any = None) -> None:
        """Add a plugin without touching the command/variable tables."""
        self._check_registrable(plugin_info)
        self._plugins[plugin_info.plugin_name] = plugin_info
        if instance is not None:
            self._instances[plugin_info.plugin_name] = instance

    def load(self, plugin_info: PluginInfo, instance: Any = None) -> None:
        """Register a plugin and index everything it exports.

        All checks that can fail run before any table is modified.
        """
        self._check_registrable(plugin_info)
        self.register(plugin_info, instance)
        for ci in plugin_info.commands.values():
            self.add_command(plugin_info, ci)
        for vi in plugin_info.variables:
            self.add_variable(plugin_info, vi)
        logger.debug(
            f"Loaded plugin {plugin_info.plugin_name}: "
            f"{len(plugin_info.commands)} commands, {len(plugin_info.variables)} variables"
        )

    def _check_registrable(self, plugin_info: PluginInfo) -> None:
        name = plugin_info.plugin_name
        if not is_valid_plugin_name(name):
            raise NameDerivationError(plugin_info.class_name, name)
        if name in self._plugins:
            raise DuplicatePluginError(name)

    def add_command(self, plugin_info: PluginInfo, command: CommandInfo) -> bool:
        """Index a command under its unqualified name.

        Returns False (after warning) if another plugin already owns the name.
        """
        existing = self._commands.get(command.name)
        if existing is not None:
            self._warn(
                f"command {command.name} from plugin {plugin_info.plugin_name} "
                f"conflicts with {existing.name} from plugin {existing.plugin_name}, "
                f"use @{plugin_info.plugin_name}.{command.name}"
            )
            return False
        self._commands[command.name] = command
        return True

    def add_variable(self, plugin_info: PluginInfo, variable: VariableInfo) -> bool:
        """Index a variable by exact name or in the ordered prefix list.

        Prefixes only collide when the prefix strings are equal.
        """
        if variable.name is not None:
            existing = self._variables.get(variable.name)
        else:
            existing = next(
                (vi for vi in self._variable_prefixes if vi.prefix == variable.prefix),
                None,
            )
        if existing is not None:
            self._warn(
                f"variable {variable.label} from plugin {plugin_info.plugin_name} "
                f"conflicts with {existing.label} from plugin {existing.plugin_name}"
            )
            return False
        if variable.name is not None:
            self._variables[variable.name] = variable
        else:
            self._variable_prefixes.append(variable)
        return True

    def lookup_plugin(self, name: str) -> PluginInfo | None:
        return self._plugins.get(name)

    def lookup_command(self, name: str) -> CommandInfo | None:
        return self._commands.get(name)

    def lookup_variable(self, name: str) -> VariableInfo | None:
        """Exact variable name lookup (prefix variables are not consulted)."""
        return self._variables.get(name)

    def instance(self, plugin_name: str) -> Any:
        """Get the plugin instance commands of ``plugin_name`` run on."""
        return self._instances.get(plugin_name)

    def variable_prefixes(self) -> list[VariableInfo]:
        return list(self._variable_prefixes)

    def plugins(self) -> list[PluginInfo]:
        """Loaded plugins in load order."""
        return list(self._plugins.values())

    def commands(self) -> list[CommandInfo]:
        """Unqualified commands sorted by name."""
        return sorted(self._commands.values(), key=lambda c: c.name)

    def variables(self) -> list[VariableInfo]:
        """Unqualified variables: named ones sorted, then prefixes in order."""
        named = sorted(self._variables.values(), key=lambda v: v.name or "")
        return named + list(self._variable_prefixes)

    def __contains__(self, plugin_name: str) -> bool:
        return plugin_name in self._plugins

    def __iter__(self) -> Iterator[PluginInfo]:
        return iter(self._plugins.values())

    def __len__(self) -> int:
        return len(self._plugins)
