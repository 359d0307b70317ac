"""
Command dispatch and variable resolution against the plugin registry.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from couch_shell.core.datamodels import CommandInfo, VariableInfo
from couch_shell.core.exceptions import (
    NoSuchCommandError,
    NoSuchCommandInPluginError,
    NoSuchPluginError,
    ShellUserError,
    UndefinedVariableError,
    VarNotSetError,
)
from couch_shell.core.registry import PluginRegistry

_QUALIFIED_RX = re.compile(r"\A@([^.]+)\.(.+)\Z")


def split_input(line: str) -> tuple[str, Optional[str]]:
    """Split an input line into command reference and argument string.

    The split happens on the first run of whitespace; the argument is None
    when the line holds only the reference. No quoting is applied.
    """
    parts = line.strip().split(None, 1)
    if not parts:
        return "", None
    reference = parts[0]
    argument = parts[1] if len(parts) > 1 else None
    return reference, argument


class Dispatcher:
    """Resolves ``name`` and ``@plugin.name`` command references."""

    def __init__(self, registry: PluginRegistry):
        self.registry = registry

    def find(self, reference: str) -> CommandInfo:
        """Resolve ``reference`` to the command it denotes."""
        if reference.startswith("@"):
            match = _QUALIFIED_RX.match(reference)
            if not match:
                raise NoSuchCommandError(reference)
            plugin_name, command_name = match.groups()
            plugin_info = self.registry.lookup_plugin(plugin_name)
            if plugin_info is None:
                raise NoSuchPluginError(plugin_name)
            ci = plugin_info.commands.get(command_name)
            if ci is None:
                raise NoSuchCommandInPluginError(plugin_name, command_name)
            return ci

        ci = self.registry.lookup_command(reference)
        if ci is None:
            raise NoSuchCommandError(reference)
        return ci

    def dispatch(self, reference: str, argument: Optional[str] = None) -> Any:
        """Run the command ``reference`` with ``argument``.

        Errors raised by the command propagate unchanged.
        """
        ci = self.find(reference)
        plugin = self.registry.instance(ci.plugin_name)
        if plugin is None:
            raise NoSuchPluginError(ci.plugin_name)
        return getattr(plugin, ci.execute_method)(argument)


class VariableResolver:
    """Resolves variable names to values via the owning plugin."""

    def __init__(self, registry: PluginRegistry):
        self.registry = registry

    def find(self, name: str) -> tuple[VariableInfo, tuple[Any, ...]]:
        """Find the variable for ``name`` and the arguments for its lookup."""
        vi = self.registry.lookup_variable(name)
        if vi is not None:
            return vi, ()
        for vi in self.registry.variable_prefixes():
            if vi.matches_prefix(name):
                return vi, (name[len(vi.prefix):],)
        raise UndefinedVariableError(name)

    def resolve(self, name: str) -> Any:
        """Value of the unqualified variable ``name``.

        Exact names win over prefixes; prefixes are tried in registration
        order and the lookup gets the rest of the name after the prefix.
        """
        vi, args = self.find(name)
        return self._lookup(vi, args)

    def resolve_qualified(self, plugin_name: str, name: str) -> Any:
        """Value of ``@plugin_name.name``, ignoring other plugins' variables."""
        plugin_info = self.registry.lookup_plugin(plugin_name)
        if plugin_info is None:
            raise NoSuchPluginError(plugin_name)
        for vi in plugin_info.variables:
            if vi.name is not None and vi.name == name:
                return self._lookup(vi, ())
            if vi.matches_prefix(name):
                return self._lookup(vi, (name[len(vi.prefix):],))
        raise ShellUserError(f"no variable {name} in plugin {plugin_name}")

    def _lookup(self, vi: VariableInfo, args: tuple[Any, ...]) -> Any:
        plugin = self.registry.instance(vi.plugin_name)
        if plugin is None:
            raise NoSuchPluginError(vi.plugin_name)
        try:
            return getattr(plugin, vi.lookup_method)(*args)
        except VarNotSetError as e:
            e.var = vi
            raise
