"""
Command and variable declarations for plugin classes.

Plugin classes declare their commands and variables in a static table that
maps plugin class -> list of (method name, metadata). The table is filled by
ordinary calls, either directly:

    declarations.add_command(CorePlugin, "execute_get", "Perform a GET request.")

or by tagging methods with the decorators below and calling
``declarations.collect(CorePlugin)`` once when the plugin is loaded:

    class CorePlugin(Plugin):

        @command("Perform a GET http request.", synopsis="[URL]")
        def execute_get(self, argstr):
            ...

        @variable("Get response with index X.")
        def lookup_prefix_r(self, suffix):
            ...

The decorators only attach metadata to the function; nothing is registered
until ``collect`` runs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from couch_shell.core.datamodels import CommandInfo, PluginInfo, VariableInfo

COMMAND_ATTR = "__couch_shell_command__"
VARIABLE_ATTR = "__couch_shell_variable__"

_EXECUTE_RX = re.compile(r"\Aexecute_(.+)\Z")
_LOOKUP_PREFIX_RX = re.compile(r"\Alookup_prefix_(.+)\Z")
_LOOKUP_RX = re.compile(r"\Alookup_(.+)\Z")


@dataclass
class Declaration:
    """One declared command or variable of a plugin class."""

    kind: str  # "command" or "variable"
    method_name: str
    options: dict[str, Any] = field(default_factory=dict)


def command(
    doc_line: str,
    *,
    name: str | None = None,
    synopsis: str | None = None,
    doc_text: str | None = None,
    tags: list[str] | None = None,
) -> Callable:
    """Tag a plugin method as a command.

    Without ``name`` the command name comes from an ``execute_<name>``
    method name.
    """
    def decorator(func: Callable) -> Callable:
        setattr(func, COMMAND_ATTR, {
            "doc_line": doc_line,
            "name": name,
            "synopsis": synopsis,
            "doc_text": doc_text,
            "tags": list(tags or []),
        })
        return func
    return decorator


def variable(
    doc_line: str,
    *,
    name: str | None = None,
    prefix: str | None = None,
    doc_text: str | None = None,
    tags: list[str] | None = None,
) -> Callable:
    """Tag a plugin method as a variable lookup.

    Without ``name``/``prefix`` the method name decides: ``lookup_prefix_<p>``
    declares prefix ``p``, ``lookup_<n>`` declares name ``n``.
    """
    def decorator(func: Callable) -> Callable:
        setattr(func, VARIABLE_ATTR, {
            "doc_line": doc_line,
            "name": name,
            "prefix": prefix,
            "doc_text": doc_text,
            "tags": list(tags or []),
        })
        return func
    return decorator


class DeclarationTable:
    """Static table of plugin class -> declarations."""

    def __init__(self):
        self._table: dict[type, list[Declaration]] = {}
        self._collected: set[type] = set()

    def add_command(
        self,
        plugin_class: type,
        method_name: str,
        doc_line: str,
        *,
        name: str | None = None,
        synopsis: str | None = None,
        doc_text: str | None = None,
        tags: list[str] | None = None,
    ) -> None:
        """Declare ``method_name`` of ``plugin_class`` as a command."""
        self._table.setdefault(plugin_class, []).append(Declaration(
            kind="command",
            method_name=method_name,
            options={
                "doc_line": doc_line,
                "name": name,
                "synopsis": synopsis,
                "doc_text": doc_text,
                "tags": list(tags or []),
            },
        ))

    def add_variable(
        self,
        plugin_class: type,
        method_name: str,
        doc_line: str,
        *,
        name: str | None = None,
        prefix: str | None = None,
        doc_text: str | None = None,
        tags: list[str] | None = None,
    ) -> None:
        """Declare ``method_name`` of ``plugin_class`` as a variable lookup."""
        self._table.setdefault(plugin_class, []).append(Declaration(
            kind="variable",
            method_name=method_name,
            options={
                "doc_line": doc_line,
                "name": name,
                "prefix": prefix,
                "doc_text": doc_text,
                "tags": list(tags or []),
            },
        ))

    def collect(self, plugin_class: type) -> list[Declaration]:
        """Record the decorator-tagged methods of ``plugin_class``.

        Runs once per class; methods are taken in definition order, base
        classes first. An overriding method that is tagged again replaces
        the base class metadata.
        """
        if plugin_class not in self._collected:
            self._collected.add(plugin_class)
            names: list[str] = []
            for klass in reversed(plugin_class.__mro__):
                for attr_name, value in vars(klass).items():
                    if attr_name not in names and _is_tagged(value):
                        names.append(attr_name)
            for attr_name in names:
                value = _most_derived_tagged(plugin_class, attr_name)
                if hasattr(value, COMMAND_ATTR):
                    kind, options = "command", getattr(value, COMMAND_ATTR)
                else:
                    kind, options = "variable", getattr(value, VARIABLE_ATTR)
                self._table.setdefault(plugin_class, []).append(Declaration(
                    kind=kind,
                    method_name=attr_name,
                    options=dict(options),
                ))
        return self.get(plugin_class)

    def get(self, plugin_class: type) -> list[Declaration]:
        return list(self._table.get(plugin_class, []))

    def build_plugin_info(self, plugin_class: type, plugin_name: str) -> PluginInfo:
        """Turn the declarations of ``plugin_class`` into a PluginInfo."""
        info = PluginInfo(plugin_name=plugin_name, plugin_class=plugin_class)
        for decl in self.collect(plugin_class):
            if decl.kind == "command":
                ci = _command_info(decl, plugin_name)
                if ci.name in info.commands:
                    raise ValueError(
                        f"command {ci.name} already declared in plugin {plugin_name}"
                    )
                info.commands[ci.name] = ci
            else:
                info.variables.append(_variable_info(decl, plugin_name))
        return info


def _is_tagged(value: Any) -> bool:
    return hasattr(value, COMMAND_ATTR) or hasattr(value, VARIABLE_ATTR)


def _most_derived_tagged(plugin_class: type, attr_name: str) -> Any:
    """The tagged definition of ``attr_name`` closest to ``plugin_class``.

    An untagged override keeps the metadata of the tagged base method.
    """
    for klass in plugin_class.__mro__:
        value = vars(klass).get(attr_name)
        if value is not None and _is_tagged(value):
            return value
    raise KeyError(attr_name)


def _command_info(decl: Declaration, plugin_name: str) -> CommandInfo:
    opts = decl.options
    name: Optional[str] = opts.get("name")
    if not name:
        match = _EXECUTE_RX.match(decl.method_name)
        if not match:
            raise ValueError(f"command name required for method {decl.method_name}")
        name = match.group(1)
    return CommandInfo(
        name=name,
        doc_line=opts["doc_line"],
        execute_method=decl.method_name,
        plugin_name=plugin_name,
        synopsis=opts.get("synopsis"),
        doc_text=opts.get("doc_text"),
        tags=list(opts.get("tags") or []),
    )


def _variable_info(decl: Declaration, plugin_name: str) -> VariableInfo:
    opts = decl.options
    name = opts.get("name")
    prefix = opts.get("prefix")
    if name is None and prefix is None:
        prefix_match = _LOOKUP_PREFIX_RX.match(decl.method_name)
        name_match = _LOOKUP_RX.match(decl.method_name)
        if prefix_match:
            prefix = prefix_match.group(1)
        elif name_match:
            name = name_match.group(1)
    return VariableInfo(
        name=name,
        prefix=prefix,
        doc_line=opts["doc_line"],
        lookup_method=decl.method_name,
        plugin_name=plugin_name,
        doc_text=opts.get("doc_text"),
        tags=list(opts.get("tags") or []),
    )


# Process-wide declaration table, filled at import/load time of plugin classes
declarations = DeclarationTable()
