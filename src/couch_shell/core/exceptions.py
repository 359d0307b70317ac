"""
Exception classes for the shell core.

Everything deriving from ShellUserError is recoverable: the shell reports the
message for the current input line and keeps reading. Quit is the only
exception that ends the read loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from couch_shell.core.datamodels import VariableInfo


class Quit(Exception):
    """Raised to leave the read-execute loop."""


class ShellUserError(Exception):
    """Base exception for user-facing, per-line errors."""


class ShellError(ShellUserError):
    """Generic error raised by plugin commands and variables."""


class NameDerivationError(ShellUserError):
    """A plugin class name doesn't derive to a valid plugin name."""

    def __init__(self, class_name: str, plugin_name: str):
        self.class_name = class_name
        self.plugin_name = plugin_name
        super().__init__(f"invalid plugin name {plugin_name!r} (from class {class_name})")


class DuplicatePluginError(ShellUserError):
    """A plugin with the same derived name is already loaded."""

    def __init__(self, plugin_name: str):
        self.plugin_name = plugin_name
        super().__init__(f"Plugin already registered: {plugin_name}")


class NoSuchPluginError(ShellUserError):
    """Qualified reference names a plugin that isn't loaded."""

    def __init__(self, plugin_name: str):
        self.plugin_name = plugin_name
        super().__init__(f"No such plugin registered: {plugin_name}")


class NoSuchCommandInPluginError(ShellUserError):
    """Plugin exists but doesn't define the command."""

    def __init__(self, plugin_name: str, command_name: str):
        self.plugin_name = plugin_name
        self.command_name = command_name
        super().__init__(f"Plugin {plugin_name} doesn't define a {command_name} command.")


class NoSuchCommandError(ShellUserError):
    """No plugin exports the unqualified command name."""

    def __init__(self, command_name: str):
        self.command_name = command_name
        super().__init__(f"No such command: {command_name}")


class UndefinedVariableError(ShellUserError):
    """No exact or prefix variable matches the name."""

    def __init__(self, varname: str):
        self.varname = varname
        super().__init__(f"Variable `{varname}' is not defined.")


class VarNotSetError(ShellError):
    """A variable exists but currently has no value.

    The resolver attaches the matching VariableInfo as ``var`` before the
    error leaves it.
    """

    def __init__(self, var: VariableInfo | None = None):
        self.var = var
        super().__init__()

    def __str__(self) -> str:
        if self.var is None:
            return "Variable not set."
        return f"Variable @{self.var.plugin_name}.{self.var.label} not set."


class UnterminatedExpressionError(ShellUserError):
    """A $( span in an interpolated string is never closed."""

    def __init__(self, template: str, expr: str):
        self.template = template
        self.expr = expr
        super().__init__(f"unterminated expression $({expr} in {template!r}")


class EvaluationError(ShellUserError):
    """An expression could not be parsed or evaluated."""


class RequestError(ShellError):
    """An HTTP request could not be performed."""


class UninitializedAccessError(IndexError):
    """Read of a ring buffer slot that was never written."""

    def __init__(self, index: Any):
        self.index = index
        super().__init__(f"uninitialized RingBuffer access at index {index}")
