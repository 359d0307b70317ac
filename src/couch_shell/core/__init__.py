"""
Core module for the couch_shell package.

Provides the plugin registry, command dispatch, variable resolution, string
interpolation and the response ring buffer.
"""

from couch_shell.core.datamodels import CommandInfo, PluginInfo, VariableInfo
from couch_shell.core.declarations import (
    DeclarationTable,
    command,
    declarations,
    variable,
)
from couch_shell.core.dispatcher import Dispatcher, VariableResolver, split_input
from couch_shell.core.evaluator import Evaluator
from couch_shell.core.exceptions import (
    DuplicatePluginError,
    EvaluationError,
    NameDerivationError,
    NoSuchCommandError,
    NoSuchCommandInPluginError,
    NoSuchPluginError,
    Quit,
    RequestError,
    ShellError,
    ShellUserError,
    UndefinedVariableError,
    UninitializedAccessError,
    UnterminatedExpressionError,
    VarNotSetError,
)
from couch_shell.core.interpolation import interpolate
from couch_shell.core.json_value import JsonValue
from couch_shell.core.naming import derive_plugin_name
from couch_shell.core.plugin import Plugin
from couch_shell.core.registry import PluginRegistry
from couch_shell.core.ring_buffer import RingBuffer

__all__ = [
    # Registry
    "PluginRegistry",
    "DeclarationTable",
    "declarations",
    "command",
    "variable",
    "derive_plugin_name",
    "Plugin",
    # Models
    "PluginInfo",
    "CommandInfo",
    "VariableInfo",
    "JsonValue",
    # Dispatch
    "Dispatcher",
    "VariableResolver",
    "Evaluator",
    "split_input",
    "interpolate",
    "RingBuffer",
    # Exceptions
    "Quit",
    "ShellUserError",
    "ShellError",
    "NameDerivationError",
    "DuplicatePluginError",
    "NoSuchPluginError",
    "NoSuchCommandInPluginError",
    "NoSuchCommandError",
    "UndefinedVariableError",
    "VarNotSetError",
    "UnterminatedExpressionError",
    "EvaluationError",
    "RequestError",
    "UninitializedAccessError",
]
