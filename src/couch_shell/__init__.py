"""
couch_shell - interactive shell for CouchDB

Commands and variables are contributed by plugins. A plugin is a class
whose ``execute_*`` and ``lookup_*`` methods are declared with the
``command`` / ``variable`` decorators; the shell dispatches input lines to
them and interpolates ``$(...)`` expressions in arguments.

Example usage:
    from couch_shell import Plugin, Shell, command

    class HelloPlugin(Plugin):

        @command("Greet someone.", synopsis="NAME")
        def execute_hello(self, argstr):
            self.shell.puts(f"hello {argstr}")

    shell = Shell()
    shell.plugin("core")
    shell.execute("server localhost:5984")
    shell.execute("get /_all_dbs")
"""

__version__ = "0.1.0"

# Core exports
from couch_shell.core import (
    CommandInfo,
    JsonValue,
    Plugin,
    PluginInfo,
    PluginRegistry,
    Quit,
    RingBuffer,
    ShellError,
    ShellUserError,
    VariableInfo,
    VarNotSetError,
    command,
    derive_plugin_name,
    interpolate,
    variable,
)


# Lazy import for Shell (pulls in httpx and the plugin loader)
def __getattr__(name):
    if name == "Shell":
        from couch_shell.shell import Shell
        return Shell
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version
    "__version__",
    # Core
    "Plugin",
    "PluginRegistry",
    "PluginInfo",
    "CommandInfo",
    "VariableInfo",
    "JsonValue",
    "RingBuffer",
    "command",
    "variable",
    "derive_plugin_name",
    "interpolate",
    "Quit",
    "ShellUserError",
    "ShellError",
    "VarNotSetError",
    # Shell (lazy loaded)
    "Shell",
]
