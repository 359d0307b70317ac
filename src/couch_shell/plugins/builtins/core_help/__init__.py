"""Help plugin - lists commands, variables and plugins."""
from __future__ import annotations

import textwrap
from typing import Optional

from couch_shell.core import Plugin, command

INTRO = """\
couch-shell accepts input in the form of

>> COMMAND [ARGS]

The [] brackets indicate that ARGS are optional, depending on
COMMAND. This convention is used in all couch-shell help.

To get a list of commands, enter:

>> help commands

couch-shell also defines a couple variables. You can print a
variable value with:

>> print VAR

or:

>> format VAR

To get a list of variables, enter:

>> help vars

Commands and variables are organized in plugins. To get a list of
plugins, enter:

>> help plugins

A command or variable of a specific plugin is reached with
@PLUGIN.NAME, e.g. `@core.get /' or `print @core.id'.

If you're new to couch-shell, start by reading about the get, put,
post, delete and cd commands, e.g. `help get'.
"""


class CoreHelpPlugin(Plugin):

    @command("Get help.", synopsis="[TOPIC]",
             doc_text="TOPIC is one of commands, vars, plugins or a command name.")
    def execute_help(self, argstr: Optional[str]) -> None:
        topic = argstr.strip().lower() if argstr else None
        if topic is None:
            self.shell.stdout.write(INTRO)
        elif topic == "commands":
            self.help_commands()
        elif topic in ("vars", "variables"):
            self.help_vars()
        elif topic == "plugins":
            self.help_plugins()
        else:
            self.help_command(topic)

    def help_commands(self) -> None:
        out = self.shell.puts
        out("Available unqualified commands:")
        out()
        for ci in self.shell.registry.commands():
            out(f"  {ci.usage} (from {ci.plugin_name})")
            out(f"    {ci.doc_line}")
            out()

    def help_vars(self) -> None:
        out = self.shell.puts
        out("Available unqualified variables:")
        out()
        for vi in self.shell.registry.variables():
            out(f"  {vi.label} (from {vi.plugin_name})")
            out(f"    {vi.doc_line}")
            out()

    def help_plugins(self) -> None:
        out = self.shell.puts
        out("Loaded plugins:")
        out()
        for info in self.shell.registry.plugins():
            out(f"  {info.plugin_name}")
            out(f"    {len(info.commands)} commands, {len(info.variables)} variables")
            out()

    def help_command(self, reference: str) -> None:
        ci = self.shell.dispatcher.find(reference)
        out = self.shell.puts
        out(f"{ci.usage}")
        out(f"  {ci.doc_line}")
        if ci.doc_text:
            out()
            out(textwrap.indent(textwrap.dedent(ci.doc_text).strip(), "  "))
        out()
        out(f"Defined by plugin {ci.plugin_name}, qualified name @{ci.plugin_name}.{ci.name}")
