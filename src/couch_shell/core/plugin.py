"""
Base class for shell plugins.

A plugin contributes commands (``execute_*`` methods) and variables
(``lookup_*`` / ``lookup_prefix_*`` methods) declared with the
``command``/``variable`` decorators. Its plugin name is derived from the
class name: ``CoreHelpPlugin`` becomes ``core_help``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from couch_shell.core.datamodels import PluginInfo
from couch_shell.core.exceptions import ShellError

if TYPE_CHECKING:
    from couch_shell.http.response import Response
    from couch_shell.shell import Shell


class Plugin:
    """Plugin base class.

    Don't override ``__init__``; override ``plugin_initialization`` for
    custom setup. Plugins talk to the shell only through ``self.shell``.
    """

    def __init__(self, shell: "Shell", plugin_info: PluginInfo):
        self._shell = shell
        self._plugin_info = plugin_info

    @property
    def shell(self) -> "Shell":
        return self._shell

    @property
    def plugin_info(self) -> PluginInfo:
        return self._plugin_info

    @property
    def plugin_name(self) -> str:
        return self._plugin_info.plugin_name

    def plugin_initialization(self) -> None:
        """Called after the plugin is registered. Does nothing by default."""

    def dbname(self) -> str:
        """First path element, raising ShellError at the server root."""
        if not self.shell.pathstack:
            raise ShellError("must cd into database")
        return self.shell.pathstack[0]

    def ensure_at_database(self) -> None:
        if len(self.shell.pathstack) != 1:
            raise ShellError("current directory must be database")

    def confirm(self, msg: str) -> None:
        """Show msg and raise ShellError unless the user just hits ENTER."""
        self.shell.prompt_msg(msg, newline=False)
        if self.shell.read_line().strip():
            raise ShellError("cancelled")

    def request_or_fail(
        self,
        method: str,
        path: Optional[str],
        body: Any = None,
        show_body: bool = True,
    ) -> "Response":
        """Like shell.request, but raise ShellError unless the response is ok."""
        res = self.shell.request(method, path, body, show_body)
        if res is None or not res.ok:
            raise ShellError("required request failed")
        return res
