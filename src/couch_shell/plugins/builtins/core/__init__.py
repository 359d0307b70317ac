"""Core plugin - HTTP commands, navigation and the standard variables."""
from __future__ import annotations

import subprocess
from typing import Any, Optional

from couch_shell.core import Plugin, command, variable
from couch_shell.core.exceptions import Quit, ShellError, VarNotSetError
from couch_shell.core.interpolation import format_value
from couch_shell.core.json_value import JsonValue
from couch_shell.http import JSON_DOC_START_RX, FileToUpload, Response


class CorePlugin(Plugin):
    """Commands and variables every couch-shell session has."""

    # ------------------------------------------------------------------
    # Variables
    # ------------------------------------------------------------------

    @variable("A fresh uuid from the CouchDB server.")
    def lookup_uuid(self) -> JsonValue:
        self.execute_uuids(None)
        res = self.shell.responses.current_or_none()
        if res is None or not res.ok:
            raise ShellError("uuids request failed")
        json_value = res.json_value
        uuids = json_value.get("uuids") if json_value is not None else None
        if uuids is None or not uuids.is_array() or len(uuids) == 0:
            raise ShellError("unknown json structure")
        return uuids[0]

    @variable("Value of the id or _id member of the last response.")
    def lookup_id(self) -> JsonValue:
        value = self._current_attr("id", "_id")
        if value is None:
            raise VarNotSetError()
        return value

    @variable("Value of the rev or _rev member of the last response.")
    def lookup_rev(self) -> JsonValue:
        value = self._current_attr("rev", "_rev")
        if value is None:
            raise VarNotSetError()
        return value

    @variable("Shortcut for $(id)?rev=$(rev).")
    def lookup_idr(self) -> str:
        return self.shell.interpolate("$(id)?rev=$(rev)")

    @variable("Content-Type of the last response.")
    def lookup_content_type(self) -> str:
        res = self.shell.responses.current_or_none()
        if res is None:
            raise VarNotSetError()
        return res.content_type

    @variable("Current server url.")
    def lookup_server(self) -> str:
        root = self.shell.server_root()
        if root is None:
            raise VarNotSetError()
        return root

    @variable("Get response with index X.")
    def lookup_prefix_r(self, suffix: str) -> Response:
        i = self._response_index(suffix)
        if not self.shell.responses.is_readable(i):
            raise VarNotSetError()
        return self.shell.responses[i]

    @variable("Get json of response with index X.")
    def lookup_prefix_j(self, suffix: str) -> JsonValue:
        i = self._response_index(suffix)
        if not self.shell.responses.is_readable(i):
            raise ShellError(f"no response index {i}")
        json_value = self.shell.responses[i].json_value
        if json_value is None:
            raise ShellError(f"no json in response {i}")
        return json_value

    def _current_attr(self, name: str, altname: str) -> Optional[JsonValue]:
        res = self.shell.responses.current_or_none()
        if res is None:
            return None
        return res.attr(name, altname)

    @staticmethod
    def _response_index(suffix: str) -> int:
        if not suffix.isdigit():
            raise ShellError(f"invalid response index: {suffix}")
        return int(suffix)

    # ------------------------------------------------------------------
    # HTTP commands
    # ------------------------------------------------------------------

    def request_command_with_body(self, method: str, argstr: Optional[str]) -> Optional[str]:
        """Run ``method`` with ``[URL] [JSON|@FILENAME [CONTENT_TYPE]]``.

        Returns the interpolated url.
        """
        url: Optional[str]
        bodyarg: Optional[str]
        if argstr and JSON_DOC_START_RX.match(argstr):
            url, bodyarg = None, argstr
        elif argstr:
            parts = argstr.split(None, 1)
            url = parts[0]
            bodyarg = parts[1] if len(parts) > 1 else None
        else:
            url, bodyarg = None, None

        body: Any = bodyarg
        if bodyarg and bodyarg.startswith("@"):
            parts = bodyarg[1:].split(None, 1)
            if not parts:
                raise ShellError("filename required after @")
            body = FileToUpload(parts[0], parts[1] if len(parts) > 1 else None)

        real_url = self.shell.interpolate(url)
        self.shell.request(method, real_url, body)
        return real_url

    @command("Perform a GET http request.", synopsis="[URL]")
    def execute_get(self, argstr: Optional[str]) -> None:
        self.shell.request("GET", self.shell.interpolate(argstr))

    @command("Perform a PUT http request.", synopsis="[URL] [JSON|@FILENAME]")
    def execute_put(self, argstr: Optional[str]) -> None:
        self.request_command_with_body("PUT", argstr)

    @command("put, followed by cd if put was successful", synopsis="[URL] [JSON|@FILENAME]")
    def execute_cput(self, argstr: Optional[str]) -> None:
        url = self.request_command_with_body("PUT", argstr)
        res = self.shell.responses.current_or_none()
        if res is not None and res.ok:
            self.shell.cd(url)

    @command("Perform a POST http request.", synopsis="[URL] [JSON|@FILENAME]")
    def execute_post(self, argstr: Optional[str]) -> None:
        self.request_command_with_body("POST", argstr)

    @command("Perform a DELETE http request.", synopsis="[URL]")
    def execute_delete(self, argstr: Optional[str]) -> None:
        self.shell.request("DELETE", self.shell.interpolate(argstr))

    @command("Request uuid(s) from CouchDB server.", synopsis="[COUNT]")
    def execute_uuids(self, argstr: Optional[str]) -> None:
        count = 1
        if argstr:
            if not argstr.strip().isdigit():
                raise ShellError("COUNT must be a number")
            count = int(argstr)
        self.shell.request("GET", f"/_uuids?count={count}")

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @command("Change current path which will be used to interpret relative urls.",
             synopsis="[PATH]")
    def execute_cd(self, argstr: Optional[str]) -> None:
        self.shell.cd(self.shell.interpolate(argstr), get=False)

    @command("cd followed by get", synopsis="[PATH]")
    def execute_cg(self, argstr: Optional[str]) -> None:
        self.shell.cd(self.shell.interpolate(argstr), get=True)

    @command("Set URL of CouchDB server.", synopsis="[URL]")
    def execute_server(self, argstr: Optional[str]) -> None:
        self.shell.set_server(self.shell.interpolate(argstr))

    @command("Show full url for PATH after interpolation.", synopsis="[PATH]")
    def execute_expand(self, argstr: Optional[str]) -> None:
        self.shell.puts(self.shell.expand(self.shell.interpolate(argstr)))

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    @command("Echos ARG after interpolating $(...) expressions.", synopsis="[ARG]")
    def execute_echo(self, argstr: Optional[str]) -> None:
        if argstr:
            self.shell.puts(self.shell.interpolate(argstr))

    @command("Evaluate EXPR and print the result in a compact form.", synopsis="EXPR")
    def execute_print(self, argstr: Optional[str]) -> None:
        if not argstr:
            raise ShellError("expression required")
        self.shell.puts(format_value(self.shell.eval_expr(argstr)))

    @command("Evaluate EXPR and print the result in a pretty form.", synopsis="EXPR")
    def execute_format(self, argstr: Optional[str]) -> None:
        if not argstr:
            raise ShellError("expression required")
        value = self.shell.eval_expr(argstr)
        if isinstance(value, JsonValue):
            self.shell.puts(value.format_string())
        else:
            self.shell.puts(format_value(value))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    @command("Set member KEY of document at current path to VALUE.",
             synopsis="KEY VALUE",
             doc_text="VALUE is parsed as JSON. Use `remove' as VALUE to delete KEY.")
    def execute_member(self, argstr: Optional[str]) -> None:
        res = self.shell.responses.current_or_none()
        json_value = res.json_value if res is not None else None
        doc_id = json_value.get("_id") if json_value is not None else None
        rev = json_value.get("_rev") if json_value is not None else None
        if (
            doc_id is None
            or rev is None
            or not self.shell.pathstack
            or self.shell.pathstack[-1] != doc_id.to_s()
        ):
            raise ShellError("`cg' the desired document first, e.g.: `cg /my_db/my_doc_id'")

        parts = (argstr or "").split(None, 1)
        if len(parts) != 2:
            raise ShellError("attribute name and new value argument required")
        attr_name, new_valstr = parts

        # Responses in the history are never modified
        doc = json_value.copy()
        if new_valstr == "remove":
            doc.delete_attr(attr_name)
        else:
            try:
                new_val = JsonValue.parse(new_valstr)
            except ValueError as e:
                raise ShellError(f"invalid JSON value: {e}") from e
            doc.set_attr(attr_name, new_val)
        self.shell.request("PUT", f"?rev={rev.to_s()}", doc.to_s())

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @command("Set the USERNAME and password for authentication in requests.",
             synopsis="USERNAME",
             doc_text="Prompts for password.")
    def execute_user(self, argstr: Optional[str]) -> None:
        if not argstr:
            raise ShellError("USERNAME required")
        self.shell.prompt_msg("Password:", newline=False)
        password = self.shell.read_secret()
        # username is stored only after the password was entered, so
        # cancelling the prompt keeps the old credentials
        self.shell.password = password
        self.shell.username = argstr

    @command("Use PLUGIN.", synopsis="PLUGIN")
    def execute_plugin(self, argstr: Optional[str]) -> None:
        if not argstr:
            raise ShellError("PLUGIN required")
        for plugin in self.shell.plugin(argstr.strip()):
            self.shell.msg(f"Loaded plugin {plugin.plugin_name}.")

    @command("Execute COMMAND in your operating system's shell.", synopsis="COMMAND")
    def execute_sh(self, argstr: Optional[str]) -> None:
        if not argstr:
            raise ShellError("argument required")
        result = subprocess.run(argstr, shell=True)
        if result.returncode != 0:
            self.shell.errmsg(f"command exited with status {result.returncode}")

    @command("quit shell")
    def execute_exit(self, argstr: Optional[str]) -> None:
        raise Quit()

    @command("quit shell")
    def execute_quit(self, argstr: Optional[str]) -> None:
        raise Quit()
