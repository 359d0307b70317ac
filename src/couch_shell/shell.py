"""
The shell host: owns the plugin registry, the response history and the
connection state, and executes input lines.

    shell = Shell()
    shell.plugin("core")
    shell.execute("server localhost:5984")
    shell.execute("get /_all_dbs")
"""

from __future__ import annotations

import getpass
import logging
import re
import sys
from pathlib import Path
from typing import Any, Callable, Optional, TextIO

import httpx

from couch_shell.core.dispatcher import Dispatcher, VariableResolver, split_input
from couch_shell.core.evaluator import Evaluator
from couch_shell.core.exceptions import (
    Quit,
    RequestError,
    ShellUserError,
    UninitializedAccessError,
)
from couch_shell.core.interpolation import interpolate
from couch_shell.core.plugin import Plugin
from couch_shell.core.registry import PluginRegistry
from couch_shell.core.ring_buffer import DEFAULT_CAPACITY, RingBuffer
from couch_shell.http.response import Response
from couch_shell.http.transport import HttpTransport
from couch_shell.log import log_exception
from couch_shell.plugins.loader import load_plugin

logger = logging.getLogger(__name__)

# ANSI escape codes for colored text
BLUE = "\033[34m"
CYAN = "\033[36m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"

_SCHEME_RX = re.compile(r"\A[A-Za-z][A-Za-z0-9+\-.]*://")


def _port(u: httpx.URL) -> int:
    return u.port or (443 if u.scheme == "https" else 80)


def normalize_server_url(url: Optional[str]) -> Optional[str]:
    """Strip a trailing slash and default the scheme to http://."""
    if url is None:
        return None
    url = url.strip()
    if url.endswith("/"):
        url = url[:-1]
    if _SCHEME_RX.match(url):
        return url
    return f"http://{url}"


class Shell:
    """Interactive shell state and per-line execution.

    Args:
        stdin: Stream for confirmations (default: ``input()``)
        stdout: Output stream
        stderr: Error stream
        history_size: Number of response slots (r0 .. rN-1)
        transport: HTTP transport, injectable for tests
        color: Colorize messages with ANSI codes
        read_secret: Callable used to read a password
        plugins_dir: User plugins directory override
    """

    def __init__(
        self,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        history_size: int = DEFAULT_CAPACITY,
        transport: Optional[HttpTransport] = None,
        color: bool = True,
        read_secret: Optional[Callable[[], str]] = None,
        plugins_dir: Optional[Path] = None,
    ):
        self.stdin = stdin
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.color = color
        self.transport = transport or HttpTransport()
        self._read_secret = read_secret or (lambda: getpass.getpass(""))
        self.plugins_dir = plugins_dir

        self.registry = PluginRegistry(warn=self._warn)
        self.dispatcher = Dispatcher(self.registry)
        self.resolver = VariableResolver(self.registry)
        self.evaluator = Evaluator(self.resolver)
        self.responses: RingBuffer[Response] = RingBuffer(history_size)

        self.server_url: Optional[httpx.URL] = None
        self.pathstack: list[str] = []
        self.username: Optional[str] = None
        self.password: Optional[str] = None

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _colored(self, text: str, color: str) -> str:
        if not self.color:
            return text
        return f"{color}{text}{RESET}"

    def msg(self, text: str, newline: bool = True) -> None:
        self.stdout.write(self._colored(text, BLUE))
        self.stdout.write("\n" if newline else "")
        self.stdout.flush()

    def errmsg(self, text: str) -> None:
        self.stderr.write(self._colored(text, RED) + "\n")
        self.stderr.flush()

    def prompt_msg(self, text: str, newline: bool = True) -> None:
        self.stdout.write(self._colored(text, YELLOW))
        self.stdout.write("\n" if newline else "")
        self.stdout.flush()

    def puts(self, text: Any = "") -> None:
        self.stdout.write(f"{text}\n")

    def _warn(self, text: str) -> None:
        logger.warning(text)
        self.errmsg(f"warning: {text}")

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def read_line(self) -> str:
        """Read one line for confirmations; EOF reads as an empty line."""
        if self.stdin is not None:
            return self.stdin.readline().rstrip("\n")
        return input()

    def read_secret(self) -> str:
        return self._read_secret()

    def prompt(self) -> str:
        """Prompt text showing the current path."""
        if not self.pathstack:
            return ">> "
        return "/".join(self.pathstack) + " >> "

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def plugin(self, name: str) -> list[Plugin]:
        """Load plugin module ``name``."""
        return load_plugin(self, name, self.plugins_dir)

    # ------------------------------------------------------------------
    # Variables and interpolation
    # ------------------------------------------------------------------

    def lookup_var(self, name: str) -> Any:
        return self.resolver.resolve(name)

    def eval_expr(self, text: str) -> Any:
        return self.evaluator.evaluate(text)

    def interpolate(self, text: Optional[str]) -> Optional[str]:
        return interpolate(text, self.evaluator)

    # ------------------------------------------------------------------
    # Server and path
    # ------------------------------------------------------------------

    def set_server(self, url: Optional[str]) -> None:
        """Set (or with None, clear) the server and GET its root."""
        if url:
            self.server_url = httpx.URL(normalize_server_url(url))
            self.msg(f"Set server to {self.server_root()}")
            self.request("GET", None)
        else:
            self.server_url = None
            self.msg("Set server to none.")

    def server_root(self) -> Optional[str]:
        """``scheme://host:port/path`` of the server, or None."""
        u = self.server_url
        if u is None:
            return None
        return f"{u.scheme}://{u.host}:{_port(u)}{u.path.rstrip('/')}"

    def cd(self, path: Optional[str], get: bool = False) -> None:
        """Change the path stack; with ``get``, revert unless GET gives 200."""
        old_pathstack = list(self.pathstack)
        self._cd(path)
        if get:
            res = self.request("GET", None)
            if res is None or res.code != "200":
                self.pathstack = old_pathstack

    def _cd(self, path: Optional[str]) -> None:
        if path is None or path == "/":
            self.pathstack = []
        elif path == "..":
            if not self.pathstack:
                self.errmsg("Already at server root, can't go up.")
            else:
                self.pathstack.pop()
        elif path.startswith("/"):
            self.pathstack = []
            self._cd(path[1:])
        elif "/" in path:
            for elem in path.split("/"):
                if elem:
                    self._cd(elem)
        else:
            self.pathstack.append(path)

    def full_path(self, path: Optional[str]) -> str:
        """Absolute request path for ``path`` relative to the path stack."""
        stack: list[str] = []
        if not (path and path.startswith("/")):
            stack = list(self.pathstack)
        if self.server_url is not None:
            server_path = self.server_url.path.strip("/")
            if server_path:
                stack.insert(0, server_path)
        fpath = "/" + "/".join(stack)
        if path and path != "/":
            if path.startswith("?"):
                fpath += path
            elif fpath.endswith("/"):
                fpath += path.lstrip("/")
            else:
                fpath += "/" + path.lstrip("/")
        return fpath

    def expand(self, path: Optional[str]) -> str:
        """Full url for ``path``."""
        u = self.server_url
        if u is None:
            raise ShellUserError("Server not set.")
        return f"{u.scheme}://{u.host}:{_port(u)}{self.full_path(path)}"

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def request(
        self,
        method: str,
        path: Optional[str],
        body: Any = None,
        show_body: bool = True,
    ) -> Optional[Response]:
        """Perform a request and push the response into the history.

        Returns None (after an error message) if no server is set.
        """
        if self.server_url is None:
            self.errmsg("Server not set - can't perform request.")
            return None
        if self.server_url.scheme not in ("http", "https"):
            self.errmsg(f"Protocol {self.server_url.scheme} not supported, use http.")
            return None

        self.msg(f"{method} {self.full_path(path)} ", newline=False)
        auth = None
        if self.username and self.password:
            auth = (self.username, self.password)
        try:
            res = self.transport.request(method, self.expand(path), body, auth=auth)
        except RequestError:
            self.puts()
            raise

        slot = self.responses.push(res)
        labels = [f"r{slot}"]
        if res.json_value is not None:
            labels.append(f"j{slot}")
        self.print_response(res, f"  vars: {', '.join(labels)}", show_body)
        return res

    def print_response(self, res: Response, label: str = "", show_body: bool = True) -> None:
        self.stdout.write(self._colored(f"{res.code} {res.message}", CYAN))
        self.msg(f" {label}")
        if show_body:
            if res.json_value is not None:
                self.puts(res.json_value.format_string())
            elif res.body:
                self.puts(res.body)
        elif res.body:
            self.msg(f"body has {len(res.raw.content)} bytes")

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def execute(self, line: Optional[str]) -> None:
        """Execute one input line, reporting errors instead of raising.

        ``None`` means end of input and raises Quit, as does the quit
        command. Every other error is printed to stderr.
        """
        try:
            self.execute_line(line)
        except Quit:
            raise
        except KeyboardInterrupt:
            self.puts()
            self.errmsg("interrupted")
        except (ShellUserError, UninitializedAccessError) as e:
            logger.debug(f"{type(e).__name__} executing {line!r}: {e}")
            self.errmsg(str(e))
        except Exception as e:
            self.errmsg(log_exception(e, context=f"executing {line!r}"))

    def execute_line(self, line: Optional[str]) -> Any:
        """Execute one input line without error handling."""
        if line is None:
            raise Quit()
        reference, argument = split_input(line)
        if not reference:
            return None
        return self.dispatcher.dispatch(reference.lower(), argument)

    def close(self) -> None:
        self.transport.close()
