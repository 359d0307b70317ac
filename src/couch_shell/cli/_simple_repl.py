"""
Simple REPL for terminals where prompt_toolkit misbehaves (or for piped
input). Reads lines with ``input()``.
"""

from __future__ import annotations

import getpass
from typing import TYPE_CHECKING

from couch_shell.core.exceptions import Quit

if TYPE_CHECKING:
    from couch_shell.shell import Shell


def read_password() -> str:
    return getpass.getpass("")


def repl(shell: "Shell") -> None:
    """Run the shell reading lines with ``input()``; EOF quits."""
    while True:
        try:
            line = input(shell.prompt())
        except EOFError:
            line = None
        except KeyboardInterrupt:
            print()
            continue

        try:
            shell.execute(line)
        except Quit:
            shell.msg("bye")
            break
