"""
Feature-rich REPL (Read-Eval-Print Loop) implementation using prompt_toolkit.

Provides command history, completion of commands and variables, and
masked password input.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import Completer, Completion, merge_completers
from prompt_toolkit.history import FileHistory
from prompt_toolkit.styles import Style

from couch_shell.core.exceptions import Quit

if TYPE_CHECKING:
    from couch_shell.shell import Shell


# History file path
HISTORY_FILE = Path.home() / ".couch-shell" / "prompt_history"


class CommandCompleter(Completer):
    """Completes the first word of a line with command names."""

    def __init__(self, shell: "Shell"):
        self.shell = shell

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor.lstrip()

        # Only the command word
        if " " in text:
            return

        candidates: dict[str, str] = {}
        for ci in self.shell.registry.commands():
            candidates[ci.name] = ci.doc_line
        if text.startswith("@"):
            for info in self.shell.registry.plugins():
                for ci in info.commands.values():
                    candidates[f"@{info.plugin_name}.{ci.name}"] = ci.doc_line

        for name in sorted(candidates):
            if name.startswith(text.lower()):
                yield Completion(
                    name,
                    start_position=-len(text),
                    display_meta=candidates[name],
                )


class VariableCompleter(Completer):
    """Completes variable names after an open ``$(``."""

    def __init__(self, shell: "Shell"):
        self.shell = shell

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        start = text.rfind("$(")
        if start < 0 or ")" in text[start:]:
            return

        partial = text[start + 2:]
        for vi in self.shell.registry.variables():
            if vi.name is None:
                continue
            if vi.name.startswith(partial):
                yield Completion(
                    vi.name,
                    start_position=-len(partial),
                    display_meta=vi.doc_line,
                )


def get_style() -> Style:
    """Get the prompt style."""
    return Style.from_dict({
        "prompt": "ansiyellow",
    })


def read_password() -> str:
    """Read a password without echo."""
    return pt_prompt("", is_password=True)


def repl(shell: "Shell", history_file: Path | None = None) -> None:
    """Run the interactive shell.

    Features:
        - Command history (persistent across sessions)
        - Tab completion for commands and $(...) variables
        - Ctrl+C to cancel input, Ctrl+D to exit

    Args:
        shell: The Shell to execute lines in.
        history_file: Prompt history (default ~/.couch-shell/prompt_history)
    """
    history_file = history_file or HISTORY_FILE
    history_file.parent.mkdir(parents=True, exist_ok=True)
    history = FileHistory(str(history_file))

    completer = merge_completers([
        CommandCompleter(shell),
        VariableCompleter(shell),
    ])

    session: PromptSession = PromptSession(
        history=history,
        completer=completer,
        auto_suggest=AutoSuggestFromHistory(),
        style=get_style(),
        complete_while_typing=False,
        enable_history_search=True,
    )

    while True:
        try:
            line = session.prompt([("class:prompt", shell.prompt())])
        except EOFError:
            line = None
        except KeyboardInterrupt:
            # Ctrl+C during prompt - show fresh prompt
            continue

        try:
            shell.execute(line)
        except Quit:
            shell.msg("bye")
            break
