"""
Expression evaluator for ``print``, ``format`` and ``$(...)`` interpolation.

Supported forms:

    id                 unqualified variable
    @core.id           variable of one plugin
    j0.rows[0].key     member access and indexing on values with ``get``
    j0["_id"]          string index
    42, "text"         int and JSON string literals
"""

from __future__ import annotations

import json
import re
from typing import Any

from couch_shell.core.dispatcher import VariableResolver
from couch_shell.core.exceptions import EvaluationError

_TOKEN_RX = re.compile(
    r"""
    \s*(?:
        (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
      | (?P<int>-?\d+)
      | (?P<string>"(?:[^"\\]|\\.)*")
      | (?P<punct>[@.\[\]])
    )
    """,
    re.VERBOSE,
)


def tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    text = text.rstrip()
    while pos < len(text):
        match = _TOKEN_RX.match(text, pos)
        if not match or match.end() == pos:
            raise EvaluationError(f"unexpected input at {text[pos:]!r} in expression {text!r}")
        kind = match.lastgroup or ""
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


class Evaluator:
    """Evaluates expressions against a VariableResolver."""

    def __init__(self, resolver: VariableResolver):
        self.resolver = resolver

    def __call__(self, text: str) -> Any:
        return self.evaluate(text)

    def evaluate(self, text: str) -> Any:
        tokens = tokenize(text)
        if not tokens:
            raise EvaluationError("empty expression")
        value, pos = self._primary(tokens, 0, text)
        while pos < len(tokens):
            kind, tok = tokens[pos]
            if tok == ".":
                name = self._expect(tokens, pos + 1, "ident", text)
                value = self._member(value, name, text)
                pos += 2
            elif tok == "[":
                kind, index = tokens[pos + 1] if pos + 1 < len(tokens) else ("", "")
                if kind == "int":
                    key: Any = int(index)
                elif kind == "string":
                    key = json.loads(index)
                else:
                    raise EvaluationError(f"index must be string or integer in {text!r}")
                if pos + 2 >= len(tokens) or tokens[pos + 2][1] != "]":
                    raise EvaluationError(f"missing ] in {text!r}")
                value = self._index(value, key, text)
                pos += 3
            else:
                raise EvaluationError(f"unexpected {tok!r} in expression {text!r}")
        return value

    def _primary(self, tokens: list[tuple[str, str]], pos: int, text: str) -> tuple[Any, int]:
        kind, tok = tokens[pos]
        if tok == "@":
            plugin_name = self._expect(tokens, pos + 1, "ident", text)
            if pos + 2 >= len(tokens) or tokens[pos + 2][1] != ".":
                raise EvaluationError(f"expected @PLUGIN.VAR in {text!r}")
            varname = self._expect(tokens, pos + 3, "ident", text)
            return self.resolver.resolve_qualified(plugin_name, varname), pos + 4
        if kind == "ident":
            return self.resolver.resolve(tok), pos + 1
        if kind == "int":
            return int(tok), pos + 1
        if kind == "string":
            return json.loads(tok), pos + 1
        raise EvaluationError(f"unexpected {tok!r} in expression {text!r}")

    def _expect(self, tokens: list[tuple[str, str]], pos: int, kind: str, text: str) -> str:
        if pos >= len(tokens) or tokens[pos][0] != kind:
            raise EvaluationError(f"expected {kind} in expression {text!r}")
        return tokens[pos][1]

    def _member(self, value: Any, name: str, text: str) -> Any:
        getter = getattr(value, "get", None)
        if not callable(getter):
            raise EvaluationError(f"{type(value).__name__} has no members ({text!r})")
        result = getter(name)
        if result is None:
            raise EvaluationError(f"no member {name} in {text!r}")
        return result

    def _index(self, value: Any, key: Any, text: str) -> Any:
        try:
            result = value[key]
        except (TypeError, KeyError, IndexError) as e:
            raise EvaluationError(f"{e} in {text!r}") from e
        if result is None:
            raise EvaluationError(f"no element {key!r} in {text!r}")
        return result
