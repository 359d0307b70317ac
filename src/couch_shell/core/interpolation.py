"""
String interpolation of ``$(expr)`` spans.

    >>> interpolate("a$(x)b", {"x": "Y"}.__getitem__)
    'aYb'
    >>> interpolate("a\\\\$(x)b", {"x": "Y"}.__getitem__)
    'a$(x)b'

Known limitation: spans don't nest and the first unescaped ``)`` closes the
span, so an expression can't contain a literal ``)``.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from couch_shell.core.exceptions import UnterminatedExpressionError

ESCAPE = "\\"


def format_value(value: Any) -> str:
    """String form of an evaluated expression."""
    to_s = getattr(value, "to_s", None)
    if callable(to_s):
        return to_s()
    return str(value)


def interpolate(
    template: Optional[str],
    evaluate: Callable[[str], Any],
) -> Optional[str]:
    """Expand every ``$(...)`` span of ``template`` with ``evaluate``.

    A backslash makes the next character literal. A ``$`` not followed by
    ``(`` is kept as is. Returns None for a None template.

    Raises:
        UnterminatedExpressionError: a ``$(`` span is still open at the end.
    """
    if template is None:
        return None

    res: list[str] = []
    escape = False
    dollar = False
    expr: Optional[list[str]] = None

    for c in template:
        if escape:
            res.append(c)
            escape = False
            dollar = False
            continue
        if c == ESCAPE:
            escape = True
        elif c == "$":
            dollar = True
            continue
        elif c == "(":
            if dollar:
                expr = []
            else:
                res.append(c)
        elif c == ")":
            if expr is not None:
                res.append(format_value(evaluate("".join(expr))))
                expr = None
            else:
                res.append(c)
        elif dollar:
            # lone $ goes to the output, even inside a span
            res.append("$")
            if expr is not None:
                expr.append(c)
            else:
                res.append(c)
        elif expr is not None:
            expr.append(c)
        else:
            res.append(c)
        dollar = False

    if expr is not None:
        raise UnterminatedExpressionError(template, "".join(expr))
    if dollar:
        res.append("$")
    return "".join(res)
