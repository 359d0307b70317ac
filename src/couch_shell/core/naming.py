"""
Plugin name derivation.

Turns an implementation class identifier into the canonical plugin name used
for qualified references (``@core.get``) and the plugin table.
"""

from __future__ import annotations

import re

PLUGIN_SUFFIX = "Plugin"

VALID_PLUGIN_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


def _last_segment(identifier: str) -> str:
    """Strip namespaces (``a.b.C`` or ``A::B::C``), keep the class name."""
    return re.split(r"::|\.", identifier)[-1]


def derive_plugin_name(identifier: str) -> str:
    """Derive a lowercase, underscore separated plugin name.

    A trailing ``Plugin`` is dropped first. Case transitions insert
    underscores, and an uppercase run followed by a lowercase letter is split
    before its last capital so acronyms stay together:

        >>> derive_plugin_name("CorePlugin")
        'core'
        >>> derive_plugin_name("HTTPClient")
        'http_client'
        >>> derive_plugin_name("Http11Client")
        'http11_client'
    """
    extract = _last_segment(identifier)
    if extract.endswith(PLUGIN_SUFFIX):
        extract = extract[: -len(PLUGIN_SUFFIX)]

    out: list[str] = []
    lastcase: str | None = None
    for c in extract:
        if c.isupper():
            if lastcase != "upper" and out and out[-1] != "_":
                out.append("_")
            out.append(c.lower())
            lastcase = "upper"
        elif c.islower():
            if lastcase == "upper" and len(out) > 1 and out[-2] != "_":
                out.insert(len(out) - 1, "_")
            out.append(c)
            lastcase = "lower"
        else:
            out.append(c)
            lastcase = None
    return "".join(out)


def is_valid_plugin_name(name: str) -> bool:
    return bool(VALID_PLUGIN_NAME.match(name))
