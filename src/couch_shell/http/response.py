"""
Response records kept in the shell's response history.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import httpx

from couch_shell.core.json_value import JsonValue

JSON_CONTENT_TYPES = ("application/json", "text/plain")


class Response:
    """An HTTP response as seen by the shell.

    Wraps an ``httpx.Response``; the body is parsed as JSON lazily when the
    content type is JSON (CouchDB answers ``text/plain`` to browsers, so that
    counts too). Treat instances as read-only once they are in the history.
    """

    def __init__(self, response: httpx.Response):
        self._res = response
        self._json: Optional[JsonValue] = None
        self._computed_json = False

    @property
    def raw(self) -> httpx.Response:
        return self._res

    @property
    def code(self) -> str:
        return str(self._res.status_code)

    @property
    def message(self) -> str:
        return self._res.reason_phrase

    @property
    def ok(self) -> bool:
        return self.code.startswith("2")

    @property
    def body(self) -> str:
        return self._res.text

    @property
    def content_type(self) -> str:
        return self._res.headers.get("content-type", "").split(";", 1)[0].strip()

    @property
    def json_value(self) -> Optional[JsonValue]:
        """Body parsed as JSON; None if empty, not JSON, or unparseable."""
        if not self._computed_json:
            if self.content_type in JSON_CONTENT_TYPES and self.body:
                try:
                    self._json = JsonValue.parse(self.body)
                except json.JSONDecodeError:
                    self._json = None
            self._computed_json = True
        return self._json

    @property
    def has_json(self) -> bool:
        return self.json_value is not None

    def attr(self, name: str, altname: Optional[str] = None) -> Optional[JsonValue]:
        """JSON member ``name`` (or ``altname``) of the body, if any."""
        json_value = self.json_value
        if json_value is None:
            return None
        if json_value.has(name):
            return json_value.get(name)
        if altname and json_value.has(altname):
            return json_value.get(altname)
        return None

    def get(self, name: str) -> Any:
        """Member access used by expressions like ``r0.code`` or ``r0._id``."""
        if name in ("code", "message", "body", "content_type"):
            return getattr(self, name)
        if name == "ok":
            return JsonValue(self.ok)
        if name == "json":
            return self.json_value
        return self.attr(name)

    def to_s(self) -> str:
        return f"{self.code} {self.message}"

    def __str__(self) -> str:
        return self.to_s()

    def __repr__(self) -> str:
        return f"<Response {self.code} {self.message}>"
