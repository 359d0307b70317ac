"""
Wrapper around decoded JSON values.

Members of JSON objects are reached through the explicit ``get`` method or
indexing, never through implicit attribute access:

    j = JsonValue.wrap({"a": 1})
    j.get("a")        # JsonValue(1)
    j["a"]            # JsonValue(1)
    j.unwrapped       # {"a": 1}
"""

from __future__ import annotations

import copy
import json
from typing import Any, Optional

OBJECT = "object"
ARRAY = "array"
STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
NULL = "null"


def _json_type(value: Any) -> str:
    if isinstance(value, dict):
        return OBJECT
    if isinstance(value, list):
        return ARRAY
    if isinstance(value, str):
        return STRING
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if value is None:
        return NULL
    raise TypeError(f"{value!r} is not of a valid json type")


class JsonValue:
    """A JSON value with typed accessors."""

    __slots__ = ("_value", "_type")

    def __init__(self, value: Any):
        self._type = _json_type(value)
        self._value = value

    @classmethod
    def wrap(cls, value: Any) -> "JsonValue":
        if isinstance(value, JsonValue):
            return value
        return cls(value)

    @classmethod
    def parse(cls, text: str) -> "JsonValue":
        """Parse any JSON value, not only objects and arrays."""
        return cls(json.loads(text))

    @property
    def type(self) -> str:
        return self._type

    @property
    def unwrapped(self) -> Any:
        return self._value

    def is_object(self) -> bool:
        return self._type == OBJECT

    def is_array(self) -> bool:
        return self._type == ARRAY

    def is_string(self) -> bool:
        return self._type == STRING

    def is_number(self) -> bool:
        return self._type == NUMBER

    def is_boolean(self) -> bool:
        return self._type == BOOLEAN

    def is_null(self) -> bool:
        return self._type == NULL

    def has(self, name: str) -> bool:
        return self._type == OBJECT and name in self._value

    def get(self, name: str) -> Optional["JsonValue"]:
        """Object member ``name``, or None if missing or not an object."""
        if not self.has(name):
            return None
        return JsonValue(self._value[name])

    def __getitem__(self, i: Any) -> Optional["JsonValue"]:
        """Object member (str key) or array element (int index).

        Returns None if the member or index doesn't exist.
        """
        if isinstance(i, JsonValue):
            i = i.unwrapped
        if isinstance(i, str):
            if self._type != OBJECT:
                raise TypeError("string indexing only allowed for objects")
            return self.get(i)
        if isinstance(i, int) and not isinstance(i, bool):
            if self._type != ARRAY:
                raise TypeError("integer indexing only allowed for arrays")
            if -len(self._value) <= i < len(self._value):
                return JsonValue(self._value[i])
            return None
        raise TypeError("index must be string or integer")

    def __len__(self) -> int:
        if self._type not in (ARRAY, OBJECT, STRING):
            raise TypeError(f"length of {self._type}")
        return len(self._value)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, JsonValue):
            return self._value == other._value
        return self._value == other

    def __hash__(self) -> int:
        return hash(self.to_s())

    def set_attr(self, name: str, value: Any) -> None:
        if self._type != OBJECT:
            raise TypeError(f"can't set member of {self._type}")
        if isinstance(value, JsonValue):
            value = value.unwrapped
        self._value[name] = value

    def delete_attr(self, name: str) -> None:
        if self._type != OBJECT:
            raise TypeError(f"can't delete member of {self._type}")
        self._value.pop(name, None)

    def copy(self) -> "JsonValue":
        """Deep copy, safe to modify."""
        return JsonValue(copy.deepcopy(self._value))

    def to_s(self, pretty: bool = False) -> str:
        if self._type in (OBJECT, ARRAY):
            if pretty:
                return json.dumps(self._value, indent=2, ensure_ascii=False)
            return json.dumps(self._value, separators=(",", ":"), ensure_ascii=False)
        if self._type == NULL:
            return "null"
        if self._type == BOOLEAN:
            return "true" if self._value else "false"
        return str(self._value)

    def format_string(self) -> str:
        return self.to_s(pretty=True)

    def __str__(self) -> str:
        return self.to_s()

    def __repr__(self) -> str:
        return f"<JsonValue {self.to_s()}>"
