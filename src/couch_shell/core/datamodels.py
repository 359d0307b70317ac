"""
Data models for the plugin registry.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class CommandInfo(BaseModel):
    """Metadata of one command exported by a plugin."""

    name: str
    doc_line: str
    execute_method: str
    plugin_name: str
    synopsis: Optional[str] = None
    doc_text: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _tag_with_name(self) -> "CommandInfo":
        if self.name not in self.tags:
            self.tags.insert(0, self.name)
        return self

    @property
    def usage(self) -> str:
        if self.synopsis:
            return f"{self.name} {self.synopsis}"
        return self.name


class VariableInfo(BaseModel):
    """Metadata of one variable exported by a plugin.

    Exactly one of ``name`` (exact match) or ``prefix`` (matches any longer
    name starting with it) is set.
    """

    doc_line: str
    lookup_method: str
    plugin_name: str
    name: Optional[str] = None
    prefix: Optional[str] = None
    doc_text: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_name_or_prefix(self) -> "VariableInfo":
        if self.name is None and self.prefix is None:
            raise ValueError("name or prefix required")
        if self.name is not None and self.prefix is not None:
            raise ValueError("only name OR prefix allowed")
        key = self.name if self.name is not None else self.prefix
        if key not in self.tags:
            self.tags.insert(0, key)
        return self

    @property
    def label(self) -> str:
        if self.name is not None:
            return self.name
        return f"{self.prefix}*"

    def matches_prefix(self, varname: str) -> bool:
        """True if this is a prefix variable and varname strictly extends it."""
        return (
            self.prefix is not None
            and len(varname) > len(self.prefix)
            and varname.startswith(self.prefix)
        )


class PluginInfo(BaseModel):
    """Registry entry for a loaded plugin."""

    plugin_name: str
    plugin_class: Any = Field(exclude=True)
    commands: dict[str, CommandInfo] = Field(default_factory=dict)
    variables: list[VariableInfo] = Field(default_factory=list)

    model_config = {"arbitrary_types_allowed": True}

    @property
    def class_name(self) -> str:
        return getattr(self.plugin_class, "__qualname__", str(self.plugin_class))
