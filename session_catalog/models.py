"""
Data models for catalog output.

Pydantic models so the GUI contract (camelCase JSON) and the Python
attribute names (snake_case) come from one definition.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .backends import Backend


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class ConversationMeta(_CamelModel):
    """
    Metadata snapshot for one record file.

    id is the file stem; unique within a backend + container only.
    """

    id: str
    backend: Backend
    file_path: str
    file_size: int = 0
    modified_at: int = 0  # epoch seconds, 0 when unavailable
    created_at: int | None = None  # not every platform exposes birth time
    entry_count: int = 0
    container_name: str | None = None  # claude project directory
    session_id: str | None = None


class TaggedRuleFile(_CamelModel):
    """A rule file joined with its tags from config.toml (by file name)."""

    name: str
    path: str
    tags: list[str] = Field(default_factory=list)
    content: str = ""


class RuleConfigEntry(BaseModel):
    """One [[rules.global]] element. Only path's file name is the join key."""

    path: str
    tags: list[str] = Field(default_factory=list)

    def to_toml_dict(self) -> dict:
        """tags is omitted entirely when empty."""
        data: dict = {"path": self.path}
        if self.tags:
            data["tags"] = list(self.tags)
        return data


class ConversationMessage(BaseModel):
    """A user/assistant message recovered from a transcript for display."""

    role: str  # "user" or "assistant"
    content: str
    timestamp: str | None = None


__all__ = [
    "ConversationMeta",
    "ConversationMessage",
    "RuleConfigEntry",
    "TaggedRuleFile",
]
