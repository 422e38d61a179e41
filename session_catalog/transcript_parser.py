"""
Transcript parser for displaying a conversation record.

Turns the raw JSONL of either backend into a flat list of user/assistant
messages. Key entry shapes:
- claude: {"type": "user"|"assistant", "message": {"content": ...}, "timestamp": ...}
- codex:  {"type": "response_item", "payload": {"type": "message", "role": ...,
           "content": [...]}, "timestamp": ...}

Everything else (progress, tool output, session_meta, summaries) is skipped,
as are lines that are not valid JSON.
"""

from __future__ import annotations

import json
import re
from typing import Any

from .backends import Backend
from .models import ConversationMessage

TEXT_BLOCK_TYPES = ("text", "input_text", "output_text")
MESSAGE_ROLES = ("user", "assistant")

_CLEANUP_PATTERNS = [
    re.compile(r"<environment_context>[\s\S]*?</environment_context>"),
    re.compile(r"# Context from my IDE setup:[\s\S]*?## My request for (?:Claude|Codex):\s*"),
    re.compile(r"## Active file:[\s\S]*?(?=\n\n|\Z)"),
    re.compile(r"## Open files:[\s\S]*?(?=\n\n|\Z)"),
]
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def clean_message_text(text: str) -> str | None:
    """Strip injected environment/IDE context. None if nothing is left."""
    if not text:
        return None
    cleaned = text
    for pattern in _CLEANUP_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    cleaned = _EXTRA_BLANK_LINES.sub("\n\n", cleaned).strip()
    return cleaned or None


class TranscriptParser:
    """Parse one record's text into display messages."""

    def __init__(self, content: str, backend: Backend | str):
        self.content = content
        self.backend = Backend(backend)

    def _entries(self) -> list[dict[str, Any]]:
        entries = []
        for line in self.content.split("\n"):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError:
                continue
            if isinstance(entry, dict):
                entries.append(entry)
        return entries

    def parse(self) -> list[ConversationMessage]:
        process = (
            self._process_claude_entry
            if self.backend is Backend.CLAUDE
            else self._process_codex_entry
        )
        messages = []
        for entry in self._entries():
            message = process(entry)
            if message is not None:
                messages.append(message)
        return messages

    def _process_claude_entry(self, entry: dict[str, Any]) -> ConversationMessage | None:
        role = entry.get("type")
        if role not in MESSAGE_ROLES:
            return None

        message = entry.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")

        if isinstance(content, list):
            text = self._extract_text_from_blocks(content)
        elif isinstance(content, str):
            text = content
        else:
            return None

        cleaned = clean_message_text(text)
        if cleaned is None:
            return None
        return ConversationMessage(role=role, content=cleaned, timestamp=_timestamp(entry))

    def _process_codex_entry(self, entry: dict[str, Any]) -> ConversationMessage | None:
        if entry.get("type") != "response_item":
            return None
        payload = entry.get("payload")
        if not isinstance(payload, dict) or payload.get("type") != "message":
            return None

        # developer/system prompts are not part of the conversation
        role = payload.get("role")
        if role not in MESSAGE_ROLES:
            return None

        content = payload.get("content")
        if not isinstance(content, list):
            return None

        cleaned = clean_message_text(self._extract_text_from_blocks(content))
        if cleaned is None:
            return None
        return ConversationMessage(role=role, content=cleaned, timestamp=_timestamp(entry))

    def _extract_text_from_blocks(self, blocks: list[Any]) -> str:
        """Join the text of text-like content blocks."""
        parts = []
        for block in blocks:
            if isinstance(block, dict) and block.get("type") in TEXT_BLOCK_TYPES:
                text = block.get("text")
                if isinstance(text, str) and text:
                    parts.append(text)
        return "\n".join(parts)


def _timestamp(entry: dict[str, Any]) -> str | None:
    value = entry.get("timestamp")
    return value if isinstance(value, str) else None


def parse_conversation_messages(content: str, backend: Backend | str) -> list[ConversationMessage]:
    """Parse record text into user/assistant messages."""
    return TranscriptParser(content, backend).parse()


__all__ = [
    "TranscriptParser",
    "clean_message_text",
    "parse_conversation_messages",
]
