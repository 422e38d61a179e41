"""session-catalog: catalog layer over Claude and Codex conversation logs.

Discovers records in two foreign-owned trees without an index, derives
cheap metadata, supports keyword search, deletes records while pruning
emptied directories, and manages Codex rule files whose tags live in
config.toml.

- Claude: ~/.claude/projects/{project}/{id}.jsonl
- Codex:  ~/.codex/sessions/{yyyy}/{mm}/{dd}/{id}.jsonl
"""

__version__ = "0.1.0"

# Catalog Layer
from .backends import Backend, BackendDescriptor, resolve_backend_root
from .catalog import ConversationCatalog, matches_keyword
from .extractor import extract_meta
from .reclaim import reclaim_empty_dirs
from .scanner import scan
from .transcript_parser import TranscriptParser, parse_conversation_messages

# Rules Layer
from .rules import RuleStore, read_claude_rules, write_claude_rules

# Types, Config & Errors
from .models import ConversationMessage, ConversationMeta, RuleConfigEntry, TaggedRuleFile
from .config import CatalogSettings, CodexConfig
from .errors import (
    CatalogError,
    CatalogIOError,
    ConfigError,
    HomeDirectoryError,
    NotFoundError,
)

__all__ = [
    # Catalog
    "Backend",
    "BackendDescriptor",
    "resolve_backend_root",
    "ConversationCatalog",
    "matches_keyword",
    "extract_meta",
    "reclaim_empty_dirs",
    "scan",
    "TranscriptParser",
    "parse_conversation_messages",
    # Rules
    "RuleStore",
    "read_claude_rules",
    "write_claude_rules",
    # Types, Config & Errors
    "ConversationMessage",
    "ConversationMeta",
    "RuleConfigEntry",
    "TaggedRuleFile",
    "CatalogSettings",
    "CodexConfig",
    "CatalogError",
    "CatalogIOError",
    "ConfigError",
    "HomeDirectoryError",
    "NotFoundError",
]
