"""Rules Layer - Codex rule files with tags, Claude's CLAUDE.md."""

from .claude_rules import claude_rules_path, read_claude_rules, write_claude_rules
from .rule_store import RuleStore, validate_rule_name
from .rules_config import parse_rule_entries, remove_rule_entry, upsert_rule_entry

__all__ = [
    "RuleStore",
    "validate_rule_name",
    "parse_rule_entries",
    "upsert_rule_entry",
    "remove_rule_entry",
    "claude_rules_path",
    "read_claude_rules",
    "write_claude_rules",
]
