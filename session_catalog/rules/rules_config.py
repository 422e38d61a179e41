"""
[[rules.global]] handling inside Codex's config.toml.

The document is parsed with tomlkit so sections other than rules.global
keep their keys, order and comments across a rewrite. Entries are joined
to rule files by the file-name component of their path only.

    [[rules.global]]
    path = "/home/me/.codex/rules/style.md"
    tags = ["python", "style"]
"""

from __future__ import annotations

import re
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Array, InlineTable, Table
from tomlkit.toml_document import TOMLDocument

from ..errors import ConfigError
from ..models import RuleConfigEntry

RULES_SECTION = "rules"
GLOBAL_KEY = "global"

_SEPARATORS = re.compile(r"[\\/]")


def file_name_of(path: str) -> str:
    """File-name component of a path written on any platform."""
    return _SEPARATORS.split(path.rstrip("\\/"))[-1]


def parse_document(text: str) -> TOMLDocument:
    """Parse config text; blank text is an empty document."""
    if not text.strip():
        return tomlkit.document()
    try:
        return tomlkit.parse(text)
    except TOMLKitError as e:
        raise ConfigError(f"Failed to parse config.toml: {e}") from e


def dump_document(doc: TOMLDocument) -> str:
    try:
        return tomlkit.dumps(doc)
    except (TOMLKitError, TypeError, ValueError) as e:
        raise ConfigError(f"Failed to serialize config.toml: {e}") from e


def _rules_table(doc: TOMLDocument, create: bool) -> Any:
    rules = doc.get(RULES_SECTION)
    if rules is None:
        if not create:
            return None
        rules = tomlkit.table()
        doc[RULES_SECTION] = rules
        # re-fetch: assignment may wrap the item
        rules = doc[RULES_SECTION]
    elif not isinstance(rules, dict):
        raise ConfigError("[rules] in config.toml must be a table")
    return rules


def _global_entries(rules: Any) -> list[Any]:
    """Plain-Python copy of rules.global ([] if absent)."""
    value = _global_array(rules)
    if value is None:
        return []
    return [item.unwrap() if hasattr(item, "unwrap") else item for item in value]


def _global_array(rules: Any) -> Any:
    """The tomlkit rules.global item itself, or None if absent."""
    value = rules.get(GLOBAL_KEY)
    if value is not None and not isinstance(value, list):
        raise ConfigError("rules.global in config.toml must be an array")
    return value


def _entry_table(data: dict[str, Any]) -> Table:
    table = tomlkit.table()
    for key, value in data.items():
        table[key] = value
    return table


def _entry_inline(data: dict[str, Any]) -> InlineTable:
    inline = tomlkit.inline_table()
    inline.update(data)
    return inline


def _refill_entry(item: Any, data: dict[str, Any]) -> None:
    """Rewrite an existing entry's keys in place so its comments stay put."""
    for key in list(item):
        if key not in data:
            del item[key]
    for key, value in data.items():
        if key not in item or item[key] != value:
            item[key] = value


def _append_entry(rules: Any, array: Any, data: dict[str, Any]) -> None:
    if array is None:
        if isinstance(rules, InlineTable):
            # keep the inline `rules = { global = [...] }` style
            array = tomlkit.array()
            array.append(_entry_inline(data))
        else:
            array = tomlkit.aot()
            array.append(_entry_table(data))
        rules[GLOBAL_KEY] = array
    elif isinstance(array, Array):
        array.append(_entry_inline(data))
    else:
        array.append(_entry_table(data))


def _matches(item: Any, filename: str) -> bool:
    if not isinstance(item, dict):
        return False
    path = item.get("path")
    return isinstance(path, str) and file_name_of(path) == filename


def parse_rule_entries(text: str) -> list[RuleConfigEntry]:
    """
    Read every [[rules.global]] entry.

    Elements that are not tables or lack a string path are skipped, and
    non-string tags are dropped.

    Raises:
        ConfigError: If the document or the rules section is malformed
    """
    doc = parse_document(text)
    rules = _rules_table(doc, create=False)
    if rules is None:
        return []

    entries = []
    for item in _global_entries(rules):
        if not isinstance(item, dict) or not isinstance(item.get("path"), str):
            continue
        tags = item.get("tags")
        tags = [t for t in tags if isinstance(t, str)] if isinstance(tags, list) else []
        entries.append(RuleConfigEntry(path=item["path"], tags=tags))
    return entries


def upsert_rule_entry(text: str, filename: str, rule_path: str, tags: list[str]) -> str:
    """
    Return config text with the entry for filename replaced or appended.

    An existing entry is rewritten in place, keeping its position and any
    comments inside it. Other elements of the array, tables or not, are
    left untouched. Empty tags are omitted rather than written as [].
    """
    doc = parse_document(text)
    rules = _rules_table(doc, create=True)
    array = _global_array(rules)

    new_entry = RuleConfigEntry(path=rule_path, tags=list(tags)).to_toml_dict()
    match = None
    if array is not None:
        match = next((item for item in array if _matches(item, filename)), None)
    if match is None:
        _append_entry(rules, array, new_entry)
    else:
        _refill_entry(match, new_entry)
    return dump_document(doc)


def remove_rule_entry(text: str, filename: str) -> str | None:
    """
    Return config text without entries for filename.

    Only matching tables are deleted; every other element keeps its place.
    Returns None when there is nothing to rewrite (blank document, or no
    rules.global array). A missing entry is not an error.
    """
    if not text.strip():
        return None
    doc = parse_document(text)
    rules = _rules_table(doc, create=False)
    if rules is None:
        return None
    array = _global_array(rules)
    if array is None:
        return None

    matched = [i for i, item in enumerate(array) if _matches(item, filename)]
    for index in reversed(matched):
        del array[index]
    return dump_document(doc)


__all__ = [
    "file_name_of",
    "parse_document",
    "parse_rule_entries",
    "remove_rule_entry",
    "upsert_rule_entry",
]
