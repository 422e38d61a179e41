"""
RuleStore - Codex rule files plus their tag annotations.

Each rule is two independently mutable records joined by file name:
- the file:  {codex_home}/rules/{name}.md
- the entry: [[rules.global]] in {codex_home}/config.toml (path, tags)

A file without an entry has no tags; an entry without a file is ignored
when listing but left in the config.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import CodexConfig
from ..errors import CatalogError, CatalogIOError, NotFoundError
from ..models import RuleConfigEntry, TaggedRuleFile
from .rules_config import file_name_of, parse_rule_entries, remove_rule_entry, upsert_rule_entry

logger = logging.getLogger(__name__)

RULES_DIRNAME = "rules"
RULE_EXTENSION = ".md"


def validate_rule_name(filename: str) -> str:
    """A rule name must be a single plain path component."""
    if not filename or filename in (".", "..") or file_name_of(filename) != filename:
        raise ValueError(f"Invalid rule file name: {filename!r}")
    return filename


class RuleStore:
    """Read/write/delete rule files and keep rules.global in sync."""

    def __init__(self, config: CodexConfig | None = None):
        """
        Args:
            config: Access to config.toml and the codex home (default: resolved from settings)
        """
        self.config = config if config is not None else CodexConfig()

    def rules_dir(self) -> Path:
        return self.config.config_dir() / RULES_DIRNAME

    def rule_path(self, filename: str) -> Path:
        return self.rules_dir() / validate_rule_name(filename)

    def read_rules_config(self) -> list[RuleConfigEntry]:
        """
        Parse [[rules.global]] from config.toml.

        Raises:
            CatalogIOError: If config.toml cannot be read
            ConfigError: If config.toml is malformed
        """
        return parse_rule_entries(self.config.read_config_text())

    def list_rules(self) -> list[TaggedRuleFile]:
        """
        List rule files (non-recursive) with tags joined from config.toml.

        A config that cannot be read or parsed leaves every rule untagged.
        """
        rules_dir = self.rules_dir()
        if not rules_dir.exists():
            return []

        try:
            paths = sorted(p for p in rules_dir.iterdir() if p.suffix == RULE_EXTENSION and p.is_file())
        except OSError as e:
            raise CatalogIOError(f"Failed to read rules directory {rules_dir}: {e}", str(rules_dir)) from e

        rules = []
        for path in paths:
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise CatalogIOError(f"Failed to read rule file {path.name}: {e}", str(path)) from e
            rules.append(TaggedRuleFile(name=path.name, path=str(path), content=content))

        try:
            entries = self.read_rules_config()
        except CatalogError as e:
            logger.warning("Listing rules without tags: %s", e)
            return rules

        for rule in rules:
            match = next((entry for entry in entries if file_name_of(entry.path) == rule.name), None)
            if match is not None:
                rule.tags = list(match.tags)

        return rules

    def read_rule(self, filename: str) -> str:
        """
        Raises:
            NotFoundError: If the rule file does not exist
        """
        path = self.rule_path(filename)
        if not path.exists():
            raise NotFoundError(f"Rule file not found: {filename}", str(path))
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogIOError(f"Failed to read rule file {path}: {e}", str(path)) from e

    def write_rule(self, filename: str, content: str, tags: list[str] | None = None) -> None:
        """
        Create or overwrite a rule file and upsert its config entry.

        The config is parsed before anything is written, so a broken
        config.toml leaves both the file and the config untouched.

        Raises:
            ConfigError: If config.toml cannot be parsed or serialized
            CatalogIOError: If the file or config cannot be written
        """
        path = self.rule_path(filename)
        new_config = upsert_rule_entry(
            self.config.read_config_text(),
            filename,
            str(path.absolute()),
            list(tags or []),
        )

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            raise CatalogIOError(f"Failed to write rule file {path}: {e}", str(path)) from e

        self.config.write_config_text(new_config)
        logger.info("Wrote rule %s (tags=%s)", filename, list(tags or []))

    def delete_rule(self, filename: str) -> None:
        """
        Delete a rule file and its config entry.

        Raises:
            NotFoundError: If the rule file does not exist
            ConfigError: If config.toml cannot be parsed or serialized
        """
        path = self.rule_path(filename)
        if not path.exists():
            raise NotFoundError(f"Rule file not found: {filename}", str(path))

        new_config = remove_rule_entry(self.config.read_config_text(), filename)

        try:
            path.unlink()
        except OSError as e:
            raise CatalogIOError(f"Failed to delete rule file {path}: {e}", str(path)) from e

        if new_config is not None:
            self.config.write_config_text(new_config)
        logger.info("Deleted rule %s", filename)


__all__ = ["RULE_EXTENSION", "RULES_DIRNAME", "RuleStore", "validate_rule_name"]
