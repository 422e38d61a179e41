"""Claude's global rules file: {claude_home}/CLAUDE.md"""

from __future__ import annotations

import logging
from pathlib import Path

from ..backends import Backend, home_dir
from ..config import CatalogSettings
from ..errors import CatalogIOError

logger = logging.getLogger(__name__)

CLAUDE_RULES_FILENAME = "CLAUDE.md"


def claude_rules_path(settings: CatalogSettings | None = None) -> Path:
    """Override base (if set) or ~/.claude, plus CLAUDE.md."""
    settings = settings if settings is not None else CatalogSettings.load()
    base = settings.get_override_dir(Backend.CLAUDE)
    if base is None:
        base = home_dir() / Backend.CLAUDE.descriptor.home_dirname
    return base / CLAUDE_RULES_FILENAME


def read_claude_rules(settings: CatalogSettings | None = None) -> str:
    """Contents of CLAUDE.md, or "" if it does not exist."""
    path = claude_rules_path(settings)
    if not path.exists():
        return ""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogIOError(f"Failed to read Claude rules {path}: {e}", str(path)) from e


def write_claude_rules(content: str, settings: CatalogSettings | None = None) -> None:
    path = claude_rules_path(settings)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise CatalogIOError(f"Failed to write Claude rules {path}: {e}", str(path)) from e
    logger.info("Wrote Claude rules %s", path)


__all__ = [
    "CLAUDE_RULES_FILENAME",
    "claude_rules_path",
    "read_claude_rules",
    "write_claude_rules",
]
