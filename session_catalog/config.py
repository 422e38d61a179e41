"""
Configuration management for session-catalog.

Two pieces live here:
- CatalogSettings: user settings, mainly the per-backend override
  directories consulted by the path resolver.
- CodexConfig: raw text access to the Codex config.toml that backs the
  rule store's tag annotations.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .backends import Backend, home_dir
from .errors import CatalogIOError, HomeDirectoryError

logger = logging.getLogger(__name__)

# Auto-load .env from the working directory (does not override the environment)
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


SETTINGS_DIRNAME = ".session-catalog"
SETTINGS_FILENAME = "settings.json"

ENV_CLAUDE_DIR = "SESSION_CATALOG_CLAUDE_DIR"
ENV_CODEX_DIR = "SESSION_CATALOG_CODEX_DIR"
ENV_SCAN_WORKERS = "SESSION_CATALOG_SCAN_WORKERS"

DEFAULT_SETTINGS: dict[str, Any] = {
    "claude_override_dir": None,
    "codex_override_dir": None,
    "scan_workers": 4,
}


def _filter_dataclass_fields(data: dict[str, Any], cls: type) -> dict[str, Any]:
    """Filter dict to only include fields that exist in the dataclass."""
    valid_fields = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in valid_fields}


def default_settings_path() -> Path:
    """~/.session-catalog/settings.json"""
    return home_dir() / SETTINGS_DIRNAME / SETTINGS_FILENAME


@dataclass
class CatalogSettings:
    """
    User settings for the catalog.

    Priority order for each value:
    1. Environment variable (SESSION_CATALOG_*), including a local .env
    2. settings.json
    3. Default
    """

    claude_override_dir: str | None = None
    codex_override_dir: str | None = None
    scan_workers: int = 4

    @classmethod
    def load(cls, path: Path | None = None) -> "CatalogSettings":
        """
        Load settings from file with defaults, then apply env overrides.

        Args:
            path: Optional settings file path. Defaults to ~/.session-catalog/settings.json

        Returns:
            CatalogSettings instance
        """
        config = DEFAULT_SETTINGS.copy()

        if path is None:
            try:
                path = default_settings_path()
            except HomeDirectoryError:
                path = None

        if path is not None and path.exists():
            try:
                user_config = json.loads(path.read_text(encoding="utf-8"))
                if isinstance(user_config, dict):
                    config.update(user_config)
            except (json.JSONDecodeError, OSError) as e:
                # Use defaults on error
                logger.warning("Ignoring unreadable settings file %s: %s", path, e)

        env_claude = os.getenv(ENV_CLAUDE_DIR)
        if env_claude:
            config["claude_override_dir"] = env_claude
        env_codex = os.getenv(ENV_CODEX_DIR)
        if env_codex:
            config["codex_override_dir"] = env_codex
        env_workers = os.getenv(ENV_SCAN_WORKERS)
        if env_workers:
            try:
                config["scan_workers"] = int(env_workers)
            except ValueError:
                logger.warning("Ignoring non-integer %s=%r", ENV_SCAN_WORKERS, env_workers)

        settings = cls(**_filter_dataclass_fields(config, cls))
        settings.scan_workers = max(1, int(settings.scan_workers or 1))
        return settings

    def save(self, path: Path | None = None) -> None:
        """Save settings to file."""
        if path is None:
            path = default_settings_path()

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {
                    "claude_override_dir": self.claude_override_dir,
                    "codex_override_dir": self.codex_override_dir,
                    "scan_workers": self.scan_workers,
                },
                f,
                indent=2,
            )

    def get_override_dir(self, backend: Backend | str) -> Path | None:
        """Return the override base directory for a backend, if one is set."""
        backend = Backend(backend)
        raw = self.claude_override_dir if backend is Backend.CLAUDE else self.codex_override_dir
        if not raw or not str(raw).strip():
            return None
        return Path(str(raw).strip()).expanduser()


class CodexConfig:
    """
    Raw text access to Codex's config.toml.

    The rule store parses, mutates and fully rewrites the returned text;
    this class only knows where the file lives.
    """

    CONFIG_FILENAME = "config.toml"

    def __init__(self, settings: CatalogSettings | None = None, base_dir: Path | str | None = None):
        """
        Args:
            settings: Settings used to find a codex override directory
            base_dir: Explicit config directory, takes priority over settings
        """
        self.settings = settings
        self._base_dir = Path(base_dir) if base_dir is not None else None

    def config_dir(self) -> Path:
        """Codex home: explicit base, settings override, or ~/.codex."""
        if self._base_dir is not None:
            return self._base_dir
        settings = self.settings if self.settings is not None else CatalogSettings.load()
        override = settings.get_override_dir(Backend.CODEX)
        if override is not None:
            return override
        return home_dir() / Backend.CODEX.descriptor.home_dirname

    def config_path(self) -> Path:
        return self.config_dir() / self.CONFIG_FILENAME

    def read_config_text(self) -> str:
        """Return config.toml contents, or "" if the file does not exist."""
        path = self.config_path()
        if not path.exists():
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogIOError(f"Failed to read config {path}: {e}", str(path)) from e

    def write_config_text(self, text: str) -> None:
        path = self.config_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise CatalogIOError(f"Failed to write config {path}: {e}", str(path)) from e
        logger.info("Rewrote config %s", path)


__all__ = [
    "CatalogSettings",
    "CodexConfig",
    "DEFAULT_SETTINGS",
    "ENV_CLAUDE_DIR",
    "ENV_CODEX_DIR",
    "ENV_SCAN_WORKERS",
    "default_settings_path",
]
