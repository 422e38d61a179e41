"""
Backend descriptors for the two conversation log trees.

Each backend supplies:
- where its tree lives (home subdirectory + root subdirectory)
- how to walk it (flat per-project vs year/month/day)
- which files are records
- how to recover a session id from the first line of a record

Claude: ~/.claude/projects/{project}/{id}.jsonl
Codex:  ~/.codex/sessions/{yyyy}/{mm}/{dd}/{id}.jsonl
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import CatalogIOError, HomeDirectoryError

logger = logging.getLogger(__name__)

RECORD_EXTENSION = ".jsonl"


class Backend(str, Enum):
    """Which tool's tree a record came from."""

    CLAUDE = "claude"
    CODEX = "codex"

    @property
    def descriptor(self) -> "BackendDescriptor":
        return _DESCRIPTORS[self]


def home_dir() -> Path:
    """
    Return the user's home directory.

    Raises:
        HomeDirectoryError: If it cannot be determined
    """
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryError(f"Cannot determine home directory: {e}") from e
    if str(home) == "~":
        raise HomeDirectoryError("Cannot determine home directory: ~ did not expand")
    return home


def resolve_backend_root(backend: Backend | str, override_base: Path | str | None = None) -> Path:
    """
    Canonical record-tree root for a backend.

    With an override base the backend's root subdirectory is appended to it,
    otherwise to the backend's directory under $HOME.
    """
    descriptor = Backend(backend).descriptor
    if override_base is not None:
        return Path(override_base) / descriptor.root_subdir
    return home_dir() / descriptor.home_dirname / descriptor.root_subdir


def list_dir(path: Path) -> list[os.DirEntry]:
    """Read a directory's entries, translating failures to CatalogIOError."""
    try:
        with os.scandir(path) as it:
            return list(it)
    except OSError as e:
        raise CatalogIOError(f"Failed to read directory {path}: {e}", str(path)) from e


def _is_dir(entry: os.DirEntry) -> bool:
    try:
        return entry.is_dir()
    except OSError:
        return False


def _subdirs(path: Path) -> list[os.DirEntry]:
    """Sub-directories of path; an unreadable path yields nothing."""
    try:
        entries = list_dir(path)
    except CatalogIOError as e:
        logger.debug("Skipping unreadable directory %s: %s", path, e)
        return []
    return [e for e in entries if _is_dir(e)]


# First-line envelopes. Only the fields needed for the session id are required.

class ClaudeEnvelope(BaseModel):
    """First line of a Claude transcript: session id is a top-level field."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    session_id: str = Field(alias="sessionId")


class CodexEnvelope(BaseModel):
    """First line of a Codex rollout: {"type": ..., "payload": {...}}."""

    model_config = ConfigDict(extra="allow")

    type: str
    payload: dict[str, Any]


class BackendDescriptor(ABC):
    """Strategy describing one backend's tree shape and record schema."""

    backend: Backend
    home_dirname: str
    root_subdir: str
    extension: str = RECORD_EXTENSION

    def default_root(self, override_base: Path | str | None = None) -> Path:
        return resolve_backend_root(self.backend, override_base)

    def is_record(self, entry: os.DirEntry) -> bool:
        """A record is a file with the recognized extension."""
        if not entry.name.endswith(self.extension):
            return False
        try:
            return entry.is_file()
        except OSError:
            return False

    @abstractmethod
    def iter_containers(self, root: Path) -> Iterator[tuple[Path, str | None]]:
        """
        Yield (directory, container_name) for every directory holding records.

        Reading root itself must raise on failure; deeper unreadable
        directories are skipped.
        """
        ...

    @abstractmethod
    def session_id_from_first_line(self, line: str) -> str | None:
        """Best-effort session id from the first line; never raises."""
        ...


class ClaudeBackend(BackendDescriptor):
    """Flat per-project tree: root/{project}/{id}.jsonl"""

    backend = Backend.CLAUDE
    home_dirname = ".claude"
    root_subdir = "projects"
    hidden_prefix = "."

    def iter_containers(self, root: Path) -> Iterator[tuple[Path, str | None]]:
        for entry in list_dir(root):
            if entry.name.startswith(self.hidden_prefix):
                # .timelines and friends
                continue
            if not _is_dir(entry):
                continue
            yield Path(entry.path), entry.name

    def session_id_from_first_line(self, line: str) -> str | None:
        try:
            return ClaudeEnvelope.model_validate_json(line).session_id
        except ValidationError:
            return None


class CodexBackend(BackendDescriptor):
    """Date-nested tree: root/{yyyy}/{mm}/{dd}/{id}.jsonl"""

    backend = Backend.CODEX
    home_dirname = ".codex"
    root_subdir = "sessions"
    session_meta_type = "session_meta"

    def iter_containers(self, root: Path) -> Iterator[tuple[Path, str | None]]:
        for year in list_dir(root):
            if not _is_dir(year):
                continue
            for month in _subdirs(Path(year.path)):
                for day in _subdirs(Path(month.path)):
                    yield Path(day.path), None

    def session_id_from_first_line(self, line: str) -> str | None:
        try:
            envelope = CodexEnvelope.model_validate_json(line)
        except ValidationError:
            return None
        if envelope.type != self.session_meta_type:
            return None
        session_id = envelope.payload.get("id")
        return session_id if isinstance(session_id, str) else None


_DESCRIPTORS: dict[Backend, BackendDescriptor] = {
    Backend.CLAUDE: ClaudeBackend(),
    Backend.CODEX: CodexBackend(),
}

# Directory names reclamation must never remove
PROTECTED_ANCHORS: frozenset[str] = frozenset(d.root_subdir for d in _DESCRIPTORS.values())


__all__ = [
    "Backend",
    "BackendDescriptor",
    "ClaudeBackend",
    "CodexBackend",
    "ClaudeEnvelope",
    "CodexEnvelope",
    "PROTECTED_ANCHORS",
    "RECORD_EXTENSION",
    "home_dir",
    "list_dir",
    "resolve_backend_root",
]
