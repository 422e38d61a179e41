"""Metadata extraction for a single record file."""

from __future__ import annotations

import os
from pathlib import Path

from .backends import Backend
from .errors import CatalogIOError
from .models import ConversationMeta


def count_entries(content: str) -> int:
    """
    Number of line-delimited entries.

    A trailing newline does not add an entry; an empty file has none.
    """
    if not content:
        return 0
    count = content.count("\n")
    if not content.endswith("\n"):
        count += 1
    return count


def first_line(content: str) -> str:
    line = content.split("\n", 1)[0]
    return line.rstrip("\r")


def _epoch_seconds(value: float | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return None


def extract_meta(
    file_path: Path | str,
    backend: Backend | str,
    container_name: str | None = None,
) -> ConversationMeta:
    """
    Build a ConversationMeta for one record file.

    Args:
        file_path: Path to the .jsonl record
        backend: Backend whose schema rules apply to the first line
        container_name: Project directory name (claude only)

    Returns:
        ConversationMeta snapshot

    Raises:
        CatalogIOError: If the file or its metadata cannot be read
    """
    path = Path(file_path)
    descriptor = Backend(backend).descriptor

    try:
        stat = path.stat()
    except OSError as e:
        raise CatalogIOError(f"Failed to stat {path}: {e}", str(path)) from e

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogIOError(f"Failed to read {path}: {e}", str(path)) from e

    session_id = None
    if content:
        session_id = descriptor.session_id_from_first_line(first_line(content))

    modified_at = _epoch_seconds(getattr(stat, "st_mtime", None))
    created_at = _epoch_seconds(getattr(stat, "st_birthtime", None))

    return ConversationMeta(
        id=path.stem,
        backend=descriptor.backend,
        file_path=os.fspath(path.absolute()),
        file_size=stat.st_size,
        modified_at=modified_at if modified_at is not None else 0,
        created_at=created_at,
        entry_count=count_entries(content),
        container_name=container_name,
        session_id=session_id,
    )


__all__ = ["count_entries", "extract_meta", "first_line"]
