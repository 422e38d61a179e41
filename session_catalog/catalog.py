"""
ConversationCatalog - list, search, read and delete conversation records.

Stateless: every call resolves the roots and re-scans from scratch.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .backends import Backend, resolve_backend_root
from .config import CatalogSettings
from .errors import CatalogIOError, NotFoundError
from .models import ConversationMessage, ConversationMeta
from .reclaim import reclaim_empty_dirs
from .scanner import scan
from .transcript_parser import parse_conversation_messages

logger = logging.getLogger(__name__)

# Concatenation order when no backend filter is given
SEARCH_ORDER = (Backend.CLAUDE, Backend.CODEX)


def matches_keyword(meta: ConversationMeta, keyword: str) -> bool:
    """Case-insensitive substring match on id, container name and session id."""
    needle = keyword.lower()
    for value in (meta.id, meta.container_name, meta.session_id):
        if value is not None and needle in value.lower():
            return True
    return False


class ConversationCatalog:
    """Catalog over the claude and codex conversation trees."""

    def __init__(
        self,
        settings: CatalogSettings | None = None,
        roots: dict[Backend, Path] | None = None,
    ):
        """
        Args:
            settings: Settings providing override directories (loaded if omitted)
            roots: Explicit tree roots per backend, bypassing resolution
        """
        self.settings = settings if settings is not None else CatalogSettings.load()
        self._roots = {Backend(k): Path(v) for k, v in (roots or {}).items()}

    def root_for(self, backend: Backend | str) -> Path:
        backend = Backend(backend)
        if backend in self._roots:
            return self._roots[backend]
        return resolve_backend_root(backend, self.settings.get_override_dir(backend))

    def list_conversations(self, backend: Backend | str) -> list[ConversationMeta]:
        """All records of one backend, newest first."""
        backend = Backend(backend)
        return scan(backend, self.root_for(backend), max_workers=self.settings.scan_workers)

    def search_conversations(
        self,
        backend: Backend | str | None = None,
        keyword: str = "",
    ) -> list[ConversationMeta]:
        """
        Filter records by keyword.

        Without a backend filter the result is claude's list followed by
        codex's list; the two are not merged by timestamp.
        """
        backends = (Backend(backend),) if backend else SEARCH_ORDER

        records: list[ConversationMeta] = []
        for b in backends:
            records.extend(self.list_conversations(b))

        if not keyword:
            return records
        return [m for m in records if matches_keyword(m, keyword)]

    def get_conversation_content(self, file_path: Path | str) -> str:
        """Raw text of a record file."""
        path = Path(file_path)
        if not path.exists():
            raise NotFoundError(f"File not found: {path}", str(path))
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise CatalogIOError(f"Failed to read {path}: {e}", str(path)) from e

    def get_conversation_messages(
        self,
        file_path: Path | str,
        backend: Backend | str,
    ) -> list[ConversationMessage]:
        """Displayable user/assistant messages of a record."""
        return parse_conversation_messages(self.get_conversation_content(file_path), backend)

    def delete_conversation(self, file_path: Path | str) -> None:
        """
        Delete a record file, then remove directories it left empty.

        Raises:
            NotFoundError: If the file does not exist
            CatalogIOError: If the file cannot be removed
        """
        path = Path(file_path)
        if not path.exists():
            raise NotFoundError(f"File not found: {path}", str(path))
        try:
            path.unlink()
        except OSError as e:
            raise CatalogIOError(f"Failed to delete {path}: {e}", str(path)) from e
        logger.info("Deleted conversation %s", path)

        removed = reclaim_empty_dirs(path.absolute().parent)
        for directory in removed:
            logger.info("Removed empty directory %s", directory)


__all__ = ["ConversationCatalog", "SEARCH_ORDER", "matches_keyword"]
