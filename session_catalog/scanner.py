"""
Record scanner: walks a backend's tree and extracts metadata per record.

No index is kept; every call re-walks the filesystem. Per-entry failures
are skipped so one corrupt record never aborts a listing. Extraction runs
on a thread pool, and the output order comes only from the final sort.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .backends import Backend, BackendDescriptor, list_dir
from .errors import CatalogError, CatalogIOError
from .extractor import extract_meta
from .models import ConversationMeta

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 4


def sort_by_modified(records: list[ConversationMeta]) -> list[ConversationMeta]:
    """Newest first. Stable, so ties keep their input order."""
    return sorted(records, key=lambda m: m.modified_at, reverse=True)


def _scan_container(
    descriptor: BackendDescriptor,
    directory: Path,
    container_name: str | None,
) -> list[ConversationMeta]:
    """Extract every record directly inside one container directory."""
    try:
        entries = list_dir(directory)
    except CatalogIOError as e:
        logger.debug("Skipping unreadable container %s: %s", directory, e)
        return []

    records = []
    for entry in entries:
        if not descriptor.is_record(entry):
            continue
        try:
            records.append(extract_meta(entry.path, descriptor.backend, container_name))
        except CatalogError as e:
            logger.debug("Skipping record %s: %s", entry.path, e)
    return records


def scan(
    backend: Backend | str,
    root: Path | str,
    max_workers: int = DEFAULT_WORKERS,
) -> list[ConversationMeta]:
    """
    Scan one backend tree.

    Args:
        backend: Which tree shape and record schema to apply
        root: Tree root (e.g. ~/.claude/projects)
        max_workers: Thread pool size for per-container extraction

    Returns:
        ConversationMeta list sorted by modified_at descending. A missing
        root yields an empty list.

    Raises:
        CatalogIOError: If root exists but cannot be read
    """
    descriptor = Backend(backend).descriptor
    root = Path(root)
    if not root.exists():
        logger.debug("No %s tree at %s", descriptor.backend.value, root)
        return []

    # Materialize before submitting so a root read failure raises here
    containers = list(descriptor.iter_containers(root))
    if not containers:
        return []

    records: list[ConversationMeta] = []
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as ex:
        futures = [
            ex.submit(_scan_container, descriptor, directory, name)
            for directory, name in containers
        ]
        for fut in futures:
            records.extend(fut.result())

    logger.debug("Scanned %d %s records under %s", len(records), descriptor.backend.value, root)
    return sort_by_modified(records)


__all__ = ["DEFAULT_WORKERS", "scan", "sort_by_modified"]
