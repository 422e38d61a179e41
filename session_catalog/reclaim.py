"""Upward removal of directories left empty after a record is deleted."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .backends import PROTECTED_ANCHORS

logger = logging.getLogger(__name__)


def _is_empty(directory: Path) -> bool | None:
    """True/False, or None if the directory cannot be listed."""
    try:
        with os.scandir(directory) as it:
            return next(it, None) is None
    except OSError:
        return None


def reclaim_empty_dirs(
    start: Path | str,
    protected: Iterable[str] = PROTECTED_ANCHORS,
) -> list[Path]:
    """
    Remove start and its ancestors while they are empty.

    Stops at the first directory that is non-empty, unlistable, or fails
    to be removed, and never removes a directory whose name is protected
    (the backend roots) or the filesystem root. Never raises.

    Returns:
        Directories removed, innermost first
    """
    protected = frozenset(protected)
    removed: list[Path] = []
    candidate = Path(os.path.abspath(start))

    while True:
        if not candidate.name or candidate.name in protected:
            break

        empty = _is_empty(candidate)
        if not empty:
            if empty is None:
                logger.debug("Reclaim stopped: cannot list %s", candidate)
            break

        try:
            candidate.rmdir()
        except OSError as e:
            logger.debug("Reclaim stopped: cannot remove %s: %s", candidate, e)
            break
        removed.append(candidate)

        parent = candidate.parent
        if parent == candidate or not parent.name or parent.name in protected:
            break
        candidate = parent

    return removed


__all__ = ["reclaim_empty_dirs"]
