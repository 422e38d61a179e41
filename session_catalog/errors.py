"""Error kinds raised by catalog and rule store operations."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for all catalog failures."""


class HomeDirectoryError(CatalogError):
    """The home directory (or an override base) could not be determined."""


class CatalogIOError(CatalogError):
    """A file or directory could not be read, written, or stat'ed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class NotFoundError(CatalogError):
    """The target of an operation does not exist."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class ConfigError(CatalogError):
    """A structured config document could not be parsed or serialized."""


__all__ = [
    "CatalogError",
    "HomeDirectoryError",
    "CatalogIOError",
    "NotFoundError",
    "ConfigError",
]
