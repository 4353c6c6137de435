"""Where the catalog is stored, and the adapter for it."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from catalogkeeper.persistence.adapter import PersistenceAdapter

DEFAULT_DB_FILE = "catalogkeeper.db"

_SQLITE_PREFIXES = ("sqlite:///", "sqlite://")


@dataclass
class DatabaseConfig:
    """A database URL.

    Only SQLite is supported: ``sqlite:///path/to/file.db`` for a file,
    ``sqlite://`` or ``sqlite:///:memory:`` for a private in-memory database.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """First of: $DATABASE_URL, $CATALOGKEEPER_DB_PATH, then
        ``catalogkeeper.db`` under ``base_path`` or the working directory.
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)
        path = os.environ.get("CATALOGKEEPER_DB_PATH")
        if path:
            return cls(url=f"sqlite:///{path}")
        default = base_path / DEFAULT_DB_FILE if base_path else DEFAULT_DB_FILE
        return cls(url=f"sqlite:///{default}")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith(_SQLITE_PREFIXES[1])

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of the URL; ":memory:" for in-memory URLs."""
        for prefix in _SQLITE_PREFIXES:
            if self.url.startswith(prefix):
                return self.url[len(prefix):] or ":memory:"
        raise ValueError(f"Not a sqlite URL: {self.url}")


def create_adapter(config: DatabaseConfig) -> PersistenceAdapter:
    """Unconnected adapter for ``config.url``.

    Raises:
        ValueError: the URL scheme is not supported.
    """
    if not config.is_sqlite:
        raise ValueError(f"Unsupported database URL scheme: {config.url}")

    from catalogkeeper.persistence.sqlite import SQLiteAdapter

    return SQLiteAdapter(config.sqlite_path)
