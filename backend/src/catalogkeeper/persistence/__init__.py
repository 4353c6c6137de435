"""Storage for the catalog: SQLite adapter, id sequences and query service."""

from catalogkeeper.persistence.adapter import PersistenceAdapter
from catalogkeeper.persistence.config import DatabaseConfig, create_adapter
from catalogkeeper.persistence.query import AdapterQueryService

__all__ = [
    "AdapterQueryService",
    "DatabaseConfig",
    "PersistenceAdapter",
    "create_adapter",
]
