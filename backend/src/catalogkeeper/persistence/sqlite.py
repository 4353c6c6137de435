"""SQLite persistence adapter."""

import logging
import re
import sqlite3
from pathlib import Path
from typing import Any

from catalogkeeper.metadata.loader import EntityModel
from catalogkeeper.persistence.sequences import SequenceService

logger = logging.getLogger(__name__)

# Field type -> column type
STORAGE_TYPES: dict[str, str] = {
    "id": "TEXT",
    "string": "TEXT",
    "integer": "INTEGER",
    "number": "REAL",
    "relation": "TEXT",
}

# Filter operator -> SQL template; "{f}" is the column, "{p}" the placeholders
_OPERATORS: dict[str, str] = {
    "eq": "{f} = ?",
    "neq": "{f} != ?",
    "in": "{f} IN ({p})",
    "isNull": "{f} IS NULL",
    "isNotNull": "{f} IS NOT NULL",
}


def table_name(entity_name: str) -> str:
    """ProductCategory -> product_category"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", entity_name).lower()


class SQLiteAdapter:
    """PersistenceAdapter backed by a single sqlite3 connection.

    Every write runs in its own transaction. Records come back as plain
    dicts keyed by field name.
    """

    def __init__(self, db_path: Path | str = ":memory:"):
        self.db_path = str(db_path)
        self.conn: sqlite3.Connection | None = None
        self._sequences: SequenceService | None = None

    def connect(self) -> None:
        conn = sqlite3.connect(self.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        with conn:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS _settings (key TEXT PRIMARY KEY, value TEXT)"
            )
        self.conn = conn
        self._sequences = SequenceService(conn)
        logger.debug("Connected to %s", self.db_path)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
        self.conn = None
        self._sequences = None

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("Database not connected")
        return self.conn

    def initialize_entity(self, entity: EntityModel) -> None:
        """Create the entity's table if it is missing."""
        conn = self._require_conn()
        columns = ", ".join(
            f"{f.name} {STORAGE_TYPES.get(f.type, 'TEXT')}"
            + (" PRIMARY KEY" if f.primary_key else "")
            for f in entity.fields
        )
        with conn:
            conn.execute(f"CREATE TABLE IF NOT EXISTS {table_name(entity.name)} ({columns})")

    # -------------------------------------------------------------------------
    # Records
    # -------------------------------------------------------------------------

    def create(self, entity: EntityModel, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a record, generating its id from the entity's sequence."""
        conn = self._require_conn()
        assert self._sequences is not None

        record = {name: data[name] for name in entity.field_names if name in data}
        if record.get(entity.primary_key) is None:
            record[entity.primary_key] = self._sequences.next_id(
                entity.name, entity.abbreviation
            )

        columns = list(record)
        with conn:
            conn.execute(
                f"INSERT INTO {table_name(entity.name)} ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' * len(columns))})",
                [record[c] for c in columns],
            )
        logger.debug("Inserted %s %s", entity.name, record[entity.primary_key])
        return self.get(entity, record[entity.primary_key])

    def get(self, entity: EntityModel, id: str) -> dict[str, Any] | None:
        conn = self._require_conn()
        row = conn.execute(
            f"SELECT * FROM {table_name(entity.name)} WHERE {entity.primary_key} = ?",
            [id],
        ).fetchone()
        return dict(row) if row is not None else None

    def update(
        self, entity: EntityModel, id: str, data: dict[str, Any]
    ) -> dict[str, Any] | None:
        """Write the non-key fields present in ``data``; the id never changes."""
        conn = self._require_conn()
        changes = {
            f.name: data[f.name]
            for f in entity.fields
            if f.name in data and not f.primary_key
        }
        if changes:
            assignments = ", ".join(f"{name} = ?" for name in changes)
            with conn:
                conn.execute(
                    f"UPDATE {table_name(entity.name)} SET {assignments} "
                    f"WHERE {entity.primary_key} = ?",
                    [*changes.values(), id],
                )
            logger.debug("Updated %s %s", entity.name, id)
        return self.get(entity, id)

    def delete(self, entity: EntityModel, id: str) -> bool:
        """Delete a record; False when nothing had that id."""
        conn = self._require_conn()
        with conn:
            deleted = conn.execute(
                f"DELETE FROM {table_name(entity.name)} WHERE {entity.primary_key} = ?",
                [id],
            ).rowcount
        logger.debug("Deleted %s %s (rows=%d)", entity.name, id, deleted)
        return deleted > 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def query(
        self,
        entity: EntityModel,
        filter: dict | None = None,
        sort: list[dict] | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> dict[str, Any]:
        """Records matching ``filter`` plus pagination info."""
        conn = self._require_conn()
        where, params = self._where(entity, filter)

        sql = f"SELECT * FROM {table_name(entity.name)}{where}"
        if sort:
            order = []
            for item in sort:
                self._check_field(entity, item["field"])
                direction = "DESC" if item.get("direction") == "desc" else "ASC"
                order.append(f"{item['field']} {direction}")
            sql += " ORDER BY " + ", ".join(order)
        if limit:
            sql += f" LIMIT {int(limit)} OFFSET {int(offset)}"

        rows = [dict(row) for row in conn.execute(sql, params)]
        total = self.count(entity, filter)
        return {
            "data": rows,
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "hasMore": bool(limit) and offset + len(rows) < total,
            },
        }

    def count(self, entity: EntityModel, filter: dict | None = None) -> int:
        conn = self._require_conn()
        where, params = self._where(entity, filter)
        (total,) = conn.execute(
            f"SELECT COUNT(*) FROM {table_name(entity.name)}{where}", params
        ).fetchone()
        return total

    # -------------------------------------------------------------------------
    # Settings
    # -------------------------------------------------------------------------

    def get_setting(self, key: str) -> str | None:
        conn = self._require_conn()
        row = conn.execute("SELECT value FROM _settings WHERE key = ?", [key]).fetchone()
        return row["value"] if row is not None else None

    def set_setting(self, key: str, value: Any) -> None:
        conn = self._require_conn()
        with conn:
            conn.execute(
                "INSERT OR REPLACE INTO _settings (key, value) VALUES (?, ?)",
                [key, str(value)],
            )

    # -------------------------------------------------------------------------
    # SQL helpers
    # -------------------------------------------------------------------------

    def _where(self, entity: EntityModel, filter: dict | None) -> tuple[str, list[Any]]:
        """WHERE clause for {"operator": "and"|"or", "conditions": [...]}."""
        if not filter or not filter.get("conditions"):
            return "", []

        clauses: list[str] = []
        params: list[Any] = []
        for cond in filter["conditions"]:
            field, op = cond["field"], cond["operator"]
            self._check_field(entity, field)
            template = _OPERATORS.get(op)
            if template is None:
                raise ValueError(f"Unsupported filter operator '{op}'")

            value = cond.get("value")
            if op == "in":
                values = list(value)
                clauses.append(template.format(f=field, p=", ".join("?" * len(values))))
                params.extend(values)
            else:
                clauses.append(template.format(f=field, p=""))
                if "?" in template:
                    params.append(value)

        joiner = " OR " if str(filter.get("operator", "and")).lower() == "or" else " AND "
        return " WHERE " + joiner.join(clauses), params

    def _check_field(self, entity: EntityModel, field: str) -> None:
        if field not in entity.field_names:
            raise ValueError(f"Unknown field '{field}' on {entity.name}")
