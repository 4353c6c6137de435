"""Per-entity id sequences.

Ids have the form ``{ABBREVIATION}-{NNNNN}``, e.g. CAT-00001 or PRD-00042.
Numbers are never reused, even after the record holding one is deleted.
"""

import sqlite3


class SequenceService:
    """Issues sequence numbers from the ``_sequences`` table."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        with self.conn:
            self.conn.execute(
                "CREATE TABLE IF NOT EXISTS _sequences ("
                "entity TEXT PRIMARY KEY, next_value INTEGER NOT NULL DEFAULT 1)"
            )

    def next_id(self, entity_name: str, abbreviation: str) -> str:
        """Reserve the next number for ``entity_name`` and format it as an id."""
        with self.conn:
            self.conn.execute(
                "INSERT OR IGNORE INTO _sequences (entity, next_value) VALUES (?, 1)",
                [entity_name],
            )
            (number,) = self.conn.execute(
                "SELECT next_value FROM _sequences WHERE entity = ?", [entity_name]
            ).fetchone()
            self.conn.execute(
                "UPDATE _sequences SET next_value = ? WHERE entity = ?",
                [number + 1, entity_name],
            )
        return f"{abbreviation}-{number:05d}"

    def current_value(self, entity_name: str) -> int:
        """Last number issued for ``entity_name``; 0 before the first id."""
        row = self.conn.execute(
            "SELECT next_value FROM _sequences WHERE entity = ?", [entity_name]
        ).fetchone()
        return row[0] - 1 if row else 0
