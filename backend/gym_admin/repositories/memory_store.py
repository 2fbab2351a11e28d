"""In-memory record store.

Keeps rows in insertion order, records every call it receives, and can be
told to fail a given table/operation, which makes it the stub of choice for
service tests and for running the HTTP layer without a database.
"""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.exceptions import RepositoryError
from ..domain.interfaces import IRecordStore, Row


class InMemoryRecordStore(IRecordStore):
    def __init__(self) -> None:
        self.tables: Dict[str, Dict[str, Row]] = {}
        self.calls: List[Tuple[str, str]] = []
        self._failures: Dict[Tuple[str, str], str] = {}

    def fail(self, table: str, operation: str, message: str = "store unavailable") -> None:
        """Make every later ``operation`` on ``table`` raise RepositoryError."""
        self._failures[(table, operation)] = message

    def recover(self) -> None:
        self._failures.clear()

    def call_count(self, operation: Optional[str] = None, table: Optional[str] = None) -> int:
        return sum(
            1
            for op, tbl in self.calls
            if (operation is None or op == operation) and (table is None or tbl == table)
        )

    def _enter(self, operation: str, table: str) -> Dict[str, Row]:
        self.calls.append((operation, table))
        message = self._failures.get((table, operation))
        if message is not None:
            raise RepositoryError(message, table=table, operation=operation)
        return self.tables.setdefault(table, {})

    def query(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        order_by: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        rows = [
            row
            for row in self._enter("query", table).values()
            if all(row.get(key) == value for key, value in (filters or {}).items())
        ]
        # Stable sorts applied from the last key to the first
        for key in reversed(list(order_by or ())):
            rows.sort(key=_sort_key(key.lstrip("-")), reverse=key.startswith("-"))
        return copy.deepcopy(rows)

    def insert(self, table: str, rows: List[Row]) -> List[Row]:
        stored = self._enter("insert", table)
        inserted = []
        for row in rows:
            new_row = copy.deepcopy(row)
            new_row.setdefault("id", None)
            if new_row["id"] is None:
                new_row["id"] = str(uuid.uuid4())
            if new_row.get("created_at") is None:
                new_row["created_at"] = datetime.now(timezone.utc)
            stored[new_row["id"]] = new_row
            inserted.append(copy.deepcopy(new_row))
        return inserted

    def update(self, table: str, record_id: str, patch: Row) -> Row:
        stored = self._enter("update", table)
        if record_id not in stored:
            raise RepositoryError(
                f"{table} row {record_id} not found", table=table, operation="update"
            )
        stored[record_id].update(copy.deepcopy(patch))
        return copy.deepcopy(stored[record_id])

    def delete(self, table: str, record_id: str) -> None:
        stored = self._enter("delete", table)
        if stored.pop(record_id, None) is None:
            raise RepositoryError(
                f"{table} row {record_id} not found", table=table, operation="delete"
            )


def _sort_key(column: str):
    # None sorts before any value
    def key(row: Row):
        value = row.get(column)
        return (value is not None, value if value is not None else 0)

    return key
