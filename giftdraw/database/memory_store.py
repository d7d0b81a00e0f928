"""In-process RowStore. Backs the test suite and STORAGE_BACKEND=memory."""
import copy
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from giftdraw.database.store import (
    EVENT_DELETE, EVENT_INSERT, EVENT_UPDATE,
    ChangeCallback, ChangeListeners, Filters, Row, Subscription, row_matches,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# Column defaults the hosted schema fills in on insert
TABLE_DEFAULTS: Dict[str, Dict[str, Callable[[], Any]]] = {
    "groups": {"is_drawn": lambda: False, "created_at": _now},
    "group_members": {"assigned_to": lambda: None},
    "profiles": {},
}


class InMemoryStore:
    def __init__(self, tables: Optional[Dict[str, List[Row]]] = None):
        self._lock = threading.RLock()
        self._tables: Dict[str, List[Row]] = {}
        self.listeners = ChangeListeners()
        for table, rows in (tables or {}).items():
            self._tables[table] = [copy.deepcopy(r) for r in rows]

    def _rows(self, table: str) -> List[Row]:
        return self._tables.setdefault(table, [])

    @staticmethod
    def _project(row: Row, columns: str) -> Row:
        if columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in columns.split(",") if c.strip()]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}

    def insert(self, table: str, row: Row) -> Row:
        new_row = dict(row)
        new_row.setdefault("id", str(uuid.uuid4()))
        for column, default in TABLE_DEFAULTS.get(table, {}).items():
            new_row.setdefault(column, default())
        with self._lock:
            self._rows(table).append(new_row)
            stored = copy.deepcopy(new_row)
        self.listeners.notify(table, EVENT_INSERT, [stored])
        return stored

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        with self._lock:
            rows = [r for r in self._rows(table) if row_matches(r, filters)]
            if order_by:
                rows.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by)), reverse=desc)
            if limit is not None:
                rows = rows[:limit]
            return [self._project(r, columns) for r in rows]

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        with self._lock:
            changed = []
            for r in self._rows(table):
                if row_matches(r, filters):
                    r.update(patch)
                    changed.append(copy.deepcopy(r))
        if changed:
            self.listeners.notify(table, EVENT_UPDATE, changed)
        return changed

    def delete(self, table: str, filters: Filters) -> List[Row]:
        with self._lock:
            rows = self._rows(table)
            removed = [r for r in rows if row_matches(r, filters)]
            self._tables[table] = [r for r in rows if not row_matches(r, filters)]
        if removed:
            self.listeners.notify(table, EVENT_DELETE, removed)
        return removed

    def subscribe(self, table: str, filters: Optional[Filters], event: str, callback: ChangeCallback) -> Subscription:
        logger.debug(f"Subscribing to {event} on {table} with {filters}")
        return self.listeners.add(table, filters, event, callback)
