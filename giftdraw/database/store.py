"""
Row store port.

Services talk to storage only through this interface. Two implementations
exist: SupabaseStore (postgrest tables) and InMemoryStore (tests, local dev).

Filters are dicts of column -> value. A scalar value means equality, a
list/tuple/set value means "column in set". All filters are ANDed.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
Filters = Dict[str, Any]

EVENT_INSERT = "INSERT"
EVENT_UPDATE = "UPDATE"
EVENT_DELETE = "DELETE"
EVENT_ALL = "*"


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event: str
    row: Row = field(default_factory=dict)


ChangeCallback = Callable[[ChangeEvent], None]


def row_matches(row: Row, filters: Optional[Filters]) -> bool:
    if not filters:
        return True
    for column, expected in filters.items():
        value = row.get(column)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


class Subscription:
    def __init__(self, registry: "ChangeListeners", table: str, filters: Optional[Filters], event: str,
                 callback: ChangeCallback):
        self._registry = registry
        self.table = table
        self.filters = dict(filters or {})
        self.event = event
        self.callback = callback
        self.active = True

    def wants(self, change: ChangeEvent) -> bool:
        if not self.active or change.table != self.table:
            return False
        if self.event != EVENT_ALL and self.event != change.event:
            return False
        return row_matches(change.row, self.filters)

    def unsubscribe(self) -> None:
        self._registry.remove(self)


class ChangeListeners:
    """Thread-safe observer registry shared by the store implementations."""

    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def add(self, table: str, filters: Optional[Filters], event: str, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(self, table, filters, event, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscription: Subscription) -> None:
        with self._lock:
            subscription.active = False
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def notify(self, table: str, event: str, rows: List[Row]) -> None:
        """Deliver one event per changed row. Listener failures never reach the writer."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        for row in rows:
            change = ChangeEvent(table=table, event=event, row=dict(row))
            for subscription in subscriptions:
                if not subscription.wants(change):
                    continue
                try:
                    subscription.callback(change)
                except Exception as e:
                    logger.error(f"Change listener on {table} failed: {e}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._subscriptions)


class RowStore(Protocol):
    def insert(self, table: str, row: Row) -> Row: ...

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]: ...

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]: ...

    def delete(self, table: str, filters: Filters) -> List[Row]: ...

    def subscribe(
        self,
        table: str,
        filters: Optional[Filters],
        event: str,
        callback: ChangeCallback,
    ) -> Subscription: ...
