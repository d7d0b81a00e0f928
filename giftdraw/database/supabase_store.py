import logging
from typing import List, Optional

from supabase import Client

from giftdraw.core.errors import StoreError
from giftdraw.database.store import (
    EVENT_DELETE, EVENT_INSERT, EVENT_UPDATE,
    ChangeCallback, ChangeListeners, Filters, Row, Subscription,
)

logger = logging.getLogger(__name__)


def _apply_filters(query, filters: Optional[Filters]):
    for column, value in (filters or {}).items():
        if isinstance(value, (list, tuple, set, frozenset)):
            query = query.in_(column, list(value))
        else:
            query = query.eq(column, value)
    return query


class SupabaseStore:
    """
    RowStore over Supabase tables (postgrest).

    Change notifications cover writes made through this store instance; the
    sync Supabase client has no realtime channel, so writes by other
    processes are picked up by clients re-fetching on demand.
    """

    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.listeners = ChangeListeners()

    def insert(self, table: str, row: Row) -> Row:
        try:
            result = self.supabase.table(table).insert(row).execute()
        except Exception as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise StoreError(f"Failed to insert into {table}") from e
        if not result.data:
            raise StoreError(f"Failed to insert into {table}")
        self.listeners.notify(table, EVENT_INSERT, result.data)
        return result.data[0]

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        columns: str = "*",
        order_by: Optional[str] = None,
        desc: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        try:
            query = _apply_filters(self.supabase.table(table).select(columns), filters)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            result = query.execute()
        except Exception as e:
            logger.error(f"Select from {table} failed: {e}")
            raise StoreError(f"Failed to read {table}") from e
        return result.data or []

    def update(self, table: str, filters: Filters, patch: Row) -> List[Row]:
        try:
            query = _apply_filters(self.supabase.table(table).update(patch), filters)
            result = query.execute()
        except Exception as e:
            logger.error(f"Update of {table} failed: {e}")
            raise StoreError(f"Failed to update {table}") from e
        rows = result.data or []
        if rows:
            self.listeners.notify(table, EVENT_UPDATE, rows)
        return rows

    def delete(self, table: str, filters: Filters) -> List[Row]:
        try:
            query = _apply_filters(self.supabase.table(table).delete(), filters)
            result = query.execute()
        except Exception as e:
            logger.error(f"Delete from {table} failed: {e}")
            raise StoreError(f"Failed to delete from {table}") from e
        rows = result.data or []
        if rows:
            self.listeners.notify(table, EVENT_DELETE, rows)
        return rows

    def subscribe(self, table: str, filters: Optional[Filters], event: str, callback: ChangeCallback) -> Subscription:
        return self.listeners.add(table, filters, event, callback)
