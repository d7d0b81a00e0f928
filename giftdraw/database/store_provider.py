import logging
import threading

from giftdraw.config import settings
from giftdraw.database.store import RowStore

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_store: RowStore = None


def _build_store() -> RowStore:
    backend = settings.storage_backend.strip().lower()
    if backend == "memory":
        from giftdraw.database.memory_store import InMemoryStore
        logger.warning("Using in-memory row store; data is lost on restart")
        return InMemoryStore()
    if backend == "supabase":
        from giftdraw.database.supabase_client import SupabaseClient
        from giftdraw.database.supabase_store import SupabaseStore
        return SupabaseStore(SupabaseClient.get_service_client())
    raise ValueError(f"Unknown storage backend: {settings.storage_backend}")


def get_store() -> RowStore:
    """Process-wide store so change listeners see every write made by this process."""
    global _store
    with _lock:
        if _store is None:
            _store = _build_store()
        return _store


def reset_store() -> None:
    global _store
    with _lock:
        _store = None
