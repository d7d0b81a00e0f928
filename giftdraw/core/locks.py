"""Thread-safe registry of group_id -> Lock so draws, joins and deletes on one group run one at a time."""
import threading
import logging
from contextlib import contextmanager
from typing import Iterator

from giftdraw.core.errors import ConflictError

logger = logging.getLogger(__name__)
_lock = threading.Lock()
# group_id -> [lock, number of callers holding or waiting on it]
_registry: dict[str, list] = {}


def _checkout(group_id: str) -> threading.Lock:
    with _lock:
        entry = _registry.get(group_id)
        if entry is None:
            entry = [threading.Lock(), 0]
            _registry[group_id] = entry
        entry[1] += 1
        return entry[0]


def _checkin(group_id: str) -> None:
    """Drop the entry once nobody holds or waits on it."""
    with _lock:
        entry = _registry.get(group_id)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] <= 0:
            del _registry[group_id]


@contextmanager
def group_lock(group_id: str, timeout: float) -> Iterator[None]:
    """Hold the group's lock; ConflictError if another holder keeps it past timeout."""
    lock = _checkout(group_id)
    try:
        if not lock.acquire(timeout=timeout):
            logger.warning(f"Timed out waiting for lock on group {group_id}")
            raise ConflictError("A draw is already in progress for this group")
        try:
            yield
        finally:
            lock.release()
    finally:
        _checkin(group_id)
