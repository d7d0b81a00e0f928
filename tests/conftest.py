"""
tests/conftest.py: shared fixtures and helpers.

Every test runs against InMemoryStore; nothing talks to Supabase. The HTTP
tests replace the Supabase Auth dependency with FakeAuthService, which
accepts tokens of the form "token-<name>" and maps them to user "user-<name>".

Helpers are plain functions (not fixtures) so tests can call them with any
arguments.
"""

from __future__ import annotations

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from giftdraw.core import locks
from giftdraw.core.dependencies import get_auth_service
from giftdraw.core.errors import StoreError
from giftdraw.database.memory_store import InMemoryStore
from giftdraw.database.store_provider import get_store


# ═══════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════

class RecordingStore(InMemoryStore):
    """
    InMemoryStore that records every call and can be told to fail.

    fail_when(op, table, filters, patch) -> bool decides whether a call raises
    StoreError before touching any row.
    """

    def __init__(self):
        super().__init__()
        self.calls: list[tuple] = []
        self.fail_when = None

    def _record(self, op, table, filters=None, patch=None):
        self.calls.append((op, table, dict(filters or {}), dict(patch or {})))
        if self.fail_when is not None and self.fail_when(op, table, filters or {}, patch or {}):
            raise StoreError(f"Injected failure on {op} {table}")

    def insert(self, table, row):
        self._record("insert", table, patch=row)
        return super().insert(table, row)

    def select(self, table, filters=None, columns="*", order_by=None, desc=False, limit=None):
        self._record("select", table, filters)
        return super().select(table, filters, columns, order_by, desc, limit)

    def update(self, table, filters, patch):
        self._record("update", table, filters, patch)
        return super().update(table, filters, patch)

    def delete(self, table, filters):
        self._record("delete", table, filters)
        return super().delete(table, filters)

    @property
    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("insert", "update", "delete")]

    def reset_calls(self) -> None:
        self.calls = []


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture(autouse=True)
def _fresh_locks():
    yield
    with locks._lock:
        locks._registry.clear()


# ═══════════════════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════════════════

def user(name: str) -> dict:
    """User dict as returned by AuthService.get_current_user."""
    return {"id": f"user-{name}", "email": f"{name}@example.com", "user_metadata": {}}


class FakeAuthService:
    def get_current_user(self, token: str) -> dict:
        if not token.startswith("token-"):
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        return user(token[len("token-"):])

    def logout(self, token: str) -> bool:
        return True


def auth_headers(name: str) -> dict:
    return {"Authorization": f"Bearer token-{name}"}


# ═══════════════════════════════════════════════════════════════════════════
# Seeding helpers
# ═══════════════════════════════════════════════════════════════════════════

def add_profile(store, name: str, display_name: str | None = None) -> dict:
    return store.insert("profiles", {
        "user_id": f"user-{name}",
        "email": f"{name}@example.com",
        "display_name": display_name if display_name is not None else name.capitalize(),
    })


def seed_group(store, owner: str, members: list[str], code: str = "ABCDEF", is_drawn: bool = False) -> dict:
    """Group owned by `owner` whose members are `members` (owner included if listed)."""
    group = store.insert("groups", {
        "name": f"{owner}'s group",
        "code": code,
        "created_by": f"user-{owner}",
        "is_drawn": is_drawn,
    })
    for name in members:
        store.insert("group_members", {
            "group_id": group["id"],
            "user_id": f"user-{name}",
            "user_email": f"{name}@example.com",
            "user_name": name.capitalize(),
        })
    return group


def assignment_of(store, group_id: str) -> dict:
    """user_id -> assigned_to for every member of the group."""
    return {m["user_id"]: m["assigned_to"] for m in store.select("group_members", {"group_id": group_id})}


def is_drawn(store, group_id: str) -> bool:
    return store.select("groups", {"id": group_id})[0]["is_drawn"]


# ═══════════════════════════════════════════════════════════════════════════
# HTTP client
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client(store):
    from giftdraw.main import app

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_auth_service] = lambda: FakeAuthService()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
