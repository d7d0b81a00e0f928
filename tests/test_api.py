"""
tests/test_api.py: HTTP flows through the FastAPI app.

Endpoints covered:
  POST   /api/v1/groups                      → 201 create
  POST   /api/v1/groups/join                 → 201 join / 404 / 409 / 422
  GET    /api/v1/groups                      → 200 list
  GET    /api/v1/groups/:id                  → 200 detail / 403
  DELETE /api/v1/groups/:id                  → 204 / 403
  POST   /api/v1/groups/:id/draw             → 200 / 403 / 409 / 422
  GET    /api/v1/groups/:id/assignment       → 200 / 403
  GET    /api/v1/auth/me, /api/v1/profiles/me
"""

from __future__ import annotations

from .conftest import add_profile, assignment_of, auth_headers, is_drawn


def _create(client, owner: str, name: str = "Family") -> dict:
    resp = client.post("/api/v1/groups", json={"name": name}, headers=auth_headers(owner))
    assert resp.status_code == 201, resp.json()
    return resp.json()


def _join(client, name: str, code: str):
    return client.post("/api/v1/groups/join", json={"code": code}, headers=auth_headers(name))


def _group_of_three(client) -> dict:
    group = _create(client, "alice")
    for name in ("bob", "carol"):
        assert _join(client, name, group["code"]).status_code == 201
    return group


def _draw(client, name: str, group_id: str, **body):
    return client.post(f"/api/v1/groups/{group_id}/draw", json=body or None, headers=auth_headers(name))


# ═══════════════════════════════════════════════════════════════════════════
# Probes and auth
# ═══════════════════════════════════════════════════════════════════════════

def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_missing_token_rejected(client):
    resp = client.get("/api/v1/groups")
    assert resp.status_code in (401, 403)


def test_invalid_token_rejected(client):
    resp = client.get("/api/v1/groups", headers={"Authorization": "Bearer nope"})
    assert resp.status_code == 401


def test_me_uses_profile_display_name(client, store):
    add_profile(store, "alice", "Alice Smith")
    resp = client.get("/api/v1/auth/me", headers=auth_headers("alice"))
    assert resp.status_code == 200
    assert resp.json() == {"id": "user-alice", "email": "alice@example.com", "display_name": "Alice Smith"}


def test_profile_me(client, store):
    assert client.get("/api/v1/profiles/me", headers=auth_headers("bob")).status_code == 404
    add_profile(store, "bob", "Bobby")
    resp = client.get("/api/v1/profiles/me", headers=auth_headers("bob"))
    assert resp.status_code == 200
    assert resp.json()["display_name"] == "Bobby"


# ═══════════════════════════════════════════════════════════════════════════
# Groups
# ═══════════════════════════════════════════════════════════════════════════

def test_create_and_list(client):
    group = _create(client, "alice", "Office")
    assert group["name"] == "Office"
    assert len(group["code"]) == 6
    assert group["is_drawn"] is False

    resp = client.get("/api/v1/groups", headers=auth_headers("alice"))
    assert resp.status_code == 200
    assert [g["id"] for g in resp.json()] == [group["id"]]
    assert client.get("/api/v1/groups", headers=auth_headers("bob")).json() == []


def test_create_blank_name(client):
    resp = client.post("/api/v1/groups", json={"name": "  "}, headers=auth_headers("alice"))
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Group name is required"


def test_join_errors(client):
    group = _create(client, "alice")

    assert _join(client, "bob", "").status_code == 422
    assert _join(client, "bob", "ZZZZZZ").status_code == 404
    assert _join(client, "alice", group["code"]).status_code == 409
    assert _join(client, "bob", group["code"].lower()).status_code == 201
    assert _join(client, "bob", group["code"]).status_code == 409


def test_detail_members_only(client):
    group = _group_of_three(client)

    resp = client.get(f"/api/v1/groups/{group['id']}", headers=auth_headers("bob"))
    assert resp.status_code == 200
    body = resp.json()
    assert sorted(m["user_name"] for m in body["members"]) == ["alice", "bob", "carol"]
    assert body["is_owner"] is False

    assert client.get(f"/api/v1/groups/{group['id']}", headers=auth_headers("mallory")).status_code == 403
    assert client.get("/api/v1/groups/missing", headers=auth_headers("bob")).status_code == 404


def test_delete_owner_only(client, store):
    group = _group_of_three(client)

    assert client.delete(f"/api/v1/groups/{group['id']}", headers=auth_headers("bob")).status_code == 403
    assert len(store.select("group_members", {"group_id": group["id"]})) == 3

    assert client.delete(f"/api/v1/groups/{group['id']}", headers=auth_headers("alice")).status_code == 204
    assert store.select("group_members", {"group_id": group["id"]}) == []
    assert store.select("groups", {"id": group["id"]}) == []


# ═══════════════════════════════════════════════════════════════════════════
# Draw and reveal
# ═══════════════════════════════════════════════════════════════════════════

def test_full_draw_flow(client, store):
    group = _group_of_three(client)

    resp = _draw(client, "alice", group["id"])
    assert resp.status_code == 200, resp.json()
    assert resp.json()["participants"] == 3
    assert "assigned_to" not in resp.text

    names = set()
    for viewer in ("alice", "bob", "carol"):
        reveal = client.get(f"/api/v1/groups/{group['id']}/assignment", headers=auth_headers(viewer))
        assert reveal.status_code == 200
        body = reveal.json()
        assert body["is_drawn"] is True
        assert body["assigned_name"] != viewer
        assert set(body) == {"group_id", "is_drawn", "assigned_name"}
        names.add(body["assigned_name"])
    # everyone is somebody's receiver exactly once
    assert len(names) == 3

    detail = client.get(f"/api/v1/groups/{group['id']}", headers=auth_headers("alice"))
    assert "assigned_to" not in detail.text


def test_draw_refused_for_non_owner(client, store):
    group = _group_of_three(client)
    resp = _draw(client, "bob", group["id"])
    assert resp.status_code == 403
    assert not is_drawn(store, group["id"])


def test_draw_refused_below_three(client, store):
    group = _create(client, "alice")
    _join(client, "bob", group["code"])
    resp = _draw(client, "alice", group["id"])
    assert resp.status_code == 422
    assert set(assignment_of(store, group["id"]).values()) == {None}


def test_join_after_draw_blocked(client, store):
    group = _group_of_three(client)
    assert _draw(client, "alice", group["id"]).status_code == 200

    resp = _join(client, "dave", group["code"])

    assert resp.status_code == 409
    assert len(store.select("group_members", {"group_id": group["id"]})) == 3


def test_redraw_needs_confirmation(client, store):
    group = _group_of_three(client)
    assert _draw(client, "alice", group["id"]).status_code == 200

    assert _draw(client, "alice", group["id"]).status_code == 409
    resp = _draw(client, "alice", group["id"], confirm_redraw=True)
    assert resp.status_code == 200
    assert resp.json()["redraw"] is True
    assert None not in assignment_of(store, group["id"]).values()


def test_reveal_before_draw_and_for_outsider(client):
    group = _group_of_three(client)

    resp = client.get(f"/api/v1/groups/{group['id']}/assignment", headers=auth_headers("bob"))
    assert resp.json() == {"group_id": group["id"], "is_drawn": False, "assigned_name": None}

    resp = client.get(f"/api/v1/groups/{group['id']}/assignment", headers=auth_headers("mallory"))
    assert resp.status_code == 403


def test_store_failure_is_reported_generically(client, store):
    group = _group_of_three(client)
    store.fail_when = lambda op, table, filters, patch: op == "update" and table == "group_members"

    resp = _draw(client, "alice", group["id"])

    store.fail_when = None
    assert resp.status_code == 502
    assert resp.json() == {"detail": "Something went wrong, please try again"}
    assert not is_drawn(store, group["id"])
