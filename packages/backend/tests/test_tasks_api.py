"""Task API tests — CRUD, status changes, and tenant isolation.

Learn: The most important property here is isolation. A token for user A
must never read, change or delete user B's task, even with B's exact task
id, and the response must look the same as for an id that doesn't exist.

Pattern: Build up test data using the API (register → login → tasks).
"""

import json

import pytest

from tasktrack.auth.jwt import create_access_token

TASK = {
    "name": "Write report",
    "description": "Quarterly numbers",
    "priority": "High",
    "deadline": "2099-01-01",
    "owner": "Ada",
}


async def _create(client, headers, **overrides) -> dict:
    r = await client.post("/api/tasks", json={**TASK, **overrides}, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()["task"]


# ═══════════════════════════════════════════════════════════
# End-to-end scenario
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_login_create_list(client):
    """register → login → create → list returns exactly that task."""
    r = await client.post(
        "/api/register",
        json={"name": "A", "lastName": "B", "email": "a@x.com", "password": "p1"},
    )
    assert r.status_code == 201

    r = await client.post("/api/login", json={"email": "a@x.com", "password": "p1"})
    assert r.status_code == 200
    headers = {"Authorization": f"Bearer {r.json()['token']}"}
    user_id = (await client.get("/api/me", headers=headers)).json()["id"]

    r = await client.post(
        "/api/tasks",
        json={"name": "t1", "priority": "High", "deadline": "2099-01-01", "owner": "A"},
        headers=headers,
    )
    assert r.status_code == 201
    assert r.json()["message"] == "Task saved"

    r = await client.get("/api/tasks", headers=headers)
    assert r.status_code == 200
    [task] = r.json()
    assert task["name"] == "t1"
    assert task["priority"] == "High"
    assert task["deadline"] == "2099-01-01"
    assert task["owner"] == "A"
    assert task["status"] == "Pending"
    assert task["userId"] == user_id
    assert task["createdAt"]


# ═══════════════════════════════════════════════════════════
# Create
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_create_task_round_trip(client, login):
    """All submitted fields survive, plus server-assigned ones."""
    user_id, headers = await login()
    task = await _create(client, headers)

    r = await client.get(f"/api/tasks/{task['id']}", headers=headers)
    assert r.status_code == 200
    stored = r.json()
    for key, value in TASK.items():
        assert stored[key] == value
    assert stored["userId"] == user_id
    assert stored["status"] == "Pending"
    assert stored["createdAt"] == task["createdAt"]


@pytest.mark.asyncio
async def test_create_ignores_client_id_and_owner_identity(client, login):
    """Client-supplied id/userId/createdAt are discarded."""
    user_id, headers = await login()
    task = await _create(
        client, headers,
        id="chosen-by-client", userId="someone-else", createdAt="1999-01-01T00:00:00",
    )
    assert task["id"] != "chosen-by-client"
    assert task["userId"] == user_id
    assert not task["createdAt"].startswith("1999")


@pytest.mark.asyncio
async def test_create_generates_unique_ids(client, login):
    _, headers = await login()
    ids = {(await _create(client, headers, name=f"t{i}"))["id"] for i in range(5)}
    assert len(ids) == 5


@pytest.mark.asyncio
async def test_create_defaults(client, login):
    """Only the name is required."""
    _, headers = await login()
    r = await client.post("/api/tasks", json={"name": "bare"}, headers=headers)
    assert r.status_code == 201
    task = r.json()["task"]
    assert task["priority"] == "Medium"
    assert task["status"] == "Pending"
    assert task["description"] == ""
    assert task["deadline"] is None


@pytest.mark.asyncio
async def test_create_missing_name(client, login):
    _, headers = await login()
    r = await client.post("/api/tasks", json={"priority": "Low"}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"] == "Missing fields: name"


@pytest.mark.asyncio
async def test_create_invalid_priority(client, login):
    _, headers = await login()
    r = await client.post("/api/tasks", json={"name": "x", "priority": "Urgent"}, headers=headers)
    assert r.status_code == 400
    assert "priority" in r.json()["message"]


# ═══════════════════════════════════════════════════════════
# List
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_only_own_tasks(client, login):
    _, alice = await login("Alice")
    _, bob = await login("Bob")
    await _create(client, alice, name="alice-1")
    await _create(client, alice, name="alice-2")
    await _create(client, bob, name="bob-1")

    r = await client.get("/api/tasks", headers=alice)
    assert [t["name"] for t in r.json()] == ["alice-1", "alice-2"]

    r = await client.get("/api/tasks", headers=bob)
    assert [t["name"] for t in r.json()] == ["bob-1"]


@pytest.mark.asyncio
async def test_list_empty_for_new_user(client, login):
    _, headers = await login()
    r = await client.get("/api/tasks", headers=headers)
    assert r.status_code == 200
    assert r.json() == []


@pytest.mark.asyncio
async def test_list_filters(client, login):
    _, headers = await login()
    high = await _create(client, headers, name="h", priority="High")
    await _create(client, headers, name="l", priority="Low")
    await client.post(
        f"/api/tasks/{high['id']}/status", json={"status": "Completed"}, headers=headers
    )

    r = await client.get("/api/tasks", params={"priority": "Low"}, headers=headers)
    assert [t["name"] for t in r.json()] == ["l"]

    r = await client.get("/api/tasks", params={"status": "Completed"}, headers=headers)
    assert [t["name"] for t in r.json()] == ["h"]


# ═══════════════════════════════════════════════════════════
# Update and status
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_partial_merge(client, login):
    """PUT only touches the fields it carries."""
    _, headers = await login()
    task = await _create(client, headers)

    r = await client.put(
        f"/api/tasks/{task['id']}", json={"priority": "Low"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["message"] == "Task updated"
    updated = r.json()["task"]
    assert updated["priority"] == "Low"
    assert updated["name"] == TASK["name"]
    assert updated["description"] == TASK["description"]
    assert updated["updatedAt"] >= task["updatedAt"]


@pytest.mark.asyncio
async def test_update_cannot_change_owner_or_id(client, login):
    user_id, headers = await login()
    task = await _create(client, headers)

    r = await client.put(
        f"/api/tasks/{task['id']}",
        json={"userId": "attacker", "id": "new-id", "name": "renamed"},
        headers=headers,
    )
    assert r.status_code == 200
    updated = r.json()["task"]
    assert updated["userId"] == user_id
    assert updated["id"] == task["id"]
    assert updated["name"] == "renamed"


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["description", "owner"])
async def test_update_null_text_field_clears_it(client, login, field):
    """null on a text field empties it and the task stays readable."""
    _, headers = await login()
    task = await _create(client, headers)

    r = await client.put(f"/api/tasks/{task['id']}", json={field: None}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["task"][field] == ""

    r = await client.get("/api/tasks", headers=headers)
    assert r.status_code == 200
    assert r.json()[0][field] == ""

    r = await client.get(f"/api/tasks/{task['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()[field] == ""


@pytest.mark.asyncio
async def test_update_null_required_field_is_ignored(client, login):
    _, headers = await login()
    task = await _create(client, headers)

    r = await client.put(
        f"/api/tasks/{task['id']}",
        json={"name": None, "priority": None, "status": None},
        headers=headers,
    )
    assert r.status_code == 200
    updated = r.json()["task"]
    assert updated["name"] == TASK["name"]
    assert updated["priority"] == TASK["priority"]
    assert updated["status"] == "Pending"


@pytest.mark.asyncio
async def test_stored_null_text_fields_still_list(client, login, stores):
    """Tasks saved with null description/owner by older versions still load."""
    _, headers = await login()
    task = await _create(client, headers)
    _, tasks = stores
    rows = json.loads(tasks.path.read_text())
    rows[0].update(description=None, owner=None)
    tasks.path.write_text(json.dumps(rows))

    r = await client.get("/api/tasks", headers=headers)
    assert r.status_code == 200
    assert r.json()[0]["id"] == task["id"]
    assert r.json()[0]["description"] == ""
    assert r.json()[0]["owner"] == ""


@pytest.mark.asyncio
async def test_status_complete_and_reopen(client, login):
    _, headers = await login()
    task = await _create(client, headers)

    r = await client.post(
        f"/api/tasks/{task['id']}/status", json={"status": "Completed"}, headers=headers
    )
    assert r.status_code == 200
    assert r.json()["task"]["status"] == "Completed"

    r = await client.post(
        f"/api/tasks/{task['id']}/status", json={"status": "Pending"}, headers=headers
    )
    assert r.json()["task"]["status"] == "Pending"


@pytest.mark.asyncio
async def test_status_rejects_unknown_value(client, login):
    _, headers = await login()
    task = await _create(client, headers)
    r = await client.post(
        f"/api/tasks/{task['id']}/status", json={"status": "Archived"}, headers=headers
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_update_nonexistent_task(client, login):
    _, headers = await login()
    r = await client.put("/api/tasks/does-not-exist", json={"name": "x"}, headers=headers)
    assert r.status_code == 404
    assert r.json()["message"] == "Task not found or unauthorized"


# ═══════════════════════════════════════════════════════════
# Delete
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_delete_task(client, login):
    _, headers = await login()
    task = await _create(client, headers)

    r = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Task deleted"}

    r = await client.get("/api/tasks", headers=headers)
    assert r.json() == []

    r = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
    assert r.status_code == 404


# ═══════════════════════════════════════════════════════════
# Tenant isolation
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_cross_user_access_looks_like_not_found(client, login, stores):
    """Bob knows Alice's task id and still can't touch it."""
    _, tasks_store = stores
    _, alice = await login("Alice")
    _, bob = await login("Bob")
    task = await _create(client, alice)
    before = tasks_store.path.read_text()

    missing = await client.delete("/api/tasks/no-such-task", headers=bob)

    responses = [
        await client.get(f"/api/tasks/{task['id']}", headers=bob),
        await client.put(f"/api/tasks/{task['id']}", json={"name": "pwned"}, headers=bob),
        await client.post(
            f"/api/tasks/{task['id']}/status", json={"status": "Completed"}, headers=bob
        ),
        await client.delete(f"/api/tasks/{task['id']}", headers=bob),
    ]
    for r in responses:
        assert r.status_code == 404
        assert r.json() == missing.json()

    # Alice's task is untouched on disk
    assert tasks_store.path.read_text() == before
    [stored] = json.loads(before)
    assert stored["name"] == TASK["name"]
    assert stored["status"] == "Pending"


# ═══════════════════════════════════════════════════════════
# Auth gate on every task route
# ═══════════════════════════════════════════════════════════

ROUTES = [
    ("GET", "/api/tasks", None),
    ("POST", "/api/tasks", TASK),
    ("GET", "/api/tasks/some-id", None),
    ("PUT", "/api/tasks/some-id", {"name": "x"}),
    ("POST", "/api/tasks/some-id/status", {"status": "Completed"}),
    ("DELETE", "/api/tasks/some-id", None),
]


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path,body", ROUTES)
async def test_task_routes_require_token(client, method, path, body):
    r = await client.request(method, path, json=body)
    assert r.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path,body", ROUTES)
async def test_task_routes_reject_expired_token(client, login, method, path, body):
    user_id, _ = await login()
    token = create_access_token(user_id, "Test", expires_minutes=-1)
    r = await client.request(
        method, path, json=body, headers={"Authorization": f"Bearer {token}"}
    )
    assert r.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path,body", ROUTES)
async def test_task_routes_reject_tampered_token(client, login, method, path, body):
    _, headers = await login()
    token = headers["Authorization"].split(" ", 1)[1]
    header, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]
    r = await client.request(
        method, path, json=body,
        headers={"Authorization": f"Bearer {header}.{payload}.{flipped}"},
    )
    assert r.status_code == 403
