"""Test fixtures — isolated JSON stores per test.

Learn: Testing pattern for FastAPI + file-backed stores:

1. Env vars are set BEFORE tasktrack is imported: the settings singleton
   needs a signing secret, and bcrypt uses the minimum cost factor so
   the suite stays fast.
2. Each test gets fresh JsonFileStores under pytest's tmp_path, swapped
   in through app.dependency_overrides, so nothing leaks between tests.
3. The `client` fixture runs the REAL auth pipeline. Use the `login`
   fixture to register a user and get ready-made Authorization headers.
"""

import os
import tempfile
import uuid

os.environ.setdefault("TASKTRACK_JWT_SECRET", "test-secret-for-the-suite-only")
os.environ.setdefault("TASKTRACK_BCRYPT_ROUNDS", "4")
os.environ.setdefault("TASKTRACK_DATA_DIR", tempfile.mkdtemp(prefix="tasktrack-test-"))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from tasktrack.main import app  # noqa: E402
from tasktrack.store.json_file import JsonFileStore  # noqa: E402
from tasktrack.store.providers import get_task_store, get_user_store  # noqa: E402


@pytest.fixture()
def stores(tmp_path):
    """Fresh users/tasks stores in a temp dir, wired into the app."""
    users = JsonFileStore(tmp_path / "users.json", name="users")
    tasks = JsonFileStore(tmp_path / "tasks.json", name="tasks")

    app.dependency_overrides[get_user_store] = lambda: users
    app.dependency_overrides[get_task_store] = lambda: tasks
    yield users, tasks
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(stores):
    """HTTP client against the app with per-test stores."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def login(client):
    """Register + log in a fresh user; returns (user_id, headers).

    Learn: Async factory fixture. Each call creates a new account with a
    unique email, logs in through the API, and resolves the user id via
    /api/me.
    """

    async def _login(name: str = "Test", password: str = "password_123"):
        email = f"{name.lower()}-{uuid.uuid4().hex[:8]}@example.com"
        r = await client.post(
            "/api/register",
            json={"name": name, "lastName": "User", "email": email, "password": password},
        )
        assert r.status_code == 201, r.text
        r = await client.post("/api/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        headers = {"Authorization": f"Bearer {r.json()['token']}"}
        me = await client.get("/api/me", headers=headers)
        return me.json()["id"], headers

    return _login
