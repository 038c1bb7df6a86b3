"""Process-wide store instances and their FastAPI dependencies.

Learn: One store object per collection for the whole process, so the
per-store write lock actually serializes every request. Routes receive
them through Depends(get_user_store) / Depends(get_task_store), which
tests override with stores in a temp directory.
"""

from tasktrack.config import settings
from tasktrack.store.base import CollectionStore
from tasktrack.store.json_file import JsonFileStore

user_store = JsonFileStore(settings.users_path, name="users")
task_store = JsonFileStore(settings.tasks_path, name="tasks")


def get_user_store() -> CollectionStore:
    """FastAPI dependency — the users collection."""
    return user_store


def get_task_store() -> CollectionStore:
    """FastAPI dependency — the tasks collection."""
    return task_store
