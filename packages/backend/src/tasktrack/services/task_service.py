"""Task service — tenancy-filtered task CRUD.

Learn: Every operation takes the caller's user_id and matches records on
BOTH the task id and the owning user id. A task that exists but belongs to
someone else is treated exactly like a task that does not exist: same
TaskNotFoundError, same 404, same message. Callers can't probe for other
users' task ids.

Ownership (`userId`) and the server fields (`id`, `createdAt`) are stamped
here and can never be overwritten through create or update.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import structlog

from tasktrack.store.base import CollectionStore, Record

logger = structlog.get_logger()

# Fields the client can never set or overwrite
PROTECTED_FIELDS = frozenset({"id", "userId", "createdAt", "updatedAt"})

# Fields an update may not clear by sending null
REQUIRED_FIELDS = frozenset({"name", "priority", "status"})

# Text fields that null resets to their empty value
TEXT_FIELDS = {"description": "", "owner": ""}

DEFAULT_STATUS = "Pending"


class TaskNotFoundError(Exception):
    """Raised when no task matches both the id and the caller."""

    def __init__(self, task_id: str):
        super().__init__("Task not found or unauthorized")
        self.task_id = task_id


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class TaskService:
    """Business logic for a single user's tasks."""

    def __init__(self, store: CollectionStore):
        self.store = store

    # ─── Read ────────────────────────────────────────────

    async def list_tasks(
        self,
        user_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> list[Record]:
        """List the caller's tasks, oldest first, with optional filters."""

        def visible(task: Record) -> bool:
            if task.get("userId") != user_id:
                return False
            if status and task.get("status") != status:
                return False
            if priority and task.get("priority") != priority:
                return False
            return True

        tasks = await self.store.list(visible)
        tasks.sort(key=lambda t: t.get("createdAt") or "")
        return tasks

    async def get_task(self, user_id: str, task_id: str) -> Record:
        task = await self.store.get(task_id)
        if task is None or task.get("userId") != user_id:
            raise TaskNotFoundError(task_id)
        return task

    # ─── Create ──────────────────────────────────────────

    async def create_task(self, user_id: str, data: dict[str, Any]) -> Record:
        """Create a task owned by the caller.

        Learn: Any client-supplied id/userId/createdAt is discarded. The id
        is a server-generated UUID, so concurrent clients can't collide.
        """
        task = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        task.setdefault("status", DEFAULT_STATUS)
        now = _now()
        task.update(
            id=str(uuid.uuid4()),
            userId=user_id,
            createdAt=now,
            updatedAt=now,
        )
        await self.store.put(task)
        logger.info("tasks.created", task_id=task["id"], user_id=user_id)
        return task

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self, user_id: str, task_id: str, changes: dict[str, Any]
    ) -> Record:
        """Shallow-merge `changes` over the caller's task.

        Learn: The owner check and the merge run inside store.update(), so
        two edits to one task can't overwrite each other and an edit racing
        a delete can't bring the task back.
        """

        def merge(task: Record) -> Optional[Record]:
            if task.get("userId") != user_id:
                return None
            for key, value in changes.items():
                if key in PROTECTED_FIELDS:
                    continue
                if value is None:
                    if key in REQUIRED_FIELDS:
                        continue
                    value = TEXT_FIELDS.get(key)
                task[key] = value
            task["updatedAt"] = _now()
            return task

        task = await self.store.update(task_id, merge)
        if task is None:
            raise TaskNotFoundError(task_id)
        logger.info("tasks.updated", task_id=task_id, fields=sorted(changes))
        return task

    async def set_status(self, user_id: str, task_id: str, status: str) -> Record:
        """Mark a task Completed or move it back to Pending."""
        task = await self.update_task(user_id, task_id, {"status": status})
        logger.info("tasks.status_changed", task_id=task_id, status=status)
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, user_id: str, task_id: str) -> None:
        owned = await self.store.delete(task_id, lambda t: t.get("userId") == user_id)
        if not owned:
            raise TaskNotFoundError(task_id)
        logger.info("tasks.deleted", task_id=task_id, user_id=user_id)
