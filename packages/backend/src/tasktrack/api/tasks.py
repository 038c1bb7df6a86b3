"""Task API routes.

Learn: These routes translate HTTP to TaskService calls. The router is
mounted behind the auth gate, and every handler passes the caller's
user_id down, so the service can scope every read and write.

Key patterns:
- PUT is a partial update: only fields present in the body are merged
- POST /tasks/:id/status is the dedicated complete/reopen operation
- TaskNotFoundError → 404 for both "missing" and "not yours"
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from tasktrack.auth.dependencies import CurrentIdentity, get_current_user
from tasktrack.schemas.task import (
    Priority,
    StatusChange,
    TaskCreate,
    TaskRead,
    TaskResult,
    TaskStatus,
    TaskUpdate,
)
from tasktrack.services.task_service import TaskNotFoundError, TaskService
from tasktrack.store.base import CollectionStore
from tasktrack.store.providers import get_task_store

router = APIRouter()


def _task_svc(store: CollectionStore = Depends(get_task_store)) -> TaskService:
    return TaskService(store)


def _not_found(e: TaskNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(e))


@router.get("/tasks", response_model=list[TaskRead])
async def list_tasks(
    status: Optional[TaskStatus] = Query(None, description="Filter by status"),
    priority: Optional[Priority] = Query(None, description="Filter by priority"),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks."""
    return await svc.list_tasks(
        identity.user_id,
        status=status.value if status else None,
        priority=priority.value if priority else None,
    )


@router.post("/tasks", response_model=TaskResult, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the caller."""
    task = await svc.create_task(identity.user_id, body.model_dump(mode="json"))
    return TaskResult(message="Task saved", task=TaskRead.model_validate(task))


@router.get("/tasks/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    try:
        return await svc.get_task(identity.user_id, task_id)
    except TaskNotFoundError as e:
        raise _not_found(e)


@router.put("/tasks/{task_id}", response_model=TaskResult)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Merge the supplied fields over one of the caller's tasks."""
    changes = body.model_dump(mode="json", exclude_unset=True)
    try:
        task = await svc.update_task(identity.user_id, task_id, changes)
    except TaskNotFoundError as e:
        raise _not_found(e)
    return TaskResult(message="Task updated", task=TaskRead.model_validate(task))


@router.post("/tasks/{task_id}/status", response_model=TaskResult)
async def change_status(
    task_id: str,
    body: StatusChange,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Complete or reopen a task."""
    try:
        task = await svc.set_status(identity.user_id, task_id, body.status.value)
    except TaskNotFoundError as e:
        raise _not_found(e)
    return TaskResult(message="Task status updated", task=TaskRead.model_validate(task))


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    try:
        await svc.delete_task(identity.user_id, task_id)
    except TaskNotFoundError as e:
        raise _not_found(e)
    return {"message": "Task deleted"}
