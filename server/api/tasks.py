# server/api/tasks.py

from pydantic import BaseModel, Field
from fastapi import APIRouter, Depends, status

from api.auth import get_current_user
from api.deps import get_task_store
from core.domain import Principal, Task, TaskPatch
from core.policy import Action, Decision, enforce, visible_tasks
from core.tasks import TaskStore


router = APIRouter(prefix="/api/tasks", tags=["Tasks (Auth Required)"])


class CreateTaskRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None
    assigned_to: str | None = Field(default=None, alias="assignedTo")


class UpdateTaskRequest(BaseModel):
    # only the wire name ``assignedTo`` is accepted
    title: str | None = None
    description: str | None = None
    status: str | None = None
    assigned_to: str | None = Field(default=None, alias="assignedTo")

    def to_patch(self) -> TaskPatch:
        return TaskPatch(**self.model_dump(exclude_none=True))


class DeleteTaskResponse(BaseModel):
    success: bool
    message: str


# -------------------------------
# Task Endpoints
# -------------------------------

@router.get("", response_model=list[Task])
def list_tasks(
    principal: Principal = Depends(get_current_user),
    tasks: TaskStore = Depends(get_task_store),
):
    """
    Admins get every task; users only the tasks assigned to them.
    """
    return visible_tasks(principal, tasks.list())


@router.get("/{task_id}", response_model=Task)
def get_task(
    task_id: int,
    principal: Principal = Depends(get_current_user),
    tasks: TaskStore = Depends(get_task_store),
):
    task = tasks.get(task_id)
    enforce(Action.VIEW_TASK, principal, task)
    return task


@router.post("", status_code=status.HTTP_201_CREATED, response_model=Task)
def create_task(
    req: CreateTaskRequest,
    principal: Principal = Depends(get_current_user),
    tasks: TaskStore = Depends(get_task_store),
):
    """
    Admin only. ``status`` defaults to ``open``.
    """
    enforce(Action.CREATE_TASK, principal)
    return tasks.create(req.title, req.description, req.assigned_to, status=req.status)


@router.put("/{task_id}", response_model=Task)
def update_task(
    task_id: int,
    req: UpdateTaskRequest | None = None,
    principal: Principal = Depends(get_current_user),
    tasks: TaskStore = Depends(get_task_store),
):
    """
    Admins may change any field of any task. The assigned user may change
    everything except ``assignedTo``, which is silently ignored.
    """
    task = tasks.get(task_id)
    decision = enforce(Action.UPDATE_TASK, principal, task)
    patch = req.to_patch() if req else TaskPatch()
    if decision is Decision.ALLOW:
        return tasks.update(task_id, patch, allow_reassign=True)
    # re-checked when the write happens, in case of a reassignment meanwhile
    return tasks.update(task_id, patch, allow_reassign=False, owner=principal.username)


@router.delete("/{task_id}", response_model=DeleteTaskResponse)
def delete_task(
    task_id: int,
    principal: Principal = Depends(get_current_user),
    tasks: TaskStore = Depends(get_task_store),
):
    enforce(Action.DELETE_TASK, principal)
    tasks.delete(task_id)
    return {"success": True, "message": "Task deleted"}
