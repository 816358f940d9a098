# server/core/policy.py

"""Who may do what with tasks and users.

``decide`` is a pure function of (action, principal, task). Admins are
allowed everything; users only ever touch tasks assigned to them, and may
not reassign those.
"""

import logging
from enum import Enum
from typing import Iterable

from core.domain import Principal, Role, Task
from core.errors import Forbidden


logger = logging.getLogger(__name__)


class Action(str, Enum):
    VIEW_TASK = "view_task"
    LIST_TASKS = "list_tasks"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    LIST_USERS = "list_users"


class Decision(Enum):
    ALLOW = "allow"
    DENY = "deny"
    # allowed, but only own rows (listing) or without reassignment (update)
    RESTRICT = "restrict"


_DENIAL_MESSAGES = {
    Action.VIEW_TASK: "Not allowed to view this task",
    Action.UPDATE_TASK: "Not allowed to update this task",
}
ADMIN_ONLY_MESSAGE = "Requires admin role"

_TASK_ACTIONS = (Action.VIEW_TASK, Action.UPDATE_TASK)


def decide(action: Action, principal: Principal, task: Task | None = None) -> Decision:
    if action in _TASK_ACTIONS and task is None:
        raise ValueError(f"{action.value} needs the task being accessed")

    if principal.role is Role.ADMIN:
        return Decision.ALLOW
    if principal.role is Role.USER:
        return _decide_for_user(action, principal.username, task)
    raise ValueError(f"Unhandled role: {principal.role!r}")


def _decide_for_user(action: Action, username: str, task: Task | None) -> Decision:
    if action is Action.LIST_TASKS:
        return Decision.RESTRICT
    if action is Action.VIEW_TASK:
        return Decision.ALLOW if task.assigned_to == username else Decision.DENY
    if action is Action.UPDATE_TASK:
        return Decision.RESTRICT if task.assigned_to == username else Decision.DENY
    if action in (Action.CREATE_TASK, Action.DELETE_TASK, Action.LIST_USERS):
        return Decision.DENY
    raise ValueError(f"Unhandled action: {action!r}")


def enforce(action: Action, principal: Principal, task: Task | None = None) -> Decision:
    """Like ``decide`` but raises Forbidden on DENY."""
    decision = decide(action, principal, task)
    if decision is Decision.DENY:
        logger.debug("Denied %s to %s (%s)", action.value, principal.username, principal.role.value)
        raise Forbidden(_DENIAL_MESSAGES.get(action, ADMIN_ONLY_MESSAGE))
    return decision


def visible_tasks(principal: Principal, tasks: Iterable[Task]) -> list[Task]:
    if enforce(Action.LIST_TASKS, principal) is Decision.ALLOW:
        return list(tasks)
    return [t for t in tasks if t.assigned_to == principal.username]
