"""
Authorization guard.

Maps each project action to the minimum role allowed to perform it. Every
service checks permissions through :func:`ensure_allowed` instead of
comparing roles inline.
"""

from __future__ import annotations

import enum

from app.core.exceptions import ForbiddenError
from app.models.member import ProjectRole


class Action(str, enum.Enum):
    view_project = "view_project"
    update_project = "update_project"
    create_task = "create_task"
    edit_task = "edit_task"
    edit_any_task = "edit_any_task"
    assign_task = "assign_task"
    unassign_task = "unassign_task"
    delete_task = "delete_task"
    manage_dependencies = "manage_dependencies"
    manage_tags = "manage_tags"
    manage_members = "manage_members"
    change_roles = "change_roles"


MINIMUM_ROLE: dict[Action, ProjectRole] = {
    Action.view_project: ProjectRole.member,
    Action.update_project: ProjectRole.admin,
    Action.create_task: ProjectRole.member,
    # edit_task: assignees may edit their own task; see edit_any_task.
    Action.edit_task: ProjectRole.member,
    Action.edit_any_task: ProjectRole.admin,
    Action.assign_task: ProjectRole.member,
    # Weaker than it looks: any member may clear any assignment.
    Action.unassign_task: ProjectRole.member,
    Action.delete_task: ProjectRole.member,
    Action.manage_dependencies: ProjectRole.member,
    Action.manage_tags: ProjectRole.member,
    Action.manage_members: ProjectRole.admin,
    Action.change_roles: ProjectRole.owner,
}

_DENIED_MESSAGES: dict[Action, str] = {
    Action.update_project: "Only project owners and admins can update the project",
    Action.edit_any_task: "Only the assigned user or project admins can update this task",
    Action.manage_members: "Only project owners and admins can manage members",
    Action.change_roles: "Only the project owner can perform this action",
}


def is_allowed(role: ProjectRole | None, action: Action) -> bool:
    """Pure predicate: does ``role`` (None for non-members) permit ``action``?"""
    if role is None:
        return False
    return role.at_least(MINIMUM_ROLE[action])


def ensure_allowed(role: ProjectRole | None, action: Action) -> None:
    """Raise ForbiddenError unless ``role`` permits ``action``."""
    if role is None:
        raise ForbiddenError("NOT_A_MEMBER", "You are not a member of this project")
    if not is_allowed(role, action):
        raise ForbiddenError(
            "INSUFFICIENT_ROLE",
            _DENIED_MESSAGES.get(
                action, f"Required role: {MINIMUM_ROLE[action].value} or above"
            ),
        )


def can_edit_task(role: ProjectRole | None, is_assignee: bool) -> bool:
    """Task edits need membership plus either assignment or admin rank."""
    if not is_allowed(role, Action.edit_task):
        return False
    return is_assignee or is_allowed(role, Action.edit_any_task)
