"""
Project and Task Permission Rules

Pure decision functions over entity snapshots. Each rule receives the acting
user id and the current Project / Task objects, and either returns the
validated changes to apply or raises one of the errors in app.core.exceptions.
Nothing here touches the database: services load the snapshots, call a rule,
and persist what it returns.

Role resolution goes exclusively through is_owner / is_manager / is_member:
- the owner is always a manager, even when not listed in project.members
- every manager is a member
"""
import math
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from app.core.exceptions import (
    AccessDenied,
    AlreadyMember,
    CannotRemoveOwner,
    InvalidAssignee,
    NotFound,
    UnauthorizedFields,
    ValidationFailed,
)
from app.models.project import MemberRole, Project, ProjectStatus
from app.models.task import Task, TaskPriority, TaskStatus

# Fields of a project that managers may change after creation
PROJECT_UPDATABLE_FIELDS = frozenset({"name", "description", "status", "end_date"})

# Fields of a task a manager may change
MANAGER_TASK_FIELDS = frozenset({
    "title", "description", "status", "priority", "due_date",
    "assignee_id", "estimated_hours", "actual_hours",
})

# Fields of a task an assignee or reporter without manager rights may change
NON_MANAGER_TASK_FIELDS = frozenset({"status", "actual_hours", "description"})

PROJECT_STATUSES = [s.value for s in ProjectStatus]
TASK_STATUSES = [s.value for s in TaskStatus]
TASK_PRIORITIES = [p.value for p in TaskPriority]
MEMBER_ROLES = [r.value for r in MemberRole]


# ---------------------------------------------------------------------------
# Membership & role resolution
# ---------------------------------------------------------------------------

def _member_entry(project: Project, user_id: str):
    for member in project.members:
        if member.user_id == user_id:
            return member
    return None


def is_owner(project: Project, user_id: Optional[str]) -> bool:
    return user_id is not None and project.owner_id == user_id


def is_manager(project: Project, user_id: Optional[str]) -> bool:
    if is_owner(project, user_id):
        return True
    member = _member_entry(project, user_id)
    return member is not None and member.role == MemberRole.MANAGER.value


def is_member(project: Project, user_id: Optional[str]) -> bool:
    return is_owner(project, user_id) or _member_entry(project, user_id) is not None


def require_member(project: Project, user_id: str) -> None:
    if not is_member(project, user_id):
        raise AccessDenied("not_member", "Access denied. You are not a member of this project.")


def require_manager(project: Project, user_id: str) -> None:
    if not is_manager(project, user_id):
        raise AccessDenied("not_manager", "Access denied. Only project managers can do this.")


def require_owner(project: Project, user_id: str) -> None:
    if not is_owner(project, user_id):
        raise AccessDenied("not_owner", "Access denied. Only the project owner can do this.")


# ---------------------------------------------------------------------------
# Value validation
# ---------------------------------------------------------------------------

def _check_choice(field: str, value: Any, allowed: list) -> str:
    if value not in allowed:
        raise ValidationFailed(f"Invalid {field} value", field=field, allowed_values=allowed)
    return value


def _check_text(field: str, value: Any, required: bool = False) -> Optional[str]:
    if value is None and not required:
        return None
    if required and (value is None or (isinstance(value, str) and not value.strip())):
        raise ValidationFailed(f"{field} is required", field=field)
    if not isinstance(value, str):
        raise ValidationFailed(f"{field} must be text", field=field)
    return value


def _check_date(field: str, value: Any, required: bool = False) -> Optional[date]:
    if value is None or value == "":
        if required:
            raise ValidationFailed(f"{field} is required", field=field)
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    try:
        # A bare date, or a full ISO datetime reduced to its day
        if len(text) == 10:
            return date.fromisoformat(text)
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationFailed(f"Invalid {field} value, expected YYYY-MM-DD", field=field)


def _check_hours(field: str, value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailed(f"{field} must be a number", field=field)
    if not math.isfinite(value):
        raise ValidationFailed(f"{field} must be a finite number", field=field)
    if value < 0:
        raise ValidationFailed(f"{field} must not be negative", field=field)
    return float(value)


def check_assignee(project: Project, assignee_id: Optional[str]) -> Optional[str]:
    """Empty values unassign; anything else must name a member or the owner."""
    if not assignee_id:
        return None
    if not is_member(project, assignee_id):
        raise InvalidAssignee(assignee_id=assignee_id)
    return assignee_id


# ---------------------------------------------------------------------------
# Project rules
# ---------------------------------------------------------------------------

def validate_project_create(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "name": _check_text("name", data.get("name"), required=True),
        "description": _check_text("description", data.get("description")),
        "status": _check_choice("status", data.get("status") or ProjectStatus.PLANNING.value,
                                PROJECT_STATUSES),
        "start_date": _check_date("start_date", data.get("start_date")) or date.today(),
        "end_date": _check_date("end_date", data.get("end_date"), required=True),
    }


def validate_project_update(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check the field set and values of a project update.

    Runs before any role check: a request naming a field outside
    PROJECT_UPDATABLE_FIELDS is invalid whoever sends it.
    """
    invalid = set(changes) - PROJECT_UPDATABLE_FIELDS
    if invalid:
        raise ValidationFailed(
            "Invalid updates",
            fields=sorted(invalid),
            allowed_fields=sorted(PROJECT_UPDATABLE_FIELDS),
        )

    validated: Dict[str, Any] = {}
    for field, value in changes.items():
        if field == "name":
            validated[field] = _check_text(field, value, required=True)
        elif field == "description":
            validated[field] = _check_text(field, value)
        elif field == "status":
            validated[field] = _check_choice(field, value, PROJECT_STATUSES)
        elif field == "end_date":
            validated[field] = _check_date(field, value, required=True)
    return validated


def can_read_project(project: Project, user_id: str, has_task_in_project: bool) -> bool:
    return is_member(project, user_id) or has_task_in_project


def authorize_project_read(project: Project, user_id: str, has_task_in_project: bool) -> None:
    if not can_read_project(project, user_id, has_task_in_project):
        raise AccessDenied(
            "not_member",
            "Access denied. You must be a project member or have assigned tasks to view this project.",
        )


def validate_member_role(role: Optional[str]) -> str:
    return _check_choice("role", role or MemberRole.MEMBER.value, MEMBER_ROLES)


def authorize_add_member(project: Project, user_id: str, target_id: str,
                         role: Optional[str] = None) -> str:
    """Return the role the new member gets."""
    require_manager(project, user_id)
    role = validate_member_role(role)
    if is_member(project, target_id):
        raise AlreadyMember(user_id=target_id)
    return role


def authorize_remove_member(project: Project, user_id: str, target_id: str) -> None:
    # The owner can never be removed, not even by themselves
    if is_owner(project, target_id):
        raise CannotRemoveOwner(user_id=target_id)
    require_manager(project, user_id)
    if _member_entry(project, target_id) is None:
        raise NotFound("User is not a member of this project", user_id=target_id)


def authorize_project_delete(project: Project, user_id: str) -> None:
    require_owner(project, user_id)


# ---------------------------------------------------------------------------
# Task rules
# ---------------------------------------------------------------------------

def authorize_task_create(project: Project, user_id: str, data: Mapping[str, Any]) -> Dict[str, Any]:
    """Validate a new task and return the fields to store (reporter and status included)."""
    require_member(project, user_id)
    priority = data.get("priority") or TaskPriority.MEDIUM.value
    return {
        "title": _check_text("title", data.get("title"), required=True),
        "description": _check_text("description", data.get("description")),
        "project_id": project.id,
        "assignee_id": check_assignee(project, data.get("assignee_id")),
        "reporter_id": user_id,
        "status": TaskStatus.TODO.value,
        "priority": _check_choice("priority", priority, TASK_PRIORITIES),
        "due_date": _check_date("due_date", data.get("due_date")),
        "estimated_hours": _check_hours("estimated_hours", data.get("estimated_hours")),
    }


def is_assignee(task: Task, user_id: str) -> bool:
    return task.assignee_id is not None and task.assignee_id == user_id


def is_reporter(task: Task, user_id: str) -> bool:
    return task.reporter_id == user_id


def authorize_task_read(task: Task, user_id: str) -> None:
    if not (is_assignee(task, user_id) or is_reporter(task, user_id)):
        raise AccessDenied(
            "not_assignee_or_reporter",
            "Access denied. You can only view tasks assigned to you or created by you.",
        )


def authorize_task_update(project: Project, task: Task, user_id: str,
                          changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Decide a task update and return the validated changes.

    Managers may change every field in MANAGER_TASK_FIELDS; the assignee and
    reporter, when not managers, only NON_MANAGER_TASK_FIELDS. Every check
    runs before the caller writes anything, so a rejected update leaves the
    task untouched.
    """
    manager = is_manager(project, user_id)
    if not (manager or is_assignee(task, user_id) or is_reporter(task, user_id)):
        raise AccessDenied(
            "not_assignee_reporter_or_manager",
            "Access denied. Only project managers, task assignees, or task creators can update tasks.",
        )

    fields = set(changes)
    if not manager:
        unauthorized = fields - NON_MANAGER_TASK_FIELDS
        if unauthorized:
            raise UnauthorizedFields(unauthorized, NON_MANAGER_TASK_FIELDS)
    else:
        invalid = fields - MANAGER_TASK_FIELDS
        if invalid:
            raise ValidationFailed(
                "Invalid updates",
                fields=sorted(invalid),
                allowed_fields=sorted(MANAGER_TASK_FIELDS),
            )

    validated: Dict[str, Any] = {}
    for field, value in changes.items():
        if field == "status":
            validated[field] = _check_choice(field, value, TASK_STATUSES)
        elif field == "priority":
            validated[field] = _check_choice(field, value, TASK_PRIORITIES)
        elif field == "title":
            validated[field] = _check_text(field, value, required=True)
        elif field == "description":
            validated[field] = _check_text(field, value)
        elif field == "due_date":
            validated[field] = _check_date(field, value)
        elif field in ("estimated_hours", "actual_hours"):
            validated[field] = _check_hours(field, value)
        elif field == "assignee_id":
            validated[field] = check_assignee(project, value)
    return validated


def authorize_task_delete(task: Task, user_id: str) -> None:
    # Reporter only: neither managers nor the project owner may delete
    if not is_reporter(task, user_id):
        raise AccessDenied("not_reporter", "Access denied. Only the task creator can delete it.")


def authorize_task_contribution(project: Project, user_id: str) -> None:
    """Comments and attachments are open to every project member."""
    require_member(project, user_id)


def validate_comment(content: Any) -> str:
    return _check_text("content", content, required=True)
