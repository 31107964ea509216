"""
Task Endpoints Module

This module provides endpoints for managing tasks, their comments and their
attachments. Who may do what is decided by app.core.permissions:
- any project member may create tasks, comment and attach files
- only the assignee or reporter may read a task
- managers may change every task field; assignee and reporter only
  status, actual_hours and description
- only the reporter may delete a task
"""
from typing import List
from fastapi import APIRouter, Depends, File, UploadFile
from sqlmodel import Session
from app.db.session import get_db
from app.models.task import TaskRead, TaskReadWithDetails
from app.models.user import User
from app.schemas.task import CommentCreate, TaskCreate
from app.services import tasks as task_service
from app.api import deps

router = APIRouter()


@router.post("", response_model=TaskReadWithDetails, status_code=201)
def create_task(
    task_in: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Create a new task in a project.

    The current user becomes the reporter and the task starts as "To-Do".
    An assignee, if given, must be a member of the project.

    Args:
        task_in: Task fields, including the target project_id
        db: Database session
        current_user: Currently authenticated user

    Returns:
        TaskReadWithDetails: The newly created task
    """
    return task_service.create_task(db, current_user, task_in)


@router.get("/me", response_model=List[TaskRead])
def list_my_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Tasks assigned to the current user, ordered by due date."""
    return task_service.list_my_tasks(db, current_user)


@router.get("/{task_id}", response_model=TaskReadWithDetails)
def read_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Get a specific task by ID.

    Only the task's assignee and reporter may view it.
    """
    return task_service.read_task(db, current_user, task_id)


@router.patch("/{task_id}", response_model=TaskReadWithDetails)
def update_task(
    task_id: int,
    task_update: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Update an existing task.

    The request is applied completely or not at all. A non-manager sending a
    field other than status, actual_hours or description gets a 403 listing
    the offending and the allowed fields.
    """
    return task_service.update_task(db, current_user, task_id, task_update)


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Delete a task, its comments and its attachments.

    Only the reporter may delete a task.
    """
    task_service.delete_task(db, current_user, task_id)
    return {"status": "success", "detail": "Task deleted"}


@router.post("/{task_id}/comments", response_model=TaskReadWithDetails)
def add_comment(
    task_id: int,
    comment_in: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Append a comment to a task (project members only)."""
    return task_service.add_comment(db, current_user, task_id, comment_in.content)


@router.post("/{task_id}/attachments", response_model=TaskReadWithDetails)
def add_attachment(
    task_id: int,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Upload a file and attach it to a task (project members only)."""
    return task_service.add_attachment(db, current_user, task_id, file)
