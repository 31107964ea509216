"""
Project Endpoints Module

This module provides endpoints for managing projects and their members.
Access is relationship based: the owner and managers administer a project,
members work in it, and users with a task in it may read it. Rejected
requests raise the errors from app.core.exceptions, mapped to HTTP
responses in app.main.
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlmodel import Session
from app.db.session import get_db
from app.models.project import ProjectReadWithMembers
from app.models.task import TaskRead
from app.models.user import User
from app.schemas.project import MemberCreate, ProjectCreate, TaskStats
from app.services import projects as project_service
from app.services import tasks as task_service
from app.api import deps

router = APIRouter()


@router.get("", response_model=List[ProjectReadWithMembers])
def list_projects(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Retrieve the projects visible to the current user.

    A project is listed once if the user owns it, is a member of it, or is
    assignee or reporter of at least one of its tasks.

    Args:
        skip: Number of records to skip (for pagination)
        limit: Maximum number of records to return
        db: Database session
        current_user: Currently authenticated user

    Returns:
        List[ProjectReadWithMembers]: List of project objects with their members
    """
    return project_service.list_projects(db, current_user, skip=skip, limit=limit)


@router.get("/{project_id}", response_model=ProjectReadWithMembers)
def read_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Get a specific project by ID.

    Raises:
        NotFound (404): If the project doesn't exist
        AccessDenied (403): If the user is neither member nor involved in one of its tasks
    """
    return project_service.read_project(db, current_user, project_id)


@router.post("", response_model=ProjectReadWithMembers, status_code=201)
def create_project(
    project_in: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Create a new project owned by the current user.

    Optional initial members are added with the "Member" role unless another
    role is given. An end_date is required.
    """
    return project_service.create_project(db, current_user, project_in)


@router.patch("/{project_id}", response_model=ProjectReadWithMembers)
def update_project(
    project_id: int,
    project_update: dict,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Update name, description, status or end_date of a project.

    Any other field makes the whole request invalid. Only managers (the
    owner included) may update a project.
    """
    return project_service.update_project(db, current_user, project_id, project_update)


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Delete a project together with all of its tasks.

    Only the project owner may delete it.
    """
    project_service.delete_project(db, current_user, project_id)
    return {"status": "success", "detail": "Project deleted"}


@router.post("/{project_id}/members", response_model=ProjectReadWithMembers)
def add_member(
    project_id: int,
    member_in: MemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Add a user to the project (managers only)."""
    return project_service.add_member(db, current_user, project_id, member_in)


@router.delete("/{project_id}/members/{user_id}", response_model=ProjectReadWithMembers)
def remove_member(
    project_id: int,
    user_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Remove a member from the project (managers only, never the owner)."""
    return project_service.remove_member(db, current_user, project_id, user_id)


@router.get("/{project_id}/stats", response_model=TaskStats)
def project_stats(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Task counts by status and priority over the whole project (members only)."""
    return project_service.project_stats(db, current_user, project_id)


@router.get("/{project_id}/tasks", response_model=List[TaskRead])
def list_project_tasks(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """
    Tasks of the project that the current user is assignee or reporter of.

    Project membership is required; other members' tasks are never listed.
    """
    return task_service.list_project_tasks(db, current_user, project_id)


@router.get("/{project_id}/tasks/stats", response_model=TaskStats)
def project_task_stats(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(deps.get_current_active_user),
):
    """Statistics over the current user's own tasks in the project, with hour totals."""
    return task_service.task_stats(db, current_user, project_id)
