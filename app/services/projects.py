"""
Project Lifecycle Service

Loads project snapshots from the database, runs the rules from
app.core.permissions and persists the outcome, including the cascading
delete of a project's tasks.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from sqlmodel import Session, select, or_

from app.core import permissions
from app.core.exceptions import NotFound
from app.core.stats import task_statistics
from app.models.project import Project, ProjectMember
from app.models.task import Task
from app.models.user import User
from app.schemas.project import MemberCreate, ProjectCreate
from app.services.storage import delete_stored_file

logger = logging.getLogger(__name__)


def get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if not project:
        raise NotFound("Project not found", project_id=project_id)
    return project


def get_user_or_404(db: Session, user_id: str) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found", user_id=user_id)
    return user


def has_task_in_project(db: Session, project_id: int, user_id: str) -> bool:
    statement = select(Task.id).where(
        Task.project_id == project_id,
        or_(Task.assignee_id == user_id, Task.reporter_id == user_id),
    )
    return db.exec(statement).first() is not None


def create_project(db: Session, current_user: User, project_in: ProjectCreate) -> Project:
    data = permissions.validate_project_create(project_in.model_dump())
    project = Project(**data, owner_id=current_user.id)

    # Initial members default to the Member role; the owner and repeats are skipped
    seen = {current_user.id}
    for member_in in project_in.members:
        if member_in.user_id in seen:
            continue
        role = permissions.validate_member_role(member_in.role)
        get_user_or_404(db, member_in.user_id)
        project.members.append(ProjectMember(user_id=member_in.user_id, role=role))
        seen.add(member_in.user_id)

    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("User %s created project %s", current_user.id, project.id)
    return project


def list_projects(db: Session, current_user: User, skip: int = 0, limit: int = 100) -> List[Project]:
    """Projects the user owns, belongs to, or has a task in (each listed once)."""
    member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == current_user.id)
    has_task_in = select(Task.project_id).where(
        or_(Task.assignee_id == current_user.id, Task.reporter_id == current_user.id)
    )
    statement = select(Project).where(
        or_(
            Project.owner_id == current_user.id,
            Project.id.in_(member_of),
            Project.id.in_(has_task_in),
        )
    ).order_by(Project.id).offset(skip).limit(limit)
    return db.exec(statement).all()


def read_project(db: Session, current_user: User, project_id: int) -> Project:
    project = get_project_or_404(db, project_id)
    permissions.authorize_project_read(
        project,
        current_user.id,
        has_task_in_project(db, project.id, current_user.id),
    )
    return project


def update_project(db: Session, current_user: User, project_id: int,
                   project_update: Dict[str, Any]) -> Project:
    changes = permissions.validate_project_update(project_update)
    project = get_project_or_404(db, project_id)
    permissions.require_manager(project, current_user.id)

    for field, value in changes.items():
        setattr(project, field, value)
    project.updated_at = datetime.utcnow().isoformat()

    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("User %s updated project %s: %s", current_user.id, project.id, sorted(changes))
    return project


def add_member(db: Session, current_user: User, project_id: int, member_in: MemberCreate) -> Project:
    project = get_project_or_404(db, project_id)
    role = permissions.authorize_add_member(project, current_user.id, member_in.user_id, member_in.role)
    get_user_or_404(db, member_in.user_id)

    project.members.append(ProjectMember(project_id=project.id, user_id=member_in.user_id, role=role))
    project.updated_at = datetime.utcnow().isoformat()

    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("User %s added %s to project %s as %s", current_user.id, member_in.user_id, project.id, role)
    return project


def remove_member(db: Session, current_user: User, project_id: int, user_id: str) -> Project:
    project = get_project_or_404(db, project_id)
    permissions.authorize_remove_member(project, current_user.id, user_id)

    project.members = [member for member in project.members if member.user_id != user_id]
    project.updated_at = datetime.utcnow().isoformat()

    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("User %s removed %s from project %s", current_user.id, user_id, project.id)
    return project


def _delete_tasks(db: Session, tasks: List[Task]) -> List[str]:
    """Mark tasks for deletion and return the storage keys of their attachments."""
    storage_keys = []
    for task in tasks:
        storage_keys.extend(attachment.storage_key for attachment in task.attachments)
        db.delete(task)
    return storage_keys


def _delete_files(storage_keys: List[str]) -> None:
    # Call after the commit that removed their rows
    for storage_key in storage_keys:
        delete_stored_file(storage_key)


def delete_project(db: Session, current_user: User, project_id: int) -> None:
    """
    Delete a project and every task referencing it.

    Tasks are removed and committed first, then the project. The two commits
    are not atomic; tasks left behind without a project are removed by
    sweep_orphan_tasks.
    """
    project = get_project_or_404(db, project_id)
    permissions.authorize_project_delete(project, current_user.id)

    tasks = db.exec(select(Task).where(Task.project_id == project.id)).all()
    storage_keys = _delete_tasks(db, tasks)
    db.commit()
    _delete_files(storage_keys)

    db.delete(project)
    db.commit()
    logger.info("User %s deleted project %s and %d task(s)", current_user.id, project_id, len(tasks))


def project_stats(db: Session, current_user: User, project_id: int) -> Dict[str, float]:
    project = get_project_or_404(db, project_id)
    permissions.require_member(project, current_user.id)
    tasks = db.exec(select(Task).where(Task.project_id == project.id)).all()
    return task_statistics(tasks)


def sweep_orphan_tasks(db: Session) -> int:
    """Delete tasks whose project no longer exists. Returns how many were removed."""
    orphans = db.exec(
        select(Task).where(Task.project_id.not_in(select(Project.id)))
    ).all()
    if orphans:
        storage_keys = _delete_tasks(db, orphans)
        db.commit()
        _delete_files(storage_keys)
        logger.warning("Removed %d orphaned task(s)", len(orphans))
    return len(orphans)
