"""
Task Lifecycle Service

Loads task and project snapshots, runs the task rules from
app.core.permissions and persists the result. Keeps the project's ordered
task index in step with task creation and deletion.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from fastapi import UploadFile
from sqlmodel import Session, select, or_

from app.core import permissions
from app.core.exceptions import NotFound, ProjectError
from app.core.stats import task_statistics
from app.models.project import Project
from app.models.task import Task, TaskAttachment, TaskComment
from app.models.user import User
from app.schemas.task import TaskCreate
from app.services.projects import get_project_or_404
from app.services.storage import delete_stored_file, save_upload

logger = logging.getLogger(__name__)


def get_task_or_404(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise NotFound("Task not found", task_id=task_id)
    return task


def _visible_to(user_id: str):
    return or_(Task.assignee_id == user_id, Task.reporter_id == user_id)


def create_task(db: Session, current_user: User, task_in: TaskCreate) -> Task:
    project = get_project_or_404(db, task_in.project_id)
    data = permissions.authorize_task_create(project, current_user.id, task_in.model_dump())

    task = Task(**data)
    db.add(task)
    db.commit()
    db.refresh(task)

    # Reassign rather than append so the JSON column is flagged as changed
    project.tasks = [*project.tasks, task.id]
    db.add(project)
    db.commit()
    db.refresh(task)
    logger.info("User %s created task %s in project %s", current_user.id, task.id, project.id)
    return task


def read_task(db: Session, current_user: User, task_id: int) -> Task:
    task = get_task_or_404(db, task_id)
    permissions.authorize_task_read(task, current_user.id)
    return task


def list_project_tasks(db: Session, current_user: User, project_id: int) -> List[Task]:
    """Tasks of a project the user is assignee or reporter of, newest first."""
    project = get_project_or_404(db, project_id)
    permissions.require_member(project, current_user.id)
    statement = select(Task).where(
        Task.project_id == project.id, _visible_to(current_user.id)
    ).order_by(Task.id.desc())
    return db.exec(statement).all()


def list_my_tasks(db: Session, current_user: User) -> List[Task]:
    """Tasks assigned to the user across all projects, soonest due first."""
    statement = select(Task).where(Task.assignee_id == current_user.id).order_by(
        Task.due_date.is_(None), Task.due_date, Task.id
    )
    return db.exec(statement).all()


def task_stats(db: Session, current_user: User, project_id: int) -> Dict[str, float]:
    project = get_project_or_404(db, project_id)
    permissions.require_member(project, current_user.id)
    tasks = db.exec(
        select(Task).where(Task.project_id == project.id, _visible_to(current_user.id))
    ).all()
    return task_statistics(tasks, include_hours=True)


def update_task(db: Session, current_user: User, task_id: int,
                task_update: Dict[str, Any]) -> Task:
    task = get_task_or_404(db, task_id)
    project = get_project_or_404(db, task.project_id)

    try:
        changes = permissions.authorize_task_update(project, task, current_user.id, task_update)
    except ProjectError:
        logger.warning("Rejected update of task %s by %s: %s", task.id, current_user.id, sorted(task_update))
        raise

    for field, value in changes.items():
        setattr(task, field, value)
    task.updated_at = datetime.utcnow().isoformat()

    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("User %s updated task %s: %s", current_user.id, task.id, sorted(changes))
    return task


def delete_task(db: Session, current_user: User, task_id: int) -> None:
    task = get_task_or_404(db, task_id)
    permissions.authorize_task_delete(task, current_user.id)

    project = db.get(Project, task.project_id)
    if project is not None:
        project.tasks = [existing for existing in project.tasks if existing != task.id]
        db.add(project)

    storage_keys = [attachment.storage_key for attachment in task.attachments]
    db.delete(task)
    db.commit()
    for storage_key in storage_keys:
        delete_stored_file(storage_key)
    logger.info("User %s deleted task %s", current_user.id, task_id)


def add_comment(db: Session, current_user: User, task_id: int, content: str) -> Task:
    task = get_task_or_404(db, task_id)
    project = get_project_or_404(db, task.project_id)
    permissions.authorize_task_contribution(project, current_user.id)
    content = permissions.validate_comment(content)

    task.comments.append(TaskComment(task_id=task.id, author_id=current_user.id, content=content))
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def add_attachment(db: Session, current_user: User, task_id: int, upload: UploadFile) -> Task:
    task = get_task_or_404(db, task_id)
    project = get_project_or_404(db, task.project_id)
    permissions.authorize_task_contribution(project, current_user.id)

    storage_key, size = save_upload(upload)
    try:
        task.attachments.append(TaskAttachment(
            task_id=task.id,
            filename=upload.filename or storage_key,
            storage_key=storage_key,
            mime_type=upload.content_type,
            size=size,
            uploaded_by=current_user.id,
        ))
        db.add(task)
        db.commit()
    except Exception:
        # The row was never written; drop the bytes with it
        db.rollback()
        delete_stored_file(storage_key)
        raise

    db.refresh(task)
    logger.info("User %s attached %s to task %s", current_user.id, storage_key, task.id)
    return task
