"""
Task Model Module

This module defines the Task model together with its two append-only
sublists: TaskComment and TaskAttachment. Both are owned exclusively by
their task and are removed with it.
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from sqlmodel import SQLModel, Field, Relationship


class TaskStatus(str, Enum):
    TODO = "To-Do"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    DONE = "Done"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TaskComment(SQLModel, table=True):
    """
    A comment left on a task by a project member.

    Attributes:
        id: Auto-incrementing primary key (also gives the comment order)
        task_id: Foreign key to the commented task
        author_id: Foreign key to the commenting user
        content: Comment text
        created_at: ISO timestamp of the comment
    """
    __tablename__ = "task_comments"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="tasks.id", index=True)
    author_id: str = Field(foreign_key="users.id")
    content: str = Field(nullable=False)
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class TaskAttachment(SQLModel, table=True):
    """
    Metadata of a file attached to a task.

    The bytes live under settings.UPLOAD_DIR; storage_key is the file name
    relative to that directory.
    """
    __tablename__ = "task_attachments"

    id: Optional[int] = Field(default=None, primary_key=True)
    task_id: int = Field(foreign_key="tasks.id", index=True)
    filename: str = Field(nullable=False)
    storage_key: str = Field(nullable=False)
    mime_type: Optional[str] = None
    size: int = 0
    uploaded_by: str = Field(foreign_key="users.id")
    uploaded_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class TaskBase(SQLModel):
    """
    Base Task model containing common fields.
    """
    # Basic task information
    title: str = Field(nullable=False)
    description: Optional[str] = None

    # Project association - immutable after creation
    project_id: int = Field(foreign_key="projects.id", index=True)

    # People: reporter is the creator and never changes
    assignee_id: Optional[str] = Field(default=None, foreign_key="users.id")
    reporter_id: str = Field(foreign_key="users.id", nullable=False)

    status: str = Field(default=TaskStatus.TODO.value)
    priority: str = Field(default=TaskPriority.MEDIUM.value)

    due_date: Optional[date] = None

    # Effort tracking in hours
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None

    # Audit timestamps
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Task(TaskBase, table=True):
    """
    Task table model.
    """
    __tablename__ = "tasks"

    # Primary key
    id: Optional[int] = Field(default=None, primary_key=True)

    comments: List[TaskComment] = Relationship(
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "TaskComment.id"}
    )
    attachments: List[TaskAttachment] = Relationship(
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "order_by": "TaskAttachment.id"}
    )

    def is_overdue(self, today: Optional[date] = None) -> bool:
        """A task is overdue when its due date has passed and it is not done."""
        if self.due_date is None or self.status == TaskStatus.DONE.value:
            return False
        return self.due_date < (today or date.today())


class TaskRead(TaskBase):
    """Schema for reading basic task data."""
    id: int


class TaskReadWithDetails(TaskRead):
    """Schema for reading task data with its comments and attachments."""
    comments: List[TaskComment] = []
    attachments: List[TaskAttachment] = []
