"""
Project Model Module

This module defines the Project model and the ProjectMember junction table that
records which users belong to a project and with which role.
"""
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from sqlmodel import SQLModel, Field, Relationship, Column, JSON


class ProjectStatus(str, Enum):
    PLANNING = "Planning"
    ACTIVE = "Active"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"


class MemberRole(str, Enum):
    """
    Role of a user inside one project.

    The project owner is never required to appear with a role: ownership
    implies manager rights on its own.
    """
    MANAGER = "Manager"
    MEMBER = "Member"


class ProjectMember(SQLModel, table=True):
    """
    Junction table between Projects and Users.

    The composite primary key of project_id and user_id guarantees a user is
    listed at most once per project.

    Attributes:
        project_id: Foreign key to the project
        user_id: Foreign key to the member user
        role: "Manager" or "Member"
    """
    __tablename__ = "project_members"

    project_id: int = Field(foreign_key="projects.id", primary_key=True)
    user_id: str = Field(foreign_key="users.id", primary_key=True)
    role: str = Field(default=MemberRole.MEMBER.value)


class ProjectBase(SQLModel):
    """
    Base Project model containing common fields.
    """
    name: str = Field(nullable=False)
    description: Optional[str] = None

    # Status tracking - valid values: "Planning", "Active", "Completed", "On Hold"
    status: str = Field(default=ProjectStatus.PLANNING.value)

    # Timeline
    start_date: Optional[date] = Field(default_factory=date.today)
    end_date: Optional[date] = None

    # Ownership - set at creation, never changed afterwards
    owner_id: str = Field(foreign_key="users.id", nullable=False)

    # Ordered index of task ids belonging to this project.
    # The Task table stays authoritative; this list mirrors creation order.
    tasks: List[int] = Field(default_factory=list, sa_column=Column(JSON))

    # Audit timestamps
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Project(ProjectBase, table=True):
    """
    Project table model.

    Authorization inside a project is relationship based:
    - the owner may do everything, including deleting the project
    - managers may edit project fields, manage members and edit any task
    - members may create tasks, comment and attach files
    """
    __tablename__ = "projects"

    id: Optional[int] = Field(default=None, primary_key=True)

    # Member rows go away with the project or when dropped from this list
    members: List[ProjectMember] = Relationship(
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )


class ProjectRead(ProjectBase):
    """Schema for reading basic project data."""
    id: int


class ProjectReadWithMembers(ProjectRead):
    """Schema for reading project data with its members."""
    members: List[ProjectMember] = []
