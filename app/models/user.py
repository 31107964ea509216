"""
User Model Module

This module defines the User model: the authenticated principal that owns
projects, joins them as a member, and reports or is assigned tasks.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid
from datetime import datetime


class User(SQLModel, table=True):
    """
    User model representing authenticated users in the system.

    Users are identified by UUID and authenticated via email/password. Access to
    projects and tasks is not governed by a global role on the user but by the
    user's relationship to each project (owner, manager, member) and task
    (reporter, assignee).

    Attributes:
        id: Unique identifier (UUID) automatically generated for each user
        email: User's email address, used for authentication (required, unique, indexed)
        password: Hashed password (bcrypt) for authentication
        full_name: User's full display name
        created_at: ISO timestamp when the user account was created
    """
    __tablename__ = "users"

    # Primary key - auto-generated UUID for global uniqueness
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    # Authentication fields
    email: str = Field(unique=True, index=True, nullable=False)
    password: Optional[str] = None  # Hashed password (bcrypt)

    # Profile information
    full_name: Optional[str] = None

    # Audit timestamp
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
