from datetime import date
from typing import Optional
from pydantic import BaseModel


class TaskCreate(BaseModel):
    project_id: int
    title: Optional[str] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[str] = None
    estimated_hours: Optional[float] = None


class CommentCreate(BaseModel):
    content: str
