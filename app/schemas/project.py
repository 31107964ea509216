from datetime import date
from typing import List, Optional
from pydantic import BaseModel


class MemberCreate(BaseModel):
    user_id: str
    role: Optional[str] = None  # defaults to "Member"


# Properties to receive via API on creation.
# Required fields are enforced by the permission rules so that a missing
# end_date is reported like every other rejected project request.
class ProjectCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    members: List[MemberCreate] = []


class TaskStats(BaseModel):
    total_tasks: int
    todo_tasks: int
    in_progress_tasks: int
    review_tasks: int
    completed_tasks: int
    high_priority_tasks: int
    medium_priority_tasks: int
    low_priority_tasks: int
    overdue_tasks: int
    total_estimated_hours: Optional[float] = None
    total_actual_hours: Optional[float] = None
