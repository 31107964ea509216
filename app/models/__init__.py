from .user import User
from .project import Project, ProjectMember, ProjectStatus, MemberRole
from .task import Task, TaskComment, TaskAttachment, TaskStatus, TaskPriority

__all__ = [
    "User",
    "Project", "ProjectMember", "ProjectStatus", "MemberRole",
    "Task", "TaskComment", "TaskAttachment", "TaskStatus", "TaskPriority",
]
