from datetime import date
from typing import Dict, Iterable, Optional

from app.models.task import Task, TaskPriority, TaskStatus


def task_statistics(
    tasks: Iterable[Task],
    include_hours: bool = False,
    today: Optional[date] = None,
) -> Dict[str, float]:
    """
    Aggregate counts by status and priority plus the overdue count.

    The caller decides which tasks are visible; nothing is stored. With
    include_hours the estimated and actual hours are summed as well.
    """
    tasks = list(tasks)
    today = today or date.today()

    def count_status(status: TaskStatus) -> int:
        return sum(1 for task in tasks if task.status == status.value)

    def count_priority(priority: TaskPriority) -> int:
        return sum(1 for task in tasks if task.priority == priority.value)

    stats: Dict[str, float] = {
        "total_tasks": len(tasks),
        "todo_tasks": count_status(TaskStatus.TODO),
        "in_progress_tasks": count_status(TaskStatus.IN_PROGRESS),
        "review_tasks": count_status(TaskStatus.REVIEW),
        "completed_tasks": count_status(TaskStatus.DONE),
        "high_priority_tasks": count_priority(TaskPriority.HIGH),
        "medium_priority_tasks": count_priority(TaskPriority.MEDIUM),
        "low_priority_tasks": count_priority(TaskPriority.LOW),
        "overdue_tasks": sum(1 for task in tasks if task.is_overdue(today)),
    }
    if include_hours:
        stats["total_estimated_hours"] = sum(task.estimated_hours or 0 for task in tasks)
        stats["total_actual_hours"] = sum(task.actual_hours or 0 for task in tasks)
    return stats
