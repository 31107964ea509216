"""
Domain Error Module

Every rejected project or task action raises exactly one of the errors below.
They are decision outcomes of the permission rules, not infrastructure failures,
and carry enough context (offending fields, allowed values, reason codes) for a
client to correct its request. The API layer maps them to HTTP responses via
the exception handler registered in app.main.
"""
from typing import Any, Dict, Iterable, Optional


class ProjectError(Exception):
    """Base class for all project/task decision errors."""
    status_code: int = 400
    default_detail: str = "Request rejected"

    def __init__(self, detail: Optional[str] = None, **context: Any):
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "error": type(self).__name__, **self.context}


class NotFound(ProjectError):
    status_code = 404
    default_detail = "Not found"


class AccessDenied(ProjectError):
    """
    The principal lacks the relationship required for the action.

    `reason` is one of: not_member, not_manager, not_owner, not_reporter,
    not_assignee_or_reporter, not_assignee_reporter_or_manager.
    """
    status_code = 403
    default_detail = "Access denied"

    def __init__(self, reason: str, detail: Optional[str] = None, **context: Any):
        super().__init__(detail, reason=reason, **context)
        self.reason = reason


class ValidationFailed(ProjectError):
    status_code = 400
    default_detail = "Invalid request"


class UnauthorizedFields(ValidationFailed):
    """A non-manager tried to change fields outside their allow-list."""
    status_code = 403
    default_detail = "You don't have permission to update these fields"

    def __init__(self, unauthorized: Iterable[str], allowed: Iterable[str]):
        super().__init__(
            unauthorized_fields=sorted(unauthorized),
            allowed_fields=sorted(allowed),
        )
        self.unauthorized_fields = self.context["unauthorized_fields"]


class InvalidAssignee(ProjectError):
    default_detail = "Invalid assignee: must be a project member"


class AlreadyMember(ProjectError):
    default_detail = "User is already a member"


class CannotRemoveOwner(ProjectError):
    default_detail = "Cannot remove project owner"
